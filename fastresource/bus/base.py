# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fastresource.schemas.action_log import ActionLogEntry
    from fastresource.schemas.attachment import ChangeSet


class BaseEvent:
    """Base class of the events dispatched on the bus."""


@dataclass
class ActionLogged(BaseEvent):
    """Dispatched once an action log entry was handed to the sink."""

    entry: "ActionLogEntry"


@dataclass
class RelationSynced(BaseEvent):
    """Dispatched after a pivot relation membership was synchronized."""

    relation: str
    parent: Any
    change_set: "ChangeSet"


__all__ = [
    "BaseEvent",
    "ActionLogged",
    "RelationSynced",
]
