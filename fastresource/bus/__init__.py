# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.bus.base import ActionLogged, BaseEvent, RelationSynced
from fastresource.bus.service import Bus, EventKey
from fastresource.bus.decorators import on_event

__all__ = [
    "BaseEvent",
    "ActionLogged",
    "RelationSynced",
    "Bus",
    "EventKey",
    "on_event",
]
