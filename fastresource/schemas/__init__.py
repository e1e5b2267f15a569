# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.schemas.base import BaseModel
from fastresource.schemas.relation import MorphRelationValue, RelationInput, RelationValue
from fastresource.schemas.attachment import (
    AttachableItem,
    AttachableMeta,
    AttachablePage,
    AttachmentEnvelope,
    AttachResult,
    ChangeSet,
    DetachResult,
)
from fastresource.schemas.persist import PersistResult, PersistStatus
from fastresource.schemas.action_log import ActionLogEntry, ActionName, ActionStatus


__all__ = [
    "BaseModel",
    "RelationValue",
    "MorphRelationValue",
    "RelationInput",
    "ChangeSet",
    "AttachResult",
    "DetachResult",
    "AttachableItem",
    "AttachableMeta",
    "AttachablePage",
    "AttachmentEnvelope",
    "PersistStatus",
    "PersistResult",
    "ActionName",
    "ActionStatus",
    "ActionLogEntry",
]
