# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Any

from pydantic import Field

from fastresource.schemas.base import BaseModel


class ChangeSet(BaseModel):
    """Disjoint identifier lists produced by a sync."""

    attached: list[Any] = Field(default_factory=list)
    detached: list[Any] = Field(default_factory=list)
    updated: list[Any] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.attached or self.detached or self.updated)


class AttachResult(BaseModel):
    attached: list[Any] = Field(default_factory=list)
    already_attached: int = 0
    not_found: list[Any] = Field(default_factory=list)


class DetachResult(BaseModel):
    detached: int = 0


class AttachableItem(BaseModel):
    id: Any
    label: Any = None


class AttachableMeta(BaseModel):
    current_page: int
    last_page: int
    per_page: int
    total: int
    attached_count: int
    attachable_limit: int | None = None


class AttachablePage(BaseModel):
    items: list[AttachableItem]
    meta: AttachableMeta


class AttachmentEnvelope(BaseModel):
    success: bool
    message: str
    data: dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "ChangeSet",
    "AttachResult",
    "DetachResult",
    "AttachableItem",
    "AttachableMeta",
    "AttachablePage",
    "AttachmentEnvelope",
]
