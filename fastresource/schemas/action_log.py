# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from fastresource.schemas.base import BaseModel


class ActionName(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ATTACH = "attach"
    DETACH = "detach"
    SYNC = "sync"


class ActionStatus(str, Enum):
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"


class ActionLogEntry(BaseModel):
    name: str
    batch_id: str
    user_id: Any = None
    resource: str | None = None
    actionable_type: str | None = None
    actionable_id: Any = None
    target_type: str | None = None
    target_id: Any = None
    model_type: str | None = None
    model_id: Any = None
    field_values: dict[str, Any] | None = None
    original: dict[str, Any] | None = None
    changes: dict[str, Any] | None = None
    status: ActionStatus = ActionStatus.FINISHED
    exception: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)

    def to_row(self) -> dict[str, Any]:
        """Columns stored by the action event model."""
        row = self.model_dump(mode="json", exclude={"resource", "created_at"})
        row["created_at"] = self.created_at

        return row


__all__ = [
    "ActionName",
    "ActionStatus",
    "ActionLogEntry",
]
