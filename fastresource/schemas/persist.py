# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from enum import Enum
from typing import Any

from pydantic import Field

from fastresource.schemas.base import BaseModel


class PersistStatus(str, Enum):
    COMPLETED = "completed"
    VALIDATION_FAILED = "validation_failed"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    LIMIT_EXCEEDED = "limit_exceeded"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"


class PersistResult(BaseModel):
    status: PersistStatus
    status_code: int = 200
    entity: Any = Field(default=None, exclude=True)
    data: dict[str, Any] | None = None
    errors: dict[str, list[str]] | None = None
    message: str | None = None
    correlation_id: str | None = None

    @property
    def successful(self) -> bool:
        return self.status == PersistStatus.COMPLETED


__all__ = [
    "PersistStatus",
    "PersistResult",
]
