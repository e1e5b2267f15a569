# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from datetime import datetime
from typing import Any

from fastresource.orm import Model, fields


class BaseActionEvent(Model):
    """
    Stored action log entry.

    The model is abstract, the application declares the concrete one with
    its registry and table name and hands it to ``ModelEventLogSink``.
    """

    class Meta:
        abstract = True

    id: int | None = fields.IntegerField(primary_key=True, autoincrement=True, label="ID")  # type: ignore
    batch_id: str = fields.CharField(max_length=36, index=True, label="Batch")  # type: ignore
    user_id: int | None = fields.IntegerField(null=True, label="User")  # type: ignore
    name: str = fields.CharField(max_length=50, label="Action")  # type: ignore
    actionable_type: str | None = fields.CharField(max_length=255, null=True, label="Actionable type")  # type: ignore
    actionable_id: int | None = fields.IntegerField(null=True, label="Actionable ID")  # type: ignore
    target_type: str | None = fields.CharField(max_length=255, null=True, label="Target type")  # type: ignore
    target_id: int | None = fields.IntegerField(null=True, label="Target ID")  # type: ignore
    model_type: str | None = fields.CharField(max_length=255, null=True, label="Model type")  # type: ignore
    model_id: int | None = fields.IntegerField(null=True, label="Model ID")  # type: ignore
    field_values: dict[str, Any] | None = fields.JSONField(null=True, label="Fields")  # type: ignore
    original: dict[str, Any] | None = fields.JSONField(null=True, label="Original")  # type: ignore
    changes: dict[str, Any] | None = fields.JSONField(null=True, label="Changes")  # type: ignore
    status: str = fields.CharField(max_length=25, default="finished", label="Status")  # type: ignore
    exception: str | None = fields.TextField(null=True, label="Exception")  # type: ignore
    created_at: datetime | None = fields.DateTimeField(default_factory=datetime.now, label="Created at")  # type: ignore


__all__ = [
    "BaseActionEvent",
]
