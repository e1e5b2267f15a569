# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import logging

from abc import ABC, abstractmethod
from typing import Any

from fastresource.schemas.action_log import ActionLogEntry


logger = logging.getLogger("fastresource.audit")


class EventLogSink(ABC):
    """Destination of the action log entries."""

    @abstractmethod
    async def record(self, entry: ActionLogEntry) -> None: ...


class LoggingEventLogSink(EventLogSink):
    """Writes the entries to the ``fastresource.audit`` logger."""

    async def record(self, entry: ActionLogEntry) -> None:
        logger.info(
            f"{entry.name} {entry.model_type}#{entry.model_id} by user {entry.user_id} "
            f"[{entry.status.value}] batch={entry.batch_id}"
        )


class MemoryEventLogSink(EventLogSink):
    def __init__(self):
        self.entries: list[ActionLogEntry] = []

    async def record(self, entry: ActionLogEntry) -> None:
        self.entries.append(entry)

    def clear(self) -> None:
        self.entries.clear()


class ModelEventLogSink(EventLogSink):
    """
    Stores the entries with a concrete action event model.

    Example:
        ```python
        class ActionEvent(BaseActionEvent):
            class Meta:
                tablename = "action_events"

        ActionEventLogger(sink=ModelEventLogSink(ActionEvent))
        ```
    """

    def __init__(self, model: Any):
        self.model = model

    async def record(self, entry: ActionLogEntry) -> None:
        await self.model.query.create(**entry.to_row())


__all__ = [
    "EventLogSink",
    "LoggingEventLogSink",
    "MemoryEventLogSink",
    "ModelEventLogSink",
]
