# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import uuid

from typing import TYPE_CHECKING, Any, Mapping

from fastresource.bus import ActionLogged, Bus
from fastresource.config import get_settings
from fastresource.dependencies import get_service
from fastresource.audit.sinks import EventLogSink, LoggingEventLogSink
from fastresource.fields.relations.morph_map import get_morph_map
from fastresource.orm.query import column_values
from fastresource.schemas.action_log import ActionLogEntry, ActionName, ActionStatus

if TYPE_CHECKING:
    from fastresource.context import ResourceContext


REDACTED = "***REDACTED***"
BATCH_CACHE_KEY = "action_event_batch_id"


def redact(data: Any, keys: list[str]) -> Any:
    """
    Replace the values of sensitive keys, at any depth.

    A key is sensitive when one of ``keys`` is part of it, ignoring the case.
    """
    if isinstance(data, Mapping):
        return {
            key: REDACTED if _is_sensitive(key, keys) else redact(value, keys)
            for key, value in data.items()
        }

    if isinstance(data, list):
        return [redact(item, keys) for item in data]

    return data


def _is_sensitive(key: Any, keys: list[str]) -> bool:
    lowered = str(key).lower()

    return any(sensitive in lowered for sensitive in keys)


class ActionEventLogger:
    """
    Records what the persist operations did, for audit.

    Entries recorded for one resource context share a batch id, kept in the
    context cache, so each request groups its own entries. Entries recorded
    without a context share the batch id of the logger. ``reset_batch``
    starts a new group. Sensitive attributes are redacted before the entry
    reaches the sink.
    """

    def __init__(
        self,
        sink: EventLogSink | None = None,
        bus: Bus | None = None,
        redacted_keys: list[str] | None = None,
    ):
        self.sink = sink or LoggingEventLogSink()
        self.bus = bus
        keys = redacted_keys if redacted_keys is not None else get_settings().redacted_keys
        self.redacted_keys = [key.lower() for key in keys]
        self._batch_id = str(uuid.uuid4())

    @property
    def batch_id(self) -> str:
        return self._batch_id

    def batch_id_for(self, context: "ResourceContext | None") -> str:
        if context is None:
            return self._batch_id

        if not context.cache.has(BATCH_CACHE_KEY):
            context.cache.set(BATCH_CACHE_KEY, str(uuid.uuid4()))

        return context.cache.get(BATCH_CACHE_KEY)

    def reset_batch(self, context: "ResourceContext | None" = None) -> str:
        batch_id = str(uuid.uuid4())

        if context is None:
            self._batch_id = batch_id
        else:
            context.cache.set(BATCH_CACHE_KEY, batch_id)

        return batch_id

    async def record_create(
        self,
        context: "ResourceContext | None",
        entity: Any,
        resource_key: str | None = None,
    ) -> ActionLogEntry:
        return await self.record_action(
            context,
            ActionName.CREATE,
            entity,
            resource_key=resource_key,
            changes=column_values(entity),
        )

    async def record_update(
        self,
        context: "ResourceContext | None",
        entity: Any,
        original: Mapping[str, Any],
        resource_key: str | None = None,
    ) -> ActionLogEntry:
        after = column_values(entity)
        changes = {key: value for key, value in after.items() if original.get(key) != value}

        return await self.record_action(
            context,
            ActionName.UPDATE,
            entity,
            resource_key=resource_key,
            original={key: original.get(key) for key in changes},
            changes=changes,
        )

    async def record_delete(
        self,
        context: "ResourceContext | None",
        entity: Any,
        resource_key: str | None = None,
    ) -> ActionLogEntry:
        return await self.record_action(
            context,
            ActionName.DELETE,
            entity,
            resource_key=resource_key,
            original=column_values(entity),
        )

    async def record_action(
        self,
        context: "ResourceContext | None",
        name: str | ActionName,
        entity: Any,
        *,
        resource_key: str | None = None,
        target: Any = None,
        field_values: Mapping[str, Any] | None = None,
        original: Mapping[str, Any] | None = None,
        changes: Mapping[str, Any] | None = None,
        status: ActionStatus = ActionStatus.FINISHED,
        exception: str | None = None,
    ) -> ActionLogEntry:
        morph_map = get_morph_map()
        model_type = morph_map.alias_for(entity)
        target = entity if target is None else target

        entry = ActionLogEntry(
            name=name.value if isinstance(name, ActionName) else name,
            batch_id=self.batch_id_for(context),
            user_id=context.actor_id if context is not None else None,
            resource=resource_key,
            actionable_type=model_type,
            actionable_id=getattr(entity, "id", None),
            target_type=morph_map.alias_for(target),
            target_id=getattr(target, "id", None),
            model_type=model_type,
            model_id=getattr(entity, "id", None),
            field_values=self.redact(field_values),
            original=self.redact(original),
            changes=self.redact(changes),
            status=status,
            exception=exception,
        )

        return await self.record(entry)

    async def record(self, entry: ActionLogEntry) -> ActionLogEntry:
        await self.sink.record(entry)
        await (self.bus or get_service(Bus)).dispatch(ActionLogged(entry))

        return entry

    def redact(self, data: Mapping[str, Any] | None) -> dict[str, Any] | None:
        if data is None:
            return None

        return redact(dict(data), self.redacted_keys)


__all__ = [
    "REDACTED",
    "redact",
    "ActionEventLogger",
]
