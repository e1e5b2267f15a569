# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Any, Iterable, Mapping

from fastresource.attachments.base import AttachmentService, logger
from fastresource.attachments.pivot import pivot_data_by_id
from fastresource.bus import Bus, RelationSynced
from fastresource.dependencies import get_service
from fastresource.exceptions import AttachmentLimitExceeded
from fastresource.fields.enums import RelationKind
from fastresource.orm import atomic
from fastresource.orm.query import QuerySet, normalize_ids
from fastresource.schemas.attachment import AttachResult, ChangeSet, DetachResult


class BelongsToManyAttachmentService(AttachmentService):
    """
    Membership stored as rows of a pivot model.

    Attaching creates pivot rows, detaching deletes them and never touches
    the related entities. Pivot values are limited to the declared pivot
    columns of the field.
    """

    relation_kinds = (RelationKind.BELONGS_TO_MANY,)
    supports_sync = True

    @property
    def pivot_model(self) -> Any:
        return self.metadata.pivot_model

    @property
    def related_key(self) -> str:
        return self.metadata.pivot_related_key

    def owner_values(self) -> dict[str, Any]:
        return self.metadata.owner_filter(self.parent_id)

    async def pivot_rows(self) -> dict[Any, Any]:
        """Pivot rows of the parent keyed by related identifier."""
        if self.parent_id is None:
            return {}

        rows = await self.pivot_model.query.filter(**self.owner_values()).all()

        return {getattr(row, self.related_key): row for row in rows}

    async def attached_ids(self) -> list[Any]:
        return list(await self.pivot_rows())

    def attachable_query(self, attached_ids: list[Any]) -> QuerySet:
        query = self.related_model.query

        if attached_ids:
            query = query.exclude(id__in=attached_ids)

        return query

    async def attach(self, ids: Iterable[Any], pivot_data: Mapping[Any, Any] | None = None) -> AttachResult:
        self.ensure_parent_saved()
        ids = normalize_ids(ids)

        async with atomic():
            current = await self.pivot_rows()
            self.check_limit(len(current), len([identifier for identifier in ids if identifier not in current]))

            existing = await self.existing_ids(ids)
            to_attach = [identifier for identifier in existing if identifier not in current]
            values = pivot_data_by_id(to_attach, pivot_data, self.metadata.pivot_columns)

            for identifier in to_attach:
                await self.create_row(identifier, values[identifier])

        result = AttachResult(
            attached=to_attach,
            already_attached=len(existing) - len(to_attach),
            not_found=[identifier for identifier in ids if identifier not in existing],
        )

        if result.not_found:
            logger.warning(f"Cannot attach missing items to '{self.relation_label}': {result.not_found}")

        return result

    async def detach(self, ids: Iterable[Any]) -> DetachResult:
        self.ensure_parent_saved()
        ids = normalize_ids(ids)

        async with atomic():
            current = await self.pivot_rows()
            to_detach = [identifier for identifier in ids if identifier in current]
            await self.delete_rows(to_detach)

        return DetachResult(detached=len(to_detach))

    async def sync(
        self,
        ids: Iterable[Any],
        pivot_data: Mapping[Any, Any] | None = None,
        detaching: bool = True,
    ) -> ChangeSet:
        """
        Make the membership equal to ``ids``.

        Raises:
            AttachmentLimitExceeded: When ``ids`` holds more items than the
                field limit, whatever is attached already.
        """
        self.ensure_parent_saved()
        ids = normalize_ids(ids)
        changes = ChangeSet()

        async with atomic():
            current = await self.pivot_rows()
            limit = self.field.attachable_limit

            if limit is not None and len(ids) > limit:
                raise AttachmentLimitExceeded(len(current), limit, len(ids), relation=self.relation_label)

            existing = await self.existing_ids([identifier for identifier in ids if identifier not in current])
            missing = [identifier for identifier in ids if identifier not in current and identifier not in existing]

            if missing:
                logger.warning(f"Cannot sync missing items of '{self.relation_label}': {missing}")

            values = pivot_data_by_id(ids, pivot_data, self.metadata.pivot_columns)

            for identifier in ids:
                if identifier in current:
                    row = current[identifier]
                    desired = values[identifier]

                    if desired and any(getattr(row, column, None) != value for column, value in desired.items()):
                        await self.update_row(identifier, desired)
                        changes.updated.append(identifier)
                elif identifier in existing:
                    await self.create_row(identifier, values[identifier])
                    changes.attached.append(identifier)

            if detaching:
                changes.detached = [identifier for identifier in current if identifier not in ids]
                await self.delete_rows(changes.detached)

        if not changes.is_empty:
            await get_service(Bus).dispatch(RelationSynced(self.relation_label, self.parent, changes))

        return changes

    async def create_row(self, identifier: Any, values: dict[str, Any]) -> Any:
        return await self.pivot_model.query.create(**{**values, **self.owner_values(), self.related_key: identifier})

    async def update_row(self, identifier: Any, values: dict[str, Any]) -> None:
        await self.pivot_model.query.filter(
            **self.owner_values(),
            **{self.related_key: identifier},
        ).update(**values)

    async def delete_rows(self, ids: list[Any]) -> None:
        if not ids:
            return

        await self.pivot_model.query.filter(
            **self.owner_values(),
            **{f"{self.related_key}__in": ids},
        ).delete()


__all__ = [
    "BelongsToManyAttachmentService",
]
