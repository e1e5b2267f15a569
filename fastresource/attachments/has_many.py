# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Any, Iterable, Mapping

import sqlalchemy

from fastresource.attachments.base import AttachmentService, logger
from fastresource.fields.enums import RelationKind
from fastresource.orm import atomic
from fastresource.orm.query import QuerySet, normalize_ids
from fastresource.schemas.attachment import AttachResult, DetachResult


class HasManyAttachmentService(AttachmentService):
    """
    Children pointing to the parent with a foreign key.

    Attaching moves the child to the parent by writing the key, detaching
    clears the key and keeps the child.
    """

    relation_kinds = (RelationKind.HAS_MANY,)

    def owner_values(self) -> dict[str, Any]:
        """Column values marking a child as owned by the parent."""
        return self.metadata.owner_filter(self.parent_id)

    def released_values(self) -> dict[str, Any]:
        return {column: None for column in self.owner_values()}

    def not_owned_clause(self) -> Any:
        columns = self.related_model.table.c
        clauses = []

        for column, value in self.owner_values().items():
            clauses.append(columns[column].is_(None))
            clauses.append(columns[column] != value)

        return sqlalchemy.or_(*clauses)

    async def attached_ids(self) -> list[Any]:
        if self.parent_id is None:
            return []

        children = await self.related_model.query.filter(**self.owner_values()).all()

        return [child.id for child in children]

    def attachable_query(self, attached_ids: list[Any]) -> QuerySet:
        query = self.related_model.query

        if self.parent_id is None:
            return query

        return query.filter(self.not_owned_clause())

    async def attach(self, ids: Iterable[Any], pivot_data: Mapping[Any, Any] | None = None) -> AttachResult:
        self.ensure_parent_saved()
        ids = normalize_ids(ids)

        async with atomic():
            current = await self.attached_ids()
            self.check_limit(len(current), len([identifier for identifier in ids if identifier not in current]))

            existing = await self.existing_ids(ids)
            to_attach = [identifier for identifier in existing if identifier not in current]

            if to_attach:
                await self.related_model.query.filter(id__in=to_attach).update(**self.owner_values())

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
            current = await self.attached_ids()
            to_detach = [identifier for identifier in ids if identifier in current]

            if to_detach:
                await self.related_model.query.filter(id__in=to_detach).update(**self.released_values())

        return DetachResult(detached=len(to_detach))


__all__ = [
    "HasManyAttachmentService",
]
