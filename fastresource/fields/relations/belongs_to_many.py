# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import TYPE_CHECKING, Any, Sequence

from fastresource.dependencies import get_service
from fastresource.fields.enums import Capability, FieldType, RelationKind
from fastresource.fields.relations.base import RelationField
from fastresource.fields.rules import Exists, Rule, TypeRule, ValueType
from fastresource.schemas.relation import RelationInput

if TYPE_CHECKING:
    from fastresource.context import ResourceContext
    from fastresource.schemas.attachment import ChangeSet


class BelongsToMany(RelationField):
    """
    Many-to-many relation through a pivot model.

    The membership cannot be written before the entity has an identity, so
    fill is a no-op and the submitted value is synchronized after save. The
    value is a list of identifiers, or of ``{"id": ..., "pivot": {...}}``
    objects carrying pivot data.

    Example:
        ```python
        BelongsToMany(
            "Tags",
            "tags",
            resource=TagResource,
            pivot_model=PostTag,
            pivot_columns=["role"],
            attachable_limit=3,
        )
        ```
    """

    field_type = FieldType.BELONGS_TO_MANY
    default_component = "field-belongs-to-many"
    capabilities = frozenset({Capability.RESOLVE, Capability.AFTER_SAVE, Capability.SYNC})
    relation_kind = RelationKind.BELONGS_TO_MANY

    def __init__(
        self,
        name: str,
        relation_name: str | None = None,
        *,
        pivot_model: Any = None,
        foreign_pivot_key: str | None = None,
        related_pivot_key: str | None = None,
        pivot_columns: Sequence[str] = (),
        **kwargs,
    ):
        kwargs.setdefault("show_on_index", False)
        super().__init__(name, relation_name, **kwargs)
        self.pivot_model = pivot_model
        self.foreign_pivot_key = foreign_pivot_key
        self.related_pivot_key = related_pivot_key
        self.pivot_columns = list(pivot_columns)

    async def resolve(self, context, entity) -> list[dict[str, Any]]:
        metadata = self.get_metadata(entity, context)

        if metadata is None or self.is_new(entity):
            return []

        rows = await metadata.pivot_model.query.filter(**metadata.owner_filter(entity.id)).all()
        rows_by_id = {getattr(row, metadata.pivot_related_key): row for row in rows}

        if not rows_by_id:
            return []

        query = metadata.related_model.query.filter(id__in=list(rows_by_id))
        related_items = await self.apply_order(query).limit(self.get_resolve_limit()).all()
        values = []

        for related in related_items:
            pivot = None

            if metadata.pivot_columns:
                row = rows_by_id[related.id]
                pivot = {column: getattr(row, column, None) for column in metadata.pivot_columns}

            values.append(await self.related_value(context, related, pivot=pivot))

        return values

    def get_type_rules(self) -> list[Rule]:
        rules: list[Rule] = [TypeRule(ValueType.ARRAY)]
        related_model = self.get_related_model()

        if related_model is not None:
            rules.append(Exists(related_model))

        return rules

    async def after_save(self, context: "ResourceContext", entity: Any) -> None:
        if not context.submitted(self.key):
            return

        relation_input = RelationInput.from_value(context.value(self.key))

        await self.sync(context, entity, relation_input.ids, relation_input.pivot, detaching=True)

    async def sync(
        self,
        context: "ResourceContext",
        entity: Any,
        ids: list[Any],
        pivot_data: dict[Any, Any] | None = None,
        detaching: bool = True,
    ) -> "ChangeSet":
        from fastresource.attachments.registry import AttachmentServiceRegistry

        service = get_service(AttachmentServiceRegistry).for_field(self, entity, context)

        return await service.sync(ids, pivot_data, detaching=detaching)


__all__ = [
    "BelongsToMany",
]
