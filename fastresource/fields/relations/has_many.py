# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Any

from fastresource.fields.enums import Capability, FieldType, RelationKind
from fastresource.fields.relations.base import RelationField
from fastresource.fields.rules import Rule


class HasMany(RelationField):
    """
    Children owned by the related side. Fill is a no-op, membership is
    changed through the attachment service only.
    """

    field_type = FieldType.HAS_MANY
    default_component = "field-has-many"
    capabilities = frozenset({Capability.RESOLVE})
    relation_kind = RelationKind.HAS_MANY

    def __init__(self, name: str, relation_name: str | None = None, **kwargs):
        kwargs.setdefault("show_on_index", False)
        kwargs.setdefault("show_on_create", False)
        kwargs.setdefault("show_on_update", False)
        super().__init__(name, relation_name, **kwargs)

    async def resolve(self, context, entity) -> list[dict[str, Any]]:
        metadata = self.get_metadata(entity, context)

        if metadata is None or self.is_new(entity):
            return []

        query = metadata.related_model.query.filter(**metadata.owner_filter(entity.id))
        related_items = await self.apply_order(query).limit(self.get_resolve_limit()).all()

        return [await self.related_value(context, related, with_fields=True) for related in related_items]

    def get_rules_map(self) -> dict[str, list[Rule]]:
        return {}


__all__ = [
    "HasMany",
]
