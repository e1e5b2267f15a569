# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Any

from fastresource.fields.enums import Capability, FieldType, RelationKind
from fastresource.fields.relations.base import RelationField
from fastresource.fields.rules import Rule


class HasOne(RelationField):
    """Child relation owned by the related side, through a foreign key of the related model."""

    field_type = FieldType.HAS_ONE
    default_component = "field-has-one"
    capabilities = frozenset({Capability.RESOLVE})
    relation_kind = RelationKind.HAS_ONE

    def __init__(self, name: str, relation_name: str | None = None, **kwargs):
        kwargs.setdefault("show_on_index", False)
        kwargs.setdefault("show_on_create", False)
        kwargs.setdefault("show_on_update", False)
        super().__init__(name, relation_name, **kwargs)

    async def resolve(self, context, entity) -> Any:
        metadata = self.get_metadata(entity, context)

        if metadata is None or self.is_new(entity):
            return None

        query = metadata.related_model.query.filter(**metadata.owner_filter(entity.id))
        related = await self.apply_order(query).first()

        if related is None:
            return None

        return await self.related_value(context, related, with_fields=True)

    def get_rules_map(self) -> dict[str, list[Rule]]:
        return {}


__all__ = [
    "HasOne",
]
