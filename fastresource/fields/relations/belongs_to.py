# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Any

from fastresource.fields.enums import Capability, FieldType, RelationKind
from fastresource.fields.relations.base import RelationField
from fastresource.fields.rules import Exists, Rule
from fastresource.orm.query import normalize_id


class BelongsTo(RelationField):
    """
    Parent relation stored in a foreign key column of the entity.

    The field is keyed by the foreign key column, the submitted identifier is
    written there during fill.

    Example:
        ```python
        BelongsTo("Author", "author", resource=AuthorResource)  # author_id
        ```
    """

    field_type = FieldType.BELONGS_TO
    default_component = "field-belongs-to"
    capabilities = frozenset({Capability.RESOLVE, Capability.FILL})
    relation_kind = RelationKind.BELONGS_TO

    def __init__(self, name: str, relation_name: str | None = None, **kwargs):
        super().__init__(name, relation_name, **kwargs)
        self.foreign_key = self.foreign_key or f"{self.relation_name}_id"
        self.attribute = self.attribute or self.foreign_key

    async def resolve(self, context, entity) -> Any:
        metadata = self.get_metadata(entity, context)

        if metadata is None:
            return None

        related_id = getattr(entity, metadata.foreign_key, None)

        if related_id is None:
            return None

        related = await metadata.related_model.query.get_or_none(id=related_id)

        if related is None:
            return None

        return await self.related_value(context, related)

    def prepare_for_storage(self, value: Any) -> Any:
        return normalize_id(value)

    def get_type_rules(self) -> list[Rule]:
        related_model = self.get_related_model()

        return [Exists(related_model)] if related_model is not None else []


__all__ = [
    "BelongsTo",
]
