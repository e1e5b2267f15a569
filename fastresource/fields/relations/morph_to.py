# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import logging

from typing import TYPE_CHECKING, Any, Mapping

from fastresource.dependencies import get_service
from fastresource.fields.enums import Capability, FieldType, RelationKind
from fastresource.fields.relations.base import RelationField
from fastresource.fields.relations.label import resolve_label
from fastresource.fields.relations.morph_map import get_morph_map
from fastresource.fields.rules import Nullable, Required, Rule, TypeRule, ValueType
from fastresource.orm.query import normalize_id
from fastresource.schemas.relation import MorphRelationValue

if TYPE_CHECKING:
    from fastresource.resources.resource import Resource


logger = logging.getLogger("fastresource.fields")


class MorphTo(RelationField):
    """
    Polymorphic parent stored in a (type, id) column pair of the entity.

    ``types`` maps the aliases stored in the type column to resources or
    models. Both columns are written together: the pair is cleared when the
    input is incomplete or when the type cannot be mapped to an alias.

    Example:
        ```python
        MorphTo("Commentable", "commentable", types={"post": PostResource, "video": VideoResource})
        ```
    """

    field_type = FieldType.MORPH_TO
    default_component = "field-morph-to"
    capabilities = frozenset({Capability.RESOLVE, Capability.FILL})
    relation_kind = RelationKind.MORPH_TO

    def __init__(
        self,
        name: str,
        relation_name: str | None = None,
        *,
        types: Mapping[str, Any] | None = None,
        morph_type_column: str | None = None,
        morph_id_column: str | None = None,
        **kwargs,
    ):
        super().__init__(name, relation_name, **kwargs)
        self.types: dict[str, Any] = dict(types or {})
        self.morph_type_column = morph_type_column
        self.morph_id_column = morph_id_column

    def model_for_alias(self, alias: str | None) -> Any:
        if alias in self.types:
            target = self.types[alias]

            return target.model if _is_resource(target) else target

        return get_morph_map().model_for(alias)

    def resource_for_alias(self, alias: str | None) -> "Resource | None":
        target = self.types.get(alias) if alias else None

        if target is not None and _is_resource(target):
            return target()

        from fastresource.resources.registry import ResourceRegistry

        model = self.model_for_alias(alias)
        resource_class = get_service(ResourceRegistry).for_model(model) if model is not None else None

        return resource_class() if resource_class is not None else None

    def alias_for_input(self, value: Any) -> str | None:
        """
        Map the submitted type to the alias to store: an alias, or the key of
        a registered resource.
        """
        if not value or not isinstance(value, str):
            return None

        if value in self.types:
            return value

        for alias, target in self.types.items():
            if _is_resource(target) and target.key() == value:
                return alias

        morph_map = get_morph_map()

        if morph_map.model_for(value) is not None:
            return value

        from fastresource.resources.registry import ResourceRegistry

        resource_class = get_service(ResourceRegistry).get(value)

        if resource_class is not None:
            return morph_map.alias_for(resource_class.model)

        return None

    async def resolve(self, context, entity) -> dict[str, Any] | None:
        metadata = self.get_metadata(entity, context)

        if metadata is None:
            return None

        alias = getattr(entity, metadata.morph_type_column, None)
        related_id = getattr(entity, metadata.morph_id_column, None)

        if not alias or related_id is None:
            return None

        model = self.model_for_alias(alias)

        if model is None:
            logger.warning(f"MorphTo field '{self.relation_name}' cannot resolve the model of type: {alias}")
            return None

        related = await model.query.get_or_none(id=related_id)

        if related is None:
            return None

        resource = self.resource_for_alias(alias)

        value = MorphRelationValue(
            type=alias,
            type_label=resource.label() if resource is not None else alias.replace("_", " ").title(),
            key=related.id,
            label=await resolve_label(
                related,
                display_callback=self.display_callback,
                display_attribute=self.display_attribute,
                resource=resource,
            ),
        )

        return value.to_value()

    async def fill(self, context, entity) -> None:
        if not self.can_fill(context):
            return

        type_column, id_column = self.get_morph_columns()

        if not (context.submitted(type_column) or context.submitted(id_column)):
            return

        type_value = context.value(type_column)
        id_value = normalize_id(context.value(id_column))

        if not type_value or id_value in (None, ""):
            self._clear(entity, type_column, id_column)
            return

        alias = self.alias_for_input(type_value)

        if alias is None:
            logger.warning(f"MorphTo field '{self.relation_name}' could not resolve type: {type_value}")
            self._clear(entity, type_column, id_column)
            return

        setattr(entity, type_column, alias)
        setattr(entity, id_column, id_value)

    def _clear(self, entity: Any, type_column: str, id_column: str) -> None:
        setattr(entity, type_column, None)
        setattr(entity, id_column, None)

    def get_rules_map(self) -> dict[str, list[Rule]]:
        if self.computed:
            return {}

        presence: list[Rule] = [Required()] if self.required else [Nullable()]
        type_column, id_column = self.get_morph_columns()

        return {
            type_column: [*presence, TypeRule(ValueType.STRING), *self.rules],
            id_column: list(presence),
        }


def _is_resource(target: Any) -> bool:
    from fastresource.resources.resource import Resource

    return isinstance(target, type) and issubclass(target, Resource)


__all__ = [
    "MorphTo",
]
