# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import TYPE_CHECKING, Any, Callable, ClassVar, Sequence

from fastresource.config import get_settings
from fastresource.fields.base import Field, snake_case
from fastresource.fields.enums import FieldContext, RelationKind
from fastresource.fields.relations.label import resolve_label
from fastresource.fields.relations.metadata import RelationMetadata, resolve_relation_metadata
from fastresource.schemas.relation import RelationValue

if TYPE_CHECKING:
    from fastresource.context import ResourceContext
    from fastresource.resources.resource import Resource


class RelationField(Field):
    """
    Field bound to a relation of the entity.

    Relation fields never expose the related entity itself: they resolve to
    ``{key, label}`` values, or to a bounded list of them for to-many
    relations. The field is keyed by its ``attribute`` when it has one, by
    its relation name otherwise.
    """

    relation_kind: ClassVar[RelationKind]

    def __init__(
        self,
        name: str,
        relation_name: str | None = None,
        *,
        model: Any = None,
        resource: "type[Resource] | None" = None,
        attribute: str = "",
        foreign_key: str | None = None,
        display_attribute: str | None = None,
        display_callback: Callable[[Any], Any] | None = None,
        order_by: str | None = None,
        order_direction: str = "asc",
        limit: int | None = None,
        attachable: bool = False,
        attachable_limit: int | None = None,
        attachable_search_fields: Sequence[str] | None = None,
        **kwargs,
    ):
        super().__init__(name, attribute, **kwargs)
        self.relation_name = relation_name or snake_case(name)
        self.model = model
        self.resource = resource
        self.foreign_key = foreign_key
        self.display_attribute = display_attribute
        self.display_callback = display_callback
        self.order_by = order_by
        self.order_direction = order_direction
        self.limit = limit
        self.attachable = attachable
        self.attachable_limit = attachable_limit
        self.attachable_search_fields = list(attachable_search_fields or ["id"])

        self.morph_name: str | None = None
        self.morph_type_column: str | None = None
        self.morph_id_column: str | None = None
        self.pivot_model: Any = None
        self.foreign_pivot_key: str | None = None
        self.related_pivot_key: str | None = None
        self.pivot_columns: list[str] = []

    @property
    def key(self) -> str:
        return self.attribute or self.relation_name

    def get_relation_name(self) -> str:
        return self.relation_name

    def get_related_model(self) -> Any:
        if self.model is not None:
            return self.model

        if self.resource is not None:
            return self.resource.model

        return None

    def get_related_resource(self) -> "Resource | None":
        return self.resource() if self.resource is not None else None

    def get_morph_columns(self) -> tuple[str, str]:
        morph_name = self.morph_name or self.relation_name

        return (
            self.morph_type_column or f"{morph_name}_type",
            self.morph_id_column or f"{morph_name}_id",
        )

    def get_metadata(self, entity: Any, context: "ResourceContext | None" = None) -> RelationMetadata | None:
        return resolve_relation_metadata(self, entity, context)

    def get_resolve_limit(self) -> int:
        return self.limit or get_settings().relation_resolve_limit

    def get_attachable_search_fields(self) -> list[str]:
        return self.attachable_search_fields

    def apply_order(self, query: Any) -> Any:
        if not self.order_by:
            return query

        prefix = "-" if self.order_direction.lower() == "desc" else ""

        return query.order_by(f"{prefix}{self.order_by}")

    async def resolve_label(self, related: Any) -> Any:
        return await resolve_label(
            related,
            display_callback=self.display_callback,
            display_attribute=self.display_attribute,
            resource=self.get_related_resource(),
        )

    async def related_value(
        self,
        context: "ResourceContext | None",
        related: Any,
        *,
        pivot: dict[str, Any] | None = None,
        with_fields: bool = False,
    ) -> dict[str, Any]:
        value = RelationValue(
            key=getattr(related, "id", None),
            label=await self.resolve_label(related),
            pivot=pivot,
            fields=await self.resolve_related_fields(context, related) if with_fields else None,
        )

        return value.to_value()

    async def resolve_related_fields(self, context: "ResourceContext | None", related: Any) -> dict[str, Any] | None:
        """Values of the scalar index fields of the related resource."""
        resource = self.get_related_resource()

        if resource is None:
            return None

        values = {}

        for field in resource.get_fields(context):
            if field.relation_kind is not None or not field.is_visible_for(FieldContext.INDEX, context, related):
                continue

            values[field.key] = await field.resolve(context, related)

        return values

    def is_new(self, entity: Any) -> bool:
        return getattr(entity, "id", None) is None


__all__ = [
    "RelationField",
]
