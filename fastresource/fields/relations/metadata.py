# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import logging

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from fastresource.fields.base import snake_case
from fastresource.fields.enums import RelationKind
from fastresource.fields.relations.morph_map import get_morph_map
from fastresource.orm.query import has_column

if TYPE_CHECKING:
    from fastresource.context import ResourceContext
    from fastresource.fields.relations.base import RelationField


logger = logging.getLogger("fastresource.fields")


@dataclass(frozen=True)
class RelationMetadata:
    """
    Storage layout of one relation, as seen from the owner model.

    ``foreign_key`` lives on the owner for ``belongs_to`` and on the related
    model for ``has_one``/``has_many``. The morph columns live on the owner
    for ``morph_to``, on the related model for ``morph_one``/``morph_many``
    and on the pivot model for ``morph_to_many``.
    """

    kind: RelationKind
    owner_model: Any
    related_model: Any = None
    foreign_key: str | None = None
    owner_key: str = "id"
    morph_type_column: str | None = None
    morph_id_column: str | None = None
    morph_alias: str | None = None
    pivot_model: Any = None
    pivot_parent_key: str | None = None
    pivot_related_key: str | None = None
    pivot_columns: tuple[str, ...] = ()

    def owner_filter(self, owner_id: Any) -> dict[str, Any]:
        """
        Lookups selecting the rows which belong to the owner: related rows
        for ``has_*``/``morph_one``/``morph_many``, pivot rows for the pivot
        relations.
        """
        match self.kind:
            case RelationKind.HAS_ONE | RelationKind.HAS_MANY:
                return {self.foreign_key: owner_id}
            case RelationKind.MORPH_ONE | RelationKind.MORPH_MANY | RelationKind.MORPH_TO_MANY:
                return {self.morph_type_column: self.morph_alias, self.morph_id_column: owner_id}
            case RelationKind.BELONGS_TO_MANY:
                return {self.pivot_parent_key: owner_id}

        raise ValueError(f"{self.kind.value} relations are not owned through a filter")


def resolve_relation_metadata(
    field: "RelationField",
    model: Any,
    context: "ResourceContext | None" = None,
) -> RelationMetadata | None:
    """
    Resolve the storage layout of the relation declared by the field.

    ``None`` is returned when the layout cannot be resolved (unknown related
    model, missing column...), callers then degrade to an empty value.
    """
    owner_model = model if isinstance(model, type) else type(model)
    cache_key = ("relation_metadata", owner_model, field.relation_kind, field.get_relation_name())

    if context is not None and context.cache.has(cache_key):
        return context.cache.get(cache_key)

    metadata = _build_metadata(field, owner_model)

    if metadata is None:
        logger.warning(
            f"Relation metadata of {field.relation_kind.value} '{field.get_relation_name()}' "
            f"cannot be resolved on {owner_model.__name__}"
        )

    if context is not None:
        context.cache.set(cache_key, metadata)

    return metadata


def _build_metadata(field: "RelationField", owner_model: Any) -> RelationMetadata | None:
    related_model = field.get_related_model()
    relation_name = field.get_relation_name()
    owner_name = snake_case(owner_model.__name__)

    match field.relation_kind:
        case RelationKind.BELONGS_TO:
            foreign_key = field.foreign_key or f"{relation_name}_id"

            if related_model is None or not has_column(owner_model, foreign_key):
                return None

            return RelationMetadata(
                kind=field.relation_kind,
                owner_model=owner_model,
                related_model=related_model,
                foreign_key=foreign_key,
            )

        case RelationKind.HAS_ONE | RelationKind.HAS_MANY:
            foreign_key = field.foreign_key or f"{owner_name}_id"

            if related_model is None or not has_column(related_model, foreign_key):
                return None

            return RelationMetadata(
                kind=field.relation_kind,
                owner_model=owner_model,
                related_model=related_model,
                foreign_key=foreign_key,
            )

        case RelationKind.MORPH_TO:
            type_column, id_column = field.get_morph_columns()

            if not (has_column(owner_model, type_column) and has_column(owner_model, id_column)):
                return None

            return RelationMetadata(
                kind=field.relation_kind,
                owner_model=owner_model,
                morph_type_column=type_column,
                morph_id_column=id_column,
            )

        case RelationKind.MORPH_ONE | RelationKind.MORPH_MANY:
            type_column, id_column = field.get_morph_columns()

            if related_model is None or not (
                has_column(related_model, type_column) and has_column(related_model, id_column)
            ):
                return None

            return RelationMetadata(
                kind=field.relation_kind,
                owner_model=owner_model,
                related_model=related_model,
                morph_type_column=type_column,
                morph_id_column=id_column,
                morph_alias=get_morph_map().alias_for(owner_model),
            )

        case RelationKind.BELONGS_TO_MANY:
            pivot_model = field.pivot_model

            if related_model is None or pivot_model is None:
                return None

            parent_key = field.foreign_pivot_key or f"{owner_name}_id"
            related_key = field.related_pivot_key or f"{snake_case(related_model.__name__)}_id"

            if not (has_column(pivot_model, parent_key) and has_column(pivot_model, related_key)):
                return None

            return RelationMetadata(
                kind=field.relation_kind,
                owner_model=owner_model,
                related_model=related_model,
                pivot_model=pivot_model,
                pivot_parent_key=parent_key,
                pivot_related_key=related_key,
                pivot_columns=_pivot_columns(field, pivot_model),
            )

        case RelationKind.MORPH_TO_MANY:
            pivot_model = field.pivot_model

            if related_model is None or pivot_model is None:
                return None

            type_column, id_column = field.get_morph_columns()
            related_key = field.related_pivot_key or f"{snake_case(related_model.__name__)}_id"

            if not all(has_column(pivot_model, column) for column in (type_column, id_column, related_key)):
                return None

            return RelationMetadata(
                kind=field.relation_kind,
                owner_model=owner_model,
                related_model=related_model,
                morph_type_column=type_column,
                morph_id_column=id_column,
                morph_alias=get_morph_map().alias_for(owner_model),
                pivot_model=pivot_model,
                pivot_parent_key=id_column,
                pivot_related_key=related_key,
                pivot_columns=_pivot_columns(field, pivot_model),
            )

    return None


def _pivot_columns(field: "RelationField", pivot_model: Any) -> tuple[str, ...]:
    columns = []

    for column in field.pivot_columns:
        if has_column(pivot_model, column):
            columns.append(column)
        else:
            logger.warning(f"Pivot column '{column}' is not declared on {pivot_model.__name__}, it is ignored")

    return tuple(columns)


__all__ = [
    "RelationMetadata",
    "resolve_relation_metadata",
]
