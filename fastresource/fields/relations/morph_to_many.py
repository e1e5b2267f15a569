# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Any, Sequence

from fastresource.fields.enums import FieldType, RelationKind
from fastresource.fields.relations.belongs_to_many import BelongsToMany


class MorphToMany(BelongsToMany):
    """
    Many-to-many relation whose pivot points to the owner with a (type, id) pair.

    Example:
        ```python
        MorphToMany("Tags", "tags", resource=TagResource, pivot_model=Taggable, morph_name="taggable")
        ```
    """

    field_type = FieldType.MORPH_TO_MANY
    default_component = "field-morph-to-many"
    relation_kind = RelationKind.MORPH_TO_MANY

    def __init__(
        self,
        name: str,
        relation_name: str | None = None,
        *,
        pivot_model: Any = None,
        morph_name: str | None = None,
        morph_type_column: str | None = None,
        morph_id_column: str | None = None,
        related_pivot_key: str | None = None,
        pivot_columns: Sequence[str] = (),
        **kwargs,
    ):
        super().__init__(
            name,
            relation_name,
            pivot_model=pivot_model,
            related_pivot_key=related_pivot_key,
            pivot_columns=pivot_columns,
            **kwargs,
        )
        self.morph_name = morph_name
        self.morph_type_column = morph_type_column
        self.morph_id_column = morph_id_column


__all__ = [
    "MorphToMany",
]
