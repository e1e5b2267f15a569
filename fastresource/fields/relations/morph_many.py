# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.fields.enums import FieldType, RelationKind
from fastresource.fields.relations.has_many import HasMany


class MorphMany(HasMany):
    """
    Like ``HasMany``, the related rows point back with a (type, id) pair.

    Example:
        ```python
        MorphMany("Comments", "comments", resource=CommentResource, morph_name="commentable")
        ```
    """

    field_type = FieldType.MORPH_MANY
    default_component = "field-morph-many"
    relation_kind = RelationKind.MORPH_MANY

    def __init__(
        self,
        name: str,
        relation_name: str | None = None,
        *,
        morph_name: str | None = None,
        morph_type_column: str | None = None,
        morph_id_column: str | None = None,
        **kwargs,
    ):
        super().__init__(name, relation_name, **kwargs)
        self.morph_name = morph_name
        self.morph_type_column = morph_type_column
        self.morph_id_column = morph_id_column


__all__ = [
    "MorphMany",
]
