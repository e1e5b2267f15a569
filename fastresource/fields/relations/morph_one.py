# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.fields.enums import FieldType, RelationKind
from fastresource.fields.relations.has_one import HasOne


class MorphOne(HasOne):
    """
    Like ``HasOne``, the related row points back with a (type, id) pair.

    Example:
        ```python
        MorphOne("Cover", "cover", model=Image, morph_name="imageable")
        ```
    """

    field_type = FieldType.MORPH_ONE
    default_component = "field-morph-one"
    relation_kind = RelationKind.MORPH_ONE

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
    "MorphOne",
]
