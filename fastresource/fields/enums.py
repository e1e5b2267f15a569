# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from enum import Enum


class FieldType(str, Enum):
    ID = "id"
    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    PASSWORD = "password"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    SELECT = "select"
    HIDDEN = "hidden"
    JSON = "json"
    FILE = "file"
    BELONGS_TO = "belongsTo"
    HAS_ONE = "hasOne"
    HAS_MANY = "hasMany"
    MORPH_TO = "morphTo"
    MORPH_ONE = "morphOne"
    MORPH_MANY = "morphMany"
    BELONGS_TO_MANY = "belongsToMany"
    MORPH_TO_MANY = "morphToMany"


class FieldContext(str, Enum):
    INDEX = "index"
    DETAIL = "detail"
    CREATE = "create"
    UPDATE = "update"


class Capability(str, Enum):
    RESOLVE = "resolve"
    FILL = "fill"
    AFTER_SAVE = "after_save"
    SYNC = "sync"


class RelationKind(str, Enum):
    BELONGS_TO = "belongs_to"
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    MORPH_TO = "morph_to"
    MORPH_ONE = "morph_one"
    MORPH_MANY = "morph_many"
    BELONGS_TO_MANY = "belongs_to_many"
    MORPH_TO_MANY = "morph_to_many"

    @property
    def is_to_many(self) -> bool:
        return self in (
            RelationKind.HAS_MANY,
            RelationKind.MORPH_MANY,
            RelationKind.BELONGS_TO_MANY,
            RelationKind.MORPH_TO_MANY,
        )

    @property
    def uses_pivot(self) -> bool:
        return self in (RelationKind.BELONGS_TO_MANY, RelationKind.MORPH_TO_MANY)

    @property
    def is_polymorphic(self) -> bool:
        return self in (
            RelationKind.MORPH_TO,
            RelationKind.MORPH_ONE,
            RelationKind.MORPH_MANY,
            RelationKind.MORPH_TO_MANY,
        )


__all__ = [
    "FieldType",
    "FieldContext",
    "Capability",
    "RelationKind",
]
