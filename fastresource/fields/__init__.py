# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.fields.enums import Capability, FieldContext, FieldType, RelationKind
from fastresource.fields.capabilities import AfterSaveable, Fillable, Resolvable, Syncable
from fastresource.fields.rules import (
    Custom,
    Email as EmailRule,
    Exists,
    In,
    Max,
    MaxLength,
    Min,
    MinLength,
    Nullable,
    Required,
    Rule,
    TypeRule,
    ValueType,
)
from fastresource.fields.base import NOT_SET, Field
from fastresource.fields.scalars import (
    ID,
    Boolean,
    Date,
    DateTime,
    Email,
    Hidden,
    Json,
    Number,
    Password,
    Select,
    Text,
    Textarea,
    Toggle,
)
from fastresource.fields.relations import (
    BelongsTo,
    BelongsToMany,
    HasMany,
    HasOne,
    MorphMany,
    MorphOne,
    MorphTo,
    MorphToMany,
    RelationField,
)


__all__ = [
    "Capability",
    "FieldContext",
    "FieldType",
    "RelationKind",
    "Resolvable",
    "Fillable",
    "AfterSaveable",
    "Syncable",
    "Rule",
    "Required",
    "Nullable",
    "TypeRule",
    "ValueType",
    "Min",
    "Max",
    "MinLength",
    "MaxLength",
    "In",
    "EmailRule",
    "Exists",
    "Custom",
    "NOT_SET",
    "Field",
    "ID",
    "Text",
    "Textarea",
    "Email",
    "Password",
    "Number",
    "Boolean",
    "Toggle",
    "Date",
    "DateTime",
    "Select",
    "Hidden",
    "Json",
    "RelationField",
    "BelongsTo",
    "HasOne",
    "HasMany",
    "MorphTo",
    "MorphOne",
    "MorphMany",
    "BelongsToMany",
    "MorphToMany",
]
