# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from edgy.core.db.fields import (
    BigIntegerField,
    BooleanField,
    CharField,
    DateField,
    DateTimeField,
    FloatField,
    IntegerField,
    JSONField,
    TextField,
    UUIDField,
)
from edgy.core.db.datastructures import Index, UniqueConstraint


__all__ = [
    "Index",
    "UniqueConstraint",
    "BigIntegerField",
    "BooleanField",
    "CharField",
    "DateField",
    "DateTimeField",
    "FloatField",
    "IntegerField",
    "JSONField",
    "TextField",
    "UUIDField",
]
