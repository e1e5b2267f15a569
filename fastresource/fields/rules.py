# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

"""Validation rules derived from field configuration."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable


class ValueType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    DATE = "date"
    DATETIME = "datetime"


class Rule:
    """Marker base class of the validation rules."""

    #: Rules checked against storage run after every pure rule passed.
    requires_storage: bool = False


@dataclass(frozen=True)
class Required(Rule):
    pass


@dataclass(frozen=True)
class Nullable(Rule):
    pass


@dataclass(frozen=True)
class TypeRule(Rule):
    value_type: ValueType


@dataclass(frozen=True)
class Min(Rule):
    """Lower bound: the value for numbers, the length for strings and lists."""

    value: int | float


@dataclass(frozen=True)
class Max(Rule):
    """Upper bound: the value for numbers, the length for strings and lists."""

    value: int | float


@dataclass(frozen=True)
class MinLength(Rule):
    value: int


@dataclass(frozen=True)
class MaxLength(Rule):
    value: int


@dataclass(frozen=True)
class In(Rule):
    choices: tuple[Any, ...]


@dataclass(frozen=True)
class Email(Rule):
    pass


@dataclass(frozen=True)
class Exists(Rule):
    """
    Every submitted identifier must exist in the storage of the model.

    Lists are accepted, items may be identifiers or mappings with an ``id``
    key (pivot relation input).
    """

    model: Any
    column: str = "id"

    requires_storage = True


@dataclass(frozen=True)
class Custom(Rule):
    """User check, returns ``False`` (or raises ``ValueError``) when the value is invalid."""

    check: Callable[[Any], bool]
    message: str | None = None


def type_of(rules: list[Rule]) -> ValueType | None:
    for rule in rules:
        if isinstance(rule, TypeRule):
            return rule.value_type

    return None


def has_rule(rules: list[Rule], rule_class: type[Rule]) -> bool:
    return any(isinstance(rule, rule_class) for rule in rules)


__all__ = [
    "ValueType",
    "Rule",
    "Required",
    "Nullable",
    "TypeRule",
    "Min",
    "Max",
    "MinLength",
    "MaxLength",
    "In",
    "Email",
    "Exists",
    "Custom",
    "type_of",
    "has_rule",
]
