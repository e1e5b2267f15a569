# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Mapping, Sequence

from fastresource.fields.base import Field
from fastresource.fields.enums import FieldType
from fastresource.fields.rules import (
    Email as EmailRule,
    In,
    Max,
    MaxLength,
    Min,
    MinLength,
    Rule,
    TypeRule,
    ValueType,
)


class ID(Field):
    field_type = FieldType.ID
    default_component = "field-id"

    def __init__(self, name: str = "ID", attribute: str | None = "id", **kwargs):
        kwargs.setdefault("readonly", True)
        kwargs.setdefault("show_on_create", False)
        kwargs.setdefault("show_on_update", False)
        super().__init__(name, attribute, **kwargs)

    def get_rules_map(self) -> dict[str, list[Rule]]:
        return {}


class Text(Field):
    field_type = FieldType.TEXT
    default_component = "field-text"

    def __init__(
        self,
        name: str,
        attribute: str | None = None,
        *,
        min_length: int | None = None,
        max_length: int | None = None,
        **kwargs,
    ):
        super().__init__(name, attribute, **kwargs)
        self.min_length = min_length
        self.max_length = max_length

    def get_type_rules(self) -> list[Rule]:
        rules: list[Rule] = [TypeRule(ValueType.STRING)]

        if self.min_length is not None:
            rules.append(MinLength(self.min_length))

        if self.max_length is not None:
            rules.append(MaxLength(self.max_length))

        return rules


class Textarea(Text):
    field_type = FieldType.TEXTAREA
    default_component = "field-textarea"

    def __init__(self, name: str, attribute: str | None = None, **kwargs):
        kwargs.setdefault("show_on_index", False)
        super().__init__(name, attribute, **kwargs)


class Email(Text):
    field_type = FieldType.EMAIL
    default_component = "field-email"

    def get_type_rules(self) -> list[Rule]:
        return [*super().get_type_rules(), EmailRule()]


class Password(Text):
    """Write-only field: never resolved, only filled when a value was submitted."""

    field_type = FieldType.PASSWORD
    default_component = "field-password"

    def __init__(self, name: str = "Password", attribute: str | None = None, **kwargs):
        kwargs.setdefault("show_on_index", False)
        kwargs.setdefault("show_on_detail", False)
        super().__init__(name, attribute, **kwargs)

    async def resolve(self, context, entity) -> Any:
        return None

    async def fill(self, context, entity) -> None:
        if not context.value(self.key):
            return

        await super().fill(context, entity)


class Number(Field):
    field_type = FieldType.NUMBER
    default_component = "field-number"

    def __init__(
        self,
        name: str,
        attribute: str | None = None,
        *,
        min: int | float | None = None,
        max: int | float | None = None,
        step: int | float | None = None,
        integer: bool = False,
        **kwargs,
    ):
        super().__init__(name, attribute, **kwargs)
        self.min = min
        self.max = max
        self.step = step
        self.integer = integer

    def get_type_rules(self) -> list[Rule]:
        rules: list[Rule] = [TypeRule(ValueType.INTEGER if self.integer else ValueType.NUMERIC)]

        if self.min is not None:
            rules.append(Min(self.min))

        if self.max is not None:
            rules.append(Max(self.max))

        return rules


class Boolean(Field):
    field_type = FieldType.BOOLEAN
    default_component = "field-boolean"

    def get_type_rules(self) -> list[Rule]:
        return [TypeRule(ValueType.BOOLEAN)]

    def format_value(self, value: Any) -> Any:
        return None if value is None else bool(value)


class Toggle(Boolean):
    default_component = "field-toggle"


class Date(Field):
    field_type = FieldType.DATE
    default_component = "field-date"
    value_type: ClassVar[ValueType] = ValueType.DATE

    def get_type_rules(self) -> list[Rule]:
        return [TypeRule(self.value_type)]

    def format_value(self, value: Any) -> Any:
        if isinstance(value, (date, datetime)):
            return value.isoformat()

        return value


class DateTime(Date):
    field_type = FieldType.DATETIME
    default_component = "field-datetime"
    value_type = ValueType.DATETIME


class Select(Field):
    field_type = FieldType.SELECT
    default_component = "field-select"

    def __init__(
        self,
        name: str,
        attribute: str | None = None,
        *,
        choices: Mapping[Any, str] | Sequence[Any] | type[Enum] = (),
        **kwargs,
    ):
        super().__init__(name, attribute, **kwargs)
        self.choices = choices

    def get_options(self) -> list[dict[str, Any]]:
        if isinstance(self.choices, type) and issubclass(self.choices, Enum):
            return [{"value": item.value, "label": item.name.replace("_", " ").title()} for item in self.choices]

        if isinstance(self.choices, Mapping):
            return [{"value": value, "label": label} for value, label in self.choices.items()]

        return [{"value": value, "label": str(value)} for value in self.choices]

    def get_type_rules(self) -> list[Rule]:
        options = self.get_options()

        if not options:
            return []

        return [In(tuple(option["value"] for option in options))]

    def format_value(self, value: Any) -> Any:
        return value.value if isinstance(value, Enum) else value


class Hidden(Field):
    field_type = FieldType.HIDDEN
    default_component = "field-hidden"

    def __init__(self, name: str, attribute: str | None = None, **kwargs):
        kwargs.setdefault("show_on_index", False)
        kwargs.setdefault("show_on_detail", False)
        super().__init__(name, attribute, **kwargs)


class Json(Field):
    field_type = FieldType.JSON
    default_component = "field-json"

    def __init__(self, name: str, attribute: str | None = None, *, as_list: bool = False, **kwargs):
        kwargs.setdefault("show_on_index", False)
        super().__init__(name, attribute, **kwargs)
        self.as_list = as_list

    def get_type_rules(self) -> list[Rule]:
        return [TypeRule(ValueType.ARRAY if self.as_list else ValueType.OBJECT)]


__all__ = [
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
]
