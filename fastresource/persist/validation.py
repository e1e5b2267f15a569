# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import re

from datetime import date, datetime
from typing import Annotated, Any, Mapping, Optional

from pydantic import (
    AfterValidator,
    ConfigDict,
    Field as PydanticField,
    ValidationError as PydanticValidationError,
    create_model,
)

from fastresource.exceptions import ValidationError
from fastresource.fields.rules import (
    Custom,
    Email,
    Exists,
    In,
    Max,
    MaxLength,
    Min,
    MinLength,
    Nullable,
    Required,
    Rule,
    ValueType,
    has_rule,
    type_of,
)
from fastresource.i18n import _t
from fastresource.orm.query import normalize_ids


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

TYPE_ANNOTATIONS: dict[ValueType, Any] = {
    ValueType.STRING: str,
    ValueType.INTEGER: int,
    ValueType.NUMERIC: int | float,
    ValueType.BOOLEAN: bool,
    ValueType.ARRAY: list,
    ValueType.OBJECT: dict,
    ValueType.DATE: date,
    ValueType.DATETIME: datetime,
}

TYPE_MESSAGES: dict[ValueType, str] = {
    ValueType.STRING: "The {attribute} field must be a string.",
    ValueType.INTEGER: "The {attribute} field must be an integer.",
    ValueType.NUMERIC: "The {attribute} field must be a number.",
    ValueType.BOOLEAN: "The {attribute} field must be true or false.",
    ValueType.ARRAY: "The {attribute} field must be an array.",
    ValueType.OBJECT: "The {attribute} field must be an object.",
    ValueType.DATE: "The {attribute} field must be a valid date.",
    ValueType.DATETIME: "The {attribute} field must be a valid date and time.",
}

NUMERIC_TYPES = (ValueType.INTEGER, ValueType.NUMERIC)


class RuleViolation(ValueError):
    pass


def _display_name(attribute: str) -> str:
    return attribute.replace("_", " ")


def _size(value: Any, value_type: ValueType | None) -> Any:
    if value_type in NUMERIC_TYPES or (value_type is None and isinstance(value, (int, float))):
        return value

    return len(value)


def _check(attribute: str, rule: Rule, value_type: ValueType | None):
    """Build the pydantic after validator enforcing one pure rule."""
    name = _display_name(attribute)

    def validate(value: Any) -> Any:
        match rule:
            case Required():
                if value is None or value == "" or value == [] or value == {}:
                    raise RuleViolation(_t("The {attribute} field is required.", attribute=name))
            case Min(value=minimum):
                if _size(value, value_type) < minimum:
                    raise RuleViolation(_t("The {attribute} field must be at least {min}.", attribute=name, min=minimum))
            case Max(value=maximum):
                if _size(value, value_type) > maximum:
                    raise RuleViolation(
                        _t("The {attribute} field must not be greater than {max}.", attribute=name, max=maximum)
                    )
            case MinLength(value=minimum):
                if len(value) < minimum:
                    raise RuleViolation(
                        _t("The {attribute} field must be at least {min} characters.", attribute=name, min=minimum)
                    )
            case MaxLength(value=maximum):
                if len(value) > maximum:
                    raise RuleViolation(
                        _t("The {attribute} field must not be greater than {max} characters.", attribute=name, max=maximum)
                    )
            case In(choices=choices):
                if value not in choices:
                    raise RuleViolation(_t("The selected {attribute} is invalid.", attribute=name))
            case Email():
                if not isinstance(value, str) or not EMAIL_PATTERN.match(value):
                    raise RuleViolation(_t("The {attribute} field must be a valid email address.", attribute=name))
            case Custom(check=check, message=message):
                if not check(value):
                    raise RuleViolation(message or _t("The {attribute} field is invalid.", attribute=name))

        return value

    return AfterValidator(validate)


class Validator:
    """
    Check submitted input against the rules aggregated from the fields.

    Pure rules are checked at once by a pydantic model built from the rules,
    rules needing storage (``Exists``) run afterwards on the attributes which
    passed. Only submitted attributes are part of the validated data. In
    ``partial`` mode (updates) a required attribute may be left out, it is
    only checked when submitted.

    Example:
        ```python
        validated = await Validator({"title": [Required(), TypeRule(ValueType.STRING)]}).validate(data)
        ```
    """

    def __init__(self, rules: Mapping[str, list[Rule]], partial: bool = False):
        self.rules = dict(rules)
        self.partial = partial
        self._model = None

    @property
    def model(self) -> Any:
        if self._model is None:
            self._model = self._build_model()

        return self._model

    async def validate(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Raises:
            ValidationError: With the messages keyed by attribute.
        """
        errors: dict[str, list[str]] = {}
        validated: dict[str, Any] = {}

        try:
            validated = self.model.model_validate(dict(data)).model_dump(by_alias=True, exclude_unset=True)
        except PydanticValidationError as e:
            self._collect_errors(e, errors)

            if not errors:
                raise

        if not errors:
            await self._validate_storage(validated, errors)

        if errors:
            raise ValidationError(errors)

        return validated

    def _build_model(self) -> Any:
        definitions: dict[str, Any] = {}

        for index, (attribute, rules) in enumerate(self.rules.items()):
            value_type = type_of(rules)
            validators = [
                _check(attribute, rule, value_type)
                for rule in rules
                if not rule.requires_storage and not isinstance(rule, Nullable)
            ]
            annotation = TYPE_ANNOTATIONS.get(value_type, Any) if value_type is not None else Any

            if validators:
                annotation = Annotated[annotation, *validators]

            nullable = has_rule(rules, Nullable)

            if nullable:
                annotation = Optional[annotation]

            if has_rule(rules, Required) and not self.partial:
                field_info = PydanticField(alias=attribute)
            else:
                field_info = PydanticField(default=None, alias=attribute)

            definitions[f"field_{index}"] = (annotation, field_info)

        return create_model(
            "ValidatedInput",
            __config__=ConfigDict(extra="ignore", arbitrary_types_allowed=True),
            **definitions,
        )

    def _collect_errors(self, exc: PydanticValidationError, errors: dict[str, list[str]]) -> None:
        for error in exc.errors():
            if not error["loc"]:
                continue

            attribute = str(error["loc"][0])
            name = _display_name(attribute)
            rules = self.rules.get(attribute, [])
            value_type = type_of(rules)

            if error["type"] == "missing" or (error.get("input") is None and has_rule(rules, Required)):
                message = _t("The {attribute} field is required.", attribute=name)
            elif error["type"] == "value_error" and isinstance(error.get("ctx", {}).get("error"), ValueError):
                message = str(error["ctx"]["error"])
            elif value_type is not None and error["type"] != "value_error":
                message = _t(TYPE_MESSAGES[value_type], attribute=name)
            else:
                message = error["msg"]

            messages = errors.setdefault(attribute, [])

            if message not in messages:
                messages.append(message)

    async def _validate_storage(self, validated: dict[str, Any], errors: dict[str, list[str]]) -> None:
        for attribute, rules in self.rules.items():
            if attribute not in validated or validated[attribute] is None:
                continue

            for rule in rules:
                if not isinstance(rule, Exists):
                    continue

                if not await self._exists(rule, validated[attribute]):
                    errors.setdefault(attribute, []).append(
                        _t("The selected {attribute} is invalid.", attribute=_display_name(attribute))
                    )
                    break

    async def _exists(self, rule: Exists, value: Any) -> bool:
        items = value if isinstance(value, (list, tuple)) else [value]
        ids = normalize_ids(item.get("id") if isinstance(item, Mapping) else item for item in items)

        if not ids:
            return True

        found = await rule.model.query.filter(**{f"{rule.column}__in": ids}).all()
        found_ids = {getattr(item, rule.column) for item in found}

        return all(identifier in found_ids for identifier in ids)


__all__ = [
    "Validator",
    "RuleViolation",
]
