# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Any, Iterable

import sqlalchemy

from edgy.core.db.querysets import QuerySet


def has_column(model: Any, name: str | None) -> bool:
    """Check if the edgy model declares a stored field with this name."""
    if not name or model is None:
        return False

    return name in model.meta.fields


def search_clause(model: Any, attributes: Iterable[str], term: str) -> Any:
    """
    Build an OR chain of case-insensitive ``LIKE`` matches over the attributes.

    Attributes which are not columns of the model are ignored, ``None`` is
    returned when none is left.
    """
    columns = model.table.c
    clauses = [
        sqlalchemy.cast(columns[attribute], sqlalchemy.String).ilike(f"%{term}%")
        for attribute in attributes
        if attribute in columns
    ]

    if not clauses:
        return None

    return sqlalchemy.or_(*clauses)


def column_values(entity: Any) -> dict[str, Any]:
    """Stored column values of the entity, keyed by column name."""
    return {name: getattr(entity, name, None) for name in type(entity).table.c.keys()}


def normalize_id(value: Any) -> Any:
    """
    Convert identifiers coming from the outside to the stored integer form.

    Digit strings become integers, anything else is returned as-is.
    """
    if isinstance(value, bool):
        return value

    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())

    return value


def normalize_ids(values: Iterable[Any]) -> list[Any]:
    """Normalize the identifiers, dropping duplicates and keeping the first occurrence order."""
    result: list[Any] = []

    for value in values:
        identifier = normalize_id(value)

        if identifier is not None and identifier not in result:
            result.append(identifier)

    return result


__all__ = [
    "QuerySet",
    "has_column",
    "column_values",
    "search_clause",
    "normalize_id",
    "normalize_ids",
]
