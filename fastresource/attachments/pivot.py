# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Any, Iterable, Mapping

from fastresource.orm.query import normalize_id


def filter_pivot_data(data: Mapping[str, Any] | None, columns: Iterable[str]) -> dict[str, Any]:
    """Keep the declared pivot columns only, anything else is dropped silently."""
    if not data:
        return {}

    allowed = set(columns)

    return {key: value for key, value in data.items() if key in allowed}


def is_keyed_by_id(pivot_data: Mapping[Any, Any] | None, columns: Iterable[str] = ()) -> bool:
    """
    Check if the pivot data holds one set of values per related identifier.

    It does when every key looks like an identifier, every value is a
    mapping and no key is a declared pivot column. Otherwise the data is
    applied to every identifier.
    """
    if not pivot_data:
        return False

    declared = set(columns)

    for key, value in pivot_data.items():
        if isinstance(key, bool) or not isinstance(normalize_id(key), int):
            return False

        if not isinstance(value, Mapping) or str(key) in declared:
            return False

    return True


def pivot_data_by_id(
    ids: Iterable[Any],
    pivot_data: Mapping[Any, Any] | None,
    columns: Iterable[str],
) -> dict[Any, dict[str, Any]]:
    """Filtered pivot values of each identifier, empty when nothing was given for it."""
    columns = list(columns)

    if is_keyed_by_id(pivot_data, columns):
        keyed = {normalize_id(key): value for key, value in pivot_data.items()}

        return {identifier: filter_pivot_data(keyed.get(identifier), columns) for identifier in ids}

    uniform = filter_pivot_data(pivot_data, columns)

    return {identifier: dict(uniform) for identifier in ids}


__all__ = [
    "filter_pivot_data",
    "is_keyed_by_id",
    "pivot_data_by_id",
]
