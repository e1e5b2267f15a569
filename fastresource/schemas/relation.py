# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Any, Mapping

from pydantic import Field

from fastresource.schemas.base import BaseModel


class RelationValue(BaseModel):
    """Display value of one related entity, never the entity itself."""

    key: Any
    label: Any = None
    pivot: dict[str, Any] | None = None
    fields: dict[str, Any] | None = None

    def to_value(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class MorphRelationValue(BaseModel):
    type: str
    type_label: str | None = None
    key: Any
    label: Any = None

    def to_value(self) -> dict[str, Any]:
        return self.model_dump()


class RelationInput(BaseModel):
    """Normalized submitted value of a pivot relation: identifiers and per-id pivot data."""

    ids: list[Any] = Field(default_factory=list)
    pivot: dict[Any, dict[str, Any]] = Field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Any) -> "RelationInput":
        """
        Accept a list of identifiers or of ``{"id": ..., "pivot": {...}}`` objects.
        """
        from fastresource.orm.query import normalize_id

        result = cls()

        if value is None:
            return result

        for item in value if isinstance(value, (list, tuple)) else [value]:
            if isinstance(item, Mapping):
                identifier = normalize_id(item.get("id"))

                if identifier is None:
                    continue

                if isinstance(item.get("pivot"), Mapping):
                    result.pivot[identifier] = dict(item["pivot"])
            else:
                identifier = normalize_id(item)

            if identifier is not None and identifier not in result.ids:
                result.ids.append(identifier)

        return result


__all__ = [
    "RelationValue",
    "MorphRelationValue",
    "RelationInput",
]
