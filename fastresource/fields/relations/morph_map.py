# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Any

from fastresource.dependencies import get_service
from fastresource.fields.base import snake_case


class MorphMap:
    """
    Aliases stored in the type column of polymorphic relations.

    Models which were never registered are stored under the snake case name
    of their class.
    """

    def __init__(self):
        self._models: dict[str, Any] = {}

    def register(self, alias: str, model: Any) -> None:
        self._models[alias] = model

    def unregister(self, alias: str) -> None:
        self._models.pop(alias, None)

    def alias_for(self, model: Any) -> str:
        model_class = model if isinstance(model, type) else type(model)

        for alias, registered in self._models.items():
            if registered is model_class:
                return alias

        return snake_case(model_class.__name__)

    def model_for(self, alias: str | None) -> Any:
        if not alias:
            return None

        return self._models.get(alias)

    def clear(self) -> None:
        self._models.clear()


def get_morph_map() -> MorphMap:
    return get_service(MorphMap)


__all__ = [
    "MorphMap",
    "get_morph_map",
]
