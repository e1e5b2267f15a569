# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Any

from fastresource.dependencies import get_service
from fastresource.resources.resource import Resource


class ResourceRegistry:
    """Resources of the application, by key and by model."""

    def __init__(self):
        self._resources: dict[str, type[Resource]] = {}

    def register(self, resource: type[Resource]) -> type[Resource]:
        self._resources[resource.key()] = resource

        return resource

    def get(self, key: str) -> type[Resource] | None:
        return self._resources.get(key)

    def for_model(self, model: Any) -> type[Resource] | None:
        for resource in self._resources.values():
            if getattr(resource, "model", None) is model:
                return resource

        return None

    def all(self) -> list[type[Resource]]:
        return list(self._resources.values())

    def clear(self) -> None:
        self._resources.clear()


def register_resource(resource: type[Resource]) -> type[Resource]:
    """
    Class decorator registering the resource.

    Example:
        ```python
        @register_resource
        class PostResource(Resource):
            model = Post
        ```
    """
    return get_service(ResourceRegistry).register(resource)


__all__ = [
    "ResourceRegistry",
    "register_resource",
]
