# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from fastresource.context import ResourceContext
    from fastresource.schemas.attachment import ChangeSet


class Resolvable(Protocol):
    async def resolve(self, context: "ResourceContext", entity: Any) -> Any: ...


class Fillable(Protocol):
    async def fill(self, context: "ResourceContext", entity: Any) -> None: ...


class AfterSaveable(Protocol):
    def supports_after_save(self) -> bool: ...

    async def after_save(self, context: "ResourceContext", entity: Any) -> None: ...


class Syncable(Protocol):
    async def sync(
        self,
        context: "ResourceContext",
        entity: Any,
        ids: list[Any],
        pivot_data: dict[Any, Any] | None = None,
        detaching: bool = True,
    ) -> "ChangeSet": ...


__all__ = [
    "Resolvable",
    "Fillable",
    "AfterSaveable",
    "Syncable",
]
