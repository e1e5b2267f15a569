# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import re

from typing import TYPE_CHECKING, Any, ClassVar

from fastresource.exceptions import FieldDefinitionError
from fastresource.fields.base import Field
from fastresource.fields.enums import FieldContext

if TYPE_CHECKING:
    from fastresource.context import ResourceContext
    from fastresource.resources.authorization import Policy


class Resource:
    """
    Groups a stored model with the fields describing it.

    Example:
        ```python
        class PostResource(Resource):
            model = Post
            title = "title"
            search = ["title", "body"]

            def fields(self, context):
                return [
                    ID(),
                    Text("Title", required=True),
                    BelongsToMany("Tags", "tags", resource=TagResource, pivot_model=PostTag),
                ]
        ```
    """

    model: ClassVar[Any]

    #: Attribute used as the display label of the entities.
    title: ClassVar[str | None] = None

    #: Attributes searched when the entities are listed as attachable.
    search: ClassVar[list[str]] = []

    #: Key of the resource, derived from the class name when empty.
    uri_key: ClassVar[str | None] = None

    policy: ClassVar["Policy | None"] = None

    @classmethod
    def key(cls) -> str:
        if cls.uri_key:
            return cls.uri_key

        name = re.sub(r"Resource$", "", cls.__name__) or cls.__name__
        slug = re.sub(r"(?<=[a-z0-9])([A-Z])", r"-\1", name).lower()

        return slug if slug.endswith("s") else f"{slug}s"

    @classmethod
    def label(cls) -> str:
        name = re.sub(r"Resource$", "", cls.__name__) or cls.__name__

        return re.sub(r"(?<=[a-z0-9])([A-Z])", r" \1", name)

    def fields(self, context: "ResourceContext | None") -> list[Field]:
        return []

    def get_fields(self, context: "ResourceContext | None" = None) -> list[Field]:
        """
        Fields of the resource in declaration order, built once per context.

        Raises:
            FieldDefinitionError: When two fields share the same key.
        """
        cache_key = ("resource_fields", type(self))

        if context is not None and context.cache.has(cache_key):
            return context.cache.get(cache_key)

        fields = list(self.fields(context))
        seen: set[str] = set()

        for field in fields:
            if not field.key:
                raise FieldDefinitionError(f"Field '{field.name}' of {type(self).__name__} has no attribute")

            if field.key in seen:
                raise FieldDefinitionError(f"Field key '{field.key}' is declared twice in {type(self).__name__}")

            seen.add(field.key)

        if context is not None:
            context.cache.set(cache_key, fields)

        return fields

    def get_fields_for(
        self,
        flag: FieldContext,
        context: "ResourceContext | None" = None,
        entity: Any = None,
    ) -> list[Field]:
        return [field for field in self.get_fields(context) if field.is_visible_for(flag, context, entity)]

    def get_field(self, key: str, context: "ResourceContext | None" = None) -> Field | None:
        for field in self.get_fields(context):
            if field.key == key:
                return field

        return None

    async def resolve_fields(
        self,
        context: "ResourceContext | None",
        entity: Any,
        flag: FieldContext = FieldContext.DETAIL,
    ) -> dict[str, Any]:
        return {field.key: await field.resolve(context, entity) for field in self.get_fields_for(flag, context, entity)}

    def display_label(self, entity: Any) -> Any:
        if self.title:
            return getattr(entity, self.title, None)

        return None

    def get_searchable_attributes(self) -> list[str]:
        return list(self.search)

    async def authorized_to(self, action: str, entity: Any, context: "ResourceContext") -> bool:
        if self.policy is None:
            return True

        return await self.policy.allows(action, entity, context)

    def new_entity(self) -> Any:
        return self.model()

    async def find(self, identifier: Any) -> Any:
        return await self.model.query.get_or_none(id=identifier)

    # Hooks

    async def before_create(self, context: "ResourceContext", entity: Any) -> None:
        pass

    async def after_create(self, context: "ResourceContext", entity: Any) -> None:
        pass

    async def before_update(self, context: "ResourceContext", entity: Any) -> None:
        pass

    async def after_update(self, context: "ResourceContext", entity: Any) -> None:
        pass


__all__ = [
    "Resource",
]
