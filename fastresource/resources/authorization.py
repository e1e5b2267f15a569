# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import TYPE_CHECKING, Any

from fastresource.exceptions import AuthorizationError
from fastresource.fields.base import maybe_await

if TYPE_CHECKING:
    from fastresource.context import ResourceContext
    from fastresource.resources.resource import Resource


class Policy:
    """
    Authorization rules of a resource.

    Each action is checked by the method of the same name, called with the
    acting user and the entity. Actions without a method are allowed.

    Example:
        ```python
        class PostPolicy(Policy):
            def update(self, user, post) -> bool:
                return user is not None and post.author_id == user.id
        ```
    """

    async def allows(self, action: str, entity: Any, context: "ResourceContext") -> bool:
        check = getattr(self, action, None)

        if check is None or not callable(check):
            return True

        return bool(await maybe_await(check(context.user, entity)))


async def authorize(resource: "Resource", action: str, entity: Any, context: "ResourceContext") -> None:
    """Raise ``AuthorizationError`` when the resource refuses the action, without telling why."""
    if not await resource.authorized_to(action, entity, context):
        raise AuthorizationError(action)


__all__ = [
    "Policy",
    "authorize",
]
