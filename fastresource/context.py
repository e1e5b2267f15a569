# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from contextvars import ContextVar, Token
from typing import Any, Awaitable, Callable, Mapping


class RequestCache:
    """Values memoized for the lifetime of one resource context."""

    def __init__(self):
        self._values: dict[Any, Any] = {}

    def has(self, key: Any) -> bool:
        return key in self._values

    def get(self, key: Any, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: Any, value: Any) -> None:
        self._values[key] = value

    async def remember(self, key: Any, factory: Callable[[], Awaitable[Any]]) -> Any:
        if key not in self._values:
            self._values[key] = await factory()

        return self._values[key]

    def clear(self) -> None:
        self._values.clear()


class ResourceContext:
    """
    State of one inbound request as seen by the resource layer.

    The raw ``input`` is what the client submitted, ``validated`` is filled
    by the persist operation once validation passed and is what fields read
    from during fill.
    """

    def __init__(
        self,
        input: Mapping[str, Any] | None = None,
        user: Any = None,
        locale: str | None = None,
        resource_key: str | None = None,
    ):
        self.input: dict[str, Any] = dict(input or {})
        self.validated: dict[str, Any] | None = None
        self.user = user
        self.locale = locale
        self.resource_key = resource_key
        self.cache = RequestCache()

    @property
    def actor_id(self) -> Any:
        if self.user is None:
            return None

        return getattr(self.user, "id", None)

    def submitted(self, key: str) -> bool:
        """Check if the key is part of the validated input, or of the raw input before validation."""
        return key in self._source()

    def value(self, key: str, default: Any = None) -> Any:
        return self._source().get(key, default)

    def _source(self) -> dict[str, Any]:
        return self.input if self.validated is None else self.validated


_current_context: ContextVar[ResourceContext | None] = ContextVar("current_resource_context", default=None)


def set_context(context: ResourceContext | None) -> Token:
    return _current_context.set(context)


def get_context() -> ResourceContext | None:
    return _current_context.get()


def reset_context(token: Token) -> None:
    _current_context.reset(token)


def get_locale() -> str:
    context = get_context()

    if context and context.locale:
        return context.locale

    from fastresource.config import get_settings

    return get_settings().fallback_locale


__all__ = [
    "RequestCache",
    "ResourceContext",
    "set_context",
    "get_context",
    "reset_context",
    "get_locale",
]
