# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import inspect

from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Type,
    TypeVar,
    Union,
    cast,
)


T = TypeVar("T")


class Token(Generic[T]):
    """Token for service registration using string names or class types."""

    def __init__(self, key: Union[str, Type[Any]]):
        self.key = key
        self.name = key if isinstance(key, str) else key.__name__

    def __repr__(self):
        return f"Token({self.key!r})" if isinstance(self.key, str) else f"Token({self.name})"

    def __hash__(self):
        return hash(("__token__", self.key))

    def __eq__(self, other):
        return isinstance(other, Token) and other.key == self.key


ProviderKey = Union[Type[Any], Token[Any]]


_services_registry: Dict[ProviderKey, Union[Any, Type[Any]]] = {}
_instances_cache: Dict[ProviderKey, Any] = {}


def register_service(
    instance: Union[T, Type[T]],
    key: Union[Type[T], Token[T], str, None] = None,
    force: bool = False,
) -> None:
    """
    Register a service (class or instance) in the container.

    - If instance is a class: it is built on first request, its ``__init__``
      parameters being resolved from the container
    - If instance is an object: it is returned as-is (singleton)
    """
    if inspect.isclass(instance):
        _register_service(_normalize_key(instance if key is None else key), instance, force)
        return

    provided_key = _normalize_key(type(instance) if key is None else key)
    _register_service(provided_key, instance, force)

    instance_type_key = _normalize_key(type(instance))

    if key is None and instance_type_key != provided_key:
        _register_service(instance_type_key, instance, force)


def unregister_service(key: Union[Type[T], Token[T], str]) -> None:
    """Unregister a service and forget its built instance."""
    normalized_key = _normalize_key(key)
    _services_registry.pop(normalized_key, None)
    _instances_cache.pop(normalized_key, None)


def has_service(key: Union[Type[T], Token[T], str]) -> bool:
    """Check if a service is registered."""
    return _normalize_key(key) in _services_registry


def get_service(key: Union[Type[T], Token[T], str]) -> T:
    """
    Get a service instance from the container.

    Classes are auto-registered on first request.
    """
    normalized_key = _normalize_key(key)

    if normalized_key not in _services_registry:
        if not isinstance(key, type):
            raise LookupError(f"Service {normalized_key!r} is not registered")

        register_service(key)

    value = _services_registry[normalized_key]

    if not isinstance(value, type):
        return cast(T, value)

    if normalized_key not in _instances_cache:
        _instances_cache[normalized_key] = value(**_resolve_dependencies(value))

    return _instances_cache[normalized_key]


def reset_services() -> None:
    """Forget every registered service. Mostly useful between test cases."""
    _services_registry.clear()
    _instances_cache.clear()


def provide(cls: Union[Type[T], Token[T], str]) -> Callable[[], T]:
    """Build a zero-argument factory returning the service."""

    def dep() -> T:
        return get_service(cls)

    return dep


def _normalize_key(key: Union[Type[Any], Token[Any], str]) -> Token[Any]:
    if isinstance(key, Token):
        return key

    return Token(key)


def _register_service(key: Token[Any], instance: Union[Any, Type[Any]], force: bool = False) -> None:
    if force or key not in _services_registry:
        _services_registry[key] = instance
        _instances_cache.pop(key, None)


def _resolve_dependencies(service_class: Type[Any]) -> Dict[str, Any]:
    """
    Resolve service dependencies by inspecting ``__init__`` parameters.
    """
    import sys
    from typing import get_type_hints

    sig = inspect.signature(service_class.__init__)
    kwargs = {}

    try:
        module = sys.modules.get(service_class.__module__)
        type_hints = get_type_hints(
            service_class.__init__,
            globalns=getattr(module, "__dict__", {}) if module else {},
        )
    except (NameError, TypeError):
        type_hints = {}

    for param_name, param in sig.parameters.items():
        if param_name == "self" or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue

        param_type = type_hints.get(param_name, param.annotation)

        if param_type is inspect.Parameter.empty or not isinstance(param_type, type):
            if param.default is not inspect.Parameter.empty:
                kwargs[param_name] = param.default
            continue

        if not has_service(param_type) and param.default is not inspect.Parameter.empty:
            kwargs[param_name] = param.default
            continue

        kwargs[param_name] = get_service(param_type)

    return kwargs


__all__ = [
    "register_service",
    "unregister_service",
    "has_service",
    "get_service",
    "reset_services",
    "provide",
    "Token",
    "ProviderKey",
]
