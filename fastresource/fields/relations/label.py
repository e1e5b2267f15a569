# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import TYPE_CHECKING, Any, Callable

from fastresource.fields.base import maybe_await

if TYPE_CHECKING:
    from fastresource.resources.resource import Resource


FALLBACK_LABEL_ATTRIBUTES = (
    "name",
    "title",
    "label",
    "display_name",
    "full_name",
    "description",
)


async def resolve_label(
    entity: Any,
    *,
    display_callback: Callable[[Any], Any] | None = None,
    display_attribute: str | None = None,
    resource: "Resource | None" = None,
) -> Any:
    """
    Label of a related entity.

    Tried in order: the display callback, the display attribute, the
    ``display_label`` of the related resource, the first filled attribute
    of ``FALLBACK_LABEL_ATTRIBUTES`` and finally the identifier.
    """
    if entity is None:
        return None

    if display_callback is not None:
        return await maybe_await(display_callback(entity))

    if display_attribute:
        value = getattr(entity, display_attribute, None)

        if value is not None:
            return value

    if resource is not None:
        value = resource.display_label(entity)

        if value is not None:
            return value

    for attribute in FALLBACK_LABEL_ATTRIBUTES:
        value = getattr(entity, attribute, None)

        if value not in (None, ""):
            return value

    return getattr(entity, "id", None)


__all__ = [
    "FALLBACK_LABEL_ATTRIBUTES",
    "resolve_label",
]
