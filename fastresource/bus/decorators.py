# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import Callable

from fastresource.dependencies import get_service
from fastresource.bus.service import Bus, EventKey


def on_event(
    event_key: EventKey,
    priority: int = 100,
) -> Callable:
    """
    Decorator to register an event listener on the shared bus.

    Example:
        ```python
        @on_event(RelationSynced, priority=10)
        async def _refresh_tag_counters(event: RelationSynced) -> None:
            if event.relation == "tags":
                ...
        ```
    """

    def decorator(func: Callable) -> Callable:
        get_service(Bus).register(event_key, func, priority=priority)
        return func

    return decorator


__all__ = [
    "on_event",
]
