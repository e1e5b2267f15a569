# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import inspect
import logging

from typing import Callable, Union

from fastresource.bus.base import BaseEvent
from fastresource.dependencies import Token


logger = logging.getLogger("fastresource.events")


EventKey = Union[type[BaseEvent], Token[BaseEvent]]


class Bus:
    """
    Event bus for the resource layer.

    Listeners run sequentially by ascending priority. A failing listener is
    logged and never interrupts the operation which dispatched the event.
    """

    def __init__(self):
        self._listeners: dict[Token, list[tuple[int, Callable]]] = {}

    def register(self, event_key: EventKey, handler: Callable, priority: int = 100) -> None:
        normalized_key = self._normalize_key(event_key)
        listeners = self._listeners.setdefault(normalized_key, [])
        listeners.append((priority, handler))
        listeners.sort(key=lambda item: item[0])

        logger.debug(f"Registered listener for {normalized_key} with priority {priority}: {handler.__name__}")

    def unregister(self, event_key: EventKey, handler: Callable) -> None:
        normalized_key = self._normalize_key(event_key)
        remaining = [(p, h) for p, h in self._listeners.get(normalized_key, []) if h != handler]

        if remaining:
            self._listeners[normalized_key] = remaining
        else:
            self._listeners.pop(normalized_key, None)

    def has_listeners(self, event_key: EventKey) -> bool:
        return bool(self._listeners.get(self._normalize_key(event_key)))

    def clear(self, event_key: EventKey | None = None) -> None:
        if event_key is None:
            self._listeners.clear()
        else:
            self._listeners.pop(self._normalize_key(event_key), None)

    async def dispatch(self, event: BaseEvent, event_key: EventKey | None = None) -> int:
        """
        Dispatch the event and return the number of listeners which handled it without error.
        """
        normalized_key = self._normalize_key(event_key or type(event))
        handled = 0

        for priority, handler in list(self._listeners.get(normalized_key, [])):
            try:
                result = handler(event)

                if inspect.isawaitable(result):
                    await result

                handled += 1
            except Exception as e:
                logger.error(
                    f"Error in event handler {handler.__name__} (priority {priority}) for {normalized_key}: {e}",
                    exc_info=True,
                )

        return handled

    def _normalize_key(self, key: EventKey) -> Token:
        if isinstance(key, Token):
            return key

        if isinstance(key, type) and issubclass(key, BaseEvent):
            return Token(key)

        raise TypeError(f"Event key must be a BaseEvent subclass or Token[BaseEvent], got {type(key)}")


__all__ = [
    "Bus",
    "EventKey",
]
