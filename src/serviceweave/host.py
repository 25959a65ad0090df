from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Host(Protocol):
    """Event-driven application the orchestrator registers services against."""

    def subscribe(self, event: str, callback: Callable[[], Any]) -> None:
        """Run ``callback`` without arguments when ``event`` fires."""

    def has_fired(self, event: str) -> bool:
        """Return whether ``event`` fired at least once."""

    def apply(self, name: str, value: Any) -> Any:
        """Pass ``value`` through the filters registered under ``name``."""


class EventHost:
    """In-process host with named events and filters.

    Firing an event marks it as fired before its callbacks run, so a callback
    checking ``has_fired`` for the event being fired sees ``True``. Callbacks
    subscribed while an event fires run the next time it fires.
    """

    def __init__(self) -> None:
        self._subscribers: defaultdict[str, list[Callable[[], Any]]] = defaultdict(list)
        self._filters: defaultdict[str, list[Callable[[Any], Any]]] = defaultdict(list)
        self._fired: set[str] = set()

    def subscribe(self, event: str, callback: Callable[[], Any]) -> None:
        self._subscribers[event].append(callback)

    def has_fired(self, event: str) -> bool:
        return event in self._fired

    def fire(self, event: str) -> None:
        self._fired.add(event)
        callbacks = list(self._subscribers[event])
        logger.debug("Firing %s for %d callbacks", event, len(callbacks))
        for callback in callbacks:
            callback()

    def add_filter(self, name: str, function: Callable[[Any], Any]) -> None:
        self._filters[name].append(function)

    def apply(self, name: str, value: Any) -> Any:
        for function in self._filters.get(name, ()):
            value = function(value)
        return value

    def subscribers(self, event: str) -> list[Callable[[], Any]]:
        return list(self._subscribers.get(event, ()))


__all__ = ["EventHost", "Host"]
