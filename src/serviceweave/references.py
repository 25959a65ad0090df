from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from serviceweave.container import ServiceContainer
    from serviceweave.injector import Injector

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Value(Generic[T]):
    """Configuration value used as-is."""

    value: T


@dataclass(frozen=True, slots=True)
class Factory(Generic[T]):
    """Configuration value computed when the orchestrator reads it.

    The function receives the injector and the service container, so a table
    entry can depend on configuration that only exists at runtime.
    """

    function: Callable[[Injector, ServiceContainer], T]


def maybe_resolve(value: Any, injector: Injector, container: ServiceContainer) -> Any:
    """Unwrap ``Value`` and call ``Factory`` entries, return anything else unchanged.

    Plain callables are returned untouched: classes are callables too, and
    only an explicit ``Factory`` is ever invoked.
    """
    if isinstance(value, Factory):
        return value.function(injector, container)
    if isinstance(value, Value):
        return value.value
    return value


__all__ = ["Factory", "Value", "maybe_resolve"]
