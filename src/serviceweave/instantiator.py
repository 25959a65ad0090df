from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Instantiator(Protocol):
    """Strategy used by the injector to call a constructor.

    Swap it to build proxies or to wrap every constructed object.
    """

    def instantiate(self, cls: type[Any], dependencies: Mapping[str, Any]) -> Any: ...


class ConstructorInstantiator:
    """Call the class with its resolved dependencies as keyword arguments."""

    def instantiate(self, cls: type[Any], dependencies: Mapping[str, Any]) -> Any:
        return cls(**dependencies)


__all__ = ["ConstructorInstantiator", "Instantiator"]
