"""Capabilities a service class declares by inheriting from them.

The orchestrator dispatches on these base classes only, a method of the same
name on an unrelated class is never called.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence


class Service(ABC):  # noqa: B024
    """Marker base class of everything the orchestrator stores."""


class Conditional(ABC):
    @classmethod
    @abstractmethod
    def is_needed(cls) -> bool:
        """Return whether the service should be instantiated at all.

        Called each time the service is processed: during the registration
        pass, and again from the event callback for services that wait on a
        host event. Keep it free of side effects.
        """


class HasDependencies(ABC):
    @classmethod
    @abstractmethod
    def get_dependencies(cls) -> Sequence[str]:
        """Return the ids of services that must be registered first."""


class Delayed(ABC):
    @classmethod
    @abstractmethod
    def get_registration_event(cls) -> str:
        """Return the host event the registration waits for."""


class Registerable(ABC):
    @abstractmethod
    def register(self) -> None:
        """Hook the service into the host, called once after it was stored."""


class Activateable(ABC):
    @abstractmethod
    def activate(self) -> None: ...


class Deactivateable(ABC):
    @abstractmethod
    def deactivate(self) -> None: ...


__all__ = [
    "Activateable",
    "Conditional",
    "Deactivateable",
    "Delayed",
    "HasDependencies",
    "Registerable",
    "Service",
]
