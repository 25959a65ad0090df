from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from serviceweave.exceptions import ServiceNotFoundError


class LazyService:
    """Container entry built on first retrieval instead of at registration."""

    __slots__ = ("_factory",)

    def __init__(self, factory: Callable[[], Any]) -> None:
        self._factory = factory

    def instantiate(self) -> Any:
        return self._factory()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._factory!r})"


class ServiceContainer:
    """Ordered mapping of service ids to service instances.

    Entries keep their insertion order; replacing an existing id keeps its
    position. ``LazyService`` entries are built on first ``get()`` or during
    iteration and replaced in place by the built instance.
    """

    __slots__ = ("_services",)

    def __init__(self) -> None:
        self._services: dict[str, Any] = {}

    def put(self, service_id: str, service: Any) -> None:
        self._services[service_id] = service

    def has(self, service_id: str) -> bool:
        return service_id in self._services

    def get(self, service_id: str) -> Any:
        """Get the service stored under an id.

        Raises:
            ServiceNotFoundError: If no service was stored under ``service_id``.

        """
        try:
            service = self._services[service_id]
        except KeyError:
            raise ServiceNotFoundError(service_id) from None

        if isinstance(service, LazyService):
            service = service.instantiate()
            self._services[service_id] = service
        return service

    def count(self) -> int:
        return len(self._services)

    def ids(self) -> list[str]:
        return list(self._services)

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._services

    def __len__(self) -> int:
        return len(self._services)

    def __iter__(self) -> Iterator[Any]:
        for service_id in list(self._services):
            yield self.get(service_id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.ids()!r})"
