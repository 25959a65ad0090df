from __future__ import annotations

import graphlib
import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from enum import Enum
from functools import partial
from typing import Any

from serviceweave.capabilities import (
    Activateable,
    Conditional,
    Deactivateable,
    Delayed,
    HasDependencies,
    Registerable,
    Service,
)
from serviceweave.config import (
    ARGUMENTS_FILTER,
    BINDINGS_FILTER,
    DELEGATIONS_FILTER,
    SERVICES_FILTER,
    SHARED_INSTANCES_FILTER,
    OrchestratorConfig,
)
from serviceweave.container import LazyService, ServiceContainer
from serviceweave.exceptions import (
    CircularDependencyError,
    ConfigurationError,
    InvalidServiceError,
    MissingServiceError,
)
from serviceweave.host import EventHost, Host
from serviceweave.identifiers import Identifier, identifier_name, is_identifier, load_class
from serviceweave.injector import GLOBAL_ARGUMENTS, Injector
from serviceweave.references import maybe_resolve

logger = logging.getLogger(__name__)


class ServiceState(str, Enum):
    """Where a declared service is in the registration lifecycle."""

    PENDING = "pending"
    """Declared, not looked at yet in the current pass."""

    SKIPPED = "skipped"
    """Not needed, or depends on a service that is not needed. Never built."""

    DEFERRED = "deferred"
    """Moved to the end of the pass until its dependencies were attempted."""

    WAITING_ON_EVENT = "waiting_on_event"
    """Waiting for a host event, its own or the one of a dependency."""

    INSTANTIATED = "instantiated"
    """Built by the injector, registration hook not run yet."""

    REGISTERED = "registered"
    """Stored in the container and registered with the host."""


_SETTLED = frozenset({ServiceState.SKIPPED, ServiceState.INSTANTIATED, ServiceState.REGISTERED})
_UNATTEMPTED = frozenset({ServiceState.PENDING, ServiceState.DEFERRED})


class ServiceOrchestrator:
    """Build the services of an application and register them with its host.

    The orchestrator owns an injector configured from declarative tables
    (bindings, argument bindings, shared instances and delegations) and a
    container filled by ``register_services()`` from the service table.
    Each table goes through a host filter first, so outside code can add or
    replace entries.

    Tables can be passed to the constructor, or provided by overriding the
    ``get_*`` methods in a subclass:

        class Shop(ServiceOrchestrator):
            def get_services(self):
                return {"cart": Cart, "checkout": Checkout}

    """

    def __init__(
        self,
        host: Host | None = None,
        injector: Injector | None = None,
        container: ServiceContainer | None = None,
        config: OrchestratorConfig | None = None,
        *,
        services: Mapping[Any, Any] | None = None,
        bindings: Mapping[Any, Any] | None = None,
        arguments: Mapping[Any, Any] | None = None,
        shared_instances: Iterable[Any] | None = None,
        delegations: Mapping[Any, Any] | None = None,
    ) -> None:
        self.host: Host = host if host is not None else EventHost()
        self.config = config if config is not None else OrchestratorConfig()
        self.container = container if container is not None else ServiceContainer()

        self._services = dict(services or {})
        self._bindings = dict(bindings or {})
        self._arguments = dict(arguments or {})
        self._shared_instances = list(shared_instances or [])
        self._delegations = dict(delegations or {})

        self._classes: dict[str, type[Any]] = {}
        self._states: dict[str, ServiceState] = {}
        self._waiting: defaultdict[str, list[str]] = defaultdict(list)
        self._subscribed: set[str] = set()
        self._queue: list[str] | None = None

        self.injector = injector if injector is not None else Injector()
        self.injector = self.configure_injector(self.injector)

    # Tables, meant to be overridden by subclasses.

    def get_services(self) -> Mapping[Any, Any]:
        """Get the service table, ids mapped to classes, import paths or references."""
        return dict(self._services)

    def get_bindings(self) -> Mapping[Any, Any]:
        return dict(self._bindings)

    def get_arguments(self) -> Mapping[Any, Any]:
        """Get argument bindings, identifiers mapped to ``{name: value}`` mappings."""
        return dict(self._arguments)

    def get_shared_instances(self) -> Iterable[Any]:
        return list(self._shared_instances)

    def get_delegations(self) -> Mapping[Any, Any]:
        return dict(self._delegations)

    # Lifecycle

    def register(self) -> None:
        """Run the registration pass once the host fires the registration event."""
        self.host.subscribe(self.config.registration_event, self.register_services)

    def activate(self) -> None:
        self.register_services()
        for service in self.container:
            if isinstance(service, Activateable):
                service.activate()

    def deactivate(self) -> None:
        self.register_services()
        for service in self.container:
            if isinstance(service, Deactivateable):
                service.deactivate()

    def get_container(self) -> ServiceContainer:
        return self.container

    def state_of(self, service_id: str) -> ServiceState:
        """Get the lifecycle state of a declared service.

        Raises:
            KeyError: If ``service_id`` was not declared or no pass ran yet.

        """
        return self._states[self.config.service_id(service_id)]

    def register_services(self) -> None:
        """Instantiate the declared services and register them with the host.

        Safe to call more than once: the pass only runs while the container is
        empty. Services delayed until a host event, directly or through one of
        their dependencies, are registered from that event's callback.

        Raises:
            ConfigurationError: If the filtered service table is not a mapping.
            InvalidServiceError: If an id or a reference is invalid, or a built
                object is not a ``Service``.
            MissingServiceError: If a dependency is not in the service table.
            CircularDependencyError: If services depend on each other in a cycle.
            InstantiationError: If the injector cannot build a service.

        """
        if self.container.count() > 0:
            return

        self.container.put(self.config.injector_id, self.injector)

        services = self._filter(SERVICES_FILTER, self.get_services())
        if not isinstance(services, Mapping):
            raise ConfigurationError(SERVICES_FILTER, services)
        self._classes = self._read_services(services)
        self._validate_dependencies()

        self._states = dict.fromkeys(self._classes, ServiceState.PENDING)
        self._queue = list(self._classes)
        try:
            cursor = 0
            while cursor < len(self._queue):
                self._process(self._queue[cursor])
                cursor += 1
        finally:
            self._queue = None

        logger.info(
            "Registered %d of %d services, %d waiting on events",
            sum(state is ServiceState.REGISTERED for state in self._states.values()),
            len(self._states),
            sum(state is ServiceState.WAITING_ON_EVENT for state in self._states.values()),
        )

    # Injector configuration

    def configure_injector(self, injector: Injector) -> Injector:
        """Apply the bindings, arguments, shared instances and delegations tables.

        Raises:
            ConfigurationError: If a table does not have the expected shape.
            InvalidServiceError: If an identifier is invalid or a delegation is
                not callable.

        """
        bindings = self._filter(BINDINGS_FILTER, self.get_bindings())
        arguments = self._filter(ARGUMENTS_FILTER, self.get_arguments())
        shared_instances = self._filter(SHARED_INSTANCES_FILTER, self.get_shared_instances())
        delegations = self._filter(DELEGATIONS_FILTER, self.get_delegations())

        if not isinstance(bindings, Mapping):
            raise ConfigurationError(BINDINGS_FILTER, bindings)
        if not isinstance(arguments, Mapping):
            raise ConfigurationError(ARGUMENTS_FILTER, arguments)
        if isinstance(shared_instances, (str, Mapping)) or not isinstance(shared_instances, Iterable):
            raise ConfigurationError(SHARED_INSTANCES_FILTER, shared_instances, "a list")
        if not isinstance(delegations, Mapping):
            raise ConfigurationError(DELEGATIONS_FILTER, delegations)

        for from_, to in bindings.items():
            injector.bind(
                self._resolve_identifier(from_, injector),
                self._resolve_identifier(to, injector),
            )

        for identifier, argument_map in arguments.items():
            identifier = maybe_resolve(identifier, injector, self.container)
            if identifier != GLOBAL_ARGUMENTS and not is_identifier(identifier):
                raise InvalidServiceError.from_invalid_identifier(identifier)
            if not isinstance(argument_map, Mapping):
                raise ConfigurationError(f"{ARGUMENTS_FILTER} of {identifier!r}", argument_map)
            # Values are kept as-is, a callable may be the argument itself
            for name, value in argument_map.items():
                name = maybe_resolve(name, injector, self.container)
                if not isinstance(name, str):
                    raise ConfigurationError(f"argument name of {identifier!r}", name, "a string")
                injector.bind_argument(identifier, name, value)

        for shared_instance in shared_instances:
            injector.share(self._resolve_identifier(shared_instance, injector))

        for identifier, delegation in delegations.items():
            identifier = self._resolve_identifier(identifier, injector)
            if not callable(delegation):
                raise InvalidServiceError.from_invalid_delegation(
                    identifier_name(identifier),
                    delegation,
                )
            injector.delegate(identifier, delegation)

        return injector

    def _filter(self, table: str, value: Any) -> Any:
        if not self.config.enable_filters:
            return value
        return self.host.apply(self.config.filter_name(table), value)

    def _resolve_identifier(self, value: Any, injector: Injector) -> Identifier:
        value = maybe_resolve(value, injector, self.container)
        if not is_identifier(value):
            raise InvalidServiceError.from_invalid_identifier(value)
        return value

    # Registration pass

    def _read_services(self, services: Mapping[Any, Any]) -> dict[str, type[Any]]:
        classes: dict[str, type[Any]] = {}
        for service_id, reference in services.items():
            service_id = maybe_resolve(service_id, self.injector, self.container)
            reference = maybe_resolve(reference, self.injector, self.container)

            if not isinstance(service_id, str):
                raise InvalidServiceError.from_invalid_identifier(service_id)
            if not is_identifier(reference):
                raise InvalidServiceError.from_invalid_class(reference)

            classes[self.config.service_id(service_id)] = load_class(reference)
        return classes

    def _dependencies_of(self, service_id: str) -> list[str]:
        cls = self._classes[service_id]
        if not issubclass(cls, HasDependencies):
            return []
        return [self.config.service_id(dependency) for dependency in cls.get_dependencies()]

    def _validate_dependencies(self) -> None:
        graph: dict[str, list[str]] = {}
        for service_id, cls in self._classes.items():
            dependencies = self._dependencies_of(service_id)
            if not issubclass(cls, Conditional):
                self._check_declared(service_id, dependencies)
            graph[service_id] = [d for d in dependencies if d in self._classes]

        try:
            graphlib.TopologicalSorter(graph).prepare()
        except graphlib.CycleError as e:
            raise CircularDependencyError(list(reversed(e.args[1]))) from e

    def _check_declared(self, service_id: str, dependencies: list[str]) -> None:
        for dependency in dependencies:
            if dependency not in self._classes and dependency != self.config.injector_id:
                raise MissingServiceError(dependency, service_id)

    def _process(self, service_id: str) -> None:
        if self._states[service_id] in _SETTLED:
            return

        cls = self._classes[service_id]

        if issubclass(cls, Conditional) and not cls.is_needed():
            logger.debug("Skipping %s, not needed", service_id)
            self._skip(service_id)
            return

        dependencies = self._dependencies_of(service_id)
        if issubclass(cls, Conditional):
            # Checked once the service is known to be needed
            self._check_declared(service_id, dependencies)

        missing = [d for d in dependencies if not self.container.has(d)]
        if missing:
            self._wait_for_dependencies(service_id, missing)
            return

        if issubclass(cls, Delayed):
            event = cls.get_registration_event()
            if not self.host.has_fired(event):
                self._wait_for_event(service_id, event)
                return

        self._register_service(service_id, cls)

    def _wait_for_dependencies(self, service_id: str, missing: list[str]) -> None:
        skipped = [d for d in missing if self._states[d] is ServiceState.SKIPPED]
        if skipped:
            logger.warning("Skipping %s, its dependency %s is not needed", service_id, skipped[0])
            self._skip(service_id)
            return

        unattempted = [d for d in missing if self._states[d] in _UNATTEMPTED]
        if unattempted and self._queue is not None:
            logger.debug("Deferring %s until %s is attempted", service_id, unattempted[0])
            self._states[service_id] = ServiceState.DEFERRED
            self._queue.append(service_id)
            return

        logger.debug("Parking %s until %s is registered", service_id, missing[0])
        self._states[service_id] = ServiceState.WAITING_ON_EVENT
        self._waiting[missing[0]].append(service_id)

    def _wait_for_event(self, service_id: str, event: str) -> None:
        logger.debug("Delaying %s until %s fires", service_id, event)
        self._states[service_id] = ServiceState.WAITING_ON_EVENT
        if service_id not in self._subscribed:
            self._subscribed.add(service_id)
            self.host.subscribe(event, partial(self._process, service_id))

    def _skip(self, service_id: str) -> None:
        self._states[service_id] = ServiceState.SKIPPED
        self._release_dependents(service_id)

    def _register_service(self, service_id: str, cls: type[Any]) -> None:
        if self.config.lazy_services and not issubclass(cls, Registerable):
            self.container.put(service_id, LazyService(partial(self._instantiate_service, cls)))
        else:
            service = self._instantiate_service(cls)
            self._states[service_id] = ServiceState.INSTANTIATED
            self.container.put(service_id, service)
            if isinstance(service, Registerable):
                service.register()

        self._states[service_id] = ServiceState.REGISTERED
        logger.debug("Registered %s", service_id)
        self._release_dependents(service_id)

    def _instantiate_service(self, cls: type[Any]) -> Any:
        service = self.injector.make(cls)
        if not isinstance(service, Service):
            raise InvalidServiceError.from_service(service)
        return service

    def _release_dependents(self, service_id: str) -> None:
        for dependent in self._waiting.pop(service_id, []):
            self._process(dependent)


__all__ = ["ServiceOrchestrator", "ServiceState"]
