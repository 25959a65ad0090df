from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any


def _stringify(value: Any) -> str:
    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    if isinstance(value, str):
        return value
    return f"<{type(value).__name__}> {value!r}"


class ServiceWeaveError(Exception):
    """Represent a base class for all serviceweave failures.

    Catch this type when you want to handle any error raised by the injector,
    the container or the orchestrator without matching each concrete class.
    """


class ConfigurationError(ServiceWeaveError):
    """Signal that an injector configuration table has an unexpected shape.

    Raised by ``ServiceOrchestrator`` while configuring its injector, after
    the tables went through the host filters.
    """

    def __init__(self, table: str, value: Any, expected: str = "a mapping") -> None:
        self.table = table
        self.value = value
        super().__init__(
            f"The {table} configuration {_stringify(value)!r} is not {expected} "
            "and cannot be registered.",
        )


class ServiceError(ServiceWeaveError):
    """Signal an invalid service declaration or lookup."""


class InvalidServiceError(ServiceError):
    """Signal that a service identifier, reference or instance is not valid."""

    def __init__(self, message: str, value: Any = None) -> None:
        self.value = value
        super().__init__(message)

    @classmethod
    def from_invalid_identifier(cls, identifier: Any) -> InvalidServiceError:
        return cls(
            f"The identifier {_stringify(identifier)!r} is not a string and cannot be "
            "registered as a service.",
            identifier,
        )

    @classmethod
    def from_invalid_class(cls, reference: Any) -> InvalidServiceError:
        return cls(
            f"The reference {_stringify(reference)!r} is not a class or an import path "
            "and cannot be registered as a service.",
            reference,
        )

    @classmethod
    def from_service(cls, service: Any) -> InvalidServiceError:
        return cls(
            f"The service {_stringify(type(service))!r} is not recognized and cannot be "
            "registered.",
            service,
        )

    @classmethod
    def from_invalid_delegation(cls, identifier: str, delegation: Any) -> InvalidServiceError:
        return cls(
            f"The delegation {_stringify(delegation)!r} for {identifier!r} is not callable.",
            delegation,
        )


class ServiceNotFoundError(ServiceError):
    """Signal a container lookup of an id that was never stored."""

    def __init__(self, service_id: str) -> None:
        self.service_id = service_id
        super().__init__(
            f"The service ID {service_id!r} is not recognized and cannot be retrieved.",
        )


class MissingServiceError(ServiceError):
    """Signal a dependency on a service id absent from the service table."""

    def __init__(self, service_id: str, dependent_id: str) -> None:
        self.service_id = service_id
        self.dependent_id = dependent_id
        super().__init__(
            f"The service {dependent_id!r} depends on {service_id!r}, which is not "
            "declared in the service table.",
        )


class CircularDependencyError(ServiceError):
    """Signal a cycle between declared service dependencies."""

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(
            "Circular dependency detected between services: " + " -> ".join(self.cycle),
        )


class InstantiationFailure(str, Enum):
    """Reason attached to every ``InstantiationError``."""

    CIRCULAR_REFERENCE = "circular_reference"
    UNRESOLVED_INTERFACE = "unresolved_interface"
    UNREFLECTABLE_CLASS = "unreflectable_class"
    UNRESOLVED_ARGUMENT = "unresolved_argument"
    UNINSTANTIATED_SHARED_INSTANCE = "uninstantiated_shared_instance"
    INVALID_DELEGATE = "invalid_delegate"
    INVALID_REFLECTION = "invalid_reflection"


class InstantiationError(ServiceWeaveError):
    """Signal that the injector could not make an instance.

    Only ``Injector.make`` raises this family. The ``reason`` attribute tells
    which step failed; ``identifier`` is the type identifier being built.
    """

    reason: InstantiationFailure

    def __init__(self, identifier: str, message: str) -> None:
        self.identifier = identifier
        super().__init__(message)


class CircularReferenceError(InstantiationError):
    reason = InstantiationFailure.CIRCULAR_REFERENCE

    def __init__(self, identifier: str, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        message = (
            "Circular reference detected while trying to resolve the interface or class "
            f"{identifier!r}."
        )
        if self.chain:
            message += " Injection chain: " + " <- ".join(self.chain)
        super().__init__(identifier, message)


class UnresolvedInterfaceError(InstantiationError):
    reason = InstantiationFailure.UNRESOLVED_INTERFACE

    def __init__(self, identifier: str) -> None:
        super().__init__(
            identifier,
            f"Could not resolve the interface {identifier!r} to an instantiable class, "
            "probably forgot to bind an implementation.",
        )


class UnreflectableClassError(InstantiationError):
    reason = InstantiationFailure.UNREFLECTABLE_CLASS

    def __init__(self, identifier: str, error: BaseException | None = None) -> None:
        self.error = error
        message = f"Could not reflect on the interface or class {identifier!r}"
        if error is not None:
            message += f": {error}"
        super().__init__(identifier, message + ".")


class UnresolvedArgumentError(InstantiationError):
    reason = InstantiationFailure.UNRESOLVED_ARGUMENT

    def __init__(self, identifier: str, argument: str) -> None:
        self.argument = argument
        super().__init__(
            identifier,
            f"Could not resolve the argument {argument!r} while trying to instantiate "
            f"the class {identifier!r}.",
        )


class UninstantiatedSharedInstanceError(InstantiationError):
    reason = InstantiationFailure.UNINSTANTIATED_SHARED_INSTANCE

    def __init__(self, identifier: str) -> None:
        super().__init__(
            identifier,
            f"Could not retrieve the shared instance for {identifier!r} as it was not "
            "instantiated yet.",
        )


class InvalidDelegateError(InstantiationError):
    reason = InstantiationFailure.INVALID_DELEGATE

    def __init__(self, identifier: str, result: Any = None) -> None:
        self.result = result
        super().__init__(
            identifier,
            f"The delegate for {identifier!r} returned {_stringify(result)!r} instead of "
            "an instance.",
        )


class InvalidReflectionError(InstantiationError):
    reason = InstantiationFailure.INVALID_REFLECTION

    def __init__(self, identifier: str, reflected: Any) -> None:
        self.reflected = reflected
        super().__init__(
            identifier,
            f"Could not create a reflection for {identifier!r}, it resolved to "
            f"{_stringify(reflected)!r}.",
        )
