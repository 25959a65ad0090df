from serviceweave.capabilities import (
    Activateable,
    Conditional,
    Deactivateable,
    Delayed,
    HasDependencies,
    Registerable,
    Service,
)
from serviceweave.config import OrchestratorConfig
from serviceweave.container import LazyService, ServiceContainer
from serviceweave.exceptions import (
    CircularDependencyError,
    CircularReferenceError,
    ConfigurationError,
    InstantiationError,
    InstantiationFailure,
    InvalidDelegateError,
    InvalidReflectionError,
    InvalidServiceError,
    MissingServiceError,
    ServiceError,
    ServiceNotFoundError,
    ServiceWeaveError,
    UninstantiatedSharedInstanceError,
    UnreflectableClassError,
    UnresolvedArgumentError,
    UnresolvedInterfaceError,
)
from serviceweave.host import EventHost, Host
from serviceweave.injection_chain import InjectionChain
from serviceweave.injector import GLOBAL_ARGUMENTS, Injector
from serviceweave.instantiator import ConstructorInstantiator, Instantiator
from serviceweave.orchestrator import ServiceOrchestrator, ServiceState
from serviceweave.references import Factory, Value

__all__ = [
    "GLOBAL_ARGUMENTS",
    "Activateable",
    "CircularDependencyError",
    "CircularReferenceError",
    "Conditional",
    "ConfigurationError",
    "ConstructorInstantiator",
    "Deactivateable",
    "Delayed",
    "EventHost",
    "Factory",
    "HasDependencies",
    "Host",
    "InjectionChain",
    "Injector",
    "InstantiationError",
    "InstantiationFailure",
    "Instantiator",
    "InvalidDelegateError",
    "InvalidReflectionError",
    "InvalidServiceError",
    "LazyService",
    "MissingServiceError",
    "OrchestratorConfig",
    "Registerable",
    "Service",
    "ServiceContainer",
    "ServiceError",
    "ServiceNotFoundError",
    "ServiceOrchestrator",
    "ServiceState",
    "ServiceWeaveError",
    "UninstantiatedSharedInstanceError",
    "UnreflectableClassError",
    "UnresolvedArgumentError",
    "UnresolvedInterfaceError",
    "Value",
]
