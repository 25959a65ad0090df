from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar, overload

from typing_extensions import Self

from serviceweave.dependencies import DependenciesExtractor, ParameterInfo
from serviceweave.exceptions import (
    CircularReferenceError,
    InvalidDelegateError,
    InvalidReflectionError,
    UninstantiatedSharedInstanceError,
    UnresolvedArgumentError,
    UnreflectableClassError,
    UnresolvedInterfaceError,
)
from serviceweave.identifiers import Identifier, identifier_key, identifier_name, load_class
from serviceweave.injection_chain import InjectionChain
from serviceweave.instantiator import ConstructorInstantiator, Instantiator
from serviceweave.integrations.pydantic_settings import (
    get_settings_fields,
    is_pydantic_settings_subclass,
)
from serviceweave.type_checks import is_instantiable, is_runtime_class

logger = logging.getLogger(__name__)

T = TypeVar("T")

GLOBAL_ARGUMENTS = "__global__"
"""Argument-binding scope whose values apply to every class."""

Delegate = Callable[[Any], Any]
"""Factory receiving the target class (or its dotted path) and returning an instance."""

_MISSING = object()


class Injector:
    """Build object graphs by autowiring constructor dependencies.

    Bindings map an interface (or class) to the implementation to build.
    Shared identifiers are built once and reused. Delegates replace
    reflective construction altogether. Scalar parameters are filled by name
    from call-site arguments, argument bindings, or their defaults.

    Example:
        injector = Injector()
        injector.bind(Cache, RedisCache).share(RedisCache)
        cache = injector.make(Cache)

    """

    __slots__ = (
        "_argument_mappings",
        "_delegates",
        "_dependencies_extractor",
        "_instantiator",
        "_mappings",
        "_share_settings",
        "_shared_instances",
    )

    def __init__(
        self,
        instantiator: Instantiator | None = None,
        *,
        share_settings: bool = False,
    ) -> None:
        """Create an injector.

        Args:
            instantiator: Strategy calling constructors. Defaults to a plain
                constructor call with keyword arguments.
            share_settings: Cache pydantic-settings classes as shared instances
                without an explicit ``share()``. Off by default, so settings
                classes follow the same sharing rules as any other class.

        """
        self._instantiator = instantiator or ConstructorInstantiator()
        self._share_settings = share_settings
        self._mappings: dict[Identifier, Identifier] = {}
        self._shared_instances: dict[Identifier, Any] = {}
        self._delegates: dict[Identifier, Delegate] = {}
        self._argument_mappings: dict[Identifier, dict[str, Any]] = {GLOBAL_ARGUMENTS: {}}
        self._dependencies_extractor = DependenciesExtractor()

    def bind(self, from_: Identifier, to: Identifier) -> Self:
        """Bind an interface or class to the implementation that provides it.

        The implementation may be an interface itself, as long as the chain of
        bindings ends in an instantiable class when resolved.
        """
        self._mappings[identifier_key(from_)] = to
        return self

    def bind_argument(self, identifier: Identifier, name: str, value: Any) -> Self:
        """Bind a constructor argument of a class to a value.

        Pass ``GLOBAL_ARGUMENTS`` as identifier to bind a value for any class
        that has a parameter of that name.
        """
        key = GLOBAL_ARGUMENTS if identifier == GLOBAL_ARGUMENTS else identifier_key(identifier)
        self._argument_mappings.setdefault(key, {})[name] = value
        return self

    def share(self, identifier: Identifier) -> Self:
        """Reuse the first instance built for an interface or class."""
        self._shared_instances.setdefault(identifier_key(identifier), _MISSING)
        return self

    def delegate(self, identifier: Identifier, delegate: Delegate) -> Self:
        """Delegate the instantiation of an interface or class to a factory."""
        self._delegates[identifier_key(identifier)] = delegate
        return self

    def declare_dependencies(
        self,
        identifier: Identifier,
        dependencies: Mapping[str, Identifier],
    ) -> Self:
        """Declare which identifier to inject for named constructor parameters.

        Useful for untyped constructors, or to inject a narrower type than the
        annotation asks for.
        """
        self._dependencies_extractor.declare(identifier, dependencies)
        return self

    def is_shared(self, identifier: Identifier) -> bool:
        """Return whether an interface or class was marked as shared."""
        return identifier_key(identifier) in self._shared_instances

    def has_shared_instance(self, identifier: Identifier) -> bool:
        return self._shared_instances.get(identifier_key(identifier), _MISSING) is not _MISSING

    @overload
    def make(self, identifier: type[T], arguments: Mapping[str, Any] | None = None) -> T: ...

    @overload
    def make(self, identifier: str, arguments: Mapping[str, Any] | None = None) -> Any: ...

    def make(self, identifier: Identifier, arguments: Mapping[str, Any] | None = None) -> Any:
        """Make an object instance out of an interface or class.

        Args:
            identifier: Interface or class to build, or its dotted import path.
            arguments: Values for named constructor parameters of the
                requested class. They win over every argument binding.

        Returns:
            The instance, or the cached one for shared identifiers.

        Raises:
            InstantiationError: If the object graph cannot be built.

        """
        return self._make(InjectionChain(), identifier, arguments or {})

    def _make(
        self,
        injection_chain: InjectionChain,
        identifier: Identifier,
        arguments: Mapping[str, Any],
    ) -> Any:
        target = self._resolve(injection_chain, identifier)
        key = injection_chain.current_target()

        if self.has_shared_instance(key):
            logger.debug("Reusing shared instance of %s", identifier_name(key))
            return self._get_shared_instance(key)

        delegate = self._delegates.get(key)
        if delegate is not None:
            subject = _load_delegate_subject(target)
            logger.debug("Delegating instantiation of %s", identifier_name(key))
            instance = delegate(subject)
            if instance is None or is_runtime_class(instance):
                raise InvalidDelegateError(identifier_name(key), instance)
        else:
            cls = load_class(target)
            if not is_instantiable(cls):
                raise UnresolvedInterfaceError(identifier_name(key))
            if is_pydantic_settings_subclass(cls):
                parameters = [
                    ParameterInfo(name, None, has_default=True)
                    for name in get_settings_fields(cls)
                ]
            else:
                parameters = list(self._dependencies_extractor.get_dependencies(cls))
            dependencies = {}
            for parameter in parameters:
                value = self._resolve_argument(injection_chain, key, parameter, arguments)
                if value is not _MISSING:
                    dependencies[parameter.name] = value
            logger.debug(
                "Instantiating %s with %s",
                identifier_name(key),
                sorted(dependencies),
            )
            instance = self._instantiator.instantiate(cls, dependencies)

        if key in self._shared_instances or self._shares_settings(key):
            self._shared_instances[key] = instance

        return instance

    def _resolve(self, injection_chain: InjectionChain, identifier: Identifier) -> Identifier:
        """Follow bindings until an unbound identifier is reached."""
        while True:
            key = identifier_key(identifier)
            if injection_chain.has_resolution(key):
                raise CircularReferenceError(identifier_name(key), injection_chain.chain)
            injection_chain.add_resolution(key)

            bound = self._mappings.get(key)
            if bound is None:
                injection_chain.add_to_chain(key)
                return identifier
            logger.debug(
                "Following binding %s -> %s",
                identifier_name(key),
                identifier_name(bound),
            )
            identifier = bound

    def _resolve_argument(
        self,
        injection_chain: InjectionChain,
        key: Identifier,
        parameter: ParameterInfo,
        arguments: Mapping[str, Any],
    ) -> Any:
        if parameter.name in arguments:
            return arguments[parameter.name]

        if parameter.dependency is None:
            return self._resolve_argument_by_name(key, parameter)

        return self._make(injection_chain.branch(), parameter.dependency, {})

    def _resolve_argument_by_name(self, key: Identifier, parameter: ParameterInfo) -> Any:
        name = parameter.name

        class_arguments = self._argument_mappings.get(key, {})
        if name in class_arguments:
            return class_arguments[name]

        global_arguments = self._argument_mappings[GLOBAL_ARGUMENTS]
        if name in global_arguments:
            return global_arguments[name]

        if parameter.has_default:
            # Left out so the constructor applies its own default
            return _MISSING

        raise UnresolvedArgumentError(identifier_name(key), name)

    def _get_shared_instance(self, key: Identifier) -> Any:
        instance = self._shared_instances.get(key, _MISSING)
        if instance is _MISSING:
            raise UninstantiatedSharedInstanceError(identifier_name(key))
        return instance

    def _shares_settings(self, target: Identifier) -> bool:
        return (
            self._share_settings
            and is_runtime_class(target)
            and is_pydantic_settings_subclass(target)
        )


def _load_delegate_subject(target: Identifier) -> Any:
    # Delegated identifiers may be virtual names with no importable class
    try:
        return load_class(target)
    except (UnreflectableClassError, InvalidReflectionError):
        return identifier_name(target)


__all__ = ["GLOBAL_ARGUMENTS", "Delegate", "Injector"]
