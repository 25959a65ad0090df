from __future__ import annotations

import inspect
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, get_type_hints

from serviceweave.exceptions import UnreflectableClassError
from serviceweave.identifiers import Identifier, identifier_key, identifier_name
from serviceweave.type_checks import is_builtin_annotation

_SKIPPED_KINDS = frozenset({inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD})


@dataclass(frozen=True, slots=True)
class ParameterInfo:
    """Information about a constructor parameter.

    ``dependency`` is the identifier to autowire, or ``None`` when the value
    has to be found by parameter name.
    """

    name: str
    dependency: Identifier | None
    has_default: bool


class DependenciesExtractor:
    """Extract constructor dependencies from annotations and explicit declarations."""

    def __init__(self) -> None:
        self._declared: dict[Identifier, dict[str, Identifier]] = {}
        self._cache: dict[type[Any], tuple[ParameterInfo, ...]] = {}

    def declare(self, identifier: Identifier, dependencies: Mapping[str, Identifier]) -> None:
        """Declare the identifiers to inject for named constructor parameters.

        Declarations win over the reflected annotations of those parameters.
        """
        key = identifier_key(identifier)
        self._declared.setdefault(key, {}).update(dependencies)
        self._cache = {cls: info for cls, info in self._cache.items() if cls is not key}

    def get_dependencies(self, cls: type[Any]) -> tuple[ParameterInfo, ...]:
        """Get constructor parameters of a class in declaration order.

        Raises:
            UnreflectableClassError: If the signature or the annotations of the
                constructor cannot be evaluated.

        """
        cached = self._cache.get(cls)
        if cached is not None:
            return cached

        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError) as e:
            raise UnreflectableClassError(identifier_name(cls), e) from e

        parameters = [p for p in signature.parameters.values() if p.kind not in _SKIPPED_KINDS]
        declared = self._declared.get(cls, {})
        hints: dict[str, Any] = {}
        if any(p.name not in declared for p in parameters):
            try:
                hints = get_type_hints(cls.__init__)
            except (TypeError, NameError) as e:
                raise UnreflectableClassError(identifier_name(cls), e) from e

        result = tuple(
            self._get_parameter_info(cls, parameter, declared, hints) for parameter in parameters
        )
        self._cache[cls] = result
        return result

    def _get_parameter_info(
        self,
        cls: type[Any],
        parameter: inspect.Parameter,
        declared: Mapping[str, Identifier],
        hints: Mapping[str, Any],
    ) -> ParameterInfo:
        has_default = parameter.default is not inspect.Parameter.empty

        if parameter.name in declared:
            return ParameterInfo(parameter.name, declared[parameter.name], has_default)

        annotation = hints.get(parameter.name, parameter.annotation)
        if isinstance(annotation, str):
            # Unevaluated forward reference left by inspect.signature
            raise UnreflectableClassError(
                identifier_name(cls),
                NameError(f"annotation {annotation!r} of {parameter.name!r} is not defined"),
            )
        dependency = None if is_builtin_annotation(annotation) else annotation
        return ParameterInfo(parameter.name, dependency, has_default)
