from __future__ import annotations

import inspect
import types
from typing import Any, TypeGuard

BUILTIN_TYPES: frozenset[type[Any]] = frozenset(
    {
        bool,
        bytes,
        complex,
        dict,
        float,
        frozenset,
        int,
        list,
        set,
        str,
        tuple,
    },
)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_builtin_annotation(annotation: object) -> bool:
    """Return true when a parameter annotation must be resolved by parameter name.

    Untyped parameters, builtins and typing constructs (``Optional[int]``,
    ``list[str]``, ``Literal[...]``) are never autowired.
    """
    if annotation is inspect.Parameter.empty:
        return True
    if not is_runtime_class(annotation):
        return True
    return annotation in BUILTIN_TYPES or annotation.__module__ == "builtins"


def is_instantiable(candidate: type[Any]) -> bool:
    """Return false for abstract classes and protocols."""
    if inspect.isabstract(candidate):
        return False
    return not getattr(candidate, "_is_protocol", False)


__all__ = ["BUILTIN_TYPES", "is_builtin_annotation", "is_instantiable", "is_runtime_class"]
