"""Type identifiers: class objects or dotted import paths naming the same key."""

from __future__ import annotations

import importlib
from typing import Any, TypeAlias

from serviceweave.exceptions import InvalidReflectionError, UnreflectableClassError
from serviceweave.type_checks import is_runtime_class

Identifier: TypeAlias = "type[Any] | str"
"""A class, or the ``"module.QualifiedName"`` import path of a class."""


def identifier_name(identifier: Identifier) -> str:
    """Return the dotted name of an identifier, used in logs and error messages."""
    if is_runtime_class(identifier):
        return f"{identifier.__module__}.{identifier.__qualname__}"
    return identifier.strip()


def identifier_key(identifier: Identifier) -> Identifier:
    """Return the key an identifier is stored under in every injector table.

    Classes are their own key, so two classes sharing a qualified name (made
    in a factory function, or with ``type()``) never share table entries. A
    dotted path naming an importable class is keyed by that class. Any other
    string is a virtual identifier keyed by its stripped text.

    Args:
        identifier: A class or a dotted import path.

    """
    if is_runtime_class(identifier):
        return identifier
    path = identifier.strip()
    try:
        return load_class(path)
    except (UnreflectableClassError, InvalidReflectionError):
        return path


def is_identifier(value: object) -> bool:
    return is_runtime_class(value) or (isinstance(value, str) and bool(value.strip()))


def load_class(identifier: Identifier) -> type[Any]:
    """Return the class named by an identifier, importing dotted paths on demand.

    The longest importable module prefix is imported first, the remaining
    segments are looked up as attributes so nested classes resolve too.

    Raises:
        UnreflectableClassError: If no module prefix can be imported or an
            attribute along the path does not exist.
        InvalidReflectionError: If the path names something that is not a class.

    """
    if is_runtime_class(identifier):
        return identifier

    key = identifier_name(identifier)
    parts = key.split(".")
    module = None
    error: BaseException | None = None
    for split_at in range(len(parts) - 1, 0, -1):
        try:
            module = importlib.import_module(".".join(parts[:split_at]))
        except ImportError as exc:
            error = error or exc
            continue
        attributes = parts[split_at:]
        break
    if module is None:
        raise UnreflectableClassError(key, error)

    target: Any = module
    for attribute in attributes:
        try:
            target = getattr(target, attribute)
        except AttributeError as exc:
            raise UnreflectableClassError(key, exc) from exc

    if not is_runtime_class(target):
        raise InvalidReflectionError(key, target)
    return target


__all__ = ["Identifier", "identifier_key", "identifier_name", "is_identifier", "load_class"]
