from __future__ import annotations

from pydantic_settings import BaseSettings

from serviceweave.type_checks import is_runtime_class


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether a class is a pydantic-settings model.

    The injector fills their fields by name from argument bindings and leaves
    unbound fields to the settings sources, such as the environment.

    Args:
        candidate: Object to test.

    Returns:
        ``True`` when ``candidate`` is a runtime class subclassing
        ``BaseSettings``; otherwise ``False``.

    """
    if not is_runtime_class(candidate):
        return False
    try:
        return issubclass(candidate, BaseSettings)
    except TypeError:
        return False


def get_settings_fields(settings_class: type[BaseSettings]) -> tuple[str, ...]:
    """Return the field names a settings class accepts as keyword arguments."""
    return tuple(field.alias or name for name, field in settings_class.model_fields.items())


__all__ = ["get_settings_fields", "is_pydantic_settings_subclass"]
