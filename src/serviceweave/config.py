from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICES_FILTER = "services"
BINDINGS_FILTER = "bindings"
ARGUMENTS_FILTER = "arguments"
SHARED_INSTANCES_FILTER = "shared_instances"
DELEGATIONS_FILTER = "delegations"

INJECTOR_ID = "injector"
"""Id the injector itself is stored under, before any other service."""

DEFAULT_REGISTRATION_EVENT = "plugins_loaded"


class OrchestratorConfig(BaseSettings):
    """Settings of a ``ServiceOrchestrator``.

    Values can be passed explicitly or come from ``SERVICEWEAVE_*``
    environment variables, e.g. ``SERVICEWEAVE_ENABLE_FILTERS=false``.
    """

    model_config = SettingsConfigDict(env_prefix="SERVICEWEAVE_", frozen=True)

    hook_prefix: str = ""
    """Prefix of the filter names the configuration tables go through."""

    service_prefix: str = ""
    """Prefix added to every service id, including the injector's."""

    enable_filters: bool = True
    """Whether the configuration tables go through the host filters."""

    registration_event: str = DEFAULT_REGISTRATION_EVENT
    """Host event ``ServiceOrchestrator.register()`` runs the registration pass on."""

    lazy_services: bool = False
    """Store services that are not ``Registerable`` as lazily built entries."""

    @property
    def injector_id(self) -> str:
        return self.service_prefix + INJECTOR_ID

    def filter_name(self, table: str) -> str:
        return self.hook_prefix + table

    def service_id(self, service_id: str) -> str:
        if service_id.startswith(self.service_prefix):
            return service_id
        return self.service_prefix + service_id


__all__ = [
    "ARGUMENTS_FILTER",
    "BINDINGS_FILTER",
    "DEFAULT_REGISTRATION_EVENT",
    "DELEGATIONS_FILTER",
    "INJECTOR_ID",
    "SERVICES_FILTER",
    "SHARED_INSTANCES_FILTER",
    "OrchestratorConfig",
]
