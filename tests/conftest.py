"""Shared pytest fixtures for serviceweave tests."""

import pytest

from serviceweave.container import ServiceContainer
from serviceweave.host import EventHost
from serviceweave.injector import Injector


@pytest.fixture()
def injector() -> Injector:
    """Injector with the default constructor instantiator."""
    return Injector()


@pytest.fixture()
def host() -> EventHost:
    """In-process host, no event fired yet."""
    return EventHost()


@pytest.fixture()
def container() -> ServiceContainer:
    return ServiceContainer()


@pytest.fixture(autouse=True)
def _clear_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "SERVICEWEAVE_HOOK_PREFIX",
        "SERVICEWEAVE_SERVICE_PREFIX",
        "SERVICEWEAVE_ENABLE_FILTERS",
        "SERVICEWEAVE_REGISTRATION_EVENT",
        "SERVICEWEAVE_LAZY_SERVICES",
    ):
        monkeypatch.delenv(name, raising=False)
