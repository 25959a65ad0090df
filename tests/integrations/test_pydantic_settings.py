"""Tests for pydantic-settings integration."""

import pytest
from pydantic_settings import BaseSettings, SettingsConfigDict

from serviceweave.injector import GLOBAL_ARGUMENTS, Injector
from serviceweave.integrations.pydantic_settings import (
    get_settings_fields,
    is_pydantic_settings_subclass,
)


class ShopSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SHOP_")

    currency: str = "EUR"
    tax_rate: float = 0.2


class Checkout:
    def __init__(self, settings: ShopSettings) -> None:
        self.settings = settings


class TestIsPydanticSettingsSubclass:
    def test_settings_subclass(self) -> None:
        assert is_pydantic_settings_subclass(ShopSettings)

    @pytest.mark.parametrize("candidate", [Checkout, int, "ShopSettings", ShopSettings()])
    def test_other_values(self, candidate: object) -> None:
        assert not is_pydantic_settings_subclass(candidate)


def test_settings_fields_in_declaration_order() -> None:
    assert get_settings_fields(ShopSettings) == ("currency", "tax_rate")


class TestSettingsInjection:
    def test_settings_are_not_shared_by_default(self, injector: Injector) -> None:
        """Settings classes follow the same sharing rules as any other class."""
        assert not injector.is_shared(ShopSettings)

        first = injector.make(ShopSettings)

        assert injector.make(ShopSettings) is not first
        assert not injector.has_shared_instance(ShopSettings)

    def test_settings_can_be_shared_explicitly(self, injector: Injector) -> None:
        injector.share(ShopSettings)

        first = injector.make(ShopSettings)

        assert injector.make(ShopSettings) is first
        assert injector.make(Checkout).settings is first

    def test_settings_can_be_shared_automatically(self) -> None:
        injector = Injector(share_settings=True)

        first = injector.make(ShopSettings)

        assert injector.make(ShopSettings) is first
        assert injector.make(Checkout).settings is first
        assert injector.has_shared_instance(ShopSettings)

    def test_settings_read_environment(
        self,
        injector: Injector,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("SHOP_CURRENCY", "USD")

        settings = injector.make(ShopSettings)

        assert settings.currency == "USD"
        assert settings.tax_rate == 0.2

    def test_argument_bindings_apply_to_settings(self, injector: Injector) -> None:
        injector.bind_argument(GLOBAL_ARGUMENTS, "currency", "GBP")
        injector.bind_argument(ShopSettings, "tax_rate", 0.5)

        settings = injector.make(ShopSettings)

        assert settings.currency == "GBP"
        assert settings.tax_rate == 0.5

    def test_argument_bindings_win_over_environment(
        self,
        injector: Injector,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("SHOP_CURRENCY", "USD")
        monkeypatch.setenv("SHOP_TAX_RATE", "0.1")
        injector.bind_argument(ShopSettings, "currency", "GBP")

        settings = injector.make(ShopSettings)

        assert settings.currency == "GBP"
        assert settings.tax_rate == 0.1

    def test_per_class_bindings_win_over_global_bindings(self, injector: Injector) -> None:
        injector.bind_argument(GLOBAL_ARGUMENTS, "currency", "GBP")
        injector.bind_argument(ShopSettings, "currency", "CHF")

        assert injector.make(ShopSettings).currency == "CHF"

    def test_explicit_arguments_win_over_bindings(self, injector: Injector) -> None:
        injector.bind_argument(ShopSettings, "currency", "GBP")

        settings = injector.make(ShopSettings, {"currency": "CHF"})

        assert settings.currency == "CHF"

    def test_delegated_settings(self, injector: Injector) -> None:
        injector.delegate(ShopSettings, lambda cls: cls(currency="JPY"))

        assert injector.make(Checkout).settings.currency == "JPY"
