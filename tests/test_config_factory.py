"""Tests for environment settings, the manager factory and logging setup."""

import logging

import httpx
import pytest

from paygate.config import DEFAULT_TIMEOUT_SECONDS, PAYSTACK_BASE_URL, Settings
from paygate.factory import GATEWAY_FACTORIES, build_manager
from paygate.main import main
from paygate.providers.flutterwave import FlutterwaveGateway
from paygate.providers.paystack import PaystackGateway
from paygate.providers.stripe import StripeGateway


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_defaults(self):
        settings = make_settings()
        assert settings.request_timeout == 30.0
        assert settings.enable_fallback is False
        assert settings.paystack_base_url == PAYSTACK_BASE_URL
        assert settings.gateway_registrations() == []

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PAYGATE_PAYSTACK_SECRET_KEY", "sk_env")
        monkeypatch.setenv("PAYGATE_PAYSTACK_PRIORITY", "7")
        monkeypatch.setenv("PAYGATE_ENABLE_FALLBACK", "true")

        settings = make_settings()

        assert settings.enable_fallback is True
        [registration] = [r for r in settings.gateway_registrations() if r.name == "paystack"]
        assert registration.priority == 7
        assert registration.config["secret_key"] == "sk_env"
        assert registration.config["timeout"] == 30.0

    def test_ignores_unprefixed_variables(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "*")
        monkeypatch.setenv("LOG_LEVEL", "not-a-level")
        monkeypatch.setenv("PAYSTACK_SECRET_KEY", "sk_foreign")

        settings = make_settings()

        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.gateway_registrations() == []

    def test_prefixed_debug(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "*")
        monkeypatch.setenv("PAYGATE_DEBUG", "true")
        assert make_settings().debug is True

    def test_registrations_skip_processors_without_keys(self):
        settings = make_settings(stripe_secret_key="sk_test", stripe_api_version="2024-06-20")
        registrations = settings.gateway_registrations()

        assert [r.name for r in registrations] == ["stripe"]
        assert registrations[0].config["api_version"] == "2024-06-20"


class TestGatewayFactories:
    @pytest.mark.parametrize("name", sorted(GATEWAY_FACTORIES))
    def test_timeout_defaults_to_settings_default(self, name):
        gateway = GATEWAY_FACTORIES[name]({"secret_key": "sk_test"})
        assert gateway._client.timeout == httpx.Timeout(DEFAULT_TIMEOUT_SECONDS)

    @pytest.mark.parametrize("name", sorted(GATEWAY_FACTORIES))
    def test_explicit_timeout(self, name):
        gateway = GATEWAY_FACTORIES[name]({"secret_key": "sk_test", "timeout": 5.0})
        assert gateway._client.timeout == httpx.Timeout(5.0)


class TestBuildManager:
    def test_registers_configured_processors(self):
        manager = build_manager(make_settings(
            paystack_secret_key="sk_p",
            flutterwave_secret_key="sk_f",
            stripe_secret_key="sk_s",
            stripe_priority=10,
            default_gateway="Flutterwave",
            enable_fallback=True,
        ))

        assert manager.get_available_gateways() == ["paystack", "flutterwave", "stripe"]
        assert isinstance(manager.get_gateway("paystack"), PaystackGateway)
        assert isinstance(manager.get_gateway("flutterwave"), FlutterwaveGateway)
        assert isinstance(manager.get_default_gateway(), FlutterwaveGateway)
        assert manager.fallback_enabled

        manager.remove_gateway("flutterwave")
        assert isinstance(manager.get_gateway_with_fallback(), StripeGateway)

    def test_disabled_processor_is_not_built(self):
        manager = build_manager(make_settings(paystack_secret_key="sk_p", paystack_enabled=False))
        assert manager.get_available_gateways() == []

    def test_default_for_unbuilt_gateway_is_ignored(self):
        manager = build_manager(make_settings(paystack_secret_key="sk_p", default_gateway="stripe"))
        assert manager.default_gateway_name is None
        assert isinstance(manager.get_default_gateway(), PaystackGateway)


class TestMain:
    def test_main_without_gateways(self, monkeypatch):
        monkeypatch.setattr("paygate.main.build_manager", lambda settings: build_manager(make_settings()))
        assert main() == 1

    def test_main_lists_gateways(self, monkeypatch, caplog):
        monkeypatch.setattr(
            "paygate.main.build_manager",
            lambda settings: build_manager(make_settings(paystack_secret_key="sk_p")),
        )
        with caplog.at_level(logging.INFO, logger="paygate"):
            assert main() == 0
        assert "paystack" in caplog.text
