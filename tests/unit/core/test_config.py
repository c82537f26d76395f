"""Tests unitarios para la configuración."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from order_import.core import config
from order_import.core.config import Settings


class TestSettings:
    """Tests para validación de Settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.CURRENCY == "USD"
        assert settings.DEFAULT_ORDER_CHANNEL == "api"
        assert settings.ORDER_IMPORT_USE_TRANSACTION is True
        assert settings.automatic_taxes_enabled is False

    def test_normalizes_case(self):
        settings = Settings(_env_file=None, LOG_LEVEL="debug", ENVIRONMENT="Production", CURRENCY="crc")

        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.is_production
        assert settings.CURRENCY == "CRC"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("LOG_LEVEL", "LOUD"),
            ("ENVIRONMENT", "moon"),
            ("CURRENCY", "DOLLARS"),
            ("DEFAULT_PAYMENT_STATE", "paid"),
            ("AUTOMATIC_TAX_RATE", "-0.1"),
        ],
    )
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_automatic_taxes_enabled_by_rate(self):
        settings = Settings(_env_file=None, AUTOMATIC_TAX_RATE=Decimal("0.13"))

        assert settings.automatic_taxes_enabled

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_ORDER_CHANNEL", "pos")

        assert Settings(_env_file=None).DEFAULT_ORDER_CHANNEL == "pos"

    def test_get_settings_is_cached_until_reload(self, monkeypatch):
        first = config.get_settings()
        assert config.get_settings() is first

        monkeypatch.setenv("APP_NAME", "Reloaded")
        reloaded = config.reload_settings()
        try:
            assert reloaded is not first
            assert reloaded.APP_NAME == "Reloaded"
        finally:
            monkeypatch.delenv("APP_NAME")
            config.reload_settings()

    def test_environment_info(self):
        info = config.get_environment_info()

        assert set(info["features"]) == {"transactional_import", "reject_protected_attributes", "automatic_taxes"}
