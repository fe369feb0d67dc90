from decimal import Decimal

import pytest

from seabite.core.config import Config


class TestConfig:

    def test_defaults(self, monkeypatch):
        for name in ("CART_TAX_RATE", "CART_FREE_DELIVERY_THRESHOLD", "CART_DELIVERY_FEE", "CART_STORAGE_KEY"):
            monkeypatch.delenv(name, raising=False)

        cfg = Config(database_url="sqlite://")

        assert cfg.database.url == "sqlite://"
        assert cfg.cart.tax_rate == Decimal("0.05")
        assert cfg.cart.free_delivery_threshold == Decimal("1000")
        assert cfg.cart.delivery_fee == Decimal("50")
        assert cfg.cart.storage_key == "cart"
        assert cfg.api.token_storage_key == "token"
        cfg.validate()

    def test_policy_from_environment(self, monkeypatch):
        monkeypatch.setenv("CART_DELIVERY_FEE", "75")
        monkeypatch.setenv("CART_FREE_DELIVERY_THRESHOLD", "1500")

        cfg = Config()

        assert cfg.cart.delivery_fee == Decimal("75")
        assert cfg.cart.free_delivery_threshold == Decimal("1500")

    def test_non_numeric_policy_value(self, monkeypatch):
        monkeypatch.setenv("CART_TAX_RATE", "five percent")

        with pytest.raises(ValueError, match="CART_TAX_RATE"):
            Config()

    def test_tax_rate_out_of_range(self, monkeypatch):
        monkeypatch.setenv("CART_TAX_RATE", "1.5")

        with pytest.raises(ValueError):
            Config().validate()

    def test_debug_not_allowed_in_production(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEBUG", "true")

        cfg = Config()

        assert cfg.is_production
        with pytest.raises(ValueError):
            cfg.validate()
