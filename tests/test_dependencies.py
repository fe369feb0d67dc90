from decimal import Decimal

import pytest
from sqlalchemy.engine import Engine

from seabite.clients.geocoding import GeocodingClient
from seabite.core.config import Config
from seabite.core.dependencies import DependencyContainer, build_container, cart_policy_from
from seabite.services.location_service import LocationService
from seabite.services.session_registry import CartSessionRegistry


class TestDependencyContainer:

    def test_factory_result_is_cached(self):
        container = DependencyContainer()
        container.register_factory(list, lambda: ["built"])

        assert container.get(list) is container.get(list)

    def test_unknown_service(self):
        with pytest.raises(ValueError, match="dict"):
            DependencyContainer().get(dict)

    def test_override_replaces_factory(self):
        container = DependencyContainer()
        container.register_factory(list, lambda: ["built"])

        container.override(list, ["replacement"])

        assert container.get(list) == ["replacement"]


class TestBuildContainer:

    def test_wires_storefront_services(self, container, config):
        assert container.get(Config) is config
        assert isinstance(container.get(Engine), Engine)
        assert isinstance(container.get(CartSessionRegistry), CartSessionRegistry)
        location = container.get(LocationService)
        assert location.geocoder is container.get(GeocodingClient)

    def test_registry_follows_config(self, monkeypatch):
        monkeypatch.setenv("CART_DELIVERY_FEE", "75")
        monkeypatch.setenv("CART_MAX_SESSIONS", "3")
        container = build_container(Config(database_url="sqlite:///:memory:"))

        registry = container.get(CartSessionRegistry)

        assert registry.policy.delivery_fee == Decimal("75")
        assert registry.max_sessions == 3
        container.close()

    def test_close_ends_sessions(self, container):
        session = container.get(CartSessionRegistry).session_for("p1")

        container.close()

        assert session.context.context_id not in session.context.storage.open_contexts

    def test_cart_policy_from_config(self, config):
        policy = cart_policy_from(config)

        assert policy.tax_rate == config.cart.tax_rate
        assert policy.delivery_fee == config.cart.delivery_fee
