"""
Service wiring for one app instance.

build_container() registers everything the blueprints look up: the config,
the SQLAlchemy engine, the per-profile cart session registry and the
location lookup. Services are built lazily on first get() and cached.
"""
import logging
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from sqlalchemy.engine import Engine

from seabite.clients.geocoding import GeocodingClient
from seabite.core.config import Config
from seabite.db import create_db_engine, init_db
from seabite.models.cart import CartPolicy
from seabite.repositories.storage_repository import SqlStorageRepository
from seabite.services.location_service import LocationService
from seabite.services.session_registry import CartSessionRegistry

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyContainer:
    """Lazily built, cached services keyed by their class"""

    def __init__(self):
        self._instances: Dict[type, Any] = {}
        self._factories: Dict[type, Callable[[], Any]] = {}

    def register_singleton(self, service_class: Type[T], instance: T) -> None:
        self._instances[service_class] = instance

    def register_factory(self, service_class: Type[T], factory: Callable[[], T]) -> None:
        self._factories[service_class] = factory

    def override(self, service_class: Type[T], instance: T) -> None:
        """Swap in a replacement (e.g. a geocoder on a mock transport)."""
        self._factories.pop(service_class, None)
        self._instances[service_class] = instance

    def get(self, service_class: Type[T]) -> T:
        if service_class in self._instances:
            return self._instances[service_class]

        factory = self._factories.get(service_class)
        if factory is None:
            raise ValueError(f"Service {service_class.__name__} not registered")

        instance = factory()
        self._instances[service_class] = instance
        return instance

    def close(self) -> None:
        """Close open cart sessions and dispose the engine, if they were built."""
        registry = self._instances.get(CartSessionRegistry)
        if registry is not None:
            registry.close()
        engine = self._instances.get(Engine)
        if engine is not None:
            engine.dispose()
        logger.debug("Dependency container closed")


def cart_policy_from(config: Config) -> CartPolicy:
    return CartPolicy(
        tax_rate=config.cart.tax_rate,
        free_delivery_threshold=config.cart.free_delivery_threshold,
        delivery_fee=config.cart.delivery_fee,
    )


def build_container(config: Config, engine: Optional[Engine] = None) -> DependencyContainer:
    """Wire the services of one app instance; creates the tables if needed."""
    container = DependencyContainer()
    engine = engine or create_db_engine(config.database.url, echo=config.database.echo)
    init_db(engine)

    container.register_singleton(Config, config)
    container.register_singleton(Engine, engine)
    container.register_factory(
        CartSessionRegistry,
        lambda: CartSessionRegistry(
            SqlStorageRepository(engine),
            cart_policy_from(config),
            config.cart.storage_key,
            max_sessions=config.cart.max_sessions,
        ),
    )
    container.register_factory(
        GeocodingClient,
        lambda: GeocodingClient(
            user_agent=config.geocoding.user_agent,
            timeout=config.geocoding.timeout,
            country_suffix=config.geocoding.country_suffix,
            search_url=config.geocoding.search_url,
            reverse_url=config.geocoding.reverse_url,
        ),
    )
    container.register_factory(LocationService, lambda: LocationService(container.get(GeocodingClient)))
    return container
