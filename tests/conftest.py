"""Shared pytest fixtures for the storefront cart tests."""

import pytest

from seabite.app import create_app
from seabite.core.config import Config
from seabite.core.dependencies import build_container
from seabite.db import create_db_engine, init_db
from seabite.repositories.storage_repository import MemoryStorageBackend
from seabite.services.local_storage import LocalStorage


@pytest.fixture
def backend():
    return MemoryStorageBackend()


@pytest.fixture
def storage(backend):
    """Local storage of one browser profile."""
    return LocalStorage(backend, "profile-1")


@pytest.fixture
def tab_a(storage):
    return storage.open_context("tab-a")


@pytest.fixture
def tab_b(storage):
    return storage.open_context("tab-b")


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with the tables created."""
    engine = create_db_engine("sqlite:///:memory:")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def config():
    return Config(database_url="sqlite:///:memory:")


@pytest.fixture
def container(config):
    container = build_container(config)
    yield container
    container.close()


@pytest.fixture
def app(config, container):
    app = create_app(config, container=container)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def profile_headers():
    return {"X-Profile-Id": "shopper-1"}
