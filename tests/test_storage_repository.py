import json
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from seabite.core.exceptions import StorageError
from seabite.db import create_db_engine
from seabite.models.storage import StorageEntry
from seabite.repositories.storage_repository import SqlStorageRepository
from seabite.services.cart_service import CartService
from seabite.services.cart_sync import CartStateSynchronizer
from seabite.services.local_storage import LocalStorage


@pytest.fixture
def repo(engine):
    return SqlStorageRepository(engine)


class TestSqlStorageRepository:

    def test_missing_key(self, repo):
        assert repo.get("profile-1", "cart") is None

    def test_set_and_get(self, repo):
        repo.set("profile-1", "cart", "[]")

        assert repo.get("profile-1", "cart") == "[]"

    def test_set_overwrites(self, repo, engine):
        repo.set("profile-1", "cart", "[]")
        repo.set("profile-1", "cart", '[{"price": 1}]')

        assert repo.get("profile-1", "cart") == '[{"price": 1}]'
        with Session(engine) as session:
            rows = session.scalars(select(StorageEntry)).all()
        assert len(rows) == 1

    def test_profiles_are_isolated(self, repo):
        repo.set("profile-1", "cart", "[]")

        assert repo.get("profile-2", "cart") is None
        assert repo.keys("profile-2") == []

    def test_delete(self, repo):
        repo.set("profile-1", "token", "abc")

        assert repo.delete("profile-1", "token") is True
        assert repo.delete("profile-1", "token") is False
        assert repo.get("profile-1", "token") is None

    def test_clear_and_keys(self, repo):
        repo.set("profile-1", "token", "abc")
        repo.set("profile-1", "cart", "[]")
        repo.set("profile-2", "cart", "[]")

        assert repo.keys("profile-1") == ["cart", "token"]
        assert repo.clear("profile-1") == 2
        assert repo.keys("profile-1") == []
        assert repo.keys("profile-2") == ["cart"]

    def test_missing_table_raises_storage_error(self):
        engine = create_db_engine("sqlite:///:memory:")

        with pytest.raises(StorageError) as exc_info:
            SqlStorageRepository(engine).get("profile-1", "cart")

        assert exc_info.value.status_code == 500
        engine.dispose()


class TestPersistentCart:

    def test_cart_survives_new_storage_instance(self, engine):
        first = LocalStorage(SqlStorageRepository(engine), "profile-1").open_context("tab-a")
        CartService(first).add_to_cart("pomfret", Decimal("1000"), qty=2)

        reopened = LocalStorage(SqlStorageRepository(engine), "profile-1").open_context("tab-a")
        sync = CartStateSynchronizer(reopened)
        sync.start()

        assert sync.summary.subtotal == Decimal("1000.00")
        assert json.loads(reopened.get_item("cart"))[0]["qty"] == 2

    def test_cross_context_sync_over_sql(self, engine):
        storage = LocalStorage(SqlStorageRepository(engine), "profile-1")
        tab_a, tab_b = storage.open_context("tab-a"), storage.open_context("tab-b")
        sync = CartStateSynchronizer(tab_a)
        sync.start()

        CartService(tab_b).add_to_cart("crab", Decimal("300"))

        assert sync.summary.grand_total == Decimal("365.00")
