"""Shared fixtures.

Store-backed fixtures are parametrized over the in-memory store and the
SQLAlchemy store (SQLite file under ``tmp_path``) so every behaviour is
checked against both implementations of the same contract.
"""

import pytest

from microshop.app import create_app
from microshop.common.config import Settings
from microshop.common.database import SqlStore
from microshop.common.errors import StorageUnavailable
from microshop.common.memory import MemoryStore
from microshop.common.sequence import SequenceAllocator
from microshop.inventory.service import ProductRepository
from microshop.orders.service import OrderRepository


def make_settings(**overrides) -> Settings:
    values = {
        "SEED_DATA": True,
        "STORAGE_BACKEND": "memory",
        "ORDER_STATUS_POLICY": "permissive",
        "INSTANCE_ID": "test",
    }
    values.update(overrides)
    return Settings(**values)


def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'microshop.db'}"


@pytest.fixture(params=["memory", "sql"])
async def store(request, tmp_path):
    if request.param == "memory":
        s = MemoryStore()
    else:
        s = SqlStore(sqlite_url(tmp_path))
    await s.connect()
    yield s
    await s.close()


@pytest.fixture
def allocator(store):
    return SequenceAllocator(store)


@pytest.fixture
def product_repo(store, allocator):
    return ProductRepository(store, allocator)


@pytest.fixture
def order_repo(store, allocator):
    return OrderRepository(store, allocator)


@pytest.fixture
def strict_order_repo(store, allocator):
    return OrderRepository(store, allocator, status_policy="strict")


@pytest.fixture
async def product_client(store):
    app = create_app("products", store=store, config=make_settings())
    async with app.test_app() as test_app:
        yield test_app.test_client()


@pytest.fixture
async def order_client(store):
    app = create_app("orders", store=store, config=make_settings())
    async with app.test_app() as test_app:
        yield test_app.test_client()


@pytest.fixture
async def strict_order_client(store):
    app = create_app("orders", store=store, config=make_settings(ORDER_STATUS_POLICY="strict"))
    async with app.test_app() as test_app:
        yield test_app.test_client()


class UnreachableStore(MemoryStore):
    """Memory store that behaves like a store whose server went away."""

    async def _down(self, *args, **kwargs):
        raise StorageUnavailable("connection refused")

    ping = count = insert_one = insert_many = _down
    find_one = find = find_one_and_update = delete_one = _down
    increment = set_on_insert = current = _down


@pytest.fixture
def unreachable_store():
    return UnreachableStore()
