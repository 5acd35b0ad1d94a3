from decimal import Decimal

from microshop.common.errors import DuplicateKey
from microshop.common.seeding import seed_if_empty
from microshop.inventory.schemas import ProductIn
from microshop.inventory.service import (
    BOOTSTRAP_PRODUCTS,
    LAST_BOOTSTRAP_PRODUCT_ID,
    PRODUCT_SEQUENCE,
    seed_products,
)
from microshop.orders.schemas import OrderCreate, OrderStatus
from microshop.orders.service import LAST_BOOTSTRAP_ORDER_ID, ORDER_SEQUENCE, seed_orders


class TestSeedProducts:
    async def test_empty_collection_gets_bootstrap_set(self, product_repo, allocator):
        assert await seed_products(product_repo) is True

        products = await product_repo.list()
        assert [p.id for p in products] == [1, 2, 3, 4]
        assert [p.name for p in products] == ["Laptop", "Mouse", "Keyboard", "Monitor"]
        assert products[0].price == Decimal("999.99")
        assert await allocator.current(PRODUCT_SEQUENCE) == LAST_BOOTSTRAP_PRODUCT_ID

    async def test_next_create_follows_last_bootstrap_id(self, product_repo):
        await seed_products(product_repo)

        created = await product_repo.create(ProductIn(name="Widget", price=Decimal("9.99"), stock=5))

        assert created.id == LAST_BOOTSTRAP_PRODUCT_ID + 1

    async def test_reseeding_is_a_noop(self, product_repo, allocator):
        await seed_products(product_repo)
        await product_repo.create(ProductIn(name="Widget", price=Decimal("9.99"), stock=5))

        assert await seed_products(product_repo) is False

        assert await product_repo.count() == len(BOOTSTRAP_PRODUCTS) + 1
        assert await allocator.current(PRODUCT_SEQUENCE) == 5

    async def test_non_empty_collection_leaves_counter_alone(self, product_repo, allocator):
        await product_repo.create(ProductIn(name="Only", price=Decimal("1"), stock=1))
        before = await allocator.current(PRODUCT_SEQUENCE)

        assert await seed_products(product_repo) is False

        assert await product_repo.count() == 1
        assert await allocator.current(PRODUCT_SEQUENCE) == before

    async def test_counter_advanced_before_seed_is_not_clobbered(self, product_repo, allocator):
        for _ in range(10):
            await allocator.next(PRODUCT_SEQUENCE)

        await seed_products(product_repo)

        assert await allocator.current(PRODUCT_SEQUENCE) == 10


class RacingRepository:
    """Looks empty, but another instance seeds between count and insert."""

    collection = "products"

    def __init__(self, inner):
        self.inner = inner

    async def count(self):
        return 0

    async def insert_many(self, records):
        await self.inner.insert_many(records)
        raise DuplicateKey("products: id 1 already exists")


class TestSeedRace:
    async def test_duplicate_key_is_treated_as_seeded_elsewhere(self, product_repo, allocator):
        racing = RacingRepository(product_repo)

        seeded = await seed_if_empty(racing, allocator, BOOTSTRAP_PRODUCTS, PRODUCT_SEQUENCE, LAST_BOOTSTRAP_PRODUCT_ID)

        assert seeded is False
        assert await product_repo.count() == len(BOOTSTRAP_PRODUCTS)
        assert await allocator.current(PRODUCT_SEQUENCE) == LAST_BOOTSTRAP_PRODUCT_ID

    async def test_second_instance_on_seeded_store(self, product_repo):
        await seed_products(product_repo)

        # Same store, insert collides for real
        assert await seed_if_empty(
            _AlwaysEmpty(product_repo), product_repo.allocator, BOOTSTRAP_PRODUCTS, PRODUCT_SEQUENCE, 4
        ) is False
        assert await product_repo.count() == len(BOOTSTRAP_PRODUCTS)


class _AlwaysEmpty:
    def __init__(self, inner):
        self.inner = inner
        self.collection = inner.collection

    async def count(self):
        return 0

    async def insert_many(self, records):
        await self.inner.insert_many(records)


class TestSeedOrders:
    async def test_bootstrap_orders(self, order_repo, allocator):
        assert await seed_orders(order_repo) is True

        orders = await order_repo.list()
        assert [(o.id, o.customer_id, o.status) for o in orders] == [
            (1, 101, "Completed"),
            (2, 102, "Processing"),
            (3, 103, "Pending"),
        ]
        assert [(i.product_id, i.quantity) for i in orders[0].items] == [(1, 2), (2, 1)]
        assert await allocator.current(ORDER_SEQUENCE) == LAST_BOOTSTRAP_ORDER_ID

    async def test_next_order_id_after_seed(self, order_repo):
        await seed_orders(order_repo)

        order = await order_repo.create(OrderCreate(customer_id=7, items=[{"product_id": 1, "quantity": 1}]))

        assert order.id == 4
        assert order.status == OrderStatus.PENDING
