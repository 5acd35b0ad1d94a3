import argparse
import asyncio
import logging

from .common.config import settings
from .common.sequence import SequenceAllocator
from .common.store import build_store
from .common.telemetry import configure_logging
from .inventory.service import ProductRepository, seed_products, PRODUCT_SEQUENCE
from .orders.service import OrderRepository, seed_orders, ORDER_SEQUENCE

_logger = logging.getLogger(__name__)


async def seed(targets) -> None:
    """Run the startup seed against the configured store outside the web process."""
    store = build_store(settings)
    await store.connect()
    try:
        allocator = SequenceAllocator(store)
        if "products" in targets:
            seeded = await seed_products(ProductRepository(store, allocator))
            print(f"Products: {'seeded' if seeded else 'already present'}, counter={await allocator.current(PRODUCT_SEQUENCE)}")
        if "orders" in targets:
            seeded = await seed_orders(OrderRepository(store, allocator))
            print(f"Orders: {'seeded' if seeded else 'already present'}, counter={await allocator.current(ORDER_SEQUENCE)}")
    finally:
        await store.close()


async def amain(argv=None):
    parser = argparse.ArgumentParser(description="Seed the bootstrap dataset if the collection is empty.")
    parser.add_argument("target", nargs="?", default="all", choices=["products", "orders", "all"])
    args = parser.parse_args(argv)
    configure_logging(settings)
    targets = {"products", "orders"} if args.target == "all" else {args.target}
    await seed(targets)


if __name__ == "__main__":
    asyncio.run(amain())
