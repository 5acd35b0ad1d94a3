from datetime import datetime, timedelta, timezone
from typing import List, Optional
import logging

from ..common.errors import InvalidStatusTransition
from ..common.repository import DocumentRepository, in_id_range
from ..common.seeding import seed_if_empty
from .schemas import Order, OrderCreate, OrderItem, OrderStatus, allowed_predecessors

_logger = logging.getLogger(__name__)

ORDER_SEQUENCE = "orderId"
LAST_BOOTSTRAP_ORDER_ID = 3

PERMISSIVE = "permissive"
STRICT = "strict"


def bootstrap_orders(now: Optional[datetime] = None) -> List[Order]:
    now = now or datetime.now(timezone.utc)
    return [
        Order(
            id=1,
            customer_id=101,
            items=[OrderItem(product_id=1, quantity=2), OrderItem(product_id=2, quantity=1)],
            status=OrderStatus.COMPLETED,
            created_at=now - timedelta(days=5),
        ),
        Order(
            id=2,
            customer_id=102,
            items=[OrderItem(product_id=3, quantity=1)],
            status=OrderStatus.PROCESSING,
            created_at=now - timedelta(days=1),
        ),
        Order(
            id=3,
            customer_id=103,
            items=[OrderItem(product_id=4, quantity=3), OrderItem(product_id=5, quantity=2)],
            status=OrderStatus.PENDING,
            created_at=now - timedelta(days=2),
        ),
    ]


class OrderRepository(DocumentRepository[Order]):
    collection = "orders"
    sequence_name = ORDER_SEQUENCE
    model = Order

    def __init__(self, store, allocator, status_policy: str = PERMISSIVE):
        super().__init__(store, allocator)
        if status_policy not in (PERMISSIVE, STRICT):
            raise ValueError(f"Unknown order status policy: {status_policy!r}")
        self.status_policy = status_policy

    async def create(self, data: OrderCreate) -> Order:
        order_id = await self.allocator.next(self.sequence_name)
        order = Order(
            id=order_id,
            customer_id=data.customer_id,
            items=data.items,
            status=OrderStatus.PENDING,
            created_at=datetime.now(timezone.utc),
        )
        await self.store.insert_one(self.collection, self._to_doc(order))
        _logger.info("Created order | order_id=%s customer_id=%s items=%s", order_id, order.customer_id, len(order.items))
        return order

    async def list_by_customer(self, customer_id: int) -> List[Order]:
        if not in_id_range(customer_id):
            return []
        return [self._to_model(doc) for doc in await self.store.find(self.collection, customer_id=customer_id)]

    async def update_status(self, order_id: int, status: OrderStatus) -> Optional[Order]:
        status = OrderStatus.parse(status)
        if not in_id_range(order_id):
            return None
        guard = None
        if self.status_policy == STRICT:
            guard = {"status": allowed_predecessors(status)}

        doc = await self.store.find_one_and_update(self.collection, order_id, {"status": status.value}, guard=guard)
        if doc is not None:
            _logger.info("Order status updated | order_id=%s status=%s", order_id, status.value)
            return self._to_model(doc)

        if guard is not None:
            # Guard failed or the order is gone; tell the two apart
            current = await self.store.find_one(self.collection, order_id)
            if current is not None:
                _logger.warning(
                    "Rejected status transition | order_id=%s from=%s to=%s", order_id, current["status"], status.value
                )
                raise InvalidStatusTransition(order_id, current["status"], status.value)
        return None


async def seed_orders(repository: OrderRepository) -> bool:
    return await seed_if_empty(
        repository,
        repository.allocator,
        bootstrap_orders(),
        ORDER_SEQUENCE,
        LAST_BOOTSTRAP_ORDER_ID,
    )
