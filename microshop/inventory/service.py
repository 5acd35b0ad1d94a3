from decimal import Decimal
from typing import Optional
import logging

from ..common.repository import DocumentRepository, in_id_range
from ..common.seeding import seed_if_empty
from .schemas import Product, ProductIn

_logger = logging.getLogger(__name__)

PRODUCT_SEQUENCE = "productId"

BOOTSTRAP_PRODUCTS = [
    Product(id=1, name="Laptop", price=Decimal("999.99"), stock=50),
    Product(id=2, name="Mouse", price=Decimal("29.99"), stock=200),
    Product(id=3, name="Keyboard", price=Decimal("79.99"), stock=150),
    Product(id=4, name="Monitor", price=Decimal("199.99"), stock=75),
]
LAST_BOOTSTRAP_PRODUCT_ID = max(p.id for p in BOOTSTRAP_PRODUCTS)


class ProductRepository(DocumentRepository[Product]):
    collection = "products"
    sequence_name = PRODUCT_SEQUENCE
    model = Product

    async def create(self, data: ProductIn) -> Product:
        product_id = await self.allocator.next(self.sequence_name)
        product = Product(id=product_id, name=data.name, price=data.price, stock=data.stock)
        await self.store.insert_one(self.collection, self._to_doc(product))
        _logger.info("Created product | product_id=%s name=%s", product_id, product.name)
        return product

    async def replace(self, product_id: int, data: ProductIn) -> Optional[Product]:
        if not in_id_range(product_id):
            return None
        doc = await self.store.find_one_and_update(
            self.collection,
            product_id,
            {"name": data.name, "price": data.price, "stock": data.stock},
        )
        if doc is None:
            return None
        _logger.info("Replaced product | product_id=%s", product_id)
        return self._to_model(doc)


async def seed_products(repository: ProductRepository) -> bool:
    return await seed_if_empty(
        repository,
        repository.allocator,
        BOOTSTRAP_PRODUCTS,
        PRODUCT_SEQUENCE,
        LAST_BOOTSTRAP_PRODUCT_ID,
    )
