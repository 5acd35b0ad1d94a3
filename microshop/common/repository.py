import logging
from typing import Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel

from .sequence import SequenceAllocator
from .store import DocumentStore

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Identifiers and counts are 32-bit signed integers on the wire and in storage
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def in_id_range(value: int) -> bool:
    return INT32_MIN <= value <= INT32_MAX


class DocumentRepository(Generic[M]):
    """Read/delete operations shared by the product and order repositories."""

    collection: str
    sequence_name: str
    model: Type[M]

    def __init__(self, store: DocumentStore, allocator: SequenceAllocator):
        self.store = store
        self.allocator = allocator

    def _to_model(self, doc) -> M:
        return self.model.model_validate(doc)

    def _to_doc(self, record: M) -> dict:
        return record.model_dump(mode="python")

    async def get(self, record_id: int) -> Optional[M]:
        if not in_id_range(record_id):
            return None
        doc = await self.store.find_one(self.collection, record_id)
        return self._to_model(doc) if doc is not None else None

    async def list(self) -> List[M]:
        return [self._to_model(doc) for doc in await self.store.find(self.collection)]

    async def delete(self, record_id: int) -> bool:
        if not in_id_range(record_id):
            return False
        deleted = await self.store.delete_one(self.collection, record_id)
        _logger.info("Delete | collection=%s id=%s deleted=%s", self.collection, record_id, deleted)
        return deleted

    async def count(self) -> int:
        return await self.store.count(self.collection)

    async def insert_many(self, records: Iterable[M]) -> None:
        await self.store.insert_many(self.collection, [self._to_doc(r) for r in records])
