import logging
from typing import Optional

from .store import DocumentStore

_logger = logging.getLogger(__name__)


class SequenceAllocator:
    """Hands out strictly increasing identifiers per sequence name.

    ``next`` is a single atomic increment against the store; there is no
    read-then-write window, so concurrent callers never see the same value.
    Store failures propagate as ``StorageUnavailable``.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def next(self, name: str) -> int:
        value = await self.store.increment(name)
        _logger.debug("Allocated id | sequence=%s value=%s", name, value)
        return value

    async def initialize(self, name: str, value: int) -> None:
        # Only takes effect when the counter does not exist yet
        await self.store.set_on_insert(name, value)

    async def current(self, name: str) -> Optional[int]:
        return await self.store.current(name)
