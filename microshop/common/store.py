from typing import Protocol, Optional, Dict, Any, List, Iterable, Mapping

from .config import Settings


class DocumentStore(Protocol):
    """What repositories and the allocator need from a backing store."""

    async def connect(self) -> None: ...

    async def close(self) -> None: ...

    async def ping(self) -> None: ...

    async def count(self, collection: str) -> int: ...

    async def insert_one(self, collection: str, doc: Mapping[str, Any]) -> None: ...

    async def insert_many(self, collection: str, docs: Iterable[Mapping[str, Any]]) -> None: ...

    async def find_one(self, collection: str, doc_id: int) -> Optional[Dict[str, Any]]: ...

    async def find(self, collection: str, **equals: Any) -> List[Dict[str, Any]]: ...

    async def find_one_and_update(
        self,
        collection: str,
        doc_id: int,
        fields: Mapping[str, Any],
        guard: Optional[Mapping[str, Iterable[Any]]] = None,
    ) -> Optional[Dict[str, Any]]: ...

    async def delete_one(self, collection: str, doc_id: int) -> bool: ...

    async def increment(self, name: str) -> int: ...

    async def set_on_insert(self, name: str, value: int) -> None: ...

    async def current(self, name: str) -> Optional[int]: ...


def build_store(config: Settings) -> DocumentStore:
    backend = config.STORAGE_BACKEND.strip().lower()
    if backend == "memory":
        from .memory import MemoryStore

        return MemoryStore()
    if backend == "sql":
        from .database import SqlStore

        return SqlStore(config.DB_URL)
    raise ValueError(f"Unknown STORAGE_BACKEND: {config.STORAGE_BACKEND!r}")
