import asyncio
import copy
from collections import defaultdict
from typing import Optional, Dict, Any, List, Iterable, Mapping

from .errors import DuplicateKey


class MemoryStore:
    """In-process store for tests and local development.

    One lock per collection, one for the counters. Documents are copied on the
    way in and out so callers never share state with the store.
    """

    def __init__(self):
        self._collections: Dict[str, Dict[int, Dict[str, Any]]] = defaultdict(dict)
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._counters: Dict[str, int] = {}
        self._counter_lock = asyncio.Lock()

    async def connect(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def ping(self) -> None:
        return None

    async def count(self, collection: str) -> int:
        async with self._locks[collection]:
            return len(self._collections[collection])

    async def insert_one(self, collection: str, doc: Mapping[str, Any]) -> None:
        await self.insert_many(collection, [doc])

    async def insert_many(self, collection: str, docs: Iterable[Mapping[str, Any]]) -> None:
        rows = [copy.deepcopy(dict(d)) for d in docs]
        async with self._locks[collection]:
            existing = self._collections[collection]
            ids = [row["id"] for row in rows]
            if len(set(ids)) != len(ids) or any(i in existing for i in ids):
                raise DuplicateKey(f"duplicate id in {collection}: {ids}")
            for row in rows:
                existing[row["id"]] = row

    async def find_one(self, collection: str, doc_id: int) -> Optional[Dict[str, Any]]:
        async with self._locks[collection]:
            doc = self._collections[collection].get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    async def find(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        async with self._locks[collection]:
            docs = [
                copy.deepcopy(doc)
                for _, doc in sorted(self._collections[collection].items())
                if all(doc.get(k) == v for k, v in equals.items())
            ]
        return docs

    async def find_one_and_update(
        self,
        collection: str,
        doc_id: int,
        fields: Mapping[str, Any],
        guard: Optional[Mapping[str, Iterable[Any]]] = None,
    ) -> Optional[Dict[str, Any]]:
        async with self._locks[collection]:
            doc = self._collections[collection].get(doc_id)
            if doc is None:
                return None
            for field, allowed in (guard or {}).items():
                if doc.get(field) not in list(allowed):
                    return None
            doc.update(copy.deepcopy(dict(fields)))
            return copy.deepcopy(doc)

    async def delete_one(self, collection: str, doc_id: int) -> bool:
        async with self._locks[collection]:
            return self._collections[collection].pop(doc_id, None) is not None

    async def increment(self, name: str) -> int:
        async with self._counter_lock:
            self._counters[name] = self._counters.get(name, 0) + 1
            return self._counters[name]

    async def set_on_insert(self, name: str, value: int) -> None:
        async with self._counter_lock:
            self._counters.setdefault(name, value)

    async def current(self, name: str) -> Optional[int]:
        async with self._counter_lock:
            return self._counters.get(name)
