"""In-memory document store for tests and dry runs."""

from __future__ import annotations

import asyncio
import copy
from typing import Any

from fundind.core.models import Document


class InMemoryDocumentStore:
    """Dict-backed implementation of the IDocumentStore protocol.

    Every call yields to the event loop once before touching state, so
    concurrent read-modify-write cycles interleave the way they would against
    a remote store.
    """

    def __init__(self) -> None:
        self._docs: dict[str, dict[str, tuple[int, dict[str, Any]]]] = {}
        self._lock = asyncio.Lock()

    def _collection(self, collection: str) -> dict[str, tuple[int, dict[str, Any]]]:
        return self._docs.setdefault(collection, {})

    async def get(self, collection: str, doc_id: str) -> Document | None:
        await asyncio.sleep(0)
        async with self._lock:
            entry = self._collection(collection).get(doc_id)
            if entry is None:
                return None
            version, data = entry
            return Document(id=doc_id, version=version, data=copy.deepcopy(data))

    async def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> bool:
        await asyncio.sleep(0)
        async with self._lock:
            docs = self._collection(collection)
            if doc_id in docs:
                return False
            docs[doc_id] = (1, copy.deepcopy(data))
            return True

    async def compare_and_set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        *,
        expected_version: int,
    ) -> bool:
        await asyncio.sleep(0)
        async with self._lock:
            docs = self._collection(collection)
            entry = docs.get(doc_id)
            version = entry[0] if entry else 0
            if version != expected_version:
                return False
            docs[doc_id] = (version + 1, copy.deepcopy(data))
            return True

    async def list(self, collection: str) -> list[Document]:
        await asyncio.sleep(0)
        async with self._lock:
            docs = self._collection(collection)
            return [
                Document(id=doc_id, version=version, data=copy.deepcopy(data))
                for doc_id, (version, data) in sorted(docs.items())
            ]

    def collections(self) -> list[str]:
        return sorted(name for name, docs in self._docs.items() if docs)
