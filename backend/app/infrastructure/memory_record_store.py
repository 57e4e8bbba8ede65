"""In-Memory Record Store — process-local RecordStore for development and tests.

Invariants:
    - Same outcomes as the SQL stores: COMMITTED / PREDICATE_FAILED / NOT_FOUND
    - One asyncio.Lock per store serializes check + mutate, so a conditional
      update is atomic with respect to other coroutines
    - Documents are deep-copied in and out: callers never alias stored state

Design Decisions:
    - Selected with RECORD_STORE_BACKEND=memory; data is lost on restart
"""

import asyncio
import copy
from collections.abc import Mapping
from typing import Any

from app.core.domain_types import UpdateOutcome
from app.core.repository_protocols import Mutation


class InMemoryRecordStore:
    """Dict-backed store with per-store lock."""

    def __init__(self, key_field: str = "id"):
        self._key_field = key_field
        self._documents: dict[str, dict] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> dict | None:
        async with self._lock:
            doc = self._documents.get(key)
            return copy.deepcopy(doc) if doc is not None else None

    async def create(self, key: str, document: Mapping[str, Any]) -> bool:
        async with self._lock:
            if key in self._documents:
                return False
            doc = copy.deepcopy(dict(document))
            doc[self._key_field] = key
            self._documents[key] = doc
            return True

    async def conditional_update(
        self, key: str, expected: Mapping[str, Any], mutation: Mutation,
    ) -> UpdateOutcome:
        async with self._lock:
            doc = self._documents.get(key)
            if doc is None:
                return UpdateOutcome.NOT_FOUND
            if any(doc.get(name) != value for name, value in expected.items()):
                return UpdateOutcome.PREDICATE_FAILED
            doc.update(copy.deepcopy(dict(mutation.set_fields)))
            for name, item in mutation.append.items():
                doc.setdefault(name, []).append(copy.deepcopy(dict(item)))
            return UpdateOutcome.COMMITTED

    async def list_documents(
        self, order_by: str, descending: bool = False,
    ) -> list[dict]:
        async with self._lock:
            docs = [copy.deepcopy(d) for d in self._documents.values()]
        # None sorts first ascending, last descending
        present = [d for d in docs if d.get(order_by) is not None]
        missing = [d for d in docs if d.get(order_by) is None]
        present.sort(key=lambda d: d[order_by], reverse=descending)
        return present + missing if descending else missing + present

    async def health_check(self) -> bool:
        return True
