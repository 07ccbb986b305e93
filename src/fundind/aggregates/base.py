"""Optimistic read-modify-write over the document store.

Every aggregate write in the pipeline goes through `AggregateRepository.mutate`:

1. read the document and its version,
2. stop early if the event key is already in the document's `_appliedEvents`,
3. run a pure mutator on a private copy,
4. write back with `compare_and_set(expected_version=...)`,
5. on a version conflict, start over (bounded by `max_retries`).

The idempotency key is recorded inside the same write that applies the change,
so a redelivered log can never double-apply a delta. Deleting a document leaves
a tombstone carrying its `_appliedEvents`, so a redelivered log cannot
resurrect or re-delete it either.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Final, Literal

from fundind.core.errors import StoreContentionError
from fundind.core.interfaces import IDocumentStore

log = logging.getLogger(__name__)

APPLIED_KEY: Final = "_appliedEvents"
TOMBSTONE_KEY: Final = "_deleted"
DEFAULT_APPLIED_EVENTS_LIMIT: Final = 5000


class _Delete:
    def __repr__(self) -> str:
        return "DELETE"


# Returned by a mutator to delete the document (a tombstone is kept).
DELETE: Final = _Delete()

MutationOutcome = Literal["applied", "duplicate", "skipped", "deleted"]
Mutator = Callable[[dict[str, Any] | None], "dict[str, Any] | _Delete | None"]


def is_tombstone(data: dict[str, Any]) -> bool:
    return bool(data.get(TOMBSTONE_KEY))


def utc_now() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


def to_iso(unix_seconds: int | None) -> str | None:
    if unix_seconds is None:
        return None
    return datetime.fromtimestamp(unix_seconds, timezone.utc).isoformat()


def add_amounts(current: Any, delta: int) -> str:
    """Add `delta` to a decimal-string amount (missing counts as zero)."""
    return str(int(current or 0) + delta)


class AggregateRepository:
    """Versioned, idempotent updates of single aggregate documents."""

    def __init__(
        self,
        store: IDocumentStore,
        *,
        max_retries: int = 16,
        applied_events_limit: int = DEFAULT_APPLIED_EVENTS_LIMIT,
    ) -> None:
        self.store = store
        self.max_retries = max_retries
        self.applied_events_limit = applied_events_limit

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Live document data; None for absent or deleted documents."""
        doc = await self.store.get(collection, doc_id)
        return doc.data if doc and not is_tombstone(doc.data) else None

    async def mutate(
        self,
        collection: str,
        doc_id: str,
        mutator: Mutator,
        *,
        event_key: str,
    ) -> MutationOutcome:
        """Apply `mutator` to one document at most once per `event_key`.

        The mutator receives a private copy of the current data (or None when
        the document does not exist or was deleted) and returns the full new
        document, the `DELETE` sentinel, or None to leave the document untouched. It may run
        more than once under contention and must not have side effects beyond
        logging.
        """
        for attempt in range(1, self.max_retries + 1):
            doc = await self.store.get(collection, doc_id)
            version = doc.version if doc else 0
            stored = doc.data if doc else {}
            current = None if doc is None or is_tombstone(stored) else stored

            applied: list[str] = list(stored.get(APPLIED_KEY, []))
            if event_key in applied:
                log.debug("%s/%s already applied %s", collection, doc_id, event_key)
                return "duplicate"

            result = mutator(copy.deepcopy(current))
            if result is None:
                return "skipped"

            if result is DELETE:
                if current is None:
                    return "skipped"
                applied.append(event_key)
                tombstone = {TOMBSTONE_KEY: True, APPLIED_KEY: applied[-self.applied_events_limit :]}
                if await self.store.compare_and_set(collection, doc_id, tombstone, expected_version=version):
                    return "deleted"
            else:
                assert isinstance(result, dict)
                result.pop(TOMBSTONE_KEY, None)
                applied.append(event_key)
                result[APPLIED_KEY] = applied[-self.applied_events_limit :]
                if await self.store.compare_and_set(collection, doc_id, result, expected_version=version):
                    return "applied"

            log.debug("%s/%s version conflict (attempt %d/%d)", collection, doc_id, attempt, self.max_retries)

        raise StoreContentionError(collection, doc_id, self.max_retries)
