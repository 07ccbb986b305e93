"""Append-only audit rows keyed by event key."""

from __future__ import annotations

import logging
from typing import Any

from fundind.core.interfaces import IDocumentStore

log = logging.getLogger(__name__)


class AuditWriter:
    def __init__(self, store: IDocumentStore) -> None:
        self.store = store

    async def write(self, collection: str, event_key: str, record: dict[str, Any]) -> bool:
        """Insert `record` as `collection/event_key` unless it already exists."""
        fresh = await self.store.create(collection, event_key, record)
        if fresh:
            log.info("%s stored %s (%s)", collection, event_key, record.get("eventType"))
        else:
            log.debug("%s already holds %s", collection, event_key)
        return fresh
