"""Platform admin roster (`admins/{admin}`)."""

from __future__ import annotations

import logging
from typing import Any, Final

from fundind.aggregates.base import AggregateRepository, MutationOutcome

log = logging.getLogger(__name__)

ADMINS: Final = "admins"

ADMIN_ADDED: Final = 1
ADMIN_REMOVED: Final = 2


class AdminAggregates:
    def __init__(self, repo: AggregateRepository) -> None:
        self.repo = repo

    async def get(self, admin: str) -> dict[str, Any] | None:
        return await self.repo.get(ADMINS, admin)

    async def apply_operation(self, admin: str, op_code: int, *, event_key: str, now: str) -> MutationOutcome:
        """Upsert on ADMIN_ADDED, soft-delete on ADMIN_REMOVED."""

        def mutator(doc: dict[str, Any] | None) -> dict[str, Any] | None:
            if op_code == ADMIN_ADDED:
                doc = doc or {}
                doc.update(address=admin, isActive=True, lastOperation="ADMIN_ADDED", lastUpdated=now)
                return doc
            if op_code == ADMIN_REMOVED:
                if doc is None:
                    log.warning("Attempted to remove non-existent admin %s", admin)
                    return None
                doc.update(isActive=False, lastOperation="ADMIN_REMOVED", lastUpdated=now)
                return doc
            log.warning("Unknown platform admin operation %d for %s", op_code, admin)
            return None

        outcome = await self.repo.mutate(ADMINS, admin, mutator, event_key=event_key)
        if outcome == "applied":
            log.info("Admin record updated for %s (op %d)", admin, op_code)
        return outcome
