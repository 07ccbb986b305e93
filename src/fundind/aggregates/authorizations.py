"""Factory and campaign authorization flags."""

from __future__ import annotations

import logging
from typing import Any, Final

from fundind.aggregates.base import AggregateRepository, MutationOutcome

log = logging.getLogger(__name__)

AUTHORIZED_FACTORIES: Final = "authorizedFactories"
AUTHORIZED_CAMPAIGNS: Final = "authorizedCampaigns"


class AuthorizationAggregates:
    def __init__(self, repo: AggregateRepository) -> None:
        self.repo = repo

    async def _set(
        self,
        collection: str,
        address: str,
        authorized: bool,
        extra: dict[str, Any],
        *,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        def mutator(doc: dict[str, Any] | None) -> dict[str, Any]:
            doc = doc or {}
            doc["address"] = address
            doc["isAuthorized"] = authorized
            if authorized:
                doc.update(extra)
            doc["lastUpdated"] = now
            return doc

        outcome = await self.repo.mutate(collection, address, mutator, event_key=event_key)
        if outcome == "applied":
            log.info("%s %s -> isAuthorized=%s", collection, address, authorized)
        return outcome

    async def set_factory(self, factory: str, authorized: bool, *, event_key: str, now: str) -> MutationOutcome:
        return await self._set(AUTHORIZED_FACTORIES, factory, authorized, {}, event_key=event_key, now=now)

    async def set_campaign(
        self,
        campaign: str,
        authorized: bool,
        *,
        authorized_by: str,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        return await self._set(
            AUTHORIZED_CAMPAIGNS,
            campaign,
            authorized,
            {"authorizedBy": authorized_by},
            event_key=event_key,
            now=now,
        )
