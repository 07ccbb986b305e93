"""Lending-yield aggregate (`campaignYield/{campaignId}`)."""

from __future__ import annotations

import logging
from typing import Any, Final

from fundind.aggregates.base import AggregateRepository, MutationOutcome, add_amounts

log = logging.getLogger(__name__)

CAMPAIGN_YIELD: Final = "campaignYield"

# op code -> (flag field, cumulative amount field, lastOperation)
YIELD_OPERATIONS: Final = {
    1: ("deposited", "depositAmount", "DEPOSITED"),
    2: ("withdrawn", "withdrawAmount", "WITHDRAWN_TO_CONTRACT"),
    6: ("treasuryFeesPaid", "treasuryFeeAmount", "WITHDRAWN_TO_PLATFORM_TREASURY"),
}


def new_yield(campaign_id: str, token: str, network_id: int) -> dict[str, Any]:
    return {
        "campaignId": campaign_id,
        "token": token,
        "deposited": False,
        "depositAmount": "0",
        "withdrawn": False,
        "withdrawAmount": "0",
        "treasuryFeesPaid": False,
        "treasuryFeeAmount": "0",
        "lastOperation": "",
        "networkId": network_id,
    }


class YieldAggregates:
    def __init__(self, repo: AggregateRepository) -> None:
        self.repo = repo

    async def get(self, campaign_id: str) -> dict[str, Any] | None:
        return await self.repo.get(CAMPAIGN_YIELD, campaign_id)

    async def record_operation(
        self,
        campaign_id: str,
        token: str,
        op_code: int,
        amount: int,
        network_id: int,
        *,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        """Accumulate a deposit or withdrawal; other codes leave the record alone."""
        if op_code not in YIELD_OPERATIONS:
            log.debug("DeFi operation %d does not touch campaign yield", op_code)
            return "skipped"
        flag, amount_field, operation = YIELD_OPERATIONS[op_code]

        def mutator(doc: dict[str, Any] | None) -> dict[str, Any]:
            doc = doc if doc is not None else new_yield(campaign_id, token, network_id)
            doc[flag] = True
            doc[amount_field] = add_amounts(doc.get(amount_field), amount)
            doc["lastOperation"] = operation
            doc["networkId"] = network_id
            doc["lastUpdated"] = now
            return doc

        outcome = await self.repo.mutate(CAMPAIGN_YIELD, campaign_id, mutator, event_key=event_key)
        if outcome == "applied":
            log.info("Campaign yield %s updated: %s %d", campaign_id, operation, amount)
        return outcome
