"""Campaign aggregate (`campaigns/{campaignId}`) and its address index."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Final

from fundind.aggregates.base import AggregateRepository, MutationOutcome, add_amounts

log = logging.getLogger(__name__)

CAMPAIGNS: Final = "campaigns"
CAMPAIGN_ADDRESSES: Final = "campaignAddresses"

STATUS_TEXT: Final = {0: "DRAFT", 1: "ACTIVE", 2: "COMPLETE"}
STATUS_REASON_TEXT: Final = {0: "CREATED", 1: "GOAL_REACHED", 2: "DEADLINE_PASSED"}

# cumulative total -> (field, "last ... at" field)
TOTALS: Final = {
    "contributions": ("totalContributions", "lastContributionAt"),
    "refunds": ("totalRefunds", "lastRefundAt"),
    "claims": ("totalClaims", "lastClaimAt"),
}

FUNDS_CREDIT: Final = frozenset({1})
FUNDS_DEBIT: Final = frozenset({2, 3, 4})


def new_campaign(campaign_id: str, campaign_address: str | None, now: str) -> dict[str, Any]:
    """Defaults for a campaign first seen through any event."""
    return {
        "campaignId": campaign_id,
        "campaignAddress": campaign_address,
        "totalContributions": "0",
        "totalRefunds": "0",
        "totalClaims": "0",
        "status": 0,
        "createdAt": now,
    }


def apply_balance_delta(
    balances: dict[str, str], token: str, op_code: int, amount: int, *, campaign_id: str
) -> None:
    """Credit or debit one token balance in place; debits clamp at zero."""
    current = int(balances.get(token, "0"))
    if op_code in FUNDS_CREDIT:
        balances[token] = str(current + amount)
    elif op_code in FUNDS_DEBIT:
        if amount > current:
            log.warning(
                "Balance of %s in campaign %s would go negative (%d - %d); clamping to 0",
                token,
                campaign_id,
                current,
                amount,
            )
            balances[token] = "0"
        else:
            balances[token] = str(current - amount)
    else:
        log.warning("Unknown funds operation %d for campaign %s; balance unchanged", op_code, campaign_id)


class CampaignAggregates:
    """Accessors for the per-campaign aggregate."""

    def __init__(self, repo: AggregateRepository) -> None:
        self.repo = repo

    async def get(self, campaign_id: str) -> dict[str, Any] | None:
        return await self.repo.get(CAMPAIGNS, campaign_id)

    async def _update(
        self,
        campaign_id: str,
        campaign_address: str | None,
        fields: Callable[[dict[str, Any]], None],
        *,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        def mutator(doc: dict[str, Any] | None) -> dict[str, Any]:
            doc = doc if doc is not None else new_campaign(campaign_id, campaign_address, now)
            if campaign_address and not doc.get("campaignAddress"):
                doc["campaignAddress"] = campaign_address
            fields(doc)
            doc["lastUpdated"] = now
            return doc

        return await self.repo.mutate(CAMPAIGNS, campaign_id, mutator, event_key=event_key)

    async def add_to_total(
        self,
        campaign_id: str,
        campaign_address: str | None,
        total: str,
        amount: int,
        *,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        """Add `amount` to one of the cumulative totals (contributions/refunds/claims)."""
        field, at_field = TOTALS[total]

        def fields(doc: dict[str, Any]) -> None:
            doc[field] = add_amounts(doc.get(field), amount)
            doc[at_field] = now

        outcome = await self._update(campaign_id, campaign_address, fields, event_key=event_key, now=now)
        if outcome == "applied":
            log.info("Updated %s for campaign %s (+%d)", total, campaign_id, amount)
        return outcome

    async def set_status(
        self,
        campaign_id: str,
        campaign_address: str | None,
        status: int,
        reason: int,
        *,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        def fields(doc: dict[str, Any]) -> None:
            doc["status"] = status
            doc["statusReason"] = reason
            doc["statusText"] = STATUS_TEXT.get(status, "UNKNOWN")
            doc["statusReasonText"] = STATUS_REASON_TEXT.get(reason, "UNKNOWN")
            doc["lastStatusChangeAt"] = now

        return await self._update(campaign_id, campaign_address, fields, event_key=event_key, now=now)

    async def set_admin_override(
        self,
        campaign_id: str,
        campaign_address: str | None,
        status: bool,
        admin: str,
        *,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        def fields(doc: dict[str, Any]) -> None:
            doc["adminOverride"] = status
            doc["lastAdminOverrideBy"] = admin
            doc["lastAdminOverrideAt"] = now

        return await self._update(campaign_id, campaign_address, fields, event_key=event_key, now=now)

    async def apply_funds_operation(
        self,
        campaign_id: str,
        campaign_address: str | None,
        token: str,
        op_code: int,
        op_name: str,
        amount: int,
        *,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        def fields(doc: dict[str, Any]) -> None:
            balances = dict(doc.get("tokenBalances") or {})
            apply_balance_delta(balances, token, op_code, amount, campaign_id=campaign_id)
            doc["tokenBalances"] = balances
            doc["lastFundsOperationAt"] = now
            doc["lastFundsOperationType"] = op_code
            doc["lastFundsOperationTypeText"] = op_name

        return await self._update(campaign_id, campaign_address, fields, event_key=event_key, now=now)

    async def record_creation(
        self,
        campaign_id: str,
        campaign_address: str,
        creator: str,
        *,
        block_number: int | None,
        transaction_hash: str | None,
        created_at: str,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        """Merge factory creation metadata; totals already accumulated survive."""

        def fields(doc: dict[str, Any]) -> None:
            doc["campaignAddress"] = campaign_address
            doc["creator"] = creator
            doc["createdAt"] = created_at
            doc["blockNumber"] = block_number
            doc["transactionHash"] = transaction_hash
            doc.setdefault("statusText", STATUS_TEXT[0])

        outcome = await self._update(campaign_id, campaign_address, fields, event_key=event_key, now=now)

        def index(doc: dict[str, Any] | None) -> dict[str, Any]:
            doc = doc or {}
            doc.update(campaignId=campaign_id, creator=creator, createdAt=created_at)
            return doc

        await self.repo.mutate(CAMPAIGN_ADDRESSES, campaign_address, index, event_key=event_key)
        if outcome == "applied":
            log.info("Campaign %s created at %s by %s", campaign_id, campaign_address, creator)
        return outcome
