"""Campaign event collector variants."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar

from fundind.events.base import HandlerContext, LaunchpadEvent
from fundind.units import format_units

log = logging.getLogger(__name__)

FUNDS_OPERATION_TYPES = {1: "DEPOSIT", 2: "WITHDRAWAL", 3: "REFUND", 4: "CLAIM"}
COLLECTOR_OPERATION_TYPES = {
    1: "FACTORY_AUTHORIZED",
    2: "FACTORY_DEAUTHORIZED",
    3: "CAMPAIGN_AUTHORIZED",
    4: "CAMPAIGN_DEAUTHORIZED",
}


# ---------- cumulative totals ----------


@dataclass(frozen=True, slots=True)
class _CampaignAmountEvent(LaunchpadEvent):
    total: ClassVar[str]

    amount: int
    campaign_id: str
    campaign_address: str

    async def project(self, ctx: HandlerContext, now: str) -> None:
        await ctx.campaigns.add_to_total(
            self.campaign_id,
            self.campaign_address,
            self.total,
            self.amount,
            event_key=self.meta.event_key,
            now=now,
        )


@dataclass(frozen=True, slots=True)
class Contribution(_CampaignAmountEvent):
    kind = "Contribution"
    audit_collection = "contributionEvents"
    total = "contributions"

    contributor: str

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        return {
            "contributor": self.contributor,
            "amount": str(self.amount),
            "campaignId": self.campaign_id,
            "campaignAddress": self.campaign_address,
        }


@dataclass(frozen=True, slots=True)
class RefundIssued(_CampaignAmountEvent):
    kind = "RefundIssued"
    audit_collection = "refundEvents"
    total = "refunds"

    contributor: str

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        return {
            "contributor": self.contributor,
            "amount": str(self.amount),
            "campaignId": self.campaign_id,
            "campaignAddress": self.campaign_address,
        }


@dataclass(frozen=True, slots=True)
class FundsClaimed(_CampaignAmountEvent):
    kind = "FundsClaimed"
    audit_collection = "claimEvents"
    total = "claims"

    initiator: str

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        return {
            "initiator": self.initiator,
            "amount": str(self.amount),
            "campaignId": self.campaign_id,
            "campaignAddress": self.campaign_address,
        }


# ---------- replace-field updates ----------


@dataclass(frozen=True, slots=True)
class CampaignStatusChanged(LaunchpadEvent):
    kind = "CampaignStatusChanged"
    audit_collection = "campaignStatusEvents"

    old_status: int
    new_status: int
    reason: int
    campaign_id: str
    campaign_address: str

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        return {
            "oldStatus": self.old_status,
            "newStatus": self.new_status,
            "reason": self.reason,
            "campaignId": self.campaign_id,
            "campaignAddress": self.campaign_address,
        }

    async def project(self, ctx: HandlerContext, now: str) -> None:
        await ctx.campaigns.set_status(
            self.campaign_id,
            self.campaign_address,
            self.new_status,
            self.reason,
            event_key=self.meta.event_key,
            now=now,
        )


@dataclass(frozen=True, slots=True)
class AdminOverrideSet(LaunchpadEvent):
    kind = "AdminOverrideSet"
    audit_collection = "adminOverrideEvents"

    status: bool
    admin: str
    campaign_id: str
    campaign_address: str

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        return {
            "status": self.status,
            "admin": self.admin,
            "campaignId": self.campaign_id,
            "campaignAddress": self.campaign_address,
        }

    async def project(self, ctx: HandlerContext, now: str) -> None:
        await ctx.campaigns.set_admin_override(
            self.campaign_id,
            self.campaign_address,
            self.status,
            self.admin,
            event_key=self.meta.event_key,
            now=now,
        )


@dataclass(frozen=True, slots=True)
class FundsOperation(LaunchpadEvent):
    """Signed per-token balance move: code 1 credits, 2/3/4 debit."""

    kind = "FundsOperation"
    audit_collection = "fundsOperationEvents"
    operation_names = FUNDS_OPERATION_TYPES

    token: str
    amount: int
    op_type: int
    initiator: str
    campaign_id: str
    campaign_address: str

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        decimals = await ctx.tokens.decimals_of(self.token)
        return {
            "token": self.token,
            "amount": str(self.amount),
            "formattedAmount": format_units(self.amount, decimals),
            "opType": self.op_type,
            "operation": self.operation(self.op_type),
            "initiator": self.initiator,
            "campaignId": self.campaign_id,
            "campaignAddress": self.campaign_address,
        }

    async def project(self, ctx: HandlerContext, now: str) -> None:
        await ctx.campaigns.apply_funds_operation(
            self.campaign_id,
            self.campaign_address,
            self.token,
            self.op_type,
            self.operation_names.get(self.op_type, "UNKNOWN"),
            self.amount,
            event_key=self.meta.event_key,
            now=now,
        )


@dataclass(frozen=True, slots=True)
class CampaignEventCollectorOperation(LaunchpadEvent):
    kind = "CampaignEventCollectorOperation"
    audit_collection = "eventCollectorOperations"
    operation_names = COLLECTOR_OPERATION_TYPES

    op_type: int
    sender: str
    target_address: str

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        return {
            "operation": self.operation(self.op_type),
            "sender": self.sender,
            "targetAddress": self.target_address,
        }

    async def project(self, ctx: HandlerContext, now: str) -> None:
        key = self.meta.event_key
        if self.op_type in (1, 2):
            await ctx.authorizations.set_factory(
                self.target_address, self.op_type == 1, event_key=key, now=now
            )
        elif self.op_type in (3, 4):
            await ctx.authorizations.set_campaign(
                self.target_address,
                self.op_type == 3,
                authorized_by=self.sender,
                event_key=key,
                now=now,
            )
