"""Lending integration manager variants."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fundind.events.base import HandlerContext, LaunchpadEvent
from fundind.units import format_units

log = logging.getLogger(__name__)

DEFI_OPERATION_TYPES = {
    1: "DEPOSITED",
    2: "WITHDRAWN_TO_CONTRACT",
    3: "TOKEN_REGISTRY_UPDATED",
    4: "FEE_MANAGER_UPDATED",
    5: "AAVE_POOL_UPDATED",
    6: "WITHDRAWN_TO_PLATFORM_TREASURY",
}

WITHDRAWAL_EVENTS = "withdrawalEvents"
# op code -> withdrawalType
WITHDRAWAL_TYPES = {2: "CREATOR", 6: "TREASURY"}


@dataclass(frozen=True, slots=True)
class DefiOperation(LaunchpadEvent):
    kind = "DefiOperation"
    audit_collection = "defiEvents"
    operation_names = DEFI_OPERATION_TYPES

    op_type: int
    sender: str
    token: str
    amount: int
    campaign_id: str

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        network_id = self.network_id(ctx)
        decimals = await ctx.tokens.decimals_of(self.token)
        return {
            "operation": self.operation(self.op_type),
            "sender": self.sender,
            "token": self.token,
            "amount": str(self.amount),
            "formattedAmount": format_units(self.amount, decimals),
            "campaignId": self.campaign_id,
            "networkId": network_id,
        }

    def withdrawal_record(self, now: str) -> dict[str, Any]:
        record = self.envelope(now)
        record.update(
            eventType="Withdrawal",
            campaignId=self.campaign_id,
            token=self.token,
            amount=str(self.amount),
            recipient=self.sender,
            withdrawalType=WITHDRAWAL_TYPES[self.op_type],
        )
        return record

    async def project(self, ctx: HandlerContext, now: str) -> None:
        key = self.meta.event_key
        await ctx.yields.record_operation(
            self.campaign_id,
            self.token,
            self.op_type,
            self.amount,
            self.network_id(ctx),
            event_key=key,
            now=now,
        )
        if self.op_type in WITHDRAWAL_TYPES:
            await ctx.audit.write(WITHDRAWAL_EVENTS, f"{key}:withdrawal", self.withdrawal_record(now))


@dataclass(frozen=True, slots=True)
class ConfigUpdated(LaunchpadEvent):
    kind = "ConfigUpdated"
    audit_collection = "defiConfigEvents"
    operation_names = DEFI_OPERATION_TYPES

    config_type: int
    old_address: str
    new_address: str

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        return {
            "operation": self.operation(self.config_type),
            "oldAddress": self.old_address,
            "newAddress": self.new_address,
            "networkId": self.network_id(ctx),
        }

    async def project(self, ctx: HandlerContext, now: str) -> None:
        await ctx.configs.update_defi_config(
            self.network_id(ctx),
            self.config_type,
            self.old_address,
            self.new_address,
            event_key=self.meta.event_key,
            now=now,
        )
