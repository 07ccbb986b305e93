"""Fee manager variants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fundind.events.base import HandlerContext, LaunchpadEvent

FEE_OPERATION_TYPES = {1: "TREASURY_UPDATED", 2: "SHARE_UPDATED"}


@dataclass(frozen=True, slots=True)
class FeeManagerOperation(LaunchpadEvent):
    """Treasury (old in relatedAddress, new in secondaryAddress) or share
    (old in primaryValue, new in secondaryValue) change."""

    kind = "FeeManagerOperation"
    audit_collection = "feeEvents"
    operation_names = FEE_OPERATION_TYPES

    op_type: int
    related_address: str
    secondary_address: str
    primary_value: int
    secondary_value: int

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        return {
            "operation": self.operation(self.op_type),
            "relatedAddress": self.related_address,
            "secondaryAddress": self.secondary_address,
            "primaryValue": str(self.primary_value),
            "secondaryValue": str(self.secondary_value),
        }

    async def project(self, ctx: HandlerContext, now: str) -> None:
        await ctx.configs.update_fee_config(
            self.op_type,
            self.related_address,
            self.secondary_address,
            self.primary_value,
            self.secondary_value,
            event_key=self.meta.event_key,
            now=now,
        )
