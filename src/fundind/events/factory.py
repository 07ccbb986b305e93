"""Campaign factory variants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fundind.aggregates.base import to_iso
from fundind.events.base import HandlerContext, LaunchpadEvent

FACTORY_OPERATION_TYPES = {1: "CAMPAIGN_CREATED"}
CAMPAIGN_CREATED = 1


@dataclass(frozen=True, slots=True)
class FactoryOperation(LaunchpadEvent):
    kind = "FactoryOperation"
    audit_collection = "factoryEvents"
    operation_names = FACTORY_OPERATION_TYPES

    op_type: int
    campaign_address: str
    creator: str
    campaign_id: str

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        return {
            "operation": self.operation(self.op_type),
            "campaignAddress": self.campaign_address,
            "creator": self.creator,
            "campaignId": self.campaign_id,
        }

    async def project(self, ctx: HandlerContext, now: str) -> None:
        if self.op_type != CAMPAIGN_CREATED:
            return
        await ctx.campaigns.record_creation(
            self.campaign_id,
            self.campaign_address,
            self.creator,
            block_number=self.meta.block_number,
            transaction_hash=self.meta.tx_hash,
            created_at=to_iso(self.meta.block_timestamp) or now,
            event_key=self.meta.event_key,
            now=now,
        )
