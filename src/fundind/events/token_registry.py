"""Token registry variants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fundind.aggregates.tokens import TOKEN_ADDED
from fundind.events.base import HandlerContext, LaunchpadEvent
from fundind.units import format_units

TOKEN_OPERATION_TYPES = {
    1: "TOKEN_ADDED",
    2: "TOKEN_REMOVED",
    3: "TOKEN_SUPPORT_DISABLED",
    4: "TOKEN_SUPPORT_ENABLED",
    5: "MIN_CONTRIBUTION_UPDATED",
}


@dataclass(frozen=True, slots=True)
class TokenRegistryOperation(LaunchpadEvent):
    kind = "TokenRegistryOperation"
    audit_collection = "tokenEvents"
    operation_names = TOKEN_OPERATION_TYPES

    op_type: int
    token: str
    value: int
    decimals: int

    async def formatting_decimals(self, ctx: HandlerContext) -> int:
        # TOKEN_ADDED introduces the decimals; other ops carry 0 or a stale value.
        if self.op_type == TOKEN_ADDED:
            return self.decimals
        return await ctx.tokens.decimals_of(self.token)

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        return {
            "operation": self.operation(self.op_type),
            "token": self.token,
            "value": str(self.value),
            "formattedValue": format_units(self.value, await self.formatting_decimals(ctx)),
            "decimals": self.decimals,
        }

    async def project(self, ctx: HandlerContext, now: str) -> None:
        await ctx.tokens.apply_operation(
            self.token,
            self.op_type,
            self.operation_names.get(self.op_type, "UNKNOWN"),
            self.value,
            self.decimals,
            event_key=self.meta.event_key,
            now=now,
        )
