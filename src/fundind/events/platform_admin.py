"""Platform admin variants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fundind.events.base import HandlerContext, LaunchpadEvent

ADMIN_OPERATION_TYPES = {1: "ADMIN_ADDED", 2: "ADMIN_REMOVED"}


@dataclass(frozen=True, slots=True)
class PlatformAdminOperation(LaunchpadEvent):
    kind = "PlatformAdminOperation"
    audit_collection = "adminEvents"
    operation_names = ADMIN_OPERATION_TYPES

    op_type: int
    admin: str
    old_value: int
    new_value: int

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        return {
            "operation": self.operation(self.op_type),
            "admin": self.admin,
            "oldValue": str(self.old_value),
            "newValue": str(self.new_value),
        }

    async def project(self, ctx: HandlerContext, now: str) -> None:
        await ctx.admins.apply_operation(self.admin, self.op_type, event_key=self.meta.event_key, now=now)
