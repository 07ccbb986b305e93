"""Per-kind event variants and their handlers.

`EVENT_TYPES` maps each decoded kind to its variant; `build_event` turns a
`DecodedEvent` into the variant the dispatcher applies.
"""

from __future__ import annotations

from fundind.decoding.decoder import DecodedEvent
from fundind.events.audit import AuditWriter
from fundind.events.base import HandlerContext, LaunchpadEvent
from fundind.events.campaign import (
    AdminOverrideSet,
    CampaignEventCollectorOperation,
    CampaignStatusChanged,
    Contribution,
    FundsClaimed,
    FundsOperation,
    RefundIssued,
)
from fundind.events.defi import ConfigUpdated, DefiOperation
from fundind.events.factory import FactoryOperation
from fundind.events.fee_manager import FeeManagerOperation
from fundind.events.platform_admin import PlatformAdminOperation
from fundind.events.token_registry import TokenRegistryOperation

EVENT_TYPES: dict[str, type[LaunchpadEvent]] = {
    cls.kind: cls
    for cls in (
        Contribution,
        RefundIssued,
        FundsClaimed,
        CampaignStatusChanged,
        AdminOverrideSet,
        FundsOperation,
        CampaignEventCollectorOperation,
        FactoryOperation,
        DefiOperation,
        ConfigUpdated,
        FeeManagerOperation,
        PlatformAdminOperation,
        TokenRegistryOperation,
    )
}


def build_event(decoded: DecodedEvent) -> LaunchpadEvent | None:
    """Variant for a decoded event, or None when no handler knows the kind."""
    cls = EVENT_TYPES.get(decoded.kind)
    if cls is None:
        return None
    return cls.from_decoded(decoded)


__all__ = [
    "EVENT_TYPES",
    "build_event",
    "AuditWriter",
    "HandlerContext",
    "LaunchpadEvent",
    "AdminOverrideSet",
    "CampaignEventCollectorOperation",
    "CampaignStatusChanged",
    "Contribution",
    "FundsClaimed",
    "FundsOperation",
    "RefundIssued",
    "ConfigUpdated",
    "DefiOperation",
    "FactoryOperation",
    "FeeManagerOperation",
    "PlatformAdminOperation",
    "TokenRegistryOperation",
]
