"""Event registries for the launchpad contracts.

Each function returns the registry for one emitting contract, built from the
Solidity event signatures via the registry_builder module. Registries are
composable and can be merged with `{**a, **b}` syntax; `make_launchpad_registry`
is the union the dispatcher uses.

Example
-------
>>> from fundind.decoding.registries import make_campaign_event_registry, make_factory_registry
>>> reg = {**make_campaign_event_registry(), **make_factory_registry()}
"""

from __future__ import annotations

from .registry_builder import make_registry
from .specs import EventRegistry

# -------------------------
# Campaign event collector
# -------------------------

CAMPAIGN_EVENT_SIGNATURES = [
    "Contribution(address indexed contributor, uint256 amount, bytes32 indexed campaignId, address indexed campaignAddress)",
    "RefundIssued(address indexed contributor, uint256 amount, bytes32 indexed campaignId, address indexed campaignAddress)",
    "FundsClaimed(address indexed initiator, uint256 amount, bytes32 indexed campaignId, address indexed campaignAddress)",
    "CampaignStatusChanged(uint8 oldStatus, uint8 newStatus, uint8 reason, bytes32 indexed campaignId, address indexed campaignAddress)",
    "AdminOverrideSet(bool indexed status, address indexed admin, bytes32 indexed campaignId, address campaignAddress)",
    "FundsOperation(address indexed token, uint256 amount, uint8 opType, address initiator, bytes32 indexed campaignId, address indexed campaignAddress)",
    "CampaignEventCollectorOperation(uint8 opType, address indexed sender, address indexed targetAddress)",
]


def make_campaign_event_registry() -> EventRegistry:
    """Return registry for the campaign event collector."""
    return make_registry(CAMPAIGN_EVENT_SIGNATURES)


# -------------------------
# Campaign factory
# -------------------------


def make_factory_registry() -> EventRegistry:
    """Return registry for campaign factory events (FactoryOperation)."""
    return make_registry(
        "FactoryOperation(uint8 opType, address indexed campaignAddress, address indexed creator, bytes32 indexed campaignId)"
    )


# -------------------------
# DeFi integration manager
# -------------------------


def make_defi_registry() -> EventRegistry:
    """Return registry for the lending integration manager."""
    return make_registry([
        "DefiOperation(uint8 opType, address indexed sender, address indexed token, uint256 amount, bytes32 indexed campaignId)",
        "ConfigUpdated(uint8 configType, address oldAddress, address newAddress)",
    ])


# -------------------------
# Platform configuration contracts
# -------------------------


def make_fee_manager_registry() -> EventRegistry:
    return make_registry(
        "FeeManagerOperation(uint8 opType, address indexed relatedAddress, address indexed secondaryAddress, uint256 primaryValue, uint256 secondaryValue)"
    )


def make_platform_admin_registry() -> EventRegistry:
    return make_registry(
        "PlatformAdminOperation(uint8 opType, address indexed admin, uint256 oldValue, uint256 newValue)"
    )


def make_token_registry_registry() -> EventRegistry:
    return make_registry(
        "TokenRegistryOperation(uint8 opType, address indexed token, uint256 value, uint8 decimals)"
    )


def make_launchpad_registry() -> EventRegistry:
    """Union of every launchpad contract registry, keyed by topic0."""
    return {
        **make_campaign_event_registry(),
        **make_factory_registry(),
        **make_defi_registry(),
        **make_fee_manager_registry(),
        **make_platform_admin_registry(),
        **make_token_registry_registry(),
    }
