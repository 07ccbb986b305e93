"""Aggregate accessors over the document store.

Every accessor funnels its writes through `AggregateRepository.mutate`, which
applies one versioned, idempotent read-modify-write per call.
"""

from fundind.aggregates.admins import AdminAggregates
from fundind.aggregates.authorizations import AuthorizationAggregates
from fundind.aggregates.base import APPLIED_KEY, DELETE, AggregateRepository, MutationOutcome
from fundind.aggregates.campaigns import CampaignAggregates
from fundind.aggregates.configs import FIELD_SELECTORS, ConfigAggregates, ConfigCandidate
from fundind.aggregates.tokens import TokenAggregates
from fundind.aggregates.yields import YieldAggregates

__all__ = [
    "AdminAggregates",
    "AuthorizationAggregates",
    "APPLIED_KEY",
    "DELETE",
    "AggregateRepository",
    "MutationOutcome",
    "CampaignAggregates",
    "FIELD_SELECTORS",
    "ConfigAggregates",
    "ConfigCandidate",
    "TokenAggregates",
    "YieldAggregates",
]
