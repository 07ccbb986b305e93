"""Singleton configuration aggregates (`feeConfig/current`, `defiConfig/{networkId}`).

Configuration-change events carry an old and a new value; the consumer has to
decide which configuration field they refer to. That decision is isolated in a
named field-selection strategy:

- `by_operation_code` (default): pick the candidate bound to the event's op
  code. Fee manager updates always resolve this way, their op code is the
  only reliable selector (the share fields are numbers, the treasury fields
  addresses).
- `match_old_value`: pick the first candidate whose current value equals the
  event's old value (addresses compared case-insensitively), else the first
  candidate whose current value is still unset. Selectable for DeFi config
  updates only.

Both return None when nothing fits; the update then only records an
"unknown" lastOperation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Final

from fundind.aggregates.base import AggregateRepository, MutationOutcome

log = logging.getLogger(__name__)

FEE_CONFIG: Final = "feeConfig"
FEE_CONFIG_ID: Final = "current"
DEFI_CONFIG: Final = "defiConfig"

ZERO_ADDRESS: Final = "0x" + "0" * 40


@dataclass(frozen=True)
class ConfigCandidate:
    """One configuration field an update event may refer to."""

    field: str
    old: Any
    new: Any
    code: int
    operation: str


FieldSelector = Callable[[dict[str, Any], Sequence[ConfigCandidate], int], "ConfigCandidate | None"]


def _norm(value: Any) -> str:
    return "" if value is None else str(value).lower()


def _is_unset(value: Any) -> bool:
    return value is None or value == "" or _norm(value) == ZERO_ADDRESS


def match_old_value(
    current: dict[str, Any], candidates: Sequence[ConfigCandidate], op_code: int
) -> ConfigCandidate | None:
    for c in candidates:
        if not _is_unset(c.old) and _norm(current.get(c.field)) == _norm(c.old):
            return c
    for c in candidates:
        if _is_unset(current.get(c.field)):
            return c
    return None


def by_operation_code(
    current: dict[str, Any], candidates: Sequence[ConfigCandidate], op_code: int
) -> ConfigCandidate | None:
    return next((c for c in candidates if c.code == op_code), None)


FIELD_SELECTORS: Final[dict[str, FieldSelector]] = {
    "match_old_value": match_old_value,
    "by_operation_code": by_operation_code,
}


def defi_candidates(old_address: str, new_address: str) -> list[ConfigCandidate]:
    return [
        ConfigCandidate("aavePoolAddress", old_address, new_address, 5, "AAVE_POOL_UPDATED"),
        ConfigCandidate("tokenRegistryAddress", old_address, new_address, 3, "TOKEN_REGISTRY_UPDATED"),
        ConfigCandidate("feeManagerAddress", old_address, new_address, 4, "FEE_MANAGER_UPDATED"),
    ]


def fee_candidates(
    related_address: str, secondary_address: str, primary_value: int, secondary_value: int
) -> list[ConfigCandidate]:
    # treasury: old in relatedAddress, new in secondaryAddress
    # share: old in primaryValue, new in secondaryValue
    return [
        ConfigCandidate("treasuryAddress", related_address, secondary_address, 1, "TREASURY_UPDATED"),
        ConfigCandidate("platformFeeShare", primary_value, int(secondary_value), 2, "SHARE_UPDATED"),
    ]


class ConfigAggregates:
    def __init__(self, repo: AggregateRepository, *, strategy: str = "by_operation_code") -> None:
        self.repo = repo
        self.strategy = strategy
        self.select = FIELD_SELECTORS[strategy]

    async def get_fee_config(self) -> dict[str, Any] | None:
        return await self.repo.get(FEE_CONFIG, FEE_CONFIG_ID)

    async def get_defi_config(self, network_id: int) -> dict[str, Any] | None:
        return await self.repo.get(DEFI_CONFIG, str(network_id))

    async def _update(
        self,
        collection: str,
        doc_id: str,
        defaults: dict[str, Any],
        candidates: Sequence[ConfigCandidate],
        op_code: int,
        unknown_operation: str,
        select: FieldSelector,
        *,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        def mutator(doc: dict[str, Any] | None) -> dict[str, Any]:
            doc = doc if doc is not None else dict(defaults)
            chosen = select(doc, candidates, op_code)
            if chosen is None:
                log.warning(
                    "%s/%s: no field matches update (op %d, %s)",
                    collection,
                    doc_id,
                    op_code,
                    select.__name__,
                )
                doc["lastOperation"] = unknown_operation
            else:
                doc[chosen.field] = chosen.new
                doc["lastOperation"] = chosen.operation
            doc["lastUpdated"] = now
            return doc

        outcome = await self.repo.mutate(collection, doc_id, mutator, event_key=event_key)
        if outcome == "applied":
            log.info("%s/%s updated (op %d)", collection, doc_id, op_code)
        return outcome

    async def update_defi_config(
        self,
        network_id: int,
        op_code: int,
        old_address: str,
        new_address: str,
        *,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        defaults = {
            "aavePoolAddress": "",
            "tokenRegistryAddress": "",
            "feeManagerAddress": "",
            "lastOperation": "",
            "networkId": network_id,
        }
        return await self._update(
            DEFI_CONFIG,
            str(network_id),
            defaults,
            defi_candidates(old_address, new_address),
            op_code,
            "UNKNOWN_CONFIG_UPDATED",
            self.select,
            event_key=event_key,
            now=now,
        )

    async def update_fee_config(
        self,
        op_code: int,
        related_address: str,
        secondary_address: str,
        primary_value: int,
        secondary_value: int,
        *,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        defaults = {"treasuryAddress": "", "platformFeeShare": 0, "lastOperation": ""}
        return await self._update(
            FEE_CONFIG,
            FEE_CONFIG_ID,
            defaults,
            fee_candidates(related_address, secondary_address, primary_value, secondary_value),
            op_code,
            "UNKNOWN",
            by_operation_code,
            event_key=event_key,
            now=now,
        )
