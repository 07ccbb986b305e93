"""Token registry aggregate (`tokens/{token}`)."""

from __future__ import annotations

import logging
from typing import Any, Final

from fundind.aggregates.base import DELETE, AggregateRepository, MutationOutcome
from fundind.units import format_units

log = logging.getLogger(__name__)

TOKENS: Final = "tokens"

TOKEN_ADDED: Final = 1
TOKEN_REMOVED: Final = 2
TOKEN_SUPPORT_DISABLED: Final = 3
TOKEN_SUPPORT_ENABLED: Final = 4
MIN_CONTRIBUTION_UPDATED: Final = 5


class TokenAggregates:
    def __init__(self, repo: AggregateRepository, *, default_decimals: int = 18) -> None:
        self.repo = repo
        self.default_decimals = default_decimals

    async def get(self, token: str) -> dict[str, Any] | None:
        return await self.repo.get(TOKENS, token)

    async def decimals_of(self, token: str) -> int:
        """Decimals recorded for `token`, or the default when unknown."""
        record = await self.get(token)
        if record is None or record.get("decimals") is None:
            return self.default_decimals
        return int(record["decimals"])

    async def apply_operation(
        self,
        token: str,
        op_code: int,
        op_name: str,
        value: int,
        decimals: int,
        *,
        event_key: str,
        now: str,
    ) -> MutationOutcome:
        def mutator(doc: dict[str, Any] | None) -> Any:
            if op_code == TOKEN_ADDED:
                doc = doc or {"address": token}
                doc.update(
                    isSupported=True,
                    decimals=decimals,
                    minimumContribution=str(value),
                    minimumContributionFormatted=format_units(value, decimals),
                )
            elif op_code == TOKEN_REMOVED:
                if doc is None:
                    log.warning("Attempted to remove unknown token %s", token)
                    return None
                return DELETE
            elif op_code == TOKEN_SUPPORT_ENABLED:
                doc = doc or {"address": token, "decimals": decimals}
                doc["isSupported"] = True
            elif op_code in (TOKEN_SUPPORT_DISABLED, MIN_CONTRIBUTION_UPDATED):
                if doc is None:
                    log.warning("%s for unknown token %s; ignored", op_name, token)
                    return None
                if op_code == TOKEN_SUPPORT_DISABLED:
                    doc["isSupported"] = False
                else:
                    known = doc.get("decimals")
                    d = int(known) if known is not None else self.default_decimals
                    doc["minimumContribution"] = str(value)
                    doc["minimumContributionFormatted"] = format_units(value, d)
            else:
                log.warning("Unknown token registry operation %d for %s", op_code, token)
                return None
            doc["lastOperation"] = op_name
            doc["lastUpdated"] = now
            return doc

        outcome = await self.repo.mutate(TOKENS, token, mutator, event_key=event_key)
        if outcome in ("applied", "deleted"):
            log.info("Token %s: %s", token, op_name)
        return outcome
