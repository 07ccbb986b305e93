"""Event variants: one frozen dataclass per event kind with a uniform `apply`.

`LaunchpadEvent.apply(ctx)`:

1. builds the audit record (common envelope + kind-specific fields),
2. inserts it under the log's event key (insert-if-absent),
3. runs the kind's aggregate projection.

The projection runs even when the audit record already existed: a previous
attempt may have stored the audit row and then failed on the aggregate. The
aggregate writes are themselves idempotent per event key.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from fundind.aggregates import (
    AdminAggregates,
    AggregateRepository,
    AuthorizationAggregates,
    CampaignAggregates,
    ConfigAggregates,
    TokenAggregates,
    YieldAggregates,
)
from fundind.aggregates.base import to_iso, utc_now
from fundind.core.config import PipelineConfig
from fundind.core.errors import LogDecodeError
from fundind.core.interfaces import IDocumentStore
from fundind.core.models import Meta
from fundind.decoding.decoder import DecodedEvent
from fundind.events.audit import AuditWriter

log = logging.getLogger(__name__)


@dataclass
class HandlerContext:
    """Everything a handler needs to write audit rows and aggregates."""

    store: IDocumentStore
    config: PipelineConfig
    audit: AuditWriter
    campaigns: CampaignAggregates
    yields: YieldAggregates
    tokens: TokenAggregates
    admins: AdminAggregates
    configs: ConfigAggregates
    authorizations: AuthorizationAggregates
    clock: Callable[[], str] = field(default=utc_now)

    @classmethod
    def build(
        cls,
        store: IDocumentStore,
        config: PipelineConfig | None = None,
        *,
        clock: Callable[[], str] = utc_now,
    ) -> HandlerContext:
        config = config or PipelineConfig()
        repo = AggregateRepository(
            store,
            max_retries=config.max_cas_retries,
            applied_events_limit=config.applied_events_limit,
        )
        return cls(
            store=store,
            config=config,
            audit=AuditWriter(store),
            campaigns=CampaignAggregates(repo),
            yields=YieldAggregates(repo),
            tokens=TokenAggregates(repo, default_decimals=config.default_token_decimals),
            admins=AdminAggregates(repo),
            configs=ConfigAggregates(repo, strategy=config.config_field_strategy),
            authorizations=AuthorizationAggregates(repo),
            clock=clock,
        )


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


@dataclass(frozen=True, slots=True)
class LaunchpadEvent:
    """Base variant. Subclasses declare their decoded fields in snake_case."""

    kind: ClassVar[str]
    audit_collection: ClassVar[str]
    operation_names: ClassVar[Mapping[int, str]] = {}

    meta: Meta

    @classmethod
    def from_decoded(cls, decoded: DecodedEvent) -> LaunchpadEvent:
        """Map the decoder's camelCase values onto this variant's fields."""
        kwargs: dict[str, Any] = {"meta": decoded.meta}
        for f in fields(cls):
            if f.name == "meta":
                continue
            key = _camel(f.name)
            if key not in decoded.values:
                raise LogDecodeError(f"{decoded.kind}: decoded values lack {key!r}")
            kwargs[f.name] = decoded.values[key]
        return cls(**kwargs)

    # ---------- audit ----------

    def envelope(self, now: str) -> dict[str, Any]:
        m = self.meta
        return {
            "eventType": self.kind,
            "rawEventId": m.delivery_id,
            "createdAt": now,
            "blockNumber": m.block_number,
            "blockTimestamp": to_iso(m.block_timestamp),
            "transactionHash": m.tx_hash,
            "contractAddress": m.address,
            "eventKey": m.event_key,
            "logIndex": m.log_index,
        }

    def operation(self, code: int) -> dict[str, Any]:
        """`{code, name}` for an op code; unknown codes are labelled UNKNOWN."""
        return {"code": code, "name": self.operation_name(code)}

    def operation_name(self, code: int) -> str:
        name = self.operation_names.get(code)
        if name is None:
            log.warning("Unknown %s operation code %d (%s)", self.kind, code, self.meta.event_key)
            return "UNKNOWN"
        return name

    async def audit_fields(self, ctx: HandlerContext) -> dict[str, Any]:
        return {}

    async def audit_record(self, ctx: HandlerContext, now: str) -> dict[str, Any]:
        record = self.envelope(now)
        record.update(await self.audit_fields(ctx))
        return record

    # ---------- projection ----------

    async def project(self, ctx: HandlerContext, now: str) -> None:
        """Aggregate updates for this kind; pure-append kinds keep the default."""

    async def apply(self, ctx: HandlerContext) -> bool:
        """Write the audit record and project; True if the audit row was new."""
        now = ctx.clock()
        record = await self.audit_record(ctx, now)
        fresh = await ctx.audit.write(self.audit_collection, self.meta.event_key, record)
        await self.project(ctx, now)
        return fresh

    # ---------- helpers ----------

    def network_id(self, ctx: HandlerContext) -> int:
        """Chain id of the delivery's network; unsupported networks fail the log."""
        network_id = ctx.config.network_id(self.meta.network)
        if network_id is None:
            raise LogDecodeError(f"{self.kind}: unsupported network {self.meta.network!r}")
        return network_id
