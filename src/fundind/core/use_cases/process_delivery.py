from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from fundind.aggregates.base import utc_now
from fundind.core.config import PipelineConfig
from fundind.core.delivery import normalize_delivery
from fundind.core.errors import (
    DeliveryError,
    DeliveryTimeoutError,
    LogDecodeError,
    RetryableDeliveryError,
    StoreError,
)
from fundind.core.interfaces import IDocumentStore, IEventRegistryProvider
from fundind.core.models import Delivery, EventLog, Meta
from fundind.decoding.decoder import decode_event
from fundind.decoding.specs import EventRegistry
from fundind.events import HandlerContext, build_event

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class ProcessStats:
    """
    Per-log outcome counters for one or more deliveries.

    - logs:       log entries seen
    - decoded:    logs matching a known signature and decoded
    - unknown:    logs whose topic0 is not registered (skipped)
    - malformed:  logs that failed decoding or validation (skipped)
    - failed:     logs whose handler hit a store or unexpected error
    - applied:    decoded logs whose audit record was new
    - duplicates: decoded logs already recorded by an earlier delivery
    """

    logs: int = 0
    decoded: int = 0
    unknown: int = 0
    malformed: int = 0
    failed: int = 0
    applied: int = 0
    duplicates: int = 0

    def merge(self, other: ProcessStats) -> None:
        for name in self.__dataclass_fields__:
            setattr(self, name, getattr(self, name) + getattr(other, name))


@dataclass(slots=True)
class DeliveryResult:
    """Outcome of one delivery inside `process_many`."""

    delivery_id: str
    stats: ProcessStats | None = None
    error: DeliveryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def retryable(self) -> bool:
        return self.error is not None and self.error.retryable


@dataclass(slots=True)
class _DeliveryRun:
    """Mutable state of one delivery while its logs are walked."""

    delivery: Delivery
    registry: EventRegistry
    stats: ProcessStats = field(default_factory=ProcessStats)
    store_failures: list[str] = field(default_factory=list)
    other_failures: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Domain service – DeliveryProcessor
# ---------------------------------------------------------------------------


class DeliveryProcessor:
    """
    Dispatcher for webhook deliveries.

    Per delivery: ExtractLogList -> for each log, in order:
    MatchSignature -> Decode -> Handle. A bad log only skips itself; store
    failures are collected and surfaced once all logs were attempted, as a
    `RetryableDeliveryError`, so the ingestion layer can redeliver safely.

    It depends only on abstract providers (interfaces) and can run many
    deliveries concurrently through `process_many`.
    """

    def __init__(
        self,
        store: IDocumentStore,
        registry_provider: IEventRegistryProvider,
        config: PipelineConfig | None = None,
        *,
        clock: Callable[[], str] = utc_now,
    ) -> None:
        self.config = config or PipelineConfig()
        self._registry_provider = registry_provider
        self._ctx = HandlerContext.build(store, self.config, clock=clock)

    async def process_raw(self, raw: Any, delivery_id: str | None = None) -> ProcessStats:
        """Normalize a raw webhook payload and process it."""
        return await self.process(normalize_delivery(raw, delivery_id))

    async def process(self, delivery: Delivery) -> ProcessStats:
        """Process one delivery within the configured time budget."""
        timeout = self.config.delivery_timeout_s or None
        try:
            return await asyncio.wait_for(self._process(delivery), timeout=timeout)
        except asyncio.TimeoutError as e:
            log.error("Delivery %s timed out after %ss", delivery.delivery_id, timeout)
            raise DeliveryTimeoutError(delivery.delivery_id, timeout or 0) from e

    async def process_many(
        self,
        deliveries: Iterable[Delivery],
        *,
        on_done: Callable[[DeliveryResult], None] | None = None,
    ) -> list[DeliveryResult]:
        """
        Process deliveries concurrently (bounded by `config.concurrency`).

        A failing delivery never affects its siblings; each gets its own
        `DeliveryResult`, in input order. `on_done` is called as each one
        finishes (e.g. to advance a progress bar).
        """
        sem = asyncio.Semaphore(self.config.concurrency)

        async def run_one(delivery: Delivery) -> DeliveryResult:
            async with sem:
                try:
                    stats = await self.process(delivery)
                    result = DeliveryResult(delivery.delivery_id, stats=stats)
                except DeliveryError as e:
                    log.warning("Delivery %s failed: %s", delivery.delivery_id, e)
                    result = DeliveryResult(delivery.delivery_id, error=e)
            if on_done is not None:
                on_done(result)
            return result

        tasks = [asyncio.create_task(run_one(d)) for d in deliveries]
        return list(await asyncio.gather(*tasks))

    # ---------- per delivery ----------

    async def _process(self, delivery: Delivery) -> ProcessStats:
        if not delivery.logs:
            log.debug("Delivery %s carries no logs", delivery.delivery_id)
            return ProcessStats()

        run = _DeliveryRun(delivery=delivery, registry=self._registry_provider.get_registry())
        log.info("Processing %d log(s) from delivery %s", len(delivery.logs), delivery.delivery_id)

        for ev in delivery.logs:
            run.stats.logs += 1
            await self._process_log(run, ev)

        if run.store_failures:
            raise RetryableDeliveryError(delivery.delivery_id, run.store_failures)
        if run.other_failures:
            raise DeliveryError(
                delivery.delivery_id,
                f"{len(run.other_failures)} log(s) failed: " + "; ".join(run.other_failures),
            )
        return run.stats

    # ---------- per log ----------

    async def _process_log(self, run: _DeliveryRun, ev: EventLog) -> None:
        meta = Meta.from_log(run.delivery, ev)
        key = meta.event_key
        stats = run.stats

        if ev.error is not None:
            stats.malformed += 1
            log.warning("Skipping malformed log %s: %s", key, ev.error)
            return

        try:
            decoded = decode_event(topics=ev.topics, data=ev.data_hex, meta=meta, registry=run.registry)
            if decoded is None:
                stats.unknown += 1
                log.debug("Skipping log %s with unknown topic0 %s", key, ev.topics[0])
                return
            event = build_event(decoded)
            if event is None:
                stats.unknown += 1
                log.debug("No handler for %s (log %s)", decoded.kind, key)
                return
            stats.decoded += 1
            fresh = await event.apply(self._ctx)
        except LogDecodeError as e:
            stats.malformed += 1
            log.warning("Skipping malformed log %s: %s", key, e)
            return
        except StoreError as e:
            stats.failed += 1
            run.store_failures.append(f"{key}: {e}")
            log.error("Store error on log %s: %s", key, e)
            return
        except Exception as e:
            stats.failed += 1
            run.other_failures.append(f"{key}: {e!r}")
            log.exception("Handler failed on log %s", key)
            return

        if fresh:
            stats.applied += 1
        else:
            stats.duplicates += 1
