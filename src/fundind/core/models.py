"""Core data models shared by the decoder, the dispatcher and the store.

This module defines:
- `EventLog`: one raw log taken out of a webhook delivery, minimally normalized.
- `Delivery`: one webhook call with its ordered logs.
- `Meta`: per-log metadata carried through decoding into audit records.
- `Document`: a versioned document read from the document store.

Design notes
------------
- Addresses, topics and hashes are lowercased 0x-hex strings.
- A log entry that could not even be parsed stays in the delivery with
  `error` set, so the dispatcher can count it without losing its position.
- `Meta.event_key` is the idempotency key used for audit ids and for the
  per-aggregate dedup set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True, frozen=True)
class EventLog:
    """Raw log as delivered by the webhook provider."""

    topics: tuple[str, ...]  # lowercased 0x...
    data_hex: str | None  # "0x..." or None when the provider omitted it
    address: str | None = None  # emitting contract, lowercased
    block_number: int | None = None
    block_timestamp: int | None = None  # unix seconds
    tx_hash: str | None = None  # lowercased 0x...
    log_index: int | None = None
    position: int = 0  # index of the log inside its delivery
    error: str | None = None  # set when the entry itself was unparseable


@dataclass(slots=True, frozen=True)
class Delivery:
    """One webhook delivery, already normalized from either payload shape."""

    delivery_id: str
    network: str | None
    logs: tuple[EventLog, ...] = ()
    received_at: str | None = None


@dataclass(slots=True, frozen=True)
class Meta:
    """Lightweight metadata for a single log used during decoding."""

    delivery_id: str
    network: str | None
    block_number: int | None
    block_timestamp: int | None
    tx_hash: str | None
    log_index: int | None
    address: str | None
    position: int

    @classmethod
    def from_log(cls, delivery: Delivery, log: EventLog) -> Meta:
        return cls(
            delivery_id=delivery.delivery_id,
            network=delivery.network,
            block_number=log.block_number,
            block_timestamp=log.block_timestamp,
            tx_hash=log.tx_hash,
            log_index=log.log_index,
            address=log.address,
            position=log.position,
        )

    @property
    def event_key(self) -> str:
        """Stable identity of this log across redeliveries."""
        if self.tx_hash and self.log_index is not None:
            return f"{self.tx_hash}:{self.log_index}"
        return f"{self.delivery_id}:{self.position}"


@dataclass(slots=True, frozen=True)
class Document:
    """A document snapshot together with the version it was read at."""

    id: str
    version: int
    data: dict[str, Any] = field(default_factory=dict)
