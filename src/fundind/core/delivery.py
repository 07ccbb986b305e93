"""Webhook delivery normalization.

Two payload shapes arrive from the webhook provider:

- per-log:    {"data": {"event": {"network", "data": {"logs": [...]}}}}
  where each log may carry its own `block`, `transaction`, `account`, `index`;
- full-block: {"data": {"event": {"network", "data": {"block": {"number",
  "timestamp", "logs": [...]}}}}} where block metadata lives on the block.

`normalize_delivery` maps both onto one `Delivery`. Log entries that do not
validate are kept as placeholders with `EventLog.error` set so the dispatcher
can count them as malformed without shifting the position of their siblings.
"""

from __future__ import annotations

import json
from typing import Annotated, Any

from eth_utils import keccak
from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError

from fundind.core.errors import DeliveryError
from fundind.core.models import Delivery, EventLog


def _hex_or_int(v: Any) -> Any:
    """Accept ints, decimal strings and 0x-hex strings."""
    if isinstance(v, str):
        s = v.strip()
        if s[:2].lower() == "0x":
            return int(s, 16)
        return int(s)
    return v


HexInt = Annotated[int, BeforeValidator(_hex_or_int)]


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore")


class BlockRef(_Model):
    number: HexInt | None = None
    timestamp: HexInt | None = None


class TransactionRef(_Model):
    hash: str | None = None


class AccountRef(_Model):
    address: str | None = None


class WebhookLog(_Model):
    topics: list[str]
    data: str | None = None
    index: HexInt | None = None
    block: BlockRef | None = None
    transaction: TransactionRef | None = None
    account: AccountRef | None = None


class WebhookBlock(BlockRef):
    logs: list[Any] | None = None


class WebhookEventData(_Model):
    logs: list[Any] | None = None
    block: WebhookBlock | None = None


class WebhookEvent(_Model):
    network: str | None = None
    data: WebhookEventData | None = None


class WebhookPayload(_Model):
    event: WebhookEvent | None = None


class RawDelivery(_Model):
    id: str | int | None = None
    webhookId: str | None = None
    timestamp: Any = None
    data: WebhookPayload | None = None


def _lower(v: str | None) -> str | None:
    return v.lower() if v else None


def delivery_fingerprint(raw: Any) -> str:
    """Deterministic id for a delivery that carries none."""
    canonical = json.dumps(raw, sort_keys=True, separators=(",", ":"), default=str)
    return "0x" + keccak(text=canonical).hex()


def _to_event_log(entry: Any, position: int, block: BlockRef | None) -> EventLog:
    try:
        wl = WebhookLog.model_validate(entry)
    except ValidationError as e:
        reason = e.errors()[0]["msg"] if e.errors() else str(e)
        return EventLog(topics=(), data_hex=None, position=position, error=reason)

    blk = wl.block or block
    return EventLog(
        topics=tuple(t.lower() for t in wl.topics),
        data_hex=wl.data,
        address=_lower(wl.account.address if wl.account else None),
        block_number=blk.number if blk else None,
        block_timestamp=blk.timestamp if blk else None,
        tx_hash=_lower(wl.transaction.hash if wl.transaction else None),
        log_index=wl.index,
        position=position,
    )


def normalize_delivery(raw: Any, delivery_id: str | None = None) -> Delivery:
    """Normalize a raw webhook delivery (either shape) into a `Delivery`.

    A missing log list yields a delivery with zero logs. An envelope that is
    not an object at all raises `DeliveryError`.
    """
    try:
        env = RawDelivery.model_validate(raw)
    except ValidationError as e:
        raise DeliveryError(delivery_id or "<unknown>", f"invalid delivery envelope: {e}") from e

    did = delivery_id or (str(env.id) if env.id is not None else None) or env.webhookId or delivery_fingerprint(raw)
    event = env.data.event if env.data else None
    if event is None or event.data is None:
        return Delivery(delivery_id=did, network=event.network if event else None, received_at=_ts(env.timestamp))

    block: BlockRef | None = None
    entries: list[Any] | None = event.data.logs
    if entries is None and event.data.block is not None:
        block = event.data.block
        entries = event.data.block.logs

    logs = tuple(_to_event_log(entry, i, block) for i, entry in enumerate(entries or []))
    return Delivery(delivery_id=did, network=event.network, logs=logs, received_at=_ts(env.timestamp))


def _ts(value: Any) -> str | None:
    return None if value is None else str(value)
