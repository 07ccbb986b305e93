"""Generic event decoder.

This module translates raw logs into `DecodedEvent` using an `EventRegistry`
defined by `EventSpec` + (topic|data) field specs. A log whose topic0 is not
registered decodes to None; a log that matches but cannot be read raises
`LogDecodeError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from fundind.core.errors import LogDecodeError
from fundind.core.models import Meta
from fundind.decoding.specs import EventRegistry, EventSpec
from fundind.decoding.utils import hex_to_bytes, parse_data_word, parse_topic_field, word_at

# ---------- decoded event ----------


@dataclass(slots=True)
class DecodedEvent:
    """Decoded event: kind name plus the typed field map."""

    kind: str
    meta: Meta
    values: dict[str, Any]


# ---------- helper functions ----------


def match_spec(topics: Sequence[str], registry: EventRegistry) -> EventSpec | None:
    """Look up the spec for topic0.

    Raises LogDecodeError when there is no topic0 at all.
    """
    if not topics:
        raise LogDecodeError("log has no topics")
    topic0 = topics[0]
    if not isinstance(topic0, str):
        raise LogDecodeError("topic0 is not a string")
    return registry.get(topic0.lower())


def _check_shape(spec: EventSpec, topics: Sequence[str], data: bytes | str | None) -> bytes:
    if len(topics) < spec.min_topics:
        raise LogDecodeError(
            f"{spec.name}: {len(topics)} topics, expected at least {spec.min_topics}"
        )
    if data is None:
        if spec.data_fields:
            raise LogDecodeError(f"{spec.name}: missing data")
        return b""
    if isinstance(data, str):
        data = hex_to_bytes(data, what=f"{spec.name} data")
    if len(data) < spec.min_data_bytes:
        raise LogDecodeError(
            f"{spec.name}: data is {len(data)} bytes, expected at least {spec.min_data_bytes}"
        )
    return data


# ---------- main generic decoder ----------


def decode_event(
    *,
    topics: Sequence[str],
    data: bytes | str | None,
    meta: Meta,
    registry: EventRegistry,
) -> DecodedEvent | None:
    """Decode raw log (topics + data) into a `DecodedEvent`, or None if unknown.

    `data` may be raw bytes or the provider's 0x-hex string; hex is only
    parsed once topic0 matched, so unknown logs never fail on their payload.
    """
    spec = match_spec(topics, registry)
    if spec is None:
        return None

    data = _check_shape(spec, topics, data)

    values: dict[str, Any] = {}
    for tf in spec.topic_fields:
        values[tf.name] = parse_topic_field(topics[tf.index], tf.type)
    for df in spec.data_fields:
        values[df.name] = parse_data_word(word_at(data, df.word_index), df.type)

    return DecodedEvent(kind=spec.name, meta=meta, values=values)
