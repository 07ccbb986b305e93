"""Event specification primitives and registry typing.

Defines lightweight dataclasses to describe how to decode events:
- `TopicFieldSpec` / `DataFieldSpec`: typed sources for indexed topics / data words
- `EventSpec`: one event rule (topic0, name, fields)
- `EventRegistry`: mapping from topic0 → EventSpec
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TopicFieldSpec:
    """Describe one indexed topic field (by 0-based topic index and ABI type)."""

    name: str
    index: int
    type: str  # e.g., "address", "bytes32", "bool"


@dataclass(frozen=True)
class DataFieldSpec:
    """Describe one 32-byte ABI word in the data section (0-based word index)."""

    name: str
    word_index: int
    type: str  # e.g., "address", "uint256", "uint8"


@dataclass(frozen=True)
class EventSpec:
    """One event decoding rule."""

    topic0: str
    name: str
    signature: str  # canonical form, e.g. "Contribution(address,uint256,bytes32,address)"
    topic_fields: tuple[TopicFieldSpec, ...]
    data_fields: tuple[DataFieldSpec, ...]

    @property
    def min_topics(self) -> int:
        """Topic words required: topic0 plus one per indexed parameter."""
        return 1 + len(self.topic_fields)

    @property
    def min_data_bytes(self) -> int:
        return 32 * len(self.data_fields)


# The full registry keyed by topic0 (lowercased 0x-hex).
EventRegistry = dict[str, EventSpec]
