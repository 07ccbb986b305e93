"""Decoding utilities: ABI word access and typed parsers."""

from __future__ import annotations

from typing import Any

from eth_utils import to_checksum_address  # type: ignore[attr-defined]

from fundind.core.errors import LogDecodeError

WORD_SIZE = 32


def hex_to_bytes(value: str | None, *, what: str = "data") -> bytes:
    """Decode a 0x-prefixed hex string; fail closed on anything else."""
    if value is None:
        raise LogDecodeError(f"missing {what}")
    h = value[2:] if value[:2].lower() == "0x" else value
    if len(h) % 2:
        raise LogDecodeError(f"{what} has an odd number of hex digits")
    try:
        return bytes.fromhex(h)
    except ValueError as e:
        raise LogDecodeError(f"{what} is not valid hex") from e


def word_at(data: bytes, i: int) -> bytes:
    """Return the i-th 32-byte ABI word. Callers check the data length first."""
    start = WORD_SIZE * i
    return data[start : start + WORD_SIZE]


def normalize_address(raw: bytes) -> str:
    """Low 20 bytes of a word, checksum-formatted then lowercased."""
    return to_checksum_address(raw[-20:]).lower()


def _parse_word(word: bytes, typ: str) -> Any:
    if typ == "address":
        return normalize_address(word)
    if typ == "bool":
        v = int.from_bytes(word, "big")
        if v > 1:
            raise LogDecodeError(f"bool word out of range: 0x{word.hex()}")
        return v == 1
    if typ.startswith("uint"):
        return int.from_bytes(word, "big", signed=False)
    if typ.startswith("int"):
        v = int.from_bytes(word, "big", signed=False)
        bits = int(typ[3:]) if typ != "int" else 256
        if v >= 2 ** (bits - 1):
            v -= 2**bits
        return v
    # bytes32 and anything else fixed-width: keep the raw word as hex
    return "0x" + word.hex()


def parse_topic_field(topic_hex: str, typ: str) -> Any:
    """Parse one indexed topic according to the declared type."""
    word = hex_to_bytes(topic_hex, what="topic")
    if len(word) != WORD_SIZE:
        raise LogDecodeError(f"topic is {len(word)} bytes, expected {WORD_SIZE}")
    return _parse_word(word, typ)


def parse_data_word(word: bytes, typ: str) -> Any:
    """Parse one ABI word from data according to the declared type."""
    return _parse_word(word, typ)
