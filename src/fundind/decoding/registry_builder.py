"""Registry builder utilities for creating event registries from signatures.

This module provides the core tools for building EventRegistry instances:
- Generic `make_registry()` function for single or multiple signatures
- Signature parsing helpers for converting Solidity event signatures to EventSpec
"""

from __future__ import annotations

import re

from eth_utils import keccak

from .specs import DataFieldSpec, EventRegistry, EventSpec, TopicFieldSpec

# Fixed-width types the decoder knows how to read from a single word.
SUPPORTED_TYPES = ("address", "bool", "bytes32")
_INT_TYPE = re.compile(r"u?int\d*")


def _split_params(params_str: str) -> list[str]:
    """Split the parameter list by commas while respecting nested tuple types."""
    items: list[str] = []
    depth = 0
    buf: list[str] = []
    for ch in params_str:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            items.append("".join(buf).strip())
            buf = []
        else:
            buf.append(ch)
    if buf:
        items.append("".join(buf).strip())
    return [i for i in items if i]


def _parse_param(p: str, fallback_name: str) -> tuple[str, str, bool]:
    """Parse one parameter fragment into (name, abi_type, indexed)."""
    tokens = p.split()
    indexed = "indexed" in tokens
    tokens = [t for t in tokens if t != "indexed"]
    if not tokens:
        raise ValueError(f"Empty parameter in event signature: {p!r}")
    abi_type = tokens[0]
    name = tokens[1] if len(tokens) > 1 else fallback_name
    return (name, abi_type, indexed)


def _check_type(abi_type: str, signature: str) -> None:
    if abi_type in SUPPORTED_TYPES or _INT_TYPE.fullmatch(abi_type):
        return
    raise ValueError(f"Unsupported dynamic or tuple type {abi_type!r} in {signature}")


def topic0_of(canonical_signature: str) -> str:
    """keccak256 of the canonical signature, 0x-prefixed and lowercased."""
    return "0x" + keccak(text=canonical_signature).hex()


def event_spec_from_signature(signature: str) -> EventSpec:
    """Build an EventSpec from a Solidity event signature string.

    Example input:
      "Contribution(address indexed contributor, uint256 amount, bytes32 indexed campaignId, address indexed campaignAddress)"
    """
    sig = signature.strip()
    open_paren = sig.find("(")
    close_paren = sig.rfind(")")
    if open_paren == -1 or close_paren == -1 or close_paren < open_paren:
        raise ValueError(f"Invalid event signature: {signature}")
    name = sig[:open_paren].strip()
    params_str = sig[open_paren + 1 : close_paren].strip()

    parsed: list[tuple[str, str, bool]] = []
    for i, part in enumerate(_split_params(params_str)):
        name_i, abi_type_i, is_indexed = _parse_param(part, fallback_name=f"arg{i}")
        _check_type(abi_type_i, signature)
        parsed.append((name_i, abi_type_i, is_indexed))

    # topic0 hashes the type list only (no names, no 'indexed')
    canonical_signature = f"{name}({','.join(t for (_, t, _) in parsed)})"

    indexed_params = [(n, t) for (n, t, idx) in parsed if idx]
    data_params = [(n, t) for (n, t, idx) in parsed if not idx]
    if len(indexed_params) > 3:
        raise ValueError(f"Non-anonymous events carry at most 3 indexed parameters: {signature}")

    return EventSpec(
        topic0=topic0_of(canonical_signature),
        name=name,
        signature=canonical_signature,
        topic_fields=tuple(TopicFieldSpec(n, idx + 1, t) for idx, (n, t) in enumerate(indexed_params)),
        data_fields=tuple(DataFieldSpec(n, idx, t) for idx, (n, t) in enumerate(data_params)),
    )


def make_registry(signatures: str | list[str]) -> EventRegistry:
    """Create a registry from one or multiple event signatures.

    Args:
        signatures: Single signature string or list of signature strings

    Returns:
        EventRegistry with entries for each signature
    """
    reg: EventRegistry = {}
    sig_list = [signatures] if isinstance(signatures, str) else signatures
    for signature in sig_list:
        spec = event_spec_from_signature(signature)
        reg[spec.topic0] = spec
    return reg
