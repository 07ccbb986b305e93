import pytest

from fundind.decoding.registries import (
    CAMPAIGN_EVENT_SIGNATURES,
    make_campaign_event_registry,
    make_launchpad_registry,
)
from fundind.decoding.registry_builder import event_spec_from_signature, make_registry, topic0_of
from fundind.events import EVENT_TYPES

TRANSFER_TOPIC0 = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"


def test_topic0_is_keccak_of_canonical_signature() -> None:
    spec = event_spec_from_signature(
        "Transfer(address indexed from, address indexed to, uint256 value)"
    )
    assert spec.signature == "Transfer(address,address,uint256)"
    assert spec.topic0 == TRANSFER_TOPIC0
    assert topic0_of("Transfer(address,address,uint256)") == TRANSFER_TOPIC0


def test_launchpad_registry_covers_every_handler() -> None:
    reg = make_launchpad_registry()
    assert len(reg) == 13
    assert {spec.name for spec in reg.values()} == set(EVENT_TYPES)
    for topic0, spec in reg.items():
        assert topic0 == spec.topic0
        assert topic0.startswith("0x") and len(topic0) == 66
        assert topic0 == topic0.lower()


def test_campaign_registry_has_collector_events() -> None:
    reg = make_campaign_event_registry()
    assert len(reg) == len(CAMPAIGN_EVENT_SIGNATURES) == 7


def test_contribution_field_layout() -> None:
    spec = event_spec_from_signature(CAMPAIGN_EVENT_SIGNATURES[0])
    assert spec.name == "Contribution"
    assert spec.signature == "Contribution(address,uint256,bytes32,address)"
    assert [(f.name, f.index, f.type) for f in spec.topic_fields] == [
        ("contributor", 1, "address"),
        ("campaignId", 2, "bytes32"),
        ("campaignAddress", 3, "address"),
    ]
    assert [(f.name, f.word_index, f.type) for f in spec.data_fields] == [("amount", 0, "uint256")]
    assert spec.min_topics == 4
    assert spec.min_data_bytes == 32


def test_status_changed_keeps_declaration_order_for_data() -> None:
    spec = event_spec_from_signature(CAMPAIGN_EVENT_SIGNATURES[3])
    assert [f.name for f in spec.data_fields] == ["oldStatus", "newStatus", "reason"]
    assert [f.word_index for f in spec.data_fields] == [0, 1, 2]


@pytest.mark.parametrize(
    "signature",
    [
        "Named(string name)",
        "Blob(bytes payload)",
        "Many(uint256[] values)",
        "Pair((address,uint256) pair)",
    ],
)
def test_dynamic_types_are_rejected(signature: str) -> None:
    with pytest.raises(ValueError):
        event_spec_from_signature(signature)


def test_too_many_indexed_params_rejected() -> None:
    with pytest.raises(ValueError):
        event_spec_from_signature(
            "Wide(address indexed a, address indexed b, address indexed c, address indexed d)"
        )


def test_invalid_signature_rejected() -> None:
    with pytest.raises(ValueError):
        make_registry("NotASignature")
