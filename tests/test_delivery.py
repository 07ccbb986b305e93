from typing import Any

import pytest

from fundind.core.delivery import delivery_fingerprint, normalize_delivery
from fundind.core.errors import DeliveryError
from fundind.core.models import Meta
from tests.factories import COLLECTOR, contribution, make_block_delivery, make_delivery, tx_hash


def test_per_log_shape() -> None:
    raw = make_delivery([contribution(1000, tx=5, index=3, block_number=77, block_timestamp=1_700_000_123)])
    delivery = normalize_delivery(raw)
    assert delivery.delivery_id == "whevt_1"
    assert delivery.network == "BASE_SEPOLIA"
    assert delivery.received_at == "2024-05-01T12:00:00.000Z"
    (ev,) = delivery.logs
    assert ev.error is None
    assert len(ev.topics) == 4
    assert ev.tx_hash == tx_hash(5)
    assert ev.log_index == 3
    assert ev.block_number == 77
    assert ev.block_timestamp == 1_700_000_123
    assert ev.address == COLLECTOR
    assert ev.position == 0


def test_block_shape_copies_block_metadata_to_logs() -> None:
    raw = make_block_delivery(
        [contribution(1, with_block=False, index=0), contribution(2, with_block=False, index=1)],
        number=2_000,
        timestamp=1_700_000_500,
    )
    delivery = normalize_delivery(raw)
    assert [ev.position for ev in delivery.logs] == [0, 1]
    assert {ev.block_number for ev in delivery.logs} == {2_000}
    assert {ev.block_timestamp for ev in delivery.logs} == {1_700_000_500}


def test_hex_numbers_are_parsed() -> None:
    entry = contribution(1, with_block=False)
    entry["index"] = "0x1a"
    entry["block"] = {"number": "0x10", "timestamp": "1700000000"}
    (ev,) = normalize_delivery(make_delivery([entry])).logs
    assert ev.log_index == 26
    assert ev.block_number == 16
    assert ev.block_timestamp == 1_700_000_000


def test_topics_and_hashes_are_lowercased() -> None:
    entry = contribution(1)
    entry["topics"] = [t.upper().replace("0X", "0x") for t in entry["topics"]]
    entry["transaction"]["hash"] = entry["transaction"]["hash"].upper().replace("0X", "0x")
    (ev,) = normalize_delivery(make_delivery([entry])).logs
    assert all(t == t.lower() for t in ev.topics)
    assert ev.tx_hash == ev.tx_hash.lower()


@pytest.mark.parametrize(
    "event",
    [
        None,
        {"network": "BASE_SEPOLIA"},
        {"network": "BASE_SEPOLIA", "data": {}},
        {"network": "BASE_SEPOLIA", "data": {"block": {"number": 1}}},
    ],
)
def test_missing_log_list_yields_no_logs(event: dict[str, Any] | None) -> None:
    raw = {"id": "whevt_empty", "data": {"event": event}}
    delivery = normalize_delivery(raw)
    assert delivery.delivery_id == "whevt_empty"
    assert delivery.logs == ()


def test_unparseable_entries_become_placeholders() -> None:
    raw = make_delivery(["garbage", {"topics": "not-a-list"}, {"data": "0x"}, contribution(1)])
    delivery = normalize_delivery(raw)
    assert len(delivery.logs) == 4
    assert [ev.error is not None for ev in delivery.logs] == [True, True, True, False]
    assert [ev.position for ev in delivery.logs] == [0, 1, 2, 3]


@pytest.mark.parametrize("raw", ["not a delivery", 42, ["a", "list"]])
def test_non_object_envelope_is_rejected(raw: Any) -> None:
    with pytest.raises(DeliveryError):
        normalize_delivery(raw)


def test_delivery_id_sources() -> None:
    body = {"data": {"event": {"network": "BASE_SEPOLIA", "data": {"logs": []}}}}
    assert normalize_delivery({**body, "id": 17}).delivery_id == "17"
    assert normalize_delivery({**body, "webhookId": "wh_9"}).delivery_id == "wh_9"
    assert normalize_delivery({**body, "id": "a"}, "override").delivery_id == "override"


def test_missing_id_falls_back_to_stable_fingerprint() -> None:
    raw = {"data": {"event": {"network": "BASE_SEPOLIA", "data": {"logs": [contribution(1)]}}}}
    first = normalize_delivery(raw).delivery_id
    assert first == normalize_delivery(dict(raw)).delivery_id == delivery_fingerprint(raw)
    assert first.startswith("0x") and len(first) == 66


def test_event_key_falls_back_to_delivery_position() -> None:
    entry = contribution(1)
    del entry["transaction"]
    delivery = normalize_delivery(make_delivery([contribution(1), entry]))
    keys = [Meta.from_log(delivery, ev).event_key for ev in delivery.logs]
    assert keys == [f"{tx_hash(1)}:0", "whevt_1:1"]
