from typing import Any

import pytest

from fundind.aggregates.base import AggregateRepository
from fundind.aggregates.tokens import TokenAggregates
from fundind.core.use_cases import DeliveryProcessor
from fundind.storage.memory import InMemoryDocumentStore
from tests.factories import ADMIN, TOKEN, ZERO_ADDRESS, make_delivery, make_log, token_operation

TREASURY = "0x" + "d1" * 20
TREASURY_V2 = "0x" + "d2" * 20


def _fee_op(
    op_type: int, related: str, secondary: str, primary: int, secondary_value: int, **kw: Any
) -> dict[str, Any]:
    return make_log(
        "FeeManagerOperation",
        {
            "opType": op_type,
            "relatedAddress": related,
            "secondaryAddress": secondary,
            "primaryValue": primary,
            "secondaryValue": secondary_value,
        },
        **kw,
    )


def _treasury_update(old: str, new: str, **kw: Any) -> dict[str, Any]:
    return _fee_op(1, old, new, 0, 0, **kw)


def _share_update(old: int, new: int, **kw: Any) -> dict[str, Any]:
    return _fee_op(2, ZERO_ADDRESS, ZERO_ADDRESS, old, new, **kw)


def _admin_op(op_type: int, admin: str = ADMIN, **kw: Any) -> dict[str, Any]:
    return make_log("PlatformAdminOperation", {"opType": op_type, "admin": admin, "oldValue": 0, "newValue": 0}, **kw)


async def _live_token(store: InMemoryDocumentStore) -> dict[str, Any] | None:
    return await TokenAggregates(AggregateRepository(store)).get(TOKEN)


# ---------- fee manager ----------


@pytest.mark.asyncio
async def test_fee_config_updates(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    logs = [
        _treasury_update(ZERO_ADDRESS, TREASURY, tx=1),
        _share_update(0, 250, tx=2),
        _treasury_update(TREASURY, TREASURY_V2, tx=3),
        _share_update(250, 300, tx=4),
    ]
    await processor.process_raw(make_delivery(logs))

    doc = await store.get("feeConfig", "current")
    assert doc.data["treasuryAddress"] == TREASURY_V2
    assert doc.data["platformFeeShare"] == 300
    assert doc.data["lastOperation"] == "SHARE_UPDATED"

    audits = await store.list("feeEvents")
    assert len(audits) == 4
    assert {a.data["operation"]["name"] for a in audits} == {"TREASURY_UPDATED", "SHARE_UPDATED"}


@pytest.mark.asyncio
async def test_share_update_on_empty_fee_config(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    await processor.process_raw(make_delivery([_share_update(100, 200)]))

    doc = await store.get("feeConfig", "current")
    assert doc.data["platformFeeShare"] == 200
    assert doc.data["treasuryAddress"] == ""
    assert doc.data["lastOperation"] == "SHARE_UPDATED"


@pytest.mark.asyncio
async def test_treasury_update_on_empty_fee_config(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    await processor.process_raw(make_delivery([_treasury_update(TREASURY, TREASURY_V2)]))

    doc = await store.get("feeConfig", "current")
    assert doc.data["treasuryAddress"] == TREASURY_V2
    assert doc.data["platformFeeShare"] == 0
    assert doc.data["lastOperation"] == "TREASURY_UPDATED"


@pytest.mark.asyncio
async def test_unknown_fee_operation_only_marks_last_operation(
    processor: DeliveryProcessor, store: InMemoryDocumentStore, caplog: pytest.LogCaptureFixture
) -> None:
    await processor.process_raw(make_delivery([_fee_op(7, TREASURY, TREASURY_V2, 1, 2)]))

    doc = await store.get("feeConfig", "current")
    assert doc.data["treasuryAddress"] == ""
    assert doc.data["platformFeeShare"] == 0
    assert doc.data["lastOperation"] == "UNKNOWN"
    assert "no field matches update" in caplog.text


# ---------- platform admins ----------


@pytest.mark.asyncio
async def test_admin_added_then_removed(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    await processor.process_raw(make_delivery([_admin_op(1, tx=1)], delivery_id="d1"))
    doc = await store.get("admins", ADMIN)
    assert doc.data["isActive"] is True
    assert doc.data["lastOperation"] == "ADMIN_ADDED"

    await processor.process_raw(make_delivery([_admin_op(2, tx=2)], delivery_id="d2"))
    doc = await store.get("admins", ADMIN)
    assert doc.data["isActive"] is False
    assert doc.data["address"] == ADMIN
    assert doc.data["lastOperation"] == "ADMIN_REMOVED"


@pytest.mark.asyncio
async def test_removing_unknown_admin_is_audited_only(
    processor: DeliveryProcessor, store: InMemoryDocumentStore, caplog: pytest.LogCaptureFixture
) -> None:
    stats = await processor.process_raw(make_delivery([_admin_op(2)]))

    assert stats.applied == 1
    assert await store.get("admins", ADMIN) is None
    assert len(await store.list("adminEvents")) == 1
    assert "non-existent admin" in caplog.text


# ---------- token registry ----------


@pytest.mark.asyncio
async def test_token_lifecycle(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    await processor.process_raw(make_delivery([token_operation(1, 1_500_000, 6, tx=1)], delivery_id="d1"))
    token = await store.get("tokens", TOKEN)
    assert token.data["isSupported"] is True
    assert token.data["decimals"] == 6
    assert token.data["minimumContribution"] == "1500000"
    assert token.data["minimumContributionFormatted"] == "1.5"
    assert token.data["lastOperation"] == "TOKEN_ADDED"

    logs = [token_operation(3, tx=2), token_operation(5, 2_000_000, tx=3)]
    await processor.process_raw(make_delivery(logs, delivery_id="d2"))
    token = await store.get("tokens", TOKEN)
    assert token.data["isSupported"] is False
    assert token.data["minimumContribution"] == "2000000"
    assert token.data["minimumContributionFormatted"] == "2.0"
    assert token.data["decimals"] == 6

    await processor.process_raw(make_delivery([token_operation(4, tx=4)], delivery_id="d3"))
    assert (await store.get("tokens", TOKEN)).data["isSupported"] is True

    await processor.process_raw(make_delivery([token_operation(2, tx=5)], delivery_id="d4"))
    assert await _live_token(store) is None
    tombstone = await store.get("tokens", TOKEN)
    assert tombstone.data["_deleted"] is True
    assert "isSupported" not in tombstone.data
    assert len(await store.list("tokenEvents")) == 5


@pytest.mark.asyncio
async def test_token_audit_formats_with_stored_decimals(
    processor: DeliveryProcessor, store: InMemoryDocumentStore
) -> None:
    logs = [token_operation(1, 1_000_000, 6, tx=1), token_operation(5, 2_500_000, 0, tx=2)]
    await processor.process_raw(make_delivery(logs))

    audits = {a.data["operation"]["code"]: a.data for a in await store.list("tokenEvents")}
    assert audits[1]["formattedValue"] == "1.0"
    assert audits[5]["formattedValue"] == "2.5"


@pytest.mark.asyncio
async def test_enabling_unknown_token_creates_it(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    await processor.process_raw(make_delivery([token_operation(4, decimals=8)]))

    token = await store.get("tokens", TOKEN)
    assert token.data["isSupported"] is True
    assert token.data["decimals"] == 8


@pytest.mark.asyncio
@pytest.mark.parametrize("op_type", [2, 3, 5, 42])
async def test_operations_on_unknown_token_leave_no_record(
    processor: DeliveryProcessor, store: InMemoryDocumentStore, op_type: int
) -> None:
    stats = await processor.process_raw(make_delivery([token_operation(op_type, 10)]))

    assert stats.applied == 1
    assert await store.get("tokens", TOKEN) is None


@pytest.mark.asyncio
async def test_removed_token_can_be_added_again(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    logs = [token_operation(1, 1, 6, tx=1), token_operation(2, tx=2), token_operation(1, 5, 18, tx=3)]
    await processor.process_raw(make_delivery(logs))

    token = await _live_token(store)
    assert token["decimals"] == 18
    assert token["minimumContribution"] == "5"
    assert "_deleted" not in token


@pytest.mark.asyncio
async def test_redelivered_add_does_not_resurrect_removed_token(
    processor: DeliveryProcessor, store: InMemoryDocumentStore
) -> None:
    added = make_delivery([token_operation(1, 1_000_000, 6, tx=1)], delivery_id="d1")
    removed = make_delivery([token_operation(2, tx=2)], delivery_id="d2")

    await processor.process_raw(added)
    await processor.process_raw(removed)
    stats = await processor.process_raw(added)

    assert stats.duplicates == 1
    assert await _live_token(store) is None


@pytest.mark.asyncio
async def test_redelivered_remove_does_not_delete_readded_token(
    processor: DeliveryProcessor, store: InMemoryDocumentStore
) -> None:
    removed = make_delivery([token_operation(2, tx=2)], delivery_id="d2")
    await processor.process_raw(make_delivery([token_operation(1, 1, 6, tx=1)], delivery_id="d1"))
    await processor.process_raw(removed)
    await processor.process_raw(make_delivery([token_operation(1, 7, 8, tx=3)], delivery_id="d3"))

    stats = await processor.process_raw(removed)

    assert stats.duplicates == 1
    token = await _live_token(store)
    assert token is not None
    assert token["isSupported"] is True
    assert token["decimals"] == 8
