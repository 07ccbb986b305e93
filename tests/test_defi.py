import pytest

from fundind.core.config import PipelineConfig
from fundind.core.use_cases import DeliveryProcessor
from fundind.storage.memory import InMemoryDocumentStore
from tests.conftest import make_processor
from tests.factories import (
    CAMPAIGN_ID,
    CREATOR,
    TOKEN,
    ZERO_ADDRESS,
    config_updated,
    defi_operation,
    make_delivery,
    tx_hash,
)

POOL = "0x" + "a1" * 20
POOL_V2 = "0x" + "a2" * 20
REGISTRY = "0x" + "b1" * 20
FEE_MANAGER = "0x" + "c1" * 20


@pytest.mark.asyncio
async def test_deposit_then_withdraw(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    logs = [defi_operation(1, 500, tx=1), defi_operation(2, 200, tx=2)]
    await processor.process_raw(make_delivery(logs))

    doc = await store.get("campaignYield", CAMPAIGN_ID)
    assert doc.data["depositAmount"] == "500"
    assert doc.data["withdrawAmount"] == "200"
    assert doc.data["deposited"] is True
    assert doc.data["withdrawn"] is True
    assert doc.data["treasuryFeesPaid"] is False
    assert doc.data["lastOperation"] == "WITHDRAWN_TO_CONTRACT"
    assert doc.data["networkId"] == 84532
    assert doc.data["token"] == TOKEN


@pytest.mark.asyncio
async def test_yield_amounts_accumulate(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    logs = [defi_operation(1, 500, tx=1), defi_operation(1, 250, tx=2)]
    await processor.process_raw(make_delivery(logs))

    doc = await store.get("campaignYield", CAMPAIGN_ID)
    assert doc.data["depositAmount"] == "750"
    assert doc.data["withdrawAmount"] == "0"


@pytest.mark.asyncio
async def test_withdrawals_get_their_own_audit_rows(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    logs = [defi_operation(1, 500, tx=1), defi_operation(2, 200, tx=2), defi_operation(6, 5, tx=3)]
    await processor.process_raw(make_delivery(logs))

    rows = {d.id: d.data for d in await store.list("withdrawalEvents")}
    assert set(rows) == {f"{tx_hash(2)}:0:withdrawal", f"{tx_hash(3)}:0:withdrawal"}
    creator = rows[f"{tx_hash(2)}:0:withdrawal"]
    assert creator["eventType"] == "Withdrawal"
    assert creator["withdrawalType"] == "CREATOR"
    assert creator["recipient"] == CREATOR
    assert creator["amount"] == "200"
    assert rows[f"{tx_hash(3)}:0:withdrawal"]["withdrawalType"] == "TREASURY"

    yields = await store.get("campaignYield", CAMPAIGN_ID)
    assert yields.data["treasuryFeesPaid"] is True
    assert yields.data["treasuryFeeAmount"] == "5"
    assert len(await store.list("defiEvents")) == 3


@pytest.mark.asyncio
async def test_defi_audit_record(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    await processor.process_raw(make_delivery([defi_operation(1, 15 * 10**17)]))

    (audit,) = await store.list("defiEvents")
    assert audit.data["operation"] == {"code": 1, "name": "DEPOSITED"}
    assert audit.data["amount"] == "1500000000000000000"
    assert audit.data["formattedAmount"] == "1.5"
    assert audit.data["networkId"] == 84532


@pytest.mark.asyncio
async def test_non_yield_operation_is_audited_only(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    stats = await processor.process_raw(make_delivery([defi_operation(3, 0)]))

    assert stats.applied == 1
    assert await store.get("campaignYield", CAMPAIGN_ID) is None
    assert await store.list("withdrawalEvents") == []


@pytest.mark.asyncio
async def test_unsupported_network_skips_log(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    stats = await processor.process_raw(make_delivery([defi_operation(1, 500)], network="ETH_MAINNET"))

    assert stats.malformed == 1
    assert stats.applied == 0
    assert store.collections() == []


@pytest.mark.asyncio
async def test_network_name_is_case_insensitive(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    await processor.process_raw(make_delivery([defi_operation(1, 1)], network="base_mainnet"))

    doc = await store.get("campaignYield", CAMPAIGN_ID)
    assert doc.data["networkId"] == 8453


@pytest.mark.asyncio
async def test_config_updates_match_old_value(store: InMemoryDocumentStore) -> None:
    processor = make_processor(store, PipelineConfig(config_field_strategy="match_old_value"))
    logs = [
        config_updated(5, ZERO_ADDRESS, POOL, tx=1),
        config_updated(3, ZERO_ADDRESS, REGISTRY, tx=2),
        config_updated(5, POOL, POOL_V2, tx=3),
        config_updated(4, ZERO_ADDRESS, FEE_MANAGER, tx=4),
    ]
    await processor.process_raw(make_delivery(logs))

    doc = await store.get("defiConfig", "84532")
    assert doc.data["aavePoolAddress"] == POOL_V2
    assert doc.data["tokenRegistryAddress"] == REGISTRY
    assert doc.data["feeManagerAddress"] == FEE_MANAGER
    assert doc.data["networkId"] == 84532
    assert doc.data["lastOperation"] == "FEE_MANAGER_UPDATED"
    assert len(await store.list("defiConfigEvents")) == 4


@pytest.mark.asyncio
async def test_config_update_without_matching_field(store: InMemoryDocumentStore) -> None:
    processor = make_processor(store, PipelineConfig(config_field_strategy="match_old_value"))
    logs = [
        config_updated(5, ZERO_ADDRESS, POOL, tx=1),
        config_updated(3, ZERO_ADDRESS, REGISTRY, tx=2),
        config_updated(4, ZERO_ADDRESS, FEE_MANAGER, tx=3),
        config_updated(4, "0x" + "ee" * 20, "0x" + "ef" * 20, tx=4),
    ]
    await processor.process_raw(make_delivery(logs))

    doc = await store.get("defiConfig", "84532")
    assert doc.data["lastOperation"] == "UNKNOWN_CONFIG_UPDATED"
    assert (doc.data["aavePoolAddress"], doc.data["tokenRegistryAddress"], doc.data["feeManagerAddress"]) == (
        POOL,
        REGISTRY,
        FEE_MANAGER,
    )


@pytest.mark.asyncio
async def test_config_updates_by_operation_code(processor: DeliveryProcessor, store: InMemoryDocumentStore) -> None:
    logs = [
        config_updated(4, ZERO_ADDRESS, FEE_MANAGER, tx=1),
        config_updated(9, ZERO_ADDRESS, POOL, tx=2),
    ]
    await processor.process_raw(make_delivery(logs))

    doc = await store.get("defiConfig", "84532")
    assert doc.data["feeManagerAddress"] == FEE_MANAGER
    assert doc.data["aavePoolAddress"] == ""
    assert doc.data["lastOperation"] == "UNKNOWN_CONFIG_UPDATED"


@pytest.mark.asyncio
async def test_first_config_update_lands_in_its_own_field(
    processor: DeliveryProcessor, store: InMemoryDocumentStore
) -> None:
    await processor.process_raw(make_delivery([config_updated(3, ZERO_ADDRESS, REGISTRY)]))

    doc = await store.get("defiConfig", "84532")
    assert doc.data["tokenRegistryAddress"] == REGISTRY
    assert doc.data["aavePoolAddress"] == ""
    assert doc.data["feeManagerAddress"] == ""
    assert doc.data["lastOperation"] == "TOKEN_REGISTRY_UPDATED"

