from unittest.mock import AsyncMock

import pytest

from fundind.core.config import PipelineConfig
from fundind.core.interfaces import IDocumentStore
from fundind.core.use_cases import DeliveryProcessor
from fundind.decoding.registries import make_launchpad_registry
from fundind.decoding.registry import EventRegistryProvider
from fundind.storage.memory import InMemoryDocumentStore

NOW = "2024-05-01T12:00:00+00:00"


def fixed_clock() -> str:
    return NOW


def make_processor(store: IDocumentStore, config: PipelineConfig | None = None) -> DeliveryProcessor:
    return DeliveryProcessor(
        store,
        EventRegistryProvider(make_launchpad_registry()),
        config or PipelineConfig(),
        clock=fixed_clock,
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def processor(store: InMemoryDocumentStore) -> DeliveryProcessor:
    return make_processor(store)


@pytest.fixture
def mock_store() -> AsyncMock:
    store = AsyncMock()
    store.get = AsyncMock(return_value=None)
    store.create = AsyncMock(return_value=True)
    store.compare_and_set = AsyncMock(return_value=True)
    store.list = AsyncMock(return_value=[])
    return store
