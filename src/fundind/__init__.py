from __future__ import annotations

from .core.config import PipelineConfig, load_config
from .core.delivery import normalize_delivery
from .core.models import Delivery, EventLog, Meta
from .core.use_cases import DeliveryProcessor, DeliveryResult, ProcessStats
from .decoding.registries import make_launchpad_registry
from .decoding.registry import EventRegistryProvider
from .decoding.specs import DataFieldSpec, EventRegistry, EventSpec, TopicFieldSpec
from .units import format_units

__all__ = [
    "PipelineConfig",
    "load_config",
    "normalize_delivery",
    "Delivery",
    "EventLog",
    "Meta",
    "DeliveryProcessor",
    "DeliveryResult",
    "ProcessStats",
    "make_launchpad_registry",
    "EventRegistryProvider",
    "DataFieldSpec",
    "EventRegistry",
    "EventSpec",
    "TopicFieldSpec",
    "format_units",
]
