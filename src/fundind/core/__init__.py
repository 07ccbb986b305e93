"""Core data models, configuration and errors.

This package provides:
- Data models (EventLog, Delivery, Meta, Document)
- Configuration (PipelineConfig, load_config)
- The error taxonomy shared by decoding, handlers and storage
"""

from fundind.core.config import PipelineConfig, load_config
from fundind.core.errors import (
    DeliveryError,
    DeliveryTimeoutError,
    FundindError,
    LogDecodeError,
    RetryableDeliveryError,
    StoreContentionError,
    StoreError,
)
from fundind.core.models import Delivery, Document, EventLog, Meta

__all__ = [
    "PipelineConfig",
    "load_config",
    "DeliveryError",
    "DeliveryTimeoutError",
    "FundindError",
    "LogDecodeError",
    "RetryableDeliveryError",
    "StoreContentionError",
    "StoreError",
    "Delivery",
    "Document",
    "EventLog",
    "Meta",
]
