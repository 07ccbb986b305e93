"""Event decoding.

This package provides:
- Event specification system (EventSpec, TopicFieldSpec, DataFieldSpec)
- Generic decoder that translates raw logs into DecodedEvent objects
- A fixed-registry provider for the dispatcher
- Pre-built registries for the launchpad contracts
"""

from fundind.decoding.decoder import DecodedEvent, decode_event
from fundind.decoding.registries import make_launchpad_registry
from fundind.decoding.registry import EventRegistryProvider
from fundind.decoding.registry_builder import event_spec_from_signature, make_registry
from fundind.decoding.specs import DataFieldSpec, EventRegistry, EventSpec, TopicFieldSpec

__all__ = [
    "DecodedEvent",
    "decode_event",
    "make_launchpad_registry",
    "EventRegistryProvider",
    "event_spec_from_signature",
    "make_registry",
    "DataFieldSpec",
    "EventRegistry",
    "EventSpec",
    "TopicFieldSpec",
]
