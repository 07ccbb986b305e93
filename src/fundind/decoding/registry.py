"""Registry provider used by the dispatcher."""

from __future__ import annotations

from fundind.core.interfaces import IEventRegistryProvider
from fundind.decoding.specs import EventRegistry


class EventRegistryProvider(IEventRegistryProvider):
    """
    Simple registry provider that always returns the same EventRegistry.

    This is used as the bridge between the decoding registry (signatures/specs)
    and the delivery use case which only depends on the interface.
    """

    def __init__(self, registry: EventRegistry) -> None:
        self._registry = registry

    def get_registry(self) -> EventRegistry:
        return self._registry
