from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from fundind.core.models import Document

if TYPE_CHECKING:
    from fundind.decoding.specs import EventRegistry


# ---------------------------------------------------------------------------
# IDocumentStore
# ---------------------------------------------------------------------------

@runtime_checkable
class IDocumentStore(Protocol):
    """
    Abstract document store holding audit collections and aggregates.

    Domain expectations:
    - Documents are JSON-like dicts addressed by (collection, doc_id).
    - Every stored document carries a monotonically increasing version,
      starting at 1 on creation.
    - Failures surface as `StoreError`; the dispatcher turns them into a
      retryable delivery failure.
    """

    async def get(self, collection: str, doc_id: str) -> Document | None:
        """
        Return the current snapshot of a document, or None if absent.

        The returned `Document.data` is a private copy; mutating it never
        affects the stored document.
        """
        ...

    async def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> bool:
        """
        Insert-if-absent.

        Returns
        -------
        bool
            True when the document was written, False when a document with
            this id already existed (the existing one is left untouched).
        """
        ...

    async def compare_and_set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        *,
        expected_version: int,
    ) -> bool:
        """
        Write `data` only if the stored version still equals `expected_version`.

        - `expected_version=0` means "the document must not exist yet".

        Returns False on a version mismatch so the caller can re-read and retry.
        Implementations:
        - InMemoryDocumentStore (asyncio.Lock around a dict)
        - SQLiteDocumentStore (versioned UPDATE ... WHERE version = ?)
        """
        ...

    async def list(self, collection: str) -> list[Document]:
        """
        Return every document of a collection ordered by id.
        """
        ...


# ---------------------------------------------------------------------------
# IEventRegistryProvider
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventRegistryProvider(Protocol):
    """
    Provides the EventRegistry used by the decoder.

    Domain expectations:
    - Registry maps topic0 -> EventSpec.
    - It is built once and not mutated while deliveries are processed.
    """

    def get_registry(self) -> EventRegistry:
        ...
