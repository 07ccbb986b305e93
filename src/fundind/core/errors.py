"""Exception taxonomy for the ingestion pipeline.

- `LogDecodeError`: one log is malformed; only that log is skipped.
- `StoreError`: the document store failed; the delivery should be retried.
- `DeliveryError`: raised to the caller of a delivery once all of its logs
  have been attempted.
"""

from __future__ import annotations


class FundindError(Exception):
    """Base class for all pipeline errors."""


class LogDecodeError(FundindError):
    """A log could not be decoded (missing topics, truncated data, bad hex...)."""


class StoreError(FundindError):
    """The document store rejected or failed an operation."""

    retryable = True


class StoreContentionError(StoreError):
    """An optimistic update kept losing the race for the same document."""

    def __init__(self, collection: str, doc_id: str, attempts: int) -> None:
        super().__init__(f"{collection}/{doc_id}: gave up after {attempts} conflicting writes")
        self.collection = collection
        self.doc_id = doc_id
        self.attempts = attempts


class DeliveryError(FundindError):
    """A delivery could not be fully applied."""

    retryable = False

    def __init__(self, delivery_id: str, message: str) -> None:
        super().__init__(f"delivery {delivery_id}: {message}")
        self.delivery_id = delivery_id


class RetryableDeliveryError(DeliveryError):
    """At least one log hit a store error; redelivering the whole delivery is safe."""

    retryable = True

    def __init__(self, delivery_id: str, failures: list[str]) -> None:
        super().__init__(delivery_id, f"{len(failures)} log(s) failed: " + "; ".join(failures))
        self.failures = failures


class DeliveryTimeoutError(DeliveryError):
    """The delivery did not finish within the configured time budget."""

    retryable = True

    def __init__(self, delivery_id: str, timeout_s: float) -> None:
        super().__init__(delivery_id, f"timed out after {timeout_s:g}s")
        self.timeout_s = timeout_s
