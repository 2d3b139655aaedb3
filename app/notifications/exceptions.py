"""
Worker-side exceptions for the notification pipeline.

These never reach HTTP clients. DeliveryWorker catches both and records
the outcome on the notification log instead.
"""

from core.exceptions import ConflictError, ExternalServiceError


class DeliveryError(ExternalServiceError):
    """A channel sender could not hand the message to its provider."""

    default_error_code: str = "DELIVERY_FAILED"


class StaleRecordError(ConflictError):
    """A version-conditioned write matched no row (someone else wrote first)."""

    default_error_code: str = "STALE_RECORD"
