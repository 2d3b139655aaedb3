"""
Delivery worker: drives one notification log through its state machine.

The same algorithm serves every channel; only the ChannelSender differs.

Flow per message:
    1. Locate the log row (retried with exponential backoff, the row may
       not be visible yet)
    2. PENDING -> PROCESSING
    3. sender.send() - exactly one attempt
    4. PROCESSING -> SENT (response, sent_at) or FAILED (error, retry_count+1)

Every transition re-reads the row, applies the django-fsm transition and
writes with save_with_version(). A StaleRecordError is retried with linear
backoff; when retries run out the row is force-failed if still non-terminal.

Nothing in here raises for delivery or concurrency problems, so the Celery
task always returns and the message is acknowledged.

Usage:
    from notifications.channels import get_sender
    from notifications.workers import DeliveryWorker

    DeliveryWorker(get_sender(message.channel)).process(message)
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.db.models import F
from django.utils import timezone
from django_fsm import TransitionNotAllowed

from notifications.exceptions import DeliveryError, StaleRecordError
from notifications.locks import save_with_version
from notifications.models import (
    TRANSITION_FIELDS,
    NotificationLog,
    NotificationStatus,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from notifications.channels import ChannelSender
    from notifications.queue import QueueMessage

logger = logging.getLogger(__name__)

CONFLICT_FAILURE_MESSAGE = "Optimistic locking failure after retries"
STALE_PROCESSING_MESSAGE = "Delivery timed out while processing"


class DeliveryWorker:
    """
    Deliver queue messages with one sender.

    Args:
        sender: Channel sender used for step 3
        sleep: Called with seconds between retries (time.sleep by default)
    """

    def __init__(
        self,
        sender: ChannelSender,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.sender = sender
        self.sleep = sleep

    def process(self, message: QueueMessage) -> str | None:
        """
        Run the full delivery flow for one message.

        Returns:
            The log's final status, or None when the row was never found
        """
        extra = {
            "log_id": message.log_id,
            "batch_id": message.batch_id,
            "channel": message.channel,
        }

        log = self._locate(message.log_id)
        if log is None:
            logger.error(f"Notification log {message.log_id} not found, dropping message", extra=extra)
            return None

        if log.status != NotificationStatus.PENDING:
            logger.info(
                f"Notification {log.id} is {log.status}, skipping",
                extra=extra,
            )
            return log.status

        try:
            log = self._transition(log.pk, "start_processing")
        except TransitionNotAllowed:
            logger.info(f"Notification {log.id} already claimed, skipping", extra=extra)
            return self._current_status(log.pk)
        except StaleRecordError:
            return self._force_fail(log.pk, extra)

        try:
            response = self.sender.send(log, message)
        except DeliveryError as e:
            logger.warning(f"Delivery failed for notification {log.id}: {e.message}", extra=extra)
            outcome = ("mark_failed", e.message)
        except Exception as e:
            logger.exception(f"Unexpected error delivering notification {log.id}", extra=extra)
            outcome = ("mark_failed", f"Unexpected error: {e}")
        else:
            outcome = ("mark_sent", response)

        try:
            log = self._transition(log.pk, *outcome)
        except TransitionNotAllowed:
            logger.warning(
                f"Notification {log.id} reached a terminal state elsewhere, keeping it",
                extra=extra,
            )
            return self._current_status(log.pk)
        except StaleRecordError:
            return self._force_fail(log.pk, extra)

        logger.info(f"Notification {log.id} is now {log.status}", extra=extra)
        return log.status

    # ==========================================================================
    # Steps
    # ==========================================================================

    def _locate(self, log_id: str) -> NotificationLog | None:
        """Fetch the row, doubling the wait after each miss."""
        attempts = settings.NOTIFICATION_LOOKUP_ATTEMPTS
        delay_ms = settings.NOTIFICATION_LOOKUP_BACKOFF_MS

        for attempt in range(attempts):
            log = NotificationLog.objects.filter(pk=log_id).first()
            if log is not None:
                return log
            if attempt + 1 < attempts:
                logger.debug(f"Notification log {log_id} not visible yet (attempt {attempt + 1})")
                self.sleep(delay_ms / 1000)
                delay_ms *= 2
        return None

    def _transition(self, log_id, name: str, *args) -> NotificationLog:
        """
        Apply transition ``name`` to a fresh copy of the row.

        Raises:
            TransitionNotAllowed: The row is no longer in a source state
            StaleRecordError: Every attempt lost the version race
        """
        retries = settings.NOTIFICATION_CONFLICT_RETRIES
        backoff_ms = settings.NOTIFICATION_CONFLICT_BACKOFF_MS

        for attempt in range(retries):
            log = NotificationLog._base_manager.get(pk=log_id)
            getattr(log, name)(*args)
            try:
                save_with_version(log, TRANSITION_FIELDS[name])
                return log
            except StaleRecordError:
                logger.warning(
                    f"Version conflict on notification {log_id} during {name} "
                    f"(attempt {attempt + 1}/{retries})",
                    extra={"log_id": str(log_id)},
                )
                if attempt + 1 < retries:
                    self.sleep(backoff_ms * (attempt + 1) / 1000)

        raise StaleRecordError(
            f"Could not apply {name} to notification {log_id}",
            details={"log_id": str(log_id), "transition": name},
        )

    def _force_fail(self, log_id, extra: dict) -> str:
        """Mark the row FAILED unless it already reached a terminal state."""
        updated = NotificationLog._base_manager.filter(
            pk=log_id,
            status__in=[NotificationStatus.PENDING, NotificationStatus.PROCESSING],
        ).update(
            status=NotificationStatus.FAILED,
            error_message=CONFLICT_FAILURE_MESSAGE,
            retry_count=F("retry_count") + 1,
            version=F("version") + 1,
            updated_at=timezone.now(),
        )
        if updated:
            logger.error(f"Notification {log_id} force-failed after version conflicts", extra=extra)
        return self._current_status(log_id)

    @staticmethod
    def _current_status(log_id) -> str:
        return NotificationLog._base_manager.values_list("status", flat=True).get(pk=log_id)


def fail_stale_processing(now: datetime | None = None) -> int:
    """
    Fail PROCESSING rows nobody has touched for the processing timeout.

    A worker that died between claiming a row and finishing it leaves the row
    PROCESSING forever. Rows written to by a live worker in the meantime lose
    the version race here and are left alone.

    Returns:
        Number of rows marked FAILED
    """
    now = now or timezone.now()
    cutoff = now - timedelta(minutes=settings.NOTIFICATION_PROCESSING_TIMEOUT_MINUTES)
    stale = NotificationLog.objects.filter(
        status=NotificationStatus.PROCESSING,
        updated_at__lt=cutoff,
    )

    failed = 0
    for log in stale.iterator():
        stuck_since = log.updated_at
        log.mark_failed(STALE_PROCESSING_MESSAGE)
        try:
            save_with_version(log, TRANSITION_FIELDS["mark_failed"])
        except StaleRecordError:
            logger.info(f"Notification {log.id} changed during reconciliation, skipping")
            continue
        failed += 1
        logger.warning(
            f"Notification {log.id} stuck in PROCESSING since {stuck_since}, marked FAILED",
            extra={"log_id": str(log.id), "batch_id": str(log.batch_id)},
        )

    return failed
