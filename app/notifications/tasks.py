"""
Celery tasks for notification delivery.

Tasks:
    deliver_email_notification: Deliver one email log
    deliver_telegram_notification: Deliver one Telegram log
    reconcile_stale_processing: Fail rows stuck in PROCESSING (beat, every 5 min)

Design:
    - Tasks receive the QueueMessage payload (log id plus transport snapshot)
    - At most one delivery attempt per message: no autoretry, and the
      worker swallows delivery and version-conflict errors
    - acks_late=True so a worker crash before completion redelivers the
      message; the PENDING check in DeliveryWorker makes that a no-op once
      the row has been claimed
    - ignore_result=True keeps credentials out of the result backend

Usage:
    # Published by NotificationPublisher after the ingestion commit
    deliver_email_notification.apply_async(kwargs={"payload": message.to_payload()})
"""

from __future__ import annotations

import logging

from celery import shared_task

from notifications.channels import get_sender
from notifications.models import Channel
from notifications.queue import QueueMessage
from notifications.workers import DeliveryWorker, fail_stale_processing

logger = logging.getLogger(__name__)


def _deliver(channel: str, payload: dict) -> str | None:
    message = QueueMessage.from_payload(payload)
    if message.channel != channel:
        logger.error(
            f"Notification {message.log_id} for {message.channel} arrived on the {channel} task",
            extra={"log_id": message.log_id, "batch_id": message.batch_id},
        )
        return None
    return DeliveryWorker(get_sender(channel)).process(message)


@shared_task(
    name="notifications.tasks.deliver_email_notification",
    acks_late=True,
    ignore_result=True,
)
def deliver_email_notification(payload: dict) -> str | None:
    """
    Deliver one email notification.

    Args:
        payload: QueueMessage.to_payload() output

    Returns:
        Final log status (for direct calls; the result is not stored)
    """
    return _deliver(Channel.EMAIL, payload)


@shared_task(
    name="notifications.tasks.deliver_telegram_notification",
    acks_late=True,
    ignore_result=True,
)
def deliver_telegram_notification(payload: dict) -> str | None:
    """Deliver one Telegram notification. See deliver_email_notification."""
    return _deliver(Channel.TELEGRAM, payload)


@shared_task(name="notifications.tasks.reconcile_stale_processing", ignore_result=True)
def reconcile_stale_processing() -> int:
    """
    Mark long-running PROCESSING rows FAILED.

    Scheduled by django-celery-beat (see migration 0002).

    Returns:
        Number of rows failed
    """
    failed = fail_stale_processing()
    if failed:
        logger.warning(f"Reconciled {failed} stale PROCESSING notification(s)")
    return failed


DELIVERY_TASKS = {
    Channel.EMAIL: deliver_email_notification,
    Channel.TELEGRAM: deliver_telegram_notification,
}
