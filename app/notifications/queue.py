"""
Queue messages and publishing for notification delivery.

One QueueMessage is published per NotificationLog row. The message carries
a snapshot of the transport credentials so the worker never re-reads them;
Celery sees it as the task's ``payload`` kwarg.

Queues:
    EMAIL    -> email-notifications[.N]
    TELEGRAM -> telegram-notifications[.N]

    With NOTIFICATION_QUEUE_PARTITIONS > 1 the suffix is
    crc32(batch_id) % partitions, so every message of one batch lands on
    the same queue and a single-concurrency consumer keeps batch order.

Secrets:
    Bot tokens and SMTP passwords travel in the payload but are replaced
    in argsrepr/kwargsrepr, so worker logs and events never show them.

Usage:
    from notifications.queue import NotificationPublisher, QueueMessage

    transaction.on_commit(lambda: NotificationPublisher.publish_many(messages))
"""

from __future__ import annotations

import logging
import zlib
from dataclasses import asdict, dataclass
from typing import Any, Union

from django.conf import settings

from notifications.exceptions import StaleRecordError
from notifications.locks import save_with_version
from notifications.models import (
    TRANSITION_FIELDS,
    Channel,
    NotificationLog,
    NotificationStatus,
)

logger = logging.getLogger(__name__)


PUBLISH_FAILURE_MESSAGE = "Failed to queue notification"

CHANNEL_QUEUES = {
    Channel.EMAIL: "email-notifications",
    Channel.TELEGRAM: "telegram-notifications",
}


# =============================================================================
# Transport snapshots
# =============================================================================


@dataclass(frozen=True)
class TelegramTransport:
    bot_token: str


@dataclass(frozen=True)
class EmailTransport:
    from_email: str
    smtp_host: str
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    use_tls: bool = True
    use_ssl: bool = False


Transport = Union[TelegramTransport, EmailTransport]

TRANSPORT_TYPES = {
    Channel.EMAIL: EmailTransport,
    Channel.TELEGRAM: TelegramTransport,
}


# =============================================================================
# Queue message
# =============================================================================


@dataclass(frozen=True)
class QueueMessage:
    """
    Everything a delivery worker needs besides the log row itself.

    Attributes:
        log_id: NotificationLog primary key
        batch_id: Ingestion batch (also picks the queue partition)
        recipient: Email address or chat id
        channel: Channel value
        transport: Credential snapshot for the channel
        retry_count: Failed attempts before this message was published
    """

    log_id: str
    batch_id: str
    recipient: str
    channel: str
    transport: Transport
    retry_count: int = 0

    def to_payload(self) -> dict[str, Any]:
        """JSON-serializable form used as the Celery task kwarg."""
        payload = asdict(self)
        payload["transport"] = asdict(self.transport)
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> QueueMessage:
        channel = payload["channel"]
        transport_type = TRANSPORT_TYPES[Channel(channel)]
        return cls(
            log_id=str(payload["log_id"]),
            batch_id=str(payload["batch_id"]),
            recipient=payload["recipient"],
            channel=channel,
            transport=transport_type(**payload["transport"]),
            retry_count=payload.get("retry_count", 0),
        )

    def redacted(self) -> dict[str, Any]:
        """Payload safe for logs: identifiers only, no credentials."""
        return {
            "log_id": self.log_id,
            "batch_id": self.batch_id,
            "channel": self.channel,
            "retry_count": self.retry_count,
        }


def queue_for(channel: str, batch_id: str) -> str:
    """Name of the queue a message for ``channel`` and ``batch_id`` goes to."""
    name = CHANNEL_QUEUES[Channel(channel)]
    partitions = settings.NOTIFICATION_QUEUE_PARTITIONS
    if partitions <= 1:
        return name
    return f"{name}.{zlib.crc32(str(batch_id).encode()) % partitions}"


# =============================================================================
# Publisher
# =============================================================================


class NotificationPublisher:
    """
    Hands queue messages to the channel's delivery task.

    Publishing happens after the ingestion transaction commits, so the caller
    has already been answered when a publish fails. The row is marked FAILED
    right away since no worker will ever pick it up.
    """

    @classmethod
    def publish(cls, message: QueueMessage) -> None:
        from notifications.tasks import DELIVERY_TASKS

        task = DELIVERY_TASKS[Channel(message.channel)]
        queue = queue_for(message.channel, message.batch_id)
        task.apply_async(
            kwargs={"payload": message.to_payload()},
            queue=queue,
            argsrepr="()",
            kwargsrepr=repr({"payload": message.redacted()}),
        )
        logger.debug(
            f"Published notification {message.log_id} to {queue}",
            extra={"log_id": message.log_id, "batch_id": message.batch_id},
        )

    @classmethod
    def publish_many(cls, messages: list[QueueMessage]) -> int:
        """
        Publish every message, continuing past individual failures.

        Returns:
            Number of messages published
        """
        published = 0
        for message in messages:
            try:
                cls.publish(message)
            except Exception:
                logger.exception(
                    f"Failed to publish notification {message.log_id}",
                    extra={"log_id": message.log_id, "batch_id": message.batch_id},
                )
                cls._fail_unpublished(message)
            else:
                published += 1
        return published

    @classmethod
    def _fail_unpublished(cls, message: QueueMessage) -> None:
        """Mark the row of a message that never reached the broker FAILED."""
        log = NotificationLog.objects.filter(pk=message.log_id).first()
        if log is None or log.status != NotificationStatus.PENDING:
            return
        log.mark_failed(PUBLISH_FAILURE_MESSAGE)
        try:
            save_with_version(log, TRANSITION_FIELDS["mark_failed"])
        except StaleRecordError:
            logger.info(
                f"Notification {message.log_id} changed before it could be failed, skipping",
                extra={"log_id": message.log_id, "batch_id": message.batch_id},
            )
