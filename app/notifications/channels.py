"""
Channel senders: the only code that talks to external providers.

Each sender implements ChannelSender.send(log, message) -> provider response
and raises DeliveryError on any failure (including timeouts). Senders make
exactly one attempt and never touch the database.

Senders:
    TelegramSender: Bot API sendMessage over HTTPS (requests)
    EmailSender: SMTP through Django's email backend

Usage:
    from notifications.channels import get_sender

    response = get_sender(log.channel).send(log, message)
"""

from __future__ import annotations

import logging
import smtplib
from typing import TYPE_CHECKING, Protocol

import requests
from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection

from notifications.exceptions import DeliveryError
from notifications.models import Channel

if TYPE_CHECKING:
    from notifications.models import NotificationLog
    from notifications.queue import QueueMessage

logger = logging.getLogger(__name__)

SMTP_BACKEND = "django.core.mail.backends.smtp.EmailBackend"
DEFAULT_EMAIL_SUBJECT = "Notification"

# Provider bodies stored on failure are cut to this length
MAX_ERROR_BODY = 500


class ChannelSender(Protocol):
    """Delivers one notification log to one recipient."""

    channel: str

    def send(self, log: NotificationLog, message: QueueMessage) -> str: ...


# =============================================================================
# Rendering
# =============================================================================


def render_telegram_text(log: NotificationLog) -> str:
    """
    HTML text for the Bot API.

    Example:
        <b>🔔 ALERT</b>

        <b>Disk full</b>

        /var is at 98%

        <i>From: billing</i>
    """
    parts = [f"<b>🔔 {log.notification_type}</b>"]
    if log.subject:
        parts.append(f"<b>{log.subject}</b>")
    parts.append(log.message)
    parts.append(f"<i>From: {log.system_name}</i>")
    return "\n\n".join(parts)


def email_subject(log: NotificationLog) -> str:
    return log.subject or DEFAULT_EMAIL_SUBJECT


def render_email_html(log: NotificationLog) -> str:
    body = log.message.replace("\n", "<br/>")
    return (
        "<html><body>"
        f"<h2>{log.notification_type} - {email_subject(log)}</h2>"
        f"<p>{body}</p>"
        "<hr/>"
        f"<p><small>Sent from: {log.system_name}</small></p>"
        "</body></html>"
    )


def render_email_text(log: NotificationLog) -> str:
    return (
        f"{log.notification_type} - {email_subject(log)}\n\n"
        f"{log.message}\n\n"
        f"Sent from: {log.system_name}"
    )


# =============================================================================
# Senders
# =============================================================================


class TelegramSender:
    """POST {TELEGRAM_API_URL}{token}/sendMessage with parse_mode=HTML."""

    channel = Channel.TELEGRAM

    def send(self, log: NotificationLog, message: QueueMessage) -> str:
        token = message.transport.bot_token
        url = f"{settings.TELEGRAM_API_URL}{token}/sendMessage"
        body = {
            "chat_id": message.recipient,
            "text": render_telegram_text(log),
            "parse_mode": "HTML",
        }

        try:
            response = requests.post(
                url, json=body, timeout=settings.TELEGRAM_TIMEOUT_SECONDS
            )
        except requests.RequestException as e:
            # requests includes the URL (and so the token) in its messages
            reason = str(e).replace(token, "***") if token else str(e)
            raise DeliveryError(
                f"Telegram request failed: {reason}",
                details={"exception": e.__class__.__name__},
            ) from e

        if not response.ok:
            raise DeliveryError(
                f"Telegram API returned {response.status_code}: "
                f"{response.text[:MAX_ERROR_BODY]}",
                details={"status_code": response.status_code},
            )

        logger.info(
            f"Telegram message sent for notification {log.id}",
            extra={"log_id": str(log.id), "batch_id": str(log.batch_id)},
        )
        return response.text


class EmailSender:
    """HTML email over an SMTP connection built from the transport snapshot."""

    channel = Channel.EMAIL

    def send(self, log: NotificationLog, message: QueueMessage) -> str:
        transport = message.transport
        try:
            connection = get_connection(
                backend=SMTP_BACKEND,
                fail_silently=False,
                host=transport.smtp_host,
                port=transport.smtp_port,
                username=transport.smtp_username or "",
                password=transport.smtp_password or "",
                use_tls=transport.use_tls,
                use_ssl=transport.use_ssl,
                timeout=settings.EMAIL_TIMEOUT_SECONDS,
            )
            email = EmailMultiAlternatives(
                subject=email_subject(log),
                body=render_email_text(log),
                from_email=transport.from_email,
                to=[message.recipient],
                connection=connection,
            )
            email.attach_alternative(render_email_html(log), "text/html")
            sent = email.send()
        except (smtplib.SMTPException, OSError, ValueError) as e:
            raise DeliveryError(
                f"Email delivery failed: {e}",
                details={"exception": e.__class__.__name__},
            ) from e

        if not sent:
            raise DeliveryError("Email delivery failed: no recipients accepted")

        logger.info(
            f"Email sent for notification {log.id}",
            extra={"log_id": str(log.id), "batch_id": str(log.batch_id)},
        )
        return f"Email sent to {message.recipient}"


SENDERS: dict[str, ChannelSender] = {
    Channel.EMAIL: EmailSender(),
    Channel.TELEGRAM: TelegramSender(),
}


def get_sender(channel: str) -> ChannelSender:
    return SENDERS[Channel(channel)]
