"""
Tests for channel senders and message rendering.

Providers are never contacted: requests.post and the SMTP connection are
patched.
"""

import smtplib
from unittest.mock import MagicMock, patch

import pytest
import requests
from django.core.mail.backends.locmem import EmailBackend as LocmemBackend

from notifications.channels import (
    EmailSender,
    TelegramSender,
    get_sender,
    render_email_html,
    render_email_text,
    render_telegram_text,
)
from notifications.exceptions import DeliveryError
from notifications.models import Channel, NotificationType
from notifications.tests.factories import NotificationLogFactory


def provider_response(ok=True, status_code=200, text='{"ok":true,"result":{}}'):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.text = text
    return response


# =============================================================================
# Rendering
# =============================================================================


@pytest.mark.django_db
class TestRendering:
    def test_telegram_text_with_subject(self):
        log = NotificationLogFactory(
            notification_type=NotificationType.ALERT,
            subject="Disk full",
            message="/var is at 98%",
            system_name="billing",
            api_key=None,
        )

        assert render_telegram_text(log) == (
            "<b>🔔 ALERT</b>\n\n<b>Disk full</b>\n\n/var is at 98%\n\n<i>From: billing</i>"
        )

    def test_telegram_text_without_subject(self):
        log = NotificationLogFactory(subject="", message="ping", system_name="SYSTEM", api_key=None)

        assert render_telegram_text(log) == "<b>🔔 INFO</b>\n\nping\n\n<i>From: SYSTEM</i>"

    def test_email_html_converts_newlines(self):
        log = NotificationLogFactory(
            channel=Channel.EMAIL,
            notification_type=NotificationType.WARNING,
            subject="Report",
            message="line one\nline two",
        )

        html = render_email_html(log)

        assert "<h2>WARNING - Report</h2>" in html
        assert "line one<br/>line two" in html
        assert f"Sent from: {log.system_name}" in html

    def test_email_subject_defaults(self):
        log = NotificationLogFactory(channel=Channel.EMAIL, subject="")

        assert render_email_text(log).startswith("INFO - Notification\n\n")


# =============================================================================
# Telegram
# =============================================================================


@pytest.mark.django_db
class TestTelegramSender:
    def test_posts_html_message(self, settings, telegram_message):
        settings.TELEGRAM_API_URL = "https://api.telegram.org/bot"
        log = NotificationLogFactory(recipient="42")

        with patch("notifications.channels.requests.post") as post:
            post.return_value = provider_response()
            result = TelegramSender().send(log, telegram_message(log, bot_token="123:abc"))

        assert result == '{"ok":true,"result":{}}'
        url = post.call_args.args[0]
        assert url == "https://api.telegram.org/bot123:abc/sendMessage"
        body = post.call_args.kwargs["json"]
        assert body["chat_id"] == "42"
        assert body["parse_mode"] == "HTML"
        assert body["text"] == render_telegram_text(log)
        assert post.call_args.kwargs["timeout"] == settings.TELEGRAM_TIMEOUT_SECONDS

    def test_non_2xx_raises_with_status_and_body(self, telegram_message):
        log = NotificationLogFactory()

        with patch("notifications.channels.requests.post") as post:
            post.return_value = provider_response(
                ok=False,
                status_code=400,
                text='{"ok":false,"description":"Bad Request: chat not found"}',
            )
            with pytest.raises(DeliveryError) as exc_info:
                TelegramSender().send(log, telegram_message(log))

        assert exc_info.value.message.startswith("Telegram API returned 400: ")
        assert "chat not found" in exc_info.value.message

    def test_long_error_body_is_truncated(self, telegram_message):
        log = NotificationLogFactory()

        with patch("notifications.channels.requests.post") as post:
            post.return_value = provider_response(ok=False, status_code=502, text="x" * 2000)
            with pytest.raises(DeliveryError) as exc_info:
                TelegramSender().send(log, telegram_message(log))

        assert exc_info.value.message == f"Telegram API returned 502: {'x' * 500}"

    def test_timeout_raises_without_leaking_token(self, telegram_message):
        log = NotificationLogFactory()

        with patch("notifications.channels.requests.post") as post:
            post.side_effect = requests.Timeout(
                "HTTPSConnectionPool: /bot999:secret/sendMessage read timed out"
            )
            with pytest.raises(DeliveryError) as exc_info:
                TelegramSender().send(log, telegram_message(log, bot_token="999:secret"))

        assert exc_info.value.message.startswith("Telegram request failed: ")
        assert "999:secret" not in exc_info.value.message


# =============================================================================
# Email
# =============================================================================


@pytest.mark.django_db
class TestEmailSender:
    def test_sends_html_email(self, mailoutbox, email_message):
        log = NotificationLogFactory(
            channel=Channel.EMAIL, recipient="ops@example.com", subject="Nightly report"
        )

        with patch(
            "notifications.channels.get_connection", return_value=LocmemBackend()
        ) as get_connection:
            result = EmailSender().send(log, email_message(log))

        assert result == "Email sent to ops@example.com"
        assert len(mailoutbox) == 1
        sent = mailoutbox[0]
        assert sent.subject == "Nightly report"
        assert sent.from_email == "reports@example.com"
        assert sent.to == ["ops@example.com"]
        assert sent.alternatives[0][1] == "text/html"

        kwargs = get_connection.call_args.kwargs
        assert kwargs["host"] == "smtp.example.com"
        assert kwargs["port"] == 587
        assert kwargs["username"] == "reports"
        assert kwargs["password"] == "client-secret"
        assert kwargs["use_tls"] is True
        assert kwargs["use_ssl"] is False
        assert kwargs["fail_silently"] is False

    def test_smtp_error_raises_delivery_error(self, email_message):
        log = NotificationLogFactory(channel=Channel.EMAIL, recipient="ops@example.com")
        connection = MagicMock()
        connection.send_messages.side_effect = smtplib.SMTPAuthenticationError(
            535, b"Authentication failed"
        )

        with patch("notifications.channels.get_connection", return_value=connection):
            with pytest.raises(DeliveryError) as exc_info:
                EmailSender().send(log, email_message(log))

        assert exc_info.value.message.startswith("Email delivery failed: ")

    def test_connection_refused_raises_delivery_error(self, email_message):
        log = NotificationLogFactory(channel=Channel.EMAIL, recipient="ops@example.com")
        connection = MagicMock()
        connection.send_messages.side_effect = ConnectionRefusedError("refused")

        with patch("notifications.channels.get_connection", return_value=connection):
            with pytest.raises(DeliveryError):
                EmailSender().send(log, email_message(log))

    def test_nothing_accepted_raises(self, email_message):
        log = NotificationLogFactory(channel=Channel.EMAIL, recipient="ops@example.com")
        connection = MagicMock()
        connection.send_messages.return_value = 0

        with patch("notifications.channels.get_connection", return_value=connection):
            with pytest.raises(DeliveryError):
                EmailSender().send(log, email_message(log))


class TestGetSender:
    def test_registry(self):
        assert isinstance(get_sender(Channel.EMAIL), EmailSender)
        assert isinstance(get_sender("TELEGRAM"), TelegramSender)

    def test_unknown_channel(self):
        with pytest.raises(ValueError):
            get_sender("SMS")
