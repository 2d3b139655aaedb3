"""
Test configuration and fixtures for notification tests.

This module provides:
- API keys and authenticated clients (re-exported from api_keys tests)
- Ready-made request bodies for both channels
- System settings fixtures
- A patched publisher so no test talks to a broker

Usage:
    def test_example(api_client, api_key, telegram_payload):
        response = api_client.post(
            "/api/v1/notifications/send/",
            telegram_payload,
            format="json",
            HTTP_X_API_KEY=api_key.key,
        )
        assert response.status_code == 200
"""

from unittest.mock import patch

import pytest

from api_keys.tests.conftest import (  # noqa: F401
    admin_client,
    api_client,
    api_key,
    limited_api_key,
    member,
    member_client,
    platform_admin,
)
from notifications.models import SystemNotificationSettings
from notifications.queue import EmailTransport, QueueMessage, TelegramTransport
from notifications.tests.factories import SystemNotificationSettingsFactory


# =============================================================================
# Request Bodies
# =============================================================================


@pytest.fixture
def telegram_payload():
    """Client request for two Telegram chats."""
    return {
        "channel": "TELEGRAM",
        "type": "ALERT",
        "subject": "Disk full",
        "message": "/var is at 98%",
        "telegram_config": {"bot_token": "123456:client-token", "chat_ids": ["42", "43"]},
    }


@pytest.fixture
def email_payload():
    """Client request for one email recipient."""
    return {
        "channel": "EMAIL",
        "type": "INFO",
        "subject": "Nightly report",
        "message": "All jobs finished.\nNo errors.",
        "email_config": {
            "from_email": "reports@example.com",
            "to": ["ops@example.com"],
            "smtp_host": "smtp.example.com",
            "smtp_port": 587,
            "smtp_username": "reports",
            "smtp_password": "client-secret",
            "use_tls": True,
            "use_ssl": False,
        },
    }


# =============================================================================
# System Settings
# =============================================================================


@pytest.fixture
def system_settings(db):
    """Settings with both channels enabled and configured."""
    return SystemNotificationSettingsFactory()


@pytest.fixture
def disabled_system_settings(db):
    """Freshly created settings: every channel disabled."""
    return SystemNotificationSettings.load()


# =============================================================================
# Queue
# =============================================================================


@pytest.fixture
def mock_publisher():
    """Replace the Celery hand-off; inspect calls with mock_publisher.call_args."""
    with patch("notifications.services.NotificationPublisher.publish_many") as mock:
        mock.side_effect = lambda messages: len(messages)
        yield mock


@pytest.fixture
def telegram_message():
    """Build a QueueMessage for a Telegram log."""

    def build(log, bot_token="123456:client-token"):
        return QueueMessage(
            log_id=str(log.id),
            batch_id=str(log.batch_id),
            recipient=log.recipient,
            channel=log.channel,
            transport=TelegramTransport(bot_token=bot_token),
        )

    return build


@pytest.fixture
def email_message():
    """Build a QueueMessage for an email log."""

    def build(log, **transport_overrides):
        transport = {
            "from_email": "reports@example.com",
            "smtp_host": "smtp.example.com",
            "smtp_port": 587,
            "smtp_username": "reports",
            "smtp_password": "client-secret",
        }
        transport.update(transport_overrides)
        return QueueMessage(
            log_id=str(log.id),
            batch_id=str(log.batch_id),
            recipient=log.recipient,
            channel=log.channel,
            transport=EmailTransport(**transport),
        )

    return build
