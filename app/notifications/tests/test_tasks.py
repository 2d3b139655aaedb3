"""
Tests for notification Celery tasks.

Tasks are called directly (synchronously); providers are patched.
"""

from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from django.core.mail.backends.locmem import EmailBackend
from django.utils import timezone

from notifications.models import Channel, NotificationLog, NotificationStatus
from notifications.tasks import (
    deliver_email_notification,
    deliver_telegram_notification,
    reconcile_stale_processing,
)
from notifications.tests.factories import NotificationLogFactory


@pytest.mark.django_db
class TestDeliverTelegramNotification:
    def test_delivers_and_marks_sent(self, telegram_message):
        log = NotificationLogFactory()
        response = MagicMock(ok=True, status_code=200, text='{"ok":true}')

        with patch("notifications.channels.requests.post", return_value=response):
            status = deliver_telegram_notification(telegram_message(log).to_payload())

        assert status == NotificationStatus.SENT
        log.refresh_from_db()
        assert log.response == '{"ok":true}'

    def test_provider_rejection_marks_failed(self, telegram_message):
        log = NotificationLogFactory()
        response = MagicMock(ok=False, status_code=401, text='{"ok":false}')

        with patch("notifications.channels.requests.post", return_value=response):
            status = deliver_telegram_notification(telegram_message(log).to_payload())

        assert status == NotificationStatus.FAILED
        log.refresh_from_db()
        assert log.error_message == 'Telegram API returned 401: {"ok":false}'

    def test_wrong_channel_payload_is_dropped(self, email_message):
        log = NotificationLogFactory(channel=Channel.EMAIL, recipient="ops@example.com")

        with patch("notifications.tasks.DeliveryWorker") as worker_class:
            status = deliver_telegram_notification(email_message(log).to_payload())

        assert status is None
        worker_class.assert_not_called()
        assert NotificationLog.objects.get(pk=log.pk).status == NotificationStatus.PENDING


@pytest.mark.django_db
class TestDeliverEmailNotification:
    def test_delivers_through_smtp_connection(self, mailoutbox, email_message):
        log = NotificationLogFactory(channel=Channel.EMAIL, recipient="ops@example.com")

        with patch("notifications.channels.get_connection", return_value=EmailBackend()):
            status = deliver_email_notification(email_message(log).to_payload())

        assert status == NotificationStatus.SENT
        assert len(mailoutbox) == 1


class TestTaskOptions:
    @pytest.mark.parametrize(
        "task", [deliver_email_notification, deliver_telegram_notification]
    )
    def test_delivery_tasks_ack_late_without_results(self, task):
        assert task.acks_late is True
        assert task.ignore_result is True

    def test_names_are_stable(self):
        assert deliver_email_notification.name == "notifications.tasks.deliver_email_notification"
        assert (
            deliver_telegram_notification.name
            == "notifications.tasks.deliver_telegram_notification"
        )
        assert reconcile_stale_processing.name == "notifications.tasks.reconcile_stale_processing"


@pytest.mark.django_db
class TestReconcileStaleProcessing:
    def test_fails_stuck_rows(self, settings):
        settings.NOTIFICATION_PROCESSING_TIMEOUT_MINUTES = 15
        log = NotificationLogFactory(status=NotificationStatus.PROCESSING)
        NotificationLog.objects.filter(pk=log.pk).update(
            updated_at=timezone.now() - timedelta(minutes=30)
        )

        assert reconcile_stale_processing() == 1

        log.refresh_from_db()
        assert log.status == NotificationStatus.FAILED
