"""
Tests for notification models.

Covers:
- NotificationLog state transitions (django-fsm)
- Version bump on plain saves
- SystemNotificationSettings singleton and derived properties
"""

import pytest
from django_fsm import TransitionNotAllowed
from freezegun import freeze_time

from notifications.models import (
    NotificationLog,
    NotificationStatus,
    SystemNotificationSettings,
)
from notifications.tests.factories import (
    NotificationLogFactory,
    SystemNotificationSettingsFactory,
)


@pytest.mark.django_db
class TestNotificationLogDefaults:
    def test_new_log_is_pending_version_one(self):
        log = NotificationLogFactory()

        assert log.status == NotificationStatus.PENDING
        assert log.version == 1
        assert log.retry_count == 0
        assert log.sent_at is None
        assert log.is_terminal is False

    def test_snapshots_owning_key(self):
        log = NotificationLogFactory()

        assert log.api_key_value == log.api_key.key
        assert log.system_name == log.api_key.system_name

    def test_log_survives_key_deletion(self):
        log = NotificationLogFactory()
        key_value = log.api_key_value

        log.api_key.delete()

        log = NotificationLog.objects.get(pk=log.pk)
        assert log.api_key is None
        assert log.api_key_value == key_value


@pytest.mark.django_db
class TestNotificationLogTransitions:
    def test_start_processing(self):
        log = NotificationLogFactory()

        log.start_processing()

        assert log.status == NotificationStatus.PROCESSING

    @freeze_time("2024-03-10 12:00:00")
    def test_mark_sent_records_response(self):
        log = NotificationLogFactory(
            status=NotificationStatus.PROCESSING, error_message="old"
        )

        log.mark_sent('{"ok":true}')

        assert log.status == NotificationStatus.SENT
        assert log.response == '{"ok":true}'
        assert log.error_message == ""
        assert log.sent_at.isoformat() == "2024-03-10T12:00:00+00:00"
        assert log.is_terminal is True

    def test_mark_failed_from_processing_counts_attempt(self):
        log = NotificationLogFactory(status=NotificationStatus.PROCESSING)

        log.mark_failed("SMTP refused")

        assert log.status == NotificationStatus.FAILED
        assert log.error_message == "SMTP refused"
        assert log.retry_count == 1

    def test_mark_failed_from_pending(self):
        log = NotificationLogFactory()

        log.mark_failed("conflict")

        assert log.status == NotificationStatus.FAILED

    def test_cannot_send_without_processing(self):
        log = NotificationLogFactory()

        with pytest.raises(TransitionNotAllowed):
            log.mark_sent("ok")

    @pytest.mark.parametrize("terminal", [NotificationStatus.SENT, NotificationStatus.FAILED])
    def test_terminal_states_are_final(self, terminal):
        log = NotificationLogFactory(status=terminal)

        with pytest.raises(TransitionNotAllowed):
            log.start_processing()
        with pytest.raises(TransitionNotAllowed):
            log.mark_failed("again")

    def test_cannot_claim_twice(self):
        log = NotificationLogFactory(status=NotificationStatus.PROCESSING)

        with pytest.raises(TransitionNotAllowed):
            log.start_processing()


@pytest.mark.django_db
class TestNotificationLogVersion:
    def test_plain_save_bumps_version(self):
        log = NotificationLogFactory()

        log.subject = "edited"
        log.save()

        assert log.version == 2
        assert NotificationLog.objects.get(pk=log.pk).version == 2

    def test_save_with_update_fields_bumps_version(self):
        log = NotificationLogFactory()

        log.subject = "edited"
        log.save(update_fields=["subject"])

        assert NotificationLog.objects.get(pk=log.pk).version == 2

    def test_soft_delete_bumps_version(self):
        log = NotificationLogFactory()

        log.soft_delete()

        assert NotificationLog.all_objects.get(pk=log.pk).version == 2


@pytest.mark.django_db
class TestSystemNotificationSettings:
    def test_load_creates_disabled_singleton(self):
        settings = SystemNotificationSettings.load()

        assert settings.settings_key == "DEFAULT"
        assert settings.telegram_enabled is False
        assert settings.email_enabled is False
        assert settings.email_smtp_port == 587
        assert settings.email_use_tls is True
        assert settings.email_use_ssl is False

    def test_load_returns_same_row(self):
        first = SystemNotificationSettings.load()
        second = SystemNotificationSettings.load()

        assert first.pk == second.pk
        assert SystemNotificationSettings.objects.count() == 1

    def test_default_recipient_lists(self):
        settings = SystemNotificationSettingsFactory()

        assert settings.default_chat_ids == ["-1001", "-1002"]
        assert settings.default_email_recipients == [
            "ops@example.com",
            "oncall@example.com",
        ]

    def test_configured_flags(self):
        settings = SystemNotificationSettingsFactory()
        assert settings.telegram_configured is True
        assert settings.email_configured is True

        settings.telegram_bot_token = ""
        settings.email_smtp_host = ""

        assert settings.telegram_configured is False
        assert settings.email_configured is False
