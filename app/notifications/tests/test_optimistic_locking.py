"""
Tests for save_with_version.
"""

import pytest

from notifications.exceptions import StaleRecordError
from notifications.locks import save_with_version
from notifications.models import NotificationLog, NotificationStatus
from notifications.tests.factories import NotificationLogFactory


@pytest.mark.django_db
class TestSaveWithVersion:
    def test_writes_fields_and_bumps_version(self):
        log = NotificationLogFactory()
        log.start_processing()

        save_with_version(log, ["status"])

        stored = NotificationLog.objects.get(pk=log.pk)
        assert stored.status == NotificationStatus.PROCESSING
        assert stored.version == 2
        assert log.version == 2
        assert log.updated_at == stored.updated_at

    def test_only_listed_fields_are_written(self):
        log = NotificationLogFactory(subject="original")
        log.subject = "not saved"
        log.start_processing()

        save_with_version(log, ["status"])

        assert NotificationLog.objects.get(pk=log.pk).subject == "original"

    def test_stale_copy_raises(self):
        log = NotificationLogFactory()
        stale = NotificationLog.objects.get(pk=log.pk)

        log.start_processing()
        save_with_version(log, ["status"])

        stale.mark_failed("late writer")
        with pytest.raises(StaleRecordError) as exc_info:
            save_with_version(stale, ["status", "error_message", "retry_count"])

        assert exc_info.value.details == {"id": str(log.pk), "expected_version": 1}
        stored = NotificationLog.objects.get(pk=log.pk)
        assert stored.status == NotificationStatus.PROCESSING
        assert stored.version == 2

    def test_sequential_writes_from_same_instance(self):
        log = NotificationLogFactory()

        log.start_processing()
        save_with_version(log, ["status"])
        log.mark_sent("ok")
        save_with_version(log, ["status", "response", "error_message", "sent_at"])

        stored = NotificationLog.objects.get(pk=log.pk)
        assert stored.status == NotificationStatus.SENT
        assert stored.version == 3

    def test_admin_save_invalidates_worker_copy(self):
        log = NotificationLogFactory()
        worker_copy = NotificationLog.objects.get(pk=log.pk)

        log.subject = "edited by admin"
        log.save()

        worker_copy.start_processing()
        with pytest.raises(StaleRecordError):
            save_with_version(worker_copy, ["status"])

    def test_soft_deleted_rows_are_still_versioned(self):
        log = NotificationLogFactory()
        log.soft_delete()
        log.start_processing()

        save_with_version(log, ["status"])

        assert NotificationLog.all_objects.get(pk=log.pk).status == NotificationStatus.PROCESSING
