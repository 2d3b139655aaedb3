"""
Tests for SoftDeleteManager and SoftDeleteQuerySet.

These tests verify that:
- SoftDeleteManager filters out soft-deleted records by default
- QuerySet operations (delete, hard_delete, restore) work correctly
- all_objects still sees everything
"""

from __future__ import annotations

import pytest

from api_keys.models import ApiKey
from api_keys.tests.factories import ApiKeyFactory


@pytest.mark.django_db
class TestSoftDeleteManagerFiltering:
    """Tests for SoftDeleteManager default filtering behavior."""

    def test_objects_excludes_deleted_by_default(self):
        """Default manager should filter out soft-deleted records."""
        api_key = ApiKeyFactory()
        pk = api_key.pk

        assert ApiKey.objects.filter(pk=pk).exists()

        api_key.soft_delete()

        assert not ApiKey.objects.filter(pk=pk).exists()
        assert ApiKey.all_objects.filter(pk=pk).exists()

    def test_objects_count_excludes_deleted(self):
        ApiKeyFactory.create_batch(3)
        ApiKeyFactory().soft_delete()

        assert ApiKey.objects.count() == 3
        assert ApiKey.all_objects.count() == 4

    def test_objects_get_raises_for_deleted(self):
        api_key = ApiKeyFactory()
        api_key.soft_delete()

        with pytest.raises(ApiKey.DoesNotExist):
            ApiKey.objects.get(pk=api_key.pk)


@pytest.mark.django_db
class TestSoftDeleteManagerMethods:
    """Tests for SoftDeleteManager convenience methods."""

    def test_deleted_returns_only_deleted_records(self):
        api_key = ApiKeyFactory()
        ApiKeyFactory()

        assert not ApiKey.objects.deleted().exists()

        api_key.soft_delete()

        assert list(ApiKey.objects.deleted()) == [api_key]

    def test_with_deleted_returns_all_records(self):
        live = ApiKeyFactory()
        gone = ApiKeyFactory()
        gone.soft_delete()

        assert set(ApiKey.objects.with_deleted()) == {live, gone}


@pytest.mark.django_db
class TestSoftDeleteQuerySet:
    """Tests for bulk SoftDeleteQuerySet operations."""

    def test_queryset_delete_soft_deletes(self):
        """QuerySet.delete() should flag rows, not remove them."""
        keys = ApiKeyFactory.create_batch(2)

        count, details = ApiKey.objects.filter(pk__in=[k.pk for k in keys]).delete()

        assert count == 2
        assert details == {"api_keys.ApiKey": 2}
        assert ApiKey.all_objects.filter(is_deleted=True).count() == 2
        assert all(
            row.deleted_at is not None for row in ApiKey.all_objects.filter(is_deleted=True)
        )

    def test_queryset_delete_skips_already_deleted(self):
        api_key = ApiKeyFactory()
        api_key.soft_delete()

        count, _ = ApiKey.objects.with_deleted().filter(pk=api_key.pk).delete()

        assert count == 0

    def test_hard_delete_removes_rows(self):
        api_key = ApiKeyFactory()

        ApiKey.objects.filter(pk=api_key.pk).hard_delete()

        assert not ApiKey.all_objects.filter(pk=api_key.pk).exists()

    def test_restore(self):
        api_key = ApiKeyFactory()
        api_key.soft_delete()

        restored = ApiKey.objects.deleted().filter(pk=api_key.pk).restore()

        assert restored == 1
        api_key.refresh_from_db()
        assert api_key.is_deleted is False
        assert api_key.deleted_at is None

    def test_active_filter(self):
        live = ApiKeyFactory()
        ApiKeyFactory().soft_delete()

        assert list(ApiKey.objects.with_deleted().active()) == [live]
