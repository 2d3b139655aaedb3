"""
Optimistic locking for notification logs.

Every write to a NotificationLog after creation goes through
save_with_version(), which issues:

    UPDATE notification_logs
       SET <fields>, version = version + 1, updated_at = now()
     WHERE id = <pk> AND version = <expected>

If no row matched, another writer got there first and StaleRecordError is
raised. The caller re-reads the row and decides whether to try again.

Usage:
    from notifications.locks import save_with_version

    log.start_processing()
    save_with_version(log, ["status"])
"""

from __future__ import annotations

from collections.abc import Iterable

from django.db import models
from django.db.models import F
from django.utils import timezone

from notifications.exceptions import StaleRecordError


def save_with_version(instance: models.Model, fields: Iterable[str]) -> None:
    """
    Persist ``fields`` of ``instance`` if its version is still current.

    On success the in-memory version and updated_at are advanced to match
    the database.

    Raises:
        StaleRecordError: The row's version changed since it was read
    """
    now = timezone.now()
    values = {name: getattr(instance, name) for name in fields}
    values["updated_at"] = now

    updated = (
        type(instance)
        ._base_manager.filter(pk=instance.pk, version=instance.version)
        .update(version=F("version") + 1, **values)
    )
    if not updated:
        raise StaleRecordError(
            f"{type(instance).__name__} {instance.pk} was modified concurrently",
            details={"id": str(instance.pk), "expected_version": instance.version},
        )

    instance.version += 1
    instance.updated_at = now
