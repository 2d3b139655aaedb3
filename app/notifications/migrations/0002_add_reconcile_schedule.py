"""
Add the Celery Beat schedule for stale-processing reconciliation.

Runs every 5 minutes and fails rows left in PROCESSING longer than
NOTIFICATION_PROCESSING_TIMEOUT_MINUTES.
"""

from django.db import migrations

TASK_NAME = "Notifications: Reconcile Stale Processing"
INTERVAL_MINUTES = 5


def create_periodic_tasks(apps, schema_editor):
    """Create the reconciliation task."""
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    every_five_minutes, _ = IntervalSchedule.objects.get_or_create(
        every=INTERVAL_MINUTES,
        period="minutes",
    )

    PeriodicTask.objects.get_or_create(
        name=TASK_NAME,
        defaults={
            "task": "notifications.tasks.reconcile_stale_processing",
            "interval": every_five_minutes,
            "enabled": True,
            "description": (
                "Marks notification logs stuck in PROCESSING past the processing "
                "timeout as FAILED."
            ),
        },
    )


def remove_periodic_tasks(apps, schema_editor):
    """Remove the reconciliation task on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")
    PeriodicTask.objects.filter(name=TASK_NAME).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("notifications", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_tasks, remove_periodic_tasks),
    ]
