"""
Add the Celery Beat schedule for the monthly usage reset.

The task runs daily at midnight UTC and only resets keys whose
usage_reset_at has passed, so a daily cadence is enough for a
monthly period.
"""

from django.db import migrations

TASK_NAME = "API Keys: Reset Monthly Usage"


def create_periodic_tasks(apps, schema_editor):
    """Create the daily usage reset task."""
    CrontabSchedule = apps.get_model("django_celery_beat", "CrontabSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    # Daily at midnight UTC
    crontab_daily_midnight, _ = CrontabSchedule.objects.get_or_create(
        minute="0",
        hour="0",
        day_of_week="*",
        day_of_month="*",
        month_of_year="*",
    )

    PeriodicTask.objects.get_or_create(
        name=TASK_NAME,
        defaults={
            "task": "api_keys.tasks.reset_monthly_usage",
            "crontab": crontab_daily_midnight,
            "enabled": True,
            "description": (
                "Resets current_usage to zero for API keys whose usage period "
                "ended and moves usage_reset_at one month ahead."
            ),
        },
    )


def remove_periodic_tasks(apps, schema_editor):
    """Remove the usage reset task on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")
    PeriodicTask.objects.filter(name=TASK_NAME).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("api_keys", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_tasks, remove_periodic_tasks),
    ]
