"""
Celery configuration for the notification dispatch service.

Celery runs:
- Delivery workers, one queue per channel (email-notifications,
  telegram-notifications, optionally partitioned as <queue>.<n>)
- Beat tasks from django-celery-beat (usage reset, stale reconciliation)

Tasks are auto-discovered from all installed Django apps.

Running workers:
    celery -A config worker -Q email-notifications -c 4
    celery -A config worker -Q telegram-notifications -c 4
    celery -A config worker -Q default
    celery -A config beat

    With NOTIFICATION_QUEUE_PARTITIONS=4, run one consumer per partition
    (-Q email-notifications.0 -c 1, ...) to keep per-batch ordering.

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Celery will look for a tasks.py module in each installed app
app.autodiscover_tasks()
