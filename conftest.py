"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide defaults.
App-specific fixtures are defined in each app's tests/conftest.py.

Tests run against SQLite and an in-memory Celery broker unless
DATABASE_URL / CELERY_BROKER_URL are already set in the environment.
"""

import os

import django

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DEBUG", "True")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("LOG_FILE_NAME", "test.log")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()
