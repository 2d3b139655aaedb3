"""
Celery tasks for API key maintenance.

Tasks:
    reset_monthly_usage: Daily sweep that starts a new usage period for
        every key whose usage_reset_at has passed

Schedule:
    Seeded into django-celery-beat by migration 0002 (daily at 00:00 UTC).
"""

from __future__ import annotations

import logging

from celery import shared_task

from api_keys.services import ApiKeyService

logger = logging.getLogger(__name__)


@shared_task(name="api_keys.tasks.reset_monthly_usage", ignore_result=True)
def reset_monthly_usage() -> int:
    """
    Reset current_usage for API keys whose period has ended.

    Idempotent: keys not yet due are left untouched.

    Returns:
        Number of keys reset
    """
    logger.info("Starting monthly usage reset for API keys")
    count = ApiKeyService.reset_due_usage()
    logger.info(f"Monthly usage reset completed: {count} key(s) reset")
    return count
