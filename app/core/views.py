"""
Core views providing infrastructure endpoints.

This module contains views that are not part of the notification domain but
are needed to run the service, such as health checks.
"""

import logging

from django.db import connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def _database_ok() -> bool:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        return True
    except Exception:
        logger.exception("Health check: database unreachable")
        return False


def _broker_ok() -> bool:
    from config.celery import app

    try:
        with app.connection_for_write() as conn:
            conn.ensure_connection(max_retries=1, timeout=2)
        return True
    except Exception:
        logger.warning("Health check: message broker unreachable", exc_info=True)
        return False


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    The database is required: ingestion cannot persist logs without it.
    The broker is reported but does not fail the check, because workers
    drain the queue independently and a brief broker outage only delays
    publication.

    HTTP Status Codes:
        200: Database reachable
        503: Database unreachable

    Example Response:
        {
            "status": "healthy",
            "database": "connected",
            "broker": "connected"
        }
    """
    database_ok = _database_ok()
    health_status = {
        "status": "healthy" if database_ok else "unhealthy",
        "database": "connected" if database_ok else "disconnected",
        "broker": "connected" if _broker_ok() else "disconnected",
    }
    return JsonResponse(health_status, status=200 if database_ok else 503)
