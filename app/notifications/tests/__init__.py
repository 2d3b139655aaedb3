"""
Tests for notifications app.

This package contains test modules for:
- test_models.py: NotificationLog transitions and settings singleton
- test_optimistic_locking.py: Version-checked writes
- test_queue.py: Queue messages, routing and publishing
- test_channels.py: Telegram and email senders
- test_workers.py: Delivery state machine and stale sweep
- test_services.py: Ingestion, log queries and settings services
- test_tasks.py: Celery task entry points
- test_views.py: API endpoint tests

Usage:
    pytest notifications/tests/
    pytest notifications/tests/test_workers.py
"""
