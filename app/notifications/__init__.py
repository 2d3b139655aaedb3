"""
Notifications app: the dispatch pipeline.

This app provides:
- NotificationLog model, one row per (batch, recipient)
- NotificationService / SystemNotificationService for fan-out ingestion
- DeliveryWorker with email and Telegram senders
- Celery tasks for delivery and stale-processing reconciliation
- REST API for sending and polling notifications

Usage:
    from notifications.services import NotificationService

    result = NotificationService.send(api_key, validated_data)
    if result.success:
        batch_id = result.data["batch_id"]
"""
