"""
API keys app: credentials for external systems that send notifications.

This app provides:
- ApiKey model holding the opaque key, validity window and monthly quota
- ApiKeyService: the quota guard (validate), usage accounting and admin CRUD
- reset_monthly_usage Celery beat task
- Admin REST API for managing keys and a usage-stats endpoint for key holders

Usage:
    from api_keys.services import ApiKeyService

    result = ApiKeyService.validate(request.headers.get("X-API-Key"))
    if result.success:
        api_key = result.data
"""
