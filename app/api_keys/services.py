"""
API key services: the quota guard, usage accounting and admin CRUD.

Services:
    ApiKeyService: Validate keys, count usage, manage key records

Validation order (first failure wins, all map to HTTP 401):
    1. Unknown or soft-deleted key  -> "Invalid API key"
    2. Inactive                     -> "API key is inactive"
    3. Outside validity window      -> "API key has expired"
    4. Monthly quota exhausted      -> "API key has reached monthly usage limit"

Usage accounting:
    Ingestion calls increment_usage() once per accepted request with the
    recipient count. The increment is an atomic F() update but is not in
    the same transaction as validate(), so concurrent requests may push
    current_usage past monthly_limit by their in-flight recipient count.

Usage:
    from api_keys.services import ApiKeyService

    result = ApiKeyService.validate(raw_key)
    if not result.success:
        return Response(result.to_response(), status=result.status_code)

    ApiKeyService.increment_usage(result.data, amount=len(recipients))
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from django.db import IntegrityError
from django.db.models import F
from django.utils import timezone

from api_keys.models import API_KEY_BYTES, ApiKey
from core.helpers import add_months, generate_token, start_of_next_month
from core.services import BaseService, ErrorCode, ServiceResult

if TYPE_CHECKING:
    from uuid import UUID

    from django.db.models import QuerySet

logger = logging.getLogger(__name__)

# Header external systems send their key in
API_KEY_HEADER = "X-API-Key"


# Fields an admin may change after creation
UPDATABLE_FIELDS = (
    "system_name",
    "company_name",
    "contact_email",
    "contact_phone",
    "description",
    "is_active",
    "start_date",
    "end_date",
    "never_expires",
    "monthly_limit",
)


def get_request_api_key(request) -> str | None:
    """Read the raw key from the X-API-Key header (None when absent or blank)."""
    value = request.headers.get(API_KEY_HEADER, "").strip()
    return value or None


class ApiKeyService(BaseService):
    """
    Quota guard and lifecycle management for API keys.

    Methods:
        validate: Resolve a raw key and enforce activity, expiry and quota
        increment_usage: Count accepted recipients against the quota
        create_api_key / update_api_key / delete_api_key: Admin CRUD
        get_api_key / list_api_keys: Admin reads
        get_usage_stats: Quota summary for a key holder
        reset_due_usage: Start a new period for keys whose reset time passed
    """

    # ==========================================================================
    # Quota guard
    # ==========================================================================

    @classmethod
    def validate(cls, raw_key: str | None) -> ServiceResult[ApiKey]:
        """
        Resolve ``raw_key`` and check it may send notifications right now.

        Returns:
            ServiceResult with the ApiKey, or an UNAUTHORIZED failure
        """
        api_key = ApiKey.objects.filter(key=raw_key).first() if raw_key else None
        if api_key is None:
            return cls._unauthorized("Invalid API key")

        if not api_key.is_active:
            return cls._unauthorized("API key is inactive", api_key)

        if api_key.is_expired():
            return cls._unauthorized("API key has expired", api_key)

        if api_key.has_reached_limit():
            return cls._unauthorized("API key has reached monthly usage limit", api_key)

        return ServiceResult.success(api_key)

    @classmethod
    def identify(cls, raw_key: str | None) -> ServiceResult[ApiKey]:
        """
        Resolve ``raw_key`` without activity, expiry or quota checks.

        Used by read-only endpoints (logs) so a key that is exhausted or
        expired can still see what happened to its notifications.
        """
        api_key = ApiKey.objects.filter(key=raw_key).first() if raw_key else None
        if api_key is None:
            return cls._unauthorized("Invalid API key")
        return ServiceResult.success(api_key)

    @classmethod
    def _unauthorized(
        cls, message: str, api_key: ApiKey | None = None
    ) -> ServiceResult[ApiKey]:
        cls.get_logger().info(
            f"API key rejected: {message}",
            extra={"system_name": api_key.system_name if api_key else None},
        )
        return ServiceResult.failure(message, error_code=ErrorCode.UNAUTHORIZED)

    @classmethod
    def increment_usage(cls, api_key: ApiKey, amount: int = 1) -> None:
        """
        Add ``amount`` to the key's current usage.

        Uses an F() expression so concurrent ingestions never lose an increment.
        The in-memory instance is refreshed afterwards.
        """
        if amount <= 0:
            return
        ApiKey.objects.filter(pk=api_key.pk).update(
            current_usage=F("current_usage") + amount,
            updated_at=timezone.now(),
        )
        api_key.refresh_from_db(fields=["current_usage", "updated_at"])

    # ==========================================================================
    # Admin CRUD
    # ==========================================================================

    @classmethod
    def create_api_key(cls, **data: Any) -> ServiceResult[ApiKey]:
        """
        Create a key with a freshly generated secret.

        The first usage period ends at midnight on the first day of next month.

        Args:
            **data: Validated fields from ApiKeyCreateSerializer
        """
        never_expires = data.get("never_expires", True)
        errors = cls._window_errors(
            never_expires, data.get("start_date"), data.get("end_date")
        )
        if errors:
            return cls.validation_failure(errors)

        system_name = data["system_name"]
        if ApiKey.objects.filter(system_name=system_name).exists():
            return cls._system_name_conflict(system_name)

        try:
            with cls.atomic():
                api_key = ApiKey.objects.create(
                    key=generate_token(API_KEY_BYTES),
                    is_active=True,
                    current_usage=0,
                    usage_reset_at=start_of_next_month(timezone.now()),
                    **data,
                )
        except IntegrityError:
            return cls._system_name_conflict(system_name)

        cls.get_logger().info(
            f"Created API key {api_key.id} for system {api_key.system_name}",
            extra={"api_key_id": str(api_key.id), "system_name": api_key.system_name},
        )
        return ServiceResult.success(api_key)

    @classmethod
    def update_api_key(cls, api_key_id: UUID | str, **data: Any) -> ServiceResult[ApiKey]:
        """
        Apply a partial update.

        Only keys present in ``data`` with a non-None value are applied.
        The validity window is re-checked against the merged result.
        """
        api_key = ApiKey.objects.filter(pk=api_key_id).first()
        if api_key is None:
            return ServiceResult.failure("API key not found", error_code=ErrorCode.NOT_FOUND)

        changes = {
            name: value
            for name, value in data.items()
            if name in UPDATABLE_FIELDS and value is not None
        }

        new_name = changes.get("system_name")
        if new_name and new_name != api_key.system_name:
            if ApiKey.objects.filter(system_name=new_name).exclude(pk=api_key.pk).exists():
                return cls._system_name_conflict(new_name)

        errors = cls._window_errors(
            changes.get("never_expires", api_key.never_expires),
            changes.get("start_date", api_key.start_date),
            changes.get("end_date", api_key.end_date),
        )
        if errors:
            return cls.validation_failure(errors)

        if not changes:
            return ServiceResult.success(api_key)

        for name, value in changes.items():
            setattr(api_key, name, value)

        try:
            with cls.atomic():
                api_key.save(update_fields=[*changes.keys(), "updated_at"])
        except IntegrityError:
            return cls._system_name_conflict(new_name or api_key.system_name)

        cls.get_logger().info(
            f"Updated API key {api_key.id}: {sorted(changes)}",
            extra={"api_key_id": str(api_key.id)},
        )
        return ServiceResult.success(api_key)

    @classmethod
    def delete_api_key(cls, api_key_id: UUID | str) -> ServiceResult[None]:
        """Soft delete a key. Its notification logs are kept."""
        api_key = ApiKey.objects.filter(pk=api_key_id).first()
        if api_key is None:
            return ServiceResult.failure("API key not found", error_code=ErrorCode.NOT_FOUND)

        api_key.soft_delete()
        cls.get_logger().info(
            f"Soft deleted API key {api_key.id}",
            extra={"api_key_id": str(api_key.id), "system_name": api_key.system_name},
        )
        return ServiceResult.success(None)

    @classmethod
    def get_api_key(cls, api_key_id: UUID | str) -> ServiceResult[ApiKey]:
        api_key = ApiKey.objects.filter(pk=api_key_id).first()
        if api_key is None:
            return ServiceResult.failure("API key not found", error_code=ErrorCode.NOT_FOUND)
        return ServiceResult.success(api_key)

    @classmethod
    def list_api_keys(cls) -> QuerySet[ApiKey]:
        """Non-deleted keys, newest first."""
        return ApiKey.objects.order_by("-created_at")

    # ==========================================================================
    # Usage
    # ==========================================================================

    @classmethod
    def get_usage_stats(cls, raw_key: str | None) -> ServiceResult[dict[str, Any]]:
        """
        Summarize quota consumption for the holder of ``raw_key``.

        Works for inactive, expired and exhausted keys so callers can see
        why they are being rejected. For unlimited keys remaining_quota and
        usage_percentage are None.
        """
        api_key = ApiKey.objects.filter(key=raw_key).first() if raw_key else None
        if api_key is None:
            return ServiceResult.failure("API key not found", error_code=ErrorCode.NOT_FOUND)

        return ServiceResult.success(
            {
                "current_usage": api_key.current_usage,
                "monthly_limit": api_key.monthly_limit,
                "remaining_quota": api_key.remaining_quota,
                "usage_percentage": api_key.usage_percentage,
                "is_unlimited": api_key.is_unlimited,
                "is_expired": api_key.is_expired(),
                "usage_reset_at": api_key.usage_reset_at,
            }
        )

    @classmethod
    def reset_due_usage(cls, now: datetime | None = None) -> int:
        """
        Start a new usage period for every key whose reset time has passed.

        Keys with ``now >= usage_reset_at`` get current_usage=0 and
        usage_reset_at=now + 1 month. Keys not yet due are untouched, so
        running this more than once a day is harmless.

        Returns:
            Number of keys reset
        """
        now = now or timezone.now()
        due = ApiKey.objects.filter(usage_reset_at__isnull=False, usage_reset_at__lte=now)
        system_names = list(due.values_list("system_name", flat=True))
        if not system_names:
            return 0

        count = due.update(
            current_usage=0,
            usage_reset_at=add_months(now, 1),
            updated_at=now,
        )
        for system_name in system_names:
            logger.info(
                f"Usage reset for API key of system {system_name}",
                extra={"system_name": system_name},
            )
        return count

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @staticmethod
    def _window_errors(never_expires, start_date, end_date) -> dict[str, list[str]]:
        if never_expires:
            return {}
        if end_date is None:
            return {"end_date": ["End date is required when never_expires is false"]}
        if start_date is not None and end_date < start_date:
            return {"end_date": ["End date must be after start date"]}
        return {}

    @classmethod
    def _system_name_conflict(cls, system_name: str) -> ServiceResult[ApiKey]:
        return ServiceResult.failure(
            f"API key for system '{system_name}' already exists",
            error_code=ErrorCode.CONFLICT,
        )
