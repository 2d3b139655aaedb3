"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

Pattern Comparison:
    - ServiceResult: Use for expected failures (validation, bad API keys, quota)
    - Exceptions: Use for unexpected failures and worker-side errors
      (delivery failures, optimistic locking conflicts)

Usage:
    from core.services import BaseService, ServiceResult

    class ApiKeyService(BaseService):
        @classmethod
        def validate(cls, raw_key: str) -> ServiceResult[ApiKey]:
            api_key = ApiKey.objects.filter(key=raw_key).first()
            if api_key is None:
                return ServiceResult.failure(
                    "Invalid API key", error_code=ErrorCode.UNAUTHORIZED
                )
            return ServiceResult.success(api_key)

    # In view
    result = ApiKeyService.validate(request.headers.get("X-API-Key"))
    if not result.success:
        return Response(result.to_response(), status=result.status_code)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


class ErrorCode:
    """Machine-readable error codes returned in failed ServiceResults."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    CHANNEL_DISABLED = "CHANNEL_DISABLED"


# HTTP status used by views for each error code
ERROR_STATUS_CODES = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.CHANNEL_DISABLED: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
}


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures

    Usage:
        return ServiceResult.success(api_key)

        return ServiceResult.failure(
            "Validation failed",
            error_code=ErrorCode.VALIDATION_ERROR,
            errors={"end_date": ["End date is required when never_expires is false"]},
        )
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """Create a successful result."""
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    @property
    def status_code(self) -> int:
        """
        HTTP status a view should answer with for this result.

        Unknown error codes map to 400.
        """
        if self.success:
            return 200
        return ERROR_STATUS_CODES.get(self.error_code, 400)

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Returns:
            Dict with success status and data or error details
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response

    def __bool__(self) -> bool:
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management

    Design Notes:
        - Use @classmethod (no instance state)
        - Services should be stateless
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get a logger named after the service class.

        Example:
            cls.get_logger().info(f"Created API key {api_key.id}")
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Thin wrapper around Django's transaction.atomic() that makes
        transaction boundaries explicit in service code.
        """
        with transaction.atomic():
            yield

    @classmethod
    def validation_failure(cls, errors: dict[str, list[str]]) -> ServiceResult:
        """Build a VALIDATION_ERROR result from field errors."""
        first_field, messages = next(iter(errors.items()))
        return ServiceResult.failure(
            messages[0] if messages else f"Invalid {first_field}",
            error_code=ErrorCode.VALIDATION_ERROR,
            errors=errors,
        )
