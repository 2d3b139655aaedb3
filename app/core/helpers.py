"""
Helper functions for common infrastructure operations.

This module provides domain-agnostic utility functions for:
- Token generation (cryptographic)
- Calendar month arithmetic
- Comma-separated value parsing

Usage:
    from core.helpers import add_months, generate_token, start_of_next_month

    token = generate_token(32)
    reset_at = add_months(timezone.now(), 1)
"""

from __future__ import annotations

import calendar
import secrets
from datetime import datetime, time


def generate_token(length: int = 32) -> str:
    """
    Generate a cryptographically secure random token.

    Args:
        length: Number of random bytes

    Returns:
        URL-safe base64 string without padding (43 chars for 32 bytes)

    Example:
        token = generate_token(32)
    """
    return secrets.token_urlsafe(length)


def add_months(value: datetime, months: int) -> datetime:
    """
    Shift a datetime by a number of calendar months.

    The day is clamped to the last day of the target month, so
    January 31 + 1 month is February 28 (or 29).

    Args:
        value: Datetime to shift (aware or naive, tzinfo is kept)
        months: Number of months to add (may be negative)

    Returns:
        Shifted datetime with the same time of day
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def start_of_next_month(value: datetime) -> datetime:
    """Return midnight on the first day of the month after ``value``."""
    first_of_month = datetime.combine(value.date().replace(day=1), time.min, value.tzinfo)
    return add_months(first_of_month, 1)


def split_csv(value: str | None) -> list[str]:
    """
    Split a comma-separated string into trimmed, non-empty items.

    Example:
        split_csv("a@example.com, b@example.com,,")
        # ["a@example.com", "b@example.com"]
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
