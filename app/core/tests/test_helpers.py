"""
Tests for core.helpers.
"""

from datetime import datetime, timezone as dt_timezone

import pytest

from core.helpers import add_months, generate_token, split_csv, start_of_next_month


class TestGenerateToken:
    def test_default_length(self):
        assert len(generate_token()) == 43

    def test_url_safe_characters(self):
        token = generate_token(64)

        assert all(c.isalnum() or c in "-_" for c in token)

    def test_tokens_differ(self):
        assert generate_token() != generate_token()


class TestAddMonths:
    @pytest.mark.parametrize(
        ("value", "months", "expected"),
        [
            (datetime(2024, 1, 15, 9, 30), 1, datetime(2024, 2, 15, 9, 30)),
            (datetime(2024, 1, 31), 1, datetime(2024, 2, 29)),
            (datetime(2023, 1, 31), 1, datetime(2023, 2, 28)),
            (datetime(2024, 12, 10), 1, datetime(2025, 1, 10)),
            (datetime(2024, 3, 31), -1, datetime(2024, 2, 29)),
            (datetime(2024, 5, 31), 13, datetime(2025, 6, 30)),
        ],
    )
    def test_calendar_arithmetic(self, value, months, expected):
        assert add_months(value, months) == expected

    def test_keeps_timezone(self):
        value = datetime(2024, 1, 31, 23, 0, tzinfo=dt_timezone.utc)

        assert add_months(value, 1).tzinfo is dt_timezone.utc


class TestStartOfNextMonth:
    def test_mid_month(self):
        value = datetime(2024, 1, 15, 10, 30, tzinfo=dt_timezone.utc)

        assert start_of_next_month(value) == datetime(2024, 2, 1, tzinfo=dt_timezone.utc)

    def test_december_rolls_year(self):
        value = datetime(2024, 12, 31, 23, 59)

        assert start_of_next_month(value) == datetime(2025, 1, 1)

    def test_first_of_month_moves_forward(self):
        value = datetime(2024, 3, 1)

        assert start_of_next_month(value) == datetime(2024, 4, 1)


class TestSplitCsv:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, []),
            ("", []),
            ("a@example.com", ["a@example.com"]),
            (" a@example.com , b@example.com ,, ", ["a@example.com", "b@example.com"]),
            ("-1001, 42", ["-1001", "42"]),
        ],
    )
    def test_split(self, value, expected):
        assert split_csv(value) == expected
