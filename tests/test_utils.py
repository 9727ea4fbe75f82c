"""Tests for input validation, formatting and encryption helpers."""

from datetime import date, datetime

import pytest

from age_guard.core.encryption import decrypt_value, encrypt_value
from age_guard.core.exceptions import ValidationError
from age_guard.services.quota import quota_window
from age_guard.utils.formatter import format_consent_email, format_daily_limit_reason
from age_guard.utils.validator import parse_birth_date, validate_amount, validate_email


class TestParseBirthDate:
    def test_iso_string(self) -> None:
        assert parse_birth_date("2012-01-01") == date(2012, 1, 1)

    def test_iso_datetime_string(self) -> None:
        assert parse_birth_date("2012-01-01T00:00:00Z") == date(2012, 1, 1)

    @pytest.mark.parametrize("value", [None, "", "2012-13-01", "01/02/2012", "yesterday"])
    def test_rejects_malformed(self, value) -> None:
        with pytest.raises(ValidationError):
            parse_birth_date(value)

    def test_rejects_future_date(self) -> None:
        with pytest.raises(ValidationError):
            parse_birth_date("2030-01-01", today=date(2024, 6, 1))


class TestValidateAmount:
    def test_accepts_numeric_string(self) -> None:
        assert validate_amount("600") == 600

    @pytest.mark.parametrize("value", [None, "", "abc", "1.5", -1, 0, True])
    def test_rejects_invalid(self, value) -> None:
        with pytest.raises(ValidationError):
            validate_amount(value)

    def test_zero_allowed_when_requested(self) -> None:
        assert validate_amount(0, allow_zero=True) == 0


class TestValidateEmail:
    def test_strips_whitespace(self) -> None:
        assert validate_email("  parent@example.com ") == "parent@example.com"

    @pytest.mark.parametrize("value", [None, "", "parent", "parent@", "a b@example.com"])
    def test_rejects_invalid(self, value) -> None:
        with pytest.raises(ValidationError):
            validate_email(value)


class TestQuotaWindow:
    def test_february_month_end(self) -> None:
        window = quota_window(datetime(2024, 2, 29, 23, 59))

        assert window.day_start == datetime(2024, 2, 29)
        assert window.day_end == datetime(2024, 3, 1)
        assert window.month_start == datetime(2024, 2, 1)
        assert window.month_end == datetime(2024, 3, 1)

    def test_december_rolls_year(self) -> None:
        window = quota_window(datetime(2024, 12, 31, 8, 0))

        assert window.month_end == datetime(2025, 1, 1)
        assert window.day_end == datetime(2025, 1, 1)


class TestFormatter:
    def test_daily_reason_contains_limit(self) -> None:
        assert "1,000" in format_daily_limit_reason(1000)

    def test_consent_email_contains_link(self) -> None:
        subject, body = format_consent_email(
            child_name="Taro",
            child_age=12,
            consent_url="https://example.com/consent?token=abc",
            expires_at=datetime(2024, 6, 8, 12, 0),
        )

        assert "Taro" in subject
        assert "https://example.com/consent?token=abc" in body
        assert "2024-06-08 12:00" in body


class TestEncryption:
    def test_round_trip_uses_random_nonce(self) -> None:
        first = encrypt_value("parent@example.com")
        second = encrypt_value("parent@example.com")

        assert first != second
        assert decrypt_value(first) == "parent@example.com"
