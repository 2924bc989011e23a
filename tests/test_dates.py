"""Tests for the shared date helpers."""

from datetime import date

import pytest

from devtracker.dates import (
    check_date_format,
    days_between,
    days_in_month,
    days_left_in_year,
    is_iso_date,
    month_name,
    parse_date,
    shift,
    to_iso,
)
from devtracker.errors import InvalidDateError


class TestParseAndFormat:
    def test_parse_string(self):
        assert parse_date("2026-01-05") == date(2026, 1, 5)

    def test_parse_passes_dates_through(self):
        d = date(2026, 1, 5)
        assert parse_date(d) is d

    def test_parse_invalid_raises(self):
        with pytest.raises(ValueError):
            parse_date("2026-02-30")

    def test_to_iso(self):
        assert to_iso(date(2026, 1, 5)) == "2026-01-05"


class TestIsIsoDate:
    @pytest.mark.parametrize("value", ["2026-01-05", "2024-02-29"])
    def test_valid(self, value):
        assert is_iso_date(value) is True

    @pytest.mark.parametrize("value", ["2026-1-5", "2025-02-29", "05/01/2026", "", None, 20260105])
    def test_invalid(self, value):
        assert is_iso_date(value) is False


class TestCheckDateFormat:
    def test_returns_parsed_date(self):
        assert check_date_format("2026-01-05") == date(2026, 1, 5)

    @pytest.mark.parametrize("value", ["1900-01-01", "1999-12-31", "2101-01-01"])
    def test_out_of_range_year(self, value):
        with pytest.raises(InvalidDateError, match="out of range"):
            check_date_format(value)

    def test_malformed(self):
        with pytest.raises(InvalidDateError, match="Invalid date format"):
            check_date_format("2026/01/05")


class TestArithmetic:
    def test_days_between(self):
        assert days_between("2026-03-10", "2026-03-01") == 9

    def test_days_between_reversed_is_negative(self):
        assert days_between("2026-03-01", "2026-03-10") == -9

    def test_days_between_across_year(self):
        assert days_between("2026-01-01", "2025-12-31") == 1

    def test_shift_backwards_across_month(self):
        assert shift("2026-03-01", -1) == "2026-02-28"

    def test_shift_leap_day(self):
        assert shift("2024-02-28", 1) == "2024-02-29"

    def test_days_left_in_year(self):
        assert days_left_in_year("2026-12-31") == 1
        assert days_left_in_year("2026-01-01") == 365
        assert days_left_in_year(date(2024, 1, 1)) == 366


class TestMonths:
    def test_days_in_month(self):
        assert days_in_month(2026, 2) == 28
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2026, 12) == 31

    def test_days_in_invalid_month(self):
        assert days_in_month(2026, 13) == 0

    def test_month_name(self):
        assert month_name(1) == "January"
        assert month_name(12) == "December"
