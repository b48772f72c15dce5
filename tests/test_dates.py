"""Unit tests for the calendar helpers."""
from datetime import date

import pytest

from academic_records.utils.dates import add_months, add_years, age_on, fractional_years_between


class TestAddMonths:
    """Test month arithmetic in clamping and overflow modes."""

    @pytest.mark.parametrize(
        "start,months,expected",
        [
            (date(2024, 1, 15), 1, date(2024, 2, 15)),
            (date(2024, 11, 30), 3, date(2025, 2, 28)),
            (date(2024, 8, 31), 6, date(2025, 2, 28)),
            (date(2024, 1, 31), 1, date(2024, 2, 29)),
            (date(2024, 3, 31), -1, date(2024, 2, 29)),
        ],
    )
    def test_clamps_to_month_end(self, start, months, expected):
        assert add_months(start, months) == expected

    @pytest.mark.parametrize(
        "start,months,expected",
        [
            (date(2024, 1, 15), 1, date(2024, 2, 15)),
            (date(2024, 8, 31), 6, date(2025, 3, 3)),
            (date(2024, 1, 31), 1, date(2024, 3, 2)),
            (date(2024, 5, 31), 1, date(2024, 7, 1)),
        ],
    )
    def test_overflow_spills_into_next_month(self, start, months, expected):
        assert add_months(start, months, overflow=True) == expected

    def test_crosses_year_boundaries(self):
        assert add_months(date(2024, 11, 10), 14) == date(2026, 1, 10)
        assert add_months(date(2024, 2, 10), -14) == date(2022, 12, 10)


class TestAddYears:
    """Test leap-day handling."""

    def test_leap_day_clamps(self):
        assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)

    def test_leap_day_overflows(self):
        assert add_years(date(2024, 2, 29), 1, overflow=True) == date(2025, 3, 1)

    def test_leap_day_to_leap_year(self):
        assert add_years(date(2024, 2, 29), 4, overflow=True) == date(2028, 2, 29)


class TestAgeAndDuration:
    """Test completed years and month-precision durations."""

    def test_age_before_and_on_birthday(self):
        birth = date(2004, 6, 15)
        assert age_on(birth, date(2024, 6, 14)) == 19
        assert age_on(birth, date(2024, 6, 15)) == 20

    def test_fractional_years_ignore_days(self):
        assert fractional_years_between(date(2021, 9, 30), date(2025, 3, 1)) == 3.5
        assert fractional_years_between(date(2021, 9, 1), date(2022, 9, 1)) == 1.0
