"""Tests for week key derivation."""

from datetime import date, timedelta

import pytest

from weekgoals.foundation.errors import ErrorCode, ValidationError
from weekgoals.goals.weeks import (
    canonical_week_key,
    format_short_date,
    iso_week_number,
    monday_of,
    parse_week_key,
    week_key,
    week_offset_for,
    week_range,
)


class TestIsoWeekNumber:
    """ISO-8601 numbering at year boundaries."""

    def test_first_of_january_2021_is_week_53(self) -> None:
        assert iso_week_number(date(2021, 1, 1)) == 53

    def test_monday_2023_01_02_is_week_1(self) -> None:
        assert iso_week_number(date(2023, 1, 2)) == 1

    def test_late_december_can_be_week_1(self) -> None:
        assert iso_week_number(date(2024, 12, 30)) == 1


class TestWeekKey:
    """Offset -> Monday key."""

    @pytest.mark.parametrize("day", range(7))
    def test_current_week_is_monday_for_every_weekday(self, day: int) -> None:
        today = date(2024, 1, 15) + timedelta(days=day)
        assert week_key(0, today=today) == "2024-01-15"

    def test_previous_week_is_seven_days_earlier(self) -> None:
        today = date(2024, 3, 6)
        current = date.fromisoformat(week_key(0, today=today))
        previous = date.fromisoformat(week_key(-1, today=today))
        assert current - previous == timedelta(days=7)

    def test_offset_crosses_year(self) -> None:
        assert week_key(1, today=date(2024, 12, 27)) == "2024-12-30"

    def test_defaults_to_today(self) -> None:
        assert week_key() == monday_of(date.today()).isoformat()


class TestWeekRange:
    def test_monday_to_sunday(self) -> None:
        week = week_range(0, today=date(2024, 1, 21))
        assert week.start == date(2024, 1, 15)
        assert week.end == date(2024, 1, 21)
        assert week.key == "2024-01-15"
        assert week.year == 2024
        assert week.week_number == 3

    def test_short_date_has_no_padding(self) -> None:
        assert format_short_date(date(2024, 1, 5)) == "1/5"
        assert format_short_date(date(2024, 11, 25)) == "11/25"


class TestParseWeekKey:
    """Key -> Monday, and back to an offset."""

    def test_monday_key_round_trips(self) -> None:
        assert parse_week_key("2024-01-15") == date(2024, 1, 15)

    def test_mid_week_date_rolls_back(self) -> None:
        assert parse_week_key("2024-01-18") == date(2024, 1, 15)

    @pytest.mark.parametrize("key", ["2024-01-15", "2024-01-17", "20240115", "2024-01-21"])
    def test_canonical_key_is_the_monday(self, key: str) -> None:
        assert canonical_week_key(key) == "2024-01-15"

    @pytest.mark.parametrize("bad", ["", "next week", "2024-13-01", "15/01/2024"])
    def test_rejects_non_dates(self, bad: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_week_key(bad)
        assert exc_info.value.code is ErrorCode.WEEK_KEY_INVALID

    def test_offset_for_key(self) -> None:
        today = date(2024, 1, 17)
        assert week_offset_for("2024-01-15", today=today) == 0
        assert week_offset_for("2024-01-08", today=today) == -1
        assert week_offset_for("2024-02-05", today=today) == 3
