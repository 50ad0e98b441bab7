"""Week key derivation.

A week key is the ISO Monday of a week as ``YYYY-MM-DD``. It is never
stored on its own: callers keep an integer offset from the current week and
recompute the key whenever they need it.
"""

from dataclasses import dataclass
from datetime import date, timedelta

from weekgoals.foundation.errors import ErrorCode, ValidationError


@dataclass(frozen=True, slots=True)
class WeekRange:
    """Monday..Sunday of a week."""

    start: date
    end: date

    @property
    def key(self) -> str:
        return self.start.isoformat()

    @property
    def year(self) -> int:
        return self.start.year

    @property
    def week_number(self) -> int:
        return iso_week_number(self.start)


def monday_of(d: date) -> date:
    return d - timedelta(days=d.weekday())


def week_range(offset: int = 0, today: date | None = None) -> WeekRange:
    """Monday and Sunday of the week ``offset`` weeks from ``today``."""
    anchor = (today or date.today()) + timedelta(days=7 * offset)
    start = monday_of(anchor)
    return WeekRange(start=start, end=start + timedelta(days=6))


def week_key(offset: int = 0, today: date | None = None) -> str:
    """Canonical ``YYYY-MM-DD`` key for the Monday ``offset`` weeks away."""
    return week_range(offset, today).key


def iso_week_number(d: date) -> int:
    """ISO-8601 week number (week 1 contains the year's first Thursday)."""
    return d.isocalendar()[1]


def format_short_date(d: date) -> str:
    """``M/D`` without zero padding, as shown in export headers."""
    return f"{d.month}/{d.day}"


def parse_week_key(key: str) -> date:
    """Parse a key back into its Monday.

    Any date is accepted and rolled back to its Monday.

    Raises:
        ValidationError: if ``key`` is not an ISO date.
    """
    try:
        return monday_of(date.fromisoformat(key))
    except (TypeError, ValueError):
        raise ValidationError(ErrorCode.WEEK_KEY_INVALID, {"value": key}) from None


def canonical_week_key(key: str) -> str:
    """The Monday key for any date in its week, e.g. ``20240117`` -> ``2024-01-15``."""
    return parse_week_key(key).isoformat()


def week_offset_for(key: str, today: date | None = None) -> int:
    """Offset from the current week to the week identified by ``key``."""
    current = monday_of(today or date.today())
    return (parse_week_key(key) - current).days // 7
