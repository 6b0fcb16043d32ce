from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator, Union

from ..core.constants import FALLBACK_WORKING_DAYS
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day range."""

    start: date
    end: date

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse HH:MM string into time."""
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid time (HH:MM): {value!r}")


def now_local() -> datetime:
    """Current local time; services take ``now=`` so callers can pin the clock."""
    return datetime.now()


def as_day(value: Union[date, datetime]) -> date:
    """Truncate a timestamp to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def minutes_of_day(value: Union[time, datetime]) -> int:
    """Wall-clock minutes since midnight; seconds are dropped."""
    return value.hour * 60 + value.minute


def period_of(value: date) -> str:
    return value.strftime("%Y-%m")


def period_range(period: str) -> DateRange:
    """Turn a YYYY-MM period into the inclusive range of its days."""
    try:
        first = datetime.strptime(period, "%Y-%m").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid period (YYYY-MM): {period!r}")
    last_day = calendar.monthrange(first.year, first.month)[1]
    return DateRange(start=first, end=first.replace(day=last_day))


def is_working_day(value: date) -> bool:
    return value.weekday() < 5


def working_days_in_period(period: str) -> int:
    """Number of Monday-Friday days in the month."""
    count = sum(1 for d in period_range(period).days() if is_working_day(d))
    return count or FALLBACK_WORKING_DAYS


def week_start(value: date) -> date:
    return value - timedelta(days=value.weekday())
