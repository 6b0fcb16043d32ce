from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional, Union

from ..common.datetime_utils import minutes_of_day

Clock = Union[time, datetime]


@dataclass(frozen=True)
class TimeDeltas:
    late_minutes: int = 0
    early_leave_minutes: int = 0
    overtime_minutes: int = 0
    work_duration: int = 0


def _clamp(value: Optional[int]) -> int:
    return max(0, int(value or 0))


class TimeDeltaCalculator:
    """Scheduled vs. actual wall-clock comparison, same day only (no midnight rollover).

    When the actual time needed for a delta is missing, the value already stored on the
    record is kept. Every output is a non-negative whole number of minutes.
    """

    def compute(
        self,
        *,
        scheduled_start: Optional[time],
        scheduled_end: Optional[time],
        actual_start: Optional[Clock],
        actual_end: Optional[Clock],
        break_minutes: int = 0,
        stored: Optional[TimeDeltas] = None,
    ) -> TimeDeltas:
        stored = stored or TimeDeltas()

        late = stored.late_minutes
        if actual_start is not None and scheduled_start is not None:
            late = minutes_of_day(actual_start) - minutes_of_day(scheduled_start)

        early_leave = stored.early_leave_minutes
        overtime = stored.overtime_minutes
        if actual_end is not None and scheduled_end is not None:
            diff = minutes_of_day(actual_end) - minutes_of_day(scheduled_end)
            early_leave = -diff if diff < 0 else 0
            overtime = diff if diff > 0 else 0

        work = stored.work_duration
        if actual_start is not None and actual_end is not None:
            work = minutes_of_day(actual_end) - minutes_of_day(actual_start) - _clamp(break_minutes)

        return TimeDeltas(
            late_minutes=_clamp(late),
            early_leave_minutes=_clamp(early_leave),
            overtime_minutes=_clamp(overtime),
            work_duration=_clamp(work),
        )
