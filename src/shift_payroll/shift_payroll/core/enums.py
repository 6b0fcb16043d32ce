from __future__ import annotations

from enum import Enum


class ShiftStatus(str, Enum):
    """Lifecycle of a planned shift."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class TrackingStatus(str, Enum):
    """Internal status stored on a time-tracking record."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    IN_PROGRESS = "in_progress"
    LATE = "late"
    PENDING_APPROVAL = "pending_approval"


class AttendanceStatus(str, Enum):
    """Unified status of a reconciled attendance record."""

    SCHEDULED = "scheduled"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    COMPLETED = "completed"
    ABSENT = "absent"
    NO_SHOW = "no_show"
    CANCELLED = "cancelled"


class SalaryType(str, Enum):
    MONTH = "month"
    DAY = "day"
    SHIFT = "shift"


class PenaltyType(str, Enum):
    FIXED = "fixed"
    PERCENT = "percent"
    PER_MINUTE = "per_minute"
    PER_5_MINUTES = "per_5_minutes"
    PER_10_MINUTES = "per_10_minutes"


class PayrollStatus(str, Enum):
    """Forward-only lifecycle: draft -> approved -> paid."""

    DRAFT = "draft"
    APPROVED = "approved"
    PAID = "paid"
