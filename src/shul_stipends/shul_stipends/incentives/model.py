from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class AttendanceInput:
    """What a member reports for one morning."""

    came_early: bool = False
    learned_early: bool = False
    came_late: bool = False
    minutes_late: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AttendanceInput":
        raw_minutes = data.get("minutes_late")
        # 0 minutes means not late.
        try:
            minutes_late = (int(raw_minutes) or None) if raw_minutes not in (None, "") else None
        except (TypeError, ValueError):
            raise ValidationError("Minutes late must be a whole number")
        return cls(
            came_early=bool(data.get("came_early")),
            learned_early=bool(data.get("learned_early")),
            came_late=bool(data.get("came_late")),
            minutes_late=minutes_late,
        )

    def validate(self) -> None:
        if self.learned_early and not self.came_early:
            raise ValidationError("Learning early requires coming early")
        if self.came_early and self.came_late:
            raise ValidationError("Cannot come both early and late")
        if self.came_late and (self.minutes_late is None or self.minutes_late <= 0):
            raise ValidationError("Minutes late is required when coming late")
        if not self.came_late and self.minutes_late is not None:
            raise ValidationError("Minutes late is only allowed when coming late")


@dataclass(frozen=True)
class AttendanceFact:
    """One Handler attendance fact per user + program-or-none + date."""

    attendance_id: int
    user_id: int
    program_id: Optional[int]
    work_date: date
    came_early: bool
    learned_early: bool
    came_late: bool
    minutes_late: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class EarningsEntry:
    """Derived Handler earnings for one user + date. Never edited directly."""

    user_id: int
    work_date: date
    on_time_bonus: Decimal
    early_bonus: Decimal
    learning_bonus: Decimal
    amount_earned: Decimal
    is_weekend: bool


@dataclass(frozen=True)
class EarningsHistoryRow:
    """Read-model for the earnings page: an entry plus the program of that day."""

    entry: EarningsEntry
    program_id: Optional[int] = None
    program_name: Optional[str] = None


@dataclass(frozen=True)
class SubmissionResult:
    attendance: AttendanceFact
    earnings: EarningsEntry


@dataclass(frozen=True)
class AttendanceStats:
    total_days: int
    learning_days: int
    learning_minutes: int
    early_days: int
    late_days: int
    on_time_days: int


@dataclass(frozen=True)
class UserAttendanceCounts:
    """Per-user aggregate straight from storage."""

    user_id: int
    days_attended: int
    learning_days: int
    saturday_learning_days: int


@dataclass(frozen=True)
class UserAttendanceSummary:
    user_id: int
    days_attended: int
    learning_days: int
    learning_minutes: int


@dataclass(frozen=True)
class GlobalAttendanceSummary:
    users: list[UserAttendanceSummary]
    total_users_with_attendance: int
    total_days: int
    total_learning_minutes: int
