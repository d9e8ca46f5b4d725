from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class KollelAttendanceFact:
    """One kollel session per user + program + date."""

    kollel_attendance_id: int
    user_id: int
    program_id: int
    work_date: date
    arrival_time: time
    departure_time: time
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class KollelEarningsEntry:
    """Monthly payroll result for user + program; `month` is the first day of the month."""

    user_id: int
    program_id: int
    month: date
    total_minutes_attended: int
    total_available_minutes: int
    rate_per_minute: Decimal
    amount_earned: Decimal


@dataclass(frozen=True)
class DailyKollelAttendance:
    """Read-model: one attended day with its minutes."""

    work_date: date
    arrival_time: time
    departure_time: time
    minutes_attended: int
    created_at: Optional[datetime] = None
