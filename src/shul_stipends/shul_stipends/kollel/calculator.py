from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from ..common.datetime_utils import minutes_since_midnight, month_bounds, weekday_count
from ..core.constants import MONEY_PLACES, RATE_PLACES
from ..core.rates import KollelSchedule
from .model import KollelAttendanceFact, KollelEarningsEntry

ZERO = Decimal("0")


class KollelPayCalculator(ABC):
    """Calculator interface (Strategy Pattern for kollel payroll)."""

    @abstractmethod
    def minutes_attended(self, arrival: time, departure: time) -> int:
        raise NotImplementedError

    @abstractmethod
    def available_minutes(self, year: int, month: int, schedule: KollelSchedule) -> int:
        raise NotImplementedError

    @abstractmethod
    def monthly_earnings(
        self,
        *,
        user_id: int,
        program_id: int,
        year: int,
        month: int,
        schedule: KollelSchedule,
        facts: Iterable[KollelAttendanceFact],
    ) -> KollelEarningsEntry:
        raise NotImplementedError


class ProRataPayCalculator(KollelPayCalculator):
    """Standard rule: monthly salary / weekday minutes available, times minutes attended."""

    def minutes_attended(self, arrival: time, departure: time) -> int:
        return max(0, minutes_since_midnight(departure) - minutes_since_midnight(arrival))

    def available_minutes(self, year: int, month: int, schedule: KollelSchedule) -> int:
        return weekday_count(year, month) * int(schedule.minutes_per_day)

    def monthly_earnings(
        self,
        *,
        user_id: int,
        program_id: int,
        year: int,
        month: int,
        schedule: KollelSchedule,
        facts: Iterable[KollelAttendanceFact],
    ) -> KollelEarningsEntry:
        attended = sum(self.minutes_attended(f.arrival_time, f.departure_time) for f in facts)
        available = self.available_minutes(year, month, schedule)

        if available > 0:
            salary = Decimal(schedule.monthly_salary)
            rate = (salary / available).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)
            # Amount from the exact ratio so a full month pays the full salary.
            amount = (salary * attended / available).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
        else:
            rate = ZERO
            amount = ZERO

        return KollelEarningsEntry(
            user_id=user_id,
            program_id=program_id,
            month=month_bounds(year, month)[0],
            total_minutes_attended=attended,
            total_available_minutes=available,
            rate_per_minute=rate,
            amount_earned=amount,
        )
