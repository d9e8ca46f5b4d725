from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import month_bounds, parse_time_of_day
from ..common.validators import require_month, require_non_empty
from ..core.enums import ProgramKind
from ..core.exceptions import ValidationError
from ..core.rates import KollelSchedule, KollelScheduleBook
from ..programs.model import Program
from ..programs.repository import ProgramRepository
from .calculator import KollelPayCalculator, ProRataPayCalculator
from .model import DailyKollelAttendance, KollelAttendanceFact, KollelEarningsEntry
from .repository import KollelRepository
from .validation import validate_kollel_times

logger = logging.getLogger(__name__)


class KollelService:
    """Monthly Payroll Engine for kollel programs.

    Submitting attendance only stores the session; the month's payroll entry
    is rebuilt from scratch by `calculate_kollel_earnings` or by the batch
    `recalculate_monthly_earnings` run.
    """

    def __init__(
        self,
        kollel: KollelRepository,
        programs: ProgramRepository,
        schedules: KollelScheduleBook,
        *,
        calculator: Optional[KollelPayCalculator] = None,
    ):
        self._kollel = kollel
        self._programs = programs
        self._schedules = schedules
        self._calculator = calculator or ProRataPayCalculator()

    def find_program(self, program_id: int) -> Optional[Program]:
        program = self._programs.get_by_id(int(program_id))
        if program is None or program.kind != ProgramKind.KOLLEL:
            return None
        return program

    def find_program_by_name(self, name: str) -> Optional[Program]:
        program = self._programs.get_by_name(name)
        if program is None or program.kind != ProgramKind.KOLLEL:
            return None
        return program

    def submit_kollel_attendance(
        self,
        user_id: int,
        program_id: int,
        work_date: date,
        *,
        arrival_time: str,
        departure_time: str,
    ) -> KollelAttendanceFact:
        arrival = parse_time_of_day(require_non_empty(arrival_time, "Arrival time"))
        departure = parse_time_of_day(require_non_empty(departure_time, "Departure time"))

        schedule = self._schedule_for(program_id)
        validate_kollel_times(arrival, departure, schedule)

        fact = self._kollel.upsert_fact(
            user_id=int(user_id),
            program_id=int(program_id),
            work_date=work_date,
            arrival_time=arrival,
            departure_time=departure,
        )
        logger.info(
            "Kollel attendance saved user=%s program=%s date=%s %s-%s",
            user_id,
            program_id,
            work_date,
            arrival.strftime("%H:%M"),
            departure.strftime("%H:%M"),
        )
        return fact

    def get_kollel_attendance_by_date(self, user_id: int, program_id: int, work_date: date) -> Optional[KollelAttendanceFact]:
        return self._kollel.get_fact(int(user_id), int(program_id), work_date)

    def delete_kollel_attendance(self, user_id: int, program_id: int, work_date: date) -> None:
        removed = self._kollel.delete_fact(int(user_id), int(program_id), work_date)
        logger.info("Kollel attendance deleted user=%s program=%s date=%s removed=%s", user_id, program_id, work_date, removed)

    def get_user_daily_attendance(self, user_id: int, program_id: int) -> list[DailyKollelAttendance]:
        return [
            DailyKollelAttendance(
                work_date=f.work_date,
                arrival_time=f.arrival_time,
                departure_time=f.departure_time,
                minutes_attended=self._calculator.minutes_attended(f.arrival_time, f.departure_time),
                created_at=f.created_at,
            )
            for f in self._kollel.list_facts(int(user_id), int(program_id))
        ]

    def list_monthly_earnings(self, user_id: int, program_id: int) -> Sequence[KollelEarningsEntry]:
        return self._kollel.list_earnings(int(user_id), int(program_id))

    def calculate_kollel_earnings(self, user_id: int, program_id: int, year: int, month: int) -> KollelEarningsEntry:
        year, month = require_month(year, month)
        schedule = self._schedule_for(program_id)
        start, end = month_bounds(year, month)

        facts = self._kollel.list_facts(int(user_id), int(program_id), start=start, end=end)
        entry = self._calculator.monthly_earnings(
            user_id=int(user_id),
            program_id=int(program_id),
            year=year,
            month=month,
            schedule=schedule,
            facts=facts,
        )
        saved = self._kollel.upsert_earnings(entry)
        logger.info(
            "Kollel payroll user=%s program=%s month=%s minutes=%s/%s earned=%s",
            user_id,
            program_id,
            saved.month.strftime("%Y-%m"),
            saved.total_minutes_attended,
            saved.total_available_minutes,
            saved.amount_earned,
        )
        return saved

    def recalculate_monthly_earnings(self, program_id: int, year: int, month: int) -> list[KollelEarningsEntry]:
        year, month = require_month(year, month)
        start, end = month_bounds(year, month)

        users = self._kollel.users_with_attendance(int(program_id), start, end)
        logger.info("Kollel payroll run program=%s month=%04d-%02d users=%d", program_id, year, month, len(users))
        return [self.calculate_kollel_earnings(user_id, program_id, year, month) for user_id in users]

    def _schedule_for(self, program_id: int) -> KollelSchedule:
        program = self.find_program(program_id)
        if program is None:
            raise ValidationError("Kollel program not found")
        schedule = self._schedules.for_program(program.name)
        if schedule is None:
            raise ValidationError(f"No kollel schedule configured for {program.name}")
        return schedule
