from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..core.enums import PairRate
from ..core.exceptions import ValidationError
from ..core.rates import EarlyBlockMinutes
from ..common.datetime_utils import SATURDAY
from .calculator import BonusCalculator, StandardBonusCalculator
from .model import (
    AttendanceFact,
    AttendanceInput,
    AttendanceStats,
    EarningsEntry,
    EarningsHistoryRow,
    GlobalAttendanceSummary,
    SubmissionResult,
    UserAttendanceSummary,
)
from .pairing import WeekendPair, pair_rate
from .repository import HandlerAttendanceRepository

logger = logging.getLogger(__name__)


class IncentiveService:
    """Daily Incentive Engine for the Handler program.

    Earnings are recomputed eagerly on every write. A weekend day is priced
    together with its partner day under one pair lock, so submitting Sunday
    after Saturday (or deleting either) re-prices both.
    """

    def __init__(
        self,
        attendance: HandlerAttendanceRepository,
        *,
        calculator: Optional[BonusCalculator] = None,
        early_block: Optional[EarlyBlockMinutes] = None,
    ):
        self._attendance = attendance
        self._calculator = calculator or StandardBonusCalculator()
        self._early_block = early_block or EarlyBlockMinutes()

    def submit_attendance(
        self,
        user_id: int,
        work_date: date,
        data: AttendanceInput,
        *,
        program_id: Optional[int] = None,
    ) -> SubmissionResult:
        data.validate()
        pair = WeekendPair.containing(work_date)

        if pair is None:
            fact = self._attendance.upsert_fact(user_id=user_id, program_id=program_id, work_date=work_date, data=data)
            earnings = self._attendance.upsert_earnings(self._calculator.compute(fact, PairRate.WEEKDAY))
            logger.info("Attendance saved user=%s date=%s earned=%s", user_id, work_date, earnings.amount_earned)
            return SubmissionResult(attendance=fact, earnings=earnings)

        with self._attendance.pair_lock(user_id, pair.saturday):
            fact = self._attendance.upsert_fact(user_id=user_id, program_id=program_id, work_date=work_date, data=data)
            priced = self._reprice_pair(user_id, pair, submitted=fact)

        earnings = priced[work_date]
        logger.info(
            "Weekend attendance saved user=%s date=%s earned=%s weekend_rate=%s",
            user_id,
            work_date,
            earnings.amount_earned,
            earnings.is_weekend,
        )
        return SubmissionResult(attendance=fact, earnings=earnings)

    def delete_attendance(self, user_id: int, work_date: date) -> None:
        pair = WeekendPair.containing(work_date)

        if pair is None:
            self._delete_day(user_id, work_date)
            return

        with self._attendance.pair_lock(user_id, pair.saturday):
            self._delete_day(user_id, work_date)
            # The partner, if still present, drops back to the weekday tier.
            self._reprice_pair(user_id, pair)

    def get_attendance_by_date(
        self,
        user_id: int,
        work_date: date,
        program_id: Optional[int] = None,
    ) -> Optional[AttendanceFact]:
        return self._attendance.get_fact(user_id, work_date, program_id)

    def get_attendance_range(self, user_id: int, start: date, end: date) -> Sequence[AttendanceFact]:
        if end < start:
            raise ValidationError("End date must not be before start date")
        return self._attendance.list_facts(user_id, start, end)

    def get_attendance_stats(self, user_id: int, start: date, end: date) -> AttendanceStats:
        facts = self.get_attendance_range(user_id, start, end)
        learning = [f for f in facts if f.learned_early]
        return AttendanceStats(
            total_days=len(facts),
            learning_days=len(learning),
            learning_minutes=sum(self._learning_minutes(f.work_date) for f in learning),
            early_days=sum(1 for f in facts if f.came_early),
            late_days=sum(1 for f in facts if f.came_late),
            on_time_days=sum(1 for f in facts if not f.came_late and not f.came_early),
        )

    def get_earnings_history(self, user_id: int) -> Sequence[EarningsHistoryRow]:
        return self._attendance.list_earnings_history(user_id)

    def get_global_attendance_summary(self) -> GlobalAttendanceSummary:
        users = [
            UserAttendanceSummary(
                user_id=c.user_id,
                days_attended=c.days_attended,
                learning_days=c.learning_days,
                learning_minutes=c.saturday_learning_days * self._early_block.saturday
                + (c.learning_days - c.saturday_learning_days) * self._early_block.weekday,
            )
            for c in self._attendance.attendance_counts_by_user()
        ]
        return GlobalAttendanceSummary(
            users=users,
            total_users_with_attendance=len(users),
            total_days=sum(u.days_attended for u in users),
            total_learning_minutes=sum(u.learning_minutes for u in users),
        )

    def _delete_day(self, user_id: int, work_date: date) -> None:
        removed = self._attendance.delete_facts(user_id, work_date)
        self._attendance.delete_earnings(user_id, work_date)
        logger.info("Attendance deleted user=%s date=%s facts=%s", user_id, work_date, removed)

    def _reprice_pair(
        self,
        user_id: int,
        pair: WeekendPair,
        *,
        submitted: Optional[AttendanceFact] = None,
    ) -> dict[date, EarningsEntry]:
        """Recompute every existing day of the pair from the current pair state.

        Must run under `pair_lock`.
        """

        facts: dict[date, Optional[AttendanceFact]] = {}
        for day in pair.days:
            if submitted is not None and submitted.work_date == day:
                facts[day] = submitted
            else:
                facts[day] = self._attendance.get_fact(user_id, day)

        tier = pair_rate(
            saturday_present=facts[pair.saturday] is not None,
            sunday_present=facts[pair.sunday] is not None,
        )

        priced: dict[date, EarningsEntry] = {}
        for day, fact in facts.items():
            if fact is None:
                continue
            priced[day] = self._attendance.upsert_earnings(self._calculator.compute(fact, tier))

        logger.debug(
            "Weekend pair %s re-priced for user=%s tier=%s days=%s",
            pair.saturday,
            user_id,
            tier.value,
            sorted(d.isoformat() for d in priced),
        )
        return priced

    def _learning_minutes(self, work_date: date) -> int:
        if work_date.weekday() == SATURDAY:
            return self._early_block.saturday
        return self._early_block.weekday
