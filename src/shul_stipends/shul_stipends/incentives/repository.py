from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import ContextManager, Mapping, Optional, Protocol, Sequence

from .model import (
    AttendanceFact,
    AttendanceInput,
    EarningsEntry,
    EarningsHistoryRow,
    UserAttendanceCounts,
)


class HandlerAttendanceRepository(Protocol):
    def upsert_fact(
        self,
        *,
        user_id: int,
        program_id: Optional[int],
        work_date: date,
        data: AttendanceInput,
    ) -> AttendanceFact:
        """Create or overwrite the fact for (user, program-or-none, date)."""

        raise NotImplementedError

    def get_fact(self, user_id: int, work_date: date, program_id: Optional[int] = None) -> Optional[AttendanceFact]:
        """Fact for that program, or the most recently written fact of the day when no program is given."""

        raise NotImplementedError

    def delete_facts(self, user_id: int, work_date: date) -> int:
        raise NotImplementedError

    def list_facts(self, user_id: int, start: date, end: date) -> Sequence[AttendanceFact]:
        raise NotImplementedError

    def upsert_earnings(self, entry: EarningsEntry) -> EarningsEntry:
        raise NotImplementedError

    def delete_earnings(self, user_id: int, work_date: date) -> bool:
        raise NotImplementedError

    def list_earnings_history(self, user_id: int) -> Sequence[EarningsHistoryRow]:
        raise NotImplementedError

    def sum_earned(self, user_id: int) -> Decimal:
        raise NotImplementedError

    def earned_by_user(self) -> Mapping[int, Decimal]:
        raise NotImplementedError

    def attendance_counts_by_user(self) -> Sequence[UserAttendanceCounts]:
        raise NotImplementedError

    def pair_lock(self, user_id: int, saturday: date) -> ContextManager[None]:
        """Serialise every read/write of one user's weekend pair in a single transaction."""

        raise NotImplementedError
