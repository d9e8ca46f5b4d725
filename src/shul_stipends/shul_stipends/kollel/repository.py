from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from typing import Mapping, Optional, Protocol, Sequence

from .model import KollelAttendanceFact, KollelEarningsEntry


class KollelRepository(Protocol):
    def upsert_fact(
        self,
        *,
        user_id: int,
        program_id: int,
        work_date: date,
        arrival_time: time,
        departure_time: time,
    ) -> KollelAttendanceFact:
        raise NotImplementedError

    def get_fact(self, user_id: int, program_id: int, work_date: date) -> Optional[KollelAttendanceFact]:
        raise NotImplementedError

    def delete_fact(self, user_id: int, program_id: int, work_date: date) -> bool:
        raise NotImplementedError

    def list_facts(
        self,
        user_id: int,
        program_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[KollelAttendanceFact]:
        """Facts newest first; bounded by [start, end] when given."""

        raise NotImplementedError

    def users_with_attendance(self, program_id: int, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[int]:
        raise NotImplementedError

    def upsert_earnings(self, entry: KollelEarningsEntry) -> KollelEarningsEntry:
        raise NotImplementedError

    def list_earnings(self, user_id: int, program_id: int) -> Sequence[KollelEarningsEntry]:
        """Monthly entries, newest month first."""

        raise NotImplementedError

    def sum_earned(self, user_id: int, program_id: int) -> Decimal:
        raise NotImplementedError

    def earned_by_user(self, program_id: int) -> Mapping[int, Decimal]:
        raise NotImplementedError
