from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

import pytest

from shul_stipends.container import assemble
from shul_stipends.core.enums import ProgramKind
from shul_stipends.incentives.model import (
    AttendanceFact,
    AttendanceInput,
    EarningsEntry,
    EarningsHistoryRow,
    UserAttendanceCounts,
)
from shul_stipends.kollel.model import KollelAttendanceFact, KollelEarningsEntry
from shul_stipends.payments.model import PaymentRecord
from shul_stipends.programs.model import Program

HANDLER_PROGRAM_ID = 1
MORNING_KOLLEL_ID = 2
FULL_KOLLEL_ID = 3

ZERO = Decimal("0")
_EPOCH = datetime(2026, 1, 1, 6, 0)


class InMemoryPrograms:
    def __init__(self, programs: list[Program]):
        self._by_id = {p.program_id: p for p in programs}

    def get_by_id(self, program_id: int) -> Optional[Program]:
        return self._by_id.get(program_id)

    def get_by_name(self, name: str) -> Optional[Program]:
        return next((p for p in self._by_id.values() if p.name == name), None)

    def list_active(self):
        return sorted((p for p in self._by_id.values() if p.is_active), key=lambda p: p.name)


class InMemoryHandlerAttendance:
    def __init__(self, programs: Optional[InMemoryPrograms] = None):
        self.facts: dict[tuple[int, int, date], AttendanceFact] = {}
        self.earnings: dict[tuple[int, date], EarningsEntry] = {}
        self.lock_calls: list[tuple[int, date]] = []
        self.lock_held = False
        self._programs = programs
        self._seq = 0

    def upsert_fact(self, *, user_id: int, program_id: Optional[int], work_date: date, data: AttendanceInput) -> AttendanceFact:
        key = (user_id, program_id or 0, work_date)
        existing = self.facts.get(key)
        self._seq += 1
        stamp = _EPOCH + timedelta(seconds=self._seq)
        fact = AttendanceFact(
            attendance_id=existing.attendance_id if existing else self._seq,
            user_id=user_id,
            program_id=program_id,
            work_date=work_date,
            came_early=data.came_early,
            learned_early=data.learned_early,
            came_late=data.came_late,
            minutes_late=data.minutes_late,
            created_at=existing.created_at if existing else stamp,
            updated_at=stamp,
        )
        self.facts[key] = fact
        return fact

    def get_fact(self, user_id: int, work_date: date, program_id: Optional[int] = None) -> Optional[AttendanceFact]:
        if program_id is not None:
            return self.facts.get((user_id, program_id, work_date))
        same_day = [f for (u, _, d), f in self.facts.items() if u == user_id and d == work_date]
        if not same_day:
            return None
        return max(same_day, key=lambda f: (f.updated_at, f.attendance_id))

    def delete_facts(self, user_id: int, work_date: date) -> int:
        keys = [k for k in self.facts if k[0] == user_id and k[2] == work_date]
        for k in keys:
            del self.facts[k]
        return len(keys)

    def list_facts(self, user_id: int, start: date, end: date):
        items = [f for f in self.facts.values() if f.user_id == user_id and start <= f.work_date <= end]
        return sorted(items, key=lambda f: (f.work_date, f.updated_at))

    def upsert_earnings(self, entry: EarningsEntry) -> EarningsEntry:
        self.earnings[(entry.user_id, entry.work_date)] = entry
        return entry

    def get_earnings(self, user_id: int, work_date: date) -> Optional[EarningsEntry]:
        return self.earnings.get((user_id, work_date))

    def delete_earnings(self, user_id: int, work_date: date) -> bool:
        return self.earnings.pop((user_id, work_date), None) is not None

    def list_earnings_history(self, user_id: int):
        rows = []
        for (u, d), entry in sorted(self.earnings.items(), key=lambda kv: kv[0][1], reverse=True):
            if u != user_id:
                continue
            fact = self.get_fact(u, d)
            program_id = fact.program_id if fact else None
            program = self._programs.get_by_id(program_id) if (self._programs and program_id) else None
            rows.append(
                EarningsHistoryRow(
                    entry=entry,
                    program_id=program_id,
                    program_name=program.name if program else None,
                )
            )
        return rows

    def sum_earned(self, user_id: int) -> Decimal:
        return sum((e.amount_earned for (u, _), e in self.earnings.items() if u == user_id), ZERO)

    def earned_by_user(self):
        totals: dict[int, Decimal] = {}
        for (u, _), e in self.earnings.items():
            totals[u] = totals.get(u, ZERO) + e.amount_earned
        return totals

    def attendance_counts_by_user(self):
        counts = []
        for user_id in sorted({f.user_id for f in self.facts.values()}):
            facts = [f for f in self.facts.values() if f.user_id == user_id]
            counts.append(
                UserAttendanceCounts(
                    user_id=user_id,
                    days_attended=len({f.work_date for f in facts}),
                    learning_days=sum(1 for f in facts if f.learned_early),
                    saturday_learning_days=sum(1 for f in facts if f.learned_early and f.work_date.weekday() == 5),
                )
            )
        return counts

    @contextmanager
    def pair_lock(self, user_id: int, saturday: date):
        assert not self.lock_held, "pair lock is not re-entrant"
        self.lock_calls.append((user_id, saturday))
        self.lock_held = True
        try:
            yield
        finally:
            self.lock_held = False


class InMemoryKollel:
    def __init__(self):
        self.facts: dict[tuple[int, int, date], KollelAttendanceFact] = {}
        self.earnings: dict[tuple[int, int, date], KollelEarningsEntry] = {}
        self._seq = 0

    def upsert_fact(self, *, user_id: int, program_id: int, work_date: date, arrival_time: time, departure_time: time):
        key = (user_id, program_id, work_date)
        existing = self.facts.get(key)
        self._seq += 1
        stamp = _EPOCH + timedelta(seconds=self._seq)
        fact = KollelAttendanceFact(
            kollel_attendance_id=existing.kollel_attendance_id if existing else self._seq,
            user_id=user_id,
            program_id=program_id,
            work_date=work_date,
            arrival_time=arrival_time,
            departure_time=departure_time,
            created_at=existing.created_at if existing else stamp,
            updated_at=stamp,
        )
        self.facts[key] = fact
        return fact

    def get_fact(self, user_id: int, program_id: int, work_date: date):
        return self.facts.get((user_id, program_id, work_date))

    def delete_fact(self, user_id: int, program_id: int, work_date: date) -> bool:
        return self.facts.pop((user_id, program_id, work_date), None) is not None

    def list_facts(self, user_id: int, program_id: int, *, start=None, end=None):
        items = [
            f
            for f in self.facts.values()
            if f.user_id == user_id
            and f.program_id == program_id
            and (start is None or f.work_date >= start)
            and (end is None or f.work_date <= end)
        ]
        return sorted(items, key=lambda f: f.work_date, reverse=True)

    def users_with_attendance(self, program_id: int, start=None, end=None):
        return sorted(
            {
                f.user_id
                for f in self.facts.values()
                if f.program_id == program_id
                and (start is None or f.work_date >= start)
                and (end is None or f.work_date <= end)
            }
        )

    def upsert_earnings(self, entry: KollelEarningsEntry) -> KollelEarningsEntry:
        self.earnings[(entry.user_id, entry.program_id, entry.month)] = entry
        return entry

    def list_earnings(self, user_id: int, program_id: int):
        items = [e for (u, p, _), e in self.earnings.items() if u == user_id and p == program_id]
        return sorted(items, key=lambda e: e.month, reverse=True)

    def sum_earned(self, user_id: int, program_id: int) -> Decimal:
        return sum((e.amount_earned for e in self.list_earnings(user_id, program_id)), ZERO)

    def earned_by_user(self, program_id: int):
        totals: dict[int, Decimal] = {}
        for (u, p, _), e in self.earnings.items():
            if p == program_id:
                totals[u] = totals.get(u, ZERO) + e.amount_earned
        return totals


class InMemoryPayments:
    def __init__(self):
        self.rows: dict[int, PaymentRecord] = {}
        self._id = 0

    def create(self, *, user_id, program_id, amount, payment_date, notes, admin_id) -> PaymentRecord:
        self._id += 1
        record = PaymentRecord(
            payment_id=self._id,
            user_id=user_id,
            program_id=program_id,
            amount=Decimal(amount),
            payment_date=payment_date,
            notes=notes,
            admin_id=admin_id,
            created_at=_EPOCH + timedelta(seconds=self._id),
        )
        self.rows[self._id] = record
        return record

    def get_by_id(self, payment_id: int):
        return self.rows.get(payment_id)

    def list_for_user(self, user_id: int, program_id: Optional[int] = None):
        items = [p for p in self.rows.values() if p.user_id == user_id and p.program_id == program_id]
        return sorted(items, key=lambda p: (p.payment_date, p.created_at), reverse=True)

    def delete(self, payment_id: int) -> bool:
        return self.rows.pop(payment_id, None) is not None

    def sum_paid(self, user_id: int, program_id: Optional[int] = None) -> Decimal:
        return sum((p.amount for p in self.list_for_user(user_id, program_id)), ZERO)

    def paid_by_user(self, program_id: Optional[int] = None):
        totals: dict[int, Decimal] = {}
        for p in self.rows.values():
            if p.program_id == program_id:
                totals[p.user_id] = totals.get(p.user_id, ZERO) + p.amount
        return totals


class FakeSettings:
    HANDLER_RATES = {"weekday": "100", "weekend": "150"}
    EARLY_BLOCK_MINUTES = {"weekday": 15, "saturday": 25}
    KOLLEL_SCHEDULES = {
        "Keter Eliyahu Morning Kollel": {
            "start": "08:30",
            "end": "10:30",
            "minutes_per_day": 120,
            "monthly_salary": "8000",
        },
        "Keter Eliyahu Full Morning Kollel": {
            "start": "08:45",
            "end": "12:00",
            "minutes_per_day": 195,
            "monthly_salary": "8000",
        },
    }
    DEFAULT_KOLLEL_PROGRAM = "Keter Eliyahu Morning Kollel"


@pytest.fixture
def programs():
    return InMemoryPrograms(
        [
            Program(program_id=HANDLER_PROGRAM_ID, name="Handler", kind=ProgramKind.HANDLER),
            Program(program_id=MORNING_KOLLEL_ID, name="Keter Eliyahu Morning Kollel", kind=ProgramKind.KOLLEL),
            Program(program_id=FULL_KOLLEL_ID, name="Keter Eliyahu Full Morning Kollel", kind=ProgramKind.KOLLEL),
        ]
    )


@pytest.fixture
def handler_repo(programs):
    return InMemoryHandlerAttendance(programs)


@pytest.fixture
def kollel_repo():
    return InMemoryKollel()


@pytest.fixture
def payments_repo():
    return InMemoryPayments()


@pytest.fixture
def container(programs, handler_repo, kollel_repo, payments_repo):
    return assemble(
        programs_repo=programs,
        handler_repo=handler_repo,
        kollel_repo=kollel_repo,
        payments_repo=payments_repo,
        settings=FakeSettings,
    )
