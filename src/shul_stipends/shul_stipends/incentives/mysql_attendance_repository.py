from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, named_lock
from .model import (
    AttendanceFact,
    AttendanceInput,
    EarningsEntry,
    EarningsHistoryRow,
    UserAttendanceCounts,
)
from .pairing import WeekendPair
from .repository import HandlerAttendanceRepository

_FACT_COLUMNS = (
    "attendance_id, user_id, program_id, work_date, came_early, learned_early, "
    "came_late, minutes_late, created_at, updated_at"
)
_EARNINGS_COLUMNS = "user_id, work_date, on_time_bonus, early_bonus, learning_bonus, amount_earned, is_weekend"


def _to_fact(r: Dict[str, Any]) -> AttendanceFact:
    return AttendanceFact(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        program_id=int(r["program_id"]) if r.get("program_id") is not None else None,
        work_date=r["work_date"],
        came_early=bool(r["came_early"]),
        learned_early=bool(r["learned_early"]),
        came_late=bool(r["came_late"]),
        minutes_late=int(r["minutes_late"]) if r.get("minutes_late") is not None else None,
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _to_entry(r: Dict[str, Any]) -> EarningsEntry:
    return EarningsEntry(
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        on_time_bonus=Decimal(r["on_time_bonus"]),
        early_bonus=Decimal(r["early_bonus"]),
        learning_bonus=Decimal(r["learning_bonus"]),
        amount_earned=Decimal(r["amount_earned"]),
        is_weekend=bool(r["is_weekend"]),
    )


class MySQLHandlerAttendanceRepository(HandlerAttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_fact(
        self,
        *,
        user_id: int,
        program_id: Optional[int],
        work_date: date,
        data: AttendanceInput,
    ) -> AttendanceFact:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(user_id, program_id, work_date, came_early, learned_early, came_late, minutes_late)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    came_early=VALUES(came_early),
                    learned_early=VALUES(learned_early),
                    came_late=VALUES(came_late),
                    minutes_late=VALUES(minutes_late),
                    updated_at=CURRENT_TIMESTAMP
                """,
                (
                    int(user_id),
                    program_id,
                    work_date,
                    int(data.came_early),
                    int(data.learned_early),
                    int(data.came_late),
                    data.minutes_late,
                ),
            )
            cur.execute(
                f"""
                SELECT {_FACT_COLUMNS}
                FROM attendance
                WHERE user_id=%s AND program_key=IFNULL(%s, 0) AND work_date=%s
                """,
                (int(user_id), program_id, work_date),
            )
            return _to_fact(fetchone(cur))

    def get_fact(self, user_id: int, work_date: date, program_id: Optional[int] = None) -> Optional[AttendanceFact]:
        with db_cursor(self._conn_factory) as (_, cur):
            if program_id is not None:
                cur.execute(
                    f"SELECT {_FACT_COLUMNS} FROM attendance WHERE user_id=%s AND program_id=%s AND work_date=%s",
                    (int(user_id), int(program_id), work_date),
                )
            else:
                cur.execute(
                    f"""
                    SELECT {_FACT_COLUMNS}
                    FROM attendance
                    WHERE user_id=%s AND work_date=%s
                    ORDER BY updated_at DESC, attendance_id DESC
                    LIMIT 1
                    """,
                    (int(user_id), work_date),
                )
            r = fetchone(cur)
            return _to_fact(r) if r else None

    def delete_facts(self, user_id: int, work_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE user_id=%s AND work_date=%s", (int(user_id), work_date))
            return cur.rowcount

    def list_facts(self, user_id: int, start: date, end: date) -> Sequence[AttendanceFact]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_FACT_COLUMNS}
                FROM attendance
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC, updated_at ASC
                """,
                (int(user_id), start, end),
            )
            return [_to_fact(r) for r in fetchall(cur)]

    def upsert_earnings(self, entry: EarningsEntry) -> EarningsEntry:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO earnings(user_id, work_date, on_time_bonus, early_bonus, learning_bonus, amount_earned, is_weekend)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    on_time_bonus=VALUES(on_time_bonus),
                    early_bonus=VALUES(early_bonus),
                    learning_bonus=VALUES(learning_bonus),
                    amount_earned=VALUES(amount_earned),
                    is_weekend=VALUES(is_weekend)
                """,
                (
                    int(entry.user_id),
                    entry.work_date,
                    entry.on_time_bonus,
                    entry.early_bonus,
                    entry.learning_bonus,
                    entry.amount_earned,
                    int(entry.is_weekend),
                ),
            )
            return entry

    def delete_earnings(self, user_id: int, work_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM earnings WHERE user_id=%s AND work_date=%s", (int(user_id), work_date))
            return cur.rowcount > 0

    def list_earnings_history(self, user_id: int) -> Sequence[EarningsHistoryRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            # One row per day: the program of the latest fact written that day.
            cur.execute(
                """
                SELECT
                    e.user_id, e.work_date, e.on_time_bonus, e.early_bonus, e.learning_bonus,
                    e.amount_earned, e.is_weekend,
                    a.program_id, p.name AS program_name
                FROM earnings e
                LEFT JOIN attendance a ON a.attendance_id = (
                    SELECT a2.attendance_id
                    FROM attendance a2
                    WHERE a2.user_id = e.user_id AND a2.work_date = e.work_date
                    ORDER BY a2.updated_at DESC, a2.attendance_id DESC
                    LIMIT 1
                )
                LEFT JOIN programs p ON p.program_id = a.program_id
                WHERE e.user_id=%s
                ORDER BY e.work_date DESC
                """,
                (int(user_id),),
            )
            return [
                EarningsHistoryRow(
                    entry=_to_entry(r),
                    program_id=int(r["program_id"]) if r.get("program_id") is not None else None,
                    program_name=r.get("program_name"),
                )
                for r in fetchall(cur)
            ]

    def sum_earned(self, user_id: int) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COALESCE(SUM(amount_earned), 0) AS total FROM earnings WHERE user_id=%s",
                (int(user_id),),
            )
            r = fetchone(cur)
            return Decimal(r["total"]) if r else Decimal("0")

    def earned_by_user(self) -> Mapping[int, Decimal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id, SUM(amount_earned) AS total FROM earnings GROUP BY user_id")
            return {int(r["user_id"]): Decimal(r["total"]) for r in fetchall(cur)}

    def attendance_counts_by_user(self) -> Sequence[UserAttendanceCounts]:
        with db_cursor(self._conn_factory) as (_, cur):
            # WEEKDAY(): Monday=0 ... Saturday=5.
            cur.execute(
                """
                SELECT
                    user_id,
                    COUNT(DISTINCT work_date) AS days_attended,
                    SUM(CASE WHEN learned_early THEN 1 ELSE 0 END) AS learning_days,
                    SUM(CASE WHEN learned_early AND WEEKDAY(work_date) = 5 THEN 1 ELSE 0 END) AS saturday_learning_days
                FROM attendance
                GROUP BY user_id
                ORDER BY user_id
                """
            )
            return [
                UserAttendanceCounts(
                    user_id=int(r["user_id"]),
                    days_attended=int(r["days_attended"] or 0),
                    learning_days=int(r["learning_days"] or 0),
                    saturday_learning_days=int(r["saturday_learning_days"] or 0),
                )
                for r in fetchall(cur)
            ]

    @contextmanager
    def pair_lock(self, user_id: int, saturday: date) -> Iterator[None]:
        with named_lock(self._conn_factory, WeekendPair(saturday=saturday).lock_name(user_id)):
            yield
