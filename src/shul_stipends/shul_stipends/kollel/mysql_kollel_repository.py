from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import KollelAttendanceFact, KollelEarningsEntry
from .repository import KollelRepository

_FACT_COLUMNS = (
    "kollel_attendance_id, user_id, program_id, work_date, arrival_time, departure_time, created_at, updated_at"
)
_EARNINGS_COLUMNS = (
    "user_id, program_id, month, total_minutes_attended, total_available_minutes, rate_per_minute, amount_earned"
)


def _to_fact(r: Dict[str, Any]) -> KollelAttendanceFact:
    return KollelAttendanceFact(
        kollel_attendance_id=int(r["kollel_attendance_id"]),
        user_id=int(r["user_id"]),
        program_id=int(r["program_id"]),
        work_date=r["work_date"],
        arrival_time=normalize_mysql_time(r["arrival_time"]),
        departure_time=normalize_mysql_time(r["departure_time"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _to_entry(r: Dict[str, Any]) -> KollelEarningsEntry:
    return KollelEarningsEntry(
        user_id=int(r["user_id"]),
        program_id=int(r["program_id"]),
        month=r["month"],
        total_minutes_attended=int(r["total_minutes_attended"] or 0),
        total_available_minutes=int(r["total_available_minutes"] or 0),
        rate_per_minute=Decimal(r["rate_per_minute"] or 0),
        amount_earned=Decimal(r["amount_earned"] or 0),
    )


class MySQLKollelRepository(KollelRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_fact(
        self,
        *,
        user_id: int,
        program_id: int,
        work_date: date,
        arrival_time: time,
        departure_time: time,
    ) -> KollelAttendanceFact:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO kollel_attendance(user_id, program_id, work_date, arrival_time, departure_time)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    arrival_time=VALUES(arrival_time),
                    departure_time=VALUES(departure_time),
                    updated_at=CURRENT_TIMESTAMP
                """,
                (int(user_id), int(program_id), work_date, arrival_time, departure_time),
            )
            cur.execute(
                f"SELECT {_FACT_COLUMNS} FROM kollel_attendance WHERE user_id=%s AND program_id=%s AND work_date=%s",
                (int(user_id), int(program_id), work_date),
            )
            return _to_fact(fetchone(cur))

    def get_fact(self, user_id: int, program_id: int, work_date: date) -> Optional[KollelAttendanceFact]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_FACT_COLUMNS} FROM kollel_attendance WHERE user_id=%s AND program_id=%s AND work_date=%s",
                (int(user_id), int(program_id), work_date),
            )
            r = fetchone(cur)
            return _to_fact(r) if r else None

    def delete_fact(self, user_id: int, program_id: int, work_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM kollel_attendance WHERE user_id=%s AND program_id=%s AND work_date=%s",
                (int(user_id), int(program_id), work_date),
            )
            return cur.rowcount > 0

    def list_facts(
        self,
        user_id: int,
        program_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[KollelAttendanceFact]:
        clauses = ["user_id=%s", "program_id=%s"]
        params: list[object] = [int(user_id), int(program_id)]
        if start is not None:
            clauses.append("work_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("work_date <= %s")
            params.append(end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_FACT_COLUMNS} FROM kollel_attendance WHERE {where} ORDER BY work_date DESC",
                tuple(params),
            )
            return [_to_fact(r) for r in fetchall(cur)]

    def users_with_attendance(self, program_id: int, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[int]:
        clauses = ["program_id=%s"]
        params: list[object] = [int(program_id)]
        if start is not None:
            clauses.append("work_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("work_date <= %s")
            params.append(end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT DISTINCT user_id FROM kollel_attendance WHERE {where} ORDER BY user_id",
                tuple(params),
            )
            return [int(r["user_id"]) for r in fetchall(cur)]

    def upsert_earnings(self, entry: KollelEarningsEntry) -> KollelEarningsEntry:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO kollel_earnings(
                    user_id, program_id, month,
                    total_minutes_attended, total_available_minutes, rate_per_minute, amount_earned
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    total_minutes_attended=VALUES(total_minutes_attended),
                    total_available_minutes=VALUES(total_available_minutes),
                    rate_per_minute=VALUES(rate_per_minute),
                    amount_earned=VALUES(amount_earned),
                    updated_at=CURRENT_TIMESTAMP
                """,
                (
                    int(entry.user_id),
                    int(entry.program_id),
                    entry.month,
                    int(entry.total_minutes_attended),
                    int(entry.total_available_minutes),
                    entry.rate_per_minute,
                    entry.amount_earned,
                ),
            )
            return entry

    def list_earnings(self, user_id: int, program_id: int) -> Sequence[KollelEarningsEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_EARNINGS_COLUMNS}
                FROM kollel_earnings
                WHERE user_id=%s AND program_id=%s
                ORDER BY month DESC
                """,
                (int(user_id), int(program_id)),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def sum_earned(self, user_id: int, program_id: int) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COALESCE(SUM(amount_earned), 0) AS total
                FROM kollel_earnings
                WHERE user_id=%s AND program_id=%s
                """,
                (int(user_id), int(program_id)),
            )
            r = fetchone(cur)
            return Decimal(r["total"]) if r else Decimal("0")

    def earned_by_user(self, program_id: int) -> Mapping[int, Decimal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, SUM(amount_earned) AS total
                FROM kollel_earnings
                WHERE program_id=%s
                GROUP BY user_id
                """,
                (int(program_id),),
            )
            return {int(r["user_id"]): Decimal(r["total"]) for r in fetchall(cur)}
