from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PaymentRecord
from .repository import PaymentRepository

_COLUMNS = "payment_id, user_id, program_id, amount, payment_date, notes, admin_id, created_at"


def _to_payment(r: Dict[str, Any]) -> PaymentRecord:
    return PaymentRecord(
        payment_id=int(r["payment_id"]),
        user_id=int(r["user_id"]),
        program_id=int(r["program_id"]) if r.get("program_id") is not None else None,
        amount=Decimal(r["amount"]),
        payment_date=r["payment_date"],
        notes=r.get("notes"),
        admin_id=int(r["admin_id"]) if r.get("admin_id") is not None else None,
        created_at=r.get("created_at"),
    )


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: int,
        program_id: Optional[int],
        amount: Decimal,
        payment_date: date,
        notes: Optional[str],
        admin_id: Optional[int],
    ) -> PaymentRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payments(user_id, program_id, amount, payment_date, notes, admin_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), program_id, amount, payment_date, notes, admin_id),
            )
            payment_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM payments WHERE payment_id=%s", (payment_id,))
            return _to_payment(fetchone(cur))

    def get_by_id(self, payment_id: int) -> Optional[PaymentRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payments WHERE payment_id=%s", (int(payment_id),))
            r = fetchone(cur)
            return _to_payment(r) if r else None

    def list_for_user(self, user_id: int, program_id: Optional[int] = None) -> Sequence[PaymentRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            # <=> matches NULL to NULL: no program means the Handler ledger.
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payments
                WHERE user_id=%s AND program_id <=> %s
                ORDER BY payment_date DESC, created_at DESC
                """,
                (int(user_id), program_id),
            )
            return [_to_payment(r) for r in fetchall(cur)]

    def delete(self, payment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payments WHERE payment_id=%s", (int(payment_id),))
            return cur.rowcount > 0

    def sum_paid(self, user_id: int, program_id: Optional[int] = None) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COALESCE(SUM(amount), 0) AS total FROM payments WHERE user_id=%s AND program_id <=> %s",
                (int(user_id), program_id),
            )
            r = fetchone(cur)
            return Decimal(r["total"]) if r else Decimal("0")

    def paid_by_user(self, program_id: Optional[int] = None) -> Mapping[int, Decimal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, SUM(amount) AS total FROM payments WHERE program_id <=> %s GROUP BY user_id",
                (program_id,),
            )
            return {int(r["user_id"]): Decimal(r["total"]) for r in fetchall(cur)}
