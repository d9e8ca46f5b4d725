from __future__ import annotations

from decimal import Decimal

from ..incentives.repository import HandlerAttendanceRepository
from ..kollel.repository import KollelRepository
from ..kollel.service import KollelService
from ..payments.repository import PaymentRepository
from .model import Balance, KollelLedger, UserBalanceRow

ZERO = Decimal("0")


class LedgerService:
    """Earned minus paid, per member. Handler and Kollel ledgers never mix."""

    def __init__(
        self,
        handler: HandlerAttendanceRepository,
        kollel: KollelRepository,
        payments: PaymentRepository,
        kollel_service: KollelService,
    ):
        self._handler = handler
        self._kollel = kollel
        self._payments = payments
        self._kollel_service = kollel_service

    def get_user_earnings(self, user_id: int) -> Balance:
        return Balance(
            total_earned=self._handler.sum_earned(int(user_id)),
            total_paid=self._payments.sum_paid(int(user_id)),
        )

    def get_user_kollel_earnings(self, user_id: int, program_id: int) -> KollelLedger:
        monthly = list(self._kollel.list_earnings(int(user_id), int(program_id)))
        return KollelLedger(
            balance=Balance(
                total_earned=sum((e.amount_earned for e in monthly), ZERO),
                total_paid=self._payments.sum_paid(int(user_id), int(program_id)),
            ),
            monthly_earnings=monthly,
            daily_attendance=self._kollel_service.get_user_daily_attendance(user_id, program_id),
        )

    def get_all_users_earnings(self) -> list[UserBalanceRow]:
        earned = self._handler.earned_by_user()
        paid = self._payments.paid_by_user()
        return self._rows(set(earned) | set(paid), earned, paid)

    def get_all_users_kollel_earnings(self, program_id: int) -> list[UserBalanceRow]:
        # Only members who have attended this kollel at least once.
        users = self._kollel.users_with_attendance(int(program_id))
        earned = self._kollel.earned_by_user(int(program_id))
        paid = self._payments.paid_by_user(int(program_id))
        return self._rows(set(users), earned, paid)

    @staticmethod
    def _rows(user_ids, earned, paid) -> list[UserBalanceRow]:
        return [
            UserBalanceRow(
                user_id=user_id,
                balance=Balance(total_earned=earned.get(user_id, ZERO), total_paid=paid.get(user_id, ZERO)),
            )
            for user_id in sorted(user_ids)
        ]
