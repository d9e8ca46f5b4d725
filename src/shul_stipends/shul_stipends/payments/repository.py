from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Mapping, Optional, Protocol, Sequence

from .model import PaymentRecord


class PaymentRepository(Protocol):
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
        raise NotImplementedError

    def get_by_id(self, payment_id: int) -> Optional[PaymentRecord]:
        raise NotImplementedError

    def list_for_user(self, user_id: int, program_id: Optional[int] = None) -> Sequence[PaymentRecord]:
        """Newest first (payment date, then creation time)."""

        raise NotImplementedError

    def delete(self, payment_id: int) -> bool:
        raise NotImplementedError

    def sum_paid(self, user_id: int, program_id: Optional[int] = None) -> Decimal:
        raise NotImplementedError

    def paid_by_user(self, program_id: Optional[int] = None) -> Mapping[int, Decimal]:
        raise NotImplementedError
