from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Sequence

from ..common.validators import optional_text, require_positive_amount
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import PaymentRecord
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


class PaymentService:
    """Admin-recorded payouts. Payments are never generated from earnings."""

    def __init__(self, payments: PaymentRepository):
        self._payments = payments

    def create_payment(
        self,
        *,
        current_role: Role,
        admin_id: int,
        user_id: int,
        amount: Any,
        payment_date: date,
        notes: Optional[str] = None,
    ) -> PaymentRecord:
        if current_role != Role.HANDLER_ADMIN:
            raise AuthorizationError("Handler admin access required")
        return self._create(admin_id=admin_id, user_id=user_id, program_id=None, amount=amount, payment_date=payment_date, notes=notes)

    def create_kollel_payment(
        self,
        *,
        current_role: Role,
        admin_id: int,
        user_id: int,
        program_id: int,
        amount: Any,
        payment_date: date,
        notes: Optional[str] = None,
    ) -> PaymentRecord:
        if current_role != Role.KOLLEL_ADMIN:
            raise AuthorizationError("Kollel admin access required")
        return self._create(
            admin_id=admin_id,
            user_id=user_id,
            program_id=int(program_id),
            amount=amount,
            payment_date=payment_date,
            notes=notes,
        )

    def list_user_payments(self, user_id: int) -> Sequence[PaymentRecord]:
        return self._payments.list_for_user(int(user_id))

    def list_user_kollel_payments(self, user_id: int, program_id: int) -> Sequence[PaymentRecord]:
        return self._payments.list_for_user(int(user_id), int(program_id))

    def delete_payment(self, *, current_role: Role, payment_id: int) -> None:
        if current_role != Role.HANDLER_ADMIN:
            raise AuthorizationError("Handler admin access required")

        payment = self._payments.get_by_id(int(payment_id))
        if payment is None or payment.program_id is not None:
            raise ValidationError("Payment not found")
        if not self._payments.delete(int(payment_id)):
            raise ValidationError("Failed to delete payment")
        logger.info("Payment deleted id=%s user=%s amount=%s", payment_id, payment.user_id, payment.amount)

    def _create(
        self,
        *,
        admin_id: int,
        user_id: int,
        program_id: Optional[int],
        amount: Any,
        payment_date: date,
        notes: Optional[str],
    ) -> PaymentRecord:
        if int(user_id) <= 0:
            raise ValidationError("User is required")
        value = require_positive_amount(amount)

        payment = self._payments.create(
            user_id=int(user_id),
            program_id=program_id,
            amount=value,
            payment_date=payment_date,
            notes=optional_text(notes),
            admin_id=int(admin_id),
        )
        logger.info(
            "Payment recorded id=%s user=%s program=%s amount=%s by admin=%s",
            payment.payment_id,
            payment.user_id,
            program_id,
            payment.amount,
            admin_id,
        )
        return payment
