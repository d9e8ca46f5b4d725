from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class PaymentRecord:
    """Money handed to a member by an admin. `program_id` None is the Handler ledger."""

    payment_id: int
    user_id: int
    program_id: Optional[int]
    amount: Decimal
    payment_date: date
    notes: Optional[str] = None
    admin_id: Optional[int] = None
    created_at: Optional[datetime] = None
