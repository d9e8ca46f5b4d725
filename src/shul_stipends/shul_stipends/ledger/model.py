from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from ..kollel.model import DailyKollelAttendance, KollelEarningsEntry


@dataclass(frozen=True)
class Balance:
    """Earned vs paid. `total_owed` goes negative when a member was overpaid."""

    total_earned: Decimal
    total_paid: Decimal

    @property
    def total_owed(self) -> Decimal:
        return self.total_earned - self.total_paid

    def to_dict(self) -> dict:
        return {
            "total_earned": str(self.total_earned),
            "total_paid": str(self.total_paid),
            "total_owed": str(self.total_owed),
        }


@dataclass(frozen=True)
class UserBalanceRow:
    user_id: int
    balance: Balance


@dataclass(frozen=True)
class KollelLedger:
    balance: Balance
    monthly_earnings: list[KollelEarningsEntry] = field(default_factory=list)
    daily_attendance: list[DailyKollelAttendance] = field(default_factory=list)
