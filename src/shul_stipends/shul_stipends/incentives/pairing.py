"""Weekend pairing.

A Saturday and the Sunday right after it form a pair. While both days carry an
attendance fact, both are paid at the weekend tier; otherwise each day that
exists is paid at the weekday tier. Only the single adjacent day is consulted.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from ..common.datetime_utils import SATURDAY, SUNDAY
from ..core.enums import PairRate


@dataclass(frozen=True)
class WeekendPair:
    saturday: date

    @property
    def sunday(self) -> date:
        return self.saturday + timedelta(days=1)

    @property
    def days(self) -> tuple[date, date]:
        return self.saturday, self.sunday

    @classmethod
    def containing(cls, day: date) -> Optional["WeekendPair"]:
        if day.weekday() == SATURDAY:
            return cls(saturday=day)
        if day.weekday() == SUNDAY:
            return cls(saturday=day - timedelta(days=1))
        return None

    def lock_name(self, user_id: int) -> str:
        return f"weekend-pair:{int(user_id)}:{self.saturday.isoformat()}"


def pair_rate(*, saturday_present: bool, sunday_present: bool) -> PairRate:
    if saturday_present and sunday_present:
        return PairRate.WEEKEND
    return PairRate.WEEKDAY
