from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.datetime_utils import minutes_since_midnight, parse_time_of_day
from .enums import PairRate


@dataclass(frozen=True)
class IncentiveRates:
    """Handler payout per bonus, by rate tier."""

    weekday: Decimal = Decimal("100")
    weekend: Decimal = Decimal("150")

    def for_tier(self, tier: PairRate) -> Decimal:
        return self.weekend if tier == PairRate.WEEKEND else self.weekday


@dataclass(frozen=True)
class EarlyBlockMinutes:
    """Length of the early learning block, used only for statistics."""

    weekday: int = 15
    saturday: int = 25


@dataclass(frozen=True)
class KollelSchedule:
    """Allowed window and pay terms of one kollel program."""

    start: time
    end: time
    minutes_per_day: int
    monthly_salary: Decimal


@dataclass(frozen=True)
class KollelScheduleBook:
    """Kollel schedules keyed by program name."""

    schedules: Mapping[str, KollelSchedule] = field(default_factory=dict)

    def for_program(self, program_name: str) -> Optional[KollelSchedule]:
        return self.schedules.get(program_name)


def build_incentive_rates(raw: Optional[Mapping[str, Any]]) -> IncentiveRates:
    raw = raw or {}
    defaults = IncentiveRates()
    return IncentiveRates(
        weekday=Decimal(str(raw.get("weekday", defaults.weekday))),
        weekend=Decimal(str(raw.get("weekend", defaults.weekend))),
    )


def build_early_block_minutes(raw: Optional[Mapping[str, Any]]) -> EarlyBlockMinutes:
    raw = raw or {}
    defaults = EarlyBlockMinutes()
    return EarlyBlockMinutes(
        weekday=int(raw.get("weekday", defaults.weekday)),
        saturday=int(raw.get("saturday", defaults.saturday)),
    )


def build_schedule_book(raw: Optional[Mapping[str, Mapping[str, Any]]]) -> KollelScheduleBook:
    schedules: dict[str, KollelSchedule] = {}
    for name, terms in (raw or {}).items():
        start = parse_time_of_day(str(terms["start"]))
        end = parse_time_of_day(str(terms["end"]))
        minutes_per_day = terms.get("minutes_per_day")
        if minutes_per_day is None:
            minutes_per_day = minutes_since_midnight(end) - minutes_since_midnight(start)
        schedules[name] = KollelSchedule(
            start=start,
            end=end,
            minutes_per_day=int(minutes_per_day),
            monthly_salary=Decimal(str(terms["monthly_salary"])),
        )
    return KollelScheduleBook(schedules=schedules)
