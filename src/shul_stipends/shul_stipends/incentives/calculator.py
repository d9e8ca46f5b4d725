from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from ..core.enums import PairRate
from ..core.rates import IncentiveRates
from .model import AttendanceFact, EarningsEntry

ZERO = Decimal("0")


class BonusCalculator(ABC):
    """Calculator interface (Strategy Pattern for Handler bonuses)."""

    @abstractmethod
    def compute(self, fact: AttendanceFact, tier: PairRate) -> EarningsEntry:
        raise NotImplementedError


class StandardBonusCalculator(BonusCalculator):
    """Standard rule: one flat rate each for on time, early arrival and early learning."""

    def __init__(self, rates: Optional[IncentiveRates] = None):
        self._rates = rates or IncentiveRates()

    def compute(self, fact: AttendanceFact, tier: PairRate) -> EarningsEntry:
        rate = self._rates.for_tier(tier)

        # Showing up without being late earns the base bonus on its own.
        on_time = ZERO if fact.came_late else rate
        early = rate if fact.came_early else ZERO
        learning = rate if fact.learned_early else ZERO

        return EarningsEntry(
            user_id=fact.user_id,
            work_date=fact.work_date,
            on_time_bonus=on_time,
            early_bonus=early,
            learning_bonus=learning,
            amount_earned=on_time + early + learning,
            is_weekend=tier == PairRate.WEEKEND,
        )
