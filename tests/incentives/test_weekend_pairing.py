from datetime import date

import pytest

from shul_stipends.core.enums import PairRate
from shul_stipends.incentives.pairing import WeekendPair, pair_rate


def test_pair_is_found_from_either_day():
    sat, sun = date(2026, 3, 7), date(2026, 3, 8)
    assert WeekendPair.containing(sat) == WeekendPair.containing(sun) == WeekendPair(saturday=sat)
    assert WeekendPair(saturday=sat).days == (sat, sun)


def test_weekdays_have_no_pair():
    for day in range(2, 7):
        assert WeekendPair.containing(date(2026, 3, day)) is None


def test_lock_name_is_per_user_and_weekend():
    pair = WeekendPair(saturday=date(2026, 3, 7))
    assert pair.lock_name(4) == "weekend-pair:4:2026-03-07"
    assert pair.lock_name(4) != pair.lock_name(5)


@pytest.mark.parametrize(
    "saturday, sunday, expected",
    [
        (True, True, PairRate.WEEKEND),
        (True, False, PairRate.WEEKDAY),
        (False, True, PairRate.WEEKDAY),
        (False, False, PairRate.WEEKDAY),
    ],
)
def test_pair_rate(saturday, sunday, expected):
    assert pair_rate(saturday_present=saturday, sunday_present=sunday) == expected
