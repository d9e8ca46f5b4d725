"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Rates and kollel windows are configuration (see core/rates.py), not constants.
"""

from decimal import Decimal

MONEY_PLACES = Decimal("0.01")
RATE_PLACES = Decimal("0.0001")

PAIR_LOCK_TIMEOUT_SECONDS = 10
