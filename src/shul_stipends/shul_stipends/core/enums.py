from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles supplied by the outer session; admins are scoped to one program family."""

    MEMBER = "member"
    HANDLER_ADMIN = "hendler_admin"
    KOLLEL_ADMIN = "kollel_admin"


class ProgramKind(str, Enum):
    """How a program pays out."""

    HANDLER = "HANDLER"
    KOLLEL = "KOLLEL"


class PairRate(str, Enum):
    """Rate tier of a Handler day, decided by the weekend pairing."""

    WEEKDAY = "WEEKDAY"
    WEEKEND = "WEEKEND"
