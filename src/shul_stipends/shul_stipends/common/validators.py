from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_positive_amount(value: Any, field_name: str = "Amount") -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, AttributeError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    return amount


def require_month(year: Any, month: Any) -> tuple[int, int]:
    try:
        y, m = int(year), int(month)
    except (TypeError, ValueError):
        raise ValidationError("year and month are required")
    if not 1 <= m <= 12 or not 1 <= y <= 9999:
        raise ValidationError("Invalid month")
    return y, m


def optional_text(value: Optional[str]) -> Optional[str]:
    v = (value or "").strip()
    return v or None
