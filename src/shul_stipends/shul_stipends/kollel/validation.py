from __future__ import annotations

from datetime import time

from ..core.exceptions import ValidationError
from ..core.rates import KollelSchedule


def validate_kollel_times(arrival: time, departure: time, schedule: KollelSchedule) -> None:
    """Reject a session outside the program window or with a non-positive length."""

    if arrival < schedule.start:
        raise ValidationError(f"Arrival time cannot be before {schedule.start.strftime('%H:%M')}")
    if departure > schedule.end:
        raise ValidationError(f"Departure time cannot be after {schedule.end.strftime('%H:%M')}")
    if arrival >= departure:
        raise ValidationError("Departure time must be after arrival time")
