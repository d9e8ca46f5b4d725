from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest

from shul_stipends.core.exceptions import ValidationError

HANDLER = 1
MORNING = 2
FULL_MORNING = 3


def _weekdays(year: int, month: int):
    day = date(year, month, 1)
    while day.month == month:
        if day.weekday() < 5:
            yield day
        day += timedelta(days=1)


def test_full_month_of_attendance_pays_the_full_salary(container):
    service = container.kollel_service
    for day in _weekdays(2026, 2):
        service.submit_kollel_attendance(1, MORNING, day, arrival_time="08:30", departure_time="10:30")

    entry = service.calculate_kollel_earnings(1, MORNING, 2026, 2)

    assert entry.total_available_minutes == 20 * 120
    assert entry.total_minutes_attended == 20 * 120
    assert entry.rate_per_minute == Decimal("3.3333")
    assert entry.amount_earned == Decimal("8000.00")
    assert entry.month == date(2026, 2, 1)


def test_partial_attendance_is_paid_pro_rata(container):
    service = container.kollel_service
    service.submit_kollel_attendance(1, MORNING, date(2026, 2, 2), arrival_time="09:00", departure_time="10:00")
    service.submit_kollel_attendance(1, MORNING, date(2026, 2, 3), arrival_time="08:30", departure_time="10:30")

    entry = service.calculate_kollel_earnings(1, MORNING, 2026, 2)

    assert entry.total_minutes_attended == 180
    assert entry.amount_earned == Decimal("600.00")


def test_submitting_does_not_touch_payroll(container, kollel_repo):
    container.kollel_service.submit_kollel_attendance(
        1, MORNING, date(2026, 2, 2), arrival_time="08:30", departure_time="10:30"
    )
    assert kollel_repo.earnings == {}


def test_recalculation_starts_from_scratch(container, kollel_repo):
    service = container.kollel_service
    service.submit_kollel_attendance(1, MORNING, date(2026, 2, 2), arrival_time="08:30", departure_time="10:30")
    service.calculate_kollel_earnings(1, MORNING, 2026, 2)

    service.delete_kollel_attendance(1, MORNING, date(2026, 2, 2))
    entry = service.calculate_kollel_earnings(1, MORNING, 2026, 2)

    assert entry.total_minutes_attended == 0
    assert entry.amount_earned == Decimal("0.00")
    assert len(kollel_repo.earnings) == 1


def test_month_total_is_sum_of_daily_minutes(container):
    service = container.kollel_service
    service.submit_kollel_attendance(1, MORNING, date(2026, 2, 2), arrival_time="08:31", departure_time="10:02")
    service.submit_kollel_attendance(1, MORNING, date(2026, 2, 4), arrival_time="09:15:40", departure_time="10:30")
    # Other months and programs stay out of this entry.
    service.submit_kollel_attendance(1, MORNING, date(2026, 3, 2), arrival_time="08:30", departure_time="10:30")
    service.submit_kollel_attendance(1, FULL_MORNING, date(2026, 2, 2), arrival_time="09:00", departure_time="12:00")

    entry = service.calculate_kollel_earnings(1, MORNING, 2026, 2)
    daily = [
        d.minutes_attended
        for d in service.get_user_daily_attendance(1, MORNING)
        if d.work_date.month == 2
    ]

    assert entry.total_minutes_attended == sum(daily) == 91 + 75


def test_resubmitting_a_session_overwrites_it(container, kollel_repo):
    service = container.kollel_service
    service.submit_kollel_attendance(1, MORNING, date(2026, 2, 2), arrival_time="08:30", departure_time="09:00")
    fact = service.submit_kollel_attendance(1, MORNING, date(2026, 2, 2), arrival_time="09:00", departure_time="10:30")

    assert len(kollel_repo.facts) == 1
    assert service.get_kollel_attendance_by_date(1, MORNING, date(2026, 2, 2)) == fact


@pytest.mark.parametrize(
    "program_id, arrival, departure, message",
    [
        (MORNING, "08:15", "10:00", "Arrival time cannot be before 08:30"),
        (MORNING, "08:30", "10:45", "Departure time cannot be after 10:30"),
        (MORNING, "09:30", "09:30", "Departure time must be after arrival time"),
        (MORNING, "10:00", "09:00", "Departure time must be after arrival time"),
        (FULL_MORNING, "08:30", "11:00", "Arrival time cannot be before 08:45"),
        (FULL_MORNING, "09:00", "12:15", "Departure time cannot be after 12:00"),
        (MORNING, "", "10:00", "Arrival time is required"),
        (MORNING, "8.30", "10:00", "Invalid time"),
    ],
)
def test_sessions_outside_the_window_are_rejected(container, kollel_repo, program_id, arrival, departure, message):
    with pytest.raises(ValidationError, match=message):
        container.kollel_service.submit_kollel_attendance(
            1, program_id, date(2026, 2, 2), arrival_time=arrival, departure_time=departure
        )
    assert kollel_repo.facts == {}


def test_full_morning_kollel_accepts_its_own_window(container):
    fact = container.kollel_service.submit_kollel_attendance(
        1, FULL_MORNING, date(2026, 2, 2), arrival_time="08:45", departure_time="12:00"
    )
    assert fact.program_id == FULL_MORNING


def test_handler_program_is_not_a_kollel(container):
    service = container.kollel_service
    assert service.find_program(HANDLER) is None
    assert service.find_program_by_name("Handler") is None
    with pytest.raises(ValidationError, match="Kollel program not found"):
        service.submit_kollel_attendance(1, HANDLER, date(2026, 2, 2), arrival_time="08:30", departure_time="10:30")


@pytest.mark.parametrize("year, month", [(2026, 13), (2026, 0), (0, 1), (10000, 1)])
def test_invalid_month_is_rejected(container, year, month):
    with pytest.raises(ValidationError, match="Invalid month"):
        container.kollel_service.calculate_kollel_earnings(1, MORNING, year, month)
    with pytest.raises(ValidationError, match="Invalid month"):
        container.kollel_service.recalculate_monthly_earnings(MORNING, year, month)


def test_batch_recalculation_covers_every_member_who_attended(container):
    service = container.kollel_service
    service.submit_kollel_attendance(1, MORNING, date(2026, 2, 2), arrival_time="08:30", departure_time="10:30")
    service.submit_kollel_attendance(2, MORNING, date(2026, 2, 3), arrival_time="09:30", departure_time="10:30")
    service.submit_kollel_attendance(3, MORNING, date(2026, 3, 2), arrival_time="08:30", departure_time="10:30")

    entries = service.recalculate_monthly_earnings(MORNING, 2026, 2)

    assert [(e.user_id, e.amount_earned) for e in entries] == [
        (1, Decimal("400.00")),
        (2, Decimal("200.00")),
    ]


def test_monthly_earnings_list_newest_first(container):
    service = container.kollel_service
    service.submit_kollel_attendance(1, MORNING, date(2026, 2, 2), arrival_time="08:30", departure_time="10:30")
    service.calculate_kollel_earnings(1, MORNING, 2026, 1)
    service.calculate_kollel_earnings(1, MORNING, 2026, 2)

    assert [e.month for e in service.list_monthly_earnings(1, MORNING)] == [date(2026, 2, 1), date(2026, 1, 1)]
