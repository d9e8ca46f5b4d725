from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from shul_stipends.core.enums import Role
from shul_stipends.core.exceptions import AuthorizationError, ValidationError

MORNING = 2


def _pay(service, role=Role.HANDLER_ADMIN, **overrides):
    kwargs = dict(
        current_role=role,
        admin_id=99,
        user_id=1,
        amount="250.50",
        payment_date=date(2026, 3, 1),
        notes="  March  ",
    )
    kwargs.update(overrides)
    return service.create_payment(**kwargs)


def test_handler_admin_records_a_payment(container):
    payment = _pay(container.payment_service)

    assert payment.amount == Decimal("250.50")
    assert payment.program_id is None
    assert payment.admin_id == 99
    assert payment.notes == "March"


@pytest.mark.parametrize("role", [Role.MEMBER, Role.KOLLEL_ADMIN])
def test_only_handler_admin_may_pay_handler_members(container, payments_repo, role):
    with pytest.raises(AuthorizationError):
        _pay(container.payment_service, role=role)
    assert payments_repo.rows == {}


@pytest.mark.parametrize("amount", ["0", "-5", "abc", None, "NaN"])
def test_amount_must_be_positive(container, amount):
    with pytest.raises(ValidationError):
        _pay(container.payment_service, amount=amount)


def test_user_is_required(container):
    with pytest.raises(ValidationError):
        _pay(container.payment_service, user_id=0)


def test_kollel_payment_needs_kollel_admin(container):
    service = container.payment_service
    with pytest.raises(AuthorizationError):
        service.create_kollel_payment(
            current_role=Role.HANDLER_ADMIN,
            admin_id=99,
            user_id=1,
            program_id=MORNING,
            amount="100",
            payment_date=date(2026, 3, 1),
        )

    payment = service.create_kollel_payment(
        current_role=Role.KOLLEL_ADMIN,
        admin_id=98,
        user_id=1,
        program_id=MORNING,
        amount="100",
        payment_date=date(2026, 3, 1),
    )
    assert payment.program_id == MORNING


def test_handler_and_kollel_payments_are_listed_separately(container):
    service = container.payment_service
    _pay(service, payment_date=date(2026, 2, 1))
    _pay(service, payment_date=date(2026, 3, 1))
    service.create_kollel_payment(
        current_role=Role.KOLLEL_ADMIN,
        admin_id=98,
        user_id=1,
        program_id=MORNING,
        amount="100",
        payment_date=date(2026, 3, 1),
    )

    assert [p.payment_date for p in service.list_user_payments(1)] == [date(2026, 3, 1), date(2026, 2, 1)]
    assert [p.amount for p in service.list_user_kollel_payments(1, MORNING)] == [Decimal("100")]


def test_delete_removes_handler_payment(container, payments_repo):
    service = container.payment_service
    payment = _pay(service)

    service.delete_payment(current_role=Role.HANDLER_ADMIN, payment_id=payment.payment_id)

    assert payments_repo.rows == {}


def test_delete_rules(container):
    service = container.payment_service
    payment = _pay(service)
    kollel = service.create_kollel_payment(
        current_role=Role.KOLLEL_ADMIN,
        admin_id=98,
        user_id=1,
        program_id=MORNING,
        amount="100",
        payment_date=date(2026, 3, 1),
    )

    with pytest.raises(AuthorizationError):
        service.delete_payment(current_role=Role.MEMBER, payment_id=payment.payment_id)
    with pytest.raises(ValidationError, match="Payment not found"):
        service.delete_payment(current_role=Role.HANDLER_ADMIN, payment_id=kollel.payment_id)
    with pytest.raises(ValidationError, match="Payment not found"):
        service.delete_payment(current_role=Role.HANDLER_ADMIN, payment_id=12345)
