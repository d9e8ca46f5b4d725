from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .core.rates import build_early_block_minutes, build_incentive_rates, build_schedule_book
from .database.connection import DatabaseConnection, db_config_from_mapping
from .incentives.calculator import StandardBonusCalculator
from .incentives.mysql_attendance_repository import MySQLHandlerAttendanceRepository
from .incentives.repository import HandlerAttendanceRepository
from .incentives.service import IncentiveService
from .kollel.mysql_kollel_repository import MySQLKollelRepository
from .kollel.repository import KollelRepository
from .kollel.service import KollelService
from .ledger.service import LedgerService
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentService
from .programs.mysql_program_repository import MySQLProgramRepository
from .programs.repository import ProgramRepository

DEFAULT_KOLLEL_PROGRAM = "Keter Eliyahu Morning Kollel"


@dataclass(frozen=True)
class Container:
    programs_repo: ProgramRepository
    handler_repo: HandlerAttendanceRepository
    kollel_repo: KollelRepository
    payments_repo: PaymentRepository

    incentive_service: IncentiveService
    kollel_service: KollelService
    payment_service: PaymentService
    ledger_service: LedgerService

    default_kollel_program: str = DEFAULT_KOLLEL_PROGRAM


def assemble(
    *,
    programs_repo: ProgramRepository,
    handler_repo: HandlerAttendanceRepository,
    kollel_repo: KollelRepository,
    payments_repo: PaymentRepository,
    settings: Optional[Any] = None,
) -> Container:
    """Wire services over the given repositories, with rates taken from `settings`."""

    rates = build_incentive_rates(getattr(settings, "HANDLER_RATES", None))
    early_block = build_early_block_minutes(getattr(settings, "EARLY_BLOCK_MINUTES", None))
    schedules = build_schedule_book(getattr(settings, "KOLLEL_SCHEDULES", None))

    incentive_service = IncentiveService(
        handler_repo,
        calculator=StandardBonusCalculator(rates),
        early_block=early_block,
    )
    kollel_service = KollelService(kollel_repo, programs_repo, schedules)
    payment_service = PaymentService(payments_repo)
    ledger_service = LedgerService(handler_repo, kollel_repo, payments_repo, kollel_service)

    return Container(
        programs_repo=programs_repo,
        handler_repo=handler_repo,
        kollel_repo=kollel_repo,
        payments_repo=payments_repo,
        incentive_service=incentive_service,
        kollel_service=kollel_service,
        payment_service=payment_service,
        ledger_service=ledger_service,
        default_kollel_program=getattr(settings, "DEFAULT_KOLLEL_PROGRAM", DEFAULT_KOLLEL_PROGRAM),
    )


def build_container(*, db_config: dict, settings: Optional[Any] = None) -> Container:
    conn = DatabaseConnection.get_instance(db_config_from_mapping(db_config))

    return assemble(
        programs_repo=MySQLProgramRepository(conn),
        handler_repo=MySQLHandlerAttendanceRepository(conn),
        kollel_repo=MySQLKollelRepository(conn),
        payments_repo=MySQLPaymentRepository(conn),
        settings=settings,
    )
