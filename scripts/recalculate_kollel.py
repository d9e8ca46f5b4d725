"""Rebuild one month of kollel payroll for every member who attended.

Usage: python scripts/recalculate_kollel.py YEAR MONTH [PROGRAM_NAME]
"""
from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src" / "shul_stipends"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from dotenv import load_dotenv

from config import get_settings_module

from shul_stipends.container import build_container
from shul_stipends.core.exceptions import ValidationError


def main(argv: list[str]) -> int:
    if len(argv) < 2:
        print(__doc__.strip())
        return 2

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    program_name = argv[2] if len(argv) > 2 else container.default_kollel_program
    program = container.kollel_service.find_program_by_name(program_name)
    if program is None:
        print(f"ERROR: kollel program not found: {program_name}")
        return 1

    try:
        entries = container.kollel_service.recalculate_monthly_earnings(program.program_id, int(argv[0]), int(argv[1]))
    except (ValueError, ValidationError) as e:
        print(f"ERROR: {e}")
        return 1

    for entry in entries:
        print(
            f"user={entry.user_id} minutes={entry.total_minutes_attended}/{entry.total_available_minutes} "
            f"earned={entry.amount_earned}"
        )
    print(f"OK: Recalculated {len(entries)} member(s) for {program.name} {int(argv[0]):04d}-{int(argv[1]):02d}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
