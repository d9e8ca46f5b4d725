from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import ProgramKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Program
from .repository import ProgramRepository

_COLUMNS = "program_id, name, kind, description, is_active"


def _to_program(r: Dict[str, Any]) -> Program:
    return Program(
        program_id=int(r["program_id"]),
        name=r["name"],
        kind=ProgramKind(r["kind"]),
        description=r.get("description"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLProgramRepository(ProgramRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, program_id: int) -> Optional[Program]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM programs WHERE program_id=%s", (int(program_id),))
            r = fetchone(cur)
            return _to_program(r) if r else None

    def get_by_name(self, name: str) -> Optional[Program]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM programs WHERE name=%s", (name,))
            r = fetchone(cur)
            return _to_program(r) if r else None

    def list_active(self) -> Sequence[Program]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM programs WHERE is_active=1 ORDER BY name")
            return [_to_program(r) for r in fetchall(cur)]
