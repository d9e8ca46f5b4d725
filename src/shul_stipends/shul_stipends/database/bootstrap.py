"""Apply database/schema.sql and database/seed.sql to a MySQL server.

Both files are idempotent; `create_app` may apply them on every start when
AUTO_INIT_DB / AUTO_SEED_DB are set.
"""
from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig, db_config_from_mapping

logger = logging.getLogger(__name__)

_SERVER_LEVEL = re.compile(r"^\s*(CREATE\s+DATABASE|USE)\b", re.IGNORECASE)


def _open(config: DBConfig, *, select_database: bool = True):
    options = {
        "host": config.host,
        "port": config.port,
        "user": config.user,
        "password": config.password,
        "use_pure": True,
    }
    if select_database:
        options["database"] = config.database
    return closing(mysql.connector.connect(**options))


def split_sql(script: str) -> Iterator[str]:
    """Yield statements of a SQL script.

    `--` comments are dropped and `;` inside quoted literals does not end a
    statement. CREATE DATABASE / USE lines are skipped so the file applies to
    whichever database DB_CONFIG names.
    """

    statement: list[str] = []
    quote = None
    i = 0
    n = len(script)

    while i < n:
        ch = script[i]

        if quote is None and script.startswith("--", i):
            newline = script.find("\n", i)
            i = n if newline < 0 else newline
            continue

        if quote is not None:
            statement.append(ch)
            if ch == "\\" and i + 1 < n:
                statement.append(script[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
            statement.append(ch)
        elif ch == ";":
            text = "".join(statement).strip()
            statement = []
            if text and not _SERVER_LEVEL.match(text):
                yield text
        else:
            statement.append(ch)
        i += 1

    text = "".join(statement).strip()
    if text and not _SERVER_LEVEL.match(text):
        yield text


def _run_script(config: DBConfig, path: str | Path) -> int:
    statements = list(split_sql(Path(path).read_text(encoding="utf-8")))
    with _open(config) as conn:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    return len(statements)


def ensure_database_exists(db_config: dict) -> None:
    config = db_config_from_mapping(db_config)
    with _open(config, select_database=False) as conn:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config_from_mapping(db_config), schema_path)
    logger.info("Applied %s (%d statements)", Path(schema_path).name, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(db_config_from_mapping(db_config), seed_path)
    logger.info("Applied %s (%d statements)", Path(seed_path).name, count)


def list_tables(db_config: dict) -> list[str]:
    with _open(db_config_from_mapping(db_config)) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
