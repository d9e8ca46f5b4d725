from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str


def db_config_from_mapping(raw: Mapping[str, Any]) -> DBConfig:
    """Build a DBConfig from a settings DB_CONFIG dict, filling the usual defaults."""
    return DBConfig(
        host=str(raw.get("host", "localhost")),
        port=int(raw.get("port", 3306)),
        user=str(raw.get("user", "root")),
        password=str(raw.get("password", "")),
        database=str(raw.get("database", "shul_stipends")),
    )


class DatabaseConnection:
    """Process-wide connection factory.

    Outside a transaction every repository call opens and closes its own
    connection. `transaction()` pins one connection to the calling thread so
    that all cursors opened inside the block share it.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._local = threading.local()

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    def connect(self):
        cfg = self._config
        return mysql.connector.connect(
            host=cfg.host,
            port=cfg.port,
            user=cfg.user,
            password=cfg.password,
            database=cfg.database,
        )

    @property
    def bound(self):
        """Connection pinned by the enclosing `transaction()`, or None."""
        return getattr(self._local, "conn", None)

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        outer = self.bound
        if outer is not None:
            yield outer
            return

        conn = self.connect()
        conn.start_transaction()
        self._local.conn = conn
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        else:
            conn.commit()
        finally:
            self._local.conn = None
            conn.close()
