"""
automodeler DB backend - SQLite adapter.

The default backend, built on the standard library ``sqlite3`` driver.
The connection runs in autocommit mode; ``begin``/``commit``/``rollback``
issue explicit transaction statements.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

from .base import AdapterCapabilities, DatabaseAdapter

logger = logging.getLogger("automodeler.db.backends.sqlite")

__all__ = ["SQLiteAdapter"]


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite adapter.

    Features:
    - WAL journal mode for file databases
    - Foreign key enforcement
    - Rows returned as plain dicts
    """

    capabilities = AdapterCapabilities(
        supports_returning=False,
        supports_savepoints=True,
        param_style="qmark",
        name="sqlite",
    )

    def __init__(self):
        self._connection: Optional[sqlite3.Connection] = None
        self._in_transaction = False

    @staticmethod
    def _parse_url(url: str) -> str:
        """``sqlite:///path/to.db`` → ``path/to.db``; ``sqlite://`` → memory."""
        path = url.split("://", 1)[1] if "://" in url else url
        if path.startswith("/"):
            path = path[1:]
        return path or ":memory:"

    def connect(self, url: str, **options) -> None:
        if self._connection is not None:
            return
        db_path = self._parse_url(url)
        self._connection = sqlite3.connect(db_path, isolation_level=None, **options)
        self._connection.row_factory = sqlite3.Row
        if db_path != ":memory:":
            self._connection.execute("PRAGMA journal_mode=WAL")
        self._connection.execute("PRAGMA foreign_keys=ON")
        logger.info(f"SQLite connected: {db_path}")

    def disconnect(self) -> None:
        if self._connection is None:
            return
        self._connection.close()
        self._connection = None
        self._in_transaction = False
        logger.info("SQLite disconnected")

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise RuntimeError("Not connected")
        return self._connection

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> Any:
        return self._require_connection().execute(sql, list(params or []))

    def fetch_all(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        cursor = self._require_connection().execute(sql, list(params or []))
        return [dict(row) for row in cursor.fetchall()]

    def fetch_one(self, sql: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        cursor = self._require_connection().execute(sql, list(params or []))
        row = cursor.fetchone()
        return dict(row) if row is not None else None

    def begin(self) -> None:
        self._require_connection().execute("BEGIN")
        self._in_transaction = True

    def commit(self) -> None:
        self._require_connection().execute("COMMIT")
        self._in_transaction = False

    def rollback(self) -> None:
        self._require_connection().execute("ROLLBACK")
        self._in_transaction = False

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction
