"""
automodeler database engine - the query-execution capability.

Provides:
- Database: blocking connection manager delegating to a backend adapter
- Database.run(): executes operation descriptors built by models
- Module-level accessors for the default database
- Structured faults (DatabaseConnectionFault, QueryFault)
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from ..faults.domains import DatabaseConnectionFault, QueryFault
from .backends.base import AdapterCapabilities, DatabaseAdapter
from .operations import Count, Delete, Insert, Operation, Select, Update
from .sql_builder import compile_operation

logger = logging.getLogger("automodeler.db")


def _create_adapter(driver: str) -> DatabaseAdapter:
    """Factory - instantiate the correct backend adapter."""
    if driver == "sqlite":
        from .backends.sqlite import SQLiteAdapter
        return SQLiteAdapter()
    raise DatabaseConnectionFault(
        url=f"<{driver}>",
        reason=f"No adapter registered for driver: {driver}",
    )


class Database:
    """
    Blocking database engine.

    Delegates all operations to the backend adapter chosen from the URL.
    Queries use ``?`` placeholders; the adapter translates them to the
    backend's native param style.

    Usage:
        db = Database("sqlite:///app.db")
        db.connect()
        rows = db.run(Select("users", where=(Condition("id", "=", 1),)))
        db.disconnect()

    The engine connects lazily on first use, so ``connect()`` is optional.
    """

    __slots__ = (
        "_url",
        "_driver",
        "_adapter",
        "_lock",
        "_options",
        "_in_transaction",
        "_connect_retries",
        "_connect_retry_delay",
    )

    def __init__(
        self,
        url: str = "sqlite:///:memory:",
        *,
        adapter: Optional[DatabaseAdapter] = None,
        **options: Any,
    ):
        """
        Initialize database engine.

        Args:
            url: Database URL (``sqlite:///path/to/db.sqlite3`` or
                 ``sqlite:///:memory:``)
            adapter: Explicit adapter instance (overrides URL detection)
            **options: Driver-specific options passed to the adapter.
                connect_retries (int): Number of connection attempts (default 3).
                connect_retry_delay (float): Seconds between attempts (default 0.5).
        """
        self._url = url
        self._driver = self._detect_driver(url) if adapter is None else adapter.dialect
        self._adapter: DatabaseAdapter = adapter or _create_adapter(self._driver)
        self._lock = threading.RLock()
        self._connect_retries = int(options.pop("connect_retries", 3))
        self._connect_retry_delay = float(options.pop("connect_retry_delay", 0.5))
        self._options = options
        self._in_transaction = False

    @staticmethod
    def _detect_driver(url: str) -> str:
        """Detect database driver from URL scheme."""
        if url.startswith("sqlite"):
            return "sqlite"
        raise DatabaseConnectionFault(
            url=url,
            reason=f"Unsupported database URL scheme: {url}",
        )

    # ── Connection management ────────────────────────────────────────

    def connect(self) -> None:
        """Open database connection with retry logic."""
        with self._lock:
            if self._adapter.is_connected:
                return

            last_exc: Optional[Exception] = None
            for attempt in range(1, self._connect_retries + 1):
                try:
                    self._adapter.connect(self._url, **self._options)
                    logger.info(f"Database connected ({self._driver}), attempt {attempt}")
                    return
                except DatabaseConnectionFault:
                    raise
                except Exception as exc:
                    last_exc = exc
                    if attempt < self._connect_retries:
                        logger.warning(
                            f"Connection attempt {attempt} failed: {exc}, "
                            f"retrying in {self._connect_retry_delay}s..."
                        )
                        time.sleep(self._connect_retry_delay)

            raise DatabaseConnectionFault(
                url=self._url,
                reason=f"Failed after {self._connect_retries} attempts: {last_exc}",
            )

    def disconnect(self) -> None:
        """Close database connection."""
        with self._lock:
            if not self._adapter.is_connected:
                return
            try:
                self._adapter.disconnect()
                logger.info("Database disconnected")
            except Exception as exc:
                raise DatabaseConnectionFault(
                    url=self._url,
                    reason=f"Disconnect failed: {exc}",
                ) from exc

    def ensure_connected(self) -> None:
        if not self._adapter.is_connected:
            self.connect()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Context manager for transactions.

        Usage:
            with db.transaction():
                db.run(Insert(...))
                db.run(Update(...))
        """
        self.ensure_connected()
        self._adapter.begin()
        self._in_transaction = True
        try:
            yield
            self._adapter.commit()
        except Exception:
            self._adapter.rollback()
            raise
        finally:
            self._in_transaction = False

    # ── Operation execution ──────────────────────────────────────────

    def run(self, operation: Operation) -> Any:
        """
        Compile and execute an operation descriptor.

        Returns:
            Select -> list of row dicts
            Count  -> int
            Insert -> generated identifier
            Update / Delete -> affected row count
        """
        sql, params = compile_operation(operation)
        kind = type(operation).__name__.lower()
        logger.debug(f"{kind} on {operation.table}: {sql} {params}")

        if isinstance(operation, Select):
            return self._call("fetch_all", operation.table, kind, sql, params)
        if isinstance(operation, Count):
            value = self._call("fetch_val", operation.table, kind, sql, params)
            return int(value) if value else 0

        cursor = self._call("execute", operation.table, kind, sql, params)
        if isinstance(operation, Insert):
            return self._adapter.last_insert_id(cursor)
        if isinstance(operation, (Update, Delete)):
            return cursor.rowcount
        raise QueryFault(
            model=operation.table,
            operation=kind,
            reason=f"Unsupported operation: {type(operation).__name__}",
        )

    def _call(self, method: str, table: str, kind: str, sql: str, params: Sequence[Any]) -> Any:
        self.ensure_connected()
        try:
            return getattr(self._adapter, method)(self._adapter.adapt_sql(sql), params)
        except (DatabaseConnectionFault, QueryFault):
            raise
        except Exception as exc:
            raise QueryFault(
                model=table,
                operation=kind,
                reason=str(exc),
                metadata={"sql": sql[:200]},
            ) from exc

    # ── Raw query execution ──────────────────────────────────────────

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> Any:
        """
        Execute a raw SQL statement.

        Returns:
            Cursor-like object (exposes lastrowid, rowcount)

        Raises:
            QueryFault: When query execution fails
        """
        return self._call("execute", "<raw>", "execute", sql, params or [])

    def fetch_all(
        self, sql: str, params: Optional[Sequence[Any]] = None
    ) -> List[Dict[str, Any]]:
        """Execute raw query and return all rows as dicts."""
        return self._call("fetch_all", "<raw>", "fetch_all", sql, params or [])

    def fetch_one(
        self, sql: str, params: Optional[Sequence[Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """Execute raw query and return first row as dict, or None."""
        return self._call("fetch_one", "<raw>", "fetch_one", sql, params or [])

    def fetch_val(self, sql: str, params: Optional[Sequence[Any]] = None) -> Any:
        """Execute raw query and return the scalar in row 1, column 1."""
        return self._call("fetch_val", "<raw>", "fetch_val", sql, params or [])

    # ── Properties ───────────────────────────────────────────────────

    @property
    def is_connected(self) -> bool:
        return self._adapter.is_connected

    @property
    def url(self) -> str:
        return self._url

    @property
    def driver(self) -> str:
        return self._driver

    @property
    def capabilities(self) -> AdapterCapabilities:
        return self._adapter.capabilities

    @property
    def adapter(self) -> DatabaseAdapter:
        """Direct access to the underlying adapter (advanced use)."""
        return self._adapter

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction


# ── Module-level default accessor ────────────────────────────────────────────

_default_database: Optional[Database] = None
_database_registry: Dict[str, Database] = {}


def get_database(alias: Optional[str] = None) -> Database:
    """
    Get a database instance by alias, or the default.

    Raises:
        DatabaseConnectionFault: If no database is configured.
    """
    if alias and alias != "default":
        db = _database_registry.get(alias)
        if db is None:
            raise DatabaseConnectionFault(
                url=f"<alias:{alias}>",
                reason=f"No database configured with alias '{alias}'. "
                       f"Available: {list(_database_registry.keys())}",
            )
        return db

    if _default_database is None:
        raise DatabaseConnectionFault(
            url="<not configured>",
            reason=(
                "No database configured. Call configure_database() first "
                "or pass database= to the model."
            ),
        )
    return _default_database


def configure_database(
    url: str = "sqlite:///:memory:",
    *,
    alias: str = "default",
    **options: Any,
) -> Database:
    """Create, register and return a database instance."""
    db = Database(url, **options)
    set_database(db, alias=alias)
    return db


def set_database(db: Optional[Database], *, alias: str = "default") -> None:
    """Set an externally-created database as the default or by alias."""
    global _default_database
    if db is None:
        _database_registry.pop(alias, None)
    else:
        _database_registry[alias] = db
    if alias == "default":
        _default_database = db
