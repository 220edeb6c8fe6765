"""
automodeler DB backend - base adapter interface.

All database backends implement this interface. The ``Database`` engine
delegates to the adapter selected by the connection URL.

The interface abstracts differences between drivers:
- Parameter placeholder style (?, %s)
- Transaction semantics
- Last-insert-id retrieval
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger("automodeler.db.backends")

__all__ = [
    "DatabaseAdapter",
    "AdapterCapabilities",
]


@dataclass
class AdapterCapabilities:
    """Describes what a specific backend supports."""

    supports_returning: bool = False
    supports_savepoints: bool = True
    param_style: str = "qmark"  # qmark (?) | format (%s)
    name: str = "base"


class DatabaseAdapter(ABC):
    """
    Abstract database adapter interface.

    All calls are blocking; the adapter owns exactly one connection.
    """

    capabilities: AdapterCapabilities = AdapterCapabilities()

    @abstractmethod
    def connect(self, url: str, **options) -> None:
        """Open a connection to the database."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Close the database connection."""
        ...

    @abstractmethod
    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> Any:
        """Execute a SQL statement. Returns a cursor-like object."""
        ...

    @abstractmethod
    def fetch_all(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Execute and return all rows as dicts."""
        ...

    @abstractmethod
    def fetch_one(self, sql: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute and return one row as dict, or None."""
        ...

    def fetch_val(self, sql: str, params: Optional[Sequence[Any]] = None) -> Any:
        """Execute and return the first column of the first row."""
        row = self.fetch_one(sql, params)
        if row is None:
            return None
        return next(iter(row.values()), None)

    # ── Transaction management ───────────────────────────────────────

    @abstractmethod
    def begin(self) -> None:
        ...

    @abstractmethod
    def commit(self) -> None:
        ...

    @abstractmethod
    def rollback(self) -> None:
        ...

    # ── SQL adaptation ───────────────────────────────────────────────

    def adapt_sql(self, sql: str) -> str:
        """
        Adapt SQL placeholders from qmark (?) to the backend's param style.

        Override this in backends that use a different param style.
        """
        return sql

    def last_insert_id(self, cursor: Any) -> Optional[int]:
        """Extract last inserted ID from cursor."""
        return getattr(cursor, "lastrowid", None)

    @property
    def is_connected(self) -> bool:
        return False

    @property
    def dialect(self) -> str:
        return self.capabilities.name
