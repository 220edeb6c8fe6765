"""
automodeler database layer - blocking query execution.

Provides:
- Database: connection manager with transaction support
- Operation descriptors (Select, Count, Insert, Update, Delete)
- SQLite driver (default) behind a pluggable DatabaseAdapter
- Module-level accessors for the default database
"""

from .engine import (
    Database,
    get_database,
    configure_database,
    set_database,
)

from .operations import (
    Condition,
    Join,
    Ordering,
    Select,
    Count,
    Insert,
    Update,
    Delete,
    Operation,
)

from .backends import (
    DatabaseAdapter,
    AdapterCapabilities,
    SQLiteAdapter,
)

from ..faults.domains import (
    DatabaseConnectionFault,
    QueryFault,
)

__all__ = [
    "Database",
    "get_database",
    "configure_database",
    "set_database",
    # Operations
    "Condition",
    "Join",
    "Ordering",
    "Select",
    "Count",
    "Insert",
    "Update",
    "Delete",
    "Operation",
    # Backends
    "DatabaseAdapter",
    "AdapterCapabilities",
    "SQLiteAdapter",
    # Faults
    "DatabaseConnectionFault",
    "QueryFault",
]
