"""
automodeler operation descriptors.

Models never write SQL. They describe what they need with these small
immutable records and hand them to ``Database.run()``, which compiles them
through ``sql_builder`` and returns:

    Select -> list of row dicts
    Count  -> int
    Insert -> generated identifier
    Update -> affected row count
    Delete -> affected row count

Usage:
    Select(
        "users",
        where=(Condition("username", "=", "alice"), Condition("email", "=", "alice")),
        combine="OR",
        limit=2,
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple, Union


__all__ = [
    "Condition",
    "Join",
    "Ordering",
    "Select",
    "Count",
    "Insert",
    "Update",
    "Delete",
    "Operation",
    "OPERATORS",
]


OPERATORS = frozenset({
    "=", "!=", "<>", "<", "<=", ">", ">=",
    "LIKE", "NOT LIKE", "IN", "NOT IN", "IS", "IS NOT",
})


@dataclass(frozen=True)
class Condition:
    """A single ``column <operator> value`` predicate."""

    column: str
    operator: str = "="
    value: Any = None

    @classmethod
    def from_triple(cls, triple: Any) -> Condition:
        """Accept a ``(field, operator, value)`` triple or an existing Condition."""
        if isinstance(triple, Condition):
            return triple
        column, operator, value = triple
        return cls(column, operator, value)


@dataclass(frozen=True)
class Join:
    """``INNER JOIN table ON left = right`` (qualified column names)."""

    table: str
    left: str
    right: str


@dataclass(frozen=True)
class Ordering:
    column: str
    direction: str = "ASC"


@dataclass(frozen=True)
class Select:
    table: str
    columns: Tuple[str, ...] = ("*",)
    where: Tuple[Condition, ...] = ()
    combine: str = "AND"
    joins: Tuple[Join, ...] = ()
    order_by: Tuple[Ordering, ...] = ()
    limit: int | None = None


@dataclass(frozen=True)
class Count:
    table: str
    where: Tuple[Condition, ...] = ()
    combine: str = "AND"
    joins: Tuple[Join, ...] = ()


@dataclass(frozen=True)
class Insert:
    table: str
    values: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Update:
    table: str
    values: Dict[str, Any] = field(default_factory=dict)
    where: Tuple[Condition, ...] = ()


@dataclass(frozen=True)
class Delete:
    table: str
    where: Tuple[Condition, ...] = ()


Operation = Union[Select, Count, Insert, Update, Delete]
