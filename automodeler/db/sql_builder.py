"""
automodeler SQL builder - safe, parameterized SQL generation.

Provides fluent builders that produce parameterized SQL and bind-parameter
lists, and ``compile_operation`` which turns an operation descriptor into
``(sql, params)``. All user values are bound as parameters; identifiers are
checked against a strict pattern and quoted.

Usage:
    from automodeler.db.sql_builder import SQLBuilder

    sql, params = (
        SQLBuilder()
        .from_table("users")
        .where(Condition("username", "=", "alice"))
        .order_by("id", "DESC")
        .limit(2)
        .build()
    )
    # sql = 'SELECT * FROM "users" WHERE ("username" = ?) ORDER BY "id" DESC LIMIT 2'
    # params = ["alice"]
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..faults.domains import QueryFault
from .operations import (
    OPERATORS,
    Condition,
    Count,
    Delete,
    Insert,
    Join,
    Operation,
    Select,
    Update,
)


__all__ = [
    "SQLBuilder",
    "InsertBuilder",
    "UpdateBuilder",
    "DeleteBuilder",
    "compile_operation",
    "quote",
]

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def quote(identifier: str) -> str:
    """Quote a (possibly ``table.column`` qualified) identifier."""
    if identifier == "*":
        return identifier
    parts = identifier.split(".")
    for part in parts:
        if part != "*" and not _IDENT_RE.match(part):
            raise QueryFault(
                model="<sql>",
                operation="quote",
                reason=f"Invalid identifier: {identifier!r}",
            )
    return ".".join(p if p == "*" else f'"{p}"' for p in parts)


def _compile_condition(cond: Condition) -> Tuple[str, List[Any]]:
    op = cond.operator.strip().upper()
    if op not in OPERATORS:
        raise QueryFault(
            model="<sql>",
            operation="where",
            reason=f"Unsupported operator: {cond.operator!r}",
        )
    column = quote(cond.column)

    if cond.value is None and op in ("=", "IS"):
        return f"{column} IS NULL", []
    if cond.value is None and op in ("!=", "<>", "IS NOT"):
        return f"{column} IS NOT NULL", []

    if op in ("IN", "NOT IN"):
        values = list(cond.value)
        if not values:
            # IN () matches nothing, NOT IN () matches everything
            return ("1 = 0" if op == "IN" else "1 = 1"), []
        placeholders = ", ".join("?" for _ in values)
        return f"{column} {op} ({placeholders})", values

    return f"{column} {op} ?", [cond.value]


def _compile_where(
    conditions: Sequence[Condition], combine: str = "AND"
) -> Tuple[str, List[Any]]:
    combine = combine.upper()
    if combine not in ("AND", "OR"):
        raise QueryFault(
            model="<sql>",
            operation="where",
            reason=f"Unsupported condition combinator: {combine!r}",
        )
    clauses: List[str] = []
    params: List[Any] = []
    for cond in conditions:
        clause, values = _compile_condition(cond)
        clauses.append(f"({clause})")
        params.extend(values)
    return f" {combine} ".join(clauses), params


class SQLBuilder:
    """
    SELECT query builder with safe parameter binding.
    """

    def __init__(self):
        self._columns: List[str] = []
        self._table: str = ""
        self._joins: List[Join] = []
        self._wheres: List[Condition] = []
        self._combine: str = "AND"
        self._order_by: List[str] = []
        self._limit_val: Optional[int] = None

    def select(self, *columns: str) -> SQLBuilder:
        """Set columns to select."""
        self._columns = [c for c in columns if c != "*"]
        return self

    def from_table(self, table: str) -> SQLBuilder:
        """Set the FROM table."""
        self._table = table
        return self

    def join(self, join: Join) -> SQLBuilder:
        """Add an INNER JOIN clause."""
        self._joins.append(join)
        return self

    def where(self, *conditions: Condition) -> SQLBuilder:
        """Add WHERE conditions."""
        self._wheres.extend(conditions)
        return self

    def combine(self, combinator: str) -> SQLBuilder:
        """Combine WHERE conditions with AND (default) or OR."""
        self._combine = combinator
        return self

    def order_by(self, column: str, direction: str = "ASC") -> SQLBuilder:
        direction = direction.upper()
        if direction not in ("ASC", "DESC"):
            raise QueryFault(
                model=self._table or "<sql>",
                operation="order_by",
                reason=f"Invalid sort direction: {direction!r}",
            )
        self._order_by.append(f"{quote(column)} {direction}")
        return self

    def limit(self, n: int) -> SQLBuilder:
        self._limit_val = n
        return self

    def _from_clause(self) -> List[str]:
        parts = [f"FROM {quote(self._table)}"]
        for join in self._joins:
            parts.append(
                f"INNER JOIN {quote(join.table)} ON {quote(join.left)} = {quote(join.right)}"
            )
        return parts

    def build(self) -> Tuple[str, List[Any]]:
        """
        Build the final SQL string and parameter list.

        Returns:
            Tuple of (sql_string, params_list)
        """
        cols = ", ".join(quote(c) for c in self._columns) if self._columns else "*"
        parts: List[str] = [f"SELECT {cols}"]
        parts.extend(self._from_clause())
        params: List[Any] = []

        if self._wheres:
            clause, params = _compile_where(self._wheres, self._combine)
            parts.append(f"WHERE {clause}")

        if self._order_by:
            parts.append("ORDER BY " + ", ".join(self._order_by))

        if self._limit_val is not None:
            parts.append(f"LIMIT {int(self._limit_val)}")

        return " ".join(parts), params

    def build_count(self) -> Tuple[str, List[Any]]:
        """Build a COUNT(*) version of this query."""
        parts: List[str] = ["SELECT COUNT(*)"]
        parts.extend(self._from_clause())
        params: List[Any] = []

        if self._wheres:
            clause, params = _compile_where(self._wheres, self._combine)
            parts.append(f"WHERE {clause}")

        return " ".join(parts), params


class InsertBuilder:
    """INSERT query builder."""

    def __init__(self, table: str):
        self._table = table
        self._columns: List[str] = []
        self._values: List[Any] = []

    def from_dict(self, data: Dict[str, Any]) -> InsertBuilder:
        """Set columns and values from a dict."""
        self._columns = list(data.keys())
        self._values = list(data.values())
        return self

    def build(self) -> Tuple[str, List[Any]]:
        if not self._columns:
            return f"INSERT INTO {quote(self._table)} DEFAULT VALUES", []
        col_names = ", ".join(quote(c) for c in self._columns)
        placeholders = ", ".join("?" for _ in self._columns)
        sql = f"INSERT INTO {quote(self._table)} ({col_names}) VALUES ({placeholders})"
        return sql, list(self._values)


class UpdateBuilder:
    """UPDATE query builder."""

    def __init__(self, table: str):
        self._table = table
        self._sets: Dict[str, Any] = {}
        self._wheres: List[Condition] = []

    def set_dict(self, data: Dict[str, Any]) -> UpdateBuilder:
        self._sets.update(data)
        return self

    def where(self, *conditions: Condition) -> UpdateBuilder:
        self._wheres.extend(conditions)
        return self

    def build(self) -> Tuple[str, List[Any]]:
        if not self._sets:
            raise QueryFault(
                model=self._table,
                operation="update",
                reason="Nothing to update",
            )
        set_parts = [f"{quote(k)} = ?" for k in self._sets]
        sql = f"UPDATE {quote(self._table)} SET {', '.join(set_parts)}"
        params = list(self._sets.values())
        if self._wheres:
            clause, where_params = _compile_where(self._wheres)
            sql += f" WHERE {clause}"
            params.extend(where_params)
        return sql, params


class DeleteBuilder:
    """DELETE query builder."""

    def __init__(self, table: str):
        self._table = table
        self._wheres: List[Condition] = []

    def where(self, *conditions: Condition) -> DeleteBuilder:
        self._wheres.extend(conditions)
        return self

    def build(self) -> Tuple[str, List[Any]]:
        sql = f"DELETE FROM {quote(self._table)}"
        params: List[Any] = []
        if self._wheres:
            clause, params = _compile_where(self._wheres)
            sql += f" WHERE {clause}"
        return sql, params


def _select_builder(op: Select | Count) -> SQLBuilder:
    builder = SQLBuilder().from_table(op.table).where(*op.where).combine(op.combine)
    for join in op.joins:
        builder.join(join)
    return builder


def compile_operation(op: Operation) -> Tuple[str, List[Any]]:
    """Compile an operation descriptor to ``(sql, params)``."""
    if isinstance(op, Select):
        builder = _select_builder(op).select(*op.columns)
        for ordering in op.order_by:
            builder.order_by(ordering.column, ordering.direction)
        if op.limit is not None:
            builder.limit(op.limit)
        return builder.build()
    if isinstance(op, Count):
        return _select_builder(op).build_count()
    if isinstance(op, Insert):
        return InsertBuilder(op.table).from_dict(op.values).build()
    if isinstance(op, Update):
        return UpdateBuilder(op.table).set_dict(op.values).where(*op.where).build()
    if isinstance(op, Delete):
        return DeleteBuilder(op.table).where(*op.where).build()
    raise QueryFault(
        model="<sql>",
        operation="compile",
        reason=f"Unsupported operation: {type(op).__name__}",
    )
