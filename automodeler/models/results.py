"""
automodeler result sets.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List, Optional

from ..db.operations import Select

if TYPE_CHECKING:
    from ..db.engine import Database
    from .base import Model


class ModelResultSet:
    """
    Lazy, restartable sequence of hydrated model instances.

    The query runs on first use and its rows are kept; every iteration
    starts again from the first row and builds fresh instances.
    """

    def __init__(self, db: Database, operation: Select, hydrate: Callable[[Dict[str, Any]], Model]):
        self._db = db
        self._operation = operation
        self._hydrate = hydrate
        self._rows: Optional[List[Dict[str, Any]]] = None

    @property
    def operation(self) -> Select:
        return self._operation

    def _fetch(self) -> List[Dict[str, Any]]:
        if self._rows is None:
            self._rows = list(self._db.run(self._operation))
        return self._rows

    def __iter__(self) -> Iterator[Model]:
        for row in self._fetch():
            yield self._hydrate(row)

    def __len__(self) -> int:
        return len(self._fetch())

    def __getitem__(self, index: int) -> Model:
        return self._hydrate(self._fetch()[index])

    def __bool__(self) -> bool:
        return bool(self._fetch())

    def first(self) -> Optional[Model]:
        rows = self._fetch()
        return self._hydrate(rows[0]) if rows else None

    def as_rows(self) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._fetch()]

    def __repr__(self) -> str:
        state = "unfetched" if self._rows is None else f"{len(self._rows)} rows"
        return f"<ModelResultSet {self._operation.table} ({state})>"
