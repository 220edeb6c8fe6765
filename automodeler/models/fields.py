"""
automodeler field dictionary.

An ordered mapping of declared field names to values. The set of names is
fixed when the dictionary is built; reading, writing or unsetting any other
name raises ``UnknownFieldFault``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple

from ..faults.domains import UnknownFieldFault


__all__ = ["FieldDict"]


class FieldDict:
    """
    Ordered, fixed-schema field storage.

    Iteration yields ``(name, value)`` pairs in declaration order and always
    restarts from the first field. ``len()`` is the number of declared
    fields, not the number of fields holding a value.
    """

    __slots__ = ("_values", "_owner")

    def __init__(self, names: Iterable[str] = (), owner: str = "Model"):
        self._owner = owner
        self._values: Dict[str, Any] = {}
        for name in names:
            if name in self._values:
                raise ValueError(f"Duplicate field {name!r} in {owner}")
            self._values[name] = None

    def _check(self, name: str) -> None:
        if name not in self._values:
            raise UnknownFieldFault(field=name, model=self._owner)

    def get(self, name: str) -> Any:
        self._check(name)
        return self._values[name]

    def set(self, name: str, value: Any) -> None:
        self._check(name)
        self._values[name] = value

    def unset(self, name: str) -> None:
        """Reset a declared field back to ``None``."""
        self._check(name)
        self._values[name] = None

    def is_set(self, name: str) -> bool:
        """False for undeclared names and for declared names holding ``None``."""
        return self._values.get(name) is not None

    def declares(self, name: str) -> bool:
        return name in self._values

    def load(self, row: Mapping[str, Any]) -> None:
        """Assign declared keys from a row; undeclared columns are ignored."""
        for name in self._values:
            if name in row:
                self._values[name] = row[name]

    @property
    def names(self) -> List[str]:
        return list(self._values)

    def keys(self) -> List[str]:
        return list(self._values.keys())

    def values(self) -> List[Any]:
        return list(self._values.values())

    def items(self) -> List[Tuple[str, Any]]:
        return list(self._values.items())

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot copy in declaration order."""
        return dict(self._values)

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        return iter(list(self._values.items()))

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FieldDict):
            return self.items() == other.items()
        return NotImplemented

    def __repr__(self) -> str:
        return f"FieldDict({self._values!r})"
