"""
automodeler relations - join-table associations.

Relations are declared statically on the model; nothing is inflected at
runtime. The join table defaults to ``{owning_table}_{name}`` and the target
table to ``name``; both are fixed when the model class is created.

    class User(Model):
        table = "users"

        class Meta:
            relations = [
                Relation("roles", owner_key="user_id", foreign_key="role_id",
                         name_column="name"),
            ]

    user.has("roles", "admin")   # join users_roles -> roles.name
    user.has("roles", 2)         # users_roles.role_id = 2
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..db.operations import Condition, Count, Delete, Insert, Join, Ordering, Select
from ..faults.domains import UnknownRelationFault, UnsavedRelationFault

if TYPE_CHECKING:
    from .base import Model

logger = logging.getLogger("automodeler.models.relations")

__all__ = ["Relation", "RelationResolver"]


@dataclass(frozen=True)
class Relation:
    """
    Static description of a many-to-many (or one-to-many) association.

    Attributes:
        name: Relation name, e.g. ``"roles"``
        owner_key: Join-table column holding the owning row's primary key
        foreign_key: Join-table column holding the related row's key
        join_table: Join table (default ``{owning_table}_{name}``)
        target_table: Related table (default ``name``)
        target_key: Key column of the related table
        name_column: Column of the related table that string values match
    """

    name: str
    owner_key: str
    foreign_key: str
    join_table: Optional[str] = None
    target_table: Optional[str] = None
    target_key: str = "id"
    name_column: Optional[str] = None

    def bind(self, owner_table: str) -> Relation:
        return replace(
            self,
            join_table=self.join_table or f"{owner_table}_{self.name}",
            target_table=self.target_table or self.name,
        )

    def _join(self) -> Join:
        return Join(
            self.join_table,
            f"{self.join_table}.{self.foreign_key}",
            f"{self.target_table}.{self.target_key}",
        )


class RelationResolver:
    """Builds and runs join-table operations for one model instance."""

    def __init__(self, model: Model):
        self.model = model

    def _relation(self, name: str) -> Relation:
        relation = self.model._relations.get(name)
        if relation is None:
            raise UnknownRelationFault(relation=name, model=type(self.model).__name__)
        return relation

    def has(self, name: str, value: Any) -> bool:
        relation = self.model._relations.get(name)
        if relation is None:
            logger.debug(f"{type(self.model).__name__} has no relation {name!r}")
            return False
        pk = self.model.pk
        if self.model.is_pk_empty():
            return False

        owner = Condition(f"{relation.join_table}.{relation.owner_key}", "=", pk)
        if isinstance(value, str) and relation.name_column:
            match = Condition(f"{relation.target_table}.{relation.name_column}", "=", value)
        else:
            match = Condition(f"{relation.join_table}.{relation.foreign_key}", "=", value)

        count = self.model._get_db().run(
            Count(relation.target_table, where=(owner, match), joins=(relation._join(),))
        )
        return count > 0

    def related(self, name: str) -> List[Dict[str, Any]]:
        relation = self._relation(name)
        if self.model.is_pk_empty():
            return []
        return self.model._get_db().run(
            Select(
                relation.target_table,
                columns=(f"{relation.target_table}.*",),
                joins=(relation._join(),),
                where=(Condition(f"{relation.join_table}.{relation.owner_key}", "=", self.model.pk),),
                order_by=(Ordering(f"{relation.target_table}.{relation.target_key}"),),
            )
        )

    def attach(self, name: str, *keys: Any) -> int:
        relation = self._relation(name)
        self._require_saved(name)
        db = self.model._get_db()
        added = 0
        for key in keys:
            link = (
                Condition(relation.owner_key, "=", self.model.pk),
                Condition(relation.foreign_key, "=", key),
            )
            if db.run(Count(relation.join_table, where=link)):
                continue
            db.run(Insert(relation.join_table, {relation.owner_key: self.model.pk, relation.foreign_key: key}))
            added += 1
        return added

    def detach(self, name: str, *keys: Any) -> int:
        relation = self._relation(name)
        self._require_saved(name)
        db = self.model._get_db()
        removed = 0
        for key in keys:
            removed += db.run(
                Delete(
                    relation.join_table,
                    where=(
                        Condition(relation.owner_key, "=", self.model.pk),
                        Condition(relation.foreign_key, "=", key),
                    ),
                )
            )
        return removed

    def _require_saved(self, name: str) -> None:
        if self.model.is_pk_empty():
            raise UnsavedRelationFault(relation=name, model=type(self.model).__name__)
