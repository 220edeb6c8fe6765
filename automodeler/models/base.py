"""
automodeler Model base - one object per table row.

Usage:
    from automodeler.models import Model, Relation

    class User(Model):
        table = "users"

        class Meta:
            fields = ["id", "username", "password", "email", "last_login", "logins"]
            rules = {
                "username": [("not_empty",)],
                "email": [("email",)],
            }
            relations = [
                Relation("roles", owner_key="user_id", foreign_key="role_id",
                         name_column="name"),
            ]
            natural_keys = ["username", "email"]
            password_field = "password"

API:
    user = User(1)                      # hydrate by primary key
    user = User("alice")                # hydrate by username OR email
    user.set("email", "a@example.com")
    user["logins"] = 3
    user.save()                         # validate, then INSERT or UPDATE
    user.delete()                       # DELETE by primary key
    users = User().fetch_where([("logins", ">", 0)], order_by="id")
    user.has("roles", "admin")

Ad-hoc schemas need no subclass:

    thing = Model(fields=["id", "foo", "bar"], table="things")
"""

from __future__ import annotations

import json
import logging
from typing import (
    Any,
    ClassVar,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    TYPE_CHECKING,
    Union,
)

from ..db.operations import Condition, Count, Delete, Insert, Ordering, Select, Update
from ..faults.domains import (
    DeleteOnUnsavedFault,
    ModelDeletedFault,
    ModelFault,
    ModelNotFoundFault,
    UnknownFieldFault,
    ValidationFault,
)
from .fields import FieldDict
from .relations import Relation, RelationResolver
from .results import ModelResultSet
from .rules import RuleFailure, normalize_rule
from .state import LookupStatus, ModelState
from .validation import Evaluator, ValidationResult, Validator

if TYPE_CHECKING:
    from ..db.engine import Database

logger = logging.getLogger("automodeler.models")

SELECT_LIST_SEPARATOR = " - "


# ── Model Options (parsed from Meta class) ───────────────────────────────────


class Options:
    """
    Parsed model options from inner Meta class.

    Attributes:
        table_name: Database table name
        fields: Ordered declared field names
        primary_key: Name of the identity field
        rules: Field name -> ordered rule descriptors
        relations: Declared join-table relations
        natural_keys: Columns matched (OR) by non-numeric lookup keys
        password_field: Field whose assignments are hashed
        abstract: Whether the model is abstract (not registered)
    """

    __slots__ = (
        "table_name",
        "fields",
        "primary_key",
        "rules",
        "relations",
        "natural_keys",
        "password_field",
        "abstract",
    )

    def __init__(
        self,
        model_name: str,
        meta: Optional[type] = None,
        table_attr: Optional[str] = None,
        parent: Optional[Options] = None,
    ):
        def option(name: str, default: Any) -> Any:
            if meta is not None and hasattr(meta, name):
                return getattr(meta, name)
            if parent is not None:
                return getattr(parent, name)
            return default

        self.table_name: str = table_attr or (
            getattr(meta, "table", None) or getattr(meta, "table_name", None)
            if meta else None
        ) or (parent.table_name if parent else None) or model_name.lower()
        self.fields: List[str] = list(option("fields", []))
        self.primary_key: str = option("primary_key", "id")
        self.rules: Dict[str, List[Any]] = dict(option("rules", {}))
        self.relations: List[Relation] = list(option("relations", []))
        self.natural_keys: List[str] = list(option("natural_keys", []))
        self.password_field: Optional[str] = option("password_field", None)
        self.abstract: bool = getattr(meta, "abstract", False) if meta else False


# ── Model Registry ───────────────────────────────────────────────────────────


class ModelRegistry:
    """
    Global registry for all Model subclasses.

    Names are case-insensitive so ``Model.factory("testuser")`` finds
    ``TestUser``.
    """

    _models: Dict[str, Type[Model]] = {}
    _db: Optional[Database] = None
    _hasher: Any = None

    @classmethod
    def register(cls, model_cls: Type[Model]) -> None:
        cls._models[model_cls.__name__.lower()] = model_cls

    @classmethod
    def get(cls, name: str) -> Optional[Type[Model]]:
        return cls._models.get(name.lower())

    @classmethod
    def all_models(cls) -> Dict[str, Type[Model]]:
        return dict(cls._models)

    @classmethod
    def set_database(cls, db: Optional[Database]) -> None:
        """Set the database used by every model without an explicit one."""
        cls._db = db

    @classmethod
    def get_database(cls) -> Optional[Database]:
        return cls._db

    @classmethod
    def set_hasher(cls, hasher: Any) -> None:
        """Set the password hasher used by every model without an explicit one."""
        cls._hasher = hasher

    @classmethod
    def get_hasher(cls) -> Any:
        return cls._hasher

    @classmethod
    def reset(cls) -> None:
        """Clear registry (for testing)."""
        cls._models.clear()
        cls._db = None
        cls._hasher = None


# ── Model Metaclass ──────────────────────────────────────────────────────────


class ModelMeta(type):
    """
    Metaclass for automodeler models.

    Handles:
    - ``table = "..."`` extraction
    - Meta class parsing (inherited from the parent model when absent)
    - Binding relations to the owning table
    - Model registration
    """

    def __new__(
        mcs,
        name: str,
        bases: Tuple[type, ...],
        namespace: Dict[str, Any],
        **kwargs,
    ) -> ModelMeta:
        # Don't process the base Model class itself
        parents = [b for b in bases if isinstance(b, ModelMeta)]
        if not parents:
            return super().__new__(mcs, name, bases, namespace)

        meta_class = namespace.pop("Meta", None)
        table_attr = namespace.pop("table", None) or namespace.pop("table_name", None)
        parent_opts = getattr(parents[0], "_meta", None)

        opts = Options(name, meta_class, table_attr, parent_opts)

        cls = super().__new__(mcs, name, bases, namespace)
        cls._meta = opts
        cls._table_name = opts.table_name
        cls._field_names = tuple(opts.fields)
        cls._pk_name = opts.primary_key
        cls._declared_relations = {
            relation.name: relation.bind(opts.table_name) for relation in opts.relations
        }

        if not opts.abstract:
            ModelRegistry.register(cls)

        return cls


# ── Model Base Class ─────────────────────────────────────────────────────────


class Model(metaclass=ModelMeta):
    """
    Active-record base class.

    An instance owns a fixed, ordered field dictionary, a rule set and a
    lifecycle state. Field access is explicit (``get``/``set`` or item
    access); iterating yields ``(name, value)`` pairs in declaration order.
    """

    _meta: ClassVar[Options] = Options("model")
    _table_name: ClassVar[str] = ""
    _field_names: ClassVar[Tuple[str, ...]] = ()
    _pk_name: ClassVar[str] = "id"
    _declared_relations: ClassVar[Dict[str, Relation]] = {}
    _db: ClassVar[Optional[Database]] = None

    def __init__(
        self,
        key: Union[int, str, None] = None,
        *,
        fields: Optional[Sequence[str]] = None,
        table: Optional[str] = None,
        database: Optional[Database] = None,
        hasher: Any = None,
        evaluator: Optional[Evaluator] = None,
    ):
        """
        Args:
            key: Primary key (int or digit string) or natural key (other
                 string) to hydrate from; ``None`` builds an empty instance
            fields: Field names overriding the class declaration
            table: Table name overriding the class declaration
            database: Query-execution capability (defaults to the registry's)
            hasher: Object with ``hash(plaintext) -> str`` for the password field
            evaluator: Rule evaluator ``(value, rule, params) -> bool``
        """
        cls = type(self)
        names = list(fields) if fields is not None else list(cls._field_names)
        self._data = FieldDict(names, owner=cls.__name__)
        self._table = table or cls._table_name
        self._rules: Mapping[str, Sequence[Any]] = {
            name: list(descriptors) for name, descriptors in cls._meta.rules.items()
        }
        self._relations = dict(cls._declared_relations)
        self._database = database
        self._hasher = hasher
        self._evaluator = evaluator
        self._errors: Dict[str, RuleFailure] = {}
        self._validated = False
        self._state = ModelState.NEW
        self.lookup_status = LookupStatus.SKIPPED

        if key is not None:
            self._load_by_key(key)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self._table} pk={self.pk!r} state={self._state.value}>"

    # ── Collaborators ────────────────────────────────────────────────

    def _get_db(self) -> Database:
        db = self._database or type(self)._db or ModelRegistry.get_database()
        if db is None:
            from ..db.engine import get_database
            db = get_database()
        return db

    def _get_hasher(self) -> Any:
        if self._hasher is None:
            self._hasher = ModelRegistry.get_hasher()
        if self._hasher is None:
            from ..auth.hashing import PasswordHasher
            self._hasher = PasswordHasher()
        return self._hasher

    @property
    def table_name(self) -> str:
        return self._table

    # ── Primary key ──────────────────────────────────────────────────

    @property
    def pk(self) -> Any:
        if not self._data.declares(self._pk_name):
            return None
        return self._data.get(self._pk_name)

    def is_pk_empty(self) -> bool:
        return self.pk is None or self.pk == ""

    # ── Lookup ───────────────────────────────────────────────────────

    def _load_by_key(self, key: Union[int, str]) -> None:
        if isinstance(key, int) and not isinstance(key, bool):
            where: Tuple[Condition, ...] = (Condition(self._pk_name, "=", key),)
            combine = "AND"
        elif isinstance(key, str) and key.isascii() and key.isdigit():
            where = (Condition(self._pk_name, "=", int(key)),)
            combine = "AND"
        elif isinstance(key, str) and self._meta.natural_keys:
            where = tuple(Condition(column, "=", key) for column in self._meta.natural_keys)
            combine = "OR"
        else:
            logger.debug(f"{type(self).__name__}: no lookup for key {key!r}")
            self.lookup_status = LookupStatus.MISSING
            return

        self.state(ModelState.LOADING)
        rows = self._get_db().run(Select(self._table, where=where, combine=combine, limit=2))

        if len(rows) == 1:
            self._data.load(rows[0])
            self.lookup_status = LookupStatus.FOUND
            self.state(ModelState.LOADED)
            return

        self._data.load(dict.fromkeys(self._data.names))
        self.state(ModelState.NEW)
        if rows:
            self.lookup_status = LookupStatus.AMBIGUOUS
            logger.warning(
                f"{type(self).__name__}: key {key!r} matched more than one row "
                f"in {self._table}; instance left empty"
            )
        else:
            self.lookup_status = LookupStatus.MISSING

    def reload(self) -> Model:
        """
        Re-read the stored row for this primary key.

        If the row is gone, every field is reset to ``None`` and
        ``lookup_status`` is ``MISSING``.
        """
        if self.is_pk_empty():
            raise ModelFault(
                code="RELOAD_ON_UNSAVED",
                message=f"Cannot reload a non-saved model {type(self).__name__}!",
            )
        self._load_by_key(self.pk)
        return self

    # ── Field access ─────────────────────────────────────────────────

    def get(self, name: str) -> Any:
        return self._data.get(name)

    def set(self, name: str, value: Any) -> None:
        if not self._data.declares(name):
            raise UnknownFieldFault(field=name, model=type(self).__name__)
        if name == self._meta.password_field and value not in (None, ""):
            value = self._get_hasher().hash(value)
        self._data.set(name, value)

    def unset(self, name: str) -> None:
        self._data.unset(name)

    def is_set(self, name: str) -> bool:
        return self._data.is_set(name)

    def set_fields(self, values: Mapping[str, Any]) -> None:
        """Assign several fields; nothing is assigned if any name is undeclared."""
        for name in values:
            if not self._data.declares(name):
                raise UnknownFieldFault(field=name, model=type(self).__name__)
        for name, value in values.items():
            self.set(name, value)

    def to_dict(self) -> Dict[str, Any]:
        return self._data.to_dict()

    def keys(self) -> List[str]:
        return self._data.keys()

    def items(self) -> List[Tuple[str, Any]]:
        return self._data.items()

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __delitem__(self, name: str) -> None:
        self.unset(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_set(name)

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    # ── State ────────────────────────────────────────────────────────

    def state(self, new_state: Optional[ModelState] = None) -> ModelState:
        """Read the lifecycle state, or assign and return a new one."""
        if new_state is not None:
            self._state = ModelState(new_state)
        return self._state

    # ── Validation ───────────────────────────────────────────────────

    def set_rules(self, rules: Mapping[str, Sequence[Any]]) -> None:
        self._rules = rules

    def get_rules(self) -> Mapping[str, Sequence[Any]]:
        return self._rules

    def _validator(self, evaluator: Optional[Evaluator] = None) -> Validator:
        return Validator(self._rules, evaluator if evaluator is not None else self._evaluator)

    def validate(self, evaluator: Optional[Evaluator] = None) -> ValidationResult:
        """Run every rule and rebuild ``errors`` from scratch."""
        result = self._validator(evaluator).validate(self._data.to_dict())
        self._errors = dict(result.errors)
        self._validated = True
        return result

    def is_valid(self, evaluator: Optional[Evaluator] = None) -> bool:
        return self.validate(evaluator).valid

    @property
    def errors(self) -> Dict[str, RuleFailure]:
        return dict(self._errors)

    def error_messages(self) -> Dict[str, str]:
        return self._validator().messages(self._errors)

    # ── Persistence ──────────────────────────────────────────────────

    def save(self) -> Model:
        """
        Validate, then INSERT (empty primary key) or UPDATE (by primary key).

        Raises:
            ModelDeletedFault: The instance was deleted
            ValidationFault: A rule failed; nothing is written
        """
        name = type(self).__name__
        if self._state is ModelState.DELETED:
            raise ModelDeletedFault(model=name, pk=self.pk)

        validator = self._validator()
        result = self.validate()
        if not result.valid:
            raise ValidationFault(
                model=name,
                errors=result.errors,
                messages=validator.messages(result.errors),
            )

        previous = self._state
        self.state(ModelState.SAVING)
        try:
            if self.is_pk_empty():
                self._insert()
            else:
                self._update()
        except Exception:
            self.state(previous)
            raise
        self.state(ModelState.SAVED)
        return self

    def _insert(self) -> None:
        values = {k: v for k, v in self._data.items() if k != self._pk_name}
        new_id = self._get_db().run(Insert(self._table, values))
        logger.debug(f"Inserted {type(self).__name__} into {self._table}: id={new_id}")
        if new_id is not None and self._data.declares(self._pk_name):
            self._data.set(self._pk_name, new_id)

    def _update(self) -> None:
        values = {k: v for k, v in self._data.items() if k != self._pk_name}
        if not values:
            return
        self._get_db().run(
            Update(self._table, values, where=(Condition(self._pk_name, "=", self.pk),))
        )
        logger.debug(f"Updated {type(self).__name__} pk={self.pk!r} in {self._table}")

    def delete(self) -> int:
        """
        Delete the stored row.

        Returns:
            Number of rows removed (0 or 1)

        Raises:
            DeleteOnUnsavedFault: The primary key is empty; no query is issued
        """
        if self.is_pk_empty():
            raise DeleteOnUnsavedFault(model=type(self).__name__)

        previous = self._state
        self.state(ModelState.DELETING)
        try:
            removed = self._get_db().run(
                Delete(self._table, where=(Condition(self._pk_name, "=", self.pk),))
            )
        except Exception:
            self.state(previous)
            raise
        self.state(ModelState.DELETED)
        logger.debug(f"Deleted {type(self).__name__} pk={self.pk!r}: {removed} row(s)")
        return removed

    # ── Queries ──────────────────────────────────────────────────────

    def _spawn(self) -> Model:
        """Empty sibling with the same schema and collaborators and a copy of the rules."""
        sibling = type(self)(
            fields=self._data.names,
            table=self._table,
            database=self._database,
            hasher=self._hasher,
            evaluator=self._evaluator,
        )
        sibling._rules = {name: list(descriptors) for name, descriptors in self._rules.items()}
        return sibling

    def _hydrate(self, row: Mapping[str, Any]) -> Model:
        instance = self._spawn()
        instance._data.load(row)
        instance.state(ModelState.LOADED)
        return instance

    def _ordering(self, order_by: Optional[str], direction: str) -> Tuple[Ordering, ...]:
        if order_by is None:
            return ()
        self._require_field(order_by)
        return (Ordering(order_by, direction.upper()),)

    def _require_field(self, name: str) -> None:
        if not self._data.declares(name):
            raise UnknownFieldFault(field=name, model=type(self).__name__)

    def fetch_all(self, order_by: Optional[str] = None, direction: str = "ASC") -> ModelResultSet:
        """Every row of the table as hydrated instances, optionally ordered."""
        operation = Select(self._table, order_by=self._ordering(order_by, direction))
        return ModelResultSet(self._get_db(), operation, self._hydrate)

    def fetch_where(
        self,
        conditions: Sequence[Any],
        order_by: Optional[str] = None,
        direction: str = "ASC",
    ) -> ModelResultSet:
        """
        Rows matching every ``(field, operator, value)`` triple.

        Usage:
            User().fetch_where([("username", "=", "foobar"), ("logins", ">", 3)])
        """
        where = tuple(Condition.from_triple(c) for c in conditions)
        for condition in where:
            self._require_field(condition.column)
        operation = Select(self._table, where=where, order_by=self._ordering(order_by, direction))
        return ModelResultSet(self._get_db(), operation, self._hydrate)

    def select_list(self, key: str, display: Union[str, Sequence[str]]) -> Dict[Any, Any]:
        """
        Map ``key`` values to display values, e.g. for an HTML select box.

        A list of display fields is joined with ``" - "``; NULL values
        render as empty strings.
        """
        columns = [display] if isinstance(display, str) else list(display)
        for name in [key, *columns]:
            self._require_field(name)
        rows = self._get_db().run(
            Select(self._table, columns=tuple(dict.fromkeys([key, *columns])), order_by=(Ordering(key),))
        )
        if isinstance(display, str):
            return {row[key]: row[display] for row in rows}
        return {
            row[key]: SELECT_LIST_SEPARATOR.join("" if row[c] is None else str(row[c]) for c in columns)
            for row in rows
        }

    def exists(self, field: str, value: Any) -> bool:
        """Whether any row has ``field == value``."""
        self._require_field(field)
        return self._get_db().run(Count(self._table, where=(Condition(field, "=", value),))) > 0

    # ── Relationships ────────────────────────────────────────────────

    def has(self, relation: str, value: Any) -> bool:
        """Whether this row is linked to ``value`` through ``relation``'s join table."""
        return RelationResolver(self).has(relation, value)

    def related(self, relation: str) -> List[Dict[str, Any]]:
        return RelationResolver(self).related(relation)

    def attach(self, relation: str, *keys: Any) -> int:
        return RelationResolver(self).attach(relation, *keys)

    def detach(self, relation: str, *keys: Any) -> int:
        return RelationResolver(self).detach(relation, *keys)

    # ── Factory ──────────────────────────────────────────────────────

    @classmethod
    def factory(cls, name: str, key: Union[int, str, None] = None, **kwargs: Any) -> Model:
        """
        Instantiate a registered model by class name (case-insensitive).

        Usage:
            users = Model.factory("testuser").fetch_all()
        """
        model_cls = ModelRegistry.get(name)
        if model_cls is None:
            raise ModelNotFoundFault(model_name=name)
        return model_cls(key, **kwargs)

    # ── Serialization ────────────────────────────────────────────────

    def to_snapshot(self) -> Dict[str, Any]:
        """Plain, JSON-compatible record of the persisted state."""
        return {
            "model": type(self).__name__,
            "table": self._table,
            "fields": [[name, value] for name, value in self._data.items()],
            "rules": {
                name: [[rule.name, list(rule.params)] for rule in map(normalize_rule, descriptors)]
                for name, descriptors in self._rules.items()
            },
            "validated": self._validated,
            "state": self._state.value,
        }

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any], **kwargs: Any) -> Model:
        """
        Rebuild an instance from ``to_snapshot()`` output.

        The registered class named in the snapshot is used when it exists;
        otherwise the calling class. Field values are restored as stored
        (the password field is not re-hashed).

        Raises:
            ModelNotFoundFault: Called on ``Model`` itself with a snapshot
                naming a class that is not registered
        """
        name = snapshot.get("model", cls.__name__)
        model_cls = ModelRegistry.get(name)
        if model_cls is None:
            if cls is Model and name != Model.__name__:
                raise ModelNotFoundFault(model_name=name)
            model_cls = cls
        pairs = [(name, value) for name, value in snapshot["fields"]]
        instance = model_cls(fields=[name for name, _ in pairs], table=snapshot.get("table"), **kwargs)
        instance._data.load(dict(pairs))
        instance._rules = {
            name: [(rule_name, tuple(params)) for rule_name, params in descriptors]
            for name, descriptors in snapshot.get("rules", {}).items()
        }
        instance._validated = bool(snapshot.get("validated", False))
        instance._state = ModelState(snapshot.get("state", ModelState.NEW.value))
        return instance

    def dumps(self) -> str:
        """JSON text of ``to_snapshot()``; equal state gives equal text."""
        return json.dumps(self.to_snapshot(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def loads(cls, text: str, **kwargs: Any) -> Model:
        return cls.from_snapshot(json.loads(text), **kwargs)
