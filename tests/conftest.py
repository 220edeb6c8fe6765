"""
Shared test fixtures for the automodeler test suite.
"""

import pytest

from automodeler.db.engine import Database, set_database
from automodeler.models.base import Model, ModelRegistry
from automodeler.models.relations import Relation


# ============================================================================
# Models
# ============================================================================


class TestUser(Model):
    """Plain-password user over the seeded ``testusers`` table."""

    __test__ = False

    table = "testusers"

    class Meta:
        fields = ["id", "username", "password", "email", "last_login", "logins"]
        rules = {
            "username": ["not_empty"],
            "email": ["email"],
        }
        relations = [
            Relation("roles", owner_key="user_id", foreign_key="role_id", name_column="name"),
        ]
        natural_keys = ["username", "email"]


class StubHasher:
    """Deterministic stand-in for PasswordHasher."""

    def hash(self, password):
        return f"hashed:{password}"

    def verify(self, password_hash, password):
        return password_hash == f"hashed:{password}"


SCHEMA = [
    """CREATE TABLE testusers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username VARCHAR(50) NOT NULL,
        password CHAR(50) NOT NULL,
        email VARCHAR(50) NOT NULL,
        last_login INTEGER NOT NULL,
        logins INTEGER NOT NULL
    )""",
    """CREATE TABLE users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username VARCHAR(50),
        password VARCHAR(255),
        email VARCHAR(50),
        last_login INTEGER,
        logins INTEGER
    )""",
    "CREATE TABLE roles (id INTEGER PRIMARY KEY AUTOINCREMENT, name VARCHAR(32) NOT NULL)",
    "CREATE TABLE testusers_roles (user_id INTEGER NOT NULL, role_id INTEGER NOT NULL)",
    "CREATE TABLE users_roles (user_id INTEGER NOT NULL, role_id INTEGER NOT NULL)",
]


def seed(db):
    for _ in range(3):
        db.execute(
            "INSERT INTO testusers (username, password, email, last_login, logins) "
            "VALUES (?, ?, ?, ?, ?)",
            ["foobar", "barfoo", "foo@bar.com", 12345, 10],
        )
    for name in ("login", "admin"):
        db.execute("INSERT INTO roles (name) VALUES (?)", [name])
    # user 1 -> login, admin; user 2 -> login
    for user_id, role_id in ((1, 1), (1, 2), (2, 1)):
        db.execute(
            "INSERT INTO testusers_roles (user_id, role_id) VALUES (?, ?)",
            [user_id, role_id],
        )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_registry():
    """Reset ModelRegistry, its default hasher and the default database between tests."""
    old_models = ModelRegistry._models.copy()
    old_db = ModelRegistry._db
    old_hasher = ModelRegistry._hasher
    yield
    ModelRegistry._models = old_models
    ModelRegistry._db = old_db
    ModelRegistry._hasher = old_hasher
    set_database(None)


@pytest.fixture
def db():
    """In-memory SQLite database with the test schema, seeded with three users."""
    database = Database("sqlite:///:memory:")
    database.connect()
    for statement in SCHEMA:
        database.execute(statement)
    seed(database)
    ModelRegistry.set_database(database)
    yield database
    database.disconnect()


@pytest.fixture
def hasher():
    return StubHasher()
