"""
Model behaviour against a real SQLite database.

Uses the seeded ``testusers`` table from conftest: three rows with
username ``foobar``, password ``barfoo``, email ``foo@bar.com``,
last_login ``12345`` and logins ``10``.
"""

import time

import pytest

from automodeler.faults import DeleteOnUnsavedFault, UnknownFieldFault, ValidationFault
from automodeler.models.base import Model
from automodeler.models.results import ModelResultSet
from automodeler.models.state import LookupStatus, ModelState

from tests.conftest import TestUser


# ============================================================================
# Create / read / update / delete
# ============================================================================

class TestCRUD:

    def test_create_save(self, db):
        now = int(time.time())
        user = TestUser()
        user["username"] = "unit_test"
        user["password"] = "unit_test"
        user["email"] = "unit@test.com"
        user["last_login"] = now
        user["logins"] = 0
        user.save()
        assert user.to_dict() == {
            "id": user.pk,
            "username": "unit_test",
            "password": "unit_test",
            "email": "unit@test.com",
            "last_login": now,
            "logins": 0,
        }
        assert user.pk == 4
        assert TestUser(4).to_dict() == user.to_dict()

    def test_create_with_set_fields(self, db):
        user = TestUser()
        user.set_fields({
            "username": "unit_test",
            "password": "unit_test",
            "email": "unit@test.com",
            "last_login": 1,
            "logins": 0,
        })
        user.save()
        assert not user.is_pk_empty()
        assert user.state() is ModelState.SAVED

    def test_read_update_delete(self, db):
        user = TestUser(1)
        assert user["username"] == "foobar"
        user["username"] = "foobarbaz"
        user.save()

        assert TestUser(1)["username"] == "foobarbaz"
        assert user.delete() == 1
        assert user.state() is ModelState.DELETED
        assert TestUser(1).lookup_status is LookupStatus.MISSING

    def test_update_keeps_pk(self, db):
        user = TestUser("2")
        user["logins"] = 11
        user.save()
        assert user.pk == 2
        assert TestUser(2)["logins"] == 11
        assert TestUser(3)["logins"] == 10

    def test_delete_non_saved(self, db):
        with pytest.raises(DeleteOnUnsavedFault) as exc_info:
            TestUser().delete()
        assert str(exc_info.value) == "Cannot delete a non-saved model TestUser!"

    def test_invalid_property(self, db):
        user = TestUser(1)
        assert "foo" not in user
        with pytest.raises(UnknownFieldFault) as exc_info:
            user["foo"]
        assert str(exc_info.value) == "Field foo does not exist in TestUser!"
        with pytest.raises(UnknownFieldFault):
            user["foo"] = "bar"

    def test_validation_fail(self, db):
        user = TestUser()
        user["password"] = "unit_test"
        with pytest.raises(ValidationFault) as exc_info:
            user.save()
        assert exc_info.value.messages["username"] == "username must not be empty"
        assert user.errors["username"] == ("not_empty", ())
        assert len(TestUser().fetch_all()) == 3


# ============================================================================
# Lookup
# ============================================================================

class TestLookup:

    def test_ambiguous_natural_key(self, db):
        user = TestUser("foobar")
        assert user.lookup_status is LookupStatus.AMBIGUOUS
        assert user.state() is ModelState.NEW
        assert user.pk is None

    def test_unique_natural_key(self, db):
        user = TestUser(2)
        user["email"] = "two@bar.com"
        user.save()
        found = TestUser("two@bar.com")
        assert found.lookup_status is LookupStatus.FOUND
        assert found.pk == 2

    def test_missing(self, db):
        user = TestUser(99)
        assert user.lookup_status is LookupStatus.MISSING
        assert user.to_dict() == dict.fromkeys(TestUser._field_names)


# ============================================================================
# Container protocol
# ============================================================================

class TestContainer:

    def test_array_access(self, db):
        user = TestUser(1)
        assert user["username"] == "foobar"
        assert "username" in user
        assert "foobar" not in user
        user["username"] = "unit_test"
        assert user["username"] == "unit_test"
        del user["username"]
        assert user["username"] is None

    def test_iterator_access(self, db):
        expected = Model.factory("testuser", 1).to_dict()
        user = TestUser(1)
        assert list(user) == list(expected.items())
        assert [key for key, _ in user] == list(expected)


# ============================================================================
# Queries
# ============================================================================

class TestQueries:

    def test_factory(self, db):
        assert isinstance(Model.factory("testuser"), TestUser)

    @pytest.mark.parametrize("display,expected", [
        ("username", {1: "foobar", 2: "foobar", 3: "foobar"}),
        (["username", "last_login"], {1: "foobar - 12345", 2: "foobar - 12345", 3: "foobar - 12345"}),
    ])
    def test_select_list(self, db, display, expected):
        assert Model.factory("testuser").select_list("id", display) == expected

    def test_fetch_all(self, db):
        users = Model.factory("testuser").fetch_all()
        assert isinstance(users, ModelResultSet)
        assert len(users) == 3
        assert isinstance(users.first(), TestUser)

        assert Model.factory("testuser").fetch_all("id", "ASC").first().pk == 1
        assert Model.factory("testuser").fetch_all("id", "DESC").first().pk == 3

    def test_fetch_all_hydrates_loaded(self, db):
        for user in TestUser().fetch_all():
            assert user.state() is ModelState.LOADED
            assert user["email"] == "foo@bar.com"

    def test_fetched_rules_are_independent(self, db):
        first, second = list(TestUser().fetch_all())[:2]
        first.get_rules()["username"].append(("min_length", (50,)))
        assert second.get_rules()["username"] == ["not_empty"]
        assert TestUser().get_rules()["username"] == ["not_empty"]

    def test_fetch_where(self, db):
        users = Model.factory("testuser").fetch_where([("id", "=", "1")])
        assert len(users) == 1
        assert isinstance(users[0], TestUser)
        assert users[0].pk == 1

        assert len(Model.factory("testuser").fetch_where([("username", "=", "foobar")])) == 3
        assert len(TestUser().fetch_where([("id", ">", 1), ("logins", "=", 10)])) == 2

    def test_fetch_where_ordering(self, db):
        users = TestUser().fetch_where([("username", "=", "foobar")], order_by="id", direction="DESC")
        assert [u.pk for u in users] == [3, 2, 1]

    def test_exists(self, db):
        assert TestUser().exists("username", "foobar") is True
        assert TestUser().exists("username", "nobody") is False


# ============================================================================
# Serialization
# ============================================================================

class TestSerialization:

    def test_snapshot(self, db):
        snapshot = TestUser(1).to_snapshot()
        assert snapshot == {
            "model": "TestUser",
            "table": "testusers",
            "fields": [
                ["id", 1], ["username", "foobar"], ["password", "barfoo"],
                ["email", "foo@bar.com"], ["last_login", 12345], ["logins", 10],
            ],
            "rules": {"username": [["not_empty", []]], "email": [["email", []]]},
            "validated": False,
            "state": "loaded",
        }

    def test_round_trip(self, db):
        text = TestUser(1).dumps()
        restored = Model.loads(text)
        assert isinstance(restored, TestUser)
        assert restored["username"] == "foobar"
        assert restored.dumps() == text

    def test_restored_instance_can_save(self, db):
        restored = Model.loads(TestUser(1).dumps())
        restored["logins"] = 11
        restored.save()
        assert TestUser(1)["logins"] == 11
