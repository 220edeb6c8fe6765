"""
Faults System (faults/)

Tests Fault, FaultDomain, Severity and the concrete model/db/config faults.
"""

import pytest

from automodeler.faults.core import Fault, FaultDomain, Severity, DOMAIN_DEFAULTS
from automodeler.faults import (
    ConfigInvalidFault,
    DatabaseConnectionFault,
    DeleteOnUnsavedError,
    DeleteOnUnsavedFault,
    ModelDeletedFault,
    ModelFault,
    ModelNotFoundFault,
    QueryFault,
    UnknownFieldError,
    UnknownFieldFault,
    UnknownRelationFault,
    UnsavedRelationFault,
    ValidationFailed,
    ValidationFault,
)
from automodeler.models.rules import RuleFailure


# ============================================================================
# Severity
# ============================================================================

class TestSeverity:

    def test_values(self):
        assert Severity.INFO == "info"
        assert Severity.WARN == "warn"
        assert Severity.ERROR == "error"
        assert Severity.FATAL == "fatal"


# ============================================================================
# FaultDomain
# ============================================================================

class TestFaultDomain:

    def test_standard_domains(self):
        assert FaultDomain.CONFIG.name == "config"
        assert FaultDomain.MODEL.name == "model"
        assert FaultDomain.VALIDATION.name == "validation"
        assert FaultDomain.DATABASE.name == "database"

    def test_every_standard_domain_has_defaults(self):
        for domain in (FaultDomain.CONFIG, FaultDomain.MODEL,
                       FaultDomain.VALIDATION, FaultDomain.DATABASE):
            assert domain in DOMAIN_DEFAULTS

    def test_domain_equality(self):
        assert FaultDomain("test") == FaultDomain("test")
        assert FaultDomain("test") != FaultDomain("other")

    def test_domain_hashable(self):
        d = FaultDomain("test")
        assert d in {d}


# ============================================================================
# Fault
# ============================================================================

class TestFault:

    def test_basic_fault(self):
        f = Fault(code="ROW_LOCKED", message="Row is locked", domain=FaultDomain.DATABASE)
        assert f.code == "ROW_LOCKED"
        assert f.message == "Row is locked"
        assert f.severity == Severity.ERROR
        assert f.retryable is True  # Default for DATABASE
        assert f.public is False

    def test_str_is_message(self):
        f = Fault(code="X", message="Something wrong", domain=FaultDomain.MODEL)
        assert str(f) == "Something wrong"

    def test_missing_code_raises(self):
        with pytest.raises(TypeError):
            Fault(message="no code", domain=FaultDomain.MODEL)

    def test_custom_domain_defaults(self):
        f = Fault(code="X", message="m", domain=FaultDomain("payments"))
        assert f.severity == Severity.ERROR
        assert f.retryable is False

    def test_to_dict(self):
        f = Fault(code="X", message="m", domain=FaultDomain.MODEL, metadata={"a": 1})
        assert f.to_dict() == {
            "code": "X",
            "message": "m",
            "domain": "model",
            "severity": "error",
            "retryable": False,
            "public": False,
            "metadata": {"a": 1},
        }

    def test_repr(self):
        f = Fault(code="X", message="m", domain=FaultDomain.MODEL)
        assert "code='X'" in repr(f)


# ============================================================================
# Model faults
# ============================================================================

class TestModelFaults:

    def test_unknown_field_message(self):
        f = UnknownFieldFault(field="foo", model="TestUser")
        assert str(f) == "Field foo does not exist in TestUser!"
        assert f.code == "UNKNOWN_FIELD"
        assert f.field == "foo"
        assert f.metadata["model"] == "TestUser"
        assert isinstance(f, ModelFault)

    def test_delete_on_unsaved_message(self):
        f = DeleteOnUnsavedFault(model="TestUser")
        assert str(f) == "Cannot delete a non-saved model TestUser!"
        assert f.code == "DELETE_ON_UNSAVED"

    def test_model_deleted(self):
        f = ModelDeletedFault(model="TestUser", pk=4)
        assert f.code == "MODEL_DELETED"
        assert f.metadata["pk"] == 4

    def test_model_not_found(self):
        assert ModelNotFoundFault("ghost").code == "MODEL_NOT_FOUND"

    def test_relation_faults(self):
        assert UnknownRelationFault("tags", "Post").code == "UNKNOWN_RELATION"
        assert UnsavedRelationFault("tags", "Post").code == "UNSAVED_RELATION"

    def test_error_style_aliases(self):
        assert UnknownFieldError is UnknownFieldFault
        assert DeleteOnUnsavedError is DeleteOnUnsavedFault
        assert ValidationFailed is ValidationFault


# ============================================================================
# Validation fault
# ============================================================================

class TestValidationFault:

    def test_carries_errors_and_messages(self):
        f = ValidationFault(
            model="TestUser",
            errors={"username": RuleFailure("not_empty", ())},
            messages={"username": "username must not be empty"},
        )
        assert f.code == "VALIDATION_FAILED"
        assert f.domain == FaultDomain.VALIDATION
        assert f.public is True
        assert f.errors["username"] == ("not_empty", ())
        assert f.messages["username"] == "username must not be empty"
        assert "username must not be empty" in str(f)

    def test_to_dict_includes_messages(self):
        f = ValidationFault(
            model="TestUser",
            errors={"email": RuleFailure("email", ())},
            messages={"email": "email must be an email address"},
        )
        assert f.to_dict()["errors"] == {"email": "email must be an email address"}

    def test_without_messages_lists_fields(self):
        f = ValidationFault(model="M", errors={"a": RuleFailure("numeric")})
        assert "a" in str(f)


# ============================================================================
# Database / config faults
# ============================================================================

class TestDatabaseAndConfigFaults:

    def test_query_fault_is_retryable(self):
        f = QueryFault(model="users", operation="select", reason="locked")
        assert f.code == "QUERY_FAILED"
        assert f.retryable is True
        assert f.metadata["operation"] == "select"

    def test_query_fault_merges_metadata(self):
        f = QueryFault(model="users", operation="select", reason="x", metadata={"sql": "SELECT 1"})
        assert f.metadata["sql"] == "SELECT 1"

    def test_connection_fault_is_fatal(self):
        f = DatabaseConnectionFault(url="sqlite:///x", reason="nope")
        assert f.code == "DB_CONNECTION_FAILED"
        assert f.severity == Severity.FATAL

    def test_config_invalid(self):
        f = ConfigInvalidFault(key="database.url", reason="bad")
        assert f.code == "CONFIG_INVALID"
        assert f.domain == FaultDomain.CONFIG
        assert f.metadata["key"] == "database.url"
