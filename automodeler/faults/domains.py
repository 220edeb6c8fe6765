"""
automodeler faults - domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- MODEL faults (fields, lifecycle, relations)
- VALIDATION faults
- DATABASE faults
"""

from typing import Any, Mapping, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Invalid configuration for '{key}': {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# MODEL Faults
# ============================================================================

class ModelFault(Fault):
    """Base class for model state, field and relation faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.MODEL,
            severity=severity,
            retryable=False,
            public=public,
            metadata=metadata,
        )


class UnknownFieldFault(ModelFault):
    """A field name was read, written or unset that the model never declared."""

    def __init__(self, field: str, model: str, **kwargs):
        self.field = field
        super().__init__(
            code="UNKNOWN_FIELD",
            message=f"Field {field} does not exist in {model}!",
            metadata={"field": field, "model": model, **kwargs.get("metadata", {})},
        )


class DeleteOnUnsavedFault(ModelFault):
    """Delete requested on an instance that has no primary key value."""

    def __init__(self, model: str, **kwargs):
        super().__init__(
            code="DELETE_ON_UNSAVED",
            message=f"Cannot delete a non-saved model {model}!",
            metadata={"model": model, **kwargs.get("metadata", {})},
        )


class ModelDeletedFault(ModelFault):
    """Save requested on an instance whose row was already deleted."""

    def __init__(self, model: str, pk: Any, **kwargs):
        super().__init__(
            code="MODEL_DELETED",
            message=f"Cannot save deleted model {model} (pk={pk!r})",
            metadata={"model": model, "pk": pk, **kwargs.get("metadata", {})},
        )


class ModelNotFoundFault(ModelFault):
    """Model class not found in the registry."""

    def __init__(self, model_name: str, **kwargs):
        super().__init__(
            code="MODEL_NOT_FOUND",
            message=f"Model '{model_name}' not found in ModelRegistry",
            metadata={"model": model_name, **kwargs.get("metadata", {})},
        )


class UnknownRelationFault(ModelFault):
    """Relation name not declared on the model."""

    def __init__(self, relation: str, model: str, **kwargs):
        super().__init__(
            code="UNKNOWN_RELATION",
            message=f"Relation {relation} is not declared on {model}",
            metadata={"relation": relation, "model": model, **kwargs.get("metadata", {})},
        )


class UnsavedRelationFault(ModelFault):
    """Join-table rows cannot be written for an instance without a primary key."""

    def __init__(self, relation: str, model: str, **kwargs):
        super().__init__(
            code="UNSAVED_RELATION",
            message=f"Cannot change relation {relation} of a non-saved model {model}",
            metadata={"relation": relation, "model": model, **kwargs.get("metadata", {})},
        )


# ============================================================================
# VALIDATION Faults
# ============================================================================

class ValidationFault(Fault):
    """
    Model validation failed on save.

    ``errors`` maps each failing field to its ``RuleFailure`` descriptor and
    ``messages`` maps it to a rendered, human-readable message.
    """

    def __init__(
        self,
        model: str,
        errors: Mapping[str, Any],
        messages: Optional[Mapping[str, str]] = None,
        **kwargs,
    ):
        self.errors = dict(errors)
        self.messages = dict(messages or {})
        summary = "; ".join(self.messages.values()) or ", ".join(self.errors)
        super().__init__(
            code="VALIDATION_FAILED",
            message=f"Validation failed for {model}: {summary}",
            domain=FaultDomain.VALIDATION,
            public=True,
            metadata={"model": model, "fields": list(self.errors), **kwargs.get("metadata", {})},
        )

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["errors"] = self.messages or {k: str(v) for k, v in self.errors.items()}
        return base


# ============================================================================
# DATABASE Faults
# ============================================================================

class DatabaseFault(Fault):
    """Base class for query-execution faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        retryable: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.DATABASE,
            severity=severity,
            retryable=retryable,
            public=False,
            metadata=metadata,
        )


class QueryFault(DatabaseFault):
    """Query compilation or execution failed."""

    def __init__(self, model: str, operation: str, reason: str, **kwargs):
        super().__init__(
            code="QUERY_FAILED",
            message=f"Query on '{model}' ({operation}) failed: {reason}",
            retryable=True,
            metadata={"model": model, "operation": operation, "reason": reason, **kwargs.get("metadata", {})},
        )


class DatabaseConnectionFault(DatabaseFault):
    """Database connection failed or no database is configured."""

    def __init__(self, url: str, reason: str, **kwargs):
        super().__init__(
            code="DB_CONNECTION_FAILED",
            message=f"Database connection failed ({url}): {reason}",
            severity=Severity.FATAL,
            retryable=True,
            metadata={"url": url, "reason": reason, **kwargs.get("metadata", {})},
        )


# ── Names used by callers that think in error terms ─────────────────────────
UnknownFieldError = UnknownFieldFault
ValidationFailed = ValidationFault
DeleteOnUnsavedError = DeleteOnUnsavedFault
