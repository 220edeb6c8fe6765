"""
automodeler faults - structured error types.

Every error raised by automodeler is a ``Fault``: an exception carrying a
stable machine-readable ``code``, a ``domain``, a ``severity`` and
``metadata``, so callers can branch on the code instead of parsing messages.
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
    DOMAIN_DEFAULTS,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    ModelFault,
    UnknownFieldFault,
    DeleteOnUnsavedFault,
    ModelDeletedFault,
    ModelNotFoundFault,
    UnknownRelationFault,
    UnsavedRelationFault,
    ValidationFault,
    DatabaseFault,
    QueryFault,
    DatabaseConnectionFault,
    UnknownFieldError,
    ValidationFailed,
    DeleteOnUnsavedError,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",
    "DOMAIN_DEFAULTS",

    # Config
    "ConfigFault",
    "ConfigInvalidFault",

    # Model
    "ModelFault",
    "UnknownFieldFault",
    "DeleteOnUnsavedFault",
    "ModelDeletedFault",
    "ModelNotFoundFault",
    "UnknownRelationFault",
    "UnsavedRelationFault",

    # Validation
    "ValidationFault",

    # Database
    "DatabaseFault",
    "QueryFault",
    "DatabaseConnectionFault",

    # Error-style aliases
    "UnknownFieldError",
    "ValidationFailed",
    "DeleteOnUnsavedError",
]
