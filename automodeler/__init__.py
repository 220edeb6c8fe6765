"""
automodeler - a small, synchronous active-record layer.

    from automodeler import Model, Relation, configure_database

    configure_database("sqlite:///app.db")

    class Post(Model):
        table = "posts"

        class Meta:
            fields = ["id", "title", "body"]
            rules = {"title": [("not_empty",)]}

    post = Post()
    post["title"] = "Hello"
    post.save()
"""

__version__ = "0.1.0"

from .faults import (
    Fault,
    FaultDomain,
    Severity,
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

from .db import (
    Database,
    get_database,
    configure_database,
    set_database,
    Condition,
    Select,
    Count,
    Insert,
    Update,
    Delete,
)

from .models import (
    Model,
    ModelRegistry,
    ModelState,
    LookupStatus,
    FieldDict,
    Rule,
    RuleFailure,
    RuleEvaluator,
    Validator,
    ValidationResult,
    Relation,
    ModelResultSet,
)

from .auth import PasswordHasher, User

from .config import ConfigLoader, Settings, configure

__all__ = [
    "__version__",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigInvalidFault",
    "ModelFault",
    "UnknownFieldFault",
    "DeleteOnUnsavedFault",
    "ModelDeletedFault",
    "ModelNotFoundFault",
    "UnknownRelationFault",
    "UnsavedRelationFault",
    "ValidationFault",
    "DatabaseFault",
    "QueryFault",
    "DatabaseConnectionFault",
    "UnknownFieldError",
    "ValidationFailed",
    "DeleteOnUnsavedError",
    # Database
    "Database",
    "get_database",
    "configure_database",
    "set_database",
    "Condition",
    "Select",
    "Count",
    "Insert",
    "Update",
    "Delete",
    # Models
    "Model",
    "ModelRegistry",
    "ModelState",
    "LookupStatus",
    "FieldDict",
    "Rule",
    "RuleFailure",
    "RuleEvaluator",
    "Validator",
    "ValidationResult",
    "Relation",
    "ModelResultSet",
    # Auth
    "PasswordHasher",
    "User",
    # Config
    "ConfigLoader",
    "Settings",
    "configure",
]
