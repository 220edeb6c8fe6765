"""
automodeler models - active-record layer.

Provides:
- Model: one instance per table row, with ordered fields, rules and state
- FieldDict: fixed-schema field storage
- Validator / RuleEvaluator: named-rule validation
- Relation: static join-table associations
- ModelResultSet: lazy, restartable query results
"""

from .fields import FieldDict
from .state import ModelState, LookupStatus
from .rules import Rule, RuleFailure, RuleEvaluator, BaseRule, normalize_rule
from .validation import Validator, ValidationResult, Evaluator
from .relations import Relation, RelationResolver
from .results import ModelResultSet
from .base import Model, ModelMeta, ModelRegistry, Options

__all__ = [
    "Model",
    "ModelMeta",
    "ModelRegistry",
    "Options",
    "FieldDict",
    "ModelState",
    "LookupStatus",
    "Rule",
    "RuleFailure",
    "RuleEvaluator",
    "BaseRule",
    "normalize_rule",
    "Validator",
    "ValidationResult",
    "Evaluator",
    "Relation",
    "RelationResolver",
    "ModelResultSet",
]
