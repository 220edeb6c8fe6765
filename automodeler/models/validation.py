"""
automodeler validation engine.

Runs each field's rules in order against the field's current value. The
first failing rule of a field is recorded and checking moves on to the
next field, so one call reports every invalid field at once.

The evaluator is any callable ``(value, rule_name, params) -> bool``;
``RuleEvaluator`` is the default.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from .rules import RuleEvaluator, RuleFailure, normalize_rule


__all__ = ["Evaluator", "ValidationResult", "Validator"]

Evaluator = Callable[[Any, str, Sequence[Any]], bool]


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: Dict[str, RuleFailure] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.valid


class Validator:
    """
    Applies a rule mapping to a set of values.

    Usage:
        result = Validator({"bar": [("numeric",)]}).validate({"bar": "test"})
        result.valid           # False
        result.errors["bar"]   # RuleFailure(rule="numeric", params=())
    """

    def __init__(
        self,
        rules: Mapping[str, Sequence[Any]],
        evaluator: Optional[Evaluator] = None,
    ):
        self.rules = rules
        self.evaluator = evaluator if evaluator is not None else RuleEvaluator()

    def validate(self, values: Mapping[str, Any]) -> ValidationResult:
        errors: Dict[str, RuleFailure] = {}
        for field_name, descriptors in self.rules.items():
            value = values.get(field_name)
            for descriptor in descriptors:
                rule = normalize_rule(descriptor)
                if not self.evaluator(value, rule.name, rule.params):
                    errors[field_name] = RuleFailure(rule.name, rule.params)
                    break
        return ValidationResult(valid=not errors, errors=errors)

    def messages(self, errors: Mapping[str, RuleFailure]) -> Dict[str, str]:
        """Render human-readable messages for a set of failures."""
        render = getattr(self.evaluator, "render_message", None)
        if render is None:
            return {name: f"{name} failed {failure.rule}" for name, failure in errors.items()}
        return {name: str(render(name, failure)) for name, failure in errors.items()}
