"""
automodeler rules - named validation predicates.

A rule descriptor names a predicate and its parameters. Any of these forms
can be declared on a model:

    "email"
    ("email",)
    ("max_length", (50,))
    Rule("regex", (r"^[a-z]+$",))

The default ``RuleEvaluator`` resolves names to the predicates below. Every
predicate except ``required``/``not_empty`` accepts empty values (``None``
or ``""``), so an optional field is only checked once it holds something.

Usage:
    evaluator = RuleEvaluator()
    evaluator("bob@example.com", "email", ())     # True
    evaluator.register("even", lambda value: int(value) % 2 == 0,
                       message=":field must be even")
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, NamedTuple, Optional, Sequence, Tuple

from ..faults.domains import ConfigInvalidFault


__all__ = [
    "Rule",
    "RuleFailure",
    "normalize_rule",
    "BaseRule",
    "RuleEvaluator",
    "is_empty",
]


class Rule(NamedTuple):
    name: str
    params: Tuple[Any, ...] = ()


class RuleFailure(NamedTuple):
    """The first rule a field failed, with the parameters it ran with."""

    rule: str
    params: Tuple[Any, ...] = ()


def normalize_rule(descriptor: Any) -> Rule:
    """Coerce any accepted descriptor form into a ``Rule``."""
    if isinstance(descriptor, Rule):
        return descriptor
    if isinstance(descriptor, str):
        return Rule(descriptor)
    if isinstance(descriptor, (list, tuple)) and descriptor and isinstance(descriptor[0], str):
        params = descriptor[1] if len(descriptor) > 1 else ()
        if not isinstance(params, (list, tuple)):
            params = (params,)
        return Rule(descriptor[0], tuple(params))
    raise ConfigInvalidFault(key="rules", reason=f"Malformed rule descriptor: {descriptor!r}")


def is_empty(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (list, tuple, dict)) and not value)


class BaseRule:
    """Base class for all rule predicates."""

    message: str = ":field is invalid"
    runs_on_empty: bool = False

    def __call__(self, value: Any, *params: Any) -> bool:
        if is_empty(value) and not self.runs_on_empty:
            return True
        return self.is_valid(value, *params)

    def is_valid(self, value: Any, *params: Any) -> bool:
        """Override in subclasses. Return True if value is valid."""
        return True

    def get_message(self, field: str, params: Sequence[Any]) -> str:
        text = self.message.replace(":field", field)
        for i, param in enumerate(params, start=1):
            text = text.replace(f":param{i}", str(param))
        return text

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class NotEmptyRule(BaseRule):
    message = ":field must not be empty"
    runs_on_empty = True

    def is_valid(self, value: Any, *params: Any) -> bool:
        if isinstance(value, str):
            return value.strip() != ""
        return not is_empty(value)


class RegexRule(BaseRule):
    """Validate against a regex pattern (given as the first parameter)."""

    message = ":field does not match the required format"

    def __init__(self, regex: Optional[str] = None, message: Optional[str] = None, flags: int = 0):
        self._compiled = re.compile(regex, flags) if regex else None
        if message:
            self.message = message

    def is_valid(self, value: Any, *params: Any) -> bool:
        compiled = self._compiled if self._compiled is not None else re.compile(params[0])
        return bool(compiled.search(str(value)))


class EmailRule(RegexRule):
    _EMAIL_RE = (
        r'^[a-zA-Z0-9.!#$%&\'*+/=?^_`{|}~-]+@'
        r'[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?'
        r'(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$'
    )

    def __init__(self):
        super().__init__(self._EMAIL_RE, message=":field must be an email address")


class URLRule(RegexRule):
    _URL_RE = (
        r'^https?://'
        r'(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)*'
        r'[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?'
        r'(?::\d+)?'
        r'(?:/[^\s]*)?$'
    )

    def __init__(self):
        super().__init__(self._URL_RE, message=":field must be a url")


class NumericRule(BaseRule):
    message = ":field must be numeric"

    def is_valid(self, value: Any, *params: Any) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, (int, float, Decimal)):
            return True
        return re.match(r"^-?\d+(\.\d+)?$", str(value).strip()) is not None


class DigitRule(RegexRule):
    def __init__(self):
        super().__init__(r"^\d+$", message=":field must be a digit")


class AlphaRule(RegexRule):
    def __init__(self):
        super().__init__(r"^[^\W\d_]+$", message=":field must contain only letters")


class AlphaNumericRule(RegexRule):
    def __init__(self):
        super().__init__(r"^[^\W_]+$", message=":field must contain only letters and numbers")


class AlphaDashRule(RegexRule):
    def __init__(self):
        super().__init__(
            r"^[-\w]+$",
            message=":field must contain only numbers, letters and dashes",
        )


class MinLengthRule(BaseRule):
    message = ":field must be at least :param1 characters long"

    def is_valid(self, value: Any, *params: Any) -> bool:
        return len(str(value)) >= int(params[0])


class MaxLengthRule(BaseRule):
    message = ":field must not exceed :param1 characters long"

    def is_valid(self, value: Any, *params: Any) -> bool:
        return len(str(value)) <= int(params[0])


class ExactLengthRule(BaseRule):
    message = ":field must be exactly :param1 characters long"

    def is_valid(self, value: Any, *params: Any) -> bool:
        return len(str(value)) == int(params[0])


class RangeRule(BaseRule):
    message = ":field must be within the range of :param1 to :param2"

    def is_valid(self, value: Any, *params: Any) -> bool:
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            return False
        return Decimal(str(params[0])) <= number <= Decimal(str(params[1]))


class EqualsRule(BaseRule):
    message = ":field must equal :param1"

    def is_valid(self, value: Any, *params: Any) -> bool:
        return value == params[0]


class InListRule(BaseRule):
    message = ":field must be one of the available options"

    def is_valid(self, value: Any, *params: Any) -> bool:
        options = params[0] if len(params) == 1 and isinstance(params[0], (list, tuple, set)) else params
        return value in options


class _CallableRule(BaseRule):
    """Wraps a user-registered callable."""

    def __init__(self, fn: Callable[..., bool], message: Optional[str], runs_on_empty: bool):
        self._fn = fn
        self.runs_on_empty = runs_on_empty
        if message:
            self.message = message

    def is_valid(self, value: Any, *params: Any) -> bool:
        return bool(self._fn(value, *params))


class RuleEvaluator:
    """
    Resolves rule names to predicates and runs them.

    Satisfies the evaluator contract ``(value, rule, params) -> bool`` used
    by the validation engine, so any callable of that shape can replace it.
    """

    def __init__(self):
        not_empty = NotEmptyRule()
        self._rules: Dict[str, BaseRule] = {
            "required": not_empty,
            "not_empty": not_empty,
            "email": EmailRule(),
            "url": URLRule(),
            "numeric": NumericRule(),
            "digit": DigitRule(),
            "alpha": AlphaRule(),
            "alpha_numeric": AlphaNumericRule(),
            "alpha_dash": AlphaDashRule(),
            "regex": RegexRule(),
            "min_length": MinLengthRule(),
            "max_length": MaxLengthRule(),
            "exact_length": ExactLengthRule(),
            "range": RangeRule(),
            "equals": EqualsRule(),
            "in_list": InListRule(),
        }

    def register(
        self,
        name: str,
        fn: Callable[..., bool],
        *,
        message: Optional[str] = None,
        runs_on_empty: bool = False,
    ) -> None:
        self._rules[name] = _CallableRule(fn, message, runs_on_empty)

    def resolve(self, name: str) -> BaseRule:
        try:
            return self._rules[name]
        except KeyError:
            raise ConfigInvalidFault(key=f"rules.{name}", reason="unknown rule") from None

    def __call__(self, value: Any, rule: str, params: Sequence[Any] = ()) -> bool:
        return self.resolve(rule)(value, *params)

    def render_message(self, field: str, failure: RuleFailure) -> str:
        rule = self._rules.get(failure.rule)
        if rule is None:
            return f"{field} failed {failure.rule}"
        return rule.get_message(field, failure.params)

    def __contains__(self, name: str) -> bool:
        return name in self._rules
