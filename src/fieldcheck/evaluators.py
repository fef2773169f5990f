"""Built-in rule evaluators.

Each evaluator receives the field's current value and the rule parameters and
returns the rule's message when the value violates the rule, or None. An
evaluator never raises for a value it does not apply to; it simply reports no
violation.
"""

from collections.abc import Mapping
from typing import Any

REQUIRED = "required"
MIN_LENGTH = "minLength"
EMAIL = "email"


def required(value: Any, params: Mapping[str, Any]) -> str | None:
    """Fail when the value is absent. An empty string counts as present."""
    if value is None:
        return params["message"]
    return None


def min_length(value: Any, params: Mapping[str, Any]) -> str | None:
    """Fail when a string is shorter than ``minLength``. Non-strings are skipped."""
    if isinstance(value, str) and len(value) < params[MIN_LENGTH]:
        return params["message"]
    return None


def email(value: Any, params: Mapping[str, Any]) -> str | None:
    """Fail when a string does not contain ``@``."""
    if isinstance(value, str) and "@" not in value:
        return params["message"]
    return None


BUILTIN_EVALUATORS = [
    (REQUIRED, required, ()),
    (MIN_LENGTH, min_length, (MIN_LENGTH,)),
    (EMAIL, email, ()),
]
