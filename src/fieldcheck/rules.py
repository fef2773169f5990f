"""Metadata markers attaching validation rules to fields.

Markers are placed in ``typing.Annotated`` metadata::

    @dataclass
    class User:
        name: Annotated[str | None, NotNull("Name is required")]
        password: Annotated[str | None, MinLength(6, "Password must be at least 6 characters")]

Rules on a field are evaluated in the order they appear in the annotation.
"""

from typing import Any

from .evaluators import EMAIL, MIN_LENGTH, REQUIRED
from .models import RuleSpec


class Rule:
    """Generic marker for any registered rule kind, including custom ones."""

    def __init__(self, kind: str, message: str | None = None, **params: Any):
        self.kind = kind
        self.params = dict(params)
        if message is not None:
            self.params["message"] = message

    def to_rule_spec(self) -> RuleSpec:
        return RuleSpec(self.kind, self.params)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, params={self.params!r})"


class NotNull(Rule):
    """Field value must not be None."""

    def __init__(self, message: str | None = None):
        super().__init__(REQUIRED, message)


class MinLength(Rule):
    """String value must be at least ``value`` characters long."""

    def __init__(self, value: int, message: str | None = None):
        super().__init__(MIN_LENGTH, message, **{MIN_LENGTH: value})


class Email(Rule):
    """String value must contain ``@``."""

    def __init__(self, message: str | None = None):
        super().__init__(EMAIL, message)
