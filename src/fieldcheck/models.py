"""Data models for rule metadata and validation output."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

Accessor = Callable[[Any], Any]
Evaluator = Callable[[Any, Mapping[str, Any]], str | None]


@dataclass(frozen=True)
class RuleSpec:
    """A single declared validation rule attached to a field."""
    kind: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Detach from the caller's dict so the spec cannot change after attachment
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __hash__(self):
        # params values may be unhashable; keys are always strings
        return hash((self.kind, frozenset(self.params)))

    def to_rule_spec(self) -> "RuleSpec":
        return self


@dataclass(frozen=True)
class BoundRule:
    """A RuleSpec paired with the evaluator resolved for its kind."""
    spec: RuleSpec
    evaluator: Evaluator

    def evaluate(self, value: Any) -> str | None:
        return self.evaluator(value, self.spec.params)


@dataclass(frozen=True)
class FieldDescriptor:
    """A field's name, its ordered rules and the capability to read its value."""
    name: str
    rules: tuple[BoundRule, ...]
    accessor: Accessor

    @property
    def specs(self) -> tuple[RuleSpec, ...]:
        return tuple(rule.spec for rule in self.rules)

    def read(self, obj: Any) -> Any:
        return self.accessor(obj)


@dataclass
class Violation:
    """A single violation found during validation."""
    field: str
    kind: str | None
    message: str

    def __str__(self) -> str:
        if self.kind:
            return f"[{self.kind}] {self.field}: {self.message}"
        return f"{self.field}: {self.message}"


@dataclass
class ValidationReport:
    """Ordered violations produced by one validation call."""
    target: str
    violations: list[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def messages(self) -> list[str]:
        return [violation.message for violation in self.violations]

    def add_violation(self, field_name: str, kind: str | None, message: str) -> None:
        """Append a violation, keeping declaration order."""
        self.violations.append(Violation(field_name, kind, message))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "target": self.target,
            "valid": self.is_valid,
            "violations": [
                {
                    "field": violation.field,
                    "kind": violation.kind,
                    "message": violation.message
                }
                for violation in self.violations
            ]
        }
