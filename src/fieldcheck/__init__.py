"""fieldcheck - declarative, metadata-driven object validation.

Rules are attached to fields with ``typing.Annotated`` markers and evaluated
in declaration order::

    from typing import Annotated
    from fieldcheck import Email, NotNull, validate

    @dataclass
    class User:
        name: Annotated[str | None, NotNull("Name is required")]
        email: Annotated[str | None, Email("Please provide a valid email address")]

    validate(User(None, "invalid-email"))
    # ['Name is required', 'Please provide a valid email address']
"""

__version__ = "0.1.0"
__description__ = "Declarative, metadata-driven object validation"

from collections.abc import Iterable
from typing import Any

from fieldcheck.config import FieldcheckConfig, configure_logging, load_config
from fieldcheck.engine import ValidationEngine
from fieldcheck.errors import (
    ConfigurationError,
    FieldcheckError,
    MalformedRuleSpec,
    RegistryFrozenError,
    UnknownRuleKind,
)
from fieldcheck.models import Evaluator, FieldDescriptor, RuleSpec, ValidationReport, Violation
from fieldcheck.registry import RuleRegistry, create_default_registry
from fieldcheck.rules import Email, MinLength, NotNull, Rule

default_registry = create_default_registry()
default_engine = ValidationEngine(default_registry)


def register_rule(kind: str, evaluator: Evaluator, required_params: Iterable[str] = ()) -> None:
    """Register a custom rule kind on the default registry.

    Must be called before the first validation; afterwards the registry is
    frozen and this raises RegistryFrozenError.
    """
    default_registry.register(kind, evaluator, required_params)


def validate(obj: Any) -> list[str]:
    """Validate an object with the default engine."""
    return default_engine.validate(obj)


def validate_report(obj: Any) -> ValidationReport:
    """Validate an object with the default engine and return a detailed report."""
    return default_engine.validate_report(obj)


def prepare(*types: type) -> None:
    """Check the rule metadata of types against the default registry."""
    default_engine.prepare(*types)


__all__ = [
    "__version__",
    "__description__",
    "ConfigurationError",
    "Email",
    "Evaluator",
    "FieldDescriptor",
    "FieldcheckConfig",
    "FieldcheckError",
    "MalformedRuleSpec",
    "MinLength",
    "NotNull",
    "RegistryFrozenError",
    "Rule",
    "RuleRegistry",
    "RuleSpec",
    "UnknownRuleKind",
    "ValidationEngine",
    "ValidationReport",
    "Violation",
    "configure_logging",
    "create_default_registry",
    "default_engine",
    "default_registry",
    "load_config",
    "prepare",
    "register_rule",
    "validate",
    "validate_report",
]
