"""Exception hierarchy for fieldcheck.

Configuration errors indicate a programming mistake in a type's rule metadata
or in registry setup. They are raised at setup or extraction time and are never
converted into violation messages.
"""


class FieldcheckError(Exception):
    """Base class for all fieldcheck errors."""


class ConfigurationError(FieldcheckError):
    """Raised when rule metadata or the rule registry is misconfigured."""


class UnknownRuleKind(ConfigurationError):
    """Raised when a rule kind has no registered evaluator."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"No evaluator registered for rule kind '{kind}'")


class MalformedRuleSpec(ConfigurationError):
    """Raised when a field's rule metadata cannot be turned into a usable rule."""

    def __init__(self, message: str, owner: str = "", field_name: str = "",
                 missing: list[str] | None = None):
        self.owner = owner
        self.field_name = field_name
        self.missing = missing or []
        super().__init__(message)


class RegistryFrozenError(ConfigurationError):
    """Raised when a rule is registered after the registry has been frozen."""
