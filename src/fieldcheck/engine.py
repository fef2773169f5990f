"""Validation engine: extraction, registry lookup, evaluation and aggregation.

Usage:
    engine = ValidationEngine()
    errors = engine.validate(user)
    if errors:
        # errors are in field declaration order, then rule declaration order
"""

import logging
from typing import Any

from .config import EngineConfig, FieldcheckConfig
from .extractor import describe
from .models import FieldDescriptor, ValidationReport
from .registry import RuleRegistry, create_default_registry

logger = logging.getLogger(__name__)


class ValidationEngine:
    """Validates objects against the rules declared on their types.

    The engine keeps no per-call state. Descriptors are cached per type since
    a type's rule metadata never changes; instances are read fresh each call.
    """

    def __init__(self, registry: RuleRegistry | None = None,
                 config: FieldcheckConfig | EngineConfig | None = None):
        if isinstance(config, FieldcheckConfig):
            config = config.engine
        self.config = config or EngineConfig()
        self.registry = registry if registry is not None else create_default_registry()
        self._descriptors: dict[type, tuple[FieldDescriptor, ...]] = {}
        self._registry_version = self.registry.version

    def describe(self, cls: type) -> tuple[FieldDescriptor, ...]:
        """Return the field descriptors for a type, resolving every rule kind.

        Raises:
            ConfigurationError: If the type's rule metadata is invalid
        """
        if self.registry.version != self._registry_version:
            # Evaluators were added or replaced after descriptors were bound
            self.clear_cache()
            self._registry_version = self.registry.version

        descriptors = self._descriptors.get(cls)
        if descriptors is None:
            descriptors = describe(cls, self.registry)
            if self.config.cache_descriptors:
                self._descriptors[cls] = descriptors
                logger.info(f"Cached {len(descriptors)} field descriptor(s) for {cls.__qualname__}")
        return descriptors

    def prepare(self, *types: type) -> None:
        """Describe types up front so configuration errors surface during setup."""
        for cls in types:
            self.describe(cls)

    def validate_report(self, obj: Any) -> ValidationReport:
        """Validate an object and return a report of ordered violations.

        Every rule on every field is evaluated. A field whose value cannot be
        read contributes the generic message and its rules are skipped.
        """
        if self.config.freeze_registry_on_first_use:
            self.registry.freeze()

        cls = type(obj)
        descriptors = self.describe(cls)
        report = ValidationReport(target=cls.__qualname__)

        for descriptor in descriptors:
            try:
                value = descriptor.read(obj)
            except Exception as e:
                logger.debug(f"Cannot read {cls.__qualname__}.{descriptor.name}: {e!r}")
                report.add_violation(
                    descriptor.name,
                    None,
                    self.config.generic_message.format(field=descriptor.name)
                )
                continue

            for rule in descriptor.rules:
                message = rule.evaluate(value)
                if message is not None:
                    report.add_violation(descriptor.name, rule.spec.kind, message)

        logger.debug(f"Validated {cls.__qualname__}: {len(report.violations)} violation(s)")
        return report

    def validate(self, obj: Any) -> list[str]:
        """Validate an object and return its violation messages.

        Returns:
            Messages in field declaration order, then rule order; empty if valid
        """
        return self.validate_report(obj).messages

    def clear_cache(self) -> None:
        """Drop cached descriptors."""
        self._descriptors.clear()
