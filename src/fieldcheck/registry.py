"""Rule registry mapping rule kinds to their evaluators.

The registry follows a build-then-freeze discipline: all registrations happen
during setup, after which ``freeze()`` makes it read-only so it can be shared
by any number of validation calls without locking.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .errors import RegistryFrozenError, UnknownRuleKind
from .evaluators import BUILTIN_EVALUATORS
from .models import Evaluator

logger = logging.getLogger(__name__)

MESSAGE_PARAM = "message"


@dataclass(frozen=True)
class RegistryEntry:
    """Evaluator registered for a rule kind."""
    kind: str
    evaluator: Evaluator
    required_params: tuple[str, ...] = (MESSAGE_PARAM,)


class RuleRegistry:
    """Mapping from rule kind to evaluator."""

    def __init__(self):
        self._entries: dict[str, RegistryEntry] = {}
        self._frozen = False
        self._version = 0

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def version(self) -> int:
        """Incremented on every registration; lets engines drop stale bindings."""
        return self._version

    def register(self, kind: str, evaluator: Evaluator,
                 required_params: Iterable[str] = ()) -> None:
        """Add or replace the evaluator for a rule kind.

        Args:
            kind: Rule kind identifier referenced by RuleSpecs
            evaluator: Callable ``(value, params) -> message | None``
            required_params: Parameter names every RuleSpec of this kind must
                carry, in addition to ``message``

        Raises:
            RegistryFrozenError: If the registry has already been frozen
            TypeError: If the evaluator is not callable or required_params is a string
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register rule kind '{kind}': registry is frozen"
            )
        if not callable(evaluator):
            raise TypeError(f"Evaluator for rule kind '{kind}' must be callable")
        if isinstance(required_params, str):
            raise TypeError(
                f"required_params for rule kind '{kind}' must be a sequence of names, not a string"
            )

        params = (MESSAGE_PARAM,) + tuple(p for p in required_params if p != MESSAGE_PARAM)
        if kind in self._entries:
            logger.warning(f"Replacing evaluator for rule kind '{kind}'")
        self._entries[kind] = RegistryEntry(kind, evaluator, params)
        self._version += 1
        logger.debug(f"Registered rule kind '{kind}' (required params: {list(params)})")

    def entry(self, kind: str) -> RegistryEntry:
        """Return the full registry entry for a rule kind."""
        try:
            return self._entries[kind]
        except KeyError:
            raise UnknownRuleKind(kind) from None

    def resolve(self, kind: str) -> Evaluator:
        """Return the evaluator for a rule kind.

        Raises:
            UnknownRuleKind: If nothing is registered for the kind
        """
        return self.entry(kind).evaluator

    def freeze(self) -> None:
        """End the setup phase. Further registrations raise."""
        if not self._frozen:
            self._frozen = True
            logger.info(f"Rule registry frozen with {len(self._entries)} kinds: {self.kinds()}")

    def kinds(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, kind: object) -> bool:
        return kind in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def create_default_registry() -> RuleRegistry:
    """Create a registry populated with the built-in evaluators."""
    registry = RuleRegistry()
    for kind, evaluator, required_params in BUILTIN_EVALUATORS:
        registry.register(kind, evaluator, required_params)
    return registry
