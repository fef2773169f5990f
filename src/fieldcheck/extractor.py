"""Metadata extraction: turn a type's annotated fields into field descriptors.

Fields are discovered from class annotations, base classes first and then each
class's own annotations in source order. A field is described when its hint is
``Annotated`` with at least one rule marker, or a union with such a member
(``Annotated[str, NotNull(...)] | None``).
"""

import logging
import operator
import types
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from .errors import MalformedRuleSpec
from .models import Accessor, BoundRule, FieldDescriptor, RuleSpec
from .registry import RuleRegistry
from .rules import Rule

logger = logging.getLogger(__name__)

ACCESSORS_ATTRIBUTE = "__field_accessors__"

_UNION_ORIGINS = (Union, types.UnionType)


def describe(cls: type, registry: RuleRegistry) -> tuple[FieldDescriptor, ...]:
    """Describe the validated fields of a type.

    Every rule kind must be registered and every rule must carry the
    parameters its kind requires. Problems are raised here so that no
    instance of a misconfigured type is ever validated.

    Args:
        cls: Type whose annotations declare the rules
        registry: Registry used to resolve rule kinds

    Returns:
        Field descriptors in declaration order

    Raises:
        UnknownRuleKind: If a rule kind is not registered
        MalformedRuleSpec: If annotations cannot be resolved, a marker is
            misplaced or a rule is missing a required parameter
    """
    if not isinstance(cls, type):
        raise TypeError(f"describe() expects a type, got {type(cls).__name__}")

    owner = cls.__qualname__
    try:
        hints = get_type_hints(cls, include_extras=True)
    except Exception as e:
        raise MalformedRuleSpec(f"Cannot resolve annotations of {owner}: {e}", owner=owner) from e

    accessors = _accessor_map(cls, hints)
    descriptors = []

    for name, hint in hints.items():
        specs = _rule_specs(hint, owner, name)
        if not specs:
            continue

        rules = tuple(_bind(spec, registry, owner, name) for spec in specs)
        accessor = accessors.get(name) or operator.attrgetter(name)
        descriptors.append(FieldDescriptor(name, rules, accessor))
        logger.debug(f"{owner}.{name}: {[spec.kind for spec in specs]}")

    return tuple(descriptors)


def _rule_specs(hint: Any, owner: str, field_name: str) -> list[RuleSpec]:
    """Collect RuleSpecs from a field hint.

    Markers are read from a top-level ``Annotated`` hint or from the
    ``Annotated`` members of a top-level union. Markers anywhere deeper,
    e.g. ``list[Annotated[str, NotNull(...)]]``, are rejected.
    """
    origin = get_origin(hint)
    if origin is Annotated:
        base, *metadata = get_args(hint)
        _reject_nested(base, owner, field_name)
        return _markers_to_specs(metadata, owner, field_name)

    if origin in _UNION_ORIGINS:
        specs = []
        for member in get_args(hint):
            specs.extend(_rule_specs(member, owner, field_name))
        return specs

    _reject_nested(hint, owner, field_name)
    return []


def _markers_to_specs(metadata: list[Any], owner: str, field_name: str) -> list[RuleSpec]:
    specs = []
    for marker in metadata:
        if isinstance(marker, type):
            if issubclass(marker, (Rule, RuleSpec)):
                raise MalformedRuleSpec(
                    f"Rule marker {marker.__name__} on {owner}.{field_name} must be "
                    f"instantiated, e.g. {marker.__name__}(message=...)",
                    owner=owner,
                    field_name=field_name
                )
            continue
        to_rule_spec = getattr(marker, "to_rule_spec", None)
        if callable(to_rule_spec):
            specs.append(to_rule_spec())
    return specs


def _has_markers(hint: Any) -> bool:
    if get_origin(hint) is Annotated:
        base, *metadata = get_args(hint)
        if any(_is_marker(marker) for marker in metadata):
            return True
        return _has_markers(base)
    return any(_has_markers(arg) for arg in get_args(hint))


def _is_marker(marker: Any) -> bool:
    if isinstance(marker, type):
        return issubclass(marker, (Rule, RuleSpec))
    return callable(getattr(marker, "to_rule_spec", None))


def _reject_nested(hint: Any, owner: str, field_name: str) -> None:
    if any(_has_markers(arg) for arg in get_args(hint)):
        raise MalformedRuleSpec(
            f"Rule markers on {owner}.{field_name} are nested inside {hint!r}; "
            f"attach them to the field's own Annotated hint",
            owner=owner,
            field_name=field_name
        )


def _bind(spec: RuleSpec, registry: RuleRegistry, owner: str, field_name: str) -> BoundRule:
    entry = registry.entry(spec.kind)

    missing = [param for param in entry.required_params if param not in spec.params]
    if missing:
        raise MalformedRuleSpec(
            f"Rule '{spec.kind}' on {owner}.{field_name} is missing required "
            f"parameter(s): {', '.join(missing)}",
            owner=owner,
            field_name=field_name,
            missing=missing
        )

    return BoundRule(spec, entry.evaluator)


def _accessor_map(cls: type, hints: dict[str, Any]) -> dict[str, Accessor]:
    owner = cls.__qualname__
    accessors = getattr(cls, ACCESSORS_ATTRIBUTE, None) or {}
    if not isinstance(accessors, dict):
        raise MalformedRuleSpec(
            f"{owner}.{ACCESSORS_ATTRIBUTE} must be a dict of field name to callable",
            owner=owner
        )
    for name, accessor in accessors.items():
        if name not in hints:
            raise MalformedRuleSpec(
                f"{owner}.{ACCESSORS_ATTRIBUTE} names unknown field '{name}'",
                owner=owner,
                field_name=name
            )
        if not callable(accessor):
            raise MalformedRuleSpec(
                f"Accessor for {owner}.{name} is not callable",
                owner=owner,
                field_name=name
            )
    return accessors
