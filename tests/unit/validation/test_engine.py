"""Tests for the validation engine."""

import threading
from dataclasses import dataclass
from typing import Annotated

import pytest

from fieldcheck.config import EngineConfig, FieldcheckConfig
from fieldcheck.engine import ValidationEngine
from fieldcheck.errors import MalformedRuleSpec, RegistryFrozenError, UnknownRuleKind
from fieldcheck.registry import create_default_registry
from fieldcheck.rules import Email, MinLength, NotNull, Rule


@dataclass
class User:
    name: Annotated[str | None, NotNull(message="Name is required")]
    password: Annotated[str | None, MinLength(6, message="Password must be at least 6 characters")]
    email: Annotated[str | None, Email(message="Please provide a valid email address")]


@dataclass
class Signup:
    handle: Annotated[str | None, NotNull("Handle is required"), MinLength(3, "Handle too short"),
                      Email("Handle must be an email")]
    referrer: Annotated[str | None, NotNull("Referrer is required")]
    pin: Annotated[int | str | None, MinLength(4, "PIN too short")] = None


class Flaky:
    """Type whose second field cannot be read."""
    first: Annotated[str | None, NotNull("First is required")]
    second: Annotated[str | None, NotNull("Second is required"), MinLength(2, "Second too short")]
    third: Annotated[str | None, NotNull("Third is required")]

    def __init__(self, first, third):
        self.first = first
        self.third = third


@pytest.fixture
def engine():
    return ValidationEngine()


class TestScenarios:
    """Reference scenarios for the User type."""

    def test_valid_user(self, engine):
        user = User("John", "password123", "john@example.com")

        assert engine.validate(user) == []

    def test_short_password(self, engine):
        user = User("John", "123", "john@example.com")

        assert engine.validate(user) == ["Password must be at least 6 characters"]

    def test_missing_name_and_invalid_email(self, engine):
        user = User(None, "password123", "invalid-email")

        assert engine.validate(user) == [
            "Name is required",
            "Please provide a valid email address"
        ]

    def test_absent_password_and_email_are_not_checked(self, engine):
        user = User("John", None, None)

        assert engine.validate(user) == []


class TestOrdering:
    """Test that messages follow field order, then rule order."""

    def test_multiple_rules_on_one_field(self, engine):
        signup = Signup("ab", None)

        assert engine.validate(signup) == [
            "Handle too short",
            "Handle must be an email",
            "Referrer is required"
        ]

    def test_no_short_circuit_and_no_dedup(self):
        registry = create_default_registry()
        registry.register("always", lambda value, params: params["message"])
        engine = ValidationEngine(registry)

        @dataclass
        class Twice:
            a: Annotated[str, Rule("always", "same"), Rule("always", "same")]
            b: Annotated[str, Rule("always", "same")]

        assert engine.validate(Twice("x", "y")) == ["same", "same", "same"]

    def test_non_string_ignored_by_min_length(self, engine):
        signup = Signup("a@bcd", "friend", pin=12)

        assert engine.validate(signup) == []

    def test_idempotent(self, engine):
        signup = Signup("ab", None, pin="1")

        first = engine.validate(signup)
        second = engine.validate(signup)

        assert first == second == [
            "Handle too short",
            "Handle must be an email",
            "Referrer is required",
            "PIN too short"
        ]

    def test_reads_current_values(self, engine):
        user = User(None, "password123", "john@example.com")
        assert engine.validate(user) == ["Name is required"]

        user.name = "John"
        assert engine.validate(user) == []


class TestUnreadableFields:
    """Test recovery from fields whose value cannot be read."""

    def test_generic_message_and_continue(self, engine):
        flaky = Flaky(None, None)

        assert engine.validate(flaky) == [
            "First is required",
            "Validation error for second",
            "Third is required"
        ]

    def test_accessor_raising(self, engine):
        class Guarded:
            token: Annotated[str | None, NotNull("Token is required")]
            __field_accessors__ = {"token": lambda obj: obj.load_token()}

            def load_token(self):
                raise PermissionError("denied")

        assert engine.validate(Guarded()) == ["Validation error for token"]

    def test_custom_generic_message(self):
        engine = ValidationEngine(config=EngineConfig(generic_message="Cannot read {field}"))

        assert engine.validate(Flaky("x", "y")) == ["Cannot read second"]

    def test_report_marks_unreadable_field(self, engine):
        report = engine.validate_report(Flaky("x", "y"))

        assert report.violations[0].field == "second"
        assert report.violations[0].kind is None


class TestReport:
    """Test the detailed validation report."""

    def test_report_for_invalid_user(self, engine):
        report = engine.validate_report(User(None, "password123", "invalid-email"))

        assert report.is_valid is False
        assert report.target == "User"
        assert [(v.field, v.kind) for v in report.violations] == [
            ("name", "required"),
            ("email", "email")
        ]
        assert str(report.violations[0]) == "[required] name: Name is required"

    def test_report_to_dict(self, engine):
        report = engine.validate_report(User("John", "123", "john@example.com"))

        assert report.to_dict() == {
            "target": "User",
            "valid": False,
            "violations": [
                {
                    "field": "password",
                    "kind": "minLength",
                    "message": "Password must be at least 6 characters"
                }
            ]
        }

    def test_report_for_valid_user(self, engine):
        report = engine.validate_report(User("John", "password123", "john@example.com"))

        assert report.is_valid is True
        assert report.messages == []


class TestConfigurationErrors:
    """Test that configuration errors are raised, never reported as violations."""

    def test_unknown_kind_raises_from_validate(self, engine):
        @dataclass
        class Custom:
            value: Annotated[str, Rule("uppercase", "Must be uppercase")]

        with pytest.raises(UnknownRuleKind):
            engine.validate(Custom("abc"))

    def test_prepare_surfaces_errors_up_front(self, engine):
        @dataclass
        class NoMessage:
            value: Annotated[str | None, NotNull()]

        with pytest.raises(MalformedRuleSpec):
            engine.prepare(User, NoMessage)

    def test_prepare_valid_types(self, engine):
        engine.prepare(User, Signup)

        assert [d.name for d in engine.describe(User)] == ["name", "password", "email"]


class TestRegistryLifecycle:
    """Test registry freezing and custom rule kinds."""

    def test_first_validation_freezes_registry(self, engine):
        assert engine.registry.frozen is False

        engine.validate(User("John", "password123", "john@example.com"))

        assert engine.registry.frozen is True
        with pytest.raises(RegistryFrozenError):
            engine.registry.register("late", lambda value, params: None)

    def test_freeze_can_be_disabled(self):
        engine = ValidationEngine(config=EngineConfig(freeze_registry_on_first_use=False))

        engine.validate(User("John", "password123", "john@example.com"))

        assert engine.registry.frozen is False

    def test_custom_rule_kind(self):
        def uppercase(value, params):
            if isinstance(value, str) and value != value.upper():
                return params["message"]
            return None

        registry = create_default_registry()
        registry.register("uppercase", uppercase)
        engine = ValidationEngine(registry)

        @dataclass
        class Code:
            value: Annotated[str | None, NotNull("Code is required"), Rule("uppercase", "Code must be uppercase")]

        assert engine.validate(Code("abc")) == ["Code must be uppercase"]
        assert engine.validate(Code("ABC")) == []
        assert engine.validate(Code(None)) == ["Code is required"]

    def test_custom_rule_required_params(self):
        def max_length(value, params):
            if isinstance(value, str) and len(value) > params["maxLength"]:
                return params["message"]
            return None

        registry = create_default_registry()
        registry.register("maxLength", max_length, ["maxLength"])
        engine = ValidationEngine(registry)

        @dataclass
        class Tweet:
            text: Annotated[str, Rule("maxLength", "Tweet too long", maxLength=5)]

        assert engine.validate(Tweet("hello world")) == ["Tweet too long"]

    def test_replacement_after_prepare_is_used(self):
        registry = create_default_registry()
        engine = ValidationEngine(registry)
        engine.prepare(User)

        registry.register("required", lambda value, params: "replaced")

        assert engine.validate(User("John", "password123", "john@example.com")) == ["replaced"]

    def test_new_kind_after_failed_prepare(self):
        registry = create_default_registry()
        engine = ValidationEngine(registry)

        @dataclass
        class Shout:
            word: Annotated[str, Rule("uppercase", "Must be uppercase")]

        with pytest.raises(UnknownRuleKind):
            engine.prepare(Shout)

        registry.register("uppercase", lambda value, params: None if value.isupper() else params["message"])

        assert engine.validate(Shout("quiet")) == ["Must be uppercase"]


class TestDescriptorCache:
    """Test per-type descriptor caching."""

    def test_descriptors_cached(self, engine):
        assert engine.describe(User) is engine.describe(User)

    def test_cache_disabled(self):
        engine = ValidationEngine(config=FieldcheckConfig(engine={"cacheDescriptors": False}))

        assert engine.describe(User) is not engine.describe(User)

    def test_clear_cache(self, engine):
        first = engine.describe(User)
        engine.clear_cache()

        assert engine.describe(User) is not first


class TestConcurrency:
    """Test concurrent validation over a frozen registry."""

    def test_parallel_validation(self):
        registry = create_default_registry()
        registry.freeze()
        engine = ValidationEngine(registry)
        users = [
            User("John", "password123", "john@example.com"),
            User("John", "123", "john@example.com"),
            User(None, "password123", "invalid-email"),
        ]
        expected = [engine.validate(user) for user in users]
        results = []

        def worker():
            for _ in range(50):
                results.append([engine.validate(user) for user in users])

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 200
        assert all(result == expected for result in results)
