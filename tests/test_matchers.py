"""Tests for argument matchers."""

from dataclasses import dataclass
from typing import Optional

import pytest

from assertkit.diagnostics import MatcherTypeMismatch, UsageError
from assertkit.engine import AnyOfType, Anything, Matcher, any_of_type, describe, match, matched_by


@dataclass
class Request:
    host: str
    path: str = "/"


def is_example(req: Request) -> bool:
    return req.host == "example.com"


def is_missing_or_empty(value: Optional[str]) -> bool:
    return not value


class TestLiteralMatching:
    def test_literal_uses_deep_equality(self):
        assert match(Request("a"), Request("a"))
        assert not match(Request("a"), Request("b"))
        assert not match(1, 1.0)

    def test_anything(self):
        assert match(Anything, None)
        assert match(Anything, object())
        assert describe(Anything) == "mock.Anything"


class TestAnyOfType:
    def test_short_and_qualified_names(self):
        assert match(any_of_type("Request"), Request("a"))
        assert match(any_of_type(f"{__name__}.Request"), Request("a"))
        assert not match(any_of_type("Request"), "a")

    def test_accepts_a_class(self):
        matcher = any_of_type(str)
        assert isinstance(matcher, AnyOfType)
        assert matcher.name == "str"
        assert match(matcher, "x")

    def test_bool_is_not_int(self):
        assert not match(any_of_type(int), True)

    def test_rejects_non_names(self):
        with pytest.raises(UsageError):
            AnyOfType(42)


class TestMatchedBy:
    def test_predicate(self):
        matcher = matched_by(is_example)
        assert match(matcher, Request("example.com", "/x"))
        assert not match(matcher, Request("other", "/x"))

    def test_inadmissible_type_does_not_match(self):
        assert not match(matched_by(is_example), "example.com")

    def test_none_for_non_nullable_parameter(self):
        with pytest.raises(MatcherTypeMismatch):
            match(matched_by(is_example), None)

    def test_none_for_optional_parameter(self):
        assert match(matched_by(is_missing_or_empty), None)
        assert not match(matched_by(is_missing_or_empty), "x")

    def test_unannotated_predicate_admits_everything(self):
        matcher = matched_by(lambda value: value is None or value == 3)
        assert match(matcher, None)
        assert match(matcher, 3)
        assert not match(matcher, "3")

    def test_rejects_wrong_arity(self):
        with pytest.raises(UsageError):
            matched_by(lambda a, b: True)
        with pytest.raises(UsageError):
            matched_by(lambda: True)

    def test_rejects_non_bool_return(self):
        def count(value: str) -> int:
            return len(value)

        with pytest.raises(UsageError):
            matched_by(count)

    def test_rejects_non_callable(self):
        with pytest.raises(UsageError):
            matched_by("not a function")

    def test_description_names_the_parameter_type(self):
        assert describe(matched_by(is_example)) == "matched_by(is_example: Request -> bool)"


class TestMatcherBase:
    def test_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            Matcher()

    def test_subclass_must_implement_describe(self):
        class Partial(Matcher):
            def matches(self, value):
                return True

        with pytest.raises(TypeError):
            Partial()

    def test_custom_matcher(self):
        class Even(Matcher):
            def matches(self, value):
                return value % 2 == 0

            def describe(self):
                return "even"

        assert match(Even(), 4)
        assert not match(Even(), 3)
        assert describe(Even()) == "even"
