"""Argument matchers.

A matcher is a predicate over one value plus a description. Plain values act
as literal matchers compared with ``equal_deep``.
"""

from __future__ import annotations

import inspect
import types
import typing
from abc import ABC, abstractmethod
from typing import Any, Callable

from assertkit.diagnostics import MatcherTypeMismatch, UsageError
from assertkit.engine.equal import equal_deep
from assertkit.engine.kinds import qualified_type_name, type_name


class Matcher(ABC):
    """Base class for non-literal matchers."""

    @abstractmethod
    def matches(self, value: Any) -> bool:
        """Whether value satisfies this matcher."""
        ...

    @abstractmethod
    def describe(self) -> str:
        """Render the matcher for diagnostics."""
        ...

    def __repr__(self) -> str:
        return self.describe()


class _AnythingMatcher(Matcher):
    """Matches any value, None included."""

    def matches(self, value: Any) -> bool:
        return True

    def describe(self) -> str:
        return "mock.Anything"


Anything = _AnythingMatcher()


class AnyOfType(Matcher):
    """Matches any value whose runtime type name equals ``name``.

    Both the short name (``Request``) and the fully-qualified name
    (``myapp.http.Request``) are accepted.
    """

    def __init__(self, name: str):
        if not isinstance(name, str):
            raise UsageError(f"any_of_type expects a type name, got {name!r}")
        self.name = name

    def matches(self, value: Any) -> bool:
        return self.name in (type_name(value), qualified_type_name(value), type(value).__qualname__)

    def describe(self) -> str:
        return f"any_of_type({self.name!r})"


def any_of_type(name: str | type) -> AnyOfType:
    """Build a type-wildcard matcher. A class may be given instead of its name."""
    if isinstance(name, type):
        name = name.__name__
    return AnyOfType(name)


class ArgumentMatcher(Matcher):
    """Matches values accepted by a one-argument predicate.

    The predicate's parameter annotation governs admissibility: values not
    assignable to it do not match, and None is only passed through when the
    annotation admits it.
    """

    def __init__(self, fn: Callable[[Any], bool]):
        self.fn = fn
        self.param_type = _parameter_type(fn)

    def matches(self, value: Any) -> bool:
        if value is None:
            if not _admits_none(self.param_type):
                raise MatcherTypeMismatch(
                    "attempting to call matcher with None for non-nullable "
                    f"parameter type {_annotation_name(self.param_type)}"
                )
            return bool(self.fn(None))
        if _accepts(self.param_type, value):
            return bool(self.fn(value))
        return False

    def describe(self) -> str:
        name = getattr(self.fn, "__name__", type(self.fn).__name__)
        return f"matched_by({name}: {_annotation_name(self.param_type)} -> bool)"


def matched_by(fn: Callable[[Any], bool]) -> ArgumentMatcher:
    """Build a predicate matcher.

    ``fn`` must accept exactly one argument and return a bool. It is
    evaluated with the called argument and returns True when there's a match.

    Example::

        m.on("do", matched_by(lambda req: req.host == "example.com"))

    Raises:
        UsageError: If ``fn`` does not have the required signature.
    """
    if not callable(fn):
        raise UsageError(f"matched_by: {fn!r} is not callable")
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError) as e:
        raise UsageError(f"matched_by: cannot inspect {fn!r}: {e}") from e
    params = [
        p
        for p in sig.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty
    ]
    if len(params) != 1 or len(sig.parameters) != 1:
        raise UsageError(f"matched_by: {fn!r} does not take exactly one argument")
    returns = _hints(fn).get("return", sig.return_annotation)
    if returns is not sig.empty and returns is not bool:
        raise UsageError(f"matched_by: {fn!r} does not return a bool")
    return ArgumentMatcher(fn)


def match(matcher: Any, value: Any) -> bool:
    """Decide whether a matcher accepts a value.

    Literal (non-Matcher) expectations match by ``equal_deep``.
    """
    if isinstance(matcher, Matcher):
        return matcher.matches(value)
    return equal_deep(matcher, value)


def describe(matcher: Any) -> str:
    if isinstance(matcher, Matcher):
        return matcher.describe()
    return repr(matcher)


def _hints(fn: Callable[..., Any]) -> dict[str, Any]:
    target = fn if inspect.isfunction(fn) or inspect.ismethod(fn) else getattr(fn, "__call__", fn)
    try:
        return typing.get_type_hints(target)
    except (NameError, TypeError, AttributeError):
        return {}


def _parameter_type(fn: Callable[..., Any]) -> Any:
    sig = inspect.signature(fn)
    param = next(iter(sig.parameters.values()))
    hint = _hints(fn).get(param.name, param.annotation)
    if hint is param.empty or isinstance(hint, str):
        return Any
    return hint


def _admits_none(annotation: Any) -> bool:
    if annotation in (Any, object, None, type(None)):
        return True
    if isinstance(annotation, typing.TypeVar):
        return True
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        return any(_admits_none(arg) for arg in typing.get_args(annotation))
    return False


def _accepts(annotation: Any, value: Any) -> bool:
    if annotation in (Any, object) or isinstance(annotation, typing.TypeVar):
        return True
    if annotation in (None, type(None)):
        return value is None
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        return any(_accepts(arg, value) for arg in typing.get_args(annotation))
    if origin is typing.Literal:
        return value in typing.get_args(annotation)
    if origin is not None:
        annotation = origin
    if isinstance(annotation, type):
        return isinstance(value, annotation)
    return True


def _annotation_name(annotation: Any) -> str:
    if annotation is Any:
        return "Any"
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "")
