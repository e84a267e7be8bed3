"""The assertion catalogue.

Every assertion takes the test context first and trailing ``*msg_and_args``
last. It returns True on success; on failure it emits exactly one diagnostic
through ``t.error`` and returns False. Assertions never raise for a failed
property; misuse (a non-callable passed to ``panics``, a non-container passed
to ``contains``) is reported as a failure too.
"""

from __future__ import annotations

import datetime
import math
import re
import traceback
from collections.abc import Mapping
from typing import Any, Callable, Iterator

from assertkit.assertions.context import call_helper, context_name, helper_codes
from assertkit.diagnostics import (
    Diagnostic,
    TestAborted,
    TestSkipped,
    caller_info,
    format_differences,
    message_from_msg_and_args,
    render_value,
)
from assertkit.engine import (
    Kind,
    copy_exported,
    diff_structured,
    equal_deep,
    equal_values as _equal_values,
    kind_of,
)


def fail(t: Any, failure_message: str, *msg_and_args: Any, extra: list[tuple[str, str]] | None = None) -> bool:
    """Report a failure through the test context."""
    call_helper(t)
    diagnostic = Diagnostic(
        error=failure_message,
        trace=caller_info(helper_codes(t)),
        test_name=context_name(t),
        messages=message_from_msg_and_args(*msg_and_args),
        extra=extra or [],
    )
    t.error(diagnostic.render())
    return False


def fail_now(t: Any, failure_message: str, *msg_and_args: Any) -> bool:
    """Report a failure and stop the test."""
    call_helper(t)
    fail(t, failure_message, *msg_and_args)
    t.fail_now()
    return False


def _expected_actual(expected: Any, actual: Any) -> list[tuple[str, str]]:
    extra = [("expected", render_value(expected)), ("actual", render_value(actual))]
    if (
        type(expected) is type(actual)
        and kind_of(expected) in (Kind.RECORD, Kind.MAPPING, Kind.SEQUENCE)
    ):
        differences = diff_structured(expected, actual)
        if differences:
            extra.append(("Diff", format_differences(differences)))
    return extra


def _validate_equal_args(expected: Any, actual: Any) -> bool:
    return kind_of(expected) is not Kind.CALLABLE and kind_of(actual) is not Kind.CALLABLE


# Equality


def equal(t: Any, expected: Any, actual: Any, *msg_and_args: Any) -> bool:
    """Assert that two values are deeply equal.

        equal(t, 123, 123)
    """
    call_helper(t)
    if not _validate_equal_args(expected, actual):
        return fail(
            t,
            f"Invalid operation: {render_value(expected)} == {render_value(actual)} "
            "(cannot take func type as argument)",
            *msg_and_args,
        )
    if not equal_deep(expected, actual):
        return fail(t, "Not equal", *msg_and_args, extra=_expected_actual(expected, actual))
    return True


def not_equal(t: Any, expected: Any, actual: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    if not _validate_equal_args(expected, actual):
        return fail(
            t,
            f"Invalid operation: {render_value(expected)} != {render_value(actual)} "
            "(cannot take func type as argument)",
            *msg_and_args,
        )
    if equal_deep(expected, actual):
        return fail(t, f"Should not be: {render_value(actual)}", *msg_and_args)
    return True


def equal_values(t: Any, expected: Any, actual: Any, *msg_and_args: Any) -> bool:
    """Assert that two values are equal or convertible to the same value.

        equal_values(t, 1, 1.0)
    """
    call_helper(t)
    if not _equal_values(expected, actual):
        return fail(t, "Not equal", *msg_and_args, extra=_expected_actual(expected, actual))
    return True


def not_equal_values(t: Any, expected: Any, actual: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    if _equal_values(expected, actual):
        return fail(t, f"Should not be: {render_value(actual)}", *msg_and_args)
    return True


def exactly(t: Any, expected: Any, actual: Any, *msg_and_args: Any) -> bool:
    """Assert that two values are equal and of the same type.

        exactly(t, 1.0, 1.0)
    """
    call_helper(t)
    if type(expected) is not type(actual):
        return fail(
            t,
            f"Types expected to match exactly\n\t{type(expected).__name__} != {type(actual).__name__}",
            *msg_and_args,
        )
    return equal(t, expected, actual, *msg_and_args)


def equal_exported_values(t: Any, expected: Any, actual: Any, *msg_and_args: Any) -> bool:
    """Assert that the visible (non-underscore) fields of two values are equal."""
    call_helper(t)
    if type(expected) is not type(actual):
        return fail(
            t,
            f"Types expected to match exactly\n\t{type(expected).__name__} != {type(actual).__name__}",
            *msg_and_args,
        )
    if not _equal_values(copy_exported(expected), copy_exported(actual)):
        return fail(
            t,
            "Not equal (comparing only exported fields)",
            *msg_and_args,
            extra=[("expected", render_value(expected)), ("actual", render_value(actual))],
        )
    return True


def same(t: Any, expected: Any, actual: Any, *msg_and_args: Any) -> bool:
    """Assert that both arguments are the same object."""
    call_helper(t)
    if expected is not actual:
        return fail(
            t,
            "Not same",
            *msg_and_args,
            extra=[
                ("expected", f"{render_value(expected)} at {id(expected):#x}"),
                ("actual", f"{render_value(actual)} at {id(actual):#x}"),
            ],
        )
    return True


def not_same(t: Any, expected: Any, actual: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    if expected is actual:
        return fail(t, f"Expected and actual point to the same object: {id(actual):#x}", *msg_and_args)
    return True


# Nil, truth and types


def is_none(t: Any, obj: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    if obj is not None:
        return fail(t, f"Expected None, but got: {render_value(obj)}", *msg_and_args)
    return True


def is_not_none(t: Any, obj: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    if obj is None:
        return fail(t, "Expected value not to be None.", *msg_and_args)
    return True


def true(t: Any, value: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    if not value:
        return fail(t, "Should be true", *msg_and_args)
    return True


def false(t: Any, value: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    if value:
        return fail(t, "Should be false", *msg_and_args)
    return True


def is_type(t: Any, expected_type: Any, obj: Any, *msg_and_args: Any) -> bool:
    """Assert that obj has exactly the given type (or the type of an example value)."""
    call_helper(t)
    expected = expected_type if isinstance(expected_type, type) else type(expected_type)
    if type(obj) is not expected:
        return fail(
            t,
            f"Object expected to be of type {expected.__name__}, but was {type(obj).__name__}",
            *msg_and_args,
        )
    return True


def is_instance(t: Any, obj: Any, cls: type | tuple[type, ...], *msg_and_args: Any) -> bool:
    call_helper(t)
    try:
        ok = isinstance(obj, cls)
    except TypeError:
        return fail(t, f"{cls!r} is not a type", *msg_and_args)
    if not ok:
        return fail(t, f"{render_value(obj)} is not an instance of {cls!r}", *msg_and_args)
    return True


# Emptiness and length


def _is_empty(obj: Any) -> bool:
    if obj is None:
        return True
    if isinstance(obj, (bool, int, float, complex)):
        return not obj
    try:
        return len(obj) == 0
    except TypeError:
        return _is_zero(obj)


def _is_zero(obj: Any) -> bool:
    if obj is None:
        return True
    try:
        zero = type(obj)()
    except Exception:
        return False
    return equal_deep(zero, obj)


def empty(t: Any, obj: Any, *msg_and_args: Any) -> bool:
    """Assert that obj is None, zero, or an empty container."""
    call_helper(t)
    if not _is_empty(obj):
        return fail(t, f"Should be empty, but was {render_value(obj)}", *msg_and_args)
    return True


def not_empty(t: Any, obj: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    if _is_empty(obj):
        return fail(t, f"Should NOT be empty, but was {render_value(obj)}", *msg_and_args)
    return True


def zero(t: Any, obj: Any, *msg_and_args: Any) -> bool:
    """Assert that obj equals the zero value of its type."""
    call_helper(t)
    if not _is_zero(obj):
        return fail(t, f"Should be zero, but was {render_value(obj)}", *msg_and_args)
    return True


def not_zero(t: Any, obj: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    if _is_zero(obj):
        return fail(t, f"Should not be zero, but was {render_value(obj)}", *msg_and_args)
    return True


def length(t: Any, obj: Any, expected_length: int, *msg_and_args: Any) -> bool:
    call_helper(t)
    try:
        n = len(obj)
    except TypeError:
        return fail(t, f"{render_value(obj)} could not be applied builtin len()", *msg_and_args)
    if n != expected_length:
        return fail(
            t,
            f"{render_value(obj)} should have {expected_length} item(s), but has {n}",
            *msg_and_args,
        )
    return True


def condition(t: Any, comp: Callable[[], bool], *msg_and_args: Any) -> bool:
    """Assert that a comparison function returns True."""
    call_helper(t)
    if not comp():
        return fail(t, "Condition failed!", *msg_and_args)
    return True


# Containment


def _contains_element(container: Any, element: Any) -> tuple[bool, bool]:
    """Return (ok, found); ok is False when container does not support containment."""
    if isinstance(container, str):
        if not isinstance(element, str):
            return False, False
        return True, element in container
    if isinstance(container, (bytes, bytearray, memoryview)):
        if not isinstance(element, (bytes, bytearray, memoryview, int)):
            return False, False
        return True, (element in bytes(container))
    if isinstance(container, Mapping):
        return True, any(equal_deep(key, element) for key in container)
    if not hasattr(container, "__iter__"):
        return False, False
    try:
        items = list(container)
    except TypeError:
        return False, False
    return True, any(equal_deep(item, element) for item in items)


def contains(t: Any, container: Any, element: Any, *msg_and_args: Any) -> bool:
    """Assert that a string, sequence, set or mapping contains element.

        contains(t, "Hello World", "World")
        contains(t, ["Hello", "World"], "World")
        contains(t, {"Hello": "World"}, "Hello")
    """
    call_helper(t)
    ok, found = _contains_element(container, element)
    if not ok:
        return fail(t, f"{render_value(container)} could not be applied builtin len()", *msg_and_args)
    if not found:
        return fail(
            t,
            f"{render_value(container)} does not contain {render_value(element)}",
            *msg_and_args,
        )
    return True


def not_contains(t: Any, container: Any, element: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    ok, found = _contains_element(container, element)
    if not ok:
        return fail(t, f"{render_value(container)} could not be applied builtin len()", *msg_and_args)
    if found:
        return fail(
            t,
            f"{render_value(container)} should not contain {render_value(element)}",
            *msg_and_args,
        )
    return True


def _subset_missing(container: Any, subset_: Any) -> tuple[bool, Any]:
    """Return (ok, first missing element or a sentinel)."""
    if isinstance(subset_, Mapping):
        if not isinstance(container, Mapping):
            return False, None
        for key, value in subset_.items():
            if key not in container or not equal_deep(container[key], value):
                return True, {key: value}
        return True, _ALL_PRESENT
    for element in subset_:
        ok, found = _contains_element(container, element)
        if not ok:
            return False, None
        if not found:
            return True, element
    return True, _ALL_PRESENT


_ALL_PRESENT = object()


def subset(t: Any, container: Any, subset_: Any, *msg_and_args: Any) -> bool:
    """Assert that every element of subset_ is in container."""
    call_helper(t)
    if subset_ is None:
        return True
    ok, missing = _subset_missing(container, subset_)
    if not ok:
        return fail(t, f"{render_value(container)} has an unsupported type for subset", *msg_and_args)
    if missing is not _ALL_PRESENT:
        return fail(
            t,
            f"{render_value(container)} does not contain {render_value(missing)}",
            *msg_and_args,
        )
    return True


def not_subset(t: Any, container: Any, subset_: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    if subset_ is None:
        return fail(t, "None is the empty set which is a subset of every set", *msg_and_args)
    ok, missing = _subset_missing(container, subset_)
    if not ok:
        return fail(t, f"{render_value(container)} has an unsupported type for subset", *msg_and_args)
    if missing is _ALL_PRESENT:
        return fail(
            t,
            f"{render_value(subset_)} is a subset of {render_value(container)}",
            *msg_and_args,
        )
    return True


def elements_match(t: Any, list_a: Any, list_b: Any, *msg_and_args: Any) -> bool:
    """Assert that two sequences hold the same elements, ignoring order."""
    call_helper(t)
    if _is_empty(list_a) and _is_empty(list_b):
        return True
    if kind_of(list_a) is not Kind.SEQUENCE or kind_of(list_b) is not Kind.SEQUENCE:
        return fail(
            t,
            f"{type(list_a).__name__} and {type(list_b).__name__} are not sequences",
            *msg_and_args,
        )
    extra_a, extra_b = _diff_lists(list(list_a), list(list_b))
    if extra_a or extra_b:
        return fail(
            t,
            "elements differ",
            *msg_and_args,
            extra=[
                ("extra elements in list A", render_value(extra_a)),
                ("extra elements in list B", render_value(extra_b)),
            ],
        )
    return True


def _diff_lists(list_a: list[Any], list_b: list[Any]) -> tuple[list[Any], list[Any]]:
    used = [False] * len(list_b)
    extra_a = []
    for a in list_a:
        for j, b in enumerate(list_b):
            if not used[j] and equal_deep(a, b):
                used[j] = True
                break
        else:
            extra_a.append(a)
    extra_b = [b for j, b in enumerate(list_b) if not used[j]]
    return extra_a, extra_b


# Errors


def unwrap(err: BaseException) -> BaseException | None:
    """Return the error that caused err, following Python's exception chaining."""
    if err.__cause__ is not None:
        return err.__cause__
    if err.__context__ is not None and not err.__suppress_context__:
        return err.__context__
    return None


def error_chain(err: BaseException | None) -> Iterator[BaseException]:
    """Walk err and everything it wraps, including exception group members."""
    seen: set[int] = set()
    stack = [err] if err is not None else []
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        nested = []
        cause = unwrap(current)
        if cause is not None:
            nested.append(cause)
        if isinstance(current, BaseExceptionGroup):
            nested.extend(current.exceptions)
        stack.extend(reversed(nested))


def _build_error_chain_string(err: BaseException | None) -> str:
    return "\n\t".join(repr(e) for e in error_chain(err))


def error(t: Any, err: BaseException | None, *msg_and_args: Any) -> bool:
    """Assert that err is an error (not None)."""
    call_helper(t)
    if err is None:
        return fail(t, "An error is expected but got None.", *msg_and_args)
    return True


def no_error(t: Any, err: BaseException | None, *msg_and_args: Any) -> bool:
    """Assert that err is None."""
    call_helper(t)
    if err is not None:
        return fail(t, f"Received unexpected error:\n{err!r}", *msg_and_args)
    return True


def error_contains(t: Any, err: BaseException | None, contains: str, *msg_and_args: Any) -> bool:
    call_helper(t)
    if err is None:
        return fail(t, f"An error is expected but got None.\nexpected to contain: {contains!r}", *msg_and_args)
    if contains not in str(err):
        return fail(t, f"Error {str(err)!r} does not contain {contains!r}", *msg_and_args)
    return True


def _in_chain(err: BaseException | None, target: Any) -> bool:
    if err is None:
        return target is None
    return any(link is target or equal_deep(link, target) for link in error_chain(err))


def error_is(t: Any, err: BaseException | None, target: Any, *msg_and_args: Any) -> bool:
    """Assert that some error in err's chain equals target."""
    call_helper(t)
    if _in_chain(err, target):
        return True
    return fail(
        t,
        "Target error should be in err chain",
        *msg_and_args,
        extra=[
            ("expected", render_value(target)),
            ("in chain", _build_error_chain_string(err)),
        ],
    )


def not_error_is(t: Any, err: BaseException | None, target: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    if not _in_chain(err, target):
        return True
    return fail(
        t,
        "Target error should not be in err chain",
        *msg_and_args,
        extra=[
            ("found", render_value(target)),
            ("in chain", _build_error_chain_string(err)),
        ],
    )


def error_as(
    t: Any, err: BaseException | None, target_type: type[BaseException], *msg_and_args: Any
) -> bool:
    """Assert that some error in err's chain is an instance of target_type."""
    call_helper(t)
    if any(isinstance(link, target_type) for link in error_chain(err)):
        return True
    return fail(
        t,
        "Should be in error chain",
        *msg_and_args,
        extra=[
            ("expected", target_type.__name__),
            ("in chain", _build_error_chain_string(err)),
        ],
    )


# Panics


def _did_panic(fn: Callable[[], Any]) -> tuple[bool, BaseException | None, str]:
    try:
        fn()
    except (TestAborted, TestSkipped, KeyboardInterrupt):
        raise
    except BaseException as e:
        return True, e, traceback.format_exc()
    return False, None, ""


def panics(t: Any, fn: Callable[[], Any], *msg_and_args: Any) -> bool:
    """Assert that calling fn raises.

        panics(t, lambda: int("x"))
    """
    call_helper(t)
    if not callable(fn):
        return fail(t, f"{render_value(fn)} is not callable", *msg_and_args)
    panicked, value, _ = _did_panic(fn)
    if not panicked:
        return fail(t, f"func {_fn_name(fn)} should panic\n\tPanic value:\t{value!r}", *msg_and_args)
    return True


def panics_with_value(t: Any, expected: Any, fn: Callable[[], Any], *msg_and_args: Any) -> bool:
    """Assert that fn raises an exception deeply equal to expected."""
    call_helper(t)
    if not callable(fn):
        return fail(t, f"{render_value(fn)} is not callable", *msg_and_args)
    panicked, value, stack = _did_panic(fn)
    if not panicked:
        return fail(t, f"func {_fn_name(fn)} should panic\n\tPanic value:\t{value!r}", *msg_and_args)
    if not equal_deep(expected, value):
        return fail(
            t,
            f"func {_fn_name(fn)} should panic with value:\t{expected!r}\n"
            f"\tPanic value:\t{value!r}\n\tPanic stack:\t{stack}",
            *msg_and_args,
        )
    return True


def panics_with_error(t: Any, err_string: str, fn: Callable[[], Any], *msg_and_args: Any) -> bool:
    """Assert that fn raises an exception whose message equals err_string."""
    call_helper(t)
    if not callable(fn):
        return fail(t, f"{render_value(fn)} is not callable", *msg_and_args)
    panicked, value, stack = _did_panic(fn)
    if not panicked:
        return fail(t, f"func {_fn_name(fn)} should panic\n\tPanic value:\t{value!r}", *msg_and_args)
    if str(value) != err_string:
        return fail(
            t,
            f"func {_fn_name(fn)} should panic with error message:\t{err_string!r}\n"
            f"\tError message:\t\t{str(value)!r}\n\tPanic stack:\t{stack}",
            *msg_and_args,
        )
    return True


def not_panics(t: Any, fn: Callable[[], Any], *msg_and_args: Any) -> bool:
    """Assert that calling fn does not raise."""
    call_helper(t)
    if not callable(fn):
        return fail(t, f"{render_value(fn)} is not callable", *msg_and_args)
    panicked, value, stack = _did_panic(fn)
    if panicked:
        return fail(
            t,
            f"func {_fn_name(fn)} should not panic\n\tPanic value:\t{value!r}\n\tPanic stack:\t{stack}",
            *msg_and_args,
        )
    return True


def _fn_name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)


# Numbers, durations and patterns


def _as_timedelta(delta: datetime.timedelta | float) -> datetime.timedelta:
    if isinstance(delta, datetime.timedelta):
        return delta
    return datetime.timedelta(seconds=delta)


def within_duration(
    t: Any,
    expected: datetime.datetime,
    actual: datetime.datetime,
    delta: datetime.timedelta | float,
    *msg_and_args: Any,
) -> bool:
    """Assert that two datetimes are within delta of each other.

        within_duration(t, datetime.now(), datetime.now(), timedelta(seconds=10))
    """
    call_helper(t)
    delta = _as_timedelta(delta)
    try:
        dt = expected - actual
    except TypeError:
        return fail(
            t,
            f"Cannot subtract {type(actual).__name__} from {type(expected).__name__}",
            *msg_and_args,
        )
    if abs(dt) > delta:
        return fail(
            t,
            f"Max difference between {expected} and {actual} allowed is {delta}, but difference was {dt}",
            *msg_and_args,
        )
    return True


def within_range(
    t: Any,
    actual: datetime.datetime,
    start: datetime.datetime,
    end: datetime.datetime,
    *msg_and_args: Any,
) -> bool:
    """Assert that start <= actual <= end."""
    call_helper(t)
    if end < start:
        return fail(t, "Start should be before end", *msg_and_args)
    if actual < start or actual > end:
        return fail(t, f"Time {actual} expected to be in time range {start} to {end}", *msg_and_args)
    return True


def in_delta(t: Any, expected: Any, actual: Any, delta: float, *msg_and_args: Any) -> bool:
    """Assert that two numbers are within delta of each other.

        in_delta(t, math.pi, 22 / 7.0, 0.01)
    """
    call_helper(t)
    try:
        af = float(expected)
        bf = float(actual)
    except (TypeError, ValueError):
        return fail(t, "Parameters must be numerical", *msg_and_args)
    if math.isnan(af) and math.isnan(bf):
        return True
    if math.isnan(af):
        return fail(t, "Expected must not be NaN", *msg_and_args)
    if math.isnan(bf):
        return fail(t, f"Expected {af!r} with delta {delta!r}, but was NaN", *msg_and_args)
    dt = af - bf
    if dt < -delta or dt > delta:
        return fail(
            t,
            f"Max difference between {af!r} and {bf!r} allowed is {delta!r}, but difference was {dt!r}",
            *msg_and_args,
        )
    return True


def _match_regexp(rx: str | re.Pattern[str], value: Any) -> bool:
    pattern = rx if isinstance(rx, re.Pattern) else re.compile(str(rx))
    return pattern.search(value if isinstance(value, str) else str(value)) is not None


def regexp(t: Any, rx: str | re.Pattern[str], value: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    try:
        matched = _match_regexp(rx, value)
    except re.error as e:
        return fail(t, f"Invalid regular expression {rx!r}: {e}", *msg_and_args)
    if not matched:
        return fail(t, f"Expect {value!r} to match {rx!r}", *msg_and_args)
    return True


def not_regexp(t: Any, rx: str | re.Pattern[str], value: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    try:
        matched = _match_regexp(rx, value)
    except re.error as e:
        return fail(t, f"Invalid regular expression {rx!r}: {e}", *msg_and_args)
    if matched:
        return fail(t, f"Expect {value!r} to NOT match {rx!r}", *msg_and_args)
    return True
