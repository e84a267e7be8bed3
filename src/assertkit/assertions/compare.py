"""Ordering assertions.

Both operands of an ordering assertion must have exactly the same orderable
type; values of equal magnitude but different types are never widened.
"""

from __future__ import annotations

import datetime
import math
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any

from assertkit.assertions.context import call_helper
from assertkit.assertions.core import fail
from assertkit.engine import Kind, kind_of

ORDERABLE_TYPES = (
    int,
    float,
    str,
    bytes,
    bytearray,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    Decimal,
    Fraction,
)

# Types with a zero value for positive/negative.
SIGNED_TYPES = (int, float, datetime.timedelta, Decimal, Fraction)


class CompareResult(int, Enum):
    LESS = -1
    EQUAL = 0
    GREATER = 1


def is_orderable(value: Any) -> bool:
    return isinstance(value, ORDERABLE_TYPES) and not isinstance(value, bool)


def _is_nan(value: Any) -> bool:
    if isinstance(value, float):
        return math.isnan(value)
    if isinstance(value, Decimal):
        return value.is_nan()
    return False


def compare(a: Any, b: Any) -> CompareResult | None:
    """Order two values, or return None when they are not comparable."""
    if type(a) is not type(b) or not is_orderable(a):
        return None
    if _is_nan(a) or _is_nan(b):
        return None
    try:
        if a < b:
            return CompareResult.LESS
        if a > b:
            return CompareResult.GREATER
        if a == b:
            return CompareResult.EQUAL
    except TypeError:
        # Naive and aware datetimes.
        return None
    return None


def _not_comparable(t: Any, e1: Any, e2: Any, *msg_and_args: Any) -> bool:
    return fail(
        t,
        f'Can not compare type "{type(e1).__name__}" and "{type(e2).__name__}" (not comparable)',
        *msg_and_args,
    )


def _compare_two_values(
    t: Any,
    e1: Any,
    e2: Any,
    allowed: tuple[CompareResult, ...],
    failure: str,
    *msg_and_args: Any,
) -> bool:
    call_helper(t)
    result = compare(e1, e2)
    if result is None:
        return _not_comparable(t, e1, e2, *msg_and_args)
    if result not in allowed:
        return fail(t, failure.format(e1=e1, e2=e2), *msg_and_args)
    return True


def greater(t: Any, e1: Any, e2: Any, *msg_and_args: Any) -> bool:
    """Assert that the first element is greater than the second.

        greater(t, 2, 1)
        greater(t, "b", "a")
    """
    call_helper(t)
    return _compare_two_values(
        t, e1, e2, (CompareResult.GREATER,), '"{e1}" is not greater than "{e2}"', *msg_and_args
    )


def greater_or_equal(t: Any, e1: Any, e2: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    return _compare_two_values(
        t,
        e1,
        e2,
        (CompareResult.GREATER, CompareResult.EQUAL),
        '"{e1}" is not greater than or equal to "{e2}"',
        *msg_and_args,
    )


def less(t: Any, e1: Any, e2: Any, *msg_and_args: Any) -> bool:
    """Assert that the first element is less than the second."""
    call_helper(t)
    return _compare_two_values(
        t, e1, e2, (CompareResult.LESS,), '"{e1}" is not less than "{e2}"', *msg_and_args
    )


def less_or_equal(t: Any, e1: Any, e2: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    return _compare_two_values(
        t,
        e1,
        e2,
        (CompareResult.LESS, CompareResult.EQUAL),
        '"{e1}" is not less than or equal to "{e2}"',
        *msg_and_args,
    )


def positive(t: Any, e: Any, *msg_and_args: Any) -> bool:
    """Assert that the number is positive."""
    call_helper(t)
    if not is_orderable(e) or not isinstance(e, SIGNED_TYPES):
        return _not_comparable(t, e, e, *msg_and_args)
    return _compare_two_values(
        t, e, type(e)(0), (CompareResult.GREATER,), '"{e1}" is not positive', *msg_and_args
    )


def negative(t: Any, e: Any, *msg_and_args: Any) -> bool:
    """Assert that the number is negative."""
    call_helper(t)
    if not is_orderable(e) or not isinstance(e, SIGNED_TYPES):
        return _not_comparable(t, e, e, *msg_and_args)
    return _compare_two_values(
        t, e, type(e)(0), (CompareResult.LESS,), '"{e1}" is not negative', *msg_and_args
    )


def _is_ordered(
    t: Any,
    obj: Any,
    allowed: tuple[CompareResult, ...],
    failure: str,
    *msg_and_args: Any,
) -> bool:
    call_helper(t)
    if kind_of(obj) is not Kind.SEQUENCE:
        return fail(t, f"{type(obj).__name__} is not a sequence", *msg_and_args)
    items = list(obj)
    for i in range(1, len(items)):
        prev, value = items[i - 1], items[i]
        result = compare(prev, value)
        if result is None:
            return fail(
                t,
                f"Elements at index {i - 1} and {i} are not comparable: "
                f'can not compare type "{type(prev).__name__}" and "{type(value).__name__}"',
                *msg_and_args,
            )
        if result not in allowed:
            return fail(t, failure.format(prev=prev, value=value, i=i), *msg_and_args)
    return True


def is_increasing(t: Any, obj: Any, *msg_and_args: Any) -> bool:
    """Assert that the sequence is strictly increasing.

        is_increasing(t, [1, 2, 3])
    """
    call_helper(t)
    return _is_ordered(
        t, obj, (CompareResult.LESS,), '"{prev}" is not less than "{value}" (index {i})', *msg_and_args
    )


def is_non_increasing(t: Any, obj: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    return _is_ordered(
        t,
        obj,
        (CompareResult.GREATER, CompareResult.EQUAL),
        '"{prev}" is not greater than or equal to "{value}" (index {i})',
        *msg_and_args,
    )


def is_decreasing(t: Any, obj: Any, *msg_and_args: Any) -> bool:
    """Assert that the sequence is strictly decreasing."""
    call_helper(t)
    return _is_ordered(
        t, obj, (CompareResult.GREATER,), '"{prev}" is not greater than "{value}" (index {i})', *msg_and_args
    )


def is_non_decreasing(t: Any, obj: Any, *msg_and_args: Any) -> bool:
    call_helper(t)
    return _is_ordered(
        t,
        obj,
        (CompareResult.LESS, CompareResult.EQUAL),
        '"{prev}" is not less than or equal to "{value}" (index {i})',
        *msg_and_args,
    )
