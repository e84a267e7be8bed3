"""Fail-fast assertions.

Each function here behaves like its counterpart in ``assertkit.assertions``
and additionally stops the test with ``t.fail_now()`` when it fails.

    from assertkit import require

    def test_load(t):
        cfg = load()
        require.no_error(t, cfg.error)
        require.equal(t, "prod", cfg.env)
"""

from __future__ import annotations

import functools
from typing import Any, Callable

from assertkit import assertions as assert_
from assertkit.assertions.context import call_helper


def _require(fn: Callable[..., bool]) -> Callable[..., bool]:
    @functools.wraps(fn)
    def wrapper(t: Any, *args: Any, **kwargs: Any) -> bool:
        call_helper(t)
        if fn(t, *args, **kwargs):
            return True
        t.fail_now()
        return False

    return wrapper


fail_now = assert_.fail_now

condition = _require(assert_.condition)
contains = _require(assert_.contains)
elements_match = _require(assert_.elements_match)
empty = _require(assert_.empty)
equal = _require(assert_.equal)
equal_exported_values = _require(assert_.equal_exported_values)
equal_values = _require(assert_.equal_values)
error = _require(assert_.error)
error_as = _require(assert_.error_as)
error_contains = _require(assert_.error_contains)
error_is = _require(assert_.error_is)
eventually = _require(assert_.eventually)
eventually_with_t = _require(assert_.eventually_with_t)
exactly = _require(assert_.exactly)
fail = _require(assert_.fail)
false = _require(assert_.false)
greater = _require(assert_.greater)
greater_or_equal = _require(assert_.greater_or_equal)
in_delta = _require(assert_.in_delta)
is_decreasing = _require(assert_.is_decreasing)
is_increasing = _require(assert_.is_increasing)
is_instance = _require(assert_.is_instance)
is_non_decreasing = _require(assert_.is_non_decreasing)
is_non_increasing = _require(assert_.is_non_increasing)
is_none = _require(assert_.is_none)
is_not_none = _require(assert_.is_not_none)
is_type = _require(assert_.is_type)
length = _require(assert_.length)
less = _require(assert_.less)
less_or_equal = _require(assert_.less_or_equal)
negative = _require(assert_.negative)
never = _require(assert_.never)
no_error = _require(assert_.no_error)
not_contains = _require(assert_.not_contains)
not_empty = _require(assert_.not_empty)
not_equal = _require(assert_.not_equal)
not_equal_values = _require(assert_.not_equal_values)
not_error_is = _require(assert_.not_error_is)
not_panics = _require(assert_.not_panics)
not_regexp = _require(assert_.not_regexp)
not_same = _require(assert_.not_same)
not_subset = _require(assert_.not_subset)
not_zero = _require(assert_.not_zero)
panics = _require(assert_.panics)
panics_with_error = _require(assert_.panics_with_error)
panics_with_value = _require(assert_.panics_with_value)
positive = _require(assert_.positive)
regexp = _require(assert_.regexp)
same = _require(assert_.same)
subset = _require(assert_.subset)
true = _require(assert_.true)
within_duration = _require(assert_.within_duration)
within_range = _require(assert_.within_range)
zero = _require(assert_.zero)

__all__ = list(assert_.ASSERTIONS)
