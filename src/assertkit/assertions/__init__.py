"""Assertion runtime.

Every assertion takes a TestContext first, returns True on success and, on
failure, reports one diagnostic through the context and returns False.
"""

from assertkit.assertions.compare import (
    CompareResult,
    compare,
    greater,
    greater_or_equal,
    is_decreasing,
    is_increasing,
    is_non_decreasing,
    is_non_increasing,
    less,
    less_or_equal,
    negative,
    positive,
)
from assertkit.assertions.context import ErrorReporter, T, TestContext
from assertkit.assertions.core import (
    condition,
    contains,
    elements_match,
    empty,
    equal,
    equal_exported_values,
    equal_values,
    error,
    error_as,
    error_chain,
    error_contains,
    error_is,
    exactly,
    fail,
    fail_now,
    false,
    in_delta,
    is_instance,
    is_none,
    is_not_none,
    is_type,
    length,
    no_error,
    not_contains,
    not_empty,
    not_equal,
    not_equal_values,
    not_error_is,
    not_panics,
    not_regexp,
    not_same,
    not_subset,
    not_zero,
    panics,
    panics_with_error,
    panics_with_value,
    regexp,
    same,
    subset,
    true,
    unwrap,
    within_duration,
    within_range,
    zero,
)
from assertkit.assertions.eventually import CollectT, eventually, eventually_with_t, never

# Names of every assertion function; the fail-fast and bound forms are
# derived from this list.
ASSERTIONS = (
    "condition",
    "contains",
    "elements_match",
    "empty",
    "equal",
    "equal_exported_values",
    "equal_values",
    "error",
    "error_as",
    "error_contains",
    "error_is",
    "eventually",
    "eventually_with_t",
    "exactly",
    "fail",
    "fail_now",
    "false",
    "greater",
    "greater_or_equal",
    "in_delta",
    "is_decreasing",
    "is_increasing",
    "is_instance",
    "is_non_decreasing",
    "is_non_increasing",
    "is_none",
    "is_not_none",
    "is_type",
    "length",
    "less",
    "less_or_equal",
    "negative",
    "never",
    "no_error",
    "not_contains",
    "not_empty",
    "not_equal",
    "not_equal_values",
    "not_error_is",
    "not_panics",
    "not_regexp",
    "not_same",
    "not_subset",
    "not_zero",
    "panics",
    "panics_with_error",
    "panics_with_value",
    "positive",
    "regexp",
    "same",
    "subset",
    "true",
    "within_duration",
    "within_range",
    "zero",
)

__all__ = [
    "ASSERTIONS",
    "CollectT",
    "CompareResult",
    "ErrorReporter",
    "T",
    "TestContext",
    "compare",
    "error_chain",
    "unwrap",
    *ASSERTIONS,
]
