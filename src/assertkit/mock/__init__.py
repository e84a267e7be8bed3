"""Mock runtime: expectations, dispatch and satisfaction checks."""

from assertkit.engine.matchers import AnyOfType, Anything, ArgumentMatcher, any_of_type, matched_by
from assertkit.mock.arguments import Arguments
from assertkit.mock.call import Call
from assertkit.mock.func_mock import FuncMock, func_mock_for
from assertkit.mock.mock import Mock, assert_expectations_for_objects, call_string

__all__ = [
    "AnyOfType",
    "Anything",
    "ArgumentMatcher",
    "Arguments",
    "Call",
    "FuncMock",
    "Mock",
    "any_of_type",
    "assert_expectations_for_objects",
    "call_string",
    "func_mock_for",
    "matched_by",
]
