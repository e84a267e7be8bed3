"""assertkit - assertions, mocks and test suites for Python."""

__version__ = "0.1.0"

from assertkit import assertions, require
from assertkit.assertions import T, TestContext
from assertkit.bound import Assertions, Requirements, new
from assertkit.diagnostics import (
    AssertkitError,
    ConfigError,
    FuncMockNotFuncError,
    MatcherTypeMismatch,
    TestAborted,
    TestSkipped,
    TestTimeoutError,
    UnexpectedCallError,
    UsageError,
)
from assertkit.mock import (
    Anything,
    Arguments,
    FuncMock,
    Mock,
    any_of_type,
    assert_expectations_for_objects,
    func_mock_for,
    matched_by,
)
from assertkit.suite import Suite, run, run_parallel

__all__ = [
    "__version__",
    "assertions",
    "require",
    "new",
    "Assertions",
    "Requirements",
    "T",
    "TestContext",
    # Mocks
    "Mock",
    "FuncMock",
    "Arguments",
    "Anything",
    "any_of_type",
    "matched_by",
    "func_mock_for",
    "assert_expectations_for_objects",
    # Suites
    "Suite",
    "run",
    "run_parallel",
    # Errors
    "AssertkitError",
    "UsageError",
    "ConfigError",
    "MatcherTypeMismatch",
    "FuncMockNotFuncError",
    "UnexpectedCallError",
    "TestTimeoutError",
    "TestAborted",
    "TestSkipped",
]
