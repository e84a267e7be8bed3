"""Diagnostics and error reporting for assertkit.

Builds the multi-line failure records that assertions emit and defines the
exception taxonomy shared by the engine, the mock runtime and the suite
runner.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from types import CodeType
from typing import Any, Iterable

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

# Maximum number of frames reported in an "Error Trace" block.
MAX_TRACE_FRAMES = 10


class AssertkitError(Exception):
    """Base class for all assertkit errors."""


class UsageError(AssertkitError):
    """Raised when the library is used incorrectly.

    These are programmer errors: the test cannot meaningfully continue.
    """


class ConfigError(AssertkitError):
    """Raised when the assertkit configuration is invalid."""


class MatcherTypeMismatch(UsageError):
    """Raised when a predicate matcher is handed None for a non-nullable parameter."""


class FuncMockNotFuncError(UsageError):
    """Raised when a function mock is requested for something that is not a function."""


class UnexpectedCallError(UsageError):
    """Raised when a mock receives a call that no expectation accepts.

    Carries the attempted call and, when one exists, the closest registered
    expectation for the same method.
    """

    def __init__(self, message: str, method: str, arguments: tuple, closest: Any = None):
        self.method = method
        self.arguments = arguments
        self.closest = closest
        super().__init__(message)


class TestTimeoutError(AssertkitError):
    """Raised when a suite test method exceeds its timeout."""

    __test__ = False

    def __init__(self, timeout_ms: int, message: str | None = None):
        self.timeout_ms = timeout_ms
        super().__init__(message or f"Test timed out after {timeout_ms}ms")


class TestAborted(BaseException):
    """Raised by ``fail_now`` to stop the current test.

    Derives from BaseException so that ``except Exception`` blocks in the code
    under test do not swallow it.
    """

    __test__ = False


class TestSkipped(BaseException):
    """Raised by ``skip`` to stop the current test and mark it skipped."""

    __test__ = False


@dataclass
class Diagnostic:
    """A single failure record.

    Rendered as labelled lines: the call-site trace, the failure kind, then
    any body labels (expected/actual/diff), the test name and the messages.
    """

    error: str
    trace: list[str] = field(default_factory=list)
    test_name: str | None = None
    messages: str = ""
    extra: list[tuple[str, str]] = field(default_factory=list)

    def render(self) -> str:
        content: list[tuple[str, str]] = []
        if self.trace:
            content.append(("Error Trace", "\n".join(self.trace)))
        content.append(("Error", self.error))
        content.extend(self.extra)
        if self.test_name:
            content.append(("Test", self.test_name))
        if self.messages:
            content.append(("Messages", self.messages))
        return "\n" + labeled_output(content)

    def __str__(self) -> str:
        return self.render()


def labeled_output(content: Iterable[tuple[str, str]]) -> str:
    """Align labelled blocks so every value starts in the same column.

    Multi-line values are indented under their first line.
    """
    content = list(content)
    width = max((len(label) for label, _ in content), default=0)
    lines = []
    for label, value in content:
        head = f"\t{label + ':':<{width + 1}}\t"
        pad = "\t" + " " * (width + 1) + "\t"
        value_lines = str(value).split("\n")
        lines.append(head + value_lines[0])
        for extra_line in value_lines[1:]:
            lines.append(pad + extra_line)
    return "\n".join(lines)


def caller_info(skip_codes: Iterable[CodeType] = ()) -> list[str]:
    """Return "file:line" entries for the frames that led to an assertion.

    Frames inside the assertkit package and frames whose code objects were
    registered through ``helper()`` are skipped. The walk stops at the first
    test function.
    """
    skip = set(skip_codes)
    frames: list[str] = []
    frame = sys._getframe(1)
    while frame is not None and len(frames) < MAX_TRACE_FRAMES:
        code = frame.f_code
        filename = os.path.abspath(code.co_filename)
        if code in skip or filename.startswith(_PACKAGE_DIR):
            frame = frame.f_back
            continue
        frames.append(f"{code.co_filename}:{frame.f_lineno}")
        if code.co_name.startswith(("test", "Test")):
            break
        frame = frame.f_back
    return frames


def message_from_msg_and_args(*msg_and_args: Any) -> str:
    """Build the user message attached to a failing assertion.

    A single argument is used as-is; several are treated as a %-format string
    followed by its arguments.
    """
    if not msg_and_args:
        return ""
    if len(msg_and_args) == 1:
        msg = msg_and_args[0]
        return msg if isinstance(msg, str) else repr(msg)
    fmt, *args = msg_and_args
    try:
        return str(fmt) % tuple(args)
    except (TypeError, ValueError):
        return " ".join(str(part) for part in msg_and_args)


def render_value(value: Any, max_length: int | None = None) -> str:
    """Get repr of value, truncating if too long."""
    if max_length is None:
        from assertkit.config import get_config

        max_length = get_config().assertions.max_value_length
    r = repr(value)
    if max_length and len(r) > max_length:
        return r[: max_length - 3] + "..."
    return r


def format_value_diff(expected: Any, actual: Any, max_length: int | None = None) -> str:
    """Format the expected/actual pair of a failed comparison."""
    expected_repr = render_value(expected, max_length)
    actual_repr = render_value(actual, max_length)
    return f"expected: {expected_repr}\nactual  : {actual_repr}"


def format_differences(differences: Iterable[Any]) -> str:
    """Format a difference list, one difference per line."""
    return "\n".join(str(diff) for diff in differences)


def type_name(value: Any) -> str:
    """Qualified type name used in diagnostics."""
    cls = type(value)
    module = cls.__module__
    if module == "builtins":
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"
