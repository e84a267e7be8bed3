"""Test contexts.

``TestContext`` is the capability assertions, mocks and the suite runner
report through. ``T`` is assertkit's own implementation of it; the suite
runner, the pytest plugin and the CLI all hand out ``T`` instances.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
import tempfile
import threading
import time
import traceback
from types import CodeType
from typing import Any, Callable, Protocol, runtime_checkable

from assertkit.diagnostics import TestAborted, TestSkipped, UsageError
from assertkit.results import ResultStatus, TestResult

logger = logging.getLogger(__name__)


@runtime_checkable
class ErrorReporter(Protocol):
    """The narrow capability needed by assertions that only report errors."""

    def error(self, message: str) -> None: ...


@runtime_checkable
class TestContext(Protocol):
    """The capability a host test driver hands to a test function."""

    def log(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def fail(self) -> None: ...

    def fail_now(self) -> None: ...

    def failed(self) -> bool: ...

    def helper(self) -> None: ...

    def name(self) -> str: ...

    def run(self, name: str, body: Callable[["TestContext"], Any]) -> bool: ...


class T:
    """A thread-safe test context.

    Records log lines and error diagnostics, tracks helper functions for
    call-site attribution, and runs subtests inline. ``fail_now`` raises
    ``TestAborted``; ``execute`` is the barrier that turns it (and any other
    exception) into a recorded outcome.
    """

    __test__ = False

    def __init__(
        self,
        name: str = "",
        parent: T | None = None,
        timeout_ms: int | None = None,
    ):
        self._name = name
        self._parent = parent
        self._lock = threading.RLock()
        self._failed = False
        self._skipped = False
        self._parallel = False
        self._finished = False
        self._logs: list[str] = []
        self._errors: list[str] = []
        self._helpers: set[CodeType] = set()
        self._cleanups: list[Callable[[], Any]] = []
        self._children: list[T] = []
        self._duration_ms = 0.0
        if timeout_ms is not None:
            self._deadline: float | None = time.monotonic() + timeout_ms / 1000.0
        else:
            self._deadline = parent._deadline if parent is not None else None

    def __repr__(self) -> str:
        return f"T({self._name!r}, failed={self._failed})"

    # A context is a handle: copies of a suite keep reporting to it.
    def __copy__(self) -> T:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> T:
        return self

    # Reporting

    def name(self) -> str:
        return self._name

    def log(self, message: str) -> None:
        with self._lock:
            self._logs.append(str(message))

    def error(self, message: str) -> None:
        """Record a non-fatal failure."""
        with self._lock:
            self._logs.append(str(message))
            self._errors.append(str(message))
            self._failed = True

    def fail(self) -> None:
        with self._lock:
            self._failed = True

    def fail_now(self) -> None:
        """Mark the test failed and stop it."""
        self.fail()
        raise TestAborted(self._name)

    def failed(self) -> bool:
        with self._lock:
            return self._failed

    def skip(self, message: str = "") -> None:
        if message:
            self.log(message)
        with self._lock:
            self._skipped = True
        raise TestSkipped(message)

    def skipped(self) -> bool:
        with self._lock:
            return self._skipped

    @property
    def errors(self) -> list[str]:
        with self._lock:
            return list(self._errors)

    @property
    def logs(self) -> list[str]:
        with self._lock:
            return list(self._logs)

    def output(self) -> str:
        return "\n".join(self.logs)

    # Call-site attribution

    def helper(self) -> None:
        """Mark the calling function as a helper.

        Frames of helper functions are skipped when the failing call-site is
        reported.
        """
        code = sys._getframe(1).f_code
        with self._lock:
            self._helpers.add(code)

    def helper_codes(self) -> set[CodeType]:
        codes: set[CodeType] = set()
        t: T | None = self
        while t is not None:
            with t._lock:
                codes |= t._helpers
            t = t._parent
        return codes

    # Optional capabilities

    def parallel(self) -> None:
        """Signal that this test may run in parallel with its siblings."""
        with self._lock:
            self._parallel = True

    def is_parallel(self) -> bool:
        return self._parallel

    def cleanup(self, fn: Callable[[], Any]) -> None:
        """Register a function to run when the test finishes (last in, first out)."""
        with self._lock:
            self._cleanups.append(fn)

    def temp_dir(self) -> str:
        """Create a directory removed when the test finishes."""
        prefix = self._name.replace("/", "_").replace(os.sep, "_") or "assertkit"
        path = tempfile.mkdtemp(prefix=f"{prefix}-")
        self.cleanup(lambda: shutil.rmtree(path, ignore_errors=True))
        return path

    def setenv(self, key: str, value: str) -> None:
        """Set an environment variable for the duration of the test."""
        if self._parallel:
            raise UsageError("setenv cannot be used in parallel tests")
        previous = os.environ.get(key)
        os.environ[key] = value

        def restore() -> None:
            if previous is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = previous

        self.cleanup(restore)

    def deadline(self) -> float | None:
        """Monotonic time at which the test times out, if it has a timeout."""
        return self._deadline

    # Execution

    def run(self, name: str, body: Callable[[T], Any]) -> bool:
        """Run body as a subtest and report whether it passed.

        Safe to call from several threads at once.
        """
        child = T(f"{self._name}/{name}" if self._name else name, parent=self)
        with self._lock:
            self._children.append(child)
        child.execute(body)
        if child.failed():
            self.fail()
        return not child.failed()

    def execute(self, body: Callable[[T], Any]) -> T:
        """Run body against this context inside a failure barrier.

        Any exception is recorded as a failure; registered cleanups always run.
        """
        start = time.perf_counter()
        try:
            body(self)
        except TestAborted:
            pass
        except TestSkipped:
            with self._lock:
                self._skipped = True
        except Exception as e:
            logger.debug("test %s panicked: %r", self._name, e)
            self.error(f"test panicked: {e!r}\n{traceback.format_exc()}")
        finally:
            self.run_cleanups()
            self._duration_ms = (time.perf_counter() - start) * 1000
            self._finished = True
        return self

    def run_cleanups(self) -> None:
        while True:
            with self._lock:
                if not self._cleanups:
                    return
                fn = self._cleanups.pop()
            try:
                fn()
            except Exception as e:
                self.error(f"cleanup failed: {e!r}")

    def result(self) -> TestResult:
        """Snapshot this context (and its subtests) as a TestResult."""
        with self._lock:
            if self._failed:
                status = ResultStatus.FAILED
            elif self._skipped:
                status = ResultStatus.SKIPPED
            else:
                status = ResultStatus.PASSED
            return TestResult(
                name=self._name,
                status=status,
                errors=list(self._errors),
                logs=list(self._logs),
                duration_ms=self._duration_ms,
                children=[child.result() for child in self._children],
            )


def call_helper(t: Any) -> None:
    """Call ``t.helper()`` when the context offers it."""
    helper = getattr(t, "helper", None)
    if helper is not None:
        helper()


def helper_codes(t: Any) -> set[CodeType]:
    codes = getattr(t, "helper_codes", None)
    return codes() if codes is not None else set()


def context_name(t: Any) -> str | None:
    name = getattr(t, "name", None)
    if callable(name):
        return name()
    return name
