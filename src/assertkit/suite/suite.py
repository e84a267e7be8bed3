"""Suite base class and hook invocation helpers.

A suite is any object whose methods named ``test...`` are tests. Lifecycle
hooks are optional methods with conventional names:

    setup_suite, teardown_suite        once around all tests
    setup_test, teardown_test          around each test
    before_test, after_test            around each test body, with
                                       (suite_name, test_name)
    handle_stats                       after teardown_suite, with
                                       (suite_name, SuiteInformation)
    setup_subtest, teardown_subtest    around each Suite.run subtest

Tests and hooks may take the test context as their first parameter; hooks
that don't can reach it through ``Suite.t()``.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable

from assertkit.assertions.context import T
from assertkit.bound import Assertions, Requirements
from assertkit.diagnostics import UsageError

SETUP_SUITE = "setup_suite"
TEARDOWN_SUITE = "teardown_suite"
SETUP_TEST = "setup_test"
TEARDOWN_TEST = "teardown_test"
BEFORE_TEST = "before_test"
AFTER_TEST = "after_test"
HANDLE_STATS = "handle_stats"
SETUP_SUBTEST = "setup_subtest"
TEARDOWN_SUBTEST = "teardown_subtest"

HOOKS = (
    SETUP_SUITE,
    TEARDOWN_SUITE,
    SETUP_TEST,
    TEARDOWN_TEST,
    BEFORE_TEST,
    AFTER_TEST,
    HANDLE_STATS,
    SETUP_SUBTEST,
    TEARDOWN_SUBTEST,
)


def _takes_context(fn: Callable[..., Any], n_args: int) -> bool:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return False
    count = 0
    for param in sig.parameters.values():
        if param.kind is param.VAR_POSITIONAL:
            return True
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            count += 1
    return count > n_args


def context_args(fn: Callable[..., Any], t: Any, *args: Any) -> tuple:
    """Arguments for fn: t is prepended when fn has room for it."""
    if _takes_context(fn, len(args)):
        return (t, *args)
    return args


def invoke(fn: Callable[..., Any], t: Any, *args: Any) -> Any:
    """Call a hook or test body, passing t first when its signature accepts it."""
    return fn(*context_args(fn, t, *args))


def get_hook(suite: Any, name: str) -> Callable[..., Any] | None:
    hook = getattr(suite, name, None)
    return hook if callable(hook) else None


def set_context(suite: Any, t: Any) -> None:
    setter = getattr(suite, "set_t", None)
    if callable(setter):
        setter(t)


def current_context(suite: Any) -> Any:
    getter = getattr(suite, "t", None)
    return getter() if callable(getter) else None


class Suite:
    """Base class for suites.

    Stores the test context of the running test and offers bound assertions:

        class UserSuite(Suite):
            def setup_test(self):
                self.users = {}

            def test_add(self):
                self.users["ann"] = 1
                self.assert_.length(self.users, 1)
    """

    _t: T | None = None

    def t(self) -> T:
        if self._t is None:
            raise UsageError(f"{type(self).__name__} has no test context; run it with assertkit.suite.run")
        return self._t

    def set_t(self, t: T | None) -> None:
        self._t = t

    @property
    def assert_(self) -> Assertions:
        return Assertions(self.t())

    @property
    def require(self) -> Requirements:
        return Requirements(self.t())

    def run(self, name: str, body: Callable[..., Any]) -> bool:
        """Run body as a subtest, wrapped by setup_subtest and teardown_subtest.

        body may take the subtest's context as its only argument.
        """
        parent = self.t()

        def subtest(t: T) -> None:
            self.set_t(t)
            try:
                setup = get_hook(self, SETUP_SUBTEST)
                teardown = get_hook(self, TEARDOWN_SUBTEST)
                try:
                    if setup is not None:
                        invoke(setup, t)
                    invoke(body, t)
                finally:
                    if teardown is not None:
                        invoke(teardown, t)
            finally:
                self.set_t(parent)

        return parent.run(name, subtest)
