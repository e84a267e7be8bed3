"""Suite runner.

Discovers test methods on a suite object, wraps each one in its lifecycle
hooks and runs it as a subtest of the host context.

Per test the order is::

    setup_test -> before_test -> test_xxx -> after_test -> teardown_test

Every hook and test runs inside a failure barrier. A hook that fails stops
the hooks and test below it, but teardown_test still runs once setup_test was
attempted, and after_test runs whenever before_test was attempted.
teardown_suite runs whenever setup_suite was attempted; handle_stats runs
after it.
"""

from __future__ import annotations

import concurrent.futures
import copy
import logging
import re
import threading
import traceback
from contextlib import nullcontext
from datetime import datetime
from typing import Any, Callable, ContextManager

from assertkit.async_runner import run_with_timeout
from assertkit.config import get_config
from assertkit.diagnostics import TestAborted, TestTimeoutError, UsageError
from assertkit.suite.options import RunOptions
from assertkit.suite.stats import SuiteInformation
from assertkit.suite.suite import (
    AFTER_TEST,
    BEFORE_TEST,
    HANDLE_STATS,
    HOOKS,
    SETUP_SUITE,
    SETUP_TEST,
    TEARDOWN_SUITE,
    TEARDOWN_TEST,
    context_args,
    current_context,
    get_hook,
    invoke,
    set_context,
)

logger = logging.getLogger(__name__)


def discover_tests(suite: Any, prefix: str | None = None) -> list[str]:
    """Names of the test methods of suite, in declaration order.

    Methods of base classes come before those of subclasses.
    """
    prefix = prefix or get_config().suite.test_prefix
    prefixes = (prefix, prefix[:1].upper() + prefix[1:])
    names: list[str] = []
    seen: set[str] = set()
    for cls in reversed(type(suite).__mro__):
        for name in vars(cls):
            if name in seen or name in HOOKS or not name.startswith(prefixes):
                continue
            if callable(getattr(suite, name, None)):
                seen.add(name)
                names.append(name)
    return names


def _build_filter(options: RunOptions) -> Callable[[str], bool] | None:
    if options.test_filter is not None:
        return options.test_filter
    if options.ignore_match:
        return None
    match = get_config().suite.match
    if not match:
        return None
    pattern = re.compile(match)
    return lambda name: pattern.search(name) is not None


def clone_suite(suite: Any) -> Any:
    """Deep-copy a suite through its clone_deep() method, or copy.deepcopy."""
    clone_deep = getattr(suite, "clone_deep", None)
    if callable(clone_deep):
        return clone_deep()
    return copy.deepcopy(suite)


class _SuiteRun:
    """State of one run over one suite value."""

    def __init__(self, suite: Any, options: RunOptions | None, parallel: bool):
        if suite is None:
            raise UsageError("suite must not be None")
        self.suite = suite
        self.suite_name = type(suite).__name__
        self.options = options or RunOptions()
        self.parallel = parallel
        self.config = get_config().suite
        self.stats = SuiteInformation(suite_name=self.suite_name)
        # Lifecycle bits, detected once.
        self.hooks = {name for name in HOOKS if get_hook(suite, name) is not None}
        self._setup_lock = threading.Lock()
        self._teardown_lock = threading.Lock()

    def select(self, t: Any) -> list[str] | None:
        tests = discover_tests(self.suite, self.config.test_prefix)
        logger.debug("suite %s: discovered %s", self.suite_name, tests)
        try:
            admit = _build_filter(self.options)
            if admit is not None:
                tests = [name for name in tests if admit(name)]
        except Exception as e:
            logger.warning("suite %s: invalid test filter: %s", self.suite_name, e)
            t.error(f"assertkit: invalid test filter: {e}")
            return None
        return tests

    def hook(self, t: Any, suite: Any, name: str, *args: Any) -> bool:
        """Run a hook inside a failure barrier; True if it completed."""
        if name not in self.hooks:
            return True
        fn = get_hook(suite, name)
        logger.debug("suite %s: %s", self.suite_name, name)
        try:
            invoke(fn, t, *args)
            return True
        except TestAborted:
            return False
        except Exception as e:
            t.error(f"{name} panicked: {e!r}\n{traceback.format_exc()}")
            return False

    def run(self, t: Any) -> SuiteInformation:
        tests = self.select(t)
        if tests is None:
            return self.stats
        if not tests:
            t.log("warning: no tests to run")
            return self.stats

        parent = current_context(self.suite)
        set_context(self.suite, t)
        self.stats.start = datetime.now()
        try:
            if self.hook(t, self.suite, SETUP_SUITE):
                if self.parallel:
                    self.run_parallel(t, tests)
                else:
                    for name in tests:
                        t.run(name, self.test_body(self.suite, name, t))
        finally:
            self.hook(t, self.suite, TEARDOWN_SUITE)
            self.stats.end = datetime.now()
            self.hook(t, self.suite, HANDLE_STATS, self.suite_name, self.stats)
            set_context(self.suite, parent)
        logger.debug(
            "suite %s: finished, %d test(s), passed=%s", self.suite_name, len(tests), self.stats.passed()
        )
        return self.stats

    def run_parallel(self, t: Any, tests: list[str]) -> None:
        clones = {name: clone_suite(self.suite) for name in tests}
        max_workers = self.config.max_workers or max(1, len(tests))
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="assertkit-suite"
        ) as executor:
            futures = [
                executor.submit(t.run, name, self.test_body(clones[name], name, t))
                for name in tests
            ]
            for future in futures:
                future.result()

    def test_body(self, suite: Any, name: str, parent: Any) -> Callable[[Any], None]:
        def body(tt: Any) -> None:
            if self.parallel:
                parallel = getattr(tt, "parallel", None)
                if callable(parallel):
                    parallel()
            logger.debug("suite %s: start %s", self.suite_name, name)
            self.stats.start_test(name)
            set_context(suite, tt)
            try:
                with self._locked(self._setup_lock):
                    setup_ok = self.hook(tt, suite, SETUP_TEST)
                if setup_ok:
                    try:
                        if self.hook(tt, suite, BEFORE_TEST, self.suite_name, name):
                            self.call_test(tt, getattr(suite, name))
                    finally:
                        self.hook(tt, suite, AFTER_TEST, self.suite_name, name)
            finally:
                with self._locked(self._teardown_lock):
                    self.hook(tt, suite, TEARDOWN_TEST)
                self.stats.end_test(name, not tt.failed())
                set_context(suite, parent)
                logger.debug("suite %s: end %s, failed=%s", self.suite_name, name, tt.failed())

        return body

    def _locked(self, lock: threading.Lock) -> ContextManager[Any]:
        return lock if self.parallel else nullcontext()

    def call_test(self, t: Any, method: Callable[..., Any]) -> None:
        try:
            run_with_timeout(method, context_args(method, t), timeout_ms=self.config.timeout_ms)
        except TestAborted:
            pass
        except TestTimeoutError as e:
            t.error(str(e))
        except Exception as e:
            t.error(f"test panicked: {e!r}\n{traceback.format_exc()}")


def run(t: Any, suite: Any, options: RunOptions | None = None) -> SuiteInformation:
    """Run the tests of suite sequentially as subtests of t.

        class MySuite(Suite):
            def test_example(self, t):
                ...

        def test_my_suite(t):
            run(t, MySuite())
    """
    return _SuiteRun(suite, options, parallel=False).run(t)


def run_parallel(t: Any, suite: Any, options: RunOptions | None = None) -> SuiteInformation:
    """Run the tests of suite concurrently, each on its own deep copy of suite.

    setup_suite and teardown_suite run once on suite itself and bracket all
    tests; setup_test and teardown_test calls are serialised.
    """
    return _SuiteRun(suite, options, parallel=True).run(t)
