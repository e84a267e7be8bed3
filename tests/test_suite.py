"""Tests for the sequential suite runner."""

import asyncio
import time

import pytest

from assertkit.config import AssertkitConfig, SuiteConfig, set_config
from assertkit.diagnostics import UsageError
from assertkit.results import ResultStatus
from assertkit.suite import (
    RunOptions,
    Suite,
    SuiteInformation,
    discover_tests,
    run,
    with_ignore_match,
    with_test_filter,
)


def children(t):
    """Result of each test method, keyed by method name."""
    return {child.name.rsplit("/", 1)[-1]: child for child in t.result().children}


class RecordingSuite(Suite):
    def __init__(self):
        self.log = []

    def setup_suite(self):
        self.log.append("setup_suite")

    def setup_test(self):
        self.log.append("setup_test")

    def test_a(self):
        self.log.append("test_a")

    def test_b(self):
        self.log.append("test_b")

    def teardown_test(self):
        self.log.append("teardown_test")

    def teardown_suite(self):
        self.log.append("teardown_suite")


# =============================================================================
# Discovery
# =============================================================================


class TestDiscovery:
    def test_declaration_order_and_hooks_excluded(self):
        assert discover_tests(RecordingSuite()) == ["test_a", "test_b"]

    def test_inherited_tests_come_first(self):
        class Base(Suite):
            def test_base(self):
                pass

        class Child(Base):
            def test_child(self):
                pass

            def TestCapitalised(self):
                pass

            def helper(self):
                pass

        assert discover_tests(Child()) == ["test_base", "test_child", "TestCapitalised"]

    def test_attributes_are_not_tests(self):
        class WithData(Suite):
            test_data = {"a": 1}

            def test_real(self):
                pass

        assert discover_tests(WithData()) == ["test_real"]

    def test_custom_prefix(self):
        class Checks(Suite):
            def check_one(self):
                pass

            def test_two(self):
                pass

        assert discover_tests(Checks(), "check") == ["check_one"]


# =============================================================================
# Hook ordering
# =============================================================================


class TestHookOrdering:
    def test_sequential_order(self, t):
        suite = RecordingSuite()

        info = run(t, suite)

        assert suite.log == [
            "setup_suite",
            "setup_test",
            "test_a",
            "teardown_test",
            "setup_test",
            "test_b",
            "teardown_test",
            "teardown_suite",
        ]
        assert not t.failed()
        assert isinstance(info, SuiteInformation)
        assert info.passed()

    def test_before_and_after_receive_names(self, t):
        class Named(Suite):
            def __init__(self):
                self.seen = []

            def before_test(self, suite_name, test_name):
                self.seen.append(("before", suite_name, test_name))

            def after_test(self, suite_name, test_name):
                self.seen.append(("after", suite_name, test_name))

            def test_one(self):
                self.seen.append(("test",))

        suite = Named()
        run(t, suite)

        assert suite.seen == [("before", "Named", "test_one"), ("test",), ("after", "Named", "test_one")]

    def test_hooks_may_take_the_context(self, t):
        class WithContext(Suite):
            def __init__(self):
                self.contexts = []

            def setup_test(self, tt):
                self.contexts.append(tt)

            def test_one(self, tt):
                self.contexts.append(tt)

            def before_test(self, tt, suite_name, test_name):
                self.contexts.append(tt)

        suite = WithContext()
        run(t, suite)

        assert len(suite.contexts) == 3
        assert all(c is suite.contexts[0] for c in suite.contexts)
        assert suite.contexts[0].name().endswith("/test_one")

    def test_handle_stats(self, t):
        class Stats(Suite):
            def handle_stats(self, suite_name, stats):
                self.received = (suite_name, stats)

            def test_pass(self):
                pass

            def test_fail(self):
                self.assert_.true(False)

        suite = Stats()
        info = run(t, suite)

        name, stats = suite.received
        assert name == "Stats"
        assert stats is info
        assert stats.start is not None and stats.end is not None
        assert stats.end >= stats.start
        assert stats.test_stats["test_pass"].passed
        assert not stats.test_stats["test_fail"].passed
        assert stats.test_stats["test_pass"].duration_ms >= 0
        assert not stats.passed()


# =============================================================================
# Failure isolation
# =============================================================================


class TestFailureIsolation:
    def test_teardown_runs_after_failures(self, t):
        class Failing(Suite):
            def __init__(self):
                self.teardowns = []

            def setup_test(self):
                pass

            def teardown_test(self):
                self.teardowns.append(self.t().name())

            def test_assert_fails(self):
                self.assert_.equal(1, 2)

            def test_require_fails(self):
                self.require.equal(1, 2)
                raise AssertionError("not reached")

            def test_raises(self):
                raise ValueError("boom")

            def test_passes(self):
                pass

        suite = Failing()
        run(t, suite)

        assert len(suite.teardowns) == 4
        assert [n.rsplit("/", 1)[-1] for n in suite.teardowns] == [
            "test_assert_fails",
            "test_require_fails",
            "test_raises",
            "test_passes",
        ]
        results = children(t)
        assert results["test_assert_fails"].status is ResultStatus.FAILED
        assert results["test_require_fails"].status is ResultStatus.FAILED
        assert "not reached" not in (results["test_require_fails"].message or "")
        assert "test panicked" in results["test_raises"].message
        assert "boom" in results["test_raises"].message
        assert results["test_passes"].status is ResultStatus.PASSED
        assert t.failed()

    def test_failing_setup_test_skips_the_test(self, t):
        class BadSetup(Suite):
            def __init__(self):
                self.log = []

            def setup_test(self):
                raise RuntimeError("no database")

            def test_one(self):
                self.log.append("test_one")

            def teardown_test(self):
                self.log.append("teardown_test")

        suite = BadSetup()
        run(t, suite)

        assert suite.log == ["teardown_test"]
        assert "setup_test panicked" in children(t)["test_one"].message

    def test_failing_before_test_still_runs_after_test(self, t):
        class BadBefore(Suite):
            def __init__(self):
                self.log = []

            def before_test(self, suite_name, test_name):
                self.t().fail_now()

            def after_test(self, suite_name, test_name):
                self.log.append("after_test")

            def test_one(self):
                self.log.append("test_one")

        suite = BadBefore()
        run(t, suite)

        assert suite.log == ["after_test"]
        assert children(t)["test_one"].status is ResultStatus.FAILED

    def test_failing_setup_suite(self, t):
        class BadSuite(Suite):
            def __init__(self):
                self.log = []

            def setup_suite(self):
                raise RuntimeError("cannot start")

            def test_one(self):
                self.log.append("test_one")

            def teardown_suite(self):
                self.log.append("teardown_suite")

        suite = BadSuite()
        run(t, suite)

        assert suite.log == ["teardown_suite"]
        assert t.failed()
        assert any("setup_suite panicked" in e for e in t.errors)

    def test_skip(self, t):
        class Skipping(Suite):
            def test_skipped(self):
                self.t().skip("not today")

        run(t, Skipping())

        result = children(t)["test_skipped"]
        assert result.status is ResultStatus.SKIPPED
        assert not t.failed()

    def test_context_is_required(self):
        with pytest.raises(UsageError):
            RecordingSuite().t()

    def test_none_suite(self, t):
        with pytest.raises(UsageError):
            run(t, None)


# =============================================================================
# Filtering
# =============================================================================


class TestFiltering:
    def test_filter_selects_tests(self, t):
        suite = RecordingSuite()
        run(t, suite, with_test_filter(lambda name: name == "test_b"))

        assert "test_a" not in suite.log
        assert "test_b" in suite.log

    def test_empty_selection_fires_no_hooks(self, t):
        suite = RecordingSuite()
        info = run(t, suite, RunOptions(test_filter=lambda name: False))

        assert suite.log == []
        assert info.test_stats == {}
        assert "warning: no tests to run" in t.logs
        assert not t.failed()

    def test_configured_match(self, t):
        set_config(AssertkitConfig(suite=SuiteConfig(match="_a$")))
        suite = RecordingSuite()
        run(t, suite)
        assert suite.log.count("setup_test") == 1
        assert "test_a" in suite.log

    def test_ignore_match(self, t):
        set_config(AssertkitConfig(suite=SuiteConfig(match="_a$")))
        suite = RecordingSuite()
        run(t, suite, with_ignore_match())
        assert "test_b" in suite.log

    def test_broken_filter(self, t):
        def broken(name):
            raise ValueError("bad filter")

        suite = RecordingSuite()
        run(t, suite, with_test_filter(broken))

        assert suite.log == []
        assert t.failed()
        assert "invalid test filter" in t.errors[0]


# =============================================================================
# Subtests
# =============================================================================


class TestSubtests:
    def test_subtests_are_wrapped(self, t):
        class WithSubtests(Suite):
            def __init__(self):
                self.log = []

            def setup_subtest(self):
                self.log.append("setup_subtest")

            def teardown_subtest(self):
                self.log.append("teardown_subtest")

            def test_cases(self):
                for value in (1, 2):
                    self.run(f"case_{value}", lambda: self.log.append(self.t().name()))
                self.log.append("after:" + self.t().name())

        suite = WithSubtests()
        run(t, suite)

        parent = f"{t.name()}/test_cases"
        assert suite.log == [
            "setup_subtest",
            f"{parent}/case_1",
            "teardown_subtest",
            "setup_subtest",
            f"{parent}/case_2",
            "teardown_subtest",
            f"after:{parent}",
        ]

    def test_failing_subtest_fails_the_test(self, t):
        class FailingSubtest(Suite):
            def test_cases(self):
                ok = self.run("bad", lambda st: st.error("broken"))
                self.assert_.false(ok)

        run(t, FailingSubtest())

        result = children(t)["test_cases"]
        assert result.status is ResultStatus.FAILED
        assert [c.name.rsplit("/", 1)[-1] for c in result.children] == ["bad"]
        assert result.children[0].errors == ["broken"]


# =============================================================================
# Async tests and timeouts
# =============================================================================


class TestAsyncAndTimeouts:
    def test_async_test_method(self, t):
        class AsyncSuite(Suite):
            async def test_sleep(self):
                await asyncio.sleep(0.01)
                self.assert_.equal(2, 1 + 1)

            async def test_fails(self):
                await asyncio.sleep(0)
                self.assert_.equal(3, 1 + 1)

        run(t, AsyncSuite())

        results = children(t)
        assert results["test_sleep"].status is ResultStatus.PASSED
        assert results["test_fails"].status is ResultStatus.FAILED

    def test_sync_timeout(self, t):
        set_config(AssertkitConfig(suite=SuiteConfig(timeout_ms=50)))

        class Slow(Suite):
            def test_slow(self):
                time.sleep(0.3)

            def test_fast(self):
                pass

        run(t, Slow())

        results = children(t)
        assert "timed out after 50ms" in results["test_slow"].message
        assert results["test_fast"].status is ResultStatus.PASSED

    def test_async_timeout(self, t):
        set_config(AssertkitConfig(suite=SuiteConfig(timeout_ms=50)))

        class SlowAsync(Suite):
            async def test_slow(self):
                await asyncio.sleep(1)

        run(t, SlowAsync())

        assert "timed out after 50ms" in children(t)["test_slow"].message


# =============================================================================
# Plain objects as suites
# =============================================================================


class TestPlainSuites:
    def test_object_without_suite_base(self, t):
        class Plain:
            def __init__(self):
                self.log = []

            def setup_test(self, tt):
                self.log.append("setup_test")

            def test_one(self, tt):
                self.log.append(tt.name())

        suite = Plain()
        run(t, suite)

        assert suite.log == ["setup_test", f"{t.name()}/test_one"]
