"""Tests for eventually, eventually_with_t and never."""

import datetime
import subprocess
import sys
import textwrap
import threading
import time

import pytest

from assertkit import assertions as assert_
from assertkit.assertions import CollectT


class TestEventually:
    def test_true_condition_returns_on_first_tick(self, t):
        start = time.monotonic()
        assert assert_.eventually(t, lambda: True, 2.0, 0.5)
        assert time.monotonic() - start < 0.5
        assert not t.failed()

    def test_condition_becomes_true(self, t):
        ready = threading.Event()
        threading.Timer(0.05, ready.set).start()

        assert assert_.eventually(t, ready.is_set, datetime.timedelta(seconds=2), datetime.timedelta(milliseconds=5))

    def test_never_true_times_out(self, t):
        start = time.monotonic()
        assert not assert_.eventually(t, lambda: False, 0.1, 0.02)
        elapsed = time.monotonic() - start
        assert 0.1 <= elapsed < 1.0
        assert len(t.errors) == 1
        assert "Condition never satisfied" in t.errors[0]

    def test_condition_that_exits(self, t, make_t):
        inner = make_t()
        start = time.monotonic()

        assert not assert_.eventually(t, inner.fail_now, 1.0, 0.01)

        assert time.monotonic() - start < 0.5
        assert len(t.errors) == 1
        assert "Condition exited unexpectedly" in t.errors[0]

    def test_condition_errors_propagate(self, t):
        def explode():
            raise ValueError("broken probe")

        with pytest.raises(ValueError, match="broken probe"):
            assert_.eventually(t, explode, 1.0, 0.01)

    def test_default_tick_from_config(self, t):
        calls = []

        def condition():
            calls.append(1)
            return len(calls) >= 2

        assert assert_.eventually(t, condition, 1.0, None)

    def test_slow_condition_is_abandoned_at_timeout(self, t):
        release = threading.Event()
        start = time.monotonic()

        assert not assert_.eventually(t, lambda: release.wait(1.0), 0.1, 0.01)

        assert time.monotonic() - start < 0.5
        release.set()

    def test_abandoned_condition_does_not_block_exit(self):
        script = textwrap.dedent(
            """
            import time
            from assertkit import assertions as assert_
            from assertkit.assertions import T

            assert not assert_.eventually(T("exit"), lambda: time.sleep(5.0), 0.05, 0.01)
            """
        )
        start = time.monotonic()
        subprocess.run([sys.executable, "-c", script], check=True, timeout=30)
        assert time.monotonic() - start < 4.0


class TestEventuallyWithT:
    def test_succeeds_when_a_tick_passes(self, t):
        attempts = []

        def check(c: CollectT):
            attempts.append(1)
            assert_.equal(c, 3, len(attempts))

        assert assert_.eventually_with_t(t, check, 1.0, 0.01)
        assert not t.failed()

    def test_reports_last_tick_errors(self, t):
        def check(c: CollectT):
            assert_.equal(c, "ready", "pending")

        assert not assert_.eventually_with_t(t, check, 0.1, 0.02)

        assert len(t.errors) == 2
        assert "Not equal" in t.errors[0]
        assert "Condition never satisfied" in t.errors[1]

    def test_reports_last_tick_logs(self, t):
        attempts = []

        def check(c: CollectT):
            attempts.append(1)
            c.log(f"attempt {len(attempts)}")
            c.error("not ready")

        assert not assert_.eventually_with_t(t, check, 0.1, 0.02)

        logged = [line for line in t.logs if line.startswith("attempt")]
        assert len(logged) == 1
        assert len(attempts) > 1
        assert t.errors[0] == "not ready"

    def test_collect_fail_now_only_ends_the_tick(self, t):
        attempts = []

        def check(c: CollectT):
            attempts.append(1)
            if len(attempts) < 3:
                c.fail_now()

        assert assert_.eventually_with_t(t, check, 1.0, 0.01)
        assert len(attempts) == 3

    def test_host_abort_exits(self, t, make_t):
        inner = make_t()

        assert not assert_.eventually_with_t(t, lambda c: inner.fail_now(), 1.0, 0.01)
        assert "Condition exited unexpectedly" in t.errors[0]


class TestNever:
    def test_false_condition_passes(self, t):
        start = time.monotonic()
        assert assert_.never(t, lambda: False, 0.1, 0.02)
        assert time.monotonic() - start >= 0.1
        assert not t.failed()

    def test_condition_becomes_true(self, t):
        flag = threading.Event()
        threading.Timer(0.02, flag.set).start()

        assert not assert_.never(t, flag.is_set, 1.0, 0.01)
        assert len(t.errors) == 1
        assert "Condition satisfied" in t.errors[0]

    def test_condition_that_exits(self, t, make_t):
        inner = make_t()
        assert not assert_.never(t, inner.fail_now, 1.0, 0.01)
        assert "Condition exited unexpectedly" in t.errors[0]


class TestCollectT:
    def test_records_errors(self):
        c = CollectT()
        assert not c.failed()
        c.errorf("value %d", 3)
        assert c.failed()
        assert c.errors == ["value 3"]

    def test_keeps_logs(self):
        c = CollectT()
        c.log("polling")
        assert c.logs == ["polling"]
        assert not c.failed()
