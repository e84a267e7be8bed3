"""Polling assertions: eventually, eventually_with_t and never.

Each call evaluates its condition on daemon worker threads. The first evaluation
happens immediately, later ones on every tick; at most one evaluation is in
flight at a time. An evaluation still running when the total timeout expires
is abandoned, not cancelled.

A condition that stops through ``fail_now`` (``TestAborted``) fails the
assertion with "Condition exited unexpectedly". Any other exception raised by
the condition is not caught: it propagates to the caller.
"""

from __future__ import annotations

import concurrent.futures
import datetime
import threading
import time
from typing import Any, Callable

from assertkit.assertions.context import call_helper
from assertkit.assertions.core import fail
from assertkit.async_runner import start_daemon
from assertkit.config import get_config
from assertkit.diagnostics import TestAborted

_EXITED = object()


def _seconds(value: datetime.timedelta | float | None) -> float:
    if value is None:
        return get_config().assertions.eventually_tick_ms / 1000.0
    if isinstance(value, datetime.timedelta):
        return value.total_seconds()
    return float(value)


class _CollectAborted(TestAborted):
    """Raised by CollectT.fail_now; ends the current tick only."""


class CollectT:
    """Collects the assertion failures of one eventually_with_t tick."""

    __test__ = False

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._errors: list[str] = []
        self._logs: list[str] = []
        self._failed = False

    def error(self, message: str) -> None:
        with self._lock:
            self._errors.append(str(message))
            self._failed = True

    def errorf(self, fmt: str, *args: Any) -> None:
        self.error(fmt % args if args else fmt)

    def log(self, message: str) -> None:
        with self._lock:
            self._logs.append(str(message))

    def helper(self) -> None:
        pass

    def fail(self) -> None:
        with self._lock:
            self._failed = True

    def fail_now(self) -> None:
        self.fail()
        raise _CollectAborted()

    def failed(self) -> bool:
        with self._lock:
            return self._failed

    @property
    def errors(self) -> list[str]:
        with self._lock:
            return list(self._errors)

    @property
    def logs(self) -> list[str]:
        with self._lock:
            return list(self._logs)


def _guard(condition: Callable[[], Any]) -> Callable[[], Any]:
    """Turn a condition's TestAborted into the exited sentinel."""

    def evaluate() -> Any:
        try:
            return condition()
        except _CollectAborted:
            raise
        except TestAborted:
            return _EXITED

    return evaluate


def _poll(
    condition: Callable[[], Any],
    wait_for: float,
    tick: float,
    on_result: Callable[[Any], bool],
) -> tuple[str, Any]:
    """Evaluate condition every tick until on_result accepts a result.

    Returns ("done", result), ("exited", None) or ("timeout", None).
    """
    start = time.monotonic()
    deadline = start + wait_for
    next_tick = start
    future: concurrent.futures.Future[Any] | None = None
    while True:
        now = time.monotonic()
        if now >= deadline:
            return "timeout", None
        if future is None:
            if now < next_tick:
                time.sleep(min(next_tick, deadline) - now)
                continue
            future = start_daemon(_guard(condition), name="assertkit-eventually")
            next_tick = now + tick
        done, _ = concurrent.futures.wait([future], timeout=deadline - now)
        if not done:
            continue
        result = future.result()
        future = None
        if result is _EXITED:
            return "exited", None
        if on_result(result):
            return "done", result


def eventually(
    t: Any,
    condition: Callable[[], bool],
    wait_for: datetime.timedelta | float,
    tick: datetime.timedelta | float | None,
    *msg_and_args: Any,
) -> bool:
    """Assert that condition returns True within wait_for, checking every tick.

        eventually(t, lambda: ready.is_set(), 1.0, 0.01)
    """
    call_helper(t)
    outcome, _ = _poll(condition, _seconds(wait_for), _seconds(tick), bool)
    if outcome == "exited":
        return fail(t, "Condition exited unexpectedly", *msg_and_args)
    if outcome == "timeout":
        return fail(t, "Condition never satisfied", *msg_and_args)
    return True


def eventually_with_t(
    t: Any,
    condition: Callable[[CollectT], Any],
    wait_for: datetime.timedelta | float,
    tick: datetime.timedelta | float | None,
    *msg_and_args: Any,
) -> bool:
    """Assert that a tick of condition finishes without assertion failures.

    The condition receives a fresh CollectT each tick and runs assertions
    against it. If no tick succeeds before wait_for elapses, the failures of
    the last completed tick are reported on t.

        def check(c):
            equal(c, 200, fetch_status())

        eventually_with_t(t, check, 1.0, 0.05)
    """
    call_helper(t)
    last: list[CollectT] = []

    def run_tick() -> CollectT:
        collect = CollectT()
        try:
            condition(collect)
        except _CollectAborted:
            pass
        return collect

    def accept(collect: CollectT) -> bool:
        if collect.failed():
            last[:] = [collect]
            return False
        return True

    outcome, _ = _poll(run_tick, _seconds(wait_for), _seconds(tick), accept)
    if outcome == "exited":
        return fail(t, "Condition exited unexpectedly", *msg_and_args)
    if outcome == "timeout":
        if last:
            for message in last[0].logs:
                t.log(message)
            for message in last[0].errors:
                t.error(message)
        return fail(t, "Condition never satisfied", *msg_and_args)
    return True


def never(
    t: Any,
    condition: Callable[[], bool],
    wait_for: datetime.timedelta | float,
    tick: datetime.timedelta | float | None,
    *msg_and_args: Any,
) -> bool:
    """Assert that condition never returns True within wait_for."""
    call_helper(t)
    outcome, _ = _poll(condition, _seconds(wait_for), _seconds(tick), bool)
    if outcome == "exited":
        return fail(t, "Condition exited unexpectedly", *msg_and_args)
    if outcome == "done":
        return fail(t, "Condition satisfied", *msg_and_args)
    return True
