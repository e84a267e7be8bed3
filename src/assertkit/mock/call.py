"""Expectation handles returned by ``Mock.on``."""

from __future__ import annotations

import asyncio
import concurrent.futures
import datetime
import queue
import threading
import time
from typing import TYPE_CHECKING, Any, Callable

from assertkit.diagnostics import UsageError
from assertkit.mock.arguments import Arguments

if TYPE_CHECKING:
    from assertkit.mock.mock import Mock


class Call:
    """A method call expectation (or, in ``Mock.calls``, a recorded call).

    Refinement methods mutate the expectation under the parent mock's lock and
    return the handle so they can be chained:

        m.on("get", "key").returns("value", None).once()
    """

    def __init__(
        self,
        parent: Mock | None,
        method: str,
        arguments: Arguments,
        return_arguments: Arguments | None = None,
        caller_info: list[str] | None = None,
    ):
        self.parent = parent
        self.method = method
        self.arguments = arguments
        self.return_arguments = return_arguments if return_arguments is not None else Arguments()
        # 0 means "any number of times"; -1 means exhausted.
        self.repeatability = 0
        self.total_calls = 0
        self.optional = False
        self.wait_for: Any = None
        self.wait_time = 0.0
        self.run_fn: Callable[[Arguments], Any] | None = None
        self.raises_exc: BaseException | None = None
        self.requires: list[Call] = []
        self.caller_info = caller_info or []

    def __repr__(self) -> str:
        return f"Call({self.method}{tuple(self.arguments)!r})"

    def _lock(self) -> Any:
        if self.parent is None:
            raise UsageError(f"call {self.method!r} is not attached to a mock")
        return self.parent._lock

    def returns(self, *values: Any) -> Call:
        """Specify the values returned when this call is made.

            m.on("do_something").returns("result", None)
        """
        with self._lock():
            self.return_arguments = Arguments(values)
        return self

    return_ = returns

    def times(self, n: int) -> Call:
        """Expect the call exactly n times. Zero makes the expectation unbounded again."""
        if n < 0:
            raise UsageError(f"times expects a non-negative count, got {n}")
        with self._lock():
            self.repeatability = n
        return self

    def once(self) -> Call:
        return self.times(1)

    def twice(self) -> Call:
        return self.times(2)

    def maybe(self) -> Call:
        """Allow this expectation not to be called at all."""
        with self._lock():
            self.optional = True
        return self

    def wait_until(self, channel: Any) -> Call:
        """Block the call until channel fires.

        Accepts a ``threading.Event`` (waits until set), a queue (waits for an
        item) or a future (waits for its result).
        """
        with self._lock():
            self.wait_for = channel
        return self

    def after(self, duration: datetime.timedelta | float) -> Call:
        """Sleep for duration (seconds or timedelta) before returning."""
        if isinstance(duration, datetime.timedelta):
            duration = duration.total_seconds()
        with self._lock():
            self.wait_time = float(duration)
        return self

    def run(self, fn: Callable[[Arguments], Any]) -> Call:
        """Run fn with the call's arguments before returning.

        Useful to fill in mutable out-arguments:

            m.on("unmarshal", Anything).returns(None).run(lambda args: args.get(0).update(a=1))
        """
        with self._lock():
            self.run_fn = fn
        return self

    def raises(self, exc: BaseException) -> Call:
        """Raise exc instead of returning."""
        with self._lock():
            self.raises_exc = exc
        return self

    def not_before(self, *calls: Call) -> Call:
        """Require that each of calls was made before this one."""
        with self._lock():
            for call in calls:
                if call.parent is not self.parent:
                    raise UsageError(
                        f"not_before: {call!r} belongs to a different mock than {self!r}"
                    )
                self.requires.append(call)
        return self

    def unset(self) -> Call:
        """Remove this expectation from its mock."""
        with self._lock():
            expected = self.parent.expected_calls
            for i, call in enumerate(expected):
                if call is self:
                    del expected[i]
                    break
            else:
                raise UsageError(f"mock: could not find expected call {self!r} to unset")
        return self

    def on(self, method: str, *arguments: Any) -> Call:
        """Chain a new expectation on the parent mock."""
        if self.parent is None:
            raise UsageError(f"call {self.method!r} is not attached to a mock")
        return self.parent.on(method, *arguments)

    def wait(self) -> None:
        """Block as configured by wait_until or after. Never called under the lock."""
        channel = self.wait_for
        if channel is None:
            if self.wait_time > 0:
                time.sleep(self.wait_time)
            return
        if isinstance(channel, threading.Event):
            channel.wait()
        elif isinstance(channel, (queue.Queue, queue.SimpleQueue)):
            channel.get()
        elif isinstance(channel, concurrent.futures.Future):
            channel.exception()
        elif isinstance(channel, asyncio.Future):
            raise UsageError("wait_until cannot block on an asyncio future")
        elif hasattr(channel, "wait"):
            channel.wait()
        else:
            raise UsageError(f"wait_until: cannot wait on {channel!r}")
