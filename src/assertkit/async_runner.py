"""Async execution support for assertkit.

Runs suite test methods (plain or coroutine functions) with timeout
enforcement.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import threading
from typing import Any, Callable, Coroutine

from assertkit.diagnostics import TestTimeoutError


def is_async_callable(func: Any) -> bool:
    """Check if a function is async (coroutine function or has __call__ that is async)."""
    if inspect.iscoroutinefunction(func):
        return True

    # Async callable objects
    call = getattr(func, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


def run_with_timeout(
    func: Callable[..., Any],
    args: tuple = (),
    kwargs: dict[str, Any] | None = None,
    timeout_ms: int | None = None,
) -> Any:
    """Run a function (sync or async) with optional timeout.

    Args:
        func: The function to run.
        args: Positional arguments.
        kwargs: Keyword arguments.
        timeout_ms: Timeout in milliseconds. None means no timeout.

    Returns:
        The return value from the function.

    Raises:
        TestTimeoutError: If the function exceeds the timeout.
        Any exception raised by the function.
    """
    kwargs = kwargs or {}

    if is_async_callable(func):
        return _run_async(func, args, kwargs, timeout_ms)
    return _run_sync(func, args, kwargs, timeout_ms)


def start_daemon(
    func: Callable[..., Any],
    args: tuple = (),
    kwargs: dict[str, Any] | None = None,
    name: str | None = None,
) -> concurrent.futures.Future:
    """Call func on a new daemon thread and return a future for its outcome.

    An abandoned call never keeps the interpreter from exiting.
    """
    future: concurrent.futures.Future = concurrent.futures.Future()

    def target() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = func(*args, **(kwargs or {}))
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)

    threading.Thread(target=target, name=name, daemon=True).start()
    return future


def _run_sync(
    func: Callable[..., Any],
    args: tuple,
    kwargs: dict[str, Any],
    timeout_ms: int | None,
) -> Any:
    """Run a synchronous function with optional timeout.

    The timeout is best-effort: the worker thread is abandoned, not
    interrupted, when the deadline passes.
    """
    if timeout_ms is None:
        return func(*args, **kwargs)

    future = start_daemon(func, args, kwargs, name="assertkit-timeout")
    try:
        return future.result(timeout=timeout_ms / 1000.0)
    except concurrent.futures.TimeoutError:
        raise TestTimeoutError(timeout_ms) from None


def _run_async(
    func: Callable[..., Coroutine[Any, Any, Any]],
    args: tuple,
    kwargs: dict[str, Any],
    timeout_ms: int | None,
) -> Any:
    """Run an async function with optional timeout."""

    async def run_with_optional_timeout() -> Any:
        coro = func(*args, **kwargs)
        if timeout_ms is None:
            return await coro
        try:
            return await asyncio.wait_for(coro, timeout=timeout_ms / 1000.0)
        except asyncio.TimeoutError:
            raise TestTimeoutError(timeout_ms) from None

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(run_with_optional_timeout())

    # Already inside an event loop: run on a fresh loop in a worker thread.
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(asyncio.run, run_with_optional_timeout())
        return future.result()
