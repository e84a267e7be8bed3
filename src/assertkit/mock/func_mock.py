"""Mocks for free functions.

    fm = func_mock_for(fetch)
    fm.on("https://example.com").returns(b"ok", None)
    fake_fetch = fm.build()
"""

from __future__ import annotations

import functools
import inspect
import typing
from typing import Any, Callable

from assertkit.diagnostics import FuncMockNotFuncError, UsageError
from assertkit.engine import Kind, kind_of
from assertkit.mock.call import Call
from assertkit.mock.mock import Mock

FUNC_METHOD = "func"


def _return_arity(fn: Callable[..., Any]) -> int | None:
    """Number of values fn returns per its annotation, or None when unknown."""
    try:
        hints = typing.get_type_hints(fn)
    except (NameError, TypeError, AttributeError):
        return None
    if "return" not in hints:
        return None
    returns = hints["return"]
    if returns is None or returns is type(None):
        return 0
    if typing.get_origin(returns) is tuple:
        args = typing.get_args(returns)
        if Ellipsis in args:
            return None
        if args == ((),):
            return 0
        return len(args)
    return 1


class FuncMock:
    """A mock standing in for a plain function.

    Each call of the built function is dispatched as a call of the method
    ``"func"`` on an internal Mock.
    """

    def __init__(self, fn: Callable[..., Any]):
        self.fn = fn
        self.mock = Mock()
        self.arity = _return_arity(fn)
        try:
            self.signature: inspect.Signature | None = inspect.signature(fn)
        except (TypeError, ValueError):
            self.signature = None

    def on(self, *arguments: Any) -> Call:
        return self.mock.on(FUNC_METHOD, *arguments)

    def test(self, t: Any) -> FuncMock:
        self.mock.test(t)
        return self

    def build(self) -> Callable[..., Any]:
        """Return a function with fn's signature that dispatches to this mock."""

        @functools.wraps(self.fn)
        def mocked(*args: Any, **kwargs: Any) -> Any:
            if kwargs:
                if self.signature is None:
                    raise UsageError(f"{self.fn!r} does not support keyword arguments")
                bound = self.signature.bind(*args, **kwargs)
                args = bound.args + tuple(bound.kwargs.values())
            outs = self.mock.method_called(FUNC_METHOD, *args)
            return self._result(outs)

        return mocked

    def _result(self, outs: tuple) -> Any:
        if self.arity is not None and len(outs) != self.arity:
            raise UsageError(
                f"mock for {getattr(self.fn, '__qualname__', self.fn)!r} returns {len(outs)} "
                f"value(s) but the function returns {self.arity}"
            )
        if len(outs) == 0:
            return None
        if len(outs) == 1:
            return outs[0]
        return tuple(outs)

    def assert_expectations(self, t: Any) -> bool:
        return self.mock.assert_expectations(t)

    def assert_called(self, t: Any, *arguments: Any) -> bool:
        return self.mock.assert_called(t, FUNC_METHOD, *arguments)

    def assert_not_called(self, t: Any, *arguments: Any) -> bool:
        return self.mock.assert_not_called(t, FUNC_METHOD, *arguments)

    def assert_number_of_calls(self, t: Any, expected_calls: int) -> bool:
        return self.mock.assert_number_of_calls(t, FUNC_METHOD, expected_calls)


def func_mock_for(fn: Any) -> FuncMock:
    """Create a FuncMock for fn.

    Raises:
        FuncMockNotFuncError: If fn is not a function.
    """
    if fn is None or kind_of(fn) is not Kind.CALLABLE:
        raise FuncMockNotFuncError(f"not a function: {fn!r}")
    return FuncMock(fn)
