"""The Mock object.

Subclass ``Mock`` and forward each mocked method to ``called``:

    class Store(Mock):
        def get(self, key):
            args = self.called(key)
            return args.get(0), args.error(1)

    def test_lookup(t):
        store = Store()
        store.on("get", "answer").returns(42, None).once()
        ...
        store.assert_expectations(t)
"""

from __future__ import annotations

import copy
import logging
import sys
import threading
from typing import Any

from assertkit.assertions.context import call_helper
from assertkit.assertions.core import equal, fail
from assertkit.diagnostics import UnexpectedCallError, UsageError, caller_info
from assertkit.engine import Kind, kind_of
from assertkit.mock.arguments import Arguments
from assertkit.mock.call import Call

logger = logging.getLogger(__name__)


def call_string(method: str, arguments: Arguments, include_values: bool) -> str:
    values = ""
    if include_values:
        values = "".join(f"\n\t\t{i}: {v!r}" for i, v in enumerate(arguments))
    return f"{method}({arguments.signature()}){values}"


class Mock:
    """Records expectations and the calls actually made.

    ``expected_calls`` and ``calls`` are guarded by a plain lock held only for
    selection and bookkeeping; waits and ``run`` callbacks happen outside it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.expected_calls: list[Call] = []
        self.calls: list[Call] = []
        self._test_data: dict[str, Any] | None = None
        self._t: Any = None

    def __deepcopy__(self, memo: dict[int, Any]) -> Mock:
        clone = type(self).__new__(type(self))
        memo[id(self)] = clone
        with self._lock:
            state = dict(self.__dict__)
            expected = list(self.expected_calls)
            recorded = list(self.calls)
        for key, value in state.items():
            if key not in ("_lock", "_t", "expected_calls", "calls"):
                clone.__dict__[key] = copy.deepcopy(value, memo)
        clone._lock = threading.Lock()
        clone._t = state.get("_t")
        copies: dict[int, Call] = {}
        for call in expected:
            copied = copy.copy(call)
            copied.parent = clone
            copies[id(call)] = copied
        for copied in copies.values():
            copied.requires = [copies.get(id(req), req) for req in copied.requires]
        clone.expected_calls = list(copies.values())
        clone.calls = recorded
        return clone

    def test_data(self) -> dict[str, Any]:
        """Free-form state owned by the user, created on first use."""
        with self._lock:
            if self._test_data is None:
                self._test_data = {}
            return self._test_data

    def test(self, t: Any) -> Mock:
        """Report programmer errors (such as unexpected calls) on t instead of raising."""
        with self._lock:
            self._t = t
        return self

    def on(self, method: str, *arguments: Any) -> Call:
        """Register an expectation for method called with arguments.

            m.on("my_method", arg1, arg2)

        Raw callables are rejected; use ``matched_by`` or ``any_of_type``.
        """
        for arg in arguments:
            if kind_of(arg) is Kind.CALLABLE:
                raise UsageError(
                    f"cannot use callable {arg!r} as an argument to on(); "
                    "use matched_by() or any_of_type() instead"
                )
        call = Call(self, method, Arguments(arguments), caller_info=caller_info())
        with self._lock:
            self.expected_calls.append(call)
        logger.debug("mock %s: registered %s", type(self).__name__, call_string(method, call.arguments, False))
        return call

    # Dispatch

    def called(self, *arguments: Any) -> Arguments:
        """Tell the mock that the calling method has been called.

        The method name is taken from the caller's frame. Returns the
        registered return values.
        """
        method = sys._getframe(1).f_code.co_name
        return self.method_called(method, *arguments)

    def method_called(self, method: str, *arguments: Any) -> Arguments:
        """Tell the mock that method has been called with arguments."""
        args = Arguments(arguments)
        message = None
        closest: Call | None = None
        with self._lock:
            call = self._find_expected_call(method, args)
            if call is None:
                closest, diff = self._find_closest_call(method, args)
                message = self._unexpected_message(method, args, closest, diff)
            else:
                missing = [req for req in call.requires if req.total_calls == 0]
                if missing:
                    message = (
                        "mock: Unexpected Method Call\n-----------------------------\n\n"
                        f"{call_string(method, args, True)}\n\n"
                        "Must not be called before:\n\n"
                        + "\n".join(call_string(req.method, req.arguments, True) for req in missing)
                    )
                    closest = call
                    call = None
                else:
                    call.total_calls += 1
                    if call.repeatability == 1:
                        call.repeatability = -1
                    elif call.repeatability > 1:
                        call.repeatability -= 1
                    self.calls.append(Call(self, method, args, call.return_arguments))
            t = self._t

        if call is None:
            logger.debug("mock %s: unexpected call %s", type(self).__name__, call_string(method, args, False))
            self._fail(t, UnexpectedCallError(message, method, tuple(args), closest))

        logger.debug("mock %s: dispatched %s", type(self).__name__, call_string(method, args, False))
        call.wait()
        if call.run_fn is not None:
            call.run_fn(args)
        if call.raises_exc is not None:
            raise call.raises_exc
        return call.return_arguments

    def _find_expected_call(self, method: str, args: Arguments) -> Call | None:
        for call in self.expected_calls:
            if call.method == method and call.repeatability > -1:
                _, differences = call.arguments.diff(args)
                if differences == 0:
                    return call
        return None

    def _find_closest_call(self, method: str, args: Arguments) -> tuple[Call | None, str]:
        best: Call | None = None
        best_diff = ""
        best_count = -1
        for call in self.expected_calls:
            if call.method != method:
                continue
            diff, count = call.arguments.diff(args)
            if best is None or count < best_count:
                best, best_diff, best_count = call, diff, count
        return best, best_diff

    def _unexpected_message(self, method: str, args: Arguments, closest: Call | None, diff: str) -> str:
        if closest is None:
            return (
                "assert: mock: I don't know what to return because the method call was unexpected.\n"
                f'\tEither do Mock.on("{method}").returns(...) first, or remove the {method}() call.\n'
                f"\tThis method was unexpected:\n\t\t{call_string(method, args, True)}"
            )
        message = (
            "mock: Unexpected Method Call\n-----------------------------\n\n"
            f"{call_string(method, args, True)}\n\n"
            f"The closest call I have is: \n\n{call_string(closest.method, closest.arguments, True)}\n\n"
            f"Diff: {diff}"
        )
        if closest.repeatability == -1:
            message += f"\n\nThe expectation was already called {closest.total_calls} time(s)"
        return message

    def _fail(self, t: Any, err: UsageError) -> None:
        if t is None:
            raise err
        fail(t, str(err))
        t.fail_now()
        raise err

    # Assertions

    def assert_expectations(self, t: Any) -> bool:
        """Assert that every expectation registered with on() was met.

        Optional (maybe) expectations are exempt; every other expectation must
        have been called, and bounded ones exactly as many times as declared.
        """
        call_helper(t)
        with self._lock:
            expected = list(self.expected_calls)
            snapshot = [(c, c.total_calls, c.repeatability, c.optional) for c in expected]

        unmet = []
        for call, total, repeatability, optional in snapshot:
            if optional:
                continue
            if total == 0 or repeatability > 0:
                detail = call_string(call.method, call.arguments, True)
                if total > 0:
                    detail += f"\n\t\tcalled {total} time(s), {repeatability} more expected"
                if call.caller_info:
                    detail += f"\n\t\tat: {call.caller_info[0]}"
                unmet.append(detail)
            else:
                t.log(f"PASS:\t{call_string(call.method, call.arguments, False)}")

        if unmet:
            return fail(
                t,
                f"FAIL: {len(expected) - len(unmet)} out of {len(expected)} expectation(s) were met.\n"
                f"\tThe code you are testing needs to make {len(unmet)} more call(s).",
                extra=[("Unmet", "\n".join(unmet))],
            )
        return True

    def _recorded(self) -> list[Call]:
        with self._lock:
            return list(self.calls)

    def _method_was_called(self, method: str, arguments: tuple) -> bool:
        expected = Arguments(arguments)
        for call in self._recorded():
            if call.method == method:
                _, differences = expected.diff(call.arguments)
                if differences == 0:
                    return True
        return False

    def _calls_summary(self) -> str:
        lines = [call_string(c.method, c.arguments, True) for c in self._recorded()]
        return "\n".join(lines) or "(no calls)"

    def assert_called(self, t: Any, method: str, *arguments: Any) -> bool:
        """Assert that method was called with arguments (matchers allowed)."""
        call_helper(t)
        if self._method_was_called(method, arguments):
            return True
        return fail(
            t,
            f'The "{method}" method should have been called with {len(arguments)} argument(s), but was not.',
            extra=[("Calls", self._calls_summary())],
        )

    def assert_not_called(self, t: Any, method: str, *arguments: Any) -> bool:
        """Assert that method was not called with arguments (matchers allowed)."""
        call_helper(t)
        if not self._method_was_called(method, arguments):
            return True
        return fail(
            t,
            f'The "{method}" method was called with {len(arguments)} argument(s), but should NOT have been called.',
            extra=[("Calls", self._calls_summary())],
        )

    def assert_number_of_calls(self, t: Any, method: str, expected_calls: int) -> bool:
        """Assert that method was called exactly expected_calls times."""
        call_helper(t)
        actual = sum(1 for call in self._recorded() if call.method == method)
        return equal(
            t,
            expected_calls,
            actual,
            f"Expected number of calls ({expected_calls}) does not match the actual number of calls ({actual}).",
        )


def assert_expectations_for_objects(t: Any, *test_objects: Any) -> bool:
    """Assert the expectations of every given mock (or function mock)."""
    call_helper(t)
    success = True
    for obj in test_objects:
        mock = getattr(obj, "mock", obj)
        if not isinstance(mock, Mock):
            fail(t, f"Expectations can only be asserted on Mock objects, not {type(obj).__name__}")
            success = False
            continue
        if not mock.assert_expectations(t):
            success = False
    return success
