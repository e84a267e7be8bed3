"""pytest integration.

Provides a ``t`` fixture so assertkit assertions can be used in plain pytest
tests:

    from assertkit import assertions as assert_

    def test_user(t):
        assert_.equal(t, "ann", load_user().name)

Failures recorded on ``t`` fail the test when its body returns.
"""

from __future__ import annotations

from typing import Iterator

import pytest

from assertkit.assertions.context import T
from assertkit.diagnostics import TestAborted, TestSkipped

context_key = pytest.StashKey[T]()


def _context_name(request: pytest.FixtureRequest) -> str:
    return request.node.nodeid.replace("::", "/")


def _failure(context: T, errors: list[str]) -> str:
    return "\n".join(errors) or f"{context.name()} failed"


def _all_errors(context: T) -> list[str]:
    """Errors of the context and of every subtest it ran."""
    return [error for result in context.result().walk() for error in result.errors]


@pytest.fixture
def t(request: pytest.FixtureRequest) -> Iterator[T]:
    """A test context whose failures fail the pytest test."""
    context = T(_context_name(request))
    request.node.stash[context_key] = context
    yield context
    reported = len(context.errors)
    context.run_cleanups()
    # Errors from cleanups were not seen by the call phase.
    late = context.errors[reported:]
    if late:
        pytest.fail(_failure(context, late), pytrace=False)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_call(item: pytest.Item) -> Iterator[None]:
    """Turn failures recorded on ``t`` into a failed test.

    ``t.fail_now()`` and ``t.skip()`` stop a test without an error of their own.
    """
    outcome = yield
    exc = outcome.excinfo[1] if outcome.excinfo is not None else None
    if isinstance(exc, TestSkipped):
        outcome.force_exception(pytest.skip.Exception(str(exc) or "skipped", _use_item_location=True))
        return
    if isinstance(exc, TestAborted):
        outcome.force_result(None)
        exc = None
    context = item.stash.get(context_key, None)
    if exc is None and context is not None and context.failed():
        outcome.force_exception(pytest.fail.Exception(_failure(context, _all_errors(context)), pytrace=False))
