"""Assertions bound to a test context.

    a = assertkit.new(t)
    a.equal(123, 123)
    a.contains("Hello World", "World")
"""

from __future__ import annotations

import functools
from types import ModuleType
from typing import Any, Callable

from assertkit import assertions, require


class _Bound:
    _module: ModuleType

    def __init__(self, t: Any):
        self.t = t

    def __getattr__(self, name: str) -> Callable[..., bool]:
        if name.startswith("_") or name not in assertions.ASSERTIONS:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return functools.partial(getattr(self._module, name), self.t)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(assertions.ASSERTIONS))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.t!r})"


class Assertions(_Bound):
    """Assertion functions with the test context already applied."""

    _module = assertions


class Requirements(_Bound):
    """Fail-fast assertion functions with the test context already applied."""

    _module = require


def new(t: Any) -> Assertions:
    """Return an Assertions object bound to t."""
    return Assertions(t)
