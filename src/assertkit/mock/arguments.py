"""Argument lists for mock expectations and recorded calls."""

from __future__ import annotations

from typing import Any

from assertkit.assertions.core import fail
from assertkit.diagnostics import UsageError
from assertkit.engine import AnyOfType, Anything, Matcher, describe, match
from assertkit.engine.kinds import type_name


class Arguments(tuple):
    """An ordered list of call arguments, matchers or return values.

    The typed accessors raise ``UsageError`` when the value at the index is
    missing or of the wrong type.
    """

    def get(self, index: int) -> Any:
        if index >= len(self) or index < -len(self):
            raise UsageError(
                f"assert: arguments: Cannot call get({index}) because there are {len(self)} argument(s)."
            )
        return self[index]

    def _typed(self, index: int, accessor: str, types: type | tuple[type, ...]) -> Any:
        value = self.get(index)
        if not isinstance(value, types) or (types is int and isinstance(value, bool)):
            raise UsageError(
                f"assert: arguments: {accessor}({index}) failed because object wasn't "
                f"correct type: {value!r}"
            )
        return value

    def int(self, index: int) -> int:
        return self._typed(index, "int", int)

    def float(self, index: int) -> float:
        return self._typed(index, "float", float)

    def str(self, index: int) -> str:
        return self._typed(index, "str", str)

    def bool(self, index: int) -> bool:
        return self._typed(index, "bool", bool)

    def error(self, index: int) -> BaseException | None:
        """Return the exception at index, allowing None."""
        value = self.get(index)
        if value is None:
            return None
        if not isinstance(value, BaseException):
            raise UsageError(
                f"assert: arguments: error({index}) failed because object wasn't correct type: {value!r}"
            )
        return value

    def is_(self, *objects: Any) -> bool:
        """Report whether objects are the very same objects as these arguments."""
        if len(objects) != len(self):
            return False
        return all(a is b for a, b in zip(self, objects))

    def diff(self, objects: tuple | list) -> tuple[str, int]:
        """Compare these matchers with actual call arguments.

        Returns a human-readable report and the number of differences.
        """
        output = "\n"
        differences = 0
        count = max(len(self), len(objects))
        for i in range(count):
            missing_actual = i >= len(objects)
            missing_expected = i >= len(self)
            actual = "(Missing)" if missing_actual else objects[i]
            expected = "(Missing)" if missing_expected else self[i]

            if missing_actual or missing_expected:
                differences += 1
                output += f"\t{i}: FAIL:  {_render(actual)} != {_render(expected)}\n"
                continue

            if isinstance(expected, Matcher) and expected is not Anything:
                if match(expected, actual):
                    output += f"\t{i}: PASS:  {_render(actual)} matched by {describe(expected)}\n"
                else:
                    differences += 1
                    if isinstance(expected, AnyOfType):
                        output += (
                            f"\t{i}: FAIL:  type {expected.name} != type {type_name(actual)} - {_render(actual)}\n"
                        )
                    else:
                        output += f"\t{i}: FAIL:  {describe(expected)} not matched by {_render(actual)}\n"
                continue

            if expected is Anything or actual is Anything or match(expected, actual):
                output += f"\t{i}: PASS:  {_render(actual)} == {_render(expected)}\n"
            else:
                differences += 1
                output += f"\t{i}: FAIL:  {_render(actual)} != {_render(expected)}\n"

        if differences == 0:
            return "No differences.", 0
        return output, differences

    def assert_(self, t: Any, *objects: Any) -> bool:
        """Fail t unless objects match these arguments exactly."""
        output, differences = self.diff(objects)
        if differences == 0:
            return True
        t.log(output)
        return fail(t, "Arguments do not match.")

    def __repr__(self) -> str:
        return f"Arguments({', '.join(_render(v) for v in self)})"

    def signature(self) -> str:
        """Type signature of the arguments, e.g. ``str,int``."""
        return ",".join(_signature_of(v) for v in self)


def _signature_of(value: Any) -> str:
    if isinstance(value, Matcher):
        return describe(value)
    return type_name(value)


def _render(value: Any) -> str:
    if isinstance(value, Matcher):
        return describe(value)
    return repr(value)
