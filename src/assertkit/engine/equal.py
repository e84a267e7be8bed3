"""Deep structural equality.

Three equivalence relations are provided:

- ``equal_deep``: recursive structural equality with identical types
  required at every level.
- ``equal_values``: ``equal_deep`` or, failing that, equality after a total
  conversion of the expected value to the actual value's type.
- ``equal_exported``: ``equal_deep`` after hidden (underscore) record fields
  have been dropped from both operands.
"""

from __future__ import annotations

import collections
from dataclasses import dataclass, field
from decimal import Decimal
from fractions import Fraction
from typing import Any

from assertkit.engine.kinds import (
    Kind,
    has_equal_capability,
    is_hidden,
    kind_of,
    record_fields,
)

_NOT_CONVERTIBLE = object()


def equal_deep(expected: Any, actual: Any) -> bool:
    """Determine whether two values are structurally equal.

    This function does no assertion of any kind.
    """
    return _equal(expected, actual, set())


def _equal(a: Any, b: Any, visited: set[tuple[int, int, type]]) -> bool:
    if a is None or b is None:
        return a is None and b is None

    ka = kind_of(a)
    kb = kind_of(b)
    if ka is Kind.BYTES and kb is Kind.BYTES:
        return bytes(a) == bytes(b)
    if ka is not kb:
        return False
    if ka is Kind.CALLABLE:
        return False
    if ka in (Kind.CHANNEL, Kind.TYPE):
        return a is b
    if type(a) is not type(b):
        return False

    if ka in (Kind.BOOL, Kind.INTEGER, Kind.FLOAT, Kind.COMPLEX, Kind.STRING, Kind.USER):
        return bool(a == b)

    if a is b:
        return True
    key = (id(a), id(b), type(a))
    if key in visited:
        return True
    visited.add(key)

    if ka is Kind.SEQUENCE:
        if len(a) != len(b):
            return False
        return all(_equal(x, y, visited) for x, y in zip(a, b))

    if ka is Kind.MAPPING:
        if len(a) != len(b):
            return False
        keys_b = {k: k for k in b}
        for k, v in a.items():
            if k not in b:
                return False
            # 1, 1.0 and True hash alike but are different keys.
            if type(k) is not type(keys_b[k]):
                return False
            if not _equal(v, b[k], visited):
                return False
        return True

    if ka is Kind.SET:
        if len(a) != len(b):
            return False
        members = list(b)
        used: set[int] = set()
        for x in a:
            match = _match_member(x, members, used, visited)
            if match is None:
                return False
            used.add(match)
        return True

    # Kind.RECORD
    if has_equal_capability(type(a)):
        return bool(a == b)
    fa = dict(record_fields(a))
    fb = dict(record_fields(b))
    if fa.keys() != fb.keys():
        return False
    return all(_equal(value, fb[name], visited) for name, value in fa.items())


def _match_member(
    value: Any,
    members: list[Any],
    used: set[int],
    visited: set[tuple[int, int, type]],
) -> int | None:
    """Index of the first unused member deeply equal to value, or None.

    Each member pairs with at most one value. Trial comparisons run against a
    copy of visited so a failed attempt leaves no pairs behind.
    """
    for i, member in enumerate(members):
        if i in used:
            continue
        trial = set(visited)
        if _equal(value, member, trial):
            visited.update(trial)
            return i
    return None


def equal_values(expected: Any, actual: Any) -> bool:
    """Determine whether two values are equal, or equal after conversion.

    The expected value is converted to the actual value's type only when the
    conversion is total (lossless); cross-kind coercions are never made.
    """
    if equal_deep(expected, actual):
        return True
    if actual is None or expected is None:
        return False
    converted = convert(expected, type(actual))
    if converted is _NOT_CONVERTIBLE:
        return False
    return equal_deep(converted, actual)


def convert(value: Any, target: type) -> Any:
    """Convert value to target when the conversion is total.

    Returns a private sentinel when it is not; callers use ``is_convertible``.
    """
    source_kind = kind_of(value)
    if source_kind in (Kind.BOOL, Kind.NIL, Kind.CALLABLE, Kind.CHANNEL, Kind.TYPE):
        return _NOT_CONVERTIBLE
    if issubclass(target, bool):
        return _NOT_CONVERTIBLE

    try:
        if source_kind is Kind.INTEGER:
            if issubclass(target, (int, float, complex, Decimal, Fraction)):
                return target(value)
        elif source_kind is Kind.FLOAT:
            if issubclass(target, (float, complex)):
                return target(value)
            if issubclass(target, int) and value.is_integer():
                return target(int(value))
            if issubclass(target, (Decimal, Fraction)):
                return target(value)
        elif source_kind is Kind.COMPLEX:
            if issubclass(target, complex):
                return target(value)
        elif source_kind is Kind.STRING:
            if issubclass(target, str):
                return target(value)
        elif source_kind is Kind.SEQUENCE:
            if issubclass(target, (list, tuple, collections.deque)):
                return target(value)
        elif source_kind is Kind.MAPPING:
            if issubclass(target, dict):
                return target(value)
        elif source_kind is Kind.SET:
            if issubclass(target, (set, frozenset)):
                return target(value)
        elif source_kind is Kind.USER:
            if isinstance(value, (Decimal, Fraction)) and issubclass(target, (Decimal, Fraction)):
                return target(value)
    except (TypeError, ValueError, OverflowError, ArithmeticError):
        return _NOT_CONVERTIBLE
    return _NOT_CONVERTIBLE


def is_convertible(value: Any, target: type) -> bool:
    return convert(value, target) is not _NOT_CONVERTIBLE


@dataclass(eq=False)
class ExportedRecord:
    """A record with its hidden fields removed.

    Two exported records compare equal when they project records of the same
    type whose visible fields are equal.
    """

    type_: type
    fields: dict[str, Any] = field(default_factory=dict)


def copy_exported(value: Any, _memo: dict[int, Any] | None = None) -> Any:
    """Create a copy of value that only contains visible record fields.

    Sequences, mappings and sets are copied so the projection reaches into
    them; scalars and bytes are returned unchanged.
    """
    memo = {} if _memo is None else _memo
    if id(value) in memo:
        return memo[id(value)]

    kind = kind_of(value)
    if kind is Kind.RECORD:
        record = ExportedRecord(type(value))
        memo[id(value)] = record
        for name, child in record_fields(value):
            if not is_hidden(name):
                record.fields[name] = copy_exported(child, memo)
        return record

    if kind is Kind.SEQUENCE:
        if isinstance(value, range):
            return value
        if isinstance(value, list):
            items: list[Any] = []
            memo[id(value)] = items
            items.extend(copy_exported(child, memo) for child in value)
            return items
        return type(value)(copy_exported(child, memo) for child in value)

    if kind is Kind.MAPPING:
        try:
            result = type(value)()
        except TypeError:
            result = {}
        memo[id(value)] = result
        for k, v in value.items():
            result[k] = copy_exported(v, memo)
        return result

    if kind is Kind.SET:
        try:
            return type(value)(copy_exported(child, memo) for child in value)
        except TypeError:
            return value

    return value


def equal_exported(expected: Any, actual: Any) -> bool:
    """Determine whether the visible fields of two values are equal.

    Hidden fields are removed recursively inside sequences, mappings and
    records before the deep comparison.
    """
    return equal_deep(copy_exported(expected), copy_exported(actual))
