"""Structural diff of two values.

Walks both operands in lockstep and produces a path-addressed list of
differences. The list is empty exactly when ``equal_deep`` holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from assertkit.diagnostics import render_value
from assertkit.engine.equal import equal_deep
from assertkit.engine.kinds import Kind, has_equal_capability, kind_of, record_fields


class _Missing:
    """Snapshot token for a value absent on one side."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<missing>"


MISSING = _Missing()


@dataclass(frozen=True)
class FieldSegment:
    name: str

    def render(self, first: bool) -> str:
        return self.name if first else f".{self.name}"


@dataclass(frozen=True)
class IndexSegment:
    index: int

    def render(self, first: bool) -> str:
        return f"[{self.index}]"


@dataclass(frozen=True)
class KeySegment:
    key: Any

    def render(self, first: bool) -> str:
        return f"[{self.key!r}]"


Segment = Union[FieldSegment, IndexSegment, KeySegment]


def render_path(path: tuple[Segment, ...]) -> str:
    """Render a path like ``Addr.City`` or ``items[2]['name']``."""
    if not path:
        return "<root>"
    return "".join(seg.render(i == 0) for i, seg in enumerate(path))


@dataclass(frozen=True)
class Difference:
    """One disagreement between two structured values."""

    path: tuple[Segment, ...]
    expected: Any
    actual: Any

    @property
    def path_str(self) -> str:
        return render_path(self.path)

    def __str__(self) -> str:
        return (
            f"{self.path_str}: {render_value(self.expected)} != {render_value(self.actual)}"
        )


def diff_structured(expected: Any, actual: Any) -> list[Difference]:
    """Return the differences between expected and actual.

    At the root, a kind mismatch yields one difference holding the two kind
    tags. Sequences of different length yield one whole-operand difference.
    Mapping keys are visited in the order of their rendered form.
    """
    ke = kind_of(expected)
    ka = kind_of(actual)
    if ke is not ka and not (ke is Kind.BYTES and ka is Kind.BYTES):
        return [Difference((), ke, ka)]
    differences: list[Difference] = []
    _walk(expected, actual, (), differences, set())
    return differences


def _walk(
    e: Any,
    a: Any,
    path: tuple[Segment, ...],
    out: list[Difference],
    visited: set[tuple[int, int, type]],
) -> None:
    ke = kind_of(e)
    ka = kind_of(a)

    structured = ke in (Kind.SEQUENCE, Kind.MAPPING, Kind.RECORD)
    if not structured or ke is not ka or type(e) is not type(a):
        if not equal_deep(e, a):
            out.append(Difference(path, e, a))
        return

    if e is a:
        return
    key = (id(e), id(a), type(e))
    if key in visited:
        return
    visited.add(key)

    if ke is Kind.SEQUENCE:
        if len(e) != len(a):
            out.append(Difference(path, e, a))
            return
        for i, (x, y) in enumerate(zip(e, a)):
            _walk(x, y, path + (IndexSegment(i),), out, visited)
        return

    if ke is Kind.MAPPING:
        keys = list(e.keys())
        keys.extend(k for k in a.keys() if k not in e)
        keys.sort(key=repr)
        keys_a = {k: k for k in a}
        for k in keys:
            segment = KeySegment(k)
            if k in e and k in a and type(k) is not type(keys_a[k]):
                # Keys that hash alike but differ in type are distinct keys.
                out.append(Difference(path + (segment,), e[k], MISSING))
                out.append(Difference(path + (KeySegment(keys_a[k]),), MISSING, a[k]))
            elif k not in a:
                out.append(Difference(path + (segment,), e[k], MISSING))
            elif k not in e:
                out.append(Difference(path + (segment,), MISSING, a[k]))
            else:
                _walk(e[k], a[k], path + (segment,), out, visited)
        return

    # Kind.RECORD
    if has_equal_capability(type(e)):
        if not equal_deep(e, a):
            out.append(Difference(path, e, a))
        return
    fe = dict(record_fields(e))
    fa = dict(record_fields(a))
    names = list(fe)
    names.extend(name for name in fa if name not in fe)
    for name in names:
        segment = FieldSegment(name)
        if name not in fa:
            out.append(Difference(path + (segment,), fe[name], MISSING))
        elif name not in fe:
            out.append(Difference(path + (segment,), MISSING, fa[name]))
        else:
            _walk(fe[name], fa[name], path + (segment,), out, visited)
