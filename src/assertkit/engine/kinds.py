"""Value classification for the equality engine.

Every value the engine touches is classified into a Kind; the kind decides
how children are enumerated and how scalars compare.
"""

from __future__ import annotations

import asyncio
import collections
import dataclasses
import functools
import io
import queue
import socket
import threading
import types
from collections.abc import Mapping, Set
from enum import Enum
from typing import Any

from pydantic import BaseModel


class Kind(str, Enum):
    """Kind of a value as seen by the engine."""

    NIL = "nil"
    BOOL = "bool"
    INTEGER = "integer"
    FLOAT = "float"
    COMPLEX = "complex"
    STRING = "string"
    BYTES = "bytes"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    SET = "set"
    RECORD = "record"
    CALLABLE = "callable"
    CHANNEL = "channel"
    TYPE = "type"
    USER = "user"


BYTES_TYPES = (bytes, bytearray, memoryview)
SEQUENCE_TYPES = (list, tuple, collections.deque, range)
CALLABLE_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.BuiltinMethodType,
    types.MethodWrapperType,
    functools.partial,
)
CHANNEL_TYPES = (
    queue.Queue,
    queue.SimpleQueue,
    asyncio.Queue,
    threading.Event,
    threading.Condition,
    socket.socket,
    io.IOBase,
)

SCALAR_KINDS = frozenset(
    {Kind.BOOL, Kind.INTEGER, Kind.FLOAT, Kind.COMPLEX, Kind.STRING, Kind.USER}
)


def is_namedtuple(value: Any) -> bool:
    return isinstance(value, tuple) and hasattr(type(value), "_fields")


def kind_of(value: Any) -> Kind:
    """Classify a value."""
    if value is None:
        return Kind.NIL
    if isinstance(value, Enum):
        return Kind.USER
    if isinstance(value, bool):
        return Kind.BOOL
    if isinstance(value, int):
        return Kind.INTEGER
    if isinstance(value, float):
        return Kind.FLOAT
    if isinstance(value, complex):
        return Kind.COMPLEX
    if isinstance(value, str):
        return Kind.STRING
    if isinstance(value, BYTES_TYPES):
        return Kind.BYTES
    if isinstance(value, type):
        return Kind.TYPE
    if is_namedtuple(value):
        return Kind.RECORD
    if isinstance(value, SEQUENCE_TYPES):
        return Kind.SEQUENCE
    if isinstance(value, Mapping):
        return Kind.MAPPING
    if isinstance(value, Set):
        return Kind.SET
    if isinstance(value, CALLABLE_TYPES):
        return Kind.CALLABLE
    if isinstance(value, CHANNEL_TYPES):
        return Kind.CHANNEL
    if isinstance(value, types.ModuleType):
        return Kind.USER
    if dataclasses.is_dataclass(value) or isinstance(value, (BaseModel, BaseException)):
        return Kind.RECORD
    if hasattr(value, "__dict__") or _slot_names(type(value)):
        return Kind.RECORD
    return Kind.USER


def is_hidden(name: str) -> bool:
    """Whether a record field is hidden (the Python equivalent of unexported)."""
    return name.startswith("_")


_NO_VALUE = object()


def record_fields(value: Any) -> list[tuple[str, Any]]:
    """Enumerate a record's fields in declaration order."""
    if dataclasses.is_dataclass(value):
        items = [(f.name, getattr(value, f.name, _NO_VALUE)) for f in dataclasses.fields(value)]
        return [(name, v) for name, v in items if v is not _NO_VALUE]
    if isinstance(value, BaseModel):
        items = [(name, getattr(value, name)) for name in type(value).model_fields]
        items.extend((value.__pydantic_private__ or {}).items())
        items.extend((value.__pydantic_extra__ or {}).items())
        return items
    if is_namedtuple(value):
        return list(zip(type(value)._fields, value))
    items = []
    if isinstance(value, BaseException):
        items.append(("args", value.args))
    if hasattr(value, "__dict__"):
        items.extend(vars(value).items())
    for name in _slot_names(type(value)):
        if hasattr(value, name):
            items.append((name, getattr(value, name)))
    return items


@functools.lru_cache(maxsize=None)
def _slot_names(cls: type) -> tuple[str, ...]:
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.extend(s for s in slots if s not in ("__dict__", "__weakref__"))
    return tuple(names)


@functools.lru_cache(maxsize=None)
def has_equal_capability(cls: type) -> bool:
    """Whether a record type compares through its own ``__eq__``.

    Generated equality (dataclasses, pydantic, namedtuple) does not count:
    those types are compared field by field. The result is cached per type.
    """
    for klass in cls.__mro__:
        if klass is object or klass is BaseModel or klass is tuple:
            return False
        eq = klass.__dict__.get("__eq__")
        if eq is None:
            continue
        code = getattr(eq, "__code__", None)
        if code is None:
            return False
        if dataclasses.is_dataclass(klass) and code.co_filename.startswith("<"):
            return False
        return True
    return False


def type_name(value: Any) -> str:
    """The short runtime type name of a value."""
    return type(value).__name__


def qualified_type_name(value: Any) -> str:
    """The fully-qualified runtime type name of a value."""
    cls = type(value)
    return f"{cls.__module__}.{cls.__qualname__}"
