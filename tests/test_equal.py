"""Tests for the equality engine: kinds, equal_deep, equal_values and exported equality."""

import collections
import math
import queue
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from assertkit.engine import (
    ExportedRecord,
    Kind,
    copy_exported,
    equal_deep,
    equal_exported,
    equal_values,
    has_equal_capability,
    is_convertible,
    kind_of,
    record_fields,
)


@dataclass
class Address:
    city: str


@dataclass
class Person:
    name: str
    age: int
    addr: Address


@dataclass
class Account:
    owner: str
    balance: int
    _token: str = ""
    history: list = field(default_factory=list)


class Node:
    def __init__(self, value):
        self.value = value
        self.next = None


class Money:
    """Compares through its own __eq__: amounts in cents."""

    def __init__(self, cents, label):
        self.cents = cents
        self.label = label

    def __eq__(self, other):
        return isinstance(other, Money) and self.cents == other.cents


class Slotted:
    __slots__ = ("x", "y")

    def __init__(self, x, y):
        self.x = x
        self.y = y


class Color(Enum):
    RED = 1
    BLUE = 2


class Settings(BaseModel):
    host: str
    port: int = 80


Point = collections.namedtuple("Point", ["x", "y"])


@dataclass(eq=False)
class Tag:
    """Hashed by identity, compared field by field."""

    value: int


# =============================================================================
# Kinds
# =============================================================================


class TestKindOf:
    def test_scalars(self):
        assert kind_of(None) is Kind.NIL
        assert kind_of(True) is Kind.BOOL
        assert kind_of(3) is Kind.INTEGER
        assert kind_of(3.5) is Kind.FLOAT
        assert kind_of(1j) is Kind.COMPLEX
        assert kind_of("x") is Kind.STRING

    def test_bytes_family(self):
        assert kind_of(b"x") is Kind.BYTES
        assert kind_of(bytearray(b"x")) is Kind.BYTES
        assert kind_of(memoryview(b"x")) is Kind.BYTES

    def test_containers(self):
        assert kind_of([1]) is Kind.SEQUENCE
        assert kind_of((1,)) is Kind.SEQUENCE
        assert kind_of(collections.deque()) is Kind.SEQUENCE
        assert kind_of({"a": 1}) is Kind.MAPPING
        assert kind_of({1}) is Kind.SET
        assert kind_of(frozenset()) is Kind.SET

    def test_records(self):
        assert kind_of(Address("NY")) is Kind.RECORD
        assert kind_of(Point(1, 2)) is Kind.RECORD
        assert kind_of(Settings(host="h")) is Kind.RECORD
        assert kind_of(ValueError("x")) is Kind.RECORD
        assert kind_of(Node(1)) is Kind.RECORD
        assert kind_of(Slotted(1, 2)) is Kind.RECORD

    def test_callables_channels_types(self):
        assert kind_of(lambda: None) is Kind.CALLABLE
        assert kind_of(len) is Kind.CALLABLE
        assert kind_of(Node(1).__init__) is Kind.CALLABLE
        assert kind_of(queue.Queue()) is Kind.CHANNEL
        assert kind_of(threading.Event()) is Kind.CHANNEL
        assert kind_of(int) is Kind.TYPE

    def test_user_kinds(self):
        assert kind_of(Color.RED) is Kind.USER
        assert kind_of(Decimal("1.5")) is Kind.USER

    def test_record_fields_declaration_order(self):
        assert record_fields(Person("a", 1, Address("x"))) == [
            ("name", "a"),
            ("age", 1),
            ("addr", Address("x")),
        ]
        assert record_fields(Point(1, 2)) == [("x", 1), ("y", 2)]
        assert record_fields(Slotted(1, 2)) == [("x", 1), ("y", 2)]

    def test_equal_capability(self):
        assert has_equal_capability(Money)
        assert not has_equal_capability(Person)
        assert not has_equal_capability(Node)
        assert not has_equal_capability(Settings)


# =============================================================================
# equal_deep
# =============================================================================


class TestEqualDeep:
    def test_identical_scalars(self):
        assert equal_deep(1, 1)
        assert equal_deep("abc", "abc")
        assert equal_deep(None, None)

    def test_types_must_match(self):
        assert not equal_deep(1, 1.0)
        assert not equal_deep(1, True)
        assert not equal_deep([1, 2], (1, 2))
        assert not equal_deep("1", 1)

    def test_none_versus_empty(self):
        assert not equal_deep(None, {})
        assert not equal_deep([], None)

    def test_bytes_compare_by_content(self):
        assert equal_deep(b"ab", bytearray(b"ab"))
        assert not equal_deep(b"ab", b"abc")

    def test_nan_is_not_equal_to_itself(self):
        assert not equal_deep(math.nan, math.nan)

    def test_sequences(self):
        assert equal_deep([1, [2, 3]], [1, [2, 3]])
        assert not equal_deep([1, 2], [1, 2, 3])
        assert not equal_deep([1, 2], [2, 1])

    def test_mappings_ignore_order(self):
        assert equal_deep({"a": 1, "b": [1]}, {"b": [1], "a": 1})
        assert not equal_deep({"a": 1}, {"a": 2})
        assert not equal_deep({"a": 1}, {"b": 1})

    def test_sets(self):
        assert equal_deep({1, 2, 3}, {3, 2, 1})
        assert not equal_deep({1, 2}, {1, 3})

    def test_set_members_pair_one_to_one(self):
        twins = {Tag(1), Tag(1)}
        mixed = {Tag(1), Tag(2)}
        assert not equal_deep(twins, mixed)
        assert not equal_deep(mixed, twins)
        assert equal_deep({Tag(1), Tag(2)}, {Tag(2), Tag(1)})

    def test_mapping_keys_must_have_the_same_type(self):
        assert not equal_deep({1: "a"}, {True: "a"})
        assert not equal_deep({1: "a"}, {1.0: "a"})
        assert not equal_deep({1.0: "a"}, {1: "a"})
        assert equal_deep({1: "a", "b": 2}, {"b": 2, 1: "a"})

    def test_records_field_by_field(self):
        a = Person("John", 30, Address("NY"))
        b = Person("John", 30, Address("NY"))
        assert equal_deep(a, b)
        b.addr.city = "Boston"
        assert not equal_deep(a, b)

    def test_records_of_different_types(self):
        @dataclass
        class Other:
            city: str

        assert not equal_deep(Address("NY"), Other("NY"))

    def test_equal_capability_is_used(self):
        assert equal_deep(Money(100, "one dollar"), Money(100, "a buck"))
        assert not equal_deep(Money(100, "x"), Money(200, "x"))

    def test_pydantic_and_namedtuple(self):
        assert equal_deep(Settings(host="a"), Settings(host="a"))
        assert not equal_deep(Settings(host="a"), Settings(host="a", port=81))
        assert equal_deep(Point(1, 2), Point(1, 2))
        assert not equal_deep(Point(1, 2), (1, 2))

    def test_exceptions_compare_by_args(self):
        assert equal_deep(ValueError("boom"), ValueError("boom"))
        assert not equal_deep(ValueError("boom"), ValueError("bang"))
        assert not equal_deep(ValueError("boom"), KeyError("boom"))

    def test_callables_never_equal(self):
        fn = lambda: None  # noqa: E731
        assert not equal_deep(fn, fn)

    def test_channels_by_identity(self):
        q = queue.Queue()
        assert equal_deep(q, q)
        assert not equal_deep(q, queue.Queue())

    def test_self_cycle_terminates(self):
        a = Node(1)
        a.next = a
        assert equal_deep(a, a)

    def test_parallel_cycles(self):
        a, b = Node(1), Node(1)
        a.next = a
        b.next = b
        assert equal_deep(a, b)

        c = Node(2)
        c.next = c
        assert not equal_deep(a, c)

    def test_cyclic_lists(self):
        a = [1]
        a.append(a)
        b = [1]
        b.append(b)
        assert equal_deep(a, b)

    def test_symmetry(self):
        values = [1, 1.0, "1", [1], (1,), {"a": 1}, None, Address("x"), b"1"]
        for v in values:
            for w in values:
                assert equal_deep(v, w) == equal_deep(w, v)


# =============================================================================
# equal_values
# =============================================================================


class TestEqualValues:
    def test_total_numeric_conversion(self):
        assert equal_values(1, 1.0)
        assert equal_values(2.0, 2)
        assert equal_values(1, Decimal(1))

    def test_lossy_conversion_is_refused(self):
        assert not equal_values(1.5, 1)

    def test_no_cross_kind_coercion(self):
        assert not equal_values("1", 1)
        assert not equal_values(1, "1")
        assert not equal_values(True, 1)

    def test_sequence_conversion(self):
        assert equal_values([1, 2], (1, 2))
        assert not equal_values([1, 2], (1, 3))

    def test_is_convertible(self):
        assert is_convertible(1, float)
        assert not is_convertible(1.5, int)
        assert not is_convertible("x", int)


# =============================================================================
# Exported equality
# =============================================================================


class TestEqualExported:
    def test_hidden_fields_are_ignored(self):
        a = Account("ann", 10, _token="abc")
        b = Account("ann", 10, _token="xyz")
        assert not equal_deep(a, b)
        assert equal_exported(a, b)

    def test_visible_fields_still_compared(self):
        assert not equal_exported(Account("ann", 10), Account("ann", 11))

    def test_hidden_fields_in_nested_containers(self):
        a = {"acct": [Account("ann", 1, _token="a")]}
        b = {"acct": [Account("ann", 1, _token="b")]}
        assert equal_exported(a, b)

    def test_copy_exported_projection(self):
        projected = copy_exported(Account("ann", 1, _token="s"))
        assert isinstance(projected, ExportedRecord)
        assert projected.type_ is Account
        assert projected.fields == {"owner": "ann", "balance": 1, "history": []}

    def test_round_trip_agrees_without_hidden_fields(self):
        pairs = [
            (Person("a", 1, Address("x")), Person("a", 1, Address("x"))),
            (Person("a", 1, Address("x")), Person("a", 1, Address("y"))),
            ([1, {"k": 2}], [1, {"k": 2}]),
            ([1, {"k": 2}], [1, {"k": 3}]),
        ]
        for a, b in pairs:
            assert equal_deep(a, b) == equal_deep(copy_exported(a), copy_exported(b))
