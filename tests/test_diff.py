"""Tests for structured diffs."""

import math
from dataclasses import dataclass

from assertkit.engine import (
    MISSING,
    FieldSegment,
    IndexSegment,
    KeySegment,
    Kind,
    diff_structured,
    equal_deep,
    render_path,
)


@dataclass
class Address:
    city: str


@dataclass(eq=False)
class Tag:
    value: int


@dataclass
class Person:
    name: str
    age: int
    addr: Address


class TestDiffStructured:
    def test_nested_record_difference(self):
        expected = Person("John", 30, Address("NY"))
        actual = Person("John", 30, Address("Boston"))

        differences = diff_structured(expected, actual)

        assert len(differences) == 1
        diff = differences[0]
        assert diff.path_str == "addr.city"
        assert diff.path == (FieldSegment("addr"), FieldSegment("city"))
        assert diff.expected == "NY"
        assert diff.actual == "Boston"

    def test_equal_values_have_no_differences(self):
        value = {"a": [1, 2, {"b": Address("x")}]}
        assert diff_structured(value, {"a": [1, 2, {"b": Address("x")}]}) == []

    def test_root_kind_mismatch(self):
        differences = diff_structured(None, {})
        assert len(differences) == 1
        assert differences[0].path == ()
        assert differences[0].expected is Kind.NIL
        assert differences[0].actual is Kind.MAPPING

    def test_sequence_index_paths(self):
        differences = diff_structured([1, 2, 3], [1, 5, 3])
        assert [d.path for d in differences] == [(IndexSegment(1),)]
        assert differences[0].path_str == "[1]"

    def test_sequence_length_mismatch_is_one_difference(self):
        differences = diff_structured([1, 2], [1, 2, 3])
        assert len(differences) == 1
        assert differences[0].path == ()

    def test_mapping_missing_keys(self):
        differences = diff_structured({"a": 1, "b": 2}, {"b": 2, "c": 3})
        by_path = {d.path_str: d for d in differences}
        assert set(by_path) == {"['a']", "['c']"}
        assert by_path["['a']"].actual is MISSING
        assert by_path["['c']"].expected is MISSING

    def test_type_mismatch_below_root(self):
        differences = diff_structured({"k": 1}, {"k": 1.0})
        assert len(differences) == 1
        assert differences[0].path == (KeySegment("k"),)

    def test_mapping_keys_of_different_type(self):
        differences = diff_structured({1: "a"}, {True: "a"})
        assert len(differences) == 2
        assert differences[0].actual is MISSING
        assert differences[1].expected is MISSING
        assert type(differences[1].path[0].key) is bool

    def test_deterministic_order(self):
        a = {"z": 1, "a": 1, "m": 1}
        b = {"z": 2, "a": 2, "m": 2}
        assert diff_structured(a, b) == diff_structured(a, b)
        assert [d.path_str for d in diff_structured(a, b)] == ["['a']", "['m']", "['z']"]

    def test_agrees_with_equal_deep(self):
        pairs = [
            (1, 1),
            (1, 2),
            ([1, [2]], [1, [2]]),
            ([1, [2]], [1, [3]]),
            ({"a": Address("x")}, {"a": Address("y")}),
            (Person("a", 1, Address("x")), Person("a", 1, Address("x"))),
            (math.nan, math.nan),
            ([math.nan], [math.nan]),
            ({1: "a"}, {1.0: "a"}),
            ({Tag(1), Tag(1)}, {Tag(1), Tag(2)}),
        ]
        for a, b in pairs:
            assert (diff_structured(a, b) == []) == equal_deep(a, b)

    def test_difference_str(self):
        diff = diff_structured(Address("NY"), Address("Boston"))[0]
        assert str(diff) == "city: 'NY' != 'Boston'"


class TestRenderPath:
    def test_root(self):
        assert render_path(()) == "<root>"

    def test_mixed_segments(self):
        path = (FieldSegment("items"), IndexSegment(2), KeySegment("name"), FieldSegment("first"))
        assert render_path(path) == "items[2]['name'].first"
