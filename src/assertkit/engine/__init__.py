"""Equality and match engine.

Pure, stateless functions deciding whether two values are equal under one of
several equivalence relations, diffing structured values, and matching mock
arguments.
"""

from assertkit.engine.diff import (
    MISSING,
    Difference,
    FieldSegment,
    IndexSegment,
    KeySegment,
    diff_structured,
    render_path,
)
from assertkit.engine.equal import (
    ExportedRecord,
    copy_exported,
    equal_deep,
    equal_exported,
    equal_values,
    is_convertible,
)
from assertkit.engine.kinds import Kind, has_equal_capability, kind_of, record_fields
from assertkit.engine.matchers import (
    AnyOfType,
    Anything,
    ArgumentMatcher,
    Matcher,
    any_of_type,
    describe,
    match,
    matched_by,
)

__all__ = [
    # Equality
    "equal_deep",
    "equal_values",
    "equal_exported",
    "copy_exported",
    "is_convertible",
    "ExportedRecord",
    # Diff
    "diff_structured",
    "Difference",
    "FieldSegment",
    "IndexSegment",
    "KeySegment",
    "MISSING",
    "render_path",
    # Kinds
    "Kind",
    "kind_of",
    "record_fields",
    "has_equal_capability",
    # Matchers
    "Matcher",
    "Anything",
    "AnyOfType",
    "ArgumentMatcher",
    "any_of_type",
    "matched_by",
    "match",
    "describe",
]
