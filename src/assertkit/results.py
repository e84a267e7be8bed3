"""Test result records produced by the T host context."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ResultStatus(str, Enum):
    """Test result status."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class TestResult:
    """Result of running a single test or subtest."""

    __test__ = False

    name: str
    status: ResultStatus
    errors: list[str] = field(default_factory=list)
    logs: list[str] = field(default_factory=list)
    duration_ms: float = 0.0
    children: list["TestResult"] = field(default_factory=list)

    @property
    def message(self) -> str | None:
        """All error diagnostics joined, or None if the test did not fail."""
        if not self.errors:
            return None
        return "\n".join(self.errors)

    def walk(self):
        """Yield this result and every nested subtest result."""
        yield self
        for child in self.children:
            yield from child.walk()
