"""Timing and pass/fail statistics collected while a suite runs."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class TestStats:
    """Statistics of a single test method."""

    __test__ = False

    test_name: str
    start: datetime | None = None
    end: datetime | None = None
    passed: bool = False

    @property
    def duration_ms(self) -> float:
        if self.start is None or self.end is None:
            return 0.0
        return (self.end - self.start).total_seconds() * 1000


@dataclass
class SuiteInformation:
    """Statistics of a whole suite run, delivered to ``handle_stats``."""

    suite_name: str = ""
    start: datetime | None = None
    end: datetime | None = None
    test_stats: dict[str, TestStats] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def start_test(self, test_name: str) -> None:
        with self._lock:
            self.test_stats[test_name] = TestStats(test_name=test_name, start=datetime.now())

    def end_test(self, test_name: str, passed: bool) -> None:
        with self._lock:
            stats = self.test_stats.setdefault(test_name, TestStats(test_name=test_name))
            stats.end = datetime.now()
            stats.passed = passed

    def passed(self) -> bool:
        """True if every recorded test passed."""
        with self._lock:
            return all(stats.passed for stats in self.test_stats.values())

    def __deepcopy__(self, memo: dict[int, object]) -> SuiteInformation:
        with self._lock:
            return SuiteInformation(
                suite_name=self.suite_name,
                start=self.start,
                end=self.end,
                test_stats={
                    name: TestStats(s.test_name, s.start, s.end, s.passed)
                    for name, s in self.test_stats.items()
                },
            )
