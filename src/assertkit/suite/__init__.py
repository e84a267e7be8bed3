"""Suite runner: test discovery, lifecycle hooks, stats."""

from assertkit.suite.options import RunOptions, with_ignore_match, with_test_filter
from assertkit.suite.runner import clone_suite, discover_tests, run, run_parallel
from assertkit.suite.stats import SuiteInformation, TestStats
from assertkit.suite.suite import HOOKS, Suite

__all__ = [
    "HOOKS",
    "RunOptions",
    "Suite",
    "SuiteInformation",
    "TestStats",
    "clone_suite",
    "discover_tests",
    "run",
    "run_parallel",
    "with_ignore_match",
    "with_test_filter",
]
