"""Text report of a suite run."""

from __future__ import annotations

from assertkit.results import ResultStatus, TestResult
from assertkit.suite.stats import SuiteInformation

STATUS_ICONS = {
    ResultStatus.PASSED: "✓",  # checkmark
    ResultStatus.FAILED: "✗",  # x mark
    ResultStatus.SKIPPED: "-",
}


def format_results(
    result: TestResult,
    info: SuiteInformation | None = None,
    show_all_logs: bool = False,
) -> str:
    """Format the results of a suite run for display.

    Args:
        result: Result of the root context the suite ran under; each child is
            one test method.
        info: Stats collected by the runner, used for per-test durations.
        show_all_logs: If True, show logs for passing tests too.

    Returns:
        Formatted string for display.
    """
    lines: list[str] = []
    counts = {status: 0 for status in ResultStatus}

    for child in result.children:
        counts[child.status] += 1
        lines.extend(_format_result(child, info, show_all_logs, depth=1))

    # Errors reported on the root context itself, e.g. by setup_suite.
    if result.errors:
        lines.append(f"  ! {result.name or 'suite'}")
        lines.append(_indent(result.message or "", 6))

    summary = (
        f"\n{counts[ResultStatus.PASSED]} passed, {counts[ResultStatus.FAILED]} failed, "
        f"{counts[ResultStatus.SKIPPED]} skipped ({len(result.children)} total)"
    )
    return "\n".join(lines) + summary


def _format_result(
    result: TestResult, info: SuiteInformation | None, show_all_logs: bool, depth: int
) -> list[str]:
    pad = "  " * depth
    name = result.name.rsplit("/", 1)[-1]
    line = f"{pad}{STATUS_ICONS[result.status]} {name}"
    duration = result.duration_ms
    if info is not None and name in info.test_stats and depth == 1:
        duration = info.test_stats[name].duration_ms
    line += f" ({duration:.0f}ms)"
    lines = [line]

    logs = [log for log in result.logs if log not in result.errors]
    if result.status is ResultStatus.FAILED and result.message:
        lines.append(_indent(result.message, len(pad) + 4))
    if logs and (show_all_logs or result.status is not ResultStatus.PASSED):
        lines.append(_format_logs(logs, len(pad) + 4))

    for child in result.children:
        lines.extend(_format_result(child, info, show_all_logs, depth + 1))
    return lines


def _indent(text: str, width: int) -> str:
    prefix = " " * width
    return "\n".join(prefix + line for line in text.strip("\n").split("\n"))


def _format_logs(logs: list[str], width: int) -> str:
    """Format captured logs for display."""
    formatted = []
    for log in logs:
        for line in log.split("\n"):
            formatted.append(" " * width + "| " + line)
    return "\n".join(formatted)
