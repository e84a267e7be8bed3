"""Options accepted by the suite runner."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass
class RunOptions:
    """Options for ``run`` and ``run_parallel``.

    ``test_filter`` receives each discovered test method name and decides
    whether it runs; it replaces the configured ``suite.match`` expression.
    ``ignore_match`` runs every discovered test regardless of ``suite.match``.
    """

    test_filter: Callable[[str], bool] | None = None
    ignore_match: bool = False


def with_test_filter(test_filter: Callable[[str], bool]) -> RunOptions:
    return RunOptions(test_filter=test_filter)


def with_ignore_match() -> RunOptions:
    return RunOptions(ignore_match=True)
