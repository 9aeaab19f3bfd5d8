"""Pytest configuration: per-module outcome summary for the lineplan suite.

The project root is put on ``sys.path`` by ``pythonpath`` in pyproject.toml,
so ``main`` and ``tests.helpers`` import without any setup here.
"""

from __future__ import annotations

from collections import Counter, defaultdict

import pytest

OUTCOMES = ("passed", "failed", "error", "skipped")


def pytest_terminal_summary(
    terminalreporter: pytest.TerminalReporter,
    exitstatus: int,
    config: pytest.Config,
) -> None:
    """Print one line per test module with its outcome counts."""
    per_module: dict[str, Counter[str]] = defaultdict(Counter)
    for outcome in OUTCOMES:
        for rep in terminalreporter.stats.get(outcome, []):
            module = rep.nodeid.split("::", 1)[0]
            per_module[module][outcome] += 1
    if not per_module:
        return

    terminalreporter.section("lineplan summary", sep="=")
    width = max(len(m) for m in per_module)
    for module in sorted(per_module):
        counts = per_module[module]
        line = " | ".join(f"{o}: {counts[o]}" for o in OUTCOMES if counts[o])
        terminalreporter.write_line(f"{module:<{width}}  {line}")
    broken = terminalreporter.stats.get("failed", []) + terminalreporter.stats.get("error", [])
    if broken:
        terminalreporter.write_line("Not passing:")
        for rep in broken:
            terminalreporter.write_line(f"  - {rep.nodeid}")
