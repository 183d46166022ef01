"""Run-level reporters: hooks called before, during and after an orchestrator run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable

from scenario_harness.runtime.stats import TestStats


@runtime_checkable
class Reporter(Protocol):
    def before(self, total: int) -> None: ...

    def each(self, description: str) -> None: ...

    def after(self, stats: TestStats) -> None: ...


class _UnitReporter:
    def before(self, total: int) -> None:
        del total

    def each(self, description: str) -> None:
        del description

    def after(self, stats: TestStats) -> None:
        del stats


UNIT_REPORTER = _UnitReporter()


@dataclass
class BasicReporter:
    log: Callable[[str], Any]

    def before(self, total: int) -> None:
        self.log(f"(harness) Running {total} scenario(s)")

    def each(self, description: str) -> None:
        self.log(f"τ {description}")

    def after(self, stats: TestStats) -> None:
        self.log(f"(harness) ✓ {stats.passed}  ✗ {stats.failed}  skipped {len(stats.skipped)}")
        for err in stats.errors:
            self.log(f"(harness) failed: {err.description}")
            for msg in err.messages:
                self.log(f"    {msg}")


def basic_reporter(log: Callable[[str], Any]) -> BasicReporter:
    return BasicReporter(log=log)
