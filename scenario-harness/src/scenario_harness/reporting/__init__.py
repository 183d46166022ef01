"""Reporting: run-level reporter hooks, the TAP parser and the tap-diff renderer."""

from __future__ import annotations

from scenario_harness.reporting.reporters import (
    UNIT_REPORTER,
    BasicReporter,
    Reporter,
    basic_reporter,
)
from scenario_harness.reporting.tap_diff import TapDiffReporter, exit_status
from scenario_harness.reporting.tap_parser import (
    Assert,
    Child,
    Comment,
    Complete,
    Extra,
    FinalResult,
    TapParseError,
    TapParser,
    iter_tap_events,
)

__all__ = [
    "Assert",
    "BasicReporter",
    "Child",
    "Comment",
    "Complete",
    "Extra",
    "FinalResult",
    "Reporter",
    "TapDiffReporter",
    "TapParseError",
    "TapParser",
    "UNIT_REPORTER",
    "basic_reporter",
    "exit_status",
    "iter_tap_events",
]
