"""Scenario harness for multi-agent distributed apps.

Scenarios are registered with an `Orchestrator`, run one at a time against a
fresh in-process network of players, and report through a TAP version 13
stream that the `tap-diff` reporter turns into a readable summary.
"""

__all__ = [
    "cli",
    "config",
    "examples",
    "hashes",
    "reporting",
    "runtime",
    "spec",
]
