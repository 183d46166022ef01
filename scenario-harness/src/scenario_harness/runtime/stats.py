from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class ScenarioFailure:
    description: str
    messages: Tuple[str, ...]


@dataclass
class TestStats:
    """Scenario-level outcome of one orchestrator run."""

    __test__ = False  # not a pytest class

    successes: List[str] = field(default_factory=list)
    errors: List[ScenarioFailure] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.successes) + len(self.errors)

    @property
    def passed(self) -> int:
        return len(self.successes)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def ok(self) -> bool:
        return not self.errors

    def as_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "pass": self.passed,
            "fail": self.failed,
            "skip": len(self.skipped),
            "ok": self.ok,
            "successes": list(self.successes),
            "errors": [
                {"description": e.description, "messages": list(e.messages)} for e in self.errors
            ],
        }
