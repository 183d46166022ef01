"""Logger rule presets for scenario runs.

A `LoggerConfig` travels inside every conductor config the seed produces and
can also be applied to the host process, where its rules become a
`logging.Filter` keyed on logger names.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class LogRule:
    pattern: str
    exclude: bool = True

    def as_dict(self) -> Dict[str, Any]:
        return {"exclude": self.exclude, "pattern": self.pattern}


@dataclass(frozen=True)
class LoggerConfig:
    type: str = "debug"
    state_dump: bool = False
    rules: Tuple[LogRule, ...] = field(default_factory=tuple)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "state_dump": self.state_dump,
            "rules": {"rules": [r.as_dict() for r in self.rules]},
        }


QUIET_LOGGER_CONFIG = LoggerConfig(
    type="error",
    state_dump=False,
    rules=(LogRule(pattern=r"^scenario_harness\.", exclude=True),),
)

SANE_LOGGER_CONFIG = LoggerConfig(
    type="debug",
    state_dump=True,
    rules=(
        LogRule(pattern=r"^scenario_harness\.runtime\.hdk", exclude=True),
        LogRule(pattern=r"^scenario_harness\.runtime\.network$", exclude=True),
    ),
)

LOGGER_PRESETS: Dict[str, LoggerConfig] = {
    "quiet": QUIET_LOGGER_CONFIG,
    "sane": SANE_LOGGER_CONFIG,
}


class LogRuleFilter(logging.Filter):
    """Drop records from loggers matching an exclude rule.

    Records at or above `passthrough_level` always pass, so errors are never
    hidden by a preset.
    """

    def __init__(self, config: LoggerConfig, *, passthrough_level: int = logging.ERROR) -> None:
        super().__init__()
        self.config = config
        self.passthrough_level = passthrough_level
        self._excludes = [re.compile(r.pattern) for r in config.rules if r.exclude]

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= self.passthrough_level:
            return True
        return not any(p.search(record.name) for p in self._excludes)


def apply_logger_config(
    config: LoggerConfig, logger: Optional[logging.Logger] = None
) -> LogRuleFilter:
    target = logger or logging.getLogger()
    flt = LogRuleFilter(config)
    for handler in target.handlers:
        handler.addFilter(flt)
    return flt


def remove_logger_config(flt: LogRuleFilter, logger: Optional[logging.Logger] = None) -> None:
    target = logger or logging.getLogger()
    for handler in target.handlers:
        handler.removeFilter(flt)
