from __future__ import annotations

import argparse
import importlib
import logging
import os
import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TextIO

from scenario_harness.config.logger import LOGGER_PRESETS
from scenario_harness.reporting.tap_diff import TapDiffReporter, exit_status
from scenario_harness.runtime.orchestrator import TIMEOUT_ENV, Orchestrator, timeout_from_env

logger = logging.getLogger(__name__)

REPORTER_ENV = "SCENARIO_HARNESS_REPORTER"
LOG_LEVEL_ENV = "SCENARIO_HARNESS_LOG_LEVEL"
LOGGER_ENV = "SCENARIO_HARNESS_LOGGER"

REPORTERS = ("tap-diff", "tap")

DEFAULT_SUITES = (
    "scenario_harness.examples.session3",
    "scenario_harness.examples.zome_exercise",
    "scenario_harness.examples.tragedy_commons",
)

Registrar = Callable[[Orchestrator], None]


def load_registrar(ref: str) -> Registrar:
    """Resolve `module[:function]`; the function defaults to `register`."""
    module_name, _, fn_name = str(ref).partition(":")
    module_name = module_name.strip()
    if not module_name:
        raise ValueError(f"invalid suite reference: {ref!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"cannot import suite module {module_name!r}: {e}") from e
    fn = getattr(module, fn_name.strip() or "register", None)
    if not callable(fn):
        raise ValueError(f"suite {ref!r} has no callable {fn_name or 'register'!r}")
    return fn


class _Tee:
    def __init__(self, *streams: TextIO) -> None:
        self.streams = streams

    def write(self, text: str) -> int:
        for stream in self.streams:
            stream.write(text)
        return len(text)

    def flush(self) -> None:
        for stream in self.streams:
            stream.flush()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Run scenario suites, one orchestrator per suite, in order."
    )
    parser.add_argument(
        "--suite",
        action="append",
        default=None,
        help=(
            "Suite registrar as module[:function] (repeatable; function defaults to "
            "register). Defaults to the bundled example suites."
        ),
    )
    parser.add_argument(
        "--reporter",
        choices=REPORTERS,
        default=os.environ.get(REPORTER_ENV, "tap-diff"),
        help="tap-diff renders a readable report; tap writes the raw TAP stream.",
    )
    parser.add_argument(
        "--timeout_s",
        type=float,
        default=None,
        help=f"Per-scenario timeout in seconds (default: ${TIMEOUT_ENV}, or none).",
    )
    parser.add_argument(
        "--logger",
        choices=sorted(LOGGER_PRESETS),
        default=os.environ.get(LOGGER_ENV) or None,
        help="Logger rule preset applied while scenarios run.",
    )
    parser.add_argument(
        "--log_level",
        type=str,
        default=os.environ.get(LOG_LEVEL_ENV, "WARNING"),
        help="Python logging level for harness logs (written to stderr).",
    )
    parser.add_argument(
        "--tap_out",
        type=Path,
        default=None,
        help="Also write the raw TAP stream to this file.",
    )
    parser.add_argument("--no_color", action="store_true", help="Disable ANSI colors.")
    args = parser.parse_args(argv)

    if args.reporter not in REPORTERS:
        parser.error(f"--reporter must be one of {', '.join(REPORTERS)} (got {args.reporter!r})")
    level = logging.getLevelName(str(args.log_level).upper())
    if not isinstance(level, int):
        parser.error(f"unknown --log_level: {args.log_level!r}")
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        timeout_s = args.timeout_s if args.timeout_s is not None else timeout_from_env()
        registrars: List[Registrar] = [load_registrar(r) for r in (args.suite or DEFAULT_SUITES)]
    except ValueError as e:
        raise SystemExit(str(e)) from e
    logger_config = LOGGER_PRESETS[args.logger] if args.logger else None

    tap_file: Optional[TextIO] = None
    if args.tap_out is not None:
        args.tap_out.parent.mkdir(parents=True, exist_ok=True)
        tap_file = args.tap_out.open("w", encoding="utf-8")

    status = 0
    try:
        for registrar in registrars:
            reporter: Optional[TapDiffReporter] = None
            sink: TextIO = sys.stdout
            if args.reporter == "tap-diff":
                reporter = TapDiffReporter(
                    sys.stdout, color=not args.no_color and sys.stdout.isatty()
                )
                sink = reporter  # type: ignore[assignment]
            stream: TextIO = _Tee(sink, tap_file) if tap_file else sink  # type: ignore[assignment]

            orchestrator = Orchestrator(
                stream=stream, timeout_s=timeout_s, logger_config=logger_config
            )
            registrar(orchestrator)
            stats = orchestrator.run()
            if not stats.ok:
                status = 1
            if reporter is not None:
                reporter.end()
                status = exit_status(reporter, status)
            logger.info("suite done: %s", stats.as_dict())
    finally:
        if tap_file is not None:
            tap_file.close()
    return status


if __name__ == "__main__":
    raise SystemExit(main())
