from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from scenario_harness.reporting.tap_diff import TapDiffReporter, exit_status


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Read a TAP stream on stdin and print a readable report with diffs."
    )
    parser.add_argument("--no_color", action="store_true", help="Disable ANSI colors.")
    args = parser.parse_args(argv)

    reporter = TapDiffReporter(sys.stdout, color=not args.no_color and sys.stdout.isatty())
    for line in sys.stdin:
        reporter.write(line)
    reporter.end()
    return exit_status(reporter)


if __name__ == "__main__":
    raise SystemExit(main())
