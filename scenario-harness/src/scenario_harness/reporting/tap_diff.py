"""Human-readable rendering of a TAP stream, with diffs for failed asserts.

`TapDiffReporter` is file-like on its input side: write TAP text into it (or
hand it to an orchestrator as its stream) and call `end()` once the stream is
complete. Rendered output goes to `out`.
"""

from __future__ import annotations

import difflib
import json
import re
import time
from typing import Any, Callable, List, Optional, TextIO

from scenario_harness.reporting.tap_parser import (
    Assert,
    Child,
    Comment,
    Complete,
    Extra,
    FinalResult,
    TapEvent,
    TapParser,
)

INDENT = "  "
FIG_TICK = "✔"
FIG_CROSS = "✖"

_RESET = "\x1b[0m"
_STYLES = {
    "red": "\x1b[31m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "blue": "\x1b[34m",
    "magenta": "\x1b[35m",
    "white": "\x1b[37m",
    "dim": "\x1b[2m",
    "inverse": "\x1b[7m",
}

_SUMMARY_COMMENTS = (
    re.compile(r"^tests\s+[0-9]+$"),
    re.compile(r"^pass\s+[0-9]+$"),
    re.compile(r"^fail\s+[0-9]+$"),
    re.compile(r"^ok$"),
)

_UNQUOTED_KEY_RE = re.compile(r"([\$\w]+)\s*:")
_SINGLE_QUOTED_RE = re.compile(r"'([^']+)'")
_LEADING_WS_RE = re.compile(r"^(\s*)(.*)$", re.DOTALL)


def jsonize(text: str) -> str:
    """Turn a JS object literal (bare keys, single quotes) into JSON text."""
    text = _UNQUOTED_KEY_RE.sub(lambda m: f'"{m.group(1)}":', text)
    return _SINGLE_QUOTED_RE.sub(lambda m: f'"{m.group(1)}"', text)


def _coerce(value: Any) -> Any:
    if not isinstance(value, str) or ("{" not in value and "[" not in value):
        return value
    for candidate in (value, jsonize(value)):
        try:
            return json.loads(candidate)
        except ValueError:
            continue
    return value


def pretty_ms(ms: float) -> str:
    if ms < 1000:
        return f"{int(ms)}ms"
    if ms < 60_000:
        return f"{ms / 1000:.1f}s"
    minutes, seconds = divmod(int(ms // 1000), 60)
    return f"{minutes}m {seconds}s"


class TapDiffReporter:
    def __init__(
        self,
        out: TextIO,
        *,
        color: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.out = out
        self.color = color
        self.is_failed = False
        self.result: Optional[FinalResult] = None
        self._clock = clock
        self._started_at = clock()
        self._parser = TapParser()
        self._buffer = ""
        self._ended = False

    # Input side.

    def write(self, text: str) -> int:
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        for line in lines:
            self.parse_line(line)
        return len(text)

    def flush(self) -> None:
        self.out.flush()

    def parse_line(self, line: str) -> None:
        for event in self._parser.parse_line(line):
            self.handle(event)

    def end(self) -> None:
        if self._ended:
            return
        self._ended = True
        if self._buffer:
            self.parse_line(self._buffer)
            self._buffer = ""
        for event in self._parser.finish():
            self.handle(event)
        self.flush()

    # Rendering.

    def _style(self, text: str, *styles: str) -> str:
        if not self.color or not text:
            return text
        return "".join(_STYLES[s] for s in styles) + text + _RESET

    def println(self, text: str = "", indent_level: int = 0) -> None:
        indent = INDENT * indent_level
        for line in text.split("\n"):
            self.out.write(f"{indent}{line}\n")

    def handle(self, event: TapEvent) -> None:
        if isinstance(event, Comment):
            self._handle_comment(event)
        elif isinstance(event, Assert):
            if event.ok:
                self._handle_assert_success(event)
            else:
                self._handle_assert_failure(event)
        elif isinstance(event, Complete):
            self._handle_complete(event.result)
        elif isinstance(event, Extra):
            self.println(self._style(event.line.rstrip("\n"), "yellow"), 4)
        elif isinstance(event, Child):
            pass

    def _handle_comment(self, comment: Comment) -> None:
        trimmed = comment.text.strip()
        if any(p.match(trimmed) for p in _SUMMARY_COMMENTS):
            return
        self.println()
        self.println(self._style(trimmed, "blue"), 1)

    def _handle_assert_success(self, assertion: Assert) -> None:
        self.println(f"{self._style(FIG_TICK, 'green')}  {self._style(assertion.name, 'dim')}", 2)

    def _handle_assert_failure(self, assertion: Assert) -> None:
        diag = assertion.diag or {}
        header = f"{self._style(FIG_CROSS, 'red')}  {self._style(assertion.name, 'red')}"
        at = diag.get("at")
        if at:
            header += f" at {self._style(str(at), 'magenta')}"
        self.println(header, 2)

        if "actual" not in diag and "expected" not in diag:
            return
        actual = _coerce(diag.get("actual"))
        expected = _coerce(diag.get("expected"))
        if actual is None and expected is None:
            return
        if isinstance(expected, (dict, list)) or isinstance(actual, (dict, list)):
            self.println(self._line_diff(actual, expected), 4)
        elif isinstance(actual, str) and isinstance(expected, str):
            self.println(self._word_diff(actual, expected), 4)
        else:
            self.println(
                self._style(str(actual), "red", "inverse")
                + self._style(str(expected), "green", "inverse"),
                4,
            )

    def _handle_complete(self, result: FinalResult) -> None:
        self.result = result
        elapsed_ms = (self._clock() - self._started_at) * 1000.0
        self.println()
        self.println(
            self._style(f"passed: {result.passed}  ", "green")
            + self._style(f"failed: {result.failed}  ", "red")
            + self._style(f"of {result.count} tests  ", "white")
            + self._style(f"({pretty_ms(elapsed_ms)})", "dim")
        )
        self.println()
        if result.ok:
            self.println(self._style(f"All of {result.count} tests passed!", "green"))
        else:
            self.println(
                self._style(f"{result.failed} of {result.count} tests failed.", "red")
            )
            self.is_failed = True
        self.println()

    # Diffs go from actual to expected: removed parts are in actual only.

    def _diff_piece(self, value: str, tag: str) -> str:
        if tag == "equal":
            style = ("white",)
        elif tag == "added":
            style = ("green", "inverse")
        else:
            style = ("red", "inverse")
        m = _LEADING_WS_RE.match(value)
        assert m is not None
        return m.group(1) + self._style(m.group(2), *style)

    def _render_opcodes(self, a: List[str], b: List[str], joiner: str) -> str:
        pieces: List[str] = []
        matcher = difflib.SequenceMatcher(a=a, b=b, autojunk=False)
        for op, i1, i2, j1, j2 in matcher.get_opcodes():
            if op == "equal":
                pieces.append(self._diff_piece(joiner.join(a[i1:i2]), "equal"))
                continue
            if i2 > i1:
                pieces.append(self._diff_piece(joiner.join(a[i1:i2]), "removed"))
            if j2 > j1:
                pieces.append(self._diff_piece(joiner.join(b[j1:j2]), "added"))
        return joiner.join(pieces)

    def _line_diff(self, actual: Any, expected: Any) -> str:
        a = json.dumps(actual, indent=2, sort_keys=True, default=str).split("\n")
        b = json.dumps(expected, indent=2, sort_keys=True, default=str).split("\n")
        return self._render_opcodes(a, b, "\n")

    def _word_diff(self, actual: str, expected: str) -> str:
        a = [t for t in re.split(r"(\s+)", actual) if t]
        b = [t for t in re.split(r"(\s+)", expected) if t]
        return self._render_opcodes(a, b, "")


def exit_status(reporter: TapDiffReporter, status: int = 0) -> int:
    if status == 1 or reporter.is_failed:
        return 1
    return status
