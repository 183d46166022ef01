"""Incremental TAP (version 13) parser.

Feed it one line at a time with `TapParser.parse_line`; every call returns the
events that line completed. An assert is only emitted once the parser knows
whether a YAML diagnostic block follows it, so events can trail by a line.
`finish()` flushes whatever is pending and emits the final `Complete`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import yaml


class TapParseError(RuntimeError):
    pass


@dataclass(frozen=True)
class Comment:
    text: str


@dataclass(frozen=True)
class Assert:
    id: int
    ok: bool
    name: str
    skip: Optional[str] = None
    todo: Optional[str] = None
    diag: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class Extra:
    line: str


@dataclass(frozen=True)
class Child:
    events: Tuple["TapEvent", ...]

    @property
    def result(self) -> Optional["FinalResult"]:
        for event in reversed(self.events):
            if isinstance(event, Complete):
                return event.result
        return None


@dataclass(frozen=True)
class FinalResult:
    ok: bool
    count: int
    passed: int
    failed: int
    plan: Optional[Tuple[int, int]] = None
    skipped: int = 0
    todo: int = 0
    bailout: Optional[str] = None


@dataclass(frozen=True)
class Complete:
    result: FinalResult


TapEvent = Union[Comment, Assert, Extra, Child, Complete]

_VERSION_RE = re.compile(r"^TAP version (\d+)$", re.IGNORECASE)
_PLAN_RE = re.compile(r"^(\d+)\.\.(\d+)(?:\s*#.*)?$")
_ASSERT_RE = re.compile(r"^(not )?ok\b(?:\s+(\d+))?(?:\s+(?:-\s+)?(.*))?$")
_DIRECTIVE_RE = re.compile(r"^(.*?)\s*(?<!\\)#\s*(SKIP|TODO)\S*\s*(.*)$", re.IGNORECASE)
_BAILOUT_RE = re.compile(r"^Bail out!\s*(.*)$")

_CHILD_INDENT = "    "


def _split_directive(rest: str) -> Tuple[str, Optional[str], Optional[str]]:
    m = _DIRECTIVE_RE.match(rest)
    if not m:
        return rest.strip(), None, None
    name, kind, reason = m.group(1).strip(), m.group(2).upper(), m.group(3).strip()
    if kind == "SKIP":
        return name, reason or "", None
    return name, None, reason or ""


class TapParser:
    def __init__(self) -> None:
        self._finished = False
        self._next_id = 1
        self._pending: Optional[Assert] = None
        self._yaml_indent: Optional[str] = None
        self._yaml_lines: List[str] = []
        self._child_lines: List[str] = []
        self._plan: Optional[Tuple[int, int]] = None
        self._plans_seen = 0
        self._bailout: Optional[str] = None
        self._count = 0
        self._passed = 0
        self._failed = 0
        self._skipped = 0
        self._todo = 0

    def parse_line(self, line: str) -> List[TapEvent]:
        if self._finished:
            raise TapParseError("parser already finished")
        line = line.rstrip("\r\n")
        out: List[TapEvent] = []

        if self._yaml_indent is not None:
            if line.strip() == "..." and line.startswith(self._yaml_indent):
                self._close_yaml(out)
            else:
                self._yaml_lines.append(line)
            return out

        if self._bailout is not None:
            return out

        if line.startswith(_CHILD_INDENT) and (self._child_lines or line.strip()):
            self._flush_pending(out)
            self._child_lines.append(line[len(_CHILD_INDENT):])
            return out
        self._flush_child(out)

        if self._pending is not None and line.strip() == "---":
            self._yaml_indent = line[: len(line) - len(line.lstrip())]
            self._yaml_lines = []
            return out

        self._flush_pending(out)
        stripped = line.strip()
        if not stripped or _VERSION_RE.match(stripped):
            return out

        if stripped.startswith("#"):
            out.append(Comment(text=stripped[1:].strip()))
            return out

        m = _BAILOUT_RE.match(stripped)
        if m:
            self._bailout = m.group(1).strip()
            return out

        m = _PLAN_RE.match(stripped)
        if m:
            self._plans_seen += 1
            self._plan = (int(m.group(1)), int(m.group(2)))
            return out

        m = _ASSERT_RE.match(stripped)
        if m:
            ok = m.group(1) is None
            if m.group(2) is not None:
                assert_id = int(m.group(2))
            else:
                assert_id = self._next_id
            self._next_id = assert_id + 1
            name, skip, todo = _split_directive(m.group(3) or "")
            self._pending = Assert(id=assert_id, ok=ok, name=name, skip=skip, todo=todo)
            return out

        out.append(Extra(line=line))
        return out

    def finish(self) -> List[TapEvent]:
        if self._finished:
            raise TapParseError("parser already finished")
        out: List[TapEvent] = []
        if self._yaml_indent is not None:
            # Unterminated diagnostic block; keep the lines rather than guess.
            self._flush_pending(out)
            out.extend(Extra(line=raw) for raw in self._yaml_lines)
            self._yaml_indent = None
            self._yaml_lines = []
        self._flush_child(out)
        self._flush_pending(out)
        self._finished = True
        out.append(Complete(result=self._result()))
        return out

    def _result(self) -> FinalResult:
        ok = self._failed == 0 and self._bailout is None and self._plans_seen == 1
        if self._plan is not None:
            start, end = self._plan
            expected = max(0, end - start + 1)
            if expected != self._count:
                ok = False
        return FinalResult(
            ok=ok,
            count=self._count,
            passed=self._passed,
            failed=self._failed,
            plan=self._plan,
            skipped=self._skipped,
            todo=self._todo,
            bailout=self._bailout,
        )

    def _close_yaml(self, out: List[TapEvent]) -> None:
        indent = self._yaml_indent or ""
        lines = [ln[len(indent):] if ln.startswith(indent) else ln for ln in self._yaml_lines]
        self._yaml_indent = None
        self._yaml_lines = []
        try:
            diag = yaml.safe_load("\n".join(lines))
        except yaml.YAMLError:
            diag = None
        pending = self._pending
        if pending is not None:
            if not isinstance(diag, dict):
                diag = {"raw": "\n".join(lines)} if lines else None
            self._pending = Assert(
                id=pending.id,
                ok=pending.ok,
                name=pending.name,
                skip=pending.skip,
                todo=pending.todo,
                diag=diag,
            )
        self._flush_pending(out)

    def _flush_pending(self, out: List[TapEvent]) -> None:
        pending = self._pending
        if pending is None:
            return
        self._pending = None
        self._count += 1
        if pending.skip is not None:
            self._skipped += 1
        if pending.todo is not None:
            self._todo += 1
        if pending.ok:
            self._passed += 1
        elif pending.skip is None and pending.todo is None:
            self._failed += 1
        out.append(pending)

    def _flush_child(self, out: List[TapEvent]) -> None:
        if not self._child_lines:
            return
        lines, self._child_lines = self._child_lines, []
        out.append(Child(events=tuple(iter_tap_events(lines))))


def iter_tap_events(lines: Iterable[str]) -> Iterator[TapEvent]:
    parser = TapParser()
    for line in lines:
        yield from parser.parse_line(line)
    yield from parser.finish()
