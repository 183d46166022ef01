"""Assertion object handed to scenarios, writing TAP version 13 as it goes."""

from __future__ import annotations

import asyncio
import inspect
import os
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TextIO, Tuple, Type, Union

import yaml

from scenario_harness.runtime.util import stringify

_UNSET = object()

ExcTypes = Union[Type[BaseException], Tuple[Type[BaseException], ...]]


class TapWriter:
    """Serializes assertions from every scenario of one run into one TAP stream."""

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self.count = 0
        self.passed = 0
        self.failed = 0
        self._started = False
        self._finished = False

    def _write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()

    def start(self) -> None:
        if not self._started:
            self._started = True
            self._write("TAP version 13\n")

    def comment(self, text: str) -> None:
        self.start()
        for line in str(text).splitlines() or [""]:
            self._write(f"# {line}\n")

    def assertion(
        self,
        ok: bool,
        name: str,
        *,
        diag: Optional[Dict[str, Any]] = None,
    ) -> int:
        self.start()
        self.count += 1
        if ok:
            self.passed += 1
        else:
            self.failed += 1
        name = " ".join(str(name).split())
        self._write(f"{'ok' if ok else 'not ok'} {self.count} {name}\n")
        if diag:
            body = yaml.safe_dump(diag, sort_keys=False, default_flow_style=False)
            self._write("  ---\n")
            for line in body.splitlines():
                self._write(f"    {line}\n")
            self._write("  ...\n")
        return self.count

    def finish(self) -> None:
        if self._finished:
            return
        self.start()
        self._finished = True
        self._write(f"\n1..{self.count}\n")
        self._write(f"# tests {self.count}\n")
        self._write(f"# pass  {self.passed}\n")
        if self.failed:
            self._write(f"# fail  {self.failed}\n")
        else:
            self._write("\n# ok\n")


def _caller_location() -> str:
    here = os.path.abspath(__file__)
    frame = inspect.currentframe()
    try:
        while frame is not None:
            filename = os.path.abspath(frame.f_code.co_filename)
            if filename != here:
                return f"{frame.f_code.co_name} ({filename}:{frame.f_lineno})"
            frame = frame.f_back
        return "unknown"
    finally:
        del frame


def _structurally_equal(a: Any, b: Any) -> bool:
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(_structurally_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(_structurally_equal(x, y) for x, y in zip(a, b))
    return a == b


class Tape:
    def __init__(self, writer: TapWriter, description: str) -> None:
        self.description = description
        self._writer = writer
        self._ended = False
        self._ended_event = asyncio.Event()
        self.failures: List[str] = []
        self.assertions = 0

    @property
    def ended(self) -> bool:
        return self._ended

    async def wait_ended(self) -> None:
        await self._ended_event.wait()

    def _record(
        self,
        ok: bool,
        name: str,
        *,
        operator: str,
        expected: Any = _UNSET,
        actual: Any = _UNSET,
        after_end: bool = False,
    ) -> bool:
        if self._ended and not after_end:
            ok = False
            name = f".end() already called: {name}"
        diag: Optional[Dict[str, Any]] = None
        if not ok:
            diag = {"operator": operator}
            if expected is not _UNSET:
                diag["expected"] = stringify(expected)
            if actual is not _UNSET:
                diag["actual"] = stringify(actual)
            diag["at"] = _caller_location()
            self.failures.append(name)
        self.assertions += 1
        self._writer.assertion(ok, name, diag=diag)
        return ok

    def ok(self, value: Any, msg: str = "should be truthy") -> bool:
        return self._record(bool(value), msg, operator="ok", expected=True, actual=value)

    def not_ok(self, value: Any, msg: str = "should be falsy") -> bool:
        return self._record(not value, msg, operator="notOk", expected=False, actual=value)

    def equal(self, actual: Any, expected: Any, msg: str = "should be equal") -> bool:
        return self._record(
            actual == expected, msg, operator="equal", expected=expected, actual=actual
        )

    def not_equal(self, actual: Any, expected: Any, msg: str = "should not be equal") -> bool:
        return self._record(
            actual != expected, msg, operator="notEqual", expected=expected, actual=actual
        )

    def deep_equal(
        self, actual: Any, expected: Any, msg: str = "should be equivalent"
    ) -> bool:
        """Structural comparison: tuples and lists compare equal, mappings compare by key."""
        return self._record(
            _structurally_equal(actual, expected),
            msg,
            operator="deepEqual",
            expected=expected,
            actual=actual,
        )

    def pass_(self, msg: str = "(unnamed assert)") -> bool:
        return self._record(True, msg, operator="pass")

    def fail(self, msg: str = "(unnamed assert)") -> bool:
        return self._record(False, msg, operator="fail")

    def throws(
        self,
        fn: Callable[[], Any],
        expected: ExcTypes = Exception,
        msg: str = "should throw",
    ) -> bool:
        try:
            fn()
        except expected:
            return self._record(True, msg, operator="throws")
        except Exception as e:
            return self._record(
                False, msg, operator="throws", expected=_exc_names(expected), actual=repr(e)
            )
        return self._record(
            False, msg, operator="throws", expected=_exc_names(expected), actual="no exception"
        )

    async def rejects(
        self,
        awaitable: Awaitable[Any],
        expected: ExcTypes = Exception,
        msg: str = "should reject",
    ) -> bool:
        try:
            await awaitable
        except expected:
            return self._record(True, msg, operator="rejects")
        except Exception as e:
            return self._record(
                False, msg, operator="rejects", expected=_exc_names(expected), actual=repr(e)
            )
        return self._record(
            False, msg, operator="rejects", expected=_exc_names(expected), actual="resolved"
        )

    def comment(self, msg: str) -> None:
        self._writer.comment(msg)

    def error(self, err: BaseException, msg: Optional[str] = None) -> bool:
        name = msg or f"{type(err).__name__}: {err}"
        return self._record(False, name, operator="error", actual=repr(err))

    def end(self, err: Optional[BaseException] = None) -> None:
        """Completion signal; call exactly once."""
        if self._ended:
            name = ".end() called twice"
            if err is not None:
                name = f"{name}: {type(err).__name__}: {err}"
            self._record(
                False,
                name,
                operator="fail",
                actual=repr(err) if err is not None else _UNSET,
                after_end=True,
            )
            return
        if err is not None:
            self.error(err)
        self._ended = True
        self._ended_event.set()


def _exc_names(expected: ExcTypes) -> str:
    if isinstance(expected, tuple):
        return ", ".join(e.__name__ for e in expected)
    return expected.__name__
