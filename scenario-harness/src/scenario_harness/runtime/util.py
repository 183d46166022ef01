from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Dict, Iterable, List, Mapping, TypeVar

T = TypeVar("T")


async def delay(ms: float) -> None:
    await asyncio.sleep(max(0.0, float(ms)) / 1000.0)


def stringify(value: Any) -> str:
    """Render a value for TAP diagnostics (pretty JSON when possible)."""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)


async def serial_gather(awaitables: Iterable[Awaitable[T]]) -> List[T]:
    """Await one at a time, in order (unlike `asyncio.gather`)."""
    out: List[T] = []
    for aw in awaitables:
        out.append(await aw)
    return out


async def serial_gather_mapping(awaitables: Mapping[str, Awaitable[T]]) -> Dict[str, T]:
    out: Dict[str, T] = {}
    pending = list(awaitables.items())
    try:
        while pending:
            key, aw = pending[0]
            out[key] = await aw
            pending.pop(0)
    except BaseException:
        for _, aw in pending[1:]:
            if asyncio.iscoroutine(aw):
                aw.close()
        raise
    return out
