"""Entries and hashes: greetings and books."""

from __future__ import annotations

from typing import Any, Dict

from scenario_harness.runtime.hdk import ZomeContext, ZomeError
from scenario_harness.runtime.zomes import extern

GREETINGS_ENTRY_TYPE = "greetings"
BOOK_ENTRY_TYPE = "book"


def _require_str(payload: Any, key: str) -> str:
    if not isinstance(payload, dict) or not isinstance(payload.get(key), str):
        raise ZomeError(f"payload must be an object with a string {key!r}")
    return payload[key]


@extern
def say_greeting(ctx: ZomeContext, payload: Dict[str, Any]) -> str:
    content = _require_str(payload, "content")
    return ctx.create_entry(content, entry_type=GREETINGS_ENTRY_TYPE)


@extern
def add_book(ctx: ZomeContext, payload: Dict[str, Any]) -> str:
    book = {"title": _require_str(payload, "title"), "content": _require_str(payload, "content")}
    ctx.create_entry(book, entry_type=BOOK_ENTRY_TYPE)
    return ctx.hash_entry(book)


@extern
def get_book(ctx: ZomeContext, entry_hash: str) -> Dict[str, Any]:
    return ctx.must_get_entry(entry_hash, entry_type=BOOK_ENTRY_TYPE)
