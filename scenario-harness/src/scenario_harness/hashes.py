from __future__ import annotations

import base64
import hashlib
import json
import os
from typing import Any

DNA_HASH_PREFIX = "uhC0k"
AGENT_PUB_KEY_PREFIX = "uhCAk"
ENTRY_HASH_PREFIX = "uhCEk"
HEADER_HASH_PREFIX = "uhCkk"

HASH_PREFIXES = (DNA_HASH_PREFIX, AGENT_PUB_KEY_PREFIX, ENTRY_HASH_PREFIX, HEADER_HASH_PREFIX)


def json_dumps_canonical(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _b64(digest: bytes) -> str:
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def typed_hash(prefix: str, obj: Any) -> str:
    """Hash `obj` (canonical JSON) into a prefixed base64url string."""
    if prefix not in HASH_PREFIXES:
        raise ValueError(f"unknown hash prefix: {prefix!r}")
    payload = json_dumps_canonical(obj).encode("utf-8")
    return prefix + _b64(hashlib.sha256(payload).digest())


def new_agent_pub_key() -> str:
    return AGENT_PUB_KEY_PREFIX + _b64(os.urandom(32))


def hash_kind(value: str) -> str | None:
    for prefix, kind in (
        (DNA_HASH_PREFIX, "dna"),
        (AGENT_PUB_KEY_PREFIX, "agent"),
        (ENTRY_HASH_PREFIX, "entry"),
        (HEADER_HASH_PREFIX, "header"),
    ):
        if isinstance(value, str) and value.startswith(prefix):
            return kind
    return None
