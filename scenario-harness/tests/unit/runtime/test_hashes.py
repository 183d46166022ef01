from __future__ import annotations

import pytest

from scenario_harness.hashes import (
    AGENT_PUB_KEY_PREFIX,
    ENTRY_HASH_PREFIX,
    hash_kind,
    json_dumps_canonical,
    new_agent_pub_key,
    typed_hash,
)


def test_typed_hash_ignores_key_order() -> None:
    a = typed_hash(ENTRY_HASH_PREFIX, {"title": "t", "content": "c"})
    b = typed_hash(ENTRY_HASH_PREFIX, {"content": "c", "title": "t"})

    assert a == b
    assert a.startswith(ENTRY_HASH_PREFIX)
    assert "=" not in a


def test_typed_hash_rejects_unknown_prefix() -> None:
    with pytest.raises(ValueError, match=r"unknown hash prefix"):
        typed_hash("uhCXX", {})


def test_new_agent_pub_keys_are_unique() -> None:
    keys = {new_agent_pub_key() for _ in range(16)}

    assert len(keys) == 16
    assert all(k.startswith(AGENT_PUB_KEY_PREFIX) for k in keys)
    assert {hash_kind(k) for k in keys} == {"agent"}


def test_hash_kind_unknown_values() -> None:
    assert hash_kind("not-a-hash") is None
    assert hash_kind(123) is None  # type: ignore[arg-type]


def test_json_dumps_canonical_is_compact_and_sorted() -> None:
    assert json_dumps_canonical({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'
