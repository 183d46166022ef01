from __future__ import annotations

import pytest

from scenario_harness.hashes import hash_kind, new_agent_pub_key
from scenario_harness.runtime.hdk import (
    ANCHOR_LINK_TAG,
    Dht,
    SourceChain,
    ZomeContext,
    ZomeError,
    wire_copy,
)


def _ctx(dht: Dht, agent: str = "") -> ZomeContext:
    agent = agent or new_agent_pub_key()
    return ZomeContext(
        agent_pub_key=agent,
        zome_name="z",
        chain=SourceChain(agent_pub_key=agent),
        dht=dht,
    )


def test_create_entry_publishes_and_records_on_chain() -> None:
    dht = Dht("uhC0kdna")
    ctx = _ctx(dht)

    header_hash = ctx.create_entry({"title": "t"}, entry_type="book")
    entry_hash = ctx.hash_entry({"title": "t"})

    assert hash_kind(header_hash) == "header"
    assert hash_kind(entry_hash) == "entry"
    assert ctx.get(entry_hash).entry == {"title": "t"}
    assert ctx.get(header_hash).entry_hash == entry_hash
    assert [el.entry_type for el in ctx.query()] == ["book"]
    assert ctx.dna_hash == "uhC0kdna"


def test_entries_are_visible_to_other_agents_on_same_dht() -> None:
    dht = Dht("uhC0kdna")
    alice, bob = _ctx(dht), _ctx(dht)

    alice.create_entry("hello", entry_type="greetings")

    assert bob.must_get_entry(bob.hash_entry("hello")) == "hello"
    assert bob.query() == []


def test_stored_entries_do_not_alias_caller_data() -> None:
    ctx = _ctx(Dht("uhC0kdna"))
    book = {"tags": ["a"]}
    ctx.create_entry(book, entry_type="book")
    book["tags"].append("b")

    stored = ctx.must_get_entry(ctx.hash_entry({"tags": ["a"]}))
    stored["tags"].append("c")

    assert ctx.must_get_entry(ctx.hash_entry({"tags": ["a"]})) == {"tags": ["a"]}


def test_must_get_entry_errors() -> None:
    ctx = _ctx(Dht("uhC0kdna"))
    ctx.create_entry("x", entry_type="greetings")

    with pytest.raises(ZomeError, match=r"entry not found"):
        ctx.must_get_entry("uhCEkmissing")
    with pytest.raises(ZomeError, match=r"not book"):
        ctx.must_get_entry(ctx.hash_entry("x"), entry_type="book")


def test_links_filter_by_tag_and_keep_order() -> None:
    ctx = _ctx(Dht("uhC0kdna"))
    ctx.create_link("base", "t1", "A")
    ctx.create_link("base", "t2", "B")
    ctx.create_link("base", "t3", "A")

    assert [lk.target for lk in ctx.get_links("base", "A")] == ["t1", "t3"]
    assert [lk.target for lk in ctx.get_links("base")] == ["t1", "t2", "t3"]
    assert ctx.get_links("other") == []


def test_anchor_is_idempotent_and_listed_under_root() -> None:
    dht = Dht("uhC0kdna")
    alice, bob = _ctx(dht), _ctx(dht)

    a = alice.anchor("GAME_CODES", "ABCDE")
    b = bob.anchor("GAME_CODES", "ABCDE")
    alice.anchor("GAME_CODES", "FGHIJ")
    root = alice.anchor("GAME_CODES")

    assert a == b
    links = alice.get_links(root, ANCHOR_LINK_TAG)
    assert [alice.get(lk.target).entry["anchor_text"] for lk in links] == ["ABCDE", "FGHIJ"]


def test_agent_info_reports_cell_agent() -> None:
    agent = new_agent_pub_key()
    info = _ctx(Dht("uhC0kdna"), agent).agent_info()

    assert info.agent_initial_pubkey == agent == info.agent_latest_pubkey


def test_wire_copy_rejects_unserializable_values() -> None:
    with pytest.raises(ZomeError, match=r"not serializable"):
        wire_copy({"x": object()})
    assert wire_copy((1, 2)) == [1, 2]
