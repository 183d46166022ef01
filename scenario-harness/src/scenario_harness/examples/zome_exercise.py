from __future__ import annotations

from scenario_harness.examples.session3_utils import config, installation, sleep
from scenario_harness.hashes import hash_kind
from scenario_harness.runtime.hdk import ZomeError
from scenario_harness.runtime.network import Network
from scenario_harness.runtime.orchestrator import Orchestrator
from scenario_harness.runtime.tape import Tape

BOOK = {"title": "Sapiens", "content": "A brief history of humankind"}


async def add_and_get_a_book(s: Network, t: Tape) -> None:
    [alice, bob] = await s.players([config, config])
    [[alice_happ]] = await alice.install_agents_happs(installation)
    [[bob_happ]] = await bob.install_agents_happs(installation)
    [alice_cell] = alice_happ.cells
    [bob_cell] = bob_happ.cells

    entry_hash = await alice_cell.call("exercise", "add_book", BOOK)
    t.equal(hash_kind(entry_hash), "entry", "add_book returns the entry hash")

    await s.consistency()
    await sleep(10)

    book = await bob_cell.call("exercise", "get_book", entry_hash)
    t.deep_equal(book, BOOK, "bob reads the book alice wrote")


async def same_book_same_hash(s: Network, t: Tape) -> None:
    [alice, bob] = await s.players([config, config])
    [[alice_happ]] = await alice.install_agents_happs(installation)
    [[bob_happ]] = await bob.install_agents_happs(installation)

    a = await alice_happ.cells[0].call("exercise", "add_book", BOOK)
    b = await bob_happ.cells[0].call("exercise", "add_book", BOOK)
    t.equal(a, b, "entry hashes depend only on content")


async def missing_book_is_an_error(s: Network, t: Tape) -> None:
    [alice] = await s.players([config])
    [[happ]] = await alice.install_agents_happs(installation)
    await t.rejects(
        happ.cells[0].call("exercise", "get_book", "uhCEkmissing"),
        ZomeError,
        "get_book fails for an unknown hash",
    )


def register(orchestrator: Orchestrator) -> None:
    orchestrator.register_scenario("add and get a book", add_and_get_a_book)
    orchestrator.register_scenario("same book, same hash", same_book_same_hash)
    orchestrator.register_scenario("missing book is an error", missing_book_is_an_error)
