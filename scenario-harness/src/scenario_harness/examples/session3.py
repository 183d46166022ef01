from __future__ import annotations

import asyncio

from scenario_harness.examples.session3_utils import config, installation, sleep
from scenario_harness.hashes import hash_kind
from scenario_harness.runtime.network import Network
from scenario_harness.runtime.orchestrator import Orchestrator
from scenario_harness.runtime.tape import Tape


async def say_a_greeting(s: Network, t: Tape) -> None:
    [alice] = await s.players([config])
    [[alice_happ]] = await alice.install_agents_happs(installation)
    [alice_cell] = alice_happ.cells

    header_hash = await alice_cell.call("exercise", "say_greeting", {"content": "Hello Holochain"})
    t.ok(header_hash, "say_greeting returns the header hash")
    t.equal(hash_kind(header_hash), "header")


async def greetings_are_separate_headers(s: Network, t: Tape) -> None:
    [alice, bob] = await s.players([config, config])
    [[alice_happ]] = await alice.install_agents_happs(installation)
    [[bob_happ]] = await bob.install_agents_happs(installation)

    a = await alice_happ.cells[0].call("exercise", "say_greeting", {"content": "hi"})
    await sleep(10)
    b = await bob_happ.cells[0].call("exercise", "say_greeting", {"content": "hi"})
    t.not_equal(a, b, "same content from two agents gives two headers")


def greeting_from_a_task(s: Network, t: Tape) -> None:
    async def go() -> None:
        try:
            [alice] = await s.players([config])
            [[happ]] = await alice.install_agents_happs(installation)
            header_hash = await happ.cells[0].call(
                "exercise", "say_greeting", {"content": "from a task"}
            )
            t.equal(hash_kind(header_hash), "header")
            t.end()
        except Exception as e:
            t.end(e)

    asyncio.ensure_future(go())


def register(orchestrator: Orchestrator) -> None:
    orchestrator.register_scenario("say a greeting", say_a_greeting)
    orchestrator.register_scenario("greetings are separate headers", greetings_are_separate_headers)
    orchestrator.register_scenario("greeting from a spawned task", greeting_from_a_task)
