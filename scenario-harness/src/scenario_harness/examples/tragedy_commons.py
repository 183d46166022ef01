from __future__ import annotations

from scenario_harness.examples.tragedy_commons_utils import config, installation, sleep
from scenario_harness.runtime.network import Network
from scenario_harness.runtime.orchestrator import Orchestrator
from scenario_harness.runtime.tape import Tape

ZOME = "zome_01"
GAME_CODE = "ABCDE"


async def create_and_get_game_code(s: Network, t: Tape) -> None:
    [alice, bob] = await s.players([config, config])
    [[alice_happ]] = await alice.install_agents_happs(installation)
    [[bob_happ]] = await bob.install_agents_happs(installation)
    [alice_cell] = alice_happ.cells
    [bob_cell] = bob_happ.cells

    created = await alice_cell.call(ZOME, "create_game_code_anchor", GAME_CODE)
    t.ok(created, "alice created the game code anchor")

    await s.consistency()
    found = await bob_cell.call(ZOME, "get_game_code_anchor", GAME_CODE)
    t.equal(found, created, "bob finds the same anchor")


async def join_and_start_a_session(s: Network, t: Tape) -> None:
    [alice, bob] = await s.players([config, config])
    [[alice_happ]] = await alice.install_agents_happs(installation)
    [[bob_happ]] = await bob.install_agents_happs(installation)
    [alice_cell] = alice_happ.cells
    [bob_cell] = bob_happ.cells

    await alice_cell.call(ZOME, "create_game_code_anchor", GAME_CODE)
    await alice_cell.call(ZOME, "join_game_with_code", {"gamecode": GAME_CODE, "nickname": "Alice"})
    await bob_cell.call(ZOME, "join_game_with_code", {"gamecode": GAME_CODE, "nickname": "Bob"})
    await s.consistency()
    await sleep(10)

    profiles = await alice_cell.call(ZOME, "get_player_profiles_for_game_code", GAME_CODE)
    t.deep_equal(
        sorted(p["nickname"] for p in profiles),
        ["Alice", "Bob"],
        "both players joined",
    )
    t.deep_equal(
        sorted(p["player_id"] for p in profiles),
        sorted([alice_happ.agent_pub_key, bob_happ.agent_pub_key]),
        "profiles carry the players' agent keys",
    )

    session_hash = await alice_cell.call(ZOME, "start_game_session_with_code", GAME_CODE)
    t.ok(session_hash, "alice started a session")

    [[own_hash, session]] = await alice_cell.call(ZOME, "get_my_own_sessions")
    t.equal(own_hash, session_hash)
    t.equal(session["owner"], alice_happ.agent_pub_key, "alice owns the session")
    t.equal(session["status"], "InProgress")
    t.equal(len(session["players"]), 2)

    bob_sessions = await bob_cell.call(ZOME, "get_my_own_sessions")
    t.deep_equal(bob_sessions, [], "bob started no sessions")


async def list_all_game_codes(s: Network, t: Tape) -> None:
    [alice, bob] = await s.players([config, config])
    [[alice_happ]] = await alice.install_agents_happs(installation)
    [[bob_happ]] = await bob.install_agents_happs(installation)

    await alice_happ.cells[0].call(ZOME, "create_game_code_anchor", "ALPHA")
    await bob_happ.cells[0].call(ZOME, "create_game_code_anchor", "BRAVO")
    await s.consistency()

    codes = await alice_happ.cells[0].call(ZOME, "get_all_game_codes")
    t.deep_equal(sorted(codes), ["ALPHA", "BRAVO"])


def register(orchestrator: Orchestrator) -> None:
    orchestrator.register_scenario("create and get a game code", create_and_get_game_code)
    orchestrator.register_scenario("join and start a session", join_and_start_a_session)
    orchestrator.register_scenario("list all game codes", list_all_game_codes)
