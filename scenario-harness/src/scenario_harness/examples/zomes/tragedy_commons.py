"""Tragedy of the commons: game codes, player profiles and game sessions.

A game code is an anchor under `GAME_CODES`. Players join by linking their
profile from that anchor; whoever starts a session owns it and links it both
from their own agent key and from the game code anchor.
"""

from __future__ import annotations

from typing import Any, Dict, List

from scenario_harness.runtime.hdk import ZomeContext, ZomeError
from scenario_harness.runtime.zomes import extern

GAME_CODES_ANCHOR = "GAME_CODES"

PLAYER_PROFILE_ENTRY_TYPE = "player_profile"
GAME_SESSION_ENTRY_TYPE = "game_session"

PLAYER_LINK_TAG = "PLAYER"
OWNER_SESSION_TAG = "MY_GAMES"
GAME_CODE_TO_SESSION_TAG = "GAME_SESSION"

DEFAULT_GAME_PARAMS = {
    "regeneration_factor": 1.1,
    "start_amount": 100,
    "num_rounds": 3,
}


def _game_code(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ZomeError("game code must be a non-empty string")
    return value


@extern
def create_game_code_anchor(ctx: ZomeContext, short_unique_code: str) -> str:
    return ctx.anchor(GAME_CODES_ANCHOR, _game_code(short_unique_code))


@extern
def get_game_code_anchor(ctx: ZomeContext, game_code: str) -> str:
    return ctx.anchor(GAME_CODES_ANCHOR, _game_code(game_code))


def _create_player_profile(ctx: ZomeContext, nickname: str) -> str:
    profile = {"player_id": ctx.agent_info().agent_initial_pubkey, "nickname": nickname}
    ctx.create_entry(profile, entry_type=PLAYER_PROFILE_ENTRY_TYPE)
    return ctx.hash_entry(profile)


@extern
def join_game_with_code(ctx: ZomeContext, payload: Dict[str, Any]) -> str:
    if not isinstance(payload, dict):
        raise ZomeError("payload must be an object with gamecode and nickname")
    nickname = payload.get("nickname")
    if not isinstance(nickname, str) or not nickname:
        raise ZomeError("nickname must be a non-empty string")

    anchor = get_game_code_anchor(ctx, payload.get("gamecode"))
    profile_hash = _create_player_profile(ctx, nickname)
    ctx.create_link(anchor, profile_hash, PLAYER_LINK_TAG)
    return anchor


@extern
def get_player_profiles_for_game_code(ctx: ZomeContext, short_unique_code: str) -> List[Dict[str, Any]]:
    anchor = get_game_code_anchor(ctx, short_unique_code)
    players = []
    for link in ctx.get_links(anchor, PLAYER_LINK_TAG):
        ctx.debug("link: %s", link)
        players.append(ctx.must_get_entry(link.target, entry_type=PLAYER_PROFILE_ENTRY_TYPE))
    return players


def _new_session(
    ctx: ZomeContext, players: List[str], game_params: Dict[str, Any], anchor: str
) -> str:
    owner = ctx.agent_info().agent_initial_pubkey
    session = {
        "owner": owner,
        "status": "InProgress",
        "game_params": dict(game_params),
        "players": list(players),
        "scores": {},
        "anchor": anchor,
    }
    ctx.create_entry(session, entry_type=GAME_SESSION_ENTRY_TYPE)
    session_hash = ctx.hash_entry(session)

    ctx.create_link(owner, session_hash, OWNER_SESSION_TAG)
    ctx.create_link(anchor, session_hash, GAME_CODE_TO_SESSION_TAG)
    return session_hash


@extern
def start_game_session_with_code(ctx: ZomeContext, game_code: str) -> str:
    anchor = get_game_code_anchor(ctx, game_code)
    profiles = get_player_profiles_for_game_code(ctx, game_code)
    return _new_session(ctx, [p["player_id"] for p in profiles], DEFAULT_GAME_PARAMS, anchor)


@extern
def get_my_own_sessions(ctx: ZomeContext) -> List[List[Any]]:
    """Sessions this agent started, from its own source chain, as `[hash, session]` pairs."""
    return [[el.entry_hash, el.entry] for el in ctx.query(GAME_SESSION_ENTRY_TYPE)]


@extern
def get_all_game_codes(ctx: ZomeContext) -> List[str]:
    root = ctx.anchor(GAME_CODES_ANCHOR)
    codes = []
    for link in ctx.get_links(root):
        element = ctx.get(link.target)
        if element is None:
            continue
        text = element.entry.get("anchor_text") if isinstance(element.entry, dict) else None
        if isinstance(text, str):
            codes.append(text)
    return codes
