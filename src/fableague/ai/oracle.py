"""The Oracle: a Claude-backed chat assistant that knows the league standings.

The Oracle answers questions about players, heroes and the meta. It reads a
snapshot of the roster, never the store, and never writes anything.

Without an API key, or when the API fails, every entry point degrades to a
short fixed reply so the page keeps working.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence

import anthropic
import httpx

from fableague.config import DEFAULT_ORACLE_MODEL
from fableague.core.projection import (
    PlayerStats,
    hero_distribution,
    rank_players,
    top_hero,
)
from fableague.models.player import Player

logger = logging.getLogger(__name__)

_client_cache: dict[str, anthropic.AsyncAnthropic] = {}

_ORACLE_TIMEOUT = httpx.Timeout(30.0, connect=5.0)

# Only the most recent turns are sent back to the model.
MAX_HISTORY_TURNS = 20

NO_KEY_REPLY = "The Oracle is resting. Ask an administrator to configure an Anthropic API key."
ERROR_REPLY = "The Oracle's vision is clouded right now. Try again in a moment."
META_FALLBACK = "Not enough signal to read the meta yet. Record a few more tournaments."

ORACLE_SYSTEM_PROMPT = """\
You are the Oracle of a Flesh and Blood trading card game league.

Players earn 1 point for showing up to a tournament and 1 point per win.
You answer questions about the standings, heroes and matchups in a friendly,
concise voice. Use the league data below; if something is not in it, say so
instead of guessing.

## League Standings

{standings}
"""

META_PROMPT = """\
You are analysing the hero meta of a Flesh and Blood league.

Given the hero play counts below, describe in 2-3 short paragraphs how diverse
the field is, which heroes dominate and which are missing. Describe, do not
prescribe.

## Hero Plays

{distribution}
"""


def _get_client(api_key: str) -> anthropic.AsyncAnthropic:
    """Return a cached AsyncAnthropic client for connection reuse."""
    if api_key not in _client_cache:
        _client_cache[api_key] = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=_ORACLE_TIMEOUT,
            max_retries=1,
        )
    return _client_cache[api_key]


def build_oracle_context(players: Sequence[Player]) -> str:
    """System prompt with one line per player, highest points first."""
    lines = []
    for p in rank_players(players):
        hero = top_hero(p) or "none yet"
        lines.append(
            f"- {p.name}: {p.total_points} pts, {p.tournaments_played} tournaments, "
            f"{p.total_wins} wins, top hero {hero}"
        )
    standings = "\n".join(lines) if lines else "(no players registered)"
    return ORACLE_SYSTEM_PROMPT.format(standings=standings)


def _build_messages(history: Sequence[dict], message: str) -> list[dict]:
    messages = [
        {"role": turn["role"], "content": turn["content"]}
        for turn in history[-MAX_HISTORY_TURNS:]
        if turn.get("role") in ("user", "assistant") and turn.get("content")
    ]
    # The API requires the conversation to open with a user turn.
    while messages and messages[0]["role"] != "user":
        messages.pop(0)
    messages.append({"role": "user", "content": message})
    return messages


async def stream_oracle_reply(
    players: Sequence[Player],
    history: Sequence[dict],
    message: str,
    api_key: str,
    model: str = DEFAULT_ORACLE_MODEL,
) -> AsyncIterator[str]:
    """Yield reply text as it streams from the Messages API.

    *history* is a list of ``{"role", "content"}`` turns from earlier in the
    conversation.
    """
    if not api_key:
        logger.info("oracle_unavailable reason=no_api_key")
        yield NO_KEY_REPLY
        return

    client = _get_client(api_key)
    emitted = False
    try:
        async with client.messages.stream(
            model=model,
            max_tokens=1024,
            system=build_oracle_context(players),
            messages=_build_messages(history, message),
        ) as stream:
            async for text in stream.text_stream:
                emitted = True
                yield text
    except anthropic.APIError as e:
        logger.error("oracle_stream_failed model=%s error=%s", model, e)
        yield ("\n\n" if emitted else "") + ERROR_REPLY


def _distribution_text(players: Sequence[Player]) -> str:
    stats = [
        PlayerStats(player_id=p.id, name=p.name, hero_stats=dict(p.hero_stats)) for p in players
    ]
    return "\n".join(f"- {hero}: {count}" for hero, count in hero_distribution(stats))


async def analyze_meta(
    players: Sequence[Player],
    api_key: str,
    model: str = DEFAULT_ORACLE_MODEL,
) -> str:
    """One-shot read of hero diversity across the league."""
    distribution = _distribution_text(players)
    if not distribution:
        return META_FALLBACK
    if not api_key:
        logger.info("oracle_meta_unavailable reason=no_api_key")
        return META_FALLBACK

    client = _get_client(api_key)
    try:
        response = await client.messages.create(
            model=model,
            max_tokens=600,
            messages=[{"role": "user", "content": META_PROMPT.format(distribution=distribution)}],
        )
        return response.content[0].text.strip() or META_FALLBACK
    except anthropic.APIError as e:
        logger.error("oracle_meta_failed model=%s error=%s", model, e)
        return META_FALLBACK
    except (IndexError, AttributeError) as e:
        logger.error("oracle_meta_unparseable model=%s error=%s", model, e)
        return META_FALLBACK
