"""Tests for the Oracle chat assistant (Anthropic client mocked)."""

from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import pytest

from fableague.ai.oracle import (
    ERROR_REPLY,
    META_FALLBACK,
    NO_KEY_REPLY,
    analyze_meta,
    build_oracle_context,
    stream_oracle_reply,
)
from fableague.models.player import Player

PLAYERS = [
    Player(
        id="a",
        name="Ana",
        hero_stats={"Dash": 2},
        tournaments_played=2,
        total_wins=3,
        total_points=5,
        recent_performance=[1, 2],
    ),
    Player(
        id="b",
        name="Bruno",
        hero_stats={"Kano": 1},
        tournaments_played=1,
        total_wins=4,
        total_points=5,
        recent_performance=[4],
    ),
    Player(id="c", name="Cass"),
]


def _api_error() -> anthropic.APIError:
    return anthropic.APIError(message="Service unavailable", request=MagicMock(), body=None)


class FakeStream:
    """Stands in for the SDK's MessageStream context manager."""

    def __init__(self, chunks: list[str], error: Exception | None = None) -> None:
        self.chunks = chunks
        self.error = error

    async def __aenter__(self) -> "FakeStream":
        return self

    async def __aexit__(self, *args: object) -> bool:
        return False

    @property
    def text_stream(self):
        async def gen():
            for chunk in self.chunks:
                yield chunk
            if self.error is not None:
                raise self.error

        return gen()


async def _collect(agen) -> list[str]:
    return [chunk async for chunk in agen]


class TestOracleContext:
    def test_lists_players_by_points(self):
        context = build_oracle_context(PLAYERS)
        assert "Ana: 5 pts, 2 tournaments, 3 wins, top hero Dash" in context
        assert "Cass: 0 pts, 0 tournaments, 0 wins, top hero none yet" in context
        assert context.index("Ana") < context.index("Bruno") < context.index("Cass")

    def test_empty_roster(self):
        assert "(no players registered)" in build_oracle_context([])


class TestStreamOracleReply:
    async def test_no_api_key_yields_fallback(self):
        with patch("fableague.ai.oracle._get_client") as get_client:
            chunks = await _collect(stream_oracle_reply(PLAYERS, [], "Who leads?", ""))
        assert chunks == [NO_KEY_REPLY]
        get_client.assert_not_called()

    async def test_streams_chunks(self):
        mock_client = MagicMock()
        mock_client.messages.stream = MagicMock(return_value=FakeStream(["Ana ", "leads."]))
        history = [
            {"role": "assistant", "content": "Welcome!"},
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello."},
            {"role": "system", "content": "ignored"},
        ]

        with patch("fableague.ai.oracle._get_client", return_value=mock_client):
            chunks = await _collect(
                stream_oracle_reply(PLAYERS, history, "Who leads?", "fake-key", "test-model")
            )

        assert "".join(chunks) == "Ana leads."
        kwargs = mock_client.messages.stream.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert "Ana: 5 pts" in kwargs["system"]
        assert kwargs["messages"] == [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello."},
            {"role": "user", "content": "Who leads?"},
        ]

    async def test_api_error_mid_stream(self):
        mock_client = MagicMock()
        mock_client.messages.stream = MagicMock(
            return_value=FakeStream(["Partial"], error=_api_error())
        )
        with patch("fableague.ai.oracle._get_client", return_value=mock_client):
            chunks = await _collect(stream_oracle_reply(PLAYERS, [], "Q", "fake-key"))
        assert chunks == ["Partial", "\n\n" + ERROR_REPLY]

    async def test_api_error_before_first_chunk(self):
        mock_client = MagicMock()
        mock_client.messages.stream = MagicMock(return_value=FakeStream([], error=_api_error()))
        with patch("fableague.ai.oracle._get_client", return_value=mock_client):
            chunks = await _collect(stream_oracle_reply(PLAYERS, [], "Q", "fake-key"))
        assert chunks == [ERROR_REPLY]


class TestAnalyzeMeta:
    async def test_returns_model_text(self):
        block = MagicMock()
        block.text = "  Dash dominates.  "
        response = MagicMock()
        response.content = [block]
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=response)

        with patch("fableague.ai.oracle._get_client", return_value=mock_client):
            result = await analyze_meta(PLAYERS, "fake-key")

        assert result == "Dash dominates."
        prompt = mock_client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert "- Dash: 2" in prompt
        assert "- Kano: 1" in prompt

    @pytest.mark.parametrize("api_key", ["", "fake-key"])
    async def test_no_heroes_played(self, api_key: str):
        assert await analyze_meta([Player(id="c", name="Cass")], api_key) == META_FALLBACK

    async def test_no_api_key(self):
        assert await analyze_meta(PLAYERS, "") == META_FALLBACK

    async def test_api_error_fails_soft(self):
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(side_effect=_api_error())
        with patch("fableague.ai.oracle._get_client", return_value=mock_client):
            assert await analyze_meta(PLAYERS, "fake-key") == META_FALLBACK
