"""
Tests for the live vote stream generator.
"""

import asyncio
import json
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from services.live_stream import format_sse, resolve_window, vote_history_events


async def collect(generator) -> list[str]:
    return [frame async for frame in generator]


@pytest.mark.unit
class TestWindows:
    @pytest.mark.parametrize(
        "interval,expected",
        [
            ("15m", timedelta(minutes=15)),
            ("1h", timedelta(hours=1)),
            ("1d", timedelta(days=1)),
            (None, timedelta(minutes=15)),
            ("2w", timedelta(minutes=15)),
        ],
    )
    def test_resolve_window(self, interval, expected) -> None:
        assert resolve_window(interval) == expected

    def test_format_sse(self) -> None:
        assert format_sse({"a": 1}) == 'data: {"a": 1}\n\n'


@pytest.mark.unit
class TestVoteHistoryEvents:
    async def test_emits_frame_until_disconnect(self) -> None:
        rows = [{"competitorId": 1, "voteCount": 12, "recordedTime": "2024-05-01T10:15:00+00:00"}]
        is_disconnected = AsyncMock(side_effect=[False, False, True])

        with patch("services.live_stream.load_history", AsyncMock(return_value=rows)) as load:
            frames = await collect(
                vote_history_events(MagicMock(), 7, timedelta(minutes=15), is_disconnected, 0)
            )

        assert len(frames) == 2
        assert json.loads(frames[0][len("data: "):]) == rows
        assert load.await_count == 2

    async def test_failing_tick_emits_error_and_continues(self) -> None:
        is_disconnected = AsyncMock(side_effect=[False, False, True])
        load = AsyncMock(side_effect=[RuntimeError("db down"), []])

        with patch("services.live_stream.load_history", load):
            frames = await collect(
                vote_history_events(MagicMock(), 7, timedelta(hours=1), is_disconnected, 0)
            )

        assert frames == [format_sse({"error": "db down"}), format_sse([])]

    async def test_disconnected_client_gets_nothing(self) -> None:
        is_disconnected = AsyncMock(return_value=True)

        frames = await collect(
            vote_history_events(MagicMock(), 7, timedelta(hours=1), is_disconnected, 0)
        )

        assert frames == []

    async def test_cancellation_propagates(self) -> None:
        is_disconnected = AsyncMock(side_effect=[False, asyncio.CancelledError()])

        with patch("services.live_stream.load_history", AsyncMock(return_value=[])):
            with pytest.raises(asyncio.CancelledError):
                await collect(
                    vote_history_events(MagicMock(), 7, timedelta(hours=1), is_disconnected, 0)
                )
