"""
Unit Tests for PlaybackDriver

Tests for the per-guild playback state machine:
- Advancing from IDLE through LOADING to PLAYING
- Natural finish, skip and error signals advancing exactly once
- Silent recovery from streams that fail to open or attach
- Stop cancelling an in-flight load
- Pause toggling and connection handling
"""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from discord_jukebox.application.services.playback_driver import PlaybackDriver, StopSummary
from discord_jukebox.domain.music.value_objects import (
    PauseToggleOutcome,
    PlaybackState,
    StopReason,
    TrackEndSignal,
)
from discord_jukebox.domain.shared.exceptions import NothingPlayingError, VoiceTransportError

GUILD_ID = 111111111
CHANNEL_ID = 444444444


async def _wait_for_open(transport, count: int = 1) -> None:
    for _ in range(100):
        if len(transport.opened) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError("stream was never opened")


@pytest_asyncio.fixture
async def connected(playback_driver):
    """Driver with a live session for GUILD_ID."""
    await playback_driver.connect(GUILD_ID, CHANNEL_ID)
    return playback_driver


# =============================================================================
# Connection
# =============================================================================


class TestConnect:
    @pytest.mark.asyncio
    async def test_connect_creates_session_and_subscribes_player(
        self, playback_driver, session_registry, fake_transport
    ):
        entry = await playback_driver.connect(GUILD_ID, CHANNEL_ID)

        assert session_registry.get(GUILD_ID) is entry
        assert entry.is_connected
        assert fake_transport.connections[0].subscribed is entry.player

    @pytest.mark.asyncio
    async def test_connect_reuses_live_connection(self, playback_driver, fake_transport):
        first = await playback_driver.connect(GUILD_ID, CHANNEL_ID)
        second = await playback_driver.connect(GUILD_ID, CHANNEL_ID)

        assert first is second
        assert len(fake_transport.connections) == 1

    @pytest.mark.asyncio
    async def test_connect_failure_propagates(self, playback_driver, fake_transport):
        fake_transport.connect_error = VoiceTransportError(GUILD_ID, "nope")

        with pytest.raises(VoiceTransportError):
            await playback_driver.connect(GUILD_ID, CHANNEL_ID)


# =============================================================================
# Advancing
# =============================================================================


class TestAdvance:
    @pytest.mark.asyncio
    async def test_advance_without_session_does_nothing(
        self, playback_driver, guild_queue, make_track
    ):
        guild_queue.enqueue(GUILD_ID, make_track("A"))

        assert await playback_driver.advance(GUILD_ID) is None
        assert playback_driver.state(GUILD_ID) is PlaybackState.IDLE
        assert guild_queue.pending_count(GUILD_ID) == 1

    @pytest.mark.asyncio
    async def test_advance_with_empty_queue_stays_idle(self, connected):
        assert await connected.advance(GUILD_ID) is None
        assert connected.state(GUILD_ID) is PlaybackState.IDLE

    @pytest.mark.asyncio
    async def test_wake_starts_first_track(self, connected, guild_queue, fake_transport, make_track):
        track = make_track("A")
        guild_queue.enqueue(GUILD_ID, track)

        started = await connected.wake(GUILD_ID)

        assert started == track
        assert connected.state(GUILD_ID) is PlaybackState.PLAYING
        assert guild_queue.now_playing(GUILD_ID).track == track
        assert guild_queue.pending_count(GUILD_ID) == 0
        assert fake_transport.players[GUILD_ID].current.locator == track.locator

    @pytest.mark.asyncio
    async def test_wake_while_playing_leaves_track_queued(self, connected, guild_queue, make_track):
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        await connected.wake(GUILD_ID)

        guild_queue.enqueue(GUILD_ID, make_track("B"))
        assert await connected.wake(GUILD_ID) is None

        assert guild_queue.now_playing(GUILD_ID).track.title == "A"
        assert [t.title for t in guild_queue.snapshot(GUILD_ID).pending] == ["B"]

    @pytest.mark.asyncio
    async def test_tracks_play_in_enqueue_order(
        self, connected, guild_queue, fake_transport, make_track
    ):
        for title in ("A", "B", "C"):
            guild_queue.enqueue(GUILD_ID, make_track(title))
        await connected.wake(GUILD_ID)
        player = fake_transport.players[GUILD_ID]

        titles = [guild_queue.now_playing(GUILD_ID).track.title]
        for _ in range(2):
            player.end()
            await player.settle()
            titles.append(guild_queue.now_playing(GUILD_ID).track.title)

        assert titles == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_last_track_finishing_returns_to_idle(
        self, connected, guild_queue, fake_transport, make_track
    ):
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        await connected.wake(GUILD_ID)
        player = fake_transport.players[GUILD_ID]

        player.end()
        await player.settle()

        assert connected.state(GUILD_ID) is PlaybackState.IDLE
        assert guild_queue.now_playing(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_error_signal_advances_like_finish(
        self, connected, guild_queue, fake_transport, make_track
    ):
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        guild_queue.enqueue(GUILD_ID, make_track("B"))
        await connected.wake(GUILD_ID)
        player = fake_transport.players[GUILD_ID]

        player.end(TrackEndSignal.from_error(OSError("ffmpeg died")))
        await player.settle()

        assert guild_queue.now_playing(GUILD_ID).track.title == "B"

    @pytest.mark.asyncio
    async def test_duration_comes_from_stream(
        self, connected, guild_queue, fake_transport, make_track
    ):
        track = make_track("A")
        fake_transport.durations[track.locator] = 213
        guild_queue.enqueue(GUILD_ID, track)

        await connected.wake(GUILD_ID)

        assert guild_queue.now_playing(GUILD_ID).duration_seconds == 213

    @pytest.mark.asyncio
    async def test_started_at_uses_injected_clock(
        self, guild_queue, session_registry, fake_transport, make_track
    ):
        fixed = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        driver = PlaybackDriver(
            guild_queue=guild_queue,
            session_registry=session_registry,
            transport=fake_transport,
            clock=lambda: fixed,
        )
        await driver.connect(GUILD_ID, CHANNEL_ID)
        guild_queue.enqueue(GUILD_ID, make_track("A"))

        await driver.wake(GUILD_ID)

        assert guild_queue.now_playing(GUILD_ID).started_at == fixed
        await driver.close()


# =============================================================================
# Failure Recovery
# =============================================================================


class TestFailureRecovery:
    @pytest.mark.asyncio
    async def test_failed_stream_is_skipped(
        self, connected, guild_queue, fake_transport, make_track
    ):
        bad = make_track("Bad")
        good = make_track("Good")
        fake_transport.failing_locators.add(bad.locator)
        guild_queue.enqueue(GUILD_ID, bad)
        guild_queue.enqueue(GUILD_ID, good)

        started = await connected.wake(GUILD_ID)

        assert started == good
        assert fake_transport.opened == [bad.locator, good.locator]
        assert guild_queue.pending_count(GUILD_ID) == 0

    @pytest.mark.asyncio
    async def test_all_streams_failing_drains_to_idle(
        self, connected, guild_queue, fake_transport, make_track
    ):
        for title in ("A", "B"):
            track = make_track(title)
            fake_transport.failing_locators.add(track.locator)
            guild_queue.enqueue(GUILD_ID, track)

        assert await connected.wake(GUILD_ID) is None

        assert connected.state(GUILD_ID) is PlaybackState.IDLE
        assert guild_queue.pending_count(GUILD_ID) == 0
        assert guild_queue.now_playing(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_player_refusing_stream_closes_it_and_moves_on(
        self, connected, guild_queue, fake_transport, make_track
    ):
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        fake_transport.players[GUILD_ID].fail_on_play = True

        assert await connected.wake(GUILD_ID) is None

        assert fake_transport.streams[0].closed
        assert connected.state(GUILD_ID) is PlaybackState.IDLE

    @pytest.mark.asyncio
    async def test_stream_open_timeout_counts_as_failure(
        self, guild_queue, session_registry, fake_transport, make_track
    ):
        driver = PlaybackDriver(
            guild_queue=guild_queue,
            session_registry=session_registry,
            transport=fake_transport,
            stream_open_timeout=0.01,
        )
        await driver.connect(GUILD_ID, CHANNEL_ID)
        fake_transport.open_gate = asyncio.Event()
        guild_queue.enqueue(GUILD_ID, make_track("Slow"))

        assert await driver.wake(GUILD_ID) is None
        assert driver.state(GUILD_ID) is PlaybackState.IDLE
        await driver.close()


# =============================================================================
# Terminal Signals
# =============================================================================


class TestTerminalSignals:
    @pytest.mark.asyncio
    async def test_skip_stops_player_and_next_track_starts(
        self, connected, guild_queue, fake_transport, make_track
    ):
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        guild_queue.enqueue(GUILD_ID, make_track("B"))
        await connected.wake(GUILD_ID)
        player = fake_transport.players[GUILD_ID]

        skipped = await connected.skip(GUILD_ID)
        await player.settle()

        assert skipped.title == "A"
        assert player.stop_calls == 1
        assert guild_queue.now_playing(GUILD_ID).track.title == "B"

    @pytest.mark.asyncio
    async def test_skip_racing_finish_advances_once(
        self, connected, guild_queue, fake_transport, make_track
    ):
        for title in ("A", "B", "C"):
            guild_queue.enqueue(GUILD_ID, make_track(title))
        first = await connected.wake(GUILD_ID)
        player = fake_transport.players[GUILD_ID]
        fake_transport.open_gate = asyncio.Event()

        # Both signals for A are in flight while B is still loading.
        await connected.skip(GUILD_ID)
        duplicate = asyncio.create_task(
            connected.handle_track_end(GUILD_ID, first.id, TrackEndSignal.finished())
        )
        await _wait_for_open(fake_transport, count=2)
        for _ in range(5):
            await asyncio.sleep(0)

        assert connected.state(GUILD_ID) is PlaybackState.LOADING
        assert [t.title for t in guild_queue.snapshot(GUILD_ID).pending] == ["C"]

        fake_transport.open_gate.set()
        await asyncio.gather(duplicate, player.settle())

        assert guild_queue.now_playing(GUILD_ID).track.title == "B"
        assert [t.title for t in guild_queue.snapshot(GUILD_ID).pending] == ["C"]
        assert len(fake_transport.opened) == 2

    @pytest.mark.asyncio
    async def test_signal_for_unknown_entry_is_ignored(self, connected, guild_queue, make_track):
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        await connected.wake(GUILD_ID)

        await connected.handle_track_end(GUILD_ID, "not-the-current-id", TrackEndSignal.finished())

        assert connected.state(GUILD_ID) is PlaybackState.PLAYING
        assert guild_queue.now_playing(GUILD_ID).track.title == "A"

    @pytest.mark.asyncio
    async def test_skip_when_idle_raises(self, connected):
        with pytest.raises(NothingPlayingError):
            await connected.skip(GUILD_ID)


# =============================================================================
# Pause
# =============================================================================


class TestTogglePause:
    @pytest.mark.asyncio
    async def test_toggle_pauses_then_resumes(
        self, connected, guild_queue, session_registry, fake_transport, make_track
    ):
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        await connected.wake(GUILD_ID)
        player = fake_transport.players[GUILD_ID]

        assert await connected.toggle_pause(GUILD_ID) is PauseToggleOutcome.PAUSED
        assert player.is_paused
        assert session_registry.get(GUILD_ID).paused
        assert guild_queue.now_playing(GUILD_ID).is_paused
        assert connected.state(GUILD_ID) is PlaybackState.PAUSED

        assert await connected.toggle_pause(GUILD_ID) is PauseToggleOutcome.RESUMED
        assert not player.is_paused
        assert not session_registry.get(GUILD_ID).paused
        assert not guild_queue.now_playing(GUILD_ID).is_paused
        assert connected.state(GUILD_ID) is PlaybackState.PLAYING

    @pytest.mark.asyncio
    async def test_paused_time_excluded_from_elapsed(
        self, guild_queue, session_registry, fake_transport, make_track
    ):
        start = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        times = iter([start, start + timedelta(seconds=10), start + timedelta(seconds=40)])
        driver = PlaybackDriver(
            guild_queue=guild_queue,
            session_registry=session_registry,
            transport=fake_transport,
            clock=lambda: next(times),
        )
        await driver.connect(GUILD_ID, CHANNEL_ID)
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        await driver.wake(GUILD_ID)

        await driver.toggle_pause(GUILD_ID)
        await driver.toggle_pause(GUILD_ID)

        now_playing = guild_queue.now_playing(GUILD_ID)
        assert now_playing.started_at == start
        assert now_playing.elapsed_seconds(start + timedelta(seconds=50)) == pytest.approx(20.0)
        await driver.close()

    @pytest.mark.asyncio
    async def test_toggle_when_nothing_playing_raises(self, connected):
        with pytest.raises(NothingPlayingError):
            await connected.toggle_pause(GUILD_ID)

    @pytest.mark.asyncio
    async def test_finish_while_paused_advances(
        self, connected, guild_queue, fake_transport, make_track
    ):
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        guild_queue.enqueue(GUILD_ID, make_track("B"))
        await connected.wake(GUILD_ID)
        await connected.toggle_pause(GUILD_ID)
        player = fake_transport.players[GUILD_ID]

        player.end()
        await player.settle()

        assert guild_queue.now_playing(GUILD_ID).track.title == "B"
        assert connected.state(GUILD_ID) is PlaybackState.PLAYING


# =============================================================================
# Stop
# =============================================================================


class TestStop:
    @pytest.mark.asyncio
    async def test_stop_clears_everything(
        self, connected, guild_queue, session_registry, fake_transport, make_track
    ):
        for title in ("A", "B", "C"):
            guild_queue.enqueue(GUILD_ID, make_track(title))
        await connected.wake(GUILD_ID)
        player = fake_transport.players[GUILD_ID]

        summary = await connected.stop(GUILD_ID)
        await player.settle()

        assert summary == StopSummary(tracks_cleared=2, disconnected=True)
        assert GUILD_ID not in session_registry
        assert guild_queue.now_playing(GUILD_ID) is None
        assert guild_queue.pending_count(GUILD_ID) == 0
        assert connected.state(GUILD_ID) is PlaybackState.IDLE
        assert fake_transport.connections[0].destroy_calls == 1

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, connected):
        await connected.stop(GUILD_ID)
        summary = await connected.stop(GUILD_ID, StopReason.DISCONNECT)

        assert summary == StopSummary(tracks_cleared=0, disconnected=False)
        assert connected.state(GUILD_ID) is PlaybackState.IDLE

    @pytest.mark.asyncio
    async def test_stop_survives_connection_teardown_failure(
        self, connected, session_registry, fake_transport
    ):
        fake_transport.connections[0].destroy_error = RuntimeError("gateway gone")

        summary = await connected.stop(GUILD_ID)

        assert summary.disconnected is False
        assert GUILD_ID not in session_registry
        assert connected.state(GUILD_ID) is PlaybackState.IDLE

    @pytest.mark.asyncio
    async def test_stop_discards_in_flight_load(
        self, connected, guild_queue, fake_transport, make_track
    ):
        fake_transport.open_gate = asyncio.Event()
        guild_queue.enqueue(GUILD_ID, make_track("A"))

        loading = asyncio.create_task(connected.wake(GUILD_ID))
        await _wait_for_open(fake_transport)
        assert connected.state(GUILD_ID) is PlaybackState.LOADING

        await connected.stop(GUILD_ID)
        fake_transport.open_gate.set()

        assert await loading is None
        assert fake_transport.streams[0].closed
        assert guild_queue.now_playing(GUILD_ID) is None
        assert connected.state(GUILD_ID) is PlaybackState.IDLE

    @pytest.mark.asyncio
    async def test_enqueue_during_load_is_picked_up(
        self, connected, guild_queue, fake_transport, make_track
    ):
        bad = make_track("Bad")
        fake_transport.failing_locators.add(bad.locator)
        fake_transport.open_gate = asyncio.Event()
        guild_queue.enqueue(GUILD_ID, bad)

        loading = asyncio.create_task(connected.wake(GUILD_ID))
        await _wait_for_open(fake_transport)

        guild_queue.enqueue(GUILD_ID, make_track("Late"))
        assert await connected.wake(GUILD_ID) is None
        fake_transport.open_gate.set()

        started = await loading
        assert started is not None
        assert started.title == "Late"
        assert connected.state(GUILD_ID) is PlaybackState.PLAYING


# =============================================================================
# Lifecycle
# =============================================================================


class TestClose:
    @pytest.mark.asyncio
    async def test_close_releases_sessions_and_keeps_queue(
        self, connected, guild_queue, session_registry, fake_transport, make_track
    ):
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        guild_queue.enqueue(GUILD_ID, make_track("B"))
        await connected.wake(GUILD_ID)

        await connected.close()
        await fake_transport.players[GUILD_ID].settle()

        assert len(session_registry) == 0
        assert fake_transport.connections[0].destroy_calls == 1
        assert [t.title for t in guild_queue.snapshot(GUILD_ID).pending] == ["B"]

    @pytest.mark.asyncio
    async def test_disconnect_after_close_keeps_stored_queue(
        self, connected, guild_queue, queue_store, fake_transport, make_track
    ):
        for title in ("A", "B", "C"):
            guild_queue.enqueue(GUILD_ID, make_track(title))
        await connected.wake(GUILD_ID)

        await connected.close()
        # Leaving voice on shutdown reports back as a lost connection.
        summary = await connected.stop(GUILD_ID, StopReason.DISCONNECT)
        await fake_transport.players[GUILD_ID].settle()
        await queue_store.flush()

        stored = await queue_store.load(GUILD_ID)
        assert summary.tracks_cleared == 0
        assert [t.title for t in stored.pending] == ["B", "C"]
        assert stored.now_playing.track.title == "A"

    @pytest.mark.asyncio
    async def test_advance_after_close_does_nothing(self, connected, guild_queue, make_track):
        await connected.close()
        guild_queue.enqueue(GUILD_ID, make_track("A"))

        assert await connected.advance(GUILD_ID) is None
