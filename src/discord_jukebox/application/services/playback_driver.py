"""Per-guild playback state machine.

The driver is the only component that touches both the guild queue (what
should play) and the session registry (what is playing it). All state changes
for a guild happen under that guild's ``asyncio.Lock``; opening a stream is
the one slow step and runs with the lock released. A per-guild generation
counter, bumped by ``stop()``, lets a load that finishes after a stop notice
it was cancelled and throw its stream away.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime
from functools import partial
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from discord_jukebox.domain.music.entities import NowPlaying, Track
from discord_jukebox.domain.music.value_objects import (
    PauseToggleOutcome,
    PlaybackState,
    StopReason,
    TrackEndSignal,
)
from discord_jukebox.domain.shared.datetime_utils import utcnow
from discord_jukebox.domain.shared.exceptions import (
    InvalidOperationError,
    NothingPlayingError,
    QueueEmptyError,
)
from discord_jukebox.domain.shared.messages import LogTemplates
from discord_jukebox.domain.shared.types import NonNegativeInt

if TYPE_CHECKING:
    from ..interfaces.voice_transport import AudioStream, VoiceConnection, VoiceTransport
    from .guild_queue import GuildQueueService
    from .session_registry import SessionEntry, SessionRegistry

logger = logging.getLogger(__name__)


class StopSummary(BaseModel):
    """What an explicit stop tore down."""

    model_config = ConfigDict(frozen=True)

    tracks_cleared: NonNegativeInt = 0
    disconnected: bool = False


class PlaybackDriver:
    def __init__(
        self,
        *,
        guild_queue: GuildQueueService,
        session_registry: SessionRegistry,
        transport: VoiceTransport,
        stream_open_timeout: float | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._queue = guild_queue
        self._registry = session_registry
        self._transport = transport
        self._stream_open_timeout = stream_open_timeout
        self._clock = clock

        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._states: dict[int, PlaybackState] = {}
        self._generations: defaultdict[int, int] = defaultdict(int)
        # Guilds that received tracks while a loading pass was already running.
        self._rewake: set[int] = set()
        self._closed = False

    def state(self, guild_id: int) -> PlaybackState:
        return self._states.get(guild_id, PlaybackState.IDLE)

    def _transition(self, guild_id: int, target: PlaybackState) -> None:
        current = self.state(guild_id)
        if not current.can_transition_to(target):
            raise InvalidOperationError(f"transition to {target.value}", current.value)
        self._states[guild_id] = target
        logger.debug(LogTemplates.DRIVER_TRANSITION, guild_id, current.value, target.value)

    # ─────────────────────────────────────────────────────────────────
    # Connection
    # ─────────────────────────────────────────────────────────────────

    async def connect(self, guild_id: int, channel_id: int) -> SessionEntry:
        """Make sure the guild has a player routed into a live voice connection.

        Raises:
            VoiceTransportError: If the voice channel cannot be joined.
        """
        async with self._locks[guild_id]:
            entry = self._registry.get_or_create(guild_id)
            if not entry.is_connected:
                connection = await self._transport.connect(guild_id, channel_id)
                self._registry.attach_connection(guild_id, connection)
            return entry

    # ─────────────────────────────────────────────────────────────────
    # Advancing
    # ─────────────────────────────────────────────────────────────────

    async def wake(self, guild_id: int) -> Track | None:
        """Start playback if the guild is idle; called after every enqueue."""
        async with self._locks[guild_id]:
            if self.state(guild_id) is PlaybackState.LOADING:
                self._rewake.add(guild_id)
                return None
        return await self.advance(guild_id)

    async def advance(self, guild_id: int) -> Track | None:
        """Pull tracks from the queue until one is playing.

        Returns the track that started, or None if nothing did: the guild was
        busy, the queue was empty, there was no session, every stream failed,
        or a stop cancelled the load.
        """
        while True:
            started = await self._advance_pass(guild_id)
            if started is not None or guild_id not in self._rewake:
                return started
            self._rewake.discard(guild_id)

    async def _advance_pass(self, guild_id: int) -> Track | None:
        lock = self._locks[guild_id]

        async with lock:
            if self._closed or self.state(guild_id) is not PlaybackState.IDLE:
                return None
            # One pass over what is queued now; an all-bad queue drains to IDLE.
            attempts = self._queue.pending_count(guild_id)
            if attempts == 0:
                return None
            if guild_id not in self._registry:
                logger.debug(LogTemplates.DRIVER_NO_SESSION, guild_id)
                return None
            generation = self._generations[guild_id]
            self._rewake.discard(guild_id)
            self._transition(guild_id, PlaybackState.LOADING)

        for _ in range(attempts):
            async with lock:
                if generation != self._generations[guild_id]:
                    return None
                try:
                    track = self._queue.dequeue_next(guild_id)
                except QueueEmptyError:
                    break

            stream = await self._open_stream(guild_id, track)

            async with lock:
                if generation != self._generations[guild_id]:
                    if stream is not None:
                        stream.close()
                    logger.info(LogTemplates.DRIVER_LOAD_DISCARDED, track.title, guild_id)
                    return None
                if stream is not None and self._attach(guild_id, track, stream):
                    return track
                self._transition(guild_id, PlaybackState.LOADING)

        async with lock:
            if generation == self._generations[guild_id]:
                self._transition(guild_id, PlaybackState.IDLE)
                logger.info(LogTemplates.DRIVER_QUEUE_DRAINED, guild_id)
        return None

    async def _open_stream(self, guild_id: int, track: Track) -> AudioStream | None:
        try:
            async with asyncio.timeout(self._stream_open_timeout):
                return await self._transport.open_stream(track.locator)
        except Exception as e:
            logger.warning(LogTemplates.STREAM_OPEN_FAILED, track.title, guild_id, e)
            return None

    def _attach(self, guild_id: int, track: Track, stream: AudioStream) -> bool:
        entry = self._registry.get(guild_id)
        if entry is None:
            stream.close()
            return False

        on_end = partial(self.handle_track_end, guild_id, track.id)
        try:
            entry.player.play(stream, on_end)
        except Exception as e:
            stream.close()
            logger.warning(LogTemplates.DRIVER_ATTACH_FAILED, track.title, guild_id, e)
            return False

        entry.paused = False
        self._queue.start_track(
            guild_id,
            NowPlaying(
                track=track,
                started_at=self._clock(),
                duration_seconds=stream.duration_seconds or 0,
            ),
        )
        self._transition(guild_id, PlaybackState.PLAYING)
        logger.info(LogTemplates.PLAYBACK_STARTED, track.title, guild_id)
        return True

    async def handle_track_end(self, guild_id: int, entry_id: str, signal: TrackEndSignal) -> None:
        """React to the player's terminal signal for one attached track.

        Natural ends, skips and mid-stream errors all arrive here and advance
        the queue the same way. A signal for anything but the current track is
        stale and ignored, so each playback advances the queue exactly once.
        """
        async with self._locks[guild_id]:
            current = self._queue.now_playing(guild_id)
            if (
                self._closed
                or current is None
                or current.track.id != entry_id
                or not self.state(guild_id).is_active
            ):
                logger.debug(LogTemplates.DRIVER_STALE_SIGNAL, entry_id, guild_id)
                return

            if signal.is_error:
                logger.warning(LogTemplates.PLAYBACK_ERROR, guild_id, signal.detail)

            self._queue.finish_track(guild_id)
            entry = self._registry.get(guild_id)
            if entry is not None:
                entry.paused = False
            self._transition(guild_id, PlaybackState.IDLE)
            logger.info(LogTemplates.TRACK_FINISHED, current.track.title, guild_id)

        await self.advance(guild_id)

    # ─────────────────────────────────────────────────────────────────
    # User commands
    # ─────────────────────────────────────────────────────────────────

    async def skip(self, guild_id: int) -> Track:
        """End the current track; the player's terminal signal does the advancing.

        Raises:
            NothingPlayingError: If no track is attached.
        """
        async with self._locks[guild_id]:
            state = self.state(guild_id)
            current = self._queue.now_playing(guild_id)
            entry = self._registry.get(guild_id)
            if not state.is_active or current is None or entry is None:
                raise NothingPlayingError("skip", state.value)

            entry.player.stop()
            logger.info(LogTemplates.TRACK_SKIPPED, current.track.title, guild_id)
            return current.track

    async def toggle_pause(self, guild_id: int) -> PauseToggleOutcome:
        """Pause a playing track or resume a paused one.

        Raises:
            NothingPlayingError: If no track is attached.
        """
        async with self._locks[guild_id]:
            state = self.state(guild_id)
            entry = self._registry.get(guild_id)
            if not state.is_active or entry is None:
                raise NothingPlayingError("pause", state.value)

            if state is PlaybackState.PLAYING:
                entry.player.pause()
                entry.paused = True
                self._queue.mark_paused(guild_id, self._clock())
                self._transition(guild_id, PlaybackState.PAUSED)
                logger.info(LogTemplates.PLAYBACK_PAUSED, guild_id)
                return PauseToggleOutcome.PAUSED

            entry.player.resume()
            entry.paused = False
            self._queue.mark_resumed(guild_id, self._clock())
            self._transition(guild_id, PlaybackState.PLAYING)
            logger.info(LogTemplates.PLAYBACK_RESUMED, guild_id)
            return PauseToggleOutcome.RESUMED

    async def stop(self, guild_id: int, reason: StopReason = StopReason.USER_REQUEST) -> StopSummary:
        """Clear the queue, end playback and leave voice. Safe to call repeatedly."""
        async with self._locks[guild_id]:
            self._generations[guild_id] += 1
            self._rewake.discard(guild_id)
            self._transition(guild_id, PlaybackState.STOPPING)

            entry = self._registry.remove(guild_id)
            if entry is not None:
                entry.player.stop()
            # After close the stored queue is kept for the next start to restore.
            cleared = 0 if self._closed else self._queue.reset(guild_id)

            disconnected = False
            if entry is not None and entry.connection is not None:
                disconnected = await self._destroy_connection(guild_id, entry.connection)

            self._transition(guild_id, PlaybackState.IDLE)

        logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id, reason.value)
        return StopSummary(tracks_cleared=cleared, disconnected=disconnected)

    async def _destroy_connection(self, guild_id: int, connection: VoiceConnection) -> bool:
        try:
            await connection.destroy()
            return True
        except Exception:
            logger.exception(LogTemplates.VOICE_CLEANUP_ERROR, guild_id)
            return False

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Release every player and connection; stored queues are left as they are."""
        self._closed = True
        for entry in self._registry.entries():
            async with self._locks[entry.guild_id]:
                self._generations[entry.guild_id] += 1
                self._registry.remove(entry.guild_id)
                entry.player.stop()
                if entry.connection is not None:
                    await self._destroy_connection(entry.guild_id, entry.connection)
                self._states.pop(entry.guild_id, None)
        logger.info(LogTemplates.DRIVER_CLOSED)
