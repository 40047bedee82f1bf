"""Per-guild queue service: the single source of truth for what should play."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from discord_jukebox.domain.music.entities import (
    GuildQueueState,
    NowPlaying,
    QueueSnapshot,
    Track,
)
from discord_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from .queue_store import PersistentQueueStore

logger = logging.getLogger(__name__)


class GuildQueueService:
    """Holds one ``GuildQueueState`` per guild and persists every mutation.

    Every mutating method is synchronous: on a single event loop it runs to
    completion without interleaving, and the snapshot handed to the store is
    taken in the same step, so stored writes follow mutation order.
    """

    def __init__(self, *, store: PersistentQueueStore) -> None:
        self._store = store
        self._states: dict[int, GuildQueueState] = {}

    def _state(self, guild_id: int) -> GuildQueueState:
        state = self._states.get(guild_id)
        if state is None:
            state = GuildQueueState(guild_id=guild_id)
            self._states[guild_id] = state
        return state

    def _persist(self, state: GuildQueueState) -> None:
        self._store.save(state)

    async def restore(self) -> int:
        """Load every stored guild; returns the number of guilds with queued tracks.

        A track that was playing when the previous process exited goes back to
        the head of its queue, since nothing is attached to a player yet.
        """
        restored = 0
        for state in await self._store.load_all():
            interrupted = state.requeue_interrupted()
            if interrupted is not None:
                logger.info(LogTemplates.QUEUE_REQUEUED_INTERRUPTED, interrupted.title, state.guild_id)
                self._persist(state)
            self._states[state.guild_id] = state
            if state.pending:
                restored += 1

        logger.info(LogTemplates.QUEUE_RESTORED, restored)
        return restored

    # --- Command-facing operations ---

    def enqueue(self, guild_id: int, track: Track) -> int:
        state = self._state(guild_id)
        length = state.enqueue(track)
        self._persist(state)
        logger.info(LogTemplates.QUEUE_ENQUEUED, track.title, length, guild_id)
        return length

    def move_track(self, guild_id: int, from_position: int, to_position: int) -> Track:
        state = self._state(guild_id)
        track = state.move_track(from_position, to_position)
        self._persist(state)
        logger.info(LogTemplates.QUEUE_MOVED, from_position, to_position, guild_id)
        return track

    def clear(self, guild_id: int) -> int:
        state = self._state(guild_id)
        count = state.clear_pending()
        self._persist(state)
        logger.info(LogTemplates.QUEUE_CLEARED, count, guild_id)
        return count

    def snapshot(self, guild_id: int) -> QueueSnapshot:
        return self._state(guild_id).snapshot()

    def pending_count(self, guild_id: int) -> int:
        return len(self._state(guild_id).pending)

    def now_playing(self, guild_id: int) -> NowPlaying | None:
        return self._state(guild_id).now_playing

    # --- Playback driver operations ---

    def dequeue_next(self, guild_id: int) -> Track:
        """Pop the head of the queue.

        Raises:
            QueueEmptyError: If nothing is pending.
        """
        state = self._state(guild_id)
        track = state.dequeue()
        self._persist(state)
        return track

    def start_track(self, guild_id: int, now_playing: NowPlaying) -> None:
        state = self._state(guild_id)
        state.start(now_playing)
        self._persist(state)

    def finish_track(self, guild_id: int) -> NowPlaying | None:
        state = self._state(guild_id)
        finished = state.finish()
        self._persist(state)
        return finished

    def mark_paused(self, guild_id: int, at: datetime) -> None:
        state = self._state(guild_id)
        if state.now_playing is not None:
            state.now_playing = state.now_playing.paused(at)
            self._persist(state)

    def mark_resumed(self, guild_id: int, at: datetime) -> None:
        state = self._state(guild_id)
        if state.now_playing is not None:
            state.now_playing = state.now_playing.resumed(at)
            self._persist(state)

    def reset(self, guild_id: int) -> int:
        state = self._state(guild_id)
        count = state.reset()
        self._persist(state)
        return count
