"""
Unit Tests for GuildQueueService

Covers per-guild isolation, persistence after each mutation, and restoring
stored queues on startup.
"""

from datetime import UTC, datetime

import pytest

from discord_jukebox.application.services.guild_queue import GuildQueueService
from discord_jukebox.application.services.queue_store import PersistentQueueStore
from discord_jukebox.domain.music.entities import GuildQueueState, NowPlaying
from discord_jukebox.domain.shared.exceptions import OutOfRangeError, QueueEmptyError

GUILD_ID = 111111111
OTHER_GUILD_ID = 222222222
START = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class TestGuildQueueService:
    @pytest.mark.asyncio
    async def test_guilds_are_isolated(self, guild_queue, make_track):
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        guild_queue.enqueue(OTHER_GUILD_ID, make_track("B"))

        assert [t.title for t in guild_queue.snapshot(GUILD_ID).pending] == ["A"]
        assert [t.title for t in guild_queue.snapshot(OTHER_GUILD_ID).pending] == ["B"]

    @pytest.mark.asyncio
    async def test_enqueue_returns_position(self, guild_queue, make_track):
        assert guild_queue.enqueue(GUILD_ID, make_track("A")) == 1
        assert guild_queue.enqueue(GUILD_ID, make_track("B")) == 2

    @pytest.mark.asyncio
    async def test_every_mutation_is_persisted(
        self, guild_queue, queue_store, queue_state_repository, make_track
    ):
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        guild_queue.enqueue(GUILD_ID, make_track("B"))
        guild_queue.move_track(GUILD_ID, 2, 1)
        await queue_store.flush()

        stored = await queue_state_repository.get(GUILD_ID)

        assert [t.title for t in stored.pending] == ["B", "A"]

    @pytest.mark.asyncio
    async def test_dequeue_empty_raises(self, guild_queue):
        with pytest.raises(QueueEmptyError):
            guild_queue.dequeue_next(GUILD_ID)

    @pytest.mark.asyncio
    async def test_move_out_of_range_raises(self, guild_queue, make_track):
        guild_queue.enqueue(GUILD_ID, make_track("A"))

        with pytest.raises(OutOfRangeError):
            guild_queue.move_track(GUILD_ID, 1, 2)

    @pytest.mark.asyncio
    async def test_start_and_finish_track(self, guild_queue, make_track):
        guild_queue.enqueue(GUILD_ID, make_track("A"))
        track = guild_queue.dequeue_next(GUILD_ID)

        guild_queue.start_track(GUILD_ID, NowPlaying(track=track, started_at=START))
        assert guild_queue.snapshot(GUILD_ID).is_playing

        finished = guild_queue.finish_track(GUILD_ID)
        assert finished.track == track
        assert guild_queue.now_playing(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_clear_leaves_now_playing(self, guild_queue, make_track):
        guild_queue.start_track(GUILD_ID, NowPlaying(track=make_track("Current"), started_at=START))
        guild_queue.enqueue(GUILD_ID, make_track("A"))

        assert guild_queue.clear(GUILD_ID) == 1
        assert guild_queue.now_playing(GUILD_ID) is not None

    @pytest.mark.asyncio
    async def test_mark_paused_without_track_is_noop(self, guild_queue):
        guild_queue.mark_paused(GUILD_ID, START)

        assert guild_queue.now_playing(GUILD_ID) is None


class TestRestore:
    @pytest.mark.asyncio
    async def test_restore_requeues_interrupted_track(self, queue_state_repository, make_track):
        state = GuildQueueState(guild_id=GUILD_ID)
        state.enqueue(make_track("Next"))
        state.start(NowPlaying(track=make_track("Interrupted"), started_at=START))
        await queue_state_repository.save(state)

        store = PersistentQueueStore(queue_state_repository)
        service = GuildQueueService(store=store)
        restored = await service.restore()
        await store.flush()

        assert restored == 1
        assert service.now_playing(GUILD_ID) is None
        assert [t.title for t in service.snapshot(GUILD_ID).pending] == ["Interrupted", "Next"]
        stored = await queue_state_repository.get(GUILD_ID)
        assert stored.now_playing is None
        await store.close()

    @pytest.mark.asyncio
    async def test_restore_counts_only_guilds_with_tracks(self, queue_state_repository, make_track):
        await queue_state_repository.save(GuildQueueState(guild_id=GUILD_ID))
        populated = GuildQueueState(guild_id=OTHER_GUILD_ID)
        populated.enqueue(make_track("A"))
        await queue_state_repository.save(populated)

        store = PersistentQueueStore(queue_state_repository)
        service = GuildQueueService(store=store)

        assert await service.restore() == 1
        await store.close()
