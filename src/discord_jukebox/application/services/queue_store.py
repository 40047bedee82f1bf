"""Write-behind store that persists guild queue state after every mutation.

Writes are fire-and-forget for the caller but strictly ordered per guild:
each guild gets one FIFO of state snapshots drained by a single writer task,
so a later mutation can never land on disk before an earlier one.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from discord_jukebox.domain.music.entities import GuildQueueState
from discord_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.music.repository import QueueStateRepository

logger = logging.getLogger(__name__)


class PersistentQueueStore:
    def __init__(self, repository: QueueStateRepository) -> None:
        self._repository = repository
        self._write_queues: dict[int, asyncio.Queue[GuildQueueState]] = {}
        self._writers: dict[int, asyncio.Task[None]] = {}
        self._closed = False

    async def load(self, guild_id: int) -> GuildQueueState:
        """Load a guild's state; missing or unreadable records yield an empty state."""
        try:
            state = await self._repository.get(guild_id)
        except Exception as e:
            logger.warning(LogTemplates.STORE_READ_FAILED, guild_id, e)
            return GuildQueueState(guild_id=guild_id)

        if state is None:
            return GuildQueueState(guild_id=guild_id)
        return state

    async def load_all(self) -> list[GuildQueueState]:
        try:
            guild_ids = await self._repository.list_guild_ids()
        except Exception as e:
            logger.warning(LogTemplates.STORE_LIST_FAILED, e)
            return []

        return [await self.load(guild_id) for guild_id in guild_ids]

    def save(self, state: GuildQueueState) -> None:
        """Queue a snapshot of ``state`` for writing and return immediately."""
        if self._closed:
            logger.warning(LogTemplates.STORE_WRITE_AFTER_CLOSE, state.guild_id)
            return

        guild_id = state.guild_id
        queue = self._write_queues.get(guild_id)
        if queue is None:
            queue = asyncio.Queue()
            self._write_queues[guild_id] = queue
            self._writers[guild_id] = asyncio.create_task(
                self._drain(guild_id, queue), name=f"queue-store-writer-{guild_id}"
            )

        queue.put_nowait(state.model_copy(deep=True))

    async def _drain(self, guild_id: int, queue: asyncio.Queue[GuildQueueState]) -> None:
        while True:
            state = await queue.get()
            try:
                await self._repository.save(state)
                logger.debug(LogTemplates.STORE_WRITTEN, guild_id)
            except Exception:
                logger.exception(LogTemplates.STORE_WRITE_FAILED, guild_id)
            finally:
                queue.task_done()

    async def flush(self, guild_id: int | None = None) -> None:
        """Wait until every queued write (for one guild, or all) has been applied."""
        if guild_id is not None:
            queue = self._write_queues.get(guild_id)
            if queue is not None:
                await queue.join()
            return

        for queue in list(self._write_queues.values()):
            await queue.join()

    async def close(self) -> None:
        await self.flush()
        self._closed = True

        writers = list(self._writers.values())
        for writer in writers:
            writer.cancel()
        await asyncio.gather(*writers, return_exceptions=True)

        self._writers.clear()
        self._write_queues.clear()
        logger.info(LogTemplates.STORE_CLOSED)
