"""Query for retrieving a guild's queue."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from discord_jukebox.domain.music.entities import QueueSnapshot
from discord_jukebox.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ..services.guild_queue import GuildQueueService


class GetQueueQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake


class GetQueueHandler:

    def __init__(self, *, guild_queue: GuildQueueService) -> None:
        self._queue = guild_queue

    async def handle(self, query: GetQueueQuery) -> QueueSnapshot:
        return self._queue.snapshot(query.guild_id)
