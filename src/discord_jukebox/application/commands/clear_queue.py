"""Command and handler for clearing the pending queue."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from discord_jukebox.domain.shared.types import DiscordSnowflake, NonNegativeInt

if TYPE_CHECKING:
    from ..services.guild_queue import GuildQueueService


class ClearStatus(Enum):
    """Status codes for clear queue results."""

    SUCCESS = "success"


class ClearQueueCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake


class ClearResult(BaseModel):

    status: ClearStatus
    message: str
    tracks_cleared: NonNegativeInt = 0

    @property
    def is_success(self) -> bool:
        return self.status == ClearStatus.SUCCESS

    @classmethod
    def success(cls, tracks_cleared: int) -> ClearResult:
        return cls(
            status=ClearStatus.SUCCESS,
            message=f"Cleared {tracks_cleared} tracks from the queue.",
            tracks_cleared=tracks_cleared,
        )


class ClearQueueHandler:
    """Drops pending tracks; the current track keeps playing."""

    def __init__(self, *, guild_queue: GuildQueueService) -> None:
        self._queue = guild_queue

    async def handle(self, command: ClearQueueCommand) -> ClearResult:
        return ClearResult.success(self._queue.clear(command.guild_id))
