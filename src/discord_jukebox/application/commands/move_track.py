"""Command and handler for moving a pending track to another queue position."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.shared.exceptions import OutOfRangeError
from discord_jukebox.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ..services.guild_queue import GuildQueueService


class MoveStatus(Enum):
    SUCCESS = "success"
    OUT_OF_RANGE = "out_of_range"


class MoveTrackCommand(BaseModel):
    """Positions are 1-based as users type them; range is checked against the live queue."""

    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    from_position: int
    to_position: int


class MoveResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: MoveStatus
    message: str
    track: Track | None = None
    to_position: int | None = None

    @property
    def is_success(self) -> bool:
        return self.status == MoveStatus.SUCCESS

    @classmethod
    def success(cls, track: Track, to_position: int) -> MoveResult:
        return cls(
            status=MoveStatus.SUCCESS,
            message=f"Moved {track.title} to position {to_position}",
            track=track,
            to_position=to_position,
        )

    @classmethod
    def error(cls, status: MoveStatus, message: str) -> MoveResult:
        return cls(status=status, message=message)


class MoveTrackHandler:
    def __init__(self, *, guild_queue: GuildQueueService) -> None:
        self._queue = guild_queue

    async def handle(self, command: MoveTrackCommand) -> MoveResult:
        try:
            track = self._queue.move_track(
                command.guild_id, command.from_position, command.to_position
            )
        except OutOfRangeError as e:
            return MoveResult.error(MoveStatus.OUT_OF_RANGE, e.message)

        return MoveResult.success(track, command.to_position)
