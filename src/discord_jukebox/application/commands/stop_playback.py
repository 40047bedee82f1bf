"""Command and handler for stopping playback, clearing the queue and leaving voice."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from discord_jukebox.domain.music.value_objects import StopReason
from discord_jukebox.domain.shared.types import DiscordSnowflake, NonNegativeInt

if TYPE_CHECKING:
    from ..services.playback_driver import PlaybackDriver


class StopStatus(Enum):
    """Status codes for stop results."""

    SUCCESS = "success"


class StopPlaybackCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    reason: StopReason = StopReason.USER_REQUEST


class StopResult(BaseModel):

    status: StopStatus
    message: str
    tracks_cleared: NonNegativeInt = 0
    disconnected: bool = False

    @property
    def is_success(self) -> bool:
        return self.status == StopStatus.SUCCESS

    @classmethod
    def success(cls, tracks_cleared: int = 0, disconnected: bool = False) -> StopResult:
        if disconnected:
            message = "Stopped playback and disconnected."
        elif tracks_cleared > 0:
            message = f"Stopped playback and cleared {tracks_cleared} tracks from queue."
        else:
            message = "Stopped playback."

        return cls(
            status=StopStatus.SUCCESS,
            message=message,
            tracks_cleared=tracks_cleared,
            disconnected=disconnected,
        )


class StopPlaybackHandler:
    """Stopping always succeeds; stopping an idle guild is a no-op."""

    def __init__(self, *, playback_driver: PlaybackDriver) -> None:
        self._driver = playback_driver

    async def handle(self, command: StopPlaybackCommand) -> StopResult:
        summary = await self._driver.stop(command.guild_id, command.reason)
        return StopResult.success(summary.tracks_cleared, summary.disconnected)
