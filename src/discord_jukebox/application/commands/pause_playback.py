"""Command and handler for toggling pause on the current track."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from discord_jukebox.domain.music.value_objects import PauseToggleOutcome
from discord_jukebox.domain.shared.exceptions import NothingPlayingError
from discord_jukebox.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ..services.playback_driver import PlaybackDriver


class TogglePauseStatus(Enum):
    PAUSED = "paused"
    RESUMED = "resumed"
    NOTHING_PLAYING = "nothing_playing"


class TogglePauseCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake


class TogglePauseResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: TogglePauseStatus
    message: str

    @property
    def is_success(self) -> bool:
        return self.status is not TogglePauseStatus.NOTHING_PLAYING

    @classmethod
    def success(cls, outcome: PauseToggleOutcome) -> TogglePauseResult:
        if outcome is PauseToggleOutcome.PAUSED:
            return cls(status=TogglePauseStatus.PAUSED, message="Playback paused")
        return cls(status=TogglePauseStatus.RESUMED, message="Playback resumed")

    @classmethod
    def error(cls, status: TogglePauseStatus, message: str) -> TogglePauseResult:
        return cls(status=status, message=message)


class TogglePauseHandler:
    def __init__(self, *, playback_driver: PlaybackDriver) -> None:
        self._driver = playback_driver

    async def handle(self, command: TogglePauseCommand) -> TogglePauseResult:
        try:
            outcome = await self._driver.toggle_pause(command.guild_id)
        except NothingPlayingError as e:
            return TogglePauseResult.error(TogglePauseStatus.NOTHING_PLAYING, e.message)
        return TogglePauseResult.success(outcome)
