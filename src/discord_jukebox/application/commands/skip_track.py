"""
Skip Track Command

Command and handler for ending the current track early.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from discord_jukebox.domain.shared.exceptions import NothingPlayingError

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ..services.playback_driver import PlaybackDriver


class SkipStatus(Enum):
    """Status codes for skip results."""

    SUCCESS = "success"
    NOTHING_PLAYING = "nothing_playing"


@dataclass
class SkipTrackCommand:
    guild_id: int

    def __post_init__(self) -> None:
        if self.guild_id <= 0:
            raise ValueError("Guild ID must be positive")


@dataclass
class SkipResult:
    """Result of a skip track command."""

    status: SkipStatus
    message: str
    skipped_track: Track | None = None

    @property
    def is_success(self) -> bool:
        return self.status == SkipStatus.SUCCESS

    @classmethod
    def success(cls, skipped_track: Track) -> SkipResult:
        return cls(
            status=SkipStatus.SUCCESS,
            message=f"Skipped: {skipped_track.title}",
            skipped_track=skipped_track,
        )

    @classmethod
    def error(cls, status: SkipStatus, message: str) -> SkipResult:
        return cls(status=status, message=message)


class SkipTrackHandler:
    """Handler for SkipTrackCommand.

    Skipping only stops the player; the next track is started by the same
    terminal-signal path a natural finish takes, so a skip racing a finish
    still advances the queue once.
    """

    def __init__(self, *, playback_driver: PlaybackDriver) -> None:
        self._driver = playback_driver

    async def handle(self, command: SkipTrackCommand) -> SkipResult:
        try:
            skipped = await self._driver.skip(command.guild_id)
        except NothingPlayingError as e:
            return SkipResult.error(SkipStatus.NOTHING_PLAYING, e.message)

        return SkipResult.success(skipped)
