"""Command and handler for requesting a track from a query or URL."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.shared.exceptions import ResolutionFailedError, VoiceTransportError
from discord_jukebox.domain.shared.types import DiscordSnowflake, NonEmptyStr, NonNegativeInt

if TYPE_CHECKING:
    from ..services.guild_queue import GuildQueueService
    from ..services.playback_driver import PlaybackDriver
    from ..services.track_resolution import TrackResolutionService


class PlayTrackStatus(Enum):
    """Status codes for play track results."""

    NOW_PLAYING = "now_playing"
    QUEUED = "queued"
    TRACK_NOT_FOUND = "track_not_found"
    VOICE_ERROR = "voice_error"


class PlayTrackCommand(BaseModel):
    """Request to resolve a query, queue the track, and start playback if idle."""

    model_config = ConfigDict(frozen=True, strict=True)

    guild_id: DiscordSnowflake
    channel_id: DiscordSnowflake
    requested_by: NonEmptyStr
    query: NonEmptyStr

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v


class PlayTrackResult(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    status: PlayTrackStatus
    message: str
    track: Track | None = None
    queue_position: NonNegativeInt | None = None

    @property
    def is_success(self) -> bool:
        return self.status in {PlayTrackStatus.NOW_PLAYING, PlayTrackStatus.QUEUED}

    @classmethod
    def success(
        cls, track: Track, queue_position: int | None = None, started_playing: bool = False
    ) -> PlayTrackResult:
        if started_playing:
            return cls(
                status=PlayTrackStatus.NOW_PLAYING,
                message=f"Now playing: {track.title}",
                track=track,
            )
        return cls(
            status=PlayTrackStatus.QUEUED,
            message=f"Added to queue: {track.title}",
            track=track,
            queue_position=queue_position,
        )

    @classmethod
    def error(cls, status: PlayTrackStatus, message: str) -> PlayTrackResult:
        return cls(status=status, message=message)


class PlayTrackHandler:
    """Resolves the query, joins voice, queues the track, and wakes the driver."""

    def __init__(
        self,
        *,
        track_resolution: TrackResolutionService,
        guild_queue: GuildQueueService,
        playback_driver: PlaybackDriver,
    ) -> None:
        self._resolution = track_resolution
        self._queue = guild_queue
        self._driver = playback_driver

    async def handle(self, command: PlayTrackCommand) -> PlayTrackResult:
        # Resolve before touching voice so a bad query mutates nothing.
        try:
            track = await self._resolution.resolve(command.query, command.requested_by)
        except ResolutionFailedError as e:
            return PlayTrackResult.error(PlayTrackStatus.TRACK_NOT_FOUND, e.message)

        try:
            await self._driver.connect(command.guild_id, command.channel_id)
        except VoiceTransportError as e:
            return PlayTrackResult.error(PlayTrackStatus.VOICE_ERROR, e.message)

        self._queue.enqueue(command.guild_id, track)
        await self._driver.wake(command.guild_id)

        snapshot = self._queue.snapshot(command.guild_id)
        if snapshot.now_playing is not None and snapshot.now_playing.track.id == track.id:
            return PlayTrackResult.success(track, started_playing=True)

        # None when the track was already tried and dropped as unplayable.
        position = next(
            (i for i, queued in enumerate(snapshot.pending, start=1) if queued.id == track.id),
            None,
        )
        return PlayTrackResult.success(track, queue_position=position)
