"""Query for the track currently playing in a guild, with its progress."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.shared.datetime_utils import utcnow
from discord_jukebox.domain.shared.types import DiscordSnowflake, NonNegativeFloat, NonNegativeInt

if TYPE_CHECKING:
    from ..services.guild_queue import GuildQueueService


class GetNowPlayingQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake


class NowPlayingInfo(BaseModel):
    """Display data for the now-playing embed.

    ``progress`` is None when the provider reported no duration.
    """

    model_config = ConfigDict(frozen=True)

    track: Track
    elapsed_seconds: NonNegativeFloat
    duration_seconds: NonNegativeInt = 0
    progress: float | None = None
    is_paused: bool = False


class GetNowPlayingHandler:

    def __init__(
        self, *, guild_queue: GuildQueueService, clock: Callable[[], datetime] = utcnow
    ) -> None:
        self._queue = guild_queue
        self._clock = clock

    async def handle(self, query: GetNowPlayingQuery) -> NowPlayingInfo | None:
        current = self._queue.now_playing(query.guild_id)
        if current is None:
            return None

        now = self._clock()
        return NowPlayingInfo(
            track=current.track,
            elapsed_seconds=current.elapsed_seconds(now),
            duration_seconds=current.duration_seconds,
            progress=current.progress(now),
            is_paused=current.is_paused,
        )
