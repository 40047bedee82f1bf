"""Domain entities for the music bounded context."""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from discord_jukebox.domain.shared.datetime_utils import utcnow
from discord_jukebox.domain.shared.exceptions import OutOfRangeError, QueueEmptyError
from discord_jukebox.domain.shared.messages import ErrorMessages
from discord_jukebox.domain.shared.types import (
    DiscordSnowflake,
    NonNegativeInt,
    NonEmptyStr,
    NonNegativeFloat,
    TrackTitleStr,
    UtcDatetimeField,
)


def new_entry_id() -> str:
    return uuid4().hex


class Track(BaseModel):
    """A resolved, playable reference to one piece of audio plus display metadata.

    ``id`` identifies this queue entry, not the song: the same song requested
    twice yields two tracks with different ids.
    """

    model_config = ConfigDict(frozen=True)

    id: NonEmptyStr = Field(default_factory=new_entry_id)
    title: TrackTitleStr
    locator: NonEmptyStr
    requested_by: NonEmptyStr
    requested_at: UtcDatetimeField = Field(default_factory=utcnow)


class NowPlaying(BaseModel):
    """The track currently attached to the guild's player.

    Elapsed time is always derived from ``started_at``; pauses are tracked
    separately in ``paused_at``/``paused_seconds`` so ``started_at`` itself is
    never rewritten.
    """

    model_config = ConfigDict(frozen=True)

    track: Track
    started_at: UtcDatetimeField
    duration_seconds: NonNegativeInt = 0
    paused_at: UtcDatetimeField | None = None
    paused_seconds: NonNegativeFloat = 0.0

    @property
    def is_paused(self) -> bool:
        return self.paused_at is not None

    def elapsed_seconds(self, now: datetime | None = None) -> float:
        reference = self.paused_at or now or utcnow()
        elapsed = (reference - self.started_at).total_seconds() - self.paused_seconds
        return max(0.0, elapsed)

    def progress(self, now: datetime | None = None) -> float | None:
        """Fraction of the track played in [0, 1], or None when the duration is unknown."""
        if not self.duration_seconds:
            return None
        return min(1.0, self.elapsed_seconds(now) / self.duration_seconds)

    def paused(self, at: datetime) -> NowPlaying:
        if self.paused_at is not None:
            return self
        return self.model_copy(update={"paused_at": at})

    def resumed(self, at: datetime) -> NowPlaying:
        if self.paused_at is None:
            return self
        held = max(timedelta(0), at - self.paused_at).total_seconds()
        return self.model_copy(
            update={"paused_at": None, "paused_seconds": self.paused_seconds + held}
        )


class QueueSnapshot(BaseModel):
    """Read-only copy of a guild's queue state for display commands."""

    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    pending: tuple[Track, ...] = ()
    now_playing: NowPlaying | None = None
    is_playing: bool = False

    @property
    def length(self) -> int:
        return len(self.pending)

    @property
    def is_empty(self) -> bool:
        return not self.pending and self.now_playing is None


class GuildQueueState(BaseModel):
    """Pending tracks plus the now-playing record for one guild.

    ``pending`` is in play order. The track in ``now_playing`` has already been
    removed from ``pending``; ``is_playing`` is derived from ``now_playing`` so
    the two can never disagree.
    """

    guild_id: DiscordSnowflake
    pending: list[Track] = Field(default_factory=list)
    now_playing: NowPlaying | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_playing(self) -> bool:
        return self.now_playing is not None

    @model_validator(mode="after")
    def _playing_track_not_pending(self) -> GuildQueueState:
        if self.now_playing is not None and any(
            t.id == self.now_playing.track.id for t in self.pending
        ):
            raise ValueError(ErrorMessages.PLAYING_TRACK_IN_PENDING)
        return self

    # --- Queue operations ---

    def enqueue(self, track: Track) -> int:
        self.pending.append(track)
        return len(self.pending)

    def dequeue(self) -> Track:
        if not self.pending:
            raise QueueEmptyError(self.guild_id)
        return self.pending.pop(0)

    def move_track(self, from_position: int, to_position: int) -> Track:
        """Move a track between 1-based positions, keeping the others in order."""
        length = len(self.pending)
        for position in (from_position, to_position):
            if not 1 <= position <= length:
                raise OutOfRangeError(position, length)

        track = self.pending.pop(from_position - 1)
        self.pending.insert(to_position - 1, track)
        return track

    def clear_pending(self) -> int:
        count = len(self.pending)
        self.pending.clear()
        return count

    # --- Now-playing bookkeeping ---

    def start(self, now_playing: NowPlaying) -> None:
        if any(t.id == now_playing.track.id for t in self.pending):
            raise ValueError(ErrorMessages.PLAYING_TRACK_IN_PENDING)
        self.now_playing = now_playing

    def finish(self) -> NowPlaying | None:
        finished, self.now_playing = self.now_playing, None
        return finished

    def reset(self) -> int:
        """Drop everything; returns how many pending tracks were discarded."""
        self.now_playing = None
        return self.clear_pending()

    def requeue_interrupted(self) -> Track | None:
        """Put a track left playing by a previous process back at the head of the queue."""
        if self.now_playing is None:
            return None
        track = self.now_playing.track
        self.now_playing = None
        self.pending.insert(0, track)
        return track

    def snapshot(self) -> QueueSnapshot:
        return QueueSnapshot(
            guild_id=self.guild_id,
            pending=tuple(self.pending),
            now_playing=self.now_playing,
            is_playing=self.is_playing,
        )
