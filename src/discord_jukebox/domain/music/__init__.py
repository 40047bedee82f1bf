"""
Music Bounded Context

Tracks, per-guild queue state and the playback state machine's vocabulary.
"""

from discord_jukebox.domain.music.entities import (
    GuildQueueState,
    NowPlaying,
    QueueSnapshot,
    Track,
)
from discord_jukebox.domain.music.repository import QueueStateRepository
from discord_jukebox.domain.music.value_objects import (
    PauseToggleOutcome,
    PlaybackState,
    StopReason,
    TrackEndKind,
    TrackEndSignal,
)

__all__ = [
    # Entities
    "Track",
    "NowPlaying",
    "QueueSnapshot",
    "GuildQueueState",
    # Value Objects
    "PlaybackState",
    "TrackEndKind",
    "TrackEndSignal",
    "PauseToggleOutcome",
    "StopReason",
    # Repository
    "QueueStateRepository",
]
