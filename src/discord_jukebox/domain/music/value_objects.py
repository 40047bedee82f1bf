"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class PlaybackState(Enum):
    """Per-guild playback driver state with enforced transitions.

    State transitions:
    - IDLE -> LOADING (a track is pulled from the queue)
    - LOADING -> LOADING (stream open failed, next track pulled)
    - LOADING -> PLAYING (stream attached to the player)
    - LOADING -> IDLE (every remaining track failed)
    - PLAYING <-> PAUSED (pause toggle)
    - PLAYING/PAUSED -> IDLE (track finished or errored)
    - Any -> STOPPING -> IDLE (explicit stop or disconnect)
    """

    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPING = "stopping"

    def can_transition_to(self, target: PlaybackState) -> bool:
        """Check if transition to target state is valid."""
        if target is PlaybackState.STOPPING:
            return True
        valid_transitions = {
            PlaybackState.IDLE: {PlaybackState.LOADING},
            PlaybackState.LOADING: {
                PlaybackState.LOADING,
                PlaybackState.PLAYING,
                PlaybackState.IDLE,
            },
            PlaybackState.PLAYING: {PlaybackState.PAUSED, PlaybackState.IDLE},
            PlaybackState.PAUSED: {PlaybackState.PLAYING, PlaybackState.IDLE},
            PlaybackState.STOPPING: {PlaybackState.IDLE},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_active(self) -> bool:
        """A track is attached to the player (playing or held)."""
        return self in {PlaybackState.PLAYING, PlaybackState.PAUSED}


class TrackEndKind(Enum):
    """Terminal signal kinds a transport player emits for an attached stream."""

    FINISHED = "finished"
    ERROR = "error"


class TrackEndSignal(BaseModel):
    """The single terminal signal emitted for one attached stream."""

    model_config = ConfigDict(frozen=True)

    kind: TrackEndKind
    detail: str | None = None

    @classmethod
    def finished(cls) -> TrackEndSignal:
        return cls(kind=TrackEndKind.FINISHED)

    @classmethod
    def from_error(cls, error: BaseException | None) -> TrackEndSignal:
        """Build the signal for a player callback that may carry an error."""
        if error is None:
            return cls.finished()
        return cls(kind=TrackEndKind.ERROR, detail=repr(error))

    @property
    def is_error(self) -> bool:
        return self.kind is TrackEndKind.ERROR


class PauseToggleOutcome(Enum):
    """What a pause toggle did."""

    PAUSED = "paused"
    RESUMED = "resumed"


class StopReason(Enum):
    """Reasons playback can be stopped."""

    USER_REQUEST = "user_request"
    DISCONNECT = "disconnect"
