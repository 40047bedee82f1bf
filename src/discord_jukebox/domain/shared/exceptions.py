"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class EntityNotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, identifier: str | int, message: str | None = None) -> None:
        msg = message or f"{entity_type} with id '{identifier}' not found"
        super().__init__(msg, code="ENTITY_NOT_FOUND")
        self.entity_type = entity_type
        self.identifier = identifier


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class QueueEmptyError(DomainError):
    """Raised when a track is requested from an empty queue."""

    def __init__(self, guild_id: int) -> None:
        super().__init__(f"Queue for guild {guild_id} is empty", code="QUEUE_EMPTY")
        self.guild_id = guild_id


class OutOfRangeError(DomainError):
    """Raised when a 1-based queue position falls outside the pending queue."""

    def __init__(self, position: int, length: int) -> None:
        super().__init__(
            f"Position {position} is outside the queue (1..{length})", code="OUT_OF_RANGE"
        )
        self.position = position
        self.length = length


class NothingPlayingError(InvalidOperationError):
    """Raised when a playback command needs a current track and there is none."""

    def __init__(self, operation: str, current_state: str) -> None:
        super().__init__(operation, current_state, message="Nothing is playing")
        self.code = "NOTHING_PLAYING"


class AlreadyActiveError(DomainError):
    """Raised when a second player would be created for a guild that already has one."""

    def __init__(self, guild_id: int) -> None:
        super().__init__(
            f"Guild {guild_id} already has an active player", code="ALREADY_ACTIVE"
        )
        self.guild_id = guild_id


class ResolutionFailedError(DomainError):
    """Raised when a user query cannot be turned into a playable track."""

    def __init__(self, query: str) -> None:
        super().__init__(f"No result for query: {query}", code="RESOLUTION_FAILED")
        self.query = query


class StreamOpenError(DomainError):
    """Raised by the transport when an audio stream cannot be opened for a track."""

    def __init__(self, locator: str, reason: str | None = None) -> None:
        msg = f"Could not open stream for {locator}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg, code="STREAM_OPEN_FAILED")
        self.locator = locator
        self.reason = reason


class VoiceTransportError(DomainError):
    """Raised when the voice transport cannot connect or loses its connection."""

    def __init__(self, guild_id: int, message: str | None = None) -> None:
        super().__init__(
            message or f"Voice transport failure in guild {guild_id}", code="TRANSPORT_ERROR"
        )
        self.guild_id = guild_id
