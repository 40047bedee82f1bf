"""
Shared Domain Kernel

Exceptions shared across the domain.
"""

from discord_jukebox.domain.shared.exceptions import (
    AlreadyActiveError,
    DomainError,
    EntityNotFoundError,
    InvalidOperationError,
    NothingPlayingError,
    OutOfRangeError,
    QueueEmptyError,
    ResolutionFailedError,
    StreamOpenError,
    VoiceTransportError,
)

__all__ = [
    "DomainError",
    "EntityNotFoundError",
    "InvalidOperationError",
    "QueueEmptyError",
    "OutOfRangeError",
    "NothingPlayingError",
    "AlreadyActiveError",
    "ResolutionFailedError",
    "StreamOpenError",
    "VoiceTransportError",
]
