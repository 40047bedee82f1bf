# ruff: noqa: N999
"""
Domain Layer

Pure queue and playback logic:
- shared/: cross-cutting types, exceptions and messages
- music/: tracks, guild queue state and playback states
"""

from discord_jukebox.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
