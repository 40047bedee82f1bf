"""Abstract repository interface for persisted guild queue state."""

from __future__ import annotations

from abc import ABC, abstractmethod

from discord_jukebox.domain.music.entities import GuildQueueState


class QueueStateRepository(ABC):
    """Durable key-value mapping from guild id to its serialized queue state."""

    @abstractmethod
    async def get(self, guild_id: int) -> GuildQueueState | None:
        """Load the stored state for a guild.

        Args:
            guild_id: The guild to load.

        Returns:
            The stored state, or None if nothing is stored for the guild.

        Raises:
            pydantic.ValidationError: If the stored record cannot be decoded.
        """
        ...

    @abstractmethod
    async def save(self, state: GuildQueueState) -> None:
        """Insert or replace the stored state for ``state.guild_id``."""
        ...

    @abstractmethod
    async def delete(self, guild_id: int) -> bool:
        """Delete the stored state for a guild.

        Returns:
            True if a record was deleted, False if none existed.
        """
        ...

    @abstractmethod
    async def list_guild_ids(self) -> list[int]:
        """Return the ids of every guild with a stored record."""
        ...
