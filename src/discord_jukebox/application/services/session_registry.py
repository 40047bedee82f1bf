"""Registry of live per-guild players and voice connections."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from discord_jukebox.domain.shared.exceptions import AlreadyActiveError, EntityNotFoundError
from discord_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.voice_transport import AudioPlayer, VoiceConnection

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    """The mechanism currently playing a guild's queue."""

    guild_id: int
    player: AudioPlayer
    connection: VoiceConnection | None = None
    paused: bool = False

    @property
    def is_connected(self) -> bool:
        return self.connection is not None and self.connection.is_connected


class SessionRegistry:
    """Process-wide map of guild id to its single live player.

    Only the playback driver mutates entries, which keeps the registry and the
    guild queues consistent with each other.
    """

    def __init__(self, player_factory: Callable[[int], AudioPlayer]) -> None:
        self._player_factory = player_factory
        self._entries: dict[int, SessionEntry] = {}

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, guild_id: int) -> SessionEntry | None:
        return self._entries.get(guild_id)

    def require(self, guild_id: int) -> SessionEntry:
        entry = self._entries.get(guild_id)
        if entry is None:
            raise EntityNotFoundError("SessionEntry", guild_id)
        return entry

    def create(self, guild_id: int) -> SessionEntry:
        """Create the guild's entry with a fresh, unconnected player.

        Raises:
            AlreadyActiveError: If the guild already has a player.
        """
        if guild_id in self._entries:
            raise AlreadyActiveError(guild_id)

        entry = SessionEntry(guild_id=guild_id, player=self._player_factory(guild_id))
        self._entries[guild_id] = entry
        logger.debug(LogTemplates.SESSION_CREATED, guild_id)
        return entry

    def get_or_create(self, guild_id: int) -> SessionEntry:
        entry = self._entries.get(guild_id)
        if entry is not None:
            return entry
        return self.create(guild_id)

    def attach_connection(self, guild_id: int, connection: VoiceConnection) -> SessionEntry:
        entry = self.require(guild_id)
        connection.subscribe(entry.player)
        entry.connection = connection
        return entry

    def remove(self, guild_id: int) -> SessionEntry | None:
        """Detach and discard the guild's entry; a no-op when there is none."""
        entry = self._entries.pop(guild_id, None)
        if entry is not None:
            logger.debug(LogTemplates.SESSION_REMOVED, guild_id)
        return entry

    def entries(self) -> list[SessionEntry]:
        return list(self._entries.values())
