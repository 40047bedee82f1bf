"""SQLite repository implementations."""

from discord_jukebox.infrastructure.persistence.repositories.queue_state_repository import (
    SQLiteQueueStateRepository,
)

__all__ = [
    "SQLiteQueueStateRepository",
]
