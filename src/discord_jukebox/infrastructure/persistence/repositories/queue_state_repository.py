"""SQLite implementation of the queue state repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from discord_jukebox.domain.music.entities import GuildQueueState
from discord_jukebox.domain.music.repository import QueueStateRepository
from discord_jukebox.domain.shared.datetime_utils import UtcDateTime

if TYPE_CHECKING:
    from ..database import Database


class SQLiteQueueStateRepository(QueueStateRepository):
    """One row per guild holding the whole queue state as JSON."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def get(self, guild_id: int) -> GuildQueueState | None:
        row = await self._db.fetch_one(
            "SELECT state_json FROM guild_queues WHERE guild_id = ?",
            (guild_id,),
        )
        if row is None:
            return None

        return GuildQueueState.model_validate_json(row["state_json"])

    async def save(self, state: GuildQueueState) -> None:
        await self._db.execute(
            """
            INSERT INTO guild_queues (guild_id, state_json, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(guild_id) DO UPDATE SET
                state_json = excluded.state_json,
                updated_at = excluded.updated_at
            """,
            (state.guild_id, state.model_dump_json(), UtcDateTime.now().iso),
        )

    async def delete(self, guild_id: int) -> bool:
        row = await self._db.fetch_one(
            "SELECT 1 FROM guild_queues WHERE guild_id = ?",
            (guild_id,),
        )
        if row is None:
            return False

        await self._db.execute("DELETE FROM guild_queues WHERE guild_id = ?", (guild_id,))
        return True

    async def list_guild_ids(self) -> list[int]:
        rows = await self._db.fetch_all("SELECT guild_id FROM guild_queues ORDER BY guild_id")
        return [row["guild_id"] for row in rows]
