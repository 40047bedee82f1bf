"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite queue state)
- Discord (bot, cog, voice transport)
- Audio (yt-dlp, FFmpeg)
"""

from discord_jukebox.infrastructure.discord.adapters.voice_transport import DiscordVoiceTransport
from discord_jukebox.infrastructure.discord.bot import create_bot
from discord_jukebox.infrastructure.persistence.database import Database

__all__ = [
    "create_bot",
    "DiscordVoiceTransport",
    "Database",
]
