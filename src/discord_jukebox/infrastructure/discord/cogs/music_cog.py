"""Slash-command cog for the jukebox: play, skip, pause, queue and friends."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_jukebox.application.commands.clear_queue import ClearQueueCommand
from discord_jukebox.application.commands.move_track import MoveTrackCommand
from discord_jukebox.application.commands.pause_playback import (
    TogglePauseCommand,
    TogglePauseStatus,
)
from discord_jukebox.application.commands.play_track import PlayTrackCommand, PlayTrackStatus
from discord_jukebox.application.commands.skip_track import SkipTrackCommand
from discord_jukebox.application.commands.stop_playback import StopPlaybackCommand
from discord_jukebox.application.queries.get_current import GetNowPlayingQuery
from discord_jukebox.application.queries.get_queue import GetQueueQuery
from discord_jukebox.domain.music.value_objects import StopReason
from discord_jukebox.domain.shared.constants import UIConstants
from discord_jukebox.domain.shared.messages import (
    DiscordUIMessages,
    ErrorMessages,
    LogTemplates,
)
from discord_jukebox.infrastructure.discord.guards.voice_guards import (
    get_member_voice_channel,
    send_ephemeral,
)
from discord_jukebox.utils.reply import format_duration, progress_bar, truncate

if TYPE_CHECKING:
    from ....application.queries.get_current import NowPlayingInfo
    from ....config.container import Container
    from ....domain.music.entities import QueueSnapshot

logger = logging.getLogger(__name__)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    # ─────────────────────────────────────────────────────────────────
    # Ping
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="ping", description="Check bot latency")
    async def ping(self, interaction: discord.Interaction) -> None:
        latency_ms = round(self.bot.latency * 1000)
        await interaction.response.send_message(
            DiscordUIMessages.SUCCESS_PONG.format(latency_ms=latency_ms)
        )

    # ─────────────────────────────────────────────────────────────────
    # Play
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song")
    @app_commands.describe(query="URL or song name")
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        channel = await get_member_voice_channel(interaction)
        if channel is None:
            return
        assert interaction.guild is not None

        if not query.strip():
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_TRACK_NOT_FOUND)
            return

        await interaction.response.defer()

        try:
            result = await self.container.play_track_handler.handle(
                PlayTrackCommand(
                    guild_id=interaction.guild.id,
                    channel_id=channel.id,
                    requested_by=str(interaction.user),
                    query=query,
                )
            )
        except Exception:
            logger.exception(LogTemplates.BOT_SLASH_COMMAND_ERROR, "play", query)
            await interaction.followup.send(DiscordUIMessages.ERROR_OCCURRED, ephemeral=True)
            return

        if result.status is PlayTrackStatus.TRACK_NOT_FOUND:
            await interaction.followup.send(DiscordUIMessages.ERROR_TRACK_NOT_FOUND)
        elif result.status is PlayTrackStatus.VOICE_ERROR:
            await interaction.followup.send(
                DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE, ephemeral=True
            )
        elif result.status is PlayTrackStatus.NOW_PLAYING:
            assert result.track is not None
            await interaction.followup.send(
                DiscordUIMessages.ACTION_NOW_PLAYING.format(
                    track_title=truncate(result.track.title)
                )
            )
        else:
            assert result.track is not None
            title = truncate(result.track.title)
            if result.queue_position is not None:
                content = DiscordUIMessages.SUCCESS_QUEUED_AT.format(
                    track_title=title, position=result.queue_position
                )
            else:
                content = DiscordUIMessages.SUCCESS_QUEUED.format(track_title=title)
            await interaction.followup.send(content)

    # ─────────────────────────────────────────────────────────────────
    # Playback Controls
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="skip", description="Skip current song")
    @app_commands.guild_only()
    async def skip(self, interaction: discord.Interaction) -> None:
        assert interaction.guild is not None

        result = await self.container.skip_track_handler.handle(
            SkipTrackCommand(guild_id=interaction.guild.id)
        )
        if result.is_success:
            await interaction.response.send_message(DiscordUIMessages.ACTION_SKIPPED)
        else:
            await interaction.response.send_message(DiscordUIMessages.STATE_NOTHING_PLAYING)

    @app_commands.command(name="pause", description="Pause or resume the current song")
    @app_commands.guild_only()
    async def pause(self, interaction: discord.Interaction) -> None:
        assert interaction.guild is not None

        result = await self.container.toggle_pause_handler.handle(
            TogglePauseCommand(guild_id=interaction.guild.id)
        )
        if result.status is TogglePauseStatus.PAUSED:
            await interaction.response.send_message(DiscordUIMessages.ACTION_PAUSED)
        elif result.status is TogglePauseStatus.RESUMED:
            await interaction.response.send_message(DiscordUIMessages.ACTION_RESUMED)
        else:
            await interaction.response.send_message(DiscordUIMessages.STATE_NOTHING_PLAYING)

    @app_commands.command(name="disconnect", description="Disconnect bot from voice")
    @app_commands.guild_only()
    async def disconnect(self, interaction: discord.Interaction) -> None:
        assert interaction.guild is not None

        result = await self.container.stop_playback_handler.handle(
            StopPlaybackCommand(guild_id=interaction.guild.id)
        )
        if result.disconnected:
            await interaction.response.send_message(DiscordUIMessages.ACTION_DISCONNECTED)
        else:
            await interaction.response.send_message(DiscordUIMessages.STATE_NOT_CONNECTED)

    # ─────────────────────────────────────────────────────────────────
    # Queue Management
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="clearqueue", description="Clear the queue")
    @app_commands.guild_only()
    async def clearqueue(self, interaction: discord.Interaction) -> None:
        assert interaction.guild is not None

        result = await self.container.clear_queue_handler.handle(
            ClearQueueCommand(guild_id=interaction.guild.id)
        )
        if result.tracks_cleared:
            await interaction.response.send_message(
                DiscordUIMessages.SUCCESS_QUEUE_CLEARED_COUNT.format(count=result.tracks_cleared)
            )
        else:
            await interaction.response.send_message(DiscordUIMessages.SUCCESS_QUEUE_CLEARED)

    @app_commands.command(name="queueshift", description="Move a song in the queue to a new position")
    @app_commands.guild_only()
    @app_commands.rename(from_position="from", to_position="to")
    @app_commands.describe(from_position="Current position", to_position="New position")
    async def queueshift(
        self, interaction: discord.Interaction, from_position: int, to_position: int
    ) -> None:
        assert interaction.guild is not None

        result = await self.container.move_track_handler.handle(
            MoveTrackCommand(
                guild_id=interaction.guild.id,
                from_position=from_position,
                to_position=to_position,
            )
        )
        if result.is_success and result.track is not None:
            await interaction.response.send_message(
                DiscordUIMessages.ACTION_TRACK_MOVED.format(
                    track_title=truncate(result.track.title), position=to_position
                )
            )
        else:
            await interaction.response.send_message(DiscordUIMessages.ERROR_INVALID_POSITIONS)

    @app_commands.command(name="queue", description="Show music queue")
    @app_commands.guild_only()
    @app_commands.describe(page="Page number")
    async def queue(self, interaction: discord.Interaction, page: int = 1) -> None:
        assert interaction.guild is not None

        snapshot = await self.container.get_queue_handler.handle(
            GetQueueQuery(guild_id=interaction.guild.id)
        )
        if snapshot.is_empty:
            await interaction.response.send_message(DiscordUIMessages.STATE_QUEUE_EMPTY)
            return

        await interaction.response.send_message(embed=build_queue_embed(snapshot, page))

    @app_commands.command(name="np", description="Now playing with progress")
    @app_commands.guild_only()
    async def np(self, interaction: discord.Interaction) -> None:
        assert interaction.guild is not None

        info = await self.container.get_now_playing_handler.handle(
            GetNowPlayingQuery(guild_id=interaction.guild.id)
        )
        if info is None:
            await interaction.response.send_message(DiscordUIMessages.STATE_NOTHING_PLAYING)
            return

        await interaction.response.send_message(embed=build_now_playing_embed(info))

    # ─────────────────────────────────────────────────────────────────
    # Voice Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        """Tear the session down when the bot itself is dropped from voice."""
        if self.bot.user is None or member.id != self.bot.user.id:
            return
        if before.channel is None or after.channel is not None:
            return

        logger.info(LogTemplates.VOICE_CONNECTION_LOST, member.guild.id)
        await self.container.stop_playback_handler.handle(
            StopPlaybackCommand(guild_id=member.guild.id, reason=StopReason.DISCONNECT)
        )


def build_queue_embed(snapshot: QueueSnapshot, page: int = 1) -> discord.Embed:
    per_page = UIConstants.QUEUE_PER_PAGE
    total_pages = max(1, math.ceil(snapshot.length / per_page))
    page = max(1, min(page, total_pages))
    start_idx = (page - 1) * per_page

    embed = discord.Embed(
        title=DiscordUIMessages.EMBED_QUEUE.format(
            total_tracks=snapshot.length, page=page, total_pages=total_pages
        ),
        color=UIConstants.EMBED_COLOR,
    )

    if snapshot.now_playing is not None:
        current = snapshot.now_playing.track
        embed.add_field(
            name=DiscordUIMessages.EMBED_FIELD_CURRENT,
            value=f"[{truncate(current.title)}]({current.locator})",
            inline=False,
        )

    tracks = snapshot.pending[start_idx : start_idx + per_page]
    lines = [
        f"{idx}. [{truncate(track.title)}]({track.locator})"
        for idx, track in enumerate(tracks, start=start_idx + 1)
    ]
    if lines:
        embed.add_field(
            name=DiscordUIMessages.EMBED_FIELD_UP_NEXT, value="\n".join(lines), inline=False
        )

    return embed


def build_now_playing_embed(info: NowPlayingInfo) -> discord.Embed:
    title = DiscordUIMessages.EMBED_NOW_PLAYING
    if info.is_paused:
        title = f"{title} ({DiscordUIMessages.EMBED_PAUSED_MARKER})"

    duration = info.duration_seconds or None
    embed = discord.Embed(
        title=title,
        description=f"[{truncate(info.track.title)}]({info.track.locator})",
        color=UIConstants.EMBED_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    embed.add_field(
        name=DiscordUIMessages.EMBED_FIELD_PROGRESS,
        value=progress_bar(info.progress),
        inline=False,
    )
    embed.add_field(
        name=DiscordUIMessages.EMBED_FIELD_TIME,
        value=f"`{format_duration(info.elapsed_seconds)} / {format_duration(duration)}`",
        inline=False,
    )
    embed.set_footer(
        text=DiscordUIMessages.EMBED_REQUESTED_BY.format(requester=info.track.requested_by)
    )
    return embed


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
