"""discord.py implementation of the voice transport ports."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Final

import discord

from discord_jukebox.application.interfaces.voice_transport import (
    AudioPlayer,
    AudioStream,
    TrackEndCallback,
    VoiceConnection,
    VoiceTransport,
)
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.value_objects import TrackEndSignal
from discord_jukebox.domain.shared.constants import AudioConstants
from discord_jukebox.domain.shared.exceptions import StreamOpenError, VoiceTransportError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...audio.ytdlp_resolver import YtDlpResolver

logger = logging.getLogger(__name__)

FADE_IN_SECONDS: Final[float] = 0.5


class DiscordAudioStream(AudioStream):
    def __init__(self, source: discord.AudioSource, duration_seconds: int | None = None) -> None:
        self.source = source
        self._duration_seconds = duration_seconds

    @property
    def duration_seconds(self) -> int | None:
        return self._duration_seconds

    def close(self) -> None:
        self.source.cleanup()


class DiscordAudioPlayer(AudioPlayer):
    """Plays streams through whichever ``discord.VoiceClient`` it is bound to.

    discord.py runs the ``after`` callback on its audio thread, so the
    terminal signal is handed back to the event loop with
    ``run_coroutine_threadsafe``.
    """

    def __init__(self, guild_id: int, loop: asyncio.AbstractEventLoop) -> None:
        self._guild_id = guild_id
        self._loop = loop
        self._vc: discord.VoiceClient | None = None

    @property
    def voice_client(self) -> discord.VoiceClient | None:
        return self._vc

    def bind(self, vc: discord.VoiceClient) -> None:
        self._vc = vc

    def play(self, stream: AudioStream, on_end: TrackEndCallback) -> None:
        if self._vc is None or not self._vc.is_connected():
            raise VoiceTransportError(self._guild_id)
        if not isinstance(stream, DiscordAudioStream):
            raise TypeError(f"Unsupported stream type: {type(stream).__name__}")

        guild_id = self._guild_id
        loop = self._loop

        def after_callback(error: Exception | None = None) -> None:
            signal = TrackEndSignal.from_error(error) if error else TrackEndSignal.finished()
            try:
                asyncio.run_coroutine_threadsafe(self._deliver(on_end, signal), loop)
            except RuntimeError as e:
                # Loop already closed during shutdown.
                logger.debug(LogTemplates.VOICE_CALLBACK_SCHEDULE_FAILED, guild_id, e)

        self._vc.play(stream.source, after=after_callback)

    async def _deliver(self, on_end: TrackEndCallback, signal: TrackEndSignal) -> None:
        try:
            await on_end(signal)
        except Exception as e:
            logger.error(LogTemplates.PLAYBACK_CALLBACK_ERROR, self._guild_id, e)

    def pause(self) -> None:
        if self._vc is not None and self._vc.is_playing():
            self._vc.pause()

    def resume(self) -> None:
        if self._vc is not None and self._vc.is_paused():
            self._vc.resume()

    def stop(self) -> None:
        if self._vc is not None and (self._vc.is_playing() or self._vc.is_paused()):
            self._vc.stop()


class DiscordVoiceConnection(VoiceConnection):
    def __init__(self, vc: discord.VoiceClient) -> None:
        self._vc = vc

    @property
    def voice_client(self) -> discord.VoiceClient:
        return self._vc

    @property
    def is_connected(self) -> bool:
        return self._vc.is_connected()

    def subscribe(self, player: AudioPlayer) -> None:
        if not isinstance(player, DiscordAudioPlayer):
            raise TypeError(f"Unsupported player type: {type(player).__name__}")
        player.bind(self._vc)

    async def destroy(self) -> None:
        guild_id = self._vc.guild.id
        await self._vc.disconnect(force=True)
        logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)


class DiscordVoiceTransport(VoiceTransport):
    def __init__(
        self,
        bot: discord.Client,
        resolver: YtDlpResolver,
        settings: AudioSettings | None = None,
        connect_timeout: float = AudioConstants.CONNECT_TIMEOUT_SECONDS,
    ) -> None:
        self._bot = bot
        self._resolver = resolver
        self._settings = settings or AudioSettings()
        self._connect_timeout = connect_timeout

    def _voice_channel(
        self, guild: discord.Guild, channel_id: int
    ) -> discord.VoiceChannel | discord.StageChannel:
        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            raise VoiceTransportError(
                guild.id, ErrorMessages.VOICE_CHANNEL_NOT_FOUND.format(channel_id=channel_id)
            )
        return channel

    async def connect(self, guild_id: int, channel_id: int) -> VoiceConnection:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            raise VoiceTransportError(guild_id)
        channel = self._voice_channel(guild, channel_id)

        vc = guild.voice_client
        if isinstance(vc, discord.VoiceClient) and not vc.is_connected():
            await vc.disconnect(force=True)
            vc = None

        try:
            async with asyncio.timeout(self._connect_timeout):
                if isinstance(vc, discord.VoiceClient):
                    if vc.channel is None or vc.channel.id != channel.id:
                        await vc.move_to(channel)
                        logger.info(LogTemplates.VOICE_MOVED, channel.name, guild_id)
                else:
                    vc = await channel.connect(self_deaf=True)
                    logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild_id)
        except TimeoutError as e:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            raise VoiceTransportError(
                guild_id, ErrorMessages.VOICE_CONNECT_TIMEOUT.format(channel_id=channel_id)
            ) from e
        except discord.Forbidden as e:
            raise VoiceTransportError(
                guild_id, ErrorMessages.VOICE_NO_PERMISSION.format(channel_id=channel_id)
            ) from e
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            raise VoiceTransportError(guild_id, str(e)) from e

        await self._ensure_self_deaf(guild, channel)
        return DiscordVoiceConnection(vc)

    async def _ensure_self_deaf(
        self, guild: discord.Guild, channel: discord.VoiceChannel | discord.StageChannel
    ) -> None:
        try:
            await guild.change_voice_state(channel=channel, self_deaf=True)
        except Exception as exc:
            logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, guild.id, exc)

    def create_player(self, guild_id: int) -> AudioPlayer:
        return DiscordAudioPlayer(guild_id, asyncio.get_running_loop())

    async def open_stream(self, locator: str) -> AudioStream:
        info = await self._resolver.extract_stream(locator)

        ffmpeg_options = self._settings.ffmpeg_options
        user_agent = AudioConstants.FFMPEG_USER_AGENT_HEADER.format(
            user_agent=AudioConstants.ANDROID_USER_AGENT
        )
        before_options = f"{ffmpeg_options.get('before_options', '')} {user_agent}".strip()
        options = f'{ffmpeg_options.get("options", "")} -af "afade=t=in:ss=0:d={FADE_IN_SECONDS}"'

        try:
            source = discord.FFmpegPCMAudio(
                info.url, before_options=before_options, options=options.strip()
            )
        except discord.ClientException as e:
            raise StreamOpenError(locator, str(e)) from e

        volume_source = discord.PCMVolumeTransformer(source, volume=self._settings.default_volume)
        return DiscordAudioStream(volume_source, info.duration_seconds)
