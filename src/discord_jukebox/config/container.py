"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the queue store, playback driver, adapters and
handlers. Components are created on first access and cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.commands.clear_queue import ClearQueueHandler
    from ..application.commands.move_track import MoveTrackHandler
    from ..application.commands.pause_playback import TogglePauseHandler
    from ..application.commands.play_track import PlayTrackHandler
    from ..application.commands.skip_track import SkipTrackHandler
    from ..application.commands.stop_playback import StopPlaybackHandler
    from ..application.queries.get_current import GetNowPlayingHandler
    from ..application.queries.get_queue import GetQueueHandler
    from ..application.services.guild_queue import GuildQueueService
    from ..application.services.playback_driver import PlaybackDriver
    from ..application.services.queue_store import PersistentQueueStore
    from ..application.services.session_registry import SessionRegistry
    from ..application.services.track_resolution import TrackResolutionService
    from ..domain.music.repository import QueueStateRepository
    from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver
    from ..infrastructure.discord.adapters.voice_transport import DiscordVoiceTransport
    from ..infrastructure.persistence.database import Database
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Persistence layer
    _database: Database | None = None
    _queue_state_repository: QueueStateRepository | None = None
    _queue_store: PersistentQueueStore | None = None

    # Infrastructure adapters
    _track_resolver: YtDlpResolver | None = None
    _voice_transport: DiscordVoiceTransport | None = None

    # Application services
    _guild_queue: GuildQueueService | None = None
    _session_registry: SessionRegistry | None = None
    _playback_driver: PlaybackDriver | None = None
    _track_resolution: TrackResolutionService | None = None

    # Command handlers
    _play_track_handler: PlayTrackHandler | None = None
    _skip_track_handler: SkipTrackHandler | None = None
    _toggle_pause_handler: TogglePauseHandler | None = None
    _stop_playback_handler: StopPlaybackHandler | None = None
    _clear_queue_handler: ClearQueueHandler | None = None
    _move_track_handler: MoveTrackHandler | None = None

    # Query handlers
    _get_queue_handler: GetQueueHandler | None = None
    _get_now_playing_handler: GetNowPlayingHandler | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        if self._bot is None:
            raise RuntimeError("Bot not initialized. Call set_bot() first.")
        return self._bot

    # === Persistence ===

    @property
    def database(self) -> Database:
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    @property
    def queue_state_repository(self) -> QueueStateRepository:
        if self._queue_state_repository is None:
            from ..infrastructure.persistence.repositories.queue_state_repository import (
                SQLiteQueueStateRepository,
            )

            self._queue_state_repository = SQLiteQueueStateRepository(self.database)
        return self._queue_state_repository

    @property
    def queue_store(self) -> PersistentQueueStore:
        if self._queue_store is None:
            from ..application.services.queue_store import PersistentQueueStore

            self._queue_store = PersistentQueueStore(self.queue_state_repository)
        return self._queue_store

    # === Infrastructure Adapters ===

    @property
    def track_resolver(self) -> YtDlpResolver:
        if self._track_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._track_resolver = YtDlpResolver(self.settings.audio)
        return self._track_resolver

    @property
    def voice_transport(self) -> DiscordVoiceTransport:
        if self._voice_transport is None:
            from ..infrastructure.discord.adapters.voice_transport import (
                DiscordVoiceTransport,
            )

            self._voice_transport = DiscordVoiceTransport(
                self.bot,
                self.track_resolver,
                self.settings.audio,
                connect_timeout=self.settings.playback.connect_timeout_s,
            )
        return self._voice_transport

    # === Application Services ===

    @property
    def guild_queue(self) -> GuildQueueService:
        if self._guild_queue is None:
            from ..application.services.guild_queue import GuildQueueService

            self._guild_queue = GuildQueueService(store=self.queue_store)
        return self._guild_queue

    @property
    def session_registry(self) -> SessionRegistry:
        if self._session_registry is None:
            from ..application.services.session_registry import SessionRegistry

            self._session_registry = SessionRegistry(self.voice_transport.create_player)
        return self._session_registry

    @property
    def playback_driver(self) -> PlaybackDriver:
        if self._playback_driver is None:
            from ..application.services.playback_driver import PlaybackDriver

            self._playback_driver = PlaybackDriver(
                guild_queue=self.guild_queue,
                session_registry=self.session_registry,
                transport=self.voice_transport,
                stream_open_timeout=self.settings.playback.stream_open_timeout_s,
            )
        return self._playback_driver

    @property
    def track_resolution(self) -> TrackResolutionService:
        if self._track_resolution is None:
            from ..application.services.track_resolution import TrackResolutionService

            self._track_resolution = TrackResolutionService(self.track_resolver)
        return self._track_resolution

    # === Command Handlers ===

    @property
    def play_track_handler(self) -> PlayTrackHandler:
        if self._play_track_handler is None:
            from ..application.commands.play_track import PlayTrackHandler

            self._play_track_handler = PlayTrackHandler(
                track_resolution=self.track_resolution,
                guild_queue=self.guild_queue,
                playback_driver=self.playback_driver,
            )
        return self._play_track_handler

    @property
    def skip_track_handler(self) -> SkipTrackHandler:
        if self._skip_track_handler is None:
            from ..application.commands.skip_track import SkipTrackHandler

            self._skip_track_handler = SkipTrackHandler(playback_driver=self.playback_driver)
        return self._skip_track_handler

    @property
    def toggle_pause_handler(self) -> TogglePauseHandler:
        if self._toggle_pause_handler is None:
            from ..application.commands.pause_playback import TogglePauseHandler

            self._toggle_pause_handler = TogglePauseHandler(playback_driver=self.playback_driver)
        return self._toggle_pause_handler

    @property
    def stop_playback_handler(self) -> StopPlaybackHandler:
        if self._stop_playback_handler is None:
            from ..application.commands.stop_playback import StopPlaybackHandler

            self._stop_playback_handler = StopPlaybackHandler(
                playback_driver=self.playback_driver
            )
        return self._stop_playback_handler

    @property
    def clear_queue_handler(self) -> ClearQueueHandler:
        if self._clear_queue_handler is None:
            from ..application.commands.clear_queue import ClearQueueHandler

            self._clear_queue_handler = ClearQueueHandler(guild_queue=self.guild_queue)
        return self._clear_queue_handler

    @property
    def move_track_handler(self) -> MoveTrackHandler:
        if self._move_track_handler is None:
            from ..application.commands.move_track import MoveTrackHandler

            self._move_track_handler = MoveTrackHandler(guild_queue=self.guild_queue)
        return self._move_track_handler

    # === Query Handlers ===

    @property
    def get_queue_handler(self) -> GetQueueHandler:
        if self._get_queue_handler is None:
            from ..application.queries.get_queue import GetQueueHandler

            self._get_queue_handler = GetQueueHandler(guild_queue=self.guild_queue)
        return self._get_queue_handler

    @property
    def get_now_playing_handler(self) -> GetNowPlayingHandler:
        if self._get_now_playing_handler is None:
            from ..application.queries.get_current import GetNowPlayingHandler

            self._get_now_playing_handler = GetNowPlayingHandler(guild_queue=self.guild_queue)
        return self._get_now_playing_handler

    # === Lifecycle ===

    async def initialize(self) -> int:
        """Open the database and reload stored queues.

        Returns the number of guilds that came back with queued tracks.
        """
        await self.database.initialize()
        return await self.guild_queue.restore()

    async def shutdown(self) -> None:
        """Release players and voice, flush pending queue writes, close the database."""
        if self._playback_driver is not None:
            try:
                await self._playback_driver.close()
            except Exception as exc:
                logger.warning("Failed closing playback driver: %r", exc)

        if self._queue_store is not None:
            await self._queue_store.close()

        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
