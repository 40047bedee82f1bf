import asyncio

import pytest
import pytest_asyncio

from discord_jukebox.application.interfaces.voice_transport import (
    AudioPlayer,
    AudioStream,
    VoiceConnection,
    VoiceTransport,
)
from discord_jukebox.domain.music.value_objects import TrackEndSignal
from discord_jukebox.domain.shared.exceptions import StreamOpenError, VoiceTransportError

# ============================================================================
# Fake Voice Transport
# ============================================================================


class FakeStream(AudioStream):
    def __init__(self, locator: str, duration_seconds: int | None = None) -> None:
        self.locator = locator
        self._duration_seconds = duration_seconds
        self.closed = False

    @property
    def duration_seconds(self) -> int | None:
        return self._duration_seconds

    def close(self) -> None:
        self.closed = True


class FakePlayer(AudioPlayer):
    """Player that emits exactly one terminal signal per attached stream.

    Signals are delivered as tasks on the running loop, the same way the real
    player hands them over from the audio thread.
    """

    def __init__(self, guild_id: int) -> None:
        self.guild_id = guild_id
        self.current: FakeStream | None = None
        self.played: list[FakeStream] = []
        self.end_tasks: list[asyncio.Task] = []
        self.is_paused = False
        self.stop_calls = 0
        self.fail_on_play = False
        self._on_end = None

    def play(self, stream, on_end) -> None:
        if self.fail_on_play:
            raise RuntimeError("player refused stream")
        self.current = stream
        self.played.append(stream)
        self.is_paused = False
        self._on_end = on_end

    def pause(self) -> None:
        self.is_paused = True

    def resume(self) -> None:
        self.is_paused = False

    def stop(self) -> None:
        self.stop_calls += 1
        self.end()

    def end(self, signal: TrackEndSignal | None = None) -> asyncio.Task | None:
        """Emit the terminal signal for the attached stream, if one is still owed."""
        on_end, self._on_end = self._on_end, None
        self.current = None
        if on_end is None:
            return None
        task = asyncio.create_task(on_end(signal or TrackEndSignal.finished()))
        self.end_tasks.append(task)
        return task

    async def settle(self) -> None:
        """Wait for every delivered signal, including ones delivered while waiting."""
        while self.end_tasks:
            tasks, self.end_tasks = self.end_tasks, []
            await asyncio.gather(*tasks)


class FakeConnection(VoiceConnection):
    def __init__(self, guild_id: int, channel_id: int) -> None:
        self.guild_id = guild_id
        self.channel_id = channel_id
        self.connected = True
        self.subscribed: AudioPlayer | None = None
        self.destroy_calls = 0
        self.destroy_error: Exception | None = None

    @property
    def is_connected(self) -> bool:
        return self.connected

    def subscribe(self, player: AudioPlayer) -> None:
        self.subscribed = player

    async def destroy(self) -> None:
        self.destroy_calls += 1
        if self.destroy_error is not None:
            raise self.destroy_error
        self.connected = False


class FakeTransport(VoiceTransport):
    def __init__(self) -> None:
        self.players: dict[int, FakePlayer] = {}
        self.connections: list[FakeConnection] = []
        self.opened: list[str] = []
        self.streams: list[FakeStream] = []
        self.failing_locators: set[str] = set()
        self.durations: dict[str, int] = {}
        self.connect_error: Exception | None = None
        # When set, open_stream blocks until the event fires.
        self.open_gate: asyncio.Event | None = None

    async def connect(self, guild_id: int, channel_id: int) -> FakeConnection:
        if self.connect_error is not None:
            raise self.connect_error
        connection = FakeConnection(guild_id, channel_id)
        self.connections.append(connection)
        return connection

    def create_player(self, guild_id: int) -> FakePlayer:
        player = FakePlayer(guild_id)
        self.players[guild_id] = player
        return player

    async def open_stream(self, locator: str) -> FakeStream:
        self.opened.append(locator)
        if self.open_gate is not None:
            await self.open_gate.wait()
        if locator in self.failing_locators:
            raise StreamOpenError(locator, "unavailable")
        stream = FakeStream(locator, self.durations.get(locator))
        self.streams.append(stream)
        return stream


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from discord_jukebox.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def queue_state_repository(in_memory_database):
    from discord_jukebox.infrastructure.persistence.repositories.queue_state_repository import (
        SQLiteQueueStateRepository,
    )

    return SQLiteQueueStateRepository(in_memory_database)


@pytest_asyncio.fixture
async def queue_store(queue_state_repository):
    from discord_jukebox.application.services.queue_store import PersistentQueueStore

    store = PersistentQueueStore(queue_state_repository)
    yield store
    await store.close()


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def guild_queue(queue_store):
    from discord_jukebox.application.services.guild_queue import GuildQueueService

    return GuildQueueService(store=queue_store)


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def session_registry(fake_transport):
    from discord_jukebox.application.services.session_registry import SessionRegistry

    return SessionRegistry(fake_transport.create_player)


@pytest_asyncio.fixture
async def playback_driver(guild_queue, session_registry, fake_transport):
    from discord_jukebox.application.services.playback_driver import PlaybackDriver

    driver = PlaybackDriver(
        guild_queue=guild_queue,
        session_registry=session_registry,
        transport=fake_transport,
    )
    yield driver
    await driver.close()


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


@pytest.fixture
def make_track():
    """Factory for tracks with distinct titles and locators."""
    from discord_jukebox.domain.music.entities import Track

    def _make(title: str = "Test Track", locator: str | None = None, **kwargs) -> Track:
        return Track(
            title=title,
            locator=locator or f"https://www.youtube.com/watch?v={title.replace(' ', '_')}",
            requested_by=kwargs.pop("requested_by", "tester"),
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_track(make_track):
    return make_track("Test Track", "https://www.youtube.com/watch?v=dQw4w9WgXcQ")


@pytest.fixture
def voice_transport_error():
    return VoiceTransportError(111111111, "cannot join")
