"""Port interfaces for the real-time voice transport.

The playback driver only needs a small contract from the voice library:
open a byte stream for a locator, attach it to a per-guild player, and get
exactly one terminal signal back per attached stream.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from discord_jukebox.domain.music.value_objects import TrackEndSignal
from discord_jukebox.domain.shared.types import ChannelIdField, DiscordSnowflake, NonEmptyStr

TrackEndCallback = Callable[[TrackEndSignal], Awaitable[None]]


class AudioStream(ABC):
    """An opened audio byte stream, ready to be attached to a player."""

    @property
    @abstractmethod
    def duration_seconds(self) -> int | None:
        """Duration from stream metadata, if the provider reported one."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the stream without playing it."""
        ...


class AudioPlayer(ABC):
    """A per-guild player that plays one stream at a time."""

    @abstractmethod
    def play(self, stream: AudioStream, on_end: TrackEndCallback) -> None:
        """Attach a stream and start playing it.

        ``on_end`` is awaited on the event loop exactly once for this stream,
        with a FINISHED or ERROR signal.
        """
        ...

    @abstractmethod
    def pause(self) -> None: ...

    @abstractmethod
    def resume(self) -> None: ...

    @abstractmethod
    def stop(self) -> None:
        """End the current stream; its terminal signal follows asynchronously."""
        ...


class VoiceConnection(ABC):
    """A live connection to one guild's voice channel."""

    @property
    @abstractmethod
    def is_connected(self) -> bool: ...

    @abstractmethod
    def subscribe(self, player: AudioPlayer) -> None:
        """Route the player's audio into this connection."""
        ...

    @abstractmethod
    async def destroy(self) -> None:
        """Leave the voice channel."""
        ...


class VoiceTransport(ABC):
    """Factory for connections, players and streams."""

    @abstractmethod
    async def connect(
        self, guild_id: DiscordSnowflake, channel_id: ChannelIdField
    ) -> VoiceConnection:
        """Join (or move to) a voice channel.

        Raises:
            VoiceTransportError: If the channel cannot be joined.
        """
        ...

    @abstractmethod
    def create_player(self, guild_id: DiscordSnowflake) -> AudioPlayer: ...

    @abstractmethod
    async def open_stream(self, locator: NonEmptyStr) -> AudioStream:
        """Open a playable stream for a track locator.

        Raises:
            StreamOpenError: If no stream can be opened.
        """
        ...
