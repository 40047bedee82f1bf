"""
Application Interfaces (Ports)

Abstract contracts between the application layer and infrastructure
adapters.
"""

from discord_jukebox.application.interfaces.track_resolver import ResolvedMedia, TrackResolver
from discord_jukebox.application.interfaces.voice_transport import (
    AudioPlayer,
    AudioStream,
    VoiceConnection,
    VoiceTransport,
)

__all__ = [
    "ResolvedMedia",
    "TrackResolver",
    "AudioPlayer",
    "AudioStream",
    "VoiceConnection",
    "VoiceTransport",
]
