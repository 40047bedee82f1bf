"""Audio infrastructure - yt-dlp resolution and stream extraction."""

from discord_jukebox.infrastructure.audio.models import (
    AudioFormatInfo,
    StreamInfo,
    YtDlpOpts,
    YtDlpTrackInfo,
)
from discord_jukebox.infrastructure.audio.ytdlp_resolver import YtDlpResolver

__all__ = [
    "AudioFormatInfo",
    "StreamInfo",
    "YtDlpOpts",
    "YtDlpResolver",
    "YtDlpTrackInfo",
]
