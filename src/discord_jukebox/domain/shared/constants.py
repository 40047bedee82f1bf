"""Centralized constants for SQLite setup, audio defaults and UI layout."""

from __future__ import annotations


class SQLPragmas:
    """SQLite PRAGMA statements applied to each connection."""

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    FOREIGN_KEYS_ON = "PRAGMA foreign_keys=ON"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"


class DatabaseURLSchemes:
    """Valid database URL schemes for validation."""

    SQLITE = "sqlite://"
    SQLITE_PREFIX = "sqlite:///"

    # For in-memory testing
    MEMORY = ":memory:"
    MEMORY_SHARED_URI = "file:discord-jukebox?mode=memory&cache=shared"


class AudioConstants:
    """Audio and FFmpeg configuration constants."""

    FFMPEG_BEFORE_OPTIONS_DEFAULT = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
    FFMPEG_OPTIONS_DEFAULT = "-vn"  # No video
    FFMPEG_USER_AGENT_HEADER = '-headers "User-Agent: {user_agent}"'

    # Must match yt-dlp's Android client or YouTube answers 403
    ANDROID_USER_AGENT = "com.google.android.youtube/19.44.38 (Linux; U; Android 14) gzip"

    YTDLP_FORMAT_DEFAULT = "bestaudio/best"

    DEFAULT_VOLUME = 0.5
    CONNECT_TIMEOUT_SECONDS = 10.0


class UIConstants:
    """Layout numbers for Discord replies."""

    PROGRESS_BAR_WIDTH = 15
    PROGRESS_FILLED = "▰"
    PROGRESS_EMPTY = "▱"
    QUEUE_PER_PAGE = 10
    TITLE_TRUNCATE = 90
    EMBED_COLOR = 0x5865F2
