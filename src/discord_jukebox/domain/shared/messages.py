"""Centralized message constants for error messages, logging, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Discord ID Validation Errors
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds maximum value (2^64)"

    # Queue Invariants
    PLAYING_TRACK_IN_PENDING = "The now-playing track must not also be pending"

    # Voice Errors
    VOICE_CONNECT_TIMEOUT = "Timed out connecting to voice channel {channel_id}"
    VOICE_CHANNEL_NOT_FOUND = "Voice channel {channel_id} not found"
    VOICE_NO_PERMISSION = "No permission to join voice channel {channel_id}"

    # Time/Date Validation Errors
    TIMEZONE_REQUIRED_UTC_DATETIME = "UtcDateTime requires a timezone-aware datetime"

    # Settings Validation Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Audio/Stream Errors
    NO_URL_IN_INFO_DICT = "No URL found in info dict"
    NO_STREAM_URL_FOR_TRACK = "No stream URL found for {title}"

    # Authentication/Startup Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD_TOKEN environment variable is required"
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates.

    Pass values as logger arguments rather than formatting them in, so records
    stay cheap when the level is disabled.
    """

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Queue Store
    STORE_READ_FAILED = "Could not load stored queue for guild %s, starting empty: %r"
    STORE_LIST_FAILED = "Could not list stored queues, starting empty: %r"
    STORE_WRITE_AFTER_CLOSE = "Dropped queue write for guild %s: store is closed"
    STORE_WRITTEN = "Persisted queue state for guild %s"
    STORE_WRITE_FAILED = "Failed to persist queue state for guild %s"
    STORE_CLOSED = "Queue store closed"

    # Queue Operations
    QUEUE_ENQUEUED = "Enqueued track '%s' at position %s in guild %s"
    QUEUE_MOVED = "Moved track from %s to %s in guild %s"
    QUEUE_CLEARED = "Cleared %s tracks from queue in guild %s"
    QUEUE_REQUEUED_INTERRUPTED = "Requeued interrupted track '%s' in guild %s"
    QUEUE_RESTORED = "Restored stored queues for %d guilds"

    # Session Registry
    SESSION_CREATED = "Created player for guild %s"
    SESSION_REMOVED = "Removed player for guild %s"

    # Playback Driver
    DRIVER_TRANSITION = "Guild %s playback state %s -> %s"
    DRIVER_NO_SESSION = "No player for guild %s, not advancing"
    DRIVER_LOAD_DISCARDED = "Discarded loaded track '%s' in guild %s after stop"
    DRIVER_ATTACH_FAILED = "Could not attach '%s' in guild %s: %r"
    DRIVER_STALE_SIGNAL = "Ignoring stale track-end signal %s in guild %s"
    DRIVER_QUEUE_DRAINED = "Queue drained in guild %s, now idle"
    DRIVER_CLOSED = "Playback driver closed"
    STREAM_OPEN_FAILED = "Skipping '%s' in guild %s, stream failed: %r"

    # Playback Operations
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s (%s)"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_ERROR = "Playback error in guild %s: %s"
    PLAYBACK_CALLBACK_ERROR = "Error in track end callback for guild %s: %s"
    TRACK_SKIPPED = "Skipped track: %s in guild %s"
    TRACK_FINISHED = "Track finished: %s in guild %s"

    # Voice Operations
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_MOVED = "Moved to voice channel %s in guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_CLEANUP_ERROR = "Error leaving voice in guild %s"
    VOICE_CONNECTION_LOST = "Voice connection lost in guild %s, stopping session"
    VOICE_CALLBACK_SCHEDULE_FAILED = "Could not deliver track-end signal for guild %s: %r"
    VOICE_SELF_DEAFEN_FAILED = "Failed to self-deafen in guild %s: %r"

    # Resolution/Search
    RESOLUTION_DIRECT_FAILED = "Direct link resolution failed for %r: %r"
    RESOLUTION_SEARCH_FAILED = "Search failed for %r: %r"
    RESOLUTION_NO_RESULT = "No playable result for %r"
    RESOLUTION_RESOLVED = "Resolved %r to '%s'"
    YTDLP_NO_STREAM_URL = "No stream URL found for %s"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"

    # Application Lifecycle
    BOT_STARTING = "Starting Discord Jukebox in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized successfully"
    BOT_CONTAINER_INIT_FAILED = "Failed to initialize container: %s"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %ss"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"
    BOT_QUEUES_RESTORED = "Restored queues for %s guilds"
    BOT_VOICE_CLIENT_CLEANUP_FAILED = "Failed to disconnect leftover voice client: %r"

    # Bot Cog Management
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"

    # Bot Command Sync
    BOT_SYNCED_GUILD = "Synced %s commands to guild %s"
    BOT_SYNC_GUILD_FAILED = "Failed to sync to guild %s: %s"
    BOT_SYNCED_GLOBAL = "Synced %s commands globally"
    BOT_SYNC_GLOBAL_FAILED = "Failed to sync commands globally: %s"

    # Bot Error Handling
    BOT_SLASH_COMMAND_ERROR = "Slash command error in '%s': %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"


class DiscordUIMessages:
    """User-facing Discord messages and responses."""

    # Success Messages
    SUCCESS_PONG = "🏓 Pong! {latency_ms}ms"
    SUCCESS_QUEUED = "✅ Queued: **{track_title}**"
    SUCCESS_QUEUED_AT = "✅ Queued: **{track_title}** (position {position})"
    SUCCESS_QUEUE_CLEARED = "🧹 Cleared queue."
    SUCCESS_QUEUE_CLEARED_COUNT = "🧹 Cleared {count} tracks from the queue."

    # Action Messages
    ACTION_NOW_PLAYING = "🎶 Now playing: **{track_title}**"
    ACTION_SKIPPED = "⏭ Skipped."
    ACTION_PAUSED = "⏸️ Paused."
    ACTION_RESUMED = "▶️ Resumed."
    ACTION_DISCONNECTED = "👋 Disconnected."
    ACTION_TRACK_MOVED = "↕️ Moved **{track_title}** to position {position}."

    # Error Messages
    ERROR_TRACK_NOT_FOUND = "❌ Could not find that song."
    ERROR_COULD_NOT_JOIN_VOICE = "❌ I couldn't join your voice channel."
    ERROR_INVALID_POSITIONS = "❌ Invalid positions."
    ERROR_OCCURRED = "⚠️ Error occurred."

    # State Messages
    STATE_NOTHING_PLAYING = "❌ Nothing playing."
    STATE_NOT_CONNECTED = "❌ Not connected."
    STATE_QUEUE_EMPTY = "🎶 Queue is empty."
    STATE_MUST_BE_IN_VOICE = "❌ Join a voice channel first!"
    STATE_SERVER_ONLY = "This command can only be used in a server."

    # Embed Content
    EMBED_NOW_PLAYING = "🎶 Now Playing"
    EMBED_QUEUE = "🎵 Queue ({total_tracks} tracks) - Page {page}/{total_pages}"
    EMBED_FIELD_PROGRESS = "Progress"
    EMBED_FIELD_TIME = "Time"
    EMBED_FIELD_UP_NEXT = "Up Next"
    EMBED_FIELD_CURRENT = "Now Playing"
    EMBED_PAUSED_MARKER = "⏸️ Paused"
    EMBED_REQUESTED_BY = "Requested by {requester}"
