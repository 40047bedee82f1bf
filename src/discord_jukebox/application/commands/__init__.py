"""
Application Commands

Command objects and their handlers for operations that change a guild's
queue or playback.
"""

from discord_jukebox.application.commands.clear_queue import ClearQueueCommand, ClearResult
from discord_jukebox.application.commands.move_track import MoveResult, MoveTrackCommand
from discord_jukebox.application.commands.pause_playback import (
    TogglePauseCommand,
    TogglePauseResult,
)
from discord_jukebox.application.commands.play_track import PlayTrackCommand, PlayTrackResult
from discord_jukebox.application.commands.skip_track import SkipResult, SkipTrackCommand
from discord_jukebox.application.commands.stop_playback import StopPlaybackCommand, StopResult

__all__ = [
    # Play
    "PlayTrackCommand",
    "PlayTrackResult",
    # Skip
    "SkipTrackCommand",
    "SkipResult",
    # Pause
    "TogglePauseCommand",
    "TogglePauseResult",
    # Stop
    "StopPlaybackCommand",
    "StopResult",
    # Move
    "MoveTrackCommand",
    "MoveResult",
    # Clear
    "ClearQueueCommand",
    "ClearResult",
]
