"""
Application Queries

Read-only views of guild queues and playback.
"""

from discord_jukebox.application.queries.get_current import GetNowPlayingQuery, NowPlayingInfo
from discord_jukebox.application.queries.get_queue import GetQueueQuery

__all__ = [
    "GetNowPlayingQuery",
    "NowPlayingInfo",
    "GetQueueQuery",
]
