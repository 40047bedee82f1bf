"""TrackResolver implementation using yt-dlp for link resolution and search."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from discord_jukebox.application.interfaces.track_resolver import ResolvedMedia, TrackResolver
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.shared.exceptions import StreamOpenError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

from .models import AudioFormatInfo, StreamInfo, YtDlpOpts, YtDlpTrackInfo

logger = logging.getLogger(__name__)

YOUTUBE_VIDEO_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:https?://)?(?:www\.|m\.|music\.)?"
    r"(?:youtube\.com/(?:watch\?(?:\S*&)?v=|shorts/|embed/|live/)|youtu\.be/)"
    r"[a-zA-Z0-9_-]{11}"
)


class YtDlpResolver(TrackResolver):
    """Resolves YouTube links and searches, and extracts playable stream URLs.

    Tracks carry the stable page URL as their locator. The short-lived media
    URL is extracted only when the track is about to play.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(format=self._settings.ytdlp_format)

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    @staticmethod
    def _parse_info(data: dict[str, Any]) -> YtDlpTrackInfo:
        return YtDlpTrackInfo.model_validate(data)

    @staticmethod
    def _to_media(info: YtDlpTrackInfo) -> ResolvedMedia | None:
        locator = info.page_url
        if not locator:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, info.title)
            return None
        return ResolvedMedia(title=info.title, locator=locator, duration_seconds=info.duration)

    @staticmethod
    def _stream_url_from(info: YtDlpTrackInfo) -> str | None:
        if info.url:
            return info.url
        return YtDlpResolver._stream_from_formats(info.formats)

    @staticmethod
    def _stream_from_formats(formats: list[AudioFormatInfo]) -> str | None:
        audio_formats = [f for f in formats if f.acodec != "none" and f.url]
        if audio_formats:
            return audio_formats[-1].url
        return None

    # ─────────────────────────────────────────────────────────────────
    # Blocking yt-dlp calls, run in a worker thread
    # ─────────────────────────────────────────────────────────────────

    def _extract_info_sync(self, url: str) -> YtDlpTrackInfo | None:
        try:
            with YoutubeDL(params=cast(Any, self._get_opts().model_dump())) as ydl:
                data = ydl.extract_info(url, download=False)
                return self._parse_info(dict(data)) if isinstance(data, dict) else None
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url)
            return None

    def _search_sync(self, query: str, limit: int = 1) -> list[YtDlpTrackInfo]:
        search_query = f"ytsearch{limit}:{query}"
        with YoutubeDL(params=cast(Any, self._get_opts(extract_flat="in_playlist").model_dump())) as ydl:
            data = ydl.extract_info(search_query, download=False)

        if not isinstance(data, dict):
            return []
        entries = data.get("entries", [])
        if not isinstance(entries, list):
            return []
        return [self._parse_info(dict(e)) for e in entries if e]

    def _extract_stream_sync(self, locator: str) -> StreamInfo:
        try:
            with YoutubeDL(params=cast(Any, self._get_opts().model_dump())) as ydl:
                data = ydl.extract_info(locator, download=False)
        except Exception as e:
            raise StreamOpenError(locator, str(e)) from e

        if not isinstance(data, dict):
            raise StreamOpenError(locator, ErrorMessages.NO_URL_IN_INFO_DICT)

        info = self._parse_info(dict(data))
        stream_url = self._stream_url_from(info)
        if not stream_url:
            raise StreamOpenError(
                locator, ErrorMessages.NO_STREAM_URL_FOR_TRACK.format(title=info.title)
            )
        return StreamInfo(url=stream_url, duration_seconds=info.duration)

    # ─────────────────────────────────────────────────────────────────
    # TrackResolver
    # ─────────────────────────────────────────────────────────────────

    def is_direct_link(self, query: str) -> bool:
        return YOUTUBE_VIDEO_PATTERN.match(query.strip()) is not None

    async def resolve_direct(self, query: str) -> ResolvedMedia | None:
        info = await asyncio.to_thread(self._extract_info_sync, query)
        if info is None:
            return None
        return self._to_media(info)

    async def search(self, query: str, limit: int = 1) -> list[ResolvedMedia]:
        results = await asyncio.to_thread(self._search_sync, query, limit)
        return [media for media in map(self._to_media, results) if media is not None]

    async def extract_stream(self, locator: str) -> StreamInfo:
        """Extract a playable media URL for a track locator.

        Raises:
            StreamOpenError: If yt-dlp fails or finds no playable format.
        """
        return await asyncio.to_thread(self._extract_stream_sync, locator)
