"""Turns a user query into a queue-ready Track."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.shared.exceptions import ResolutionFailedError
from discord_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.track_resolver import ResolvedMedia, TrackResolver

logger = logging.getLogger(__name__)


class TrackResolutionService:
    def __init__(self, resolver: TrackResolver) -> None:
        self._resolver = resolver

    async def resolve(self, query: str, requested_by: str) -> Track:
        """Resolve ``query`` to a track requested by ``requested_by``.

        Direct links are resolved as-is; anything else takes the top search
        hit. A direct link that fails to resolve is not retried as a search.

        Raises:
            ResolutionFailedError: If nothing playable was found.
        """
        query = query.strip()
        if not query:
            raise ResolutionFailedError(query)

        if self._resolver.is_direct_link(query):
            media = await self._resolve_direct(query)
        else:
            media = await self._search_first(query)

        if media is None:
            logger.info(LogTemplates.RESOLUTION_NO_RESULT, query)
            raise ResolutionFailedError(query)

        logger.debug(LogTemplates.RESOLUTION_RESOLVED, query, media.title)
        return Track(title=media.title, locator=media.locator, requested_by=requested_by)

    async def _resolve_direct(self, query: str) -> ResolvedMedia | None:
        try:
            return await self._resolver.resolve_direct(query)
        except Exception as e:
            logger.warning(LogTemplates.RESOLUTION_DIRECT_FAILED, query, e)
            return None

    async def _search_first(self, query: str) -> ResolvedMedia | None:
        try:
            results = await self._resolver.search(query, limit=1)
        except Exception as e:
            logger.warning(LogTemplates.RESOLUTION_SEARCH_FAILED, query, e)
            return None
        return results[0] if results else None
