"""Port interface for turning user queries into playable media descriptors."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from discord_jukebox.domain.shared.types import (
    NonNegativeInt,
    NonEmptyStr,
    PositiveInt,
    TrackTitleStr,
)


class ResolvedMedia(BaseModel):
    """What a provider knows about one piece of audio before anyone requested it."""

    model_config = ConfigDict(frozen=True)

    title: TrackTitleStr
    locator: NonEmptyStr
    duration_seconds: NonNegativeInt | None = None


class TrackResolver(ABC):
    """Interface for the primary media provider's lookup operations.

    Any method may raise; callers treat failures as "no result".
    """

    @abstractmethod
    def is_direct_link(self, query: NonEmptyStr) -> bool:
        """Whether the query is a link the provider can resolve without searching."""
        ...

    @abstractmethod
    async def resolve_direct(self, query: NonEmptyStr) -> ResolvedMedia | None:
        """Resolve a direct link to its media."""
        ...

    @abstractmethod
    async def search(self, query: NonEmptyStr, limit: PositiveInt = 1) -> list[ResolvedMedia]:
        """Search the provider, best match first."""
        ...
