"""Utility functions for formatting Discord messages."""

from __future__ import annotations

from functools import cache

from discord_jukebox.domain.shared.constants import UIConstants


@cache
def format_duration(seconds: int | float | None) -> str:
    if seconds is None:
        return "–"

    total_seconds = int(seconds)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@cache
def truncate(text: str, max_length: int = UIConstants.TITLE_TRUNCATE) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def progress_bar(fraction: float | None, width: int = UIConstants.PROGRESS_BAR_WIDTH) -> str:
    """Render ``fraction`` of ``width`` cells as filled; None renders an empty bar."""
    if fraction is None:
        filled = 0
    else:
        filled = int(max(0.0, min(1.0, fraction)) * width)
    return UIConstants.PROGRESS_FILLED * filled + UIConstants.PROGRESS_EMPTY * (width - filled)
