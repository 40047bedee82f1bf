"""
Tests for shared domain helpers:
- Annotated pydantic types
- Discord snowflake validation
- UTC datetime helpers
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import BaseModel, ValidationError

from discord_jukebox.domain.shared.datetime_utils import UtcDateTime, utcnow
from discord_jukebox.domain.shared.types import (
    DiscordSnowflake,
    HttpUrlStr,
    NonEmptyStr,
    TrackTitleStr,
    UtcDatetimeField,
)
from discord_jukebox.domain.shared.validators import validate_discord_snowflake


class _Sample(BaseModel):
    guild_id: DiscordSnowflake = 1
    name: NonEmptyStr = "x"
    title: TrackTitleStr = "t"
    url: HttpUrlStr = "https://example.com"
    at: UtcDatetimeField | None = None


# =============================================================================
# Annotated Types
# =============================================================================


class TestAnnotatedTypes:
    @pytest.mark.parametrize("value", [0, -1, 2**64])
    def test_snowflake_bounds(self, value):
        with pytest.raises(ValidationError):
            _Sample(guild_id=value)

    def test_snowflake_max(self):
        assert _Sample(guild_id=2**64 - 1).guild_id == 2**64 - 1

    def test_empty_string_rejected(self):
        with pytest.raises(ValidationError):
            _Sample(name="")

    def test_title_length(self):
        with pytest.raises(ValidationError):
            _Sample(title="x" * 501)

    def test_url_scheme(self):
        with pytest.raises(ValidationError):
            _Sample(url="ftp://example.com")

    def test_naive_datetime_rejected(self):
        with pytest.raises(ValidationError, match="timezone-aware"):
            _Sample(at=datetime(2024, 1, 1))

    def test_datetime_normalised_to_utc(self):
        eastern = timezone(timedelta(hours=-5))

        sample = _Sample(at=datetime(2024, 1, 15, 12, tzinfo=eastern))

        assert sample.at.hour == 17
        assert sample.at.tzinfo == UTC

    def test_iso_string_accepted(self):
        sample = _Sample.model_validate({"at": "2024-01-15T12:00:00+00:00"})

        assert sample.at == datetime(2024, 1, 15, 12, tzinfo=UTC)


# =============================================================================
# Validators
# =============================================================================


class TestValidateDiscordSnowflake:
    def test_valid(self):
        assert validate_discord_snowflake(123456789012345678) == 123456789012345678

    def test_zero(self):
        with pytest.raises(ValueError, match="must be positive"):
            validate_discord_snowflake(0)

    def test_too_large(self):
        with pytest.raises(ValueError, match="exceeds maximum"):
            validate_discord_snowflake(2**64)


# =============================================================================
# Datetime Utilities
# =============================================================================


class TestUtcDateTime:
    def test_naive_rejected(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            UtcDateTime(datetime.now())

    def test_converts_to_utc(self):
        eastern = timezone(timedelta(hours=-5))

        utc_dt = UtcDateTime(datetime(2024, 1, 15, 12, tzinfo=eastern))

        assert utc_dt.dt.hour == 17
        assert utc_dt.dt.tzinfo == UTC

    def test_from_iso_z_suffix(self):
        utc_dt = UtcDateTime.from_iso("2024-01-15T12:00:00Z")

        assert utc_dt.dt == datetime(2024, 1, 15, 12, tzinfo=UTC)

    def test_iso_round_trip(self):
        utc_dt = UtcDateTime(datetime(2024, 1, 15, 12, tzinfo=UTC))

        assert utc_dt.iso == "2024-01-15T12:00:00+00:00"
        assert UtcDateTime.from_iso(utc_dt.iso) == utc_dt

    def test_now_and_utcnow_are_aware(self):
        assert UtcDateTime.now().dt.tzinfo == UTC
        assert utcnow().tzinfo == UTC
