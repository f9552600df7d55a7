#!/usr/bin/env python
"""
Pydantic DTOs for the track-resolution API.

``TrackQuery`` is what a caller asks for; ``TrackRecord`` is the normalized
shape every catalog hit is mapped into. Both serialize with the camelCase
keys the mixtape frontend expects.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TrackQuery(BaseModel):
    """A free-text song lookup with an optional artist hint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    song_name: str = Field(alias="songName", min_length=1)
    artist: Optional[str] = None

    @field_validator("artist")
    @classmethod
    def _blank_artist_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class TrackRecord(BaseModel):
    """Normalized track metadata suitable for the API response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    song_name: str = Field(alias="songName")
    artist: str
    duration: int = Field(ge=0)  # seconds
    album_art: Optional[str] = Field(default=None, alias="albumArt")
    album_name: Optional[str] = Field(default=None, alias="albumName")
    spotify_id: Optional[str] = Field(default=None, alias="spotifyId")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


__all__ = ["TrackQuery", "TrackRecord"]
