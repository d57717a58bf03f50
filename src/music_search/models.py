from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True)
class UserCredential:
    email: str
    password_hash: str


@dataclass(slots=True)
class Session:
    token: str
    email: str
    expires_at: datetime


@dataclass(slots=True)
class Artist:
    name: str


@dataclass(slots=True)
class Track:
    id: str
    name: str
    artists: list[Artist] = field(default_factory=list)
    preview_url: str | None = None

    @property
    def primary_artist(self) -> str:
        return self.artists[0].name if self.artists else "Unknown"

    @classmethod
    def from_item(cls, item: dict) -> Track:
        return cls(
            id=item["id"],
            name=item.get("name", ""),
            artists=[Artist(name=a.get("name", "")) for a in item.get("artists") or []],
            preview_url=item.get("preview_url"),
        )


@dataclass(slots=True)
class PlaybackState:
    current_track: Track | None = None
    is_playing: bool = False

    def is_playing_track(self, track: Track) -> bool:
        return self.is_playing and self.current_track is not None and self.current_track.id == track.id
