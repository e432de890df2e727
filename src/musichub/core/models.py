# core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional
from urllib.parse import urljoin


class RepeatMode(Enum):
    OFF = "off"
    ALL = "all"
    ONE = "one"

    def next(self) -> "RepeatMode":
        if self is RepeatMode.OFF:
            return RepeatMode.ALL
        if self is RepeatMode.ALL:
            return RepeatMode.ONE
        return RepeatMode.OFF


def canonical_id(data: Mapping[str, Any]) -> str:
    """Records from the backend may carry `id`, `_id` or both; pick one."""
    raw = data.get("id") or data.get("_id") or ""
    return str(raw)


def _resolve(ref: Optional[str], base_url: Optional[str]) -> Optional[str]:
    if not ref:
        return None
    if base_url and ref.startswith("/"):
        return urljoin(base_url, ref)
    return ref


@dataclass(frozen=True)
class Track:
    id: str
    title: str
    artist: str
    url: str
    album: str | None = None
    cover: str | None = None
    duration: float = 0.0
    lrc_url: str | None = None   # lyric file fetched on demand
    lyrics: str | None = None    # inline raw LRC text

    @staticmethod
    def from_api(data: Mapping[str, Any], base_url: str | None = None) -> "Track":
        # Playlist entries can reference tracks that no longer exist; keep
        # whatever fields came back.
        inline = data.get("lyrics")
        try:
            duration = float(data.get("duration") or 0.0)
        except (TypeError, ValueError):
            duration = 0.0
        return Track(
            id=canonical_id(data),
            title=str(data.get("title") or ""),
            artist=str(data.get("artist") or ""),
            url=_resolve(data.get("url"), base_url) or "",
            album=data.get("album") or None,
            cover=_resolve(data.get("cover"), base_url),
            duration=max(0.0, duration),
            lrc_url=_resolve(data.get("lrcUrl"), base_url),
            lyrics=inline if isinstance(inline, str) and inline.strip() else None,
        )


@dataclass(frozen=True)
class Playlist:
    id: str
    name: str
    owner_id: str | None
    cover: str | None = None
    description: str | None = None
    is_public: bool = False
    songs: tuple[Track, ...] = ()

    def track_ids(self) -> list[str]:
        return [t.id for t in self.songs]

    def contains(self, track_id: str) -> bool:
        return any(t.id == track_id for t in self.songs)

    def is_owned_by(self, user_id: str | None) -> bool:
        return bool(user_id) and self.owner_id == user_id

    def is_visible_to(self, viewer_id: str | None) -> bool:
        return self.is_public or self.is_owned_by(viewer_id)

    @staticmethod
    def from_api(data: Mapping[str, Any], base_url: str | None = None) -> "Playlist":
        songs = []
        for s in data.get("songs") or []:
            if isinstance(s, Mapping):
                songs.append(Track.from_api(s, base_url))
            elif s:
                # bare id reference
                songs.append(Track(id=str(s), title="", artist="", url=""))
        owner = data.get("userId")
        return Playlist(
            id=canonical_id(data),
            name=str(data.get("name") or ""),
            owner_id=str(owner) if owner else None,
            cover=_resolve(data.get("cover"), base_url),
            description=data.get("description") or None,
            is_public=bool(data.get("isPublic", False)),
            songs=tuple(songs),
        )


@dataclass(frozen=True)
class Session:
    user_id: str
    username: str
    email: str
    liked_songs: tuple[str, ...] = field(default_factory=tuple)

    @staticmethod
    def from_api(data: Mapping[str, Any]) -> "Session":
        return Session(
            user_id=canonical_id(data),
            username=str(data.get("username") or ""),
            email=str(data.get("email") or ""),
            liked_songs=tuple(str(x) for x in (data.get("likedSongs") or [])),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.user_id,
            "username": self.username,
            "email": self.email,
            "likedSongs": list(self.liked_songs),
        }
