from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional
import sqlite3


@dataclass
class Song:
    id: str
    title: str
    artist: str
    url: str
    album: Optional[str]
    cover: Optional[str]
    duration: Optional[float]
    lrc_url: Optional[str]

    @staticmethod
    def from_row(row: sqlite3.Row) -> "Song":
        return Song(
            id=row["id"],
            title=row["title"],
            artist=row["artist"],
            url=row["url"],
            album=row["album"],
            cover=row["cover"],
            duration=row["duration"],
            lrc_url=row["lrc_url"],
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "cover": self.cover,
            "url": self.url,
            "duration": self.duration,
            "lrcUrl": self.lrc_url,
        }


@dataclass
class User:
    id: str
    username: str
    email: str
    password_hash: str
    liked_songs: list[str] = field(default_factory=list)

    @staticmethod
    def from_row(row: sqlite3.Row, liked_songs: list[str] | None = None) -> "User":
        return User(
            id=row["id"],
            username=row["username"],
            email=row["email"],
            password_hash=row["password_hash"],
            liked_songs=list(liked_songs or []),
        )

    def to_api(self) -> dict[str, Any]:
        # never expose the hash
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "likedSongs": list(self.liked_songs),
            "playlists": [],
        }


@dataclass
class Playlist:
    id: str
    name: str
    cover: Optional[str]
    description: Optional[str]
    user_id: Optional[str]
    is_public: bool
    # Song records, or {"id": ...} stubs for songs that no longer exist
    songs: list[dict[str, Any]] = field(default_factory=list)

    @staticmethod
    def from_row(row: sqlite3.Row, songs: list[dict[str, Any]] | None = None) -> "Playlist":
        return Playlist(
            id=row["id"],
            name=row["name"],
            cover=row["cover"],
            description=row["description"],
            user_id=row["user_id"],
            is_public=bool(row["is_public"]),
            songs=list(songs or []),
        )

    def song_ids(self) -> list[str]:
        return [str(s.get("id")) for s in self.songs]

    def to_api(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "id": self.id,
            "name": self.name,
            "cover": self.cover,
            "description": self.description,
            "userId": self.user_id,
            "isPublic": self.is_public,
            "songs": list(self.songs),
        }
