import sqlite3
import time
import uuid
from typing import Iterable, List, Optional

from musichub.db.models import Playlist, Song, User


def _new_id() -> str:
    return uuid.uuid4().hex


# -------------------------------
# USERS
# -------------------------------
def find_user_by_email(db: sqlite3.Connection, email: str) -> Optional[User]:
    row = db.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
    if not row:
        return None
    return User.from_row(row, get_liked_song_ids(db, row["id"]))


def get_user(db: sqlite3.Connection, user_id: str) -> Optional[User]:
    row = db.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    if not row:
        return None
    return User.from_row(row, get_liked_song_ids(db, row["id"]))


def add_user(db: sqlite3.Connection, username: str, email: str, password_hash: str) -> User:
    user_id = _new_id()
    db.execute(
        "INSERT INTO users (id, username, email, password_hash, created_at) VALUES (?, ?, ?, ?, ?)",
        (user_id, username, email, password_hash, time.time()),
    )
    db.commit()
    return User(id=user_id, username=username, email=email, password_hash=password_hash)


# -------------------------------
# LIKES
# -------------------------------
def get_liked_song_ids(db: sqlite3.Connection, user_id: str) -> List[str]:
    rows = db.execute(
        "SELECT song_id FROM user_likes WHERE user_id = ? ORDER BY id ASC", (user_id,)
    ).fetchall()
    return [row["song_id"] for row in rows]


def set_like(db: sqlite3.Connection, user_id: str, song_id: str, liked: bool) -> List[str]:
    """Idempotent: liking twice or unliking a non-liked song is a no-op."""
    if liked:
        db.execute(
            "INSERT OR IGNORE INTO user_likes (user_id, song_id) VALUES (?, ?)",
            (user_id, song_id),
        )
    else:
        db.execute(
            "DELETE FROM user_likes WHERE user_id = ? AND song_id = ?",
            (user_id, song_id),
        )
    db.commit()
    return get_liked_song_ids(db, user_id)


# -------------------------------
# SONGS
# -------------------------------
def add_song(
    db: sqlite3.Connection,
    title: str,
    artist: str,
    url: str,
    album: str | None = None,
    cover: str | None = None,
    duration: float | None = None,
    lrc_url: str | None = None,
) -> Song:
    song_id = _new_id()
    db.execute("""
        INSERT INTO songs (
            id, title, artist, album, cover, url, duration, lrc_url
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
    """, (
        song_id,
        title,
        artist,
        album,
        cover,
        url,
        duration,
        lrc_url,
    ))
    db.commit()
    return get_song_by_id(db, song_id)


def get_song_by_id(db: sqlite3.Connection, song_id: str) -> Optional[Song]:
    row = db.execute("SELECT * FROM songs WHERE id = ?", (song_id,)).fetchone()
    return Song.from_row(row) if row else None


def find_song_by_url(db: sqlite3.Connection, url: str) -> Optional[Song]:
    row = db.execute("SELECT * FROM songs WHERE url = ? LIMIT 1", (url,)).fetchone()
    return Song.from_row(row) if row else None


def get_songs(db: sqlite3.Connection) -> List[Song]:
    # insertion order
    cursor = db.execute("SELECT * FROM songs ORDER BY rowid ASC")
    return [Song.from_row(row) for row in cursor.fetchall()]


# -------------------------------
# PLAYLISTS
# -------------------------------
def get_playlist_songs(db: sqlite3.Connection, playlist_id: str) -> List[dict]:
    rows = db.execute("""
        SELECT
            playlist_songs.song_id AS ref_id,
            songs.*
        FROM playlist_songs
        LEFT JOIN songs ON songs.id = playlist_songs.song_id
        WHERE playlist_songs.playlist_id = ?
        ORDER BY playlist_songs.position ASC
    """, (playlist_id,)).fetchall()

    out = []
    for row in rows:
        if row["id"] is None:
            # song was removed; keep the reference
            out.append({"_id": row["ref_id"], "id": row["ref_id"]})
        else:
            out.append(Song.from_row(row).to_api())
    return out


def get_playlist(db: sqlite3.Connection, playlist_id: str) -> Optional[Playlist]:
    row = db.execute("SELECT * FROM playlists WHERE id = ?", (playlist_id,)).fetchone()
    if not row:
        return None
    return Playlist.from_row(row, get_playlist_songs(db, playlist_id))


def get_visible_playlists(db: sqlite3.Connection, viewer_id: str | None) -> List[Playlist]:
    """Public playlists, plus the viewer's own private ones."""
    if viewer_id:
        rows = db.execute(
            "SELECT * FROM playlists WHERE is_public = 1 OR user_id = ? ORDER BY rowid ASC",
            (viewer_id,),
        ).fetchall()
    else:
        rows = db.execute(
            "SELECT * FROM playlists WHERE is_public = 1 ORDER BY rowid ASC"
        ).fetchall()
    return [Playlist.from_row(row, get_playlist_songs(db, row["id"])) for row in rows]


def add_playlist(
    db: sqlite3.Connection,
    name: str,
    user_id: str | None,
    cover: str | None,
    description: str | None,
    is_public: bool,
    song_ids: Iterable[str] = (),
) -> Playlist:
    playlist_id = _new_id()
    db.execute("""
        INSERT INTO playlists (id, name, cover, description, user_id, is_public)
        VALUES (?, ?, ?, ?, ?, ?)
    """, (playlist_id, name, cover, description, user_id, bool(is_public)))
    set_playlist_songs(db, playlist_id, song_ids)
    return get_playlist(db, playlist_id)


def set_playlist_songs(db: sqlite3.Connection, playlist_id: str, song_ids: Iterable[str]) -> None:
    db.execute("DELETE FROM playlist_songs WHERE playlist_id = ?", (playlist_id,))
    db.executemany(
        "INSERT INTO playlist_songs (playlist_id, song_id, position) VALUES (?, ?, ?)",
        [(playlist_id, str(sid), pos) for pos, sid in enumerate(song_ids)],
    )
    db.commit()


def update_playlist(
    db: sqlite3.Connection,
    playlist_id: str,
    name: str | None = None,
    cover: str | None = None,
    song_ids: Iterable[str] | None = None,
) -> Optional[Playlist]:
    if name:
        db.execute("UPDATE playlists SET name = ? WHERE id = ?", (name, playlist_id))
    if cover:
        db.execute("UPDATE playlists SET cover = ? WHERE id = ?", (cover, playlist_id))
    if song_ids is not None:
        set_playlist_songs(db, playlist_id, song_ids)
    db.commit()
    return get_playlist(db, playlist_id)


def delete_playlist(db: sqlite3.Connection, playlist_id: str) -> None:
    db.execute("DELETE FROM playlist_songs WHERE playlist_id = ?", (playlist_id,))
    db.execute("DELETE FROM playlists WHERE id = ?", (playlist_id,))
    db.commit()


def find_playlist_by_name(db: sqlite3.Connection, name: str, user_id: str | None = None) -> Optional[Playlist]:
    if user_id is None:
        row = db.execute(
            "SELECT id FROM playlists WHERE name = ? AND user_id IS NULL LIMIT 1", (name,)
        ).fetchone()
    else:
        row = db.execute(
            "SELECT id FROM playlists WHERE name = ? AND user_id = ? LIMIT 1", (name, user_id)
        ).fetchone()
    return get_playlist(db, row["id"]) if row else None
