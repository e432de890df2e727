import json
import logging
import sqlite3
from pathlib import Path
from typing import Callable, Optional

from musichub.db import database as db_api
from musichub.library.scan_library import ScanProgress, scan_directory

logger = logging.getLogger(__name__)

MEDIA_URL_PREFIX = "/media/"


def media_ref(rel_path: str) -> str:
    return MEDIA_URL_PREFIX + rel_path.lstrip("/")


def seed_library(
    db: sqlite3.Connection,
    media_root: str,
    cover: Optional[str] = None,
    on_progress: Optional[Callable[[ScanProgress], None]] = None,
) -> int:
    """
    Register every audio file under `media_root` as a song served from /media.

    Songs already known by URL are skipped, so re-running is safe. Returns the
    number of songs added.
    """
    added = 0
    for fs_track in scan_directory(media_root, on_progress=on_progress):
        url = media_ref(fs_track.rel_path)
        if db_api.find_song_by_url(db, url) is not None:
            continue
        db_api.add_song(
            db,
            title=fs_track.title,
            artist=fs_track.artist,
            url=url,
            album=fs_track.album,
            cover=cover,
            duration=fs_track.duration,
            lrc_url=media_ref(fs_track.lrc_rel_path) if fs_track.lrc_rel_path else None,
        )
        added += 1
    logger.info("Seeded %d new songs from %s", added, media_root)
    return added


def seed_from_json(db: sqlite3.Connection, path: str) -> tuple[int, int]:
    """
    Load songs and public playlists from a JSON file:

        {"songs": [{"title", "artist", "url", "album"?, "cover"?, "duration"?, "lrcUrl"?}],
         "playlists": [{"name", "cover"?, "description"?, "isPublic"?, "songs": [url, ...]}]}

    Playlist entries reference songs by URL. Songs are matched by URL and
    playlists by name, so re-running does not duplicate anything.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    songs_added = 0
    for entry in data.get("songs", []):
        url = str(entry.get("url") or "").strip()
        if not url or not entry.get("title"):
            logger.warning("Skipping song entry without title/url: %r", entry)
            continue
        if db_api.find_song_by_url(db, url) is not None:
            continue
        db_api.add_song(
            db,
            title=str(entry["title"]),
            artist=str(entry.get("artist") or "Unknown Artist"),
            url=url,
            album=entry.get("album"),
            cover=entry.get("cover"),
            duration=float(entry.get("duration") or 0),
            lrc_url=entry.get("lrcUrl"),
        )
        songs_added += 1

    playlists_added = 0
    for entry in data.get("playlists", []):
        name = str(entry.get("name") or "").strip()
        if not name or db_api.find_playlist_by_name(db, name) is not None:
            continue

        song_ids = []
        for url in entry.get("songs", []):
            song = db_api.find_song_by_url(db, str(url))
            if song is None:
                logger.warning("Playlist %r references unknown song %s", name, url)
                continue
            song_ids.append(song.id)

        db_api.add_playlist(
            db,
            name=name,
            user_id=None,
            cover=entry.get("cover"),
            description=entry.get("description"),
            is_public=bool(entry.get("isPublic", True)),
            song_ids=song_ids,
        )
        playlists_added += 1

    logger.info("Seeded %d songs and %d playlists from %s", songs_added, playlists_added, Path(path).name)
    return songs_added, playlists_added
