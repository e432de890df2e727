# library/scan_library.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from mutagen import File as MutagenFile
from mutagen import MutagenError

logger = logging.getLogger(__name__)

AUDIO_EXTS = {".mp3", ".m4a", ".flac", ".ogg", ".opus", ".wav"}


@dataclass
class FsTrack:
    file_path: str
    rel_path: str                     # posix path below the media root
    title: str
    artist: str
    album: str | None
    duration: float
    lrc_rel_path: str | None = None   # sidecar .lrc, posix path below the media root


@dataclass
class ScanProgress:
    files_scanned: int
    files_count: int


def iter_audio_paths(directories: Iterable[str]) -> list[str]:
    paths: list[str] = []
    for root in directories:
        if not root or not os.path.isdir(root):
            continue
        for dirpath, _, filenames in os.walk(root):
            for fn in sorted(filenames):
                ext = os.path.splitext(fn)[1].lower()
                if ext in AUDIO_EXTS:
                    paths.append(os.path.join(dirpath, fn))
    return sorted(paths)


def _first(easy, key: str) -> str | None:
    v = easy.get(key)
    if not v:
        return None
    if isinstance(v, list):
        return (str(v[0]).strip() if v else None) or None
    s = str(v).strip()
    return s or None


def _sidecar_lrc(path: str) -> str | None:
    lrc_path = os.path.splitext(path)[0] + ".lrc"
    return lrc_path if os.path.isfile(lrc_path) else None


def _rel(path: str, root: str) -> str:
    return Path(os.path.relpath(path, root)).as_posix()


def new_fs_track_from_path(path: str, root: str) -> FsTrack | None:
    try:
        audio = MutagenFile(path, easy=True)
    except (MutagenError, OSError) as e:
        logger.warning("Skipping unreadable file %s: %s", path, e)
        return None
    if audio is None:
        logger.debug("Not an audio file: %s", path)
        return None

    title = _first(audio, "title") or os.path.splitext(os.path.basename(path))[0]
    artist = _first(audio, "artist") or "Unknown Artist"
    album = _first(audio, "album")

    duration = 0.0
    info = getattr(audio, "info", None)
    if info is not None and getattr(info, "length", None):
        duration = float(info.length)

    lrc_path = _sidecar_lrc(path)

    return FsTrack(
        file_path=path,
        rel_path=_rel(path, root),
        title=title,
        artist=artist,
        album=album,
        duration=round(duration, 2),
        lrc_rel_path=_rel(lrc_path, root) if lrc_path else None,
    )


def scan_directory(
    root: str,
    on_progress: Optional[Callable[[ScanProgress], None]] = None,
) -> list[FsTrack]:
    """Read tags of every audio file below `root` (sorted by path)."""
    paths = iter_audio_paths([root])
    tracks: list[FsTrack] = []
    for i, path in enumerate(paths, start=1):
        track = new_fs_track_from_path(path, root)
        if track is not None:
            tracks.append(track)
        if on_progress is not None:
            on_progress(ScanProgress(files_scanned=i, files_count=len(paths)))
    logger.info("Scanned %d audio files under %s (%d usable)", len(paths), root, len(tracks))
    return tracks
