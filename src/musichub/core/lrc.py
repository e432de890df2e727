# core/lrc.py
from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterable, List, Sequence

# [mm:ss.xx] or [mm:ss:xxx]; fraction separator may be "." or ":"
_TS_RE = re.compile(r"\[(\d{2}):(\d{2})[.:](\d{2,3})\]")
_NEWLINE_RE = re.compile(r"\r?\n")

NO_LYRICS_TEXT = "No lyrics available"


@dataclass(frozen=True)
class LyricLine:
    time: float   # seconds
    text: str


def _ts_to_seconds(mm: str, ss: str, frac: str) -> float:
    divisor = 1000 if len(frac) == 3 else 100
    return int(mm) * 60 + int(ss) + int(frac) / divisor


def format_timestamp(seconds: float) -> str:
    """Format seconds as mm:ss (used by the player bar and lyrics panel)."""
    total = max(0, int(seconds))
    return f"{total // 60}:{total % 60:02d}"


def parse_lrc(lrc_text) -> List[LyricLine]:
    """
    Returns LyricLine items sorted by time.

    Only the first, leading timestamp of a line is honoured. Lines without a
    timestamp (metadata such as [ar:], [ti:]) and lines that are empty once
    the tag is stripped are dropped. Sorting is stable, so lines sharing a
    timestamp keep their source order.
    """
    if not lrc_text or not isinstance(lrc_text, str):
        return []

    # a UTF-8 byte order mark survives plain utf-8 decoding
    lrc_text = lrc_text.lstrip("\ufeff")

    out: List[LyricLine] = []
    for raw_line in _NEWLINE_RE.split(lrc_text):
        line = raw_line.lstrip()
        m = _TS_RE.match(line)
        if not m:
            continue

        text = line[m.end():].strip()
        if not text:
            continue

        out.append(LyricLine(time=_ts_to_seconds(m.group(1), m.group(2), m.group(3)), text=text))

    out.sort(key=lambda l: l.time)
    return out


def active_index(lines: Sequence[LyricLine], position: float) -> int:
    """Index of the last line whose time is <= position, or -1."""
    if not lines:
        return -1
    return bisect_right([l.time for l in lines], position) - 1


def placeholder_lines(text: str = NO_LYRICS_TEXT) -> List[LyricLine]:
    return [LyricLine(time=0.0, text=text)]


class ActiveLineTracker:
    """
    Keeps the active lyric index for a fixed set of lines.

    `update()` is called on every position tick; it walks outward from the
    previous index instead of rescanning, and always agrees with
    `active_index()`.

    In placeholder mode (no lyrics for the track) there is exactly one line
    and the index is pinned to 0.
    """

    def __init__(self, lines: Iterable[LyricLine] = ()):
        self._lines: List[LyricLine] = []
        self._times: List[float] = []
        self._index: int = -1
        self._placeholder: bool = False
        self.set_lines(lines)

    @property
    def lines(self) -> List[LyricLine]:
        return list(self._lines)

    @property
    def index(self) -> int:
        return self._index

    @property
    def is_placeholder(self) -> bool:
        return self._placeholder

    def set_lines(self, lines: Iterable[LyricLine]) -> None:
        self._lines = list(lines)
        self._times = [l.time for l in self._lines]
        self._index = -1
        self._placeholder = False

    def set_placeholder(self, text: str = NO_LYRICS_TEXT) -> None:
        self._lines = placeholder_lines(text)
        self._times = [0.0]
        self._index = 0
        self._placeholder = True

    def clear(self) -> None:
        self.set_lines(())

    def update(self, position: float) -> int:
        if self._placeholder:
            return 0

        times = self._times
        i = self._index
        n = len(times)

        while i + 1 < n and times[i + 1] <= position:
            i += 1
        while i >= 0 and times[i] > position:
            i -= 1

        self._index = i
        return i
