# player/engine.py
from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from musichub.core.errors import PlaybackError
from musichub.core.lrc import ActiveLineTracker, LyricLine, parse_lrc
from musichub.core.models import RepeatMode, Track

logger = logging.getLogger(__name__)


def _next_event_loop_turn(fn: Callable[[], None]) -> None:
    QTimer.singleShot(0, fn)


class PlaybackEngine(QObject):
    """
    Queue, cursor, repeat mode and lyrics of the current track.

    The engine is the only owner of the media transport. The transport must
    provide load/play/pause/stop/seek_ms/set_volume and the signals
    positionChanged(int ms), ended() and errorOccurred(str); `play()` may
    raise PlaybackError.

    Lyrics are loaded per track. A fetch started for one track is ignored if
    it resolves after another track has been selected.
    """
    trackChanged = Signal(object)        # Track | None
    playingChanged = Signal(bool)
    positionChanged = Signal(float)      # seconds
    durationChanged = Signal(float)      # seconds
    repeatModeChanged = Signal(object)   # RepeatMode
    queueChanged = Signal(object)        # list[Track]
    lyricsChanged = Signal(object)       # list[LyricLine]
    activeLineChanged = Signal(int)

    def __init__(
        self,
        transport,
        fetch_lyrics: Optional[Callable[[str], str]] = None,
        runner=None,
        schedule: Optional[Callable[[Callable[[], None]], None]] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.transport = transport
        self.fetch_lyrics = fetch_lyrics
        self.runner = runner
        self._schedule = schedule or _next_event_loop_turn

        self.queue: list[Track] = []
        self.current: Track | None = None
        self.repeat_mode = RepeatMode.OFF
        self.is_playing = False
        self.position = 0.0
        self.duration = 0.0

        self.lyrics = ActiveLineTracker()

        self.transport.positionChanged.connect(self._on_transport_position)
        self.transport.ended.connect(self.on_track_ended)
        self.transport.errorOccurred.connect(self._on_transport_error)
        if hasattr(self.transport, "durationChanged"):
            self.transport.durationChanged.connect(self._on_transport_duration)

    # ----------------------------
    # Queue
    # ----------------------------

    def set_queue(self, tracks: Iterable[Track]) -> None:
        self.queue = list(tracks)
        self.queueChanged.emit(list(self.queue))

    def index_of(self, track: Track | None) -> int:
        if track is None:
            return -1
        for i, t in enumerate(self.queue):
            if t.id == track.id:
                return i
        return -1

    def select(self, track: Track | None) -> None:
        """Make `track` current without starting playback (initial catalog load)."""
        if track is None or (self.current is not None and self.current.id == track.id):
            return
        self._attach(track)

    # ----------------------------
    # Transport control
    # ----------------------------

    def play(self, track: Track, new_queue: Optional[Iterable[Track]] = None) -> None:
        if new_queue is not None:
            self.set_queue(new_queue)

        if self.current is not None and track.id == self.current.id:
            self.toggle_play()
            return

        if self.index_of(track) < 0:
            self.queue.append(track)
            self.queueChanged.emit(list(self.queue))

        self._load_and_play(track)

    def toggle_play(self) -> None:
        if self.current is None:
            if self.queue:
                self._load_and_play(self.queue[0])
            return

        if self.is_playing:
            self.transport.pause()
            self._set_playing(False)
        else:
            self._safe_play()

    def advance(self, is_automatic: bool = False) -> None:
        if not self.queue or self.current is None:
            return

        if is_automatic and self.repeat_mode is RepeatMode.ONE:
            self._restart()
            return

        next_index = self.index_of(self.current) + 1
        if next_index >= len(self.queue):
            if self.repeat_mode is RepeatMode.OFF and is_automatic:
                self.transport.stop()
                self._set_playing(False)
                return
            next_index = 0

        self._switch_to(self.queue[next_index])

    def retreat(self) -> None:
        if not self.queue or self.current is None:
            return
        n = len(self.queue)
        prev_index = (self.index_of(self.current) - 1 + n) % n
        self._switch_to(self.queue[prev_index])

    def on_track_ended(self) -> None:
        self.advance(is_automatic=True)

    def toggle_repeat(self) -> RepeatMode:
        self.repeat_mode = self.repeat_mode.next()
        self.repeatModeChanged.emit(self.repeat_mode)
        return self.repeat_mode

    def seek(self, seconds: float) -> None:
        if self.current is None:
            return
        seconds = max(0.0, float(seconds))
        if self.duration > 0:
            seconds = min(seconds, self.duration)
        self.transport.seek_ms(int(seconds * 1000))
        self._set_position(seconds)

    def set_volume(self, volume: float) -> None:
        self.transport.set_volume(volume)

    # ----------------------------
    # Internals
    # ----------------------------

    def _switch_to(self, track: Track) -> None:
        # a one-track queue wraps onto itself: restart instead of pausing
        if self.current is not None and track.id == self.current.id:
            self._restart()
        else:
            self._load_and_play(track)

    def _attach(self, track: Track) -> None:
        self.current = track
        self.duration = float(track.duration or 0.0)
        self.transport.stop()
        self._set_playing(False)
        self.transport.load(track.url)
        self._set_position(0.0)
        self.trackChanged.emit(track)
        self._load_lyrics(track)

    def _load_and_play(self, track: Track) -> None:
        self._attach(track)
        # start on the next turn of the event loop, once the source is attached
        token = track.id
        self._schedule(lambda: self._start_if_current(token))

    def _start_if_current(self, token: str) -> None:
        if self.current is None or self.current.id != token:
            return
        self._safe_play()

    def _restart(self) -> None:
        self.transport.seek_ms(0)
        self._set_position(0.0)
        self._safe_play()

    def _safe_play(self) -> None:
        try:
            self.transport.play()
        except PlaybackError as e:
            logger.warning("Playback could not start: %s", e)
            self._set_playing(False)
            return
        self._set_playing(True)

    def _set_playing(self, playing: bool) -> None:
        if self.is_playing != playing:
            self.is_playing = playing
            self.playingChanged.emit(playing)

    def _set_position(self, seconds: float) -> None:
        self.position = seconds
        self.positionChanged.emit(seconds)
        before = self.lyrics.index
        after = self.lyrics.update(seconds)
        if after != before:
            self.activeLineChanged.emit(after)

    def _on_transport_position(self, ms: int) -> None:
        if self.current is None:
            return
        self._set_position(max(0, ms) / 1000.0)

    def _on_transport_duration(self, ms: int) -> None:
        if ms > 0:
            self.duration = ms / 1000.0
            self.durationChanged.emit(self.duration)

    def _on_transport_error(self, message: str) -> None:
        logger.warning("Media transport error: %s", message)
        self._set_playing(False)

    # ----------------------------
    # Lyrics
    # ----------------------------

    def _load_lyrics(self, track: Track) -> None:
        if track.lrc_url and self.fetch_lyrics is not None and self.runner is not None:
            self._commit_lyrics([], placeholder=False)
            token = track.id
            url = track.lrc_url
            self.runner.submit(
                lambda: self.fetch_lyrics(url),
                on_success=lambda text: self._on_lyrics_fetched(token, text),
                on_failure=lambda exc: self._on_lyrics_failed(token, exc),
            )
        elif track.lyrics:
            self._commit_parsed(parse_lrc(track.lyrics))
        else:
            self._commit_lyrics([], placeholder=True)

    def _is_stale(self, token: str) -> bool:
        return self.current is None or self.current.id != token

    def _on_lyrics_fetched(self, token: str, text: str) -> None:
        if self._is_stale(token):
            logger.debug("Dropping lyrics for %s; track changed", token)
            return
        self._commit_parsed(parse_lrc(text))

    def _on_lyrics_failed(self, token: str, exc: Exception) -> None:
        if self._is_stale(token):
            logger.debug("Dropping lyric failure for %s; track changed", token)
            return
        logger.warning("Lyrics unavailable: %s", exc)
        self._commit_lyrics([], placeholder=True)

    def _commit_parsed(self, lines: list[LyricLine]) -> None:
        self._commit_lyrics(lines, placeholder=not lines)

    def _commit_lyrics(self, lines: list[LyricLine], placeholder: bool) -> None:
        if placeholder:
            self.lyrics.set_placeholder()
        else:
            self.lyrics.set_lines(lines)
            self.lyrics.update(self.position)
        self.lyricsChanged.emit(self.lyrics.lines)
        self.activeLineChanged.emit(self.lyrics.index)
