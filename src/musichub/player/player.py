# player/player.py
from __future__ import annotations

import logging

from PySide6.QtCore import QObject, QUrl, Signal
from PySide6.QtMultimedia import QAudioOutput, QMediaDevices, QMediaPlayer

from musichub.core.errors import PlaybackError

logger = logging.getLogger(__name__)


def media_url(ref: str) -> QUrl:
    """Remote references stay URLs, anything else is treated as a local file."""
    url = QUrl(ref)
    if url.scheme() in ("http", "https", "file", "qrc"):
        return url
    return QUrl.fromLocalFile(ref)


def has_audio_output() -> bool:
    return not QMediaDevices.defaultAudioOutput().isNull()


class Player(QObject):
    """
    The single audio handle of the application.

    Only PlaybackEngine drives it; the rest of the UI listens to the engine.
    """
    positionChanged = Signal(int)       # ms
    durationChanged = Signal(int)       # ms
    ended = Signal()
    errorOccurred = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)

        self.source: str | None = None

        self.audio = QAudioOutput()
        self.media = QMediaPlayer()
        self.media.setAudioOutput(self.audio)

        self._volume_0_to_1: float = 0.7
        self.audio.setVolume(self._volume_0_to_1)

        self.media.positionChanged.connect(self.positionChanged.emit)
        self.media.durationChanged.connect(self.durationChanged.emit)
        self.media.mediaStatusChanged.connect(self._on_qt_media_status)
        self.media.errorOccurred.connect(self._on_qt_error)

    # ----------------------------
    # Qt backend handlers
    # ----------------------------

    def _on_qt_media_status(self, status: QMediaPlayer.MediaStatus) -> None:
        if status == QMediaPlayer.EndOfMedia:
            self.ended.emit()
        elif status == QMediaPlayer.InvalidMedia:
            logger.warning("Invalid media: %s", self.source)

    def _on_qt_error(self, error: QMediaPlayer.Error, message: str) -> None:
        if error == QMediaPlayer.NoError:
            return
        logger.warning("Media error for %s: %s", self.source, message)
        self.errorOccurred.emit(message or "Playback failed")

    # ----------------------------
    # Public API
    # ----------------------------

    def load(self, ref: str) -> None:
        """Attach a new media source without starting it."""
        self.source = ref or None
        self.media.setSource(media_url(ref) if ref else QUrl())

    def play(self) -> None:
        if not self.source:
            raise PlaybackError("No media source loaded")
        if self.media.error() != QMediaPlayer.NoError:
            raise PlaybackError(self.media.errorString() or "Media cannot be played")
        self.media.play()

    def pause(self) -> None:
        self.media.pause()

    def stop(self) -> None:
        self.media.stop()

    def seek_ms(self, ms: int) -> None:
        self.media.setPosition(max(0, int(ms)))

    def set_volume(self, volume_0_to_1: float) -> None:
        v = min(1.0, max(0.0, float(volume_0_to_1)))
        self._volume_0_to_1 = v
        self.audio.setVolume(v)
