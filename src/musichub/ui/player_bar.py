# ui/player_bar.py
from __future__ import annotations

from PySide6.QtCore import QByteArray, QSize, Qt
from PySide6.QtGui import QIcon, QPainter, QPixmap
from PySide6.QtSvg import QSvgRenderer
from PySide6.QtWidgets import QHBoxLayout, QLabel, QSlider, QToolButton, QWidget

from musichub.core.lrc import format_timestamp
from musichub.core.models import RepeatMode


def _svg_icon(path_d: str, size: int = 20, color: str = "#e5e7eb") -> QIcon:
    svg = f"""
    <svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" viewBox="0 0 24 24">
      <path d="{path_d}" fill="{color}"/>
    </svg>
    """.strip()

    renderer = QSvgRenderer(QByteArray(svg.encode("utf-8")))
    pm = QPixmap(size, size)
    pm.fill(Qt.transparent)

    p = QPainter(pm)
    renderer.render(p)
    p.end()

    return QIcon(pm)


SVG_PREV = "M6 18V6h2v12H6zm3.5-6L18 6v12l-8.5-6z"
SVG_NEXT = "M16 6v12h2V6h-2zM6 18l8.5-6L6 6v12z"
SVG_PLAY = "M8 5v14l11-7L8 5z"
SVG_PAUSE = "M6 5h4v14H6V5zm8 0h4v14h-4V5z"
SVG_REPEAT = "M7 7h10v3l4-4-4-4v3H5v6h2V7zm10 10H7v-3l-4 4 4 4v-3h12v-6h-2v4z"
SVG_REPEAT_ONE = "M7 7h10v3l4-4-4-4v3H5v6h2V7zm10 10H7v-3l-4 4 4 4v-3h12v-6h-2v4zm-4-2V9h-1l-2 1v1h1.5v4H13z"
SVG_HEART = "M12 21.35l-1.45-1.32C5.4 15.36 2 12.28 2 8.5 2 5.42 4.42 3 7.5 3c1.74 0 3.41.81 4.5 2.09C13.09 3.81 14.76 3 16.5 3 19.58 3 22 5.42 22 8.5c0 3.78-3.4 6.86-8.55 11.54L12 21.35z"
SVG_VOLUME = "M3 9v6h4l5 5V4L7 9H3zm13.5 3c0-1.77-1.02-3.29-2.5-4.03v8.05c1.48-.73 2.5-2.25 2.5-4.02z"

IDLE = "#e5e7eb"
MUTED = "#4b5563"


class PlayerBar(QWidget):
    """Transport controls bound to PlaybackEngine; like button bound to the library."""

    def __init__(self, app_state, parent=None):
        super().__init__(parent)
        self.app_state = app_state
        self.engine = app_state.engine
        self.library = app_state.library
        self.accent = app_state.theme_color

        self._dragging = False

        root = QHBoxLayout(self)
        root.setContentsMargins(8, 6, 8, 6)
        root.setSpacing(10)

        self.btn_prev = self._tool_button("BtnPrev", "Previous")
        self.btn_play = self._tool_button("BtnPlay", "Play")
        self.btn_next = self._tool_button("BtnNext", "Next")
        self.btn_repeat = self._tool_button("BtnRepeat", "Repeat: off")
        self.btn_like = self._tool_button("BtnLike", "Like")

        self.lbl_title = QLabel("Nothing playing")
        self.lbl_title.setMinimumWidth(220)
        self.lbl_title.setObjectName("NowPlaying")

        self.lbl_time = QLabel("0:00")
        self.lbl_dur = QLabel("0:00")

        self.slider = QSlider(Qt.Orientation.Horizontal)
        self.slider.setRange(0, 0)
        self.slider.setSingleStep(1000)
        self.slider.setPageStep(5000)

        vol_icon = QLabel()
        vol_icon.setPixmap(_svg_icon(SVG_VOLUME, 16, "#9ca3af").pixmap(16, 16))
        self.volume = QSlider(Qt.Orientation.Horizontal)
        self.volume.setRange(0, 100)
        self.volume.setFixedWidth(100)
        self.volume.setValue(int(round(app_state.volume * 100)))

        root.addWidget(self.btn_prev)
        root.addWidget(self.btn_play)
        root.addWidget(self.btn_next)
        root.addWidget(self.btn_repeat)
        root.addSpacing(6)
        root.addWidget(self.lbl_title, 1)
        root.addWidget(self.btn_like)
        root.addWidget(self.lbl_time)
        root.addWidget(self.slider, 3)
        root.addWidget(self.lbl_dur)
        root.addSpacing(6)
        root.addWidget(vol_icon)
        root.addWidget(self.volume)

        # --- signals ---
        self.btn_prev.clicked.connect(self.engine.retreat)
        self.btn_play.clicked.connect(self.engine.toggle_play)
        self.btn_next.clicked.connect(lambda: self.engine.advance(False))
        self.btn_repeat.clicked.connect(self.engine.toggle_repeat)
        self.btn_like.clicked.connect(self._on_like_clicked)

        self.slider.sliderPressed.connect(self._on_slider_pressed)
        self.slider.sliderReleased.connect(self._on_slider_released)
        self.slider.sliderMoved.connect(lambda v: self.lbl_time.setText(format_timestamp(v / 1000)))
        self.volume.valueChanged.connect(self._on_volume_changed)

        self.engine.trackChanged.connect(self._on_track_changed)
        self.engine.playingChanged.connect(self._set_playing)
        self.engine.positionChanged.connect(self._on_position)
        self.engine.durationChanged.connect(self._on_duration)
        self.engine.repeatModeChanged.connect(self._set_repeat)
        self.library.likesChanged.connect(lambda _liked: self._refresh_like())

        self.setObjectName("PlayerBar")
        self.set_accent(self.accent)
        if self.engine.current is not None:
            self._on_track_changed(self.engine.current)

    def _tool_button(self, name: str, tip: str) -> QToolButton:
        btn = QToolButton()
        btn.setObjectName(name)
        btn.setToolTip(tip)
        btn.setIconSize(QSize(20, 20))
        return btn

    def set_accent(self, color: str):
        self.accent = color
        self.btn_prev.setIcon(_svg_icon(SVG_PREV, 20))
        self.btn_next.setIcon(_svg_icon(SVG_NEXT, 20))
        self._set_playing(self.engine.is_playing)
        self._set_repeat(self.engine.repeat_mode)
        self._refresh_like()
        self._apply_styles()

    # --- slider handling ---
    def _on_slider_pressed(self):
        self._dragging = True

    def _on_slider_released(self):
        self._dragging = False
        self.engine.seek(self.slider.value() / 1000)

    def _on_volume_changed(self, value: int):
        v = value / 100
        self.engine.set_volume(v)
        self.app_state.set_volume(v)

    def _on_like_clicked(self):
        track = self.engine.current
        if track is not None:
            self.library.toggle_like(track.id)

    # --- engine updates ---
    def _on_track_changed(self, track):
        if track:
            self.lbl_title.setText(f"{track.artist or 'Unknown Artist'} - {track.title or 'Unknown'}")
            self._on_duration(track.duration)
        else:
            self.lbl_title.setText("Nothing playing")
            self._on_duration(0)
        self._on_position(0.0)
        self._refresh_like()

    def _set_playing(self, playing: bool):
        if playing:
            self.btn_play.setIcon(_svg_icon(SVG_PAUSE, 22))
            self.btn_play.setToolTip("Pause")
        else:
            self.btn_play.setIcon(_svg_icon(SVG_PLAY, 22))
            self.btn_play.setToolTip("Play")

    def _set_repeat(self, mode: RepeatMode):
        path = SVG_REPEAT_ONE if mode is RepeatMode.ONE else SVG_REPEAT
        color = MUTED if mode is RepeatMode.OFF else self.accent
        self.btn_repeat.setIcon(_svg_icon(path, 20, color))
        self.btn_repeat.setToolTip(f"Repeat: {mode.value}")

    def _refresh_like(self):
        track = self.engine.current
        liked = track is not None and self.library.is_liked(track.id)
        self.btn_like.setIcon(_svg_icon(SVG_HEART, 18, self.accent if liked else MUTED))
        self.btn_like.setToolTip("Remove from Liked Songs" if liked else "Add to Liked Songs")

    def _on_duration(self, seconds: float):
        ms = int(max(0.0, seconds) * 1000)
        self.slider.setRange(0, ms)
        self.lbl_dur.setText(format_timestamp(seconds))

    def _on_position(self, seconds: float):
        if self._dragging:
            return
        self.lbl_time.setText(format_timestamp(seconds))
        self.slider.setValue(int(seconds * 1000))

    def _apply_styles(self):
        accent = self.accent
        self.setStyleSheet(f"""
        QWidget#PlayerBar {{
            background-color: #020617;
            border-top: 1px solid #111827;
        }}
        QToolButton {{
            border: 1px solid transparent;
            background: transparent;
            padding: 6px;
            border-radius: 10px;
        }}
        QToolButton:hover {{
            background: #0b1222;
            border-color: #1f2937;
        }}
        QToolButton#BtnPlay {{
            background: #111827;
            border: 1px solid #1f2937;
            border-radius: 999px;
            padding: 8px;
        }}
        QToolButton#BtnPlay:hover {{ border-color: {accent}; }}
        QSlider::groove:horizontal {{
            height: 4px;
            background: #0f172a;
            border-radius: 2px;
        }}
        QSlider::handle:horizontal {{
            width: 12px;
            height: 12px;
            margin: -4px 0;
            border-radius: 6px;
            background: {accent};
        }}
        QSlider::sub-page:horizontal {{
            background: {accent};
            border-radius: 2px;
        }}
        QLabel {{ color: #9ca3af; font-size: 11px; }}
        QLabel#NowPlaying {{ color: #e5e7eb; font-size: 12px; }}
        """)
