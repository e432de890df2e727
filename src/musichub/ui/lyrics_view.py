# ui/lyrics_view.py
from __future__ import annotations

from typing import List

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QFont
from PySide6.QtWidgets import QAbstractItemView, QLabel, QListWidget, QListWidgetItem, QVBoxLayout, QWidget

from musichub.core.lrc import LyricLine

INACTIVE = QColor("#6b7280")


class LyricsView(QWidget):
    """
    Right-side lyrics panel. Follows PlaybackEngine: the active line is
    highlighted and kept centred; clicking a line seeks to it.
    """

    def __init__(self, engine, accent: str = "#38bdf8", parent=None):
        super().__init__(parent)
        self.engine = engine
        self.accent = QColor(accent)
        self._current_index = -1

        root = QVBoxLayout(self)
        root.setContentsMargins(10, 10, 10, 10)
        root.setSpacing(8)

        self.title = QLabel("Lyrics")
        self.title.setAlignment(Qt.AlignLeft | Qt.AlignVCenter)
        self.title.setStyleSheet("font-weight: 650; font-size: 14px; color: #e5e7eb;")
        root.addWidget(self.title)

        self.lines = QListWidget()
        self.lines.setObjectName("LyricsList")
        self.lines.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        self.lines.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.lines.setWordWrap(True)
        self.lines.itemClicked.connect(self._on_line_clicked)
        self.lines.setStyleSheet("""
        QListWidget#LyricsList { background: transparent; border: none; font-size: 15px; }
        QListWidget#LyricsList::item { padding: 6px 4px; }
        """)
        root.addWidget(self.lines, 1)

        self.engine.trackChanged.connect(self._on_track_changed)
        self.engine.lyricsChanged.connect(self.set_lines)
        self.engine.activeLineChanged.connect(self.set_active_index)

        if self.engine.current is not None:
            self._on_track_changed(self.engine.current)
            self.set_lines(self.engine.lyrics.lines)
            self.set_active_index(self.engine.lyrics.index)

    def set_accent(self, color: str):
        self.accent = QColor(color)
        index, self._current_index = self._current_index, -1
        self.set_active_index(index)

    def _on_track_changed(self, track):
        self.title.setText(f"{track.title} · {track.artist}" if track else "Lyrics")

    def set_lines(self, lines: List[LyricLine]):
        self._current_index = -1
        self.lines.clear()
        for line in lines:
            item = QListWidgetItem(line.text)
            item.setData(Qt.ItemDataRole.UserRole, float(line.time))
            item.setTextAlignment(Qt.AlignCenter)
            item.setForeground(INACTIVE)
            self.lines.addItem(item)

    def set_active_index(self, index: int):
        if index == self._current_index:
            return

        previous = self.lines.item(self._current_index) if self._current_index >= 0 else None
        if previous is not None:
            previous.setForeground(INACTIVE)
            previous.setFont(QFont())

        self._current_index = index
        item = self.lines.item(index) if index >= 0 else None
        if item is None:
            return

        font = QFont()
        font.setBold(True)
        item.setFont(font)
        item.setForeground(self.accent)
        self.lines.scrollToItem(item, QAbstractItemView.ScrollHint.PositionAtCenter)

    def _on_line_clicked(self, item: QListWidgetItem):
        if self.engine.lyrics.is_placeholder:
            return
        self.engine.seek(float(item.data(Qt.ItemDataRole.UserRole)))
