from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor, QIcon, QPixmap
from PySide6.QtWidgets import (
    QComboBox, QLabel, QListWidget, QListWidgetItem, QPushButton, QVBoxLayout, QWidget,
)

from musichub.core.state import THEME_COLORS

VIEW_HOME = "home"
VIEW_LIKED = "liked"
VIEW_ARTISTS = "artists"
VIEW_PLAYLIST = "playlist"
VIEW_ARTIST = "artist"


def _swatch(color: str) -> QIcon:
    pm = QPixmap(12, 12)
    pm.fill(QColor(color))
    return QIcon(pm)


class Sidebar(QWidget):
    """Navigation, the visible playlists, theme color and account button."""
    navigate = Signal(str, str)          # view, argument (playlist id / artist)
    createPlaylistRequested = Signal()
    accountButtonClicked = Signal()

    def __init__(self, app_state, parent=None):
        super().__init__(parent)
        self.app_state = app_state
        self.setObjectName("Sidebar")
        self.setFixedWidth(230)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 12, 10, 12)
        layout.setSpacing(8)

        self.lbl_user = QLabel()
        self.lbl_user.setObjectName("UserLabel")
        layout.addWidget(self.lbl_user)

        self.nav = QListWidget()
        self.nav.setObjectName("Nav")
        for label, view in (("Home", VIEW_HOME), ("Liked Songs", VIEW_LIKED), ("Followed Artists", VIEW_ARTISTS)):
            item = QListWidgetItem(label)
            item.setData(Qt.ItemDataRole.UserRole, view)
            self.nav.addItem(item)
        self.nav.setFixedHeight(3 * 30)
        self.nav.itemClicked.connect(self._on_nav_clicked)
        layout.addWidget(self.nav)

        header = QLabel("PLAYLISTS")
        header.setObjectName("SectionLabel")
        layout.addWidget(header)

        self.playlists = QListWidget()
        self.playlists.setObjectName("Nav")
        self.playlists.itemClicked.connect(self._on_playlist_clicked)
        layout.addWidget(self.playlists, 1)

        self.btn_new = QPushButton("+ New playlist")
        self.btn_new.clicked.connect(self.createPlaylistRequested.emit)
        layout.addWidget(self.btn_new)

        self.theme = QComboBox()
        self.theme.setToolTip("Theme color")
        for name, color in THEME_COLORS:
            self.theme.addItem(_swatch(color), name, color)
        self.theme.currentIndexChanged.connect(self._on_theme_selected)
        layout.addWidget(self.theme)

        self.btn_account = QPushButton()
        self.btn_account.clicked.connect(self.accountButtonClicked.emit)
        layout.addWidget(self.btn_account)

        self.app_state.sessionChanged.connect(lambda _s: self._refresh_account())
        self.app_state.themeChanged.connect(self._sync_theme)
        self.app_state.library.playlistsChanged.connect(self.set_playlists)

        self._refresh_account()
        self._sync_theme(self.app_state.theme_color)
        self.set_playlists(self.app_state.library.playlists)
        self._apply_styles()

    def set_playlists(self, playlists):
        uid = self.app_state.user_id
        self.playlists.clear()
        for pl in playlists:
            suffix = "" if pl.is_public or not pl.is_owned_by(uid) else "  🔒"
            item = QListWidgetItem(f"{pl.name}{suffix}")
            item.setData(Qt.ItemDataRole.UserRole, pl.id)
            self.playlists.addItem(item)

    def _refresh_account(self):
        session = self.app_state.session
        if session is None:
            self.lbl_user.setText("Not signed in")
            self.btn_account.setText("Sign in")
        else:
            self.lbl_user.setText(session.username)
            self.btn_account.setText("Sign out")

    def _sync_theme(self, color: str):
        idx = self.theme.findData(color)
        if idx >= 0 and idx != self.theme.currentIndex():
            self.theme.blockSignals(True)
            self.theme.setCurrentIndex(idx)
            self.theme.blockSignals(False)

    def _on_theme_selected(self, index: int):
        color = self.theme.itemData(index)
        if color and color != self.app_state.theme_color:
            self.app_state.set_theme_color(color)

    def _on_nav_clicked(self, item: QListWidgetItem):
        self.playlists.clearSelection()
        self.navigate.emit(item.data(Qt.ItemDataRole.UserRole), "")

    def _on_playlist_clicked(self, item: QListWidgetItem):
        self.nav.clearSelection()
        self.navigate.emit(VIEW_PLAYLIST, item.data(Qt.ItemDataRole.UserRole))

    def _apply_styles(self):
        self.setStyleSheet("""
        QWidget#Sidebar { background: #000000; }
        QLabel#UserLabel { color: #e5e7eb; font-weight: 650; padding: 4px; }
        QLabel#SectionLabel { color: #6b7280; font-size: 10px; letter-spacing: 0.08em; padding-top: 8px; }
        QListWidget#Nav { background: transparent; border: none; color: #d1d5db; }
        QListWidget#Nav::item { padding: 6px 4px; border-radius: 6px; }
        QListWidget#Nav::item:hover { background: #111827; }
        QListWidget#Nav::item:selected { background: #1f2937; color: #ffffff; }
        QPushButton {
            background: #111827; color: #e5e7eb; border: 1px solid #1f2937;
            border-radius: 8px; padding: 6px;
        }
        QPushButton:hover { border-color: #374151; }
        """)
