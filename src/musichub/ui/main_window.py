from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QHBoxLayout, QInputDialog, QLabel, QLineEdit, QMainWindow, QMessageBox, QPushButton,
    QSplitter, QVBoxLayout, QWidget,
)

from musichub.ui.dialogs.auth_dialog import AuthDialog
from musichub.ui.dialogs.playlist_dialog import CreatePlaylistDialog
from musichub.ui.lyrics_view import LyricsView
from musichub.ui.player_bar import PlayerBar
from musichub.ui.widgets.sidebar import (
    VIEW_ARTIST, VIEW_ARTISTS, VIEW_HOME, VIEW_LIKED, VIEW_PLAYLIST, Sidebar,
)
from musichub.ui.widgets.toast import ToastManager
from musichub.ui.widgets.track_list_widget import TrackListWidget


class MainWindow(QMainWindow):
    def __init__(self, app_state):
        super().__init__()
        self.setWindowTitle("MusicHub")
        self.resize(1200, 760)
        self.app_state = app_state
        self.engine = app_state.engine
        self.library = app_state.library

        self._view = VIEW_HOME
        self._view_arg = ""
        self._auth_dialog = None

        # --- Shortcuts ---
        QShortcut(QKeySequence("Space"), self, activated=self.engine.toggle_play)
        QShortcut(QKeySequence("Ctrl+Right"), self, activated=lambda: self.engine.advance(False))
        QShortcut(QKeySequence("Ctrl+Left"), self, activated=self.engine.retreat)
        QShortcut(QKeySequence("Ctrl+F"), self, activated=lambda: self.search_box.setFocus())

        central = QWidget()
        self.setCentralWidget(central)
        outer = QVBoxLayout(central)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.setSpacing(0)

        body = QHBoxLayout()
        body.setContentsMargins(0, 0, 0, 0)
        body.setSpacing(0)
        outer.addLayout(body, 1)

        self.sidebar = Sidebar(app_state)
        body.addWidget(self.sidebar)

        # --- content: header + tracks | lyrics ---
        content = QWidget()
        content.setObjectName("Content")
        content_layout = QVBoxLayout(content)
        content_layout.setContentsMargins(12, 10, 12, 0)
        body.addWidget(content, 1)

        top_bar = QHBoxLayout()
        self.search_box = QLineEdit()
        self.search_box.setPlaceholderText("Search songs or artists...")
        self.search_box.setClearButtonEnabled(True)
        top_bar.addWidget(self.search_box, 1)
        content_layout.addLayout(top_bar)

        header = QHBoxLayout()
        self.lbl_view = QLabel()
        self.lbl_view.setObjectName("ViewTitle")
        header.addWidget(self.lbl_view, 1)
        self.btn_follow = QPushButton()
        self.btn_rename = QPushButton("Rename")
        self.btn_cover = QPushButton("Change cover")
        self.btn_delete = QPushButton("Delete")
        for btn in (self.btn_follow, self.btn_rename, self.btn_cover, self.btn_delete):
            btn.setVisible(False)
            header.addWidget(btn)
        content_layout.addLayout(header)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        self.track_list = TrackListWidget(app_state)
        self.lyrics_view = LyricsView(self.engine, app_state.theme_color)
        splitter.addWidget(self.track_list)
        splitter.addWidget(self.lyrics_view)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)
        content_layout.addWidget(splitter, 1)

        self.player_bar = PlayerBar(app_state, self)
        outer.addWidget(self.player_bar)

        self.toasts = ToastManager(self)
        self.toasts.set_accent(app_state.theme_color)

        # --- wiring ---
        self.app_state.notification.connect(self.toasts.show_notify)
        self.app_state.authRequired.connect(self.open_auth_dialog)
        self.app_state.themeChanged.connect(self._on_theme_changed)
        self.app_state.sessionChanged.connect(lambda _s: self._refresh_view())

        self.sidebar.navigate.connect(self.show_view)
        self.sidebar.createPlaylistRequested.connect(self.create_playlist)
        self.sidebar.accountButtonClicked.connect(self._on_account_clicked)

        self.search_box.textChanged.connect(self._on_search_changed)

        self.track_list.playTrack.connect(self.play_from_view)
        self.track_list.toggleLike.connect(self.library.toggle_like)
        self.track_list.addToPlaylist.connect(self.library.add_track_to_playlist)
        self.track_list.openArtist.connect(lambda artist: self.show_view(VIEW_ARTIST, artist))

        self.btn_follow.clicked.connect(lambda: self.library.toggle_follow_artist(self._view_arg))
        self.btn_rename.clicked.connect(self.rename_playlist)
        self.btn_cover.clicked.connect(self.change_playlist_cover)
        self.btn_delete.clicked.connect(self.delete_playlist)

        self.engine.trackChanged.connect(lambda t: self.track_list.set_now_playing(t.id if t else None))
        self.engine.repeatModeChanged.connect(
            lambda mode: self.app_state.notify(f"Repeat: {mode.value}", "info")
        )

        self.library.catalogChanged.connect(lambda _tracks: self._refresh_view())
        self.library.playlistsChanged.connect(lambda _pls: self._refresh_view())
        self.library.likesChanged.connect(self._on_likes_changed)
        self.library.followedArtistsChanged.connect(lambda _a: self._refresh_view())
        self.library.playlistDeleted.connect(self._on_playlist_deleted)

        self.show_queued_notifications()
        self._refresh_view()
        self._apply_styles()

    # ------------------ views ------------------
    def show_view(self, view: str, arg: str = ""):
        self._view = view
        self._view_arg = arg or ""
        if view != VIEW_HOME:
            self.search_box.blockSignals(True)
            self.search_box.clear()
            self.search_box.blockSignals(False)
        self._refresh_view()

    def _on_search_changed(self, text: str):
        if self._view != VIEW_HOME:
            self._view, self._view_arg = VIEW_HOME, ""
        self._refresh_view()

    def _refresh_view(self):
        title, tracks = self._view_contents()
        self.lbl_view.setText(title)
        self.track_list.set_tracks(tracks)
        self._refresh_header_actions()

    def _view_contents(self):
        lib = self.library
        if self._view == VIEW_LIKED:
            return "Liked Songs", lib.liked_tracks()
        if self._view == VIEW_ARTISTS:
            followed = [a for a in lib.artists() if a in lib.followed_artists]
            tracks = [t for artist in followed for t in lib.artist_tracks(artist)]
            return "Followed Artists" if followed else "Followed Artists (none yet)", tracks
        if self._view == VIEW_ARTIST:
            return self._view_arg, lib.artist_tracks(self._view_arg)
        if self._view == VIEW_PLAYLIST:
            playlist = lib.find_playlist(self._view_arg)
            if playlist is None:
                return "Playlist not found", []
            return playlist.name, list(playlist.songs)

        query = self.search_box.text()
        if query.strip():
            return f'Results for "{query.strip()}"', lib.search(query)
        return "All Songs", list(lib.tracks)

    def _refresh_header_actions(self):
        is_artist = self._view == VIEW_ARTIST
        self.btn_follow.setVisible(is_artist)
        if is_artist:
            following = self._view_arg in self.library.followed_artists
            self.btn_follow.setText("Following" if following else "Follow")

        playlist = self.library.find_playlist(self._view_arg) if self._view == VIEW_PLAYLIST else None
        owner = playlist is not None and playlist.is_owned_by(self.app_state.user_id)
        for btn in (self.btn_rename, self.btn_cover, self.btn_delete):
            btn.setVisible(owner)

    def _on_likes_changed(self, liked):
        if self._view == VIEW_LIKED:
            self._refresh_view()
        else:
            self.track_list.set_liked(liked)

    def _on_playlist_deleted(self, playlist_id: str):
        if self._view == VIEW_PLAYLIST and self._view_arg == playlist_id:
            self.show_view(VIEW_HOME)

    # ------------------ playback ------------------
    def play_from_view(self, track):
        queue = [t for t in self.track_list.tracks() if t.url]
        self.engine.play(track, new_queue=queue)

    # ------------------ playlists ------------------
    def create_playlist(self):
        if not self.app_state.require_session():
            return
        dlg = CreatePlaylistDialog(self)
        if dlg.exec():
            name, cover, is_public = dlg.values()
            self.library.create_playlist(name, cover=cover, is_public=is_public)

    def rename_playlist(self):
        playlist = self.library.find_playlist(self._view_arg)
        if playlist is None:
            return
        name, ok = QInputDialog.getText(self, "Rename playlist", "Name", text=playlist.name)
        if ok:
            self.library.rename_playlist(playlist.id, name)

    def change_playlist_cover(self):
        playlist = self.library.find_playlist(self._view_arg)
        if playlist is None:
            return
        cover, ok = QInputDialog.getText(self, "Change cover", "Image URL", text=playlist.cover or "")
        if ok:
            self.library.update_playlist_cover(playlist.id, cover)

    def delete_playlist(self):
        playlist = self.library.find_playlist(self._view_arg)
        if playlist is None:
            return
        res = QMessageBox.question(
            self,
            "Delete playlist",
            f'Delete "{playlist.name}"? This cannot be undone.',
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if res == QMessageBox.StandardButton.Yes:
            self.library.delete_playlist(playlist.id)

    # ------------------ account ------------------
    def _on_account_clicked(self):
        if self.app_state.session is not None:
            self.app_state.sign_out()
            if self._view in (VIEW_LIKED, VIEW_ARTISTS):
                self.show_view(VIEW_HOME)
        else:
            self.open_auth_dialog()

    def open_auth_dialog(self):
        if self._auth_dialog is not None:
            self._auth_dialog.raise_()
            return
        self._auth_dialog = AuthDialog(self.app_state, self)
        self._auth_dialog.finished.connect(self._on_auth_dialog_closed)
        self._auth_dialog.open()

    def _on_auth_dialog_closed(self, _result):
        self._auth_dialog.deleteLater()
        self._auth_dialog = None

    # ------------------ theme + notifications ------------------
    def _on_theme_changed(self, color: str):
        self.toasts.set_accent(color)
        self.player_bar.set_accent(color)
        self.lyrics_view.set_accent(color)
        self._apply_styles()

    def show_queued_notifications(self):
        for n in self.app_state.queued_notifications:
            self.toasts.show_notify(n)
        self.app_state.queued_notifications.clear()

    def _apply_styles(self):
        accent = self.app_state.theme_color
        self.setStyleSheet(f"""
        QMainWindow, QWidget#Content {{ background: #020617; }}
        QLabel#ViewTitle {{ color: #f9fafb; font-size: 22px; font-weight: 700; padding: 8px 0; }}
        QLineEdit {{
            background: #0b1222; color: #e5e7eb; border: 1px solid #1f2937;
            border-radius: 14px; padding: 6px 12px;
        }}
        QLineEdit:focus {{ border-color: {accent}; }}
        QPushButton {{
            background: #111827; color: #e5e7eb; border: 1px solid #1f2937;
            border-radius: 8px; padding: 5px 10px;
        }}
        QPushButton:hover {{ border-color: {accent}; }}
        """)
