# ui/widgets/track_list_widget.py
from __future__ import annotations

from PySide6.QtCore import QItemSelectionModel, Qt, Signal
from PySide6.QtWidgets import QMenu, QTableView, QVBoxLayout, QWidget

from musichub.ui.models.track_table_model import TrackTableModel


class TrackListWidget(QWidget):
    """Table of the tracks of the current view (home, search, liked, artist, playlist)."""
    playTrack = Signal(object)            # Track
    toggleLike = Signal(str)              # track id
    addToPlaylist = Signal(str, object)   # playlist id, Track
    openArtist = Signal(str)

    def __init__(self, app_state):
        super().__init__()
        self.app_state = app_state

        self.table = QTableView()
        self.model = TrackTableModel([])
        self.table.setModel(self.model)

        self.table.setSelectionBehavior(QTableView.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QTableView.SelectionMode.SingleSelection)
        self.table.verticalHeader().setVisible(False)
        self.table.verticalHeader().setDefaultSectionSize(26)
        self.table.setShowGrid(False)
        self.table.setAlternatingRowColors(True)
        self.table.setObjectName("TrackTable")

        self.table.setColumnWidth(0, 40)
        self.table.setColumnWidth(1, 300)
        self.table.setColumnWidth(2, 200)
        self.table.setColumnWidth(3, 200)
        self.table.setColumnWidth(4, 30)
        self.table.horizontalHeader().setStretchLastSection(True)

        self.table.doubleClicked.connect(self._on_double_click)
        self.table.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.table.customContextMenuRequested.connect(self._on_context_menu)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.table)

        self._apply_styles()

    # -------------------------
    # External API
    # -------------------------
    def set_tracks(self, tracks):
        self.model.set_tracks(tracks)
        self.model.set_liked(self.app_state.library.liked)
        engine = self.app_state.engine
        self.set_now_playing(engine.current.id if engine.current else None)

    def tracks(self):
        return self.model.tracks()

    def set_liked(self, liked):
        self.model.set_liked(liked)

    def set_now_playing(self, track_id: str | None):
        self.model.set_now_playing(track_id)
        if track_id is None:
            return
        row = self.model.row_for_track_id(track_id)
        if row < 0:
            return  # not in this view
        idx = self.model.index(row, 0)
        sm = self.table.selectionModel()
        if sm is not None:
            sm.setCurrentIndex(idx, QItemSelectionModel.ClearAndSelect | QItemSelectionModel.Rows)

    def selected_track(self):
        idx = self.table.currentIndex()
        if not idx.isValid():
            return None
        return self.model.track_at(idx.row())

    # -------------------------
    # UI Events
    # -------------------------
    def _on_double_click(self, index):
        if not index.isValid():
            return
        track = self.model.track_at(index.row())
        if track is not None and track.url:
            self.playTrack.emit(track)

    def _on_context_menu(self, pos):
        idx = self.table.indexAt(pos)
        if not idx.isValid():
            return
        track = self.model.track_at(idx.row())
        if track is None:
            return

        library = self.app_state.library
        menu = QMenu(self)
        act_play = menu.addAction("Play")
        act_play.setEnabled(bool(track.url))
        act_like = menu.addAction("Remove from Liked Songs" if library.is_liked(track.id) else "Add to Liked Songs")

        add_menu = menu.addMenu("Add to playlist")
        playlist_actions = {}
        own = library.own_playlists()
        for pl in own:
            playlist_actions[add_menu.addAction(pl.name)] = pl.id
        if not own:
            add_menu.addAction("No playlists yet").setEnabled(False)

        act_artist = menu.addAction(f"Go to {track.artist}") if track.artist else None

        chosen = menu.exec(self.table.viewport().mapToGlobal(pos))
        if chosen is None:
            return
        if chosen == act_play:
            self.playTrack.emit(track)
        elif chosen == act_like:
            self.toggleLike.emit(track.id)
        elif chosen in playlist_actions:
            self.addToPlaylist.emit(playlist_actions[chosen], track)
        elif act_artist is not None and chosen == act_artist:
            self.openArtist.emit(track.artist)

    def _apply_styles(self):
        self.setStyleSheet("""
        QTableView#TrackTable {
            background-color: #020617;
            alternate-background-color: #030712;
            border: none;
            color: #e5e7eb;
            selection-background-color: rgba(255, 255, 255, 0.08);
            selection-color: #e5e7eb;
        }
        QHeaderView::section {
            background-color: #020617;
            color: #9ca3af;
            padding: 4px 6px;
            border: none;
            border-bottom: 1px solid #111827;
            font-size: 11px;
        }
        QTableView::item { padding: 4px 6px; }
        """)
