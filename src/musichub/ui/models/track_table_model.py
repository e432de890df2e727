# ui/models/track_table_model.py
from __future__ import annotations

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from musichub.core.lrc import format_timestamp
from musichub.core.models import Track


class TrackTableModel(QAbstractTableModel):
    COLUMNS = ["#", "Title", "Artist", "Album", "", "Time"]

    def __init__(self, tracks=()):
        super().__init__()
        self._tracks: list[Track] = list(tracks)
        self._liked: frozenset[str] = frozenset()
        self._now_playing: str | None = None

    def set_tracks(self, tracks):
        self.beginResetModel()
        self._tracks = list(tracks)
        self.endResetModel()

    def set_liked(self, liked: frozenset[str]):
        self._liked = frozenset(liked)
        if self._tracks:
            self.dataChanged.emit(self.index(0, 4), self.index(len(self._tracks) - 1, 4))

    def set_now_playing(self, track_id: str | None):
        self._now_playing = track_id
        if self._tracks:
            self.dataChanged.emit(self.index(0, 0), self.index(len(self._tracks) - 1, len(self.COLUMNS) - 1))

    def rowCount(self, parent=QModelIndex()) -> int:
        return len(self._tracks)

    def columnCount(self, parent=QModelIndex()) -> int:
        return len(self.COLUMNS)

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if role != Qt.DisplayRole or orientation != Qt.Horizontal:
            return None
        return self.COLUMNS[section]

    def data(self, index: QModelIndex, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        track = self._tracks[index.row()]
        col = index.column()

        if role == Qt.DisplayRole:
            # dangling playlist entries may only carry an id
            if col == 0:
                return "▶" if track.id == self._now_playing else str(index.row() + 1)
            if col == 1:
                return track.title or "Unknown track"
            if col == 2:
                return track.artist
            if col == 3:
                return track.album or ""
            if col == 4:
                return "♥" if track.id in self._liked else ""
            if col == 5:
                return format_timestamp(track.duration) if track.duration else ""
        if role == Qt.TextAlignmentRole and col in (0, 4, 5):
            return int(Qt.AlignCenter)
        if role == Qt.UserRole:
            return track
        return None

    def track_at(self, row: int) -> Track | None:
        if row < 0 or row >= len(self._tracks):
            return None
        return self._tracks[row]

    def row_for_track_id(self, track_id: str) -> int:
        for i, t in enumerate(self._tracks):
            if t.id == track_id:
                return i
        return -1

    def tracks(self) -> list[Track]:
        return list(self._tracks)
