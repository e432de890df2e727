# core/library.py
from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Optional

from PySide6.QtCore import QObject, Signal

from musichub.core.errors import Duplicate, Forbidden, NotAuthenticated
from musichub.core.models import Playlist, Session, Track
from musichub.core.utils import search_tracks, tracks_by_artist, unique_artists

logger = logging.getLogger(__name__)

DEFAULT_PLAYLIST_COVER = "https://i.ibb.co/6cGhCCj6/Meteor-1-MIFEN.jpg"


class Outcome(Enum):
    ACCEPTED = "accepted"                    # applied locally and/or sent to the server
    NOT_AUTHENTICATED = "not_authenticated"
    FORBIDDEN = "forbidden"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    INVALID = "invalid"


class LibraryCoordinator(QObject):
    """
    Catalog, playlists, likes and followed artists of the signed-in user.

    Likes are optimistic with rollback: the local set flips first and is
    reverted if the server call fails. Playlist edits (rename, cover, add
    track) are optimistic without rollback: on failure the local state is
    kept and only a "sync failed" notice is shown. Create and delete wait
    for the server, which owns playlist identity.
    """
    catalogChanged = Signal(object)          # list[Track]
    playlistsChanged = Signal(object)        # list[Playlist]
    likesChanged = Signal(object)            # frozenset[str]
    followedArtistsChanged = Signal(object)  # frozenset[str]
    playlistDeleted = Signal(str)            # playlist id

    def __init__(self, app_state, client, runner, parent=None):
        super().__init__(parent)
        self.app_state = app_state
        self.client = client
        self.runner = runner

        self.tracks: list[Track] = []
        self.playlists: list[Playlist] = []
        self._liked: set[str] = set()
        self._followed: set[str] = set()

        self.app_state.sessionChanged.connect(self._on_session_changed)
        if self.app_state.session is not None:
            self._liked = set(self.app_state.session.liked_songs)

    # ----------------------------
    # Read side
    # ----------------------------

    @property
    def liked(self) -> frozenset[str]:
        return frozenset(self._liked)

    @property
    def followed_artists(self) -> frozenset[str]:
        return frozenset(self._followed)

    def is_liked(self, track_id: str) -> bool:
        return track_id in self._liked

    def liked_tracks(self) -> list[Track]:
        return [t for t in self.tracks if t.id in self._liked]

    def search(self, query: str) -> list[Track]:
        return search_tracks(self.tracks, query)

    def artist_tracks(self, artist: str) -> list[Track]:
        return tracks_by_artist(self.tracks, artist)

    def artists(self) -> list[str]:
        return unique_artists(self.tracks)

    def find_playlist(self, playlist_id: str) -> Optional[Playlist]:
        for pl in self.playlists:
            if pl.id == playlist_id:
                return pl
        return None

    def own_playlists(self) -> list[Playlist]:
        uid = self.app_state.user_id
        return [pl for pl in self.playlists if pl.is_owned_by(uid)]

    # ----------------------------
    # Loading
    # ----------------------------

    def load_catalog(self) -> None:
        self.runner.submit(
            self.client.list_tracks,
            on_success=self._on_catalog_loaded,
            on_failure=self._on_catalog_failed,
        )

    def _on_catalog_loaded(self, tracks: list[Track]) -> None:
        self.tracks = list(tracks)
        self.catalogChanged.emit(list(self.tracks))

    def _on_catalog_failed(self, exc: Exception) -> None:
        logger.error("Failed to load songs: %s", exc)
        self.app_state.notify("Could not load songs from the server", "error")

    def refresh_playlists(self) -> None:
        viewer_id = self.app_state.user_id
        self.runner.submit(
            lambda: self.client.list_playlists(viewer_id),
            on_success=lambda playlists: self._on_playlists_loaded(viewer_id, playlists),
            on_failure=lambda exc: logger.error("Failed to load playlists: %s", exc),
        )

    def _on_playlists_loaded(self, viewer_id: str | None, playlists: list[Playlist]) -> None:
        if viewer_id != self.app_state.user_id:
            logger.debug("Discarding playlists fetched for a previous session")
            return
        self._set_playlists(playlists)

    def _set_playlists(self, playlists: list[Playlist]) -> None:
        self.playlists = list(playlists)
        self.playlistsChanged.emit(list(self.playlists))

    def _replace_playlist(self, updated: Playlist) -> None:
        self._set_playlists([updated if pl.id == updated.id else pl for pl in self.playlists])

    def _on_session_changed(self, session: Session | None) -> None:
        if session is None:
            self._liked.clear()
            self._followed.clear()
            self.likesChanged.emit(self.liked)
            self.followedArtistsChanged.emit(self.followed_artists)
            self._set_playlists([pl for pl in self.playlists if pl.is_visible_to(None)])
        else:
            self._liked = set(session.liked_songs)
            self.likesChanged.emit(self.liked)
        self.refresh_playlists()

    # ----------------------------
    # Guards
    # ----------------------------

    def _require_session(self) -> Session:
        if not self.app_state.require_session():
            raise NotAuthenticated()
        return self.app_state.session

    def _require_own_playlist(self, playlist_id: str, user_id: str) -> Playlist:
        target = self.find_playlist(playlist_id)
        if target is None:
            raise LookupError(playlist_id)
        if not target.is_owned_by(user_id):
            raise Forbidden(playlist_id)
        return target

    # ----------------------------
    # Likes
    # ----------------------------

    def toggle_like(self, track_id: str) -> Outcome:
        try:
            session = self._require_session()
        except NotAuthenticated:
            return Outcome.NOT_AUTHENTICATED

        was_liked = track_id in self._liked
        self._apply_like(track_id, not was_liked)
        self.app_state.notify("Removed from Liked Songs" if was_liked else "Added to Liked Songs", "success")

        user_id = session.user_id
        self.runner.submit(
            lambda: self.client.set_like(user_id, track_id, not was_liked),
            on_failure=lambda exc: self._rollback_like(user_id, track_id, was_liked, exc),
        )
        return Outcome.ACCEPTED

    def _apply_like(self, track_id: str, liked: bool) -> None:
        if liked:
            self._liked.add(track_id)
        else:
            self._liked.discard(track_id)
        self.app_state.store_liked_songs(sorted(self._liked))
        self.likesChanged.emit(self.liked)

    def _rollback_like(self, user_id: str, track_id: str, was_liked: bool, exc: Exception) -> None:
        logger.error("Like sync failed: %s", exc)
        if self.app_state.user_id != user_id:
            return  # signed out meanwhile; nothing to restore
        self._apply_like(track_id, was_liked)
        self.app_state.notify("Network error, change not saved", "error")

    # ----------------------------
    # Followed artists (local only)
    # ----------------------------

    def toggle_follow_artist(self, artist: str) -> Outcome:
        if not self.app_state.require_session():
            return Outcome.NOT_AUTHENTICATED
        if artist in self._followed:
            self._followed.discard(artist)
            self.app_state.notify(f"Unfollowed {artist}", "info")
        else:
            self._followed.add(artist)
            self.app_state.notify(f"Following {artist}", "success")
        self.followedArtistsChanged.emit(self.followed_artists)
        return Outcome.ACCEPTED

    # ----------------------------
    # Playlists
    # ----------------------------

    def create_playlist(self, name: str, cover: Optional[str] = None, is_public: bool = False) -> Outcome:
        try:
            session = self._require_session()
        except NotAuthenticated:
            return Outcome.NOT_AUTHENTICATED

        name = (name or "").strip()
        if not name:
            self.app_state.notify("Playlist name cannot be empty", "error")
            return Outcome.INVALID

        user_id = session.user_id
        description = "Public playlist" if is_public else "New playlist"
        self.runner.submit(
            lambda: self.client.create_playlist(user_id, name, cover or DEFAULT_PLAYLIST_COVER, is_public, description),
            on_success=self._on_playlist_created,
            on_failure=lambda exc: self._on_remote_error("Could not create playlist", exc),
        )
        return Outcome.ACCEPTED

    def _on_playlist_created(self, playlist: Playlist) -> None:
        if self.find_playlist(playlist.id) is None:
            self._set_playlists(self.playlists + [playlist])
        self.app_state.notify(f'Playlist "{playlist.name}" created', "success")

    def delete_playlist(self, playlist_id: str) -> Outcome:
        try:
            session = self._require_session()
            self._require_own_playlist(playlist_id, session.user_id)
        except NotAuthenticated:
            return Outcome.NOT_AUTHENTICATED
        except LookupError:
            return Outcome.NOT_FOUND
        except Forbidden:
            self.app_state.notify("You can only delete your own playlists", "error")
            return Outcome.FORBIDDEN

        user_id = session.user_id
        self.runner.submit(
            lambda: self.client.delete_playlist(playlist_id, user_id),
            on_success=lambda _: self._on_playlist_deleted(playlist_id),
            on_failure=lambda exc: self._on_remote_error("Could not delete playlist", exc),
        )
        return Outcome.ACCEPTED

    def _on_playlist_deleted(self, playlist_id: str) -> None:
        self._set_playlists([pl for pl in self.playlists if pl.id != playlist_id])
        self.playlistDeleted.emit(playlist_id)
        self.app_state.notify("Playlist deleted", "success")

    def rename_playlist(self, playlist_id: str, new_name: str) -> Outcome:
        new_name = (new_name or "").strip()
        return self._edit_playlist(
            playlist_id,
            {"name": new_name} if new_name else None,
            lambda pl: replace(pl, name=new_name),
            "Playlist renamed",
        )

    def update_playlist_cover(self, playlist_id: str, new_cover: str) -> Outcome:
        new_cover = (new_cover or "").strip()
        return self._edit_playlist(
            playlist_id,
            {"cover": new_cover} if new_cover else None,
            lambda pl: replace(pl, cover=new_cover),
            "Cover updated",
        )

    def _edit_playlist(self, playlist_id, patch, apply, done_message) -> Outcome:
        try:
            session = self._require_session()
        except NotAuthenticated:
            return Outcome.NOT_AUTHENTICATED
        if patch is None:
            return Outcome.INVALID
        try:
            target = self._require_own_playlist(playlist_id, session.user_id)
        except LookupError:
            return Outcome.NOT_FOUND
        except Forbidden:
            self.app_state.notify("You don't have permission to edit this playlist", "error")
            return Outcome.FORBIDDEN

        self._replace_playlist(apply(target))
        self._push_playlist_patch(playlist_id, patch, session.user_id, done_message)
        return Outcome.ACCEPTED

    def add_track_to_playlist(self, playlist_id: str, track: Track) -> Outcome:
        try:
            session = self._require_session()
            target = self._require_own_playlist(playlist_id, session.user_id)
            if target.contains(track.id):
                raise Duplicate(track.id)
        except NotAuthenticated:
            return Outcome.NOT_AUTHENTICATED
        except LookupError:
            return Outcome.NOT_FOUND
        except Forbidden:
            self.app_state.notify("You can only edit your own playlists", "error")
            return Outcome.FORBIDDEN
        except Duplicate:
            self.app_state.notify("Song is already in this playlist", "error")
            return Outcome.DUPLICATE

        songs = target.songs + (track,)
        # an empty playlist takes the cover of its first song
        cover = track.cover if not target.songs and track.cover else target.cover
        self._replace_playlist(replace(target, songs=songs, cover=cover))
        self.app_state.notify("Added to playlist", "success")

        patch = {"songs": [t.id for t in songs]}
        if cover:
            patch["cover"] = cover
        self._push_playlist_patch(playlist_id, patch, session.user_id, None)
        return Outcome.ACCEPTED

    def _push_playlist_patch(self, playlist_id: str, patch: dict, user_id: str, done_message: str | None) -> None:
        # No rollback here: the local edit stands even if the server rejects it.
        def on_success(_playlist):
            if done_message:
                self.app_state.notify(done_message, "success")

        self.runner.submit(
            lambda: self.client.update_playlist(playlist_id, patch, user_id),
            on_success=on_success,
            on_failure=lambda exc: self._on_remote_error("Sync failed, check your network", exc),
        )

    def _on_remote_error(self, message: str, exc: Exception) -> None:
        logger.error("%s: %s", message, exc)
        self.app_state.notify(message, "error")
