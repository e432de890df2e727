from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urljoin, urlsplit

import requests

from musichub.core.errors import AuthError, LyricFetchFailure, RemoteFailure
from musichub.core.models import Playlist, Session, Track

logger = logging.getLogger(__name__)


class MusicHubClient:
    """
    Thin REST client for the MusicHub backend.

    Every transport error and every HTTP status >= 400 surfaces as
    RemoteFailure; callers decide what to roll back.
    """

    def __init__(self, base_url: str = "http://localhost:5000/api", user_agent: str = "musichub-desktop/0.1", timeout: float = 15):
        self.base_url = base_url.rstrip("/")
        parts = urlsplit(self.base_url)
        self.origin = f"{parts.scheme}://{parts.netloc}" if parts.netloc else ""
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    # ----------------------------
    # Transport
    # ----------------------------

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise RemoteFailure(f"Cannot reach server: {e}") from e

        if r.status_code >= 400:
            raise RemoteFailure(self._error_message(r), status_code=r.status_code)

        try:
            return r.json()
        except ValueError as e:
            raise RemoteFailure(f"Malformed response from {path}") from e

    @staticmethod
    def _error_message(r: requests.Response) -> str:
        try:
            data = r.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return f"HTTP {r.status_code}"

    def resolve(self, ref: str) -> str:
        """Make server-relative references ("/media/x.lrc") absolute."""
        if ref.startswith("/") and self.origin:
            return urljoin(self.origin, ref)
        return ref

    # ----------------------------
    # Catalog
    # ----------------------------

    def list_tracks(self) -> list[Track]:
        data = self._request("GET", "/songs")
        return [Track.from_api(s, self.origin) for s in data or []]

    def get_track(self, track_id: str) -> Track:
        return Track.from_api(self._request("GET", f"/songs/{track_id}"), self.origin)

    # ----------------------------
    # Playlists
    # ----------------------------

    def list_playlists(self, viewer_id: Optional[str] = None) -> list[Playlist]:
        params = {"userId": viewer_id} if viewer_id else {}
        data = self._request("GET", "/playlists", params=params)
        return [Playlist.from_api(p, self.origin) for p in data or []]

    def create_playlist(
        self,
        owner_id: str,
        name: str,
        cover: Optional[str] = None,
        is_public: bool = False,
        description: Optional[str] = None,
    ) -> Playlist:
        payload: dict[str, Any] = {"userId": owner_id, "name": name, "isPublic": bool(is_public)}
        if cover:
            payload["cover"] = cover
        if description:
            payload["description"] = description
        return Playlist.from_api(self._request("POST", "/playlists", json=payload), self.origin)

    def update_playlist(self, playlist_id: str, patch: dict[str, Any], owner_id: str) -> Playlist:
        # patch keys: name, cover, songs (list of track ids)
        payload = dict(patch)
        payload["userId"] = owner_id
        return Playlist.from_api(self._request("PUT", f"/playlists/{playlist_id}", json=payload), self.origin)

    def delete_playlist(self, playlist_id: str, owner_id: str) -> None:
        self._request("DELETE", f"/playlists/{playlist_id}", params={"userId": owner_id})

    # ----------------------------
    # Identity & likes
    # ----------------------------

    def register(self, username: str, email: str, password: str) -> Session:
        return self._auth("/register", {"username": username, "email": email, "password": password})

    def login(self, email: str, password: str) -> Session:
        return self._auth("/login", {"email": email, "password": password})

    def _auth(self, path: str, payload: dict[str, str]) -> Session:
        try:
            data = self._request("POST", path, json=payload)
        except RemoteFailure as e:
            if e.status_code in (400, 401, 409):
                raise AuthError(e.message) from e
            raise

        if not data.get("success"):
            raise AuthError(str(data.get("message") or "Authentication failed"))
        return Session.from_api(data.get("user") or {})

    def set_like(self, user_id: str, track_id: str, liked: bool) -> frozenset[str]:
        data = self._request("POST", "/user/like", json={"userId": user_id, "songId": track_id, "liked": bool(liked)})
        return frozenset(str(x) for x in data.get("likedSongs") or [])

    # ----------------------------
    # Lyrics
    # ----------------------------

    def fetch_lyrics(self, ref: str) -> str:
        url = self.resolve(ref)
        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise LyricFetchFailure(f"Lyrics download failed: {e}") from e

        if r.status_code == 404:
            raise LyricFetchFailure(f"Lyrics not found: {url}")
        if not r.ok:
            raise LyricFetchFailure(f"Lyrics download failed: HTTP {r.status_code}")

        # .lrc files are commonly served without a charset
        if not r.encoding or r.encoding.lower() == "iso-8859-1":
            r.encoding = "utf-8"
        return r.text
