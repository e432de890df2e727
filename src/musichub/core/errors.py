# core/errors.py
from __future__ import annotations


class MusicHubError(Exception):
    """Base class for every error raised by musichub."""


class NotAuthenticated(MusicHubError):
    """A mutation was attempted without a signed-in user."""


class Forbidden(MusicHubError):
    """The acting user does not own the playlist being changed."""


class Duplicate(MusicHubError):
    """The track is already part of the playlist."""


class RemoteFailure(MusicHubError):
    """Network or server error while talking to the backend."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthError(MusicHubError):
    """Credentials were rejected (unknown user, wrong password, taken email...)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LyricFetchFailure(MusicHubError):
    """A lyric resource could not be downloaded. Shown as "no lyrics"."""


class PlaybackError(MusicHubError):
    """The media transport refused to start playback."""
