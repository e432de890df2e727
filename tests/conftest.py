"""Test configuration and fixtures"""

import pytest
from unittest.mock import Mock

from PySide6.QtCore import QCoreApplication, QObject, Signal

from musichub.core.errors import PlaybackError
from musichub.core.library import LibraryCoordinator
from musichub.core.models import Playlist, Session, Track
from musichub.core.state import AppState


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """One QCoreApplication for the whole run (signals, QObject parents)"""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class SyncRunner:
    """Runs submitted work immediately on the calling thread"""

    def __init__(self):
        self.calls = 0

    def submit(self, fn, on_success=None, on_failure=None):
        self.calls += 1
        try:
            result = fn()
        except Exception as e:
            if on_failure is None:
                raise
            on_failure(e)
            return None
        if on_success is not None:
            on_success(result)
        return None


class DeferredRunner:
    """Holds submitted work until the test resolves it, in any order"""

    def __init__(self):
        self.pending = []

    def submit(self, fn, on_success=None, on_failure=None):
        self.pending.append((fn, on_success, on_failure))

    def run(self, index=0):
        fn, on_success, on_failure = self.pending.pop(index)
        try:
            result = fn()
        except Exception as e:
            if on_failure is not None:
                on_failure(e)
            return
        if on_success is not None:
            on_success(result)

    def run_all(self):
        while self.pending:
            self.run(0)


class FakeTransport(QObject):
    """Stands in for the QMediaPlayer-backed Player"""
    positionChanged = Signal(int)
    durationChanged = Signal(int)
    ended = Signal()
    errorOccurred = Signal(str)

    def __init__(self):
        super().__init__()
        self.source = None
        self.playing = False
        self.fail_play = False
        self.volume = 0.7
        self.seeks = []
        self.loads = []

    def load(self, ref):
        self.source = ref
        self.loads.append(ref)

    def play(self):
        if self.fail_play:
            raise PlaybackError("autoplay blocked")
        self.playing = True

    def pause(self):
        self.playing = False

    def stop(self):
        self.playing = False

    def seek_ms(self, ms):
        self.seeks.append(ms)

    def set_volume(self, v):
        self.volume = v


def make_track(track_id, title=None, artist="Artist", cover=None, lyrics=None, lrc_url=None, duration=200.0):
    return Track(
        id=track_id,
        title=title or f"Song {track_id}",
        artist=artist,
        url=f"http://localhost:5000/media/{track_id}.mp3",
        cover=cover,
        duration=duration,
        lyrics=lyrics,
        lrc_url=lrc_url,
    )


@pytest.fixture
def tracks():
    return [make_track("t1", artist="Alpha"), make_track("t2", artist="Beta"), make_track("t3", artist="Alpha")]


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def immediate():
    """Schedule callable that runs the deferred playback start right away"""
    return lambda fn: fn()


@pytest.fixture
def session():
    return Session(user_id="u1", username="alice", email="alice@example.com", liked_songs=("t2",))


@pytest.fixture
def app_state():
    return AppState(None)


@pytest.fixture
def mock_client():
    client = Mock()
    client.list_playlists.return_value = []
    client.list_tracks.return_value = []
    return client


@pytest.fixture
def sync_runner():
    return SyncRunner()


@pytest.fixture
def library(app_state, mock_client, sync_runner):
    return LibraryCoordinator(app_state, mock_client, sync_runner)


@pytest.fixture
def notices(app_state):
    """Collects (message, type) of every notification"""
    seen = []
    app_state.notification.connect(lambda n: seen.append((n.message, n.notify_type)))
    return seen


def make_playlist(playlist_id, owner_id="u1", songs=(), cover=None, is_public=False, name=None):
    return Playlist(
        id=playlist_id,
        name=name or f"Playlist {playlist_id}",
        owner_id=owner_id,
        cover=cover,
        is_public=is_public,
        songs=tuple(songs),
    )
