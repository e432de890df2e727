"""Tests for likes, followed artists and playlist mutations"""

import pytest
from unittest.mock import Mock

from musichub.core.errors import RemoteFailure
from musichub.core.library import DEFAULT_PLAYLIST_COVER, LibraryCoordinator, Outcome

from conftest import DeferredRunner, make_playlist, make_track


@pytest.fixture
def signed_in(app_state, library, session, tracks):
    """Signed-in library with the catalog loaded"""
    library.tracks = list(tracks)
    app_state.sign_in(session)
    return library


class TestAuthGuard:
    """Mutations without a session"""

    @pytest.mark.parametrize("action", [
        lambda lib, t: lib.toggle_like(t.id),
        lambda lib, t: lib.toggle_follow_artist(t.artist),
        lambda lib, t: lib.create_playlist("Mix"),
        lambda lib, t: lib.delete_playlist("p1"),
        lambda lib, t: lib.rename_playlist("p1", "New"),
        lambda lib, t: lib.update_playlist_cover("p1", "http://img"),
        lambda lib, t: lib.add_track_to_playlist("p1", t),
    ])
    def test_rejected_without_side_effects(self, library, app_state, mock_client, notices, tracks, action):
        auth_prompts = []
        app_state.authRequired.connect(lambda: auth_prompts.append(True))

        outcome = action(library, tracks[0])

        assert outcome is Outcome.NOT_AUTHENTICATED
        assert auth_prompts == [True]
        assert notices == [("Please sign in to use this feature", "error")]
        mock_client.set_like.assert_not_called()
        mock_client.create_playlist.assert_not_called()
        mock_client.update_playlist.assert_not_called()
        mock_client.delete_playlist.assert_not_called()
        assert library.liked == frozenset()


class TestLikes:
    """Optimistic likes with rollback"""

    def test_session_seeds_liked_set(self, signed_in):
        assert signed_in.liked == frozenset({"t2"})
        assert [t.id for t in signed_in.liked_tracks()] == ["t2"]

    def test_like_applies_and_syncs(self, signed_in, app_state, mock_client, notices):
        outcome = signed_in.toggle_like("t1")

        assert outcome is Outcome.ACCEPTED
        assert signed_in.is_liked("t1")
        assert app_state.session.liked_songs == ("t1", "t2")
        mock_client.set_like.assert_called_once_with("u1", "t1", True)
        assert ("Added to Liked Songs", "success") in notices

    def test_unlike(self, signed_in, mock_client, notices):
        signed_in.toggle_like("t2")

        assert not signed_in.is_liked("t2")
        mock_client.set_like.assert_called_once_with("u1", "t2", False)
        assert ("Removed from Liked Songs", "success") in notices

    def test_failed_like_rolls_back(self, signed_in, mock_client, notices):
        mock_client.set_like.side_effect = RemoteFailure("offline")

        signed_in.toggle_like("t1")

        assert not signed_in.is_liked("t1")
        assert signed_in.liked == frozenset({"t2"})
        assert notices[-1] == ("Network error, change not saved", "error")

    def test_rollback_skipped_after_sign_out(self, app_state, mock_client, session, tracks):
        runner = DeferredRunner()
        library = LibraryCoordinator(app_state, mock_client, runner)
        library.tracks = list(tracks)
        app_state.sign_in(session)
        runner.run_all()
        mock_client.set_like.side_effect = RemoteFailure("offline")

        library.toggle_like("t1")
        app_state.sign_out()
        runner.run_all()

        assert library.liked == frozenset()

    def test_likes_changed_emitted(self, signed_in):
        seen = []
        signed_in.likesChanged.connect(seen.append)

        signed_in.toggle_like("t3")

        assert seen == [frozenset({"t2", "t3"})]


class TestFollowArtists:

    def test_follow_and_unfollow(self, signed_in, notices):
        signed_in.toggle_follow_artist("Alpha")
        assert signed_in.followed_artists == frozenset({"Alpha"})

        signed_in.toggle_follow_artist("Alpha")
        assert signed_in.followed_artists == frozenset()
        assert notices[-2:] == [("Following Alpha", "success"), ("Unfollowed Alpha", "info")]

    def test_cleared_on_sign_out(self, signed_in, app_state):
        signed_in.toggle_follow_artist("Beta")

        app_state.sign_out()

        assert signed_in.followed_artists == frozenset()


class TestAddTrack:
    """Adding a track to a playlist"""

    def test_adds_and_syncs(self, signed_in, mock_client, tracks, notices):
        signed_in.playlists = [make_playlist("p1", songs=[tracks[0]], cover="http://c/p1.jpg")]

        outcome = signed_in.add_track_to_playlist("p1", tracks[1])

        assert outcome is Outcome.ACCEPTED
        assert signed_in.find_playlist("p1").track_ids() == ["t1", "t2"]
        mock_client.update_playlist.assert_called_once_with(
            "p1", {"songs": ["t1", "t2"], "cover": "http://c/p1.jpg"}, "u1"
        )
        assert ("Added to playlist", "success") in notices

    def test_empty_playlist_takes_track_cover(self, signed_in, mock_client):
        signed_in.playlists = [make_playlist("p1")]
        track = make_track("t7", cover="http://c/t7.jpg")

        signed_in.add_track_to_playlist("p1", track)

        assert signed_in.find_playlist("p1").cover == "http://c/t7.jpg"
        patch = mock_client.update_playlist.call_args[0][1]
        assert patch == {"songs": ["t7"], "cover": "http://c/t7.jpg"}

    def test_existing_cover_kept(self, signed_in, tracks):
        signed_in.playlists = [make_playlist("p1", songs=[tracks[0]], cover="http://c/own.jpg")]

        signed_in.add_track_to_playlist("p1", make_track("t7", cover="http://c/t7.jpg"))

        assert signed_in.find_playlist("p1").cover == "http://c/own.jpg"

    def test_duplicate_rejected(self, signed_in, mock_client, tracks, notices):
        signed_in.playlists = [make_playlist("p1", songs=[tracks[0]])]

        outcome = signed_in.add_track_to_playlist("p1", tracks[0])

        assert outcome is Outcome.DUPLICATE
        assert signed_in.find_playlist("p1").track_ids() == ["t1"]
        mock_client.update_playlist.assert_not_called()
        assert notices[-1] == ("Song is already in this playlist", "error")

    def test_foreign_playlist_rejected_before_duplicate_check(self, signed_in, mock_client, tracks, notices):
        signed_in.playlists = [make_playlist("p2", owner_id="u2", songs=[tracks[0]], is_public=True)]

        outcome = signed_in.add_track_to_playlist("p2", tracks[0])

        assert outcome is Outcome.FORBIDDEN
        mock_client.update_playlist.assert_not_called()
        assert notices[-1] == ("You can only edit your own playlists", "error")

    def test_unknown_playlist(self, signed_in, tracks):
        assert signed_in.add_track_to_playlist("missing", tracks[0]) is Outcome.NOT_FOUND

    def test_sync_failure_keeps_local_change(self, signed_in, mock_client, tracks, notices):
        """Playlist edits are not rolled back when the server call fails"""
        mock_client.update_playlist.side_effect = RemoteFailure("offline")
        signed_in.playlists = [make_playlist("p1")]

        signed_in.add_track_to_playlist("p1", tracks[2])

        assert signed_in.find_playlist("p1").track_ids() == ["t3"]
        assert notices[-1] == ("Sync failed, check your network", "error")


class TestEditPlaylist:
    """Rename and cover changes"""

    def test_rename(self, signed_in, mock_client, notices):
        signed_in.playlists = [make_playlist("p1", name="Old")]

        outcome = signed_in.rename_playlist("p1", "  New  ")

        assert outcome is Outcome.ACCEPTED
        assert signed_in.find_playlist("p1").name == "New"
        mock_client.update_playlist.assert_called_once_with("p1", {"name": "New"}, "u1")
        assert notices[-1] == ("Playlist renamed", "success")

    def test_rename_failure_keeps_local_name(self, signed_in, mock_client, notices):
        mock_client.update_playlist.side_effect = RemoteFailure("offline")
        signed_in.playlists = [make_playlist("p1", name="Old")]

        signed_in.rename_playlist("p1", "New")

        assert signed_in.find_playlist("p1").name == "New"
        assert notices[-1] == ("Sync failed, check your network", "error")

    def test_empty_name_is_invalid(self, signed_in, mock_client):
        signed_in.playlists = [make_playlist("p1", name="Old")]

        assert signed_in.rename_playlist("p1", "   ") is Outcome.INVALID
        assert signed_in.find_playlist("p1").name == "Old"
        mock_client.update_playlist.assert_not_called()

    def test_foreign_playlist_cannot_be_renamed(self, signed_in, notices):
        signed_in.playlists = [make_playlist("p2", owner_id="u2", is_public=True, name="Theirs")]

        assert signed_in.rename_playlist("p2", "Mine") is Outcome.FORBIDDEN
        assert signed_in.find_playlist("p2").name == "Theirs"
        assert notices[-1] == ("You don't have permission to edit this playlist", "error")

    def test_update_cover(self, signed_in, mock_client):
        signed_in.playlists = [make_playlist("p1")]

        signed_in.update_playlist_cover("p1", "http://c/new.jpg")

        assert signed_in.find_playlist("p1").cover == "http://c/new.jpg"
        mock_client.update_playlist.assert_called_once_with("p1", {"cover": "http://c/new.jpg"}, "u1")


class TestCreateDelete:
    """Remote-first create and delete"""

    def test_create_waits_for_server(self, app_state, mock_client, session):
        runner = DeferredRunner()
        library = LibraryCoordinator(app_state, mock_client, runner)
        app_state.sign_in(session)
        runner.run_all()
        mock_client.create_playlist.return_value = make_playlist("p9", name="Mix")

        outcome = library.create_playlist("Mix")

        assert outcome is Outcome.ACCEPTED
        assert library.playlists == []
        runner.run_all()
        assert [pl.id for pl in library.playlists] == ["p9"]
        mock_client.create_playlist.assert_called_once_with(
            "u1", "Mix", DEFAULT_PLAYLIST_COVER, False, "New playlist"
        )

    def test_create_public_with_cover(self, signed_in, mock_client, notices):
        mock_client.create_playlist.return_value = make_playlist("p9", name="Open", is_public=True)

        signed_in.create_playlist("Open", cover="http://c/x.jpg", is_public=True)

        mock_client.create_playlist.assert_called_once_with(
            "u1", "Open", "http://c/x.jpg", True, "Public playlist"
        )
        assert notices[-1] == ('Playlist "Open" created', "success")

    def test_create_empty_name(self, signed_in, mock_client, notices):
        assert signed_in.create_playlist("  ") is Outcome.INVALID
        mock_client.create_playlist.assert_not_called()
        assert notices[-1] == ("Playlist name cannot be empty", "error")

    def test_create_failure(self, signed_in, mock_client, notices):
        mock_client.create_playlist.side_effect = RemoteFailure("offline")

        signed_in.create_playlist("Mix")

        assert signed_in.playlists == []
        assert notices[-1] == ("Could not create playlist", "error")

    def test_delete(self, signed_in, mock_client, notices):
        deleted = []
        signed_in.playlistDeleted.connect(deleted.append)
        signed_in.playlists = [make_playlist("p1"), make_playlist("p2")]

        outcome = signed_in.delete_playlist("p1")

        assert outcome is Outcome.ACCEPTED
        mock_client.delete_playlist.assert_called_once_with("p1", "u1")
        assert [pl.id for pl in signed_in.playlists] == ["p2"]
        assert deleted == ["p1"]
        assert notices[-1] == ("Playlist deleted", "success")

    def test_delete_failure_keeps_playlist(self, signed_in, mock_client):
        mock_client.delete_playlist.side_effect = RemoteFailure("offline")
        signed_in.playlists = [make_playlist("p1")]

        signed_in.delete_playlist("p1")

        assert signed_in.find_playlist("p1") is not None

    def test_delete_foreign(self, signed_in, mock_client, notices):
        signed_in.playlists = [make_playlist("p2", owner_id="u2", is_public=True)]

        assert signed_in.delete_playlist("p2") is Outcome.FORBIDDEN
        mock_client.delete_playlist.assert_not_called()
        assert notices[-1] == ("You can only delete your own playlists", "error")


class TestSessionTransitions:
    """Playlist visibility and refresh around sign-in and sign-out"""

    def test_sign_out_keeps_only_public(self, signed_in, app_state, mock_client):
        signed_in.playlists = [
            make_playlist("mine", is_public=False),
            make_playlist("shared", is_public=True),
            make_playlist("seeded", owner_id=None, is_public=True),
        ]
        mock_client.list_playlists.side_effect = RemoteFailure("offline")

        app_state.sign_out()

        assert [pl.id for pl in signed_in.playlists] == ["shared", "seeded"]
        assert signed_in.liked == frozenset()

    def test_refresh_uses_viewer(self, signed_in, mock_client):
        mock_client.list_playlists.reset_mock()

        signed_in.refresh_playlists()

        mock_client.list_playlists.assert_called_once_with("u1")

    def test_stale_refresh_ignored(self, app_state, mock_client, session):
        runner = DeferredRunner()
        library = LibraryCoordinator(app_state, mock_client, runner)
        mock_client.list_playlists.side_effect = (
            lambda viewer: [make_playlist("private", is_public=False)] if viewer else []
        )

        app_state.sign_in(session)
        app_state.sign_out()
        runner.run(0)   # the refresh started for u1 resolves after sign-out

        mock_client.list_playlists.assert_called_once_with("u1")
        assert library.playlists == []

        runner.run(0)
        assert library.playlists == []

    def test_catalog_load(self, library, mock_client, tracks):
        seen = []
        library.catalogChanged.connect(seen.append)
        mock_client.list_tracks.return_value = tracks

        library.load_catalog()

        assert library.tracks == tracks
        assert seen == [tracks]

    def test_catalog_failure_notifies(self, library, mock_client, notices):
        mock_client.list_tracks.side_effect = RemoteFailure("offline")

        library.load_catalog()

        assert notices == [("Could not load songs from the server", "error")]


class TestQueries:

    def test_search(self, signed_in):
        assert [t.id for t in signed_in.search("alpha")] == ["t1", "t3"]
        assert [t.id for t in signed_in.search("song t2")] == ["t2"]

    def test_artists(self, signed_in):
        assert signed_in.artists() == ["Alpha", "Beta"]
        assert [t.id for t in signed_in.artist_tracks("Alpha")] == ["t1", "t3"]

    def test_own_playlists(self, signed_in):
        signed_in.playlists = [make_playlist("p1"), make_playlist("p2", owner_id="u2", is_public=True)]

        assert [pl.id for pl in signed_in.own_playlists()] == ["p1"]
