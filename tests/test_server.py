"""Tests for the Flask backend"""

import pytest

from musichub.server import settings
from musichub.server.app import create_app


@pytest.fixture
def media_dir(tmp_path):
    media = tmp_path / "media"
    media.mkdir()
    (media / "hello.lrc").write_text("[00:01.00]hello\n", encoding="utf-8")
    return media


@pytest.fixture
def app(tmp_path, media_dir):
    app = create_app(tmp_path / "data", media_dir)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def alice(client):
    r = client.post("/api/register", json={"username": "alice", "email": "Alice@Example.com", "password": "pw"})
    return r.get_json()["user"]


@pytest.fixture
def bob(client):
    r = client.post("/api/register", json={"username": "bob", "email": "bob@example.com", "password": "pw"})
    return r.get_json()["user"]


@pytest.fixture
def song(client):
    r = client.post("/api/songs", json={"title": "One", "artist": "A", "url": "/media/one.mp3"})
    return r.get_json()


class TestHealthAndMedia:

    def test_health(self, client, song):
        r = client.get("/health")

        assert r.status_code == 200
        assert r.get_json() == {"status": "healthy", "songs": 1}

    def test_media_file(self, client):
        r = client.get("/media/hello.lrc")

        assert r.status_code == 200
        assert b"[00:01.00]hello" in r.data

    def test_missing_media_is_json_404(self, client):
        r = client.get("/media/nope.mp3")

        assert r.status_code == 404
        assert r.get_json()["success"] is False


class TestAuth:
    """Test register and login"""

    def test_register_returns_public_user(self, alice):
        assert alice["username"] == "alice"
        assert alice["email"] == "alice@example.com"
        assert alice["likedSongs"] == []
        assert "password_hash" not in alice

    def test_register_duplicate_email(self, client, alice):
        r = client.post("/api/register", json={"username": "al", "email": "alice@example.com", "password": "x"})

        assert r.status_code == 409
        assert r.get_json() == {"success": False, "message": "Email is already registered"}

    def test_register_missing_fields(self, client):
        r = client.post("/api/register", json={"username": "al"})

        assert r.status_code == 400

    def test_login(self, client, alice):
        r = client.post("/api/login", json={"email": "ALICE@example.com", "password": "pw"})

        assert r.status_code == 200
        assert r.get_json()["user"]["id"] == alice["id"]

    @pytest.mark.parametrize("email,password", [
        ("alice@example.com", "wrong"),
        ("nobody@example.com", "pw"),
    ])
    def test_login_rejected(self, client, alice, email, password):
        r = client.post("/api/login", json={"email": email, "password": password})

        assert r.status_code == 401
        assert r.get_json()["message"] == "Invalid email or password"


class TestLikes:

    def test_explicit_like_and_unlike(self, client, alice, song):
        r = client.post("/api/user/like", json={"userId": alice["id"], "songId": song["id"], "liked": True})
        assert r.get_json() == {"success": True, "isLiked": True, "likedSongs": [song["id"]]}

        client.post("/api/user/like", json={"userId": alice["id"], "songId": song["id"], "liked": True})
        r = client.post("/api/login", json={"email": "alice@example.com", "password": "pw"})
        assert r.get_json()["user"]["likedSongs"] == [song["id"]]

        r = client.post("/api/user/like", json={"userId": alice["id"], "songId": song["id"], "liked": False})
        assert r.get_json()["likedSongs"] == []

    def test_toggle_when_state_omitted(self, client, alice, song):
        first = client.post("/api/user/like", json={"userId": alice["id"], "songId": song["id"]}).get_json()
        second = client.post("/api/user/like", json={"userId": alice["id"], "songId": song["id"]}).get_json()

        assert first["isLiked"] is True
        assert second["isLiked"] is False

    def test_unknown_user(self, client, song):
        r = client.post("/api/user/like", json={"userId": "ghost", "songId": song["id"], "liked": True})

        assert r.status_code == 404


class TestSongs:

    def test_list_in_insertion_order(self, client):
        for title in ("B", "A", "C"):
            client.post("/api/songs", json={"title": title, "artist": "X", "url": f"/media/{title}.mp3"})

        r = client.get("/api/songs")

        assert [s["title"] for s in r.get_json()] == ["B", "A", "C"]

    def test_song_record_shape(self, client, song):
        r = client.get(f"/api/songs/{song['id']}")

        data = r.get_json()
        assert data["_id"] == data["id"] == song["id"]
        assert data["url"] == "/media/one.mp3"
        assert data["lrcUrl"] is None

    def test_unknown_song(self, client):
        r = client.get("/api/songs/nope")

        assert r.status_code == 404
        assert r.get_json()["message"] == "Song not found"

    def test_add_song_requires_fields(self, client):
        r = client.post("/api/songs", json={"title": "No url", "artist": "X"})

        assert r.status_code == 400


class TestPlaylists:
    """Test visibility and ownership rules"""

    def create(self, client, user, name="Mix", is_public=False, **extra):
        payload = {"userId": user["id"], "name": name, "isPublic": is_public}
        payload.update(extra)
        return client.post("/api/playlists", json=payload)

    def test_create_defaults(self, client, alice):
        r = self.create(client, alice)

        assert r.status_code == 201
        data = r.get_json()
        assert data["userId"] == alice["id"]
        assert data["cover"] == settings.DEFAULT_COVER
        assert data["description"] == settings.DEFAULT_PLAYLIST_DESCRIPTION
        assert data["songs"] == []

    def test_create_requires_owner_and_name(self, client, alice):
        assert client.post("/api/playlists", json={"name": "x"}).status_code == 400
        assert client.post("/api/playlists", json={"userId": alice["id"], "name": " "}).status_code == 400

    def test_visibility(self, client, alice, bob):
        self.create(client, alice, "private")
        self.create(client, alice, "public", is_public=True)

        def names(user_id=None):
            url = "/api/playlists" + (f"?userId={user_id}" if user_id else "")
            return [p["name"] for p in client.get(url).get_json()]

        assert names(alice["id"]) == ["private", "public"]
        assert names(bob["id"]) == ["public"]
        assert names() == ["public"]

    def test_update_by_owner(self, client, alice, song):
        pid = self.create(client, alice).get_json()["id"]

        r = client.put(f"/api/playlists/{pid}", json={
            "userId": alice["id"], "name": "Renamed", "songs": [song["id"], {"id": "gone"}],
        })

        data = r.get_json()
        assert r.status_code == 200
        assert data["name"] == "Renamed"
        assert data["songs"][0]["title"] == "One"
        assert data["songs"][1] == {"_id": "gone", "id": "gone"}

    def test_update_by_other_user(self, client, alice, bob):
        pid = self.create(client, alice, is_public=True).get_json()["id"]

        r = client.put(f"/api/playlists/{pid}", json={"userId": bob["id"], "name": "Hijacked"})

        assert r.status_code == 403
        names = [p["name"] for p in client.get("/api/playlists").get_json()]
        assert names == ["Mix"]

    def test_update_rejects_non_list_songs(self, client, alice):
        pid = self.create(client, alice).get_json()["id"]

        r = client.put(f"/api/playlists/{pid}", json={"userId": alice["id"], "songs": "abc"})

        assert r.status_code == 400

    def test_update_missing(self, client, alice):
        r = client.put("/api/playlists/nope", json={"userId": alice["id"], "name": "x"})

        assert r.status_code == 404

    def test_delete(self, client, alice, bob):
        pid = self.create(client, alice).get_json()["id"]

        assert client.delete(f"/api/playlists/{pid}?userId={bob['id']}").status_code == 403
        r = client.delete(f"/api/playlists/{pid}?userId={alice['id']}")

        assert r.get_json() == {"success": True, "message": "Playlist deleted"}
        assert client.get(f"/api/playlists?userId={alice['id']}").get_json() == []
        assert client.delete(f"/api/playlists/{pid}?userId={alice['id']}").status_code == 404
