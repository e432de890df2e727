"""Tests for media scanning and catalog seeding"""

import json
import wave
from pathlib import Path

import pytest
from click.testing import CliRunner

from musichub.db import database as db_api
from musichub.db.migrations import initialize_database
from musichub.library.scan_library import iter_audio_paths, scan_directory
from musichub.server.cli import cli
from musichub.server.seed import media_ref, seed_from_json, seed_library


def write_wav(path, seconds=1.0, rate=8000):
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(rate)
        w.writeframes(b"\x00\x00" * int(rate * seconds))


@pytest.fixture
def media_root(tmp_path):
    root = tmp_path / "media"
    write_wav(root / "b_side.wav", seconds=2.0)
    write_wav(root / "albums" / "first.wav")
    (root / "albums" / "first.lrc").write_text("[00:00.50]la la\n", encoding="utf-8")
    (root / "notes.txt").write_text("not audio", encoding="utf-8")
    (root / "broken.mp3").write_bytes(b"definitely not an mp3")
    return root


@pytest.fixture
def db(tmp_path):
    conn = initialize_database(str(tmp_path / "data"))
    yield conn
    conn.close()


class TestScan:
    """Test walking the media directory"""

    def test_only_audio_extensions(self, media_root):
        paths = iter_audio_paths([str(media_root)])

        rel = [Path(p).relative_to(media_root).as_posix() for p in paths]
        assert rel == ["albums/first.wav", "b_side.wav", "broken.mp3"]

    def test_missing_directory(self, tmp_path):
        assert iter_audio_paths([str(tmp_path / "nope"), ""]) == []

    def test_tracks_from_files(self, media_root):
        progress = []

        tracks = scan_directory(str(media_root), on_progress=progress.append)

        by_rel = {t.rel_path: t for t in tracks}
        assert set(by_rel) == {"b_side.wav", "albums/first.wav"}
        first = by_rel["albums/first.wav"]
        assert first.title == "first"
        assert first.artist == "Unknown Artist"
        assert first.duration == pytest.approx(1.0)
        assert first.lrc_rel_path == "albums/first.lrc"
        assert by_rel["b_side.wav"].lrc_rel_path is None
        assert by_rel["b_side.wav"].duration == pytest.approx(2.0)
        assert progress[-1].files_scanned == progress[-1].files_count == 3


class TestSchema:

    def test_song_columns(self, db):
        columns = [row["name"] for row in db.execute("PRAGMA table_info(songs)")]

        assert columns == ["id", "title", "artist", "album", "cover", "url", "duration", "lrc_url"]
        assert db.execute("PRAGMA user_version").fetchone()[0] == 1


class TestSeed:
    """Test filling the catalog"""

    def test_seed_library(self, db, media_root):
        added = seed_library(db, str(media_root), cover="http://c/cover.jpg")

        assert added == 2
        song = db_api.find_song_by_url(db, "/media/albums/first.wav")
        assert song.lrc_url == "/media/albums/first.lrc"
        assert song.cover == "http://c/cover.jpg"

    def test_seed_library_is_idempotent(self, db, media_root):
        seed_library(db, str(media_root))

        assert seed_library(db, str(media_root)) == 0
        assert len(db_api.get_songs(db)) == 2

    def test_media_ref(self):
        assert media_ref("a/b.mp3") == "/media/a/b.mp3"
        assert media_ref("/a.mp3") == "/media/a.mp3"

    def test_seed_from_json(self, db, tmp_path):
        source = tmp_path / "seed.json"
        source.write_text(json.dumps({
            "songs": [
                {"title": "One", "artist": "A", "url": "http://cdn/one.mp3", "lyrics": "ignored"},
                {"title": "Two", "artist": "B", "url": "http://cdn/two.mp3", "lrcUrl": "http://cdn/two.lrc"},
                {"title": "", "url": "http://cdn/untitled.mp3"},
            ],
            "playlists": [
                {"name": "Starter", "songs": ["http://cdn/two.mp3", "http://cdn/missing.mp3", "http://cdn/one.mp3"]},
                {"name": "Hidden", "isPublic": False},
            ],
        }), encoding="utf-8")

        assert seed_from_json(db, str(source)) == (2, 2)
        assert seed_from_json(db, str(source)) == (0, 0)

        public = db_api.get_visible_playlists(db, None)
        assert [p.name for p in public] == ["Starter"]
        assert [s["title"] for s in public[0].songs] == ["Two", "One"]
        assert public[0].user_id is None


class TestSeedCommand:
    """Test the seed CLI command"""

    def test_seed_scan(self, tmp_path, media_root):
        runner = CliRunner()

        result = runner.invoke(cli, [
            "--data-dir", str(tmp_path / "data"), "--media-dir", str(media_root), "seed",
        ])

        assert result.exit_code == 0, result.output
        assert "Added 2 songs" in result.output

    def test_seed_bad_json(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{nope", encoding="utf-8")
        runner = CliRunner()

        result = runner.invoke(cli, [
            "--data-dir", str(tmp_path / "data"), "seed", "--no-scan", "--json", str(bad),
        ])

        assert result.exit_code == 1
        assert "Error" in result.output
