import logging
import os
import sqlite3
from pathlib import Path

from flask import Flask, current_app, g, jsonify, request, send_from_directory
from werkzeug.exceptions import HTTPException
from werkzeug.security import check_password_hash, generate_password_hash

from musichub.db import database as db_api
from musichub.db.migrations import initialize_database, open_database
from musichub.server import settings

logger = logging.getLogger(__name__)


def _error(message, status):
    return (jsonify({"success": False, "message": message}), status)


def _text(data, key):
    return str(data.get(key) or "").strip()


def get_db() -> sqlite3.Connection:
    if "db" not in g:
        g.db = open_database(current_app.config["DATABASE_PATH"])
    return g.db


def close_db(_exc=None):
    db = g.pop("db", None)
    if db is not None:
        db.close()


def create_app(data_dir=None, media_dir=None) -> Flask:
    data_dir = Path(data_dir or settings.DATA_DIR)
    media_dir = Path(media_dir or settings.MEDIA_DIR)

    # run migrations once at startup; requests open their own connections
    initialize_database(str(data_dir)).close()

    app = Flask(__name__)
    app.config["DATABASE_PATH"] = os.path.join(str(data_dir), "musichub.sqlite3")
    app.config["MEDIA_DIR"] = str(media_dir)
    app.config["JSON_SORT_KEYS"] = False
    app.teardown_appcontext(close_db)

    register_routes(app)
    return app


def register_routes(app: Flask) -> None:

    @app.errorhandler(HTTPException)
    def http_error(exc):
        return _error(exc.description or exc.name, exc.code)

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "healthy", "songs": len(db_api.get_songs(get_db()))})

    @app.route("/media/<path:filename>", methods=["GET"])
    def media(filename):
        return send_from_directory(current_app.config["MEDIA_DIR"], filename)

    # ---------------------------
    # Auth
    # ---------------------------

    @app.route("/api/register", methods=["POST"])
    def register():
        data = request.get_json(silent=True) or {}
        username = _text(data, "username")
        email = _text(data, "email").lower()
        password = str(data.get("password") or "")
        if not username or not email or not password:
            return _error("username, email and password required", 400)

        db = get_db()
        if db_api.find_user_by_email(db, email) is not None:
            return _error("Email is already registered", 409)

        user = db_api.add_user(db, username, email, generate_password_hash(password))
        logger.info("Registered user %s", user.id)
        return jsonify({"success": True, "user": user.to_api()})

    @app.route("/api/login", methods=["POST"])
    def login():
        data = request.get_json(silent=True) or {}
        email = _text(data, "email").lower()
        password = str(data.get("password") or "")
        if not email or not password:
            return _error("email and password required", 400)

        user = db_api.find_user_by_email(get_db(), email)
        if user is None or not check_password_hash(user.password_hash, password):
            return _error("Invalid email or password", 401)

        return jsonify({"success": True, "user": user.to_api()})

    # ---------------------------
    # Likes
    # ---------------------------

    @app.route("/api/user/like", methods=["POST"])
    def like():
        data = request.get_json(silent=True) or {}
        user_id = _text(data, "userId")
        song_id = _text(data, "songId")
        if not user_id or not song_id:
            return _error("userId and songId required", 400)

        db = get_db()
        user = db_api.get_user(db, user_id)
        if user is None:
            return _error("User not found", 404)

        liked = data.get("liked")
        if liked is None:
            # no explicit state: toggle
            liked = song_id not in user.liked_songs

        liked_songs = db_api.set_like(db, user_id, song_id, bool(liked))
        return jsonify({"success": True, "isLiked": bool(liked), "likedSongs": liked_songs})

    # ---------------------------
    # Songs
    # ---------------------------

    @app.route("/api/songs", methods=["GET"])
    def list_songs():
        return jsonify([s.to_api() for s in db_api.get_songs(get_db())])

    @app.route("/api/songs/<song_id>", methods=["GET"])
    def get_song(song_id):
        song = db_api.get_song_by_id(get_db(), song_id)
        if song is None:
            return _error("Song not found", 404)
        return jsonify(song.to_api())

    @app.route("/api/songs", methods=["POST"])
    def add_song():
        data = request.get_json(silent=True) or {}
        title = _text(data, "title")
        artist = _text(data, "artist")
        url = _text(data, "url")
        if not title or not artist or not url:
            return _error("title, artist and url required", 400)
        try:
            duration = float(data.get("duration") or 0)
        except (TypeError, ValueError):
            return _error("duration must be a number", 400)

        song = db_api.add_song(
            get_db(),
            title=title,
            artist=artist,
            url=url,
            album=data.get("album") or None,
            cover=data.get("cover") or None,
            duration=duration,
            lrc_url=data.get("lrcUrl") or None,
        )
        return (jsonify(song.to_api()), 201)

    # ---------------------------
    # Playlists
    # ---------------------------

    @app.route("/api/playlists", methods=["GET"])
    def list_playlists():
        viewer_id = request.args.get("userId") or None
        playlists = db_api.get_visible_playlists(get_db(), viewer_id)
        return jsonify([p.to_api() for p in playlists])

    @app.route("/api/playlists", methods=["POST"])
    def create_playlist():
        data = request.get_json(silent=True) or {}
        user_id = _text(data, "userId")
        name = _text(data, "name")
        if not user_id:
            return _error("userId required", 400)
        if not name:
            return _error("name required", 400)

        playlist = db_api.add_playlist(
            get_db(),
            name=name,
            user_id=user_id,
            cover=data.get("cover") or settings.DEFAULT_COVER,
            description=data.get("description") or settings.DEFAULT_PLAYLIST_DESCRIPTION,
            is_public=bool(data.get("isPublic", False)),
        )
        return (jsonify(playlist.to_api()), 201)

    @app.route("/api/playlists/<playlist_id>", methods=["PUT"])
    def update_playlist(playlist_id):
        data = request.get_json(silent=True) or {}
        db = get_db()
        playlist = db_api.get_playlist(db, playlist_id)
        if playlist is None:
            return _error("Playlist not found", 404)
        if not playlist.user_id or playlist.user_id != _text(data, "userId"):
            return _error("You don't have permission to edit this playlist", 403)

        songs = data.get("songs")
        if songs is not None and not isinstance(songs, list):
            return _error("songs must be a list of song ids", 400)
        song_ids = None
        if songs is not None:
            # accept full song records as well as bare ids
            song_ids = [str(s.get("id") or s.get("_id")) if isinstance(s, dict) else str(s) for s in songs]

        updated = db_api.update_playlist(
            db,
            playlist_id,
            name=_text(data, "name") or None,
            cover=_text(data, "cover") or None,
            song_ids=song_ids,
        )
        return jsonify(updated.to_api())

    @app.route("/api/playlists/<playlist_id>", methods=["DELETE"])
    def delete_playlist(playlist_id):
        db = get_db()
        playlist = db_api.get_playlist(db, playlist_id)
        if playlist is None:
            return _error("Playlist not found", 404)
        if not playlist.user_id or playlist.user_id != (request.args.get("userId") or ""):
            return _error("You don't have permission to delete this playlist", 403)

        db_api.delete_playlist(db, playlist_id)
        return jsonify({"success": True, "message": "Playlist deleted"})
