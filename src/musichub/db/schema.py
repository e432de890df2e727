from __future__ import annotations

# Backend catalog: users, songs, playlists. No foreign keys on purpose:
# playlists and likes may point at songs that were removed.
SCHEMA_V1_SQL = """
CREATE TABLE users (
    id TEXT PRIMARY KEY,
    username TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at FLOAT
);

CREATE TABLE user_likes (
    id INTEGER PRIMARY KEY,
    user_id TEXT NOT NULL,
    song_id TEXT NOT NULL,
    UNIQUE(user_id, song_id)
);

CREATE TABLE songs (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    artist TEXT NOT NULL,
    album TEXT,
    cover TEXT,
    url TEXT NOT NULL,
    duration FLOAT,
    lrc_url TEXT
);

CREATE TABLE playlists (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    cover TEXT,
    description TEXT,
    user_id TEXT,
    is_public BOOLEAN DEFAULT 0
);

CREATE TABLE playlist_songs (
    id INTEGER PRIMARY KEY,
    playlist_id TEXT NOT NULL,
    song_id TEXT NOT NULL,
    position INTEGER NOT NULL
);

CREATE INDEX idx_user_likes_user_id ON user_likes(user_id);
CREATE INDEX idx_songs_url ON songs(url);
CREATE INDEX idx_playlists_user_id ON playlists(user_id);
CREATE INDEX idx_playlist_songs_playlist_id ON playlist_songs(playlist_id);
"""

# Desktop client settings: theme, volume, API URL and the signed-in session.
CLIENT_SCHEMA_V1_SQL = """
CREATE TABLE config_data (
    id INTEGER PRIMARY KEY,
    theme_color TEXT,
    volume FLOAT,
    api_base_url TEXT
);

CREATE TABLE session_data (
    id INTEGER PRIMARY KEY,
    user_json TEXT
);

INSERT INTO config_data (theme_color, volume, api_base_url)
VALUES ('#737373', 0.7, 'http://localhost:5000/api');
"""
