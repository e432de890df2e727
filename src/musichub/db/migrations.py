from __future__ import annotations

import logging
import os
import sqlite3

from musichub.db.schema import SCHEMA_V1_SQL, CLIENT_SCHEMA_V1_SQL

logger = logging.getLogger(__name__)

CURRENT_DB_VERSION = 1
CURRENT_CLIENT_DB_VERSION = 1


def open_database(sqlite_path: str) -> sqlite3.Connection:
    db = sqlite3.connect(sqlite_path, check_same_thread=False)
    db.row_factory = sqlite3.Row
    return db


def initialize_database(app_data_dir: str) -> sqlite3.Connection:
    """Open (and migrate) the backend catalog database."""
    os.makedirs(app_data_dir, exist_ok=True)
    sqlite_path = os.path.join(app_data_dir, "musichub.sqlite3")
    logger.info("Database file path: %s", sqlite_path)

    db = open_database(sqlite_path)

    existing_version = int(db.execute("PRAGMA user_version").fetchone()[0])
    upgrade_database_if_needed(db, existing_version)

    return db


def upgrade_database_if_needed(db: sqlite3.Connection, existing_version: int) -> None:
    logger.info("Existing database version: %s", existing_version)

    if existing_version >= CURRENT_DB_VERSION:
        return

    # v1
    if existing_version <= 0:
        logger.info("Migrate database version 1...")
        db.execute("PRAGMA journal_mode=WAL")
        db.execute("PRAGMA user_version=1")
        db.executescript(SCHEMA_V1_SQL)
        db.commit()


def initialize_settings_database(app_data_dir: str) -> sqlite3.Connection:
    """Open (and migrate) the desktop client's settings database."""
    os.makedirs(app_data_dir, exist_ok=True)
    sqlite_path = os.path.join(app_data_dir, "client.sqlite3")
    logger.info("Settings file path: %s", sqlite_path)

    db = open_database(sqlite_path)

    existing_version = int(db.execute("PRAGMA user_version").fetchone()[0])
    upgrade_settings_database_if_needed(db, existing_version)

    return db


def upgrade_settings_database_if_needed(db: sqlite3.Connection, existing_version: int) -> None:
    if existing_version >= CURRENT_CLIENT_DB_VERSION:
        return

    # v1
    if existing_version <= 0:
        logger.info("Migrate settings database version 1...")
        db.execute("PRAGMA user_version=1")
        db.executescript(CLIENT_SCHEMA_V1_SQL)
        db.commit()


def debug_print_schema(db: sqlite3.Connection) -> None:
    tables = [r[0] for r in db.execute("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name")]
    for table in tables:
        cur = db.execute(f"PRAGMA table_info({table})")
        print(f"\n[{table} table schema]")
        for _cid, name, col_type, _notnull, _default, _pk in cur.fetchall():
            print(f"- {name} ({col_type})")
