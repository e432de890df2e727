from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class Config:
    theme_color: str
    volume: float
    api_base_url: str


# -------------------------------
# CONFIG
# -------------------------------
def get_config(db: sqlite3.Connection) -> Config:
    row = db.execute("""
        SELECT theme_color, volume, api_base_url
        FROM config_data
        LIMIT 1
    """).fetchone()
    return Config(
        theme_color=row["theme_color"],
        volume=float(row["volume"]),
        api_base_url=row["api_base_url"],
    )


def set_config(db: sqlite3.Connection, config: Config) -> None:
    db.execute("""
        UPDATE config_data
        SET theme_color = ?,
            volume = ?,
            api_base_url = ?
        WHERE 1
    """, (
        config.theme_color,
        config.volume,
        config.api_base_url,
    ))
    db.commit()


# -------------------------------
# SESSION
# -------------------------------
def load_session(db: sqlite3.Connection) -> Optional[dict[str, Any]]:
    row = db.execute("SELECT user_json FROM session_data LIMIT 1").fetchone()
    if not row or not row["user_json"]:
        return None
    try:
        data = json.loads(row["user_json"])
    except ValueError:
        logger.warning("Discarding unreadable stored session")
        clear_session(db)
        return None
    return data if isinstance(data, dict) else None


def save_session(db: sqlite3.Connection, user: dict[str, Any]) -> None:
    db.execute("DELETE FROM session_data")
    db.execute("INSERT INTO session_data (user_json) VALUES (?)", (json.dumps(user),))
    db.commit()


def clear_session(db: sqlite3.Connection) -> None:
    db.execute("DELETE FROM session_data")
    db.commit()
