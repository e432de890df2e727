from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from PySide6.QtCore import QObject, Signal, Slot

from musichub.core.models import Session
from musichub.db.settings import (
    Config, get_config, set_config, load_session, save_session, clear_session,
)

logger = logging.getLogger(__name__)

DEFAULT_THEME_COLOR = "#737373"
DEFAULT_API_URL = "http://localhost:5000/api"

THEME_COLORS = [
    ("Graphite", "#737373"),
    ("Purple", "#bd71ff"),
    ("Sky", "#3496ff"),
    ("Aqua", "#27ffe2"),
    ("Red", "#ff2929"),
    ("Pink", "#FF9EAA"),
]


@dataclass(frozen=True)
class Notify:
    message: str
    notify_type: str = "info"   # info/success/warning/error


class AppState(QObject):
    """
    Process-wide client state: the signed-in session, theme and settings.

    Everything that must survive a restart is persisted through the settings
    database (when one is attached).
    """
    notification = Signal(object)     # emits Notify
    sessionChanged = Signal(object)   # Session | None
    themeChanged = Signal(str)        # "#rrggbb"
    authRequired = Signal()           # ask the UI to show the sign-in dialog

    def __init__(self, settings_db: sqlite3.Connection | None = None):
        super().__init__()
        self.settings_db = settings_db
        self.session: Optional[Session] = None
        self.theme_color: str = DEFAULT_THEME_COLOR
        self.volume: float = 0.7
        self.api_base_url: str = DEFAULT_API_URL
        self.app_data_dir: str | None = None
        self.queued_notifications: list[Notify] = []

        # wired by musichub.app.init_app_state
        self.client = None
        self.runner = None
        self.player = None
        self.engine = None
        self.library = None
        self.auth = None

    # --- lifecycle ---
    def restore(self) -> None:
        """Load persisted theme, volume and session (startup)."""
        if self.settings_db is None:
            return

        config = get_config(self.settings_db)
        self.theme_color = config.theme_color or DEFAULT_THEME_COLOR
        self.volume = config.volume
        self.api_base_url = config.api_base_url or DEFAULT_API_URL

        data = load_session(self.settings_db)
        if data:
            session = Session.from_api(data)
            if session.user_id:
                self.session = session
                self.sessionChanged.emit(session)

        self.themeChanged.emit(self.theme_color)

    def sign_in(self, session: Session) -> None:
        self.session = session
        if self.settings_db is not None:
            save_session(self.settings_db, session.to_dict())
        logger.info("Signed in as %s", session.username)
        self.sessionChanged.emit(session)

    def sign_out(self) -> None:
        self.session = None
        if self.settings_db is not None:
            clear_session(self.settings_db)
        self.sessionChanged.emit(None)
        self.notify("Signed out", "info")

    # --- accessors ---
    @property
    def user_id(self) -> str | None:
        return self.session.user_id if self.session else None

    def require_session(self) -> bool:
        if self.session is not None:
            return True
        self.authRequired.emit()
        self.notify("Please sign in to use this feature", "error")
        return False

    def store_liked_songs(self, liked: Iterable[str]) -> None:
        """Keep the persisted session's like snapshot in step with local state."""
        if self.session is None:
            return
        self.session = replace(self.session, liked_songs=tuple(liked))
        if self.settings_db is not None:
            save_session(self.settings_db, self.session.to_dict())

    # --- settings ---
    def set_theme_color(self, color: str) -> None:
        self.theme_color = color
        self._save_config()
        self.themeChanged.emit(color)

    def set_volume(self, volume: float) -> None:
        self.volume = min(1.0, max(0.0, float(volume)))
        self._save_config()

    def _save_config(self) -> None:
        if self.settings_db is None:
            return
        set_config(self.settings_db, Config(
            theme_color=self.theme_color,
            volume=self.volume,
            api_base_url=self.api_base_url,
        ))

    def queue_notify(self, message: str, notify_type: str = "info") -> None:
        """Hold a notice until the main window is up to show it."""
        self.queued_notifications.append(Notify(message=message, notify_type=notify_type))

    @Slot(str, str)
    def notify(self, message: str, notify_type: str = "info"):
        self.notification.emit(Notify(message=message, notify_type=notify_type))
