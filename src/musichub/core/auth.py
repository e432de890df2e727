# core/auth.py
from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Signal

from musichub.core.errors import AuthError, RemoteFailure

logger = logging.getLogger(__name__)


class Authenticator(QObject):
    """Runs login/register off the UI thread and signs the session in on success."""
    finished = Signal(bool, str)   # ok, message

    def __init__(self, app_state, client, runner, parent=None):
        super().__init__(parent)
        self.app_state = app_state
        self.client = client
        self.runner = runner

    def login(self, email: str, password: str) -> None:
        email = (email or "").strip()
        if not email or not password:
            self.finished.emit(False, "Email and password are required")
            return
        self.runner.submit(
            lambda: self.client.login(email, password),
            on_success=lambda session: self._on_signed_in(session, "Welcome back"),
            on_failure=self._on_failed,
        )

    def register(self, username: str, email: str, password: str) -> None:
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not email or not password:
            self.finished.emit(False, "All fields are required")
            return
        self.runner.submit(
            lambda: self.client.register(username, email, password),
            on_success=lambda session: self._on_signed_in(session, "Account created"),
            on_failure=self._on_failed,
        )

    def _on_signed_in(self, session, message: str) -> None:
        self.app_state.sign_in(session)
        self.app_state.notify(f"{message}, {session.username}", "success")
        self.finished.emit(True, message)

    def _on_failed(self, exc: Exception) -> None:
        if isinstance(exc, AuthError):
            message = exc.message
        elif isinstance(exc, RemoteFailure):
            logger.error("Auth request failed: %s", exc)
            message = "Cannot reach server"
        else:
            logger.exception("Unexpected auth failure", exc_info=exc)
            message = "Something went wrong"
        self.finished.emit(False, message)
