# core/tasks.py
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QThread, Signal, Slot

logger = logging.getLogger(__name__)

Callback = Callable[[Any], None]


class RemoteCall(QThread):
    """Runs one blocking call (HTTP request, file read...) off the UI thread."""
    succeeded = Signal(object, object)  # call, result
    failed = Signal(object, object)     # call, exception

    def __init__(self, fn: Callable[[], Any], parent=None):
        super().__init__(parent)
        self._fn = fn
        self.on_success: Optional[Callback] = None
        self.on_failure: Optional[Callback] = None

    def run(self):
        try:
            result = self._fn()
        except Exception as e:
            self.failed.emit(self, e)
            return
        self.succeeded.emit(self, result)


class TaskRunner(QObject):
    """
    Starts RemoteCall workers and delivers their results back on the thread
    that owns the runner (the UI thread), so callbacks may touch UI state.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self._active: set[RemoteCall] = set()

    def submit(
        self,
        fn: Callable[[], Any],
        on_success: Optional[Callback] = None,
        on_failure: Optional[Callback] = None,
    ) -> RemoteCall:
        call = RemoteCall(fn)
        call.on_success = on_success
        call.on_failure = on_failure

        call.succeeded.connect(self._on_succeeded)
        call.failed.connect(self._on_failed)
        call.finished.connect(self._on_finished)

        self._active.add(call)
        call.start()
        return call

    def wait_all(self, msecs: int = 5000) -> None:
        for call in list(self._active):
            call.wait(msecs)

    @Slot(object, object)
    def _on_succeeded(self, call: RemoteCall, result: Any):
        if call.on_success is not None:
            call.on_success(result)

    @Slot(object, object)
    def _on_failed(self, call: RemoteCall, exc: Exception):
        if call.on_failure is not None:
            call.on_failure(exc)
        else:
            logger.error("Background task failed: %s", exc)

    @Slot()
    def _on_finished(self):
        call = self.sender()
        if call in self._active:
            self._active.discard(call)
            call.deleteLater()
