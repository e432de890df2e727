from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QEasingCurve, QPoint, QPropertyAnimation, Qt, QTimer
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsOpacityEffect,
    QHBoxLayout,
    QLabel,
    QToolButton,
    QWidget,
)

from musichub.core.state import Notify

TOAST_TIMEOUT_MS = 3000


def _colors(kind: str, accent: str) -> tuple[str, str]:
    """Returns (bg, border)."""
    kind = (kind or "info").lower()
    if kind == "success":
        return "#052e1a", "#16a34a"
    if kind == "warning":
        return "#2a1a05", "#f59e0b"
    if kind == "error":
        return "#2a0a0a", "#ef4444"
    return "#0b1222", accent


class ToastWidget(QFrame):
    def __init__(self, notify: Notify, accent: str, manager: "ToastManager"):
        super().__init__(manager)
        self.notify = notify
        self._manager = manager

        bg, border = _colors(notify.notify_type, accent)
        self.setObjectName("Toast")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet(f"""
        QFrame#Toast {{ background: {bg}; border: 1px solid {border}; border-radius: 14px; }}
        QLabel {{ color: #e5e7eb; font-size: 12px; }}
        QToolButton {{ border: none; background: transparent; color: #e5e7eb; padding: 2px 6px; }}
        """)

        row = QHBoxLayout(self)
        row.setContentsMargins(12, 10, 10, 10)
        row.setSpacing(10)

        label = QLabel(notify.message)
        label.setWordWrap(True)
        close = QToolButton()
        close.setText("✕")
        close.setCursor(Qt.CursorShape.PointingHandCursor)
        close.clicked.connect(lambda: self._manager.dismiss(self))

        row.addWidget(label, 1)
        row.addWidget(close, 0, Qt.AlignmentFlag.AlignTop)

        self._opacity = QGraphicsOpacityEffect(self)
        self._opacity.setOpacity(0.0)
        self.setGraphicsEffect(self._opacity)
        self._anims: list[QPropertyAnimation] = []

    def _animate(self, target, prop: bytes, start, end, curve) -> QPropertyAnimation:
        anim = QPropertyAnimation(target, prop, self)
        anim.setDuration(180)
        anim.setStartValue(start)
        anim.setEndValue(end)
        anim.setEasingCurve(curve)
        self._anims.append(anim)
        anim.start()
        return anim

    def play_in(self, end_pos: QPoint):
        self.show()
        self._animate(self, b"pos", end_pos + QPoint(0, -12), end_pos, QEasingCurve.Type.OutCubic)
        self._animate(self._opacity, b"opacity", 0.0, 1.0, QEasingCurve.Type.OutCubic)

    def play_out(self, on_done):
        self._animate(self, b"pos", self.pos(), self.pos() + QPoint(0, -6), QEasingCurve.Type.InCubic)
        fade = self._animate(self._opacity, b"opacity", self._opacity.opacity(), 0.0, QEasingCurve.Type.InCubic)
        fade.finished.connect(on_done)


class ToastManager(QWidget):
    """
    Overlay that stacks Notify toasts in the top-right corner of its host,
    newest first.
    """

    def __init__(self, host: QWidget, max_visible: int = 4):
        super().__init__(host)
        self.host = host
        self.accent = "#38bdf8"
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)

        self._toasts: list[ToastWidget] = []
        self._margin = 14
        self._spacing = 10
        self._max_visible = max_visible

        self.raise_()
        self.show()

    def set_accent(self, color: str):
        self.accent = color

    def show_notify(self, notify: Notify, timeout_ms: int = TOAST_TIMEOUT_MS):
        if not notify.message:
            return
        self.setGeometry(self.host.rect())
        self.raise_()

        toast = ToastWidget(notify, self.accent, self)
        toast.setFixedWidth(min(420, max(260, self.width() // 2)))
        self._toasts.insert(0, toast)

        while len(self._toasts) > self._max_visible:
            old = self._toasts.pop()
            old.hide()
            old.deleteLater()

        self._layout_toasts(new_toast=toast)
        QTimer.singleShot(max(500, int(timeout_ms)), lambda: self.dismiss(toast))

    def dismiss(self, toast: ToastWidget):
        if toast not in self._toasts:
            return

        def remove():
            if toast in self._toasts:
                self._toasts.remove(toast)
            toast.hide()
            toast.deleteLater()
            self._layout_toasts()

        toast.play_out(remove)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        QTimer.singleShot(0, self._layout_toasts)

    def _layout_toasts(self, new_toast: Optional[ToastWidget] = None):
        self.setGeometry(self.host.rect())
        x_right = self.width() - self._margin
        y = self._margin

        for t in self._toasts:
            t.adjustSize()
            h = t.sizeHint().height()
            t.setFixedHeight(h)
            pos = QPoint(x_right - t.width(), y)
            y += h + self._spacing

            if t is new_toast:
                t.play_in(pos)
            else:
                t.move(pos)
                t.show()

        self.raise_()
