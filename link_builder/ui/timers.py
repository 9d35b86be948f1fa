"""
Qt-backed scheduler for the long-press timer.
"""

from __future__ import annotations

from typing import Callable, Optional

from PyQt6.QtCore import QObject, QTimer

from link_builder.core.interaction import Scheduler, TimerHandle


class QtTimerHandle(TimerHandle):
    """Single-shot QTimer that cleans itself up once fired or cancelled."""

    def __init__(self, timer: QTimer, callback: Callable[[], None]):
        self._timer = timer
        self._callback = callback
        self._done = False
        timer.timeout.connect(self._on_timeout)

    @property
    def is_active(self) -> bool:
        return not self._done

    def cancel(self) -> None:
        if self._done:
            return
        self._done = True
        self._timer.stop()
        self._timer.deleteLater()

    def _on_timeout(self) -> None:
        if self._done:
            return
        self._done = True
        self._timer.deleteLater()
        self._callback()


class QtScheduler(Scheduler):
    """Schedules callbacks on the Qt event loop of ``parent``'s thread."""

    def __init__(self, parent: Optional[QObject] = None):
        self._parent = parent

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        handle = QtTimerHandle(timer, callback)
        timer.start(delay_ms)
        return handle
