from __future__ import annotations

from typing import Callable, Optional

import pytest

from link_builder.core.interaction import Scheduler, TimerHandle
from link_builder.core.models import Overlay, PressPhase, ResolvedSpan


class ManualTimer(TimerHandle):
    def __init__(self, delay_ms: int, callback: Callable[[], None]):
        self.delay_ms = delay_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        """Run the callback as the event loop would, unless cancelled."""
        if not self.cancelled and not self.fired:
            self.fired = True
            self.callback()


class ManualScheduler(Scheduler):
    """Scheduler whose timers only fire when a test says so."""

    def __init__(self):
        self.timers: list[ManualTimer] = []

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay_ms, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire_all(self) -> None:
        for timer in list(self.timers):
            timer.fire()


class RecordingView:
    """In-memory view adapter that records what the builder does to it."""

    def __init__(self, text: str, clickable: bool = True, scheduler: Optional[Scheduler] = None):
        self.text = text
        self.clickable = clickable
        self.rendered: list[Overlay] = []
        self.policy: Optional[object] = None
        self.policy_sets = 0
        self.state_changes: list[tuple[ResolvedSpan, object]] = []
        self.fallback_calls: list[tuple[int, PressPhase]] = []
        self._scheduler = scheduler

    def get_current_text(self) -> str:
        return self.text

    def set_rendered_text(self, overlay: Overlay) -> None:
        self.rendered.append(overlay)

    def get_movement_policy(self):
        return self.policy

    def set_movement_policy(self, handler) -> None:
        self.policy = handler
        self.policy_sets += 1

    def links_clickable(self) -> bool:
        return self.clickable

    def span_state_changed(self, span: ResolvedSpan) -> None:
        self.state_changes.append((span, span.state))

    def scheduler(self) -> Optional[Scheduler]:
        return self._scheduler

    def fallback_handler(self, offset: int, phase: PressPhase) -> None:
        self.fallback_calls.append((offset, phase))


class ClickRecorder:
    """Collects link callback invocations by kind."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    def click(self, text: str) -> None:
        self.calls.append(("click", text))

    def long_click(self, text: str) -> None:
        self.calls.append(("long_click", text))

    def press(self, text: str) -> None:
        self.calls.append(("press", text))

    def of(self, kind: str) -> list[str]:
        return [text for k, text in self.calls if k == kind]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def recorder() -> ClickRecorder:
    return ClickRecorder()
