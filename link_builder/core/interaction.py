"""
Press/click interaction for resolved spans.

Split in two layers:
- ``InteractionStateMachine`` turns abstract events into abstract effects
  and touches nothing outside itself.
- ``InteractionController`` feeds events to the machine one at a time and
  performs the effects: span visual state, link callbacks, the long-press
  timer and the fallback handler.

Any UI adapter drives the controller by converting its pointer events into
text offsets.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Optional, Protocol

from link_builder.core.models import (
    ArmTimer,
    CallbackKind,
    CancelTimer,
    DelegateToFallback,
    InteractionEffect,
    InteractionEvent,
    InteractionResult,
    InvokeCallback,
    PressCancel,
    PressEnd,
    PressPhase,
    PressStart,
    ResolvedSpan,
    SetVisualState,
    SpanState,
    TimerFire,
)


DEFAULT_LONG_PRESS_TIMEOUT_MS = 500

FallbackHandler = Callable[[int, PressPhase], None]
StateListener = Callable[[ResolvedSpan], None]


class SpanSource(Protocol):
    """Anything that can map a text offset to a span."""

    def find_span_at(self, offset: int) -> Optional[ResolvedSpan]:
        ...


# =============================================================================
# Timers
# =============================================================================

class TimerHandle(ABC):
    """A scheduled callback that may still be cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call repeatedly."""


class Scheduler(ABC):
    """Schedules single-shot callbacks on the caller's event loop."""

    @abstractmethod
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay_ms`` milliseconds."""


# =============================================================================
# State Machine
# =============================================================================

class InteractionStateMachine:
    """
    Idle / Pressed(span) state machine.

    Only one span can be pressed at a time. A press-start arriving while a
    span is pressed is ignored.
    """

    def __init__(
        self,
        spans: SpanSource,
        long_press_timeout_ms: Optional[int] = DEFAULT_LONG_PRESS_TIMEOUT_MS,
    ):
        self.spans = spans
        self.long_press_timeout_ms = long_press_timeout_ms
        self._pressed: Optional[ResolvedSpan] = None
        self._long_press_fired = False
        self._timer_generation = 0

    @property
    def pressed_span(self) -> Optional[ResolvedSpan]:
        return self._pressed

    @property
    def is_idle(self) -> bool:
        return self._pressed is None

    @property
    def timer_generation(self) -> int:
        """Identifies the most recently armed long-press timer."""
        return self._timer_generation

    @property
    def long_press_enabled(self) -> bool:
        return self.long_press_timeout_ms is not None

    def handle(self, event: InteractionEvent) -> InteractionResult:
        """Apply ``event`` and return the effects it produced."""
        if isinstance(event, PressStart):
            effects = self._press_start(event.offset)
        elif isinstance(event, PressEnd):
            effects = self._press_end(event.offset)
        elif isinstance(event, PressCancel):
            effects = self.release()
        elif isinstance(event, TimerFire):
            effects = self._timer_fire(event)
        else:
            raise TypeError(f"Unknown interaction event: {event!r}")
        return InteractionResult(event=event, effects=effects)

    def release(self) -> list[InteractionEffect]:
        """Drop the pressed span without firing any callback."""
        span = self._pressed
        if span is None:
            return []
        self._to_idle()
        effects: list[InteractionEffect] = []
        if self.long_press_enabled:
            effects.append(CancelTimer())
        effects.append(SetVisualState(span, SpanState.NORMAL))
        return effects

    def _press_start(self, offset: int) -> list[InteractionEffect]:
        if self._pressed is not None:
            return []

        span = self.spans.find_span_at(offset)
        if span is None:
            return [DelegateToFallback(offset, PressPhase.START)]

        self._pressed = span
        self._long_press_fired = False
        effects: list[InteractionEffect] = [SetVisualState(span, SpanState.PRESSED)]
        if self.long_press_enabled:
            self._timer_generation += 1
            effects.append(ArmTimer(self.long_press_timeout_ms))
        if span.link.on_press is not None:
            effects.append(InvokeCallback(CallbackKind.PRESS, span))
        return effects

    def _press_end(self, offset: int) -> list[InteractionEffect]:
        span = self._pressed
        if span is None:
            return [DelegateToFallback(offset, PressPhase.END)]

        long_press_fired = self._long_press_fired
        effects = self.release()
        # Releasing outside the pressed span is a cancelled click
        if (
            not long_press_fired
            and self.spans.find_span_at(offset) is span
            and span.link.on_click is not None
        ):
            effects.append(InvokeCallback(CallbackKind.CLICK, span))
        return effects

    def _timer_fire(self, event: TimerFire) -> list[InteractionEffect]:
        span = self._pressed
        if span is None or self._long_press_fired or not self.long_press_enabled:
            return []
        if event.generation is not None and event.generation != self._timer_generation:
            return []

        self._long_press_fired = True
        if span.link.on_long_click is None:
            return []
        return [InvokeCallback(CallbackKind.LONG_CLICK, span)]

    def _to_idle(self) -> None:
        self._pressed = None
        self._long_press_fired = False


# =============================================================================
# Controller
# =============================================================================

class InteractionController:
    """
    Drives an ``InteractionStateMachine`` and performs its effects.

    Events are processed strictly one at a time in arrival order: an event
    raised from inside a callback is queued and handled once the current
    event's effects have all run.
    """

    def __init__(
        self,
        spans: SpanSource,
        scheduler: Optional[Scheduler] = None,
        long_press_timeout_ms: Optional[int] = DEFAULT_LONG_PRESS_TIMEOUT_MS,
        fallback: Optional[FallbackHandler] = None,
        state_listener: Optional[StateListener] = None,
    ):
        if scheduler is None:
            long_press_timeout_ms = None
        self.machine = InteractionStateMachine(spans, long_press_timeout_ms)
        self.scheduler = scheduler
        self.fallback = fallback
        self.state_listener = state_listener
        self._timer: Optional[TimerHandle] = None
        self._pending: deque[InteractionEvent] = deque()
        self._dispatching = False

    @property
    def spans(self) -> SpanSource:
        return self.machine.spans

    @property
    def pressed_span(self) -> Optional[ResolvedSpan]:
        return self.machine.pressed_span

    @property
    def is_idle(self) -> bool:
        return self.machine.is_idle

    def attach(self, spans: SpanSource) -> None:
        """
        Switch to a new span source.

        An active press belongs to the previous spans and is cancelled
        without firing callbacks.
        """
        if not self.machine.is_idle:
            logging.debug("InteractionController - Cancelling active press on re-attach")
            self._perform(self.machine.release())
        self.machine.spans = spans

    # Event entry points ---------------------------------------------------

    def on_press_start(self, offset: int) -> Optional[InteractionResult]:
        return self.dispatch(PressStart(offset))

    def on_press_end(self, offset: int) -> Optional[InteractionResult]:
        return self.dispatch(PressEnd(offset))

    def on_press_cancel(self) -> Optional[InteractionResult]:
        return self.dispatch(PressCancel())

    def on_timer_fire(self) -> Optional[InteractionResult]:
        return self.dispatch(TimerFire())

    def dispatch(self, event: InteractionEvent) -> Optional[InteractionResult]:
        """
        Process ``event``.

        Returns:
            The event's result, or None when the event was queued behind
            the event currently being processed.
        """
        self._pending.append(event)
        if self._dispatching:
            return None

        self._dispatching = True
        first: Optional[InteractionResult] = None
        try:
            while self._pending:
                result = self.machine.handle(self._pending.popleft())
                if first is None:
                    first = result
                if result.effects:
                    logging.debug(
                        f"InteractionController - {result.event!r} -> "
                        f"{len(result.effects)} effect(s)"
                    )
                self._perform(result.effects)
        except Exception:
            # Events queued behind a failing callback are dropped with it
            self._pending.clear()
            raise
        finally:
            self._dispatching = False
        return first

    # Effects --------------------------------------------------------------

    def _perform(self, effects: list[InteractionEffect]) -> None:
        """
        Perform every effect in order.

        A raising callback does not stop the remaining effects; the first
        error is re-raised once all of them ran.
        """
        error: Optional[Exception] = None
        for effect in effects:
            try:
                self._perform_one(effect)
            except Exception as e:
                if error is None:
                    error = e
        if error is not None:
            raise error

    def _perform_one(self, effect: InteractionEffect) -> None:
        if isinstance(effect, SetVisualState):
            effect.span.state = effect.state
            if self.state_listener is not None:
                self.state_listener(effect.span)
        elif isinstance(effect, InvokeCallback):
            self._invoke(effect)
        elif isinstance(effect, ArmTimer):
            self._arm_timer(effect.delay_ms)
        elif isinstance(effect, CancelTimer):
            self._cancel_timer()
        elif isinstance(effect, DelegateToFallback):
            if self.fallback is not None:
                self.fallback(effect.offset, effect.phase)

    def _invoke(self, effect: InvokeCallback) -> None:
        link = effect.span.link
        callback = {
            CallbackKind.PRESS: link.on_press,
            CallbackKind.CLICK: link.on_click,
            CallbackKind.LONG_CLICK: link.on_long_click,
        }[effect.kind]
        if callback is not None:
            callback(effect.span.text)

    def _arm_timer(self, delay_ms: int) -> None:
        self._cancel_timer()
        generation = self.machine.timer_generation
        self._timer = self.scheduler.schedule(
            delay_ms, lambda: self.dispatch(TimerFire(generation))
        )

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
