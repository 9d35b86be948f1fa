import pytest

from link_builder.core.interaction import InteractionController, InteractionStateMachine
from link_builder.core.models import (
    ArmTimer,
    CallbackKind,
    CancelTimer,
    DelegateToFallback,
    InvokeCallback,
    Link,
    PressCancel,
    PressEnd,
    PressPhase,
    PressStart,
    SetVisualState,
    SpanState,
    TimerFire,
)
from link_builder.core.registry import SpanRegistry
from link_builder.core.resolver import RangeResolver

BUFFER = "open the docs or the faq"


def build_registry(*links):
    registry = SpanRegistry()
    registry.build(BUFFER, RangeResolver().resolve(BUFFER, links))
    return registry


@pytest.fixture
def links(recorder):
    docs = Link(
        text="docs",
        on_click=recorder.click,
        on_long_click=recorder.long_click,
        on_press=recorder.press,
    )
    faq = Link(text="faq", on_click=recorder.click)
    return docs, faq


@pytest.fixture
def registry(links):
    return build_registry(*links)


@pytest.fixture
def controller(registry, scheduler):
    return InteractionController(registry, scheduler=scheduler)


DOCS = 10   # offset inside "docs"
FAQ = 22    # offset inside "faq"
PLAIN = 1   # offset outside every link


class TestStateMachine:
    """Effects produced by the pure state machine."""

    def test_press_start_on_span(self, registry):
        machine = InteractionStateMachine(registry)
        span = registry.find_span_at(DOCS)

        result = machine.handle(PressStart(DOCS))

        assert result.effects == [
            SetVisualState(span, SpanState.PRESSED),
            ArmTimer(500),
            InvokeCallback(CallbackKind.PRESS, span),
        ]
        assert machine.pressed_span is span
        assert result.handled

    def test_press_start_off_span_delegates(self, registry):
        machine = InteractionStateMachine(registry)
        result = machine.handle(PressStart(PLAIN))
        assert result.effects == [DelegateToFallback(PLAIN, PressPhase.START)]
        assert machine.is_idle
        assert not result.handled

    def test_release_inside_clicks(self, registry):
        machine = InteractionStateMachine(registry)
        span = registry.find_span_at(DOCS)
        machine.handle(PressStart(DOCS))

        result = machine.handle(PressEnd(DOCS + 1))

        assert result.effects == [
            CancelTimer(),
            SetVisualState(span, SpanState.NORMAL),
            InvokeCallback(CallbackKind.CLICK, span),
        ]
        assert machine.is_idle

    def test_no_timer_when_long_press_disabled(self, registry):
        machine = InteractionStateMachine(registry, long_press_timeout_ms=None)
        span = registry.find_span_at(FAQ)

        assert machine.handle(PressStart(FAQ)).effects == [SetVisualState(span, SpanState.PRESSED)]
        assert machine.handle(PressCancel()).effects == [SetVisualState(span, SpanState.NORMAL)]

    def test_stale_timer_generation_is_ignored(self, registry):
        machine = InteractionStateMachine(registry)
        machine.handle(PressStart(DOCS))
        stale = machine.timer_generation
        machine.handle(PressEnd(DOCS))
        machine.handle(PressStart(DOCS))

        assert machine.handle(TimerFire(stale)).effects == []
        assert machine.handle(TimerFire(machine.timer_generation)).effects != []

    def test_unknown_event_raises(self, registry):
        with pytest.raises(TypeError):
            InteractionStateMachine(registry).handle(object())


class TestController:
    """Callbacks and visual state driven through the controller."""

    def test_press_and_release_inside_fires_one_click(self, controller, recorder):
        controller.on_press_start(DOCS)
        assert controller.pressed_span.is_pressed

        controller.on_press_end(DOCS)

        assert recorder.of("click") == ["docs"]
        assert recorder.of("press") == ["docs"]
        assert controller.is_idle

    def test_release_outside_cancels_click(self, controller, registry, recorder):
        span = registry.find_span_at(DOCS)
        controller.on_press_start(DOCS)

        controller.on_press_end(PLAIN)

        assert recorder.of("click") == []
        assert controller.is_idle
        assert span.state == SpanState.NORMAL

    def test_release_on_other_span_does_not_click_either(self, controller, recorder):
        controller.on_press_start(DOCS)
        controller.on_press_end(FAQ)
        assert recorder.of("click") == []
        assert controller.is_idle

    def test_cancel_reverts_without_callback(self, controller, registry, scheduler, recorder):
        span = registry.find_span_at(DOCS)
        controller.on_press_start(DOCS)

        controller.on_press_cancel()

        assert span.state == SpanState.NORMAL
        assert controller.is_idle
        assert recorder.of("click") == []
        assert scheduler.active == []

    def test_long_press_fires_once_and_suppresses_click(self, controller, scheduler, recorder):
        controller.on_press_start(DOCS)
        assert scheduler.active[0].delay_ms == 500

        scheduler.fire_all()
        controller.on_timer_fire()
        controller.on_press_end(DOCS)

        assert recorder.of("long_click") == ["docs"]
        assert recorder.of("click") == []
        assert controller.is_idle

    def test_long_press_without_callback_still_suppresses_click(self, controller, scheduler, recorder):
        controller.on_press_start(FAQ)
        scheduler.fire_all()
        controller.on_press_end(FAQ)

        assert recorder.calls == []

    def test_release_before_timeout_cancels_timer(self, controller, scheduler, recorder):
        controller.on_press_start(DOCS)
        timer = scheduler.timers[0]
        controller.on_press_end(DOCS)

        assert timer.cancelled
        timer.fire()
        assert recorder.of("long_click") == []

    def test_new_press_arms_new_timer(self, controller, scheduler):
        controller.on_press_start(DOCS)
        controller.on_press_end(DOCS)
        controller.on_press_start(FAQ)

        assert len(scheduler.timers) == 2
        assert scheduler.timers[0].cancelled
        assert len(scheduler.active) == 1

    def test_second_press_while_pressed_is_ignored(self, controller, registry, recorder):
        docs = registry.find_span_at(DOCS)
        faq = registry.find_span_at(FAQ)
        controller.on_press_start(DOCS)

        result = controller.on_press_start(FAQ)

        assert result.effects == []
        assert controller.pressed_span is docs
        assert faq.state == SpanState.NORMAL

        controller.on_press_end(DOCS)
        assert recorder.of("click") == ["docs"]

    def test_fallback_receives_unlinked_presses(self, registry, scheduler):
        calls = []
        controller = InteractionController(
            registry, scheduler=scheduler, fallback=lambda offset, phase: calls.append((offset, phase))
        )

        controller.on_press_start(PLAIN)
        controller.on_press_end(PLAIN + 1)

        assert calls == [(PLAIN, PressPhase.START), (PLAIN + 1, PressPhase.END)]
        assert scheduler.timers == []

    def test_state_listener_sees_transitions(self, registry, scheduler):
        seen = []
        controller = InteractionController(
            registry, scheduler=scheduler, state_listener=lambda span: seen.append(span.state)
        )
        controller.on_press_start(DOCS)
        controller.on_press_end(DOCS)
        assert seen == [SpanState.PRESSED, SpanState.NORMAL]

    def test_without_scheduler_long_press_is_off(self, registry, recorder):
        controller = InteractionController(registry)
        controller.on_press_start(DOCS)
        controller.on_timer_fire()
        controller.on_press_end(DOCS)

        assert recorder.of("long_click") == []
        assert recorder.of("click") == ["docs"]
        assert controller.machine.long_press_enabled is False

    def test_events_raised_from_callbacks_are_queued(self, scheduler):
        order = []
        controller = None

        def on_click(text):
            order.append(("click", text))
            # Re-entrant event: must wait for the current one to finish
            assert controller.on_press_start(FAQ) is None
            order.append(("after-nested", controller.is_idle))

        docs = Link(text="docs", on_click=on_click)
        faq = Link(text="faq", on_press=lambda text: order.append(("press", text)))
        controller = InteractionController(build_registry(docs, faq), scheduler=scheduler)

        controller.on_press_start(DOCS)
        controller.on_press_end(DOCS)

        assert order == [("click", "docs"), ("after-nested", True), ("press", "faq")]
        assert controller.pressed_span.text == "faq"

    def test_callback_error_propagates_after_returning_to_idle(self, scheduler):
        def broken(text):
            raise RuntimeError("boom")

        controller = InteractionController(
            build_registry(Link(text="docs", on_click=broken)), scheduler=scheduler
        )
        controller.on_press_start(DOCS)

        with pytest.raises(RuntimeError):
            controller.on_press_end(DOCS)

        assert controller.is_idle
        controller.on_press_start(DOCS)
        assert not controller.is_idle

    def test_events_queued_by_a_failing_callback_are_dropped(self, scheduler, recorder):
        controller = None

        def broken(text):
            controller.on_press_start(FAQ)
            raise RuntimeError("boom")

        docs = Link(text="docs", on_click=broken)
        faq = Link(text="faq", on_press=recorder.press)
        controller = InteractionController(build_registry(docs, faq), scheduler=scheduler)
        controller.on_press_start(DOCS)

        with pytest.raises(RuntimeError):
            controller.on_press_end(DOCS)

        controller.on_press_cancel()
        assert recorder.of("press") == []
        assert controller.is_idle

    def test_failing_listener_does_not_skip_remaining_effects(self, scheduler, recorder):
        def listener(span):
            raise RuntimeError("repaint failed")

        controller = InteractionController(
            build_registry(Link(text="docs", on_press=recorder.press)),
            scheduler=scheduler,
            state_listener=listener,
        )

        with pytest.raises(RuntimeError, match="repaint failed"):
            controller.on_press_start(DOCS)

        assert controller.pressed_span.is_pressed
        assert len(scheduler.active) == 1
        assert recorder.of("press") == ["docs"]

    def test_attach_cancels_active_press(self, controller, registry, scheduler, recorder):
        span = registry.find_span_at(DOCS)
        controller.on_press_start(DOCS)

        new_registry = build_registry(Link(text="faq", on_click=recorder.click))
        controller.attach(new_registry)

        assert controller.is_idle
        assert span.state == SpanState.NORMAL
        assert scheduler.active == []
        assert controller.spans is new_registry

        controller.on_press_start(DOCS)
        assert controller.is_idle
        controller.on_press_start(FAQ)
        controller.on_press_end(FAQ)
        assert recorder.of("click") == ["faq"]
