"""
Link builder: the entry point tying the pipeline together.

    buffer + links -> LinkMatcher -> RangeResolver -> SpanRegistry -> view

The view is any object implementing ``TextViewAdapter``; the builder reads
its text once per build, hands it the resulting overlay and installs an
``InteractionController`` as its movement policy.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol, runtime_checkable

from link_builder.core.interaction import InteractionController, Scheduler
from link_builder.core.matcher import LinkMatcher
from link_builder.core.models import Link, Overlay, PressPhase, ResolvedSpan
from link_builder.core.patterns import PatternEngine
from link_builder.core.registry import SpanRegistry
from link_builder.core.resolver import RangeResolver
from link_builder.services.settings import LinkBuilderSettings


@runtime_checkable
class TextViewAdapter(Protocol):
    """Contract a UI view fulfils to receive links."""

    def get_current_text(self) -> str:
        ...

    def set_rendered_text(self, overlay: Overlay) -> None:
        ...

    def get_movement_policy(self) -> Optional[object]:
        ...

    def set_movement_policy(self, handler: InteractionController) -> None:
        ...

    def links_clickable(self) -> bool:
        ...

    def span_state_changed(self, span: ResolvedSpan) -> None:
        ...

    def scheduler(self) -> Optional[Scheduler]:
        ...

    def fallback_handler(self, offset: int, phase: PressPhase) -> None:
        ...


class LinkBuilder:
    """
    Collects links and applies them to a view.

    Usage:
        LinkBuilder.on(view).add_link(Link(text="terms")).build()
    """

    def __init__(
        self,
        view: Optional[TextViewAdapter] = None,
        settings: Optional[LinkBuilderSettings] = None,
        engine: Optional[PatternEngine] = None,
    ):
        self.view = view
        self.settings = settings or LinkBuilderSettings()
        self.engine = engine
        self.matcher = LinkMatcher()
        self.resolver = RangeResolver()
        self.registry = SpanRegistry()
        self._links: list[Link] = []

    @classmethod
    def on(cls, view: TextViewAdapter, **kwargs) -> 'LinkBuilder':
        return cls(view, **kwargs)

    @classmethod
    def from_text(
        cls,
        text: str,
        links: Iterable[Link],
        settings: Optional[LinkBuilderSettings] = None,
    ) -> Overlay:
        """Resolve ``links`` against ``text`` without any view."""
        builder = cls(settings=settings)
        builder.add_links(links)
        return builder.resolve(text)

    @property
    def links(self) -> list[Link]:
        return list(self._links)

    @property
    def overlay(self) -> Overlay:
        return self.registry.overlay

    def add_link(self, link: Link) -> 'LinkBuilder':
        self._links.append(link)
        return self

    def add_links(self, links: Iterable[Link]) -> 'LinkBuilder':
        self._links.extend(links)
        return self

    def add_pattern(self, source: str, **options) -> 'LinkBuilder':
        """
        Compile ``source`` and add it as a pattern link.

        Raises:
            InvalidPatternError: if ``source`` does not compile
        """
        options.setdefault('ignore_case', self.settings.resolution.ignore_case)
        return self.add_link(Link.from_pattern(source, engine=self.engine, **options))

    def resolve(self, text: str) -> Overlay:
        """
        Run the pipeline on ``text`` and publish the overlay.

        The previous overlay is always discarded first.
        """
        expanded = self.matcher.expand_all(
            text, self._links, order=self.settings.resolution.expansion_order
        )
        spans = self.resolver.resolve(
            text, expanded, default_style=self.settings.style.to_link_style()
        )
        self.registry.reset()
        overlay = self.registry.build(text, spans)
        logging.debug(
            f"LinkBuilder - {len(self._links)} link(s) expanded to {len(expanded)}, "
            f"{len(overlay)} resolved"
        )
        return overlay

    def build(self) -> Optional[Overlay]:
        """
        Apply the links to the view.

        Does nothing and returns None when no links were added.
        """
        if not self._links:
            logging.debug("LinkBuilder - No links to apply")
            return None
        if self.view is None:
            raise RuntimeError("LinkBuilder.build() needs a view; use resolve() for plain text")

        overlay = self.resolve(self.view.get_current_text())
        self.view.set_rendered_text(overlay)
        self._install_movement_policy()
        return overlay

    def _install_movement_policy(self) -> None:
        view = self.view
        current = view.get_movement_policy()
        if isinstance(current, InteractionController):
            current.attach(self.registry)
            return
        if not view.links_clickable():
            logging.debug("LinkBuilder - View does not allow clickable links")
            return

        timeout = self.settings.interaction.effective_timeout_ms
        controller = InteractionController(
            self.registry,
            scheduler=view.scheduler(),
            long_press_timeout_ms=timeout,
            fallback=view.fallback_handler,
            state_listener=view.span_state_changed,
        )
        view.set_movement_policy(controller)
        logging.info("LinkBuilder - Installed interaction controller on view")
