"""
Span registry: the published overlay for the current buffer.
"""

from __future__ import annotations

import bisect
import logging
from typing import Iterable, Optional

from link_builder.core.models import Overlay, ResolvedSpan


class SpanRegistry:
    """
    Holds the overlay produced by the latest build.

    The overlay is replaced wholesale on every build; spans are never
    edited in place apart from their visual state.
    """

    def __init__(self):
        self._overlay = Overlay(text="")
        self._starts: list[int] = []

    @property
    def overlay(self) -> Overlay:
        return self._overlay

    @property
    def spans(self) -> tuple[ResolvedSpan, ...]:
        return self._overlay.spans

    def __len__(self) -> int:
        return len(self._overlay.spans)

    def reset(self) -> None:
        """Discard every span."""
        self._overlay = Overlay(text="")
        self._starts = []

    def build(self, buffer: str, spans: Iterable[ResolvedSpan]) -> Overlay:
        """
        Publish ``spans`` for ``buffer``.

        Spans are stored by increasing start. The sort is stable, so spans
        sharing a start keep their resolution order.
        """
        ordered = tuple(sorted(spans, key=lambda span: span.start))
        for span in ordered:
            if span.end > len(buffer):
                raise ValueError(
                    f"Span [{span.start}, {span.end}) exceeds buffer of length {len(buffer)}"
                )
        self._overlay = Overlay(text=buffer, spans=ordered)
        self._starts = [span.start for span in ordered]
        logging.debug(f"SpanRegistry - Published {len(ordered)} span(s)")
        return self._overlay

    def find_span_at(self, offset: int) -> Optional[ResolvedSpan]:
        """Return the first stored span containing ``offset``, if any."""
        # Only spans starting at or before offset can contain it
        limit = bisect.bisect_right(self._starts, offset)
        for span in self._overlay.spans[:limit]:
            if span.range.contains(offset):
                return span
        return None
