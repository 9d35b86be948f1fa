"""
Range resolution for literal links.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from link_builder.core.models import DEFAULT_LINK_STYLE, Link, LinkStyle, Range, ResolvedSpan


class RangeResolver:
    """
    Finds where each literal link sits in the buffer.

    Every link is searched from offset 0 and binds to the first occurrence
    of its text only. Links whose text is missing or empty are skipped.
    Links with identical text resolve to the same range; no deduplication
    is performed.
    """

    def resolve_one(
        self,
        buffer: str,
        link: Link,
        default_style: Optional[LinkStyle] = None,
    ) -> ResolvedSpan | None:
        """Resolve a single link, or return None if it cannot be placed."""
        text = link.text
        if link.is_pattern or not text:
            logging.debug(f"RangeResolver - Skipping {link!r}: no literal text")
            return None

        start = buffer.find(text)
        if start < 0:
            logging.debug(f"RangeResolver - Skipping {link!r}: not found in buffer")
            return None

        return ResolvedSpan(
            range=Range(start, start + len(text)),
            link=link,
            text=text,
            style=link.style.merged(default_style or DEFAULT_LINK_STYLE),
        )

    def resolve(
        self,
        buffer: str,
        links: Sequence[Link],
        default_style: Optional[LinkStyle] = None,
    ) -> list[ResolvedSpan]:
        """
        Resolve links in order.

        Unset style fields of each link are filled from ``default_style``.

        Returns:
            Spans in resolution order (not sorted); skipped links are
            simply absent.
        """
        if not buffer:
            return []

        spans = []
        for link in links:
            span = self.resolve_one(buffer, link, default_style)
            if span is not None:
                spans.append(span)
        return spans
