"""
Pattern expansion.

Turns every pattern link into one literal link per match in the buffer.
Expansion always produces a new list; the input list is never modified.
"""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

from link_builder.core.models import ExpansionOrder, Link


class LinkMatcher:
    """Expands pattern links against a text buffer."""

    def iter_expand(self, buffer: str, link: Link) -> Iterator[Link]:
        """
        Lazily yield one derived link per match, in match order.

        Each call starts a fresh search; nothing is shared between calls.
        Literal links yield nothing.
        """
        if link.pattern is None:
            return
        for match in link.pattern.find_all(buffer):
            yield link.clone(match.text)

    def expand(self, buffer: str, link: Link) -> list[Link]:
        """
        Expand a single pattern link.

        Returns:
            Derived literal links, left to right. Empty when the pattern
            does not match.
        """
        derived = list(self.iter_expand(buffer, link))
        logging.debug(
            f"LinkMatcher - {link!r} produced {len(derived)} match(es)"
        )
        return derived

    def expand_all(
        self,
        buffer: str,
        links: Sequence[Link],
        order: ExpansionOrder = ExpansionOrder.IN_PLACE,
    ) -> list[Link]:
        """
        Replace every pattern link by its expansion.

        Args:
            buffer: Text the patterns run against
            links: Links in the order they were supplied
            order: IN_PLACE keeps derived links at the pattern link's
                position; APPEND moves them after all literal links

        Returns:
            A new list in which no link carries a pattern
        """
        if order == ExpansionOrder.APPEND:
            literal = [link for link in links if not link.is_pattern]
            derived: list[Link] = []
            for link in links:
                if link.is_pattern:
                    derived.extend(self.expand(buffer, link))
            return literal + derived

        result: list[Link] = []
        for link in links:
            if link.is_pattern:
                result.extend(self.expand(buffer, link))
            else:
                result.append(link)
        return result
