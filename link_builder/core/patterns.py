"""
Pattern engine abstraction.

The matcher only needs two operations from a regular-expression engine:
compiling a source string and enumerating non-overlapping matches in a
buffer. Both are expressed here so the rest of the core never imports a
specific engine.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator

from link_builder.core.models import InvalidPatternError


@dataclass(frozen=True)
class PatternMatch:
    """A single match of a compiled pattern."""
    start: int
    end: int
    text: str

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


class CompiledPattern(ABC):
    """
    A compiled, stateless pattern.

    Instances can be shared between links and reused across any number of
    resolutions.
    """

    @property
    @abstractmethod
    def source(self) -> str:
        """The source the pattern was compiled from."""

    @abstractmethod
    def find_all(self, text: str) -> Iterator[PatternMatch]:
        """
        Yield matches in ``text`` from left to right.

        A zero-length match is yielded once and the search resumes one
        character further on, so every match starts at or after the end of
        the previous one and the iteration always terminates.
        """


class PatternEngine(ABC):
    """Factory for compiled patterns."""

    @abstractmethod
    def compile(self, source: str, ignore_case: bool = False) -> CompiledPattern:
        """
        Compile ``source``.

        Raises:
            InvalidPatternError: if the source is not a valid pattern
        """


class RegexPattern(CompiledPattern):
    """CompiledPattern backed by the ``re`` module."""

    def __init__(self, regex: re.Pattern[str]):
        self._regex = regex

    @property
    def source(self) -> str:
        return self._regex.pattern

    @property
    def regex(self) -> re.Pattern[str]:
        return self._regex

    def find_all(self, text: str) -> Iterator[PatternMatch]:
        pos = 0
        length = len(text)
        while pos <= length:
            m = self._regex.search(text, pos)
            if m is None:
                return
            start, end = m.span()
            yield PatternMatch(start=start, end=end, text=m.group())
            # Step over empty matches or the same position matches forever
            pos = end if end > start else end + 1

    def __repr__(self) -> str:
        return f"RegexPattern({self.source!r})"


class RegexEngine(PatternEngine):
    """PatternEngine for Python's ``re`` syntax."""

    def __init__(self, flags: int = 0):
        self.flags = flags

    def compile(self, source: str, ignore_case: bool = False) -> RegexPattern:
        flags = self.flags
        if ignore_case:
            flags |= re.IGNORECASE
        try:
            regex = re.compile(source, flags)
        except re.error as e:
            raise InvalidPatternError(source, e.msg, e.pos) from e
        return RegexPattern(regex)


_DEFAULT_ENGINE = RegexEngine()


def default_engine() -> PatternEngine:
    """Engine used when a caller does not supply one."""
    return _DEFAULT_ENGINE
