"""
Core data models for the link builder.

This module defines the data structures shared by every stage of the
linkify pipeline:
- Link rules (literal text or compiled pattern) and their style options
- Character ranges and resolved spans
- The overlay published for a text buffer
- Interaction events and effects

All models are UI-agnostic; the Qt adapter only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Iterator, Optional

if TYPE_CHECKING:
    from link_builder.core.patterns import CompiledPattern, PatternEngine


# =============================================================================
# Exceptions
# =============================================================================

class LinkError(ValueError):
    """Raised when a link rule cannot be constructed."""


class InvalidPatternError(LinkError):
    """Raised when a pattern source fails to compile."""

    def __init__(self, source: str, reason: str, position: Optional[int] = None):
        self.source = source
        self.reason = reason
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Invalid pattern {source!r}{where}: {reason}")


# =============================================================================
# Enumerations
# =============================================================================

class SpanState(Enum):
    """Visual state of a resolved span."""
    NORMAL = auto()
    PRESSED = auto()


class ExpansionOrder(Enum):
    """Where links derived from a pattern are placed in the expanded list."""
    IN_PLACE = auto()   # At the pattern link's position
    APPEND = auto()     # After every originally supplied literal link


class PressPhase(Enum):
    """Phase of a pointer event forwarded to a fallback handler."""
    START = auto()
    END = auto()


# =============================================================================
# Link Models
# =============================================================================

ClickCallback = Callable[[str], None]


@dataclass(frozen=True)
class LinkStyle:
    """
    Presentation hints for a link.

    Colors are ``#RRGGBB`` strings. Any field left as ``None`` takes the
    configured default when the link is resolved. The engine never
    interprets these values.
    """
    text_color: Optional[str] = None
    highlighted_text_color: Optional[str] = None
    highlight_alpha: Optional[float] = None
    underlined: Optional[bool] = None
    bold: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.highlight_alpha is not None and not 0.0 <= self.highlight_alpha <= 1.0:
            raise LinkError(
                f"highlight_alpha must be between 0.0 and 1.0, got {self.highlight_alpha}"
            )

    def merged(self, defaults: 'LinkStyle') -> 'LinkStyle':
        """Return a copy with every unset field taken from ``defaults``."""
        return LinkStyle(**{
            name: getattr(defaults, name) if getattr(self, name) is None else getattr(self, name)
            for name in self.__dataclass_fields__
        })


DEFAULT_LINK_STYLE = LinkStyle(
    text_color="#33B5E5",
    highlighted_text_color="#0099CC",
    highlight_alpha=0.20,
    underlined=True,
    bold=False,
)


class Link:
    """
    A single link rule.

    A link targets either a literal ``text`` or a compiled ``pattern``, never
    both. Pattern links are expanded into literal links (see ``clone``)
    before any range is resolved.
    """

    def __init__(
        self,
        text: Optional[str] = None,
        pattern: Optional[CompiledPattern] = None,
        style: Optional[LinkStyle] = None,
        on_click: Optional[ClickCallback] = None,
        on_long_click: Optional[ClickCallback] = None,
        on_press: Optional[ClickCallback] = None,
        highlight_color: Optional[str] = None,
    ):
        if (text is None) == (pattern is None):
            raise LinkError("A link needs exactly one of 'text' or 'pattern'")
        self._text = text
        self._pattern = pattern
        self.style = style or LinkStyle()
        self.on_click = on_click
        self.on_long_click = on_long_click
        self.on_press = on_press
        self.highlight_color = highlight_color

    @classmethod
    def from_pattern(
        cls,
        source: str,
        ignore_case: bool = False,
        engine: Optional[PatternEngine] = None,
        **options,
    ) -> 'Link':
        """
        Compile ``source`` and create a pattern link.

        Raises:
            InvalidPatternError: if ``source`` does not compile
        """
        if engine is None:
            from link_builder.core.patterns import default_engine
            engine = default_engine()
        return cls(pattern=engine.compile(source, ignore_case=ignore_case), **options)

    @property
    def text(self) -> Optional[str]:
        """Literal text to link, or None for a pattern link."""
        return self._text

    @property
    def pattern(self) -> Optional[CompiledPattern]:
        """Compiled pattern, or None for a literal link."""
        return self._pattern

    @property
    def is_pattern(self) -> bool:
        return self._pattern is not None

    def clone(self, text: str) -> 'Link':
        """
        Derive a literal link carrying this link's style and callbacks.

        The derived link never shares the pattern, so it cannot be
        expanded a second time.
        """
        return Link(
            text=text,
            style=self.style,
            on_click=self.on_click,
            on_long_click=self.on_long_click,
            on_press=self.on_press,
            highlight_color=self.highlight_color,
        )

    def __repr__(self) -> str:
        if self._pattern is not None:
            return f"Link(pattern={self._pattern.source!r})"
        return f"Link(text={self._text!r})"


# =============================================================================
# Span Models
# =============================================================================

@dataclass(frozen=True)
class Range:
    """Half-open character interval ``[start, end)`` over a buffer."""
    start: int
    end: int

    def __post_init__(self) -> None:
        if not 0 <= self.start < self.end:
            raise ValueError(f"Invalid range [{self.start}, {self.end})")

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, offset: int) -> bool:
        """True if ``offset`` falls inside the range."""
        return self.start <= offset < self.end

    def overlaps(self, other: 'Range') -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(eq=False)
class ResolvedSpan:
    """
    A link bound to a character range of the buffer.

    Spans compare by identity: two links resolving to the same range are
    still distinct spans. ``style`` is the link's style with every unset
    field filled in.
    """
    range: Range
    link: Link
    text: str
    state: SpanState = SpanState.NORMAL
    style: LinkStyle = DEFAULT_LINK_STYLE

    @property
    def start(self) -> int:
        return self.range.start

    @property
    def end(self) -> int:
        return self.range.end

    @property
    def is_pressed(self) -> bool:
        return self.state == SpanState.PRESSED


@dataclass(frozen=True)
class Overlay:
    """
    Spans published atop a text buffer.

    The buffer characters are never altered; ``spans`` is sorted by start.
    """
    text: str
    spans: tuple[ResolvedSpan, ...] = ()

    def __iter__(self) -> Iterator[ResolvedSpan]:
        return iter(self.spans)

    def __len__(self) -> int:
        return len(self.spans)

    @property
    def is_empty(self) -> bool:
        return not self.spans

    def ranges(self) -> list[tuple[int, int]]:
        """``(start, end)`` pairs in storage order."""
        return [(span.start, span.end) for span in self.spans]

    def substrings(self) -> list[str]:
        return [self.text[span.start:span.end] for span in self.spans]


# =============================================================================
# Interaction Models
# =============================================================================

@dataclass(frozen=True)
class PressStart:
    offset: int


@dataclass(frozen=True)
class PressEnd:
    offset: int


@dataclass(frozen=True)
class PressCancel:
    pass


@dataclass(frozen=True)
class TimerFire:
    generation: Optional[int] = None  # None matches any armed timer


InteractionEvent = PressStart | PressEnd | PressCancel | TimerFire


class CallbackKind(Enum):
    """Link callback invoked by the interaction controller."""
    PRESS = auto()
    CLICK = auto()
    LONG_CLICK = auto()


@dataclass(frozen=True)
class SetVisualState:
    span: ResolvedSpan
    state: SpanState


@dataclass(frozen=True)
class InvokeCallback:
    kind: CallbackKind
    span: ResolvedSpan


@dataclass(frozen=True)
class ArmTimer:
    delay_ms: int


@dataclass(frozen=True)
class CancelTimer:
    pass


@dataclass(frozen=True)
class DelegateToFallback:
    offset: int
    phase: PressPhase


InteractionEffect = SetVisualState | InvokeCallback | ArmTimer | CancelTimer | DelegateToFallback


@dataclass
class InteractionResult:
    """Effects produced by a single event, in execution order."""
    event: InteractionEvent
    effects: list[InteractionEffect] = field(default_factory=list)

    @property
    def handled(self) -> bool:
        """True if the event touched a span."""
        return any(not isinstance(e, DelegateToFallback) for e in self.effects)
