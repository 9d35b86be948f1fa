"""
UI-agnostic link resolution engine.

Provides:
- Link rules and pattern compilation
- Pattern expansion and range resolution
- The span registry and the interaction state machine
- LinkBuilder, which runs the whole pipeline for a view
"""

from link_builder.core.models import (
    DEFAULT_LINK_STYLE,
    ExpansionOrder,
    InvalidPatternError,
    Link,
    LinkError,
    LinkStyle,
    Overlay,
    Range,
    ResolvedSpan,
    SpanState,
)
from link_builder.core.patterns import (
    CompiledPattern,
    PatternEngine,
    RegexEngine,
)
from link_builder.core.matcher import LinkMatcher
from link_builder.core.resolver import RangeResolver
from link_builder.core.registry import SpanRegistry
from link_builder.core.interaction import (
    InteractionController,
    InteractionStateMachine,
    Scheduler,
    TimerHandle,
)
from link_builder.core.builder import LinkBuilder, TextViewAdapter

__all__ = [
    # Models
    'DEFAULT_LINK_STYLE',
    'ExpansionOrder',
    'InvalidPatternError',
    'Link',
    'LinkError',
    'LinkStyle',
    'Overlay',
    'Range',
    'ResolvedSpan',
    'SpanState',
    # Patterns
    'CompiledPattern',
    'PatternEngine',
    'RegexEngine',
    # Pipeline
    'LinkMatcher',
    'RangeResolver',
    'SpanRegistry',
    'LinkBuilder',
    'TextViewAdapter',
    # Interaction
    'InteractionController',
    'InteractionStateMachine',
    'Scheduler',
    'TimerHandle',
]
