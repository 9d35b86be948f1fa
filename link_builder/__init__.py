"""
Link builder: attach clickable links to spans of text.

Links are literal strings or regular-expression patterns. The core engine
resolves them to character ranges of a text buffer and runs the press/click
state machine; ``link_builder.ui`` adapts it to PyQt6 widgets.
"""

from link_builder.core import (
    InteractionController,
    InvalidPatternError,
    Link,
    LinkBuilder,
    LinkError,
    LinkStyle,
    Overlay,
    ResolvedSpan,
)

__version__ = "1.0.0"

__all__ = [
    'InteractionController',
    'InvalidPatternError',
    'Link',
    'LinkBuilder',
    'LinkError',
    'LinkStyle',
    'Overlay',
    'ResolvedSpan',
    '__version__',
]
