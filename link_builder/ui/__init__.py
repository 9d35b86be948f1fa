"""
PyQt6 adapter for the link builder.
"""

from link_builder.ui.timers import QtScheduler
from link_builder.ui.widgets.link_text_view import LinkTextView

__all__ = [
    'QtScheduler',
    'LinkTextView',
]
