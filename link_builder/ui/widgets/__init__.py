"""
Link-aware PyQt6 widgets.
"""

from link_builder.ui.widgets.link_text_view import LinkTextView

__all__ = [
    'LinkTextView',
]
