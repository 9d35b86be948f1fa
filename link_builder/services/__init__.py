"""
Configuration and logging services.
"""

from link_builder.services.settings import (
    InteractionSettings,
    LinkBuilderSettings,
    ResolutionSettings,
    SettingsManager,
    StyleSettings,
)
from link_builder.services.log_config import LogFormatter, setup_logging

__all__ = [
    'InteractionSettings',
    'LinkBuilderSettings',
    'ResolutionSettings',
    'SettingsManager',
    'StyleSettings',
    'LogFormatter',
    'setup_logging',
]
