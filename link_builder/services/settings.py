"""
Link builder settings management.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from link_builder.core.models import ExpansionOrder, LinkStyle


@dataclass
class StyleSettings:
    """Default presentation for links that do not set their own."""
    text_color: str = "#33B5E5"
    highlighted_text_color: str = "#0099CC"
    highlight_alpha: float = 0.20
    underlined: bool = True
    bold: bool = False

    def to_link_style(self) -> LinkStyle:
        return LinkStyle(
            text_color=self.text_color,
            highlighted_text_color=self.highlighted_text_color,
            highlight_alpha=self.highlight_alpha,
            underlined=self.underlined,
            bold=self.bold,
        )


@dataclass
class InteractionSettings:
    """Settings for press handling."""
    long_press_enabled: bool = True
    long_press_timeout_ms: int = 500

    @property
    def effective_timeout_ms(self) -> Optional[int]:
        """Timeout to arm, or None when long-press is off."""
        return self.long_press_timeout_ms if self.long_press_enabled else None


@dataclass
class ResolutionSettings:
    """Settings for pattern expansion and range resolution."""
    expansion_order: ExpansionOrder = ExpansionOrder.APPEND
    ignore_case: bool = False


@dataclass
class LinkBuilderSettings:
    """Main settings container."""
    style: StyleSettings = field(default_factory=StyleSettings)
    interaction: InteractionSettings = field(default_factory=InteractionSettings)
    resolution: ResolutionSettings = field(default_factory=ResolutionSettings)


class SettingsManager:
    """Manager for loading/saving link builder settings as JSON."""

    def __init__(self, settings_path: Path | str):
        self.settings_path = Path(settings_path)
        self._settings: Optional[LinkBuilderSettings] = None
        self._observers: list[Callable[[LinkBuilderSettings], None]] = []

    @property
    def settings(self) -> LinkBuilderSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> LinkBuilderSettings:
        """Load settings from disk, falling back to defaults."""
        if not self.settings_path.exists():
            return LinkBuilderSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logging.warning(f"SettingsManager - Could not read {self.settings_path}: {e}")
            return LinkBuilderSettings()

        if not isinstance(data, dict):
            logging.warning(f"SettingsManager - Ignoring non-object settings in {self.settings_path}")
            return LinkBuilderSettings()
        return self.from_dict(data)

    def save(self, settings: Optional[LinkBuilderSettings] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(settings), f, indent=2)
        except OSError as e:
            logging.error(f"SettingsManager - Failed to save {self.settings_path}: {e}")
            return False

        self._settings = settings
        self._notify_observers()
        return True

    def reset(self) -> LinkBuilderSettings:
        """Reset to default settings."""
        self._settings = LinkBuilderSettings()
        self.save()
        return self._settings

    def add_observer(self, callback: Callable[[LinkBuilderSettings], None]) -> None:
        """Add a callback to be notified of settings changes."""
        self._observers.append(callback)

    def remove_observer(self, callback: Callable[[LinkBuilderSettings], None]) -> None:
        """Remove a settings change observer."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self) -> None:
        for callback in self._observers:
            callback(self._settings)

    @staticmethod
    def to_dict(settings: LinkBuilderSettings) -> dict:
        """Convert settings to a JSON-serializable dictionary."""
        def convert(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.name
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert(item) for item in obj]
            return obj

        return convert(asdict(settings))

    @staticmethod
    def from_dict(data: dict) -> LinkBuilderSettings:
        """Convert a dictionary back to settings, keeping defaults for gaps."""
        def get_enum(enum_class: type, value: Any, default: Enum) -> Enum:
            if isinstance(value, str):
                try:
                    return enum_class[value]
                except KeyError:
                    logging.warning(f"SettingsManager - Unknown {enum_class.__name__} {value!r}")
            return default

        style_data = data.get('style', {})
        defaults = StyleSettings()
        alpha = style_data.get('highlight_alpha', defaults.highlight_alpha)
        if not isinstance(alpha, (int, float)) or not 0.0 <= alpha <= 1.0:
            logging.warning(f"SettingsManager - highlight_alpha {alpha!r} out of range")
            alpha = defaults.highlight_alpha
        style = StyleSettings(
            text_color=style_data.get('text_color', defaults.text_color),
            highlighted_text_color=style_data.get(
                'highlighted_text_color', defaults.highlighted_text_color),
            highlight_alpha=float(alpha),
            underlined=style_data.get('underlined', defaults.underlined),
            bold=style_data.get('bold', defaults.bold),
        )

        interaction_data = data.get('interaction', {})
        timeout = interaction_data.get('long_press_timeout_ms', 500)
        if not isinstance(timeout, int) or timeout <= 0:
            logging.warning(f"SettingsManager - long_press_timeout_ms {timeout!r} must be a positive int")
            timeout = 500
        interaction = InteractionSettings(
            long_press_enabled=interaction_data.get('long_press_enabled', True),
            long_press_timeout_ms=timeout,
        )

        resolution_data = data.get('resolution', {})
        resolution = ResolutionSettings(
            expansion_order=get_enum(
                ExpansionOrder,
                resolution_data.get('expansion_order'),
                ExpansionOrder.APPEND,
            ),
            ignore_case=resolution_data.get('ignore_case', False),
        )

        return LinkBuilderSettings(
            style=style,
            interaction=interaction,
            resolution=resolution,
        )
