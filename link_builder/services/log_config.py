"""
Logging configuration for applications embedding the link builder.

Library modules log through the root logger as ``Component - message``.
``setup_logging`` installs handlers that show the component as its own
column; the library itself never installs handlers.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO


class LogFormatter(logging.Formatter):
    """Splits the ``Component - `` prefix into a column; colors optional."""

    COLORS = {
        logging.DEBUG: '\033[36m',     # Cyan
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = False):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(component)-22s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors

    @staticmethod
    def split_component(record: logging.LogRecord) -> tuple[str, str]:
        """Return ``(component, message)``; the logger name stands in when there is no prefix."""
        text = record.getMessage()
        component, sep, message = text.partition(" - ")
        if sep and component.isidentifier():
            return component, message
        return record.name, text

    def format(self, record: logging.LogRecord) -> str:
        component, message = self.split_component(record)
        split = logging.makeLogRecord(record.__dict__)
        split.msg, split.args, split.component = message, None, component
        formatted = super().format(split)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def _stream_is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Route link builder logging to the console and optionally a file.

    Args:
        level: Log level name; unknown names fall back to INFO
        log_file: Optional file to log to in addition to the console
        stream: Console stream, stdout by default; colored only on a terminal

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    stream = stream or sys.stdout
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=_stream_is_tty(stream)))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter())
        root_logger.addHandler(file_handler)

    # Qt's own logging only matters when it warns
    logging.getLogger('PyQt6').setLevel(logging.WARNING)

    return root_logger
