"""
Read-only text view that displays and activates links.

Provides:
- Link decoration through extra selections (color, underline, bold)
- Pressed-state highlighting
- Mouse press/release forwarding to the interaction controller
- Pointing-hand cursor over links
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QPoint, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QFont, QMouseEvent, QTextCharFormat, QTextCursor
from PyQt6.QtWidgets import QPlainTextEdit, QTextEdit, QWidget

from link_builder.core.interaction import InteractionController, Scheduler
from link_builder.core.models import Overlay, PressPhase, ResolvedSpan
from link_builder.ui.timers import QtScheduler


class LinkTextView(QPlainTextEdit):
    """
    Plain text view implementing the link builder's view contract.

    The document text is never modified by links; decoration lives in
    extra selections only.
    """

    # Press or release outside any link: (offset, PressPhase)
    background_pressed = pyqtSignal(int, object)

    def __init__(self, text: str = "", parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._overlay = Overlay(text="")
        self._movement_policy: Optional[object] = None
        self._links_clickable = True
        self._scheduler = QtScheduler(self)

        self.setReadOnly(True)
        self.setMouseTracking(True)
        self.viewport().setMouseTracking(True)
        self.setPlainText(text)

    # View contract --------------------------------------------------------

    def get_current_text(self) -> str:
        return self.toPlainText()

    def set_rendered_text(self, overlay: Overlay) -> None:
        self._overlay = overlay
        self._apply_link_formats()

    def get_movement_policy(self) -> Optional[object]:
        return self._movement_policy

    def set_movement_policy(self, handler: InteractionController) -> None:
        self._movement_policy = handler

    def links_clickable(self) -> bool:
        return self._links_clickable

    def set_links_clickable(self, clickable: bool) -> None:
        self._links_clickable = clickable

    def span_state_changed(self, span: ResolvedSpan) -> None:
        self._apply_link_formats()

    def scheduler(self) -> Optional[Scheduler]:
        return self._scheduler

    def fallback_handler(self, offset: int, phase: PressPhase) -> None:
        self.background_pressed.emit(offset, phase)

    @property
    def overlay(self) -> Overlay:
        return self._overlay

    # Decoration -----------------------------------------------------------

    def _link_format(self, span: ResolvedSpan) -> QTextCharFormat:
        style = span.style
        fmt = QTextCharFormat()

        if span.is_pressed:
            color = style.highlighted_text_color
            background = QColor(span.link.highlight_color or color)
            background.setAlphaF(style.highlight_alpha)
            fmt.setBackground(background)
        else:
            color = style.text_color
        fmt.setForeground(QColor(color))
        fmt.setFontUnderline(style.underlined)
        if style.bold:
            fmt.setFontWeight(QFont.Weight.Bold)
        return fmt

    def _apply_link_formats(self) -> None:
        selections = []
        for span in self._overlay.spans:
            selection = QTextEdit.ExtraSelection()
            cursor = QTextCursor(self.document())
            cursor.setPosition(span.start)
            cursor.setPosition(span.end, QTextCursor.MoveMode.KeepAnchor)
            selection.cursor = cursor
            selection.format = self._link_format(span)
            selections.append(selection)
        self.setExtraSelections(selections)

    # Mouse handling -------------------------------------------------------

    def _offset_at(self, pos: QPoint) -> int:
        """Offset of the character under ``pos``."""
        cursor = self.cursorForPosition(pos)
        offset = cursor.position()
        # cursorForPosition snaps to the nearest caret gap
        if offset > 0 and self.cursorRect(cursor).left() > pos.x():
            offset -= 1
        return offset

    def _controller(self) -> Optional[InteractionController]:
        policy = self._movement_policy
        return policy if isinstance(policy, InteractionController) else None

    def mousePressEvent(self, event: QMouseEvent) -> None:
        controller = self._controller()
        if controller is not None and event.button() == Qt.MouseButton.LeftButton:
            result = controller.on_press_start(self._offset_at(event.position().toPoint()))
            if result is not None and result.handled:
                event.accept()
                return
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        controller = self._controller()
        if controller is not None and event.button() == Qt.MouseButton.LeftButton:
            result = controller.on_press_end(self._offset_at(event.position().toPoint()))
            if result is not None and result.handled:
                event.accept()
                return
        super().mouseReleaseEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        controller = self._controller()
        if controller is not None:
            span = controller.spans.find_span_at(
                self._offset_at(event.position().toPoint())
            )
            if span is not None:
                self.viewport().setCursor(Qt.CursorShape.PointingHandCursor)
            else:
                self.viewport().setCursor(Qt.CursorShape.IBeamCursor)
        super().mouseMoveEvent(event)

    def leaveEvent(self, event) -> None:
        controller = self._controller()
        if controller is not None:
            controller.on_press_cancel()
        super().leaveEvent(event)
