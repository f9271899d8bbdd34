"""Scrollable viewport geometry shared by the scroll driver and viewport tracker."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

try:  # Prefer PyQt5, fall back to Qt for Python if available
    from PyQt5 import QtCore, QtWidgets  # type: ignore
except Exception:  # pragma: no cover - fallback path
    try:
        from PySide2 import QtCore, QtWidgets  # type: ignore
    except Exception:
        from PySide6 import QtCore, QtWidgets  # type: ignore

try:  # Compatibility alias for Qt signals
    Signal = QtCore.pyqtSignal  # type: ignore[attr-defined]
except AttributeError:  # pragma: no cover - PySide compatibility
    Signal = QtCore.Signal  # type: ignore[attr-defined]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerseBlock:
    """Layout of one rendered verse inside the scrollable content."""

    verse_number: int
    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def visible_height(self, offset: float, viewport_height: float) -> float:
        """Pixels of this block inside the window ``[offset, offset + viewport_height)``."""
        upper = max(self.top, offset)
        lower = min(self.bottom, offset + viewport_height)
        return max(0.0, lower - upper)

    def intersection_ratio(self, offset: float, viewport_height: float) -> float:
        if self.height <= 0:
            return 0.0
        return self.visible_height(offset, viewport_height) / self.height


class ScrollRegion(QtCore.QObject):
    """A single vertical viewport over content holding ordered verse blocks.

    Offset writes are clamped so that ``scroll_offset + viewport_height`` never
    exceeds ``content_height``. Every applied change emits ``offset_changed``
    synchronously, which is what lets observers react to a write before the
    writer's callback returns.
    """

    offset_changed = Signal(float)
    geometry_changed = Signal()

    def __init__(
        self,
        content_height: float = 0.0,
        viewport_height: float = 0.0,
        blocks: Iterable[VerseBlock] = (),
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._content_height = max(0.0, float(content_height))
        self._viewport_height = max(0.0, float(viewport_height))
        self._offset = 0.0
        self._blocks: Tuple[VerseBlock, ...] = tuple(blocks)

    # ------------------------------------------------------------------
    @property
    def scroll_offset(self) -> float:
        return self._offset

    @property
    def content_height(self) -> float:
        return self._content_height

    @property
    def viewport_height(self) -> float:
        return self._viewport_height

    @property
    def blocks(self) -> Tuple[VerseBlock, ...]:
        return self._blocks

    def max_offset(self) -> float:
        return max(0.0, self._content_height - self._viewport_height)

    def clamp_offset(self, value: float) -> float:
        return max(0.0, min(self.max_offset(), float(value)))

    def at_end(self, margin: float) -> bool:
        """True once the bottom of the viewport is within *margin* of the content end."""
        return self._offset + self._viewport_height >= self._content_height - max(0.0, margin)

    def find_block(self, verse_number: int) -> Optional[VerseBlock]:
        for block in self._blocks:
            if block.verse_number == verse_number:
                return block
        return None

    # ------------------------------------------------------------------
    def set_scroll_offset(self, value: float) -> float:
        """Move the viewport to *value* (clamped) and return the applied offset."""
        self._apply_offset(self.clamp_offset(value))
        return self._offset

    def scroll_by(self, delta: float) -> float:
        return self.set_scroll_offset(self._offset + delta)

    def set_geometry(self, content_height: float, viewport_height: float) -> None:
        self._content_height = max(0.0, float(content_height))
        self._viewport_height = max(0.0, float(viewport_height))
        LOGGER.debug(
            "Region geometry updated: content=%s viewport=%s",
            self._content_height,
            self._viewport_height,
        )
        self._apply_offset(self.clamp_offset(self._offset))
        self.geometry_changed.emit()

    def set_blocks(self, blocks: Iterable[VerseBlock]) -> None:
        self._blocks = tuple(blocks)
        LOGGER.debug("Region now holds %d verse blocks", len(self._blocks))
        self.geometry_changed.emit()

    def _apply_offset(self, value: float) -> None:
        if value == self._offset:
            return
        self._offset = value
        self.offset_changed.emit(value)


class ScrollAreaRegion(ScrollRegion):
    """Bind a :class:`ScrollRegion` to the vertical scrollbar of a Qt scroll area.

    Manual scrolling by the reader flows through the same ``offset_changed``
    signal as programmatic writes.
    """

    def __init__(self, area: QtWidgets.QAbstractScrollArea, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent=parent)
        self._area = area
        self._bar = area.verticalScrollBar()
        self._bar.valueChanged.connect(self._on_bar_value)  # type: ignore
        self._bar.rangeChanged.connect(self._on_bar_range)  # type: ignore
        self.refresh_geometry()

    def refresh_geometry(self) -> None:
        viewport = float(self._area.viewport().height())
        widget = self._area.widget() if isinstance(self._area, QtWidgets.QScrollArea) else None
        if widget is not None:
            content = max(float(widget.height()), viewport)
        else:
            content = float(self._bar.maximum()) + viewport
        self.set_geometry(content, viewport)

    def set_scroll_offset(self, value: float) -> float:
        target = int(round(self.clamp_offset(value)))
        # valueChanged feeds back into _apply_offset; unchanged values emit nothing.
        self._bar.setValue(target)
        return self._offset

    def _on_bar_value(self, value: int) -> None:
        self._apply_offset(float(value))

    def _on_bar_range(self, _minimum: int, _maximum: int) -> None:
        self.refresh_geometry()


def blocks_from_widgets(widgets: Iterable[Tuple[int, QtWidgets.QWidget]]) -> List[VerseBlock]:
    """Build verse blocks from ``(verse_number, widget)`` pairs laid out in one container."""
    blocks: List[VerseBlock] = []
    for verse_number, widget in widgets:
        geometry = widget.geometry()
        blocks.append(VerseBlock(verse_number=verse_number, top=float(geometry.y()), height=float(geometry.height())))
    return blocks


__all__ = ["ScrollAreaRegion", "ScrollRegion", "VerseBlock", "blocks_from_widgets"]
