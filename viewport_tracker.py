"""Track which verse block is most visible inside a scroll region."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence, Tuple

try:  # Prefer PyQt5, fall back to Qt for Python if available
    from PyQt5 import QtCore  # type: ignore
except Exception:  # pragma: no cover - fallback path
    try:
        from PySide2 import QtCore  # type: ignore
    except Exception:
        from PySide6 import QtCore  # type: ignore

try:  # Compatibility alias for Qt signals
    Signal = QtCore.pyqtSignal  # type: ignore[attr-defined]
except AttributeError:  # pragma: no cover - PySide compatibility
    Signal = QtCore.Signal  # type: ignore[attr-defined]

from scroll_region import VerseBlock

LOGGER = logging.getLogger(__name__)

DEFAULT_VISIBILITY_THRESHOLD = 0.3
DEFAULT_SAMPLE_INTERVAL_MS = 150
_RATIO_EPSILON = 1e-9


def select_active_verse(
    ratios: Iterable[Tuple[int, float]],
    threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
) -> Optional[int]:
    """Pick the verse with the greatest intersection ratio.

    Ratios of zero never qualify, neither do ratios under *threshold*. Equal
    ratios resolve to the lowest verse number.
    """
    best_verse: Optional[int] = None
    best_ratio = 0.0
    for verse_number, ratio in ratios:
        if ratio <= 0.0 or ratio + _RATIO_EPSILON < threshold:
            continue
        if best_verse is None or ratio > best_ratio + _RATIO_EPSILON:
            best_verse, best_ratio = verse_number, ratio
        elif abs(ratio - best_ratio) <= _RATIO_EPSILON and verse_number < best_verse:
            best_verse = verse_number
    return best_verse


def topmost_visible_verse(blocks: Sequence[VerseBlock], offset: float, viewport_height: float) -> Optional[int]:
    """Return the first block in document order that overlaps the viewport at all."""
    for block in sorted(blocks, key=lambda item: (item.top, item.verse_number)):
        if block.visible_height(offset, viewport_height) > 0:
            return block.verse_number
    return None


class ViewportTracker(QtCore.QObject):
    """Report the verse currently in focus as the viewport moves.

    The tracker listens to the region's ``offset_changed`` and
    ``geometry_changed`` signals. Regions that cannot notify (plain geometry
    objects exposing ``scroll_offset`` and ``viewport_height``) are polled on a
    timer instead, reporting the topmost visible block.
    """

    active_verse_changed = Signal(int)

    def __init__(
        self,
        threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
        sample_interval_ms: int = DEFAULT_SAMPLE_INTERVAL_MS,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._threshold = max(0.0, min(1.0, float(threshold)))
        self._region: Optional[Any] = None
        self._blocks: Tuple[VerseBlock, ...] = ()
        self._active: Optional[int] = None
        self._sampling = False
        self._last_sampled_offset: Optional[float] = None

        self._sample_timer = QtCore.QTimer(self)
        self._sample_timer.setInterval(max(1, int(sample_interval_ms)))
        self._sample_timer.timeout.connect(self.sample)  # type: ignore

    # ------------------------------------------------------------------
    @property
    def active_verse(self) -> Optional[int]:
        return self._active

    @property
    def is_observing(self) -> bool:
        return self._region is not None

    @property
    def is_sampling(self) -> bool:
        """True when running in the degraded, timer-sampled mode."""
        return self._sampling

    def observe(self, blocks: Iterable[VerseBlock], region: Any) -> None:
        """Start tracking *blocks* inside *region*, replacing any earlier registration."""
        self.stop()
        self._blocks = tuple(blocks)
        self._active = None
        self._last_sampled_offset = None
        self._region = region

        offset_signal = getattr(region, "offset_changed", None)
        if offset_signal is None:
            LOGGER.warning("Scroll region cannot report offset changes; sampling visibility instead")
            self._sampling = True
            self._sample_timer.start()
            self.sample()
            return

        offset_signal.connect(self._on_offset_changed)
        geometry_signal = getattr(region, "geometry_changed", None)
        if geometry_signal is not None:
            geometry_signal.connect(self.refresh)
        LOGGER.debug("Observing %d verse blocks", len(self._blocks))
        self.refresh()

    def update_blocks(self, blocks: Iterable[VerseBlock]) -> None:
        """Swap in fresh geometry for the same verses without restarting the event sequence."""
        self._blocks = tuple(blocks)
        if self._active is not None and all(block.verse_number != self._active for block in self._blocks):
            self._active = None
        if self._region is None:
            return
        if self._sampling:
            self._last_sampled_offset = None
            self.sample()
        else:
            self.refresh()

    def stop(self) -> None:
        """Stop monitoring and forget the active verse. Safe to call repeatedly and from signal handlers."""
        region = self._region
        if region is None:
            return
        self._region = None
        self._active = None
        self._sample_timer.stop()
        if self._sampling:
            self._sampling = False
        else:
            self._disconnect(getattr(region, "offset_changed", None), self._on_offset_changed)
            self._disconnect(getattr(region, "geometry_changed", None), self.refresh)
        LOGGER.debug("Viewport tracking stopped")

    # ------------------------------------------------------------------
    def refresh(self) -> None:
        """Recompute the active verse from the region's current geometry."""
        region = self._region
        if region is None or self._sampling:
            return
        offset = float(region.scroll_offset)
        viewport_height = float(region.viewport_height)
        ratios = [
            (block.verse_number, self._effective_ratio(block, offset, viewport_height))
            for block in self._blocks
        ]
        self._set_active(select_active_verse(ratios, self._threshold))

    def sample(self) -> None:
        """Degraded-mode poll; only recomputes when the offset moved since the last sample."""
        region = self._region
        if region is None:
            return
        offset = float(region.scroll_offset)
        if offset == self._last_sampled_offset:
            return
        self._last_sampled_offset = offset
        self._set_active(topmost_visible_verse(self._blocks, offset, float(region.viewport_height)))

    def _on_offset_changed(self, _offset: float) -> None:
        self.refresh()

    def _effective_ratio(self, block: VerseBlock, offset: float, viewport_height: float) -> float:
        ratio = block.intersection_ratio(offset, viewport_height)
        # A block taller than the viewport can never show 30% of itself; covering
        # the whole viewport counts as fully visible instead.
        if viewport_height > 0 and block.visible_height(offset, viewport_height) >= viewport_height:
            return 1.0
        return ratio

    def _set_active(self, verse_number: Optional[int]) -> None:
        if verse_number is None or verse_number == self._active:
            return
        previous = self._active
        self._active = verse_number
        LOGGER.debug("Active verse changed %s -> %s", previous, verse_number)
        self.active_verse_changed.emit(verse_number)

    @staticmethod
    def _disconnect(signal: Any, slot: Any) -> None:
        if signal is None:
            return
        try:
            signal.disconnect(slot)
        except (TypeError, RuntimeError):
            LOGGER.debug("Slot %s was not connected", getattr(slot, "__name__", slot))


__all__ = [
    "DEFAULT_VISIBILITY_THRESHOLD",
    "ViewportTracker",
    "select_active_verse",
    "topmost_visible_verse",
]
