"""Rate-controlled auto-scroll and jump-to-verse transitions for a scroll region."""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

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

from scroll_region import ScrollRegion

LOGGER = logging.getLogger(__name__)

MIN_RATE_PERCENT = 10
MAX_RATE_PERCENT = 100
FULL_RATE_PIXELS_PER_SECOND = 40.0
DEFAULT_RATE_PERCENT = 50
DEFAULT_END_MARGIN = 20.0
DEFAULT_TICK_INTERVAL_MS = 16
DEFAULT_JUMP_DURATION = 0.4


def clamp_rate_percent(rate_percent: float) -> float:
    return max(float(MIN_RATE_PERCENT), min(float(MAX_RATE_PERCENT), float(rate_percent)))


def rate_for_percent(rate_percent: float) -> float:
    """Pixels per second for a user-facing speed percentage."""
    return clamp_rate_percent(rate_percent) / 100.0 * FULL_RATE_PIXELS_PER_SECOND


def ease_out_cubic(t: float) -> float:
    t = max(0.0, min(1.0, t))
    return 1 - (1 - t) ** 3


@dataclass
class ScrollSession:
    """One auto-scroll run: its rate and the sub-pixel distance not yet applied."""

    rate: float
    running: bool = True
    carryover: float = 0.0
    last_tick: Optional[float] = None

    def advance(self, now: float) -> int:
        """Accumulate distance for the time since the previous tick; return whole pixels to move."""
        dt = 0.0 if self.last_tick is None else max(0.0, now - self.last_tick)
        self.last_tick = now
        self.carryover += self.rate * dt
        step = math.floor(self.carryover)
        if step <= 0:
            return 0
        self.carryover -= step
        return int(step)

    def hold(self, now: float) -> None:
        """Consume elapsed time without accumulating distance."""
        self.last_tick = now


@dataclass
class JumpTween:
    verse_number: int
    start: float
    end: float
    duration: float
    ease: Callable[[float], float] = ease_out_cubic
    started_at: Optional[float] = None

    def position(self, now: float) -> tuple[float, bool]:
        if self.started_at is None:
            self.started_at = now
        elapsed = now - self.started_at
        u = 1.0 if self.duration <= 0 else max(0.0, min(1.0, elapsed / self.duration))
        if u >= 1.0:
            return self.end, True
        return self.start + (self.end - self.start) * self.ease(u), False


class ScrollDriver(QtCore.QObject):
    """Advance a :class:`ScrollRegion` at a steady rate until paused or the content ends.

    All stepping happens in :meth:`tick`, which the internal timer calls on the
    Qt event loop with ``clock()`` as the timestamp. Tests drive :meth:`tick`
    directly with synthetic timestamps.
    """

    scroll_ended = Signal()
    state_changed = Signal(bool)
    jump_finished = Signal(int)

    def __init__(
        self,
        region: Optional[ScrollRegion] = None,
        *,
        end_margin: float = DEFAULT_END_MARGIN,
        tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        jump_duration: float = DEFAULT_JUMP_DURATION,
        clock: Callable[[], float] = time.monotonic,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._region = region
        self._end_margin = max(0.0, float(end_margin))
        self._jump_duration = max(0.0, float(jump_duration))
        self._clock = clock
        self._rate_percent = float(DEFAULT_RATE_PERCENT)
        self._session: Optional[ScrollSession] = None
        self._jump: Optional[JumpTween] = None

        self._timer = QtCore.QTimer(self)
        self._timer.setTimerType(QtCore.Qt.PreciseTimer)
        self._timer.setInterval(max(1, int(tick_interval_ms)))
        self._timer.timeout.connect(self._on_timeout)  # type: ignore

    # ------------------------------------------------------------------
    @property
    def region(self) -> Optional[ScrollRegion]:
        return self._region

    @property
    def is_running(self) -> bool:
        return self._session is not None and self._session.running

    @property
    def is_jumping(self) -> bool:
        return self._jump is not None

    @property
    def rate_percent(self) -> float:
        return self._rate_percent

    @property
    def session(self) -> Optional[ScrollSession]:
        return self._session

    def attach(self, region: ScrollRegion) -> None:
        """Point the driver at *region*; stops any running session on the previous one."""
        if region is self._region:
            return
        self.stop()
        self._jump = None
        self._region = region
        self._sync_timer()

    def start(self, region: Optional[ScrollRegion], rate_percent: float) -> bool:
        """Begin auto-scrolling. Returns ``False`` without side effects if already running.

        The region's geometry must already reflect the laid-out content: an
        empty or unmeasured region counts as already at its end, so the session
        ends on the first tick.
        """
        if self.is_running:
            LOGGER.debug("Auto-scroll already running; ignoring start request")
            return False
        if region is not None and region is not self._region:
            self._jump = None
            self._region = region
        if self._region is None:
            LOGGER.warning("Cannot start auto-scroll without a scroll region")
            return False
        self._rate_percent = clamp_rate_percent(rate_percent)
        self._session = ScrollSession(rate=rate_for_percent(self._rate_percent))
        LOGGER.info(
            "Auto-scroll started at %.0f%% (%.1f px/s)",
            self._rate_percent,
            self._session.rate,
        )
        self._sync_timer()
        self.state_changed.emit(True)
        return True

    def set_rate(self, rate_percent: float) -> None:
        self._rate_percent = clamp_rate_percent(rate_percent)
        if self._session is not None:
            self._session.rate = rate_for_percent(self._rate_percent)
            LOGGER.debug("Auto-scroll rate set to %.1f px/s", self._session.rate)

    def stop(self) -> None:
        """End the running session, if any. The scroll offset is left where it is."""
        session = self._session
        if session is None:
            return
        session.running = False
        self._session = None
        self._sync_timer()
        LOGGER.info("Auto-scroll stopped")
        self.state_changed.emit(False)

    def scroll_to(self, verse_number: int, smooth: bool = True) -> bool:
        """Align the top of *verse_number* with the top of the viewport.

        Returns ``False`` when no such verse is laid out in the region. Does not
        start or stop auto-scroll.
        """
        region = self._region
        if region is None:
            LOGGER.debug("Jump to verse %s ignored; no scroll region attached", verse_number)
            return False
        block = region.find_block(verse_number)
        if block is None:
            LOGGER.info("Jump to verse %s ignored; verse is not in the current surah", verse_number)
            return False

        target = region.clamp_offset(block.top)
        if not smooth or self._jump_duration <= 0:
            self._jump = None
            region.set_scroll_offset(target)
            self._sync_timer()
            self.jump_finished.emit(verse_number)
            return True

        self._jump = JumpTween(
            verse_number=verse_number,
            start=region.scroll_offset,
            end=target,
            duration=self._jump_duration,
        )
        LOGGER.debug("Jumping to verse %s (offset %s -> %s)", verse_number, region.scroll_offset, target)
        self._sync_timer()
        return True

    # ------------------------------------------------------------------
    def tick(self, now: Optional[float] = None) -> None:
        """Run one scheduling step at timestamp *now* (seconds)."""
        region = self._region
        if region is None:
            return
        if now is None:
            now = self._clock()

        jump = self._jump
        if jump is not None:
            value, finished = jump.position(now)
            region.set_scroll_offset(value)
            if self._jump is jump and finished:
                self._jump = None
                self._sync_timer()
                self.jump_finished.emit(jump.verse_number)

        session = self._session
        if session is None:
            return
        if jump is not None or self._jump is not None:
            # Time spent jumping does not count towards auto-scroll distance.
            session.hold(now)
            return

        delta = session.advance(now)
        if delta > 0:
            region.scroll_by(delta)
        # Observers of the offset write may have stopped or replaced the session.
        if self._session is not session:
            return
        if region.at_end(self._end_margin):
            self._finish(session)

    def _finish(self, session: ScrollSession) -> None:
        session.running = False
        self._session = None
        self._sync_timer()
        LOGGER.info("Auto-scroll reached the end of the content")
        self.state_changed.emit(False)
        self.scroll_ended.emit()

    def _on_timeout(self) -> None:
        self.tick(self._clock())

    def _sync_timer(self) -> None:
        needed = self._region is not None and (self._session is not None or self._jump is not None)
        if needed and not self._timer.isActive():
            self._timer.start()
        elif not needed and self._timer.isActive():
            self._timer.stop()


__all__ = [
    "DEFAULT_END_MARGIN",
    "DEFAULT_RATE_PERCENT",
    "MAX_RATE_PERCENT",
    "MIN_RATE_PERCENT",
    "ScrollDriver",
    "ScrollSession",
    "clamp_rate_percent",
    "rate_for_percent",
]
