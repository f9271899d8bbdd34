"""Keep the display awake while the reader is auto-scrolling."""
from __future__ import annotations

import logging
import sys
from typing import Any, Optional

LOGGER = logging.getLogger(__name__)

ES_CONTINUOUS = 0x80000000
ES_SYSTEM_REQUIRED = 0x00000001
ES_DISPLAY_REQUIRED = 0x00000002


def _load_kernel32() -> Optional[Any]:
    if not sys.platform.startswith("win"):
        return None
    try:  # pragma: no cover - platform specific import
        import ctypes

        return ctypes.windll.kernel32  # type: ignore[attr-defined]
    except (ImportError, AttributeError, OSError):  # pragma: no cover - Windows without kernel32 access
        LOGGER.warning("kernel32 unavailable; display sleep cannot be prevented")
        return None


class WakeLock:
    """Prevent display sleep on platforms that support it; a logged no-op elsewhere."""

    def __init__(self, kernel32: Optional[Any] = None) -> None:
        self._kernel32 = kernel32 if kernel32 is not None else _load_kernel32()
        self._held = False

    @property
    def supported(self) -> bool:
        return self._kernel32 is not None

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> bool:
        if self._held:
            return True
        if not self.supported:
            LOGGER.debug("Wake lock not supported on %s; continuing without it", sys.platform)
            return False
        result = self._kernel32.SetThreadExecutionState(ES_CONTINUOUS | ES_SYSTEM_REQUIRED | ES_DISPLAY_REQUIRED)
        if not result:
            LOGGER.warning("SetThreadExecutionState refused the wake lock request")
            return False
        self._held = True
        LOGGER.debug("Wake lock acquired")
        return True

    def release(self) -> None:
        if not self._held:
            return
        self._held = False
        if self._kernel32 is not None:
            self._kernel32.SetThreadExecutionState(ES_CONTINUOUS)
        LOGGER.debug("Wake lock released")


__all__ = ["WakeLock"]
