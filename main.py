"""Entry point for the Qur'an reader desktop application."""
from __future__ import annotations

import logging
import subprocess
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set

try:  # Prefer PyQt5, fall back to Qt for Python if available
    from PyQt5 import QtCore, QtGui, QtWidgets  # type: ignore
except Exception:  # pragma: no cover - fallback only used when PyQt5 missing
    try:
        from PySide2 import QtCore, QtGui, QtWidgets  # type: ignore
    except Exception:
        from PySide6 import QtCore, QtGui, QtWidgets  # type: ignore

try:  # Compatibility alias for Qt signal and slot decorators
    Signal = QtCore.pyqtSignal  # type: ignore[attr-defined]
    Slot = QtCore.pyqtSlot  # type: ignore[attr-defined]
except AttributeError:  # pragma: no cover - PySide compatibility
    Signal = QtCore.Signal  # type: ignore[attr-defined]
    Slot = QtCore.Slot  # type: ignore[attr-defined]

try:  # pragma: no cover - platform specific import
    import winreg
except ImportError:  # pragma: no cover - non-Windows fallback
    winreg = None  # type: ignore

from bookmarks import BookmarkStore
from quran_service import TRANSLATION_EDITIONS, QuranService, SurahSummary, SurahText
from settings_store import (
    ARABIC_FONT_SIZE_KEY,
    SCROLL_SPEED_KEY,
    SHOW_TRANSLATION_KEY,
    THEME_KEY,
    TRANSLATION_EDITION_KEY,
    TRANSLATION_FONT_SIZE_KEY,
    SettingsStore,
)
from ui import ReaderWindow, SettingsDialog
from wake_lock import WakeLock

APP_ROOT = Path(__file__).parent
CONFIG_PATH = APP_ROOT / "config.json"
BOOKMARKS_PATH = APP_ROOT / "bookmarks.json"

LOGGER = logging.getLogger(__name__)


class _AsyncDispatcher(QtCore.QObject):
    """Provide main-thread delivery for background task callbacks."""

    success = Signal(object)
    error = Signal(object)

    def __init__(
        self,
        owner: "QuranReaderApp",
        on_success: Callable[[Any], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        super().__init__()
        self._owner = owner
        self._on_success = on_success
        self._on_error = on_error
        self.success.connect(self._handle_success)  # type: ignore[attr-defined]
        self.error.connect(self._handle_error)  # type: ignore[attr-defined]

    @Slot(object)
    def _handle_success(self, result: Any) -> None:
        try:
            self._on_success(result)
        finally:
            self._owner._async_dispatchers.discard(self)
            self.deleteLater()

    @Slot(object)
    def _handle_error(self, exc: Exception) -> None:
        try:
            self._on_error(exc)
        finally:
            self._owner._async_dispatchers.discard(self)
            self.deleteLater()


class QuranReaderApp(QtWidgets.QApplication):
    """Coordinates the window, the Qur'an API client and local storage."""

    def __init__(
        self,
        argv: List[str],
        config_path: Path = CONFIG_PATH,
        bookmarks_path: Path = BOOKMARKS_PATH,
        service: Optional[QuranService] = None,
    ) -> None:
        super().__init__(argv)
        self.setApplicationName("Qur'an Reader")
        self.setFont(QtGui.QFont("Ubuntu", 10))

        self._executor = ThreadPoolExecutor(max_workers=2)
        self._async_dispatchers: Set[_AsyncDispatcher] = set()
        self.settings = SettingsStore(config_path)
        self.bookmarks = BookmarkStore(bookmarks_path)
        self.quran_service = service or QuranService()
        self.wake_lock = WakeLock()

        self.surahs: List[SurahSummary] = []
        self._pending_surah: Optional[int] = None
        self._request_token = 0
        self.active_theme = ""

        LOGGER.debug("Loaded settings keys: %s", self.settings.keys())

        self.window = ReaderWindow(wake_lock=self.wake_lock)
        self._apply_theme_preference(self.settings.get_or_default(THEME_KEY))
        self.window.reading_page.set_scroll_speed(self.settings.get_int(SCROLL_SPEED_KEY))
        self.window.reading_page.set_show_translation(self.settings.get_bool(SHOW_TRANSLATION_KEY))
        self.window.reading_page.set_text_sizes(
            self.settings.get_or_default(ARABIC_FONT_SIZE_KEY),
            self.settings.get_or_default(TRANSLATION_FONT_SIZE_KEY),
        )

        self.window.on_surah_request(self.open_surah)
        self.window.on_bookmark_save(self.save_bookmark)
        self.window.on_bookmark_delete(self.delete_bookmark)
        self.window.on_settings_open(self.open_settings_dialog)
        self.window.on_theme_toggle(self.toggle_theme)
        self.window.on_scroll_speed_change(self._persist_scroll_speed)
        self.window.on_translation_toggle(self._persist_translation_visibility)
        self.window.set_bookmarks(self.bookmarks.list())
        self.window.show()

        self.aboutToQuit.connect(self._cleanup)  # type: ignore

        self.load_surah_list()

    # -- Qur'an text ----------------------------------------------------------
    def load_surah_list(self) -> None:
        self.window.surah_page.show_loading()
        self.window.set_status("Loading surahs...")
        self._run_async(self.quran_service.list_surahs, self._handle_surahs_loaded, self._handle_surahs_error)

    def _handle_surahs_loaded(self, surahs: List[SurahSummary]) -> None:
        self.surahs = list(surahs)
        LOGGER.info("Loaded %d surahs", len(self.surahs))
        self.window.set_surahs(self.surahs)
        self.window.set_status("")

    def _handle_surahs_error(self, error: Exception) -> None:
        LOGGER.error("Failed to load surah list", exc_info=error)
        self.window.show_surahs_error("Unable to load surahs. Check your connection and try again.")
        self.window.set_status("Unable to load surahs.")

    def open_surah(self, surah_number: int, focus_verse: Optional[int] = None) -> None:
        """Fetch *surah_number* in the background; later requests supersede earlier ones."""
        if self._pending_surah == surah_number and focus_verse is None:
            LOGGER.debug("Surah %s already loading; ignoring duplicate request", surah_number)
            return
        self._request_token += 1
        token = self._request_token
        self._pending_surah = surah_number
        edition = self.settings.get_or_default(TRANSLATION_EDITION_KEY)
        self.window.show_reading_loading(surah_number)
        self.window.set_status(f"Loading surah {surah_number}...")
        LOGGER.debug("Requesting surah %s (edition=%s, focus=%s)", surah_number, edition, focus_verse)

        def task() -> SurahText:
            return self.quran_service.get_surah_verses(surah_number, edition)

        def on_success(text: SurahText) -> None:
            if token != self._request_token:
                LOGGER.debug("Discarding stale result for surah %s", surah_number)
                return
            self._pending_surah = None
            self.window.display_surah(text, focus_verse)
            self.window.set_status("")

        def on_error(exc: Exception) -> None:
            if token != self._request_token:
                return
            self._pending_surah = None
            LOGGER.error("Failed to load surah %s", surah_number, exc_info=exc)
            self.window.display_surah_error(surah_number, "Unable to load this surah. Please try again.")
            self.window.set_status("Unable to load surah.")

        self._run_async(task, on_success, on_error)

    # -- Bookmarks ------------------------------------------------------------
    def save_bookmark(self, payload: Dict[str, Any]) -> None:
        bookmark_id = self.bookmarks.save(
            payload["surah_number"],
            payload["verse_number"],
            str(payload.get("title", "")),
            str(payload.get("notes", "")),
            surah_name=str(payload.get("surah_name", "")),
            text=str(payload.get("text", "")),
        )
        saved = self.bookmarks.get(bookmark_id)
        self.window.set_bookmarks(self.bookmarks.list())
        self.window.set_status(f"Bookmark saved: {saved.title if saved else bookmark_id}")

    def delete_bookmark(self, bookmark_id: str) -> None:
        if self.bookmarks.delete(bookmark_id):
            self.window.set_bookmarks(self.bookmarks.list())
            self.window.set_status("Bookmark deleted.")

    # -- Preferences ----------------------------------------------------------
    def _persist_scroll_speed(self, value: int) -> None:
        self.settings.set(SCROLL_SPEED_KEY, int(value))

    def _persist_translation_visibility(self, visible: bool) -> None:
        self.settings.set(SHOW_TRANSLATION_KEY, bool(visible))

    def toggle_theme(self) -> None:
        new_theme = "dark" if self.active_theme == "light" else "light"
        self.settings.set(THEME_KEY, new_theme)
        self._apply_theme_preference(new_theme)

    def _apply_theme_preference(self, preference: Optional[str]) -> None:
        resolved = self._resolve_theme_choice(preference)
        if self.active_theme == resolved:
            return
        LOGGER.debug("Applying theme preference '%s' resolved to '%s'", preference, resolved)
        self.active_theme = resolved
        self.window.apply_theme(resolved)

    def _resolve_theme_choice(self, preference: Optional[str]) -> str:
        pref = str(preference or "system").lower()
        if pref not in {"light", "dark", "system"}:
            pref = "system"
        if pref == "system":
            return self._detect_system_theme()
        return pref

    def _detect_system_theme(self) -> str:
        if sys.platform.startswith("win") and winreg:
            try:
                with winreg.OpenKey(
                    winreg.HKEY_CURRENT_USER,
                    r"Software\Microsoft\Windows\CurrentVersion\Themes\Personalize",
                ) as key:
                    value, _ = winreg.QueryValueEx(key, "AppsUseLightTheme")
                    return "light" if int(value) else "dark"
            except OSError:
                LOGGER.debug("Windows theme detection failed; falling back to palette", exc_info=True)

        if sys.platform == "darwin":
            try:
                result = subprocess.run(
                    ["defaults", "read", "-g", "AppleInterfaceStyle"],
                    capture_output=True,
                    text=True,
                    check=False,
                )
                if result.returncode == 0:
                    return "dark"
            except OSError:
                LOGGER.debug("macOS theme detection failed; falling back to palette", exc_info=True)

        window_color = self.palette().color(QtGui.QPalette.Window)
        return "dark" if window_color.lightness() < 128 else "light"

    def open_settings_dialog(self) -> None:
        initial = {
            "theme": self.settings.get_or_default(THEME_KEY),
            "translation_edition": self.settings.get_or_default(TRANSLATION_EDITION_KEY),
            "scroll_speed": self.settings.get_int(SCROLL_SPEED_KEY),
            "show_translation": self.settings.get_bool(SHOW_TRANSLATION_KEY),
            "arabic_font_size": self.settings.get_or_default(ARABIC_FONT_SIZE_KEY),
            "translation_font_size": self.settings.get_or_default(TRANSLATION_FONT_SIZE_KEY),
        }
        dialog = SettingsDialog(self.window, initial, TRANSLATION_EDITIONS)
        if dialog.exec() != QtWidgets.QDialog.Accepted:
            return
        self.apply_settings(dialog.values())

    def apply_settings(self, values: Dict[str, Any]) -> None:
        """Persist dialog values and push them into the running window."""
        previous_edition = self.settings.get_or_default(TRANSLATION_EDITION_KEY)
        theme = str(values.get("theme") or "system")
        edition = str(values.get("translation_edition") or previous_edition)

        self.settings.set(THEME_KEY, theme)
        self.settings.set(TRANSLATION_EDITION_KEY, edition)
        self.settings.set(SCROLL_SPEED_KEY, int(values.get("scroll_speed", self.settings.get_int(SCROLL_SPEED_KEY))))
        self.settings.set(SHOW_TRANSLATION_KEY, bool(values.get("show_translation", True)))
        for key in (ARABIC_FONT_SIZE_KEY, TRANSLATION_FONT_SIZE_KEY):
            if values.get(key):
                self.settings.set(key, str(values[key]))

        self._apply_theme_preference(theme)
        page = self.window.reading_page
        page.set_scroll_speed(self.settings.get_int(SCROLL_SPEED_KEY))
        page.set_show_translation(self.settings.get_bool(SHOW_TRANSLATION_KEY))
        page.set_text_sizes(
            self.settings.get_or_default(ARABIC_FONT_SIZE_KEY),
            self.settings.get_or_default(TRANSLATION_FONT_SIZE_KEY),
        )

        if edition != previous_edition and page.surah is not None:
            LOGGER.info("Translation edition changed to %s; reloading surah %s", edition, page.surah.number)
            self.open_surah(page.surah.number, page.active_verse)
        self.window.set_status("Settings saved.")

    # -- Plumbing -------------------------------------------------------------
    def _run_async(self, func, on_success, on_error) -> None:
        LOGGER.debug("Submitting background task %s", getattr(func, "__name__", func))
        dispatcher = _AsyncDispatcher(self, on_success, on_error)
        self._async_dispatchers.add(dispatcher)
        future = self._executor.submit(func)

        def _done(future_result) -> None:
            try:
                result = future_result.result()
            except Exception as exc:  # pragma: no cover - UI glue
                LOGGER.exception("Background task %s raised an exception", getattr(func, "__name__", func), exc_info=exc)
                dispatcher.error.emit(exc)
            else:
                dispatcher.success.emit(result)

        future.add_done_callback(_done)

    def _cleanup(self) -> None:
        self.window.reading_page.stop_reading()
        self.wake_lock.release()
        self._executor.shutdown(wait=False)


def main() -> int:
    logging.basicConfig(level=logging.DEBUG, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    app = QuranReaderApp(sys.argv)
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
