"""UI components for the Qur'an reader application."""

from .window import ReaderWindow
from .settings import SettingsDialog
from .reading import ReadingPage
from .surah_list import SurahListPage
from .bookmarks import BookmarksPage

__all__ = ["ReaderWindow", "SettingsDialog", "ReadingPage", "SurahListPage", "BookmarksPage"]
