"""Main window for the Qur'an reader."""
from __future__ import annotations

import textwrap
from typing import Any, Callable, Dict, Optional, Sequence

ACCENT_COLOR_HEX = "#15803d"

try:  # Prefer PyQt5, fall back to Qt for Python
    from PyQt5 import QtCore, QtGui, QtWidgets  # type: ignore
except Exception:  # pragma: no cover - fallback path
    try:
        from PySide2 import QtCore, QtGui, QtWidgets  # type: ignore
    except Exception:
        from PySide6 import QtCore, QtGui, QtWidgets  # type: ignore

from bookmarks import Bookmark
from quran_service import SurahSummary, SurahText
from ui.bookmarks import BookmarksPage
from ui.reading import ReadingPage
from ui.surah_list import SurahListPage
from wake_lock import WakeLock

SURAHS_PAGE = 0
READING_PAGE = 1
BOOKMARKS_PAGE = 2

THEME_COLORS: Dict[str, Dict[str, str]] = {
    "light": {
        "window": "#f5f7fb",
        "text": "#0f172a",
        "muted": "#64748b",
        "card": "#ffffff",
        "border": "#e2e8f0",
        "hover": "#ecfdf5",
        "accent": ACCENT_COLOR_HEX,
        "accent_hover": "#166534",
        "on_accent": "#ffffff",
        "verse_active": "#f9f1d6",
        "verse_edge": "#e0cfa2",
    },
    "dark": {
        "window": "#0b1628",
        "text": "#f1f5ff",
        "muted": "#c7d2fe",
        "card": "#111d33",
        "border": "#1f2f46",
        "hover": "#1b2d4a",
        "accent": "#38d0a5",
        "accent_hover": "#2bb38c",
        "on_accent": "#0b1628",
        "verse_active": "#152342",
        "verse_edge": "#22324f",
    },
}


class ReaderWindow(QtWidgets.QMainWindow):
    """Main application window: surah list, reader and bookmarks."""

    def __init__(self, wake_lock: Optional[WakeLock] = None) -> None:
        super().__init__()
        self._theme = "light"
        self._accent_color = QtGui.QColor(ACCENT_COLOR_HEX)

        self.setObjectName("ReaderWindow")
        self.setWindowTitle("Qur'an Reader")
        self.setAttribute(QtCore.Qt.WA_StyledBackground, True)
        self.resize(1100, 760)

        central = QtWidgets.QWidget()
        self.setCentralWidget(central)

        root_layout = QtWidgets.QHBoxLayout(central)
        root_layout.setContentsMargins(24, 24, 24, 24)
        root_layout.setSpacing(24)

        self._nav_group = QtWidgets.QButtonGroup(self)
        self._nav_group.setExclusive(True)
        self._nav_buttons: Dict[int, QtWidgets.QToolButton] = {}

        self.content_container = QtWidgets.QWidget()
        self.content_container.setObjectName("ContentContainer")
        content_layout = QtWidgets.QVBoxLayout(self.content_container)
        content_layout.setContentsMargins(0, 0, 0, 0)
        content_layout.setSpacing(16)

        self.page_stack = QtWidgets.QStackedWidget()
        content_layout.addWidget(self.page_stack, stretch=1)

        self.surah_page = SurahListPage()
        self.reading_page = ReadingPage(wake_lock=wake_lock)
        self.bookmarks_page = BookmarksPage()
        self.page_stack.addWidget(self.surah_page)
        self.page_stack.addWidget(self.reading_page)
        self.page_stack.addWidget(self.bookmarks_page)

        self.status_label = QtWidgets.QLabel()
        self.status_label.setObjectName("statusLabel")
        self.status_label.setWordWrap(True)
        content_layout.addWidget(self.status_label)

        self.nav_bar = self._build_nav_bar()
        root_layout.addWidget(self.nav_bar, alignment=QtCore.Qt.AlignTop)
        root_layout.addWidget(self.content_container, stretch=1)

        self._surah_handler: Optional[Callable[[int, Optional[int]], None]] = None
        self._bookmark_handler: Optional[Callable[[Dict[str, Any]], None]] = None
        self._bookmark_delete_handler: Optional[Callable[[str], None]] = None
        self._settings_handler: Optional[Callable[[], None]] = None
        self._theme_handler: Optional[Callable[[], None]] = None
        self._speed_handler: Optional[Callable[[int], None]] = None
        self._translation_handler: Optional[Callable[[bool], None]] = None

        self.surah_page.surah_selected.connect(lambda number: self._emit_surah_request(number))  # type: ignore
        self.reading_page.surah_requested.connect(lambda number: self._emit_surah_request(number))  # type: ignore
        self.reading_page.back_requested.connect(lambda: self.set_active_page(SURAHS_PAGE))  # type: ignore
        self.reading_page.bookmark_requested.connect(self._emit_bookmark)  # type: ignore
        self.reading_page.scroll_speed_changed.connect(self._emit_speed)  # type: ignore
        self.reading_page.translation_toggled.connect(self._emit_translation)  # type: ignore
        self.bookmarks_page.open_requested.connect(self._open_bookmark)  # type: ignore
        self.bookmarks_page.delete_requested.connect(self._emit_bookmark_delete)  # type: ignore
        self.settings_button.clicked.connect(self._emit_open_settings)  # type: ignore
        self.theme_button.clicked.connect(self._emit_theme_toggle)  # type: ignore

        self.set_active_page(SURAHS_PAGE)
        self.apply_theme("light")

    # -- Builders -----------------------------------------------------------
    def _build_nav_bar(self) -> QtWidgets.QWidget:
        bar = QtWidgets.QFrame()
        bar.setObjectName("NavBar")
        bar.setSizePolicy(QtWidgets.QSizePolicy.Fixed, QtWidgets.QSizePolicy.Expanding)
        bar.setFixedWidth(150)

        layout = QtWidgets.QVBoxLayout(bar)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(16)

        for index, label, glyph in [(SURAHS_PAGE, "Surahs", "\U0001F4D6"), (BOOKMARKS_PAGE, "Bookmarks", "\U0001F516")]:
            button = QtWidgets.QToolButton()
            button.setCheckable(True)
            button.setAutoExclusive(True)
            button.setToolButtonStyle(QtCore.Qt.ToolButtonTextUnderIcon)
            button.setIconSize(QtCore.QSize(36, 36))
            button.setSizePolicy(QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Fixed)
            button.setMinimumHeight(96)
            button.setObjectName("NavButton")
            button.setCursor(QtCore.Qt.PointingHandCursor)
            button.setText(label)
            button.setIcon(self._create_glyph_icon(glyph, self._accent_color, 24))
            button.pressed.connect(lambda idx=index: self.set_active_page(idx))  # type: ignore
            self._nav_group.addButton(button, index)
            self._nav_buttons[index] = button
            layout.addWidget(button)

        layout.addStretch(1)

        action_widget = QtWidgets.QWidget()
        action_widget.setObjectName("NavActions")
        action_layout = QtWidgets.QVBoxLayout(action_widget)
        action_layout.setContentsMargins(0, 0, 0, 0)
        action_layout.setSpacing(12)

        self.theme_button = QtWidgets.QPushButton()
        self.theme_button.setObjectName("GhostButton")
        self.theme_button.setMinimumHeight(44)
        self.theme_button.setCursor(QtCore.Qt.PointingHandCursor)
        self.theme_button.setToolTip("Toggle light/dark theme")
        action_layout.addWidget(self.theme_button)

        self.settings_button = QtWidgets.QPushButton()
        self.settings_button.setObjectName("SecondaryButton")
        self.settings_button.setMinimumHeight(44)
        self.settings_button.setCursor(QtCore.Qt.PointingHandCursor)
        self.settings_button.setToolTip("Settings")
        self.settings_button.setIconSize(QtCore.QSize(26, 26))
        action_layout.addWidget(self.settings_button)

        layout.addWidget(action_widget)
        return bar

    def _create_glyph_icon(self, glyph: str, color: QtGui.QColor, size: int = 28) -> QtGui.QIcon:
        icon_size = max(size, 24)
        dimension = icon_size + 12
        pixmap = QtGui.QPixmap(dimension, dimension)
        pixmap.fill(QtCore.Qt.transparent)

        painter = QtGui.QPainter(pixmap)
        painter.setRenderHint(QtGui.QPainter.Antialiasing)
        painter.setPen(QtGui.QPen(color))
        font = QtGui.QFont("Segoe UI Symbol", icon_size)
        painter.setFont(font)
        painter.drawText(pixmap.rect(), QtCore.Qt.AlignCenter, glyph)
        painter.end()
        return QtGui.QIcon(pixmap)

    # -- Pages ---------------------------------------------------------------
    def set_active_page(self, index: int) -> None:
        if index != READING_PAGE:
            self.reading_page.stop_reading()
        self.page_stack.setCurrentIndex(index)
        if index == READING_PAGE:
            self.reading_page.resume_tracking()
        button = self._nav_buttons.get(index)
        if button and not button.isChecked():
            button.setChecked(True)

    def current_page(self) -> int:
        return self.page_stack.currentIndex()

    def set_surahs(self, surahs: Sequence[SurahSummary]) -> None:
        self.surah_page.set_surahs(surahs)

    def show_surahs_error(self, message: str) -> None:
        self.surah_page.show_error(message)

    def show_reading_loading(self, surah_number: int) -> None:
        self.reading_page.show_loading(self.surah_page.find_surah(surah_number), surah_number)
        self.set_active_page(READING_PAGE)

    def display_surah(self, text: SurahText, focus_verse: Optional[int] = None) -> None:
        self.reading_page.show_surah(text, focus_verse)
        self.set_active_page(READING_PAGE)

    def display_surah_error(self, surah_number: int, message: str) -> None:
        self.reading_page.show_error(surah_number, message)

    def set_bookmarks(self, bookmarks: Sequence[Bookmark]) -> None:
        self.bookmarks_page.set_bookmarks(bookmarks)

    def set_status(self, text: str) -> None:
        self.status_label.setText(text)

    # -- Event handler wiring -------------------------------------------------
    def on_surah_request(self, handler: Callable[[int, Optional[int]], None]) -> None:
        self._surah_handler = handler

    def on_bookmark_save(self, handler: Callable[[Dict[str, Any]], None]) -> None:
        self._bookmark_handler = handler

    def on_bookmark_delete(self, handler: Callable[[str], None]) -> None:
        self._bookmark_delete_handler = handler

    def on_settings_open(self, handler: Callable[[], None]) -> None:
        self._settings_handler = handler

    def on_theme_toggle(self, handler: Callable[[], None]) -> None:
        self._theme_handler = handler

    def on_scroll_speed_change(self, handler: Callable[[int], None]) -> None:
        self._speed_handler = handler

    def on_translation_toggle(self, handler: Callable[[bool], None]) -> None:
        self._translation_handler = handler

    def _emit_surah_request(self, surah_number: int, focus_verse: Optional[int] = None) -> None:
        if self._surah_handler:
            self._surah_handler(surah_number, focus_verse)

    def _open_bookmark(self, bookmark: Bookmark) -> None:
        current = self.reading_page.surah
        if current is not None and current.number == bookmark.surah_number:
            self.set_active_page(READING_PAGE)
            self.reading_page.jump_to_verse(bookmark.verse_number)
            return
        self._emit_surah_request(bookmark.surah_number, bookmark.verse_number)

    def _emit_bookmark(self, payload: Dict[str, Any]) -> None:
        if self._bookmark_handler:
            self._bookmark_handler(payload)

    def _emit_bookmark_delete(self, bookmark_id: str) -> None:
        if self._bookmark_delete_handler:
            self._bookmark_delete_handler(bookmark_id)

    def _emit_open_settings(self) -> None:
        if self._settings_handler:
            self._settings_handler()

    def _emit_theme_toggle(self) -> None:
        if self._theme_handler:
            self._theme_handler()

    def _emit_speed(self, value: int) -> None:
        if self._speed_handler:
            self._speed_handler(value)

    def _emit_translation(self, visible: bool) -> None:
        if self._translation_handler:
            self._translation_handler(visible)

    # -- Theme ---------------------------------------------------------------
    @property
    def theme(self) -> str:
        return self._theme

    def apply_theme(self, theme: str) -> None:
        """Apply the selected theme stylesheet and refresh glyph colors."""
        if theme not in THEME_COLORS:
            theme = "light"
        self._theme = theme
        self.setStyleSheet(self._stylesheet_for_theme(theme))
        colors = THEME_COLORS[theme]
        glyph_color = QtGui.QColor(colors["accent"])
        self.settings_button.setIcon(self._create_glyph_icon("⚙", glyph_color, 26))
        self.theme_button.setText("☾ Dark" if theme == "light" else "☀ Light")
        self.reading_page.refresh_reader_styles()

    def _stylesheet_for_theme(self, theme: str) -> str:
        colors = THEME_COLORS.get(theme, THEME_COLORS["light"])
        return textwrap.dedent(
            """
            QWidget {{
                color: {text};
            }}

            #ReaderWindow {{
                background-color: {window};
            }}

            #NavBar, QFrame#quranCard {{
                background-color: {card};
                border-radius: 24px;
                border: 1px solid {border};
            }}

            QToolButton#NavButton {{
                font-weight: 600;
                padding: 12px 6px;
                border-radius: 16px;
                background-color: transparent;
            }}

            QToolButton#NavButton:hover {{
                background-color: {hover};
            }}

            QToolButton#NavButton:checked, QPushButton#PrimaryButton, QPushButton#quranSaveButton {{
                background-color: {accent};
                color: {on_accent};
                border: none;
                border-radius: 12px;
                padding: 8px 16px;
                font-weight: 600;
            }}

            QPushButton#PrimaryButton:hover, QPushButton#quranSaveButton:hover {{
                background-color: {accent_hover};
            }}

            QPushButton#GhostButton, QPushButton#SecondaryButton,
            QPushButton#quranBackButton, QPushButton#quranClearButton {{
                background-color: transparent;
                border: 1px solid {border};
                border-radius: 12px;
                padding: 8px 14px;
            }}

            QPushButton#GhostButton:checked {{
                border-color: {accent};
                color: {accent};
            }}

            QPushButton:disabled {{
                color: {muted};
            }}

            QListWidget#quranList, QListWidget#bookmarkList {{
                background: transparent;
                border: none;
            }}

            QListWidget#quranList::item, QListWidget#bookmarkList::item {{
                padding: 10px;
                border-radius: 12px;
            }}

            QListWidget#quranList::item:selected, QListWidget#bookmarkList::item:selected {{
                background-color: {accent};
                color: {on_accent};
            }}

            QListWidget#quranList::item:hover, QListWidget#bookmarkList::item:hover {{
                background-color: {hover};
            }}

            QLineEdit#surahSearch, QLineEdit#bookmarkSearch {{
                border: 1px solid {border};
                border-radius: 12px;
                padding: 8px 12px;
                background-color: {window};
            }}

            QLabel#quranStatusLabel, QLabel#statusLabel, QLabel#speedLabel, QLabel#placeholder {{
                color: {muted};
            }}

            QScrollArea#quranText {{
                background-color: {card};
                border: 2px solid {verse_edge};
                border-radius: 18px;
            }}

            QWidget#verseContainer {{
                background-color: {card};
            }}

            QFrame#verseCard {{
                border-radius: 16px;
                background-color: transparent;
            }}

            QFrame#verseCard[active="true"] {{
                background-color: {verse_active};
            }}

            QLabel#verseNumber {{
                border-radius: 18px;
                background-color: {hover};
                color: {accent};
                font-weight: 700;
            }}

            QLabel#verseTranslation, QLabel#verseMeta {{
                color: {muted};
            }}

            QToolButton#verseBookmarkButton {{
                border: none;
                border-radius: 10px;
                padding: 4px;
                background-color: transparent;
            }}

            QToolButton#verseBookmarkButton:hover {{
                background-color: {hover};
            }}
            """
        ).format(**colors)


__all__ = ["ReaderWindow", "SURAHS_PAGE", "READING_PAGE", "BOOKMARKS_PAGE"]
