"""Reading page: verse-by-verse text with auto-scroll, jump and bookmarking."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

try:
    from PyQt5 import QtCore, QtGui, QtWidgets  # type: ignore
except Exception:  # pragma: no cover - fallback path
    try:
        from PySide2 import QtCore, QtGui, QtWidgets  # type: ignore
    except Exception:
        from PySide6 import QtCore, QtGui, QtWidgets  # type: ignore

try:  # Compatibility alias for Qt signals
    Signal = QtCore.pyqtSignal  # type: ignore[attr-defined]
except AttributeError:  # pragma: no cover - PySide compatibility
    Signal = QtCore.Signal  # type: ignore[attr-defined]

from quran_service import SURAH_COUNT, SurahSummary, SurahText, Verse
from scroll_driver import DEFAULT_RATE_PERCENT, MAX_RATE_PERCENT, MIN_RATE_PERCENT, ScrollDriver
from scroll_region import ScrollAreaRegion, VerseBlock, blocks_from_widgets
from ui.dialogs import AyahJumpDialog, BookmarkDialog
from viewport_tracker import ViewportTracker
from wake_lock import WakeLock

LOGGER = logging.getLogger(__name__)

PREFERRED_ARABIC_FONTS = [
    "KFGQPC Uthman Taha Naskh",
    "KFGQPC Hafs",
    "Amiri Quran",
    "Scheherazade New",
    "Traditional Arabic",
]

TEXT_SIZE_CHOICES = [
    ("small", "Small"),
    ("medium", "Medium"),
    ("large", "Large"),
    ("x-large", "Extra Large"),
]
ARABIC_POINT_SIZES = {"small": 20, "medium": 24, "large": 28, "x-large": 34}
TRANSLATION_POINT_SIZES = {"small": 11, "medium": 13, "large": 15, "x-large": 18}


def format_verse_location(verse: Verse) -> str:
    """``"Juz 1 | Page 2"``, dropping whichever part the edition did not report."""
    parts = []
    if verse.juz is not None:
        parts.append(f"Juz {verse.juz}")
    if verse.page is not None:
        parts.append(f"Page {verse.page}")
    return " | ".join(parts)


class VerseCard(QtWidgets.QFrame):
    """One verse: number badge, juz/page line, Arabic text and an optional translation."""

    bookmark_clicked = Signal(int)

    def __init__(self, verse: Verse, show_translation: bool, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.verse = verse
        self.setObjectName("verseCard")
        self.setProperty("active", False)

        layout = QtWidgets.QHBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(16)

        self.number_label = QtWidgets.QLabel(str(verse.number))
        self.number_label.setObjectName("verseNumber")
        self.number_label.setAlignment(QtCore.Qt.AlignCenter)
        self.number_label.setFixedSize(36, 36)
        layout.addWidget(self.number_label, 0, QtCore.Qt.AlignTop)

        text_column = QtWidgets.QVBoxLayout()
        text_column.setSpacing(12)

        meta_row = QtWidgets.QHBoxLayout()
        meta_row.setSpacing(8)
        location = format_verse_location(verse)
        self.meta_label = QtWidgets.QLabel(location)
        self.meta_label.setObjectName("verseMeta")
        self.meta_label.setVisible(bool(location))
        meta_row.addWidget(self.meta_label)
        meta_row.addStretch(1)

        self.bookmark_button = QtWidgets.QToolButton()
        self.bookmark_button.setObjectName("verseBookmarkButton")
        self.bookmark_button.setText("\U0001F516")
        self.bookmark_button.setToolTip(f"Bookmark ayah {verse.number}")
        self.bookmark_button.setCursor(QtCore.Qt.PointingHandCursor)
        self.bookmark_button.clicked.connect(lambda: self.bookmark_clicked.emit(self.verse.number))  # type: ignore
        meta_row.addWidget(self.bookmark_button)
        text_column.addLayout(meta_row)

        self.arabic_label = QtWidgets.QLabel(verse.arabic_text)
        self.arabic_label.setObjectName("verseArabic")
        self.arabic_label.setWordWrap(True)
        self.arabic_label.setLayoutDirection(QtCore.Qt.RightToLeft)
        self.arabic_label.setAlignment(QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter)
        self.arabic_label.setTextInteractionFlags(QtCore.Qt.TextSelectableByMouse)
        text_column.addWidget(self.arabic_label)

        self.translation_label = QtWidgets.QLabel(verse.translation_text)
        self.translation_label.setObjectName("verseTranslation")
        self.translation_label.setWordWrap(True)
        self.translation_label.setTextInteractionFlags(QtCore.Qt.TextSelectableByMouse)
        self.translation_label.setVisible(show_translation and bool(verse.translation_text))
        text_column.addWidget(self.translation_label)

        layout.addLayout(text_column, stretch=1)

    def set_active(self, active: bool) -> None:
        if bool(self.property("active")) == active:
            return
        self.setProperty("active", active)
        self.style().unpolish(self)
        self.style().polish(self)

    def set_translation_visible(self, visible: bool) -> None:
        self.translation_label.setVisible(visible and bool(self.verse.translation_text))


class ReadingPage(QtWidgets.QWidget):
    """Immersive reader for one surah.

    Composes a :class:`ScrollAreaRegion` over the verse list, a
    :class:`ViewportTracker` for the current verse and a :class:`ScrollDriver`
    for auto-scroll and jumps.
    """

    back_requested = Signal()
    surah_requested = Signal(int)
    bookmark_requested = Signal(object)
    scroll_speed_changed = Signal(int)
    translation_toggled = Signal(bool)

    def __init__(
        self,
        parent: Optional[QtWidgets.QWidget] = None,
        wake_lock: Optional[WakeLock] = None,
    ) -> None:
        super().__init__(parent)
        self._surah: Optional[SurahSummary] = None
        self._verses: List[Verse] = []
        self._cards: Dict[int, VerseCard] = {}
        self._show_translation = True
        self._pending_focus: Optional[int] = None
        self._wake_lock = wake_lock or WakeLock()
        self._arabic_font = QtGui.QFont()
        self._translation_font = QtGui.QFont()
        self._arabic_size = "large"
        self._translation_size = "medium"
        self._current_number = 0
        self._tracking_scheduled = False

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(12)

        header_row = QtWidgets.QHBoxLayout()
        header_row.setContentsMargins(0, 0, 0, 0)
        header_row.setSpacing(12)

        self.back_button = QtWidgets.QPushButton("Back")
        self.back_button.setObjectName("quranBackButton")
        self.back_button.setCursor(QtCore.Qt.PointingHandCursor)
        self.back_button.clicked.connect(self._on_back)  # type: ignore
        header_row.addWidget(self.back_button, 0)

        self.previous_button = QtWidgets.QPushButton("‹ Previous")
        self.previous_button.setObjectName("GhostButton")
        self.previous_button.clicked.connect(lambda: self._request_relative_surah(-1))  # type: ignore
        header_row.addWidget(self.previous_button, 0)

        self.reading_title = QtWidgets.QLabel("Select a surah to begin reading.")
        reading_title_font = QtGui.QFont(self.reading_title.font())
        reading_title_font.setPointSize(18)
        reading_title_font.setBold(True)
        self.reading_title.setFont(reading_title_font)
        self.reading_title.setObjectName("quranReadingTitle")
        self.reading_title.setAlignment(QtCore.Qt.AlignCenter)
        header_row.addWidget(self.reading_title, 1)

        self.next_button = QtWidgets.QPushButton("Next ›")
        self.next_button.setObjectName("GhostButton")
        self.next_button.clicked.connect(lambda: self._request_relative_surah(1))  # type: ignore
        header_row.addWidget(self.next_button, 0)
        layout.addLayout(header_row)

        self.scroll_area = QtWidgets.QScrollArea()
        self.scroll_area.setObjectName("quranText")
        self.scroll_area.setWidgetResizable(True)
        self.scroll_area.setHorizontalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)
        self.verse_container = QtWidgets.QWidget()
        self.verse_container.setObjectName("verseContainer")
        self.verse_layout = QtWidgets.QVBoxLayout(self.verse_container)
        self.verse_layout.setContentsMargins(24, 24, 24, 24)
        self.verse_layout.setSpacing(24)
        self.placeholder_label = QtWidgets.QLabel()
        self.placeholder_label.setObjectName("placeholder")
        self.placeholder_label.setAlignment(QtCore.Qt.AlignCenter)
        self.placeholder_label.setWordWrap(True)
        self.placeholder_label.setTextFormat(QtCore.Qt.PlainText)
        self.verse_layout.addWidget(self.placeholder_label)
        self.verse_layout.addStretch(1)
        self.scroll_area.setWidget(self.verse_container)
        layout.addWidget(self.scroll_area, stretch=1)

        controls_row = QtWidgets.QHBoxLayout()
        controls_row.setSpacing(12)

        self.play_button = QtWidgets.QPushButton("Auto-scroll")
        self.play_button.setObjectName("PrimaryButton")
        self.play_button.setCheckable(True)
        self.play_button.setCursor(QtCore.Qt.PointingHandCursor)
        self.play_button.clicked.connect(self.toggle_auto_scroll)  # type: ignore
        controls_row.addWidget(self.play_button)

        self.speed_label = QtWidgets.QLabel()
        self.speed_label.setObjectName("speedLabel")
        controls_row.addWidget(self.speed_label)

        self.speed_slider = QtWidgets.QSlider(QtCore.Qt.Horizontal)
        self.speed_slider.setObjectName("speedSlider")
        self.speed_slider.setRange(MIN_RATE_PERCENT, MAX_RATE_PERCENT)
        self.speed_slider.setSingleStep(5)
        self.speed_slider.setPageStep(5)
        self.speed_slider.setValue(DEFAULT_RATE_PERCENT)
        self.speed_slider.valueChanged.connect(self._on_speed_changed)  # type: ignore
        controls_row.addWidget(self.speed_slider, stretch=1)

        self.translation_button = QtWidgets.QPushButton("Translation")
        self.translation_button.setObjectName("GhostButton")
        self.translation_button.setCheckable(True)
        self.translation_button.setChecked(True)
        self.translation_button.toggled.connect(self._on_translation_toggled)  # type: ignore
        controls_row.addWidget(self.translation_button)

        self.jump_button = QtWidgets.QPushButton("Jump to Ayah")
        self.jump_button.setObjectName("GhostButton")
        self.jump_button.clicked.connect(self.open_jump_dialog)  # type: ignore
        controls_row.addWidget(self.jump_button)

        self.bookmark_button = QtWidgets.QPushButton("Bookmark")
        self.bookmark_button.setObjectName("quranSaveButton")
        self.bookmark_button.clicked.connect(self.open_bookmark_dialog)  # type: ignore
        controls_row.addWidget(self.bookmark_button)

        layout.addLayout(controls_row)

        self.current_label = QtWidgets.QLabel()
        self.current_label.setObjectName("quranStatusLabel")
        layout.addWidget(self.current_label)

        self.region = ScrollAreaRegion(self.scroll_area, parent=self)
        self.tracker = ViewportTracker(parent=self)
        self.driver = ScrollDriver(self.region, parent=self)
        self.tracker.active_verse_changed.connect(self._on_active_verse_changed)  # type: ignore
        self.driver.state_changed.connect(self._on_auto_scroll_state)  # type: ignore
        self.driver.scroll_ended.connect(self._on_auto_scroll_ended)  # type: ignore

        self._update_speed_label(self.speed_slider.value())
        self._set_placeholder("Select a surah to begin reading.")
        self._update_controls()
        self.refresh_reader_styles()

    # ------------------------------------------------------------------
    @property
    def surah(self) -> Optional[SurahSummary]:
        return self._surah

    @property
    def active_verse(self) -> Optional[int]:
        return self.tracker.active_verse

    def verse_numbers(self) -> List[int]:
        return [verse.number for verse in self._verses]

    def show_loading(self, surah: Optional[SurahSummary], surah_number: int) -> None:
        self._reset_reader()
        self.reading_title.setText(self._format_title(surah) if surah else f"Surah {surah_number}")
        self._set_placeholder("Loading surah...")
        self._update_controls(surah_number)

    def show_error(self, surah_number: int, message: str) -> None:
        self._reset_reader()
        self._set_placeholder(message or "Unable to load this surah.")
        self._update_controls(surah_number)

    def show_surah(self, text: SurahText, focus_verse: Optional[int] = None) -> None:
        """Render every verse of *text*; optionally jump to *focus_verse* once laid out."""
        self._reset_reader()
        self._surah = text.surah
        self._verses = list(text.verses)
        self.reading_title.setText(self._format_title(text.surah))
        self.placeholder_label.hide()

        insert_at = self.verse_layout.count() - 1
        for verse in self._verses:
            card = VerseCard(verse, self._show_translation, self.verse_container)
            card.arabic_label.setFont(self._arabic_font)
            card.translation_label.setFont(self._translation_font)
            card.bookmark_clicked.connect(self._on_card_bookmark)  # type: ignore
            self.verse_layout.insertWidget(insert_at, card)
            insert_at += 1
            self._cards[verse.number] = card

        self._pending_focus = focus_verse
        self._update_controls(text.surah.number)
        self.current_label.setText(f"{len(self._verses)} ayahs")
        LOGGER.debug("Rendered %d verse cards for surah %s", len(self._cards), text.surah.number)
        self._tracking_scheduled = True
        QtCore.QTimer.singleShot(0, self._start_tracking)

    def jump_to_verse(self, verse_number: int, smooth: bool = True) -> bool:
        return self.driver.scroll_to(verse_number, smooth=smooth)

    def set_scroll_speed(self, rate_percent: int) -> None:
        self.speed_slider.setValue(int(rate_percent))

    def set_show_translation(self, visible: bool) -> None:
        self.translation_button.setChecked(bool(visible))

    def toggle_auto_scroll(self) -> None:
        if self.driver.is_running:
            self.driver.stop()
            return
        if not self._cards:
            self.play_button.setChecked(False)
            return
        self._refresh_geometry()
        if not self.driver.start(self.region, self.speed_slider.value()):
            self.play_button.setChecked(self.driver.is_running)

    def resume_tracking(self) -> None:
        """Re-register the rendered verses after the page was left and shown again."""
        if self._cards and not self._tracking_scheduled and not self.tracker.is_observing:
            self._start_tracking()

    def stop_reading(self) -> None:
        """Stop auto-scroll and visibility tracking, e.g. when leaving the page."""
        self.driver.stop()
        self.tracker.stop()

    # ------------------------------------------------------------------
    def open_jump_dialog(self) -> None:
        if not self._surah or not self._verses:
            return
        dialog = AyahJumpDialog(self, self._surah.english_name, len(self._verses), self.tracker.active_verse)
        if dialog.exec() == QtWidgets.QDialog.Accepted:
            if not self.jump_to_verse(dialog.verse_number()):
                self.current_label.setText(f"Ayah {dialog.verse_number()} is not available in this surah.")

    def open_bookmark_dialog(self) -> None:
        if not self._surah or not self._verses:
            return
        verse_number = self.tracker.active_verse or self._verses[0].number
        dialog = BookmarkDialog(self, self._surah.english_name, verse_number)
        if dialog.exec() == QtWidgets.QDialog.Accepted:
            self.bookmark_requested.emit(self.bookmark_payload(verse_number, **dialog.values()))

    def _on_card_bookmark(self, verse_number: int) -> None:
        # Quick bookmark: the store fills in the default title.
        if verse_number in self._cards:
            self.bookmark_requested.emit(self.bookmark_payload(verse_number))

    def bookmark_payload(self, verse_number: int, title: str = "", notes: str = "") -> Dict[str, Any]:
        card = self._cards.get(verse_number)
        surah = self._surah
        return {
            "surah_number": surah.number if surah else 0,
            "surah_name": surah.english_name if surah else "",
            "verse_number": verse_number,
            "title": title,
            "notes": notes,
            "text": (card.verse.translation_text or card.verse.arabic_text) if card else "",
        }

    # ------------------------------------------------------------------
    def _start_tracking(self) -> None:
        self._tracking_scheduled = False
        blocks = self._refresh_geometry()
        self.tracker.observe(blocks, self.region)
        if self._pending_focus is not None:
            focus, self._pending_focus = self._pending_focus, None
            if not self.driver.scroll_to(focus, smooth=False):
                LOGGER.info("Bookmark verse %s not found in surah; staying at the top", focus)

    def _refresh_geometry(self) -> List[VerseBlock]:
        self.verse_layout.activate()
        self.region.refresh_geometry()
        blocks = blocks_from_widgets((number, card) for number, card in self._cards.items())
        self.region.set_blocks(blocks)
        return blocks

    def _reset_reader(self) -> None:
        self.stop_reading()
        for card in self._cards.values():
            self.verse_layout.removeWidget(card)
            card.deleteLater()
        self._cards.clear()
        self._verses = []
        self._surah = None
        self._pending_focus = None
        self.region.set_blocks(())
        self.region.set_scroll_offset(0)
        self.current_label.setText("")

    def _set_placeholder(self, message: str) -> None:
        self.placeholder_label.setText(message)
        self.placeholder_label.show()

    def _update_controls(self, surah_number: Optional[int] = None) -> None:
        has_text = bool(self._cards)
        self.play_button.setEnabled(has_text)
        self.jump_button.setEnabled(has_text)
        self.bookmark_button.setEnabled(has_text)
        number = surah_number or 0
        self.previous_button.setEnabled(number > 1)
        self.next_button.setEnabled(0 < number < SURAH_COUNT)
        self._current_number = number

    def _request_relative_surah(self, step: int) -> None:
        target = self._current_number + step
        if 1 <= target <= SURAH_COUNT:
            self.surah_requested.emit(target)

    def _on_back(self) -> None:
        self.stop_reading()
        self.back_requested.emit()

    def _on_active_verse_changed(self, verse_number: int) -> None:
        for number, card in self._cards.items():
            card.set_active(number == verse_number)
        total = len(self._verses)
        self.current_label.setText(f"Ayah {verse_number} of {total}")

    def _on_auto_scroll_state(self, running: bool) -> None:
        self.play_button.setChecked(running)
        self.play_button.setText("Pause" if running else "Auto-scroll")
        if running:
            self._wake_lock.acquire()
        else:
            self._wake_lock.release()

    def _on_auto_scroll_ended(self) -> None:
        self.current_label.setText("Reached the end of the surah.")

    def _on_speed_changed(self, value: int) -> None:
        self.driver.set_rate(value)
        self._update_speed_label(value)
        self.scroll_speed_changed.emit(int(value))

    def _update_speed_label(self, value: int) -> None:
        self.speed_label.setText(f"Speed {int(value)}%")

    def _on_translation_toggled(self, checked: bool) -> None:
        self._show_translation = checked
        for card in self._cards.values():
            card.set_translation_visible(checked)
        if self._cards:
            QtCore.QTimer.singleShot(0, self._on_layout_changed)
        self.translation_toggled.emit(checked)

    def _on_layout_changed(self) -> None:
        if self._cards and self.tracker.is_observing:
            self.tracker.update_blocks(self._refresh_geometry())

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        if self._cards:
            QtCore.QTimer.singleShot(0, self._on_layout_changed)

    def hideEvent(self, event: QtGui.QHideEvent) -> None:  # type: ignore[override]
        self.driver.stop()
        super().hideEvent(event)

    @staticmethod
    def _format_title(surah: SurahSummary) -> str:
        return f"{surah.number:03d} · {surah.english_name} / {surah.name}"

    @property
    def text_sizes(self) -> Tuple[str, str]:
        return self._arabic_size, self._translation_size

    def set_text_sizes(self, arabic_size: str, translation_size: str) -> None:
        """Apply named text sizes (small, medium, large, x-large); unknown names keep the current size."""
        if arabic_size in ARABIC_POINT_SIZES:
            self._arabic_size = arabic_size
        if translation_size in TRANSLATION_POINT_SIZES:
            self._translation_size = translation_size
        self.refresh_reader_styles()
        if self._cards:
            QtCore.QTimer.singleShot(0, self._on_layout_changed)

    def refresh_reader_styles(self) -> None:
        database = QtGui.QFontDatabase()
        available = set(database.families())
        font = QtGui.QFont(self.font())
        for family in PREFERRED_ARABIC_FONTS:
            if family in available:
                font = QtGui.QFont(family)
                break
        font.setPointSize(ARABIC_POINT_SIZES[self._arabic_size])
        font.setStyleStrategy(QtGui.QFont.PreferAntialias)
        self._arabic_font = font

        translation_font = QtGui.QFont(self.font())
        translation_font.setPointSize(TRANSLATION_POINT_SIZES[self._translation_size])
        self._translation_font = translation_font
        for card in self._cards.values():
            card.arabic_label.setFont(font)
            card.translation_label.setFont(translation_font)


__all__ = [
    "ARABIC_POINT_SIZES",
    "ReadingPage",
    "TEXT_SIZE_CHOICES",
    "TRANSLATION_POINT_SIZES",
    "VerseCard",
    "format_verse_location",
]
