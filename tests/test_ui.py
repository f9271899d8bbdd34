from datetime import datetime

import pytz

from bookmarks import Bookmark
from quran_service import SurahSummary, SurahText, Verse
from scroll_region import ScrollRegion, VerseBlock
from ui.reading import VerseCard
from ui.settings import SettingsDialog
from ui.window import BOOKMARKS_PAGE, READING_PAGE, SURAHS_PAGE, ReaderWindow


def fatiha_text():
    surah = SurahSummary(1, "الفاتحة", "Al-Faatiha", "The Opening", 7, "Meccan")
    verses = [Verse(number, f"arabic {number}", f"english {number}") for number in range(1, 8)]
    return SurahText(surah=surah, edition="en.asad", verses=verses)


def test_surah_selection_is_forwarded(qt_app):
    window = ReaderWindow()
    requests = []
    window.on_surah_request(lambda number, focus: requests.append((number, focus)))
    window.set_surahs([fatiha_text().surah])

    window.surah_page.search_edit.setText("opening")
    assert window.surah_page.visible_numbers() == [1]
    window.surah_page.search_edit.setText("cow")
    assert window.surah_page.visible_numbers() == []
    window.surah_page.search_edit.clear()

    window.surah_page.surah_selected.emit(1)
    assert requests == [(1, None)]
    window.close()


def test_reading_page_renders_verses_and_tracks(qt_app):
    window = ReaderWindow()
    window.display_surah(fatiha_text())
    qt_app.processEvents()

    page = window.reading_page
    assert window.current_page() == READING_PAGE
    assert page.verse_numbers() == list(range(1, 8))
    assert page.tracker.is_observing
    assert page.play_button.isEnabled()
    assert not page.previous_button.isEnabled()

    payload = page.bookmark_payload(3, title="Mine")
    assert payload["surah_number"] == 1
    assert payload["surah_name"] == "Al-Faatiha"
    assert payload["text"] == "english 3"
    assert payload["title"] == "Mine"

    window.set_active_page(SURAHS_PAGE)
    assert not page.tracker.is_observing

    window.set_active_page(READING_PAGE)
    assert page.tracker.is_observing
    window.close()


def test_speed_and_translation_changes_are_reported(qt_app):
    window = ReaderWindow()
    speeds = []
    toggles = []
    window.on_scroll_speed_change(speeds.append)
    window.on_translation_toggle(toggles.append)

    window.reading_page.set_scroll_speed(80)
    window.reading_page.set_show_translation(False)

    assert speeds == [80]
    assert toggles == [False]
    assert window.reading_page.driver.rate_percent == 80
    window.close()


def test_opening_bookmark_for_other_surah_requests_it(qt_app):
    window = ReaderWindow()
    requests = []
    window.on_surah_request(lambda number, focus: requests.append((number, focus)))
    bookmark = Bookmark("id", 2, 255, "Throne", "", "Al-Baqara", "", datetime(2025, 1, 1, tzinfo=pytz.utc))
    window.set_bookmarks([bookmark])
    window.set_active_page(BOOKMARKS_PAGE)

    assert window.bookmarks_page.visible_ids() == ["id"]
    window.bookmarks_page.open_requested.emit(bookmark)

    assert requests == [(2, 255)]
    window.close()


def test_deleting_bookmark_asks_for_confirmation(qt_app):
    window = ReaderWindow()
    deleted = []
    window.on_bookmark_delete(deleted.append)
    bookmark = Bookmark("id", 1, 1, "t", "", "Al-Faatiha", "", datetime(2025, 1, 1, tzinfo=pytz.utc))
    window.set_bookmarks([bookmark])
    page = window.bookmarks_page
    page.bookmark_list.setCurrentRow(0)

    page.set_confirmation(lambda parent, item: False)
    page.delete_button.click()
    assert deleted == []

    page.set_confirmation(lambda parent, item: True)
    page.delete_button.click()
    assert deleted == ["id"]
    window.close()


def test_theme_switch_updates_toggle_label(qt_app):
    window = ReaderWindow()

    window.apply_theme("dark")
    assert window.theme == "dark"
    assert "Light" in window.theme_button.text()

    window.apply_theme("unknown")
    assert window.theme == "light"
    window.close()


def test_verse_card_shows_juz_and_page(qt_app):
    card = VerseCard(Verse(2, "arabic", "english", juz=1, page=2), show_translation=True)
    assert card.meta_label.text() == "Juz 1 | Page 2"
    assert not card.meta_label.isHidden()

    bare = VerseCard(Verse(3, "arabic", "english"), show_translation=True)
    assert bare.meta_label.text() == ""
    assert bare.meta_label.isHidden()


def test_card_bookmark_button_saves_that_verse(qt_app):
    window = ReaderWindow()
    saved = []
    window.on_bookmark_save(saved.append)
    window.display_surah(fatiha_text())

    window.reading_page._cards[4].bookmark_button.click()

    assert len(saved) == 1
    assert saved[0]["surah_number"] == 1
    assert saved[0]["verse_number"] == 4
    assert saved[0]["title"] == ""
    assert saved[0]["text"] == "english 4"
    window.close()


def test_text_sizes_apply_to_cards(qt_app):
    window = ReaderWindow()
    window.display_surah(fatiha_text())
    page = window.reading_page

    page.set_text_sizes("x-large", "small")
    card = page._cards[1]
    assert card.arabic_label.font().pointSize() == 34
    assert card.translation_label.font().pointSize() == 11

    page.set_text_sizes("huge", "tiny")
    assert page.text_sizes == ("x-large", "small")
    assert page._cards[1].arabic_label.font().pointSize() == 34
    window.close()


def test_settings_dialog_reports_text_sizes(qt_app):
    initial = {"theme": "dark", "arabic_font_size": "small", "translation_font_size": "bogus"}
    dialog = SettingsDialog(None, initial, [("en.asad", "Muhammad Asad")])

    values = dialog.values()

    assert values["arabic_font_size"] == "small"
    assert values["translation_font_size"] == "medium"
    assert values["theme"] == "dark"
    dialog.close()


def test_loading_another_surah_clears_active_verse(qt_app):
    window = ReaderWindow()
    window.display_surah(fatiha_text())
    qt_app.processEvents()
    blocks = [VerseBlock(1, 0.0, 100.0), VerseBlock(2, 100.0, 100.0)]
    window.reading_page.tracker.observe(blocks, ScrollRegion(content_height=200.0, viewport_height=100.0, blocks=blocks))
    assert window.reading_page.active_verse == 1

    window.show_reading_loading(2)

    assert window.reading_page.active_verse is None
    window.close()
