import json
from datetime import datetime

import pytz

from bookmarks import Bookmark, BookmarkStore, filter_bookmarks
from settings_store import (
    ARABIC_FONT_SIZE_KEY,
    SCROLL_SPEED_KEY,
    SHOW_TRANSLATION_KEY,
    THEME_KEY,
    TRANSLATION_FONT_SIZE_KEY,
    SettingsStore,
)
from wake_lock import ES_CONTINUOUS, WakeLock


def test_settings_defaults_and_round_trip(tmp_path):
    path = tmp_path / "config.json"
    store = SettingsStore(path)

    assert store.get(THEME_KEY) is None
    assert store.get_or_default(THEME_KEY) == "system"
    assert store.get_int(SCROLL_SPEED_KEY) == 50
    assert store.get_bool(SHOW_TRANSLATION_KEY) is True

    store.set(SCROLL_SPEED_KEY, 75)
    store.set(SHOW_TRANSLATION_KEY, False)

    reloaded = SettingsStore(path)
    assert reloaded.get(SCROLL_SPEED_KEY) == "75"
    assert reloaded.get_bool(SHOW_TRANSLATION_KEY) is False
    assert json.loads(path.read_text(encoding="utf-8")) == {"scroll_speed": "75", "show_translation": "false"}


def test_settings_ignore_corrupt_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    store = SettingsStore(path)

    assert store.keys() == []
    assert store.get_int(SCROLL_SPEED_KEY) == 50


def test_settings_non_numeric_speed_falls_back(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"scroll_speed": "fast"}), encoding="utf-8")

    assert SettingsStore(path).get_int(SCROLL_SPEED_KEY) == 50


def test_text_size_settings_default_and_persist(tmp_path):
    path = tmp_path / "config.json"
    store = SettingsStore(path)

    assert store.get_or_default(ARABIC_FONT_SIZE_KEY) == "large"
    assert store.get_or_default(TRANSLATION_FONT_SIZE_KEY) == "medium"

    store.set(ARABIC_FONT_SIZE_KEY, "x-large")
    store.set(TRANSLATION_FONT_SIZE_KEY, "small")

    reloaded = SettingsStore(path)
    assert reloaded.get_or_default(ARABIC_FONT_SIZE_KEY) == "x-large"
    assert reloaded.get_or_default(TRANSLATION_FONT_SIZE_KEY) == "small"


def test_bookmark_save_list_delete(tmp_path):
    path = tmp_path / "bookmarks.json"
    store = BookmarkStore(path)

    first = store.save(1, 5, "Guidance", "read daily", surah_name="Al-Faatiha", text="Guide us")
    second = store.save(2, 255, "", surah_name="Al-Baqara")

    reloaded = BookmarkStore(path)
    titles = {bookmark.id: bookmark.title for bookmark in reloaded.list()}
    assert titles == {first: "Guidance", second: "Al-Baqara - Ayah 255"}
    assert reloaded.get(first).notes == "read daily"

    assert reloaded.delete(first) is True
    assert reloaded.delete(first) is False
    assert [bookmark.id for bookmark in BookmarkStore(path).list()] == [second]


def test_bookmark_store_skips_malformed_entries(tmp_path):
    path = tmp_path / "bookmarks.json"
    path.write_text(
        json.dumps(
            {
                "bookmarks": [
                    {"id": "a", "surah_number": 1, "verse_number": 2, "created_at": "2025-01-01T10:00:00+00:00"},
                    {"id": "b"},
                ]
            }
        ),
        encoding="utf-8",
    )

    bookmarks = BookmarkStore(path).list()

    assert [bookmark.id for bookmark in bookmarks] == ["a"]
    assert bookmarks[0].created_at == datetime(2025, 1, 1, 10, 0, tzinfo=pytz.utc)


def test_bookmark_local_time_uses_requested_zone():
    bookmark = Bookmark(
        id="x",
        surah_number=1,
        verse_number=1,
        title="t",
        notes="",
        surah_name="",
        text="",
        created_at=datetime(2025, 6, 1, 12, 0, tzinfo=pytz.utc),
    )

    local = bookmark.local_created_at("Africa/Casablanca")

    assert local.utcoffset() is not None
    assert local.astimezone(pytz.utc) == bookmark.created_at


def test_filter_bookmarks_searches_name_text_and_notes():
    created = datetime(2025, 1, 1, tzinfo=pytz.utc)
    bookmarks = [
        Bookmark("a", 1, 1, "Opening", "", "Al-Faatiha", "In the name of God", created),
        Bookmark("b", 2, 255, "Throne", "memorise before sleep", "Al-Baqara", "God - there is no deity", created),
    ]

    assert [b.id for b in filter_bookmarks(bookmarks, "baqara")] == ["b"]
    assert [b.id for b in filter_bookmarks(bookmarks, "name of")] == ["a"]
    assert [b.id for b in filter_bookmarks(bookmarks, "SLEEP")] == ["b"]
    assert [b.id for b in filter_bookmarks(bookmarks, "")] == ["a", "b"]


class _FakeKernel32:
    def __init__(self, result=1):
        self.calls = []
        self.result = result

    def SetThreadExecutionState(self, flags):
        self.calls.append(flags)
        return self.result


def test_wake_lock_acquire_and_release():
    kernel = _FakeKernel32()
    lock = WakeLock(kernel32=kernel)

    assert lock.acquire() is True
    assert lock.acquire() is True
    lock.release()
    lock.release()

    assert len(kernel.calls) == 2
    assert kernel.calls[-1] == ES_CONTINUOUS
    assert not lock.held


def test_wake_lock_refused_request_is_not_held():
    lock = WakeLock(kernel32=_FakeKernel32(result=0))

    assert lock.acquire() is False
    assert not lock.held
