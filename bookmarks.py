"""Verse bookmarks saved to a JSON file."""
from __future__ import annotations

import json
import logging
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pytz
from tzlocal import get_localzone_name

LOGGER = logging.getLogger(__name__)


@dataclass
class Bookmark:
    id: str
    surah_number: int
    verse_number: int
    title: str
    notes: str
    surah_name: str
    text: str
    created_at: datetime

    def to_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["created_at"] = self.created_at.isoformat()
        return payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Bookmark":
        created_raw = payload.get("created_at")
        try:
            created_at = datetime.fromisoformat(str(created_raw))
        except (TypeError, ValueError):
            created_at = datetime.now(pytz.utc)
        if created_at.tzinfo is None:
            created_at = pytz.utc.localize(created_at)
        return cls(
            id=str(payload["id"]),
            surah_number=int(payload["surah_number"]),
            verse_number=int(payload["verse_number"]),
            title=str(payload.get("title", "")),
            notes=str(payload.get("notes", "")),
            surah_name=str(payload.get("surah_name", "")),
            text=str(payload.get("text", "")),
            created_at=created_at,
        )

    def local_created_at(self, timezone_name: Optional[str] = None) -> datetime:
        """Creation time converted to *timezone_name*, or the system zone."""
        return self.created_at.astimezone(pytz.timezone(timezone_name or _system_timezone()))


class BookmarkStore:
    """Append-only list of bookmarks with delete, persisted on every change."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._bookmarks: List[Bookmark] = self._load()

    def save(
        self,
        surah_number: int,
        verse_number: int,
        title: str,
        notes: str = "",
        *,
        surah_name: str = "",
        text: str = "",
    ) -> str:
        bookmark = Bookmark(
            id=uuid.uuid4().hex,
            surah_number=int(surah_number),
            verse_number=int(verse_number),
            title=title.strip() or f"{surah_name or surah_number} - Ayah {verse_number}",
            notes=notes.strip(),
            surah_name=surah_name,
            text=text,
            created_at=datetime.now(pytz.utc),
        )
        self._bookmarks.append(bookmark)
        LOGGER.info("Saved bookmark %s for %s:%s", bookmark.id, surah_number, verse_number)
        self._save()
        return bookmark.id

    def delete(self, bookmark_id: str) -> bool:
        remaining = [bookmark for bookmark in self._bookmarks if bookmark.id != bookmark_id]
        if len(remaining) == len(self._bookmarks):
            LOGGER.debug("Bookmark %s not found; nothing to delete", bookmark_id)
            return False
        self._bookmarks = remaining
        LOGGER.info("Deleted bookmark %s", bookmark_id)
        self._save()
        return True

    def get(self, bookmark_id: str) -> Optional[Bookmark]:
        for bookmark in self._bookmarks:
            if bookmark.id == bookmark_id:
                return bookmark
        return None

    def list(self) -> List[Bookmark]:
        return list(self._bookmarks)

    def _load(self) -> List[Bookmark]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, ValueError):
            LOGGER.exception("Failed to read bookmarks from %s", self.path)
            return []

        entries = payload.get("bookmarks", []) if isinstance(payload, dict) else []
        bookmarks: List[Bookmark] = []
        for entry in entries:
            try:
                bookmarks.append(Bookmark.from_payload(entry))
            except (KeyError, TypeError, ValueError):
                LOGGER.warning("Skipping malformed bookmark entry: %s", entry)
        LOGGER.debug("Loaded %d bookmarks", len(bookmarks))
        return bookmarks

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump({"bookmarks": [bookmark.to_payload() for bookmark in self._bookmarks]}, handle, indent=2, ensure_ascii=False)


def filter_bookmarks(bookmarks: Iterable[Bookmark], query: str) -> List[Bookmark]:
    """Bookmarks whose surah name, verse text, title or notes contain *query*."""
    needle = query.strip().lower()
    if not needle:
        return list(bookmarks)
    return [
        bookmark
        for bookmark in bookmarks
        if needle in bookmark.surah_name.lower()
        or needle in bookmark.text.lower()
        or needle in bookmark.title.lower()
        or needle in bookmark.notes.lower()
    ]


def _system_timezone() -> str:
    try:
        tz_name = get_localzone_name()
    except Exception:  # pragma: no cover - platform specific failure
        LOGGER.warning("Falling back to UTC for system timezone resolution")
        return "UTC"
    if not tz_name:
        return "UTC"
    try:
        pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        LOGGER.warning("Unknown system timezone '%s'; falling back to UTC", tz_name)
        return "UTC"
    return tz_name


__all__ = ["Bookmark", "BookmarkStore", "filter_bookmarks"]
