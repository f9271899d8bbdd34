"""Client for the alquran.cloud REST API: surah listings and verse text."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import requests

LOGGER = logging.getLogger(__name__)

ALQURAN_API_BASE_URL = "https://api.alquran.cloud/v1"
ARABIC_EDITION = "quran-uthmani"
DEFAULT_TRANSLATION_EDITION = "en.asad"
SURAH_COUNT = 114

TRANSLATION_EDITIONS: List[tuple[str, str]] = [
    ("en.asad", "English - Muhammad Asad"),
    ("en.sahih", "English - Saheeh International"),
    ("en.pickthall", "English - Pickthall"),
    ("en.yusufali", "English - Yusuf Ali"),
    ("fr.hamidullah", "Français - Hamidullah"),
    ("id.indonesian", "Bahasa Indonesia - Kemenag"),
    ("ur.jalandhry", "اردو - Jalandhry"),
]


class QuranServiceError(RuntimeError):
    """The API answered, but not with a usable payload."""


@dataclass(frozen=True)
class SurahSummary:
    number: int
    name: str
    english_name: str
    translation_name: str
    verse_count: int
    revelation_place: str


@dataclass(frozen=True)
class Verse:
    number: int
    arabic_text: str
    translation_text: str
    juz: Optional[int] = None
    page: Optional[int] = None


@dataclass(frozen=True)
class SurahText:
    surah: SurahSummary
    edition: str
    verses: List[Verse]


class QuranService:
    """Thin wrapper around the alquran.cloud API."""

    def __init__(self, base_url: str = ALQURAN_API_BASE_URL, timeout: int = 10) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def list_surahs(self) -> List[SurahSummary]:
        payload = self._get(f"{self.base_url}/surah")
        entries = payload if isinstance(payload, list) else []
        surahs = [self._parse_summary(entry) for entry in entries]
        LOGGER.debug("Parsed %d surah summaries", len(surahs))
        return surahs

    def get_surah_verses(
        self,
        surah_number: int,
        translation_edition: str = DEFAULT_TRANSLATION_EDITION,
    ) -> SurahText:
        """Fetch Arabic text and one translation for *surah_number*, zipped by position."""
        if not 1 <= int(surah_number) <= SURAH_COUNT:
            raise ValueError(f"Surah number must be between 1 and {SURAH_COUNT}, got {surah_number}")
        edition = translation_edition or DEFAULT_TRANSLATION_EDITION
        arabic = self._get(f"{self.base_url}/surah/{surah_number}/{ARABIC_EDITION}")
        translation = self._get(f"{self.base_url}/surah/{surah_number}/{edition}")

        arabic_ayahs: List[Dict[str, Any]] = list((arabic or {}).get("ayahs", []) or [])
        translated_ayahs: List[Dict[str, Any]] = list((translation or {}).get("ayahs", []) or [])
        if len(translated_ayahs) != len(arabic_ayahs):
            LOGGER.warning(
                "Edition %s returned %d ayahs for surah %s; Arabic text has %d",
                edition,
                len(translated_ayahs),
                surah_number,
                len(arabic_ayahs),
            )

        verses: List[Verse] = []
        for index, ayah in enumerate(arabic_ayahs):
            translated = translated_ayahs[index] if index < len(translated_ayahs) else {}
            verses.append(
                Verse(
                    number=int(ayah.get("numberInSurah", index + 1)),
                    arabic_text=str(ayah.get("text", "")),
                    translation_text=str(translated.get("text", "")),
                    juz=_safe_int(ayah.get("juz")),
                    page=_safe_int(ayah.get("page")),
                )
            )

        LOGGER.info("Loaded surah %s with %d verses (edition=%s)", surah_number, len(verses), edition)
        return SurahText(surah=self._parse_summary(arabic), edition=edition, verses=verses)

    def _get(self, url: str) -> Any:
        LOGGER.debug("Requesting %s", url)
        response = requests.get(url, timeout=self.timeout)
        LOGGER.debug("alquran.cloud response status: %s", response.status_code)
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict) or payload.get("code") != 200:
            status = payload.get("status") if isinstance(payload, dict) else payload
            raise QuranServiceError(f"Invalid response from alquran.cloud API: {status}")
        return payload.get("data")

    @staticmethod
    def _parse_summary(entry: Dict[str, Any]) -> SurahSummary:
        if not isinstance(entry, dict) or "number" not in entry:
            raise QuranServiceError("Surah entry missing number")
        return SurahSummary(
            number=int(entry["number"]),
            name=str(entry.get("name", "")),
            english_name=str(entry.get("englishName", "")),
            translation_name=str(entry.get("englishNameTranslation", "")),
            verse_count=int(entry.get("numberOfAyahs", len(entry.get("ayahs", []) or []))),
            revelation_place=str(entry.get("revelationType", "")),
        )


def filter_surahs(surahs: Iterable[SurahSummary], query: str) -> List[SurahSummary]:
    """Case-insensitive match on English name, name translation or surah number."""
    needle = query.strip().lower()
    if not needle:
        return list(surahs)
    return [
        surah
        for surah in surahs
        if needle in surah.english_name.lower()
        or needle in surah.translation_name.lower()
        or needle in str(surah.number)
    ]


def _safe_int(value: Optional[object]) -> Optional[int]:
    try:
        if value in (None, ""):
            return None
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


__all__ = [
    "ALQURAN_API_BASE_URL",
    "DEFAULT_TRANSLATION_EDITION",
    "QuranService",
    "QuranServiceError",
    "SURAH_COUNT",
    "SurahSummary",
    "SurahText",
    "TRANSLATION_EDITIONS",
    "Verse",
    "filter_surahs",
]
