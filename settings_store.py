"""Flat string key-value preferences persisted as a JSON object."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Mapping, Optional

LOGGER = logging.getLogger(__name__)

THEME_KEY = "theme"
SCROLL_SPEED_KEY = "scroll_speed"
SHOW_TRANSLATION_KEY = "show_translation"
TRANSLATION_EDITION_KEY = "translation_edition"
ARABIC_FONT_SIZE_KEY = "arabic_font_size"
TRANSLATION_FONT_SIZE_KEY = "translation_font_size"

SETTING_DEFAULTS: Dict[str, str] = {
    THEME_KEY: "system",
    SCROLL_SPEED_KEY: "50",
    SHOW_TRANSLATION_KEY: "true",
    TRANSLATION_EDITION_KEY: "en.asad",
    ARABIC_FONT_SIZE_KEY: "large",
    TRANSLATION_FONT_SIZE_KEY: "medium",
}


class SettingsStore:
    """Read and write plain string preferences backed by a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._values: Dict[str, str] = self._load()

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def get_or_default(self, key: str, defaults: Mapping[str, str] = SETTING_DEFAULTS) -> str:
        value = self._values.get(key)
        if value is None:
            return defaults.get(key, "")
        return value

    def get_bool(self, key: str) -> bool:
        return self.get_or_default(key).strip().lower() in {"1", "true", "yes", "on"}

    def get_int(self, key: str) -> int:
        raw = self.get_or_default(key)
        try:
            return int(float(raw))
        except (TypeError, ValueError):
            LOGGER.warning("Setting %s has non-numeric value %r; using default", key, raw)
            return int(SETTING_DEFAULTS.get(key, "0"))

    def set(self, key: str, value: object) -> None:
        if isinstance(value, bool):
            text = "true" if value else "false"
        else:
            text = str(value)
        if self._values.get(key) == text:
            return
        self._values[key] = text
        LOGGER.debug("Persisting setting %s=%s", key, text)
        self._save()

    def keys(self) -> list[str]:
        return list(self._values.keys())

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, ValueError):
            LOGGER.exception("Failed to read settings from %s", self.path)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Ignoring settings file %s with unexpected shape", self.path)
            return {}
        LOGGER.debug("Loaded settings keys: %s", list(payload.keys()))
        return {str(key): str(value) for key, value in payload.items() if value is not None}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump(self._values, handle, indent=2)


__all__ = [
    "ARABIC_FONT_SIZE_KEY",
    "SCROLL_SPEED_KEY",
    "SETTING_DEFAULTS",
    "SHOW_TRANSLATION_KEY",
    "SettingsStore",
    "THEME_KEY",
    "TRANSLATION_FONT_SIZE_KEY",
    "TRANSLATION_EDITION_KEY",
]
