"""Settings dialog for the Qur'an reader."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

try:
    from PyQt5 import QtCore, QtWidgets  # type: ignore
except Exception:  # pragma: no cover - fallback path
    try:
        from PySide2 import QtCore, QtWidgets  # type: ignore
    except Exception:
        from PySide6 import QtCore, QtWidgets  # type: ignore

from scroll_driver import MAX_RATE_PERCENT, MIN_RATE_PERCENT
from ui.reading import TEXT_SIZE_CHOICES


class SettingsDialog(QtWidgets.QDialog):
    """Dialog exposing reading preferences."""

    def __init__(
        self,
        parent: Optional[QtWidgets.QWidget],
        initial: Dict[str, Any],
        editions: Sequence[Tuple[str, str]],
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setModal(True)
        self.resize(430, 400)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(16)

        appearance_group = QtWidgets.QGroupBox("Appearance")
        appearance_layout = QtWidgets.QFormLayout()
        appearance_layout.setLabelAlignment(QtCore.Qt.AlignLeft)

        self.theme_combo = QtWidgets.QComboBox()
        self.theme_combo.setObjectName("settingsThemeCombo")
        for value, label in [("system", "Match system"), ("light", "Light"), ("dark", "Dark")]:
            self.theme_combo.addItem(label, value)
        current_theme = str(initial.get("theme", "system")).lower()
        if current_theme not in {"light", "dark", "system"}:
            current_theme = "system"
        self.theme_combo.setCurrentIndex(max(0, self.theme_combo.findData(current_theme)))
        appearance_layout.addRow("Theme", self.theme_combo)
        appearance_group.setLayout(appearance_layout)
        layout.addWidget(appearance_group)

        reading_group = QtWidgets.QGroupBox("Reading")
        reading_layout = QtWidgets.QFormLayout()
        reading_layout.setLabelAlignment(QtCore.Qt.AlignLeft)

        self.edition_combo = QtWidgets.QComboBox()
        self.edition_combo.setObjectName("settingsEditionCombo")
        known: List[str] = []
        for code, label in editions:
            self.edition_combo.addItem(label, code)
            known.append(code)
        current_edition = str(initial.get("translation_edition", ""))
        if current_edition and current_edition not in known:
            self.edition_combo.addItem(current_edition, current_edition)
        self.edition_combo.setCurrentIndex(max(0, self.edition_combo.findData(current_edition)))
        reading_layout.addRow("Translation", self.edition_combo)

        self.speed_spinner = QtWidgets.QSpinBox()
        self.speed_spinner.setObjectName("settingsSpeedSpinner")
        self.speed_spinner.setRange(MIN_RATE_PERCENT, MAX_RATE_PERCENT)
        self.speed_spinner.setSingleStep(5)
        self.speed_spinner.setSuffix("%")
        self.speed_spinner.setValue(int(initial.get("scroll_speed", 50)))
        reading_layout.addRow("Auto-scroll speed", self.speed_spinner)

        self.arabic_size_combo = self._size_combo("settingsArabicSizeCombo", initial.get("arabic_font_size"), "large")
        reading_layout.addRow("Arabic text size", self.arabic_size_combo)

        self.translation_size_combo = self._size_combo(
            "settingsTranslationSizeCombo", initial.get("translation_font_size"), "medium"
        )
        reading_layout.addRow("Translation text size", self.translation_size_combo)

        self.translation_checkbox = QtWidgets.QCheckBox("Show translation")
        self.translation_checkbox.setChecked(bool(initial.get("show_translation", True)))
        reading_layout.addRow(self.translation_checkbox)

        reading_group.setLayout(reading_layout)
        layout.addWidget(reading_group)

        buttons = QtWidgets.QDialogButtonBox()
        self.save_button = buttons.addButton("Save", QtWidgets.QDialogButtonBox.AcceptRole)
        self.cancel_button = buttons.addButton("Cancel", QtWidgets.QDialogButtonBox.RejectRole)
        self.save_button.setObjectName("settingsPrimaryButton")
        self.cancel_button.setObjectName("settingsSecondaryButton")
        buttons.accepted.connect(self.accept)  # type: ignore
        buttons.rejected.connect(self.reject)  # type: ignore
        layout.addWidget(buttons)

    @staticmethod
    def _size_combo(object_name: str, current: Optional[object], fallback: str) -> QtWidgets.QComboBox:
        combo = QtWidgets.QComboBox()
        combo.setObjectName(object_name)
        for value, label in TEXT_SIZE_CHOICES:
            combo.addItem(label, value)
        index = combo.findData(str(current or fallback))
        combo.setCurrentIndex(index if index >= 0 else combo.findData(fallback))
        return combo

    def values(self) -> Dict[str, Any]:
        return {
            "theme": self.theme_combo.currentData(),
            "translation_edition": self.edition_combo.currentData(),
            "scroll_speed": self.speed_spinner.value(),
            "show_translation": self.translation_checkbox.isChecked(),
            "arabic_font_size": self.arabic_size_combo.currentData(),
            "translation_font_size": self.translation_size_combo.currentData(),
        }


__all__ = ["SettingsDialog"]
