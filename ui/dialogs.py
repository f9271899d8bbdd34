"""Small modal dialogs used by the reading page."""
from __future__ import annotations

from typing import Any, Dict, Optional

try:
    from PyQt5 import QtWidgets  # type: ignore
except Exception:  # pragma: no cover - fallback path
    try:
        from PySide2 import QtWidgets  # type: ignore
    except Exception:
        from PySide6 import QtWidgets  # type: ignore


class AyahJumpDialog(QtWidgets.QDialog):
    """Ask for a verse number within the open surah."""

    def __init__(
        self,
        parent: Optional[QtWidgets.QWidget],
        surah_name: str,
        verse_count: int,
        current_verse: Optional[int] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Jump to Ayah")
        self.setModal(True)

        maximum = max(1, int(verse_count))
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(12)

        description = QtWidgets.QLabel(f"Enter the ayah number you want to navigate to in {surah_name}.")
        description.setWordWrap(True)
        layout.addWidget(description)

        self.verse_spinner = QtWidgets.QSpinBox()
        self.verse_spinner.setObjectName("jumpVerseSpinner")
        self.verse_spinner.setRange(1, maximum)
        self.verse_spinner.setValue(min(maximum, max(1, int(current_verse or 1))))
        layout.addWidget(self.verse_spinner)

        hint = QtWidgets.QLabel(f"Enter a number between 1 and {maximum}.")
        hint.setObjectName("dialogHint")
        layout.addWidget(hint)

        buttons = QtWidgets.QDialogButtonBox()
        self.jump_button = buttons.addButton("Jump", QtWidgets.QDialogButtonBox.AcceptRole)
        self.cancel_button = buttons.addButton("Cancel", QtWidgets.QDialogButtonBox.RejectRole)
        buttons.accepted.connect(self.accept)  # type: ignore
        buttons.rejected.connect(self.reject)  # type: ignore
        layout.addWidget(buttons)

    def verse_number(self) -> int:
        return int(self.verse_spinner.value())


class BookmarkDialog(QtWidgets.QDialog):
    """Collect a title and notes for a verse bookmark."""

    def __init__(
        self,
        parent: Optional[QtWidgets.QWidget],
        surah_name: str,
        verse_number: int,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Add Bookmark")
        self.setModal(True)
        self.resize(420, 320)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(12)

        description = QtWidgets.QLabel("Save this verse to your bookmarks for quick access later.")
        description.setWordWrap(True)
        layout.addWidget(description)

        form = QtWidgets.QFormLayout()
        self.title_edit = QtWidgets.QLineEdit(f"{surah_name} - Ayah {verse_number}")
        self.title_edit.setObjectName("bookmarkTitleEdit")
        form.addRow("Title", self.title_edit)

        self.notes_edit = QtWidgets.QPlainTextEdit()
        self.notes_edit.setObjectName("bookmarkNotesEdit")
        self.notes_edit.setPlaceholderText("Add your reflections or notes about this verse...")
        form.addRow("Notes", self.notes_edit)
        layout.addLayout(form)

        buttons = QtWidgets.QDialogButtonBox()
        self.save_button = buttons.addButton("Save Bookmark", QtWidgets.QDialogButtonBox.AcceptRole)
        self.cancel_button = buttons.addButton("Cancel", QtWidgets.QDialogButtonBox.RejectRole)
        buttons.accepted.connect(self.accept)  # type: ignore
        buttons.rejected.connect(self.reject)  # type: ignore
        layout.addWidget(buttons)

    def values(self) -> Dict[str, Any]:
        return {
            "title": self.title_edit.text().strip(),
            "notes": self.notes_edit.toPlainText().strip(),
        }


__all__ = ["AyahJumpDialog", "BookmarkDialog"]
