"""Searchable list of all surahs."""
from __future__ import annotations

from typing import List, Optional, Sequence

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

from quran_service import SurahSummary, filter_surahs


class SurahListPage(QtWidgets.QWidget):
    """Display every surah with a filter box; activating one requests it for reading."""

    surah_selected = Signal(int)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._surahs: List[SurahSummary] = []

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(16)

        self.header_label = QtWidgets.QLabel("Qur'an Surahs")
        header_font = QtGui.QFont(self.header_label.font())
        header_font.setPointSize(18)
        header_font.setBold(True)
        self.header_label.setFont(header_font)
        self.header_label.setObjectName("quranHeader")
        layout.addWidget(self.header_label)

        content_card = QtWidgets.QFrame()
        content_card.setObjectName("quranCard")
        card_layout = QtWidgets.QVBoxLayout(content_card)
        card_layout.setContentsMargins(20, 20, 20, 20)
        card_layout.setSpacing(16)

        self.search_edit = QtWidgets.QLineEdit()
        self.search_edit.setObjectName("surahSearch")
        self.search_edit.setPlaceholderText("Search surah by name or number...")
        self.search_edit.setClearButtonEnabled(True)
        self.search_edit.textChanged.connect(self._apply_filter)  # type: ignore
        card_layout.addWidget(self.search_edit)

        self.surah_list = QtWidgets.QListWidget()
        self.surah_list.setObjectName("quranList")
        self.surah_list.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.surah_list.setUniformItemSizes(False)
        self.surah_list.setWordWrap(True)
        self.surah_list.itemActivated.connect(self._on_item_activated)  # type: ignore
        self.surah_list.itemClicked.connect(self._on_item_activated)  # type: ignore
        card_layout.addWidget(self.surah_list, stretch=1)

        self.status_label = QtWidgets.QLabel("Loading surahs...")
        self.status_label.setObjectName("quranStatusLabel")
        self.status_label.setWordWrap(True)
        card_layout.addWidget(self.status_label)

        layout.addWidget(content_card, stretch=1)

    # ------------------------------------------------------------------
    @property
    def surahs(self) -> List[SurahSummary]:
        return list(self._surahs)

    def find_surah(self, number: int) -> Optional[SurahSummary]:
        for surah in self._surahs:
            if surah.number == number:
                return surah
        return None

    def show_loading(self) -> None:
        self.status_label.setText("Loading surahs...")

    def show_error(self, message: str) -> None:
        self.status_label.setText(message)

    def set_surahs(self, surahs: Sequence[SurahSummary]) -> None:
        self._surahs = list(surahs)
        self._apply_filter(self.search_edit.text())

    def visible_numbers(self) -> List[int]:
        numbers: List[int] = []
        for idx in range(self.surah_list.count()):
            surah: SurahSummary = self.surah_list.item(idx).data(QtCore.Qt.UserRole)
            numbers.append(surah.number)
        return numbers

    # ------------------------------------------------------------------
    def _apply_filter(self, query: str) -> None:
        matches = filter_surahs(self._surahs, query)
        self.surah_list.clear()
        for surah in matches:
            item = QtWidgets.QListWidgetItem(
                f"{surah.number:03d} · {surah.english_name} ({surah.translation_name})\n"
                f"{surah.name} · {surah.verse_count} ayahs · {surah.revelation_place}"
            )
            item.setData(QtCore.Qt.UserRole, surah)
            item.setTextAlignment(QtCore.Qt.AlignLeft | QtCore.Qt.AlignVCenter)
            item.setSizeHint(QtCore.QSize(0, 56))
            self.surah_list.addItem(item)

        if not self._surahs:
            return
        if matches:
            self.status_label.setText(f"{len(matches)} of {len(self._surahs)} surahs")
        else:
            self.status_label.setText(f"No surahs found matching \"{query.strip()}\"")

    def _on_item_activated(self, item: Optional[QtWidgets.QListWidgetItem]) -> None:
        if item is None:
            return
        surah: SurahSummary = item.data(QtCore.Qt.UserRole)
        self.surah_selected.emit(surah.number)


__all__ = ["SurahListPage"]
