"""Saved bookmarks page."""
from __future__ import annotations

from typing import Callable, List, Optional, Sequence

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

from bookmarks import Bookmark, filter_bookmarks


def _confirm_delete(parent: QtWidgets.QWidget, bookmark: Bookmark) -> bool:  # pragma: no cover - modal UI
    answer = QtWidgets.QMessageBox.question(
        parent,
        "Delete Bookmark",
        f"Are you sure you want to delete the bookmark for {bookmark.surah_name or bookmark.surah_number},"
        f" Ayah {bookmark.verse_number}? This action cannot be undone.",
        QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
        QtWidgets.QMessageBox.No,
    )
    return answer == QtWidgets.QMessageBox.Yes


class BookmarksPage(QtWidgets.QWidget):
    """List, search, open and delete saved bookmarks."""

    open_requested = Signal(object)
    delete_requested = Signal(str)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._bookmarks: List[Bookmark] = []
        self._confirm: Callable[[QtWidgets.QWidget, Bookmark], bool] = _confirm_delete

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(16)

        self.header_label = QtWidgets.QLabel("Bookmarks")
        header_font = QtGui.QFont(self.header_label.font())
        header_font.setPointSize(18)
        header_font.setBold(True)
        self.header_label.setFont(header_font)
        self.header_label.setObjectName("quranHeader")
        layout.addWidget(self.header_label)

        card = QtWidgets.QFrame()
        card.setObjectName("quranCard")
        card_layout = QtWidgets.QVBoxLayout(card)
        card_layout.setContentsMargins(20, 20, 20, 20)
        card_layout.setSpacing(16)

        self.search_edit = QtWidgets.QLineEdit()
        self.search_edit.setObjectName("bookmarkSearch")
        self.search_edit.setPlaceholderText("Search bookmarks...")
        self.search_edit.setClearButtonEnabled(True)
        self.search_edit.textChanged.connect(self._apply_filter)  # type: ignore
        card_layout.addWidget(self.search_edit)

        self.bookmark_list = QtWidgets.QListWidget()
        self.bookmark_list.setObjectName("bookmarkList")
        self.bookmark_list.setWordWrap(True)
        self.bookmark_list.itemActivated.connect(self._on_item_activated)  # type: ignore
        self.bookmark_list.currentItemChanged.connect(self._update_buttons)  # type: ignore
        card_layout.addWidget(self.bookmark_list, stretch=1)

        buttons_row = QtWidgets.QHBoxLayout()
        buttons_row.setSpacing(12)
        buttons_row.addStretch(1)

        self.open_button = QtWidgets.QPushButton("Open")
        self.open_button.setObjectName("quranSaveButton")
        self.open_button.clicked.connect(self._open_current)  # type: ignore
        buttons_row.addWidget(self.open_button)

        self.delete_button = QtWidgets.QPushButton("Delete")
        self.delete_button.setObjectName("quranClearButton")
        self.delete_button.clicked.connect(self._delete_current)  # type: ignore
        buttons_row.addWidget(self.delete_button)
        card_layout.addLayout(buttons_row)

        self.empty_label = QtWidgets.QLabel("No bookmarks yet.")
        self.empty_label.setObjectName("quranStatusLabel")
        self.empty_label.setWordWrap(True)
        card_layout.addWidget(self.empty_label)

        layout.addWidget(card, stretch=1)
        self._update_buttons()

    # ------------------------------------------------------------------
    def set_bookmarks(self, bookmarks: Sequence[Bookmark]) -> None:
        self._bookmarks = sorted(bookmarks, key=lambda item: item.created_at, reverse=True)
        self._apply_filter(self.search_edit.text())

    def set_confirmation(self, confirm: Callable[[QtWidgets.QWidget, Bookmark], bool]) -> None:
        self._confirm = confirm

    def visible_ids(self) -> List[str]:
        return [self.bookmark_list.item(idx).data(QtCore.Qt.UserRole).id for idx in range(self.bookmark_list.count())]

    # ------------------------------------------------------------------
    def _apply_filter(self, query: str) -> None:
        matches = filter_bookmarks(self._bookmarks, query)
        self.bookmark_list.clear()
        for bookmark in matches:
            created = bookmark.local_created_at().strftime("%Y-%m-%d %H:%M")
            lines = [f"{bookmark.title}", f"{bookmark.surah_name} · Ayah {bookmark.verse_number} · {created}"]
            if bookmark.notes:
                lines.append(bookmark.notes)
            item = QtWidgets.QListWidgetItem("\n".join(lines))
            item.setData(QtCore.Qt.UserRole, bookmark)
            self.bookmark_list.addItem(item)

        if not self._bookmarks:
            self.empty_label.setText("No bookmarks yet. Bookmark verses while reading to find them here.")
        elif not matches:
            self.empty_label.setText("No bookmarks match your search.")
        else:
            self.empty_label.setText("")
        self._update_buttons()

    def _current_bookmark(self) -> Optional[Bookmark]:
        item = self.bookmark_list.currentItem()
        if item is None:
            return None
        return item.data(QtCore.Qt.UserRole)

    def _update_buttons(self, *_: object) -> None:
        has_selection = self._current_bookmark() is not None
        self.open_button.setEnabled(has_selection)
        self.delete_button.setEnabled(has_selection)

    def _on_item_activated(self, item: QtWidgets.QListWidgetItem) -> None:
        self.open_requested.emit(item.data(QtCore.Qt.UserRole))

    def _open_current(self) -> None:
        bookmark = self._current_bookmark()
        if bookmark is not None:
            self.open_requested.emit(bookmark)

    def _delete_current(self) -> None:
        bookmark = self._current_bookmark()
        if bookmark is None:
            return
        if self._confirm(self, bookmark):
            self.delete_requested.emit(bookmark.id)


__all__ = ["BookmarksPage"]
