import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:
    from PyQt5 import QtWidgets
except Exception:  # pragma: no cover - fallback path
    try:
        from PySide2 import QtWidgets
    except Exception:  # pragma: no cover - fallback path
        from PySide6 import QtWidgets

import pytest


@pytest.fixture(scope="session")
def qt_app():
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app
