# bookkeeping/main.py
from __future__ import annotations

import logging
import sys
from importlib import import_module

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QSizePolicy,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from .config import CACHE_PATH, LOG_LEVEL, LOGO_PATH, current_user_id
from .constants import APP_NAME
from .database import get_connection
from .database.data_cache import DataCache
from .database.document_store import DocumentStore
from .database.local_cache import LocalSnapshotCache
from .modules.base_module import BaseModule
from .modules.reporting.service import ReportService
from .utils.loggers import get_logger
from .utils.ui_helpers import wrap_center

_log = logging.getLogger(__name__)


def _lazy_get(name: str, attr: str):
    """Import a module by name and fetch an attribute from it, with a clear error if missing."""
    try:
        mod = import_module(name)
    except Exception as e:
        raise ImportError(f"Failed to import module '{name}': {e}") from e
    try:
        return getattr(mod, attr)
    except AttributeError as e:
        raise ImportError(f"'{attr}' not found in module '{name}'.") from e


class MainWindow(QMainWindow):
    def __init__(self, cache: DataCache, service: ReportService, current_user=None):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.setWindowFlag(Qt.WindowMinimizeButtonHint, True)
        self.setWindowFlag(Qt.WindowMaximizeButtonHint, True)
        self.setMinimumSize(820, 520)

        self.cache = cache
        self.service = service
        self.user = current_user

        # ---- Central layout: left nav + stacked pages ----
        central = QWidget(self)
        layout = QVBoxLayout(central)
        self.setCentralWidget(central)

        self.nav = QListWidget()
        self.nav.setFixedWidth(110)
        self.nav.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Expanding)
        self.stack = QStackedWidget()

        row = QWidget()
        row_lay = QHBoxLayout(row)
        row_lay.addWidget(self.nav)
        row_lay.addWidget(self.stack, 1)
        layout.addWidget(row, 1)

        self.module_info: list[dict] = []
        self.modules: dict[int, BaseModule] = {}

        self.nav.currentRowChanged.connect(self._on_nav_item_changed)

        self._add_module_deferred(
            "Dashboard",
            "bookkeeping.modules.dashboard.controller",
            "DashboardController",
            self.cache,
            current_user=self.user,
        )
        self._add_module_deferred(
            "Sales",
            "bookkeeping.modules.sales.controller",
            "SalesController",
            self.cache,
        )
        self._add_module_deferred(
            "Debts",
            "bookkeeping.modules.debts.controller",
            "DebtsController",
            self.cache,
        )
        self._add_module_deferred(
            "Expenses",
            "bookkeeping.modules.expenses.controller",
            "ExpenseController",
            self.cache,
        )
        self._add_module_deferred(
            "Reports",
            "bookkeeping.modules.reporting.controller",
            "ReportingController",
            self.cache,
            self.service,
        )

        if self.nav.count():
            self.nav.setCurrentRow(0)

    # ---------- deferred module loading ----------
    def _add_module_deferred(self, title: str, module_path: str, class_name: str, *args, **kwargs):
        self.module_info.append({
            "title": title,
            "module_path": module_path,
            "class_name": class_name,
            "args": args,
            "kwargs": kwargs,
        })
        self.nav.addItem(QListWidgetItem(title))
        self.stack.addWidget(wrap_center(QLabel(f"Loading {title}...")))

    def _on_nav_item_changed(self, index: int):
        if 0 <= index < len(self.module_info):
            self._load_module_at_index(index)

    def _load_module_at_index(self, index: int):
        if index not in self.modules:
            self._load_module(index)
        self.stack.setCurrentIndex(index)

    def _load_module(self, index: int):
        info = self.module_info[index]
        QApplication.setOverrideCursor(Qt.WaitCursor)
        try:
            Controller = _lazy_get(info["module_path"], info["class_name"])
            controller = Controller(*info["args"], **info["kwargs"])
        except Exception:
            _log.exception("MainWindow.module_load_failed title=%s", info["title"])
            self._replace_widget(index, wrap_center(QLabel(f"{info['title']}\n\nLoading failed")))
            return
        finally:
            QApplication.restoreOverrideCursor()

        self.modules[index] = controller
        self._replace_widget(index, controller.get_widget())
        if hasattr(controller, "open_reports"):
            controller.open_reports.connect(lambda: self.open_module("Reports"))

    def _replace_widget(self, index: int, widget: QWidget):
        current = self.stack.widget(index)
        self.stack.removeWidget(current)
        current.deleteLater()
        self.stack.insertWidget(index, widget)

    def open_module(self, title: str) -> None:
        for i, info in enumerate(self.module_info):
            if info["title"] == title:
                self.nav.setCurrentRow(i)
                return

    def closeEvent(self, event):
        for controller in self.modules.values():
            try:
                controller.shutdown()
            except Exception:
                _log.exception("MainWindow.shutdown_failed controller=%s", type(controller).__name__)
        self.cache.stop()
        super().closeEvent(event)


def main():
    get_logger("bookkeeping", getattr(logging, LOG_LEVEL, logging.INFO))

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    conn = get_connection()
    store = DocumentStore(conn)
    cache = DataCache(store, LocalSnapshotCache(CACHE_PATH))
    service = ReportService(cache.snapshots, logo_path=LOGO_PATH)

    user_id = current_user_id()
    cache.start(user_id)
    _log.info("App.started user=%s", user_id)

    win = MainWindow(cache, service, current_user=user_id)
    win.resize(900, 560)
    win.show()
    code = app.exec()
    conn.close()
    sys.exit(code)


if __name__ == "__main__":
    main()
