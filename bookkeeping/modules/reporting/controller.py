# bookkeeping/modules/reporting/controller.py
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Slot
from PySide6.QtWidgets import QFileDialog, QWidget

from ...config import REPORTS_PATH
from ...database.data_cache import DataCache
from ...utils import ui_helpers as uih
from ..base_module import BaseModule
from .date_filter import DateFilter
from .service import GeneratedReport, ReportService
from .view import ReportsView

_log = logging.getLogger(__name__)


class ReportingController(BaseModule):
    """
    Wires ReportsView buttons to ReportService and saves the produced PDF.

    `ask_path` can be swapped out (tests, headless runs); it receives the
    suggested file name and returns a target path or None to cancel.
    """

    def __init__(
        self,
        cache: DataCache,
        service: ReportService,
        reports_dir: Optional[Path] = None,
        ask_path=None,
    ) -> None:
        super().__init__()
        self.cache = cache
        self.service = service
        self.reports_dir = Path(reports_dir or REPORTS_PATH)
        self.view = ReportsView()
        self._ask_path = ask_path or self._ask_path_dialog
        self.last_saved: Optional[Path] = None

        if self.service.notifier is None:
            self.service.notifier = self._notify

        self.view.generate_requested.connect(self._on_generate)
        self.cache.status_changed.connect(self._on_status_changed)
        self._on_status_changed()

    def get_widget(self) -> QWidget:
        return self.view

    def shutdown(self) -> None:
        try:
            self.cache.status_changed.disconnect(self._on_status_changed)
        except (RuntimeError, TypeError):
            pass

    # ---------------- Slots ----------------
    @Slot()
    def _on_status_changed(self) -> None:
        if self.cache.error:
            self.view.set_status(self.cache.error, is_error=True)
        elif self.cache.loading:
            self.view.set_status("Loading data...")
        else:
            self.view.set_status(None)

    @Slot(str, str, str, str)
    def _on_generate(self, kind: str, period: str, start: str, end: str) -> None:
        if period == "range":
            f = DateFilter(type=period, start_date=start, end_date=end)
        else:
            f = DateFilter(type=period)
        self.generate(kind, f)

    # ---------------- Actions ----------------
    def generate(self, kind: str, date_filter: DateFilter, now: Optional[datetime] = None) -> Optional[Path]:
        if self.service.is_generating:
            return None
        self.view.set_busy(True)
        try:
            report = self.service.generate(kind, date_filter, now)
        finally:
            self.view.set_busy(False)
        if report is None:
            return None
        return self._save(report)

    def _save(self, report: GeneratedReport) -> Optional[Path]:
        target = self._ask_path(report.filename)
        if not target:
            _log.info("Reporting.save_cancelled kind=%s", report.kind)
            return None
        target = Path(target)
        try:
            path = report.save(target.parent, target.name)
        except OSError as exc:
            _log.exception("Reporting.save_failed path=%s", target)
            self._notify("error", f"Could not save report: {exc}")
            return None
        _log.info("Reporting.saved kind=%s path=%s", report.kind, path)
        self.last_saved = path
        return path

    def _ask_path_dialog(self, filename: str) -> Optional[str]:
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        path, _ = QFileDialog.getSaveFileName(
            self.view, "Save Report", str(self.reports_dir / filename), "PDF Files (*.pdf)"
        )
        return path or None

    def _notify(self, level: str, message: str) -> None:
        uih.toast(self.view, message, level)
