# bookkeeping/modules/dashboard/controller.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from PySide6.QtCore import Signal, Slot
from PySide6.QtWidgets import QWidget

from ...database.data_cache import DataCache
from ..base_module import BaseModule
from .model import DashboardModel
from .view import DashboardView

_log = logging.getLogger(__name__)

# Collections whose changes move the quick stats
WATCHED = frozenset({"sales", "debts", "expenses"})


class DashboardController(BaseModule):
    """
    Coordinates DataCache -> model -> view for today's figures.

    Signals you can hook in your MainWindow:
      - open_reports(): ask the app to switch to the Reports page
    """

    open_reports = Signal()

    def __init__(self, cache: DataCache, current_user: Optional[str] = None) -> None:
        super().__init__()
        self.cache = cache
        self.user = current_user
        self.model = DashboardModel(cache)
        self.view = DashboardView()

        self.view.refresh_requested.connect(self.refresh)
        self.view.open_reports_requested.connect(self.open_reports)
        self.cache.collection_changed.connect(self._on_collection_changed)
        self.cache.status_changed.connect(self._on_status_changed)

        self.refresh()

    def get_widget(self) -> QWidget:
        """Return the main QWidget to embed in your window (required by BaseModule)."""
        return self.view

    def shutdown(self) -> None:
        try:
            self.cache.collection_changed.disconnect(self._on_collection_changed)
            self.cache.status_changed.disconnect(self._on_status_changed)
        except (RuntimeError, TypeError):
            pass

    @Slot(str)
    def _on_collection_changed(self, name: str) -> None:
        if name in WATCHED:
            self.refresh()

    @Slot()
    def _on_status_changed(self) -> None:
        self._push_status()

    @Slot()
    def refresh(self, now: Optional[datetime] = None) -> None:
        stats = self.model.refresh(now)
        self.view.set_kpi_value("total_sales", stats.total_sales, f"{stats.sales_count} sale(s) today")
        self.view.set_kpi_value("total_paid", stats.total_paid)
        self.view.set_kpi_value("total_debts", stats.total_debts, f"{stats.debts_count} debt(s) opened today")
        self.view.set_kpi_value("total_expenses", stats.total_expenses, f"{stats.expenses_count} expense(s) today")
        self.view.set_kpi_value("balance", stats.balance)
        self.view.set_expense_breakdown(stats.expenses_by_category)
        _log.debug(
            "Dashboard.refreshed sales=%s expenses=%s balance=%s",
            stats.total_sales, stats.total_expenses, stats.balance,
        )
        self._push_status()

    def _push_status(self) -> None:
        if self.model.error:
            self.view.set_status(self.model.error, is_error=True)
        elif self.model.loading:
            self.view.set_status("Loading data...")
        else:
            self.view.set_status(None)
