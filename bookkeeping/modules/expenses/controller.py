"""
Controller for the expenses module.

Wires ExpensesRepo <-> DataCache <-> ExpensesView and connects Add/Edit/Delete
to ExpenseForm. A category typed in the form that does not exist yet is
added to the `categories` collection and linked through categoryId.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from PySide6.QtCore import Slot
from PySide6.QtWidgets import QDialog, QMessageBox, QWidget

from ...database.data_cache import DataCache
from ...database.repositories import (
    ExpenseInput,
    ExpensesDomainError,
    ExpensesRepo,
    ReferenceDomainError,
    ReferenceRepo,
)
from ...utils import ui_helpers as ui
from ..base_module import BaseModule
from ..reporting.aggregation import expense_category_name, expenses_by_category, product_index, sum_field
from ..reporting.date_filter import coerce_datetime
from .form import ExpenseForm
from .model import ExpensesTableModel
from .view import ExpensesView

_log = logging.getLogger(__name__)

WATCHED = frozenset({"expenses", "categories"})


class ExpenseController(BaseModule):
    """UI controller for viewing and managing expenses."""

    def __init__(self, cache: DataCache) -> None:
        super().__init__()
        self.cache = cache
        self.repo = ExpensesRepo(cache.store)
        self.reference = ReferenceRepo(cache.store)

        self.view = ExpensesView()
        self.model = ExpensesTableModel((), {})
        self.view.tbl_expenses.setModel(self.model)

        self.view.txt_search.textChanged.connect(lambda _=None: self._reload())
        self.view.btn_add.clicked.connect(self._on_add)
        self.view.btn_edit.clicked.connect(self._on_edit)
        self.view.btn_delete.clicked.connect(self._on_delete)
        self.view.tbl_expenses.doubleClicked.connect(lambda _=None: self._on_edit())

        self.cache.collection_changed.connect(self._on_collection_changed)
        self.cache.status_changed.connect(self._push_status)
        self._reload()

    def get_widget(self) -> QWidget:
        return self.view

    def shutdown(self) -> None:
        try:
            self.cache.collection_changed.disconnect(self._on_collection_changed)
            self.cache.status_changed.disconnect(self._push_status)
        except (RuntimeError, TypeError):
            pass

    # ------------------------------------------------------------------
    # Data loading
    # ------------------------------------------------------------------
    @Slot(str)
    def _on_collection_changed(self, name: str) -> None:
        if name in WATCHED:
            self._reload()

    def _reload(self) -> None:
        """Reload the table from the cache, honouring the search box, and refresh totals."""
        categories = product_index(self.cache.snapshot("categories"))
        query = self.view.search_text.casefold()
        rows = [
            e for e in self.cache.snapshot("expenses")
            if not query or any(
                query in str(v).casefold()
                for v in (expense_category_name(e, categories), e.get("description"), e.get("payee"))
                if v
            )
        ]
        rows.sort(key=lambda e: coerce_datetime(e.get("createdAt")) or datetime.min, reverse=True)

        self.model = ExpensesTableModel(rows, categories)
        self.view.tbl_expenses.setModel(self.model)
        self.view.tbl_expenses.resizeColumnsToContents()
        self.view.set_totals(expenses_by_category(rows, self.cache.snapshot("categories")), sum_field(rows, "amount"))
        self._push_status()

    @Slot()
    def _push_status(self) -> None:
        if self.cache.error:
            self.view.set_status(self.cache.error, is_error=True)
        elif self.cache.loading:
            self.view.set_status("Loading data...")
        else:
            self.view.set_status(None)

    def category_names(self) -> List[str]:
        names = {str(c.get("name")) for c in self.cache.snapshot("categories") if c.get("name")}
        return sorted(names, key=str.casefold)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def add_expense(self, payload: dict) -> Optional[str]:
        user = self._user()
        if user is None:
            return None
        try:
            expense_id = self.repo.create(user, self._input(user, payload))
        except (ExpensesDomainError, ReferenceDomainError) as e:
            self._handle_error("Failed to add expense", e)
            return None
        ui.toast(self.view, "Expense added successfully.", "success")
        return expense_id

    def edit_expense(self, expense_id: str, payload: dict) -> bool:
        user = self._user()
        if user is None:
            return False
        try:
            self.repo.update(user, expense_id, self._input(user, payload))
        except (ExpensesDomainError, ReferenceDomainError) as e:
            self._handle_error("Failed to update expense", e)
            return False
        ui.toast(self.view, "Expense updated successfully.", "success")
        return True

    def delete_expense(self, expense_id: str) -> bool:
        user = self._user()
        if user is None:
            return False
        self.repo.delete(user, expense_id)
        ui.toast(self.view, "Expense deleted.", "success")
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _input(self, user: str, payload: dict) -> ExpenseInput:
        category = str(payload.get("category") or "").strip()
        category_id = None
        if category:
            existing = self.reference.find_by_name(user, "categories", category)
            category_id = existing["id"] if existing else self.reference.create(user, "categories", category)
        return ExpenseInput(
            category=category,
            amount=payload.get("amount"),
            description=payload.get("description") or "",
            payee=payload.get("payee") or "",
            category_id=category_id,
            created_at=payload.get("created_at"),
        )

    def _user(self) -> Optional[str]:
        if self.cache.user_id is None:
            ui.info(self.view, "Sign in", "Please log in to record expenses.")
        return self.cache.user_id

    def _handle_error(self, context: str, err: Exception) -> None:
        _log.warning("Expenses.write_refused context=%s reason=%s", context, err)
        ui.error(self.view, "Invalid data", str(err))

    def _selected_expense(self) -> Optional[dict]:
        row = self.view.selected_row()
        expense = self.model.expense_at(row) if row is not None else None
        if expense is None:
            ui.info(self.view, "Select", "Please select an expense first.")
            return None
        return dict(expense)

    # ------------------------------------------------------------------
    # Button handlers
    # ------------------------------------------------------------------
    def _on_add(self) -> None:
        dlg = ExpenseForm(self.view, categories=self.category_names())
        if dlg.exec() == QDialog.Accepted:
            self.add_expense(dlg.payload())

    def _on_edit(self) -> None:
        expense = self._selected_expense()
        if expense is None:
            return
        dlg = ExpenseForm(self.view, categories=self.category_names(), initial=expense)
        if dlg.exec() == QDialog.Accepted:
            self.edit_expense(expense["id"], dlg.payload())

    def _on_delete(self) -> None:
        expense = self._selected_expense()
        if expense is None:
            return
        resp = QMessageBox.question(
            self.view,
            "Delete",
            "Are you sure you want to delete this expense?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if resp == QMessageBox.StandardButton.Yes:
            self.delete_expense(expense["id"])
