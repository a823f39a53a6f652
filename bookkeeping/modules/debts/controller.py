from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from PySide6.QtCore import Slot
from PySide6.QtWidgets import QDialog, QWidget

from ...constants import DEFAULT_PRODUCT_CATEGORIES
from ...database.data_cache import DataCache
from ...database.repositories import DebtsDomainError, DebtsRepo, ReferenceDomainError, ReferenceRepo
from ...utils import ui_helpers as ui
from ..base_module import BaseModule
from ..reporting.aggregation import debt_summary_metrics, product_index, to_float
from .form import DepositForm, PaymentForm
from .model import DebtsTableModel
from .view import DebtsView

_log = logging.getLogger(__name__)

WATCHED = frozenset({"debts", "products"})


class DebtsController(BaseModule):
    """
    Debt summary cards and payments against open debts.

    Debts are opened and cleared by the sales page; this page only records
    part payments (and bank deposits of the cash collected).
    """

    def __init__(self, cache: DataCache, product_names: Sequence[str] = DEFAULT_PRODUCT_CATEGORIES) -> None:
        super().__init__()
        self.cache = cache
        self.product_names = tuple(product_names)
        self.debts = DebtsRepo(cache.store)
        self.reference = ReferenceRepo(cache.store)

        self.view = DebtsView()
        self.model = DebtsTableModel((), {})
        self.view.tbl_debts.setModel(self.model)

        self.view.btn_pay.clicked.connect(self._on_pay)
        self.view.btn_deposit.clicked.connect(self._on_deposit)
        self.view.tbl_debts.doubleClicked.connect(lambda _=None: self._on_pay())
        self.view.chk_show_settled.toggled.connect(lambda _=None: self.refresh())

        self.cache.collection_changed.connect(self._on_collection_changed)
        self.cache.status_changed.connect(self._push_status)
        self.refresh()

    def get_widget(self) -> QWidget:
        return self.view

    def shutdown(self) -> None:
        try:
            self.cache.collection_changed.disconnect(self._on_collection_changed)
            self.cache.status_changed.disconnect(self._push_status)
        except (RuntimeError, TypeError):
            pass

    @Slot(str)
    def _on_collection_changed(self, name: str) -> None:
        if name in WATCHED:
            self.refresh()

    def refresh(self, now: Optional[datetime] = None) -> None:
        debts = self.cache.snapshot("debts")
        products = product_index(self.cache.snapshot("products"))
        self.view.set_metrics(debt_summary_metrics(debts, products, self.product_names, now))

        rows = debts if self.view.chk_show_settled.isChecked() else [d for d in debts if to_float(d.get("amount")) > 0]
        rows = sorted(rows, key=lambda d: to_float(d.get("amount")), reverse=True)
        self.model = DebtsTableModel(rows, products)
        self.view.tbl_debts.setModel(self.model)
        self.view.tbl_debts.resizeColumnsToContents()
        self._push_status()

    @Slot()
    def _push_status(self) -> None:
        if self.cache.error:
            self.view.set_status(self.cache.error, is_error=True)
        elif self.cache.loading:
            self.view.set_status("Loading data...")
        else:
            self.view.set_status(None)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def record_payment(self, debt_id: str, amount: float) -> Optional[float]:
        """Returns the balance left, or None when the payment was refused."""
        user = self._user()
        if user is None:
            return None
        try:
            remaining = self.debts.record_payment(user, debt_id, amount)
        except DebtsDomainError as e:
            _log.warning("Debts.payment_refused id=%s reason=%s", debt_id, e)
            ui.error(self.view, "Invalid payment", str(e))
            return None
        ui.toast(self.view, "Payment recorded." if remaining > 0 else "Debt fully paid.", "success")
        return remaining

    def record_deposit(self, bank: str, amount: float, **details) -> Optional[str]:
        user = self._user()
        if user is None:
            return None
        try:
            deposit_id = self.reference.add_deposit(user, bank, amount, **details)
        except ReferenceDomainError as e:
            ui.error(self.view, "Invalid data", str(e))
            return None
        ui.toast(self.view, "Deposit recorded.", "success")
        return deposit_id

    def _user(self) -> Optional[str]:
        if self.cache.user_id is None:
            ui.info(self.view, "Sign in", "Please log in to record payments.")
        return self.cache.user_id

    # ------------------------------------------------------------------
    # Button handlers
    # ------------------------------------------------------------------
    def _on_pay(self) -> None:
        row = self.view.selected_row()
        debt = self.model.debt_at(row) if row is not None else None
        if debt is None:
            ui.info(self.view, "Select", "Please select a debt first.")
            return
        balance = to_float(debt.get("amount"))
        if balance <= 0:
            ui.info(self.view, "Settled", "This debt is already fully paid.")
            return
        dlg = PaymentForm(self.view, client=str(debt.get("client") or ""), balance=balance)
        if dlg.exec() == QDialog.Accepted:
            self.record_payment(debt["id"], dlg.payload())

    def _on_deposit(self) -> None:
        dlg = DepositForm(self.view)
        if dlg.exec() == QDialog.Accepted:
            p = dict(dlg.payload())
            self.record_deposit(p.pop("bank"), p.pop("amount"), **p)
