"""
Controller for the sales module.

Wires SalesRepo / SuppliesRepo / ReferenceRepo <-> DataCache <-> SalesView.
Reads come from the cache snapshots; every write goes through a repository
and comes back as a `collection_changed` reload.

The public actions (add_sale, edit_sale, mark_fully_paid, delete_sale,
record_supply, add_product) return a falsy value when the write was refused;
the reason has already been shown to the user.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from PySide6.QtCore import Slot
from PySide6.QtWidgets import QDialog, QMessageBox, QWidget

from ...constants import DEFAULT_PRODUCT_CATEGORIES
from ...database.data_cache import DataCache
from ...database.document_store import DocumentNotFound
from ...database.repositories import (
    ReferenceDomainError,
    ReferenceRepo,
    SaleInput,
    SalesDomainError,
    SalesRepo,
    SuppliesDomainError,
    SuppliesRepo,
    SupplyInput,
)
from ...utils import ui_helpers as ui
from ..base_module import BaseModule
from ..reporting.aggregation import category_sales_summary, normalize_supply_type, product_index, to_float
from ..reporting.date_filter import coerce_datetime
from .form import ProductChoice, ProductForm, SaleForm, SupplyForm
from .model import SalesTableModel
from .view import SalesView

_log = logging.getLogger(__name__)

WATCHED = frozenset({"sales", "products", "clients"})
_DOMAIN_ERRORS = (SalesDomainError, SuppliesDomainError, ReferenceDomainError)


class SalesController(BaseModule):
    def __init__(self, cache: DataCache, product_names: Sequence[str] = DEFAULT_PRODUCT_CATEGORIES) -> None:
        super().__init__()
        self.cache = cache
        self.product_names = tuple(product_names)
        self.sales = SalesRepo(cache.store)
        self.supplies = SuppliesRepo(cache.store)
        self.reference = ReferenceRepo(cache.store)

        self.view = SalesView()
        self.model = SalesTableModel((), {})
        self.view.tbl_sales.setModel(self.model)

        self.view.btn_add.clicked.connect(self._on_add)
        self.view.btn_edit.clicked.connect(self._on_edit)
        self.view.btn_paid.clicked.connect(self._on_mark_paid)
        self.view.btn_delete.clicked.connect(self._on_delete)
        self.view.btn_supply.clicked.connect(self._on_supply)
        self.view.btn_product.clicked.connect(self._on_product)
        self.view.tbl_sales.doubleClicked.connect(lambda _=None: self._on_edit())

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
        products = product_index(self.cache.snapshot("products"))
        rows = sorted(
            self.cache.snapshot("sales"),
            key=lambda s: coerce_datetime(s.get("date")) or datetime.min,
            reverse=True,
        )
        self.model = SalesTableModel(rows, products)
        self.view.tbl_sales.setModel(self.model)
        self.view.tbl_sales.resizeColumnsToContents()
        self.view.set_summary(category_sales_summary(rows, products, self.product_names))
        self._push_status()

    @Slot()
    def _push_status(self) -> None:
        if self.cache.error:
            self.view.set_status(self.cache.error, is_error=True)
        elif self.cache.loading:
            self.view.set_status("Loading data...")
        else:
            self.view.set_status(None)

    def product_choices(self) -> List[ProductChoice]:
        products = sorted(self.cache.snapshot("products"), key=lambda p: str(p.get("name") or "").casefold())
        return [(p["id"], str(p.get("name") or p["id"]), to_float(p.get("price"))) for p in products]

    def client_names(self) -> List[str]:
        names = {str(c.get("name")) for c in self.cache.snapshot("clients") if c.get("name")}
        names.update(str(s.get("client")) for s in self.cache.snapshot("sales") if s.get("client"))
        return sorted(names, key=str.casefold)

    def supply_types(self) -> List[str]:
        types = {normalize_supply_type(s.get("supplyType")) for s in self.cache.snapshot("supplies")}
        return sorted(t for t in types if t)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def add_sale(self, data: SaleInput) -> Optional[str]:
        user = self._user()
        if user is None:
            return None
        try:
            sale_id = self.sales.create_sale(user, data)
            self._remember_client(user, data.client)
        except _DOMAIN_ERRORS as e:
            self._handle_error("Failed to add sale", e)
            return None
        ui.toast(self.view, "Sale added successfully.", "success")
        return sale_id

    def edit_sale(self, sale_id: str, data: SaleInput) -> bool:
        user = self._user()
        if user is None:
            return False
        try:
            self.sales.update_sale(user, sale_id, data)
            self._remember_client(user, data.client)
        except _DOMAIN_ERRORS + (DocumentNotFound,) as e:
            self._handle_error("Failed to update sale", e)
            return False
        ui.toast(self.view, "Sale updated successfully.", "success")
        return True

    def mark_fully_paid(self, sale_id: str) -> bool:
        user = self._user()
        if user is None:
            return False
        try:
            self.sales.mark_fully_paid(user, sale_id)
        except (SalesDomainError, DocumentNotFound) as e:
            self._handle_error("Failed to update sale", e)
            return False
        ui.toast(self.view, "Sale marked as fully paid.", "success")
        return True

    def delete_sale(self, sale_id: str) -> bool:
        user = self._user()
        if user is None:
            return False
        removed = self.sales.delete_sale(user, sale_id)
        ui.toast(self.view, f"Sale deleted ({removed} debt(s) removed).", "success")
        return True

    def record_supply(self, data: SupplyInput) -> Optional[str]:
        user = self._user()
        if user is None:
            return None
        try:
            supply_id = self.supplies.create(user, data)
        except SuppliesDomainError as e:
            self._handle_error("Failed to record supply", e)
            return None
        ui.toast(self.view, "Supply recorded.", "success")
        return supply_id

    def add_product(self, name: str, price: float = 0.0) -> Optional[str]:
        user = self._user()
        if user is None:
            return None
        try:
            return self.reference.create(user, "products", name, price=price)
        except ReferenceDomainError as e:
            self._handle_error("Failed to add product", e)
            return None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _user(self) -> Optional[str]:
        if self.cache.user_id is None:
            ui.info(self.view, "Sign in", "Please log in to record sales.")
        return self.cache.user_id

    def _remember_client(self, user: str, name: str) -> None:
        name = name.strip()
        if name and self.reference.find_by_name(user, "clients", name) is None:
            self.reference.create(user, "clients", name)

    def _selected_sale(self) -> Optional[dict]:
        row = self.view.selected_row()
        sale = self.model.sale_at(row) if row is not None else None
        if sale is None:
            ui.info(self.view, "Select", "Please select a sale first.")
            return None
        return dict(sale)

    def _handle_error(self, context: str, err: Exception) -> None:
        if isinstance(err, _DOMAIN_ERRORS):
            title, msg = "Invalid data", str(err)
        elif isinstance(err, DocumentNotFound):
            title, msg = "Not found", "The selected sale no longer exists."
        else:
            title, msg = "Error", f"{context}: {err}"
        _log.warning("Sales.write_refused context=%s reason=%s", context, msg)
        ui.error(self.view, title, msg)

    # ------------------------------------------------------------------
    # Button handlers
    # ------------------------------------------------------------------
    def _on_add(self) -> None:
        dlg = SaleForm(self.view, products=self.product_choices(), clients=self.client_names())
        if dlg.exec() == QDialog.Accepted:
            self.add_sale(dlg.payload())

    def _on_edit(self) -> None:
        sale = self._selected_sale()
        if sale is None:
            return
        dlg = SaleForm(self.view, products=self.product_choices(), clients=self.client_names(), initial=sale)
        if dlg.exec() == QDialog.Accepted:
            self.edit_sale(sale["id"], dlg.payload())

    def _on_mark_paid(self) -> None:
        sale = self._selected_sale()
        if sale is not None:
            self.mark_fully_paid(sale["id"])

    def _on_delete(self) -> None:
        sale = self._selected_sale()
        if sale is None:
            return
        resp = QMessageBox.question(
            self.view,
            "Delete",
            f"Delete the sale to {sale.get('client') or '-'}? Its debt is removed too.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if resp == QMessageBox.StandardButton.Yes:
            self.delete_sale(sale["id"])

    def _on_supply(self) -> None:
        dlg = SupplyForm(self.view, products=self.product_choices(), supply_types=self.supply_types())
        if dlg.exec() == QDialog.Accepted:
            self.record_supply(dlg.payload())

    def _on_product(self) -> None:
        dlg = ProductForm(self.view)
        if dlg.exec() == QDialog.Accepted:
            p = dlg.payload()
            self.add_product(p["name"], p["price"])
