"""
Table model for the sales list.

Rows are the frozen sale records served by DataCache, newest first. Product
names are resolved through the products snapshot; a sale whose product no
longer exists shows "(unknown)".
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...utils.helpers import fmt_date, fmt_money
from ..reporting.aggregation import (
    get_path,
    normalize_supply_type,
    outstanding,
    payment_status,
    sale_product_id,
    to_float,
    to_int,
)
from ..reporting.date_filter import coerce_datetime


class SalesTableModel(QAbstractTableModel):
    """Table model for listing sales."""

    HEADERS: List[str] = ["Date", "Client", "Product", "Type", "Qty", "Total", "Paid", "Balance", "Status"]
    NUMERIC_COLUMNS = frozenset({4, 5, 6, 7})

    def __init__(self, rows: Sequence[Mapping[str, Any]], products: Mapping[Any, Mapping[str, Any]]):
        super().__init__()
        self._rows = list(rows)
        self._products = products

    def sale_at(self, row: int) -> Optional[Mapping[str, Any]]:
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None

    # Required overrides ---------------------------------------------------

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return len(self.HEADERS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if not index.isValid():
            return None
        sale = self._rows[index.row()]
        col = index.column()
        if role == Qt.TextAlignmentRole and col in self.NUMERIC_COLUMNS:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        if role == Qt.UserRole:
            return sale.get("id")
        if role not in (Qt.DisplayRole, Qt.EditRole):
            return None

        total = to_float(sale.get("totalAmount"))
        paid = to_float(sale.get("amountPaid"))
        if col == 0:
            return fmt_date(coerce_datetime(sale.get("date")))
        if col == 1:
            return sale.get("client") or "-"
        if col == 2:
            product = self._products.get(sale_product_id(sale))
            return product.get("name") if product else "(unknown)"
        if col == 3:
            return normalize_supply_type(get_path(sale, "product.supplyType")) or "-"
        if col == 4:
            return str(to_int(get_path(sale, "product.quantity")))
        if col == 5:
            return fmt_money(total, 0)
        if col == 6:
            return fmt_money(paid, 0)
        if col == 7:
            return fmt_money(outstanding(sale), 0)
        if col == 8:
            return payment_status(paid, total).capitalize()
        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)
