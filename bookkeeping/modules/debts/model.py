from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...utils.helpers import fmt_date, fmt_money
from ..reporting.aggregation import debt_product_id, to_float
from ..reporting.date_filter import coerce_datetime


class DebtsTableModel(QAbstractTableModel):
    """Open (or, on request, all) debts, largest balance first."""

    HEADERS: List[str] = ["Client", "Product", "Outstanding", "Last Paid", "Opened", "Updated"]

    def __init__(self, rows: Sequence[Mapping[str, Any]], products: Mapping[Any, Mapping[str, Any]]):
        super().__init__()
        self._rows = list(rows)
        self._products = products

    def debt_at(self, row: int) -> Optional[Mapping[str, Any]]:
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return len(self.HEADERS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if not index.isValid():
            return None
        debt = self._rows[index.row()]
        col = index.column()
        if role == Qt.TextAlignmentRole and col in (2, 3):
            return int(Qt.AlignRight | Qt.AlignVCenter)
        if role not in (Qt.DisplayRole, Qt.EditRole):
            return None
        if col == 0:
            return debt.get("client") or "-"
        if col == 1:
            product = self._products.get(debt_product_id(debt))
            return product.get("name") if product else "(unknown)"
        if col == 2:
            return fmt_money(to_float(debt.get("amount")), 0)
        if col == 3:
            return fmt_money(to_float(debt.get("lastPaidAmount")), 0)
        if col == 4:
            return fmt_date(coerce_datetime(debt.get("createdAt")))
        if col == 5:
            return fmt_date(coerce_datetime(debt.get("updatedAt")))
        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)
