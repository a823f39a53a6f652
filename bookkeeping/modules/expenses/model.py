"""
Table model for the expenses list. Category names are resolved through the
categories snapshot (categoryId wins over the stored name).
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...utils.helpers import fmt_date, fmt_money
from ..reporting.aggregation import expense_category_name, to_float
from ..reporting.date_filter import coerce_datetime


class ExpensesTableModel(QAbstractTableModel):
    HEADERS: List[str] = ["Date", "Category", "Amount", "Description", "Payee"]

    def __init__(self, rows: Sequence[Mapping[str, Any]], categories: Mapping[Any, Mapping[str, Any]]):
        super().__init__()
        self._rows = list(rows)
        self._categories = categories

    def expense_at(self, row: int) -> Optional[Mapping[str, Any]]:
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
        expense = self._rows[index.row()]
        col = index.column()
        if role == Qt.TextAlignmentRole and col == 2:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        if role not in (Qt.DisplayRole, Qt.EditRole):
            return None
        if col == 0:
            return fmt_date(coerce_datetime(expense.get("createdAt")))
        if col == 1:
            return expense_category_name(expense, self._categories)
        if col == 2:
            return fmt_money(to_float(expense.get("amount")), 0)
        if col == 3:
            return expense.get("description") or ""
        if col == 4:
            return expense.get("payee") or ""
        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)
