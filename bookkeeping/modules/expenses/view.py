from __future__ import annotations

from typing import Optional, Sequence, Tuple

from PySide6.QtCore import Qt
from PySide6.QtGui import QStandardItem, QStandardItemModel
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSplitter,
    QTableView,
    QVBoxLayout,
    QWidget,
)

from ...constants import CURRENCY
from ...utils.helpers import fmt_amount


class ExpensesView(QWidget):
    """
    Expenses list with totals by category on the right.

    Exposes `search_text` for the controller's filtering.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(8)

        top = QHBoxLayout()
        title = QLabel("<h2>Expenses</h2>")
        title.setTextFormat(Qt.RichText)
        top.addWidget(title)
        top.addStretch(1)
        self.txt_search = QLineEdit()
        self.txt_search.setPlaceholderText("Search expenses...")
        self.txt_search.setClearButtonEnabled(True)
        self.btn_add = QPushButton("Add Expense")
        self.btn_edit = QPushButton("Edit")
        self.btn_delete = QPushButton("Delete")
        for w in (self.txt_search, self.btn_add, self.btn_edit, self.btn_delete):
            top.addWidget(w)
        root.addLayout(top)

        self.lbl_status = QLabel("")
        self.lbl_status.setWordWrap(True)
        self.lbl_status.setVisible(False)
        root.addWidget(self.lbl_status)

        self.lbl_total = QLabel("")
        f = self.lbl_total.font()
        f.setBold(True)
        self.lbl_total.setFont(f)
        root.addWidget(self.lbl_total)

        self.tbl_expenses = QTableView()
        self.tbl_expenses.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.tbl_expenses.setSelectionMode(QAbstractItemView.SingleSelection)
        self.tbl_expenses.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.tbl_expenses.verticalHeader().setVisible(False)
        self.tbl_expenses.horizontalHeader().setStretchLastSection(True)

        self.tbl_totals = QTableView()
        self.model_totals = QStandardItemModel(0, 2)
        self.model_totals.setHorizontalHeaderLabels(["Category", f"Total ({CURRENCY})"])
        self.tbl_totals.setModel(self.model_totals)
        self.tbl_totals.verticalHeader().setVisible(False)
        self.tbl_totals.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.tbl_totals.horizontalHeader().setStretchLastSection(True)

        split = QSplitter(Qt.Horizontal)
        split.addWidget(self.tbl_expenses)
        split.addWidget(self.tbl_totals)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 1)
        root.addWidget(split, 1)

    @property
    def search_text(self) -> str:
        return self.txt_search.text().strip()

    def set_totals(self, rows: Sequence[Tuple[str, float]], total: float) -> None:
        self.model_totals.removeRows(0, self.model_totals.rowCount())
        for name, amount in rows:
            cell = QStandardItem(fmt_amount(amount))
            cell.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
            self.model_totals.appendRow([QStandardItem(name), cell])
        self.lbl_total.setText(f"Total: {fmt_amount(total)} {CURRENCY}")

    def selected_row(self) -> Optional[int]:
        sm = self.tbl_expenses.selectionModel()
        if sm is None:
            return None
        rows = sm.selectedRows()
        return rows[0].row() if rows else None

    def set_status(self, text: Optional[str], is_error: bool = False) -> None:
        self.lbl_status.setText(text or "")
        self.lbl_status.setStyleSheet("color: #dc2626;" if is_error else "color: #475569;")
        self.lbl_status.setVisible(bool(text))
