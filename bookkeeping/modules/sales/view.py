from __future__ import annotations

from typing import Optional, Sequence

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QTableView,
    QVBoxLayout,
    QWidget,
)

from ...constants import CURRENCY
from ...utils.helpers import fmt_amount
from ..reporting.aggregation import CategorySalesSummary


class SalesView(QWidget):
    """
    Sales list with a per-product summary strip.

    Buttons: btn_add, btn_edit, btn_paid, btn_delete, btn_supply, btn_product.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(8)

        top = QHBoxLayout()
        title = QLabel("<h2>Sales</h2>")
        title.setTextFormat(Qt.RichText)
        top.addWidget(title)
        top.addStretch(1)
        self.btn_add = QPushButton("Add Sale")
        self.btn_edit = QPushButton("Edit")
        self.btn_paid = QPushButton("Mark Fully Paid")
        self.btn_delete = QPushButton("Delete")
        self.btn_supply = QPushButton("Record Supply")
        self.btn_product = QPushButton("Add Product")
        for b in (self.btn_add, self.btn_edit, self.btn_paid, self.btn_delete, self.btn_supply, self.btn_product):
            top.addWidget(b)
        root.addLayout(top)

        self.lbl_status = QLabel("")
        self.lbl_status.setWordWrap(True)
        self.lbl_status.setVisible(False)
        root.addWidget(self.lbl_status)

        self.lbl_summary = QLabel("")
        self.lbl_summary.setTextFormat(Qt.RichText)
        self.lbl_summary.setStyleSheet("color: #475569;")
        root.addWidget(self.lbl_summary)

        self.tbl_sales = QTableView()
        self.tbl_sales.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.tbl_sales.setSelectionMode(QAbstractItemView.SingleSelection)
        self.tbl_sales.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.tbl_sales.verticalHeader().setVisible(False)
        self.tbl_sales.horizontalHeader().setStretchLastSection(True)
        root.addWidget(self.tbl_sales, 1)

    def selected_row(self) -> Optional[int]:
        sm = self.tbl_sales.selectionModel()
        if sm is None:
            return None
        rows = sm.selectedRows()
        return rows[0].row() if rows else None

    def set_summary(self, rows: Sequence[CategorySalesSummary]) -> None:
        parts = [
            f"<b>{r.product_name}</b>: {r.count} sale(s), {fmt_amount(r.total_amount)} {CURRENCY}"
            f" ({fmt_amount(r.total_debt)} owed)"
            for r in rows
        ]
        self.lbl_summary.setText(" &nbsp;|&nbsp; ".join(parts))

    def set_status(self, text: Optional[str], is_error: bool = False) -> None:
        self.lbl_status.setText(text or "")
        self.lbl_status.setStyleSheet("color: #dc2626;" if is_error else "color: #475569;")
        self.lbl_status.setVisible(bool(text))
