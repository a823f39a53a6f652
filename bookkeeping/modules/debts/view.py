from __future__ import annotations

from typing import Dict, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QTableView,
    QVBoxLayout,
    QWidget,
)

from ...constants import CURRENCY
from ...utils.helpers import fmt_amount
from ..dashboard.view import KPICard
from ..reporting.aggregation import DebtSummaryMetrics, to_float


class DebtsView(QWidget):
    """
    Summary cards over the open-debts table.

    Setters the controller uses:
        set_metrics(metrics)
        set_status(text, is_error)
    """

    CARD_ORDER = ("owed", "active", "settled", "highest", "oldest")

    def __init__(self, parent=None):
        super().__init__(parent)
        self.cards: Dict[str, KPICard] = {}

        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(8)

        top = QHBoxLayout()
        title = QLabel("<h2>Debts</h2>")
        title.setTextFormat(Qt.RichText)
        top.addWidget(title)
        top.addStretch(1)
        self.chk_show_settled = QCheckBox("Show settled")
        self.btn_pay = QPushButton("Record Payment")
        self.btn_deposit = QPushButton("Record Bank Deposit")
        top.addWidget(self.chk_show_settled)
        top.addWidget(self.btn_pay)
        top.addWidget(self.btn_deposit)
        root.addLayout(top)

        self.lbl_status = QLabel("")
        self.lbl_status.setWordWrap(True)
        self.lbl_status.setVisible(False)
        root.addWidget(self.lbl_status)

        grid = QGridLayout()
        grid.setHorizontalSpacing(10)
        for i, (key, title_text, caption) in enumerate((
            ("owed", "Total Owed", "across active debts"),
            ("active", "Active Debts", "with a balance left"),
            ("settled", "Settled", "fully paid"),
            ("highest", "Highest Debt", "-"),
            ("oldest", "Oldest Debt", "-"),
        )):
            self.cards[key] = KPICard(title_text, caption)
            grid.addWidget(self.cards[key], 0, i)
        root.addLayout(grid)

        self.lbl_paid_today = QLabel("")
        self.lbl_paid_today.setTextFormat(Qt.RichText)
        self.lbl_paid_today.setStyleSheet("color: #475569;")
        root.addWidget(self.lbl_paid_today)

        self.tbl_debts = QTableView()
        self.tbl_debts.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.tbl_debts.setSelectionMode(QAbstractItemView.SingleSelection)
        self.tbl_debts.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.tbl_debts.verticalHeader().setVisible(False)
        self.tbl_debts.horizontalHeader().setStretchLastSection(True)
        root.addWidget(self.tbl_debts, 1)

    def set_metrics(self, m: DebtSummaryMetrics) -> None:
        self.cards["owed"].set_value(f"{fmt_amount(m.total_amount_owed)} {CURRENCY}")
        self.cards["active"].set_value(str(m.active_debts))
        self.cards["settled"].set_value(str(m.paid_debts))
        if m.highest is not None:
            self.cards["highest"].set_value(f"{fmt_amount(to_float(m.highest.get('amount')))} {CURRENCY}")
            self.cards["highest"].set_caption(str(m.highest.get("client") or "-"))
        else:
            self.cards["highest"].set_value("N/A")
            self.cards["highest"].set_caption("-")
        if m.oldest is not None:
            self.cards["oldest"].set_value(f"{m.days_since_oldest} day(s)")
            self.cards["oldest"].set_caption(str(m.oldest.get("client") or "-"))
        else:
            self.cards["oldest"].set_value("N/A")
            self.cards["oldest"].set_caption("-")

        parts = [
            f"<b>{name}</b> paid today: {count} payment(s), {fmt_amount(total)} {CURRENCY}"
            for name, (count, total) in m.paid_today.items()
        ]
        self.lbl_paid_today.setText(" &nbsp;|&nbsp; ".join(parts))

    def card_text(self, key: str) -> str:
        return self.cards[key].lbl_value.text()

    def selected_row(self) -> Optional[int]:
        sm = self.tbl_debts.selectionModel()
        if sm is None:
            return None
        rows = sm.selectedRows()
        return rows[0].row() if rows else None

    def set_status(self, text: Optional[str], is_error: bool = False) -> None:
        self.lbl_status.setText(text or "")
        self.lbl_status.setStyleSheet("color: #dc2626;" if is_error else "color: #475569;")
        self.lbl_status.setVisible(bool(text))
