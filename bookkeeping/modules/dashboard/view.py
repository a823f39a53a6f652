# bookkeeping/modules/dashboard/view.py
from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QFont, QStandardItem, QStandardItemModel
from PySide6.QtWidgets import (
    QAbstractItemView, QFrame, QGridLayout, QHBoxLayout, QHeaderView, QLabel,
    QPushButton, QSizePolicy, QSpacerItem, QTableView, QVBoxLayout, QWidget,
)

from ...constants import CURRENCY
from ...utils.helpers import fmt_amount


class DashboardView(QWidget):
    """
    Pure-UI dashboard surface. Controller drives it by calling the setters.

    Signals:
        refresh_requested()
        open_reports_requested()

    Public setters the controller will use:
        set_kpi_value(key, value)
        set_expense_breakdown(rows)
        set_status(text, is_error)
    """

    refresh_requested = Signal()
    open_reports_requested = Signal()

    KPI_ORDER = ("total_sales", "total_paid", "total_debts", "total_expenses", "balance")

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._kpi_cards: Dict[str, KPICard] = {}
        self._build_ui()

    # ---------------- UI ----------------
    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(10)

        top = QHBoxLayout()
        title = QLabel("<h2>Today</h2>")
        title.setTextFormat(Qt.RichText)
        top.addWidget(title)
        top.addStretch(1)
        self.btn_refresh = QPushButton("Refresh")
        self.btn_reports = QPushButton("Reports…")
        top.addWidget(self.btn_refresh)
        top.addWidget(self.btn_reports)
        root.addLayout(top)

        self.lbl_status = QLabel("")
        self.lbl_status.setWordWrap(True)
        self.lbl_status.setVisible(False)
        root.addWidget(self.lbl_status)

        gridwrap = QWidget()
        self.grid = QGridLayout(gridwrap)
        self.grid.setContentsMargins(0, 0, 0, 0)
        self.grid.setHorizontalSpacing(10)
        self.grid.setVerticalSpacing(10)

        for key, title_text, caption in (
            ("total_sales", "Total Sales", "sales recorded today"),
            ("total_paid", "Total Paid", "cash collected on today's sales"),
            ("total_debts", "New Debts", "debts opened today"),
            ("total_expenses", "Expenses", "spent today"),
            ("balance", "Balance", "paid - expenses"),
        ):
            self._kpi_cards[key] = KPICard(title_text, caption)
        self._reflow_kpis()
        gridwrap.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        root.addWidget(gridwrap)

        self.tbl_expenses = QTableView()
        self.model_expenses = QStandardItemModel(0, 2)
        self.model_expenses.setHorizontalHeaderLabels(["Category", f"Amount ({CURRENCY})"])
        self.tbl_expenses.setModel(self.model_expenses)
        self._prep_simple_table(self.tbl_expenses)
        root.addWidget(_Card(self.tbl_expenses, "Today's Expenses by Category"))

        root.addItem(QSpacerItem(0, 6, QSizePolicy.Minimum, QSizePolicy.Expanding))

        self.btn_refresh.clicked.connect(self.refresh_requested)
        self.btn_reports.clicked.connect(self.open_reports_requested)

    # ---------------- Public setters for controller ----------------
    def set_kpi_value(self, key: str, value: float, caption: Optional[str] = None) -> None:
        card = self._kpi_cards.get(key)
        if not card:
            return
        card.set_value(f"{fmt_amount(value)} {CURRENCY}")
        if caption is not None:
            card.set_caption(caption)

    def kpi_text(self, key: str) -> str:
        return self._kpi_cards[key].lbl_value.text()

    def set_expense_breakdown(self, rows: Sequence[Tuple[str, float]]) -> None:
        self.model_expenses.removeRows(0, self.model_expenses.rowCount())
        for name, total in rows:
            amount = QStandardItem(fmt_amount(total))
            amount.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
            self.model_expenses.appendRow([QStandardItem(name), amount])
        self.tbl_expenses.resizeColumnsToContents()

    def set_status(self, text: Optional[str], is_error: bool = False) -> None:
        self.lbl_status.setText(text or "")
        self.lbl_status.setStyleSheet("color: #dc2626;" if is_error else "color: #475569;")
        self.lbl_status.setVisible(bool(text))

    # --------------- Layout: responsive KPI grid ---------------
    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._reflow_kpis()

    def _reflow_kpis(self) -> None:
        while self.grid.count():
            item = self.grid.takeAt(0)
            w = item.widget()
            if w:
                w.setParent(None)

        cols = 3 if self.width() >= 900 else 2
        for idx, key in enumerate(self.KPI_ORDER):
            self.grid.addWidget(self._kpi_cards[key], idx // cols, idx % cols)

    def _prep_simple_table(self, tv: QTableView) -> None:
        tv.setSelectionMode(QAbstractItemView.NoSelection)
        tv.verticalHeader().setVisible(False)
        tv.horizontalHeader().setStretchLastSection(True)
        tv.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        tv.setEditTriggers(QAbstractItemView.NoEditTriggers)


# ======================= Visual building blocks =======================

class KPICard(QFrame):
    def __init__(self, title: str, caption: str) -> None:
        super().__init__()
        self.setObjectName("kpi_card")
        self.setStyleSheet("""
            QFrame#kpi_card {
                border: 1px solid #e2e8f0;
                border-radius: 10px;
                background: #f8fafc;
            }
        """)

        v = QVBoxLayout(self)
        v.setContentsMargins(12, 10, 12, 12)
        v.setSpacing(2)

        self.lbl_title = QLabel(title)
        self.lbl_title.setAlignment(Qt.AlignLeft | Qt.AlignVCenter)
        f = self.lbl_title.font()
        f.setBold(True)
        self.lbl_title.setFont(f)

        self.lbl_value = QLabel("—")
        self.lbl_value.setAlignment(Qt.AlignLeft | Qt.AlignVCenter)
        fv = QFont(self.lbl_value.font())
        fv.setPointSize(fv.pointSize() + 6)
        fv.setBold(True)
        self.lbl_value.setFont(fv)

        self.lbl_caption = QLabel(caption)
        self.lbl_caption.setStyleSheet("color: #64748b;")

        v.addWidget(self.lbl_title)
        v.addWidget(self.lbl_value)
        v.addWidget(self.lbl_caption)

    def set_value(self, s: str) -> None:
        self.lbl_value.setText(s)

    def set_caption(self, s: str) -> None:
        self.lbl_caption.setText(s)


class _Card(QWidget):
    """Wrap any widget in a titled card frame."""
    def __init__(self, inner: QWidget, title: str) -> None:
        super().__init__()
        v = QVBoxLayout(self)
        v.setContentsMargins(0, 0, 0, 0)
        frame = QFrame()
        frame.setFrameShape(QFrame.StyledPanel)
        frame.setStyleSheet("QFrame { border:1px solid #e2e8f0; border-radius:8px; }")
        fl = QVBoxLayout(frame)
        fl.setContentsMargins(12, 10, 12, 12)
        fl.setSpacing(6)
        fl.addWidget(QLabel(f"<b>{title}</b>"))
        fl.addWidget(inner)
        v.addWidget(frame)
