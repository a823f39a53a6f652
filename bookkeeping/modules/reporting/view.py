# bookkeeping/modules/reporting/view.py
from __future__ import annotations

from typing import Dict, Optional

from PySide6.QtCore import QDate, Qt, Signal
from PySide6.QtWidgets import (
    QComboBox, QDateEdit, QFrame, QGridLayout, QHBoxLayout, QLabel,
    QPushButton, QVBoxLayout, QWidget,
)

# (combo label, DateFilter type)
PERIODS = (
    ("All Time", "all"),
    ("Today", "today"),
    ("Yesterday", "yesterday"),
    ("This Week", "thisWeek"),
    ("This Month", "thisMonth"),
    ("Custom Range", "range"),
)

# (kind, button title, caption)
REPORT_BUTTONS = (
    ("debts", "Debts Report", "Outstanding balances and today's payments"),
    ("expenses", "Expenses Report", "Expenses with a per-category breakdown"),
    ("sales", "Sales Report", "Sales per product and supply balances"),
    ("consolidated", "Consolidated Report", "Sales, expenses, debts and deposits"),
)


class ReportsView(QWidget):
    """
    Period selector plus one card per report kind.

    Signals:
        generate_requested(kind: str, type: str, start: str, end: str)
            start/end are yyyy-MM-dd and only meaningful for "range".
    """

    generate_requested = Signal(str, str, str, str)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.buttons: Dict[str, QPushButton] = {}
        self._build_ui()
        self._on_period_changed()

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(10)

        title = QLabel("<h2>Reports</h2>")
        title.setTextFormat(Qt.RichText)
        root.addWidget(title)

        bar = QHBoxLayout()
        bar.addWidget(QLabel("Period:"))
        self.cmb_period = QComboBox()
        for text, kind in PERIODS:
            self.cmb_period.addItem(text, kind)
        bar.addWidget(self.cmb_period)

        self.date_from = QDateEdit()
        self.date_to = QDateEdit()
        for de in (self.date_from, self.date_to):
            de.setCalendarPopup(True)
            de.setDisplayFormat("yyyy-MM-dd")
            de.setDate(QDate.currentDate())
        self.lbl_from = QLabel("From:")
        self.lbl_to = QLabel("To:")
        bar.addWidget(self.lbl_from)
        bar.addWidget(self.date_from)
        bar.addWidget(self.lbl_to)
        bar.addWidget(self.date_to)
        bar.addStretch(1)
        root.addLayout(bar)

        self.lbl_status = QLabel("")
        self.lbl_status.setWordWrap(True)
        self.lbl_status.setVisible(False)
        root.addWidget(self.lbl_status)

        grid = QGridLayout()
        grid.setHorizontalSpacing(10)
        grid.setVerticalSpacing(10)
        for idx, (kind, text, caption) in enumerate(REPORT_BUTTONS):
            btn = QPushButton("Generate PDF")
            btn.clicked.connect(lambda _=False, k=kind: self._emit_generate(k))
            self.buttons[kind] = btn
            grid.addWidget(_ReportCard(text, caption, btn), idx // 2, idx % 2)
        root.addLayout(grid)
        root.addStretch(1)

        self.cmb_period.currentIndexChanged.connect(self._on_period_changed)

    # ---------------- Events ----------------
    def _on_period_changed(self, *_args) -> None:
        custom = self.cmb_period.currentData() == "range"
        for w in (self.lbl_from, self.date_from, self.lbl_to, self.date_to):
            w.setVisible(custom)

    def _emit_generate(self, kind: str) -> None:
        self.generate_requested.emit(kind, *self.current_period())

    # ---------------- Public API ----------------
    def current_period(self) -> tuple[str, str, str]:
        return (
            self.cmb_period.currentData(),
            self.date_from.date().toString("yyyy-MM-dd"),
            self.date_to.date().toString("yyyy-MM-dd"),
        )

    def set_period(self, kind: str, start: Optional[str] = None, end: Optional[str] = None) -> None:
        idx = self.cmb_period.findData(kind)
        if idx >= 0:
            self.cmb_period.setCurrentIndex(idx)
        if start:
            self.date_from.setDate(QDate.fromString(start, "yyyy-MM-dd"))
        if end:
            self.date_to.setDate(QDate.fromString(end, "yyyy-MM-dd"))

    def set_busy(self, busy: bool) -> None:
        for btn in self.buttons.values():
            btn.setEnabled(not busy)
            btn.setText("Generating..." if busy else "Generate PDF")

    def set_status(self, text: Optional[str], is_error: bool = False) -> None:
        self.lbl_status.setText(text or "")
        self.lbl_status.setStyleSheet("color: #dc2626;" if is_error else "color: #475569;")
        self.lbl_status.setVisible(bool(text))


class _ReportCard(QFrame):
    def __init__(self, title: str, caption: str, button: QPushButton) -> None:
        super().__init__()
        self.setObjectName("report_card")
        self.setStyleSheet("""
            QFrame#report_card {
                border: 1px solid #e2e8f0;
                border-radius: 10px;
                background: #f8fafc;
            }
        """)
        v = QVBoxLayout(self)
        v.setContentsMargins(12, 10, 12, 12)
        v.setSpacing(4)
        v.addWidget(QLabel(f"<b>{title}</b>"))
        cap = QLabel(caption)
        cap.setStyleSheet("color: #64748b;")
        cap.setWordWrap(True)
        v.addWidget(cap)
        v.addWidget(button, 0, Qt.AlignRight)
