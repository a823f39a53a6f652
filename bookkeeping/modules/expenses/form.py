"""
Dialog for creating and editing expenses.

Collects: category (pick or type a new one), amount, description, payee, date.
Validates: non-empty category, amount > 0.
On accept, `payload()` returns a dict the controller turns into ExpenseInput.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QComboBox,
    QDateEdit,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QVBoxLayout,
    QWidget,
)

from ...constants import CURRENCY
from ..reporting.aggregation import to_float
from ..reporting.date_filter import coerce_datetime


class ExpenseForm(QDialog):
    """Modal dialog for adding or editing an expense."""

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        categories: Iterable[str] = (),
        initial: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(parent)
        self.setWindowTitle("Edit Expense" if initial else "Add Expense")
        self.setModal(True)
        self.setMinimumWidth(420)
        self._payload: Optional[dict] = None

        self.cmb_category = QComboBox()
        self.cmb_category.setEditable(True)
        self.cmb_category.addItems(list(categories))
        self.cmb_category.setCurrentText("")
        self.cmb_category.lineEdit().setPlaceholderText("Select or type a category")

        self.spin_amount = QDoubleSpinBox()
        self.spin_amount.setMinimum(0.0)   # validation enforces > 0
        self.spin_amount.setMaximum(10**9)
        self.spin_amount.setDecimals(2)
        self.spin_amount.setButtonSymbols(QDoubleSpinBox.ButtonSymbols.NoButtons)
        self.spin_amount.setAlignment(Qt.AlignRight)

        self.edt_description = QLineEdit()
        self.edt_description.setClearButtonEnabled(True)
        self.edt_payee = QLineEdit()

        self.date_edit = QDateEdit()
        self.date_edit.setDisplayFormat("yyyy-MM-dd")
        self.date_edit.setCalendarPopup(True)
        self.date_edit.setDate(QDate.currentDate())

        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color:#b00020;")
        self.lbl_error.setVisible(False)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        form = QFormLayout()
        form.addRow("Category*", self.cmb_category)
        form.addRow(f"Amount ({CURRENCY})*", self.spin_amount)
        form.addRow("Description", self.edt_description)
        form.addRow("Payee", self.edt_payee)
        form.addRow("Date*", self.date_edit)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(self.lbl_error)
        layout.addWidget(self.buttons)

        if initial:
            self.cmb_category.setCurrentText(str(initial.get("category") or ""))
            self.spin_amount.setValue(to_float(initial.get("amount")))
            self.edt_description.setText(str(initial.get("description") or ""))
            self.edt_payee.setText(str(initial.get("payee") or ""))
            d = coerce_datetime(initial.get("createdAt"))
            if d is not None:
                self.date_edit.setDate(QDate(d.year, d.month, d.day))

    def _fail(self, message: str, widget_to_focus: QWidget) -> None:
        self.lbl_error.setText(message)
        self.lbl_error.setVisible(True)
        widget_to_focus.setFocus()

    def get_payload(self) -> dict | None:
        """Validate inputs and return a dict or None on failure."""
        self.lbl_error.setVisible(False)

        category = self.cmb_category.currentText().strip()
        if not category:
            self._fail("Category cannot be empty.", self.cmb_category)
            return None
        amount = float(self.spin_amount.value())
        if amount <= 0.0:
            self._fail("Amount must be greater than 0.", self.spin_amount)
            return None

        return {
            "category": category,
            "amount": amount,
            "description": self.edt_description.text().strip(),
            "payee": self.edt_payee.text().strip(),
            "created_at": datetime.combine(self.date_edit.date().toPython(), datetime.now().time()),
        }

    def accept(self) -> None:  # type: ignore[override]
        p = self.get_payload()
        if p is None:
            return
        self._payload = p
        super().accept()

    def payload(self) -> dict | None:
        """Return the last accepted payload, or None if dialog was canceled."""
        return self._payload
