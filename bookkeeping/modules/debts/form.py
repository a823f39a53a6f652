"""
Payment and bank deposit dialogs.

Validates: payment > 0 and not above the outstanding balance; deposit bank
non-empty and amount > 0. On accept, `payload()` returns the values the
controller hands to the repositories.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
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
from ...utils.helpers import fmt_amount


def _amount_spin(maximum: float = 10**9) -> QDoubleSpinBox:
    spin = QDoubleSpinBox()
    spin.setMinimum(0.0)
    spin.setMaximum(maximum)
    spin.setDecimals(2)
    spin.setButtonSymbols(QDoubleSpinBox.ButtonSymbols.NoButtons)
    spin.setAlignment(Qt.AlignRight)
    return spin


class PaymentForm(QDialog):
    """Record a payment against one debt."""

    def __init__(self, parent: QWidget | None = None, *, client: str = "", balance: float = 0.0):
        super().__init__(parent)
        self.setWindowTitle("Record Payment")
        self.setModal(True)
        self.setMinimumWidth(360)
        self._balance = float(balance)
        self._payload: Optional[float] = None

        self.spin_amount = _amount_spin(self._balance)
        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color:#b00020;")
        self.lbl_error.setVisible(False)
        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        form = QFormLayout()
        form.addRow("Client", QLabel(client or "-"))
        form.addRow("Outstanding", QLabel(f"{fmt_amount(self._balance)} {CURRENCY}"))
        form.addRow(f"Payment ({CURRENCY})*", self.spin_amount)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(self.lbl_error)
        layout.addWidget(self.buttons)

    def get_payload(self) -> float | None:
        amount = float(self.spin_amount.value())
        if amount <= 0.0:
            self._fail("Payment must be greater than zero.")
            return None
        if amount > self._balance:
            self._fail("Payment cannot exceed the outstanding balance.")
            return None
        return amount

    def _fail(self, message: str) -> None:
        self.lbl_error.setText(message)
        self.lbl_error.setVisible(True)
        self.spin_amount.setFocus()

    def accept(self) -> None:  # type: ignore[override]
        p = self.get_payload()
        if p is None:
            return
        self._payload = p
        super().accept()

    def payload(self) -> float | None:
        return self._payload


class DepositForm(QDialog):
    """Cash taken to the bank."""

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setWindowTitle("Record Bank Deposit")
        self.setModal(True)
        self.setMinimumWidth(420)
        self._payload: Optional[dict] = None

        self.edt_bank = QLineEdit()
        self.edt_bank.setPlaceholderText("e.g. Stanbic")
        self.spin_amount = _amount_spin()
        self.edt_depositor = QLineEdit()
        self.edt_reference = QLineEdit()
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
        form.addRow("Bank*", self.edt_bank)
        form.addRow(f"Amount ({CURRENCY})*", self.spin_amount)
        form.addRow("Depositor", self.edt_depositor)
        form.addRow("Reference", self.edt_reference)
        form.addRow("Date*", self.date_edit)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(self.lbl_error)
        layout.addWidget(self.buttons)

    def get_payload(self) -> dict | None:
        bank = self.edt_bank.text().strip()
        if not bank:
            self._fail("Bank cannot be empty.", self.edt_bank)
            return None
        amount = float(self.spin_amount.value())
        if amount <= 0.0:
            self._fail("Amount must be greater than zero.", self.spin_amount)
            return None
        return {
            "bank": bank,
            "amount": amount,
            "depositor": self.edt_depositor.text().strip(),
            "reference": self.edt_reference.text().strip(),
            "date": datetime.combine(self.date_edit.date().toPython(), datetime.now().time()),
        }

    def _fail(self, message: str, widget_to_focus: QWidget) -> None:
        self.lbl_error.setText(message)
        self.lbl_error.setVisible(True)
        widget_to_focus.setFocus()

    def accept(self) -> None:  # type: ignore[override]
        p = self.get_payload()
        if p is None:
            return
        self._payload = p
        super().accept()

    def payload(self) -> dict | None:
        return self._payload
