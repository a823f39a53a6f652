"""
Dialogs for the sales page: a sale, a supply issued to a seller, and a new
product.

Each dialog validates on accept and keeps the last accepted input in
`payload()`; a rejected dialog leaves it None.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDateEdit,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from ...constants import CURRENCY
from ...database.repositories import SaleInput, SupplyInput
from ...utils.helpers import fmt_amount
from ..reporting.aggregation import get_path, sale_total, to_float, to_int
from ..reporting.date_filter import coerce_datetime

# (product id, name, default unit price)
ProductChoice = Tuple[str, str, float]


def _money_spin() -> QDoubleSpinBox:
    spin = QDoubleSpinBox()
    spin.setMinimum(0.0)
    spin.setMaximum(10**9)
    spin.setDecimals(2)
    spin.setButtonSymbols(QDoubleSpinBox.ButtonSymbols.NoButtons)
    spin.setAlignment(Qt.AlignRight)
    return spin


def _date_edit(value: Any = None) -> QDateEdit:
    edit = QDateEdit()
    edit.setDisplayFormat("yyyy-MM-dd")
    edit.setCalendarPopup(True)
    d = coerce_datetime(value)
    edit.setDate(QDate(d.year, d.month, d.day) if d else QDate.currentDate())
    return edit


def _picked_datetime(edit: QDateEdit) -> datetime:
    """Calendar day from the editor, stamped with the current time of day."""
    return datetime.combine(edit.date().toPython(), datetime.now().time())


class _Dialog(QDialog):
    """Shared error label, OK/Cancel buttons and accept-on-valid flow."""

    def __init__(self, parent: QWidget | None, title: str):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setModal(True)
        self.setMinimumWidth(420)
        self._payload = None

        self.form = QFormLayout()
        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color:#b00020;")
        self.lbl_error.setVisible(False)
        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addLayout(self.form)
        layout.addWidget(self.lbl_error)
        layout.addWidget(self.buttons)

    def _fail(self, message: str, widget_to_focus: QWidget) -> None:
        self.lbl_error.setText(message)
        self.lbl_error.setVisible(True)
        widget_to_focus.setFocus()

    def get_payload(self):
        raise NotImplementedError

    def accept(self) -> None:  # type: ignore[override]
        self.lbl_error.setVisible(False)
        p = self.get_payload()
        if p is None:
            return
        self._payload = p
        super().accept()

    def payload(self):
        """Return the last accepted payload, or None if the dialog was canceled."""
        return self._payload


class SaleForm(_Dialog):
    """Add or edit a sale. The total and the balance left update as you type."""

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        products: Sequence[ProductChoice] = (),
        clients: Iterable[str] = (),
        initial: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(parent, "Edit Sale" if initial else "Add New Sale")

        self.cmb_client = QComboBox()
        self.cmb_client.setEditable(True)
        self.cmb_client.addItems(sorted(set(clients), key=str.casefold))
        self.cmb_client.setCurrentText("")
        self.cmb_client.lineEdit().setPlaceholderText("Select or type client name")

        self.cmb_product = QComboBox()
        self.cmb_product.addItem("Select product", userData=None)
        for pid, name, price in products:
            self.cmb_product.addItem(name, userData=(pid, price))

        self.edt_supply_type = QLineEdit()
        self.edt_supply_type.setPlaceholderText("e.g. Kaveera, Box")

        self.spin_qty = QSpinBox()
        self.spin_qty.setRange(0, 10**7)

        self.spin_price = _money_spin()
        self.spin_discount = _money_spin()
        self.spin_paid = _money_spin()
        self.chk_fully_paid = QCheckBox("Fully paid")
        self.date_edit = _date_edit(initial.get("date") if initial else None)
        self.lbl_total = QLabel("")

        self.form.addRow("Client*", self.cmb_client)
        self.form.addRow("Product*", self.cmb_product)
        self.form.addRow("Supply type", self.edt_supply_type)
        self.form.addRow("Quantity*", self.spin_qty)
        self.form.addRow(f"Unit Price ({CURRENCY})", self.spin_price)
        self.form.addRow(f"Discount ({CURRENCY})", self.spin_discount)
        self.form.addRow(f"Amount Paid ({CURRENCY})", self.spin_paid)
        self.form.addRow("", self.chk_fully_paid)
        self.form.addRow("Date*", self.date_edit)
        self.form.addRow("", self.lbl_total)

        self.cmb_product.currentIndexChanged.connect(self._on_product_changed)
        for spin in (self.spin_qty, self.spin_price, self.spin_discount, self.spin_paid):
            spin.valueChanged.connect(self._update_total)
        self.chk_fully_paid.toggled.connect(self._on_fully_paid)

        if initial:
            self._prefill(initial)
        self._update_total()

    def _prefill(self, sale: Mapping[str, Any]) -> None:
        self.cmb_client.setCurrentText(str(sale.get("client") or ""))
        pid = get_path(sale, "product.productId")
        for i in range(1, self.cmb_product.count()):
            if self.cmb_product.itemData(i)[0] == pid:
                self.cmb_product.blockSignals(True)
                self.cmb_product.setCurrentIndex(i)
                self.cmb_product.blockSignals(False)
                break
        self.edt_supply_type.setText(str(get_path(sale, "product.supplyType") or ""))
        self.spin_qty.setValue(to_int(get_path(sale, "product.quantity")))
        self.spin_price.setValue(to_float(get_path(sale, "product.unitPrice")))
        self.spin_discount.setValue(to_float(get_path(sale, "product.discount")))
        self.spin_paid.setValue(to_float(sale.get("amountPaid")))

    def _total(self) -> float:
        return sale_total(self.spin_qty.value(), self.spin_price.value(), self.spin_discount.value())

    def _on_product_changed(self, _index: int) -> None:
        data = self.cmb_product.currentData()
        if data and data[1]:
            self.spin_price.setValue(float(data[1]))

    def _on_fully_paid(self, checked: bool) -> None:
        self.spin_paid.setEnabled(not checked)
        if checked:
            self.spin_paid.setValue(self._total())

    def _update_total(self) -> None:
        total = self._total()
        if self.chk_fully_paid.isChecked():
            self.spin_paid.setValue(total)
        balance = max(total - self.spin_paid.value(), 0.0)
        self.lbl_total.setText(
            f"Total: {fmt_amount(total)} {CURRENCY}    Balance: {fmt_amount(balance)} {CURRENCY}"
        )

    def get_payload(self) -> SaleInput | None:
        client = self.cmb_client.currentText().strip()
        if not client:
            self._fail("Client is required.", self.cmb_client)
            return None
        product = self.cmb_product.currentData()
        if not product:
            self._fail("Please select a product.", self.cmb_product)
            return None
        if self.spin_qty.value() <= 0:
            self._fail("Quantity must be greater than zero.", self.spin_qty)
            return None
        subtotal = self.spin_qty.value() * self.spin_price.value()
        if self.spin_discount.value() > subtotal:
            self._fail("Discount cannot exceed the sale subtotal.", self.spin_discount)
            return None
        fully_paid = self.chk_fully_paid.isChecked()
        if not fully_paid and self.spin_paid.value() > self._total():
            self._fail("Amount paid cannot exceed the total amount.", self.spin_paid)
            return None

        return SaleInput(
            client=client,
            product_id=product[0],
            quantity=self.spin_qty.value(),
            unit_price=self.spin_price.value(),
            discount=self.spin_discount.value(),
            amount_paid=self.spin_paid.value(),
            supply_type=self.edt_supply_type.text().strip() or None,
            date=_picked_datetime(self.date_edit),
            fully_paid=fully_paid,
        )


class SupplyForm(_Dialog):
    """Stock issued to a seller, by product and supply type."""

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        products: Sequence[ProductChoice] = (),
        supply_types: Iterable[str] = (),
    ):
        super().__init__(parent, "Record Supply")

        self.cmb_product = QComboBox()
        self.cmb_product.addItem("Select product", userData=None)
        for pid, name, _price in products:
            self.cmb_product.addItem(name, userData=pid)

        self.cmb_type = QComboBox()
        self.cmb_type.setEditable(True)
        self.cmb_type.addItems(list(supply_types))
        self.cmb_type.setCurrentText("")

        self.spin_qty = QSpinBox()
        self.spin_qty.setRange(0, 10**7)
        self.date_edit = _date_edit()

        self.form.addRow("Product*", self.cmb_product)
        self.form.addRow("Supply type*", self.cmb_type)
        self.form.addRow("Quantity*", self.spin_qty)
        self.form.addRow("Date*", self.date_edit)

    def get_payload(self) -> SupplyInput | None:
        pid = self.cmb_product.currentData()
        if not pid:
            self._fail("Please select a product.", self.cmb_product)
            return None
        supply_type = self.cmb_type.currentText().strip()
        if not supply_type:
            self._fail("Supply type cannot be empty.", self.cmb_type)
            return None
        return SupplyInput(pid, supply_type, self.spin_qty.value(), _picked_datetime(self.date_edit))


class ProductForm(_Dialog):
    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent, "Add Product")
        self.edt_name = QLineEdit()
        self.spin_price = _money_spin()
        self.form.addRow("Name*", self.edt_name)
        self.form.addRow(f"Price ({CURRENCY})", self.spin_price)

    def get_payload(self) -> dict | None:
        name = self.edt_name.text().strip()
        if not name:
            self._fail("Name cannot be empty.", self.edt_name)
            return None
        return {"name": name, "price": self.spin_price.value()}
