"""
Sales, Debts and Expenses pages driven through their controllers.

Message boxes and toasts are replaced by a recorder so refused writes can be
asserted without a modal dialog.
"""

from __future__ import annotations

import pytest

from bookkeeping.database.data_cache import DataCache
from bookkeeping.database.local_cache import LocalSnapshotCache
from bookkeeping.database.repositories import ReferenceRepo, SaleInput, SalesRepo, SupplyInput
from bookkeeping.modules.debts import DebtsController
from bookkeeping.modules.expenses import ExpenseController
from bookkeeping.modules.sales import SaleForm, SalesController
from bookkeeping.utils import ui_helpers

from .conftest import USER


@pytest.fixture
def cache(qapp, store, tmp_path):
    c = DataCache(store, LocalSnapshotCache(tmp_path / "cache"))
    c.start(USER)
    yield c
    c.stop()


@pytest.fixture
def shown(monkeypatch):
    """Records (kind, *args) for every info/error/toast the pages raise."""
    calls = []
    for kind in ("info", "error", "toast"):
        monkeypatch.setattr(
            ui_helpers, kind, lambda parent, *args, _kind=kind, **kw: calls.append((_kind,) + args)
        )
    return calls


@pytest.fixture
def straws(store) -> str:
    return ReferenceRepo(store).create(USER, "products", "Straws", price=950)


def _cell(model, row, col):
    return model.data(model.index(row, col))


# ---------------------------------------------------------------------------
# Suite A – sales page
# ---------------------------------------------------------------------------

def test_a1_add_sale_updates_table_summary_and_opens_debt(qtbot, cache, store, shown, straws) -> None:
    ctrl = SalesController(cache)
    qtbot.addWidget(ctrl.get_widget())

    sale_id = ctrl.add_sale(SaleInput("Acme", straws, 10, 950, amount_paid=4000, supply_type="kaveera"))

    assert sale_id
    assert ctrl.model.rowCount() == 1
    assert _cell(ctrl.model, 0, 1) == "Acme"
    assert _cell(ctrl.model, 0, 2) == "Straws"
    assert _cell(ctrl.model, 0, 3) == "Kaveera"
    assert _cell(ctrl.model, 0, 5) == "9,500"
    assert _cell(ctrl.model, 0, 7) == "5,500"
    assert _cell(ctrl.model, 0, 8) == "Partial"
    assert "<b>Straws</b>: 1 sale(s), 9,500 UGX (5,500 owed)" in ctrl.view.lbl_summary.text()

    debts = SalesRepo(store).debts_for_sale(USER, sale_id)
    assert [d["amount"] for d in debts] == [5500]
    assert ReferenceRepo(store).find_by_name(USER, "clients", "Acme") is not None
    assert ("toast", "Sale added successfully.", "success") in shown


def test_a2_refused_sale_shows_error_and_stores_nothing(qtbot, cache, store, shown, straws) -> None:
    ctrl = SalesController(cache)
    qtbot.addWidget(ctrl.get_widget())

    assert ctrl.add_sale(SaleInput("Acme", straws, 0, 950)) is None
    assert ("error", "Invalid data", "Quantity must be greater than zero.") in shown
    assert store.list(USER, "sales") == []
    assert ctrl.model.rowCount() == 0


def test_a3_mark_fully_paid_clears_debt(qtbot, cache, store, shown, straws) -> None:
    ctrl = SalesController(cache)
    qtbot.addWidget(ctrl.get_widget())
    sale_id = ctrl.add_sale(SaleInput("Acme", straws, 2, 950))

    assert ctrl.mark_fully_paid(sale_id) is True
    assert SalesRepo(store).debts_for_sale(USER, sale_id) == []
    assert _cell(ctrl.model, 0, 7) == "0"
    assert _cell(ctrl.model, 0, 8) == "Paid"


def test_a4_delete_sale_removes_its_debt(qtbot, cache, store, shown, straws) -> None:
    ctrl = SalesController(cache)
    qtbot.addWidget(ctrl.get_widget())
    sale_id = ctrl.add_sale(SaleInput("Bolt", straws, 2, 950, amount_paid=100))
    assert len(store.list(USER, "debts")) == 1

    assert ctrl.delete_sale(sale_id) is True
    assert store.list(USER, "sales") == []
    assert store.list(USER, "debts") == []
    assert ctrl.model.rowCount() == 0
    assert ("toast", "Sale deleted (1 debt(s) removed).", "success") in shown


def test_a5_supply_and_product_lookups(qtbot, cache, store, shown, straws) -> None:
    ctrl = SalesController(cache)
    qtbot.addWidget(ctrl.get_widget())

    assert ctrl.record_supply(SupplyInput(straws, "KAVEERA", 50))
    assert ctrl.supply_types() == ["Kaveera"]

    napkins = ctrl.add_product("Napkins", 300)
    assert (napkins, "Napkins", 300.0) in ctrl.product_choices()

    assert ctrl.add_product("  ", 10) is None
    assert ("error", "Invalid data", "Name cannot be empty.") in shown


def test_a6_logged_out_user_is_asked_to_sign_in(qtbot, cache, store, shown, straws) -> None:
    ctrl = SalesController(cache)
    qtbot.addWidget(ctrl.get_widget())
    cache.start(None)

    assert ctrl.add_sale(SaleInput("Acme", straws, 1, 950)) is None
    assert ("info", "Sign in", "Please log in to record sales.") in shown
    assert store.list(USER, "sales") == []


# ---------------------------------------------------------------------------
# Suite B – sale form
# ---------------------------------------------------------------------------

def test_b1_sale_form_validates_and_builds_input(qtbot) -> None:
    dlg = SaleForm(products=[("p1", "Straws", 950.0)], clients=["Acme"])
    qtbot.addWidget(dlg)

    assert dlg.get_payload() is None
    assert dlg.lbl_error.text() == "Client is required."

    dlg.cmb_client.setCurrentText("Acme")
    assert dlg.get_payload() is None
    assert dlg.lbl_error.text() == "Please select a product."

    dlg.cmb_product.setCurrentIndex(1)
    assert dlg.spin_price.value() == 950.0
    assert dlg.get_payload() is None
    assert dlg.lbl_error.text() == "Quantity must be greater than zero."

    dlg.spin_qty.setValue(2)
    dlg.spin_paid.setValue(5000)
    assert dlg.get_payload() is None
    assert dlg.lbl_error.text() == "Amount paid cannot exceed the total amount."

    dlg.chk_fully_paid.setChecked(True)
    payload = dlg.get_payload()
    assert payload is not None
    assert payload.product_id == "p1"
    assert payload.quantity == 2
    assert payload.fully_paid is True
    assert payload.amount_paid == 1900.0


def test_b2_sale_form_prefills_from_existing_sale(qtbot) -> None:
    sale = {
        "client": "Bolt",
        "product": {"productId": "p1", "quantity": 3, "unitPrice": 900, "discount": 100, "supplyType": "Box"},
        "amountPaid": 500,
    }
    dlg = SaleForm(products=[("p1", "Straws", 950.0)], initial=sale)
    qtbot.addWidget(dlg)

    assert dlg.windowTitle() == "Edit Sale"
    assert dlg.cmb_product.currentIndex() == 1
    # prefill keeps the stored unit price rather than the product default
    assert dlg.spin_price.value() == 900.0
    assert dlg.lbl_total.text().startswith("Total: 2,600 UGX")


# ---------------------------------------------------------------------------
# Suite C – debts page
# ---------------------------------------------------------------------------

def _two_debts(store, product_id):
    repo = SalesRepo(store)
    acme = repo.create_sale(USER, SaleInput("Acme", product_id, 10, 950, amount_paid=4000))
    bolt = repo.create_sale(USER, SaleInput("Bolt", product_id, 2, 950))
    return repo.debts_for_sale(USER, acme)[0]["id"], repo.debts_for_sale(USER, bolt)[0]["id"]


def test_c1_cards_follow_payments(qtbot, cache, store, shown, straws) -> None:
    acme_debt, _ = _two_debts(store, straws)
    ctrl = DebtsController(cache)
    qtbot.addWidget(ctrl.get_widget())

    assert ctrl.view.card_text("owed") == "7,400 UGX"
    assert ctrl.view.card_text("active") == "2"
    assert ctrl.view.card_text("highest") == "5,500 UGX"
    assert ctrl.model.rowCount() == 2
    assert _cell(ctrl.model, 0, 0) == "Acme"

    assert ctrl.record_payment(acme_debt, 5500) == 0.0
    assert ctrl.view.card_text("owed") == "1,900 UGX"
    assert ctrl.view.card_text("active") == "1"
    assert ctrl.view.card_text("settled") == "1"
    assert ctrl.model.rowCount() == 1
    assert ("toast", "Debt fully paid.", "success") in shown

    ctrl.view.chk_show_settled.setChecked(True)
    assert ctrl.model.rowCount() == 2


def test_c2_overpayment_is_refused(qtbot, cache, store, shown, straws) -> None:
    _, bolt_debt = _two_debts(store, straws)
    ctrl = DebtsController(cache)
    qtbot.addWidget(ctrl.get_widget())

    assert ctrl.record_payment(bolt_debt, 10_000) is None
    assert ("error", "Invalid payment", "Payment cannot exceed the outstanding balance.") in shown
    assert store.get(USER, "debts", bolt_debt)["amount"] == 1900
    assert ctrl.view.card_text("owed") == "7,400 UGX"


def test_c3_bank_deposit_is_stored(qtbot, cache, store, shown) -> None:
    ctrl = DebtsController(cache)
    qtbot.addWidget(ctrl.get_widget())

    deposit_id = ctrl.record_deposit("Stanbic", 30000, depositor="Shadia", reference="TX1")
    saved = store.get(USER, "bankDeposits", deposit_id)
    assert (saved["bank"], saved["amount"], saved["reference"]) == ("Stanbic", 30000, "TX1")

    assert ctrl.record_deposit(" ", 100) is None
    assert ("error", "Invalid data", "Bank cannot be empty.") in shown
    assert len(store.list(USER, "bankDeposits")) == 1


# ---------------------------------------------------------------------------
# Suite D – expenses page
# ---------------------------------------------------------------------------

def test_d1_add_expense_links_category(qtbot, cache, store, shown) -> None:
    ctrl = ExpenseController(cache)
    qtbot.addWidget(ctrl.get_widget())

    first = ctrl.add_expense({"category": "Transport", "amount": 20000, "description": "Boda", "payee": "Sam"})
    ctrl.add_expense({"category": "Transport", "amount": 5000})

    categories = store.list(USER, "categories")
    assert [c["name"] for c in categories] == ["Transport"]
    assert store.get(USER, "expenses", first)["categoryId"] == categories[0]["id"]
    assert ctrl.category_names() == ["Transport"]
    assert ctrl.model.rowCount() == 2
    assert ctrl.view.lbl_total.text() == "Total: 25,000 UGX"
    assert ctrl.view.model_totals.item(0, 0).text() == "Transport"
    assert ctrl.view.model_totals.item(0, 1).text() == "25,000"


def test_d2_search_filters_rows_and_totals(qtbot, cache, shown) -> None:
    ctrl = ExpenseController(cache)
    qtbot.addWidget(ctrl.get_widget())
    ctrl.add_expense({"category": "Transport", "amount": 20000, "description": "Boda"})
    ctrl.add_expense({"category": "Airtime", "amount": 5000, "payee": "MTN"})

    ctrl.view.txt_search.setText("boda")
    assert ctrl.model.rowCount() == 1
    assert ctrl.view.lbl_total.text() == "Total: 20,000 UGX"

    ctrl.view.txt_search.setText("")
    assert ctrl.model.rowCount() == 2


def test_d3_edit_and_refused_amount(qtbot, cache, store, shown) -> None:
    ctrl = ExpenseController(cache)
    qtbot.addWidget(ctrl.get_widget())
    expense_id = ctrl.add_expense({"category": "Transport", "amount": 20000})

    assert ctrl.edit_expense(expense_id, {"category": "Transport", "amount": 0}) is False
    assert ("error", "Invalid data", "Amount must be greater than zero.") in shown
    assert store.get(USER, "expenses", expense_id)["amount"] == 20000

    assert ctrl.edit_expense(expense_id, {"category": "Fuel", "amount": 15000}) is True
    assert ctrl.view.lbl_total.text() == "Total: 15,000 UGX"

    assert ctrl.delete_expense(expense_id) is True
    assert store.list(USER, "expenses") == []
    assert ctrl.view.lbl_total.text() == "Total: 0 UGX"
