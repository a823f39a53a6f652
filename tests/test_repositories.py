"""
Repository write paths: sales open and close debts, payments shrink them,
and reference entities validate their names.
"""

from __future__ import annotations

import pytest

from bookkeeping.database.repositories import (
    DebtsDomainError,
    DebtsRepo,
    ExpenseInput,
    ExpensesDomainError,
    ExpensesRepo,
    ReferenceDomainError,
    ReferenceRepo,
    SaleInput,
    SalesDomainError,
    SalesRepo,
    SuppliesDomainError,
    SuppliesRepo,
    SupplyInput,
)

from .conftest import NOW, USER


@pytest.fixture
def sales(store) -> SalesRepo:
    return SalesRepo(store)


@pytest.fixture
def debts(store) -> DebtsRepo:
    return DebtsRepo(store)


def _sale(paid=0.0, **kw) -> SaleInput:
    base = dict(client="Acme", product_id="p-straws", quantity=10, unit_price=950, amount_paid=paid)
    base.update(kw)
    return SaleInput(**base)


# ---------------------------------------------------------------------------
# Suite A – sales and their debts
# ---------------------------------------------------------------------------

def test_a1_fully_paid_sale_opens_no_debt(sales) -> None:
    """A1: 10 x 950 paid in full is 'paid' with no debt."""
    sid = sales.create_sale(USER, _sale(9500), now=NOW)
    sale = sales.get(USER, sid)
    assert sale["totalAmount"] == 9500
    assert sale["paymentStatus"] == "paid"
    assert sale["product"]["productId"] == "p-straws"
    assert sale["createdAt"] == NOW
    assert sales.debts_for_sale(USER, sid) == []


def test_a2_partial_sale_opens_debt_for_balance(sales) -> None:
    """A2: 4000 paid on 9500 is 'partial' with a 5500 debt linked by saleId."""
    sid = sales.create_sale(USER, _sale(4000, supply_type=" Kaveera "), now=NOW)
    assert sales.get(USER, sid)["paymentStatus"] == "partial"
    assert sales.get(USER, sid)["product"]["supplyType"] == "Kaveera"
    [debt] = sales.debts_for_sale(USER, sid)
    assert debt["amount"] == 5500
    assert debt["lastPaidAmount"] == 0
    assert debt["productId"] == "p-straws"
    assert debt["client"] == "Acme"


def test_a3_update_replaces_the_debt(sales) -> None:
    sid = sales.create_sale(USER, _sale(4000), now=NOW)
    sales.update_sale(USER, sid, _sale(9000), now=NOW)
    [debt] = sales.debts_for_sale(USER, sid)
    assert debt["amount"] == 500
    assert sales.get(USER, sid)["createdAt"] == NOW

    sales.update_sale(USER, sid, _sale(9500), now=NOW)
    assert sales.debts_for_sale(USER, sid) == []


def test_a4_mark_fully_paid_clears_debt(sales) -> None:
    sid = sales.create_sale(USER, _sale(0), now=NOW)
    assert sales.get(USER, sid)["paymentStatus"] == "unpaid"
    sales.mark_fully_paid(USER, sid, now=NOW)
    sale = sales.get(USER, sid)
    assert sale["amountPaid"] == 9500
    assert sale["paymentStatus"] == "paid"
    assert sales.debts_for_sale(USER, sid) == []


def test_a5_fully_paid_flag_overrides_amount(sales) -> None:
    sid = sales.create_sale(USER, _sale(0, fully_paid=True), now=NOW)
    assert sales.get(USER, sid)["amountPaid"] == 9500


def test_a6_delete_cascades_to_debts(sales, store) -> None:
    sid = sales.create_sale(USER, _sale(1000), now=NOW)
    other = sales.create_sale(USER, _sale(1000), now=NOW)
    assert sales.delete_sale(USER, sid) == 1
    assert sales.get(USER, sid) is None
    assert [d["saleId"] for d in store.list(USER, "debts")] == [other]


@pytest.mark.parametrize(
    "kw,msg",
    [
        ({"client": " "}, "Client"),
        ({"product_id": ""}, "Product"),
        ({"quantity": 0}, "Quantity"),
        ({"quantity": "ten"}, "whole number"),
        ({"unit_price": -1}, "Unit price"),
        ({"discount": 10000}, "Discount"),
        ({"amount_paid": 10000}, "exceed"),
        ({"amount_paid": -5}, "negative"),
    ],
)
def test_a7_sale_validation(sales, kw, msg) -> None:
    with pytest.raises(SalesDomainError, match=msg):
        sales.create_sale(USER, _sale(**kw), now=NOW)


def test_a8_missing_sale_raises(sales) -> None:
    with pytest.raises(SalesDomainError):
        sales.update_sale(USER, "nope", _sale(0))
    with pytest.raises(SalesDomainError):
        sales.mark_fully_paid(USER, "nope")


def test_a9_users_are_partitioned(sales) -> None:
    sales.create_sale(USER, _sale(0), now=NOW)
    assert sales.list_sales("someone-else") == []


# ---------------------------------------------------------------------------
# Suite B – debt payments
# ---------------------------------------------------------------------------

def test_b1_record_payment(sales, debts) -> None:
    sid = sales.create_sale(USER, _sale(4000), now=NOW)
    [debt] = sales.debts_for_sale(USER, sid)
    assert debts.record_payment(USER, debt["id"], 1500, now=NOW) == 4000
    updated = debts.get(USER, debt["id"])
    assert updated["amount"] == 4000
    assert updated["lastPaidAmount"] == 1500
    assert updated["updatedAt"] == NOW

    debts.record_payment(USER, debt["id"], 4000, now=NOW)
    assert debts.list_open(USER) == []
    assert len(debts.list_debts(USER)) == 1


@pytest.mark.parametrize("amount", [0, -1, 6000])
def test_b2_payment_bounds(sales, debts, amount) -> None:
    sid = sales.create_sale(USER, _sale(4000), now=NOW)
    [debt] = sales.debts_for_sale(USER, sid)
    with pytest.raises(DebtsDomainError):
        debts.record_payment(USER, debt["id"], amount)


def test_b3_payment_on_missing_debt(debts) -> None:
    with pytest.raises(DebtsDomainError):
        debts.record_payment(USER, "nope", 10)


# ---------------------------------------------------------------------------
# Suite C – expenses, supplies, reference data
# ---------------------------------------------------------------------------

def test_c1_expenses_crud(store) -> None:
    repo = ExpensesRepo(store)
    eid = repo.create(USER, ExpenseInput("Transport", 20000, payee=" Sam ", created_at=NOW))
    [row] = repo.list_expenses(USER)
    assert (row["category"], row["amount"], row["payee"], row["createdAt"]) == ("Transport", 20000, "Sam", NOW)

    repo.update(USER, eid, ExpenseInput("Fuel", 100, category_id="c1", created_at=NOW))
    assert store.get(USER, "expenses", eid)["categoryId"] == "c1"

    with pytest.raises(ExpensesDomainError):
        repo.create(USER, ExpenseInput("", 10))
    with pytest.raises(ExpensesDomainError):
        repo.create(USER, ExpenseInput("Fuel", 0))
    with pytest.raises(ExpensesDomainError):
        repo.update(USER, "nope", ExpenseInput("Fuel", 1))

    repo.delete(USER, eid)
    assert repo.list_expenses(USER) == []


def test_c2_supplies(store) -> None:
    repo = SuppliesRepo(store)
    repo.create(USER, SupplyInput("p-straws", " KAVEERA ", 50, date=NOW))
    [row] = repo.list_supplies(USER)
    assert (row["supplyType"], row["quantity"]) == ("KAVEERA", 50)
    with pytest.raises(SuppliesDomainError):
        repo.create(USER, SupplyInput("p-straws", "", 1))
    with pytest.raises(SuppliesDomainError):
        repo.create(USER, SupplyInput("p-straws", "Box", -1))


def test_c3_reference_entities(store) -> None:
    repo = ReferenceRepo(store)
    repo.create(USER, "products", "Toilet Paper", price=1200)
    sid = repo.create(USER, "products", "Straws", price="950")
    assert [p["name"] for p in repo.list(USER, "products")] == ["Straws", "Toilet Paper"]
    assert repo.find_by_name(USER, "products", "Straws")["price"] == 950
    assert repo.find_by_name(USER, "products", "straws") is None

    repo.update(USER, "products", sid, "Straws XL")
    assert store.get(USER, "products", sid)["name"] == "Straws XL"

    with pytest.raises(ReferenceDomainError):
        repo.create(USER, "clients", "  ")
    with pytest.raises(ReferenceDomainError):
        repo.create(USER, "products", "Bad", price=-1)
    with pytest.raises(ValueError):
        repo.create(USER, "sales", "x")


def test_c4_bank_deposits(store) -> None:
    repo = ReferenceRepo(store)
    did = repo.add_deposit(USER, " Stanbic ", 30000, depositor="Shadia", reference="TX1", date=NOW)
    row = store.get(USER, "bankDeposits", did)
    assert (row["bank"], row["amount"], row["date"]) == ("Stanbic", 30000, NOW)
    with pytest.raises(ReferenceDomainError):
        repo.add_deposit(USER, "Stanbic", 0)
    repo.delete_deposit(USER, did)
    assert store.list(USER, "bankDeposits") == []
