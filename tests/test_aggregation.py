"""
Aggregation primitives behind the dashboard and every PDF report.
"""

from __future__ import annotations

import itertools
import logging
from datetime import timedelta

import pytest

from bookkeeping.modules.reporting.aggregation import (
    PAID,
    PARTIAL,
    UNPAID,
    category_sales_summary,
    dashboard_quick_stats,
    debt_summary_metrics,
    expenses_by_category,
    highest,
    normalize_supply_type,
    oldest,
    outstanding,
    paid_today,
    payment_status,
    records_for_product,
    sale_product_id,
    sale_total,
    sales_totals,
    sum_field,
    supply_type_rollup,
)
from bookkeeping.utils.helpers import fmt_amount, to_float

from .conftest import NOW, YESTERDAY, make_sale


# ---------------------------------------------------------------------------
# Suite A – numbers
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "value,expected",
    [(12, 12.0), ("12.5", 12.5), (None, 0.0), ("", 0.0), ("abc", 0.0), ("12abc", 0.0), (float("inf"), 0.0),
     (True, 0.0), (False, 0.0)],
)
def test_a1_to_float_is_lenient(value, expected) -> None:
    assert to_float(value) == expected


def test_a2_sum_ignores_order_and_junk() -> None:
    """A2: fsum gives the same total for every ordering; junk counts as zero."""
    records = [{"amount": 0.1}, {"amount": 0.2}, {"amount": "0.3"}, {"amount": "n/a"}, {}]
    totals = {sum_field(p, "amount") for p in itertools.permutations(records)}
    assert totals == {0.6}


def test_a3_sum_follows_dotted_paths() -> None:
    sales = [{"product": {"quantity": 3}}, {"product": None}, {"product": {"quantity": "2"}}]
    assert sum_field(sales, "product.quantity") == 5


def test_a4_fmt_amount() -> None:
    assert fmt_amount(9500) == "9,500"
    assert fmt_amount(12.5) == "12.5"
    assert fmt_amount("junk") == "0"


# ---------------------------------------------------------------------------
# Suite B – highest / oldest
# ---------------------------------------------------------------------------

def test_b1_highest_keeps_first_on_tie() -> None:
    a, b = {"id": "a", "amount": 50}, {"id": "b", "amount": 50}
    assert highest([a, b]) is a


def test_b2_highest_sentinel_when_empty_or_nonpositive() -> None:
    assert highest([]) == {"amount": 0}
    assert highest([{"amount": 0}, {"amount": -5}]) == {"amount": 0}


def test_b3_oldest_skips_undated_records() -> None:
    early = {"id": "e", "createdAt": YESTERDAY}
    assert oldest([{"id": "x"}, {"id": "n", "createdAt": NOW}, early]) is early
    assert oldest([{"id": "x"}]) == {"createdAt": None}


def test_b4_oldest_keeps_first_on_tie() -> None:
    a, b = {"createdAt": NOW}, {"createdAt": NOW.isoformat()}
    assert oldest([a, b]) is a


# ---------------------------------------------------------------------------
# Suite C – sales
# ---------------------------------------------------------------------------

def test_c1_payment_status_boundaries() -> None:
    assert payment_status(9500, 9500) == PAID
    assert payment_status(10000, 9500) == PAID
    assert payment_status(4000, 9500) == PARTIAL
    assert payment_status(0.01, 9500) == PARTIAL
    assert payment_status(0, 9500) == UNPAID
    assert payment_status(0, 0) == PAID


def test_c2_sale_total_and_outstanding() -> None:
    assert sale_total(10, 950, 0) == 9500
    assert sale_total(10, 950, 500) == 9000
    assert outstanding(make_sale("s", "p", 10, 950, 4000)) == 5500


def test_c3_sales_totals() -> None:
    sales = [
        make_sale("s1", "p", 10, 950, 9500),
        make_sale("s2", "p", 10, 950, 4000, discount=500),
    ]
    t = sales_totals(sales)
    assert t.count == 2
    assert t.total_sales == 9500 + 9000
    assert t.total_paid == 13500
    assert t.total_quantity == 20
    assert t.total_discount == 500
    assert t.outstanding_balance == 5000


def test_c4_category_match_is_exact(products) -> None:
    """C4: 'straws' (lowercase) is not the 'Straws' category."""
    prods = list(products) + [{"id": "p-lower", "name": "straws"}]
    sales = [make_sale("s1", "p-straws", 1, 10, 10), make_sale("s2", "p-lower", 1, 10, 10)]
    got = records_for_product(sales, prods, "Straws", sale_product_id)
    assert [s["id"] for s in got] == ["s1"]


def test_c5_unresolved_products_are_excluded_with_warning(snaps, caplog) -> None:
    caplog.set_level(logging.WARNING)
    summary = category_sales_summary(snaps.sales, snaps.products, ("Straws", "Toilet Paper"))
    assert [s.count for s in summary] == [2, 1]
    assert summary[0].total_amount == 19000
    assert summary[0].total_debt == 5500
    assert "Aggregation.unresolved_product records=1" in caplog.text


# ---------------------------------------------------------------------------
# Suite D – supplies
# ---------------------------------------------------------------------------

def test_d1_supply_type_normalisation() -> None:
    assert normalize_supply_type("KAVEERA") == "Kaveera"
    assert normalize_supply_type("60S") == "60s"
    assert normalize_supply_type("  box  p ") == "Box P"
    assert normalize_supply_type(None) == ""


def test_d2_rollup_merges_case_and_computes_balance(snaps) -> None:
    rows = supply_type_rollup(snaps.supplies, snaps.sales, snaps.products)
    got = [(r.product_name, r.supply_type, r.total_supplied, r.total_sold, r.balance) for r in rows]
    assert got == [
        ("Straws", "Kaveera", 50, 20, 30),
        ("Toilet Paper", "Box", 10, 5, 5),
    ]


def test_d3_rollup_keeps_sold_only_types(products) -> None:
    sales = [make_sale("s", "p-tp", 3, 10, 30, supply_type="Roll")]
    rows = supply_type_rollup([], sales, products)
    assert [(r.supply_type, r.total_supplied, r.total_sold, r.balance) for r in rows] == [("Roll", 0, 3, -3)]


def test_d4_rollup_sorted_by_product_then_type(products) -> None:
    supplies = [
        {"productId": "p-tp", "supplyType": "b", "quantity": 1},
        {"productId": "p-straws", "supplyType": "z", "quantity": 1},
        {"productId": "p-straws", "supplyType": "a", "quantity": 1},
    ]
    rows = supply_type_rollup(supplies, [], products)
    assert [(r.product_name, r.supply_type) for r in rows] == [
        ("Straws", "A"), ("Straws", "Z"), ("Toilet Paper", "B"),
    ]


# ---------------------------------------------------------------------------
# Suite E – debts and expenses
# ---------------------------------------------------------------------------

def test_e1_paid_today(snaps) -> None:
    assert [d["id"] for d in paid_today(snaps.debts, NOW)] == ["d2"]


def test_e2_debt_summary_metrics(snaps) -> None:
    m = debt_summary_metrics(snaps.debts, snaps.products, ("Straws", "Toilet Paper"), NOW)
    assert (m.total_debts, m.active_debts, m.paid_debts) == (3, 2, 1)
    assert m.total_amount_owed == 9500
    assert m.highest["id"] == "d1"
    assert m.oldest["id"] == "d2"
    assert m.days_since_oldest == 1
    assert m.paid_today == {"Straws": (0, 0.0), "Toilet Paper": (1, 2000.0)}


def test_e3_expenses_by_category_sorted_case_insensitive() -> None:
    expenses = [
        {"category": "Transport", "amount": 10},
        {"category": "airtime", "amount": 5},
        {"categoryId": "c1", "amount": 2},
        {"amount": 1},
        {"category": "Transport", "amount": "7"},
    ]
    cats = [{"id": "c1", "name": "Rent"}]
    assert expenses_by_category(expenses, cats) == [
        ("airtime", 5.0), ("Rent", 2.0), ("Transport", 17.0), ("Unknown", 1.0),
    ]


# ---------------------------------------------------------------------------
# Suite F – dashboard
# ---------------------------------------------------------------------------

def test_f1_quick_stats_only_count_today(snaps) -> None:
    s = dashboard_quick_stats(snaps.sales, snaps.debts, snaps.expenses, NOW)
    assert s.sales_count == 3
    assert s.total_sales == 9500 + 9500 + 100
    assert s.total_paid == 9500 + 4000 + 100
    assert (s.debts_count, s.total_debts) == (1, 5500)
    assert (s.expenses_count, s.total_expenses) == (2, 25000)
    assert s.balance == 13600 - 25000
    assert s.expenses_by_category == (("airtime", 5000.0), ("Transport", 20000.0))


def test_f2_quick_stats_empty() -> None:
    s = dashboard_quick_stats([], [], [], NOW + timedelta(days=30))
    assert (s.total_sales, s.total_expenses, s.balance) == (0, 0, 0)
