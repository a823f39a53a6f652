"""
Report data builders and the four PDF renderers.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest

from bookkeeping.modules.reporting.consolidated_report import render_consolidated_report
from bookkeeping.modules.reporting.date_filter import DateFilter
from bookkeeping.modules.reporting.debts_report import render_debts_report, summary_items as debt_summary
from bookkeeping.modules.reporting.expenses_report import render_expenses_report
from bookkeeping.modules.reporting import layout as layout_mod
from bookkeeping.modules.reporting.layout import ReportOptions
from bookkeeping.modules.reporting.report_data import (
    build_consolidated_report_data,
    build_debts_report_data,
    build_expenses_report_data,
    build_sales_report_data,
)
from bookkeeping.modules.reporting.sales_report import render_sales_report
from bookkeeping.database.snapshots import Snapshots

from .conftest import NOW

CATS = ("Straws", "Toilet Paper")


@pytest.fixture
def options() -> ReportOptions:
    return ReportOptions()


# ---------------------------------------------------------------------------
# Suite A – debts
# ---------------------------------------------------------------------------

def test_a1_debts_data(snaps) -> None:
    data = build_debts_report_data(snaps, product_names=CATS, now=NOW)
    straws, tp = data.categories
    assert [r.client for r in straws.outstanding] == ["Bolt"]
    assert [r.client for r in tp.outstanding] == ["Cato"]
    assert [r.client for r in tp.paid_today] == ["Cato"]
    assert tp.total_paid_today == 2000
    assert straws.paid_today == ()
    assert data.total_outstanding == 9500
    assert tp.highest.amount == 4000
    assert tp.oldest.client == "Cato"


def test_a2_debt_summary_without_debts_says_na() -> None:
    data = build_debts_report_data(Snapshots(), product_names=CATS, now=NOW)
    items = debt_summary(data.categories[0])
    assert [i.value for i in items][1:] == ["N/A", "N/A"]


def test_a3_debts_pdf(snaps, options) -> None:
    pdf = render_debts_report(build_debts_report_data(snaps, product_names=CATS, now=NOW), options)
    assert pdf.startswith(b"%PDF")


def test_a4_debts_follow_selected_period(snaps) -> None:
    """Only debts opened in the period are listed; no filter keeps every debt."""
    old = {"id": "d0", "client": "Old", "productId": "p-straws", "amount": 800, "lastPaidAmount": 0,
           "createdAt": datetime(2020, 1, 1, 9, 0), "updatedAt": datetime(2020, 1, 1, 9, 0)}
    with_old = replace(snaps, debts=snaps.debts + (old,))

    data = build_debts_report_data(with_old, DateFilter("range", "2024-05-01", "2024-05-01"), CATS, NOW)
    straws, tp = data.categories
    assert [r.client for r in straws.outstanding] == ["Bolt"]
    assert tp.outstanding == ()
    assert tp.paid_today == ()
    assert data.total_outstanding == 5500
    assert data.period_label == "May 01, 2024 - May 01, 2024"

    everything = build_debts_report_data(with_old, DateFilter(), CATS, NOW)
    assert [r.client for r in everything.categories[0].outstanding] == ["Bolt", "Old"]
    assert everything.categories[0].oldest.client == "Old"
    assert everything.period_label == "All Time"


# ---------------------------------------------------------------------------
# Suite B – expenses
# ---------------------------------------------------------------------------

def test_b1_expenses_data_respects_filter(snaps) -> None:
    data = build_expenses_report_data(snaps, DateFilter("today"), NOW)
    assert [r.amount for r in data.rows] == [20000, 5000]
    assert data.total == 25000
    assert data.highest.payee == "Sam"
    assert data.period_label == "Today"
    assert data.by_category == (("airtime", 5000.0), ("Transport", 20000.0))

    everything = build_expenses_report_data(snaps, DateFilter(), NOW)
    assert everything.total == 32000
    assert everything.oldest.amount == 7000


def test_b2_expenses_pdf_with_and_without_rows(snaps, options) -> None:
    assert render_expenses_report(build_expenses_report_data(snaps, DateFilter(), NOW), options).startswith(b"%PDF")
    empty = build_expenses_report_data(Snapshots(), DateFilter(), NOW)
    assert empty.highest is None and empty.oldest is None
    assert render_expenses_report(empty, options).startswith(b"%PDF")


# ---------------------------------------------------------------------------
# Suite C – sales
# ---------------------------------------------------------------------------

def test_c1_sales_data(snaps) -> None:
    data = build_sales_report_data(snaps, DateFilter(), CATS, NOW)
    assert data.totals.count == 4
    straws, tp = data.categories
    assert [r.status for r in straws.rows] == ["paid", "partial"]
    assert straws.rows[0].supply_type == "Kaveera"
    assert straws.totals.outstanding_balance == 5500
    assert tp.rows[0].status == "unpaid"
    assert [(s.product_name, s.balance) for s in data.supplies] == [("Straws", 30), ("Toilet Paper", 5)]


def test_c2_sales_filter_applies_to_supplies(snaps) -> None:
    data = build_sales_report_data(snaps, DateFilter("today"), CATS, NOW)
    assert data.categories[1].rows == ()
    assert [(s.product_name, s.total_supplied, s.total_sold) for s in data.supplies] == [("Straws", 50, 20)]


def test_c3_status_is_recomputed_not_trusted(snaps, products) -> None:
    sale = dict(snaps.sales[0], paymentStatus="unpaid")
    data = build_sales_report_data(Snapshots(sales=(sale,), products=products), DateFilter(), CATS, NOW)
    assert data.categories[0].rows[0].status == "paid"


def test_c4_sales_pdf(snaps, options) -> None:
    assert render_sales_report(build_sales_report_data(snaps, DateFilter(), CATS, NOW), options).startswith(b"%PDF")


# ---------------------------------------------------------------------------
# Suite D – consolidated
# ---------------------------------------------------------------------------

def test_d1_consolidated_data(snaps) -> None:
    data = build_consolidated_report_data(snaps, DateFilter(), CATS, NOW)
    assert data.total_deposits == 30000
    assert data.deposits[0].bank == "Stanbic"
    assert data.net_balance == 13600 - 32000


def test_d2_consolidated_pdf_with_large_snapshots(snaps, options) -> None:
    many = Snapshots(
        sales=snaps.sales * 40,
        products=snaps.products,
        debts=snaps.debts,
        expenses=snaps.expenses * 20,
        supplies=snaps.supplies,
        bankDeposits=snaps.bankDeposits * 30,
    )
    pdf = render_consolidated_report(build_consolidated_report_data(many, DateFilter(), CATS, NOW), options)
    assert pdf.startswith(b"%PDF")


def test_d3_consolidated_debts_follow_selected_period(snaps) -> None:
    old = {"id": "d0", "client": "Old", "productId": "p-straws", "amount": 800, "lastPaidAmount": 0,
           "createdAt": datetime(2020, 1, 1, 9, 0)}
    with_old = replace(snaps, debts=snaps.debts + (old,))
    data = build_consolidated_report_data(with_old, DateFilter("range", "2024-05-01", "2024-05-01"), CATS, NOW)
    assert [r.client for r in data.debts.categories[0].outstanding] == ["Bolt"]
    assert data.debts.categories[1].outstanding == ()


# ---------------------------------------------------------------------------
# Suite E – printed tables
# ---------------------------------------------------------------------------

def _amount(cell: str) -> float:
    return float(cell.replace(",", "")) if cell.strip() else 0.0


@pytest.mark.parametrize("render", ["debts", "expenses", "sales", "consolidated"])
def test_e1_total_row_matches_printed_rows(snaps, options, monkeypatch, render) -> None:
    """Every TOTAL cell equals the sum of the column cells printed above it."""
    printed = []
    original = layout_mod.build_table_rows

    def recording(columns, rows, totals=None):
        out = original(columns, rows, totals)
        printed.append(out)
        return out

    monkeypatch.setattr(layout_mod, "build_table_rows", recording)
    f = DateFilter()
    pdf = {
        "debts": lambda: render_debts_report(build_debts_report_data(snaps, f, CATS, NOW), options),
        "expenses": lambda: render_expenses_report(build_expenses_report_data(snaps, f, NOW), options),
        "sales": lambda: render_sales_report(build_sales_report_data(snaps, f, CATS, NOW), options),
        "consolidated": lambda: render_consolidated_report(
            build_consolidated_report_data(snaps, f, CATS, NOW), options
        ),
    }[render]()
    assert pdf.startswith(b"%PDF")

    checked = 0
    for table in printed:
        if not table or table[-1][0] != "TOTAL":
            continue
        *body, total = table
        for idx, cell in enumerate(total[1:], start=1):
            if not cell:
                continue
            assert _amount(cell) == pytest.approx(sum(_amount(row[idx]) for row in body))
            checked += 1
    assert checked > 0
