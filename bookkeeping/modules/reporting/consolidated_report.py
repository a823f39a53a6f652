# bookkeeping/modules/reporting/consolidated_report.py
"""One document covering sales, supplies, debts, expenses and bank deposits for a period."""
from __future__ import annotations

from ...constants import CURRENCY
from ...utils.helpers import fmt_amount, fmt_date
from . import debts_report, expenses_report, sales_report
from .layout import COMPACT_FONTS, Column, ReportOptions, SummaryItem, accent_for, approval, open_layout
from .report_data import ConsolidatedReportData

REPORT_NAME = "Consolidated"
SUBJECT = "Consolidated"

CATEGORY_SALES_COLUMNS = (
    Column("PRODUCT", 1.4),
    Column("SALES", 0.7, "RIGHT"),
    Column("QTY", 0.7, "RIGHT"),
    Column(f"TOTAL ({CURRENCY})", 1.1, "RIGHT"),
    Column(f"PAID ({CURRENCY})", 1.1, "RIGHT"),
    Column(f"DEBT ({CURRENCY})", 1.1, "RIGHT"),
)
DEPOSIT_COLUMNS = (
    Column("BANK", 1.2),
    Column("DEPOSITOR", 1.2),
    Column("REFERENCE", 1.0),
    Column(f"AMOUNT ({CURRENCY})", 1.0, "RIGHT"),
    Column("DATE", 0.9),
)


def render_consolidated_report(data: ConsolidatedReportData, options: ReportOptions) -> bytes:
    layout = open_layout(options, REPORT_NAME)
    sales = data.sales

    layout.card(
        "CONSOLIDATED REPORT",
        [
            ("Generated:", f"{data.generated_at:%b %d, %Y at %H:%M}"),
            ("Period:", data.period_label),
        ],
        badge="ALL",
    )
    layout.summary_card(
        "FINANCIAL OVERVIEW",
        [
            [
                SummaryItem("Total Sales:", f"{fmt_amount(sales.totals.total_sales)} {CURRENCY}",
                            color="primary", bold_value=True),
                SummaryItem("Amount Paid:", f"{fmt_amount(sales.totals.total_paid)} {CURRENCY}",
                            color="toilet_paper", bold_value=True),
                SummaryItem("Total Expenses:", f"{fmt_amount(data.expenses.total)} {CURRENCY}",
                            color="expenses", bold_value=True),
            ],
            [
                SummaryItem("Net Balance:", f"{fmt_amount(data.net_balance)} {CURRENCY}",
                            color="primary", bold_value=True),
                SummaryItem("Bank Deposits:", f"{fmt_amount(data.total_deposits)} {CURRENCY}"),
                SummaryItem("Outstanding Debts:", f"{fmt_amount(data.debts.total_outstanding)} {CURRENCY}",
                            color="expenses"),
            ],
        ],
    )

    layout.table(
        "Sales by Product",
        CATEGORY_SALES_COLUMNS,
        [
            (
                cat.product_name,
                str(cat.totals.count),
                fmt_amount(cat.totals.total_quantity),
                fmt_amount(cat.totals.total_sales),
                fmt_amount(cat.totals.total_paid),
                fmt_amount(cat.totals.outstanding_balance),
            )
            for cat in sales.categories
            if cat.totals.count
        ],
        totals={
            1: sum(c.totals.count for c in sales.categories),
            2: sum(c.totals.total_quantity for c in sales.categories),
            3: sum(c.totals.total_sales for c in sales.categories),
            4: sum(c.totals.total_paid for c in sales.categories),
            5: sum(c.totals.outstanding_balance for c in sales.categories),
        },
        fonts=COMPACT_FONTS,
    )
    sales_report.supplies_table(layout, sales.supplies)

    layout.summary_card(
        "DEBT SUMMARY",
        [debts_report.summary_items(cat) for cat in data.debts.categories],
        accent="expenses",
    )
    for cat in data.debts.categories:
        layout.table(
            f"Outstanding {cat.product_name} Debts",
            debts_report.OUTSTANDING_COLUMNS,
            [(d.client, fmt_amount(d.amount), fmt_date(d.updated_at)) for d in cat.outstanding],
            accent=accent_for(cat.product_name),
            totals={1: cat.total_outstanding},
        )

    layout.table(
        "Expenses by Category",
        expenses_report.CATEGORY_COLUMNS,
        [(name, fmt_amount(total)) for name, total in data.expenses.by_category],
        accent="expenses",
        totals={1: data.expenses.total},
    )
    layout.table(
        "Bank Deposits",
        DEPOSIT_COLUMNS,
        [(d.bank, d.depositor, d.reference, fmt_amount(d.amount), fmt_date(d.date)) for d in data.deposits],
        totals={3: data.total_deposits},
        fonts=COMPACT_FONTS,
    )

    approval(layout, options, data.generated_at)
    return layout.finish()
