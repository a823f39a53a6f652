# bookkeeping/modules/reporting/expenses_report.py
from __future__ import annotations

from typing import List

from ...constants import CURRENCY
from ...utils.helpers import fmt_amount, fmt_date
from .layout import COMPACT_FONTS, Column, ReportOptions, SummaryItem, approval, open_layout
from .report_data import ExpensesReportData

REPORT_NAME = "Expenses"
SUBJECT = "Expenses"

EXPENSE_COLUMNS = (
    Column("CATEGORY", 1.1),
    Column(f"AMOUNT ({CURRENCY})", 1.0, "RIGHT"),
    Column("DESCRIPTION", 1.6),
    Column("PAYEE", 1.1),
    Column("DATE", 0.9),
)
CATEGORY_COLUMNS = (
    Column("CATEGORY", 2.0),
    Column(f"TOTAL ({CURRENCY})", 1.0, "RIGHT"),
)


def summary_items(data: ExpensesReportData) -> List[SummaryItem]:
    top, first = data.highest, data.oldest
    return [
        SummaryItem("Total Expenses:", f"{fmt_amount(data.total)} {CURRENCY}", color="expenses", bold_value=True),
        SummaryItem(
            "Highest Expense:",
            f"{fmt_amount(top.amount)} {CURRENCY} ({top.category})" if top else "N/A",
        ),
        SummaryItem(
            "Oldest Expense:",
            f"{fmt_date(first.created_at)} ({first.category})" if first else "N/A",
        ),
    ]


def render_expenses_report(data: ExpensesReportData, options: ReportOptions) -> bytes:
    layout = open_layout(options, REPORT_NAME)

    layout.card(
        "EXPENSES REPORT",
        [
            ("Generated:", f"{data.generated_at:%b %d, %Y at %H:%M}"),
            ("Period:", data.period_label),
        ],
        badge="EXPENSES",
    )
    layout.summary_card("EXPENSE SUMMARY", [summary_items(data)], accent="expenses")

    layout.table(
        "Expenses",
        EXPENSE_COLUMNS,
        [
            (e.category, fmt_amount(e.amount), e.description, e.payee, fmt_date(e.created_at))
            for e in data.rows
        ],
        accent="expenses",
        totals={1: data.total},
        fonts=COMPACT_FONTS,
    )
    layout.table(
        "Expenses by Category",
        CATEGORY_COLUMNS,
        [(name, fmt_amount(total)) for name, total in data.by_category],
        accent="expenses",
        totals={1: data.total},
    )

    approval(layout, options, data.generated_at)
    return layout.finish()
