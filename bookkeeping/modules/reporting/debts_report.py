# bookkeeping/modules/reporting/debts_report.py
from __future__ import annotations

import math
from typing import List

from ...constants import CURRENCY
from ...utils.helpers import fmt_amount, fmt_date
from .layout import Column, ReportOptions, SummaryItem, accent_for, approval, open_layout
from .report_data import DebtRow, DebtsReportData, ProductDebts

REPORT_NAME = "Debts"
SUBJECT = "Outstanding Debts"

PAID_TODAY_COLUMNS = (
    Column("CLIENT", 1.2),
    Column(f"AMOUNT PAID TODAY ({CURRENCY})", 1.0, "RIGHT"),
    Column(f"BALANCE LEFT ({CURRENCY})", 1.0, "RIGHT"),
)
OUTSTANDING_COLUMNS = (
    Column("CLIENT", 1.4),
    Column(f"DEBTS ({CURRENCY})", 1.0, "RIGHT"),
    Column("UPDATED", 0.9),
)


def _highest_text(row: DebtRow | None) -> str:
    if row is None:
        return "N/A"
    return f"{fmt_amount(row.amount)} {CURRENCY} ({row.client})"


def _oldest_text(row: DebtRow | None) -> str:
    if row is None:
        return "N/A"
    return f"{fmt_date(row.created_at)} ({row.client})"


def summary_items(cat: ProductDebts) -> List[SummaryItem]:
    return [
        SummaryItem(f"{cat.product_name} Total Outstanding:", f"{fmt_amount(cat.total_outstanding)} {CURRENCY}",
                    color="expenses", bold_value=True),
        SummaryItem(f"Highest {cat.product_name} Debt:", _highest_text(cat.highest)),
        SummaryItem(f"Oldest {cat.product_name} Debt:", _oldest_text(cat.oldest)),
    ]


def render_debts_report(data: DebtsReportData, options: ReportOptions) -> bytes:
    """Outstanding balances per product category, plus payments received today."""
    layout = open_layout(options, REPORT_NAME)

    layout.card(
        "OUTSTANDING DEBTS REPORT",
        [
            ("Generated:", f"{data.generated_at:%b %d, %Y at %H:%M}"),
            ("Period:", data.period_label),
            ("Status:", "Current Outstanding Balances"),
        ],
        badge="DEBTS",
        height=70,
    )
    layout.summary_card(
        "DEBT SUMMARY",
        [summary_items(cat) for cat in data.categories],
        accent="expenses",
    )

    for cat in data.categories:
        layout.table(
            f"{cat.product_name} Debts Paid Today",
            PAID_TODAY_COLUMNS,
            [(d.client, fmt_amount(d.last_paid), fmt_amount(d.amount)) for d in cat.paid_today],
            accent=accent_for(cat.product_name),
            totals={1: cat.total_paid_today, 2: math.fsum(d.amount for d in cat.paid_today)},
        )

    for cat in data.categories:
        layout.table(
            f"Outstanding {cat.product_name} Debts",
            OUTSTANDING_COLUMNS,
            [(d.client, fmt_amount(d.amount), fmt_date(d.updated_at)) for d in cat.outstanding],
            accent=accent_for(cat.product_name),
            totals={1: cat.total_outstanding},
        )

    approval(layout, options, data.generated_at)
    return layout.finish()
