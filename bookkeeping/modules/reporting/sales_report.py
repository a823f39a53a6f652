# bookkeeping/modules/reporting/sales_report.py
from __future__ import annotations

from typing import List, Sequence

from ...constants import CURRENCY
from ...utils.helpers import fmt_amount, fmt_date
from .aggregation import SupplyRollupRow
from .layout import COMPACT_FONTS, Column, ReportLayout, ReportOptions, SummaryItem, accent_for, approval, open_layout
from .report_data import SalesReportData

REPORT_NAME = "Sales"
SUBJECT = "Sales"

SALE_COLUMNS = (
    Column("CLIENT", 1.5),
    Column("TYPE", 0.9),
    Column("QTY", 0.6, "RIGHT"),
    Column(f"TOTAL ({CURRENCY})", 1.1, "RIGHT"),
    Column(f"PAID ({CURRENCY})", 1.1, "RIGHT"),
    Column(f"BALANCE ({CURRENCY})", 1.1, "RIGHT"),
    Column("STATUS", 0.8),
    Column("DATE", 1.0),
)
SUPPLY_COLUMNS = (
    Column("PRODUCT", 1.3),
    Column("SUPPLY TYPE", 1.2),
    Column("TAKEN", 0.8, "RIGHT"),
    Column("SOLD", 0.8, "RIGHT"),
    Column("BALANCE", 0.8, "RIGHT"),
)


def summary_items(data: SalesReportData) -> List[List[SummaryItem]]:
    t = data.totals
    return [
        [
            SummaryItem("Total Sales:", f"{fmt_amount(t.total_sales)} {CURRENCY}", color="primary", bold_value=True),
            SummaryItem("Amount Paid:", f"{fmt_amount(t.total_paid)} {CURRENCY}", color="toilet_paper", bold_value=True),
            SummaryItem("Outstanding Balance:", f"{fmt_amount(t.outstanding_balance)} {CURRENCY}",
                        color="expenses", bold_value=True),
        ],
        [
            SummaryItem("Number of Sales:", str(t.count)),
            SummaryItem("Quantity Sold:", fmt_amount(t.total_quantity)),
            SummaryItem("Discounts Given:", f"{fmt_amount(t.total_discount)} {CURRENCY}"),
        ],
    ]


def supplies_table(layout: ReportLayout, rows: Sequence[SupplyRollupRow]) -> float:
    """Stock taken vs. sold per product and supply type."""
    return layout.table(
        "Supplies Summary",
        SUPPLY_COLUMNS,
        [
            (r.product_name, r.supply_type, fmt_amount(r.total_supplied), fmt_amount(r.total_sold), fmt_amount(r.balance))
            for r in rows
        ],
        totals={
            2: sum(r.total_supplied for r in rows),
            3: sum(r.total_sold for r in rows),
            4: sum(r.balance for r in rows),
        },
    )


def render_sales_report(data: SalesReportData, options: ReportOptions) -> bytes:
    layout = open_layout(options, REPORT_NAME)

    layout.card(
        "SALES REPORT",
        [
            ("Generated:", f"{data.generated_at:%b %d, %Y at %H:%M}"),
            ("Period:", data.period_label),
        ],
        badge="SALES",
    )
    layout.summary_card("SALES SUMMARY", summary_items(data))

    for cat in data.categories:
        layout.table(
            f"{cat.product_name} Sales",
            SALE_COLUMNS,
            [
                (
                    s.client,
                    s.supply_type,
                    fmt_amount(s.quantity),
                    fmt_amount(s.total),
                    fmt_amount(s.paid),
                    fmt_amount(s.balance),
                    s.status.capitalize(),
                    fmt_date(s.date),
                )
                for s in cat.rows
            ],
            accent=accent_for(cat.product_name),
            totals={
                2: cat.totals.total_quantity,
                3: cat.totals.total_sales,
                4: cat.totals.total_paid,
                5: cat.totals.outstanding_balance,
            },
            fonts=COMPACT_FONTS,
        )

    supplies_table(layout, data.supplies)
    approval(layout, options, data.generated_at)
    return layout.finish()
