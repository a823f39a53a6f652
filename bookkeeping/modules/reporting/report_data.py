# bookkeeping/modules/reporting/report_data.py
"""
Report data builders.

Each builder takes a Snapshots bundle plus a DateFilter and returns a frozen
dataclass holding raw values (numbers, datetimes). Formatting to strings is
left to the renderers, so the same data can feed a PDF and a test assertion.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence, Tuple

from ...constants import DATE_FIELDS, DEFAULT_PRODUCT_CATEGORIES
from ...database.snapshots import Snapshots
from .aggregation import (
    SalesTotals,
    SupplyRollupRow,
    debt_product_id,
    expense_category_name,
    expenses_by_category,
    get_path,
    highest,
    normalize_supply_type,
    oldest,
    outstanding,
    paid_today,
    payment_status,
    product_index,
    sale_product_id,
    sales_totals,
    split_by_product,
    sum_field,
    supply_type_rollup,
    to_float,
    to_int,
)
from .date_filter import DateFilter, coerce_datetime, filter_by_date

Record = Mapping[str, Any]


# ------------------------------ Rows ----------------------------------------

@dataclass(frozen=True)
class DebtRow:
    client: str
    amount: float
    last_paid: float
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_record(cls, debt: Record) -> "DebtRow":
        return cls(
            client=str(debt.get("client") or "-"),
            amount=to_float(debt.get("amount")),
            last_paid=to_float(debt.get("lastPaidAmount")),
            created_at=coerce_datetime(debt.get("createdAt")),
            updated_at=coerce_datetime(debt.get("updatedAt")),
        )


@dataclass(frozen=True)
class ExpenseRow:
    category: str
    amount: float
    description: str
    payee: str
    created_at: Optional[datetime]


@dataclass(frozen=True)
class SaleRow:
    client: str
    product_name: str
    supply_type: str
    quantity: int
    unit_price: float
    discount: float
    total: float
    paid: float
    balance: float
    status: str
    date: Optional[datetime]


@dataclass(frozen=True)
class DepositRow:
    bank: str
    depositor: str
    reference: str
    amount: float
    date: Optional[datetime]


# ------------------------------ Reports -------------------------------------

@dataclass(frozen=True)
class ProductDebts:
    product_name: str
    outstanding: Tuple[DebtRow, ...] = ()
    paid_today: Tuple[DebtRow, ...] = ()
    total_outstanding: float = 0.0
    total_paid_today: float = 0.0
    highest: Optional[DebtRow] = None
    oldest: Optional[DebtRow] = None


@dataclass(frozen=True)
class DebtsReportData:
    generated_at: datetime
    period_label: str = "All Time"
    categories: Tuple[ProductDebts, ...] = ()

    @property
    def total_outstanding(self) -> float:
        return sum(c.total_outstanding for c in self.categories)


@dataclass(frozen=True)
class ExpensesReportData:
    generated_at: datetime
    period_label: str
    rows: Tuple[ExpenseRow, ...] = ()
    total: float = 0.0
    highest: Optional[ExpenseRow] = None
    oldest: Optional[ExpenseRow] = None
    by_category: Tuple[Tuple[str, float], ...] = ()


@dataclass(frozen=True)
class ProductSales:
    product_name: str
    rows: Tuple[SaleRow, ...] = ()
    totals: SalesTotals = field(default_factory=SalesTotals)


@dataclass(frozen=True)
class SalesReportData:
    generated_at: datetime
    period_label: str
    totals: SalesTotals = field(default_factory=SalesTotals)
    categories: Tuple[ProductSales, ...] = ()
    supplies: Tuple[SupplyRollupRow, ...] = ()


@dataclass(frozen=True)
class ConsolidatedReportData:
    generated_at: datetime
    period_label: str
    sales: SalesReportData
    expenses: ExpensesReportData
    debts: DebtsReportData
    deposits: Tuple[DepositRow, ...] = ()
    total_deposits: float = 0.0

    @property
    def net_balance(self) -> float:
        """Cash collected on sales minus expenses for the period."""
        return self.sales.totals.total_paid - self.expenses.total


# ------------------------------ Builders ------------------------------------

def build_debts_report_data(
    snaps: Snapshots,
    date_filter: Optional[DateFilter] = None,
    product_names: Sequence[str] = DEFAULT_PRODUCT_CATEGORIES,
    now: Optional[datetime] = None,
) -> DebtsReportData:
    """
    Outstanding balances per product category for debts opened in the period
    (keyed on `createdAt`); no filter means every debt. "Paid today" is always
    relative to `now`, whatever the period.
    """
    now = now or datetime.now()
    date_filter = date_filter or DateFilter("all")
    debts_in_period = filter_by_date(snaps.debts, date_filter, DATE_FIELDS["debts"], now)
    buckets = split_by_product(debts_in_period, product_index(snaps.products), product_names, debt_product_id)

    categories = []
    for name in product_names:
        debts = buckets[name]
        open_debts = [d for d in debts if to_float(d.get("amount")) > 0]
        today = paid_today(debts, now)
        ordered = sorted(open_debts, key=lambda d: to_float(d.get("amount")), reverse=True)

        top = highest(open_debts, "amount")
        first = oldest(open_debts, "createdAt")
        categories.append(
            ProductDebts(
                product_name=name,
                outstanding=tuple(DebtRow.from_record(d) for d in ordered),
                paid_today=tuple(DebtRow.from_record(d) for d in today),
                total_outstanding=sum_field(open_debts, "amount"),
                total_paid_today=sum_field(today, "lastPaidAmount"),
                highest=DebtRow.from_record(top) if to_float(top.get("amount")) > 0 else None,
                oldest=DebtRow.from_record(first) if first.get("createdAt") is not None else None,
            )
        )
    return DebtsReportData(generated_at=now, period_label=date_filter.label(), categories=tuple(categories))


def _expense_row(expense: Record, categories: Mapping[Any, Record]) -> ExpenseRow:
    return ExpenseRow(
        category=expense_category_name(expense, categories),
        amount=to_float(expense.get("amount")),
        description=str(expense.get("description") or "-"),
        payee=str(expense.get("payee") or "-"),
        created_at=coerce_datetime(expense.get("createdAt")),
    )


def build_expenses_report_data(
    snaps: Snapshots,
    date_filter: DateFilter,
    now: Optional[datetime] = None,
) -> ExpensesReportData:
    now = now or datetime.now()
    expenses = filter_by_date(snaps.expenses, date_filter, DATE_FIELDS["expenses"], now)
    cats = product_index(snaps.categories)

    top = highest(expenses, "amount")
    first = oldest(expenses, "createdAt")
    ordered = sorted(expenses, key=lambda e: to_float(e.get("amount")), reverse=True)
    return ExpensesReportData(
        generated_at=now,
        period_label=date_filter.label(),
        rows=tuple(_expense_row(e, cats) for e in ordered),
        total=sum_field(expenses, "amount"),
        highest=_expense_row(top, cats) if to_float(top.get("amount")) > 0 else None,
        oldest=_expense_row(first, cats) if first.get("createdAt") is not None else None,
        by_category=tuple(expenses_by_category(expenses, snaps.categories)),
    )


def _sale_row(sale: Record, product_name: str) -> SaleRow:
    total = to_float(sale.get("totalAmount"))
    paid = to_float(sale.get("amountPaid"))
    return SaleRow(
        client=str(sale.get("client") or "-"),
        product_name=product_name,
        supply_type=normalize_supply_type(get_path(sale, "product.supplyType")) or "-",
        quantity=to_int(get_path(sale, "product.quantity")),
        unit_price=to_float(get_path(sale, "product.unitPrice")),
        discount=to_float(get_path(sale, "product.discount")),
        total=total,
        paid=paid,
        balance=outstanding(sale),
        # derived, not trusted from the stored field
        status=payment_status(paid, total),
        date=coerce_datetime(sale.get(DATE_FIELDS["sales"])),
    )


def build_sales_report_data(
    snaps: Snapshots,
    date_filter: DateFilter,
    product_names: Sequence[str] = DEFAULT_PRODUCT_CATEGORIES,
    now: Optional[datetime] = None,
) -> SalesReportData:
    now = now or datetime.now()
    sales = filter_by_date(snaps.sales, date_filter, DATE_FIELDS["sales"], now)
    supplies = filter_by_date(snaps.supplies, date_filter, DATE_FIELDS["supplies"], now)
    products = product_index(snaps.products)

    buckets = split_by_product(sales, products, product_names, sale_product_id)
    categories = []
    for name in product_names:
        rows = sorted(
            buckets[name],
            key=lambda s: coerce_datetime(s.get(DATE_FIELDS["sales"])) or datetime.min,
            reverse=True,
        )
        categories.append(
            ProductSales(
                product_name=name,
                rows=tuple(_sale_row(s, name) for s in rows),
                totals=sales_totals(rows),
            )
        )

    return SalesReportData(
        generated_at=now,
        period_label=date_filter.label(),
        totals=sales_totals(sales),
        categories=tuple(categories),
        supplies=tuple(supply_type_rollup(supplies, sales, products)),
    )


def build_consolidated_report_data(
    snaps: Snapshots,
    date_filter: DateFilter,
    product_names: Sequence[str] = DEFAULT_PRODUCT_CATEGORIES,
    now: Optional[datetime] = None,
) -> ConsolidatedReportData:
    now = now or datetime.now()
    deposits = filter_by_date(snaps.bankDeposits, date_filter, DATE_FIELDS["bankDeposits"], now)
    deposit_rows = tuple(
        DepositRow(
            bank=str(d.get("bank") or d.get("bankName") or "-"),
            depositor=str(d.get("depositor") or "-"),
            reference=str(d.get("reference") or "-"),
            amount=to_float(d.get("amount")),
            date=coerce_datetime(d.get(DATE_FIELDS["bankDeposits"])),
        )
        for d in deposits
    )
    return ConsolidatedReportData(
        generated_at=now,
        period_label=date_filter.label(),
        sales=build_sales_report_data(snaps, date_filter, product_names, now),
        expenses=build_expenses_report_data(snaps, date_filter, now),
        debts=build_debts_report_data(snaps, date_filter, product_names, now),
        deposits=deposit_rows,
        total_deposits=sum_field(deposits, "amount"),
    )
