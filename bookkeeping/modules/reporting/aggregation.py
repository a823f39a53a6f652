# bookkeeping/modules/reporting/aggregation.py
"""
Pure aggregation helpers over collection snapshots.

Nothing here touches the store, Qt or the clock except through an explicit
`now` argument. Malformed numbers count as 0 and malformed dates are
excluded; none of these functions raise on bad record data.

Record shapes (keys as stored):
  sale    {client, product{productId, quantity, unitPrice, discount, supplyType?},
           totalAmount, amountPaid, paymentStatus, date, createdAt, updatedAt}
  debt    {client, productId, amount, lastPaidAmount, saleId?, createdAt, updatedAt}
  expense {category, categoryId?, amount, description, payee, createdAt}
  supply  {productId, supplyType, quantity, date}
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ...utils.helpers import to_float, to_int
from .date_filter import DateFilter, coerce_datetime, filter_by_date, is_same_day

__all__ = [
    "to_float",
    "to_int",
    "get_path",
    "sum_field",
    "count",
    "highest",
    "oldest",
    "sale_total",
    "payment_status",
    "outstanding",
    "SalesTotals",
    "sales_totals",
    "product_index",
    "resolve_product",
    "sale_product_id",
    "debt_product_id",
    "records_for_product",
    "split_by_product",
    "CategorySalesSummary",
    "category_sales_summary",
    "normalize_supply_type",
    "SupplyRollupRow",
    "supply_type_rollup",
    "paid_today",
    "DebtSummaryMetrics",
    "debt_summary_metrics",
    "expense_category_name",
    "expenses_by_category",
    "QuickStats",
    "dashboard_quick_stats",
]

_log = logging.getLogger(__name__)

Record = Mapping[str, Any]
ProductIdOf = Callable[[Record], Any]

PAID, PARTIAL, UNPAID = "paid", "partial", "unpaid"


# ------------------------------ Generic -------------------------------------

def get_path(record: Optional[Record], path: str) -> Any:
    """Dotted lookup: get_path(sale, "product.quantity")."""
    cur: Any = record
    for part in path.split("."):
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(part)
    return cur


def sum_field(records: Iterable[Record], path: str) -> float:
    """
    Sum of a numeric field; non-numeric or missing values count as 0.

    math.fsum is exact-rounded, so the result does not depend on record order.
    """
    return math.fsum(to_float(get_path(r, path)) for r in records)


def count(records: Iterable[Record]) -> int:
    return sum(1 for _ in records)


def highest(records: Iterable[Record], path: str = "amount") -> Record:
    """
    Record with the largest `path` value. Ties keep the first one seen.
    Empty input (or nothing above zero) yields the sentinel {path: 0}.
    """
    best: Optional[Record] = None
    best_val = 0.0
    for r in records:
        v = to_float(get_path(r, path))
        if v > best_val:
            best, best_val = r, v
    return best if best is not None else {path: 0}


def oldest(records: Iterable[Record], path: str = "createdAt") -> Record:
    """
    Record with the earliest `path` date. Ties keep the first one seen;
    records without a usable date are skipped. Empty -> {path: None}.
    """
    best: Optional[Record] = None
    best_dt: Optional[datetime] = None
    for r in records:
        d = coerce_datetime(get_path(r, path))
        if d is None:
            continue
        if best_dt is None or d < best_dt:
            best, best_dt = r, d
    return best if best is not None else {path: None}


# ------------------------------ Sales ---------------------------------------

def sale_total(quantity: Any, unit_price: Any, discount: Any = 0) -> float:
    """totalAmount = quantity * unitPrice - discount."""
    return to_float(quantity) * to_float(unit_price) - to_float(discount)


def payment_status(amount_paid: Any, total_amount: Any) -> str:
    """
    Status rules:
      - 'paid'    if amount_paid >= total_amount
      - 'partial' if 0 < amount_paid < total_amount
      - 'unpaid'  otherwise (nothing paid)
    """
    paid = to_float(amount_paid)
    total = to_float(total_amount)
    if paid >= total:
        return PAID
    if paid > 0:
        return PARTIAL
    return UNPAID


def outstanding(sale: Record) -> float:
    """Outstanding balance of one sale: totalAmount - amountPaid."""
    return to_float(sale.get("totalAmount")) - to_float(sale.get("amountPaid"))


@dataclass(frozen=True)
class SalesTotals:
    total_sales: float = 0.0
    total_paid: float = 0.0
    total_quantity: int = 0
    total_discount: float = 0.0
    outstanding_balance: float = 0.0
    count: int = 0


def sales_totals(sales: Sequence[Record]) -> SalesTotals:
    return SalesTotals(
        total_sales=sum_field(sales, "totalAmount"),
        total_paid=sum_field(sales, "amountPaid"),
        total_quantity=sum(to_int(get_path(s, "product.quantity")) for s in sales),
        total_discount=sum_field(sales, "product.discount"),
        outstanding_balance=math.fsum(outstanding(s) for s in sales),
        count=len(sales),
    )


# ------------------------------ Products ------------------------------------

def product_index(products: Iterable[Record]) -> Dict[Any, Record]:
    """id -> product; the first product seen wins on duplicate ids."""
    idx: Dict[Any, Record] = {}
    for p in products:
        pid = p.get("id")
        if pid is not None and pid not in idx:
            idx[pid] = p
    return idx


def resolve_product(products: Iterable[Record] | Mapping[Any, Record], product_id: Any) -> Optional[Record]:
    idx = products if isinstance(products, dict) else product_index(products)
    return idx.get(product_id)


def sale_product_id(sale: Record) -> Any:
    return get_path(sale, "product.productId")


def debt_product_id(debt: Record) -> Any:
    return debt.get("productId")


def records_for_product(
    records: Iterable[Record],
    products: Iterable[Record] | Mapping[Any, Record],
    product_name: str,
    product_id_of: ProductIdOf = debt_product_id,
) -> List[Record]:
    """
    Records whose product resolves to a Product named exactly `product_name`
    (case-sensitive). Records pointing at a missing product are left out.
    """
    return split_by_product(records, products, (product_name,), product_id_of)[product_name]


def split_by_product(
    records: Iterable[Record],
    products: Iterable[Record] | Mapping[Any, Record],
    product_names: Sequence[str],
    product_id_of: ProductIdOf = debt_product_id,
) -> Dict[str, List[Record]]:
    """One bucket per product name, in the order given. Unresolved records are dropped."""
    idx = products if isinstance(products, dict) else product_index(products)
    buckets: Dict[str, List[Record]] = {name: [] for name in product_names}
    unresolved = 0
    for r in records:
        product = idx.get(product_id_of(r))
        if product is None:
            unresolved += 1
            continue
        name = product.get("name")
        if name in buckets:
            buckets[name].append(r)
    if unresolved:
        _log.warning(
            "Aggregation.unresolved_product records=%d excluded from product categories", unresolved
        )
    return buckets


@dataclass(frozen=True)
class CategorySalesSummary:
    product_name: str
    count: int = 0
    total_quantity: int = 0
    total_amount: float = 0.0
    total_paid: float = 0.0
    total_debt: float = 0.0


def category_sales_summary(
    sales: Sequence[Record],
    products: Iterable[Record] | Mapping[Any, Record],
    product_names: Sequence[str],
) -> List[CategorySalesSummary]:
    buckets = split_by_product(sales, products, product_names, sale_product_id)
    out: List[CategorySalesSummary] = []
    for name in product_names:
        rows = buckets[name]
        totals = sales_totals(rows)
        out.append(
            CategorySalesSummary(
                product_name=name,
                count=len(rows),
                total_quantity=totals.total_quantity,
                total_amount=totals.total_sales,
                total_paid=totals.total_paid,
                total_debt=totals.outstanding_balance,
            )
        )
    return out


# ------------------------------ Supplies ------------------------------------

def supply_type_key(value: Any) -> str:
    return str(value or "").strip().lower()


def normalize_supply_type(value: Any) -> str:
    """
    Canonical display form of a supply type: compared case-insensitively,
    shown with each word capitalised and the rest lowercase
    ("KAVEERA" -> "Kaveera", "60S" -> "60s", "box p" -> "Box P").
    """
    words = supply_type_key(value).split()
    return " ".join(w[:1].upper() + w[1:] for w in words)


@dataclass(frozen=True)
class SupplyRollupRow:
    product_id: Any
    product_name: str
    supply_type: str
    total_supplied: int
    total_sold: int

    @property
    def balance(self) -> int:
        return self.total_supplied - self.total_sold


def supply_type_rollup(
    supplies: Iterable[Record],
    sales: Iterable[Record],
    products: Iterable[Record] | Mapping[Any, Record],
) -> List[SupplyRollupRow]:
    """
    Stock issued vs. sold per (product, supply type).

    Every supply type seen in either supplies or sales gets a row; rows with
    nothing supplied and nothing sold are dropped, as are rows whose product
    no longer resolves. Sorted by product name, then supply type.
    """
    idx = products if isinstance(products, dict) else product_index(products)
    supplied: Dict[Tuple[Any, str], int] = {}
    sold: Dict[Tuple[Any, str], int] = {}

    for s in supplies:
        key = supply_type_key(s.get("supplyType"))
        qty = to_int(s.get("quantity"))
        if not key or not qty:
            continue
        k = (s.get("productId"), key)
        supplied[k] = supplied.get(k, 0) + qty

    for sale in sales:
        key = supply_type_key(get_path(sale, "product.supplyType"))
        qty = to_int(get_path(sale, "product.quantity"))
        if not key or not qty:
            continue
        k = (sale_product_id(sale), key)
        sold[k] = sold.get(k, 0) + qty

    rows: List[SupplyRollupRow] = []
    for k in dict.fromkeys(list(supplied) + list(sold)):
        pid, key = k
        product = idx.get(pid)
        if product is None:
            continue
        row = SupplyRollupRow(
            product_id=pid,
            product_name=str(product.get("name") or ""),
            supply_type=normalize_supply_type(key),
            total_supplied=supplied.get(k, 0),
            total_sold=sold.get(k, 0),
        )
        if row.total_supplied == 0 and row.total_sold == 0:
            continue
        rows.append(row)

    rows.sort(key=lambda r: (r.product_name.casefold(), r.supply_type.casefold(), r.product_name, r.supply_type))
    return rows


# ------------------------------ Debts ---------------------------------------

def paid_today(debts: Iterable[Record], now: Optional[datetime] = None) -> List[Record]:
    """Debts with a payment recorded today (lastPaidAmount > 0, updatedAt today)."""
    return [
        d for d in debts
        if to_float(d.get("lastPaidAmount")) > 0 and is_same_day(d.get("updatedAt"), now)
    ]


@dataclass(frozen=True)
class DebtSummaryMetrics:
    total_debts: int = 0
    active_debts: int = 0
    paid_debts: int = 0
    total_amount_owed: float = 0.0
    highest: Optional[Record] = None
    oldest: Optional[Record] = None
    days_since_oldest: int = 0
    paid_today: Dict[str, Tuple[int, float]] = field(default_factory=dict)


def debt_summary_metrics(
    debts: Sequence[Record],
    products: Iterable[Record] | Mapping[Any, Record],
    product_names: Sequence[str],
    now: Optional[datetime] = None,
) -> DebtSummaryMetrics:
    """Dashboard cards for the debts page."""
    now = now or datetime.now()
    active = [d for d in debts if to_float(d.get("amount")) > 0]
    settled = [d for d in debts if to_float(d.get("amount")) == 0]

    top = highest(active, "amount") if active else None
    first = oldest(active, "createdAt") if active else None
    if first is not None and first.get("createdAt") is None:
        first = None
    days = 0
    if first is not None:
        days = (now - coerce_datetime(first.get("createdAt"))).days

    buckets = split_by_product(debts, products, product_names, debt_product_id)
    today_totals: Dict[str, Tuple[int, float]] = {}
    for name in product_names:
        rows = paid_today(buckets[name], now)
        today_totals[name] = (len(rows), sum_field(rows, "lastPaidAmount"))

    return DebtSummaryMetrics(
        total_debts=len(debts),
        active_debts=len(active),
        paid_debts=len(settled),
        total_amount_owed=sum_field(active, "amount"),
        highest=top,
        oldest=first,
        days_since_oldest=max(days, 0),
        paid_today=today_totals,
    )


# ------------------------------ Expenses ------------------------------------

def expense_category_name(expense: Record, categories: Mapping[Any, Record] | None = None) -> str:
    """Category name via categoryId when it resolves, else the stored name."""
    if categories:
        cat = categories.get(expense.get("categoryId"))
        if cat is not None and cat.get("name"):
            return str(cat["name"])
    name = expense.get("category")
    return str(name) if name else "Unknown"


def expenses_by_category(
    expenses: Iterable[Record],
    categories: Iterable[Record] | None = None,
) -> List[Tuple[str, float]]:
    """(category, total) pairs sorted by category name (case-insensitive)."""
    idx = product_index(categories or ())
    totals: Dict[str, List[float]] = {}
    for e in expenses:
        totals.setdefault(expense_category_name(e, idx), []).append(to_float(e.get("amount")))
    return sorted(((k, math.fsum(v)) for k, v in totals.items()), key=lambda kv: (kv[0].casefold(), kv[0]))


# ------------------------------ Dashboard -----------------------------------

@dataclass(frozen=True)
class QuickStats:
    total_sales: float = 0.0
    total_paid: float = 0.0
    total_debts: float = 0.0
    total_expenses: float = 0.0
    sales_count: int = 0
    debts_count: int = 0
    expenses_count: int = 0
    expenses_by_category: Tuple[Tuple[str, float], ...] = ()

    @property
    def balance(self) -> float:
        return self.total_paid - self.total_expenses


def dashboard_quick_stats(
    sales: Iterable[Record],
    debts: Iterable[Record],
    expenses: Iterable[Record],
    now: Optional[datetime] = None,
) -> QuickStats:
    """Today's figures, all keyed on createdAt."""
    today = DateFilter("today")
    t_sales = filter_by_date(sales, today, "createdAt", now)
    t_debts = filter_by_date(debts, today, "createdAt", now)
    t_expenses = filter_by_date(expenses, today, "createdAt", now)
    return QuickStats(
        total_sales=sum_field(t_sales, "totalAmount"),
        total_paid=sum_field(t_sales, "amountPaid"),
        total_debts=sum_field(t_debts, "amount"),
        total_expenses=sum_field(t_expenses, "amount"),
        sales_count=len(t_sales),
        debts_count=len(t_debts),
        expenses_count=len(t_expenses),
        expenses_by_category=tuple(expenses_by_category(t_expenses)),
    )
