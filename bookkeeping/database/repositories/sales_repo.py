# bookkeeping/database/repositories/sales_repo.py
"""
Sales and the debts they open.

A sale stores its derived figures (totalAmount, paymentStatus) next to the
inputs. Whenever a sale is written, the debts carrying its saleId are
replaced: at most one open debt per sale, holding totalAmount - amountPaid.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ...modules.reporting.aggregation import payment_status, sale_total, to_float
from ..document_store import DocumentStore

_log = logging.getLogger(__name__)


class DomainError(Exception):
    """Domain-level error raised for validation issues."""
    pass


@dataclass
class SaleInput:
    client: str
    product_id: str
    quantity: int
    unit_price: float
    discount: float = 0.0
    amount_paid: float = 0.0
    supply_type: Optional[str] = None
    date: Optional[datetime] = None
    fully_paid: bool = False


class SalesRepo:
    """
    Write-side handler for the `sales` collection.

    Debt bookkeeping rules:
      - create: a debt is opened when amountPaid < totalAmount
      - update: existing debts for the sale are dropped, then re-opened if needed
      - delete: the sale's debts are deleted with it
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------

    def list_sales(self, user_id: str) -> List[dict]:
        return self.store.list(user_id, "sales")

    def get(self, user_id: str, sale_id: str) -> Optional[dict]:
        return self.store.get(user_id, "sales", sale_id)

    def debts_for_sale(self, user_id: str, sale_id: str) -> List[dict]:
        return self.store.query(user_id, "debts", "saleId", sale_id)

    # ---------------------------------------------------------------------
    # WRITE
    # ---------------------------------------------------------------------

    def create_sale(self, user_id: str, data: SaleInput, now: Optional[datetime] = None) -> str:
        now = now or datetime.now()
        fields = self._build(data, now)
        fields["createdAt"] = now
        sale_id = self.store.add(user_id, "sales", fields)
        self._sync_debt(user_id, sale_id, fields, now)
        _log.info("Sales.created id=%s total=%s status=%s", sale_id, fields["totalAmount"], fields["paymentStatus"])
        return sale_id

    def update_sale(self, user_id: str, sale_id: str, data: SaleInput, now: Optional[datetime] = None) -> None:
        now = now or datetime.now()
        current = self.get(user_id, sale_id)
        if current is None:
            raise DomainError(f"Sale {sale_id} not found.")
        fields = self._build(data, now)
        fields["createdAt"] = current.get("createdAt") or now
        self.store.set(user_id, "sales", sale_id, fields)
        self._sync_debt(user_id, sale_id, fields, now)

    def mark_fully_paid(self, user_id: str, sale_id: str, now: Optional[datetime] = None) -> None:
        """The "fully paid" toggle: amountPaid := totalAmount, debt cleared."""
        now = now or datetime.now()
        current = self.get(user_id, sale_id)
        if current is None:
            raise DomainError(f"Sale {sale_id} not found.")
        total = to_float(current.get("totalAmount"))
        self.store.update(
            user_id,
            "sales",
            sale_id,
            {"amountPaid": total, "paymentStatus": payment_status(total, total), "updatedAt": now},
        )
        current.update(amountPaid=total)
        self._sync_debt(user_id, sale_id, current, now)

    def delete_sale(self, user_id: str, sale_id: str) -> int:
        """Delete the sale and every debt it opened. Returns the number of debts removed."""
        debts = self.debts_for_sale(user_id, sale_id)
        for debt in debts:
            self.store.delete(user_id, "debts", debt["id"])
        self.store.delete(user_id, "sales", sale_id)
        _log.info("Sales.deleted id=%s debts=%d", sale_id, len(debts))
        return len(debts)

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------

    @staticmethod
    def _build(data: SaleInput, now: datetime) -> dict:
        client = (data.client or "").strip()
        if not client:
            raise DomainError("Client is required.")
        if not data.product_id:
            raise DomainError("Product is required.")
        try:
            quantity = int(data.quantity)
        except (TypeError, ValueError):
            raise DomainError("Quantity must be a whole number.")
        if quantity <= 0:
            raise DomainError("Quantity must be greater than zero.")
        unit_price = to_float(data.unit_price)
        discount = to_float(data.discount)
        if unit_price < 0:
            raise DomainError("Unit price cannot be negative.")
        if discount < 0:
            raise DomainError("Discount cannot be negative.")
        if discount > quantity * unit_price:
            raise DomainError("Discount cannot exceed the sale subtotal.")

        total = sale_total(quantity, unit_price, discount)
        paid = total if data.fully_paid else to_float(data.amount_paid)
        if paid < 0:
            raise DomainError("Amount paid cannot be negative.")
        if paid > total:
            raise DomainError("Amount paid cannot exceed the total amount.")

        product = {
            "productId": data.product_id,
            "quantity": quantity,
            "unitPrice": unit_price,
            "discount": discount,
        }
        if data.supply_type and data.supply_type.strip():
            product["supplyType"] = data.supply_type.strip()

        return {
            "client": client,
            "product": product,
            "totalAmount": total,
            "amountPaid": paid,
            "paymentStatus": payment_status(paid, total),
            "date": data.date or now,
            "updatedAt": now,
        }

    def _sync_debt(self, user_id: str, sale_id: str, sale: dict, now: datetime) -> Optional[str]:
        for debt in self.debts_for_sale(user_id, sale_id):
            self.store.delete(user_id, "debts", debt["id"])

        balance = to_float(sale.get("totalAmount")) - to_float(sale.get("amountPaid"))
        if balance <= 0:
            return None
        return self.store.add(
            user_id,
            "debts",
            {
                "client": sale.get("client"),
                "productId": (sale.get("product") or {}).get("productId"),
                "amount": balance,
                "lastPaidAmount": 0,
                "saleId": sale_id,
                "createdAt": now,
                "updatedAt": now,
            },
        )
