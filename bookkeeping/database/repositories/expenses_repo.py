# bookkeeping/database/repositories/expenses_repo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ...modules.reporting.aggregation import to_float
from ..document_store import DocumentStore


class DomainError(Exception):
    """Domain-level error raised for validation issues."""
    pass


@dataclass
class ExpenseInput:
    category: str
    amount: float
    description: str = ""
    payee: str = ""
    category_id: Optional[str] = None
    created_at: Optional[datetime] = None


class ExpensesRepo:
    """
    CRUD for the `expenses` collection.

    The category name is stored on the expense as typed; categoryId, when
    present, points at the `categories` collection and wins at report time.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def list_expenses(self, user_id: str) -> List[dict]:
        return self.store.list(user_id, "expenses")

    def create(self, user_id: str, data: ExpenseInput) -> str:
        return self.store.add(user_id, "expenses", self._fields(data))

    def update(self, user_id: str, expense_id: str, data: ExpenseInput) -> None:
        if self.store.get(user_id, "expenses", expense_id) is None:
            raise DomainError(f"Expense {expense_id} not found.")
        self.store.update(user_id, "expenses", expense_id, self._fields(data))

    def delete(self, user_id: str, expense_id: str) -> None:
        self.store.delete(user_id, "expenses", expense_id)

    @staticmethod
    def _fields(data: ExpenseInput) -> dict:
        category = (data.category or "").strip()
        if not category:
            raise DomainError("Category cannot be empty.")
        amount = to_float(data.amount)
        if amount <= 0:
            raise DomainError("Amount must be greater than zero.")
        fields = {
            "category": category,
            "amount": amount,
            "description": (data.description or "").strip(),
            "payee": (data.payee or "").strip(),
            "createdAt": data.created_at or datetime.now(),
        }
        if data.category_id:
            fields["categoryId"] = data.category_id
        return fields
