# bookkeeping/database/repositories/debts_repo.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from ...modules.reporting.aggregation import to_float
from ..document_store import DocumentStore

_log = logging.getLogger(__name__)


class DomainError(Exception):
    """Domain-level error raised for validation issues."""
    pass


class DebtsRepo:
    """Payments against open debts. Debts themselves are opened by SalesRepo."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def list_debts(self, user_id: str) -> List[dict]:
        return self.store.list(user_id, "debts")

    def list_open(self, user_id: str) -> List[dict]:
        return [d for d in self.list_debts(user_id) if to_float(d.get("amount")) > 0]

    def get(self, user_id: str, debt_id: str) -> Optional[dict]:
        return self.store.get(user_id, "debts", debt_id)

    def record_payment(self, user_id: str, debt_id: str, amount: float, now: Optional[datetime] = None) -> float:
        """
        Apply a payment; returns the remaining balance.

        lastPaidAmount/updatedAt are what the "paid today" tables read.
        """
        debt = self.get(user_id, debt_id)
        if debt is None:
            raise DomainError(f"Debt {debt_id} not found.")
        payment = to_float(amount)
        balance = to_float(debt.get("amount"))
        if payment <= 0:
            raise DomainError("Payment must be greater than zero.")
        if payment > balance:
            raise DomainError("Payment cannot exceed the outstanding balance.")

        remaining = balance - payment
        self.store.update(
            user_id,
            "debts",
            debt_id,
            {"amount": remaining, "lastPaidAmount": payment, "updatedAt": now or datetime.now()},
        )
        _log.info("Debts.payment id=%s paid=%s remaining=%s", debt_id, payment, remaining)
        return remaining

    def delete(self, user_id: str, debt_id: str) -> None:
        self.store.delete(user_id, "debts", debt_id)
