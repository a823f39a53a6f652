# bookkeeping/database/repositories/reference_repo.py
"""
Simple name-keyed reference entities: clients, products, categories and
bank deposits. No derived state; validation is limited to non-empty names
and non-negative amounts.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from ...modules.reporting.aggregation import to_float
from ..document_store import DocumentStore

NAMED_COLLECTIONS = ("clients", "products", "categories")


class DomainError(Exception):
    """Domain-level error raised for validation issues."""
    pass


class ReferenceRepo:
    def __init__(self, store: DocumentStore):
        self.store = store

    # ---------------- clients / products / categories ----------------

    def list(self, user_id: str, collection: str) -> List[dict]:
        self._check(collection)
        rows = self.store.list(user_id, collection)
        return sorted(rows, key=lambda r: str(r.get("name") or "").casefold())

    def create(self, user_id: str, collection: str, name: str, **extra: Any) -> str:
        self._check(collection)
        return self.store.add(user_id, collection, self._fields(name, extra))

    def update(self, user_id: str, collection: str, doc_id: str, name: str, **extra: Any) -> None:
        self._check(collection)
        if self.store.get(user_id, collection, doc_id) is None:
            raise DomainError(f"{collection[:-1].capitalize()} {doc_id} not found.")
        self.store.update(user_id, collection, doc_id, self._fields(name, extra))

    def delete(self, user_id: str, collection: str, doc_id: str) -> None:
        self._check(collection)
        self.store.delete(user_id, collection, doc_id)

    def find_by_name(self, user_id: str, collection: str, name: str) -> Optional[dict]:
        """Exact (case-sensitive) name lookup, first match."""
        self._check(collection)
        rows = self.store.query(user_id, collection, "name", name)
        return rows[0] if rows else None

    # ---------------- bank deposits ----------------

    def add_deposit(
        self,
        user_id: str,
        bank: str,
        amount: float,
        depositor: str = "",
        reference: str = "",
        date: Optional[datetime] = None,
    ) -> str:
        if not bank or not bank.strip():
            raise DomainError("Bank cannot be empty.")
        value = to_float(amount)
        if value <= 0:
            raise DomainError("Amount must be greater than zero.")
        return self.store.add(
            user_id,
            "bankDeposits",
            {
                "bank": bank.strip(),
                "amount": value,
                "depositor": depositor.strip(),
                "reference": reference.strip(),
                "date": date or datetime.now(),
            },
        )

    def delete_deposit(self, user_id: str, deposit_id: str) -> None:
        self.store.delete(user_id, "bankDeposits", deposit_id)

    # ---------------- helpers ----------------

    @staticmethod
    def _check(collection: str) -> None:
        if collection not in NAMED_COLLECTIONS:
            raise ValueError(f"Not a reference collection: {collection!r}")

    @staticmethod
    def _fields(name: str, extra: dict) -> dict:
        if not name or not name.strip():
            raise DomainError("Name cannot be empty.")
        fields = {"name": name.strip()}
        if "price" in extra:
            price = to_float(extra["price"])
            if price < 0:
                raise DomainError("Price cannot be negative.")
            extra = {**extra, "price": price}
        fields.update(extra)
        return fields
