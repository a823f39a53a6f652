# bookkeeping/database/repositories/supplies_repo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ..document_store import DocumentStore


class DomainError(Exception):
    """Domain-level error raised for validation issues."""
    pass


@dataclass
class SupplyInput:
    product_id: str
    supply_type: str
    quantity: int
    date: Optional[datetime] = None


class SuppliesRepo:
    """Stock issued to sellers. supplyType is kept as typed; reports compare it case-insensitively."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def list_supplies(self, user_id: str) -> List[dict]:
        return self.store.list(user_id, "supplies")

    def create(self, user_id: str, data: SupplyInput) -> str:
        if not data.product_id:
            raise DomainError("Product is required.")
        supply_type = (data.supply_type or "").strip()
        if not supply_type:
            raise DomainError("Supply type cannot be empty.")
        try:
            quantity = int(data.quantity)
        except (TypeError, ValueError):
            raise DomainError("Quantity must be a whole number.")
        if quantity < 0:
            raise DomainError("Quantity cannot be negative.")
        return self.store.add(
            user_id,
            "supplies",
            {
                "productId": data.product_id,
                "supplyType": supply_type,
                "quantity": quantity,
                "date": data.date or datetime.now(),
            },
        )

    def delete(self, user_id: str, supply_id: str) -> None:
        self.store.delete(user_id, "supplies", supply_id)
