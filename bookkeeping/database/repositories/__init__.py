# bookkeeping/database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from bookkeeping.database.repositories import (
        SalesRepo, SaleInput, SalesDomainError,
        DebtsRepo, DebtsDomainError,
        ExpensesRepo, ExpenseInput, ExpensesDomainError,
        SuppliesRepo, SupplyInput, SuppliesDomainError,
        ReferenceRepo, ReferenceDomainError,
    )
"""

# ------------------ Sales ------------------
from .sales_repo import SalesRepo, SaleInput, DomainError as SalesDomainError

# ------------------ Debts ------------------
from .debts_repo import DebtsRepo, DomainError as DebtsDomainError

# ---------------- Expenses -----------------
from .expenses_repo import ExpensesRepo, ExpenseInput, DomainError as ExpensesDomainError

# ---------------- Supplies -----------------
from .supplies_repo import SuppliesRepo, SupplyInput, DomainError as SuppliesDomainError

# ---------------- Reference ----------------
from .reference_repo import ReferenceRepo, DomainError as ReferenceDomainError

__all__ = [
    "SalesRepo",
    "SaleInput",
    "SalesDomainError",
    "DebtsRepo",
    "DebtsDomainError",
    "ExpensesRepo",
    "ExpenseInput",
    "ExpensesDomainError",
    "SuppliesRepo",
    "SupplyInput",
    "SuppliesDomainError",
    "ReferenceRepo",
    "ReferenceDomainError",
]
