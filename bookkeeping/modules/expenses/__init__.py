# bookkeeping/modules/expenses/__init__.py

from .controller import ExpenseController
from .view import ExpensesView
from .form import ExpenseForm
from .model import ExpensesTableModel

__all__ = [
    "ExpenseController",
    "ExpensesView",
    "ExpenseForm",
    "ExpensesTableModel",
]
