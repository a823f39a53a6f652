# bookkeeping/modules/debts/__init__.py

from .controller import DebtsController
from .view import DebtsView
from .form import DepositForm, PaymentForm
from .model import DebtsTableModel

__all__ = [
    "DebtsController",
    "DebtsView",
    "PaymentForm",
    "DepositForm",
    "DebtsTableModel",
]
