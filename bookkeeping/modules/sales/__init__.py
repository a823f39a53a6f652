# bookkeeping/modules/sales/__init__.py

from .controller import SalesController
from .view import SalesView
from .form import ProductForm, SaleForm, SupplyForm
from .model import SalesTableModel

__all__ = [
    "SalesController",
    "SalesView",
    "SaleForm",
    "SupplyForm",
    "ProductForm",
    "SalesTableModel",
]
