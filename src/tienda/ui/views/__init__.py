from .pos_view import PosView
from .inventory_view import InventoryView
from .credit_view import CreditView
from .expenses_view import ExpensesView
from .shopping_view import ShoppingView
from .reports_view import ReportsView

__all__ = ["PosView", "InventoryView", "CreditView", "ExpensesView", "ShoppingView", "ReportsView"]
