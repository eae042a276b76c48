from .inventory_service import InventoryService
from .sales_service import SalesService
from .credit_service import CreditService
from .expense_service import ExpenseService
from .shopping_service import ShoppingService
from .excel_service import ExcelService
from .reporting_service import ReportingService

__all__ = [
    "InventoryService",
    "SalesService",
    "CreditService",
    "ExpenseService",
    "ShoppingService",
    "ExcelService",
    "ReportingService",
]
