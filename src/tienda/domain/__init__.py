from .models import (
    CartItem,
    CreditPayment,
    Customer,
    Expense,
    Product,
    Sale,
    SaleItem,
    ShoppingListItem,
    Supplier,
)
from .errors import (
    CheckoutError,
    CreditLimitError,
    DuplicateSaleError,
    InsufficientDebtError,
    InsufficientStockError,
    NotFoundError,
    StoreError,
    ValidationError,
)

__all__ = [
    "CartItem",
    "CreditPayment",
    "Customer",
    "Expense",
    "Product",
    "Sale",
    "SaleItem",
    "ShoppingListItem",
    "Supplier",
    "CheckoutError",
    "CreditLimitError",
    "DuplicateSaleError",
    "InsufficientDebtError",
    "InsufficientStockError",
    "NotFoundError",
    "StoreError",
    "ValidationError",
]
