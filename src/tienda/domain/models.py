from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union

RecordId = Union[int, str]

PAYMENT_METHODS = ("efectivo", "tarjeta", "transferencia", "fiado")
EXPENSE_PAYMENT_METHODS = ("efectivo", "tarjeta", "transferencia")
CREDIT_METHOD = "fiado"
STATUS_PAID = "pagado"
STATUS_PENDING = "pendiente"

PRODUCT_UNITS = ("pieza", "kg", "litro", "paquete", "caja")
PRIORITIES = ("alta", "normal", "baja")

EXPENSE_CATEGORIES = (
    "Compra de productos",
    "Servicios (Luz, Agua, Gas)",
    "Renta del local",
    "Salarios",
    "Transporte",
    "Mantenimiento",
    "Limpieza",
    "Impuestos",
    "Otros",
)


def payment_status_for(method: str) -> str:
    return STATUS_PENDING if method == CREDIT_METHOD else STATUS_PAID


@dataclass(frozen=True)
class Product:
    id: RecordId
    name: str
    sale_price: float
    purchase_price: float = 0.0
    stock: int = 0
    min_stock: int = 5
    barcode: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    unit: str = "pieza"
    is_active: bool = True
    is_favorite: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock


@dataclass(frozen=True)
class Customer:
    id: RecordId
    name: str
    credit_limit: float = 0.0
    current_debt: float = 0.0
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_over_limit(self) -> bool:
        return self.credit_limit > 0 and self.current_debt > self.credit_limit


@dataclass(frozen=True)
class SaleItem:
    id: Optional[RecordId]
    sale_id: Optional[RecordId]
    product_id: Optional[RecordId]
    product_name: str
    quantity: int
    unit_price: float
    subtotal: float
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Sale:
    id: RecordId
    sale_number: str
    total: float
    payment_method: str
    payment_status: str
    customer_id: Optional[RecordId] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    items: tuple[SaleItem, ...] = ()


@dataclass
class CartItem:
    product: Product
    quantity: int

    @property
    def subtotal(self) -> float:
        return float(self.product.sale_price) * int(self.quantity)


@dataclass(frozen=True)
class CreditPayment:
    id: RecordId
    customer_id: RecordId
    amount: float
    payment_method: str = "efectivo"
    sale_id: Optional[RecordId] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    customer_name: Optional[str] = None


@dataclass(frozen=True)
class Expense:
    id: RecordId
    description: str
    category: str
    amount: float
    expense_date: str
    payment_method: str = "efectivo"
    notes: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Supplier:
    id: RecordId
    name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    products_supplied: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class ShoppingListItem:
    id: Optional[RecordId]
    product_name: str
    quantity: int
    priority: str = "normal"
    product_id: Optional[RecordId] = None
    notes: Optional[str] = None
    is_completed: bool = False
    created_at: Optional[str] = None
    completed_at: Optional[str] = None
