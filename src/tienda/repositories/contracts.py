from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol

from tienda.domain.models import (
    CreditPayment,
    Customer,
    Expense,
    Product,
    RecordId,
    Sale,
    ShoppingListItem,
    Supplier,
)


class ProductRepository(Protocol):
    def list_products(self, include_inactive: bool = False) -> list[Product]: ...
    def list_favorite_products(self, limit: int = 20) -> list[Product]: ...
    def list_top_critical_stock(self, limit: int = 10) -> list[Product]: ...
    def get_product_by_id(self, product_id: RecordId) -> Optional[Product]: ...
    def get_product_by_barcode(self, barcode: str) -> Optional[Product]: ...
    def add_product(self, values: dict[str, Any]) -> Product: ...
    def update_product(self, product_id: RecordId, values: dict[str, Any]) -> Optional[Product]: ...
    def deactivate_product(self, product_id: RecordId) -> bool: ...


class CustomerRepository(Protocol):
    def list_customers(self, include_inactive: bool = False) -> list[Customer]: ...
    def get_customer(self, customer_id: RecordId) -> Optional[Customer]: ...
    def add_customer(self, values: dict[str, Any]) -> Customer: ...
    def update_customer(self, customer_id: RecordId, values: dict[str, Any]) -> Optional[Customer]: ...
    def deactivate_customer(self, customer_id: RecordId) -> bool: ...
    def record_credit_payment(
        self,
        customer_id: RecordId,
        amount: float,
        payment_method: str,
        notes: Optional[str],
        sale_id: Optional[RecordId],
        created_at: str,
    ) -> CreditPayment: ...
    def list_credit_payments(self, limit: int = 50, customer_id: Optional[RecordId] = None) -> list[CreditPayment]: ...


class SaleRepository(Protocol):
    def create_sale_with_items(
        self,
        header: dict[str, Any],
        items: Iterable[dict[str, Any]],
        debt_delta: float = 0.0,
    ) -> Sale: ...
    def get_sale(self, sale_id: RecordId) -> Optional[Sale]: ...
    def list_sales(self, start_iso: Optional[str] = None, end_iso: Optional[str] = None) -> list[Sale]: ...
    def list_sales_for_customer(self, customer_id: RecordId, pending_only: bool = False) -> list[Sale]: ...


class ExpenseRepository(Protocol):
    def list_expenses(self) -> list[Expense]: ...
    def add_expense(self, values: dict[str, Any]) -> Expense: ...
    def delete_expense(self, expense_id: RecordId) -> bool: ...


class ShoppingRepository(Protocol):
    def list_shopping_items(self) -> list[ShoppingListItem]: ...
    def get_shopping_item(self, item_id: RecordId) -> Optional[ShoppingListItem]: ...
    def add_shopping_item(self, values: dict[str, Any]) -> ShoppingListItem: ...
    def update_shopping_item(self, item_id: RecordId, values: dict[str, Any]) -> Optional[ShoppingListItem]: ...
    def delete_shopping_item(self, item_id: RecordId) -> bool: ...
    def list_suppliers(self, include_inactive: bool = False) -> list[Supplier]: ...
    def add_supplier(self, values: dict[str, Any]) -> Supplier: ...
    def delete_supplier(self, supplier_id: RecordId) -> bool: ...


class StoreRepository(
    ProductRepository,
    CustomerRepository,
    SaleRepository,
    ExpenseRepository,
    ShoppingRepository,
    Protocol,
):
    """Everything the services need from a storage backend."""
