from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from tienda.domain.errors import (
    AppError,
    CheckoutError,
    InsufficientDebtError,
    InsufficientStockError,
    NotFoundError,
    StoreError,
)
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
from tienda.repositories.mappers import (
    credit_payment_from_row,
    customer_from_row,
    expense_from_row,
    product_from_row,
    sale_from_row,
    shopping_item_from_row,
    supplier_from_row,
)
from tienda.repositories.rest_client import RestClient

log = logging.getLogger(__name__)

PRIORITY_RANK = {"alta": 0, "normal": 1, "baja": 2}


def _now() -> str:
    return datetime.now().replace(microsecond=0).isoformat(sep=" ")


class Saga:
    """Runs write steps in order and undoes the completed ones if a later step fails."""

    def __init__(self, name: str):
        self.name = name
        self._undo: list[tuple[str, Callable[[], Any]]] = []

    def step(self, label: str, action: Callable[[], Any], undo: Callable[[Any], Any] | None = None) -> Any:
        result = action()
        if undo is not None:
            self._undo.append((label, lambda: undo(result)))
        return result

    def compensate(self) -> list[str]:
        failed: list[str] = []
        for label, undo in reversed(self._undo):
            try:
                undo()
            except StoreError as e:
                log.error("compensation_failed saga=%s step=%s error=%s", self.name, label, e)
                failed.append(label)
        self._undo.clear()
        return failed


class RestRepository:
    def __init__(self, client: RestClient):
        self.client = client

    # ---------- Products ----------
    def list_products(self, include_inactive: bool = False) -> list[Product]:
        filters = {} if include_inactive else {"is_active": True}
        rows = self.client.select("products", filters, order=["name"])
        return [product_from_row(r) for r in rows]

    def list_favorite_products(self, limit: int = 20) -> list[Product]:
        rows = self.client.select(
            "products", {"is_active": True, "is_favorite": True}, order=["name"], limit=limit
        )
        return [product_from_row(r) for r in rows]

    def list_top_critical_stock(self, limit: int = 10) -> list[Product]:
        products = self.list_products()
        products.sort(key=lambda p: (p.stock - p.min_stock, p.name))
        return products[: int(limit)]

    def get_product_by_id(self, product_id: RecordId) -> Optional[Product]:
        r = self.client.select_one("products", {"id": product_id, "is_active": True})
        return product_from_row(r) if r else None

    def get_product_by_barcode(self, barcode: str) -> Optional[Product]:
        r = self.client.select_one("products", {"barcode": barcode, "is_active": True})
        return product_from_row(r) if r else None

    def add_product(self, values: dict[str, Any]) -> Product:
        return product_from_row(self.client.insert("products", values)[0])

    def update_product(self, product_id: RecordId, values: dict[str, Any]) -> Optional[Product]:
        rows = self.client.update("products", {**values, "updated_at": _now()}, {"id": product_id})
        return product_from_row(rows[0]) if rows else None

    def deactivate_product(self, product_id: RecordId) -> bool:
        rows = self.client.update(
            "products",
            {"is_active": False, "is_favorite": False, "updated_at": _now()},
            {"id": product_id, "is_active": True},
        )
        return bool(rows)

    # ---------- Customers ----------
    def list_customers(self, include_inactive: bool = False) -> list[Customer]:
        filters = {} if include_inactive else {"is_active": True}
        rows = self.client.select("customers", filters, order=["name"])
        return [customer_from_row(r) for r in rows]

    def get_customer(self, customer_id: RecordId) -> Optional[Customer]:
        r = self.client.select_one("customers", {"id": customer_id})
        return customer_from_row(r) if r else None

    def add_customer(self, values: dict[str, Any]) -> Customer:
        return customer_from_row(self.client.insert("customers", values)[0])

    def update_customer(self, customer_id: RecordId, values: dict[str, Any]) -> Optional[Customer]:
        rows = self.client.update("customers", {**values, "updated_at": _now()}, {"id": customer_id})
        return customer_from_row(rows[0]) if rows else None

    def deactivate_customer(self, customer_id: RecordId) -> bool:
        return self.update_customer(customer_id, {"is_active": False}) is not None

    def record_credit_payment(
        self,
        customer_id: RecordId,
        amount: float,
        payment_method: str,
        notes: Optional[str],
        sale_id: Optional[RecordId],
        created_at: str,
    ) -> CreditPayment:
        customer = self.get_customer(customer_id)
        if customer is None:
            raise NotFoundError("Customer not found.")
        if float(amount) > customer.current_debt:
            raise InsufficientDebtError(f"Payment exceeds current debt. Owed: {customer.current_debt:.2f}")

        saga = Saga("credit_payment")
        try:
            row = saga.step(
                "insert_payment",
                lambda: self.client.insert("credit_payments", {
                    "customer_id": customer_id,
                    "sale_id": sale_id,
                    "amount": float(amount),
                    "payment_method": payment_method,
                    "notes": notes,
                    "created_at": created_at,
                })[0],
                undo=lambda r: self.client.delete("credit_payments", {"id": r["id"]}),
            )
            saga.step(
                "decrement_debt",
                lambda: self.client.update(
                    "customers",
                    {"current_debt": customer.current_debt - float(amount), "updated_at": created_at},
                    {"id": customer_id},
                ),
            )
        except StoreError as exc:
            failed = saga.compensate()
            raise CheckoutError(self._saga_message("Payment", exc, failed)) from exc

        return credit_payment_from_row({**row, "customer_name": customer.name})

    def list_credit_payments(self, limit: int = 50, customer_id: Optional[RecordId] = None) -> list[CreditPayment]:
        filters = {"customer_id": customer_id} if customer_id is not None else {}
        rows = self.client.select(
            "credit_payments", filters, order=["created_at.desc"], limit=limit, columns="*,customers(name)"
        )
        return [credit_payment_from_row(r) for r in rows]

    # ---------- Sales ----------
    @staticmethod
    def _saga_message(what: str, exc: Exception, failed: list[str]) -> str:
        msg = f"{what} could not be recorded: {exc}"
        if failed:
            msg += f" (manual review needed, undo failed for: {', '.join(failed)})"
        return msg

    def create_sale_with_items(
        self,
        header: dict[str, Any],
        items: Iterable[dict[str, Any]],
        debt_delta: float = 0.0,
    ) -> Sale:
        """Sequential writes; completed steps are compensated in reverse on failure."""
        items = list(items)

        wanted: Counter = Counter()
        for it in items:
            wanted[it["product_id"]] += int(it["quantity"])
        products: dict[Any, Product] = {}
        for pid, qty in wanted.items():
            prod = self.get_product_by_id(pid)
            if prod is None:
                raise NotFoundError("Product not found/active.")
            if prod.stock < qty:
                raise InsufficientStockError(f"Not enough stock for {prod.name}. Available: {prod.stock}")
            products[pid] = prod

        customer_id = header.get("customer_id")
        customer = None
        if customer_id is not None:
            customer = self.get_customer(customer_id)
            if customer is None:
                raise NotFoundError("Customer not found.")

        stamp = header.get("created_at") or _now()
        saga = Saga("checkout")
        try:
            sale_row = saga.step(
                "insert_sale",
                lambda: self.client.insert("sales", {**header, "created_at": stamp})[0],
                undo=lambda r: self.client.delete("sales", {"id": r["id"]}),
            )
            item_rows = saga.step(
                "insert_items",
                lambda: self.client.insert(
                    "sale_items",
                    [{**it, "sale_id": sale_row["id"], "created_at": stamp} for it in items],
                ),
                undo=lambda _r: self.client.delete("sale_items", {"sale_id": sale_row["id"]}),
            )
            for pid, qty in wanted.items():
                before = products[pid].stock
                saga.step(
                    f"stock:{pid}",
                    lambda pid=pid, before=before, qty=qty: self.client.update(
                        "products", {"stock": before - qty, "updated_at": stamp}, {"id": pid}
                    ),
                    undo=lambda _r, pid=pid, before=before: self.client.update(
                        "products", {"stock": before}, {"id": pid}
                    ),
                )
            if debt_delta and customer is not None:
                saga.step(
                    "increment_debt",
                    lambda: self.client.update(
                        "customers",
                        {"current_debt": customer.current_debt + float(debt_delta), "updated_at": stamp},
                        {"id": customer.id},
                    ),
                    undo=lambda _r: self.client.update(
                        "customers", {"current_debt": customer.current_debt}, {"id": customer.id}
                    ),
                )
        except StoreError as exc:
            failed = saga.compensate()
            raise CheckoutError(self._saga_message("Sale", exc, failed)) from exc
        except AppError:
            saga.compensate()
            raise

        return sale_from_row(sale_row, item_rows)

    def get_sale(self, sale_id: RecordId) -> Optional[Sale]:
        r = self.client.select_one("sales", {"id": sale_id}, columns="*,sale_items(*)")
        return sale_from_row(r) if r else None

    def list_sales(self, start_iso: Optional[str] = None, end_iso: Optional[str] = None) -> list[Sale]:
        # two filters on one column need the and=() form
        filters: dict[str, Any] = {}
        if start_iso and end_iso:
            filters["and"] = f"(created_at.gte.{start_iso},created_at.lt.{end_iso})"
        elif start_iso:
            filters["created_at"] = ("gte", start_iso)
        elif end_iso:
            filters["created_at"] = ("lt", end_iso)
        rows = self.client.select(
            "sales", filters, order=["created_at.desc"], columns="*,sale_items(*)"
        )
        return [sale_from_row(r) for r in rows]

    def list_sales_for_customer(self, customer_id: RecordId, pending_only: bool = False) -> list[Sale]:
        filters: dict[str, Any] = {"customer_id": customer_id}
        if pending_only:
            filters["payment_status"] = "pendiente"
        rows = self.client.select("sales", filters, order=["created_at.desc"], columns="*,sale_items(*)")
        return [sale_from_row(r) for r in rows]

    # ---------- Expenses ----------
    def list_expenses(self) -> list[Expense]:
        rows = self.client.select("expenses", order=["expense_date.desc", "created_at.desc"])
        return [expense_from_row(r) for r in rows]

    def add_expense(self, values: dict[str, Any]) -> Expense:
        return expense_from_row(self.client.insert("expenses", values)[0])

    def delete_expense(self, expense_id: RecordId) -> bool:
        return bool(self.client.delete("expenses", {"id": expense_id}))

    # ---------- Shopping list ----------
    def list_shopping_items(self) -> list[ShoppingListItem]:
        rows = self.client.select("shopping_list", order=["created_at.desc"])
        items = [shopping_item_from_row(r) for r in rows]
        # stable sort keeps newest-first inside each group
        items.sort(key=lambda i: (i.is_completed, PRIORITY_RANK.get(i.priority, 9)))
        return items

    def get_shopping_item(self, item_id: RecordId) -> Optional[ShoppingListItem]:
        r = self.client.select_one("shopping_list", {"id": item_id})
        return shopping_item_from_row(r) if r else None

    def add_shopping_item(self, values: dict[str, Any]) -> ShoppingListItem:
        return shopping_item_from_row(self.client.insert("shopping_list", values)[0])

    def update_shopping_item(self, item_id: RecordId, values: dict[str, Any]) -> Optional[ShoppingListItem]:
        rows = self.client.update("shopping_list", values, {"id": item_id})
        return shopping_item_from_row(rows[0]) if rows else None

    def delete_shopping_item(self, item_id: RecordId) -> bool:
        return bool(self.client.delete("shopping_list", {"id": item_id}))

    # ---------- Suppliers ----------
    def list_suppliers(self, include_inactive: bool = False) -> list[Supplier]:
        filters = {} if include_inactive else {"is_active": True}
        rows = self.client.select("suppliers", filters, order=["name"])
        return [supplier_from_row(r) for r in rows]

    def add_supplier(self, values: dict[str, Any]) -> Supplier:
        return supplier_from_row(self.client.insert("suppliers", values)[0])

    def delete_supplier(self, supplier_id: RecordId) -> bool:
        return bool(self.client.delete("suppliers", {"id": supplier_id}))
