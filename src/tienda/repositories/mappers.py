from __future__ import annotations

from typing import Any, Mapping, Optional

from tienda.domain.models import (
    CreditPayment,
    Customer,
    Expense,
    Product,
    Sale,
    SaleItem,
    ShoppingListItem,
    Supplier,
)


def _opt_str(v: Any) -> Optional[str]:
    return str(v) if v is not None else None


def _bool(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "t"}
    return bool(v)


def product_from_row(r: Mapping[str, Any]) -> Product:
    return Product(
        id=r["id"],
        name=str(r["name"]),
        sale_price=float(r["sale_price"]),
        purchase_price=float(r.get("purchase_price") or 0.0),
        stock=int(r.get("stock") or 0),
        min_stock=int(r.get("min_stock") or 0),
        barcode=_opt_str(r.get("barcode")),
        description=_opt_str(r.get("description")),
        category=_opt_str(r.get("category")),
        unit=str(r.get("unit") or "pieza"),
        is_active=_bool(r.get("is_active", True)),
        is_favorite=_bool(r.get("is_favorite", False)),
        created_at=_opt_str(r.get("created_at")),
        updated_at=_opt_str(r.get("updated_at")),
    )


def customer_from_row(r: Mapping[str, Any]) -> Customer:
    return Customer(
        id=r["id"],
        name=str(r["name"]),
        credit_limit=float(r.get("credit_limit") or 0.0),
        current_debt=float(r.get("current_debt") or 0.0),
        phone=_opt_str(r.get("phone")),
        address=_opt_str(r.get("address")),
        notes=_opt_str(r.get("notes")),
        is_active=_bool(r.get("is_active", True)),
        created_at=_opt_str(r.get("created_at")),
        updated_at=_opt_str(r.get("updated_at")),
    )


def sale_item_from_row(r: Mapping[str, Any]) -> SaleItem:
    return SaleItem(
        id=r.get("id"),
        sale_id=r.get("sale_id"),
        product_id=r.get("product_id"),
        product_name=str(r["product_name"]),
        quantity=int(r["quantity"]),
        unit_price=float(r["unit_price"]),
        subtotal=float(r["subtotal"]),
        created_at=_opt_str(r.get("created_at")),
    )


def sale_from_row(r: Mapping[str, Any], items: list[Mapping[str, Any]] | None = None) -> Sale:
    if items is None:
        items = r.get("sale_items") or []
    return Sale(
        id=r["id"],
        sale_number=str(r["sale_number"]),
        total=float(r["total"]),
        payment_method=str(r["payment_method"]),
        payment_status=str(r["payment_status"]),
        customer_id=r.get("customer_id"),
        notes=_opt_str(r.get("notes")),
        created_at=_opt_str(r.get("created_at")),
        items=tuple(sale_item_from_row(i) for i in items),
    )


def credit_payment_from_row(r: Mapping[str, Any]) -> CreditPayment:
    # embedded resource from the REST store: {"customers": {"name": ...}}
    name = r.get("customer_name")
    embedded = r.get("customers")
    if name is None and isinstance(embedded, Mapping):
        name = embedded.get("name")
    return CreditPayment(
        id=r["id"],
        customer_id=r["customer_id"],
        amount=float(r["amount"]),
        payment_method=str(r.get("payment_method") or "efectivo"),
        sale_id=r.get("sale_id"),
        notes=_opt_str(r.get("notes")),
        created_at=_opt_str(r.get("created_at")),
        customer_name=_opt_str(name),
    )


def expense_from_row(r: Mapping[str, Any]) -> Expense:
    return Expense(
        id=r["id"],
        description=str(r["description"]),
        category=str(r["category"]),
        amount=float(r["amount"]),
        expense_date=str(r["expense_date"]),
        payment_method=str(r.get("payment_method") or "efectivo"),
        notes=_opt_str(r.get("notes")),
        created_at=_opt_str(r.get("created_at")),
    )


def supplier_from_row(r: Mapping[str, Any]) -> Supplier:
    return Supplier(
        id=r["id"],
        name=str(r["name"]),
        contact_person=_opt_str(r.get("contact_person")),
        phone=_opt_str(r.get("phone")),
        email=_opt_str(r.get("email")),
        address=_opt_str(r.get("address")),
        products_supplied=_opt_str(r.get("products_supplied")),
        notes=_opt_str(r.get("notes")),
        is_active=_bool(r.get("is_active", True)),
        created_at=_opt_str(r.get("created_at")),
        updated_at=_opt_str(r.get("updated_at")),
    )


def shopping_item_from_row(r: Mapping[str, Any]) -> ShoppingListItem:
    return ShoppingListItem(
        id=r.get("id"),
        product_name=str(r["product_name"]),
        quantity=int(r["quantity"]),
        priority=str(r.get("priority") or "normal"),
        product_id=r.get("product_id"),
        notes=_opt_str(r.get("notes")),
        is_completed=_bool(r.get("is_completed", False)),
        created_at=_opt_str(r.get("created_at")),
        completed_at=_opt_str(r.get("completed_at")),
    )
