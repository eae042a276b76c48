from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from tienda.domain.errors import NotFoundError, ValidationError
from tienda.domain.models import PRIORITIES, RecordId, ShoppingListItem, Supplier

log = logging.getLogger(__name__)

LOW_STOCK_NOTE = "Stock bajo"


class ShoppingService:
    def __init__(self, repo):
        self.repo = repo

    # ---------- shopping list ----------
    def list_items(self) -> list[ShoppingListItem]:
        return self.repo.list_shopping_items()

    def pending_items(self) -> list[ShoppingListItem]:
        return [i for i in self.repo.list_shopping_items() if not i.is_completed]

    def completed_items(self) -> list[ShoppingListItem]:
        return [i for i in self.repo.list_shopping_items() if i.is_completed]

    def high_priority_items(self) -> list[ShoppingListItem]:
        return [i for i in self.pending_items() if i.priority == "alta"]

    def add_item(
        self,
        product_name: str,
        quantity: int,
        priority: str = "normal",
        product_id: Optional[RecordId] = None,
        notes: Optional[str] = None,
    ) -> ShoppingListItem:
        product_name = (product_name or "").strip()
        if not product_name:
            raise ValidationError("Product name is required.")
        try:
            quantity = int(quantity)
        except (TypeError, ValueError) as e:
            raise ValidationError("Quantity must be a whole number.") from e
        if quantity < 1:
            raise ValidationError("Quantity must be >= 1.")
        if priority not in PRIORITIES:
            raise ValidationError(f"Unknown priority: {priority}")
        if product_id is not None and not self.repo.get_product_by_id(product_id):
            raise NotFoundError("Product not found.")

        return self.repo.add_shopping_item({
            "product_id": product_id,
            "product_name": product_name,
            "quantity": quantity,
            "priority": priority,
            "notes": (notes or "").strip() or None,
            "is_completed": False,
        })

    def toggle_completed(self, item_id: RecordId) -> ShoppingListItem:
        item = self.repo.get_shopping_item(item_id)
        if not item:
            raise NotFoundError("Shopping list item not found.")
        done = not item.is_completed
        stamp = datetime.now().replace(microsecond=0).isoformat(sep=" ") if done else None
        updated = self.repo.update_shopping_item(item_id, {"is_completed": done, "completed_at": stamp})
        if not updated:
            raise NotFoundError("Shopping list item not found.")
        return updated

    def delete_item(self, item_id: RecordId) -> None:
        if not self.repo.delete_shopping_item(item_id):
            raise NotFoundError("Shopping list item not found.")

    def low_stock_suggestions(self) -> list[ShoppingListItem]:
        """One unsaved suggestion per low-stock product: twice its minimum, high priority."""
        return [
            ShoppingListItem(
                id=None,
                product_id=p.id,
                product_name=p.name,
                quantity=max(int(p.min_stock) * 2, 1),
                priority="alta",
                notes=LOW_STOCK_NOTE,
            )
            for p in self.repo.list_products()
            if p.is_low_stock
        ]

    def seed_from_low_stock(self) -> list[ShoppingListItem]:
        """Add suggestions for low-stock products that are not already pending on the list."""
        pending = {str(i.product_id) for i in self.pending_items() if i.product_id is not None}
        added = []
        for s in self.low_stock_suggestions():
            if str(s.product_id) in pending:
                continue
            added.append(self.add_item(s.product_name, s.quantity, s.priority, s.product_id, s.notes))
        log.info("shopping_list_seeded added=%s", len(added))
        return added

    # ---------- suppliers ----------
    def list_suppliers(self) -> list[Supplier]:
        return self.repo.list_suppliers()

    def search_suppliers(self, term: str) -> list[Supplier]:
        needle = (term or "").strip().lower()
        suppliers = self.repo.list_suppliers()
        if not needle:
            return suppliers
        return [s for s in suppliers if needle in s.name.lower() or needle in (s.phone or "").lower()]

    def add_supplier(
        self,
        name: str,
        contact_person: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
        products_supplied: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Supplier:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Supplier name is required.")
        email = (email or "").strip() or None
        if email and "@" not in email:
            raise ValidationError("Email looks invalid.")

        def clean(v: Optional[str]) -> Optional[str]:
            return (v or "").strip() or None

        return self.repo.add_supplier({
            "name": name,
            "contact_person": clean(contact_person),
            "phone": clean(phone),
            "email": email,
            "address": clean(address),
            "products_supplied": clean(products_supplied),
            "notes": clean(notes),
            "is_active": True,
        })

    def delete_supplier(self, supplier_id: RecordId) -> None:
        if not self.repo.delete_supplier(supplier_id):
            raise NotFoundError("Supplier not found.")
