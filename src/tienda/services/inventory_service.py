from __future__ import annotations

from typing import Any, Optional

from tienda.domain.errors import NotFoundError, ValidationError
from tienda.domain.models import PRODUCT_UNITS, Product, RecordId

EDITABLE_FIELDS = (
    "barcode", "name", "description", "purchase_price", "sale_price",
    "stock", "min_stock", "category", "unit", "is_favorite",
)


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class InventoryService:
    def __init__(self, repo):
        self.repo = repo

    def list_products(self) -> list[Product]:
        return self.repo.list_products()

    def list_favorites(self, limit: int = 20) -> list[Product]:
        return self.repo.list_favorite_products(limit)

    def search(self, term: str) -> list[Product]:
        """Case-insensitive match on name, barcode or category. Empty term returns everything."""
        needle = (term or "").strip().lower()
        products = self.repo.list_products()
        if not needle:
            return products
        return [
            p for p in products
            if needle in p.name.lower()
            or needle in (p.barcode or "").lower()
            or needle in (p.category or "").lower()
        ]

    def categories(self) -> list[str]:
        return sorted({p.category for p in self.repo.list_products() if p.category})

    def low_stock(self) -> list[Product]:
        return [p for p in self.repo.list_products() if p.is_low_stock]

    def top_critical_stock(self, limit: int = 10) -> list[Product]:
        return self.repo.list_top_critical_stock(limit)

    def get_product(self, product_id: RecordId) -> Product:
        p = self.repo.get_product_by_id(product_id)
        if not p:
            raise NotFoundError("Product not found.")
        return p

    def get_product_by_barcode(self, barcode: str) -> Product:
        p = self.repo.get_product_by_barcode((barcode or "").strip())
        if not p:
            raise NotFoundError("Product not found.")
        return p

    @staticmethod
    def _validate(values: dict[str, Any], creating: bool) -> dict[str, Any]:
        unknown = [k for k in values if k not in EDITABLE_FIELDS]
        if unknown:
            raise ValidationError(f"Unknown product field(s): {', '.join(sorted(unknown))}")

        out = dict(values)
        for key in ("barcode", "description", "category"):
            if key in out:
                out[key] = _clean_text(out[key])

        if "name" in out or creating:
            name = _clean_text(out.get("name"))
            if not name:
                raise ValidationError("Name is required.")
            out["name"] = name

        if "sale_price" in out or creating:
            if out.get("sale_price") in (None, ""):
                raise ValidationError("Sale price is required.")
            try:
                out["sale_price"] = float(out["sale_price"])
            except (TypeError, ValueError) as e:
                raise ValidationError("Sale price must be a number.") from e
            if out["sale_price"] <= 0:
                raise ValidationError("Sale price must be > 0.")

        try:
            if "purchase_price" in out:
                out["purchase_price"] = float(out["purchase_price"] or 0)
            for key in ("stock", "min_stock"):
                if key in out:
                    out[key] = int(out[key] or 0)
        except (TypeError, ValueError) as e:
            raise ValidationError("Prices and stock values must be numbers.") from e

        if out.get("purchase_price", 0) < 0:
            raise ValidationError("Purchase price must be >= 0.")
        if out.get("stock", 0) < 0 or out.get("min_stock", 0) < 0:
            raise ValidationError("Stock values must be >= 0.")

        if "unit" in out or creating:
            unit = (out.get("unit") or "pieza").strip().lower()
            if unit not in PRODUCT_UNITS:
                raise ValidationError(f"Unknown unit: {unit}")
            out["unit"] = unit

        if "is_favorite" in out:
            out["is_favorite"] = bool(out["is_favorite"])
        return out

    def add_product(self, **values: Any) -> Product:
        values = self._validate(values, creating=True)
        values.setdefault("purchase_price", 0.0)
        values.setdefault("stock", 0)
        values.setdefault("min_stock", 5)
        if values.get("barcode") and self.repo.get_product_by_barcode(values["barcode"]):
            raise ValidationError(f"Barcode already in use: {values['barcode']}")
        return self.repo.add_product(values)

    def update_product(self, product_id: RecordId, **values: Any) -> Product:
        current = self.get_product(product_id)
        values = self._validate(values, creating=False)
        barcode = values.get("barcode")
        if barcode and barcode != current.barcode:
            other = self.repo.get_product_by_barcode(barcode)
            if other and other.id != current.id:
                raise ValidationError(f"Barcode already in use: {barcode}")
        updated = self.repo.update_product(product_id, values)
        if not updated:
            raise NotFoundError("Product not found.")
        return updated

    def toggle_favorite(self, product_id: RecordId) -> Product:
        product = self.get_product(product_id)
        return self.update_product(product_id, is_favorite=not product.is_favorite)

    def delete_product(self, product_id: RecordId) -> None:
        self.get_product(product_id)
        if not self.repo.deactivate_product(product_id):
            raise NotFoundError("Product not found.")

    def upsert_by_barcode(self, barcode: Optional[str], values: dict[str, Any]) -> tuple[Product, bool]:
        """Update the product with ``barcode`` or insert a new one. Returns ``(product, created)``."""
        barcode = _clean_text(barcode)
        existing = self.repo.get_product_by_barcode(barcode) if barcode else None
        if existing:
            return self.update_product(existing.id, **values), False
        return self.add_product(barcode=barcode, **values), True
