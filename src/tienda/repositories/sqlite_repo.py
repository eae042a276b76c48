from __future__ import annotations

import logging
import sqlite3
import shutil
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional

from tienda.domain.errors import (
    CheckoutError,
    InsufficientDebtError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
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

log = logging.getLogger(__name__)

# writable columns per table; anything else in a values dict is rejected
COLUMNS: dict[str, tuple[str, ...]] = {
    "products": (
        "barcode", "name", "description", "purchase_price", "sale_price", "stock", "min_stock",
        "category", "unit", "is_active", "is_favorite", "created_at", "updated_at",
    ),
    "customers": (
        "name", "phone", "address", "credit_limit", "current_debt", "notes", "is_active",
        "created_at", "updated_at",
    ),
    "sales": (
        "sale_number", "customer_id", "total", "payment_method", "payment_status", "notes", "created_at",
    ),
    "sale_items": ("sale_id", "product_id", "product_name", "quantity", "unit_price", "subtotal", "created_at"),
    "credit_payments": ("customer_id", "sale_id", "amount", "payment_method", "notes", "created_at"),
    "expenses": ("description", "category", "amount", "payment_method", "notes", "expense_date", "created_at"),
    "suppliers": (
        "name", "contact_person", "phone", "email", "address", "products_supplied", "notes", "is_active",
        "created_at", "updated_at",
    ),
    "shopping_list": (
        "product_id", "product_name", "quantity", "priority", "notes", "is_completed", "created_at",
        "completed_at",
    ),
}


def _now() -> str:
    return datetime.now().replace(microsecond=0).isoformat(sep=" ")


class SqliteRepository:
    def __init__(self, db_path: Path | str):
        self.db_path = str(db_path)

    def _conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def init_db(self) -> None:
        self.run_migrations()

    def run_migrations(self) -> None:
        conn = self._conn()
        backup_path = self._create_pre_migration_backup()
        try:
            cur = conn.cursor()
            cur.execute("BEGIN")
            cur.execute("CREATE TABLE IF NOT EXISTS schema_migrations (version INTEGER PRIMARY KEY, applied_at TEXT NOT NULL)")
            cur.execute("SELECT COALESCE(MAX(version), 0) FROM schema_migrations")
            current_version = int(cur.fetchone()[0])

            migrations = [
                (1, self._migration_v1_base),
                (2, self._migration_v2_indexes),
            ]

            for version, migration in migrations:
                if version <= current_version:
                    continue
                migration(cur)
                cur.execute(
                    "INSERT INTO schema_migrations (version, applied_at) VALUES (?, datetime('now'))",
                    (version,),
                )
            conn.commit()
        except Exception as exc:
            conn.rollback()
            self._restore_pre_migration_backup(backup_path)
            raise RuntimeError(
                "Database migration failed. Original database restored from automatic backup."
            ) from exc
        finally:
            conn.close()

    def _create_pre_migration_backup(self) -> Path | None:
        db_file = Path(self.db_path)
        if not db_file.exists() or db_file.stat().st_size == 0:
            return None
        backup_file = db_file.with_name(f"{db_file.stem}.pre_migration_{datetime.now().strftime('%Y%m%d%H%M%S')}.bak")
        shutil.copy2(db_file, backup_file)
        return backup_file

    def _restore_pre_migration_backup(self, backup_path: Path | None) -> None:
        if backup_path is None or not backup_path.exists():
            return
        shutil.copy2(backup_path, self.db_path)

    def _migration_v1_base(self, cur: sqlite3.Cursor) -> None:
        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS products (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            barcode TEXT UNIQUE,
            name TEXT NOT NULL,
            description TEXT,
            purchase_price REAL NOT NULL DEFAULT 0 CHECK(purchase_price >= 0),
            sale_price REAL NOT NULL CHECK(sale_price > 0),
            stock INTEGER NOT NULL DEFAULT 0 CHECK(stock >= 0),
            min_stock INTEGER NOT NULL DEFAULT 5 CHECK(min_stock >= 0),
            category TEXT,
            unit TEXT NOT NULL DEFAULT 'pieza',
            is_active INTEGER NOT NULL DEFAULT 1 CHECK(is_active IN (0,1)),
            is_favorite INTEGER NOT NULL DEFAULT 0 CHECK(is_favorite IN (0,1)),
            created_at TEXT NOT NULL DEFAULT (datetime('now','localtime')),
            updated_at TEXT NOT NULL DEFAULT (datetime('now','localtime'))
        )
        """
        )

        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS customers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            phone TEXT,
            address TEXT,
            credit_limit REAL NOT NULL DEFAULT 0 CHECK(credit_limit >= 0),
            current_debt REAL NOT NULL DEFAULT 0 CHECK(current_debt >= 0),
            notes TEXT,
            is_active INTEGER NOT NULL DEFAULT 1 CHECK(is_active IN (0,1)),
            created_at TEXT NOT NULL DEFAULT (datetime('now','localtime')),
            updated_at TEXT NOT NULL DEFAULT (datetime('now','localtime'))
        )
        """
        )

        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS sales (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            sale_number TEXT NOT NULL UNIQUE,
            customer_id INTEGER,
            total REAL NOT NULL CHECK(total >= 0),
            payment_method TEXT NOT NULL CHECK(payment_method IN ('efectivo','tarjeta','transferencia','fiado')),
            payment_status TEXT NOT NULL CHECK(payment_status IN ('pagado','pendiente')),
            notes TEXT,
            created_at TEXT NOT NULL DEFAULT (datetime('now','localtime')),
            FOREIGN KEY(customer_id) REFERENCES customers(id)
        )
        """
        )

        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS sale_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            sale_id INTEGER NOT NULL,
            product_id INTEGER,
            product_name TEXT NOT NULL,
            quantity INTEGER NOT NULL CHECK(quantity > 0),
            unit_price REAL NOT NULL CHECK(unit_price >= 0),
            subtotal REAL NOT NULL,
            created_at TEXT NOT NULL DEFAULT (datetime('now','localtime')),
            FOREIGN KEY(sale_id) REFERENCES sales(id) ON DELETE CASCADE,
            FOREIGN KEY(product_id) REFERENCES products(id) ON DELETE SET NULL
        )
        """
        )

        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS credit_payments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            customer_id INTEGER NOT NULL,
            sale_id INTEGER,
            amount REAL NOT NULL CHECK(amount > 0),
            payment_method TEXT NOT NULL DEFAULT 'efectivo',
            notes TEXT,
            created_at TEXT NOT NULL DEFAULT (datetime('now','localtime')),
            FOREIGN KEY(customer_id) REFERENCES customers(id),
            FOREIGN KEY(sale_id) REFERENCES sales(id) ON DELETE SET NULL
        )
        """
        )

        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS expenses (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            description TEXT NOT NULL,
            category TEXT NOT NULL,
            amount REAL NOT NULL CHECK(amount > 0),
            payment_method TEXT NOT NULL DEFAULT 'efectivo',
            notes TEXT,
            expense_date TEXT NOT NULL,
            created_at TEXT NOT NULL DEFAULT (datetime('now','localtime'))
        )
        """
        )

        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS suppliers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            contact_person TEXT,
            phone TEXT,
            email TEXT,
            address TEXT,
            products_supplied TEXT,
            notes TEXT,
            is_active INTEGER NOT NULL DEFAULT 1 CHECK(is_active IN (0,1)),
            created_at TEXT NOT NULL DEFAULT (datetime('now','localtime')),
            updated_at TEXT NOT NULL DEFAULT (datetime('now','localtime'))
        )
        """
        )

        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS shopping_list (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            product_id INTEGER,
            product_name TEXT NOT NULL,
            quantity INTEGER NOT NULL CHECK(quantity > 0),
            priority TEXT NOT NULL DEFAULT 'normal' CHECK(priority IN ('alta','normal','baja')),
            notes TEXT,
            is_completed INTEGER NOT NULL DEFAULT 0 CHECK(is_completed IN (0,1)),
            created_at TEXT NOT NULL DEFAULT (datetime('now','localtime')),
            completed_at TEXT,
            FOREIGN KEY(product_id) REFERENCES products(id) ON DELETE SET NULL
        )
        """
        )

    def _migration_v2_indexes(self, cur: sqlite3.Cursor) -> None:
        cur.execute("CREATE INDEX IF NOT EXISTS idx_sales_created_at ON sales(created_at)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_sales_customer ON sales(customer_id)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_sale_items_sale ON sale_items(sale_id)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_credit_payments_customer ON credit_payments(customer_id)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(expense_date)")

    # ---------- generic helpers ----------
    def _filtered(self, table: str, values: dict[str, Any]) -> dict[str, Any]:
        allowed = COLUMNS[table]
        unknown = [k for k in values if k not in allowed]
        if unknown:
            raise ValueError(f"Unknown column(s) for {table}: {', '.join(sorted(unknown))}")
        return dict(values)

    def _insert(self, cur: sqlite3.Cursor, table: str, values: dict[str, Any]) -> int:
        values = self._filtered(table, values)
        cols = ", ".join(values)
        marks = ", ".join("?" for _ in values)
        cur.execute(f"INSERT INTO {table} ({cols}) VALUES ({marks})", tuple(values.values()))
        return int(cur.lastrowid)

    def _update(self, cur: sqlite3.Cursor, table: str, row_id: RecordId, values: dict[str, Any]) -> bool:
        values = self._filtered(table, values)
        if not values:
            return False
        sets = ", ".join(f"{k}=?" for k in values)
        cur.execute(f"UPDATE {table} SET {sets} WHERE id=?", (*values.values(), int(row_id)))
        return cur.rowcount > 0

    def _fetch_one(self, sql: str, params: tuple = ()) -> Optional[dict[str, Any]]:
        conn = self._conn()
        try:
            row = conn.execute(sql, params).fetchone()
        finally:
            conn.close()
        return dict(row) if row else None

    def _fetch_all(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        conn = self._conn()
        try:
            rows = conn.execute(sql, params).fetchall()
        finally:
            conn.close()
        return [dict(r) for r in rows]

    def _insert_and_get(self, table: str, values: dict[str, Any]) -> dict[str, Any]:
        conn = self._conn()
        try:
            cur = conn.cursor()
            row_id = self._insert(cur, table, values)
            conn.commit()
            row = cur.execute(f"SELECT * FROM {table} WHERE id=?", (row_id,)).fetchone()
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise ValidationError(f"Rejected by {table} constraints: {exc}") from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        return dict(row)

    def _update_and_get(self, table: str, row_id: RecordId, values: dict[str, Any]) -> Optional[dict[str, Any]]:
        conn = self._conn()
        try:
            cur = conn.cursor()
            changed = self._update(cur, table, row_id, values)
            conn.commit()
            if not changed:
                return None
            row = cur.execute(f"SELECT * FROM {table} WHERE id=?", (int(row_id),)).fetchone()
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise ValidationError(f"Rejected by {table} constraints: {exc}") from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        return dict(row) if row else None

    def _delete(self, table: str, row_id: RecordId) -> bool:
        conn = self._conn()
        try:
            cur = conn.execute(f"DELETE FROM {table} WHERE id=?", (int(row_id),))
            changed = cur.rowcount > 0
            conn.commit()
        finally:
            conn.close()
        return bool(changed)

    def integrity_check(self) -> str:
        row = self._fetch_one("PRAGMA integrity_check")
        return str(next(iter(row.values()))) if row else "unknown"

    # ---------- Products ----------
    def list_products(self, include_inactive: bool = False) -> list[Product]:
        where = "" if include_inactive else "WHERE is_active = 1"
        rows = self._fetch_all(f"SELECT * FROM products {where} ORDER BY name")
        return [product_from_row(r) for r in rows]

    def list_favorite_products(self, limit: int = 20) -> list[Product]:
        rows = self._fetch_all(
            """
            SELECT * FROM products
            WHERE is_active = 1 AND is_favorite = 1
            ORDER BY name
            LIMIT ?
            """,
            (int(limit),),
        )
        return [product_from_row(r) for r in rows]

    def list_top_critical_stock(self, limit: int = 10) -> list[Product]:
        rows = self._fetch_all(
            """
            SELECT * FROM products
            WHERE is_active = 1
            ORDER BY (stock - min_stock) ASC, name ASC
            LIMIT ?
            """,
            (int(limit),),
        )
        return [product_from_row(r) for r in rows]

    def get_product_by_id(self, product_id: RecordId) -> Optional[Product]:
        r = self._fetch_one("SELECT * FROM products WHERE is_active = 1 AND id = ?", (int(product_id),))
        return product_from_row(r) if r else None

    def get_product_by_barcode(self, barcode: str) -> Optional[Product]:
        r = self._fetch_one("SELECT * FROM products WHERE is_active = 1 AND barcode = ?", (barcode,))
        return product_from_row(r) if r else None

    def add_product(self, values: dict[str, Any]) -> Product:
        return product_from_row(self._insert_and_get("products", values))

    def update_product(self, product_id: RecordId, values: dict[str, Any]) -> Optional[Product]:
        values = {**values, "updated_at": _now()}
        r = self._update_and_get("products", product_id, values)
        return product_from_row(r) if r else None

    def deactivate_product(self, product_id: RecordId) -> bool:
        conn = self._conn()
        try:
            cur = conn.execute(
                "UPDATE products SET is_active = 0, is_favorite = 0, updated_at = ? WHERE id = ? AND is_active = 1",
                (_now(), int(product_id)),
            )
            changed = cur.rowcount > 0
            conn.commit()
        finally:
            conn.close()
        return bool(changed)

    # ---------- Customers ----------
    def list_customers(self, include_inactive: bool = False) -> list[Customer]:
        where = "" if include_inactive else "WHERE is_active = 1"
        rows = self._fetch_all(f"SELECT * FROM customers {where} ORDER BY name")
        return [customer_from_row(r) for r in rows]

    def get_customer(self, customer_id: RecordId) -> Optional[Customer]:
        r = self._fetch_one("SELECT * FROM customers WHERE id = ?", (int(customer_id),))
        return customer_from_row(r) if r else None

    def add_customer(self, values: dict[str, Any]) -> Customer:
        return customer_from_row(self._insert_and_get("customers", values))

    def update_customer(self, customer_id: RecordId, values: dict[str, Any]) -> Optional[Customer]:
        values = {**values, "updated_at": _now()}
        r = self._update_and_get("customers", customer_id, values)
        return customer_from_row(r) if r else None

    def deactivate_customer(self, customer_id: RecordId) -> bool:
        return self.update_customer(customer_id, {"is_active": 0}) is not None

    def record_credit_payment(
        self,
        customer_id: RecordId,
        amount: float,
        payment_method: str,
        notes: Optional[str],
        sale_id: Optional[RecordId],
        created_at: str,
    ) -> CreditPayment:
        conn = self._conn()
        cur = conn.cursor()
        try:
            cur.execute("BEGIN IMMEDIATE")
            cur.execute("SELECT name, current_debt FROM customers WHERE id = ?", (int(customer_id),))
            row = cur.fetchone()
            if not row:
                raise NotFoundError("Customer not found.")
            debt = float(row["current_debt"])
            if float(amount) > debt:
                raise InsufficientDebtError(f"Payment exceeds current debt. Owed: {debt:.2f}")

            payment_id = self._insert(cur, "credit_payments", {
                "customer_id": int(customer_id),
                "sale_id": int(sale_id) if sale_id is not None else None,
                "amount": float(amount),
                "payment_method": payment_method,
                "notes": notes,
                "created_at": created_at,
            })
            cur.execute(
                "UPDATE customers SET current_debt = ?, updated_at = ? WHERE id = ?",
                (debt - float(amount), created_at, int(customer_id)),
            )
            conn.commit()
            payment = cur.execute("SELECT * FROM credit_payments WHERE id = ?", (payment_id,)).fetchone()
            return credit_payment_from_row({**dict(payment), "customer_name": row["name"]})
        except sqlite3.Error as exc:
            conn.rollback()
            raise CheckoutError(f"Payment could not be recorded: {exc}") from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def list_credit_payments(self, limit: int = 50, customer_id: Optional[RecordId] = None) -> list[CreditPayment]:
        sql = """
            SELECT cp.*, c.name AS customer_name
            FROM credit_payments cp
            JOIN customers c ON c.id = cp.customer_id
        """
        params: tuple = ()
        if customer_id is not None:
            sql += " WHERE cp.customer_id = ?"
            params = (int(customer_id),)
        sql += " ORDER BY cp.created_at DESC, cp.id DESC LIMIT ?"
        rows = self._fetch_all(sql, (*params, int(limit)))
        return [credit_payment_from_row(r) for r in rows]

    # ---------- Sales ----------
    def create_sale_with_items(
        self,
        header: dict[str, Any],
        items: Iterable[dict[str, Any]],
        debt_delta: float = 0.0,
    ) -> Sale:
        """Sale header, line items, stock decrement and debt increment in one transaction."""
        items = list(items)
        conn = self._conn()
        cur = conn.cursor()
        try:
            cur.execute("BEGIN IMMEDIATE")

            wanted: Counter = Counter()
            for it in items:
                wanted[int(it["product_id"])] += int(it["quantity"])
            for pid, qty in wanted.items():
                cur.execute("SELECT name, stock FROM products WHERE id = ? AND is_active = 1", (pid,))
                row = cur.fetchone()
                if not row:
                    raise NotFoundError("Product not found/active.")
                if int(row["stock"]) < qty:
                    raise InsufficientStockError(f"Not enough stock for {row['name']}. Available: {row['stock']}")

            customer_id = header.get("customer_id")
            if customer_id is not None:
                cur.execute("SELECT id FROM customers WHERE id = ?", (int(customer_id),))
                if not cur.fetchone():
                    raise NotFoundError("Customer not found.")

            stamp = header.get("created_at") or _now()
            sale_id = self._insert(cur, "sales", {**header, "created_at": stamp})
            for it in items:
                self._insert(cur, "sale_items", {**it, "sale_id": sale_id, "created_at": stamp})
                cur.execute(
                    "UPDATE products SET stock = stock - ?, updated_at = ? WHERE id = ?",
                    (int(it["quantity"]), stamp, int(it["product_id"])),
                )

            if debt_delta and customer_id is not None:
                cur.execute(
                    "UPDATE customers SET current_debt = current_debt + ?, updated_at = ? WHERE id = ?",
                    (float(debt_delta), stamp, int(customer_id)),
                )

            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise CheckoutError(f"Sale could not be recorded: {exc}") from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

        sale = self.get_sale(sale_id)
        if sale is None:
            raise CheckoutError("Sale vanished after commit.")
        return sale

    def _sales_with_items(self, rows: list[dict[str, Any]]) -> list[Sale]:
        if not rows:
            return []
        ids = [int(r["id"]) for r in rows]
        marks = ", ".join("?" for _ in ids)
        item_rows = self._fetch_all(
            f"SELECT * FROM sale_items WHERE sale_id IN ({marks}) ORDER BY id",
            tuple(ids),
        )
        by_sale: dict[int, list[dict[str, Any]]] = {i: [] for i in ids}
        for it in item_rows:
            by_sale[int(it["sale_id"])].append(it)
        return [sale_from_row(r, by_sale[int(r["id"])]) for r in rows]

    def get_sale(self, sale_id: RecordId) -> Optional[Sale]:
        r = self._fetch_one("SELECT * FROM sales WHERE id = ?", (int(sale_id),))
        if not r:
            return None
        return self._sales_with_items([r])[0]

    def list_sales(self, start_iso: Optional[str] = None, end_iso: Optional[str] = None) -> list[Sale]:
        clauses, params = [], []
        if start_iso:
            clauses.append("created_at >= ?")
            params.append(start_iso)
        if end_iso:
            clauses.append("created_at < ?")
            params.append(end_iso)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._fetch_all(f"SELECT * FROM sales {where} ORDER BY created_at DESC, id DESC", tuple(params))
        return self._sales_with_items(rows)

    def list_sales_for_customer(self, customer_id: RecordId, pending_only: bool = False) -> list[Sale]:
        sql = "SELECT * FROM sales WHERE customer_id = ?"
        if pending_only:
            sql += " AND payment_status = 'pendiente'"
        rows = self._fetch_all(sql + " ORDER BY created_at DESC, id DESC", (int(customer_id),))
        return self._sales_with_items(rows)

    # ---------- Expenses ----------
    def list_expenses(self) -> list[Expense]:
        rows = self._fetch_all("SELECT * FROM expenses ORDER BY expense_date DESC, id DESC")
        return [expense_from_row(r) for r in rows]

    def add_expense(self, values: dict[str, Any]) -> Expense:
        return expense_from_row(self._insert_and_get("expenses", values))

    def delete_expense(self, expense_id: RecordId) -> bool:
        return self._delete("expenses", expense_id)

    # ---------- Shopping list ----------
    def list_shopping_items(self) -> list[ShoppingListItem]:
        rows = self._fetch_all(
            """
            SELECT * FROM shopping_list
            ORDER BY is_completed ASC,
                     CASE priority WHEN 'alta' THEN 0 WHEN 'normal' THEN 1 ELSE 2 END ASC,
                     created_at DESC, id DESC
            """
        )
        return [shopping_item_from_row(r) for r in rows]

    def get_shopping_item(self, item_id: RecordId) -> Optional[ShoppingListItem]:
        r = self._fetch_one("SELECT * FROM shopping_list WHERE id = ?", (int(item_id),))
        return shopping_item_from_row(r) if r else None

    def add_shopping_item(self, values: dict[str, Any]) -> ShoppingListItem:
        return shopping_item_from_row(self._insert_and_get("shopping_list", values))

    def update_shopping_item(self, item_id: RecordId, values: dict[str, Any]) -> Optional[ShoppingListItem]:
        r = self._update_and_get("shopping_list", item_id, values)
        return shopping_item_from_row(r) if r else None

    def delete_shopping_item(self, item_id: RecordId) -> bool:
        return self._delete("shopping_list", item_id)

    # ---------- Suppliers ----------
    def list_suppliers(self, include_inactive: bool = False) -> list[Supplier]:
        where = "" if include_inactive else "WHERE is_active = 1"
        rows = self._fetch_all(f"SELECT * FROM suppliers {where} ORDER BY name")
        return [supplier_from_row(r) for r in rows]

    def add_supplier(self, values: dict[str, Any]) -> Supplier:
        return supplier_from_row(self._insert_and_get("suppliers", values))

    def delete_supplier(self, supplier_id: RecordId) -> bool:
        return self._delete("suppliers", supplier_id)
