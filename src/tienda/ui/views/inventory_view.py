from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
import logging

from tienda.domain.models import PRODUCT_UNITS

log = logging.getLogger(__name__)


class InventoryView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Inventario")

        tab = self.frame
        style = ttk.Style(self.frame)
        style.configure("ProductsCompact.Treeview", rowheight=24, font=("Segoe UI", 9))
        style.configure("ProductsCompact.Treeview.Heading", font=("Segoe UI", 9, "bold"))

        self.search_var = tk.StringVar()
        self.unit_var = tk.StringVar(value="pieza")
        self.editing_id = None
        self._rows = []

        left = ttk.LabelFrame(tab, text="Producto", width=280)
        left.pack(side="left", fill="y", padx=(0, 6), pady=8)
        left.pack_propagate(False)

        right = ttk.LabelFrame(tab, text="Catálogo")
        right.pack(side="right", fill="both", expand=True, pady=8)

        self.p_barcode = self._entry(left, "Código", 0)
        self.p_name = self._entry(left, "Nombre", 1)
        self.p_category = self._entry(left, "Categoría", 2)
        self.p_cost = self._entry(left, "Precio compra", 3)
        self.p_price = self._entry(left, "Precio venta", 4)
        self.p_stock = self._entry(left, "Stock", 5)
        self.p_min = self._entry(left, "Stock mínimo", 6)

        ttk.Label(left, text="Unidad").grid(row=7, column=0, sticky="w", padx=8, pady=4)
        ttk.Combobox(left, textvariable=self.unit_var, values=list(PRODUCT_UNITS), state="readonly", width=14)\
            .grid(row=7, column=1, sticky="ew", padx=8, pady=4)

        btns = ttk.Frame(left)
        btns.grid(row=8, column=0, columnspan=2, sticky="ew", padx=8, pady=(6, 8))
        for i in range(2):
            btns.columnconfigure(i, weight=1)

        ttk.Button(btns, text="Guardar", command=self.on_save).grid(row=0, column=0, sticky="ew", padx=(0, 4), pady=2)
        ttk.Button(btns, text="Limpiar", command=self.clear_form).grid(row=0, column=1, sticky="ew", padx=(4, 0), pady=2)
        ttk.Button(btns, text="⭐ Favorito", command=self.on_toggle_favorite)\
            .grid(row=1, column=0, sticky="ew", padx=(0, 4), pady=2)
        ttk.Button(btns, text="Eliminar", command=self.on_delete).grid(row=1, column=1, sticky="ew", padx=(4, 0), pady=2)

        self.mode_label = ttk.Label(left, text="Nuevo producto")
        self.mode_label.grid(row=9, column=0, columnspan=2, sticky="w", padx=8, pady=4)

        search = ttk.Frame(right)
        search.pack(fill="x", padx=6, pady=(6, 0))
        ttk.Label(search, text="Buscar").pack(side="left")
        e = ttk.Entry(search, textvariable=self.search_var, width=40)
        e.pack(side="left", padx=8)
        e.bind("<KeyRelease>", lambda _e: self.refresh())

        tree_wrap = ttk.Frame(right)
        tree_wrap.pack(fill="both", expand=True, padx=6, pady=6)

        cols = ("id", "fav", "barcode", "name", "category", "cost", "price", "stock", "min", "unit")
        self.tree = ttk.Treeview(tree_wrap, columns=cols, show="headings", height=20, style="ProductsCompact.Treeview")
        heads = {
            "id": "ID", "fav": "⭐", "barcode": "Código", "name": "Nombre", "category": "Categoría",
            "cost": "Compra", "price": "Venta", "stock": "Stock", "min": "Mín", "unit": "Unidad",
        }
        widths = {
            "id": 48, "fav": 30, "barcode": 110, "name": 240, "category": 110,
            "cost": 80, "price": 80, "stock": 64, "min": 54, "unit": 70,
        }
        for c in cols:
            self.tree.heading(c, text=heads[c])
            self.tree.column(c, width=widths[c], anchor="w")
        self.tree.tag_configure("low", background="#ffdddd")
        self.tree.bind("<<TreeviewSelect>>", self.on_select)

        vsb = ttk.Scrollbar(tree_wrap, orient="vertical", command=self.tree.yview)
        self.tree.configure(yscrollcommand=vsb.set)
        self.tree.grid(row=0, column=0, sticky="nsew")
        vsb.grid(row=0, column=1, sticky="ns")
        tree_wrap.columnconfigure(0, weight=1)
        tree_wrap.rowconfigure(0, weight=1)

    def _entry(self, parent, label, row):
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky="w", padx=8, pady=4)
        e = ttk.Entry(parent, width=16)
        e.grid(row=row, column=1, sticky="ew", padx=8, pady=4)
        parent.columnconfigure(1, weight=1)
        return e

    def _form_values(self) -> dict:
        values = {
            "barcode": self.p_barcode.get(),
            "name": self.p_name.get(),
            "category": self.p_category.get(),
            "purchase_price": self.p_cost.get().strip() or 0,
            "sale_price": self.p_price.get().strip(),
            "stock": self.p_stock.get().strip() or 0,
            "min_stock": self.p_min.get().strip() or 5,
            "unit": self.unit_var.get(),
        }
        try:
            values["stock"] = int(float(values["stock"]))
            values["min_stock"] = int(float(values["min_stock"]))
        except ValueError:
            raise ValueError("Stock y stock mínimo deben ser números enteros.")
        return values

    def on_save(self):
        try:
            values = self._form_values()
            if self.editing_id is None:
                p = self.app.inventory.add_product(**values)
                self.app.toast(f"Producto '{p.name}' agregado.", kind="success")
            else:
                p = self.app.inventory.update_product(self.editing_id, **values)
                self.app.toast(f"Producto '{p.name}' actualizado.", kind="success")
            self.clear_form()
            self.app.refresh_all(show_toast=False)
        except Exception as e:
            self.app.handle_error("Producto", e, "No se pudo guardar el producto.")

    def _selected_id(self):
        selected = self.tree.selection()
        if not selected:
            return None
        return self.tree.item(selected[0], "values")[0]

    def on_toggle_favorite(self):
        product_id = self._selected_id()
        if product_id is None:
            messagebox.showwarning("Favorito", "Selecciona un producto.")
            return
        try:
            p = self.app.inventory.toggle_favorite(product_id)
            self.app.toast(("Marcado" if p.is_favorite else "Quitado de") + f" favoritos: {p.name}", kind="success")
            self.app.refresh_all(show_toast=False)
        except Exception as e:
            self.app.handle_error("Favorito", e, "No se pudo cambiar el favorito.")

    def on_delete(self):
        product_id = self._selected_id()
        if product_id is None:
            messagebox.showwarning("Eliminar", "Selecciona un producto.")
            return
        name = self.tree.item(self.tree.selection()[0], "values")[3]
        if not messagebox.askyesno("Confirmar", f"¿Eliminar '{name}' del catálogo?", parent=self.frame):
            return
        try:
            self.app.inventory.delete_product(product_id)
            self.app.toast("Producto eliminado.", kind="success")
            self.clear_form()
            self.app.refresh_all(show_toast=False)
        except Exception as e:
            self.app.handle_error("Eliminar producto", e, "No se pudo eliminar el producto.")

    def on_select(self, _evt=None):
        product_id = self._selected_id()
        if product_id is None:
            return
        p = next((x for x in self._rows if str(x.id) == str(product_id)), None)
        if p is None:
            return
        self.clear_form(focus=False)
        self.editing_id = p.id
        for entry, value in (
            (self.p_barcode, p.barcode), (self.p_name, p.name), (self.p_category, p.category),
            (self.p_cost, p.purchase_price), (self.p_price, p.sale_price),
            (self.p_stock, p.stock), (self.p_min, p.min_stock),
        ):
            entry.insert(0, "" if value is None else str(value))
        self.unit_var.set(p.unit)
        self.mode_label.config(text=f"Editando #{p.id}")

    def clear_form(self, focus: bool = True):
        for e in (self.p_barcode, self.p_name, self.p_category, self.p_cost, self.p_price, self.p_stock, self.p_min):
            e.delete(0, tk.END)
        self.unit_var.set("pieza")
        self.editing_id = None
        self.mode_label.config(text="Nuevo producto")
        if focus:
            self.p_barcode.focus_set()

    def refresh(self):
        for item in self.tree.get_children():
            self.tree.delete(item)

        self._rows = self.app.inventory.search(self.search_var.get())
        for p in self._rows:
            self.tree.insert(
                "", "end", iid=str(p.id),
                values=(
                    p.id, "⭐" if p.is_favorite else "", p.barcode or "", p.name, p.category or "",
                    f"{p.purchase_price:.2f}", f"{p.sale_price:.2f}", p.stock, p.min_stock, p.unit,
                ),
                tags=("low",) if p.is_low_stock else (),
            )

    def select_product(self, product_id):
        iid = str(product_id)
        if self.tree.exists(iid):
            self.tree.selection_set(iid)
            self.tree.focus(iid)
            self.tree.see(iid)
