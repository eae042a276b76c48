from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from tienda.domain.models import PRIORITIES


class ShoppingView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Compras")

        self.priority = tk.StringVar(value="normal")
        self.show_completed = tk.BooleanVar(value=True)
        self.supplier_search = tk.StringVar()

        self._build()

    def _build(self):
        tab = self.frame

        list_box = ttk.LabelFrame(tab, text="Lista de compras")
        list_box.pack(side="left", fill="both", expand=True, padx=(0, 6), pady=8)

        form = ttk.Frame(list_box)
        form.pack(fill="x", padx=6, pady=6)
        ttk.Label(form, text="Producto").grid(row=0, column=0, sticky="w")
        self.i_name = ttk.Entry(form, width=26)
        self.i_name.grid(row=0, column=1, padx=4)
        ttk.Label(form, text="Cant.").grid(row=0, column=2, sticky="w")
        self.i_qty = ttk.Entry(form, width=6)
        self.i_qty.grid(row=0, column=3, padx=4)
        ttk.Combobox(form, textvariable=self.priority, values=list(PRIORITIES), state="readonly", width=8)\
            .grid(row=0, column=4, padx=4)
        ttk.Button(form, text="Agregar", command=self.on_add_item).grid(row=0, column=5, padx=4)

        actions = ttk.Frame(list_box)
        actions.pack(fill="x", padx=6)
        ttk.Button(actions, text="✔ Completar / reabrir", command=self.on_toggle).pack(side="left")
        ttk.Button(actions, text="Eliminar", command=self.on_delete_item).pack(side="left", padx=6)
        ttk.Button(actions, text="Agregar productos con stock bajo", command=self.on_seed).pack(side="left", padx=6)
        ttk.Checkbutton(actions, text="Mostrar completados", variable=self.show_completed, command=self.refresh_items)\
            .pack(side="right")

        cols = ("id", "name", "qty", "priority", "notes", "done")
        self.items_tree = ttk.Treeview(list_box, columns=cols, show="headings", height=16)
        for c, head, w in zip(
            cols, ("ID", "Producto", "Cant.", "Prioridad", "Notas", "Comprado"), (48, 220, 60, 80, 160, 140)
        ):
            self.items_tree.heading(c, text=head)
            self.items_tree.column(c, width=w, anchor="w")
        self.items_tree.tag_configure("alta", background="#ffdddd")
        self.items_tree.tag_configure("done", foreground="#94a3b8")
        self.items_tree.pack(fill="both", expand=True, padx=6, pady=6)

        sup_box = ttk.LabelFrame(tab, text="Proveedores", width=420)
        sup_box.pack(side="right", fill="both", pady=8)

        sform = ttk.Frame(sup_box)
        sform.pack(fill="x", padx=6, pady=6)
        self.s_name = self._entry(sform, "Nombre", 0)
        self.s_contact = self._entry(sform, "Contacto", 1)
        self.s_phone = self._entry(sform, "Teléfono", 2)
        self.s_email = self._entry(sform, "Email", 3)
        self.s_products = self._entry(sform, "Productos", 4)
        ttk.Button(sform, text="Agregar proveedor", command=self.on_add_supplier)\
            .grid(row=5, column=0, columnspan=2, sticky="ew", pady=(6, 0))

        search = ttk.Frame(sup_box)
        search.pack(fill="x", padx=6)
        ttk.Label(search, text="Buscar").pack(side="left")
        e = ttk.Entry(search, textvariable=self.supplier_search, width=20)
        e.pack(side="left", padx=6)
        e.bind("<KeyRelease>", lambda _e: self.refresh_suppliers())
        ttk.Button(search, text="Eliminar", command=self.on_delete_supplier).pack(side="right")

        cols = ("id", "name", "phone", "products")
        self.sup_tree = ttk.Treeview(sup_box, columns=cols, show="headings", height=10)
        for c, head, w in zip(cols, ("ID", "Nombre", "Teléfono", "Productos"), (40, 140, 100, 140)):
            self.sup_tree.heading(c, text=head)
            self.sup_tree.column(c, width=w, anchor="w")
        self.sup_tree.pack(fill="both", expand=True, padx=6, pady=6)

    def _entry(self, parent, label, row):
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky="w", pady=2)
        e = ttk.Entry(parent, width=24)
        e.grid(row=row, column=1, sticky="ew", padx=4, pady=2)
        parent.columnconfigure(1, weight=1)
        return e

    def _selected(self, tree):
        sel = tree.selection()
        return tree.item(sel[0], "values")[0] if sel else None

    def on_add_item(self):
        try:
            self.app.shopping.add_item(self.i_name.get(), self.i_qty.get().strip() or 1, self.priority.get())
        except Exception as e:
            self.app.handle_error("Lista de compras", e, "No se pudo agregar a la lista.")
            return
        self.i_name.delete(0, tk.END)
        self.i_qty.delete(0, tk.END)
        self.refresh_items()

    def on_toggle(self):
        item_id = self._selected(self.items_tree)
        if item_id is None:
            return
        try:
            self.app.shopping.toggle_completed(item_id)
        except Exception as e:
            self.app.handle_error("Lista de compras", e, "No se pudo actualizar el artículo.")
            return
        self.refresh_items()

    def on_delete_item(self):
        item_id = self._selected(self.items_tree)
        if item_id is None:
            return
        try:
            self.app.shopping.delete_item(item_id)
        except Exception as e:
            self.app.handle_error("Lista de compras", e, "No se pudo eliminar el artículo.")
            return
        self.refresh_items()

    def on_seed(self):
        try:
            added = self.app.shopping.seed_from_low_stock()
        except Exception as e:
            self.app.handle_error("Lista de compras", e, "No se pudieron agregar sugerencias.")
            return
        self.app.toast(f"{len(added)} producto(s) agregados a la lista.", kind="success")
        self.refresh_items()

    def on_add_supplier(self):
        try:
            s = self.app.shopping.add_supplier(
                self.s_name.get(),
                contact_person=self.s_contact.get(),
                phone=self.s_phone.get(),
                email=self.s_email.get(),
                products_supplied=self.s_products.get(),
            )
        except Exception as e:
            self.app.handle_error("Proveedor", e, "No se pudo agregar el proveedor.")
            return
        for entry in (self.s_name, self.s_contact, self.s_phone, self.s_email, self.s_products):
            entry.delete(0, tk.END)
        self.app.toast(f"Proveedor '{s.name}' agregado.", kind="success")
        self.refresh_suppliers()

    def on_delete_supplier(self):
        supplier_id = self._selected(self.sup_tree)
        if supplier_id is None:
            return
        try:
            self.app.shopping.delete_supplier(supplier_id)
        except Exception as e:
            self.app.handle_error("Proveedor", e, "No se pudo eliminar el proveedor.")
            return
        self.refresh_suppliers()

    def refresh(self):
        self.refresh_items()
        self.refresh_suppliers()

    def refresh_items(self):
        for item in self.items_tree.get_children():
            self.items_tree.delete(item)
        rows = self.app.shopping.list_items() if self.show_completed.get() else self.app.shopping.pending_items()
        for i in rows:
            tag = "done" if i.is_completed else ("alta" if i.priority == "alta" else "")
            self.items_tree.insert("", "end", values=(
                i.id, i.product_name, i.quantity, i.priority, i.notes or "", i.completed_at or ""
            ), tags=(tag,) if tag else ())

    def refresh_suppliers(self):
        for item in self.sup_tree.get_children():
            self.sup_tree.delete(item)
        for s in self.app.shopping.search_suppliers(self.supplier_search.get()):
            self.sup_tree.insert("", "end", values=(s.id, s.name, s.phone or "", s.products_supplied or ""))
