from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
from datetime import date, timedelta
import logging

from tienda.domain.errors import AppError
from tienda.domain.models import CREDIT_METHOD, PAYMENT_METHODS, CartItem
from tienda.services.sales_service import add_to_cart, cart_total, set_cart_quantity

log = logging.getLogger(__name__)


class PosView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Ventas")

        self.cart: list[CartItem] = []
        self.pick = tk.StringVar()
        self.method = tk.StringVar(value="efectivo")
        self.customer_pick = tk.StringVar()
        self.total_var = tk.StringVar(value="Total: $0.00")

        self.all_choices: list[str] = []
        self.product_map: dict[str, object] = {}
        self.customer_map: dict[str, object] = {}
        self._processing = False

        self._build()

    def _build(self):
        tab = self.frame

        top = ttk.LabelFrame(tab, text="Agregar producto")
        top.pack(fill="x", padx=10, pady=10)

        ttk.Label(top, text="Buscar (nombre o código)").grid(row=0, column=0, padx=10, pady=8, sticky="w")
        self.combo = ttk.Combobox(top, textvariable=self.pick, width=56)
        self.combo.grid(row=0, column=1, padx=10, pady=8, sticky="w")
        self.combo.bind("<KeyRelease>", lambda e: self._filter_choices(self.pick.get()))
        self.combo.bind("<Return>", lambda _e: self.add_picked())

        ttk.Label(top, text="Cant.").grid(row=0, column=2, padx=10, pady=8, sticky="w")
        self.qty_e = ttk.Entry(top, width=8)
        self.qty_e.grid(row=0, column=3, padx=10, pady=8, sticky="w")
        self.qty_e.bind("<Return>", lambda _e: self.add_picked())

        ttk.Button(top, text="Agregar", style="Big.TButton", command=self.add_picked)\
            .grid(row=0, column=4, padx=10, pady=8)

        self.fav_row = ttk.Frame(top)
        self.fav_row.grid(row=1, column=0, columnspan=5, sticky="w", padx=10, pady=(0, 8))

        mid = ttk.Frame(tab)
        mid.pack(fill="both", expand=True, padx=10, pady=(0, 10))

        cart_box = ttk.LabelFrame(mid, text="Carrito")
        cart_box.pack(side="left", fill="both", expand=True, padx=(0, 10))

        cols = ("name", "qty", "price", "line")
        self.cart_tree = ttk.Treeview(cart_box, columns=cols, show="headings", height=14)
        heads = {"name": "Producto", "qty": "Cant.", "price": "Precio", "line": "Subtotal"}
        widths = {"name": 420, "qty": 70, "price": 110, "line": 110}
        for c in cols:
            self.cart_tree.heading(c, text=heads[c])
            self.cart_tree.column(c, width=widths[c], anchor="w")
        self.cart_tree.pack(fill="both", expand=True, padx=10, pady=10)

        btnrow = ttk.Frame(cart_box)
        btnrow.pack(fill="x", padx=10, pady=(0, 10))
        ttk.Button(btnrow, text="+1", command=lambda: self.bump_selected(1)).pack(side="left")
        ttk.Button(btnrow, text="-1", command=lambda: self.bump_selected(-1)).pack(side="left", padx=6)
        ttk.Button(btnrow, text="Quitar", command=self.remove_selected).pack(side="left", padx=6)
        ttk.Button(btnrow, text="Vaciar", command=self.clear_cart).pack(side="left", padx=6)

        right = ttk.LabelFrame(mid, text="Cobrar")
        right.pack(side="right", fill="y")

        ttk.Label(right, text="Método de pago").pack(anchor="w", padx=10, pady=(10, 4))
        ttk.Combobox(right, textvariable=self.method, values=list(PAYMENT_METHODS), state="readonly", width=30)\
            .pack(padx=10)

        ttk.Label(right, text="Cliente (obligatorio para fiado)").pack(anchor="w", padx=10, pady=(10, 4))
        self.customer_combo = ttk.Combobox(right, textvariable=self.customer_pick, state="readonly", width=30)
        self.customer_combo.pack(padx=10)

        ttk.Label(right, text="Notas (opcional)").pack(anchor="w", padx=10, pady=(10, 4))
        self.notes = tk.Text(right, width=32, height=4)
        self.notes.pack(padx=10)

        ttk.Label(right, textvariable=self.total_var, style="Title.TLabel").pack(anchor="w", padx=10, pady=10)

        self.confirm_btn = ttk.Button(right, text="Confirmar venta", style="Big.TButton", command=self.confirm_sale)
        self.confirm_btn.pack(fill="x", padx=10, pady=(0, 10))

        hist = ttk.LabelFrame(tab, text="Ventas recientes (doble clic para detalle)")
        hist.pack(fill="both", expand=True, padx=10, pady=(0, 10))

        cols = ("id", "number", "dt", "method", "status", "total")
        self.sales_tree = ttk.Treeview(hist, columns=cols, show="headings", height=7)
        heads = {"id": "ID", "number": "Folio", "dt": "Fecha", "method": "Método", "status": "Estado", "total": "Total"}
        widths = {"id": 60, "number": 160, "dt": 180, "method": 120, "status": 100, "total": 110}
        for c in cols:
            self.sales_tree.heading(c, text=heads[c])
            self.sales_tree.column(c, width=widths[c], anchor="w")
        self.sales_tree.pack(fill="both", expand=True, padx=10, pady=(0, 10))
        self.sales_tree.bind("<Double-1>", self.open_sale_details)

    # ---------- choices ----------
    def _filter_choices(self, typed: str):
        typed = typed.strip().lower()
        self.combo["values"] = self.all_choices if not typed else [c for c in self.all_choices if typed in c.lower()]

    def refresh(self):
        products = self.app.inventory.list_products()
        self.product_map = {}
        for p in products:
            code = f"[{p.barcode}] " if p.barcode else ""
            self.product_map[f"{code}{p.name} (${p.sale_price:.2f}, stock {p.stock})"] = p
        self.all_choices = list(self.product_map)
        self.combo["values"] = self.all_choices

        for w in self.fav_row.winfo_children():
            w.destroy()
        for p in self.app.inventory.list_favorites():
            ttk.Button(self.fav_row, text=f"⭐ {p.name}", command=lambda prod=p: self._add(prod, 1))\
                .pack(side="left", padx=(0, 6))

        self.customer_map = {f"{c.name} (debe ${c.current_debt:.2f})": c for c in self.app.credit.list_customers()}
        self.customer_combo["values"] = [""] + list(self.customer_map)

        self._sync_cart_products(products)
        self.refresh_cart_view()
        self.refresh_history()

    def _sync_cart_products(self, products):
        # keep cart lines pointing at fresh product rows (price and stock)
        by_id = {p.id: p for p in products}
        self.cart = [CartItem(by_id[it.product.id], it.quantity) for it in self.cart if it.product.id in by_id]

    # ---------- cart ----------
    def _add(self, product, qty: int):
        try:
            add_to_cart(self.cart, product, qty)
        except AppError as e:
            messagebox.showwarning("Stock", str(e))
            return
        self.refresh_cart_view()
        self.app.toast(f"{product.name} agregado.", kind="success", ms=1200)

    def add_picked(self):
        picked = self.pick.get().strip()
        product = self.product_map.get(picked)
        if product is None:
            # barcode scanners type the code and press Enter
            try:
                product = self.app.inventory.get_product_by_barcode(picked)
            except AppError:
                messagebox.showwarning("Validación", "Elige un producto de la lista.")
                return
        raw = self.qty_e.get().strip() or "1"
        try:
            qty = int(float(raw))
        except ValueError:
            messagebox.showwarning("Validación", "La cantidad debe ser un número entero.")
            return
        self._add(product, qty)
        self.qty_e.delete(0, tk.END)
        self.pick.set("")

    def refresh_cart_view(self):
        for item in self.cart_tree.get_children():
            self.cart_tree.delete(item)
        for it in self.cart:
            self.cart_tree.insert("", "end", iid=str(it.product.id), values=(
                it.product.name, it.quantity, f"{it.product.sale_price:.2f}", f"{it.subtotal:.2f}"
            ))
        self.total_var.set(f"Total: ${cart_total(self.cart):.2f}")

    def _selected_item(self):
        sel = self.cart_tree.selection()
        if not sel:
            return None
        return next((it for it in self.cart if str(it.product.id) == sel[0]), None)

    def bump_selected(self, delta: int):
        it = self._selected_item()
        if it is None:
            return
        try:
            set_cart_quantity(self.cart, it.product.id, it.quantity + delta)
        except AppError as e:
            messagebox.showwarning("Stock", str(e))
            return
        self.refresh_cart_view()

    def remove_selected(self):
        it = self._selected_item()
        if it is None:
            return
        set_cart_quantity(self.cart, it.product.id, 0)
        self.refresh_cart_view()

    def clear_cart(self):
        self.cart = []
        self.refresh_cart_view()

    def confirm_sale(self):
        if self._processing:
            return
        if not self.cart:
            messagebox.showwarning("Vacío", "El carrito está vacío.")
            return

        method = self.method.get()
        customer = self.customer_map.get(self.customer_pick.get())
        if method == CREDIT_METHOD and customer is None:
            messagebox.showwarning("Fiado", "Selecciona un cliente para vender a crédito.")
            return
        notes = self.notes.get("1.0", "end").strip() or None

        self._processing = True
        self.confirm_btn.state(["disabled"])
        try:
            sale = self.app.sales.checkout(
                self.cart, method, customer_id=customer.id if customer else None, notes=notes
            )
        except Exception as e:
            self.app.handle_error("Venta fallida", e, "No se pudo registrar la venta.")
            return
        finally:
            self._processing = False
            self.confirm_btn.state(["!disabled"])

        messagebox.showinfo("Venta registrada", f"Folio {sale.sale_number}\nTotal ${sale.total:.2f}")
        self.app.toast(f"Venta {sale.sale_number} registrada.", kind="success")
        self.notes.delete("1.0", "end")
        self.customer_pick.set("")
        self.method.set("efectivo")
        self.clear_cart()
        self.app.refresh_all(show_toast=False)

    # ---------- history ----------
    def refresh_history(self):
        start = (date.today() - timedelta(days=7)).isoformat()
        rows = self.app.sales.list_sales(start_iso=start)

        for item in self.sales_tree.get_children():
            self.sales_tree.delete(item)
        for s in rows[:200]:
            self.sales_tree.insert("", "end", values=(
                s.id, s.sale_number, s.created_at, s.payment_method, s.payment_status, f"{s.total:.2f}"
            ))

    def open_sale_details(self, _evt=None):
        sel = self.sales_tree.selection()
        if not sel:
            return
        sale_id = self.sales_tree.item(sel[0], "values")[0]
        try:
            sale = self.app.sales.get_sale(sale_id)
        except AppError as e:
            self.app.handle_error("Detalle de venta", e, "Venta no encontrada.")
            return

        win = tk.Toplevel(self.app)
        win.title(f"Venta {sale.sale_number}")
        win.geometry("760x420")

        h = ttk.LabelFrame(win, text="Encabezado")
        h.pack(fill="x", padx=10, pady=10)
        ttk.Label(h, text=f"Fecha: {sale.created_at}").pack(anchor="w", padx=10, pady=2)
        ttk.Label(h, text=f"Método: {sale.payment_method} | Estado: {sale.payment_status} | Total: ${sale.total:.2f}")\
            .pack(anchor="w", padx=10, pady=2)
        ttk.Label(h, text=f"Notas: {sale.notes or ''}").pack(anchor="w", padx=10, pady=2)

        box = ttk.LabelFrame(win, text="Productos")
        box.pack(fill="both", expand=True, padx=10, pady=(0, 10))
        cols = ("name", "qty", "price", "line")
        tree = ttk.Treeview(box, columns=cols, show="headings", height=10)
        for c, head, w in zip(cols, ("Producto", "Cant.", "Precio", "Subtotal"), (380, 70, 110, 110)):
            tree.heading(c, text=head)
            tree.column(c, width=w, anchor="w")
        tree.pack(fill="both", expand=True, padx=10, pady=10)
        for it in sale.items:
            tree.insert("", "end", values=(it.product_name, it.quantity, f"{it.unit_price:.2f}", f"{it.subtotal:.2f}"))
