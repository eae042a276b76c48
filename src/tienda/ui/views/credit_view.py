from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox

from tienda.domain.models import EXPENSE_PAYMENT_METHODS


class CreditView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Fiado")

        self.search_var = tk.StringVar()
        self.pay_method = tk.StringVar(value="efectivo")
        self.summary_var = tk.StringVar(value="")
        self._customers = []

        self._build()

    def _build(self):
        tab = self.frame

        left = ttk.Frame(tab)
        left.pack(side="left", fill="y", padx=(0, 6), pady=8)

        form = ttk.LabelFrame(left, text="Cliente")
        form.pack(fill="x")
        self.c_name = self._entry(form, "Nombre", 0)
        self.c_phone = self._entry(form, "Teléfono", 1)
        self.c_address = self._entry(form, "Dirección", 2)
        self.c_limit = self._entry(form, "Límite de crédito", 3)
        ttk.Button(form, text="Agregar cliente", command=self.on_add_customer)\
            .grid(row=4, column=0, columnspan=2, sticky="ew", padx=8, pady=(6, 0))
        ttk.Button(form, text="Guardar cambios", command=self.on_update_customer)\
            .grid(row=5, column=0, columnspan=2, sticky="ew", padx=8, pady=(4, 8))

        pay = ttk.LabelFrame(left, text="Registrar abono")
        pay.pack(fill="x", pady=(10, 0))
        self.p_amount = self._entry(pay, "Monto", 0)
        ttk.Label(pay, text="Método").grid(row=1, column=0, sticky="w", padx=8, pady=4)
        ttk.Combobox(pay, textvariable=self.pay_method, values=list(EXPENSE_PAYMENT_METHODS), state="readonly", width=14)\
            .grid(row=1, column=1, sticky="ew", padx=8, pady=4)
        self.p_notes = self._entry(pay, "Notas", 2)
        ttk.Button(pay, text="Registrar abono", command=self.on_payment)\
            .grid(row=3, column=0, columnspan=2, sticky="ew", padx=8, pady=(6, 4))
        ttk.Button(pay, text="Saldar deuda completa", command=self.on_pay_all)\
            .grid(row=4, column=0, columnspan=2, sticky="ew", padx=8, pady=(0, 8))

        ttk.Button(left, text="Desactivar cliente", command=self.on_deactivate).pack(fill="x", pady=(10, 0))
        ttk.Label(left, textvariable=self.summary_var, justify="left").pack(anchor="w", pady=(10, 0))

        right = ttk.Frame(tab)
        right.pack(side="right", fill="both", expand=True, pady=8)

        box = ttk.LabelFrame(right, text="Clientes")
        box.pack(fill="both", expand=True)

        search = ttk.Frame(box)
        search.pack(fill="x", padx=6, pady=(6, 0))
        ttk.Label(search, text="Buscar").pack(side="left")
        e = ttk.Entry(search, textvariable=self.search_var, width=30)
        e.pack(side="left", padx=8)
        e.bind("<KeyRelease>", lambda _e: self.refresh_customers())

        cols = ("id", "name", "phone", "debt", "limit")
        self.tree = ttk.Treeview(box, columns=cols, show="headings", height=10)
        for c, head, w in zip(cols, ("ID", "Nombre", "Teléfono", "Deuda", "Límite"), (48, 240, 120, 100, 100)):
            self.tree.heading(c, text=head)
            self.tree.column(c, width=w, anchor="w")
        self.tree.tag_configure("over", background="#ffdddd")
        self.tree.tag_configure("debt", background="#fff4d6")
        self.tree.pack(fill="both", expand=True, padx=6, pady=6)
        self.tree.bind("<<TreeviewSelect>>", self.on_select)

        detail = ttk.Frame(right)
        detail.pack(fill="both", expand=True, pady=(8, 0))

        pending = ttk.LabelFrame(detail, text="Ventas fiadas pendientes")
        pending.pack(side="left", fill="both", expand=True, padx=(0, 6))
        cols = ("number", "dt", "total")
        self.pending_tree = ttk.Treeview(pending, columns=cols, show="headings", height=8)
        for c, head, w in zip(cols, ("Folio", "Fecha", "Total"), (150, 160, 90)):
            self.pending_tree.heading(c, text=head)
            self.pending_tree.column(c, width=w, anchor="w")
        self.pending_tree.pack(fill="both", expand=True, padx=6, pady=6)

        payments = ttk.LabelFrame(detail, text="Abonos")
        payments.pack(side="right", fill="both", expand=True)
        cols = ("dt", "customer", "amount", "method")
        self.pay_tree = ttk.Treeview(payments, columns=cols, show="headings", height=8)
        for c, head, w in zip(cols, ("Fecha", "Cliente", "Monto", "Método"), (150, 160, 90, 100)):
            self.pay_tree.heading(c, text=head)
            self.pay_tree.column(c, width=w, anchor="w")
        self.pay_tree.pack(fill="both", expand=True, padx=6, pady=6)

    def _entry(self, parent, label, row):
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky="w", padx=8, pady=4)
        e = ttk.Entry(parent, width=18)
        e.grid(row=row, column=1, sticky="ew", padx=8, pady=4)
        parent.columnconfigure(1, weight=1)
        return e

    def _selected(self):
        sel = self.tree.selection()
        if not sel:
            return None
        return next((c for c in self._customers if str(c.id) == sel[0]), None)

    def on_add_customer(self):
        try:
            c = self.app.credit.add_customer(
                name=self.c_name.get(),
                phone=self.c_phone.get(),
                address=self.c_address.get(),
                credit_limit=self.c_limit.get().strip() or 0,
            )
        except Exception as e:
            self.app.handle_error("Cliente", e, "No se pudo agregar el cliente.")
            return
        for entry in (self.c_name, self.c_phone, self.c_address, self.c_limit):
            entry.delete(0, tk.END)
        self.app.toast(f"Cliente '{c.name}' agregado.", kind="success")
        self.app.refresh_all(show_toast=False)

    def on_update_customer(self):
        customer = self._selected()
        if customer is None:
            messagebox.showwarning("Cliente", "Selecciona un cliente.")
            return
        try:
            c = self.app.credit.update_customer(
                customer.id,
                name=self.c_name.get(),
                phone=self.c_phone.get(),
                address=self.c_address.get(),
                credit_limit=self.c_limit.get().strip() or 0,
            )
        except Exception as e:
            self.app.handle_error("Cliente", e, "No se pudo actualizar el cliente.")
            return
        self.app.toast(f"Cliente '{c.name}' actualizado.", kind="success")
        self.app.refresh_all(show_toast=False)
        self.select_customer(c.id)

    def on_select(self, _evt=None):
        customer = self._selected()
        if customer is not None:
            for entry, value in (
                (self.c_name, customer.name), (self.c_phone, customer.phone),
                (self.c_address, customer.address), (self.c_limit, customer.credit_limit),
            ):
                entry.delete(0, tk.END)
                entry.insert(0, "" if value is None else str(value))
        self.refresh_detail()

    def _pay(self, amount):
        customer = self._selected()
        if customer is None:
            messagebox.showwarning("Abono", "Selecciona un cliente.")
            return
        try:
            self.app.credit.record_payment(
                customer.id, amount, self.pay_method.get(), notes=self.p_notes.get()
            )
        except Exception as e:
            self.app.handle_error("Abono", e, "No se pudo registrar el abono.")
            return
        self.p_amount.delete(0, tk.END)
        self.p_notes.delete(0, tk.END)
        self.app.toast(f"Abono registrado para {customer.name}.", kind="success")
        self.app.refresh_all(show_toast=False)
        self.select_customer(customer.id)

    def on_payment(self):
        self._pay(self.p_amount.get().strip() or 0)

    def on_pay_all(self):
        customer = self._selected()
        if customer is None:
            messagebox.showwarning("Abono", "Selecciona un cliente.")
            return
        self._pay(customer.current_debt)

    def on_deactivate(self):
        customer = self._selected()
        if customer is None:
            return
        warn = f"\n\nTodavía debe ${customer.current_debt:.2f}." if customer.current_debt > 0 else ""
        if not messagebox.askyesno("Confirmar", f"¿Desactivar a {customer.name}?{warn}", parent=self.frame):
            return
        try:
            self.app.credit.deactivate_customer(customer.id)
        except Exception as e:
            self.app.handle_error("Cliente", e, "No se pudo desactivar el cliente.")
            return
        self.app.refresh_all(show_toast=False)

    def refresh(self):
        self.refresh_customers()
        self.refresh_detail()
        summary = self.app.credit.ledger_summary()
        self.summary_var.set(
            f"Deuda total: ${summary.total_debt:.2f}\n"
            f"Clientes con deuda: {summary.customers_with_debt}\n"
            f"Sobre el límite: {len(summary.over_limit)}"
        )

    def refresh_customers(self):
        selected = self.tree.selection()
        for item in self.tree.get_children():
            self.tree.delete(item)
        self._customers = self.app.credit.search_customers(self.search_var.get())
        for c in self._customers:
            tag = "over" if c.is_over_limit else ("debt" if c.current_debt > 0 else "")
            self.tree.insert(
                "", "end", iid=str(c.id),
                values=(c.id, c.name, c.phone or "", f"{c.current_debt:.2f}", f"{c.credit_limit:.2f}"),
                tags=(tag,) if tag else (),
            )
        if selected and self.tree.exists(selected[0]):
            self.tree.selection_set(selected[0])

    def refresh_detail(self):
        for tree in (self.pending_tree, self.pay_tree):
            for item in tree.get_children():
                tree.delete(item)

        customer = self._selected()
        if customer is None:
            payments = self.app.credit.list_payments()
        else:
            payments = self.app.credit.payments_for_customer(customer.id)
            for s in self.app.credit.pending_sales(customer.id):
                self.pending_tree.insert("", "end", values=(s.sale_number, s.created_at, f"{s.total:.2f}"))

        for p in payments:
            self.pay_tree.insert("", "end", values=(p.created_at, p.customer_name or "", f"{p.amount:.2f}", p.payment_method))

    def select_customer(self, customer_id):
        iid = str(customer_id)
        if self.tree.exists(iid):
            self.tree.selection_set(iid)
            self.tree.see(iid)
