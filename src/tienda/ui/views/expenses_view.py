from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
from datetime import date

from tienda.domain.models import EXPENSE_CATEGORIES, EXPENSE_PAYMENT_METHODS


class ExpensesView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Gastos")

        self.category = tk.StringVar(value=EXPENSE_CATEGORIES[0])
        self.method = tk.StringVar(value="efectivo")
        self.month = tk.StringVar(value=date.today().strftime("%Y-%m"))
        self.total_var = tk.StringVar(value="")

        self._build()

    def _build(self):
        tab = self.frame

        form = ttk.LabelFrame(tab, text="Registrar gasto", width=300)
        form.pack(side="left", fill="y", padx=(0, 6), pady=8)
        form.pack_propagate(False)

        ttk.Label(form, text="Descripción").grid(row=0, column=0, sticky="w", padx=8, pady=4)
        self.e_desc = ttk.Entry(form, width=20)
        self.e_desc.grid(row=0, column=1, sticky="ew", padx=8, pady=4)

        ttk.Label(form, text="Categoría").grid(row=1, column=0, sticky="w", padx=8, pady=4)
        ttk.Combobox(form, textvariable=self.category, values=list(EXPENSE_CATEGORIES), state="readonly", width=22)\
            .grid(row=1, column=1, sticky="ew", padx=8, pady=4)

        ttk.Label(form, text="Monto").grid(row=2, column=0, sticky="w", padx=8, pady=4)
        self.e_amount = ttk.Entry(form, width=20)
        self.e_amount.grid(row=2, column=1, sticky="ew", padx=8, pady=4)

        ttk.Label(form, text="Método").grid(row=3, column=0, sticky="w", padx=8, pady=4)
        ttk.Combobox(form, textvariable=self.method, values=list(EXPENSE_PAYMENT_METHODS), state="readonly", width=22)\
            .grid(row=3, column=1, sticky="ew", padx=8, pady=4)

        ttk.Label(form, text="Fecha (AAAA-MM-DD)").grid(row=4, column=0, sticky="w", padx=8, pady=4)
        self.e_date = ttk.Entry(form, width=20)
        self.e_date.grid(row=4, column=1, sticky="ew", padx=8, pady=4)

        ttk.Label(form, text="Notas").grid(row=5, column=0, sticky="w", padx=8, pady=4)
        self.e_notes = ttk.Entry(form, width=20)
        self.e_notes.grid(row=5, column=1, sticky="ew", padx=8, pady=4)
        form.columnconfigure(1, weight=1)

        ttk.Button(form, text="Guardar gasto", command=self.on_add)\
            .grid(row=6, column=0, columnspan=2, sticky="ew", padx=8, pady=(8, 4))
        ttk.Button(form, text="Eliminar seleccionado", command=self.on_delete)\
            .grid(row=7, column=0, columnspan=2, sticky="ew", padx=8, pady=4)

        right = ttk.Frame(tab)
        right.pack(side="right", fill="both", expand=True, pady=8)

        top = ttk.Frame(right)
        top.pack(fill="x")
        ttk.Label(top, text="Mes (AAAA-MM)").pack(side="left")
        ttk.Entry(top, textvariable=self.month, width=10).pack(side="left", padx=8)
        ttk.Button(top, text="Filtrar", command=self.refresh).pack(side="left")
        ttk.Label(top, textvariable=self.total_var, style="Title.TLabel").pack(side="right")

        cols = ("id", "date", "desc", "category", "method", "amount")
        self.tree = ttk.Treeview(right, columns=cols, show="headings", height=16)
        for c, head, w in zip(
            cols,
            ("ID", "Fecha", "Descripción", "Categoría", "Método", "Monto"),
            (48, 100, 260, 200, 110, 100),
        ):
            self.tree.heading(c, text=head)
            self.tree.column(c, width=w, anchor="w")
        self.tree.pack(fill="both", expand=True, pady=(8, 0))

        cat_box = ttk.LabelFrame(right, text="Por categoría")
        cat_box.pack(fill="x", pady=(8, 0))
        self.cat_list = tk.Listbox(cat_box, height=6)
        self.cat_list.pack(fill="x", padx=6, pady=6)

    def on_add(self):
        try:
            e = self.app.expenses.add_expense(
                description=self.e_desc.get(),
                category=self.category.get(),
                amount=self.e_amount.get().strip() or 0,
                payment_method=self.method.get(),
                expense_date=self.e_date.get().strip() or None,
                notes=self.e_notes.get(),
            )
        except Exception as err:
            self.app.handle_error("Gasto", err, "No se pudo registrar el gasto.")
            return
        for entry in (self.e_desc, self.e_amount, self.e_date, self.e_notes):
            entry.delete(0, tk.END)
        self.app.toast(f"Gasto registrado: ${e.amount:.2f}", kind="success")
        self.app.refresh_all(show_toast=False)

    def on_delete(self):
        sel = self.tree.selection()
        if not sel:
            return
        expense_id, _, desc = self.tree.item(sel[0], "values")[:3]
        if not messagebox.askyesno("Confirmar", f"¿Eliminar el gasto '{desc}'?", parent=self.frame):
            return
        try:
            self.app.expenses.delete_expense(expense_id)
        except Exception as err:
            self.app.handle_error("Gasto", err, "No se pudo eliminar el gasto.")
            return
        self.app.refresh_all(show_toast=False)

    def refresh(self):
        month = self.month.get().strip()
        rows = self.app.expenses.expenses_for_month(month) if month else self.app.expenses.list_expenses()

        for item in self.tree.get_children():
            self.tree.delete(item)
        for e in rows:
            self.tree.insert("", "end", values=(
                e.id, e.expense_date, e.description, e.category, e.payment_method, f"{e.amount:.2f}"
            ))

        total = sum(e.amount for e in rows)
        self.total_var.set(f"Total: ${total:.2f}")

        self.cat_list.delete(0, tk.END)
        for category, amount in self.app.expenses.totals_by_category(month or None).items():
            self.cat_list.insert(tk.END, f"{category}: ${amount:.2f}")
