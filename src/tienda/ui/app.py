from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
import logging

from tienda.domain.errors import AppError
from tienda.ui.views.pos_view import PosView
from tienda.ui.views.inventory_view import InventoryView
from tienda.ui.views.credit_view import CreditView
from tienda.ui.views.expenses_view import ExpensesView
from tienda.ui.views.shopping_view import ShoppingView
from tienda.ui.views.reports_view import ReportsView

log = logging.getLogger(__name__)


class App(tk.Tk):
    def __init__(self, container, logs_dir: str):
        super().__init__()
        self.container = container
        self.title(container.settings.store_name)
        self.geometry("1280x760")
        self.minsize(1120, 640)

        self.inventory = container.inventory
        self.sales = container.sales
        self.credit = container.credit
        self.expenses = container.expenses
        self.shopping = container.shopping
        self.excel = container.excel
        self.reporting = container.reporting

        self.logs_dir = logs_dir

        self.status_var = tk.StringVar(value="")
        self._toast_after_id = None

        self._build_styles()
        self._build_topbar()

        main = ttk.Frame(self)
        main.pack(fill="both", expand=True, padx=12, pady=(0, 8))

        self.sidebar = ttk.Frame(main)
        self.sidebar.pack(side="left", fill="y", padx=(0, 10))

        self.content = ttk.Frame(main)
        self.content.pack(side="right", fill="both", expand=True)

        self.nb = ttk.Notebook(self.content, style="Side.TNotebook")
        self.nb.pack(fill="both", expand=True)

        # Views (tabs hidden, navigation through the sidebar)
        self.pos_view = PosView(self.nb, self)
        self.inventory_view = InventoryView(self.nb, self)
        self.credit_view = CreditView(self.nb, self)
        self.expenses_view = ExpensesView(self.nb, self)
        self.shopping_view = ShoppingView(self.nb, self)
        self.reports_view = ReportsView(self.nb, self)

        self._build_sidebar()
        self._build_status_bar()

        self.refresh_all(show_toast=False)
        self.toast("Listo.", kind="info", ms=1200)

    def _build_styles(self):
        style = ttk.Style(self)
        style.layout("Side.TNotebook.Tab", [])
        style.configure("Side.TNotebook", tabmargins=0)
        style.configure("Big.TButton", padding=(14, 10))
        style.configure("Title.TLabel", font=("Segoe UI", 12, "bold"))
        style.configure("KPI.TLabel", font=("Segoe UI", 10))
        style.configure("KPIValue.TLabel", font=("Segoe UI", 11, "bold"))

    def _build_topbar(self):
        top = ttk.Frame(self)
        top.pack(fill="x", padx=12, pady=10)

        ttk.Label(top, text=self.container.settings.store_name, style="Title.TLabel").pack(side="left")
        ttk.Label(top, text=f"Backend: {self.container.settings.backend}").pack(side="right")

    def _build_sidebar(self):
        box = ttk.LabelFrame(self.sidebar, text="Menú")
        box.pack(fill="x", pady=(0, 10))

        entries = [
            ("🧾 Ventas", self.pos_view),
            ("📦 Inventario", self.inventory_view),
            ("📒 Fiado", self.credit_view),
            ("💸 Gastos", self.expenses_view),
            ("🛒 Compras", self.shopping_view),
            ("📊 Reportes", self.reports_view),
        ]
        for i, (label, view) in enumerate(entries):
            ttk.Button(
                box, text=label, style="Big.TButton",
                command=lambda v=view: self.show(v),
            ).pack(fill="x", padx=10, pady=(10 if i == 0 else 6, 6))

        ttk.Button(box, text="🔄 Actualizar", style="Big.TButton",
                   command=self.refresh_all).pack(fill="x", padx=10, pady=(6, 10))

        kpi = ttk.LabelFrame(self.sidebar, text="Hoy")
        kpi.pack(fill="x")

        self.k_sales = ttk.Label(kpi, text="-", style="KPIValue.TLabel")
        self.k_count = ttk.Label(kpi, text="-", style="KPIValue.TLabel")
        self.k_debt = ttk.Label(kpi, text="-", style="KPIValue.TLabel")
        self.k_low = ttk.Label(kpi, text="-", style="KPIValue.TLabel")

        labels = ["Ventas", "Transacciones", "Fiado total", "Stock bajo"]
        widgets = [self.k_sales, self.k_count, self.k_debt, self.k_low]
        for i, (lab, w) in enumerate(zip(labels, widgets)):
            ttk.Label(kpi, text=lab, style="KPI.TLabel").grid(
                row=i, column=0, sticky="w", padx=10, pady=(8 if i == 0 else 2, 2)
            )
            w.grid(row=i, column=1, sticky="e", padx=10, pady=(8 if i == 0 else 2, 2))

        kpi.columnconfigure(0, weight=1)
        kpi.columnconfigure(1, weight=1)

        lowbox = ttk.LabelFrame(self.sidebar, text="Stock bajo (doble clic)")
        lowbox.pack(fill="both", expand=True, pady=(10, 0))

        self.low_list = tk.Listbox(lowbox, height=10)
        self.low_list.pack(fill="both", expand=True, padx=10, pady=10)
        self.low_list.bind("<Double-1>", self.on_low_stock_open)
        self._low_items = []

    def _build_status_bar(self):
        bar = ttk.Frame(self)
        bar.pack(fill="x", padx=12, pady=(0, 10))
        ttk.Label(bar, textvariable=self.status_var).pack(side="left")
        ttk.Label(bar, text=f"Logs: {self.logs_dir}").pack(side="right")

    def show(self, view):
        self.nb.select(view.frame)
        view.refresh()

    def toast(self, msg: str, kind: str = "info", ms: int = 2500):
        prefix = {"info": "ℹ ", "success": "✅ ", "warn": "⚠ ", "error": "❌ "}.get(kind, "")
        self.status_var.set(prefix + msg)
        if self._toast_after_id is not None:
            self.after_cancel(self._toast_after_id)
        self._toast_after_id = self.after(ms, lambda: self.status_var.set(""))

    def handle_error(self, title: str, err: Exception, toast: str):
        if isinstance(err, AppError):
            log.warning("%s: %s", title, err)
        else:
            log.exception("%s: %s", title, err, exc_info=err)
        messagebox.showerror(title, str(err) or err.__class__.__name__)
        self.toast(toast, kind="error")

    # ---------- Refresh ----------
    def refresh_all(self, show_toast: bool = True):
        try:
            for view in (
                self.pos_view, self.inventory_view, self.credit_view,
                self.expenses_view, self.shopping_view, self.reports_view,
            ):
                view.refresh()
            self.refresh_kpis()
            self.refresh_low_stock_panel()
        except AppError as e:
            self.handle_error("Actualizar", e, "No se pudo actualizar.")
            return

        if show_toast:
            self.toast("Actualizado.", kind="info", ms=1200)

    def refresh_kpis(self):
        report = self.reporting.sales_report("day")
        customers = self.reporting.customer_summary()
        low = self.inventory.low_stock()

        self.k_sales.config(text=f"${report.total_sales:.2f}")
        self.k_count.config(text=str(report.transactions))
        self.k_debt.config(text=f"${customers.total_debt:.2f}")
        self.k_low.config(text=str(len(low)))

    def refresh_low_stock_panel(self):
        self.low_list.delete(0, tk.END)
        self._low_items = []
        for p in self.inventory.low_stock():
            self.low_list.insert(tk.END, f"{p.name} ({p.stock}/{p.min_stock})")
            self._low_items.append(p.id)

    def on_low_stock_open(self, _evt=None):
        sel = self.low_list.curselection()
        if not sel:
            return
        product_id = self._low_items[sel[0]]
        self.nb.select(self.inventory_view.frame)
        self.inventory_view.select_product(product_id)
        self.toast("Producto con stock bajo seleccionado.", kind="warn", ms=2000)
