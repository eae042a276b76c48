from __future__ import annotations

import tkinter as tk
from tkinter import ttk, filedialog
from datetime import date


class ReportsView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Reportes")

        self.period = tk.StringVar(value="month")
        self.month = tk.StringVar(value=date.today().strftime("%Y-%m"))
        self.kpi_vars = {
            key: tk.StringVar(value="-")
            for key in ("sales", "expenses", "profit", "count", "ticket", "pending", "inventory", "debt")
        }
        self._build()

    def _build(self):
        tab = self.frame

        bar = ttk.Frame(tab)
        bar.pack(fill="x", padx=10, pady=10)
        ttk.Label(bar, text="Período").pack(side="left")
        for value, label in (("day", "Hoy"), ("week", "Semana"), ("month", "Mes"), ("all", "Todo")):
            ttk.Radiobutton(bar, text=label, value=value, variable=self.period, command=self.refresh)\
                .pack(side="left", padx=6)
        ttk.Label(bar, text="Mes (AAAA-MM)").pack(side="left", padx=(16, 4))
        e = ttk.Entry(bar, textvariable=self.month, width=9)
        e.pack(side="left")
        e.bind("<Return>", lambda _e: self.refresh())

        ttk.Button(bar, text="Exportar a Excel", command=self.export_report).pack(side="right")
        ttk.Button(bar, text="Plantilla", command=self.save_template).pack(side="right", padx=6)
        ttk.Button(bar, text="Importar productos", command=self.import_excel).pack(side="right", padx=6)

        kpi = ttk.LabelFrame(tab, text="Resumen")
        kpi.pack(fill="x", padx=10)
        labels = [
            ("sales", "Ventas"), ("expenses", "Gastos"), ("profit", "Ganancia"), ("count", "Transacciones"),
            ("ticket", "Ticket promedio"), ("pending", "Fiado pendiente"), ("inventory", "Inventario (costo)"),
            ("debt", "Deuda clientes"),
        ]
        for i, (key, label) in enumerate(labels):
            ttk.Label(kpi, text=label, style="KPI.TLabel").grid(row=i // 4 * 2, column=i % 4, sticky="w", padx=10, pady=(6, 0))
            ttk.Label(kpi, textvariable=self.kpi_vars[key], style="KPIValue.TLabel")\
                .grid(row=i // 4 * 2 + 1, column=i % 4, sticky="w", padx=10, pady=(0, 6))
        for c in range(4):
            kpi.columnconfigure(c, weight=1)

        dash = ttk.LabelFrame(tab, text="Gráficas")
        dash.pack(fill="both", expand=True, padx=10, pady=10)
        dash.columnconfigure(0, weight=1)
        dash.columnconfigure(1, weight=1)

        def canvas(row, col, colspan=1):
            c = tk.Canvas(dash, height=190, bg="#f8fafc", highlightthickness=1, highlightbackground="#cbd5e1")
            c.grid(row=row, column=col, columnspan=colspan, sticky="nsew", padx=6, pady=6)
            return c

        self.daily_canvas = canvas(0, 0)
        self.method_canvas = canvas(0, 1)
        self.top_canvas = canvas(1, 0)
        self.expense_canvas = canvas(1, 1)

    def refresh(self):
        month = self.month.get().strip() or None
        report = self.app.reporting.sales_report(self.period.get(), month)
        inventory = self.app.reporting.inventory_summary()
        customers = self.app.reporting.customer_summary()

        self.kpi_vars["sales"].set(f"${report.total_sales:.2f}")
        self.kpi_vars["expenses"].set(f"${report.total_expenses:.2f}")
        self.kpi_vars["profit"].set(f"${report.profit:.2f}")
        self.kpi_vars["count"].set(str(report.transactions))
        self.kpi_vars["ticket"].set(f"${report.average_ticket:.2f}")
        self.kpi_vars["pending"].set(f"${report.pending_total:.2f} ({report.pending_count})")
        self.kpi_vars["inventory"].set(f"${inventory.inventory_value:.2f} | margen {inventory.margin_pct:.1f}%")
        self.kpi_vars["debt"].set(f"${customers.total_debt:.2f} ({len(customers.customers_with_debt)})")

        self._draw_bar_chart(self.daily_canvas, "Ventas por día", list(report.daily_sales), "#2563eb")
        self._draw_bar_chart(self.method_canvas, "Por método de pago", sorted(report.by_payment_method.items()), "#16a34a")
        self._draw_bar_chart(
            self.top_canvas, "Productos más vendidos", [(p.product_name, p.revenue) for p in report.top_products[:6]],
            "#9333ea",
        )
        self._draw_bar_chart(self.expense_canvas, "Gastos por categoría", list(report.expenses_by_category.items())[:6],
                             "#d64545")

    def _draw_bar_chart(self, canvas: tk.Canvas, title: str, data: list[tuple[str, float]], color: str = "#2b78c2"):
        canvas.delete("all")
        w, h = int(canvas.winfo_width() or 560), int(canvas.winfo_height() or 190)
        if w < 50:
            w = 560
        canvas.create_text(12, 16, text=title, anchor="w", font=("Segoe UI", 10, "bold"), fill="#0f172a")
        if not data:
            canvas.create_text(w // 2, h // 2, text="Sin datos", fill="#64748b")
            return
        maxv = max(v for _, v in data) or 1
        bw = max(24, (w - 40) // len(data))
        for i, (label, val) in enumerate(data):
            x0 = 24 + i * bw
            x1 = x0 + bw - 8
            y1 = h - 30
            y0 = y1 - int((val / maxv) * (h - 70))
            canvas.create_rectangle(x0, y0, x1, y1, fill=color, outline="")
            canvas.create_text((x0 + x1) // 2, y1 + 12, text=str(label)[-10:], font=("Segoe UI", 8), fill="#475569")
            canvas.create_text((x0 + x1) // 2, y0 - 8, text=f"{val:.0f}", font=("Segoe UI", 8), fill="#0f172a")

    def import_excel(self):
        path = filedialog.askopenfilename(title="Selecciona el archivo", filetypes=[("Excel", "*.xlsx")])
        if not path:
            return
        try:
            ok, skipped = self.app.excel.import_products_excel(path)
        except Exception as e:
            self.app.handle_error("Importar", e, "Falló la importación.")
            return
        self.app.toast(f"Importación: {ok} ok, {skipped} omitidos.", kind="success")
        self.app.refresh_all(show_toast=False)

    def save_template(self):
        path = filedialog.asksaveasfilename(
            title="Guardar plantilla", defaultextension=".xlsx",
            filetypes=[("Excel", "*.xlsx")], initialfile="plantilla_productos.xlsx",
        )
        if not path:
            return
        try:
            self.app.excel.write_import_template(path)
        except Exception as e:
            self.app.handle_error("Plantilla", e, "No se pudo guardar la plantilla.")
            return
        self.app.toast("Plantilla guardada.", kind="success")

    def export_report(self):
        period = self.period.get()
        path = filedialog.asksaveasfilename(
            title="Guardar reporte",
            defaultextension=".xlsx",
            filetypes=[("Excel", "*.xlsx")],
            initialfile=f"reporte_{period}_{date.today().isoformat()}.xlsx",
        )
        if not path:
            return
        try:
            self.app.reporting.export_report_excel(path, period, self.month.get().strip() or None)
        except Exception as e:
            self.app.handle_error("Exportar", e, "Falló la exportación.")
            return
        self.app.toast("Reporte exportado.", kind="success")
