from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

from tienda.domain.errors import ValidationError
from tienda.domain.models import STATUS_PENDING, Customer, Expense, Product, Sale

PERIODS = ("day", "week", "month", "all")


@dataclass(frozen=True)
class ProductStats:
    product_name: str
    quantity: int
    revenue: float


@dataclass(frozen=True)
class SalesReport:
    period: str
    month: Optional[str]
    total_sales: float
    total_expenses: float
    profit: float
    transactions: int
    average_ticket: float
    by_payment_method: dict[str, float]
    pending_total: float
    pending_count: int
    top_products: tuple[ProductStats, ...]
    daily_sales: tuple[tuple[str, float], ...]
    expenses_by_category: dict[str, float]
    sales: tuple[Sale, ...]
    expenses: tuple[Expense, ...]


@dataclass(frozen=True)
class InventorySummary:
    product_count: int
    units_in_stock: int
    inventory_value: float
    potential_revenue: float
    potential_profit: float
    margin_pct: float
    low_stock: tuple[Product, ...]


@dataclass(frozen=True)
class CustomerSummary:
    total_debt: float
    customers_with_debt: tuple[Customer, ...]
    over_limit: tuple[Customer, ...]


def _day(stamp: str) -> date:
    # works for "YYYY-MM-DD", "YYYY-MM-DD HH:MM:SS" and ISO-8601 with a "T"
    return date.fromisoformat(stamp[:10])


def start_of_week(today: date) -> date:
    """Weeks start on Sunday."""
    return today - timedelta(days=(today.weekday() + 1) % 7)


def in_window(stamp: Optional[str], period: str, today: date, month: Optional[str]) -> bool:
    if period == "all":
        return True
    if not stamp:
        return False
    if period == "month":
        return stamp.startswith(month or today.strftime("%Y-%m"))
    d = _day(stamp)
    if period == "day":
        return d >= today
    if period == "week":
        return d >= start_of_week(today)
    raise ValidationError(f"Unknown report period: {period}")


def top_products(sales: Iterable[Sale], limit: int = 10) -> list[ProductStats]:
    qty: dict[str, int] = defaultdict(int)
    revenue: dict[str, float] = defaultdict(float)
    for s in sales:
        for it in s.items:
            qty[it.product_name] += int(it.quantity)
            revenue[it.product_name] += float(it.subtotal)
    stats = [ProductStats(name, qty[name], revenue[name]) for name in revenue]
    stats.sort(key=lambda p: p.revenue, reverse=True)
    return stats[:limit]


def daily_sales(sales: Iterable[Sale], days: int = 7) -> list[tuple[str, float]]:
    """Per-day totals, ascending, keeping the last ``days`` days that have sales."""
    buckets: dict[str, float] = defaultdict(float)
    for s in sales:
        if s.created_at:
            buckets[_day(s.created_at).isoformat()] += float(s.total)
    return sorted(buckets.items())[-days:]


def summarize(
    sales: Iterable[Sale],
    expenses: Iterable[Expense],
    period: str = "month",
    today: Optional[date] = None,
    month: Optional[str] = None,
) -> SalesReport:
    """Reduce already-loaded sales and expenses for one reporting window."""
    if period not in PERIODS:
        raise ValidationError(f"Unknown report period: {period}")
    today = today or date.today()
    if period == "month":
        month = month or today.strftime("%Y-%m")

    sales = tuple(s for s in sales if in_window(s.created_at, period, today, month))
    expenses = tuple(e for e in expenses if in_window(e.expense_date, period, today, month))

    total_sales = sum(float(s.total) for s in sales)
    total_expenses = sum(float(e.amount) for e in expenses)

    by_method: dict[str, float] = defaultdict(float)
    for s in sales:
        by_method[s.payment_method] += float(s.total)

    pending = [s for s in sales if s.payment_status == STATUS_PENDING]

    by_category: dict[str, float] = defaultdict(float)
    for e in expenses:
        by_category[e.category] += float(e.amount)

    return SalesReport(
        period=period,
        month=month if period == "month" else None,
        total_sales=total_sales,
        total_expenses=total_expenses,
        profit=total_sales - total_expenses,
        transactions=len(sales),
        average_ticket=(total_sales / len(sales)) if sales else 0.0,
        by_payment_method=dict(by_method),
        pending_total=sum(float(s.total) for s in pending),
        pending_count=len(pending),
        top_products=tuple(top_products(sales)),
        daily_sales=tuple(daily_sales(sales)),
        expenses_by_category=dict(sorted(by_category.items(), key=lambda kv: kv[1], reverse=True)),
        sales=sales,
        expenses=expenses,
    )


def inventory_summary(products: Iterable[Product]) -> InventorySummary:
    products = [p for p in products if p.is_active]
    value = sum(p.stock * float(p.purchase_price) for p in products)
    revenue = sum(p.stock * float(p.sale_price) for p in products)
    profit = revenue - value
    return InventorySummary(
        product_count=len(products),
        units_in_stock=sum(int(p.stock) for p in products),
        inventory_value=value,
        potential_revenue=revenue,
        potential_profit=profit,
        margin_pct=(profit / revenue * 100.0) if revenue else 0.0,
        low_stock=tuple(sorted((p for p in products if p.is_low_stock), key=lambda p: p.stock - p.min_stock)),
    )


def customer_summary(customers: Iterable[Customer]) -> CustomerSummary:
    customers = list(customers)
    with_debt = sorted((c for c in customers if c.current_debt > 0), key=lambda c: c.current_debt, reverse=True)
    return CustomerSummary(
        total_debt=sum(float(c.current_debt) for c in customers),
        customers_with_debt=tuple(with_debt),
        over_limit=tuple(c for c in with_debt if c.is_over_limit),
    )


class ReportingService:
    def __init__(self, repo, today=date.today):
        self.repo = repo
        self.today = today

    def sales_report(self, period: str = "month", month: Optional[str] = None) -> SalesReport:
        return summarize(self.repo.list_sales(), self.repo.list_expenses(), period, self.today(), month)

    def inventory_summary(self) -> InventorySummary:
        return inventory_summary(self.repo.list_products())

    def customer_summary(self) -> CustomerSummary:
        return customer_summary(self.repo.list_customers())

    def export_report_excel(self, path: str, period: str = "month", month: Optional[str] = None) -> SalesReport:
        report = self.sales_report(period, month)
        wb = Workbook()

        def money(cell):
            cell.number_format = "#,##0.00"

        def bold_row(ws, r):
            for c in ws[r]:
                c.font = Font(bold=True)

        def set_widths(ws, widths: dict[str, int]):
            for col, w in widths.items():
                ws.column_dimensions[col].width = w

        def add_table(ws, name: str, start_row: int, end_row: int, end_col: int):
            ref = f"A{start_row}:{get_column_letter(end_col)}{end_row}"
            tab = Table(displayName=name, ref=ref)
            tab.tableStyleInfo = TableStyleInfo(name="TableStyleMedium9", showRowStripes=True, showColumnStripes=False)
            ws.add_table(tab)

        # -------- 1) Summary --------
        ws = wb.active
        ws.title = "Summary"
        ws["A1"] = "Resumen"
        ws["A1"].font = Font(bold=True, size=14)
        ws["A3"] = "Periodo"
        ws["B3"] = report.month if report.period == "month" else report.period

        rows = [
            ("Ventas totales", report.total_sales, True),
            ("Gastos totales", report.total_expenses, True),
            ("Ganancia", report.profit, True),
            ("Transacciones", report.transactions, False),
            ("Ticket promedio", report.average_ticket, True),
            ("Fiado pendiente", report.pending_total, True),
        ]
        for method, amount in sorted(report.by_payment_method.items()):
            rows.append((f"Ventas {method}", amount, True))

        for i, (label, val, is_money) in enumerate(rows, start=5):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = val
            if is_money:
                money(ws[f"B{i}"])
        set_widths(ws, {"A": 28, "B": 20})

        # -------- 2) Sales Detail --------
        ws2 = wb.create_sheet("Sales Detail")
        ws2.append(["Venta", "Fecha", "Metodo", "Estado", "Producto", "Cantidad", "Precio", "Subtotal"])
        bold_row(ws2, 1)
        for s in report.sales:
            for it in s.items:
                ws2.append([
                    s.sale_number, s.created_at, s.payment_method, s.payment_status,
                    it.product_name, int(it.quantity), float(it.unit_price), float(it.subtotal),
                ])
                money(ws2[f"G{ws2.max_row}"])
                money(ws2[f"H{ws2.max_row}"])
        ws2.freeze_panes = "A2"
        set_widths(ws2, {"A": 18, "B": 20, "C": 14, "D": 12, "E": 32, "F": 10, "G": 12, "H": 12})
        if ws2.max_row >= 2:
            add_table(ws2, "SalesDetail", 1, ws2.max_row, 8)

        # -------- 3) Expenses --------
        ws3 = wb.create_sheet("Expenses")
        ws3.append(["Fecha", "Descripcion", "Categoria", "Metodo", "Monto"])
        bold_row(ws3, 1)
        for e in report.expenses:
            ws3.append([e.expense_date, e.description, e.category, e.payment_method, float(e.amount)])
            money(ws3[f"E{ws3.max_row}"])
        ws3.freeze_panes = "A2"
        set_widths(ws3, {"A": 12, "B": 32, "C": 28, "D": 14, "E": 12})
        if ws3.max_row >= 2:
            add_table(ws3, "ExpensesDetail", 1, ws3.max_row, 5)

        # -------- 4) Top Products --------
        ws4 = wb.create_sheet("Top Products")
        ws4.append(["Producto", "Cantidad", "Ingresos"])
        bold_row(ws4, 1)
        for p in report.top_products:
            ws4.append([p.product_name, p.quantity, p.revenue])
            money(ws4[f"C{ws4.max_row}"])
        set_widths(ws4, {"A": 32, "B": 10, "C": 14})

        wb.save(path)
        return report
