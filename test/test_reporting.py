from datetime import date
from pathlib import Path

import pytest
from openpyxl import load_workbook

from conftest import add_customer, add_product
from tienda.domain.errors import ValidationError
from tienda.domain.models import CartItem, Customer, Expense, Product, Sale, SaleItem
from tienda.services.expense_service import ExpenseService
from tienda.services.reporting_service import (
    ReportingService,
    customer_summary,
    inventory_summary,
    start_of_week,
    summarize,
)
from tienda.services.sales_service import SalesService

TODAY = date(2024, 5, 15)  # a Wednesday


def _sale(sid, created_at, total, method="efectivo", items=()):
    return Sale(
        id=sid,
        sale_number=f"V-{sid}",
        total=total,
        payment_method=method,
        payment_status="pendiente" if method == "fiado" else "pagado",
        created_at=created_at,
        items=tuple(items),
    )


def _item(name, qty, price):
    return SaleItem(id=None, sale_id=None, product_id=None, product_name=name, quantity=qty,
                    unit_price=price, subtotal=qty * price)


def _expense(eid, day, amount, category="Otros"):
    return Expense(id=eid, description="gasto", category=category, amount=amount, expense_date=day)


SALES = [
    _sale(1, "2024-05-15 09:00:00", 50.0, items=[_item("Refresco", 5, 10.0)]),
    _sale(2, "2024-05-13 18:30:00", 30.0, "fiado", items=[_item("Pan", 10, 3.0)]),
    _sale(3, "2024-05-02 12:00:00", 120.0, "tarjeta", items=[_item("Refresco", 2, 10.0), _item("Aceite", 2, 50.0)]),
    _sale(4, "2024-04-28 10:00:00", 40.0, "transferencia", items=[_item("Pan", 4, 10.0)]),
]
EXPENSES = [
    _expense(1, "2024-05-15", 20.0, "Limpieza"),
    _expense(2, "2024-05-01", 100.0, "Renta del local"),
    _expense(3, "2024-04-30", 15.0),
]


def test_start_of_week_is_sunday():
    assert start_of_week(TODAY) == date(2024, 5, 12)
    assert start_of_week(date(2024, 5, 12)) == date(2024, 5, 12)


def test_month_profit_is_sales_minus_expenses():
    r = summarize(SALES, EXPENSES, "month", TODAY, "2024-05")

    assert r.total_sales == 200.0
    assert r.total_expenses == 120.0
    assert r.profit == r.total_sales - r.total_expenses == 80.0
    assert r.transactions == 3
    assert r.average_ticket == pytest.approx(200.0 / 3)
    assert r.by_payment_method == {"efectivo": 50.0, "fiado": 30.0, "tarjeta": 120.0}
    assert (r.pending_total, r.pending_count) == (30.0, 1)
    assert r.expenses_by_category == {"Renta del local": 100.0, "Limpieza": 20.0}


@pytest.mark.parametrize(
    "period, expected_sales, expected_expenses",
    [
        ("day", 50.0, 20.0),
        ("week", 80.0, 20.0),
        ("all", 240.0, 135.0),
    ],
)
def test_date_windows(period, expected_sales, expected_expenses):
    r = summarize(SALES, EXPENSES, period, TODAY)
    assert r.total_sales == expected_sales
    assert r.total_expenses == expected_expenses
    assert r.month is None


def test_month_defaults_to_current_month():
    r = summarize(SALES, EXPENSES, "month", TODAY)
    assert r.month == "2024-05"
    assert r.transactions == 3


def test_top_products_grouped_by_name_and_sorted_by_revenue():
    r = summarize(SALES, EXPENSES, "all", TODAY)
    assert [(p.product_name, p.quantity, p.revenue) for p in r.top_products] == [
        ("Aceite", 2, 100.0),
        ("Refresco", 7, 70.0),
        ("Pan", 14, 70.0),
    ]


def test_daily_buckets_keep_last_seven_days_ascending():
    sales = [_sale(i, f"2024-05-{d:02d} 10:00:00", float(d)) for i, d in enumerate(range(1, 11), start=1)]
    sales.append(_sale(99, "2024-05-10T20:00:00+00:00", 5.0))

    r = summarize(sales, [], "all", TODAY)

    assert [d for d, _ in r.daily_sales] == [f"2024-05-{d:02d}" for d in range(4, 11)]
    assert r.daily_sales[-1] == ("2024-05-10", 15.0)


def test_unknown_period_is_rejected():
    with pytest.raises(ValidationError):
        summarize(SALES, EXPENSES, "year", TODAY)


def test_empty_inputs_give_zeroes():
    r = summarize([], [], "all", TODAY)
    assert (r.total_sales, r.total_expenses, r.profit, r.average_ticket) == (0, 0, 0, 0.0)
    assert r.top_products == () and r.daily_sales == ()


def test_inventory_and_customer_summaries():
    products = [
        Product(id=1, name="A", sale_price=10.0, purchase_price=6.0, stock=10, min_stock=2),
        Product(id=2, name="B", sale_price=20.0, purchase_price=15.0, stock=1, min_stock=5),
        Product(id=3, name="C", sale_price=5.0, purchase_price=1.0, stock=100, is_active=False),
    ]
    inv = inventory_summary(products)
    assert inv.product_count == 2
    assert inv.inventory_value == 75.0
    assert inv.potential_revenue == 120.0
    assert inv.potential_profit == 45.0
    assert inv.margin_pct == pytest.approx(37.5)
    assert [p.name for p in inv.low_stock] == ["B"]

    customers = [
        Customer(id=1, name="X", credit_limit=100.0, current_debt=150.0),
        Customer(id=2, name="Y", credit_limit=0.0, current_debt=500.0),
        Customer(id=3, name="Z"),
    ]
    cs = customer_summary(customers)
    assert cs.total_debt == 650.0
    assert [c.name for c in cs.customers_with_debt] == ["Y", "X"]
    assert [c.name for c in cs.over_limit] == ["X"]


def test_service_report_and_excel_export(repo, tmp_path: Path):
    p = add_product(repo, "Tortillas", 20.0, stock=10, purchase_price=12.0)
    c = add_customer(repo, "Lalo")
    sales = SalesService(repo, duplicate_window_seconds=0)
    sales.checkout([CartItem(p, 2)], "efectivo")
    sales.checkout([CartItem(p, 1)], "fiado", customer_id=c.id)
    ExpenseService(repo).add_expense("Jabón", "Limpieza", 15.0)

    reporting = ReportingService(repo)
    report = reporting.sales_report("day")
    assert report.total_sales == 60.0
    assert report.profit == 45.0
    assert report.pending_total == 20.0

    out = tmp_path / "reporte.xlsx"
    reporting.export_report_excel(str(out), "all")

    wb = load_workbook(out)
    assert wb.sheetnames == ["Summary", "Sales Detail", "Expenses", "Top Products"]
    assert wb["Summary"]["B5"].value == 60.0
    assert wb["Sales Detail"].max_row == 3
    assert wb["Expenses"]["B2"].value == "Jabón"
    assert wb["Top Products"]["A2"].value == "Tortillas"
    assert wb["Top Products"]["C2"].value == 60.0
