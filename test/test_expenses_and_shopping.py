from datetime import date

import pytest

from conftest import add_product
from tienda.domain.errors import NotFoundError, ValidationError
from tienda.services.expense_service import ExpenseService
from tienda.services.shopping_service import ShoppingService


def _expenses(repo) -> ExpenseService:
    return ExpenseService(repo, today=lambda: date(2024, 5, 15))


def test_add_expense_defaults_date_to_today(repo):
    e = _expenses(repo).add_expense("Recibo de luz", "Servicios (Luz, Agua, Gas)", 450.0)
    assert e.expense_date == "2024-05-15"
    assert e.payment_method == "efectivo"


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"description": "", "category": "Otros", "amount": 1}, "Description"),
        ({"description": "x", "category": "Viajes", "amount": 1}, "category"),
        ({"description": "x", "category": "Otros", "amount": 0}, "Amount"),
        ({"description": "x", "category": "Otros", "amount": "nan"}, "finite"),
        ({"description": "x", "category": "Otros", "amount": 1, "payment_method": "fiado"}, "payment method"),
        ({"description": "x", "category": "Otros", "amount": 1, "expense_date": "15/05/2024"}, "Date"),
    ],
)
def test_add_expense_validation(repo, kwargs, message):
    with pytest.raises(ValidationError, match=message):
        _expenses(repo).add_expense(**kwargs)


def test_month_filters_and_totals(repo):
    svc = _expenses(repo)
    svc.add_expense("Renta", "Renta del local", 3000.0, expense_date="2024-05-01")
    svc.add_expense("Jabón", "Limpieza", 50.0, expense_date="2024-05-10")
    svc.add_expense("Escoba", "Limpieza", 70.0, expense_date="2024-05-12")
    old = svc.add_expense("Renta", "Renta del local", 3000.0, expense_date="2024-04-01")

    assert [e.expense_date for e in svc.list_expenses()][0] == "2024-05-12"
    assert len(svc.expenses_for_month("2024-05")) == 3
    assert svc.total_for_month("2024-05") == 3120.0
    assert svc.totals_by_category("2024-05") == {"Renta del local": 3000.0, "Limpieza": 120.0}
    assert svc.grand_total() == 6120.0

    svc.delete_expense(old.id)
    assert svc.grand_total() == 3120.0
    with pytest.raises(NotFoundError):
        svc.delete_expense(old.id)


def test_shopping_list_order_and_toggle(repo):
    shop = ShoppingService(repo)
    baja = shop.add_item("Servilletas", 2, "baja")
    alta = shop.add_item("Azúcar", 5, "alta")
    normal = shop.add_item("Café", 1)

    assert [i.id for i in shop.list_items()] == [alta.id, normal.id, baja.id]

    done = shop.toggle_completed(alta.id)
    assert done.is_completed and done.completed_at
    assert [i.id for i in shop.list_items()] == [normal.id, baja.id, alta.id]
    assert [i.id for i in shop.completed_items()] == [alta.id]
    assert shop.high_priority_items() == []

    reopened = shop.toggle_completed(alta.id)
    assert not reopened.is_completed and reopened.completed_at is None

    shop.delete_item(baja.id)
    assert len(shop.list_items()) == 2


def test_shopping_item_validation(repo):
    shop = ShoppingService(repo)
    with pytest.raises(ValidationError):
        shop.add_item("", 1)
    with pytest.raises(ValidationError):
        shop.add_item("Arroz", 0)
    with pytest.raises(ValidationError):
        shop.add_item("Arroz", 1, "urgente")
    with pytest.raises(NotFoundError):
        shop.add_item("Arroz", 1, product_id=404)


def test_low_stock_suggestions_and_seeding(repo):
    low = add_product(repo, "Arroz", 30.0, stock=1, min_stock=4)
    add_product(repo, "Frijol", 35.0, stock=50, min_stock=4)
    empty_min = add_product(repo, "Chiles", 10.0, stock=0, min_stock=0)
    shop = ShoppingService(repo)

    suggestions = shop.low_stock_suggestions()
    assert {(s.product_name, s.quantity, s.priority, s.notes) for s in suggestions} == {
        ("Arroz", 8, "alta", "Stock bajo"),
        ("Chiles", 1, "alta", "Stock bajo"),
    }

    shop.add_item("Arroz", 3, product_id=low.id)
    added = shop.seed_from_low_stock()
    assert [i.product_id for i in added] == [empty_min.id]

    # a second pass adds nothing new
    assert shop.seed_from_low_stock() == []


def test_suppliers(repo):
    shop = ShoppingService(repo)
    with pytest.raises(ValidationError):
        shop.add_supplier("  ")
    with pytest.raises(ValidationError, match="Email"):
        shop.add_supplier("Bimbo", email="ventas-bimbo")

    bimbo = shop.add_supplier("Bimbo", phone="555-0001", products_supplied="Pan")
    shop.add_supplier("Abarrotes Don Pepe", phone="555-0002")

    assert [s.name for s in shop.list_suppliers()] == ["Abarrotes Don Pepe", "Bimbo"]
    assert [s.name for s in shop.search_suppliers("0001")] == ["Bimbo"]

    shop.delete_supplier(bimbo.id)
    assert [s.name for s in shop.list_suppliers()] == ["Abarrotes Don Pepe"]
