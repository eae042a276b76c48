from pathlib import Path

import pytest

from conftest import add_customer, add_product
from tienda.domain.errors import (
    CheckoutError,
    CreditLimitError,
    DuplicateSaleError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from tienda.domain.models import CartItem
from tienda.services.credit_service import CreditService
from tienda.services.sales_service import SalesService, add_to_cart, cart_total, set_cart_quantity


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _sales(repo, **kwargs) -> SalesService:
    kwargs.setdefault("duplicate_window_seconds", 0)
    return SalesService(repo, **kwargs)


def test_cash_sale_total_status_and_stock(repo):
    a = add_product(repo, "Refresco", 10.0, stock=5)
    b = add_product(repo, "Galletas", 5.0, stock=3)
    customer = add_customer(repo, "Doña Lupe")

    sale = _sales(repo).checkout([CartItem(a, 2), CartItem(b, 1)], "efectivo", customer_id=customer.id)

    assert sale.total == 25.0
    assert sale.payment_status == "pagado"
    assert sale.sale_number.startswith("V-")
    assert [(it.product_name, it.quantity, it.subtotal) for it in sale.items] == [
        ("Refresco", 2, 20.0),
        ("Galletas", 1, 5.0),
    ]
    assert repo.get_product_by_id(a.id).stock == 3
    assert repo.get_product_by_id(b.id).stock == 2
    assert repo.get_customer(customer.id).current_debt == 0.0


def test_fiado_sale_increments_debt_by_total(repo):
    p = add_product(repo, "Leche", 22.5, stock=10)
    customer = add_customer(repo, "Don Chema")

    sale = _sales(repo).checkout([CartItem(p, 2)], "fiado", customer_id=customer.id)

    assert sale.payment_status == "pendiente"
    assert repo.get_customer(customer.id).current_debt == pytest.approx(45.0)
    pending = CreditService(repo).pending_sales(customer.id)
    assert [s.id for s in pending] == [sale.id]


def test_fiado_requires_customer(repo):
    p = add_product(repo)
    with pytest.raises(ValidationError, match="customer"):
        _sales(repo).checkout([CartItem(p, 1)], "fiado")


def test_rejects_empty_cart_and_unknown_method(repo):
    p = add_product(repo)
    with pytest.raises(ValidationError, match="Cart is empty"):
        _sales(repo).checkout([], "efectivo")
    with pytest.raises(ValidationError, match="payment method"):
        _sales(repo).checkout([CartItem(p, 1)], "cheque")


def test_rejects_oversell_when_same_product_is_repeated(repo):
    p = add_product(repo, stock=5)
    with pytest.raises(InsufficientStockError):
        _sales(repo).checkout([CartItem(p, 3), CartItem(p, 3)], "efectivo")
    assert repo.get_product_by_id(p.id).stock == 5
    assert repo.list_sales() == []


def test_rejects_stale_cart_after_stock_changed(repo):
    p = add_product(repo, stock=4)
    sales = _sales(repo)
    sales.checkout([CartItem(p, 3)], "efectivo")

    # cart still holds the old product row with stock 4
    with pytest.raises(InsufficientStockError):
        sales.checkout([CartItem(p, 2)], "tarjeta")
    assert repo.get_product_by_id(p.id).stock == 1


def test_unknown_customer_is_rejected(repo):
    p = add_product(repo)
    with pytest.raises(NotFoundError):
        _sales(repo).checkout([CartItem(p, 1)], "fiado", customer_id=999)


def test_storage_failure_rolls_back_the_whole_sale(repo):
    a = add_product(repo, "A", 10.0, stock=5)
    b = add_product(repo, "B", 5.0, stock=5)
    header = {
        "sale_number": "V-1",
        "customer_id": None,
        "total": 15.0,
        "payment_method": "efectivo",
        "payment_status": "pagado",
        "notes": None,
    }
    items = [
        {"product_id": a.id, "product_name": "A", "quantity": 1, "unit_price": 10.0, "subtotal": 10.0},
        # NOT NULL violation on the second line, after the first stock update ran
        {"product_id": b.id, "product_name": None, "quantity": 1, "unit_price": 5.0, "subtotal": 5.0},
    ]

    with pytest.raises(CheckoutError):
        repo.create_sale_with_items(header, items)

    assert repo.list_sales() == []
    assert repo.get_product_by_id(a.id).stock == 5
    assert repo.get_product_by_id(b.id).stock == 5


def test_repository_rechecks_stock_inside_transaction(repo):
    p = add_product(repo, stock=1)
    header = {
        "sale_number": "V-2", "customer_id": None, "total": 20.0,
        "payment_method": "efectivo", "payment_status": "pagado", "notes": None,
    }
    items = [{"product_id": p.id, "product_name": p.name, "quantity": 2, "unit_price": 10.0, "subtotal": 20.0}]

    with pytest.raises(InsufficientStockError):
        repo.create_sale_with_items(header, items)
    assert repo.get_product_by_id(p.id).stock == 1


def test_duplicate_checkout_within_window_is_rejected(repo):
    p = add_product(repo, stock=10)
    clock = FakeClock()
    sales = SalesService(repo, duplicate_window_seconds=3.0, clock=clock)

    first = sales.checkout([CartItem(p, 1)], "efectivo")
    clock.now += 1
    with pytest.raises(DuplicateSaleError):
        sales.checkout([CartItem(p, 1)], "efectivo")

    # a different cart is fine, and so is the same cart after the window
    sales.checkout([CartItem(p, 2)], "efectivo")
    clock.now += 10
    last = sales.checkout([CartItem(p, 2)], "efectivo")

    assert len(repo.list_sales()) == 3
    assert first.sale_number != last.sale_number
    assert repo.get_product_by_id(p.id).stock == 5


def test_sale_numbers_stay_unique_with_a_frozen_clock(repo):
    p = add_product(repo, stock=10)
    sales = _sales(repo, clock=FakeClock())
    numbers = {sales.checkout([CartItem(p, 1)], "efectivo").sale_number for _ in range(3)}
    assert len(numbers) == 3


def test_credit_limit_enforced_only_when_enabled(repo):
    p = add_product(repo, "Aceite", 60.0, stock=10)
    customer = add_customer(repo, "Rosa", credit_limit=100.0)

    strict = _sales(repo, enforce_credit_limit=True)
    strict.checkout([CartItem(p, 1)], "fiado", customer_id=customer.id)
    with pytest.raises(CreditLimitError):
        strict.checkout([CartItem(p, 1)], "fiado", customer_id=customer.id)
    assert repo.get_customer(customer.id).current_debt == 60.0

    _sales(repo).checkout([CartItem(p, 1)], "fiado", customer_id=customer.id)
    c = repo.get_customer(customer.id)
    assert c.current_debt == 120.0
    assert c.is_over_limit


def test_cart_helpers_merge_lines_and_respect_stock(repo):
    p = add_product(repo, "Pan", 3.5, stock=4)
    cart: list[CartItem] = []
    add_to_cart(cart, p, 1)
    add_to_cart(cart, p, 2)
    assert len(cart) == 1 and cart[0].quantity == 3
    assert cart_total(cart) == pytest.approx(10.5)

    with pytest.raises(InsufficientStockError):
        add_to_cart(cart, p, 2)

    set_cart_quantity(cart, p.id, 0)
    assert cart == []


def test_sales_log_channel_receives_sale_created(repo, caplog):
    p = add_product(repo)
    with caplog.at_level("INFO", logger="tienda.sales"):
        sale = _sales(repo).checkout([CartItem(p, 1)], "efectivo")
    assert any("sale_created" in r.getMessage() and sale.sale_number in r.getMessage() for r in caplog.records)
