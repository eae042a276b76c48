from __future__ import annotations

import logging
import time
from collections import Counter
from typing import Callable, Iterable, Optional

from tienda.domain.errors import (
    CreditLimitError,
    DuplicateSaleError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from tienda.domain.models import (
    CREDIT_METHOD,
    PAYMENT_METHODS,
    CartItem,
    Product,
    RecordId,
    Sale,
    payment_status_for,
)
from tienda.repositories.contracts import StoreRepository
from tienda.repositories.unit_of_work import RepositoryUnitOfWork, UnitOfWork

log = logging.getLogger("tienda.sales")


def add_to_cart(cart: list[CartItem], product: Product, quantity: int = 1) -> list[CartItem]:
    """Add ``quantity`` of ``product`` to ``cart`` (merging lines) without exceeding stock."""
    quantity = int(quantity)
    if quantity <= 0:
        raise ValidationError("Quantity must be >= 1.")
    for item in cart:
        if item.product.id == product.id:
            if item.quantity + quantity > int(product.stock):
                raise InsufficientStockError(f"Not enough stock for {product.name}. Available: {product.stock}")
            item.quantity += quantity
            return cart
    if quantity > int(product.stock):
        raise InsufficientStockError(f"Not enough stock for {product.name}. Available: {product.stock}")
    cart.append(CartItem(product=product, quantity=quantity))
    return cart


def set_cart_quantity(cart: list[CartItem], product_id: RecordId, quantity: int) -> list[CartItem]:
    """Set a line's quantity; zero or less removes the line."""
    quantity = int(quantity)
    for item in list(cart):
        if item.product.id != product_id:
            continue
        if quantity <= 0:
            cart.remove(item)
        elif quantity > int(item.product.stock):
            raise InsufficientStockError(
                f"Not enough stock for {item.product.name}. Available: {item.product.stock}"
            )
        else:
            item.quantity = quantity
    return cart


def cart_total(cart: Iterable[CartItem]) -> float:
    return sum(item.subtotal for item in cart)


class SalesService:
    def __init__(
        self,
        repo: StoreRepository,
        uow_factory: Callable[[], UnitOfWork] | None = None,
        enforce_credit_limit: bool = False,
        duplicate_window_seconds: float = 3.0,
        clock: Callable[[], float] = time.time,
    ):
        self.repo = repo
        self.uow_factory = uow_factory or (lambda: RepositoryUnitOfWork(repo))
        self.enforce_credit_limit = enforce_credit_limit
        self.duplicate_window_seconds = float(duplicate_window_seconds)
        self.clock = clock
        self._last_checkout: tuple[tuple, float] | None = None
        self._last_sale_ms = 0

    def _next_sale_number(self, now: float) -> str:
        # strictly increasing within this process so back-to-back sales never share a number
        ms = max(int(now * 1000), self._last_sale_ms + 1)
        self._last_sale_ms = ms
        return f"V-{ms}"

    def _check_duplicate(self, fingerprint: tuple, now: float) -> None:
        if self._last_checkout is None or self.duplicate_window_seconds <= 0:
            return
        last_fp, last_at = self._last_checkout
        if last_fp == fingerprint and now - last_at < self.duplicate_window_seconds:
            raise DuplicateSaleError("This sale was just recorded. Wait a moment before repeating it.")

    def checkout(
        self,
        cart: Iterable[CartItem],
        payment_method: str,
        customer_id: Optional[RecordId] = None,
        notes: Optional[str] = None,
    ) -> Sale:
        cart = list(cart)
        if not cart:
            raise ValidationError("Cart is empty.")
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(f"Unknown payment method: {payment_method}")
        if payment_method == CREDIT_METHOD and customer_id is None:
            raise ValidationError("A customer is required for fiado sales.")

        # same product on several lines must fit the stock together
        qty_by_product: Counter = Counter()
        for item in cart:
            qty = int(item.quantity)
            if qty <= 0:
                raise ValidationError("Quantity must be >= 1.")
            qty_by_product[item.product.id] += qty

            prod = self.repo.get_product_by_id(item.product.id)
            if not prod:
                raise NotFoundError(f"Product not found: {item.product.name}")
            if qty_by_product[item.product.id] > int(prod.stock):
                raise InsufficientStockError(f"Not enough stock for {prod.name}. Available: {prod.stock}")

        total = cart_total(cart)

        customer = None
        if customer_id is not None:
            customer = self.repo.get_customer(customer_id)
            if not customer or not customer.is_active:
                raise NotFoundError("Customer not found.")

        debt_delta = total if payment_method == CREDIT_METHOD else 0.0
        if (
            debt_delta
            and self.enforce_credit_limit
            and customer.credit_limit > 0
            and customer.current_debt + debt_delta > customer.credit_limit
        ):
            raise CreditLimitError(
                f"{customer.name} would exceed the credit limit "
                f"({customer.current_debt + debt_delta:.2f} > {customer.credit_limit:.2f})."
            )

        now = self.clock()
        fingerprint = (
            tuple(sorted((str(pid), q) for pid, q in qty_by_product.items())),
            payment_method,
            str(customer_id) if customer_id is not None else None,
        )
        self._check_duplicate(fingerprint, now)

        items = [
            {
                "product_id": item.product.id,
                "product_name": item.product.name,
                "quantity": int(item.quantity),
                "unit_price": float(item.product.sale_price),
                "subtotal": item.subtotal,
            }
            for item in cart
        ]

        with self.uow_factory() as uow:
            sale = uow.create_sale(
                sale_number=self._next_sale_number(now),
                payment_method=payment_method,
                payment_status=payment_status_for(payment_method),
                customer_id=customer_id,
                notes=(notes or "").strip() or None,
                items=items,
                debt_delta=debt_delta,
            )
        self._last_checkout = (fingerprint, now)

        log.info(
            "sale_created sale_id=%s number=%s items=%s total=%.2f method=%s customer=%s",
            sale.id, sale.sale_number, len(items), sale.total, payment_method, customer_id,
        )
        return sale

    def list_sales(self, start_iso: Optional[str] = None, end_iso: Optional[str] = None) -> list[Sale]:
        return self.repo.list_sales(start_iso, end_iso)

    def get_sale(self, sale_id: RecordId) -> Sale:
        sale = self.repo.get_sale(sale_id)
        if not sale:
            raise NotFoundError("Sale not found.")
        return sale
