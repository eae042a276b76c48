from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Optional

from tienda.domain.errors import InsufficientDebtError, NotFoundError, ValidationError
from tienda.domain.models import (
    EXPENSE_PAYMENT_METHODS,
    CreditPayment,
    Customer,
    RecordId,
    Sale,
)
from tienda.repositories.contracts import StoreRepository
from tienda.repositories.unit_of_work import RepositoryUnitOfWork, UnitOfWork

log = logging.getLogger("tienda.credit")

CUSTOMER_FIELDS = ("name", "phone", "address", "credit_limit", "notes")


@dataclass(frozen=True)
class LedgerSummary:
    total_debt: float
    customers_with_debt: int
    over_limit: tuple[Customer, ...]


class CreditService:
    def __init__(self, repo: StoreRepository, uow_factory: Callable[[], UnitOfWork] | None = None):
        self.repo = repo
        self.uow_factory = uow_factory or (lambda: RepositoryUnitOfWork(repo))

    # ---------- customers ----------
    def list_customers(self) -> list[Customer]:
        return self.repo.list_customers()

    def search_customers(self, term: str) -> list[Customer]:
        needle = (term or "").strip().lower()
        customers = self.repo.list_customers()
        if not needle:
            return customers
        return [c for c in customers if needle in c.name.lower() or needle in (c.phone or "").lower()]

    def get_customer(self, customer_id: RecordId) -> Customer:
        c = self.repo.get_customer(customer_id)
        if not c:
            raise NotFoundError("Customer not found.")
        return c

    @staticmethod
    def _validate(values: dict[str, Any], creating: bool) -> dict[str, Any]:
        unknown = [k for k in values if k not in CUSTOMER_FIELDS]
        if unknown:
            raise ValidationError(f"Unknown customer field(s): {', '.join(sorted(unknown))}")
        out = {k: (v.strip() or None) if isinstance(v, str) else v for k, v in values.items()}
        if "name" in out or creating:
            if not out.get("name"):
                raise ValidationError("Customer name is required.")
        if "credit_limit" in out or creating:
            try:
                out["credit_limit"] = float(out.get("credit_limit") or 0)
            except (TypeError, ValueError) as e:
                raise ValidationError("Credit limit must be a number.") from e
            if out["credit_limit"] < 0:
                raise ValidationError("Credit limit must be >= 0.")
        return out

    def add_customer(self, **values: Any) -> Customer:
        values = self._validate(values, creating=True)
        customer = self.repo.add_customer({**values, "current_debt": 0.0})
        log.info("customer_added customer_id=%s name=%s limit=%.2f", customer.id, customer.name, customer.credit_limit)
        return customer

    def update_customer(self, customer_id: RecordId, **values: Any) -> Customer:
        self.get_customer(customer_id)
        updated = self.repo.update_customer(customer_id, self._validate(values, creating=False))
        if not updated:
            raise NotFoundError("Customer not found.")
        return updated

    def deactivate_customer(self, customer_id: RecordId) -> None:
        customer = self.get_customer(customer_id)
        if customer.current_debt > 0:
            log.warning("customer_deactivated_with_debt customer_id=%s debt=%.2f", customer.id, customer.current_debt)
        if not self.repo.deactivate_customer(customer_id):
            raise NotFoundError("Customer not found.")

    # ---------- payments ----------
    def record_payment(
        self,
        customer_id: RecordId,
        amount: float,
        payment_method: str = "efectivo",
        notes: Optional[str] = None,
        sale_id: Optional[RecordId] = None,
    ) -> CreditPayment:
        try:
            amount = float(amount)
        except (TypeError, ValueError) as e:
            raise ValidationError("Amount must be a number.") from e
        if not math.isfinite(amount):
            raise ValidationError("Amount must be a finite number.")
        if amount <= 0:
            raise ValidationError("Amount must be > 0.")
        if payment_method not in EXPENSE_PAYMENT_METHODS:
            raise ValidationError(f"Unknown payment method: {payment_method}")

        customer = self.get_customer(customer_id)
        if amount > customer.current_debt:
            raise InsufficientDebtError(f"Payment exceeds current debt. Owed: {customer.current_debt:.2f}")

        with self.uow_factory() as uow:
            payment = uow.record_payment(
                customer_id, amount, payment_method, (notes or "").strip() or None, sale_id
            )
        log.info(
            "payment_recorded payment_id=%s customer_id=%s amount=%.2f method=%s",
            payment.id, customer_id, amount, payment_method,
        )
        return payment

    def list_payments(self, limit: int = 50) -> list[CreditPayment]:
        return self.repo.list_credit_payments(limit=limit)

    def payments_for_customer(self, customer_id: RecordId, limit: int = 50) -> list[CreditPayment]:
        return self.repo.list_credit_payments(limit=limit, customer_id=customer_id)

    def pending_sales(self, customer_id: RecordId) -> list[Sale]:
        return self.repo.list_sales_for_customer(customer_id, pending_only=True)

    def ledger_summary(self) -> LedgerSummary:
        customers = self.repo.list_customers()
        return LedgerSummary(
            total_debt=sum(c.current_debt for c in customers),
            customers_with_debt=sum(1 for c in customers if c.current_debt > 0),
            over_limit=tuple(c for c in customers if c.is_over_limit),
        )
