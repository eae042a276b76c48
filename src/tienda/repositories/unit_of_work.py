from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Protocol

from tienda.domain.models import CreditPayment, RecordId, Sale


class UnitOfWork(Protocol):
    def __enter__(self) -> "UnitOfWork": ...
    def __exit__(self, exc_type, exc, tb) -> None: ...
    def create_sale(
        self,
        sale_number: str,
        payment_method: str,
        payment_status: str,
        customer_id: Optional[RecordId],
        notes: Optional[str],
        items: Iterable[dict],
        debt_delta: float = 0.0,
    ) -> Sale: ...
    def record_payment(
        self,
        customer_id: RecordId,
        amount: float,
        payment_method: str,
        notes: Optional[str],
        sale_id: Optional[RecordId] = None,
    ) -> CreditPayment: ...


@dataclass
class RepositoryUnitOfWork:
    """Unit of Work adapter for the multi-step write use-cases (checkout, credit payment).

    Atomicity lives in the repository: SQLite runs each use-case in one
    transaction, the REST store runs it as a compensating saga.
    """

    repo: object

    def __enter__(self) -> "RepositoryUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None

    @staticmethod
    def _stamp() -> str:
        return datetime.now().replace(microsecond=0).isoformat(sep=" ")

    def create_sale(
        self,
        sale_number: str,
        payment_method: str,
        payment_status: str,
        customer_id: Optional[RecordId],
        notes: Optional[str],
        items: Iterable[dict],
        debt_delta: float = 0.0,
    ) -> Sale:
        items = list(items)
        total = sum(float(it["unit_price"]) * int(it["quantity"]) for it in items)
        header = {
            "sale_number": sale_number,
            "customer_id": customer_id,
            "total": total,
            "payment_method": payment_method,
            "payment_status": payment_status,
            "notes": notes,
            "created_at": self._stamp(),
        }
        return self.repo.create_sale_with_items(header, items, debt_delta=debt_delta)

    def record_payment(
        self,
        customer_id: RecordId,
        amount: float,
        payment_method: str,
        notes: Optional[str],
        sale_id: Optional[RecordId] = None,
    ) -> CreditPayment:
        return self.repo.record_credit_payment(
            customer_id, float(amount), payment_method, notes, sale_id, self._stamp()
        )
