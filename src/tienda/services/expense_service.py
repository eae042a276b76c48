from __future__ import annotations

import math
from collections import defaultdict
from datetime import date
from typing import Optional

from tienda.domain.errors import NotFoundError, ValidationError
from tienda.domain.models import EXPENSE_CATEGORIES, EXPENSE_PAYMENT_METHODS, Expense, RecordId


class ExpenseService:
    def __init__(self, repo, today=date.today):
        self.repo = repo
        self.today = today

    def list_expenses(self) -> list[Expense]:
        return self.repo.list_expenses()

    def add_expense(
        self,
        description: str,
        category: str,
        amount: float,
        payment_method: str = "efectivo",
        expense_date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Expense:
        description = (description or "").strip()
        if not description:
            raise ValidationError("Description is required.")
        if category not in EXPENSE_CATEGORIES:
            raise ValidationError(f"Unknown expense category: {category}")
        if payment_method not in EXPENSE_PAYMENT_METHODS:
            raise ValidationError(f"Unknown payment method: {payment_method}")
        try:
            amount = float(amount)
        except (TypeError, ValueError) as e:
            raise ValidationError("Amount must be a number.") from e
        if not math.isfinite(amount):
            raise ValidationError("Amount must be a finite number.")
        if amount <= 0:
            raise ValidationError("Amount must be > 0.")

        expense_date = (expense_date or "").strip() or self.today().isoformat()
        try:
            date.fromisoformat(expense_date)
        except ValueError as e:
            raise ValidationError("Date must be YYYY-MM-DD.") from e

        return self.repo.add_expense({
            "description": description,
            "category": category,
            "amount": amount,
            "payment_method": payment_method,
            "expense_date": expense_date,
            "notes": (notes or "").strip() or None,
        })

    def delete_expense(self, expense_id: RecordId) -> None:
        if not self.repo.delete_expense(expense_id):
            raise NotFoundError("Expense not found.")

    def expenses_for_month(self, month: str) -> list[Expense]:
        """``month`` is ``YYYY-MM``."""
        return [e for e in self.repo.list_expenses() if e.expense_date.startswith(month)]

    def total_for_month(self, month: str) -> float:
        return sum(e.amount for e in self.expenses_for_month(month))

    def totals_by_category(self, month: Optional[str] = None) -> dict[str, float]:
        expenses = self.expenses_for_month(month) if month else self.repo.list_expenses()
        totals: dict[str, float] = defaultdict(float)
        for e in expenses:
            totals[e.category] += e.amount
        return dict(sorted(totals.items(), key=lambda kv: kv[1], reverse=True))

    def grand_total(self) -> float:
        return sum(e.amount for e in self.repo.list_expenses())
