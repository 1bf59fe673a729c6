from __future__ import annotations

from decimal import Decimal

from pos.domain.errors import DuplicateIdError, InvalidArgumentError, NotFoundError
from pos.domain.models import Cashier


class CashierService:
    def __init__(self):
        self._cashiers: dict[str, Cashier] = {}

    def add_cashier(self, cashier: Cashier) -> None:
        if cashier is None or not isinstance(cashier, Cashier):
            raise InvalidArgumentError("Cashier is required.")
        if cashier.id in self._cashiers:
            raise DuplicateIdError(f"Cashier with ID {cashier.id} already exists.")
        self._cashiers[cashier.id] = cashier

    def lookup(self, cashier_id: str) -> Cashier:
        c = self._cashiers.get(cashier_id)
        if not c:
            raise NotFoundError(f"Cashier with ID {cashier_id} does not exist.")
        return c

    def list_cashiers(self) -> list[Cashier]:
        return list(self._cashiers.values())

    def total_salary_expenses(self) -> Decimal:
        return sum((c.monthly_salary for c in self._cashiers.values()), Decimal("0"))
