from __future__ import annotations

from datetime import date
from decimal import Decimal


class AppError(Exception):
    """Base app error."""


class InvalidArgumentError(AppError):
    pass


class NotFoundError(AppError):
    pass


class DuplicateIdError(AppError):
    pass


class PersistenceError(AppError):
    pass


class ExpiredProductError(AppError):
    def __init__(self, product_id: str, product_name: str, expiration_date: date):
        super().__init__(
            f"Product '{product_name}' (ID: {product_id}) has expired (expired on: {expiration_date.isoformat()})"
        )
        self.product_id = product_id
        self.product_name = product_name
        self.expiration_date = expiration_date


class InsufficientStockError(AppError):
    def __init__(self, product_id: str, product_name: str, requested: int, available: int):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = int(requested)
        self.available = int(available)
        self.shortage = self.requested - self.available
        super().__init__(
            f"Insufficient quantity of product '{product_name}' (ID: {product_id}). "
            f"Requested: {self.requested}, Available: {self.available}, Missing: {self.shortage}"
        )


class InsufficientPaymentError(AppError):
    def __init__(self, required: Decimal, received: Decimal):
        self.required = required
        self.received = received
        super().__init__(f"Insufficient payment amount. Required: {required:.2f} EUR, Received: {received:.2f} EUR")
