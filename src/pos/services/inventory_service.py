from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

from pos.domain.errors import (
    DuplicateIdError,
    ExpiredProductError,
    InsufficientStockError,
    InvalidArgumentError,
    NotFoundError,
)
from pos.domain.models import Product, ProductSnapshot, to_quantity

log = logging.getLogger(__name__)


class InventoryService:
    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self.clock = clock
        self._products: dict[str, Product] = {}

    def _today(self, as_of: Optional[date]) -> date:
        return as_of if as_of is not None else self.clock().date()

    def add_product(self, product: Product) -> None:
        if product is None or not isinstance(product, Product):
            raise InvalidArgumentError("Product is required.")
        if product.id in self._products:
            raise DuplicateIdError(f"Product with ID {product.id} already exists.")
        self._products[product.id] = product

    def get_product(self, product_id: str) -> Product:
        p = self._products.get(product_id)
        if not p:
            raise NotFoundError(f"Product with ID {product_id} does not exist.")
        return p

    def list_products(self) -> list[Product]:
        return list(self._products.values())

    def list_available(self, as_of: Optional[date] = None) -> list[Product]:
        today = self._today(as_of)
        return [p for p in self._products.values() if not p.is_expired(today)]

    def product_count(self) -> int:
        return len(self._products)

    def restock(self, product_id: str, qty: int) -> None:
        product = self.get_product(product_id)
        qty = to_quantity(qty)
        if qty <= 0:
            raise InvalidArgumentError("Quantity to restock must be > 0.")
        product.quantity_in_stock += qty
        log.info("restock product=%s qty=%s stock=%s", product.id, qty, product.quantity_in_stock)

    def check_line(self, product_id: str, qty: int, as_of: Optional[date] = None) -> Product:
        """Raise the error a sale of ``qty`` units would hit, without touching stock."""
        qty = to_quantity(qty)
        if qty <= 0:
            raise InvalidArgumentError("Qty must be >= 1.")
        product = self.get_product(product_id)
        if product.is_expired(self._today(as_of)):
            raise ExpiredProductError(product.id, product.name, product.expiration_date)
        if qty > product.quantity_in_stock:
            raise InsufficientStockError(product.id, product.name, qty, product.quantity_in_stock)
        return product

    def reserve_and_commit(self, product_id: str, qty: int, as_of: Optional[date] = None) -> ProductSnapshot:
        product = self.check_line(product_id, qty, as_of)
        product.quantity_in_stock -= to_quantity(qty)
        return product.snapshot()

    def release(self, product_id: str, qty: int) -> None:
        """Give back units taken by ``reserve_and_commit`` when a sale is undone."""
        self.get_product(product_id).quantity_in_stock += to_quantity(qty)

    def is_available(self, product_id: str, qty: int, as_of: Optional[date] = None) -> bool:
        p = self._products.get(product_id)
        return p is not None and not p.is_expired(self._today(as_of)) and p.quantity_in_stock >= to_quantity(qty)

    def days_until_expiration(self, product: Product, as_of: Optional[date] = None) -> int:
        return product.days_until_expiration(self._today(as_of))

    def total_purchase_value(self) -> Decimal:
        return sum((p.purchase_cost * p.quantity_in_stock for p in self._products.values()), Decimal("0"))
