from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, Union

from pos.domain.errors import AppError, InsufficientPaymentError, InvalidArgumentError
from pos.domain.models import Product, Receipt, ReceiptBuilder, ReceiptLine, to_money
from pos.repositories.unit_of_work import StockUnitOfWork
from pos.services.cashier_service import CashierService
from pos.services.inventory_service import InventoryService
from pos.services.pricing_service import PricingService
from pos.services.receipt_service import ReceiptService

log = logging.getLogger("pos.sales")

Basket = Union[Mapping[str, int], Iterable[tuple[str, int]]]


class SaleState(str, Enum):
    VALIDATING_CASHIER = "VALIDATING_CASHIER"
    PRICING_AND_RESERVING = "PRICING_AND_RESERVING"
    VERIFYING_PAYMENT = "VERIFYING_PAYMENT"
    COMMITTING = "COMMITTING"
    ISSUED = "ISSUED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class SalesService:
    def __init__(
        self,
        cashiers: CashierService,
        inventory: InventoryService,
        pricing: PricingService,
        receipts: ReceiptService,
        clock: Callable[[], datetime] = datetime.now,
        uow_factory: Callable[[date], StockUnitOfWork] | None = None,
    ):
        self.cashiers = cashiers
        self.inventory = inventory
        self.pricing = pricing
        self.receipts = receipts
        self.clock = clock
        self.uow_factory = uow_factory or (lambda as_of: StockUnitOfWork(inventory, as_of))
        self._lock = threading.Lock()
        self.last_state: SaleState | None = None

    def execute_sale(self, cashier_id: str, basket: Basket, payment_amount) -> Receipt:
        """
        basket: {product_id: qty} or [(product_id, qty), ...]

        All lines are checked and priced before any stock moves; stock is
        taken and the receipt numbered only once the whole basket and the
        payment are known to be good.
        """
        with self._lock:
            state = SaleState.VALIDATING_CASHIER
            try:
                cashier = self.cashiers.lookup(cashier_id)
                items = self._normalize_basket(basket)
                payment = to_money(payment_amount)
                if payment < 0:
                    raise InvalidArgumentError("Payment must be >= 0.")
                now = self.clock().replace(microsecond=0)
                as_of = now.date()

                state = SaleState.PRICING_AND_RESERVING
                priced = [self._price_line(product_id, qty, as_of) for product_id, qty in items]
                total = sum((ln.line_total for ln in priced), Decimal("0"))

                state = SaleState.VERIFYING_PAYMENT
                if payment < total:
                    raise InsufficientPaymentError(total, payment)

                state = SaleState.COMMITTING
                draft = ReceiptBuilder().cashier(cashier).issued_at(now)
                with self.uow_factory(as_of) as uow:
                    for ln in priced:
                        snapshot = uow.take(ln.product_id, ln.quantity)
                        draft.add_line(ReceiptLine(product=snapshot, quantity=ln.quantity, unit_price=ln.unit_price))
                    receipt = self.receipts.commit(draft)
                state = SaleState.ISSUED
                self.last_state = state
            except AppError as e:
                log.warning(
                    "sale_failed state=%s cashier=%s error=%s detail=%s",
                    state.value,
                    cashier_id,
                    type(e).__name__,
                    e,
                )
                self.last_state = SaleState.FAILED
                raise

        log.info(
            "sale_created receipt=%s cashier=%s lines=%s total=%.2f payment=%.2f",
            receipt.receipt_number,
            cashier.id,
            len(receipt.lines),
            receipt.total_amount,
            payment,
        )
        return receipt

    def _price_line(self, product_id: str, qty: int, as_of: date) -> PricedLine:
        # expired or short lines are rejected before a price is computed
        product: Product = self.inventory.check_line(product_id, qty, as_of)
        return PricedLine(product_id=product.id, quantity=qty, unit_price=self.pricing.sale_price(product, as_of))

    @staticmethod
    def _normalize_basket(basket: Basket) -> list[tuple[str, int]]:
        if basket is None:
            raise InvalidArgumentError("Basket is required.")
        pairs = basket.items() if isinstance(basket, Mapping) else basket

        # Aggregate qty by product so a repeated id cannot oversell
        qty_by_product: Counter[str] = Counter()
        for product_id, qty in pairs:
            if isinstance(qty, bool) or not isinstance(qty, int):
                raise InvalidArgumentError(f"Qty for {product_id} must be an integer.")
            if qty <= 0:
                raise InvalidArgumentError("Qty must be >= 1.")
            qty_by_product[str(product_id)] += qty

        if not qty_by_product:
            raise InvalidArgumentError("Basket is empty.")
        return sorted(qty_by_product.items())

    def next_number(self) -> int:
        return self.receipts.next_number()

    def receipt_count(self) -> int:
        return self.receipts.receipt_count()

    def total_revenue(self) -> Decimal:
        return self.receipts.total_revenue()

    def list_available(self) -> list[Product]:
        return self.inventory.list_available(self.clock().date())
