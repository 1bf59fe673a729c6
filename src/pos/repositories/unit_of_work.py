from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from pos.domain.models import ProductSnapshot

log = logging.getLogger("pos.sales")


class StockSource(Protocol):
    def reserve_and_commit(self, product_id: str, qty: int, as_of: date | None = None) -> ProductSnapshot: ...
    def release(self, product_id: str, qty: int) -> None: ...


@dataclass
class StockUnitOfWork:
    """Applies stock decrements for one sale and undoes them if the block fails.

    Every line must already have been validated; a failure inside the block
    (for example a receipt that cannot be persisted) restores the stock taken
    so far and re-raises.
    """

    inventory: StockSource
    as_of: date | None = None
    _applied: list[tuple[str, int]] = field(default_factory=list)

    def __enter__(self) -> "StockUnitOfWork":
        self._applied = []
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self._applied = []
            return None
        self.rollback()
        return None

    def take(self, product_id: str, qty: int) -> ProductSnapshot:
        snapshot = self.inventory.reserve_and_commit(product_id, qty, self.as_of)
        self._applied.append((product_id, int(qty)))
        return snapshot

    def rollback(self) -> None:
        for product_id, qty in reversed(self._applied):
            self.inventory.release(product_id, qty)
        if self._applied:
            log.warning("stock_rollback lines=%s", len(self._applied))
        self._applied = []
