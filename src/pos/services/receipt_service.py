from __future__ import annotations

import logging
from decimal import Decimal

from pos.domain.models import Receipt, ReceiptBuilder
from pos.repositories.contracts import ReceiptStore

log = logging.getLogger("pos.receipts")


class ReceiptService:
    """Owns issued receipts, the receipt counter and cumulative revenue.

    ``commit`` is the only path that advances the counter, and it does so
    after the store has accepted the receipt, so a failed write leaves no gap.
    Numbering resumes after the highest receipt the store already holds.
    """

    def __init__(self, store: ReceiptStore):
        self.store = store
        self._receipts: list[Receipt] = []
        # continue after whatever the store already holds
        self._next_number = int(store.last_number()) + 1
        self._total_revenue = Decimal("0")

    def next_number(self) -> int:
        return self._next_number

    def commit(self, draft: ReceiptBuilder) -> Receipt:
        receipt = draft.receipt_number(self._next_number).build()
        self.store.save(receipt)

        self._receipts.append(receipt)
        self._next_number += 1
        self._total_revenue += receipt.total_amount
        log.info(
            "receipt_issued number=%s cashier=%s lines=%s total=%.2f",
            receipt.receipt_number,
            receipt.cashier.id,
            len(receipt.lines),
            receipt.total_amount,
        )
        return receipt

    def receipt_count(self) -> int:
        return len(self._receipts)

    def total_revenue(self) -> Decimal:
        return self._total_revenue

    def list_receipts(self) -> tuple[Receipt, ...]:
        return tuple(self._receipts)

    def read_rendered(self, receipt_number: int) -> str:
        return self.store.read_rendered(receipt_number)

    def read_serialized(self, receipt_number: int) -> Receipt:
        return self.store.read_serialized(receipt_number)
