from __future__ import annotations

from typing import Protocol

from pos.domain.models import Receipt


class ReceiptStore(Protocol):
    def save(self, receipt: Receipt) -> None: ...
    def read_rendered(self, receipt_number: int) -> str: ...
    def read_serialized(self, receipt_number: int) -> Receipt: ...
    def last_number(self) -> int: ...
