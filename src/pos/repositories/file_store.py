from __future__ import annotations

import json
import logging
from contextlib import suppress
from pathlib import Path

from pos.domain.errors import InvalidArgumentError, NotFoundError, PersistenceError
from pos.domain.models import Receipt

log = logging.getLogger("pos.receipts")


class FileReceiptStore:
    """One ``receipt_<n>.txt`` and one ``receipt_<n>.json`` per issued receipt."""

    def __init__(self, receipts_dir: Path | str):
        self.receipts_dir = Path(receipts_dir)

    def _text_path(self, receipt_number: int) -> Path:
        return self.receipts_dir / f"receipt_{int(receipt_number)}.txt"

    def _json_path(self, receipt_number: int) -> Path:
        return self.receipts_dir / f"receipt_{int(receipt_number)}.json"

    def save(self, receipt: Receipt) -> None:
        contents = [
            (self._text_path(receipt.receipt_number), receipt.format()),
            (self._json_path(receipt.receipt_number), json.dumps(receipt.to_dict(), ensure_ascii=False, indent=2)),
        ]
        written: list[Path] = []
        try:
            self.receipts_dir.mkdir(parents=True, exist_ok=True)
            for path, text in contents:
                # "x": an issued receipt is never overwritten
                with path.open("x", encoding="utf-8") as fh:
                    written.append(path)
                    fh.write(text)
        except (OSError, TypeError, ValueError) as e:
            with suppress(OSError):
                for path in written:
                    path.unlink(missing_ok=True)
            raise PersistenceError(f"Could not write receipt #{receipt.receipt_number}: {e}") from e
        log.info("receipt_saved number=%s dir=%s", receipt.receipt_number, self.receipts_dir)

    def last_number(self) -> int:
        """Highest receipt number already on disk, 0 for an empty directory."""
        if not self.receipts_dir.is_dir():
            return 0
        numbers = [0]
        for path in self.receipts_dir.glob("receipt_*"):
            suffix = path.stem[len("receipt_"):]
            if path.suffix in (".txt", ".json") and suffix.isdigit():
                numbers.append(int(suffix))
        return max(numbers)

    def read_rendered(self, receipt_number: int) -> str:
        path = self._text_path(receipt_number)
        if not path.exists():
            raise NotFoundError(f"Receipt #{receipt_number} not found.")
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Could not read receipt #{receipt_number}: {e}") from e

    def read_serialized(self, receipt_number: int) -> Receipt:
        path = self._json_path(receipt_number)
        if not path.exists():
            raise NotFoundError(f"Receipt #{receipt_number} not found.")
        try:
            return Receipt.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, KeyError, ValueError, ArithmeticError, InvalidArgumentError) as e:
            raise PersistenceError(f"Could not load receipt #{receipt_number}: {e}") from e
