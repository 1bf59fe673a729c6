import json
from decimal import Decimal
from pathlib import Path

import pytest

from conftest import FIXED_NOW, in_days

from pos.domain.errors import InvalidArgumentError, NotFoundError, PersistenceError
from pos.domain.models import Cashier, ProductCategory, ProductSnapshot, Receipt, ReceiptBuilder, ReceiptLine
from pos.repositories.file_store import FileReceiptStore
from pos.repositories.sqlite_repo import SqliteReceiptStore
from pos.services.receipt_service import ReceiptService


def _draft() -> ReceiptBuilder:
    milk = ProductSnapshot("P001", "Milk", ProductCategory.FOOD, in_days(10))
    soap = ProductSnapshot("P004", "Soap", ProductCategory.NON_FOOD, in_days(365))
    return (
        ReceiptBuilder()
        .cashier(Cashier("C001", "Ivan Ivanov", Decimal("1500")))
        .issued_at(FIXED_NOW)
        .add_line(ReceiptLine(milk, 2, Decimal("3.25")))
        .add_line(ReceiptLine(soap, 1, Decimal("4.50")))
    )


def test_builder_requires_cashier_lines_and_number():
    with pytest.raises(InvalidArgumentError, match="Cashier"):
        ReceiptBuilder().receipt_number(1).build()
    with pytest.raises(InvalidArgumentError, match="at least one line"):
        ReceiptBuilder().receipt_number(1).cashier(Cashier("C1", "Ana")).build()
    with pytest.raises(InvalidArgumentError, match="Receipt number"):
        _draft().build()


def test_rendered_receipt_layout():
    receipt = _draft().receipt_number(7).build()
    text = receipt.format()

    assert "RECEIPT #7" in text
    assert "Cashier: Ivan Ivanov (C001)" in text
    assert "Date and time: 01.03.2024 12:30:00" in text
    assert "Milk x 2 @ 3.25 EUR = 6.50 EUR" in text
    assert "SUM: 11.00 EUR" in text
    assert receipt.format() == text


def test_file_store_writes_both_forms(tmp_path: Path):
    ledger = ReceiptService(FileReceiptStore(tmp_path / "receipts"))

    receipt = ledger.commit(_draft())

    assert (tmp_path / "receipts" / "receipt_1.txt").exists()
    assert (tmp_path / "receipts" / "receipt_1.json").exists()
    assert ledger.read_rendered(1) == receipt.format()
    loaded = ledger.read_serialized(1)
    assert loaded == receipt
    assert loaded.total_amount == Decimal("11.00")


def test_file_store_missing_and_corrupt_receipts(tmp_path: Path):
    store = FileReceiptStore(tmp_path)

    with pytest.raises(NotFoundError):
        store.read_rendered(3)

    (tmp_path / "receipt_3.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError):
        store.read_serialized(3)


def test_file_store_failure_is_a_persistence_error(tmp_path: Path):
    blocker = tmp_path / "receipts"
    blocker.write_text("not a directory", encoding="utf-8")
    ledger = ReceiptService(FileReceiptStore(blocker))

    with pytest.raises(PersistenceError):
        ledger.commit(_draft())

    assert ledger.next_number() == 1
    assert ledger.receipt_count() == 0


def test_sqlite_store_round_trip_and_line_rollup(tmp_path: Path):
    store = SqliteReceiptStore(tmp_path / "receipts.db")
    store.init_db()
    ledger = ReceiptService(store)

    first = ledger.commit(_draft())
    ledger.commit(_draft())

    assert store.list_receipt_numbers() == [1, 2]
    assert store.read_rendered(1) == first.format()
    assert store.read_serialized(1) == first
    assert store.units_sold_by_product() == [("P001", 4), ("P004", 2)]
    assert store.integrity_check() == "ok"
    with pytest.raises(NotFoundError):
        store.read_serialized(99)


def test_sqlite_store_rejects_duplicate_numbers(tmp_path: Path):
    store = SqliteReceiptStore(tmp_path / "receipts.db")
    store.init_db()
    receipt = _draft().receipt_number(1).build()
    store.save(receipt)

    with pytest.raises(PersistenceError):
        store.save(receipt)


def test_sqlite_migrations_are_idempotent(tmp_path: Path):
    db = tmp_path / "receipts.db"
    store = SqliteReceiptStore(db)
    store.init_db()
    store.save(_draft().receipt_number(1).build())

    SqliteReceiptStore(db).init_db()

    conn = store._conn()
    cur = conn.cursor()
    cur.execute("SELECT version FROM schema_migrations ORDER BY version")
    versions = [int(r[0]) for r in cur.fetchall()]
    conn.close()

    assert versions == [1, 2]
    assert store.list_receipt_numbers() == [1]


def test_ledger_tracks_revenue_and_order(tmp_path: Path):
    ledger = ReceiptService(FileReceiptStore(tmp_path))

    ledger.commit(_draft())
    ledger.commit(_draft())

    assert [r.receipt_number for r in ledger.list_receipts()] == [1, 2]
    assert ledger.total_revenue() == Decimal("22.00")
    assert ledger.next_number() == 3


def test_receipt_without_lines_cannot_be_constructed():
    cashier = Cashier("C001", "Ivan Ivanov", Decimal("1500"))

    with pytest.raises(InvalidArgumentError, match="at least one line"):
        Receipt(receipt_number=1, cashier=cashier, issued_at=FIXED_NOW, lines=())

    payload = _draft().receipt_number(1).build().to_dict()
    payload["lines"] = []
    with pytest.raises(InvalidArgumentError, match="at least one line"):
        Receipt.from_dict(payload)


def test_empty_json_receipt_on_disk_is_a_persistence_error(tmp_path: Path):
    store = FileReceiptStore(tmp_path)
    payload = _draft().receipt_number(4).build().to_dict()
    payload["lines"] = []
    (tmp_path / "receipt_4.json").write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(PersistenceError):
        store.read_serialized(4)


def test_file_ledger_resumes_numbering_after_restart(tmp_path: Path):
    receipts_dir = tmp_path / "receipts"
    first = ReceiptService(FileReceiptStore(receipts_dir))
    original = first.commit(_draft())

    restarted = ReceiptService(FileReceiptStore(receipts_dir))

    assert restarted.next_number() == 2
    assert restarted.commit(_draft()).receipt_number == 2
    assert restarted.read_serialized(1) == original
    assert restarted.read_rendered(1) == original.format()


def test_file_store_last_number_ignores_foreign_files(tmp_path: Path):
    store = FileReceiptStore(tmp_path / "receipts")
    assert store.last_number() == 0

    (tmp_path / "receipts").mkdir()
    (tmp_path / "receipts" / "receipt_9.txt").write_text("orphan", encoding="utf-8")
    (tmp_path / "receipts" / "receipt_3.json").write_text("{}", encoding="utf-8")
    (tmp_path / "receipts" / "receipt_backup.json").write_text("{}", encoding="utf-8")
    (tmp_path / "receipts" / "receipt_40.bak").write_text("", encoding="utf-8")

    assert store.last_number() == 9


def test_file_store_never_overwrites_an_issued_receipt(tmp_path: Path):
    store = FileReceiptStore(tmp_path)
    store.save(_draft().receipt_number(1).build())
    before_txt = (tmp_path / "receipt_1.txt").read_text(encoding="utf-8")
    before_json = (tmp_path / "receipt_1.json").read_text(encoding="utf-8")

    other = _draft().issued_at(FIXED_NOW.replace(hour=18)).receipt_number(1).build()
    with pytest.raises(PersistenceError):
        store.save(other)

    assert (tmp_path / "receipt_1.txt").read_text(encoding="utf-8") == before_txt
    assert (tmp_path / "receipt_1.json").read_text(encoding="utf-8") == before_json


def test_sqlite_ledger_resumes_numbering_after_restart(tmp_path: Path):
    db = tmp_path / "receipts.db"
    store = SqliteReceiptStore(db)
    store.init_db()
    assert store.last_number() == 0
    ReceiptService(store).commit(_draft())

    reopened = SqliteReceiptStore(db)
    reopened.init_db()
    restarted = ReceiptService(reopened)

    assert reopened.last_number() == 1
    assert restarted.next_number() == 2
    assert restarted.commit(_draft()).receipt_number == 2
    assert reopened.list_receipt_numbers() == [1, 2]
