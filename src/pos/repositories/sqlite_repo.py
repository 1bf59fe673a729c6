from __future__ import annotations

import json
import logging
import shutil
import sqlite3
from datetime import datetime
from pathlib import Path

from pos.domain.errors import InvalidArgumentError, NotFoundError, PersistenceError
from pos.domain.models import Receipt

log = logging.getLogger("pos.receipts")


class SqliteReceiptStore:
    def __init__(self, db_path: Path | str):
        self.db_path = str(db_path)

    def _conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def init_db(self) -> None:
        self.run_migrations()

    def run_migrations(self) -> None:
        conn = self._conn()
        backup_path = self._create_pre_migration_backup()
        try:
            cur = conn.cursor()
            cur.execute("BEGIN")
            cur.execute("CREATE TABLE IF NOT EXISTS schema_migrations (version INTEGER PRIMARY KEY, applied_at TEXT NOT NULL)")
            cur.execute("SELECT COALESCE(MAX(version), 0) FROM schema_migrations")
            current_version = int(cur.fetchone()[0])

            migrations = [
                (1, self._migration_v1_receipts),
                (2, self._migration_v2_receipt_lines),
            ]

            for version, migration in migrations:
                if version <= current_version:
                    continue
                migration(cur)
                cur.execute(
                    "INSERT INTO schema_migrations (version, applied_at) VALUES (?, datetime('now'))",
                    (version,),
                )
            conn.commit()
        except Exception as exc:
            conn.rollback()
            self._restore_pre_migration_backup(backup_path)
            raise PersistenceError(
                "Receipt database migration failed. Original database restored from automatic backup."
            ) from exc
        finally:
            conn.close()

    def _create_pre_migration_backup(self) -> Path | None:
        db_file = Path(self.db_path)
        if not db_file.exists() or db_file.stat().st_size == 0:
            return None
        backup_file = db_file.with_name(f"{db_file.stem}.pre_migration_{datetime.now().strftime('%Y%m%d%H%M%S')}.bak")
        shutil.copy2(db_file, backup_file)
        return backup_file

    def _restore_pre_migration_backup(self, backup_path: Path | None) -> None:
        if backup_path is None or not backup_path.exists():
            return
        shutil.copy2(backup_path, self.db_path)

    def _migration_v1_receipts(self, cur: sqlite3.Cursor) -> None:
        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS receipts (
            receipt_number INTEGER PRIMARY KEY CHECK(receipt_number >= 1),
            issued_at TEXT NOT NULL,
            cashier_id TEXT NOT NULL,
            total_amount TEXT NOT NULL,
            rendered TEXT NOT NULL,
            payload TEXT NOT NULL
        )
        """
        )

    def _migration_v2_receipt_lines(self, cur: sqlite3.Cursor) -> None:
        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS receipt_lines (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            receipt_number INTEGER NOT NULL,
            product_id TEXT NOT NULL,
            qty INTEGER NOT NULL CHECK(qty > 0),
            unit_price TEXT NOT NULL,
            FOREIGN KEY(receipt_number) REFERENCES receipts(receipt_number) ON DELETE CASCADE
        )
        """
        )
        cur.execute(
            """
            INSERT INTO receipt_lines (receipt_number, product_id, qty, unit_price)
            SELECT r.receipt_number, json_extract(l.value, '$.product_id'),
                   json_extract(l.value, '$.quantity'), json_extract(l.value, '$.unit_price')
            FROM receipts r, json_each(r.payload, '$.lines') l
            """
        )

    # ---------- Receipts ----------
    def save(self, receipt: Receipt) -> None:
        conn = self._conn()
        cur = conn.cursor()
        try:
            cur.execute(
                """
                INSERT INTO receipts (receipt_number, issued_at, cashier_id, total_amount, rendered, payload)
                VALUES (?, ?, ?, ?, ?, ?)
            """,
                (
                    int(receipt.receipt_number),
                    receipt.issued_at.isoformat(sep=" "),
                    receipt.cashier.id,
                    str(receipt.total_amount),
                    receipt.format(),
                    json.dumps(receipt.to_dict(), ensure_ascii=False),
                ),
            )
            for ln in receipt.lines:
                cur.execute(
                    """
                    INSERT INTO receipt_lines (receipt_number, product_id, qty, unit_price)
                    VALUES (?, ?, ?, ?)
                """,
                    (int(receipt.receipt_number), ln.product.id, int(ln.quantity), str(ln.unit_price)),
                )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceError(f"Could not store receipt #{receipt.receipt_number}: {e}") from e
        finally:
            conn.close()
        log.info("receipt_saved number=%s db=%s", receipt.receipt_number, self.db_path)

    def _fetch_column(self, column: str, receipt_number: int) -> str:
        conn = self._conn()
        try:
            cur = conn.cursor()
            cur.execute(f"SELECT {column} FROM receipts WHERE receipt_number = ?", (int(receipt_number),))
            row = cur.fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not read receipt #{receipt_number}: {e}") from e
        finally:
            conn.close()
        if not row:
            raise NotFoundError(f"Receipt #{receipt_number} not found.")
        return str(row[0])

    def read_rendered(self, receipt_number: int) -> str:
        return self._fetch_column("rendered", receipt_number)

    def read_serialized(self, receipt_number: int) -> Receipt:
        payload = self._fetch_column("payload", receipt_number)
        try:
            return Receipt.from_dict(json.loads(payload))
        except (KeyError, ValueError, ArithmeticError, InvalidArgumentError) as e:
            raise PersistenceError(f"Could not load receipt #{receipt_number}: {e}") from e

    def list_receipt_numbers(self) -> list[int]:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("SELECT receipt_number FROM receipts ORDER BY receipt_number")
        rows = cur.fetchall()
        conn.close()
        return [int(r[0]) for r in rows]

    def last_number(self) -> int:
        conn = self._conn()
        try:
            row = conn.execute("SELECT COALESCE(MAX(receipt_number), 0) FROM receipts").fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not read receipt numbers: {e}") from e
        finally:
            conn.close()
        return int(row[0])

    def units_sold_by_product(self) -> list[tuple[str, int]]:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute(
            """
            SELECT product_id, SUM(qty)
            FROM receipt_lines
            GROUP BY product_id
            ORDER BY product_id
            """
        )
        rows = cur.fetchall()
        conn.close()
        return [(str(r[0]), int(r[1])) for r in rows]

    def integrity_check(self) -> str:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("PRAGMA integrity_check")
        row = cur.fetchone()
        conn.close()
        return str(row[0]) if row else "unknown"
