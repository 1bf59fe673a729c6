from __future__ import annotations

import configparser
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Optional
import os
import sys

from pos.domain.errors import InvalidArgumentError
from pos.domain.models import to_money


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    receipts_dir: Path
    db_path: Path
    logs_dir: Path


@dataclass(frozen=True)
class StoreSettings:
    store_name: str
    expiration_threshold_days: int
    expiration_discount_percent: Decimal
    receipts_dir: Path
    receipts_db: Optional[Path] = None

    def __post_init__(self) -> None:
        if not (self.store_name or "").strip():
            raise InvalidArgumentError("Store name is required.")
        if int(self.expiration_threshold_days) < 0:
            raise InvalidArgumentError("Expiration threshold must be >= 0 days.")
        discount = to_money(self.expiration_discount_percent)
        if discount < 0 or discount > 100:
            raise InvalidArgumentError("Expiration discount must be between 0 and 100.")
        object.__setattr__(self, "expiration_threshold_days", int(self.expiration_threshold_days))
        object.__setattr__(self, "expiration_discount_percent", discount)
        object.__setattr__(self, "receipts_dir", Path(self.receipts_dir))
        if self.receipts_db is not None:
            object.__setattr__(self, "receipts_db", Path(self.receipts_db))


def _windows_appdata() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def _mac_app_support() -> Path:
    return Path.home() / "Library" / "Application Support"


def get_app_paths(app_name: str = "StoreCheckout") -> AppPaths:
    if sys.platform.startswith("win"):
        base = _windows_appdata() / app_name
    elif sys.platform == "darwin":
        base = _mac_app_support() / app_name
    else:
        base = Path.home() / f".{app_name.lower()}"

    receipts = base / "receipts"
    logs = base / "logs"

    receipts.mkdir(parents=True, exist_ok=True)
    logs.mkdir(parents=True, exist_ok=True)

    return AppPaths(base_dir=base, receipts_dir=receipts, db_path=base / "receipts.db", logs_dir=logs)


def load_settings(config_path: Path) -> StoreSettings:
    """Read ``[Store]`` settings from an INI file.

    The optional ``ReceiptsDb`` entry switches receipt storage to SQLite.
    Relative ``ReceiptsDir`` and ``ReceiptsDb`` values are anchored at the
    INI file's directory.
    Raises ``FileNotFoundError`` for a missing file and ``KeyError`` for a
    missing entry.
    """
    config_path = Path(config_path).expanduser().resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    parser = configparser.ConfigParser()
    parser.read(config_path, encoding="utf-8")
    try:
        name = parser.get("Store", "Name")
        threshold = parser.getint("Store", "ExpirationThresholdDays")
        discount = parser.get("Store", "ExpirationDiscountPercent")
        receipts_raw = parser.get("Store", "ReceiptsDir")
        db_raw = parser.get("Store", "ReceiptsDb", fallback="").strip()
    except (configparser.NoSectionError, configparser.NoOptionError) as exc:
        raise KeyError(f"Missing required configuration entry: {exc}") from exc
    except ValueError as exc:
        raise InvalidArgumentError(f"Invalid configuration value: {exc}") from exc

    receipts_dir = _anchor(config_path, receipts_raw)
    receipts_db = _anchor(config_path, db_raw) if db_raw else None

    return StoreSettings(
        store_name=name,
        expiration_threshold_days=threshold,
        expiration_discount_percent=to_money(discount.strip()),
        receipts_dir=receipts_dir,
        receipts_db=receipts_db,
    )


def _anchor(config_path: Path, raw: str) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (config_path.parent / path).resolve()
    return path
