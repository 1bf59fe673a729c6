import json
import logging
from decimal import Decimal
from pathlib import Path

import pytest

from pos.config import StoreSettings, get_app_paths, load_settings
from pos.domain.errors import InvalidArgumentError
from pos.logging_config import JsonFormatter, setup_logging


def test_load_settings_anchors_relative_receipts_dir(tmp_path: Path):
    ini = tmp_path / "store.ini"
    ini.write_text(
        "[Store]\n"
        "Name = Shop NBU\n"
        "ExpirationThresholdDays = 5\n"
        "ExpirationDiscountPercent = 20.5\n"
        "ReceiptsDir = receipts\n",
        encoding="utf-8",
    )

    settings = load_settings(ini)

    assert settings.store_name == "Shop NBU"
    assert settings.expiration_threshold_days == 5
    assert settings.expiration_discount_percent == Decimal("20.5")
    assert settings.receipts_dir == (tmp_path / "receipts").resolve()
    assert settings.receipts_db is None


def test_load_settings_reads_optional_receipts_db(tmp_path: Path):
    ini = tmp_path / "store.ini"
    ini.write_text(
        "[Store]\n"
        "Name = Shop NBU\n"
        "ExpirationThresholdDays = 5\n"
        "ExpirationDiscountPercent = 20\n"
        "ReceiptsDir = receipts\n"
        "ReceiptsDb = data/receipts.db\n",
        encoding="utf-8",
    )

    settings = load_settings(ini)

    assert settings.receipts_db == (tmp_path / "data" / "receipts.db").resolve()


def test_load_settings_errors(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.ini")

    ini = tmp_path / "store.ini"
    ini.write_text("[Store]\nName = Shop\n", encoding="utf-8")
    with pytest.raises(KeyError):
        load_settings(ini)


@pytest.mark.parametrize("threshold, discount", [(-1, 10), (3, 120), (3, -5)])
def test_store_settings_validate_ranges(tmp_path: Path, threshold, discount):
    with pytest.raises(InvalidArgumentError):
        StoreSettings("Shop", threshold, discount, tmp_path)


def test_get_app_paths_creates_folders(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    monkeypatch.setattr("sys.platform", "linux")

    paths = get_app_paths("TestStore")

    assert paths.base_dir == tmp_path / ".teststore"
    assert paths.receipts_dir.is_dir()
    assert paths.logs_dir.is_dir()
    assert paths.db_path.name == "receipts.db"


def test_json_formatter_emits_one_json_object():
    record = logging.LogRecord("pos.sales", logging.INFO, __file__, 1, "sale_created receipt=%s", (3,), None)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["logger"] == "pos.sales"
    assert payload["level"] == "INFO"
    assert payload["message"] == "sale_created receipt=3"


def test_setup_logging_creates_dedicated_files(tmp_path: Path):
    root = logging.getLogger()
    saved_root = root.handlers[:]
    saved_level = root.level
    root.handlers = []
    try:
        setup_logging(tmp_path / "logs")
        logging.getLogger("pos.sales").info("sale_created receipt=1")
        for h in logging.getLogger("pos.sales").handlers:
            h.flush()

        assert (tmp_path / "logs" / "app.log").exists()
        assert (tmp_path / "logs" / "errors.log").exists()
        assert "sale_created receipt=1" in (tmp_path / "logs" / "sales.log").read_text(encoding="utf-8")
        assert (tmp_path / "logs" / "receipts.log").exists()
    finally:
        for name in ("pos.sales", "pos.receipts"):
            lg = logging.getLogger(name)
            for h in lg.handlers[:]:
                h.close()
                lg.removeHandler(h)
            lg.setLevel(logging.NOTSET)
        for h in root.handlers:
            h.close()
        root.handlers = saved_root
        root.setLevel(saved_level)
