from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from pos.config import StoreSettings
from pos.repositories.contracts import ReceiptStore
from pos.repositories.file_store import FileReceiptStore
from pos.repositories.sqlite_repo import SqliteReceiptStore
from pos.services.cashier_service import CashierService
from pos.services.excel_service import ExcelService
from pos.services.inventory_service import InventoryService
from pos.services.pricing_service import PricingService
from pos.services.receipt_service import ReceiptService
from pos.services.reporting_service import ReportingService
from pos.services.sales_service import SalesService


@dataclass(frozen=True)
class AppContainer:
    settings: StoreSettings
    store: ReceiptStore
    inventory: InventoryService
    cashiers: CashierService
    pricing: PricingService
    receipts: ReceiptService
    sales: SalesService
    excel: ExcelService
    reporting: ReportingService


def _default_store(settings: StoreSettings) -> ReceiptStore:
    if settings.receipts_db is not None:
        settings.receipts_db.parent.mkdir(parents=True, exist_ok=True)
        db = SqliteReceiptStore(settings.receipts_db)
        db.init_db()
        return db
    return FileReceiptStore(settings.receipts_dir)


def build_container(
    settings: StoreSettings,
    store: Optional[ReceiptStore] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> AppContainer:
    clock = clock or datetime.now
    if store is None:
        store = _default_store(settings)

    inventory = InventoryService(clock=clock)
    cashiers = CashierService()
    pricing = PricingService(settings.expiration_threshold_days, settings.expiration_discount_percent)
    receipts = ReceiptService(store)
    sales = SalesService(cashiers, inventory, pricing, receipts, clock=clock)
    excel = ExcelService(inventory)
    reporting = ReportingService(settings.store_name, cashiers, inventory, receipts)

    return AppContainer(
        settings=settings,
        store=store,
        inventory=inventory,
        cashiers=cashiers,
        pricing=pricing,
        receipts=receipts,
        sales=sales,
        excel=excel,
        reporting=reporting,
    )
