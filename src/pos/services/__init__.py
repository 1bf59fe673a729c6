from .inventory_service import InventoryService
from .cashier_service import CashierService
from .pricing_service import PricingService
from .receipt_service import ReceiptService
from .sales_service import SalesService
from .excel_service import ExcelService
from .reporting_service import ReportingService

__all__ = [
    "InventoryService",
    "CashierService",
    "PricingService",
    "ReceiptService",
    "SalesService",
    "ExcelService",
    "ReportingService",
]
