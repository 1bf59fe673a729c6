from .models import Product, ProductCategory, ProductSnapshot, Cashier, Receipt, ReceiptLine, ReceiptBuilder
from .errors import (
    AppError,
    DuplicateIdError,
    ExpiredProductError,
    InsufficientPaymentError,
    InsufficientStockError,
    InvalidArgumentError,
    NotFoundError,
    PersistenceError,
)

__all__ = [
    "Product",
    "ProductCategory",
    "ProductSnapshot",
    "Cashier",
    "Receipt",
    "ReceiptLine",
    "ReceiptBuilder",
    "AppError",
    "DuplicateIdError",
    "ExpiredProductError",
    "InsufficientPaymentError",
    "InsufficientStockError",
    "InvalidArgumentError",
    "NotFoundError",
    "PersistenceError",
]
