from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pos.domain.errors import InvalidArgumentError

CENT = Decimal("0.01")
RECEIPT_DATE_FORMAT = "%d.%m.%Y %H:%M:%S"


def to_money(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise InvalidArgumentError(f"Not a money amount: {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidArgumentError(f"Not a money amount: {value!r}") from e


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_quantity(value: Any) -> int:
    """Whole unit count; fractional or non-numeric values are rejected, never truncated."""
    if isinstance(value, bool) or value is None:
        raise InvalidArgumentError(f"Not a quantity: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise InvalidArgumentError(f"Quantity must be a whole number: {value!r}")


class ProductCategory(str, Enum):
    FOOD = "FOOD"
    NON_FOOD = "NON_FOOD"

    @property
    def display_name(self) -> str:
        return "Food products" if self is ProductCategory.FOOD else "Non-Food products"


@dataclass(frozen=True)
class ProductSnapshot:
    """Point-in-time view of a product, frozen into receipt lines."""

    id: str
    name: str
    category: ProductCategory
    expiration_date: date


@dataclass(eq=False)
class Product:
    id: str
    name: str
    purchase_cost: Decimal
    category: ProductCategory
    expiration_date: date
    markup_percent: Decimal
    quantity_in_stock: int = 0

    def __post_init__(self) -> None:
        self.id = str(self.id or "").strip()
        self.name = str(self.name or "").strip()
        if not self.id or not self.name:
            raise InvalidArgumentError("Product id and name are required.")
        try:
            self.category = ProductCategory(self.category)
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown product category: {self.category!r}") from e
        if not isinstance(self.expiration_date, date) or isinstance(self.expiration_date, datetime):
            raise InvalidArgumentError("Expiration date must be a calendar date.")
        self.purchase_cost = to_money(self.purchase_cost)
        self.markup_percent = to_money(self.markup_percent)
        if self.purchase_cost < 0:
            raise InvalidArgumentError("Purchase cost must be >= 0.")
        if self.markup_percent < 0:
            raise InvalidArgumentError("Markup must be >= 0.")
        self.quantity_in_stock = to_quantity(self.quantity_in_stock)
        if self.quantity_in_stock < 0:
            raise InvalidArgumentError("Stock must be >= 0.")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Product):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def days_until_expiration(self, as_of: date) -> int:
        return (self.expiration_date - as_of).days

    def is_expired(self, as_of: date) -> bool:
        # same-day is still sellable
        return as_of > self.expiration_date

    def snapshot(self) -> ProductSnapshot:
        return ProductSnapshot(
            id=self.id,
            name=self.name,
            category=self.category,
            expiration_date=self.expiration_date,
        )


@dataclass(frozen=True)
class Cashier:
    id: str
    name: str = field(compare=False)
    monthly_salary: Decimal = field(compare=False, default=Decimal("0"))

    def __post_init__(self) -> None:
        if not (self.id or "").strip() or not (self.name or "").strip():
            raise InvalidArgumentError("Cashier id and name are required.")
        salary = to_money(self.monthly_salary)
        if salary < 0:
            raise InvalidArgumentError("Monthly salary must be >= 0.")
        object.__setattr__(self, "monthly_salary", salary)


@dataclass(frozen=True)
class ReceiptLine:
    product: ProductSnapshot
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def format(self) -> str:
        return f"{self.product.name} x {self.quantity} @ {self.unit_price:.2f} EUR = {self.line_total:.2f} EUR"


@dataclass(frozen=True)
class Receipt:
    receipt_number: int
    cashier: Cashier
    issued_at: datetime
    lines: tuple[ReceiptLine, ...]
    total_amount: Decimal = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        if not self.lines:
            raise InvalidArgumentError("Receipt must have at least one line.")
        object.__setattr__(self, "total_amount", sum((ln.line_total for ln in self.lines), Decimal("0")))

    def format(self) -> str:
        rule, thin = "=" * 50, "-" * 50
        out = [
            rule,
            f"RECEIPT #{self.receipt_number}",
            rule,
            f"Cashier: {self.cashier.name} ({self.cashier.id})",
            f"Date and time: {self.issued_at.strftime(RECEIPT_DATE_FORMAT)}",
            thin,
            "ARTICLES:",
            thin,
        ]
        out.extend(ln.format() for ln in self.lines)
        out.extend([thin, f"SUM: {self.total_amount:.2f} EUR", rule])
        return "\n".join(out) + "\n"

    def to_dict(self) -> dict[str, Any]:
        return {
            "receipt_number": self.receipt_number,
            "cashier": {
                "id": self.cashier.id,
                "name": self.cashier.name,
                "monthly_salary": str(self.cashier.monthly_salary),
            },
            "issued_at": self.issued_at.isoformat(),
            "lines": [
                {
                    "product_id": ln.product.id,
                    "product_name": ln.product.name,
                    "category": ln.product.category.value,
                    "expiration_date": ln.product.expiration_date.isoformat(),
                    "quantity": ln.quantity,
                    "unit_price": str(ln.unit_price),
                }
                for ln in self.lines
            ],
            "total_amount": str(self.total_amount),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Receipt":
        c = data["cashier"]
        lines = [
            ReceiptLine(
                product=ProductSnapshot(
                    id=ln["product_id"],
                    name=ln["product_name"],
                    category=ProductCategory(ln["category"]),
                    expiration_date=date.fromisoformat(ln["expiration_date"]),
                ),
                quantity=int(ln["quantity"]),
                unit_price=Decimal(ln["unit_price"]),
            )
            for ln in data["lines"]
        ]
        return cls(
            receipt_number=int(data["receipt_number"]),
            cashier=Cashier(c["id"], c["name"], Decimal(c["monthly_salary"])),
            issued_at=datetime.fromisoformat(data["issued_at"]),
            lines=tuple(lines),
        )


class ReceiptBuilder:
    """Staged receipt construction; ``build`` checks the aggregate invariants."""

    def __init__(self) -> None:
        self._receipt_number: Optional[int] = None
        self._cashier: Optional[Cashier] = None
        self._issued_at: Optional[datetime] = None
        self._lines: list[ReceiptLine] = []

    def receipt_number(self, number: int) -> "ReceiptBuilder":
        self._receipt_number = int(number)
        return self

    def cashier(self, cashier: Cashier) -> "ReceiptBuilder":
        self._cashier = cashier
        return self

    def issued_at(self, when: datetime) -> "ReceiptBuilder":
        self._issued_at = when
        return self

    def add_line(self, line: ReceiptLine) -> "ReceiptBuilder":
        self._lines.append(line)
        return self

    def build(self) -> Receipt:
        if self._cashier is None:
            raise InvalidArgumentError("Cashier is required.")
        if not self._lines:
            raise InvalidArgumentError("Receipt must have at least one line.")
        if self._receipt_number is None or self._receipt_number < 1:
            raise InvalidArgumentError("Receipt number must be a positive integer.")
        return Receipt(
            receipt_number=self._receipt_number,
            cashier=self._cashier,
            issued_at=self._issued_at or datetime.now().replace(microsecond=0),
            lines=tuple(self._lines),
        )
