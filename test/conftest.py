import sys
from datetime import date, datetime, timedelta
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

FIXED_NOW = datetime(2024, 3, 1, 12, 30, 0)
TODAY = FIXED_NOW.date()


def fixed_clock() -> datetime:
    return FIXED_NOW


def in_days(days: int) -> date:
    return TODAY + timedelta(days=days)


def make_product(product_id: str, name: str, cost, markup, expires_in: int, stock: int, category: str = "FOOD"):
    from pos.domain.models import Product

    return Product(
        id=product_id,
        name=name,
        purchase_cost=cost,
        category=category,
        expiration_date=in_days(expires_in),
        markup_percent=markup,
        quantity_in_stock=stock,
    )
