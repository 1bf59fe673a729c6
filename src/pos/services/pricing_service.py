from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Mapping, Protocol

from pos.domain.errors import InvalidArgumentError
from pos.domain.models import Product, ProductCategory, round_money, to_money

HUNDRED = Decimal("100")


class PricingPolicy(Protocol):
    def unit_price(self, product: Product, days_left: int, threshold_days: int, discount_percent: Decimal) -> Decimal: ...


class MarkupDiscountPolicy:
    """Markup over purchase cost, discounted when expiration is close.

    The discount applies only while ``0 < days_left <= threshold_days``;
    an already expired product keeps its base price.
    """

    def unit_price(self, product: Product, days_left: int, threshold_days: int, discount_percent: Decimal) -> Decimal:
        price = product.purchase_cost * (1 + product.markup_percent / HUNDRED)
        if 0 < days_left <= threshold_days:
            price = price * (1 - discount_percent / HUNDRED)
        return price


# Both categories share one formula today; keep them separate entries.
DEFAULT_POLICIES: Mapping[ProductCategory, PricingPolicy] = {
    ProductCategory.FOOD: MarkupDiscountPolicy(),
    ProductCategory.NON_FOOD: MarkupDiscountPolicy(),
}


class PricingService:
    def __init__(
        self,
        expiration_threshold_days: int,
        expiration_discount_percent,
        policies: Mapping[ProductCategory, PricingPolicy] | None = None,
    ):
        threshold = int(expiration_threshold_days)
        discount = to_money(expiration_discount_percent)
        if threshold < 0:
            raise InvalidArgumentError("Expiration threshold must be >= 0 days.")
        if discount < 0 or discount > HUNDRED:
            raise InvalidArgumentError("Expiration discount must be between 0 and 100.")
        self.expiration_threshold_days = threshold
        self.expiration_discount_percent = discount
        self.policies = dict(policies or DEFAULT_POLICIES)

    def compute_unit_price(
        self,
        product: Product,
        expiration_threshold_days: int,
        discount_percent,
        as_of: date,
    ) -> Decimal:
        policy = self.policies.get(product.category)
        if policy is None:
            raise InvalidArgumentError(f"No pricing policy for category {product.category.value}.")
        days_left = product.days_until_expiration(as_of)
        price = policy.unit_price(product, days_left, int(expiration_threshold_days), to_money(discount_percent))
        return round_money(price)

    def sale_price(self, product: Product, as_of: date) -> Decimal:
        """Unit price under the store's configured threshold and discount."""
        return self.compute_unit_price(
            product,
            self.expiration_threshold_days,
            self.expiration_discount_percent,
            as_of,
        )
