"""
Checkout pricing for Storefront Checkout

Computes subtotal, tax, shipping and the provider-facing rounded total.

The payment provider only accepts integer unit prices and recomputes its own
gross amount from the item list, so the amount we persist as ``Order.total``
is the sum of the whole-unit item prices (including synthetic tax and
shipping items), not the 2-decimal arithmetic total.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from apps.billing.gateways.base import PaymentItem
from apps.cart.services import CartLine
from apps.common.constants import (
    DEFAULT_FLAT_SHIPPING_FEE,
    DEFAULT_FREE_SHIPPING_THRESHOLD,
    DEFAULT_TAX_RATE,
)
from apps.common.utils import format_percent, quantize_money, whole_units

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

TAX_ITEM_ID = "TAX"
SHIPPING_ITEM_ID = "SHIPPING"
SERVICE_FEE_ITEM_ID = "SERVICE_FEE"


# ===============================================================================
# SHIPPING POLICIES
# ===============================================================================


@dataclass(frozen=True)
class ShippingQuote:
    shipping_cost: Decimal
    service_fee: Decimal
    is_free_shipping: bool
    reason: str


class ShippingPolicy(ABC):
    """Decides shipping cost (and any service fee) for a set of cart lines"""

    @abstractmethod
    def quote(self, lines: Sequence[CartLine], subtotal: Decimal) -> ShippingQuote:
        ...


class FlatRateShippingPolicy(ShippingPolicy):
    """Free at or above a threshold, a fixed fee below it"""

    def __init__(self, free_shipping_threshold: Decimal, flat_fee: Decimal) -> None:
        self.free_shipping_threshold = Decimal(free_shipping_threshold)
        self.flat_fee = Decimal(flat_fee)

    def quote(self, lines: Sequence[CartLine], subtotal: Decimal) -> ShippingQuote:
        if subtotal >= self.free_shipping_threshold:
            return ShippingQuote(ZERO, ZERO, True, "Free shipping (threshold reached)")
        return ShippingQuote(self.flat_fee, ZERO, self.flat_fee == 0, "Flat shipping fee")


class ProductShippingPolicy(ShippingPolicy):
    """
    Hybrid per-product / global shipping.

    One distinct product: that product's own settings, falling back to the
    global threshold and cost when unset. Several distinct products: every
    setting is summed over the cart lines and divided by the number of
    distinct products, then the subtotal is compared with that average.
    """

    def __init__(self, global_threshold: Decimal, global_cost: Decimal) -> None:
        self.global_threshold = Decimal(global_threshold)
        self.global_cost = Decimal(global_cost)

    def quote(self, lines: Sequence[CartLine], subtotal: Decimal) -> ShippingQuote:
        if not lines:
            return ShippingQuote(ZERO, ZERO, True, "No items in cart")

        distinct_products = {line.product_id for line in lines}
        if len(distinct_products) == 1:
            return self._single_product_quote(lines[0], subtotal)
        return self._mixed_products_quote(lines, subtotal, len(distinct_products))

    def _single_product_quote(self, line: CartLine, subtotal: Decimal) -> ShippingQuote:
        service_fee = line.service_fee or ZERO

        if line.free_shipping_threshold is None or line.default_shipping_cost is None:
            if subtotal >= self.global_threshold:
                return ShippingQuote(ZERO, service_fee, True, "Free shipping (global threshold reached)")
            is_free = self.global_cost == 0
            reason = "Free shipping (no settings)" if is_free else "Global shipping cost applied"
            return ShippingQuote(self.global_cost, service_fee, is_free, reason)

        if subtotal >= line.free_shipping_threshold:
            return ShippingQuote(ZERO, service_fee, True, "Free shipping (product threshold reached)")
        return ShippingQuote(line.default_shipping_cost, service_fee, False, "Product-specific shipping cost")

    def _mixed_products_quote(self, lines: Sequence[CartLine], subtotal: Decimal, distinct: int) -> ShippingQuote:
        # Settings are read from the first line of each product but summed once per line
        first_line_of: dict[object, CartLine] = {}
        for line in lines:
            first_line_of.setdefault(line.product_id, line)

        fee_total = sum((line.service_fee or ZERO for line in lines), ZERO)
        threshold_total = sum(
            (first_line_of[line.product_id].free_shipping_threshold or ZERO for line in lines), ZERO
        )
        cost_total = sum((first_line_of[line.product_id].default_shipping_cost or ZERO for line in lines), ZERO)

        avg_fee = fee_total / distinct
        avg_threshold = threshold_total / distinct
        avg_cost = cost_total / distinct

        if subtotal >= avg_threshold:
            return ShippingQuote(ZERO, avg_fee, True, "Free shipping (average threshold reached - mixed products)")
        return ShippingQuote(avg_cost, avg_fee, False, "Average shipping cost (mixed products)")


def get_shipping_policy() -> ShippingPolicy:
    """Policy configured by ``CHECKOUT_SHIPPING_POLICY`` ('flat' or 'per_product')"""
    threshold = Decimal(str(getattr(settings, "CHECKOUT_FREE_SHIPPING_THRESHOLD", DEFAULT_FREE_SHIPPING_THRESHOLD)))
    fee = Decimal(str(getattr(settings, "CHECKOUT_FLAT_SHIPPING_FEE", DEFAULT_FLAT_SHIPPING_FEE)))
    policy_name = getattr(settings, "CHECKOUT_SHIPPING_POLICY", "flat")

    if policy_name == "per_product":
        return ProductShippingPolicy(global_threshold=threshold, global_cost=fee)
    if policy_name != "flat":
        logger.warning(f"⚠️ [Pricing] Unknown CHECKOUT_SHIPPING_POLICY {policy_name!r}, using flat rate")
    return FlatRateShippingPolicy(free_shipping_threshold=threshold, flat_fee=fee)


def get_tax_rate() -> Decimal:
    return Decimal(str(getattr(settings, "CHECKOUT_TAX_RATE", DEFAULT_TAX_RATE)))


# ===============================================================================
# PRICING ENGINE
# ===============================================================================


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    tax: Decimal
    shipping_cost: Decimal
    service_fee: Decimal
    discount: Decimal
    total: Decimal  # 2-decimal arithmetic total
    rounded_total: Decimal  # what the provider charges and the order stores
    provider_items: tuple[PaymentItem, ...]
    is_free_shipping: bool
    shipping_reason: str

    def summary(self) -> dict[str, str]:
        return {
            "subtotal": f"{self.subtotal:.2f}",
            "discount": f"{self.discount:.2f}",
            "tax": f"{self.tax:.2f}",
            "shipping": f"{self.shipping_cost:.2f}",
            "service_fee": f"{self.service_fee:.2f}",
            "total": f"{self.rounded_total:.2f}",
        }


class PricingService:
    """💰 Checkout totals"""

    @staticmethod
    def effective_price(line: CartLine) -> Decimal:
        """Sale price when present and lower than the list price"""
        if line.sale_price is not None and line.sale_price < line.price:
            return line.sale_price
        return line.price

    @staticmethod
    def line_total(line: CartLine) -> Decimal:
        return PricingService.effective_price(line) * line.quantity

    @staticmethod
    def calculate(
        lines: Sequence[CartLine],
        policy: ShippingPolicy | None = None,
        tax_rate: Decimal | None = None,
    ) -> PriceBreakdown:
        policy = policy or get_shipping_policy()
        tax_rate = get_tax_rate() if tax_rate is None else Decimal(tax_rate)
        discount = ZERO  # no coupon system

        subtotal = sum((PricingService.line_total(line) for line in lines), ZERO)
        tax = quantize_money(subtotal * tax_rate)
        quote = policy.quote(lines, subtotal)
        shipping_cost = quantize_money(quote.shipping_cost)
        service_fee = quantize_money(quote.service_fee)
        total = quantize_money(subtotal - discount + tax + shipping_cost + service_fee)

        items = [
            PaymentItem(
                id=str(line.product_id),
                name=line.display_name,
                price=PricingService.effective_price(line),
                quantity=line.quantity,
            )
            for line in lines
        ]
        if tax > 0:
            items.append(PaymentItem(TAX_ITEM_ID, f"Tax ({format_percent(tax_rate)}%)", Decimal(whole_units(tax)), 1))
        if shipping_cost > 0:
            items.append(PaymentItem(SHIPPING_ITEM_ID, "Shipping Cost", Decimal(whole_units(shipping_cost)), 1))
        if service_fee > 0:
            items.append(PaymentItem(SERVICE_FEE_ITEM_ID, "Service Fee", Decimal(whole_units(service_fee)), 1))

        rounded_total = Decimal(sum(whole_units(item.price) * item.quantity for item in items))

        if rounded_total != total:
            logger.debug(f"💰 [Pricing] Rounded total {rounded_total} differs from arithmetic total {total}")

        return PriceBreakdown(
            subtotal=quantize_money(subtotal),
            tax=tax,
            shipping_cost=shipping_cost,
            service_fee=service_fee,
            discount=discount,
            total=total,
            rounded_total=quantize_money(rounded_total),
            provider_items=tuple(items),
            is_free_shipping=quote.is_free_shipping,
            shipping_reason=quote.reason,
        )
