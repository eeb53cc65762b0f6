"""
Cart services for Storefront Checkout
Read-only snapshot of a customer's cart for the checkout pipeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from apps.common.errors import CheckoutError, CheckoutErrorKind
from apps.common.types import Err, Ok, Result

from .models import Cart, CartItem

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser

logger = logging.getLogger(__name__)


# ===============================================================================
# SNAPSHOT TYPES
# ===============================================================================


@dataclass(frozen=True)
class CartLine:
    """One cart line joined with the product and variant data checkout needs"""

    cart_item_id: Any
    product_id: Any
    variant_id: Any | None
    brand: str
    product_name: str
    price: Decimal
    sale_price: Decimal | None
    stock_quantity: int
    is_active: bool
    quantity: int
    selected_color: str = ""
    selected_size: str = ""
    selected_image_url: str = ""
    free_shipping_threshold: Decimal | None = None
    default_shipping_cost: Decimal | None = None
    service_fee: Decimal | None = None

    @property
    def display_name(self) -> str:
        return f"{self.brand} - {self.product_name}" if self.brand else self.product_name

    @classmethod
    def from_cart_item(cls, item: CartItem) -> CartLine:
        product = item.product
        return cls(
            cart_item_id=item.id,
            product_id=product.id,
            variant_id=item.variant_id,
            brand=product.brand,
            product_name=product.name,
            price=product.price,
            sale_price=product.sale_price,
            stock_quantity=product.stock_quantity,
            is_active=product.is_active,
            quantity=item.quantity,
            selected_color=item.selected_color or (item.variant.color if item.variant else ""),
            selected_size=item.selected_size or (item.variant.size if item.variant else ""),
            selected_image_url=item.selected_image_url or (item.variant.image_url if item.variant else ""),
            free_shipping_threshold=product.free_shipping_threshold,
            default_shipping_cost=product.default_shipping_cost,
            service_fee=product.service_fee,
        )


@dataclass(frozen=True)
class CartSnapshot:
    cart_id: Any
    lines: tuple[CartLine, ...]

    @property
    def item_count(self) -> int:
        return len(self.lines)


# ===============================================================================
# CART SNAPSHOT SERVICE
# ===============================================================================


class CartSnapshotService:
    """Loads the customer's cart without mutating anything"""

    @staticmethod
    def load_snapshot(user: AbstractBaseUser) -> Result[CartSnapshot, CheckoutError]:
        cart = Cart.objects.filter(user=user).first()
        if cart is None:
            return Err(CheckoutError(CheckoutErrorKind.CART_EMPTY, "Cart is empty"))

        items = CartItem.objects.filter(cart=cart).select_related("product", "variant").order_by("added_at")
        lines = tuple(CartLine.from_cart_item(item) for item in items)
        if not lines:
            return Err(CheckoutError(CheckoutErrorKind.CART_EMPTY, "Cart is empty"))

        logger.debug(f"🛒 [Cart] Snapshot for cart {cart.id}: {len(lines)} lines")
        return Ok(CartSnapshot(cart_id=cart.id, lines=lines))
