"""
Product Catalog models for Storefront Checkout
Only the catalog fields the checkout pipeline reads or mutates: pricing,
stock, activity and optional per-product shipping settings.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import ClassVar

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

logger = logging.getLogger(__name__)


# ===============================================================================
# PRODUCT CATALOG MODELS
# ===============================================================================


class Product(models.Model):
    """
    Sellable catalog product.

    Stock and sales counters are mutated only by the order commit transaction;
    the checkout read path never writes here.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    brand = models.CharField(max_length=100, blank=True, help_text=_("Brand shown before the product name"))
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)

    # Pricing
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("List price"),
    )
    sale_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Discounted price; used when set and lower than the list price"),
    )

    # Inventory
    stock_quantity = models.PositiveIntegerField(default=0)
    sales_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    # Per-product shipping (null = fall back to the global policy)
    free_shipping_threshold = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    default_shipping_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    service_fee = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "products"
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering: ClassVar[tuple[str, ...]] = ("name",)

    def __str__(self) -> str:
        return self.display_name

    @property
    def display_name(self) -> str:
        """Name as presented to the payment provider: "<brand> - <name>"."""
        return f"{self.brand} - {self.name}" if self.brand else self.name

    @property
    def effective_price(self) -> Decimal:
        """Sale price when present and lower than the list price."""
        if self.sale_price is not None and self.sale_price < self.price:
            return self.sale_price
        return self.price


class ProductVariant(models.Model):
    """Optional purchasable variation of a product (color, size, image)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="variants")
    name = models.CharField(max_length=100)
    sku = models.CharField(max_length=100, blank=True)
    color = models.CharField(max_length=50, blank=True)
    size = models.CharField(max_length=50, blank=True)
    image_url = models.URLField(max_length=500, blank=True)

    class Meta:
        db_table = "product_variants"
        verbose_name = _("Product Variant")
        verbose_name_plural = _("Product Variants")

    def __str__(self) -> str:
        return f"{self.product.name} ({self.name})"
