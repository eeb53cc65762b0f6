"""
Order management models for Storefront Checkout
Immutable order snapshots created by the checkout commit transaction.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import ClassVar

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.billing.models import PaymentMethod, PaymentStatus


class Order(models.Model):
    """
    Customer order created exactly once per successful checkout.

    Amounts and lines never change after creation; only ``payment_status``
    (webhook reconciliation) and ``status`` (fulfillment) move later.
    """

    STATUS_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        ("PENDING", _("Pending")),
        ("PROCESSING", _("Processing")),
        ("SHIPPED", _("Shipped")),
        ("DELIVERED", _("Delivered")),
        ("CANCELLED", _("Cancelled")),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(
        max_length=50, unique=True, help_text=_("Human-readable order number (e.g., ORD-20250101-00042)")
    )
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="orders")

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="PENDING")
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    payment_channel = models.CharField(max_length=50, blank=True, help_text=_("Virtual account bank"))
    transaction_id = models.CharField(max_length=255, blank=True, help_text=_("Payment provider transaction ID"))

    # Amounts (fixed at creation)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    shipping_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    service_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Amount presented to the payment provider (rounded total)"),
    )

    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering: ClassVar[tuple[str, ...]] = ("-created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["user", "-created_at"], name="order_user_created_idx"),
            models.Index(fields=["payment_status"], name="order_payment_status_idx"),
        )

    def __str__(self) -> str:
        return f"Order {self.order_number}"

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID


class OrderItem(models.Model):
    """Immutable snapshot of a cart line at commit time"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    # Plain identifiers: the snapshot must survive catalog deletions
    product_id = models.UUIDField()
    variant_id = models.UUIDField(null=True, blank=True)

    product_name = models.CharField(max_length=255)
    selected_color = models.CharField(max_length=50, blank=True)
    selected_size = models.CharField(max_length=50, blank=True)
    selected_image_url = models.URLField(max_length=500, blank=True)

    quantity = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=12, decimal_places=2, help_text=_("Unit price"))
    total = models.DecimalField(max_digits=12, decimal_places=2, help_text=_("Unit price × quantity"))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "order_items"
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")
        ordering: ClassVar[tuple[str, ...]] = ("created_at",)

    def __str__(self) -> str:
        return f"{self.quantity} × {self.product_name}"


class OrderShippingAddress(models.Model):
    """Copy of the customer's address taken at commit time"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name="shipping_address")
    full_name = models.CharField(max_length=150)
    phone = models.CharField(max_length=30)
    address_line1 = models.CharField(max_length=255)
    address_line2 = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=3)

    class Meta:
        db_table = "order_shipping_addresses"
        verbose_name = _("Order Shipping Address")
        verbose_name_plural = _("Order Shipping Addresses")

    def __str__(self) -> str:
        return f"{self.full_name}, {self.city}"
