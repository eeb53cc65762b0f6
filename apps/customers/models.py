"""
Customer models for Storefront Checkout
Customer-owned shipping addresses. Orders copy these at commit time, so later
edits here never alter historical orders.
"""

from __future__ import annotations

import uuid
from typing import Any, ClassVar

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class ShippingAddress(models.Model):
    """Mailing address owned by one customer"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="shipping_addresses",
    )
    label = models.CharField(max_length=50, blank=True, help_text=_("e.g. Home, Office"))
    full_name = models.CharField(max_length=150)
    phone = models.CharField(max_length=30)
    address_line1 = models.CharField(max_length=255)
    address_line2 = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=3, default="ID", help_text=_("ISO 3166 country code"))
    is_default = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "shipping_addresses"
        verbose_name = _("Shipping Address")
        verbose_name_plural = _("Shipping Addresses")
        ordering: ClassVar[tuple[str, ...]] = ("-is_default", "-created_at")

    def __str__(self) -> str:
        return f"{self.full_name}, {self.address_line1}, {self.city}"

    @property
    def first_name(self) -> str:
        return self.full_name.split(" ")[0] if self.full_name else ""

    @property
    def last_name(self) -> str:
        return " ".join(self.full_name.split(" ")[1:])

    def to_snapshot(self) -> dict[str, Any]:
        """Field values copied into the order's address snapshot"""
        return {
            "full_name": self.full_name,
            "phone": self.phone,
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }
