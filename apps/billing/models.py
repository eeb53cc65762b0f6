"""
Billing models for Storefront Checkout
Payment vocabulary shared by orders and payment transactions, plus the
per-order record of what the payment provider told us.
"""

from __future__ import annotations

import uuid
from typing import ClassVar

from django.db import models
from django.utils.translation import gettext_lazy as _

# ===============================================================================
# PAYMENT VOCABULARY
# ===============================================================================


class PaymentStatus(models.TextChoices):
    PENDING = "PENDING", _("⏳ Pending")
    PAID = "PAID", _("✅ Paid")
    FAILED = "FAILED", _("❌ Failed")
    REFUNDED = "REFUNDED", _("↩️ Refunded")


class PaymentMethod(models.TextChoices):
    COD = "COD", _("💵 Cash on delivery")
    VIRTUAL_ACCOUNT = "VIRTUAL_ACCOUNT", _("🏦 Virtual account")
    QRIS = "QRIS", _("📱 QRIS")


class PaymentProvider(models.TextChoices):
    MIDTRANS = "MIDTRANS", _("Midtrans")
    OFFLINE = "OFFLINE", _("Offline")


# ===============================================================================
# PAYMENT TRANSACTION
# ===============================================================================


class PaymentTransaction(models.Model):
    """
    💳 Provider-side payment record for an order

    Holds the identifiers and channel instructions returned when the payment
    intent was created, and is updated in place by webhook reconciliation.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="payment_transactions")

    provider = models.CharField(max_length=20, choices=PaymentProvider.choices)
    payment_type = models.CharField(max_length=50, help_text=_("Provider payment type, e.g. bank_transfer, qris, cod"))
    channel = models.CharField(max_length=50, blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    transaction_id = models.CharField(max_length=255, blank=True, db_index=True)

    # Channel-specific instructions
    va_number = models.CharField(max_length=100, blank=True)
    va_bank = models.CharField(max_length=50, blank=True)
    qr_string = models.TextField(blank=True)
    qr_image_url = models.URLField(max_length=1000, blank=True)
    payment_url = models.URLField(max_length=1000, blank=True)
    instructions = models.TextField(blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    raw_response = models.JSONField(default=dict, blank=True, help_text=_("Last provider payload, kept for audit"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "payment_transactions"
        verbose_name = _("Payment Transaction")
        verbose_name_plural = _("Payment Transactions")
        ordering: ClassVar[tuple[str, ...]] = ("-created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["order", "-created_at"], name="payment_tx_order_idx"),
        )

    def __str__(self) -> str:
        return f"{self.provider} {self.payment_type} {self.amount} ({self.status})"
