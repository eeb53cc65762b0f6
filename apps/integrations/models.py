"""
Integration models for Storefront Checkout
Inbound payment-provider notifications, recorded once per delivery identity.
"""

import hashlib
import uuid
from typing import ClassVar

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

# ===============================================================================
# WEBHOOK DEDUPLICATION SYSTEM
# ===============================================================================


class WebhookEvent(models.Model):
    """
    🔄 Webhook event deduplication and tracking

    One row per (source, event_id). Processed and skipped events are
    acknowledged without re-applying; failed ones may be re-delivered and
    processed again.
    """

    STATUS_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        ("pending", _("⏳ Pending")),
        ("processed", _("✅ Processed")),
        ("failed", _("❌ Failed")),
        ("skipped", _("⏭️ Skipped")),  # Duplicate or stale
    )

    SOURCE_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        ("midtrans", _("🏦 Midtrans")),
        ("other", _("🔌 Other")),
    )

    FINAL_STATUSES: ClassVar[frozenset[str]] = frozenset({"processed", "skipped"})

    # Core identification
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    source = models.CharField(
        max_length=50, choices=SOURCE_CHOICES, help_text=_("External service that sent the webhook")
    )
    event_id = models.CharField(
        max_length=255, help_text=_("Delivery identity, e.g. '<transaction_id>:<transaction_status>:<status_code>'")
    )
    event_type = models.CharField(max_length=100, help_text=_("Provider transaction status (e.g., 'settlement')"))
    order_number = models.CharField(max_length=50, blank=True, db_index=True)

    # Processing status
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")

    # Timing
    received_at = models.DateTimeField(default=timezone.now, help_text=_("When webhook was received by our system"))
    processed_at = models.DateTimeField(null=True, blank=True, help_text=_("When webhook processing completed"))

    # Data storage
    payload = models.JSONField(help_text=_("Complete webhook payload from external service"))
    signature_hash = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text=_("SHA-256 hash of webhook signature for verification tracking"),
    )

    # Error handling
    error_message = models.TextField(blank=True, help_text=_("Error details if processing failed or was skipped"))
    retry_count = models.PositiveIntegerField(default=0, help_text=_("Number of failed processing attempts"))

    # Metadata
    ip_address = models.GenericIPAddressField(
        null=True, blank=True, help_text=_("IP address webhook was received from")
    )
    user_agent = models.TextField(blank=True, help_text=_("User agent of webhook sender"))

    # Audit trail
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "webhook_events"
        verbose_name = _("🔄 Webhook Event")
        verbose_name_plural = _("🔄 Webhook Events")

        # Prevent duplicate processing
        constraints: ClassVar[tuple[models.BaseConstraint, ...]] = (
            models.UniqueConstraint(fields=["source", "event_id"], name="webhook_event_unique_delivery"),
        )
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["source", "event_type", "received_at"], name="webhook_source_type_idx"),
        )
        ordering: ClassVar[tuple[str, ...]] = ("-received_at",)

    def __str__(self) -> str:
        return f"🔄 {self.get_source_display()} | {self.event_type} | {self.status}"

    def set_signature(self, signature: str | None) -> None:
        """Store only a hash of the signature. Empty/None -> empty hash string."""
        if not signature:
            self.signature_hash = ""
        else:
            self.signature_hash = hashlib.sha256(signature.encode()).hexdigest()

    def mark_processed(self, save: bool = True) -> None:
        """✅ Mark webhook as successfully processed"""
        self.status = "processed"
        self.error_message = ""
        self.processed_at = timezone.now()
        if save:
            self.save(update_fields=["status", "error_message", "processed_at", "updated_at"])

    def mark_failed(self, error_message: str, save: bool = True) -> None:
        """❌ Mark webhook as failed with error details"""
        self.status = "failed"
        self.error_message = error_message
        self.retry_count += 1
        self.processed_at = timezone.now()
        if save:
            self.save(update_fields=["status", "error_message", "retry_count", "processed_at", "updated_at"])

    def mark_skipped(self, reason: str = "Duplicate or irrelevant", save: bool = True) -> None:
        """⏭️ Mark webhook as skipped (duplicate/stale)"""
        self.status = "skipped"
        self.error_message = reason
        self.processed_at = timezone.now()
        if save:
            self.save(update_fields=["status", "error_message", "processed_at", "updated_at"])

    @classmethod
    def is_duplicate(cls, source: str, event_id: str) -> bool:
        """🔍 Already processed or skipped; failed deliveries may be retried"""
        return cls.objects.filter(source=source, event_id=event_id, status__in=cls.FINAL_STATUSES).exists()
