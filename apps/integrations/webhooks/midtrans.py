"""
Midtrans payment notification processing.
"""

import hashlib
import hmac
import logging
from typing import Any

from django.conf import settings

from apps.billing.services import PaymentReconciliationService, ProviderStatusUpdate
from apps.common.errors import CheckoutError, CheckoutErrorKind
from apps.common.types import Err, Ok, Result
from apps.integrations.models import WebhookEvent
from apps.orders.models import Order

from .base import BaseWebhookProcessor, HandledEvent

logger = logging.getLogger(__name__)


def compute_midtrans_signature(order_id: str, status_code: str, gross_amount: str, server_key: str) -> str:
    """🔐 SHA-512 hex of order_id + status_code + gross_amount + server_key"""
    raw = f"{order_id}{status_code}{gross_amount}{server_key}"
    return hashlib.sha512(raw.encode("utf-8")).hexdigest()


class MidtransWebhookProcessor(BaseWebhookProcessor):
    """
    🏦 Midtrans HTTP notification processor

    Handled transaction statuses:
    - capture, settlement → PAID
    - deny, cancel, expire, failure → FAILED
    - refund, partial_refund → REFUNDED
    - pending and anything unknown → PENDING
    """

    source_name = "midtrans"

    def extract_event_id(self, payload: dict[str, Any]) -> str | None:
        """Delivery identity: one per provider transaction state"""
        transaction_id = payload.get("transaction_id") or payload.get("order_id")
        transaction_status = payload.get("transaction_status")
        if not transaction_id or not transaction_status:
            return None
        return f"{transaction_id}:{transaction_status}:{payload.get('status_code', '')}"

    def extract_event_type(self, payload: dict[str, Any]) -> str | None:
        return payload.get("transaction_status")

    def extract_order_number(self, payload: dict[str, Any]) -> str | None:
        return payload.get("order_id")

    def _validate_payload(self, payload: dict[str, Any]) -> Result[dict[str, str], CheckoutError]:
        if not payload.get("order_id"):
            return Err(CheckoutError(CheckoutErrorKind.VALIDATION_ERROR, "Missing order_id in notification"))
        if not payload.get("transaction_status"):
            return Err(CheckoutError(CheckoutErrorKind.VALIDATION_ERROR, "Missing transaction_status in notification"))
        return super()._validate_payload(payload)

    def verify_signature(self, payload: dict[str, Any], signature: str) -> bool:
        """🔐 Compare the notification's signature_key against our own hash"""
        server_key = getattr(settings, "MIDTRANS_SERVER_KEY", "") or ""
        if not server_key:
            logger.error("❌ [Midtrans] MIDTRANS_SERVER_KEY not configured; rejecting notification")
            return False

        provided = signature or str(payload.get("signature_key") or "")
        if not provided:
            return False

        expected = compute_midtrans_signature(
            str(payload.get("order_id", "")),
            str(payload.get("status_code", "")),
            str(payload.get("gross_amount", "")),
            server_key,
        )
        return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))

    def handle_event(self, webhook_event: WebhookEvent) -> Result[HandledEvent, CheckoutError]:
        payload = webhook_event.payload
        order_number = payload["order_id"]

        order = Order.objects.filter(order_number=order_number).first()
        if order is None:
            logger.warning(f"⚠️ [Midtrans] Notification for unknown order {order_number}")
            return Err(CheckoutError(CheckoutErrorKind.ORDER_NOT_FOUND, "Order not found"))

        payment = PaymentReconciliationService.latest_transaction(order)
        if payment is None:
            logger.warning(f"⚠️ [Midtrans] No payment transaction for order {order_number}")
            return Err(CheckoutError(CheckoutErrorKind.PAYMENT_RECORD_NOT_FOUND, "Payment record not found"))

        update = ProviderStatusUpdate.from_provider_payload(payload)
        outcome = PaymentReconciliationService.apply_update(order, payment, update)
        return Ok(HandledEvent(message=outcome.message, skipped=not outcome.applied))
