"""
Billing services for Storefront Checkout
Payment intent creation and provider status reconciliation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from django.db import transaction
from django.utils import timezone

from apps.common.errors import CheckoutError, CheckoutErrorKind
from apps.common.types import Err, Ok, Result

from .gateways import PaymentGatewayError, PaymentGatewayFactory, PaymentInstruction, PaymentIntentRequest
from .models import PaymentStatus, PaymentTransaction

if TYPE_CHECKING:
    from apps.orders.models import Order

logger = logging.getLogger(__name__)


# ===============================================================================
# PAYMENT INTENT SERVICE
# ===============================================================================


class PaymentIntentService:
    """💳 Obtains a payment intent before any order row is written"""

    @staticmethod
    def create_payment_intent(request: PaymentIntentRequest) -> Result[PaymentInstruction, CheckoutError]:
        try:
            gateway = PaymentGatewayFactory.for_payment_method(request.method)
            instruction = gateway.create_payment_intent(request)
        except PaymentGatewayError as e:
            logger.warning(f"⚠️ [Payment] Intent failed for {request.order_number} ({request.method}): {e}")
            return Err(CheckoutError(CheckoutErrorKind.PAYMENT_INTENT_FAILED, str(e)))
        except Exception:
            logger.exception(f"🔥 [Payment] Unexpected error creating intent for {request.order_number}")
            return Err(
                CheckoutError(CheckoutErrorKind.PAYMENT_INTENT_FAILED, "Failed to create payment transaction")
            )

        logger.info(
            f"✅ [Payment] Intent {instruction.transaction_id or '-'} via {instruction.provider} "
            f"for {request.order_number} amount={request.amount}"
        )
        return Ok(instruction)


# ===============================================================================
# PROVIDER STATUS MAPPING
# ===============================================================================

PROVIDER_STATUS_MAP: dict[str, str] = {
    "capture": PaymentStatus.PAID,
    "settlement": PaymentStatus.PAID,
    "deny": PaymentStatus.FAILED,
    "cancel": PaymentStatus.FAILED,
    "expire": PaymentStatus.FAILED,
    "failure": PaymentStatus.FAILED,
    "refund": PaymentStatus.REFUNDED,
    "partial_refund": PaymentStatus.REFUNDED,
}


def map_provider_status(transaction_status: str | None) -> str:
    """Provider vocabulary → internal payment status; unknown values stay PENDING"""
    return PROVIDER_STATUS_MAP.get((transaction_status or "").lower(), PaymentStatus.PENDING)


class PaymentStatusTransitions:
    """
    Monotonic guard over payment status.

    PENDING may move anywhere, PAID may only be refunded, and every status may
    be re-applied to itself so redelivered notifications stay idempotent.
    """

    ALLOWED: ClassVar[dict[str, frozenset[str]]] = {
        PaymentStatus.PENDING: frozenset(PaymentStatus.values),
        PaymentStatus.PAID: frozenset({PaymentStatus.PAID, PaymentStatus.REFUNDED}),
        PaymentStatus.FAILED: frozenset({PaymentStatus.FAILED}),
        PaymentStatus.REFUNDED: frozenset({PaymentStatus.REFUNDED}),
    }

    @classmethod
    def is_allowed(cls, current: str, new: str) -> bool:
        return new in cls.ALLOWED.get(current, frozenset())


# ===============================================================================
# RECONCILIATION
# ===============================================================================


@dataclass(frozen=True)
class ProviderStatusUpdate:
    """What a provider notification (or status lookup) says about a payment"""

    transaction_status: str
    status: str
    transaction_id: str | None = None
    va_number: str | None = None
    va_bank: str | None = None
    qr_string: str | None = None
    qr_image_url: str | None = None
    payment_url: str | None = None
    raw_payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_provider_payload(cls, body: dict[str, Any]) -> ProviderStatusUpdate:
        va_number, va_bank = _extract_virtual_account(body)
        redirect_url = None
        for action in body.get("actions") or []:
            if action.get("name") == "deeplink-redirect":
                redirect_url = action.get("url")
                break

        transaction_status = str(body.get("transaction_status") or "")
        return cls(
            transaction_status=transaction_status,
            status=map_provider_status(transaction_status),
            transaction_id=body.get("transaction_id") or None,
            va_number=va_number,
            va_bank=va_bank,
            qr_string=body.get("qr_string") or None,
            qr_image_url=body.get("qr_url") or None,
            payment_url=redirect_url,
            raw_payload=body,
        )


def _extract_virtual_account(body: dict[str, Any]) -> tuple[str | None, str | None]:
    if body.get("payment_type") != "bank_transfer":
        return None, None
    va_numbers = body.get("va_numbers") or []
    if va_numbers:
        bank = va_numbers[0].get("bank")
        return va_numbers[0].get("va_number"), bank.upper() if bank else None
    if body.get("permata_va_number"):
        return body["permata_va_number"], "PERMATA"
    return None, None


@dataclass(frozen=True)
class ReconciliationOutcome:
    applied: bool
    previous_status: str
    status: str
    message: str


class PaymentReconciliationService:
    """🔄 Applies provider truth to an order and its payment transaction"""

    @staticmethod
    def latest_transaction(order: Order) -> PaymentTransaction | None:
        return PaymentTransaction.objects.filter(order=order).order_by("-created_at").first()

    @staticmethod
    @transaction.atomic
    def apply_update(order: Order, payment: PaymentTransaction, update: ProviderStatusUpdate) -> ReconciliationOutcome:
        """
        Update payment transaction and order together.

        Rows are re-read under lock so concurrent deliveries for the same
        order serialize. Stale transitions are refused without writing.
        """
        from apps.orders.models import Order  # noqa: PLC0415

        order = Order.objects.select_for_update().get(pk=order.pk)
        payment = PaymentTransaction.objects.select_for_update().get(pk=payment.pk)
        previous = order.payment_status
        was_paid = order.is_paid

        if not PaymentStatusTransitions.is_allowed(previous, update.status):
            message = f"Ignored stale {update.transaction_status or 'unknown'} update: {previous} → {update.status}"
            logger.warning(f"⏭️ [Payment] {order.order_number}: {message}")
            return ReconciliationOutcome(applied=False, previous_status=previous, status=previous, message=message)

        payment.status = update.status
        payment.transaction_id = update.transaction_id or payment.transaction_id
        payment.va_number = update.va_number or payment.va_number
        payment.va_bank = update.va_bank or payment.va_bank
        payment.qr_string = update.qr_string or payment.qr_string
        payment.qr_image_url = update.qr_image_url or payment.qr_image_url
        payment.payment_url = update.payment_url or payment.payment_url
        payment.raw_response = update.raw_payload
        payment.save(
            update_fields=[
                "status",
                "transaction_id",
                "va_number",
                "va_bank",
                "qr_string",
                "qr_image_url",
                "payment_url",
                "raw_response",
                "updated_at",
            ]
        )

        order.payment_status = update.status
        order.transaction_id = update.transaction_id or order.transaction_id
        if update.status == PaymentStatus.PAID and not was_paid:
            order.paid_at = timezone.now()
        order.save(update_fields=["payment_status", "transaction_id", "paid_at", "updated_at"])

        logger.info(f"✅ [Payment] {order.order_number}: {previous} → {update.status}")
        return ReconciliationOutcome(
            applied=True,
            previous_status=previous,
            status=update.status,
            message=f"Payment status {previous} → {update.status}",
        )
