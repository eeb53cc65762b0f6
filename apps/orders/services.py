"""
Order Management Services for Storefront Checkout
Checkout pipeline: eligibility, numbering, the atomic commit and payment sync.
"""

from __future__ import annotations

import logging
import secrets
from collections import Counter
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.billing.gateways import (
    MidtransGateway,
    PaymentCustomer,
    PaymentGatewayError,
    PaymentInstruction,
    PaymentIntentRequest,
    PaymentShipping,
)
from apps.billing.models import PaymentMethod, PaymentTransaction
from apps.billing.services import (
    PaymentIntentService,
    PaymentReconciliationService,
    ProviderStatusUpdate,
)
from apps.cart.models import CartItem
from apps.cart.services import CartLine, CartSnapshot, CartSnapshotService
from apps.common.constants import (
    ORDER_NUMBER_MAX_ATTEMPTS,
    ORDER_NUMBER_PREFIX,
    ORDER_NUMBER_RANDOM_DIGITS,
)
from apps.common.errors import CheckoutError, CheckoutErrorKind
from apps.common.types import Err, Ok, Result
from apps.common.validators import log_security_event
from apps.customers.models import ShippingAddress
from apps.products.models import Product

from .models import Order, OrderItem, OrderShippingAddress
from .pricing import PriceBreakdown, PricingService

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser

logger = logging.getLogger(__name__)


# ===============================================================================
# STOCK & ELIGIBILITY VALIDATION
# ===============================================================================


@dataclass(frozen=True)
class LineIssue:
    kind: CheckoutErrorKind
    cart_item_id: Any
    product_id: Any
    message: str


@dataclass(frozen=True)
class EligibilityReport:
    """Every line-level failure found in one pass over the cart"""

    issues: tuple[LineIssue, ...]
    eligible_lines: tuple[CartLine, ...]

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]

    def to_error(self) -> CheckoutError:
        first = self.issues[0]
        return CheckoutError(first.kind, first.message, details=self.messages)


class CheckoutValidationService:
    """🔍 Shared by the pre-flight validate endpoint and the checkout flow"""

    @staticmethod
    def validate_lines(lines: tuple[CartLine, ...] | list[CartLine]) -> EligibilityReport:
        """
        Stock is compared against the quantity requested per product, summed
        over all cart lines, matching what the commit reserves.
        """
        issues: list[LineIssue] = []
        eligible: list[CartLine] = []

        requested: Counter[Any] = Counter()
        for line in lines:
            if line.is_active:
                requested[line.product_id] += line.quantity

        reported: set[Any] = set()
        for line in lines:
            if not line.is_active:
                issues.append(
                    LineIssue(
                        CheckoutErrorKind.PRODUCT_UNAVAILABLE,
                        line.cart_item_id,
                        line.product_id,
                        f"{line.product_name} is no longer available",
                    )
                )
                continue

            if requested[line.product_id] > line.stock_quantity:
                # One issue per product, however many lines it spans
                if line.product_id not in reported:
                    reported.add(line.product_id)
                    issues.append(
                        LineIssue(
                            CheckoutErrorKind.INSUFFICIENT_STOCK,
                            line.cart_item_id,
                            line.product_id,
                            f"{line.product_name}: only {line.stock_quantity} left in stock",
                        )
                    )
                continue

            eligible.append(line)

        return EligibilityReport(issues=tuple(issues), eligible_lines=tuple(eligible))


# ===============================================================================
# ORDER NUMBERING SERVICE
# ===============================================================================


class OrderNumberingService:
    """Random, collision-checked order numbers (ORD-YYYYMMDD-NNNNN)"""

    @staticmethod
    def candidate(today: date) -> str:
        random_part = secrets.randbelow(10**ORDER_NUMBER_RANDOM_DIGITS)
        return f"{ORDER_NUMBER_PREFIX}-{today:%Y%m%d}-{random_part:0{ORDER_NUMBER_RANDOM_DIGITS}d}"

    @staticmethod
    def generate_order_number(today: date | None = None) -> Result[str, CheckoutError]:
        """
        Pre-checked against existing orders. The unique constraint on
        ``Order.order_number`` still guards the race between check and commit.
        """
        today = today or timezone.localdate()
        max_attempts = getattr(settings, "ORDER_NUMBER_MAX_ATTEMPTS", ORDER_NUMBER_MAX_ATTEMPTS)

        for attempt in range(1, max_attempts + 1):
            order_number = OrderNumberingService.candidate(today)
            if not Order.objects.filter(order_number=order_number).exists():
                return Ok(order_number)
            logger.warning(f"⚠️ [Orders] Order number collision {order_number} (attempt {attempt}/{max_attempts})")

        logger.critical(f"🔥 [Orders] Order number generation exhausted after {max_attempts} attempts for {today}")
        return Err(CheckoutError(CheckoutErrorKind.ORDER_NUMBER_EXHAUSTED, "Failed to generate order number"))


# ===============================================================================
# ORDER COMMIT TRANSACTION
# ===============================================================================


class StockRaceError(Exception):
    """Conditional stock decrement matched no row inside the commit transaction"""

    def __init__(self, product_name: str) -> None:
        super().__init__(f"Insufficient stock for {product_name}")
        self.product_name = product_name


class OrderCommitService:
    """
    💾 The atomic unit of checkout

    Order, items, address snapshot and payment record are created, stock is
    decremented and the cart is cleared in one transaction. The payment
    intent already exists at the provider, so any failure here leaves an
    orphaned intent that is logged for manual reconciliation.
    """

    @staticmethod
    def commit(  # noqa: PLR0913
        user: AbstractBaseUser,
        order_number: str,
        snapshot: CartSnapshot,
        breakdown: PriceBreakdown,
        address: ShippingAddress,
        data: CheckoutRequestData,
        instruction: PaymentInstruction,
    ) -> Result[Order, CheckoutError]:
        try:
            with transaction.atomic():
                OrderCommitService._reserve_stock(snapshot.lines)
                order = OrderCommitService._create_order(user, order_number, snapshot, breakdown, address, data, instruction)
                OrderCommitService._clear_cart(snapshot)
        except StockRaceError as e:
            OrderCommitService._report_orphaned_intent(order_number, instruction, breakdown, e)
            return Err(CheckoutError(CheckoutErrorKind.INSUFFICIENT_STOCK, str(e), details=[str(e)]))
        except Exception as e:
            OrderCommitService._report_orphaned_intent(order_number, instruction, breakdown, e)
            return Err(CheckoutError(CheckoutErrorKind.COMMIT_FAILED, "Failed to create order"))

        logger.info(
            f"✅ [Orders] Created order {order.order_number} total={order.total} "
            f"method={order.payment_method} transaction={order.transaction_id or '-'}"
        )
        return Ok(order)

    @staticmethod
    def _reserve_stock(lines: tuple[CartLine, ...]) -> None:
        """Lock product rows, then decrement only where enough stock remains"""
        requested: Counter[Any] = Counter()
        names: dict[Any, str] = {}
        for line in lines:
            requested[line.product_id] += line.quantity
            names[line.product_id] = line.product_name

        # Consistent lock order across concurrent checkouts
        list(Product.objects.select_for_update().filter(id__in=requested.keys()).order_by("id"))

        for product_id, quantity in requested.items():
            updated = Product.objects.filter(
                id=product_id, is_active=True, stock_quantity__gte=quantity
            ).update(
                stock_quantity=F("stock_quantity") - quantity,
                sales_count=F("sales_count") + quantity,
            )
            if updated == 0:
                raise StockRaceError(names[product_id])

    @staticmethod
    def _create_order(  # noqa: PLR0913
        user: AbstractBaseUser,
        order_number: str,
        snapshot: CartSnapshot,
        breakdown: PriceBreakdown,
        address: ShippingAddress,
        data: CheckoutRequestData,
        instruction: PaymentInstruction,
    ) -> Order:
        order = Order.objects.create(
            order_number=order_number,
            user=user,
            payment_method=data.payment_method,
            payment_channel=data.payment_channel if data.payment_method == PaymentMethod.VIRTUAL_ACCOUNT else "",
            transaction_id=instruction.transaction_id or "",
            subtotal=breakdown.subtotal,
            tax=breakdown.tax,
            shipping_cost=breakdown.shipping_cost,
            service_fee=breakdown.service_fee,
            discount=breakdown.discount,
            total=breakdown.rounded_total,
            notes=data.notes,
        )

        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                    product_name=line.product_name,
                    selected_color=line.selected_color,
                    selected_size=line.selected_size,
                    selected_image_url=line.selected_image_url,
                    quantity=line.quantity,
                    price=PricingService.effective_price(line),
                    total=PricingService.line_total(line),
                )
                for line in snapshot.lines
            ]
        )

        OrderShippingAddress.objects.create(order=order, **address.to_snapshot())

        PaymentTransaction.objects.create(
            order=order,
            provider=instruction.provider,
            payment_type=instruction.payment_type,
            channel=instruction.channel or "",
            amount=instruction.amount or breakdown.rounded_total,
            status=instruction.status,
            transaction_id=instruction.transaction_id or "",
            va_number=instruction.va_number or "",
            va_bank=instruction.va_bank or "",
            qr_string=instruction.qr_string or "",
            qr_image_url=instruction.qr_image_url or "",
            payment_url=instruction.payment_url or "",
            instructions=instruction.instructions or "",
            expires_at=instruction.expires_at,
            raw_response=instruction.raw_response,
        )
        return order

    @staticmethod
    def _clear_cart(snapshot: CartSnapshot) -> None:
        CartItem.objects.filter(cart_id=snapshot.cart_id).delete()

    @staticmethod
    def _report_orphaned_intent(
        order_number: str, instruction: PaymentInstruction, breakdown: PriceBreakdown, error: Exception
    ) -> None:
        context = {
            "order_number": order_number,
            "provider": instruction.provider,
            "transaction_id": instruction.transaction_id,
            "amount": str(breakdown.rounded_total),
            "error": str(error),
        }
        logger.critical(
            f"🔥 [Orders] Commit failed for {order_number}; payment intent "
            f"{instruction.transaction_id or '-'} ({instruction.provider}) is orphaned and needs manual "
            f"reconciliation: {error}",
            exc_info=not isinstance(error, StockRaceError),
        )
        log_security_event("orphaned_payment_intent", context)


# ===============================================================================
# CHECKOUT ORCHESTRATION
# ===============================================================================


@dataclass(frozen=True)
class CheckoutRequestData:
    """Parameter object for a checkout commit"""

    address_id: Any
    payment_method: str
    payment_channel: str = ""
    notes: str = ""


@dataclass(frozen=True)
class CheckoutPreview:
    snapshot: CartSnapshot
    report: EligibilityReport
    breakdown: PriceBreakdown

    def to_dict(self) -> dict[str, Any]:
        summary = self.breakdown.summary()
        return {
            "valid": self.report.is_valid,
            "errors": self.report.messages,
            "summary": {
                "itemCount": self.snapshot.item_count,
                "subtotal": summary["subtotal"],
                "tax": summary["tax"],
                "shipping": summary["shipping"],
                "total": summary["total"],
            },
        }


class CheckoutService:
    """🛒 Cart → validated, priced, paid-for order"""

    @staticmethod
    def preview(user: AbstractBaseUser) -> Result[CheckoutPreview, CheckoutError]:
        """Snapshot, validate and price without writing anything"""
        snapshot_result = CartSnapshotService.load_snapshot(user)
        if snapshot_result.is_err():
            return snapshot_result
        snapshot = snapshot_result.unwrap()

        report = CheckoutValidationService.validate_lines(snapshot.lines)
        breakdown = PricingService.calculate(report.eligible_lines)
        return Ok(CheckoutPreview(snapshot=snapshot, report=report, breakdown=breakdown))

    @staticmethod
    def checkout(user: AbstractBaseUser, data: CheckoutRequestData) -> Result[Order, CheckoutError]:
        address = ShippingAddress.objects.filter(pk=data.address_id, user=user).first()
        if address is None:
            logger.warning(f"⚠️ [Checkout] Address {data.address_id} not found for user {user.pk}")
            return Err(CheckoutError(CheckoutErrorKind.INVALID_ADDRESS, "Invalid address"))

        snapshot_result = CartSnapshotService.load_snapshot(user)
        if snapshot_result.is_err():
            return snapshot_result
        snapshot = snapshot_result.unwrap()

        report = CheckoutValidationService.validate_lines(snapshot.lines)
        if not report.is_valid:
            logger.info(f"🛒 [Checkout] Cart {snapshot.cart_id} failed eligibility: {report.messages}")
            return Err(report.to_error())

        breakdown = PricingService.calculate(snapshot.lines)

        number_result = OrderNumberingService.generate_order_number()
        if number_result.is_err():
            return number_result
        order_number = number_result.unwrap()

        intent_request = CheckoutService.build_intent_request(user, order_number, breakdown, address, data)
        intent_result = PaymentIntentService.create_payment_intent(intent_request)
        if intent_result.is_err():
            return intent_result
        instruction = intent_result.unwrap()

        return OrderCommitService.commit(user, order_number, snapshot, breakdown, address, data, instruction)

    @staticmethod
    def build_intent_request(
        user: AbstractBaseUser,
        order_number: str,
        breakdown: PriceBreakdown,
        address: ShippingAddress,
        data: CheckoutRequestData,
    ) -> PaymentIntentRequest:
        customer = PaymentCustomer(
            email=getattr(user, "email", "") or "",
            first_name=getattr(user, "first_name", "") or address.first_name,
            last_name=getattr(user, "last_name", "") or address.last_name,
            phone=address.phone,
        )
        shipping = PaymentShipping(
            full_name=address.full_name,
            phone=address.phone,
            address_line1=address.address_line1,
            address_line2=address.address_line2,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
        )
        return PaymentIntentRequest(
            method=data.payment_method,
            order_number=order_number,
            amount=breakdown.rounded_total,
            customer=customer,
            items=breakdown.provider_items,
            shipping=shipping,
            channel=data.payment_channel or None,
        )


# ===============================================================================
# ORDER QUERIES
# ===============================================================================


class OrderQueryService:
    """Customer-scoped order lookups"""

    @staticmethod
    def get_customer_order(user: AbstractBaseUser, order_number: str) -> Result[Order, CheckoutError]:
        """The caller's order by number; another customer's order is FORBIDDEN"""
        order = Order.objects.select_related("shipping_address").filter(order_number=order_number).first()
        if order is None:
            return Err(CheckoutError(CheckoutErrorKind.ORDER_NOT_FOUND, "Order not found"))
        if order.user_id != user.pk:
            logger.warning(f"⚠️ [Orders] User {user.pk} requested order {order_number} owned by another customer")
            return Err(CheckoutError(CheckoutErrorKind.FORBIDDEN, "Forbidden"))
        return Ok(order)


# ===============================================================================
# PAYMENT STATUS SYNC
# ===============================================================================


class PaymentSyncService:
    """🔄 Pulls the provider's view of a payment when a webhook is late or lost"""

    @staticmethod
    def sync_payment(user: AbstractBaseUser, order_number: str) -> Result[Order, CheckoutError]:
        order_result = OrderQueryService.get_customer_order(user, order_number)
        if order_result.is_err():
            return order_result
        order = order_result.unwrap()

        payment = PaymentReconciliationService.latest_transaction(order)
        if payment is None or not payment.transaction_id:
            return Err(
                CheckoutError(CheckoutErrorKind.PAYMENT_RECORD_NOT_FOUND, "No payment transaction found for this order")
            )

        try:
            body = MidtransGateway().get_transaction_status(payment.transaction_id)
        except PaymentGatewayError as e:
            logger.error(f"❌ [Orders] Payment sync for {order_number} failed: {e}")
            return Err(CheckoutError(CheckoutErrorKind.PAYMENT_SYNC_FAILED, str(e)))

        update = ProviderStatusUpdate.from_provider_payload(body)
        outcome = PaymentReconciliationService.apply_update(order, payment, update)
        logger.info(f"🔄 [Orders] Synced {order_number}: {outcome.message}")

        order.refresh_from_db()
        return Ok(order)


def order_to_dict(order: Order) -> dict[str, Any]:
    """API representation of an order with its latest payment instructions"""
    payment = PaymentReconciliationService.latest_transaction(order)
    try:
        address = order.shipping_address
    except OrderShippingAddress.DoesNotExist:
        address = None

    return {
        "id": str(order.id),
        "orderNumber": order.order_number,
        "status": order.status,
        "paymentStatus": order.payment_status,
        "paymentMethod": order.payment_method,
        "paymentChannel": order.payment_channel or None,
        "transactionId": order.transaction_id or None,
        "subtotal": _money(order.subtotal),
        "tax": _money(order.tax),
        "shippingCost": _money(order.shipping_cost),
        "serviceFee": _money(order.service_fee),
        "discount": _money(order.discount),
        "total": _money(order.total),
        "notes": order.notes,
        "createdAt": order.created_at.isoformat() if order.created_at else None,
        "paidAt": order.paid_at.isoformat() if order.paid_at else None,
        "items": [
            {
                "productId": str(item.product_id),
                "productName": item.product_name,
                "quantity": item.quantity,
                "price": _money(item.price),
                "total": _money(item.total),
            }
            for item in order.items.all()
        ],
        "shippingAddress": None
        if address is None
        else {
            "fullName": address.full_name,
            "phone": address.phone,
            "addressLine1": address.address_line1,
            "addressLine2": address.address_line2 or None,
            "city": address.city,
            "state": address.state,
            "postalCode": address.postal_code,
            "country": address.country,
        },
        "payment": None
        if payment is None
        else {
            "provider": payment.provider,
            "paymentType": payment.payment_type,
            "status": payment.status,
            "amount": _money(payment.amount),
            "transactionId": payment.transaction_id or None,
            "vaNumber": payment.va_number or None,
            "vaBank": payment.va_bank or None,
            "qrString": payment.qr_string or None,
            "qrImageUrl": payment.qr_image_url or None,
            "paymentUrl": payment.payment_url or None,
            "instructions": payment.instructions or None,
            "expiresAt": payment.expires_at.isoformat() if payment.expires_at else None,
        },
    }


def _money(amount: Decimal) -> str:
    return f"{Decimal(amount):.2f}"
