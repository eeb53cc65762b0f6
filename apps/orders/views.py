"""
Checkout API Views for Storefront Checkout
DRF views for checkout validation, totals, commit and payment sync.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from apps.common.decorators import error_response, require_customer_authentication
from apps.common.errors import CheckoutError, CheckoutErrorKind
from apps.common.types import Err, Ok

from .serializers import CheckoutInputSerializer, first_error_message, flatten_errors
from .services import CheckoutRequestData, CheckoutService, OrderQueryService, PaymentSyncService, order_to_dict

logger = logging.getLogger(__name__)


class CheckoutThrottle(ScopedRateThrottle):
    """Throttling for checkout commit"""
    scope = "checkout"


class CheckoutPreviewThrottle(ScopedRateThrottle):
    """Throttling for validate / calculate"""
    scope = "checkout_preview"


def _unexpected_error(message: str) -> Response:
    return error_response(CheckoutError(CheckoutErrorKind.INTERNAL_ERROR, message))


@api_view(["POST"])
@permission_classes([AllowAny])
@throttle_classes([CheckoutPreviewThrottle])
@require_customer_authentication
def validate_checkout(request: Request) -> Response:
    """
    Pre-flight check of the cart: stock, availability and a totals summary.
    Never writes.
    """
    try:
        result = CheckoutService.preview(request.user)
    except Exception:
        logger.exception(f"🔥 [Checkout API] Validation failed for user {request.user.pk}")
        return _unexpected_error("Failed to validate checkout")

    match result:
        case Ok(preview):
            return Response({"success": True, "validation": preview.to_dict()})
        case Err(error):
            return error_response(error)


@api_view(["POST"])
@permission_classes([AllowAny])
@throttle_classes([CheckoutPreviewThrottle])
@require_customer_authentication
def calculate_totals(request: Request) -> Response:
    """Server-authoritative totals quote for the current cart"""
    try:
        result = CheckoutService.preview(request.user)
    except Exception:
        logger.exception(f"🔥 [Checkout API] Totals calculation failed for user {request.user.pk}")
        return _unexpected_error("Failed to calculate totals")

    match result:
        case Ok(preview):
            return Response({"success": True, "data": preview.breakdown.summary()})
        case Err(error):
            return error_response(error)


@api_view(["POST"])
@permission_classes([AllowAny])
@throttle_classes([CheckoutThrottle])
@require_customer_authentication
def create_checkout(request: Request) -> Response:
    """Turn the cart into an order with a payment intent"""
    serializer = CheckoutInputSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            CheckoutError(
                CheckoutErrorKind.VALIDATION_ERROR,
                first_error_message(serializer.errors),
                details=flatten_errors(serializer.errors),
            )
        )

    data = CheckoutRequestData(**serializer.validated_data)
    logger.info(f"🛒 [Checkout API] Checkout by user {request.user.pk} via {data.payment_method}")

    try:
        result = CheckoutService.checkout(request.user, data)
    except Exception:
        logger.exception(f"🔥 [Checkout API] Checkout failed for user {request.user.pk}")
        return _unexpected_error("Failed to create order")

    match result:
        case Ok(order):
            return Response(
                {
                    "success": True,
                    "message": "Order created successfully",
                    "data": {"order": order_to_dict(order), "orderNumber": order.order_number},
                },
                status=status.HTTP_201_CREATED,
            )
        case Err(error):
            if error.kind.is_server_error:
                logger.error(f"❌ [Checkout API] {error}")
            return error_response(error)


@api_view(["POST"])
@permission_classes([AllowAny])
@require_customer_authentication
def sync_payment(request: Request, order_number: str) -> Response:
    """Re-read payment status from the provider for one of the caller's orders"""
    try:
        result = PaymentSyncService.sync_payment(request.user, order_number)
    except Exception:
        logger.exception(f"🔥 [Checkout API] Payment sync failed for {order_number}")
        return _unexpected_error("Failed to check payment status")

    match result:
        case Ok(order):
            return Response({"success": True, "data": order_to_dict(order)})
        case Err(error):
            return error_response(error)


@api_view(["GET"])
@permission_classes([AllowAny])
@require_customer_authentication
def order_detail(request: Request, order_number: str) -> Response:
    """
    Order status for its owner.

    PENDING is a normal answer here: payment confirmation arrives later via
    the provider notification or an explicit sync.
    """
    match OrderQueryService.get_customer_order(request.user, order_number):
        case Ok(order):
            return Response({"success": True, "data": order_to_dict(order)})
        case Err(error):
            return error_response(error)
