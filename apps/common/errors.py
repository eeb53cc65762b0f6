"""
Checkout error taxonomy for Storefront Checkout
Closed set of error kinds carried inside Err(...) results and rendered at the API boundary.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class CheckoutErrorKind(enum.StrEnum):
    """Every failure the checkout and reconciliation pipeline can report"""

    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    VALIDATION_ERROR = "validation_error"
    CART_EMPTY = "cart_empty"
    INVALID_ADDRESS = "invalid_address"
    PRODUCT_UNAVAILABLE = "product_unavailable"
    INSUFFICIENT_STOCK = "insufficient_stock"
    PAYMENT_INTENT_FAILED = "payment_intent_failed"
    ORDER_NUMBER_EXHAUSTED = "order_number_exhausted"
    COMMIT_FAILED = "commit_failed"
    INVALID_SIGNATURE = "invalid_signature"
    ORDER_NOT_FOUND = "order_not_found"
    PAYMENT_RECORD_NOT_FOUND = "payment_record_not_found"
    PAYMENT_SYNC_FAILED = "payment_sync_failed"
    INTERNAL_ERROR = "internal_error"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]

    @property
    def is_server_error(self) -> bool:
        return self.http_status >= 500  # noqa: PLR2004


_HTTP_STATUS: dict[CheckoutErrorKind, int] = {
    CheckoutErrorKind.UNAUTHORIZED: 401,
    CheckoutErrorKind.FORBIDDEN: 403,
    CheckoutErrorKind.VALIDATION_ERROR: 400,
    CheckoutErrorKind.CART_EMPTY: 400,
    CheckoutErrorKind.INVALID_ADDRESS: 400,
    CheckoutErrorKind.PRODUCT_UNAVAILABLE: 400,
    CheckoutErrorKind.INSUFFICIENT_STOCK: 400,
    CheckoutErrorKind.PAYMENT_INTENT_FAILED: 400,
    CheckoutErrorKind.ORDER_NUMBER_EXHAUSTED: 500,
    CheckoutErrorKind.COMMIT_FAILED: 500,
    CheckoutErrorKind.INVALID_SIGNATURE: 403,
    CheckoutErrorKind.ORDER_NOT_FOUND: 404,
    CheckoutErrorKind.PAYMENT_RECORD_NOT_FOUND: 404,
    CheckoutErrorKind.PAYMENT_SYNC_FAILED: 502,
    CheckoutErrorKind.INTERNAL_ERROR: 500,
}


@dataclass(frozen=True)
class CheckoutError:
    """Typed error value: a kind, a user-safe message and optional details"""

    kind: CheckoutErrorKind
    message: str
    details: list[str] = field(default_factory=list)

    @property
    def http_status(self) -> int:
        return self.kind.http_status

    def to_response_body(self) -> dict[str, Any]:
        """Structured body for API responses"""
        return {
            "success": False,
            "error": {
                "kind": self.kind.value,
                "message": self.message,
                "details": list(self.details),
            },
        }

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"
