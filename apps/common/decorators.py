"""
API decorators and response helpers for Storefront Checkout
"""

from collections.abc import Callable
from functools import wraps
from typing import Any

from rest_framework.request import Request
from rest_framework.response import Response

from apps.common.errors import CheckoutError, CheckoutErrorKind


def error_response(error: CheckoutError, extra_headers: dict[str, Any] | None = None) -> Response:
    """Structured error body with the HTTP status of the error kind"""
    return Response(error.to_response_body(), status=error.http_status, headers=extra_headers)


def require_customer_authentication(view_func: Callable[..., Response]) -> Callable[..., Response]:
    """
    Reject anonymous callers with UNAUTHORIZED (401) before any processing.

    DRF's IsAuthenticated answers 403 under session authentication, so the
    check is done here to keep the error taxonomy's status codes.
    """

    @wraps(view_func)
    def wrapper(request: Request, *args: Any, **kwargs: Any) -> Response:
        if not request.user or not request.user.is_authenticated:
            return error_response(CheckoutError(CheckoutErrorKind.UNAUTHORIZED, "Unauthorized"))
        return view_func(request, *args, **kwargs)

    return wrapper
