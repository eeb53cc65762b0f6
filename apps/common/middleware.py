"""
Common middleware for Storefront Checkout
Request tracing for logs and API responses.
"""

import logging
import uuid
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from apps.common.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

# ===============================================================================
# REQUEST ID MIDDLEWARE
# ===============================================================================

class RequestIDMiddleware:
    """Add unique request ID for tracing and audit logs"""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        # Honour an upstream proxy's ID so traces line up across hops
        request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        request.META['REQUEST_ID'] = request_id
        set_request_id(request_id)

        try:
            response = self.get_response(request)
        finally:
            clear_request_id()

        response['X-Request-ID'] = request_id
        return response
