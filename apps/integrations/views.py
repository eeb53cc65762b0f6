import json
import logging
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.common.errors import CheckoutError, CheckoutErrorKind
from apps.common.types import Err, Ok, Result
from apps.common.validators import get_client_ip

from .webhooks.base import BaseWebhookProcessor, WebhookProcessingResult, get_webhook_processor

logger = logging.getLogger(__name__)


# ===============================================================================
# WEBHOOK ENDPOINT VIEWS
# ===============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class WebhookView(View):
    """
    🔄 Generic webhook endpoint with deduplication

    Subclasses set ``source_name``; the processor registered for that source
    authenticates, deduplicates and applies the notification.
    """

    source_name: str | None = None  # Override in subclasses
    http_method_names = ['get', 'post']

    def get(self, request: HttpRequest) -> JsonResponse:
        """💓 Liveness probe; not part of the payment protocol"""
        return JsonResponse({
            'message': f'{(self.source_name or "webhook").capitalize()} webhook endpoint',
            'note': 'This endpoint only accepts POST requests from the payment provider',
            'status': 'active',
        })

    def post(self, request: HttpRequest) -> JsonResponse:
        """📨 Process incoming webhook using result pipeline"""
        try:
            result = (
                self._get_processor()
                .and_then(lambda processor: self._parse_request(request)
                          .map(lambda payload: self._process_webhook(request, processor, payload)))
            )

            match result:
                case Ok(processing_result):
                    return self._create_response(processing_result)
                case Err(error):
                    return JsonResponse(error.to_response_body(), status=error.http_status)

        except Exception:
            logger.exception(f"💥 Critical error processing {self.source_name} webhook")
            error = CheckoutError(CheckoutErrorKind.INTERNAL_ERROR, 'Internal server error')
            return JsonResponse(error.to_response_body(), status=error.http_status)

    def _get_processor(self) -> Result[BaseWebhookProcessor, CheckoutError]:
        processor = get_webhook_processor(self.source_name)
        if processor is None:
            return Err(CheckoutError(
                CheckoutErrorKind.VALIDATION_ERROR, f"No processor found for source: {self.source_name}"
            ))
        return Ok(processor)

    def _parse_request(self, request: HttpRequest) -> Result[dict[str, Any], CheckoutError]:
        """Parse and validate the incoming request payload."""
        try:
            payload = json.loads(request.body or b'{}')
        except (json.JSONDecodeError, UnicodeDecodeError):
            return Err(CheckoutError(CheckoutErrorKind.VALIDATION_ERROR, "Invalid JSON payload"))

        if not isinstance(payload, dict):
            return Err(CheckoutError(CheckoutErrorKind.VALIDATION_ERROR, "Payload must be a JSON object"))
        return Ok(payload)

    def _process_webhook(
        self, request: HttpRequest, processor: BaseWebhookProcessor, payload: dict[str, Any]
    ) -> WebhookProcessingResult:
        return processor.process_webhook(
            payload=payload,
            signature=self.extract_signature(request),
            ip_address=get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
        )

    def _create_response(self, processing_result: WebhookProcessingResult) -> JsonResponse:
        webhook_event = processing_result.webhook_event
        webhook_id = str(webhook_event.id) if webhook_event else None

        if processing_result.success:
            logger.info(f"✅ {self.source_name} webhook handled: {processing_result.message}")
            return JsonResponse({
                'success': True,
                'message': processing_result.message,
                'webhook_id': webhook_id,
            })

        error = processing_result.error or CheckoutError(CheckoutErrorKind.INTERNAL_ERROR, processing_result.message)
        logger.warning(f"❌ {self.source_name} webhook rejected ({error.kind}): {error.message}")
        body = error.to_response_body()
        body['webhook_id'] = webhook_id
        return JsonResponse(body, status=error.http_status)

    def extract_signature(self, request: HttpRequest) -> str:
        """🔐 Extract webhook signature from headers - override in subclasses"""
        return request.META.get('HTTP_X_SIGNATURE', '')


class MidtransWebhookView(WebhookView):
    """🏦 Midtrans HTTP notification endpoint"""

    source_name = 'midtrans'

    def extract_signature(self, request: HttpRequest) -> str:
        # Midtrans carries the signature in the body as signature_key
        return ''
