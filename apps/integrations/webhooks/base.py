import hashlib
import logging
from dataclasses import dataclass
from typing import Any

from django.db import IntegrityError, transaction

from apps.common.errors import CheckoutError, CheckoutErrorKind
from apps.common.types import Err, Ok, Result
from apps.common.validators import log_security_event
from apps.integrations.models import WebhookEvent

logger = logging.getLogger(__name__)


# ===============================================================================
# WEBHOOK PROCESSING RESULT TYPES
# ===============================================================================


@dataclass(frozen=True)
class WebhookProcessingResult:
    """Result of webhook processing with success flag, message, and optional event."""

    success: bool
    message: str
    webhook_event: WebhookEvent | None = None
    error: CheckoutError | None = None

    @property
    def http_status(self) -> int:
        if self.success:
            return 200
        return self.error.http_status if self.error else 500

    @classmethod
    def success_result(cls, message: str, event: WebhookEvent | None) -> "WebhookProcessingResult":
        """Create a successful result."""
        return cls(success=True, message=message, webhook_event=event)

    @classmethod
    def error_result(cls, error: CheckoutError, event: WebhookEvent | None = None) -> "WebhookProcessingResult":
        """Create an error result."""
        return cls(success=False, message=error.message, webhook_event=event, error=error)


@dataclass(frozen=True)
class HandledEvent:
    """What a processor did with an authenticated, non-duplicate event"""

    message: str
    skipped: bool = False


@dataclass(frozen=True)
class WebhookContext:
    """Context for webhook event processing."""

    payload: dict[str, Any]
    signature: str
    ip_address: str | None
    user_agent: str | None
    event_info: dict[str, str]


class DuplicateWebhook(Exception):  # noqa: N818
    """Delivery identity already processed or skipped"""

    def __init__(self, event: WebhookEvent | None, event_id: str) -> None:
        super().__init__(event_id)
        self.event = event
        self.event_id = event_id


# ===============================================================================
# BASE WEBHOOK PROCESSING
# ===============================================================================


class BaseWebhookProcessor:
    """
    🔧 Base class for webhook processing with deduplication

    Pipeline: payload validation → signature verification → duplicate check →
    event record → handling inside a transaction. The signature is checked
    before anything is read from or written to the event table, so
    unauthenticated callers learn nothing about prior deliveries.
    """

    source_name: str | None = None  # Override in subclasses

    def __init__(self) -> None:
        if not self.source_name:
            raise ValueError("source_name must be defined in subclass")

    def process_webhook(
        self,
        payload: dict[str, Any],
        signature: str = "",
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> WebhookProcessingResult:
        """🔄 Main webhook processing pipeline"""
        try:
            result = (
                self._validate_payload(payload)
                .and_then(lambda event_info: self._verify_signature_with_context(
                    WebhookContext(payload, signature, ip_address, user_agent, event_info)
                ))
                .and_then(self._check_duplicates)
                .and_then(self._create_and_process_event)
            )

            match result:
                case Ok(processing_result):
                    return processing_result
                case Err(error):
                    return WebhookProcessingResult.error_result(error)

        except DuplicateWebhook as duplicate:
            return WebhookProcessingResult.success_result(
                f"⏭️ Duplicate webhook skipped: {duplicate.event_id}", duplicate.event
            )
        except Exception:
            logger.exception(f"💥 Critical error processing {self.source_name} webhook")
            return WebhookProcessingResult.error_result(
                CheckoutError(CheckoutErrorKind.INTERNAL_ERROR, "Failed to process notification")
            )

    def _validate_payload(self, payload: dict[str, Any]) -> Result[dict[str, str], CheckoutError]:
        """Step 1: Validate payload and extract event information."""
        event_id = self.extract_event_id(payload)
        event_type = self.extract_event_type(payload)

        if not event_id:
            return Err(CheckoutError(CheckoutErrorKind.VALIDATION_ERROR, "Missing event ID in payload"))

        if not event_type:
            return Err(CheckoutError(CheckoutErrorKind.VALIDATION_ERROR, "Missing event type in payload"))

        return Ok({"event_id": event_id, "event_type": event_type})

    def _verify_signature_with_context(self, context: WebhookContext) -> Result[WebhookContext, CheckoutError]:
        """Step 2: Verify webhook signature using context."""
        if not self.verify_signature(context.payload, context.signature):
            logger.warning(f"🚨 Invalid {self.source_name} webhook signature for {context.event_info['event_id']}")
            log_security_event(
                "webhook_signature_invalid",
                {"source": self.source_name, "event_id": context.event_info["event_id"]},
                context.ip_address,
            )
            return Err(CheckoutError(CheckoutErrorKind.INVALID_SIGNATURE, "Invalid signature"))

        return Ok(context)

    def _check_duplicates(self, context: WebhookContext) -> Result[WebhookContext, CheckoutError]:
        """Step 3: Check for duplicate webhook processing."""
        event_id = context.event_info["event_id"]

        assert self.source_name is not None
        if WebhookEvent.is_duplicate(self.source_name, event_id):
            logger.info(f"🔄 Duplicate webhook {self.source_name}:{event_id} - skipping")
            existing = WebhookEvent.objects.filter(source=self.source_name, event_id=event_id).first()
            raise DuplicateWebhook(existing, event_id)

        return Ok(context)

    def _create_and_process_event(self, context: WebhookContext) -> Result[WebhookProcessingResult, CheckoutError]:
        """Step 4: Create (or reopen a failed) webhook event record and process it."""
        event_id = context.event_info["event_id"]
        assert self.source_name is not None

        try:
            with transaction.atomic():
                webhook_event = self._record_event(context)
        except IntegrityError as e:
            # Concurrent delivery of the same identity won the insert
            existing = WebhookEvent.objects.filter(source=self.source_name, event_id=event_id).first()
            raise DuplicateWebhook(existing, event_id) from e

        try:
            with transaction.atomic():
                handled = self.handle_event(webhook_event)
                return Ok(self._settle_event(webhook_event, handled))
        except Exception as e:
            webhook_event.mark_failed(f"Processing error: {e!s}")
            logger.exception(f"💥 Exception processing {self.source_name} webhook {event_id}")
            return Err(CheckoutError(CheckoutErrorKind.INTERNAL_ERROR, "Failed to process notification"))

    def _settle_event(
        self, webhook_event: WebhookEvent, handled: Result[HandledEvent, CheckoutError]
    ) -> WebhookProcessingResult:
        label = f"{self.source_name} webhook {webhook_event.event_id} ({webhook_event.event_type})"
        match handled:
            case Ok(HandledEvent(message=message, skipped=True)):
                webhook_event.mark_skipped(message)
                logger.info(f"⏭️ Skipped {label}: {message}")
                return WebhookProcessingResult.success_result(message, webhook_event)
            case Ok(HandledEvent(message=message)):
                webhook_event.mark_processed()
                logger.info(f"✅ Processed {label}: {message}")
                return WebhookProcessingResult.success_result(message, webhook_event)
            case Err(error):
                webhook_event.mark_failed(error.message)
                logger.error(f"❌ Failed {label}: {error}")
                return WebhookProcessingResult.error_result(error, webhook_event)
            case _:
                raise TypeError(f"Unexpected handle_event result: {handled!r}")

    def _record_event(self, context: WebhookContext) -> WebhookEvent:
        """Insert the delivery, or reopen it when a previous attempt failed"""
        assert self.source_name is not None
        event_id = context.event_info["event_id"]
        fields = {
            "event_type": context.event_info["event_type"],
            "order_number": self.extract_order_number(context.payload) or "",
            "payload": context.payload,
            "signature_hash": hashlib.sha256(context.signature.encode()).hexdigest() if context.signature else "",
            "ip_address": context.ip_address,
            "user_agent": context.user_agent or "",
            "status": "pending",
        }

        existing = WebhookEvent.objects.select_for_update().filter(source=self.source_name, event_id=event_id).first()
        if existing is None:
            return WebhookEvent.objects.create(source=self.source_name, event_id=event_id, **fields)

        if existing.status in WebhookEvent.FINAL_STATUSES:
            raise DuplicateWebhook(existing, event_id)

        for name, value in fields.items():
            setattr(existing, name, value)
        existing.save()
        logger.info(f"🔁 Reprocessing {self.source_name} webhook {event_id} (attempt {existing.retry_count + 1})")
        return existing

    def extract_event_id(self, payload: dict[str, Any]) -> str | None:
        """🔍 Extract unique event ID from payload - override in subclasses"""
        return payload.get("id")

    def extract_event_type(self, payload: dict[str, Any]) -> str | None:
        """🏷️ Extract event type from payload - override in subclasses"""
        return payload.get("type")

    def extract_order_number(self, payload: dict[str, Any]) -> str | None:
        return None

    def verify_signature(self, payload: dict[str, Any], signature: str) -> bool:
        """🔐 Verify webhook signature - secure default is to fail and log an error.

        Subclasses should implement proper verification. This base method provides
        a safe default that cannot be bypassed.
        """
        logger.error("Signature verification not implemented for this processor")
        return False

    def handle_event(self, webhook_event: WebhookEvent) -> Result[HandledEvent, CheckoutError]:
        """🎯 Handle specific webhook event - override in subclasses"""
        raise NotImplementedError("Subclasses must implement handle_event")


# ===============================================================================
# PROCESSOR REGISTRY
# ===============================================================================


def get_webhook_processor(source: str | None) -> BaseWebhookProcessor | None:
    """🏭 Processor instance for a webhook source"""
    from .midtrans import MidtransWebhookProcessor  # noqa: PLC0415

    processors: dict[str, type[BaseWebhookProcessor]] = {
        "midtrans": MidtransWebhookProcessor,
    }
    processor_class = processors.get(source or "")
    return processor_class() if processor_class else None
