from .base import BaseWebhookProcessor, HandledEvent, WebhookProcessingResult, get_webhook_processor

__all__ = ["BaseWebhookProcessor", "HandledEvent", "WebhookProcessingResult", "get_webhook_processor"]
