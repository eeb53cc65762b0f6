"""
Django admin configuration for integrations app.
Delivery log of provider notifications, read-only.
"""

from typing import ClassVar

from django.contrib import admin

from .models import WebhookEvent


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    list_display: ClassVar[tuple[str, ...]] = (
        'received_at', 'source', 'order_number', 'event_type', 'status', 'retry_count'
    )
    list_filter: ClassVar[tuple[str, ...]] = ('source', 'status', 'event_type')
    search_fields: ClassVar[tuple[str, ...]] = ('event_id', 'order_number')
    readonly_fields: ClassVar[tuple[str, ...]] = (
        'source', 'event_id', 'event_type', 'order_number', 'status', 'retry_count', 'error_message',
        'payload', 'signature_hash', 'ip_address', 'user_agent', 'received_at', 'processed_at',
    )

    def has_add_permission(self, request) -> bool:
        return False
