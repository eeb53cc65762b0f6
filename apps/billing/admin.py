"""
Django admin configuration for billing app.
Read-mostly view of provider payment records.
"""

from typing import ClassVar

from django.contrib import admin

from .models import PaymentTransaction


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    """Admin interface for payment transactions."""

    list_display: ClassVar[list[str]] = (
        'order', 'provider', 'payment_type', 'channel', 'amount', 'status', 'created_at'
    )
    list_filter: ClassVar[list[str]] = ('provider', 'payment_type', 'status')
    search_fields: ClassVar[list[str]] = ('order__order_number', 'transaction_id', 'va_number')
    # Provider payloads are audit data
    readonly_fields: ClassVar[list[str]] = ('raw_response', 'created_at', 'updated_at')
