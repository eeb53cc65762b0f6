"""
Django admin configuration for orders app.
Orders are immutable snapshots; amounts and lines are read-only here.
"""


from typing import ClassVar

from django.contrib import admin

from apps.billing.models import PaymentTransaction

from .models import Order, OrderItem, OrderShippingAddress


class OrderItemInline(admin.TabularInline):
    """Inline admin for order items."""

    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields: ClassVar[list[str]] = (
        'product_id', 'variant_id', 'product_name', 'selected_color', 'selected_size',
        'quantity', 'price', 'total'
    )
    fields = readonly_fields


class OrderShippingAddressInline(admin.StackedInline):
    model = OrderShippingAddress
    can_delete = False
    extra = 0


class PaymentTransactionInline(admin.TabularInline):
    model = PaymentTransaction
    extra = 0
    can_delete = False
    fields: ClassVar[list[str]] = ('provider', 'payment_type', 'channel', 'amount', 'status', 'transaction_id')
    readonly_fields = fields


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin interface for orders."""

    list_display: ClassVar[list[str]] = (
        'order_number', 'user', 'status', 'payment_status', 'payment_method', 'total', 'created_at'
    )
    list_filter: ClassVar[list[str]] = ('status', 'payment_status', 'payment_method', 'created_at')
    search_fields: ClassVar[list[str]] = ('order_number', 'transaction_id', 'user__email', 'user__username')
    readonly_fields: ClassVar[list[str]] = (
        'order_number', 'user', 'payment_method', 'payment_channel', 'transaction_id',
        'subtotal', 'tax', 'shipping_cost', 'service_fee', 'discount', 'total',
        'created_at', 'updated_at', 'paid_at'
    )

    fieldsets: ClassVar[tuple] = (
        ('Order Information', {
            'fields': ('order_number', 'user', 'status', 'notes')
        }),
        ('Payment', {
            'fields': ('payment_status', 'payment_method', 'payment_channel', 'transaction_id', 'paid_at')
        }),
        ('Financial Details', {
            'fields': ('subtotal', 'tax', 'shipping_cost', 'service_fee', 'discount', 'total')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    inlines: ClassVar[list] = [OrderItemInline, OrderShippingAddressInline, PaymentTransactionInline]
