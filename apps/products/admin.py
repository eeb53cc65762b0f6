"""
Django admin configuration for products app.
Catalog stock and pricing as seen by the checkout pipeline.
"""

from typing import ClassVar

from django.contrib import admin

from .models import Product, ProductVariant


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin interface for products."""

    list_display: ClassVar[list[str]] = (
        'name', 'brand', 'price', 'sale_price', 'stock_quantity', 'sales_count', 'is_active'
    )
    list_filter: ClassVar[list[str]] = ('is_active', 'brand')
    search_fields: ClassVar[list[str]] = ('name', 'brand', 'slug')
    prepopulated_fields: ClassVar[dict[str, tuple[str, ...]]] = {'slug': ('name',)}
    inlines: ClassVar[list[type[admin.TabularInline]]] = [ProductVariantInline]

    fieldsets: ClassVar[tuple] = (
        ('Basic Information', {
            'fields': ('brand', 'name', 'slug', 'is_active')
        }),
        ('Pricing & Stock', {
            'fields': ('price', 'sale_price', 'stock_quantity', 'sales_count')
        }),
        ('Shipping', {
            'fields': ('free_shipping_threshold', 'default_shipping_cost', 'service_fee'),
            'classes': ('collapse',)
        }),
    )

    # Sales counter is owned by the order commit transaction
    readonly_fields: ClassVar[list[str]] = ('sales_count', 'created_at', 'updated_at')
