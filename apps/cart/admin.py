from typing import ClassVar

from django.contrib import admin

from .models import Cart, CartItem


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    raw_id_fields: ClassVar[tuple[str, ...]] = ('product', 'variant')


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display: ClassVar[list[str]] = ('user', 'created_at', 'updated_at')
    search_fields: ClassVar[list[str]] = ('user__email',)
    inlines: ClassVar[list[type[admin.TabularInline]]] = [CartItemInline]
