from typing import ClassVar

from django.contrib import admin

from .models import ShippingAddress


@admin.register(ShippingAddress)
class ShippingAddressAdmin(admin.ModelAdmin):
    list_display: ClassVar[list[str]] = ('full_name', 'user', 'city', 'country', 'is_default')
    list_filter: ClassVar[list[str]] = ('country', 'is_default')
    search_fields: ClassVar[list[str]] = ('full_name', 'phone', 'city', 'user__email')
