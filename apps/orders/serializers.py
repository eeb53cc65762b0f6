"""
Checkout API Serializers for Storefront Checkout
Request validation for the checkout commit endpoint.
"""

from typing import Any

from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from apps.billing.models import PaymentMethod
from apps.common.constants import MAX_ORDER_NOTES_LENGTH


class CheckoutInputSerializer(serializers.Serializer):
    """Input serializer for POST /api/checkout/"""

    addressId = serializers.UUIDField(  # noqa: N815
        source="address_id",
        error_messages={
            "required": _("Shipping address is required"),
            "null": _("Shipping address is required"),
            "invalid": _("Invalid address"),
        },
    )
    paymentMethod = serializers.ChoiceField(  # noqa: N815
        source="payment_method",
        choices=PaymentMethod.choices,
        error_messages={
            "required": _("Invalid payment method"),
            "invalid_choice": _("Invalid payment method"),
        },
    )
    paymentChannel = serializers.CharField(  # noqa: N815
        source="payment_channel", max_length=50, required=False, allow_blank=True, allow_null=True
    )
    notes = serializers.CharField(
        max_length=MAX_ORDER_NOTES_LENGTH,
        required=False,
        allow_blank=True,
        allow_null=True,
        error_messages={"max_length": _("Notes must be less than 500 characters")},
    )

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs.get("payment_method") == PaymentMethod.VIRTUAL_ACCOUNT and not attrs.get("payment_channel"):
            raise serializers.ValidationError({"paymentChannel": _("Virtual account bank is required")})
        attrs["payment_channel"] = (attrs.get("payment_channel") or "").upper()
        attrs["notes"] = attrs.get("notes") or ""
        return attrs


def first_error_message(errors: Any) -> str:
    """First human-readable message from a (possibly nested) DRF error structure"""
    if isinstance(errors, dict):
        for value in errors.values():
            return first_error_message(value)
    if isinstance(errors, list) and errors:
        return first_error_message(errors[0])
    return str(errors) if errors else "Validation failed"


def flatten_errors(errors: Any, prefix: str = "") -> list[str]:
    if isinstance(errors, dict):
        return [msg for key, value in errors.items() for msg in flatten_errors(value, f"{key}: ")]
    if isinstance(errors, list):
        return [msg for value in errors for msg in flatten_errors(value, prefix)]
    return [f"{prefix}{errors}"]
