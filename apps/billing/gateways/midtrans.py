"""
Midtrans Payment Gateway for Storefront Checkout
Core API integration for virtual account and QRIS charges.
"""

from __future__ import annotations

import logging
import re
import zoneinfo
from datetime import datetime
from decimal import Decimal
from typing import Any

import requests
from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.billing.models import PaymentMethod, PaymentProvider
from apps.common.constants import (
    MIN_PHONE_DIGITS,
    PAYMENT_REQUEST_TIMEOUT_SECONDS,
    PROVIDER_ADDRESS_MAX_LENGTH,
    PROVIDER_ITEM_FIELD_MAX_LENGTH,
    PROVIDER_NAME_MAX_LENGTH,
    PROVIDER_ORDER_ID_MAX_LENGTH,
    PROVIDER_ORDER_ID_MIN_LENGTH,
    PROVIDER_POSTAL_CODE_MAX_LENGTH,
)
from apps.common.utils import mask_sensitive_data, whole_units

from .base import (
    BasePaymentGateway,
    PaymentGatewayError,
    PaymentGatewayFactory,
    PaymentInstruction,
    PaymentIntentRequest,
    PaymentItem,
)

logger = logging.getLogger(__name__)

# ===============================================================================
# CONSTANTS
# ===============================================================================

MIDTRANS_SANDBOX_BASE_URL = "https://api.sandbox.midtrans.com"
MIDTRANS_PRODUCTION_BASE_URL = "https://api.midtrans.com"

# Midtrans reports expiry times in WIB
MIDTRANS_TIMEZONE = zoneinfo.ZoneInfo("Asia/Jakarta")

VA_BANKS: dict[str, str] = {
    "BCA": "bca",
    "MANDIRI": "mandiri",
    "BNI": "bni",
    "BRI": "bri",
    "BSI": "bsi",
    "PERMATA": "permata",
}

COUNTRY_CODES: dict[str, str] = {
    "ID": "IDN",
    "US": "USA",
    "MY": "MYS",
    "SG": "SGP",
}
DEFAULT_COUNTRY_CODE = "IDN"

SUCCESS_STATUS_CODES = frozenset({"200", "201"})
QR_ACTION_NAMES = frozenset({"generate-qr-code", "qr-code", "qr_code", "qris"})
REDIRECT_ACTION_NAMES = frozenset({"deeplink-redirect", "deeplink_redirect", "redirect"})

PERMATA_INSTRUCTIONS = "Use the Permata virtual account number to complete the payment."

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
ORDER_ID_DISALLOWED = re.compile(r"[^a-zA-Z0-9_-]")


# ===============================================================================
# REQUEST SHAPING HELPERS
# ===============================================================================


def format_phone_number(phone: str | None) -> str:
    if not phone:
        raise PaymentGatewayError("Phone number is required")
    digits = re.sub(r"\D", "", phone)
    if len(digits) < MIN_PHONE_DIGITS:
        raise PaymentGatewayError(f"Phone number must be at least {MIN_PHONE_DIGITS} digits")
    return digits


def validate_email(email: str | None) -> str:
    if not email or not email.strip():
        raise PaymentGatewayError("Email is required")
    if not EMAIL_PATTERN.match(email.strip()):
        raise PaymentGatewayError("Invalid email format")
    return email.strip()


def validate_name(name: str | None, field_name: str) -> str:
    if not name or not name.strip():
        raise PaymentGatewayError(f"{field_name} is required")
    return name.strip()[:PROVIDER_NAME_MAX_LENGTH]


def validate_address(address: str) -> str:
    if not address or not address.strip():
        raise PaymentGatewayError("Address is required")
    return address.strip()[:PROVIDER_ADDRESS_MAX_LENGTH]


def validate_postal_code(postal_code: str) -> str:
    if not postal_code or not postal_code.strip():
        raise PaymentGatewayError("Postal code is required")
    return postal_code.strip()[:PROVIDER_POSTAL_CODE_MAX_LENGTH]


def normalize_country_code(country: str | None) -> str:
    """Midtrans wants ISO 3166-1 alpha-3"""
    code = (country or DEFAULT_COUNTRY_CODE).upper()
    if len(code) == 2:  # noqa: PLR2004
        code = COUNTRY_CODES.get(code, DEFAULT_COUNTRY_CODE)
    if len(code) != 3:  # noqa: PLR2004
        code = DEFAULT_COUNTRY_CODE
    return code


def sanitize_order_id(order_number: str) -> str:
    order_id = ORDER_ID_DISALLOWED.sub("", order_number)[:PROVIDER_ORDER_ID_MAX_LENGTH]
    if len(order_id) < PROVIDER_ORDER_ID_MIN_LENGTH:
        raise PaymentGatewayError(
            "Invalid order number format. Order number must be at least 3 characters and contain "
            "only alphanumeric characters, dashes, or underscores."
        )
    return order_id


def build_item_details(items: tuple[PaymentItem, ...]) -> list[dict[str, Any]]:
    if not items:
        raise PaymentGatewayError("At least one item is required")

    details = []
    for item in items:
        if not item.id or not item.name:
            raise PaymentGatewayError("Item ID and name are required")
        price = whole_units(item.price)
        if price <= 0:
            raise PaymentGatewayError(f"Invalid price for item {item.name}: {item.price}")
        if item.quantity <= 0:
            raise PaymentGatewayError(f"Invalid quantity for item {item.name}: {item.quantity}")
        details.append(
            {
                "id": str(item.id)[:PROVIDER_ITEM_FIELD_MAX_LENGTH],
                "price": price,
                "quantity": item.quantity,
                "name": item.name[:PROVIDER_ITEM_FIELD_MAX_LENGTH],
            }
        )
    return details


def drop_empty(value: Any) -> Any:
    """Strip None values recursively; the Core API rejects explicit nulls"""
    if isinstance(value, dict):
        return {key: drop_empty(inner) for key, inner in value.items() if inner is not None}
    if isinstance(value, list):
        return [drop_empty(inner) for inner in value]
    return value


def parse_expiry(value: Any) -> datetime | None:
    if not value:
        return None
    parsed = parse_datetime(str(value))
    if parsed is None:
        logger.warning(f"⚠️ [Midtrans] Unparseable expiry time: {value!r}")
        return None
    if timezone.is_naive(parsed):
        parsed = parsed.replace(tzinfo=MIDTRANS_TIMEZONE)
    return parsed


# ===============================================================================
# MIDTRANS GATEWAY IMPLEMENTATION
# ===============================================================================


class MidtransGateway(BasePaymentGateway):
    """
    🏦 Midtrans Core API gateway

    Features:
    - Virtual account charges (bank_transfer) for the supported banks
    - QRIS charges with QR payload / image / deeplink extraction
    - Transaction status lookups for payment sync
    """

    def __init__(self) -> None:
        super().__init__()
        self.server_key = (getattr(settings, "MIDTRANS_SERVER_KEY", None) or "").strip()
        self.base_url = (getattr(settings, "MIDTRANS_BASE_URL", None) or MIDTRANS_SANDBOX_BASE_URL).rstrip("/")
        self.timeout = getattr(settings, "MIDTRANS_REQUEST_TIMEOUT", PAYMENT_REQUEST_TIMEOUT_SECONDS)
        self.session = requests.Session()
        self.session.auth = (self.server_key, "")
        self.session.headers.update({"Accept": "application/json", "Content-Type": "application/json"})

    @property
    def gateway_name(self) -> str:
        return "midtrans"

    @property
    def is_sandbox(self) -> bool:
        return "sandbox" in self.base_url

    def validate_configuration(self) -> bool:
        if not self.server_key:
            self.logger.error("❌ MIDTRANS_SERVER_KEY is not configured")
            return False
        self.logger.debug(
            f"🔑 [Midtrans] Server key {mask_sensitive_data(self.server_key)} "
            f"({'SANDBOX' if self.is_sandbox else 'PRODUCTION'} {self.base_url})"
        )
        return True

    @property
    def notification_url(self) -> str:
        app_base_url = getattr(settings, "APP_BASE_URL", "http://localhost:8000").rstrip("/")
        return f"{app_base_url}/integrations/webhooks/midtrans/"

    # ---------------------------------------------------------------------------
    # Charge
    # ---------------------------------------------------------------------------

    def create_payment_intent(self, request: PaymentIntentRequest) -> PaymentInstruction:
        payment_type = self._payment_type(request.method)
        payload = self.build_charge_payload(request, payment_type)

        self.logger.info(
            f"💳 [Midtrans] Charging {payload['transaction_details']['order_id']} "
            f"{payment_type} gross_amount={payload['transaction_details']['gross_amount']}"
        )
        data, http_ok = self._post("/v2/charge", payload)
        self._raise_for_charge_error(data, http_ok, payment_type, request.channel)
        return self.map_instruction(data, payment_type, request.channel)

    def build_charge_payload(self, request: PaymentIntentRequest, payment_type: str) -> dict[str, Any]:
        shipping = request.shipping
        email = validate_email(request.customer.email)
        phone = format_phone_number(request.customer.phone or shipping.phone)
        shipping_phone = format_phone_number(shipping.phone)

        name_parts = shipping.full_name.split(" ")
        customer_first_name = validate_name(request.customer.first_name or name_parts[0], "First name")
        customer_last_name = request.customer.last_name or " ".join(name_parts[1:])
        shipping_first_name = validate_name(name_parts[0], "Shipping first name")
        shipping_last_name = " ".join(name_parts[1:])

        street = shipping.address_line1 + (f", {shipping.address_line2}" if shipping.address_line2 else "")
        address = validate_address(street)
        city = validate_name(shipping.city, "City")
        validate_name(shipping.state, "State")
        postal_code = validate_postal_code(shipping.postal_code)
        country_code = normalize_country_code(shipping.country)

        item_details = build_item_details(request.items)
        gross_amount = sum(item["price"] * item["quantity"] for item in item_details)
        if abs(gross_amount - Decimal(request.amount)) > 1:
            self.logger.warning(
                f"⚠️ [Midtrans] Items total {gross_amount} differs from amount {request.amount}; "
                "charging the items total"
            )

        payload: dict[str, Any] = {
            "payment_type": payment_type,
            "transaction_details": {
                "order_id": sanitize_order_id(request.order_number),
                "gross_amount": gross_amount,
            },
            "item_details": item_details,
            "notification_url": self.notification_url,
            "customer_details": {
                "first_name": customer_first_name,
                "last_name": customer_last_name or "",
                "email": email,
                "phone": phone,
                "billing_address": {
                    "first_name": customer_first_name,
                    "last_name": customer_last_name or "",
                    "email": email,
                    "phone": phone,
                    "address": address,
                    "city": city,
                    "postal_code": postal_code,
                    "country_code": country_code,
                },
                "shipping_address": {
                    "first_name": shipping_first_name,
                    "last_name": shipping_last_name or "",
                    "phone": shipping_phone,
                    "address": address,
                    "city": city,
                    "postal_code": postal_code,
                    "country_code": country_code,
                },
            },
        }

        if payment_type == "bank_transfer":
            payload["bank_transfer"] = {"bank": self._bank_code(request.channel)}

        return drop_empty(payload)

    def _payment_type(self, method: str) -> str:
        if method == PaymentMethod.VIRTUAL_ACCOUNT:
            return "bank_transfer"
        if method == PaymentMethod.QRIS:
            return "qris"
        raise PaymentGatewayError(f"Unsupported payment method {method} for Midtrans")

    def _bank_code(self, channel: str | None) -> str:
        if not channel:
            raise PaymentGatewayError("Virtual account bank is required")
        bank = VA_BANKS.get(channel.upper())
        if bank is None:
            raise PaymentGatewayError(f"Unsupported virtual account bank: {channel}")
        return bank

    def _raise_for_charge_error(
        self, data: dict[str, Any], http_ok: bool, payment_type: str, channel: str | None
    ) -> None:
        has_transaction_id = bool(data.get("transaction_id") or data.get("id"))
        status_code = str(data.get("status_code") or "")
        status_message = str(data.get("status_message") or "")
        lowered = status_message.lower()
        error_messages = data.get("error_messages") or []

        is_error = not http_ok or (
            not has_transaction_id and status_code and status_code not in SUCCESS_STATUS_CODES
        )
        has_error_indicators = (
            "server_key" in lowered
            or "unknown merchant" in lowered
            or "not activated" in lowered
            or data.get("fraud_status") == "deny"
            or bool(error_messages)
        )

        if is_error or (has_error_indicators and not has_transaction_id):
            self.logger.error(f"❌ [Midtrans] Charge rejected: status_code={status_code} message={status_message!r}")

            if "server_key" in lowered or "unknown merchant" in lowered:
                mode = "Sandbox" if self.is_sandbox else "Production"
                raise PaymentGatewayError(
                    f"Invalid Midtrans server key. Make sure MIDTRANS_SERVER_KEY holds the {mode} server key."
                )

            if "not activated" in lowered:
                if payment_type == "qris":
                    channel_name = "QRIS"
                else:
                    channel_name = f"Virtual Account ({channel or 'Bank Transfer'})"
                raise PaymentGatewayError(f"Payment method {channel_name} is not activated for this merchant")

            message = status_message or (error_messages[0] if error_messages else "") or (
                "Failed to create payment transaction"
            )
            if error_messages:
                message = f"{message}. Details: {', '.join(str(m) for m in error_messages)}"
            raise PaymentGatewayError(message)

        if not has_transaction_id:
            self.logger.error("❌ [Midtrans] Charge response missing transaction_id")
            raise PaymentGatewayError("Invalid response from Midtrans: missing transaction ID")

    # ---------------------------------------------------------------------------
    # Response mapping
    # ---------------------------------------------------------------------------

    def map_instruction(self, data: dict[str, Any], payment_type: str, channel: str | None) -> PaymentInstruction:
        base = {
            "provider": PaymentProvider.MIDTRANS,
            "payment_type": payment_type,
            "channel": channel,
            "transaction_id": data.get("transaction_id"),
            "amount": Decimal(str(data.get("gross_amount") or 0)),
            "raw_response": data,
        }

        if payment_type == "bank_transfer":
            va_numbers = data.get("va_numbers") or []
            va_info = va_numbers[0] if va_numbers else {}
            va_number = va_info.get("va_number") or data.get("permata_va_number")
            va_bank = (va_info.get("bank") or channel or "").upper() or None
            return PaymentInstruction(
                **base,
                va_number=va_number,
                va_bank=va_bank,
                instructions=PERMATA_INSTRUCTIONS if data.get("permata_va_number") else None,
                expires_at=parse_expiry(data.get("expiry_time")),
            )

        if payment_type == "qris":
            return PaymentInstruction(
                **base,
                qr_string=extract_qr_string(data),
                qr_image_url=extract_qr_image_url(data),
                payment_url=extract_redirect_url(data),
                expires_at=parse_expiry(
                    data.get("expiry_time") or data.get("expiryTime") or data.get("expires_at")
                ),
            )

        return PaymentInstruction(**base)

    # ---------------------------------------------------------------------------
    # Status lookup
    # ---------------------------------------------------------------------------

    def get_transaction_status(self, transaction_id: str) -> dict[str, Any]:
        """🔍 Current provider view of a transaction (used by payment sync)"""
        data, http_ok = self._get(f"/v2/{transaction_id}/status")
        if not http_ok:
            raise PaymentGatewayError("Failed to check status from Midtrans")
        return data

    # ---------------------------------------------------------------------------
    # HTTP
    # ---------------------------------------------------------------------------

    def _post(self, path: str, payload: dict[str, Any]) -> tuple[dict[str, Any], bool]:
        return self._request("POST", path, json=payload)

    def _get(self, path: str) -> tuple[dict[str, Any], bool]:
        return self._request("GET", path)

    def _request(self, method: str, path: str, **kwargs: Any) -> tuple[dict[str, Any], bool]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            self.logger.error(f"⏰ [Midtrans] {method} {path} timed out")
            raise PaymentGatewayError("Payment provider timed out") from e
        except requests.exceptions.RequestException as e:
            self.logger.error(f"🔥 [Midtrans] {method} {path} failed: {e}")
            raise PaymentGatewayError("Payment provider is unreachable") from e

        try:
            data = response.json()
        except ValueError as e:
            self.logger.error(f"❌ [Midtrans] Non-JSON response (HTTP {response.status_code})")
            raise PaymentGatewayError("Invalid response from Midtrans") from e

        if not isinstance(data, dict):
            raise PaymentGatewayError("Invalid response from Midtrans")
        return data, response.ok


# ===============================================================================
# QRIS FIELD EXTRACTION
# ===============================================================================


def _qr_action(data: dict[str, Any], include_get_urls: bool = False) -> dict[str, Any] | None:
    for action in data.get("actions") or []:
        if action.get("name") in QR_ACTION_NAMES:
            return action
        if include_get_urls and action.get("method") == "GET" and "qr" in (action.get("url") or ""):
            return action
    return None


def extract_qr_string(data: dict[str, Any]) -> str | None:
    qr_string = data.get("qr_string") or data.get("qr_code") or data.get("qrString")
    if not qr_string:
        action = _qr_action(data) or {}
        qr_string = action.get("qr_string") or action.get("qr_code") or action.get("value")
    if not qr_string and isinstance(data.get("qris"), dict):
        qris = data["qris"]
        qr_string = qris.get("qr_string") or qris.get("qr_code")
    return qr_string or None


def extract_qr_image_url(data: dict[str, Any]) -> str | None:
    action = _qr_action(data, include_get_urls=True) or {}
    qr_url = action.get("url") or action.get("qr_url") or action.get("image_url")
    if not qr_url:
        qr_url = data.get("qr_url") or data.get("qr_image_url") or data.get("qr_code_url")
    if not qr_url and isinstance(data.get("qris"), dict):
        qris = data["qris"]
        qr_url = qris.get("qr_url") or qris.get("image_url")
    return qr_url or None


def extract_redirect_url(data: dict[str, Any]) -> str | None:
    for action in data.get("actions") or []:
        if action.get("name") in REDIRECT_ACTION_NAMES:
            return action.get("url")
    return None


PaymentGatewayFactory.register_gateway("midtrans", MidtransGateway)
