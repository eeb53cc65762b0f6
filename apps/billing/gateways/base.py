"""
Base Payment Gateway for Storefront Checkout
Abstract interface for all payment gateway implementations.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar

from apps.billing.models import PaymentMethod, PaymentStatus

logger = logging.getLogger(__name__)


# ===============================================================================
# TYPE DEFINITIONS
# ===============================================================================


class PaymentGatewayError(Exception):
    """Provider rejected the request or could not be reached; message is safe to show"""


@dataclass(frozen=True)
class PaymentCustomer:
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class PaymentItem:
    """Line sent to the provider; synthetic TAX/SHIPPING lines use the same shape"""
    id: str
    name: str
    price: Decimal
    quantity: int


@dataclass(frozen=True)
class PaymentShipping:
    full_name: str
    phone: str
    address_line1: str
    city: str
    state: str
    postal_code: str
    country: str
    address_line2: str = ""


@dataclass(frozen=True)
class PaymentIntentRequest:
    """Everything the provider needs to create a payment intent"""
    method: str
    order_number: str
    amount: Decimal
    customer: PaymentCustomer
    items: tuple[PaymentItem, ...]
    shipping: PaymentShipping
    channel: str | None = None


@dataclass(frozen=True)
class PaymentInstruction:
    """Provider answer: identifiers plus how the customer completes payment"""
    provider: str
    payment_type: str
    amount: Decimal
    status: str = PaymentStatus.PENDING
    channel: str | None = None
    transaction_id: str | None = None
    va_number: str | None = None
    va_bank: str | None = None
    qr_string: str | None = None
    qr_image_url: str | None = None
    payment_url: str | None = None
    instructions: str | None = None
    expires_at: datetime | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


# ===============================================================================
# ABSTRACT BASE GATEWAY
# ===============================================================================


class BasePaymentGateway(ABC):
    """
    🏛️ Abstract base class for all payment gateways

    Implementations either return a PaymentInstruction or raise
    PaymentGatewayError; callers never see provider-specific exceptions.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"apps.billing.gateways.{self.__class__.__name__.lower()}")

    @property
    @abstractmethod
    def gateway_name(self) -> str:
        """Gateway identifier (e.g., 'midtrans', 'offline')"""

    @abstractmethod
    def create_payment_intent(self, request: PaymentIntentRequest) -> PaymentInstruction:
        """
        Create the provider-side payment intent for a not-yet-persisted order

        Raises:
            PaymentGatewayError: provider rejected the request or was unreachable
        """

    def validate_configuration(self) -> bool:
        """
        Validate gateway configuration (API keys, etc.)
        Override in subclasses for specific validation.
        """
        return True


# ===============================================================================
# GATEWAY FACTORY
# ===============================================================================


class PaymentGatewayFactory:
    """
    🏭 Factory for creating payment gateway instances

    Gateways are registered by name; payment methods map onto gateway names.
    """

    _gateways: ClassVar[dict[str, type[BasePaymentGateway]]] = {}

    METHOD_GATEWAYS: ClassVar[dict[str, str]] = {
        PaymentMethod.COD: "offline",
        PaymentMethod.VIRTUAL_ACCOUNT: "midtrans",
        PaymentMethod.QRIS: "midtrans",
    }

    @classmethod
    def register_gateway(cls, gateway_name: str, gateway_class: type[BasePaymentGateway]) -> None:
        """Register a payment gateway class"""
        cls._gateways[gateway_name] = gateway_class

    @classmethod
    def create_gateway(cls, gateway_name: str) -> BasePaymentGateway:
        """
        Create payment gateway instance

        Raises:
            PaymentGatewayError: If gateway not found or not configured
        """
        if gateway_name not in cls._gateways:
            raise PaymentGatewayError(f"Payment gateway '{gateway_name}' not registered")

        gateway = cls._gateways[gateway_name]()
        if not gateway.validate_configuration():
            raise PaymentGatewayError(f"Payment gateway '{gateway_name}' is not configured")

        return gateway

    @classmethod
    def for_payment_method(cls, method: str) -> BasePaymentGateway:
        gateway_name = cls.METHOD_GATEWAYS.get(method)
        if gateway_name is None:
            raise PaymentGatewayError(f"Unsupported payment method {method}")
        return cls.create_gateway(gateway_name)
