"""
Payment Gateway Implementations for Storefront Checkout
Supports multiple payment providers with unified interface.
"""

from .base import (
    BasePaymentGateway,
    PaymentCustomer,
    PaymentGatewayError,
    PaymentGatewayFactory,
    PaymentInstruction,
    PaymentIntentRequest,
    PaymentItem,
    PaymentShipping,
)
from .midtrans import MidtransGateway
from .offline import OfflineGateway

__all__ = [
    'BasePaymentGateway',
    'MidtransGateway',
    'OfflineGateway',
    'PaymentCustomer',
    'PaymentGatewayError',
    'PaymentGatewayFactory',
    'PaymentInstruction',
    'PaymentIntentRequest',
    'PaymentItem',
    'PaymentShipping',
]
