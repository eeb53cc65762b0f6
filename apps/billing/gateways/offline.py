"""
Offline (cash on delivery) gateway for Storefront Checkout
No provider round-trip: the courier collects payment.
"""

from __future__ import annotations

from apps.billing.models import PaymentProvider

from .base import BasePaymentGateway, PaymentGatewayFactory, PaymentInstruction, PaymentIntentRequest

COD_INSTRUCTIONS = "Pay the courier in cash when the order arrives."


class OfflineGateway(BasePaymentGateway):
    """💵 Cash on delivery"""

    @property
    def gateway_name(self) -> str:
        return "offline"

    def create_payment_intent(self, request: PaymentIntentRequest) -> PaymentInstruction:
        return PaymentInstruction(
            provider=PaymentProvider.OFFLINE,
            payment_type="cod",
            channel="COD",
            amount=request.amount,
            instructions=COD_INSTRUCTIONS,
        )


PaymentGatewayFactory.register_gateway("offline", OfflineGateway)
