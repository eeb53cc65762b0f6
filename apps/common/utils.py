"""
Common utilities for Storefront Checkout
Money rounding and log-safe masking helpers.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from apps.common.constants import MONEY_QUANTUM, WHOLE_UNIT

# ===============================================================================
# MONEY UTILITIES
# ===============================================================================


def quantize_money(amount: Decimal) -> Decimal:
    """Round half-up to 2 decimal places"""
    return Decimal(amount).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def whole_units(amount: Decimal) -> int:
    """Round half-up to an integer amount; the payment provider accepts whole units only"""
    return int(Decimal(amount).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP))


def format_percent(rate: Decimal) -> str:
    """Decimal('0.10') → '10', Decimal('0.125') → '12.5'"""
    percent = Decimal(rate) * 100
    if percent == percent.to_integral_value():
        return f"{percent:.0f}"
    return f"{percent.normalize():f}"


# ===============================================================================
# SECURITY UTILITIES
# ===============================================================================


def mask_sensitive_data(data: str, show_last: int = 4) -> str:
    """Mask sensitive data for logging"""
    if not data or len(data) <= show_last:
        return "*" * len(data) if data else ""
    return "*" * (len(data) - show_last) + data[-show_last:]
