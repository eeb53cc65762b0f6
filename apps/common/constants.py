"""
Storefront Checkout Constants

Centralized constants for checkout pricing, order numbering and payment provider limits.
Runtime-tunable values live in Django settings; these are the defaults and hard limits.
"""

from decimal import Decimal
from typing import Final

# ===============================================================================
# PRICING 💰
# ===============================================================================

DEFAULT_TAX_RATE: Final[Decimal] = Decimal('0.10')                  # 10% tax on subtotal
DEFAULT_FREE_SHIPPING_THRESHOLD: Final[Decimal] = Decimal('50.00')  # Free shipping at or above
DEFAULT_FLAT_SHIPPING_FEE: Final[Decimal] = Decimal('5.00')         # Fee below the threshold

MONEY_QUANTUM: Final[Decimal] = Decimal('0.01')   # 2 decimal places
WHOLE_UNIT: Final[Decimal] = Decimal('1')         # Provider accepts integer amounts only

# ===============================================================================
# ORDER NUMBERING 🔢
# ===============================================================================

ORDER_NUMBER_PREFIX: Final[str] = 'ORD'
ORDER_NUMBER_RANDOM_DIGITS: Final[int] = 5
ORDER_NUMBER_MAX_ATTEMPTS: Final[int] = 10

# ===============================================================================
# CHECKOUT INPUT LIMITS
# ===============================================================================

MAX_ORDER_NOTES_LENGTH: Final[int] = 500

# ===============================================================================
# PAYMENT PROVIDER LIMITS 💳
# ===============================================================================

PROVIDER_ITEM_FIELD_MAX_LENGTH: Final[int] = 50     # item id / name
PROVIDER_NAME_MAX_LENGTH: Final[int] = 50
PROVIDER_ADDRESS_MAX_LENGTH: Final[int] = 200
PROVIDER_POSTAL_CODE_MAX_LENGTH: Final[int] = 10
PROVIDER_ORDER_ID_MIN_LENGTH: Final[int] = 3
PROVIDER_ORDER_ID_MAX_LENGTH: Final[int] = 50
MIN_PHONE_DIGITS: Final[int] = 6

PAYMENT_REQUEST_TIMEOUT_SECONDS: Final[int] = 30
