"""
Type system for Storefront Checkout
Rust-inspired Result pattern and checkout-specific type aliases.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

# Type variables for generic Result
T = TypeVar('T')  # Success type
E = TypeVar('E')  # Error type
U = TypeVar('U')

# ===============================================================================
# RESULT TYPES
# ===============================================================================

@dataclass(frozen=True)
class Ok(Generic[T]):
    """Success result containing a value"""
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the success value"""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get the success value (ignores default)"""
        return self.value

    def unwrap_err(self) -> Any:
        raise ValueError(f"Called unwrap_err on Ok: {self.value}")

    def map(self, func: Callable[[T], U]) -> Result[U, Any]:
        """Transform the success value"""
        return Ok(func(self.value))

    def and_then(self, func: Callable[[T], Result[U, Any]]) -> Result[U, Any]:
        """Chain another Result-returning operation"""
        return func(self.value)


@dataclass(frozen=True)
class Err(Generic[E]):
    """Error result containing an error value"""
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Raises an exception - use unwrap_or() for safe access"""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        """Get the default value since this is an error"""
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, func: Callable[[Any], Any]) -> Result[Any, E]:
        """No-op for error results"""
        return self

    def and_then(self, func: Callable[[Any], Any]) -> Result[Any, E]:
        """Short-circuit: the error propagates untouched"""
        return self


# Result type alias
Result = Ok[T] | Err[E]

# ===============================================================================
# BUSINESS TYPES
# ===============================================================================

OrderNumber = str  # Order reference: "ORD-20250101-00042"
EmailAddress = str  # Validated email address
PhoneNumber = str  # Digits-only phone number sent to the payment provider
PaymentChannel = str  # Virtual account bank code: "BCA", "BNI", ...

# ===============================================================================
# WEBHOOK TYPES
# ===============================================================================

WebhookPayload = dict[str, Any]
WebhookSignature = str  # SHA-512 hex digest supplied by the payment provider
