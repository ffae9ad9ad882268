"""Custom exceptions for trip-settle."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .validation import ValidationIssue


class TripSettleError(Exception):
    """Base exception for all trip-settle errors."""

    pass


class ConfigurationError(TripSettleError):
    """Raised when configuration is invalid or missing."""

    pass


class TripFileError(TripSettleError):
    """Raised when a trip file cannot be read or parsed."""

    pass


class InputContractError(TripSettleError):
    """Raised when engine input breaks its contract (caller error)."""

    def __init__(self, message: str, issues: list[ValidationIssue] | None = None):
        self.issues = list(issues or [])
        super().__init__(message)


class PrecisionLossError(InputContractError):
    """Raised when an amount is finer than the currency's minor unit."""

    pass


class InvalidAmountError(InputContractError):
    """Raised when an amount is non-positive or non-finite."""

    pass


class InvariantViolation(TripSettleError, AssertionError):
    """Raised when an internal money invariant fails.

    This is a bug in the engine, never a user error: balances that do not sum
    to zero, or a minimizer fed an unbalanced vector.
    """

    def __init__(self, message: str, currency: str | None = None):
        self.currency = currency
        super().__init__(message)
