"""trip-settle - Work out who owes whom after a shared trip."""

__version__ = "0.1.0"

from .balances import compute_balances, compute_ledgers, split_expense
from .config import Settings, load_settings
from .exceptions import (
    InputContractError,
    InvariantViolation,
    PrecisionLossError,
    TripSettleError,
)
from .models import (
    Expense,
    ParticipantLedger,
    PaymentMethod,
    SettlementResult,
    Transfer,
    Trip,
)
from .money import to_minor_units
from .service import settle, settle_trip, summarize_trip
from .settlement import minimize_settlements
from .validation import ValidationResult, validate_expenses

__all__ = [
    "Settings",
    "load_settings",
    "InputContractError",
    "InvariantViolation",
    "PrecisionLossError",
    "TripSettleError",
    "Expense",
    "ParticipantLedger",
    "PaymentMethod",
    "SettlementResult",
    "Transfer",
    "Trip",
    "compute_balances",
    "compute_ledgers",
    "split_expense",
    "minimize_settlements",
    "to_minor_units",
    "settle",
    "settle_trip",
    "summarize_trip",
    "ValidationResult",
    "validate_expenses",
]
