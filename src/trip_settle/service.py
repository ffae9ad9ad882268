"""Engine entry points that compose balance calculation and settlement.

Everything here is a pure function of its arguments: nothing is cached or
retained, and inputs are never modified.
"""

import logging
from collections import Counter
from collections.abc import Mapping, Sequence

from .balances import compute_balances, compute_ledgers
from .models import CurrencySummary, Expense, SettlementResult, Trip, TripSummary
from .settlement import minimize_settlements

logger = logging.getLogger(__name__)


def settle(
    participants: Sequence[str],
    expenses: Sequence[Expense],
    *,
    exponents: Mapping[str, int] | None = None,
) -> SettlementResult:
    """
    Compute balances and the minimal transfers for every currency.

    Args:
        participants: The trip's participants (non-empty)
        expenses: The trip's expenses (may be empty)
        exponents: Optional minor-unit exponent overrides

    Returns:
        SettlementResult keyed by currency, in sorted order
    """
    balances = compute_balances(participants, expenses, exponents=exponents)

    transfers = {
        currency: minimize_settlements(vector, currency)
        for currency, vector in balances.items()
    }

    logger.info(
        f"Settlement needs {sum(len(t) for t in transfers.values())} transfers "
        f"across {len(transfers)} currencies"
    )

    return SettlementResult(balances=balances, transfers=transfers)


def settle_trip(
    trip: Trip, *, exponents: Mapping[str, int] | None = None
) -> SettlementResult:
    """Settle a whole trip."""
    return settle(trip.participants, trip.expenses, exponents=exponents)


def summarize_trip(
    trip: Trip, *, exponents: Mapping[str, int] | None = None
) -> TripSummary:
    """
    Build a per-currency overview of a trip: spend, ledgers and transfers.

    Args:
        trip: The trip to summarize
        exponents: Optional minor-unit exponent overrides

    Returns:
        TripSummary with one entry per currency used
    """
    ledgers = compute_ledgers(trip.participants, trip.expenses, exponents=exponents)
    expense_counts = Counter(expense.currency for expense in trip.expenses)

    currencies = []
    for currency, by_participant in ledgers.items():
        balances = {p: ledger.net for p, ledger in by_participant.items()}
        currencies.append(
            CurrencySummary(
                currency=currency,
                expense_count=expense_counts[currency],
                total_spent=sum(ledger.paid for ledger in by_participant.values()),
                ledgers=list(by_participant.values()),
                transfers=minimize_settlements(balances, currency),
            )
        )

    return TripSummary(
        title=trip.title,
        participants=sorted(trip.participants),
        currencies=currencies,
    )
