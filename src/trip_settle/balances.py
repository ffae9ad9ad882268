"""Balance calculation: reduce expenses to per-currency net balances."""

import logging
from collections.abc import Mapping, Sequence

from .exceptions import InvariantViolation
from .models import Expense, ParticipantLedger
from .money import allocate_evenly, allocate_weighted, to_minor_units
from .validation import ensure_valid, validate_expenses

logger = logging.getLogger(__name__)


def split_expense(
    expense: Expense, *, exponents: Mapping[str, int] | None = None
) -> dict[str, int]:
    """
    Compute each sharer's share of an expense in minor units.

    Equal split by default; proportional when the expense carries weights.
    The shares always sum to the expense amount exactly.

    Args:
        expense: The expense to split
        exponents: Optional minor-unit exponent overrides

    Returns:
        Sharer -> share in minor units, in lexicographic order
    """
    total = to_minor_units(expense.amount, expense.currency, exponents)
    return _allocate(total, expense)


def _allocate(total: int, expense: Expense) -> dict[str, int]:
    if expense.weights is not None:
        return allocate_weighted(total, expense.weights)
    return allocate_evenly(total, expense.participants)


def _check_conservation(currency: str, vector: Mapping[str, int]) -> None:
    total = sum(vector.values())
    if total != 0:
        raise InvariantViolation(
            f"Balances for {currency} sum to {total}, expected 0", currency=currency
        )


def compute_ledgers(
    participants: Sequence[str],
    expenses: Sequence[Expense],
    *,
    exponents: Mapping[str, int] | None = None,
) -> dict[str, dict[str, ParticipantLedger]]:
    """
    Compute what every participant paid and owes, per currency.

    Every trip participant appears under every currency used by at least one
    expense, with zeros where they took no part.

    Args:
        participants: The trip's participants (non-empty)
        expenses: The trip's expenses (may be empty)
        exponents: Optional minor-unit exponent overrides

    Returns:
        currency -> participant -> ledger, both levels in sorted order

    Raises:
        InputContractError: If the input fails validation
        InvariantViolation: If a currency's balances do not sum to zero
    """
    ensure_valid(validate_expenses(participants, expenses, exponents=exponents))

    ordered = sorted(participants)
    paid: dict[str, dict[str, int]] = {}
    owed: dict[str, dict[str, int]] = {}

    for expense in expenses:
        currency = expense.currency
        if currency not in paid:
            paid[currency] = dict.fromkeys(ordered, 0)
            owed[currency] = dict.fromkeys(ordered, 0)

        total = to_minor_units(expense.amount, currency, exponents)
        shares = _allocate(total, expense)

        paid[currency][expense.payer] += total
        for sharer, share in shares.items():
            owed[currency][sharer] += share

        logger.debug(
            f"{expense.payer} paid {total} {currency} "
            f"for {expense.description or 'expense'}, shares: {shares}"
        )

    ledgers: dict[str, dict[str, ParticipantLedger]] = {}
    for currency in sorted(paid):
        ledgers[currency] = {
            p: ParticipantLedger(
                participant=p,
                currency=currency,
                paid=paid[currency][p],
                owed=owed[currency][p],
            )
            for p in ordered
        }
        _check_conservation(
            currency, {p: ledger.net for p, ledger in ledgers[currency].items()}
        )

    logger.info(
        f"Computed balances for {len(ordered)} participants "
        f"across {len(ledgers)} currencies from {len(expenses)} expenses"
    )

    return ledgers


def compute_balances(
    participants: Sequence[str],
    expenses: Sequence[Expense],
    *,
    exponents: Mapping[str, int] | None = None,
) -> dict[str, dict[str, int]]:
    """
    Compute each participant's signed net balance per currency.

    Positive means the participant is owed money, negative means they owe.
    An empty expense list yields an empty mapping.

    Raises:
        InputContractError: If the input fails validation
        InvariantViolation: If a currency's balances do not sum to zero
    """
    ledgers = compute_ledgers(participants, expenses, exponents=exponents)
    return {
        currency: {p: ledger.net for p, ledger in by_participant.items()}
        for currency, by_participant in ledgers.items()
    }
