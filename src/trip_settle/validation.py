"""Explicit validation pass for engine input.

Checks everything the engine relies on and reports every problem at once as a
`ValidationResult`, instead of failing on the first bad field.
"""

import logging
import re
from collections import Counter
from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Literal

from pydantic import BaseModel, Field

from .exceptions import InputContractError, InvalidAmountError, PrecisionLossError
from .models import CURRENCY_PATTERN, Expense
from .money import minor_unit_exponent, to_minor_units

logger = logging.getLogger(__name__)

IssueCode = Literal[
    "participants", "amount", "precision", "currency", "membership", "weights"
]

_CURRENCY_RE = re.compile(CURRENCY_PATTERN)


class ValidationIssue(BaseModel):
    """One problem found in the input."""

    code: IssueCode
    field: str
    message: str
    expense_index: int | None = None  # None = trip-level problem

    def __str__(self) -> str:
        where = (
            "trip" if self.expense_index is None else f"expense #{self.expense_index}"
        )
        return f"{where}: {self.field}: {self.message}"


class ValidationResult(BaseModel):
    """Outcome of a validation pass."""

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def _as_decimal(value: object) -> Decimal | None:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _duplicates(items: Sequence[str]) -> list[str]:
    return sorted(item for item, count in Counter(items).items() if count > 1)


def _check_participants(participants: Sequence[str]) -> list[ValidationIssue]:
    issues = []
    if not participants:
        issues.append(
            ValidationIssue(
                code="participants",
                field="participants",
                message="Trip must have at least one participant",
            )
        )
    if any(not p for p in participants):
        issues.append(
            ValidationIssue(
                code="participants",
                field="participants",
                message="Participant names must be non-empty",
            )
        )
    dupes = _duplicates(participants)
    if dupes:
        issues.append(
            ValidationIssue(
                code="participants",
                field="participants",
                message=f"Participants must be unique, repeated: {', '.join(dupes)}",
            )
        )
    return issues


def _check_amount(
    index: int, expense: Expense, exponents: Mapping[str, int] | None
) -> list[ValidationIssue]:
    amount = _as_decimal(expense.amount)
    if amount is None or not amount.is_finite():
        return [
            ValidationIssue(
                code="amount",
                field="amount",
                message=f"Amount must be a finite number, got {expense.amount}",
                expense_index=index,
            )
        ]
    if amount <= 0:
        return [
            ValidationIssue(
                code="amount",
                field="amount",
                message=f"Amount must be positive, got {amount}",
                expense_index=index,
            )
        ]

    # Precision depends on the currency, so only check it for well-formed codes
    if not isinstance(expense.currency, str) or not _CURRENCY_RE.match(
        expense.currency
    ):
        return []

    try:
        to_minor_units(amount, expense.currency, exponents)
    except PrecisionLossError:
        exponent = minor_unit_exponent(expense.currency, exponents)
        return [
            ValidationIssue(
                code="precision",
                field="amount",
                message=(
                    f"Amount {amount} has more than {exponent} decimal places "
                    f"for {expense.currency}"
                ),
                expense_index=index,
            )
        ]
    return []


def _check_currency(index: int, expense: Expense) -> list[ValidationIssue]:
    if isinstance(expense.currency, str) and _CURRENCY_RE.match(expense.currency):
        return []
    return [
        ValidationIssue(
            code="currency",
            field="currency",
            message=(
                f"Currency must be a 3-letter uppercase ISO 4217 code, "
                f"got {expense.currency!r}"
            ),
            expense_index=index,
        )
    ]


def _check_membership(
    index: int, expense: Expense, trip_participants: set[str]
) -> list[ValidationIssue]:
    issues = []
    if expense.payer not in trip_participants:
        issues.append(
            ValidationIssue(
                code="membership",
                field="payer",
                message=f"Payer {expense.payer!r} is not a trip participant",
                expense_index=index,
            )
        )

    sharers = list(expense.participants or [])
    if not sharers:
        issues.append(
            ValidationIssue(
                code="participants",
                field="participants",
                message="At least one participant is required",
                expense_index=index,
            )
        )
        return issues

    dupes = _duplicates(sharers)
    if dupes:
        issues.append(
            ValidationIssue(
                code="participants",
                field="participants",
                message=f"Each participant must be unique, repeated: {', '.join(dupes)}",
                expense_index=index,
            )
        )

    outsiders = sorted(set(sharers) - trip_participants)
    if outsiders:
        issues.append(
            ValidationIssue(
                code="membership",
                field="participants",
                message=f"Not trip participants: {', '.join(outsiders)}",
                expense_index=index,
            )
        )
    return issues


def _check_weights(index: int, expense: Expense) -> list[ValidationIssue]:
    if expense.weights is None:
        return []

    issues = []
    sharers = set(expense.participants or [])
    weighted = set(expense.weights)
    if weighted != sharers:
        missing = sorted(sharers - weighted)
        extra = sorted(weighted - sharers)
        parts = []
        if missing:
            parts.append(f"missing for {', '.join(missing)}")
        if extra:
            parts.append(f"given for non-sharers {', '.join(extra)}")
        issues.append(
            ValidationIssue(
                code="weights",
                field="weights",
                message=f"Weights must cover exactly the participants ({'; '.join(parts)})",
                expense_index=index,
            )
        )

    for sharer in sorted(weighted):
        weight = _as_decimal(expense.weights[sharer])
        if weight is None or not weight.is_finite() or weight <= 0:
            issues.append(
                ValidationIssue(
                    code="weights",
                    field="weights",
                    message=f"Weight for {sharer} must be a positive number",
                    expense_index=index,
                )
            )
    return issues


def validate_expenses(
    participants: Sequence[str],
    expenses: Sequence[Expense],
    *,
    exponents: Mapping[str, int] | None = None,
) -> ValidationResult:
    """
    Validate a trip's participants and expenses before settlement.

    Args:
        participants: The trip's participant identifiers
        expenses: The trip's expenses
        exponents: Optional minor-unit exponent overrides

    Returns:
        ValidationResult listing every issue found (empty when valid)
    """
    participants = list(participants)
    issues = _check_participants(participants)
    trip_participants = set(participants)

    for index, expense in enumerate(expenses):
        issues.extend(_check_currency(index, expense))
        issues.extend(_check_amount(index, expense, exponents))
        issues.extend(_check_membership(index, expense, trip_participants))
        issues.extend(_check_weights(index, expense))

    if issues:
        logger.warning(f"Validation found {len(issues)} issue(s)")
        for issue in issues:
            logger.debug(str(issue))

    return ValidationResult(issues=issues)


def ensure_valid(result: ValidationResult) -> None:
    """
    Raise if a validation pass found problems.

    Raises:
        PrecisionLossError: If every issue is a precision problem
        InvalidAmountError: If every issue is a bad amount
        InputContractError: Otherwise
    """
    if result.ok:
        return

    codes = {issue.code for issue in result.issues}
    summary = "; ".join(str(issue) for issue in result.issues)
    message = f"Invalid input ({len(result.issues)} issue(s)): {summary}"

    if codes == {"precision"}:
        raise PrecisionLossError(message, result.issues)
    if codes == {"amount"}:
        raise InvalidAmountError(message, result.issues)
    raise InputContractError(message, result.issues)
