"""Money arithmetic in integer minor units."""

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal
from fractions import Fraction

from .exceptions import InvalidAmountError, PrecisionLossError

logger = logging.getLogger(__name__)

DEFAULT_EXPONENT = 2

# ISO 4217 currencies whose minor unit is not the cent.
ZERO_DECIMAL_CURRENCIES = frozenset(
    {
        "BIF",
        "CLP",
        "DJF",
        "GNF",
        "ISK",
        "JPY",
        "KMF",
        "KRW",
        "PYG",
        "RWF",
        "UGX",
        "UYI",
        "VND",
        "VUV",
        "XAF",
        "XOF",
        "XPF",
    }
)
THREE_DECIMAL_CURRENCIES = frozenset(
    {"BHD", "IQD", "JOD", "KWD", "LYD", "OMR", "TND"}
)


def minor_unit_exponent(
    currency: str, overrides: Mapping[str, int] | None = None
) -> int:
    """
    Number of decimal places a currency's minor unit carries.

    Args:
        currency: ISO 4217 code
        overrides: Optional currency -> exponent mapping that takes priority

    Returns:
        0 for JPY/KRW style currencies, 3 for BHD/KWD style, 2 otherwise
    """
    if overrides:
        normalized = {code.upper(): value for code, value in overrides.items()}
        if currency.upper() in normalized:
            return normalized[currency.upper()]
    if currency in ZERO_DECIMAL_CURRENCIES:
        return 0
    if currency in THREE_DECIMAL_CURRENCIES:
        return 3
    return DEFAULT_EXPONENT


def to_minor_units(
    amount: Decimal | int | str,
    currency: str,
    exponents: Mapping[str, int] | None = None,
) -> int:
    """
    Convert a major-unit amount to integer minor units.

    The conversion is exact at any magnitude. An amount with non-zero digits
    below the minor unit is rejected rather than rounded or truncated.

    Args:
        amount: Amount in major units (e.g. Decimal("12.50"))
        currency: ISO 4217 code, selects the exponent
        exponents: Optional exponent overrides

    Returns:
        Amount in minor units (e.g. 1250)

    Raises:
        InvalidAmountError: If the amount is NaN or infinite
        PrecisionLossError: If the amount has sub-minor-unit precision
    """
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))

    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {amount}")

    exponent = minor_unit_exponent(currency, exponents)
    sign, digits, amount_exponent = amount.as_tuple()
    if not isinstance(amount_exponent, int):
        raise InvalidAmountError(f"Amount must be finite, got {amount}")

    # Digits past the minor unit are only allowed when they are all zero
    excess = -exponent - amount_exponent
    if excess > 0 and any(digits[-excess:]):
        raise PrecisionLossError(
            f"Amount {amount} {currency} has more than {exponent} decimal places"
        )

    # Integer arithmetic on the digits, independent of the Decimal context
    coefficient = int("".join(map(str, digits)))
    shift = amount_exponent + exponent
    if shift >= 0:
        units = coefficient * 10**shift
    else:
        units = coefficient // 10**-shift

    return -units if sign else units


def from_minor_units(
    units: int, currency: str, exponents: Mapping[str, int] | None = None
) -> Decimal:
    """Convert integer minor units back to a major-unit Decimal."""
    exponent = minor_unit_exponent(currency, exponents)
    sign, digits, _ = Decimal(units).as_tuple()
    return Decimal((sign, digits, -exponent))


def format_money(
    units: int, currency: str, exponents: Mapping[str, int] | None = None
) -> str:
    """Format minor units for display, e.g. 3000 USD -> '30.00 USD'."""
    exponent = minor_unit_exponent(currency, exponents)
    value = from_minor_units(units, currency, exponents)
    return f"{value:,.{exponent}f} {currency}"


def allocate_evenly(total: int, sharers: Iterable[str]) -> dict[str, int]:
    """
    Split `total` minor units as evenly as possible.

    The remainder of the integer division goes one unit each to the first
    sharers in lexicographic order, so 100 over (A, B, C) is 34, 33, 33.

    Args:
        total: Minor units to split
        sharers: Participant identifiers (unique)

    Returns:
        Mapping of sharer -> share, in lexicographic order, summing to total
    """
    ordered = sorted(sharers)
    if not ordered:
        raise ValueError("Cannot allocate across zero sharers")

    base, remainder = divmod(total, len(ordered))
    shares = {
        sharer: base + (1 if i < remainder else 0) for i, sharer in enumerate(ordered)
    }

    if remainder:
        logger.debug(
            f"Distributed {remainder} leftover units of {total} to {ordered[:remainder]}"
        )

    return shares


def allocate_weighted(total: int, weights: Mapping[str, Decimal]) -> dict[str, int]:
    """
    Split `total` minor units proportionally to `weights`.

    Each sharer first gets the floor of their exact proportional share; the
    leftover units go to the largest fractional remainders, ties broken by
    lexicographic participant identifier.

    Args:
        total: Minor units to split
        weights: Sharer -> positive weight

    Returns:
        Mapping of sharer -> share, in lexicographic order, summing to total
    """
    if not weights:
        raise ValueError("Cannot allocate across zero sharers")

    fractions = {sharer: Fraction(weight) for sharer, weight in weights.items()}
    weight_total = sum(fractions.values(), Fraction(0))
    if weight_total <= 0:
        raise ValueError("Weights must sum to a positive value")

    floors: dict[str, int] = {}
    remainders: dict[str, Fraction] = {}
    for sharer, weight in fractions.items():
        exact = total * weight / weight_total
        floors[sharer] = exact.numerator // exact.denominator
        remainders[sharer] = exact - floors[sharer]

    leftover = total - sum(floors.values())
    by_remainder = sorted(floors, key=lambda s: (-remainders[s], s))
    for sharer in by_remainder[:leftover]:
        floors[sharer] += 1

    if leftover:
        logger.debug(
            f"Distributed {leftover} leftover units of {total} "
            f"to {by_remainder[:leftover]}"
        )

    return {sharer: floors[sharer] for sharer in sorted(floors)}
