"""Pydantic domain models for trip-settle."""

from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

CURRENCY_PATTERN = r"^[A-Z]{3}$"

# ============================================================================
# Input Models
# ============================================================================


class PaymentMethod(str, Enum):
    """How an expense was paid."""

    CASH = "cash"
    CARD = "card"


class Expense(BaseModel):
    """A shared expense recorded on a trip.

    `participants` are the people who divide the cost; the payer may or may
    not be one of them. `weights` switches the split from equal shares to
    proportional shares and must then name exactly the participants.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    amount: Decimal = Field(gt=0)  # major units, e.g. 12.50
    currency: str = Field(pattern=CURRENCY_PATTERN)
    payer: str = Field(min_length=1, max_length=255)
    participants: list[str] = Field(min_length=1)
    weights: dict[str, Decimal] | None = None
    description: str | None = Field(default=None, min_length=1, max_length=255)
    note: str | None = Field(default=None, max_length=1000)
    payment_method: PaymentMethod | None = Field(default=None, alias="paymentMethod")


class Trip(BaseModel):
    """A trip: its participants and the expenses logged against it."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    description: str | None = None
    participants: list[str] = Field(min_length=1)
    expenses: list[Expense] = Field(default_factory=list)


# ============================================================================
# Output Models
# ============================================================================


class Transfer(BaseModel):
    """A single payment that settles debt: `sender` pays `recipient`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sender: str = Field(alias="from")
    recipient: str = Field(alias="to")
    currency: str
    amount: int = Field(gt=0)  # minor units

    @model_validator(mode="after")
    def _distinct_parties(self) -> "Transfer":
        if self.sender == self.recipient:
            raise ValueError(f"Transfer from {self.sender} to themselves")
        return self


class ParticipantLedger(BaseModel):
    """What one participant paid and owes in one currency (minor units)."""

    model_config = ConfigDict(frozen=True)

    participant: str
    currency: str
    paid: int = 0
    owed: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def net(self) -> int:
        """Positive = is owed money, negative = owes money."""
        return self.paid - self.owed


class SettlementResult(BaseModel):
    """Balances and transfers for a trip, keyed by currency."""

    balances: dict[str, dict[str, int]] = Field(default_factory=dict)
    transfers: dict[str, list[Transfer]] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Wire shape: transfers are `{from, to, amount}` under their currency."""
        return {
            "balances": {
                currency: dict(vector) for currency, vector in self.balances.items()
            },
            "transfers": {
                currency: [
                    t.model_dump(by_alias=True, exclude={"currency"}) for t in items
                ]
                for currency, items in self.transfers.items()
            },
        }


class CurrencySummary(BaseModel):
    """Per-currency overview of a trip."""

    currency: str
    expense_count: int
    total_spent: int  # minor units
    ledgers: list[ParticipantLedger]
    transfers: list[Transfer]


class TripSummary(BaseModel):
    """Overview of a whole trip, one entry per currency used."""

    title: str | None = None
    participants: list[str]
    currencies: list[CurrencySummary] = Field(default_factory=list)
