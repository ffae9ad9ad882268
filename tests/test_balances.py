"""Tests for the balance calculator."""

import random
from decimal import Decimal

import pytest

from trip_settle.balances import compute_balances, compute_ledgers, split_expense
from trip_settle.exceptions import (
    InputContractError,
    InvalidAmountError,
    InvariantViolation,
    PrecisionLossError,
)
from trip_settle.models import Expense

TRIO = ["Alice", "Bob", "Charlie"]


# Helper function for tests
def make_expense(
    amount: str,
    payer: str = "Alice",
    participants: list[str] | None = None,
    currency: str = "USD",
    weights: dict[str, str] | None = None,
) -> Expense:
    """Create an Expense for testing."""
    return Expense(
        amount=Decimal(amount),
        currency=currency,
        payer=payer,
        participants=participants or TRIO,
        weights=(
            {k: Decimal(v) for k, v in weights.items()} if weights is not None else None
        ),
        description=f"Test expense {amount}",
    )


class TestComputeBalances:
    """Core balance scenarios."""

    def test_end_to_end_scenario(self):
        """Alice pays 90 USD for three: she is owed 60, the others owe 30."""
        balances = compute_balances(TRIO, [make_expense("90")])

        assert balances == {"USD": {"Alice": 6000, "Bob": -3000, "Charlie": -3000}}

    def test_no_expenses(self):
        assert compute_balances(TRIO, []) == {}

    def test_self_payment_neutrality(self):
        """Paying for yourself is a wash: 300 over three is +200/-100/-100."""
        balances = compute_balances(TRIO, [make_expense("3.00")])

        assert balances["USD"] == {"Alice": 200, "Bob": -100, "Charlie": -100}

    def test_rounding_conservation(self):
        """1.00 split three ways by an outside payer: 34/33/33."""
        balances = compute_balances(
            [*TRIO, "Dave"], [make_expense("1.00", payer="Dave")]
        )

        assert balances["USD"] == {
            "Alice": -34,
            "Bob": -33,
            "Charlie": -33,
            "Dave": 100,
        }

    def test_single_sharer(self):
        balances = compute_balances(TRIO, [make_expense("50", participants=["Bob"])])

        assert balances["USD"] == {"Alice": 5000, "Bob": -5000, "Charlie": 0}

    def test_payer_outside_sharers(self):
        balances = compute_balances(
            TRIO, [make_expense("20", payer="Charlie", participants=["Alice", "Bob"])]
        )

        assert balances["USD"] == {"Alice": -1000, "Bob": -1000, "Charlie": 2000}

    def test_idle_participant_listed_with_zero(self):
        """Participants with no activity still appear, at zero."""
        balances = compute_balances([*TRIO, "Dave"], [make_expense("90")])

        assert balances["USD"]["Dave"] == 0
        assert list(balances["USD"]) == ["Alice", "Bob", "Charlie", "Dave"]

    def test_payer_sharing_alone_nets_to_zero(self):
        balances = compute_balances(TRIO, [make_expense("12", participants=["Alice"])])

        assert balances == {"USD": {"Alice": 0, "Bob": 0, "Charlie": 0}}

    def test_currencies_kept_separate(self):
        expenses = [
            make_expense("90"),
            make_expense("3000", payer="Bob", currency="JPY"),
        ]

        balances = compute_balances(TRIO, expenses)

        assert list(balances) == ["JPY", "USD"]
        assert balances["USD"] == {"Alice": 6000, "Bob": -3000, "Charlie": -3000}
        assert balances["JPY"] == {"Alice": -1000, "Bob": 2000, "Charlie": -1000}

    def test_accumulates_across_expenses(self):
        expenses = [
            make_expense("90"),
            make_expense("60", payer="Bob"),
            make_expense("30", payer="Charlie", participants=["Alice", "Charlie"]),
        ]

        balances = compute_balances(TRIO, expenses)

        # Alice: +90 -30 -20 -15, Bob: -30 +60 -20, Charlie: -30 -20 +30 -15
        assert balances["USD"] == {"Alice": 2500, "Bob": 1000, "Charlie": -3500}

    def test_weighted_split(self):
        expense = make_expense(
            "100", participants=["Alice", "Bob"], weights={"Alice": "1", "Bob": "3"}
        )

        balances = compute_balances(TRIO, [expense])

        assert balances["USD"] == {"Alice": 7500, "Bob": -7500, "Charlie": 0}

    def test_three_decimal_currency(self):
        balances = compute_balances(TRIO, [make_expense("0.003", currency="KWD")])

        assert balances["KWD"] == {"Alice": 2, "Bob": -1, "Charlie": -1}

    def test_exponent_override(self):
        balances = compute_balances(
            TRIO, [make_expense("300", currency="HUF")], exponents={"HUF": 0}
        )

        assert balances["HUF"] == {"Alice": 200, "Bob": -100, "Charlie": -100}

    def test_input_not_mutated(self):
        participants = list(TRIO)
        expenses = [make_expense("90")]
        before = [e.model_dump() for e in expenses]

        compute_balances(participants, expenses)

        assert participants == TRIO
        assert [e.model_dump() for e in expenses] == before


class TestConservation:
    """Balances in every currency always sum to zero."""

    def test_randomized_expenses(self):
        rng = random.Random(1234)
        people = ["Ana", "Ben", "Cleo", "Dan", "Eve", "Finn", "Gus"]
        currencies = ["USD", "EUR", "JPY", "KWD"]

        expenses = []
        for _ in range(200):
            currency = rng.choice(currencies)
            amount = Decimal(rng.randint(1, 100_000))
            if currency in ("USD", "EUR"):
                amount = amount.scaleb(-2)
            expenses.append(
                Expense(
                    amount=amount,
                    currency=currency,
                    payer=rng.choice(people),
                    participants=rng.sample(people, rng.randint(1, len(people))),
                )
            )

        balances = compute_balances(people, expenses)

        assert set(balances) == set(currencies)
        for vector in balances.values():
            assert sum(vector.values()) == 0

    def test_broken_allocation_fails_loudly(self, monkeypatch):
        """An allocator that loses money is an engine bug, not bad input."""
        monkeypatch.setattr(
            "trip_settle.balances.allocate_evenly",
            lambda total, sharers: {s: 1 for s in sharers},
        )

        with pytest.raises(InvariantViolation, match="sum to"):
            compute_balances(TRIO, [make_expense("90")])


class TestInputContract:
    """Bad input is rejected before any computation."""

    def test_empty_participants(self):
        with pytest.raises(InputContractError):
            compute_balances([], [])

    def test_payer_not_in_trip(self):
        with pytest.raises(InputContractError, match="Zoe"):
            compute_balances(TRIO, [make_expense("10", payer="Zoe")])

    def test_sharer_not_in_trip(self):
        with pytest.raises(InputContractError) as exc_info:
            compute_balances(TRIO, [make_expense("10", participants=["Alice", "Zoe"])])

        assert exc_info.value.issues[0].code == "membership"

    def test_precision_loss(self):
        with pytest.raises(PrecisionLossError):
            compute_balances(TRIO, [make_expense("10.005")])

    def test_non_positive_amount(self):
        expense = Expense.model_construct(
            amount=Decimal("-5"), currency="USD", payer="Alice", participants=TRIO
        )

        with pytest.raises(InvalidAmountError):
            compute_balances(TRIO, [expense])

    def test_invariant_violation_is_not_an_input_error(self):
        assert not issubclass(InvariantViolation, InputContractError)
        assert issubclass(InvariantViolation, AssertionError)


class TestComputeLedgers:
    """Paid / owed breakdown."""

    def test_paid_and_owed(self):
        ledgers = compute_ledgers(TRIO, [make_expense("90")])

        alice = ledgers["USD"]["Alice"]
        assert alice.paid == 9000
        assert alice.owed == 3000
        assert alice.net == 6000

        bob = ledgers["USD"]["Bob"]
        assert (bob.paid, bob.owed, bob.net) == (0, 3000, -3000)


class TestSplitExpense:
    """Per-expense share allocation."""

    def test_even_split(self):
        assert split_expense(make_expense("1.00")) == {
            "Alice": 34,
            "Bob": 33,
            "Charlie": 33,
        }

    def test_weighted_split(self):
        expense = make_expense(
            "1.00", participants=["Alice", "Bob"], weights={"Alice": "1", "Bob": "2"}
        )

        assert split_expense(expense) == {"Alice": 33, "Bob": 67}
