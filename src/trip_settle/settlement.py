"""Settlement minimization: turn a balance vector into a few transfers."""

import heapq
import logging
from collections.abc import Iterable, Mapping

from .exceptions import InvariantViolation
from .models import Transfer

logger = logging.getLogger(__name__)


def minimize_settlements(balances: Mapping[str, int], currency: str) -> list[Transfer]:
    """
    Compute the transfers that clear a single currency's balances.

    Greedy largest-magnitude matching:
    1. Split participants into creditors (> 0) and debtors (< 0)
    2. Match the largest creditor with the largest debtor
    3. Transfer min(credit, |debt|) from debtor to creditor
    4. Drop whoever reaches zero and repeat

    Ties are broken by participant identifier, so identical input always
    yields identical output. Every step settles at least one participant, so
    N non-zero participants need at most N - 1 transfers.

    Args:
        balances: Participant -> signed balance in minor units
        currency: Currency the balances are in

    Returns:
        Transfers in the order they were chosen

    Raises:
        InvariantViolation: If the balances do not sum to zero
    """
    total = sum(balances.values())
    if total != 0:
        raise InvariantViolation(
            f"Cannot settle {currency}: balances sum to {total}, expected 0",
            currency=currency,
        )

    # Max-heaps keyed on (-magnitude, name) so ties pop in name order
    creditors = [(-amount, name) for name, amount in balances.items() if amount > 0]
    debtors = [(amount, name) for name, amount in balances.items() if amount < 0]
    heapq.heapify(creditors)
    heapq.heapify(debtors)

    transfers = []
    while creditors and debtors:
        neg_credit, creditor = heapq.heappop(creditors)
        neg_debt, debtor = heapq.heappop(debtors)
        credit, debt = -neg_credit, -neg_debt

        amount = min(credit, debt)
        transfers.append(
            Transfer(sender=debtor, recipient=creditor, currency=currency, amount=amount)
        )
        logger.debug(f"{debtor} pays {creditor} {amount} {currency}")

        if credit > amount:
            heapq.heappush(creditors, (-(credit - amount), creditor))
        if debt > amount:
            heapq.heappush(debtors, (-(debt - amount), debtor))

    # Zero-sum input means both sides empty out together
    if creditors or debtors:
        raise InvariantViolation(
            f"Settlement of {currency} left balances outstanding", currency=currency
        )

    logger.info(
        f"Settled {currency} with {len(transfers)} transfers "
        f"across {sum(1 for v in balances.values() if v)} participants"
    )

    return transfers


def apply_transfers(
    balances: Mapping[str, int], transfers: Iterable[Transfer]
) -> dict[str, int]:
    """
    Return the balances left after the given transfers are paid.

    Paying moves the sender up and the recipient down; a full settlement
    leaves every participant at zero. The input mapping is not modified.
    """
    remaining = dict(balances)
    for transfer in transfers:
        remaining[transfer.sender] = remaining.get(transfer.sender, 0) + transfer.amount
        remaining[transfer.recipient] = (
            remaining.get(transfer.recipient, 0) - transfer.amount
        )
    return remaining
