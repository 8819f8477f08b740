"""
Settlement Engine

Splits a trip's costs between its real (non-shared) owners.

Rules, by number of real owners N:
- N == 0: no settlement at all (None)
- N == 1: report the single fair share, nothing to balance
- N == 2: one transfer; the owner with the higher fair share is owed
  half the difference, unless the difference is within the epsilon
- N >= 3: report each owner's signed deviation from the mean fair share

fair share = personal expenses + shared pool / N

The shared owner is never part of the divisor.

DESIGN DECISION: The group case is a report, not an optimal set of
transfers. It tells each party how far they are from even.
"""

from decimal import Decimal
from typing import Optional

from tripbook.config import get_settings
from tripbook.models.budget import (
    OwnerDeviation,
    OwnerShare,
    PairwiseTransfer,
    Settlement,
    SettlementKind,
)
from tripbook.models.trip import SHARED_OWNER_ID, Trip
from tripbook.queries.aggregation import owner_expense_map


def _pair_transfer(first: OwnerShare, second: OwnerShare, epsilon: Decimal) -> PairwiseTransfer:
    difference = first.fair_share - second.fair_share
    if abs(difference) <= epsilon:
        return PairwiseTransfer(settled=True, difference=difference)

    creditor, debtor = (first, second) if difference > 0 else (second, first)
    return PairwiseTransfer(
        settled=False,
        creditor_id=creditor.owner_id,
        debtor_id=debtor.owner_id,
        amount=abs(difference) / 2,
        difference=difference,
    )


def compute_settlement(trip: Trip, epsilon: Optional[Decimal] = None) -> Optional[Settlement]:
    """
    Compute the settlement report for a trip.

    Args:
        trip: Trip snapshot to settle
        epsilon: Pair differences at or below this count as settled.
                 Defaults to the configured settlement epsilon.

    Returns:
        Settlement, or None if the trip has no non-shared owners
    """
    owners = trip.non_shared_owners
    if not owners:
        return None

    if epsilon is None:
        epsilon = get_settings().currency.settlement_epsilon

    totals = owner_expense_map(trip)
    shared_total = totals.get(SHARED_OWNER_ID, Decimal(0))
    shared_per_owner = shared_total / len(owners)

    shares = [
        OwnerShare(
            owner_id=o.id,
            name=o.name,
            color=o.color,
            personal=totals[o.id],
            shared_portion=shared_per_owner,
            fair_share=totals[o.id] + shared_per_owner,
        )
        for o in owners
    ]

    settlement = Settlement(
        kind=SettlementKind.SINGLE,
        shared_total=shared_total,
        shared_per_owner=shared_per_owner,
        shares=shares,
    )

    if len(shares) == 2:
        return settlement.model_copy(update={
            "kind": SettlementKind.PAIR,
            "transfer": _pair_transfer(shares[0], shares[1], epsilon),
        })

    if len(shares) > 2:
        average = sum((s.fair_share for s in shares), Decimal(0)) / len(shares)
        return settlement.model_copy(update={
            "kind": SettlementKind.GROUP,
            "average": average,
            "deviations": [
                OwnerDeviation(owner_id=s.owner_id, deviation=s.fair_share - average)
                for s in shares
            ],
        })

    return settlement
