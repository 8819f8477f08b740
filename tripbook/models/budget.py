"""
Budget and Settlement Result Models

These are the outputs of the aggregation engine. They are derived from a
trip snapshot and never stored back into it.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from tripbook.models.trip import ExpenseCategory


class SettlementKind(str, Enum):
    """Which settlement rule applied, by number of non-shared owners."""
    SINGLE = "single"  # one owner, nothing to balance
    PAIR = "pair"      # two owners, one transfer
    GROUP = "group"    # three or more, deviation report


class OwnerShare(BaseModel):
    """
    One owner's fair share.

    fair_share = personal expenses + shared pool / number of real owners
    """

    owner_id: str
    name: str
    color: str = "gray"
    personal: Decimal = Field(..., description="Expenses attributed to this owner")
    shared_portion: Decimal = Field(..., description="Even slice of the shared pool")
    fair_share: Decimal


class PairwiseTransfer(BaseModel):
    """
    Result of the two-owner rule.

    The owner with the higher fair share (creditor) is owed half the
    difference by the other (debtor). When the difference is within the
    settlement epsilon the pair is settled and no transfer is needed.
    """

    settled: bool
    creditor_id: Optional[str] = None
    debtor_id: Optional[str] = None
    amount: Decimal = Field(default=Decimal(0), ge=0)
    difference: Decimal = Field(..., description="Signed first minus second fair share")


class OwnerDeviation(BaseModel):
    """Signed distance of one owner's fair share from the group mean."""

    owner_id: str
    deviation: Decimal

    @property
    def owes_more(self) -> bool:
        return self.deviation > 0


class Settlement(BaseModel):
    """
    Cost-splitting report for a trip.

    Only one of `transfer` (PAIR) and `deviations` (GROUP) is populated.
    """

    kind: SettlementKind
    shared_total: Decimal
    shared_per_owner: Decimal
    shares: list[OwnerShare]
    transfer: Optional[PairwiseTransfer] = None
    average: Optional[Decimal] = None
    deviations: list[OwnerDeviation] = Field(default_factory=list)

    @property
    def has_personal_expenses(self) -> bool:
        return any(s.personal > 0 for s in self.shares)


class CategoryTotal(BaseModel):
    category: ExpenseCategory
    total: Decimal


class DayCost(BaseModel):
    """Estimated versus actual spending for one day."""

    day_id: str
    day_number: int
    estimated: Decimal
    actual: Decimal

    @property
    def difference(self) -> Decimal:
        return self.actual - self.estimated

    @property
    def is_over(self) -> bool:
        return self.actual > 0 and self.difference > 0


class BudgetSummary(BaseModel):
    """
    Everything the budget view needs for one trip, in base currency.

    `filtered_actual` honours the owner filter; `actual_total` and
    `remaining` always cover all owners.
    """

    trip_id: str
    owner_filter: str = "all"
    total_budget: Decimal
    estimated_total: Decimal
    actual_total: Decimal
    filtered_actual: Decimal
    remaining: Decimal
    by_category: list[CategoryTotal] = Field(default_factory=list)
    by_owner: dict[str, Decimal] = Field(default_factory=dict)
    settlement: Optional[Settlement] = None
    days: list[DayCost] = Field(default_factory=list)

    @property
    def is_over_budget(self) -> bool:
        return self.remaining < 0
