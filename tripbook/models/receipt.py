"""
Receipt Scan Models

CRITICAL: An extracted amount is a PROPOSAL.
It is handed to the expense form for the user to confirm or correct;
it is never written as an expense directly.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from tripbook.models.trip import Currency


class ExtractedAmount(BaseModel):
    """Best guess of the total printed on a receipt."""

    amount: Decimal = Field(..., gt=0)
    currency: Currency
    matched_text: str = Field(
        default="",
        description="The part of the recognised text the amount came from"
    )
    is_fallback: bool = Field(
        default=False,
        description="True when no currency marker was found and the default currency was assumed"
    )


class CameraScanResult(BaseModel):
    """Outcome of one receipt scan."""

    scan_id: UUID = Field(default_factory=uuid4)
    recognized_text: str = ""
    extracted: Optional[ExtractedAmount] = None
    message: str

    @property
    def needs_manual_entry(self) -> bool:
        return self.extracted is None
