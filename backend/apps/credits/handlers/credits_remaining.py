"""GET /credits-remaining - Credit balance for a user."""

from fastapi import Depends, Query
from pydantic import BaseModel, Field

from dependencies import get_credit_ledger
from services import CreditLedger


class CreditsResponse(BaseModel):
    """Credit balance. Counts are null for admins (unlimited)."""

    userId: str
    isAdmin: bool
    creditsRemaining: int | None = Field(..., description="None when unlimited")
    creditsUsed: int
    totalCredits: int | None


async def get_credits_remaining(
    user_id: str = Query(..., alias="userId", min_length=1),
    credit_ledger: CreditLedger = Depends(get_credit_ledger),
) -> CreditsResponse:
    status = await credit_ledger.check_credits(user_id)
    return CreditsResponse(
        userId=user_id,
        isAdmin=status.is_admin,
        creditsRemaining=status.remaining_count,
        creditsUsed=status.used,
        totalCredits=status.limit_count,
    )
