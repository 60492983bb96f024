"""Credit routes."""

from fastapi import APIRouter

from apps.credits.handlers import get_credits_remaining
from apps.credits.handlers.credits_remaining import CreditsResponse

router = APIRouter(tags=["Credits"])

# GET /credits-remaining?userId= - Balance for a user
router.get("/credits-remaining", response_model=CreditsResponse)(get_credits_remaining)
