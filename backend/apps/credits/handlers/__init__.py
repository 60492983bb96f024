"""Credit handlers."""

from apps.credits.handlers.credits_remaining import get_credits_remaining

__all__ = ["get_credits_remaining"]
