"""Credits module - per-user usage limits."""

from apps.credits.routes import router

__all__ = ["router"]
