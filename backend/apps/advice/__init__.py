"""Advice module - consultation, grading and message analysis."""

from apps.advice.routes import router

__all__ = ["router"]
