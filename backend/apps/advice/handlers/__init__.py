"""Advice handlers."""

from apps.advice.handlers.analyze_intent import analyze_intent
from apps.advice.handlers.generate_from_direction import generate_from_direction
from apps.advice.handlers.grade_response import grade_response
from apps.advice.handlers.suggestion import get_suggestion

__all__ = [
    "analyze_intent",
    "generate_from_direction",
    "grade_response",
    "get_suggestion",
]
