"""Generation module - reply generation, JSON and streamed."""

from apps.generation.routes import router

__all__ = ["router"]
