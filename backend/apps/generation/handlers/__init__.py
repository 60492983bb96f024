"""Generation handlers."""

from apps.generation.handlers.generate_response import generate_response
from apps.generation.handlers.stream_response import stream_response

__all__ = ["generate_response", "stream_response"]
