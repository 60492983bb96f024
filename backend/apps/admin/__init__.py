"""Admin module - runtime configuration and prompt tooling."""

from apps.admin.routes import router

__all__ = ["router"]
