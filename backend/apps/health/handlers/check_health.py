"""GET /health - Check the key-value store and provider credentials."""

from datetime import UTC, datetime

from fastapi import Depends
from pydantic import BaseModel, Field

from config import APP_CONFIG, get_settings
from db import KVStore
from dependencies import get_kv_store

# --- Response Schemas ---


class ServiceStatus(BaseModel):
    """Status of an individual service."""

    name: str
    status: str = Field(..., description="healthy or unhealthy")
    latency_ms: float | None = Field(None, description="Response time in ms")
    error: str | None = Field(None, description="Error message if unhealthy")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status: healthy, degraded")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Environment name")
    services: list[ServiceStatus] = Field(
        ..., description="Individual service statuses"
    )
    providers: dict[str, bool] = Field(
        ..., description="Whether each LLM provider has credentials"
    )
    timestamp: datetime


# --- Handler ---


async def check_health(store: KVStore = Depends(get_kv_store)) -> HealthResponse:
    """Check health of the store and report configured providers.

    An unhealthy store degrades the service rather than failing it, since
    every setting falls back to its default.
    """
    settings = get_settings()
    store_health = await store.health_check()

    services = [
        ServiceStatus(
            name=f"kv:{store_health.get('backend', 'unknown')}",
            status=store_health["status"],
            latency_ms=store_health.get("latency_ms"),
            error=store_health.get("error"),
        ),
    ]

    providers = {
        "openai": settings.openai_api_key is not None,
        "anthropic": settings.anthropic_api_key is not None,
        "xai": settings.xai_api_key is not None,
        "gemini": settings.google_api_key is not None,
    }

    healthy = all(s.status == "healthy" for s in services) and any(providers.values())

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=APP_CONFIG["version"],
        environment=settings.environment,
        services=services,
        providers=providers,
        timestamp=datetime.now(UTC),
    )
