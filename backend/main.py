"""Main FastAPI application for Wingman.

Entry point for the application. Configures:
- FastAPI app with settings
- CORS and rate limiting middleware
- Exception handlers
- Route registration
"""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_app_config, get_cors_config, get_settings, setup_logging
from dependencies import get_config_cache, get_kv_store, get_prompt_recorder
from middleware import RateLimitConfig, RateLimitMiddleware
from responses import ResponseCode, error_dict
from router import router as api_router

settings = get_settings()

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Management
# =============================================================================


def resolve_dependency(app: FastAPI, dependency):
    """Call a dependency getter, honouring ``app.dependency_overrides``."""
    return app.dependency_overrides.get(dependency, dependency)()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    logger.info("Starting Wingman...")
    logger.info("Environment: %s", settings.environment)
    logger.info("KV backend: %s", settings.kv_backend)

    # A misconfigured store (e.g. missing credentials) fails startup here
    store = resolve_dependency(app, get_kv_store)
    store_health = await store.health_check()
    if store_health.get("status") == "healthy":
        logger.info(
            "✓ Key-value store connected (latency: %sms)",
            store_health.get("latency_ms"),
        )
    else:
        # Reads fall back to defaults, so keep serving
        logger.warning("Key-value store unhealthy: %s", store_health)

    config = await resolve_dependency(app, get_config_cache).get_all()
    logger.info("Active LLM: %s/%s", config["provider"], config["model"])
    logger.info("Wingman started successfully")

    yield

    logger.info("Shutting down Wingman...")
    await resolve_dependency(app, get_prompt_recorder).drain()


# Create FastAPI app with lifespan
app = FastAPI(lifespan=lifespan, **get_app_config())

app.add_middleware(CORSMiddleware, **get_cors_config())

# Rate limiting protects the provider-backed endpoints
if settings.rate_limit_enabled:
    app.add_middleware(
        RateLimitMiddleware,
        config=RateLimitConfig(
            requests_per_minute=settings.rate_limit_per_minute,
            requests_per_hour=settings.rate_limit_per_hour,
            burst_limit=settings.rate_limit_burst,
        ),
    )


# =============================================================================
# Middleware
# =============================================================================


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to all requests for tracing."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle Pydantic validation errors as 400s naming the first bad field."""
    request_id = getattr(request.state, "request_id", None)

    errors = exc.errors()
    first_error = errors[0] if errors else {}
    loc = first_error.get("loc") or ["unknown"]
    field_name = loc[-1]
    if first_error.get("type") == "missing":
        message = f"Missing {field_name}"
    else:
        message = f"Validation failed for field '{field_name}'"

    error_response = error_dict(
        code=ResponseCode.VALIDATION_ERROR,
        custom_message=message,
        error_details={"validation_errors": jsonable_encoder(errors)},
        request_id=request_id,
    )

    return JSONResponse(status_code=400, content=error_response)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle HTTP exceptions."""
    request_id = getattr(request.state, "request_id", None)

    if isinstance(exc.detail, dict) and "code" in exc.detail:
        return JSONResponse(status_code=exc.status_code, content=exc.detail)

    code_map = {
        400: ResponseCode.VALIDATION_ERROR,
        404: ResponseCode.NOT_FOUND,
        405: ResponseCode.VALIDATION_ERROR,
        429: ResponseCode.RATE_LIMITED,
    }

    error_response = error_dict(
        code=code_map.get(exc.status_code, ResponseCode.INTERNAL_ERROR),
        custom_message=str(exc.detail),
        request_id=request_id,
    )

    return JSONResponse(status_code=exc.status_code, content=error_response)


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unhandled exceptions."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception("Unhandled exception: %s", exc)

    error_response = error_dict(
        code=ResponseCode.INTERNAL_ERROR,
        custom_message="An unexpected error occurred",
        error_details={"exception_type": type(exc).__name__},
        request_id=request_id,
    )

    return JSONResponse(status_code=500, content=error_response)


# =============================================================================
# Routes
# =============================================================================

app.include_router(api_router, prefix="/api")


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint - API info."""
    return {
        "name": "Wingman",
        "description": "Conversation assistant API",
        "docs": "/api/docs",
        "health": "/api/health",
    }


# =============================================================================
# Development Server
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
