"""Main API router that registers all feature routers.

Mounted under /api in main.py.
"""

from fastapi import APIRouter

from apps.admin import router as admin_router
from apps.advice import router as advice_router
from apps.credits import router as credits_router
from apps.generation import router as generation_router
from apps.health import router as health_router

router = APIRouter()

router.include_router(health_router)
router.include_router(generation_router)
router.include_router(advice_router)
router.include_router(credits_router)
router.include_router(admin_router)
