from fastapi import APIRouter

from .features.check_limits.router import router as check_limits_router

router = APIRouter()

router.include_router(check_limits_router)
