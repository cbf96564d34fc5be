from fastapi import APIRouter

from .features.send_nudge.router import router as send_nudge_router

router = APIRouter()

router.include_router(send_nudge_router)
