from fastapi import APIRouter

from .features.process_checkpoints.router import router as process_checkpoints_router

router = APIRouter()

router.include_router(process_checkpoints_router)
