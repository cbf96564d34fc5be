from fastapi import APIRouter

from .features.update_rsvp.router import router as update_rsvp_router

router = APIRouter()

router.include_router(update_rsvp_router)
