import asyncio
import logging
from contextlib import asynccontextmanager

import sentry_sdk
from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from src.billing.routers import router as billing_router
from src.checkpoints.routers import router as checkpoints_router
from src.config.logging import setup_logging
from src.config.settings import settings
from src.guests.routers import router as guests_router
from src.messaging.base import MessagingNotConfiguredError
from src.nudges.routers import router as nudges_router
from src.routers.healthz.router import router as healthz_router
from src.webhooks.router import router as webhooks_router

setup_logging()

logger = logging.getLogger(__name__)


async def run_migrations():
    alembic_cfg = Config("alembic.ini")
    await asyncio.to_thread(command.upgrade, alembic_cfg, "head")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        await run_migrations()
    yield


if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        profiles_sample_rate=settings.SENTRY_PROFILES_SAMPLE_RATE,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(transaction_style="endpoint"),
        ],
        send_default_pii=False,
    )

app = FastAPI(
    title="Lockstep API",
    description="Checkpoint-driven RSVP nudges and auto-resolution for group events",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MessagingNotConfiguredError)
async def messaging_not_configured_handler(request: Request, exc: MessagingNotConfiguredError):
    logger.error(f"{request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


# Include routers
app.include_router(healthz_router, prefix="/healthz", tags=["Healthz"])
app.include_router(guests_router, tags=["Guests"])
app.include_router(checkpoints_router, tags=["Checkpoints"])
app.include_router(nudges_router, tags=["Nudges"])
app.include_router(webhooks_router, tags=["Webhooks"])
app.include_router(billing_router, tags=["Billing"])


@app.get("/", tags=["Root"])
async def root():
    return {"message": "Welcome to the Lockstep API"}
