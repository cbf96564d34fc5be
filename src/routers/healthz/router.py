from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter()


def get_version() -> str:
    try:
        return version("lockstep-api")
    except PackageNotFoundError:
        return "0.1.0"


class HealthCheckResponse(BaseModel):
    status: str
    version: str


@router.get("/", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Liveness probe for the load balancer and the cron trigger."""
    return HealthCheckResponse(status="healthy", version=get_version())
