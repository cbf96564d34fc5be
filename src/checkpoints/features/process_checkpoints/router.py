import json
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from src.checkpoints import get_checkpoint_runner
from src.checkpoints.runner import CheckpointRunner
from src.checkpoints.urls import PROCESS_CHECKPOINTS_URL

logger = logging.getLogger(__name__)

router = APIRouter()


class ProcessCheckpointsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    processed: int
    nudges_sent: int = Field(alias="nudgesSent")


def parse_target_id(body: bytes) -> str | None:
    """Read checkpointId from the body; anything unparseable means scan mode."""
    try:
        payload = json.loads(body) if body else {}
    except (UnicodeDecodeError, ValueError):
        logger.warning("Malformed process-checkpoints body, scanning for due checkpoints")
        return None
    if not isinstance(payload, dict):
        return None
    return payload.get("checkpointId") or None


@router.post(PROCESS_CHECKPOINTS_URL, response_model=ProcessCheckpointsResponse)
async def process_checkpoints(
    request: Request,
    runner: CheckpointRunner = Depends(get_checkpoint_runner),
):
    """
    Process due checkpoints, or a single one when checkpointId is given.

    Called by the external scheduler. Per-checkpoint and per-guest failures are
    logged and only show up in the totals, never as an error response.
    """
    raw_target = parse_target_id(await request.body())
    target_id = None
    if raw_target is not None:
        try:
            target_id = UUID(str(raw_target))
        except ValueError:
            return JSONResponse(status_code=400, content={"error": "Invalid checkpointId"})

    result = await runner.process_checkpoints(target_id)
    return ProcessCheckpointsResponse(processed=result.processed, nudges_sent=result.nudges_sent)
