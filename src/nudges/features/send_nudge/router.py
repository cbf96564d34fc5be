import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from src.guests.dtos import GuestNotFoundError
from src.nudges import get_nudge_gateway
from src.nudges.dtos import Channel, NudgeDeliveryError, NudgeRejectedError
from src.nudges.gateway import NudgeGateway
from src.nudges.urls import SEND_NUDGE_URL

logger = logging.getLogger(__name__)

router = APIRouter()


class SendNudgeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    guest_id: UUID = Field(alias="guestId")
    checkpoint_id: UUID | None = Field(default=None, alias="checkpointId")
    channel: Channel = Channel.SMS
    message: str = Field(min_length=1)
    event_id: UUID = Field(alias="eventId")


class SendNudgeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    nudge_id: UUID = Field(alias="nudgeId")
    message_sid: str | None = Field(default=None, alias="messageSid")


@router.post(SEND_NUDGE_URL, response_model=SendNudgeResponse)
async def send_nudge(
    request: SendNudgeRequest,
    gateway: NudgeGateway = Depends(get_nudge_gateway),
):
    """
    Send one nudge to one guest over SMS or WhatsApp.

    Repeating a request for the same event, checkpoint, guest and channel does
    not message the guest again; the original nudge id is returned.
    """
    try:
        result = await gateway.send(
            guest_id=request.guest_id,
            checkpoint_id=request.checkpoint_id,
            channel=request.channel,
            message=request.message,
            event_id=request.event_id,
        )
    except GuestNotFoundError:
        return JSONResponse(status_code=404, content={"error": "Guest not found"})
    except NudgeRejectedError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except NudgeDeliveryError as e:
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to send message", "details": e.details},
        )

    if result.already_sent:
        return JSONResponse(
            status_code=200,
            content={"error": "Nudge already sent", "nudgeId": str(result.nudge_id)},
        )

    return SendNudgeResponse(
        success=True, nudge_id=result.nudge_id, message_sid=result.external_id
    )
