from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.guests.dtos import GuestNotFoundError, GuestStatus, RsvpResponse, RSVPSubmissionDTO
from src.guests.repository.write_models import RSVPWriteModel, SqlRSVPWriteModel
from src.guests.urls import SUBMIT_RSVP_URL

router = APIRouter()


class BlockResponseSubmit(BaseModel):
    block_id: UUID
    response: RsvpResponse


class AnswerSubmit(BaseModel):
    question_id: UUID
    value: str | int | float | bool | list[str] | None = None


class RSVPSubmit(BaseModel):
    responses: list[BlockResponseSubmit] = []
    answers: list[AnswerSubmit] = []


class RSVPResponse(BaseModel):
    message: str
    status: GuestStatus


def get_rsvp_write_model() -> RSVPWriteModel:
    """Dependency to get RSVP write model instance."""
    return SqlRSVPWriteModel()


@router.post(SUBMIT_RSVP_URL, response_model=RSVPResponse)
async def submit_rsvp(
    token: str,
    rsvp_data: RSVPSubmit,
    write_model: RSVPWriteModel = Depends(get_rsvp_write_model),
) -> RSVPResponse:
    """
    Submit a guest's block responses and question answers through their magic link.
    A pending guest becomes responded; an opted-out guest keeps their status.
    """
    submission = RSVPSubmissionDTO(
        responses={item.block_id: item.response for item in rsvp_data.responses},
        answers={item.question_id: item.value for item in rsvp_data.answers},
    )
    try:
        result = await write_model.submit_rsvp(token=token, submission=submission)
    except GuestNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return RSVPResponse(message=result.message, status=result.status)
