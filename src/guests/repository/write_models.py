"""RSVP write model - guest self-service through the magic link. Returns DTOs, never ORM models."""

from abc import ABC, abstractmethod
from functools import partial

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.guests.dtos import GuestNotFoundError, GuestStatus, RSVPResultDTO, RSVPSubmissionDTO
from src.guests.repository.orm_models import RSVP, Answer, Guest


class RSVPWriteModel(ABC):
    @abstractmethod
    async def submit_rsvp(self, token: str, submission: RSVPSubmissionDTO) -> RSVPResultDTO:
        """
        Record a guest's block responses and answers.

        Raises:
            GuestNotFoundError: if the token does not belong to a guest
        """
        raise NotImplementedError


class SqlRSVPWriteModel(RSVPWriteModel):
    """Write operations for RSVP. Returns DTOs, never ORM models."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def _get_guest_by_token(self, session, token: str) -> Guest | None:
        result = await session.execute(select(Guest).where(Guest.magic_token == token))
        return result.scalar_one_or_none()

    async def submit_rsvp(self, token: str, submission: RSVPSubmissionDTO) -> RSVPResultDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await self._get_guest_by_token(session, token)
            if not guest:
                raise GuestNotFoundError(token)

            for block_id, response in submission.responses.items():
                existing = await session.execute(
                    select(RSVP).where(RSVP.guest_id == guest.uuid, RSVP.block_id == block_id)
                )
                rsvp = existing.scalar_one_or_none()
                if rsvp:
                    rsvp.response = response
                else:
                    session.add(RSVP(guest_id=guest.uuid, block_id=block_id, response=response))

            for question_id, value in submission.answers.items():
                existing = await session.execute(
                    select(Answer).where(
                        Answer.guest_id == guest.uuid, Answer.question_id == question_id
                    )
                )
                answer = existing.scalar_one_or_none()
                if answer:
                    answer.value = value
                else:
                    session.add(Answer(guest_id=guest.uuid, question_id=question_id, value=value))

            await session.flush()

            # Only a pending guest becomes responded, an opt-out sticks
            if submission.responses or submission.answers:
                await session.execute(
                    update(Guest)
                    .where(Guest.uuid == guest.uuid, Guest.status == GuestStatus.PENDING)
                    .values(status=GuestStatus.RESPONDED)
                )

            status_result = await session.execute(
                select(Guest.status).where(Guest.uuid == guest.uuid)
            )
            status = GuestStatus(status_result.scalar_one())

        return RSVPResultDTO(message="Thanks! Your response has been recorded.", status=status)
