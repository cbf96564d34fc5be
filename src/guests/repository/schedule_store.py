"""Schedule/answer store - which blocks and questions a guest has covered."""

from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.guests.dtos import RsvpResponse
from src.guests.repository.orm_models import RSVP, Answer


class ScheduleStore(ABC):
    @abstractmethod
    async def list_answered_question_ids(
        self, guest_id: UUID, restricted_to: list[UUID]
    ) -> set[UUID]:
        raise NotImplementedError

    @abstractmethod
    async def list_responded_block_ids(
        self, guest_id: UUID, restricted_to: list[UUID]
    ) -> set[UUID]:
        raise NotImplementedError

    @abstractmethod
    async def insert_response_if_absent(
        self, guest_id: UUID, block_id: UUID, value: RsvpResponse
    ) -> bool:
        """
        Insert a response for (guest, block) unless one already exists.

        Returns:
            True if a row was inserted, False if the guest had already responded
        """
        raise NotImplementedError


class SqlScheduleStore(ScheduleStore):
    """SQL implementation of the schedule/answer store."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def list_answered_question_ids(
        self, guest_id: UUID, restricted_to: list[UUID]
    ) -> set[UUID]:
        if not restricted_to:
            return set()
        stmt = select(Answer.question_id).where(
            Answer.guest_id == guest_id, Answer.question_id.in_(restricted_to)
        )
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(stmt)
            return set(result.scalars().all())

    async def list_responded_block_ids(
        self, guest_id: UUID, restricted_to: list[UUID]
    ) -> set[UUID]:
        if not restricted_to:
            return set()
        stmt = select(RSVP.block_id).where(RSVP.guest_id == guest_id, RSVP.block_id.in_(restricted_to))
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(stmt)
            return set(result.scalars().all())

    async def insert_response_if_absent(
        self, guest_id: UUID, block_id: UUID, value: RsvpResponse
    ) -> bool:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            # The unique (guest_id, block_id) constraint decides, a guest who
            # answered while we were processing keeps their own response.
            try:
                async with session.begin_nested():
                    session.add(RSVP(guest_id=guest_id, block_id=block_id, response=value))
            except IntegrityError:
                return False
            return True
