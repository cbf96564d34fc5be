"""Guest directory - looks up guests and moves them between statuses."""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from functools import partial
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.guests.dtos import GuestDTO, GuestStatus
from src.guests.repository.orm_models import Guest


class GuestDirectory(ABC):
    @abstractmethod
    async def list_guests(
        self, event_id: UUID, exclude_status: GuestStatus | None = None
    ) -> list[GuestDTO]:
        raise NotImplementedError

    @abstractmethod
    async def get_guest(self, guest_id: UUID) -> GuestDTO | None:
        raise NotImplementedError

    @abstractmethod
    async def get_guest_by_token(self, token: str) -> GuestDTO | None:
        raise NotImplementedError

    @abstractmethod
    async def find_guests_by_phone(self, phone: str) -> list[GuestDTO]:
        raise NotImplementedError

    @abstractmethod
    async def update_guest_status(
        self,
        guest_id: UUID,
        new_status: GuestStatus,
        expected_status: GuestStatus | None = None,
    ) -> bool:
        """
        Move a guest to new_status.

        When expected_status is given the update only applies if the guest is
        currently in that status (compare-and-set). Entering opted_out stamps
        opted_out_at, any other status clears it.

        Returns:
            True if a row was updated
        """
        raise NotImplementedError


class SqlGuestDirectory(GuestDirectory):
    """SQL implementation of the guest directory."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def list_guests(
        self, event_id: UUID, exclude_status: GuestStatus | None = None
    ) -> list[GuestDTO]:
        stmt = select(Guest).where(Guest.event_id == event_id)
        if exclude_status is not None:
            stmt = stmt.where(Guest.status != exclude_status)
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(stmt.order_by(Guest.created_at))
            return [GuestDTO.from_guest(guest) for guest in result.scalars().all()]

    async def get_guest(self, guest_id: UUID) -> GuestDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await session.get(Guest, guest_id)
            return GuestDTO.from_guest(guest) if guest else None

    async def get_guest_by_token(self, token: str) -> GuestDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(select(Guest).where(Guest.magic_token == token))
            guest = result.scalar_one_or_none()
            return GuestDTO.from_guest(guest) if guest else None

    async def find_guests_by_phone(self, phone: str) -> list[GuestDTO]:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(select(Guest).where(Guest.phone == phone))
            return [GuestDTO.from_guest(guest) for guest in result.scalars().all()]

    async def update_guest_status(
        self,
        guest_id: UUID,
        new_status: GuestStatus,
        expected_status: GuestStatus | None = None,
    ) -> bool:
        opted_out_at = datetime.now(UTC) if new_status == GuestStatus.OPTED_OUT else None
        stmt = (
            update(Guest)
            .where(Guest.uuid == guest_id)
            .values(status=new_status, opted_out_at=opted_out_at)
        )
        if expected_status is not None:
            stmt = stmt.where(Guest.status == expected_status)

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(stmt)
            return result.rowcount == 1
