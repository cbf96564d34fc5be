from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.events.dtos import EventDTO
from src.models.event import Event


class EventStore(ABC):
    @abstractmethod
    async def get_event(self, event_id: UUID) -> EventDTO | None:
        raise NotImplementedError

    @abstractmethod
    async def increment_nudges_sent(self, event_id: UUID) -> None:
        """Bump the event's manual nudge usage counter by one."""
        raise NotImplementedError


class SqlEventStore(EventStore):
    """SQL implementation of the event store."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def get_event(self, event_id: UUID) -> EventDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            event = await session.get(Event, event_id)
            return EventDTO.from_event(event) if event else None

    async def increment_nudges_sent(self, event_id: UUID) -> None:
        # Incremented in SQL so concurrent sends don't lose updates
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            await session.execute(
                update(Event)
                .where(Event.uuid == event_id)
                .values(nudges_sent=Event.nudges_sent + 1)
            )
